from typing import Dict

from jose import jwt

from sfms.core.config import settings


def decode_access_token(token: str) -> Dict:
    """Verify a token issued by the identity provider and return its claims. Raises JWTError."""
    return jwt.decode(
        token,
        settings.jwt_secret_key,
        algorithms=[settings.jwt_algorithm],
        audience=settings.jwt_audience,
        options={"verify_aud": settings.jwt_audience is not None},
    )
