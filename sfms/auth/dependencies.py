import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sfms.auth.schemas import CurrentAdmin
from sfms.auth.security import decode_access_token
from sfms.core.models import SchoolAdministrator
from sfms.db.session import get_db

logger = logging.getLogger(__name__)

# Login happens at the identity provider; tokenUrl only documents the flow in OpenAPI.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/v1/token")

SCHOOL_UNAVAILABLE_MESSAGE = (
    "School information unavailable. Please ensure your account is linked to a school."
)


async def get_current_admin(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> CurrentAdmin:
    """Resolve the authenticated user and the school they administer from the access token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = decode_access_token(token)
    except JWTError:
        raise credentials_exception

    user_id = payload.get("sub") or payload.get("user_id")
    if not user_id:
        raise credentials_exception

    result = await db.execute(
        select(SchoolAdministrator).where(SchoolAdministrator.user_id == str(user_id))
    )
    admin = result.scalar_one_or_none()
    if not admin or not admin.school_id:
        logger.warning("User %s has no linked school; school-scoped features disabled", user_id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=SCHOOL_UNAVAILABLE_MESSAGE,
        )

    return CurrentAdmin(user_id=str(user_id), school_id=admin.school_id, role=admin.role)
