from fastapi import Depends, HTTPException, status

from sfms.auth.dependencies import get_current_admin
from sfms.auth.schemas import CurrentAdmin
from sfms.core.enums import AdministratorRole

MANAGERS = (AdministratorRole.OWNER.value, AdministratorRole.ADMIN.value)


def require_roles(*roles: str):
    """
    Dependency factory restricting an endpoint to the given administrator roles.

    Example:
        Depends(require_roles(*MANAGERS))
    """

    async def _checker(current_admin: CurrentAdmin = Depends(get_current_admin)) -> None:
        if current_admin.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )

    return _checker
