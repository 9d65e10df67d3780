from fastapi import Depends, HTTPException, status

from acadtrack.auth.dependencies import get_current_user
from acadtrack.auth.schemas import ActorContext


def require_roles(*roles: str):
    """
    Dependency factory restricting an endpoint to the given roles.

    Example:
        Depends(require_roles("class_teacher", "faculty"))
    """

    async def _checker(current_user: ActorContext = Depends(get_current_user)) -> None:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )

    return _checker
