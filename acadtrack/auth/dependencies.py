from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt

from acadtrack.auth.schemas import ActorContext
from acadtrack.core.config import settings
from acadtrack.core.enums import UserRole


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


def _optional_uuid(value: Optional[str]) -> Optional[UUID]:
    if not value:
        return None
    return UUID(str(value))


def actor_from_claims(payload: dict) -> ActorContext:
    """Build the actor context from token claims. Raises ValueError on malformed claims."""
    user_id = payload.get("id") or payload.get("sub")
    role = payload.get("role")
    if not user_id or not role:
        raise ValueError("token is missing id or role")
    if role not in {r.value for r in UserRole}:
        raise ValueError(f"unknown role {role!r}")
    return ActorContext(
        id=UUID(str(user_id)),
        role=role,
        class_id=_optional_uuid(payload.get("class_id")),
        department_id=_optional_uuid(payload.get("department_id")),
        batch_id=_optional_uuid(payload.get("batch_id")),
    )


async def get_current_user(token: str = Depends(oauth2_scheme)) -> ActorContext:
    """Resolve the authenticated actor from the access token claims."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        raise credentials_exception

    try:
        return actor_from_claims(payload)
    except ValueError:
        raise credentials_exception
