from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from acadtrack.auth.dependencies import get_current_user
from acadtrack.auth.rbac import require_roles
from acadtrack.auth.schemas import ActorContext
from acadtrack.core.enums import UserRole
from acadtrack.core.exceptions import ServiceError
from acadtrack.core.services import require_class_id
from acadtrack.db.session import get_db

from .schemas import BatchCreate, BatchCreated, BatchList
from . import service

router = APIRouter(prefix="/api/v1/batches", tags=["batches"])


@router.post(
    "",
    response_model=BatchCreated,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(UserRole.CLASS_TEACHER.value, UserRole.HOD.value))],
)
async def create_batch(
    payload: BatchCreate,
    db: AsyncSession = Depends(get_db),
    current_user: ActorContext = Depends(get_current_user),
):
    try:
        return await service.create_batch(db, current_user, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_payload())


@router.get(
    "",
    response_model=BatchList,
    dependencies=[Depends(require_roles(UserRole.CLASS_TEACHER.value, UserRole.FACULTY.value))],
)
async def list_batches(
    db: AsyncSession = Depends(get_db),
    current_user: ActorContext = Depends(get_current_user),
):
    try:
        return await service.list_batches(db, require_class_id(current_user))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_payload())
