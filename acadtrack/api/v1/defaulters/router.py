from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from acadtrack.auth.dependencies import get_current_user
from acadtrack.auth.rbac import require_roles
from acadtrack.auth.schemas import ActorContext
from acadtrack.core.enums import STAFF_ROLES, UserRole
from acadtrack.core.exceptions import ServiceError
from acadtrack.db.session import get_db

from .schemas import (
    DefaulterWorkAssign,
    DefaulterWorkAssigned,
    DefaulterWorkList,
    MessageResponse,
    StudentDefaulterWorkList,
)
from . import service

router = APIRouter(prefix="/api/v1/defaulter-work", tags=["defaulter-work"])

_staff_only = [Depends(require_roles(*STAFF_ROLES))]


@router.post("", response_model=DefaulterWorkAssigned, status_code=status.HTTP_201_CREATED, dependencies=_staff_only)
async def assign_defaulter_work(
    payload: DefaulterWorkAssign,
    db: AsyncSession = Depends(get_db),
    current_user: ActorContext = Depends(get_current_user),
):
    return await service.assign_defaulter_work(db, current_user, payload)


@router.get("", response_model=DefaulterWorkList, dependencies=_staff_only)
async def list_defaulter_work(
    db: AsyncSession = Depends(get_db),
    current_user: ActorContext = Depends(get_current_user),
):
    return await service.list_defaulter_work(db, current_user.id)


@router.delete("/subjects/{subject_id}", response_model=MessageResponse, dependencies=_staff_only)
async def delete_defaulter_work(
    subject_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: ActorContext = Depends(get_current_user),
):
    return await service.delete_defaulter_work(db, current_user.id, subject_id)


@router.get(
    "/student",
    response_model=StudentDefaulterWorkList,
    dependencies=[Depends(require_roles(UserRole.STUDENT.value))],
)
async def student_defaulter_work(
    db: AsyncSession = Depends(get_db),
    current_user: ActorContext = Depends(get_current_user),
):
    try:
        return await service.student_defaulter_work(db, current_user.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_payload())
