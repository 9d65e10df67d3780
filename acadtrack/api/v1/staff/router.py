from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from acadtrack.auth.dependencies import get_current_user
from acadtrack.auth.rbac import require_roles
from acadtrack.auth.schemas import ActorContext
from acadtrack.core.enums import STAFF_ROLES, UserRole
from acadtrack.core.exceptions import ServiceError
from acadtrack.core.services import require_department_id
from acadtrack.db.session import get_db

from .schemas import MessageResponse, StaffList
from . import service

router = APIRouter(prefix="/api/v1/staff", tags=["staff"])

_director_only = [Depends(require_roles(UserRole.DIRECTOR.value))]


@router.get("", response_model=StaffList, dependencies=[Depends(require_roles(*STAFF_ROLES))])
async def list_staff(
    db: AsyncSession = Depends(get_db),
    current_user: ActorContext = Depends(get_current_user),
):
    try:
        return await service.directory_for(db, current_user)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_payload())


@router.get("/hod-candidates", response_model=StaffList, dependencies=_director_only)
async def list_hod_candidates(db: AsyncSession = Depends(get_db)):
    return await service.hod_candidates(db)


@router.get(
    "/class-teacher-candidates",
    response_model=StaffList,
    dependencies=[Depends(require_roles(UserRole.HOD.value))],
)
async def list_class_teacher_candidates(
    db: AsyncSession = Depends(get_db),
    current_user: ActorContext = Depends(get_current_user),
):
    try:
        return await service.class_teacher_candidates(db, require_department_id(current_user))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_payload())


@router.delete("/{user_id}", response_model=MessageResponse, dependencies=_director_only)
async def delete_staff(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    try:
        return await service.delete_staff(db, user_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_payload())
