from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from acadtrack.auth.dependencies import get_current_user
from acadtrack.auth.rbac import require_roles
from acadtrack.auth.schemas import ActorContext
from acadtrack.core.enums import UserRole
from acadtrack.core.exceptions import ServiceError
from acadtrack.db.session import get_db

from .schemas import ElectiveSelect, SelectionOverride, SelectionResponse, StudentElectivesResponse
from . import service

router = APIRouter(prefix="/api/v1/electives", tags=["electives"])

_student_only = [Depends(require_roles(UserRole.STUDENT.value))]


@router.get("", response_model=StudentElectivesResponse, dependencies=_student_only)
async def my_electives(
    db: AsyncSession = Depends(get_db),
    current_user: ActorContext = Depends(get_current_user),
):
    """Electives offered for the student's year, with the current selection and its state."""
    try:
        return await service.student_electives(db, current_user.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_payload())


@router.post("/select", response_model=SelectionResponse, dependencies=_student_only)
async def select_elective(
    payload: ElectiveSelect,
    db: AsyncSession = Depends(get_db),
    current_user: ActorContext = Depends(get_current_user),
):
    try:
        return await service.select_elective(db, current_user.id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_payload())


@router.post("/lock", response_model=SelectionResponse, dependencies=_student_only)
async def lock_selections(
    db: AsyncSession = Depends(get_db),
    current_user: ActorContext = Depends(get_current_user),
):
    try:
        return await service.lock_selections(db, current_user.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_payload())


@router.get(
    "/students/{student_id}",
    response_model=StudentElectivesResponse,
    dependencies=[Depends(require_roles(UserRole.CLASS_TEACHER.value))],
)
async def student_electives(
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: ActorContext = Depends(get_current_user),
):
    try:
        return await service.teacher_student_electives(db, current_user, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_payload())


@router.put(
    "/students/{student_id}",
    response_model=SelectionResponse,
    dependencies=[Depends(require_roles(UserRole.CLASS_TEACHER.value))],
)
async def override_selections(
    student_id: UUID,
    payload: SelectionOverride,
    db: AsyncSession = Depends(get_db),
    current_user: ActorContext = Depends(get_current_user),
):
    try:
        return await service.override_selections(db, current_user, student_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_payload())


@router.put(
    "/students/{student_id}/unlock",
    response_model=SelectionResponse,
    dependencies=[Depends(require_roles(UserRole.CLASS_TEACHER.value, UserRole.FACULTY.value))],
)
async def unlock_selections(
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: ActorContext = Depends(get_current_user),
):
    try:
        return await service.unlock_selections(db, current_user, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_payload())
