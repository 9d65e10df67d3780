from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from acadtrack.auth.dependencies import get_current_user
from acadtrack.auth.rbac import require_roles
from acadtrack.auth.schemas import ActorContext
from acadtrack.core.enums import STAFF_ROLES, UserRole
from acadtrack.core.exceptions import ServiceError
from acadtrack.db.session import get_db

from .schemas import (
    AvailabilityResponse,
    AvailabilityUpdate,
    ClassSubjectCreate,
    ClassSubjectResponse,
    StaffCatalogResponse,
    StudentCatalogResponse,
)
from . import service

router = APIRouter(prefix="/api/v1/subjects", tags=["subjects"])


@router.get(
    "",
    response_model=StaffCatalogResponse,
    dependencies=[Depends(require_roles(*STAFF_ROLES))],
)
async def my_subjects(
    db: AsyncSession = Depends(get_db),
    current_user: ActorContext = Depends(get_current_user),
):
    """Subjects the caller teaches: direct assignments, offered electives and student-selected electives."""
    return await service.subjects_for(db, current_user)


@router.get(
    "/student",
    response_model=StudentCatalogResponse,
    dependencies=[Depends(require_roles(UserRole.STUDENT.value))],
)
async def student_subjects(
    db: AsyncSession = Depends(get_db),
    current_user: ActorContext = Depends(get_current_user),
):
    try:
        return await service.student_catalog(db, current_user.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_payload())


@router.post(
    "/class",
    response_model=ClassSubjectResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(UserRole.CLASS_TEACHER.value))],
)
async def create_class_subject(
    payload: ClassSubjectCreate,
    db: AsyncSession = Depends(get_db),
    current_user: ActorContext = Depends(get_current_user),
):
    try:
        return await service.create_class_subject(db, current_user, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_payload())


@router.get(
    "/availability",
    response_model=AvailabilityResponse,
    dependencies=[Depends(require_roles(UserRole.CLASS_TEACHER.value, UserRole.FACULTY.value))],
)
async def get_availability(
    db: AsyncSession = Depends(get_db),
    current_user: ActorContext = Depends(get_current_user),
):
    return await service.get_availability(db, current_user.id)


@router.put(
    "/availability",
    response_model=AvailabilityResponse,
    dependencies=[Depends(require_roles(UserRole.CLASS_TEACHER.value, UserRole.FACULTY.value))],
)
async def set_availability(
    payload: AvailabilityUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: ActorContext = Depends(get_current_user),
):
    try:
        return await service.set_availability(db, current_user.id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_payload())
