from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from acadtrack.auth.dependencies import get_current_user
from acadtrack.auth.rbac import require_roles
from acadtrack.auth.schemas import ActorContext
from acadtrack.core.enums import STAFF_ROLES, UserRole
from acadtrack.core.exceptions import ServiceError
from acadtrack.db.session import get_db

from .schemas import (
    ClassStudentsResponse,
    MarkSubmissionRequest,
    MarkSubmissionResponse,
    StudentDashboardResponse,
    SubjectRosterResponse,
    SubjectStatisticsResponse,
    SubmissionTypesResponse,
)
from . import service

router = APIRouter(prefix="/api/v1/submissions", tags=["submissions"])

_staff_only = [Depends(require_roles(*STAFF_ROLES))]


@router.get("/types", response_model=SubmissionTypesResponse)
async def list_submission_types(
    db: AsyncSession = Depends(get_db),
    current_user: ActorContext = Depends(get_current_user),
):
    return await service.list_submission_types(db)


@router.post("/mark", response_model=MarkSubmissionResponse, dependencies=_staff_only)
async def mark_submission(
    payload: MarkSubmissionRequest,
    db: AsyncSession = Depends(get_db),
    current_user: ActorContext = Depends(get_current_user),
):
    try:
        return await service.mark_submission(db, current_user, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_payload())


@router.get("/subjects/{subject_id}/students", response_model=SubjectRosterResponse, dependencies=_staff_only)
async def subject_roster(
    subject_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: ActorContext = Depends(get_current_user),
):
    """Students enrolled with the caller for a subject, with their status per submission type."""
    return await service.subject_roster(db, current_user.id, subject_id)


@router.get("/subject-statistics", response_model=SubjectStatisticsResponse, dependencies=_staff_only)
async def subject_statistics(
    db: AsyncSession = Depends(get_db),
    current_user: ActorContext = Depends(get_current_user),
):
    return await service.subject_statistics(db, current_user.id)


@router.get(
    "/class-students",
    response_model=ClassStudentsResponse,
    dependencies=[Depends(require_roles(UserRole.CLASS_TEACHER.value, UserRole.FACULTY.value))],
)
async def class_students(
    db: AsyncSession = Depends(get_db),
    current_user: ActorContext = Depends(get_current_user),
):
    try:
        return await service.class_students(db, current_user)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_payload())


@router.get(
    "/dashboard",
    response_model=StudentDashboardResponse,
    dependencies=[Depends(require_roles(UserRole.STUDENT.value))],
)
async def student_dashboard(
    db: AsyncSession = Depends(get_db),
    current_user: ActorContext = Depends(get_current_user),
):
    try:
        return await service.student_dashboard(db, current_user.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_payload())
