"""Lookups shared by several service modules."""

from typing import Dict, Iterable, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from acadtrack.auth.models import User
from acadtrack.auth.schemas import ActorContext
from acadtrack.core.enums import SubmissionTypeName
from acadtrack.core.exceptions import NotFoundError, ValidationError
from acadtrack.core.models import SchoolClass, Student, SubjectAssignment, SubmissionType


async def get_student_or_404(db: AsyncSession, student_id: UUID) -> Student:
    student = await db.get(Student, student_id)
    if not student:
        raise NotFoundError("Student not found")
    return student


async def get_class_or_404(db: AsyncSession, class_id: Optional[UUID]) -> SchoolClass:
    if class_id is None:
        raise ValidationError("You are not assigned to a class yet. Please contact your administrator.")
    cl = await db.get(SchoolClass, class_id)
    if not cl:
        raise NotFoundError("Class not found")
    return cl


def require_class_id(actor: ActorContext) -> UUID:
    if not actor.class_id:
        raise ValidationError(
            "Missing class_id in token. Please ensure your account is assigned to a class.",
            status.HTTP_403_FORBIDDEN,
        )
    return actor.class_id


def require_department_id(actor: ActorContext) -> UUID:
    if not actor.department_id:
        raise ValidationError("Department ID missing in token.", status.HTTP_403_FORBIDDEN)
    return actor.department_id


async def get_student_in_class(
    db: AsyncSession,
    student_id: UUID,
    class_id: UUID,
    message: str = "You can only manage students in your class",
) -> Student:
    """Fetch a student and enforce that it belongs to the caller's class."""
    student = await get_student_or_404(db, student_id)
    if student.class_id != class_id:
        raise ValidationError(message, status.HTTP_403_FORBIDDEN)
    return student


async def faculty_names(db: AsyncSession, faculty_ids: Iterable[Optional[UUID]]) -> Dict[UUID, str]:
    ids = {fid for fid in faculty_ids if fid}
    if not ids:
        return {}
    result = await db.execute(select(User.id, User.name).where(User.id.in_(ids)))
    return {row.id: row.name for row in result.all()}


async def submission_type_ids(db: AsyncSession) -> Dict[str, UUID]:
    """name -> id for the submission type vocabulary."""
    result = await db.execute(select(SubmissionType.id, SubmissionType.name))
    return {row.name: row.id for row in result.all()}


async def ensure_submission_types(db: AsyncSession) -> Dict[str, UUID]:
    """Insert any missing TA / CIE / Defaulter work rows. Used on startup and in seeding."""
    existing = await submission_type_ids(db)
    for name in SubmissionTypeName:
        if name.value not in existing:
            st = SubmissionType(name=name.value)
            db.add(st)
            await db.flush()
            existing[name.value] = st.id
    await db.commit()
    return existing


async def faculty_teaches_subject(db: AsyncSession, faculty_id: UUID, subject_id: UUID) -> bool:
    """True if a faculty_subjects row links faculty to subject (any class or batch)."""
    result = await db.execute(
        select(SubjectAssignment.id)
        .where(
            SubjectAssignment.faculty_id == faculty_id,
            SubjectAssignment.subject_id == subject_id,
        )
        .limit(1)
    )
    return result.scalar_one_or_none() is not None
