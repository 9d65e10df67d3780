"""
Defaulter work: extra assignments for students below the attendance threshold.

Rows are append-only. The newest row per (faculty, subject) is the current
instruction; a skip row waives the work.
"""

import logging
from typing import Dict, List
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from acadtrack.auth.schemas import ActorContext
from acadtrack.core.enums import ElectiveCategory, UserRole
from acadtrack.core.models import DefaulterSubmission, StudentSelection, Subject
from acadtrack.core.services import get_student_or_404
from acadtrack.api.v1.enrollments.service import students_for
from acadtrack.api.v1.subjects.classification import normalize_subject_category

from .schemas import (
    DefaulterWorkAssign,
    DefaulterWorkAssigned,
    DefaulterWorkItem,
    DefaulterWorkList,
    MessageResponse,
    StudentDefaulterWork,
    StudentDefaulterWorkList,
)

logger = logging.getLogger(__name__)

SKIPPED_TEXT = "Skipped by faculty"
DEFAULT_INSTRUCTIONS = "No instructions provided."

_ELECTIVE_TYPES = {c.subject_type for c in ElectiveCategory}


async def defaulter_targets(db: AsyncSession, actor: ActorContext, subject_id: UUID) -> List[UUID]:
    """Defaulters among the actor's students for the subject. Class teachers only reach their own class."""
    enrollments = await students_for(db, actor.id, subject_id)
    restrict_class = actor.class_id if actor.role == UserRole.CLASS_TEACHER.value else None
    return [
        e.student.id
        for e in enrollments
        if e.student.defaulter and (restrict_class is None or e.student.class_id == restrict_class)
    ]


async def assign_defaulter_work(
    db: AsyncSession,
    actor: ActorContext,
    payload: DefaulterWorkAssign,
) -> DefaulterWorkAssigned:
    targets = await defaulter_targets(db, actor, payload.subject_id)
    if not targets:
        return DefaulterWorkAssigned(message="No defaulter students found for this subject.", total_assigned=0)

    text = SKIPPED_TEXT if payload.skip else (payload.instruction_text or DEFAULT_INSTRUCTIONS)
    for student_id in targets:
        db.add(
            DefaulterSubmission(
                student_id=student_id,
                subject_id=payload.subject_id,
                faculty_id=actor.id,
                submission_text=text,
                reference_link=payload.reference_link or None,
                skip=payload.skip,
                status="pending",
            )
        )
    await db.commit()

    logger.info(
        "%s assigned defaulter work (skip=%s) for subject %s to %d student(s)",
        actor.id, payload.skip, payload.subject_id, len(targets),
    )
    return DefaulterWorkAssigned(
        message="Marked as skipped for all defaulter students." if payload.skip else "Defaulter work assigned successfully.",
        total_assigned=len(targets),
    )


async def list_defaulter_work(db: AsyncSession, faculty_id: UUID) -> DefaulterWorkList:
    """Latest row per subject for this faculty."""
    result = await db.execute(
        select(DefaulterSubmission, Subject)
        .join(Subject, Subject.id == DefaulterSubmission.subject_id)
        .where(DefaulterSubmission.faculty_id == faculty_id)
        .order_by(DefaulterSubmission.created_at.desc())
    )
    latest: Dict[UUID, DefaulterWorkItem] = {}
    for work, subject in result.all():
        if work.subject_id in latest:
            continue
        latest[work.subject_id] = DefaulterWorkItem(
            id=work.id,
            subject_id=subject.id,
            subject_code=subject.code,
            subject_name=subject.name,
            subject_type=subject.type,
            submission_text=work.submission_text,
            reference_link=work.reference_link,
            skip=work.skip,
            created_at=work.created_at,
        )
    return DefaulterWorkList(submissions=list(latest.values()))


async def delete_defaulter_work(db: AsyncSession, faculty_id: UUID, subject_id: UUID) -> MessageResponse:
    await db.execute(
        delete(DefaulterSubmission).where(
            DefaulterSubmission.faculty_id == faculty_id,
            DefaulterSubmission.subject_id == subject_id,
        )
    )
    await db.commit()
    logger.info("%s deleted defaulter work for subject %s", faculty_id, subject_id)
    return MessageResponse(message="Defaulter work deleted successfully.")


async def student_defaulter_work(db: AsyncSession, student_id: UUID) -> StudentDefaulterWorkList:
    """
    Non-skipped work for the student, newest first. Work on an elective is only
    shown when it comes from the faculty the student selected for that elective.
    """
    student = await get_student_or_404(db, student_id)
    result = await db.execute(select(StudentSelection).where(StudentSelection.student_id == student.id))
    selection = result.scalar_one_or_none()
    selected_pairs = set()
    if selection is not None:
        selected_pairs = {selection.pair(c) for c in ElectiveCategory if selection.pair(c)[0]}

    result = await db.execute(
        select(DefaulterSubmission, Subject)
        .join(Subject, Subject.id == DefaulterSubmission.subject_id)
        .where(
            DefaulterSubmission.student_id == student.id,
            DefaulterSubmission.skip.is_(False),
        )
        .order_by(DefaulterSubmission.created_at.desc())
    )

    items: List[StudentDefaulterWork] = []
    for work, subject in result.all():
        category = normalize_subject_category(subject.type, subject.name)
        if category in _ELECTIVE_TYPES and (work.subject_id, work.faculty_id) not in selected_pairs:
            continue
        items.append(
            StudentDefaulterWork(
                id=work.id,
                subject_code=subject.code,
                subject_name=subject.name,
                description=work.submission_text,
                reference_link=work.reference_link,
                assigned_date=work.created_at,
                status=work.status or "pending",
            )
        )
    return StudentDefaulterWorkList(defaulter_work=items)
