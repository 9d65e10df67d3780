import logging
from typing import Dict, List
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from acadtrack.api.v1.electives.schemas import FacultyOption
from acadtrack.api.v1.electives.service import UNKNOWN_FACULTY
from acadtrack.core.exceptions import ConflictError, NotFoundError
from acadtrack.core.models import OfferedSubject, OfferedSubjectFaculty, Subject, SubjectAssignment
from acadtrack.core.services import faculty_names

from .schemas import MessageResponse, OfferedSubjectCreate, OfferedSubjectCreated, OfferedSubjectList, OfferedSubjectResponse

logger = logging.getLogger(__name__)


def _to_response(offered: OfferedSubject, subject: Subject, names: Dict[UUID, str]) -> OfferedSubjectResponse:
    return OfferedSubjectResponse(
        id=offered.id,
        subject_id=subject.id,
        code=subject.code,
        name=subject.name,
        type=subject.type,
        faculties=[FacultyOption(id=fid, name=names.get(fid, UNKNOWN_FACULTY)) for fid in offered.faculty_ids],
        semester=offered.semester,
        year=offered.year,
        is_active=offered.is_active,
        created_at=offered.created_at,
    )


async def add_offered_subject(
    db: AsyncSession,
    department_id: UUID,
    payload: OfferedSubjectCreate,
) -> OfferedSubjectCreated:
    """
    Create the elective subject, its offering for the year/semester and a
    department-level faculty_subjects row per faculty so students can select it.
    """
    code = payload.code.strip().upper()
    faculty_ids: List[UUID] = list(dict.fromkeys(payload.faculty_ids))

    result = await db.execute(
        select(Subject.id).where(Subject.department_id == department_id, Subject.code == code)
    )
    if result.scalar_one_or_none() is not None:
        raise ConflictError("A subject with this code already exists in your department.")

    try:
        subject = Subject(
            name=payload.name.strip(),
            code=code,
            type=payload.type,
            department_id=department_id,
            class_id=None,
        )
        db.add(subject)
        await db.flush()

        offered = OfferedSubject(
            subject_id=subject.id,
            department_id=department_id,
            year=payload.year,
            semester=payload.semester,
            is_active=True,
            faculty_links=[
                OfferedSubjectFaculty(faculty_id=fid, position=i) for i, fid in enumerate(faculty_ids)
            ],
        )
        db.add(offered)
        for fid in faculty_ids:
            db.add(SubjectAssignment(faculty_id=fid, subject_id=subject.id, class_id=None, batch_id=None))
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("This subject is already offered by your department for this semester/year.")

    names = await faculty_names(db, faculty_ids)
    logger.info(
        "Department %s offered %s subject %s for year %s with %d faculty",
        department_id, payload.type, code, payload.year, len(faculty_ids),
    )
    return OfferedSubjectCreated(
        message=f'{payload.type} subject "{subject.name}" added successfully with {len(faculty_ids)} faculty assigned.',
        offered_subject=_to_response(offered, subject, names),
        faculty_assigned=len(faculty_ids),
    )


async def list_offered_subjects(db: AsyncSession, department_id: UUID) -> OfferedSubjectList:
    result = await db.execute(
        select(OfferedSubject, Subject)
        .join(Subject, Subject.id == OfferedSubject.subject_id)
        .where(OfferedSubject.department_id == department_id)
        .order_by(OfferedSubject.year, OfferedSubject.semester, Subject.name)
    )
    rows = result.all()
    names = await faculty_names(db, (fid for offered, _ in rows for fid in offered.faculty_ids))
    return OfferedSubjectList(subjects=[_to_response(offered, subject, names) for offered, subject in rows])


async def delete_offered_subject(db: AsyncSession, department_id: UUID, offered_id: UUID) -> MessageResponse:
    """Remove the offering, its faculty mappings and the subject itself."""
    result = await db.execute(
        select(OfferedSubject).where(
            OfferedSubject.id == offered_id,
            OfferedSubject.department_id == department_id,
        )
    )
    offered = result.scalar_one_or_none()
    if not offered:
        raise NotFoundError("Subject not found or access denied")

    subject_id = offered.subject_id
    await db.execute(delete(SubjectAssignment).where(SubjectAssignment.subject_id == subject_id))
    await db.delete(offered)
    await db.flush()
    await db.execute(delete(Subject).where(Subject.id == subject_id))
    await db.commit()

    logger.info("Department %s deleted offered subject %s", department_id, subject_id)
    return MessageResponse(message="Subject deleted successfully")
