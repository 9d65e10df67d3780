import logging
from datetime import datetime
from typing import Iterable, List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from acadtrack.auth.schemas import ActorContext
from acadtrack.core.enums import SubmissionStatus
from acadtrack.core.exceptions import ValidationError
from acadtrack.core.models import Batch, Student, Subject, Submission, SubmissionType
from acadtrack.core.services import (
    faculty_names,
    faculty_teaches_subject,
    get_class_or_404,
    get_student_or_404,
    require_class_id,
)
from acadtrack.api.v1.enrollments.service import to_enrolled_student, students_for
from acadtrack.api.v1.subjects.classification import is_practical
from acadtrack.api.v1.subjects.service import (
    NOT_ASSIGNED,
    availability_by_subject,
    staff_catalog,
    student_subject_links,
)

from . import aggregation
from .schemas import (
    ClassStudent,
    ClassStudentsResponse,
    DashboardStudent,
    DashboardSubject,
    MarkSubmissionRequest,
    MarkSubmissionResponse,
    RosterStudent,
    SubjectRosterResponse,
    SubjectStatistics,
    SubjectStatisticsResponse,
    SubjectSubmissionStatus,
    StudentDashboardResponse,
    SubmissionTypeOut,
    SubmissionTypesResponse,
    TypeStats,
)

logger = logging.getLogger(__name__)


async def load_statuses(
    db: AsyncSession,
    student_ids: Iterable[UUID],
    subject_id: Optional[UUID] = None,
) -> aggregation.GroupedStatuses:
    ids = list(student_ids)
    if not ids:
        return {}
    stmt = (
        select(Submission.student_id, Submission.subject_id, SubmissionType.name, Submission.status)
        .join(SubmissionType, SubmissionType.id == Submission.submission_type_id)
        .where(Submission.student_id.in_(ids))
    )
    if subject_id is not None:
        stmt = stmt.where(Submission.subject_id == subject_id)
    result = await db.execute(stmt)
    return aggregation.group_statuses(tuple(row) for row in result.all())


async def list_submission_types(db: AsyncSession) -> SubmissionTypesResponse:
    result = await db.execute(select(SubmissionType).order_by(SubmissionType.name))
    return SubmissionTypesResponse(
        submission_types=[SubmissionTypeOut.model_validate(t) for t in result.scalars().all()]
    )


async def mark_submission(
    db: AsyncSession,
    actor: ActorContext,
    payload: MarkSubmissionRequest,
) -> MarkSubmissionResponse:
    """Insert or update the status for (student, subject, type)."""
    new_status = payload.status.strip().lower()
    if new_status not in {s.value for s in SubmissionStatus}:
        raise ValidationError("Status must be 'pending' or 'completed'.")

    if not await faculty_teaches_subject(db, actor.id, payload.subject_id):
        raise ValidationError(
            "You are not authorized to mark submissions for this subject.",
            status.HTTP_403_FORBIDDEN,
        )

    result = await db.execute(select(SubmissionType).where(SubmissionType.name == payload.submission_type))
    sub_type = result.scalar_one_or_none()
    if not sub_type:
        raise ValidationError(f"Invalid submission_type: {payload.submission_type}.")

    await get_student_or_404(db, payload.student_id)

    result = await db.execute(
        select(Submission).where(
            Submission.student_id == payload.student_id,
            Submission.subject_id == payload.subject_id,
            Submission.submission_type_id == sub_type.id,
        )
    )
    existing = result.scalar_one_or_none()
    now = datetime.utcnow()
    if existing:
        existing.status = new_status
        existing.marked_by = actor.id
        existing.marked_at = now
        message = f"{sub_type.name} submission updated to {new_status} successfully."
    else:
        db.add(
            Submission(
                student_id=payload.student_id,
                subject_id=payload.subject_id,
                submission_type_id=sub_type.id,
                status=new_status,
                marked_by=actor.id,
                marked_at=now,
            )
        )
        message = f"{sub_type.name} submission marked as {new_status} successfully."
    await db.commit()

    logger.info(
        "%s marked %s for student %s subject %s as %s",
        actor.id, sub_type.name, payload.student_id, payload.subject_id, new_status,
    )
    return MarkSubmissionResponse(message=message, created=existing is None, status=new_status)


async def subject_roster(db: AsyncSession, faculty_id: UUID, subject_id: UUID) -> SubjectRosterResponse:
    enrollments = await students_for(db, faculty_id, subject_id)
    if not enrollments:
        return SubjectRosterResponse(subject_id=subject_id)

    grouped = await load_statuses(db, (e.student.id for e in enrollments), subject_id)
    result = await db.execute(select(SubmissionType.name).order_by(SubmissionType.name))
    students = [
        RosterStudent(
            **to_enrolled_student(e).model_dump(),
            submissions=dict(grouped.get(e.student.id, {}).get(subject_id, {})),
        )
        for e in enrollments
    ]
    return SubjectRosterResponse(
        subject_id=subject_id,
        students=students,
        submission_types=list(result.scalars().all()),
    )


async def class_students(db: AsyncSession, actor: ActorContext) -> ClassStudentsResponse:
    """Students of the caller's class with their subject completion percentage."""
    class_id = require_class_id(actor)
    result = await db.execute(
        select(Student, Batch.name)
        .outerjoin(Batch, Batch.id == Student.batch_id)
        .where(Student.class_id == class_id)
        .order_by(Student.roll_no)
    )
    rows = result.all()

    result = await db.execute(select(Subject).where(Subject.class_id == class_id))
    subjects = [(s.id, is_practical(s.type, s.name)) for s in result.scalars().all()]

    grouped = await load_statuses(db, (student.id for student, _ in rows))
    students: List[ClassStudent] = []
    for student, batch_name in rows:
        students.append(
            ClassStudent(
                id=student.id,
                roll_no=student.roll_no,
                name=student.name,
                email=student.email,
                mobile=student.mobile,
                hall_ticket_number=student.hall_ticket_number,
                attendance_percent=student.attendance_percent or 0,
                defaulter=bool(student.defaulter),
                batch_id=student.batch_id,
                batch_name=batch_name,
                submission_percentage=aggregation.student_completion(subjects, grouped.get(student.id, {})),
            )
        )
    return ClassStudentsResponse(students=students)


async def student_dashboard(db: AsyncSession, student_id: UUID) -> StudentDashboardResponse:
    student = await get_student_or_404(db, student_id)
    cl = await get_class_or_404(db, student.class_id)
    links = await student_subject_links(db, student, cl.year)

    statuses_by_subject = (await load_statuses(db, [student.id])).get(student.id, {})
    names = await faculty_names(db, (link.faculty_id for link in links))
    availability = await availability_by_subject(db, (link.subject.id for link in links))

    subjects: List[DashboardSubject] = []
    per_subject = []
    for link in links:
        statuses = statuses_by_subject.get(link.subject.id, {})
        per_subject.append(statuses)
        subjects.append(
            DashboardSubject(
                id=link.subject.id,
                code=link.subject.code,
                name=link.subject.name,
                type=link.category.value,
                faculty=names.get(link.faculty_id, NOT_ASSIGNED),
                faculty_available=availability.get(link.subject.id, False),
                submissions=SubjectSubmissionStatus(
                    ta=statuses.get(aggregation.TA, aggregation.PENDING),
                    cie=statuses.get(aggregation.CIE, aggregation.PENDING),
                    defaulter=statuses.get(aggregation.DEFAULTER_WORK, aggregation.PENDING),
                ),
            )
        )

    return StudentDashboardResponse(
        student=DashboardStudent(
            id=student.id,
            name=student.name,
            roll_no=student.roll_no,
            hall_ticket_number=student.hall_ticket_number,
            email=student.email,
            mobile=student.mobile,
            defaulter=bool(student.defaulter),
            attendance_percent=student.attendance_percent or 0,
            submission_percentage=aggregation.dashboard_completion(per_subject, bool(student.defaulter)),
        ),
        subjects=subjects,
    )


async def subject_statistics(db: AsyncSession, faculty_id: UUID) -> SubjectStatisticsResponse:
    """Per-subject counts for every subject in the caller's catalog."""
    catalog = await staff_catalog(db, faculty_id)
    result = await db.execute(select(SubmissionType.name).order_by(SubmissionType.name))
    type_names = list(result.scalars().all())

    stats: List[SubjectStatistics] = []
    for bucket in (catalog.theory, catalog.practical, catalog.mdm, catalog.oe, catalog.pe):
        for subject in bucket:
            enrollments = await students_for(db, faculty_id, subject.id)
            total = len(enrollments)
            grouped = await load_statuses(db, (e.student.id for e in enrollments), subject.id)
            statuses = [grouped.get(e.student.id, {}).get(subject.id, {}) for e in enrollments]
            per_type = {
                name: TypeStats(**aggregation.type_counts(total, (s[name] for s in statuses if name in s)))
                for name in type_names
            }
            stats.append(
                SubjectStatistics(
                    id=subject.id,
                    name=subject.name,
                    code=subject.code,
                    type=subject.type,
                    total_students=total,
                    defaulter_count=sum(1 for e in enrollments if e.student.defaulter),
                    submission_stats=per_type,
                )
            )
    return SubjectStatisticsResponse(subjects=stats)
