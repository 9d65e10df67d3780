"""
Which students a faculty member teaches for a subject.

Two sources feed the answer: direct class/batch assignments (faculty_subjects)
and electives students picked with this faculty (student_subject_selection).
Both produce Enrollment records that merge_enrollments folds into one list.
"""

from dataclasses import dataclass
from typing import Iterable, List
from uuid import UUID

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from acadtrack.core.enums import AssignmentSource, ElectiveCategory
from acadtrack.core.models import Student, StudentSelection, SubjectAssignment

from .schemas import EnrolledStudent, SubjectStudentsResponse


@dataclass(frozen=True)
class Enrollment:
    student: Student
    source: AssignmentSource


def merge_enrollments(enrollments: Iterable[Enrollment]) -> List[Enrollment]:
    """Deduplicate by student id keeping the first occurrence and its order."""
    seen = set()
    merged: List[Enrollment] = []
    for enrollment in enrollments:
        if enrollment.student.id in seen:
            continue
        seen.add(enrollment.student.id)
        merged.append(enrollment)
    return merged


async def _direct_enrollments(db: AsyncSession, faculty_id: UUID, subject_id: UUID) -> List[Enrollment]:
    result = await db.execute(
        select(SubjectAssignment)
        .where(
            SubjectAssignment.faculty_id == faculty_id,
            SubjectAssignment.subject_id == subject_id,
            SubjectAssignment.class_id.is_not(None),
        )
        .order_by(SubjectAssignment.created_at)
    )
    enrollments: List[Enrollment] = []
    for fs in result.scalars().all():
        stmt = select(Student).where(Student.class_id == fs.class_id)
        if fs.batch_id is not None:
            stmt = stmt.where(Student.batch_id == fs.batch_id)
        students = await db.execute(stmt.order_by(Student.roll_no))
        enrollments.extend(Enrollment(s, AssignmentSource.DIRECT) for s in students.scalars().all())
    return enrollments


async def _self_selected_enrollments(db: AsyncSession, faculty_id: UUID, subject_id: UUID) -> List[Enrollment]:
    conditions = []
    for category in ElectiveCategory:
        subject_col, faculty_col = StudentSelection.columns(category)
        conditions.append(and_(subject_col == subject_id, faculty_col == faculty_id))
    result = await db.execute(
        select(Student)
        .join(StudentSelection, StudentSelection.student_id == Student.id)
        .where(or_(*conditions))
        .order_by(Student.roll_no)
    )
    return [Enrollment(s, AssignmentSource.SELF_SELECTED) for s in result.scalars().all()]


async def students_for(db: AsyncSession, faculty_id: UUID, subject_id: UUID) -> List[Enrollment]:
    direct = await _direct_enrollments(db, faculty_id, subject_id)
    self_selected = await _self_selected_enrollments(db, faculty_id, subject_id)
    return merge_enrollments(direct + self_selected)


def to_enrolled_student(enrollment: Enrollment) -> EnrolledStudent:
    s = enrollment.student
    return EnrolledStudent(
        id=s.id,
        name=s.name,
        roll_no=s.roll_no,
        hall_ticket_number=s.hall_ticket_number,
        class_id=s.class_id,
        batch_id=s.batch_id,
        defaulter=bool(s.defaulter),
        attendance_percent=s.attendance_percent or 0,
        source=enrollment.source,
    )


async def subject_students(db: AsyncSession, faculty_id: UUID, subject_id: UUID) -> SubjectStudentsResponse:
    enrollments = await students_for(db, faculty_id, subject_id)
    return SubjectStudentsResponse(
        subject_id=subject_id,
        students=[to_enrolled_student(e) for e in enrollments],
    )
