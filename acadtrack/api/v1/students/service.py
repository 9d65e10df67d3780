import logging
from typing import List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from acadtrack.auth.schemas import ActorContext
from acadtrack.auth.security import hash_password
from acadtrack.core.config import settings
from acadtrack.core.exceptions import ConflictError, ValidationError
from acadtrack.core.models import Batch, Student
from acadtrack.core.services import get_student_in_class, require_class_id
from acadtrack.api.v1.electives import service as electives_service

from .schemas import (
    MessageResponse,
    StudentImportRequest,
    StudentImportResponse,
    StudentOut,
    StudentUpdate,
    StudentUpdateResponse,
)

logger = logging.getLogger(__name__)


def is_defaulter(attendance_percent: float) -> bool:
    return (attendance_percent or 0) < settings.defaulter_threshold


async def import_students(
    db: AsyncSession,
    actor: ActorContext,
    payload: StudentImportRequest,
) -> StudentImportResponse:
    """
    Insert parsed rows into the caller's class. A row is skipped when its roll
    number is taken in the class or its hall ticket is registered anywhere,
    earlier rows of the same payload included.
    """
    class_id = require_class_id(actor)
    result = await db.execute(select(Student.roll_no).where(Student.class_id == class_id))
    seen_rolls = set(result.scalars().all())

    # hall tickets are unique across all classes
    tickets = {row.hall_ticket_number.strip() for row in payload.students}
    result = await db.execute(select(Student.hall_ticket_number).where(Student.hall_ticket_number.in_(tickets)))
    seen_tickets = set(result.scalars().all())

    new_students: List[Student] = []
    for row in payload.students:
        ticket = row.hall_ticket_number.strip()
        if row.roll_no in seen_rolls or ticket in seen_tickets:
            continue
        seen_rolls.add(row.roll_no)
        seen_tickets.add(ticket)
        new_students.append(
            Student(
                class_id=class_id,
                batch_id=None,
                roll_no=row.roll_no,
                name=row.name.strip(),
                email=row.email,
                mobile=row.mobile,
                hall_ticket_number=ticket,
                attendance_percent=row.attendance_percent,
                defaulter=is_defaulter(row.attendance_percent),
                password_hash=hash_password(ticket),
            )
        )

    skipped = len(payload.students) - len(new_students)
    if not new_students:
        return StudentImportResponse(
            message="No new students to import (all duplicates skipped).",
            imported=0,
            skipped=skipped,
        )

    db.add_all(new_students)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Hall ticket number already exists")

    logger.info("Imported %d student(s) into class %s, skipped %d", len(new_students), class_id, skipped)
    return StudentImportResponse(
        message=f"Import completed. {len(new_students)} new students added.",
        imported=len(new_students),
        skipped=skipped,
    )


async def update_student(
    db: AsyncSession,
    actor: ActorContext,
    student_id: UUID,
    payload: StudentUpdate,
) -> StudentUpdateResponse:
    class_id = require_class_id(actor)
    student = await get_student_in_class(db, student_id, class_id, "Unauthorized to edit this student")

    data = payload.model_dump(exclude_unset=True, exclude={"defaulter", "elective_selections"})
    if data.get("batch_id") is not None:
        batch = await db.get(Batch, data["batch_id"])
        if not batch or batch.class_id != class_id:
            raise ValidationError("Batch does not belong to your class")
    pairs = None
    if payload.elective_selections is not None:
        pairs = await electives_service.validate_override(db, payload.elective_selections)

    # all checks passed; student fields and selection override go in one commit
    for field, value in data.items():
        setattr(student, field, value)
    student.defaulter = payload.defaulter if payload.defaulter is not None else is_defaulter(student.attendance_percent)
    try:
        if pairs is not None:
            await electives_service.stage_override(db, student.id, pairs)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Hall ticket number already exists")
    await db.refresh(student)

    logger.info("Student %s updated by %s", student.id, actor.id)
    return StudentUpdateResponse(message="Student updated successfully", student=StudentOut.model_validate(student))


async def delete_student(db: AsyncSession, actor: ActorContext, student_id: UUID) -> MessageResponse:
    class_id = require_class_id(actor)
    student = await get_student_in_class(db, student_id, class_id, "Unauthorized to delete this student")
    await db.delete(student)
    await db.commit()
    logger.info("Student %s deleted by %s", student_id, actor.id)
    return MessageResponse(message="Student deleted successfully")
