"""
Batch creation.

The batch row and the roll-range student update commit together or not at all.
Linking the batch faculty runs in a savepoint: if it fails the batch is still
created and the response reports faculty_linked=False.
"""

import logging
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from acadtrack.auth.schemas import ActorContext
from acadtrack.core.exceptions import StoreError
from acadtrack.core.models import Batch, Student, SubjectAssignment
from acadtrack.core.services import require_class_id

from .schemas import BatchCreate, BatchCreated, BatchList, BatchResponse

logger = logging.getLogger(__name__)


async def _assign_students(db: AsyncSession, batch: Batch) -> int:
    result = await db.execute(
        update(Student)
        .where(
            Student.class_id == batch.class_id,
            Student.roll_no >= batch.roll_start,
            Student.roll_no <= batch.roll_end,
        )
        .values(batch_id=batch.id)
    )
    return result.rowcount or 0


async def _insert_faculty_link(db: AsyncSession, batch: Batch) -> None:
    db.add(SubjectAssignment(faculty_id=batch.faculty_id, class_id=batch.class_id, batch_id=batch.id))
    await db.flush()


async def link_batch_faculty(db: AsyncSession, batch: Batch) -> bool:
    try:
        async with db.begin_nested():
            await _insert_faculty_link(db, batch)
    except SQLAlchemyError:
        logger.warning("Could not link faculty %s to batch %s", batch.faculty_id, batch.id, exc_info=True)
        return False
    return True


async def create_batch(db: AsyncSession, actor: ActorContext, payload: BatchCreate) -> BatchCreated:
    class_id = require_class_id(actor)
    try:
        batch = Batch(
            class_id=class_id,
            name=payload.name.strip(),
            roll_start=payload.roll_start,
            roll_end=payload.roll_end,
            faculty_id=payload.faculty_id,
        )
        db.add(batch)
        await db.flush()
        assigned = await _assign_students(db, batch)
        faculty_linked = await link_batch_faculty(db, batch)
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Batch creation failed for class %s", class_id)
        raise StoreError("Failed to create batch")

    await db.refresh(batch)
    logger.info(
        "Created batch %s (%d-%d) in class %s, %d student(s) assigned, faculty linked: %s",
        batch.name, batch.roll_start, batch.roll_end, class_id, assigned, faculty_linked,
    )
    message = (
        "Batch created and faculty linked successfully"
        if faculty_linked
        else "Batch created, but the faculty could not be linked"
    )
    return BatchCreated(
        message=message,
        batch=BatchResponse.model_validate(batch),
        students_assigned=assigned,
        faculty_linked=faculty_linked,
    )


async def list_batches(db: AsyncSession, class_id: UUID) -> BatchList:
    result = await db.execute(select(Batch).where(Batch.class_id == class_id).order_by(Batch.roll_start))
    return BatchList(batches=[BatchResponse.model_validate(b) for b in result.scalars().all()])
