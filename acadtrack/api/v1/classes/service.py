import logging
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from acadtrack.auth.models import User
from acadtrack.core.enums import TEACHING_ROLES
from acadtrack.core.exceptions import ConflictError, NotFoundError, ValidationError
from acadtrack.core.models import SchoolClass, Student
from acadtrack.core.services import faculty_names

from .schemas import ClassCreate, ClassList, ClassResponse, ClassSaved, ClassUpdate, MessageResponse

logger = logging.getLogger(__name__)


def _to_response(cl: SchoolClass, teacher_names: Dict[UUID, str], counts: Dict[UUID, int]) -> ClassResponse:
    return ClassResponse(
        id=cl.id,
        department_id=cl.department_id,
        name=cl.name,
        year=cl.year,
        class_teacher_id=cl.class_teacher_id,
        teacher=teacher_names.get(cl.class_teacher_id, "Not Assigned"),
        total_students=counts.get(cl.id, 0),
        created_at=cl.created_at,
    )


async def _student_counts(db: AsyncSession, class_ids: List[UUID]) -> Dict[UUID, int]:
    if not class_ids:
        return {}
    result = await db.execute(
        select(Student.class_id, func.count(Student.id))
        .where(Student.class_id.in_(class_ids))
        .group_by(Student.class_id)
    )
    return {row[0]: row[1] for row in result.all()}


async def _get_class_teacher(db: AsyncSession, user_id: UUID) -> User:
    teacher = await db.get(User, user_id)
    if not teacher:
        raise NotFoundError("Class teacher not found")
    if teacher.role not in TEACHING_ROLES:
        raise ValidationError("Only a class teacher or faculty member can be assigned to a class")
    return teacher


async def _get_department_class(db: AsyncSession, department_id: UUID, class_id: UUID) -> SchoolClass:
    cl = await db.get(SchoolClass, class_id)
    if not cl or cl.department_id != department_id:
        raise NotFoundError("Class not found or access denied")
    return cl


async def _find_class(
    db: AsyncSession,
    department_id: UUID,
    name: str,
    year: int,
    exclude_id: Optional[UUID] = None,
) -> Optional[SchoolClass]:
    query = select(SchoolClass).where(
        SchoolClass.department_id == department_id,
        SchoolClass.name == name,
        SchoolClass.year == year,
    )
    if exclude_id is not None:
        query = query.where(SchoolClass.id != exclude_id)
    result = await db.execute(query)
    return result.scalars().first()


async def _saved(db: AsyncSession, cl: SchoolClass, teacher: User, message: str) -> ClassSaved:
    counts = await _student_counts(db, [cl.id])
    return ClassSaved(message=message, class_=_to_response(cl, {teacher.id: teacher.name}, counts))


async def create_class(db: AsyncSession, department_id: UUID, payload: ClassCreate) -> ClassSaved:
    """Create a class in the HOD's department, or staff an existing unstaffed one with the same name and year."""
    name = payload.name.strip()
    teacher = await _get_class_teacher(db, payload.class_teacher_id)

    cl = await _find_class(db, department_id, name, payload.year)
    if cl is not None and cl.class_teacher_id is not None:
        raise ConflictError("A class teacher is already assigned to this class.")

    if cl is None:
        cl = SchoolClass(department_id=department_id, name=name, year=payload.year)
        db.add(cl)
    cl.class_teacher_id = teacher.id
    teacher.department_id = department_id
    await db.commit()
    await db.refresh(cl)

    logger.info("Class %s (year %s) in department %s assigned to %s", name, payload.year, department_id, teacher.id)
    return await _saved(db, cl, teacher, "Class created successfully")


async def update_class(db: AsyncSession, department_id: UUID, class_id: UUID, payload: ClassUpdate) -> ClassSaved:
    cl = await _get_department_class(db, department_id, class_id)
    name = payload.name.strip()
    teacher = await _get_class_teacher(db, payload.class_teacher_id)
    if await _find_class(db, department_id, name, payload.year, exclude_id=cl.id) is not None:
        raise ConflictError(f"Class {name} already exists for year {payload.year}")

    cl.name = name
    cl.year = payload.year
    cl.class_teacher_id = teacher.id
    teacher.department_id = department_id
    await db.commit()
    await db.refresh(cl)

    logger.info("Class %s updated in department %s", cl.id, department_id)
    return await _saved(db, cl, teacher, "Class updated successfully")


async def delete_class(db: AsyncSession, department_id: UUID, class_id: UUID) -> MessageResponse:
    """Students, batches and class subjects go with the class."""
    cl = await _get_department_class(db, department_id, class_id)
    await db.delete(cl)
    await db.commit()
    logger.info("Class %s deleted from department %s", class_id, department_id)
    return MessageResponse(message="Class deleted successfully")


async def list_classes(db: AsyncSession, department_id: UUID) -> ClassList:
    result = await db.execute(
        select(SchoolClass)
        .where(SchoolClass.department_id == department_id)
        .order_by(SchoolClass.year, SchoolClass.name)
    )
    classes = result.scalars().all()
    names = await faculty_names(db, (c.class_teacher_id for c in classes))
    counts = await _student_counts(db, [c.id for c in classes])
    return ClassList(classes=[_to_response(c, names, counts) for c in classes])
