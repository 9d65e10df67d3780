import logging
from typing import Dict
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from acadtrack.auth.models import User
from acadtrack.core.enums import UserRole
from acadtrack.core.exceptions import ConflictError, NotFoundError, ValidationError
from acadtrack.core.models import Department

from .schemas import (
    DepartmentCreate,
    DepartmentCreated,
    DepartmentList,
    DepartmentResponse,
    HodAssign,
    HodAssigned,
    MessageResponse,
)

logger = logging.getLogger(__name__)


def _to_response(dept: Department, hod: User = None) -> DepartmentResponse:
    return DepartmentResponse(
        id=dept.id,
        name=dept.name,
        hod=hod.name if hod else None,
        hod_id=hod.id if hod else None,
        created_at=dept.created_at,
    )


async def _get_department_or_404(db: AsyncSession, department_id: UUID) -> Department:
    dept = await db.get(Department, department_id)
    if not dept:
        raise NotFoundError("Department not found")
    return dept


async def create_department(db: AsyncSession, payload: DepartmentCreate) -> DepartmentCreated:
    name = payload.name.strip()
    try:
        dept = Department(name=name)
        db.add(dept)
        await db.commit()
        await db.refresh(dept)
    except IntegrityError:
        await db.rollback()
        raise ConflictError(f"Department '{name}' already exists")
    logger.info("Created department %s", name)
    return DepartmentCreated(department=_to_response(dept))


async def list_departments(db: AsyncSession) -> DepartmentList:
    """All departments with the HOD assigned to each, if any."""
    result = await db.execute(select(Department).order_by(Department.name))
    departments = result.scalars().all()

    result = await db.execute(select(User).where(User.role == UserRole.HOD.value).order_by(User.created_at))
    hods: Dict = {}
    for hod in result.scalars().all():
        hods.setdefault(hod.department_id, hod)

    return DepartmentList(departments=[_to_response(d, hods.get(d.id)) for d in departments])


async def assign_hod(db: AsyncSession, department_id: UUID, payload: HodAssign) -> HodAssigned:
    """Make the user the department's HOD. A previous HOD keeps the role but loses the department."""
    dept = await _get_department_or_404(db, department_id)
    user = await db.get(User, payload.user_id)
    if not user:
        raise NotFoundError("User not found")
    if user.role == UserRole.DIRECTOR.value:
        raise ValidationError("A director cannot be assigned as HOD")

    await db.execute(
        update(User)
        .where(
            User.department_id == dept.id,
            User.role == UserRole.HOD.value,
            User.id != user.id,
        )
        .values(department_id=None)
    )
    user.role = UserRole.HOD.value
    user.department_id = dept.id
    await db.commit()
    await db.refresh(user)

    logger.info("User %s assigned as HOD of department %s", user.id, dept.id)
    return HodAssigned(message="HOD assigned successfully", department=_to_response(dept, user))


async def delete_department(db: AsyncSession, department_id: UUID) -> MessageResponse:
    dept = await _get_department_or_404(db, department_id)
    await db.execute(update(User).where(User.department_id == dept.id).values(department_id=None))
    await db.delete(dept)
    await db.commit()
    logger.info("Department %s deleted", department_id)
    return MessageResponse(message="Department deleted successfully")
