"""Staff directory listings and removal of staff accounts."""

import logging
from typing import Iterable
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from acadtrack.auth.models import User
from acadtrack.auth.schemas import ActorContext
from acadtrack.core.enums import STAFF_ROLES, TEACHING_ROLES, UserRole
from acadtrack.core.exceptions import NotFoundError, ValidationError
from acadtrack.core.services import require_department_id

from .schemas import MessageResponse, StaffList, StaffMember

logger = logging.getLogger(__name__)


async def _list(db: AsyncSession, roles: Iterable[str], *criteria) -> StaffList:
    result = await db.execute(select(User).where(User.role.in_(list(roles)), *criteria).order_by(User.name))
    return StaffList(staff=[StaffMember.model_validate(u) for u in result.scalars().all()])


async def hod_candidates(db: AsyncSession) -> StaffList:
    return await _list(db, (UserRole.HOD.value, UserRole.FACULTY.value))


async def department_staff(db: AsyncSession, department_id: UUID) -> StaffList:
    return await _list(db, STAFF_ROLES, User.department_id == department_id)


async def class_teacher_candidates(db: AsyncSession, department_id: UUID) -> StaffList:
    """Teaching staff of the department plus those not yet attached to any department."""
    return await _list(
        db,
        TEACHING_ROLES,
        or_(User.department_id == department_id, User.department_id.is_(None)),
    )


async def all_staff(db: AsyncSession) -> StaffList:
    return await _list(db, STAFF_ROLES)


async def directory_for(db: AsyncSession, actor: ActorContext) -> StaffList:
    """HODs see their department; class teachers and faculty see every non-director account."""
    if actor.role == UserRole.HOD.value:
        return await department_staff(db, require_department_id(actor))
    return await all_staff(db)


async def delete_staff(db: AsyncSession, user_id: UUID) -> MessageResponse:
    user = await db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    if user.role == UserRole.DIRECTOR.value:
        raise ValidationError("Director accounts cannot be deleted")
    await db.delete(user)
    await db.commit()
    logger.info("Staff account %s (%s) deleted", user_id, user.role)
    return MessageResponse(message="Faculty deleted successfully")
