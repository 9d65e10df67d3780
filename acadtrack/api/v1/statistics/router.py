from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from acadtrack.auth.dependencies import get_current_user
from acadtrack.auth.rbac import require_roles
from acadtrack.auth.schemas import ActorContext
from acadtrack.core.enums import STAFF_ROLES, UserRole
from acadtrack.core.exceptions import ServiceError
from acadtrack.core.services import require_department_id
from acadtrack.db.session import get_db

from .schemas import ClassStatisticsResponse, DepartmentStatisticsResponse, YearStatisticsResponse
from . import service

router = APIRouter(prefix="/api/v1/statistics", tags=["statistics"])


@router.get(
    "/class",
    response_model=ClassStatisticsResponse,
    dependencies=[Depends(require_roles(*STAFF_ROLES))],
)
async def class_statistics(
    db: AsyncSession = Depends(get_db),
    current_user: ActorContext = Depends(get_current_user),
):
    try:
        return await service.class_statistics(db, current_user)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_payload())


@router.get(
    "/departments",
    response_model=DepartmentStatisticsResponse,
    dependencies=[Depends(require_roles(UserRole.DIRECTOR.value))],
)
async def department_statistics(
    db: AsyncSession = Depends(get_db),
    current_user: ActorContext = Depends(get_current_user),
):
    return await service.department_statistics(db)


@router.get(
    "/years",
    response_model=YearStatisticsResponse,
    dependencies=[Depends(require_roles(UserRole.HOD.value))],
)
async def year_statistics(
    db: AsyncSession = Depends(get_db),
    current_user: ActorContext = Depends(get_current_user),
):
    try:
        department_id = require_department_id(current_user)
        return await service.year_statistics(db, department_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_payload())
