from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from acadtrack.auth.rbac import require_roles
from acadtrack.core.enums import UserRole
from acadtrack.core.exceptions import ServiceError
from acadtrack.db.session import get_db

from .schemas import DepartmentCreate, DepartmentCreated, DepartmentList, HodAssign, HodAssigned, MessageResponse
from . import service

router = APIRouter(
    prefix="/api/v1/departments",
    tags=["departments"],
    dependencies=[Depends(require_roles(UserRole.DIRECTOR.value))],
)


@router.post("", response_model=DepartmentCreated, status_code=status.HTTP_201_CREATED)
async def create_department(
    payload: DepartmentCreate,
    db: AsyncSession = Depends(get_db),
):
    try:
        return await service.create_department(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_payload())


@router.get("", response_model=DepartmentList)
async def list_departments(db: AsyncSession = Depends(get_db)):
    return await service.list_departments(db)


@router.put("/{department_id}/hod", response_model=HodAssigned)
async def assign_hod(
    department_id: UUID,
    payload: HodAssign,
    db: AsyncSession = Depends(get_db),
):
    try:
        return await service.assign_hod(db, department_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_payload())


@router.delete("/{department_id}", response_model=MessageResponse)
async def delete_department(
    department_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    try:
        return await service.delete_department(db, department_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_payload())
