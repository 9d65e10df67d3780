from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from acadtrack.auth.dependencies import get_current_user
from acadtrack.auth.rbac import require_roles
from acadtrack.auth.schemas import ActorContext
from acadtrack.core.enums import UserRole
from acadtrack.core.exceptions import ServiceError
from acadtrack.core.services import require_department_id
from acadtrack.db.session import get_db

from .schemas import ClassCreate, ClassList, ClassSaved, ClassUpdate, MessageResponse
from . import service

router = APIRouter(
    prefix="/api/v1/classes",
    tags=["classes"],
    dependencies=[Depends(require_roles(UserRole.HOD.value))],
)


@router.post("", response_model=ClassSaved, response_model_by_alias=True, status_code=status.HTTP_201_CREATED)
async def create_class(
    payload: ClassCreate,
    db: AsyncSession = Depends(get_db),
    current_user: ActorContext = Depends(get_current_user),
):
    try:
        return await service.create_class(db, require_department_id(current_user), payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_payload())


@router.get("", response_model=ClassList)
async def list_classes(
    db: AsyncSession = Depends(get_db),
    current_user: ActorContext = Depends(get_current_user),
):
    try:
        return await service.list_classes(db, require_department_id(current_user))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_payload())


@router.put("/{class_id}", response_model=ClassSaved, response_model_by_alias=True)
async def update_class(
    class_id: UUID,
    payload: ClassUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: ActorContext = Depends(get_current_user),
):
    try:
        return await service.update_class(db, require_department_id(current_user), class_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_payload())


@router.delete("/{class_id}", response_model=MessageResponse)
async def delete_class(
    class_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: ActorContext = Depends(get_current_user),
):
    try:
        return await service.delete_class(db, require_department_id(current_user), class_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_payload())
