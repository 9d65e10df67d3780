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

from .schemas import MessageResponse, OfferedSubjectCreate, OfferedSubjectCreated, OfferedSubjectList
from . import service

router = APIRouter(
    prefix="/api/v1/offered-subjects",
    tags=["offered-subjects"],
    dependencies=[Depends(require_roles(UserRole.HOD.value))],
)


@router.post("", response_model=OfferedSubjectCreated, status_code=status.HTTP_201_CREATED)
async def add_offered_subject(
    payload: OfferedSubjectCreate,
    db: AsyncSession = Depends(get_db),
    current_user: ActorContext = Depends(get_current_user),
):
    try:
        department_id = require_department_id(current_user)
        return await service.add_offered_subject(db, department_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_payload())


@router.get("", response_model=OfferedSubjectList)
async def list_offered_subjects(
    db: AsyncSession = Depends(get_db),
    current_user: ActorContext = Depends(get_current_user),
):
    try:
        department_id = require_department_id(current_user)
        return await service.list_offered_subjects(db, department_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_payload())


@router.delete("/{offered_id}", response_model=MessageResponse)
async def delete_offered_subject(
    offered_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: ActorContext = Depends(get_current_user),
):
    try:
        department_id = require_department_id(current_user)
        return await service.delete_offered_subject(db, department_id, offered_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_payload())
