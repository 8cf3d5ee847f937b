"""ova_phase REST endpoints.

GET    /phases                  all phases, newest first
GET    /phases/active           the active phase (or null)
GET    /phases/{id}             detail
POST   /phases                  create and activate (admin)
POST   /phases/{id}/activate    make the only active phase (admin)
POST   /phases/{id}/close       settle into the ledger (admin)
PATCH  /phases/{id}/limit       set global limit (admin)
DELETE /phases/{id}             delete with cascade (admin)
GET    /phases/{id}/verify      audit cached counters (admin)
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.ova_common.database import get_db_session
from src.ova_common.response import ApiResponse, success_response
from src.ova_gateway.auth.dependencies import get_current_user, require_admin
from src.ova_gateway.user.db_models import UserModel
from src.ova_phase.application.schemas import (
    ClosePhaseRequest,
    CreatePhaseRequest,
    UpdateGlobalLimitRequest,
)
from src.ova_phase.application.service import PhaseService

router = APIRouter(prefix="/phases", tags=["phases"])

_service = PhaseService()


@router.get("")
async def list_phases(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    phases = await _service.list_phases(db)
    return success_response([p.model_dump(mode="json") for p in phases], request)


@router.get("/active")
async def get_active_phase(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    phase = await _service.get_active_phase(db)
    return success_response(phase.model_dump(mode="json") if phase else None, request)


@router.get("/{phase_id}")
async def get_phase(
    phase_id: uuid.UUID,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    phase = await _service.get_phase(db, str(phase_id))
    return success_response(phase.model_dump(mode="json"), request)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_phase(
    body: CreatePhaseRequest,
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    phase = await _service.create_phase(db, body.name, body.global_limit)
    return success_response(phase.model_dump(mode="json"), request, message="Phase created")


@router.post("/{phase_id}/activate")
async def activate_phase(
    phase_id: uuid.UUID,
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    phase = await _service.activate_phase(db, str(phase_id))
    return success_response(phase.model_dump(mode="json"), request)


@router.post("/{phase_id}/close")
async def close_phase(
    phase_id: uuid.UUID,
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    body: ClosePhaseRequest | None = None,
) -> ApiResponse:
    winning_number = body.winning_number if body else None
    result = await _service.close_phase(db, str(phase_id), winning_number)
    return success_response(result.model_dump(mode="json"), request, message="Phase settled")


@router.patch("/{phase_id}/limit")
async def update_global_limit(
    phase_id: uuid.UUID,
    body: UpdateGlobalLimitRequest,
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    phase = await _service.update_global_limit(db, str(phase_id), body.global_limit)
    return success_response(phase.model_dump(mode="json"), request)


@router.delete("/{phase_id}")
async def delete_phase(
    phase_id: uuid.UUID,
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    await _service.delete_phase(db, str(phase_id))
    return success_response({"phase_id": str(phase_id), "deleted": True}, request)


@router.get("/{phase_id}/verify")
async def verify_counters(
    phase_id: uuid.UUID,
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.verify_counters(db, str(phase_id))
    return success_response(result.model_dump(mode="json"), request)
