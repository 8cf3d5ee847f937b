"""ova_risk REST endpoints.

GET    /risk/phase/{phase_id}               top exposure with potential payout
GET    /risk/phase/{phase_id}/board         full 000-999 board with limits
GET    /risk/phase/{phase_id}/excess        numbers over their limit
POST   /risk/phase/{phase_id}/clear-excess  write corrections (admin)
GET    /risk/limits/{phase_id}              per-number limits and global limit
POST   /risk/limits                         upsert one limit (admin)
POST   /risk/limits/bulk                    upsert many limits (admin)
DELETE /risk/limits/{phase_id}/{number}     drop a per-number limit (admin)
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.ova_common.database import get_db_session
from src.ova_common.enums import ExcessSort
from src.ova_common.response import ApiResponse, success_response
from src.ova_gateway.auth.dependencies import get_current_user, require_admin
from src.ova_gateway.user.db_models import UserModel
from src.ova_risk.application.schemas import BulkSetLimitsRequest, SetLimitRequest
from src.ova_risk.application.service import RiskService

router = APIRouter(prefix="/risk", tags=["risk"])

_service = RiskService()


@router.get("/phase/{phase_id}")
async def risk_overview(
    phase_id: uuid.UUID,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.overview(db, str(phase_id))
    return success_response(result.model_dump(mode="json"), request)


@router.get("/phase/{phase_id}/board")
async def risk_board(
    phase_id: uuid.UUID,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.board(db, str(phase_id))
    return success_response(result.model_dump(mode="json"), request)


@router.get("/phase/{phase_id}/excess")
async def risk_excess(
    phase_id: uuid.UUID,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    sort: ExcessSort = Query(ExcessSort.EXCESS),
) -> ApiResponse:
    result = await _service.excess(db, str(phase_id), sort)
    return success_response(result.model_dump(mode="json"), request)


@router.post("/phase/{phase_id}/clear-excess")
async def clear_excess(
    phase_id: uuid.UUID,
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.clear_excess(db, admin, str(phase_id))
    return success_response(result.model_dump(mode="json"), request, message=result.message)


@router.get("/limits/{phase_id}")
async def list_limits(
    phase_id: uuid.UUID,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.list_limits(db, str(phase_id))
    return success_response(result.model_dump(mode="json"), request)


@router.post("/limits")
async def set_limit(
    body: SetLimitRequest,
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.set_limits(db, str(body.phase_id), [body])
    return success_response(result.model_dump(mode="json"), request)


@router.post("/limits/bulk")
async def set_limits_bulk(
    body: BulkSetLimitsRequest,
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.set_limits(db, str(body.phase_id), body.limits)
    return success_response(result.model_dump(mode="json"), request)


@router.delete("/limits/{phase_id}/{number}")
async def remove_limit(
    phase_id: uuid.UUID,
    number: str,
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    removed = await _service.remove_limit(db, str(phase_id), number)
    return success_response({"phase_id": str(phase_id), "number": number, "deleted": removed}, request)
