"""ova_ledger REST endpoints (admin only).

GET /ledger                  all settlements, newest first
GET /ledger/summary          totals across settled phases
GET /ledger/phase/{phase_id} one phase's settlement
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.ova_common.database import get_db_session
from src.ova_common.response import ApiResponse, success_response
from src.ova_gateway.auth.dependencies import require_admin
from src.ova_gateway.user.db_models import UserModel
from src.ova_ledger.application.service import LedgerService

router = APIRouter(prefix="/ledger", tags=["ledger"])

_service = LedgerService()


@router.get("")
async def list_entries(
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    entries = await _service.list_entries(db)
    return success_response([e.model_dump(mode="json") for e in entries], request)


@router.get("/summary")
async def ledger_summary(
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.summary(db)
    return success_response(result.model_dump(mode="json"), request)


@router.get("/phase/{phase_id}")
async def phase_entry(
    phase_id: uuid.UUID,
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_for_phase(db, str(phase_id))
    return success_response(result.model_dump(mode="json"), request)
