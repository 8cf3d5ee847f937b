"""ova_bet REST endpoints.

GET    /bets/phase/{phase_id}             all bets with usernames, newest first
GET    /bets/phase/{phase_id}/my          caller's bets
GET    /bets/phase/{phase_id}/aggregated  per-number net totals
POST   /bets/parse                        parse preview, nothing stored
POST   /bets/submit                       parse text and store as one batch
POST   /bets                              single bet
POST   /bets/bulk                         many bets in one transaction
POST   /bets/reduce                       bulk reductions (stored negative)
DELETE /bets/{bet_id}                     void (admin)
PATCH  /bets/{bet_id}                     update amount (admin)
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.ova_bet.application.schemas import (
    BulkBetRequest,
    CreateBetRequest,
    ParseTextRequest,
    SubmitTextRequest,
    UpdateBetAmountRequest,
)
from src.ova_bet.application.service import BetService
from src.ova_common.database import get_db_session
from src.ova_common.response import ApiResponse, success_response
from src.ova_gateway.auth.dependencies import get_current_user, require_admin
from src.ova_gateway.user.db_models import UserModel

router = APIRouter(prefix="/bets", tags=["bets"])

_service = BetService()


@router.get("/phase/{phase_id}")
async def list_phase_bets(
    phase_id: uuid.UUID,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    bets = await _service.list_phase_bets(db, str(phase_id))
    return success_response([b.model_dump(mode="json") for b in bets], request)


@router.get("/phase/{phase_id}/my")
async def list_my_bets(
    phase_id: uuid.UUID,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    bets = await _service.list_my_bets(db, str(phase_id), str(current_user.id))
    return success_response([b.model_dump(mode="json") for b in bets], request)


@router.get("/phase/{phase_id}/aggregated")
async def aggregated(
    phase_id: uuid.UUID,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    totals = await _service.aggregated(db, str(phase_id))
    return success_response([t.model_dump(mode="json") for t in totals], request)


@router.post("/parse")
async def parse_preview(
    body: ParseTextRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
) -> ApiResponse:
    result = _service.preview(body.text, body.source)
    return success_response(result.model_dump(mode="json"), request)


@router.post("/submit", status_code=status.HTTP_201_CREATED)
async def submit_text(
    body: SubmitTextRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.submit_text(
        db, current_user, str(body.phase_id), body.text, body.source
    )
    return success_response(result.model_dump(mode="json"), request)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_bet(
    body: CreateBetRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    bet = await _service.create_bet(db, current_user, str(body.phase_id), body)
    return success_response(bet.model_dump(mode="json"), request)


@router.post("/bulk", status_code=status.HTTP_201_CREATED)
async def create_bulk(
    body: BulkBetRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.create_bulk(db, current_user, str(body.phase_id), body.bets)
    return success_response(result.model_dump(mode="json"), request)


@router.post("/reduce", status_code=status.HTTP_201_CREATED)
async def reduce_bulk(
    body: BulkBetRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.reduce_bulk(db, current_user, str(body.phase_id), body.bets)
    return success_response(result.model_dump(mode="json"), request)


@router.delete("/{bet_id}")
async def void_bet(
    bet_id: uuid.UUID,
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    await _service.void_bet(db, str(bet_id))
    return success_response({"bet_id": str(bet_id), "deleted": True}, request)


@router.patch("/{bet_id}")
async def update_bet_amount(
    bet_id: uuid.UUID,
    body: UpdateBetAmountRequest,
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    bet = await _service.update_amount(db, str(bet_id), body.amount)
    return success_response(bet.model_dump(mode="json"), request)
