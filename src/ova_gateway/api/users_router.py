"""User management; all routes but history are admin-only.

GET    /users                list users, newest first
POST   /users                create ADMIN or COLLECTOR
PUT    /users/{id}           edit username, role or password
DELETE /users/{id}           delete (not yourself) with their bets; refused after settlement
GET    /users/{id}/history   last 100 bets across phases (the user themself or an admin)
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.ova_common.database import get_db_session
from src.ova_common.response import ApiResponse, success_response
from src.ova_gateway.auth.dependencies import get_current_user, require_admin
from src.ova_gateway.user.db_models import UserModel
from src.ova_gateway.user.schemas import CreateUserRequest, UpdateUserRequest, UserInfo
from src.ova_gateway.user.service import UserService

router = APIRouter(prefix="/users", tags=["users"])
_service = UserService()


@router.get("")
async def list_users(
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    users = await _service.list_users(db)
    return success_response([UserInfo.from_model(u).model_dump() for u in users], request)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    request: Request,
    body: CreateUserRequest,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    try:
        user = await _service.create_user(body.username, body.password, body.role, db)
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    return success_response(UserInfo.from_model(user).model_dump(), request, message="User created")


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    try:
        await _service.delete_user(user_id, str(admin.id), db)
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    return success_response({"user_id": user_id, "deleted": True}, request)


@router.put("/{user_id}")
async def update_user(
    user_id: uuid.UUID,
    request: Request,
    body: UpdateUserRequest,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    try:
        user = await _service.update_user(
            str(user_id), db, username=body.username, password=body.password, role=body.role
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    return success_response(UserInfo.from_model(user).model_dump(), request, message="User updated")


@router.get("/{user_id}/history")
async def user_history(
    user_id: uuid.UUID,
    request: Request,
    user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    bets = await _service.user_history(str(user_id), user, db)
    return success_response([b.model_dump(mode="json") for b in bets], request)
