"""User domain service: login, refresh, admin user management, bet history.

All DB operations use the injected AsyncSession. Transactions are managed
by the caller (router layer): commit on success, rollback on error.
"""

import logging
import uuid

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.ova_bet.application.schemas import UserBetOut
from src.ova_bet.domain.repository import BetRepositoryProtocol
from src.ova_bet.infrastructure.persistence import BetRepository
from src.ova_common.enums import UserRole
from src.ova_common.errors import (
    AccountDisabledError,
    AdminRequiredError,
    CannotDeleteSelfError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    UserHasSettledBetsError,
    UsernameExistsError,
    UserNotFoundError,
)
from src.ova_gateway.auth.jwt_handler import (
    create_access_token,
    create_refresh_token,
    decode_token,
)
from src.ova_gateway.auth.password import hash_password, verify_password
from src.ova_gateway.user.db_models import UserModel
from src.ova_phase.domain.repository import PhaseRepositoryProtocol
from src.ova_phase.infrastructure.persistence import PhaseRepository

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 100


def _parse_user_id(user_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(user_id)
    except ValueError:
        raise UserNotFoundError(user_id) from None


class UserService:
    """Stateless service: instantiate once, reuse across requests."""

    def __init__(
        self,
        bet_repo: BetRepositoryProtocol | None = None,
        phase_repo: PhaseRepositoryProtocol | None = None,
    ) -> None:
        self._bet_repo: BetRepositoryProtocol = bet_repo or BetRepository()
        self._phase_repo: PhaseRepositoryProtocol = phase_repo or PhaseRepository()

    async def login(
        self,
        username: str,
        password: str,
        db: AsyncSession,
    ) -> tuple[UserModel, str, str]:
        """Authenticate and return (user, access_token, refresh_token).

        "User not found" and "wrong password" both raise InvalidCredentialsError
        so usernames cannot be enumerated.
        """
        result = await db.execute(
            select(UserModel).where(UserModel.username == username)
        )
        user = result.scalar_one_or_none()

        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        if not user.is_active:
            raise AccountDisabledError()

        return (
            user,
            create_access_token(str(user.id), user.role),
            create_refresh_token(str(user.id)),
        )

    async def refresh(self, refresh_token: str, db: AsyncSession) -> str:
        """Validate a refresh token and issue a new access token with the current role."""
        payload = decode_token(refresh_token, expected_type="refresh")
        try:
            user_id = uuid.UUID(str(payload["sub"]))
        except (KeyError, ValueError):
            raise InvalidRefreshTokenError() from None

        result = await db.execute(select(UserModel).where(UserModel.id == user_id))
        user = result.scalar_one_or_none()
        if user is None:
            raise InvalidRefreshTokenError()
        if not user.is_active:
            raise AccountDisabledError()
        return create_access_token(str(user.id), user.role)

    async def list_users(self, db: AsyncSession) -> list[UserModel]:
        result = await db.execute(select(UserModel).order_by(UserModel.created_at.desc()))
        return list(result.scalars().all())

    async def create_user(
        self,
        username: str,
        password: str,
        role: UserRole,
        db: AsyncSession,
    ) -> UserModel:
        """Admin-only creation; the caller commits."""
        result = await db.execute(
            select(UserModel).where(UserModel.username == username)
        )
        if result.scalar_one_or_none() is not None:
            raise UsernameExistsError()

        user = UserModel(
            username=username,
            password_hash=hash_password(password),
            role=role.value,
            is_active=True,
        )
        db.add(user)
        await db.flush()  # Get user.id and server defaults without committing
        await db.refresh(user)
        logger.info("User created: %s (%s)", username, role.value)
        return user

    async def update_user(
        self,
        user_id: str,
        db: AsyncSession,
        username: str | None = None,
        password: str | None = None,
        role: UserRole | None = None,
    ) -> UserModel:
        """Admin edit of username, role and/or password; the caller commits."""
        user = await self._get_user(db, user_id)

        if username is not None and username != user.username:
            result = await db.execute(
                select(UserModel).where(UserModel.username == username)
            )
            if result.scalar_one_or_none() is not None:
                raise UsernameExistsError()
            user.username = username
        if role is not None:
            user.role = role.value
        if password is not None:
            user.password_hash = hash_password(password)

        await db.flush()
        await db.refresh(user)
        logger.info("User updated: %s (%s)", user.username, user.role)
        return user

    async def delete_user(self, user_id: str, current_user_id: str, db: AsyncSession) -> None:
        """Delete a user with their bets and rewrite the counters of every phase they bet in.

        The user row is locked first so no bet can be added for them meanwhile.
        Refused when any of those phases is settled; the caller commits.
        """
        if user_id == current_user_id:
            raise CannotDeleteSelfError()
        uid = _parse_user_id(user_id)
        result = await db.execute(
            select(UserModel).where(UserModel.id == uid).with_for_update()
        )
        if result.scalar_one_or_none() is None:
            raise UserNotFoundError(user_id)

        phase_ids = await self._bet_repo.list_user_phase_ids(db, str(uid))
        for phase_id in phase_ids:
            phase = await self._phase_repo.get_phase(db, phase_id, for_update=True)
            if phase is not None and phase.settled:
                raise UserHasSettledBetsError(user_id)

        await db.execute(delete(UserModel).where(UserModel.id == uid))
        for phase_id in phase_ids:
            await self._phase_repo.refresh_counters(db, phase_id)
        logger.info("User deleted: %s (bets in %d phases)", user_id, len(phase_ids))

    async def user_history(
        self, user_id: str, current_user: UserModel, db: AsyncSession
    ) -> list[UserBetOut]:
        """A user's latest bets across all phases; visible to that user and admins."""
        if user_id != str(current_user.id) and not current_user.is_admin:
            raise AdminRequiredError()
        user = await self._get_user(db, user_id)
        bets = await self._bet_repo.list_user_history(db, str(user.id), limit=HISTORY_LIMIT)
        return [UserBetOut.from_domain(b) for b in bets]

    async def _get_user(self, db: AsyncSession, user_id: str) -> UserModel:
        uid = _parse_user_id(user_id)
        result = await db.execute(select(UserModel).where(UserModel.id == uid))
        user = result.scalar_one_or_none()
        if user is None:
            raise UserNotFoundError(user_id)
        return user
