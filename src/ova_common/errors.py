"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User
  2xxx: Phase
  3xxx: Bet
  4xxx: Risk/Limits
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth/User ---

class UsernameExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Username already exists", 409)


class UserNotFoundError(AppError):
    def __init__(self, user_id: str) -> None:
        super().__init__(1002, f"User not found: {user_id}", 404)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid username or password", 401)


class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Account is disabled", 403)


class InvalidRefreshTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1005, "Refresh token is invalid or expired", 401)


class AdminRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(1006, "Admin role required", 403)


class CannotDeleteSelfError(AppError):
    def __init__(self) -> None:
        super().__init__(1007, "Cannot delete your own account", 422)


class UserHasSettledBetsError(AppError):
    def __init__(self, user_id: str) -> None:
        super().__init__(1008, f"User has bets in a settled phase: {user_id}", 409)


# --- 2xxx: Phase ---

class PhaseNotFoundError(AppError):
    def __init__(self, phase_id: str) -> None:
        super().__init__(2001, f"Phase not found: {phase_id}", 404)


class PhaseNotActiveError(AppError):
    def __init__(self, phase_id: str) -> None:
        super().__init__(2002, f"Phase is not active: {phase_id}", 422)


class PhaseSettledError(AppError):
    def __init__(self, phase_id: str) -> None:
        super().__init__(2003, f"Phase is already settled: {phase_id}", 409)


class PhaseNameExistsError(AppError):
    def __init__(self, name: str) -> None:
        super().__init__(2004, f"Phase name already exists: {name}", 409)


class PhaseNotSettledError(AppError):
    def __init__(self, phase_id: str) -> None:
        super().__init__(2005, f"Phase has no settlement: {phase_id}", 404)


# --- 3xxx: Bet ---

class BetNotFoundError(AppError):
    def __init__(self, bet_id: str) -> None:
        super().__init__(3001, f"Bet not found: {bet_id}", 404)


class InvalidBetNumberError(AppError):
    def __init__(self, number: str) -> None:
        super().__init__(3002, f"Invalid bet number: {number}", 422)


class ZeroAmountError(AppError):
    def __init__(self, number: str) -> None:
        super().__init__(3003, f"Amount must be non-zero for number {number}", 422)


class NoValidEntriesError(AppError):
    def __init__(self) -> None:
        super().__init__(3004, "No valid entries found", 422)


class ReservedCodeForbiddenError(AppError):
    def __init__(self, code: str) -> None:
        super().__init__(3005, f"Only admins may submit {code} adjustments", 403)


# --- 4xxx: Risk/Limits ---

class InvalidLimitError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(4001, f"Invalid limit: {detail}", 422)


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self) -> None:
        super().__init__(9001, "Rate limit exceeded", 429)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
