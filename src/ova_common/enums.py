"""Global enums: must match DB CHECK constraints exactly."""

from enum import Enum


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    COLLECTOR = "COLLECTOR"


class PhaseStatus(str, Enum):
    """Derived from (active, settled, total_bets); not a stored column."""

    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SETTLED = "SETTLED"


class ReservedCode(str, Enum):
    """Non-numeric bet codes for manual ledger corrections."""

    ADJ = "ADJ"  # manual volume adjustment
    EXC = "EXC"  # manual excess-volume adjustment


class ExcessSort(str, Enum):
    EXCESS = "excess"  # top risk first
    NUMBER = "number"  # manifest order


class TextSource(str, Enum):
    """Where operator text came from; selects pre-parse normalisation."""

    TYPED = "typed"
    OCR = "ocr"
    VOICE = "voice"
