"""Number slots: the 000–999 board plus the two reserved ledger codes.

A bet's ``number`` column is a string. Inside the engine it is resolved once to
a ``NumberSlot`` so aggregation dispatches on ``kind`` instead of comparing
against "ADJ"/"EXC" all over the place.
"""

import re
from dataclasses import dataclass
from enum import Enum

from src.ova_common.enums import ReservedCode

SLOT_COUNT = 1000
NUMBER_WIDTH = 3

_DIRECT_RE = re.compile(r"^\d{3}$")
_SHORT_RE = re.compile(r"^\d{2,3}$")


class MalformedNumberError(ValueError):
    """A value that must be a 3-digit number (or reserved code) is not.

    Raised only for programmer errors: request schemas validate user input
    before it reaches the engine.
    """


class SlotKind(str, Enum):
    DIRECT = "DIRECT"
    MANUAL_ADJUSTMENT = "MANUAL_ADJUSTMENT"
    EXCESS_ADJUSTMENT = "EXCESS_ADJUSTMENT"


@dataclass(frozen=True)
class NumberSlot:
    kind: SlotKind
    index: int | None = None  # 0..999 for DIRECT, None otherwise

    @classmethod
    def parse(cls, code: str) -> "NumberSlot":
        """Resolve a stored number string. Raises MalformedNumberError."""
        if code == ReservedCode.ADJ.value:
            return MANUAL_ADJUSTMENT
        if code == ReservedCode.EXC.value:
            return EXCESS_ADJUSTMENT
        if not _DIRECT_RE.match(code):
            raise MalformedNumberError(f"not a 3-digit number or reserved code: {code!r}")
        return cls(SlotKind.DIRECT, int(code))

    @property
    def code(self) -> str:
        if self.kind is SlotKind.MANUAL_ADJUSTMENT:
            return ReservedCode.ADJ.value
        if self.kind is SlotKind.EXCESS_ADJUSTMENT:
            return ReservedCode.EXC.value
        return format_number(self.index)  # type: ignore[arg-type]

    @property
    def is_direct(self) -> bool:
        return self.kind is SlotKind.DIRECT


MANUAL_ADJUSTMENT = NumberSlot(SlotKind.MANUAL_ADJUSTMENT)
EXCESS_ADJUSTMENT = NumberSlot(SlotKind.EXCESS_ADJUSTMENT)


def format_number(index: int) -> str:
    """7 -> '007'."""
    return f"{index:0{NUMBER_WIDTH}d}"


def normalize_number(raw: str) -> str:
    """Submission-layer normalisation: zero-pad 2-digit input, keep reserved codes.

    '23' -> '023', '123' -> '123', 'ADJ' -> 'ADJ'.
    """
    value = raw.strip().upper()
    if value in (ReservedCode.ADJ.value, ReservedCode.EXC.value):
        return value
    if not _SHORT_RE.match(value):
        raise MalformedNumberError(f"expected 2-3 digits or ADJ/EXC, got {raw!r}")
    return value.zfill(NUMBER_WIDTH)


def is_reserved(code: str) -> bool:
    return code in (ReservedCode.ADJ.value, ReservedCode.EXC.value)
