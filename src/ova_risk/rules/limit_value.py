from decimal import Decimal

from src.ova_common.amounts import to_amount
from src.ova_common.errors import InvalidLimitError
from src.ova_engine.slots import MalformedNumberError, is_reserved, normalize_number

MAX_LIMIT = Decimal("999999999999.99")


def check_limit_number(number: str) -> str:
    """Return the padded board number; ADJ/EXC and malformed input raise 4001."""
    try:
        normalized = normalize_number(number)
    except MalformedNumberError:
        raise InvalidLimitError(f"number {number!r} is not 00-999") from None
    if is_reserved(normalized):
        raise InvalidLimitError(f"{normalized} cannot carry a limit")
    return normalized


def check_limit_value(max_amount: Decimal | int) -> Decimal:
    """Raise InvalidLimitError(4001) unless 0 <= max_amount <= MAX_LIMIT. Zero is a real limit."""
    value = to_amount(max_amount)
    if not (0 <= value <= MAX_LIMIT):
        raise InvalidLimitError(f"max_amount {value} out of range [0, {MAX_LIMIT}]")
    return value
