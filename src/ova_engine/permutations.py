"""Digit permutations of a 3-digit number."""

import itertools

from src.ova_engine.slots import NUMBER_WIDTH, MalformedNumberError


def _check_width(number: str) -> None:
    if len(number) != NUMBER_WIDTH:
        raise MalformedNumberError(f"expected {NUMBER_WIDTH} characters, got {number!r}")


def permutations(number: str) -> set[str]:
    """Distinct permutations of *number*, itself included.

    '111' -> 1 element, '112' -> 3, '123' -> 6.
    """
    _check_width(number)
    return {"".join(p) for p in itertools.permutations(number)}


def other_permutations(number: str) -> set[str]:
    """Distinct permutations excluding *number* itself."""
    return permutations(number) - {number}

