"""Unit tests for number slots and submission-layer number normalisation."""

import pytest

from src.ova_engine.slots import (
    EXCESS_ADJUSTMENT,
    MANUAL_ADJUSTMENT,
    MalformedNumberError,
    NumberSlot,
    SlotKind,
    format_number,
    is_reserved,
    normalize_number,
)


class TestNumberSlot:
    def test_parse_direct(self) -> None:
        slot = NumberSlot.parse("042")
        assert slot.kind is SlotKind.DIRECT
        assert slot.index == 42
        assert slot.code == "042"

    def test_parse_reserved(self) -> None:
        assert NumberSlot.parse("ADJ") is MANUAL_ADJUSTMENT
        assert NumberSlot.parse("EXC") is EXCESS_ADJUSTMENT
        assert not MANUAL_ADJUSTMENT.is_direct
        assert EXCESS_ADJUSTMENT.code == "EXC"

    @pytest.mark.parametrize("code", ["42", "1234", "abc", "", "adj"])
    def test_parse_rejects_malformed(self, code: str) -> None:
        with pytest.raises(MalformedNumberError):
            NumberSlot.parse(code)


class TestNormalizeNumber:
    @pytest.mark.parametrize(
        "raw, expected",
        [("23", "023"), ("123", "123"), ("00", "000"), ("ADJ", "ADJ"), (" exc ", "EXC")],
    )
    def test_normalizes(self, raw: str, expected: str) -> None:
        assert normalize_number(raw) == expected

    @pytest.mark.parametrize("raw", ["1", "1234", "12a", "ABC"])
    def test_rejects(self, raw: str) -> None:
        with pytest.raises(MalformedNumberError):
            normalize_number(raw)


def test_format_number_zero_pads() -> None:
    assert format_number(7) == "007"
    assert format_number(999) == "999"


def test_is_reserved() -> None:
    assert is_reserved("ADJ") and is_reserved("EXC")
    assert not is_reserved("123")
