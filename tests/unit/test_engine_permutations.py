"""Unit tests for digit permutations."""

import pytest

from src.ova_engine.permutations import other_permutations, permutations
from src.ova_engine.slots import MalformedNumberError


class TestPermutations:
    def test_all_same_digits(self) -> None:
        assert permutations("111") == {"111"}

    def test_one_repeated_digit(self) -> None:
        assert permutations("112") == {"112", "121", "211"}

    def test_all_distinct_digits(self) -> None:
        assert permutations("123") == {"123", "132", "213", "231", "312", "321"}

    def test_includes_leading_zero_forms(self) -> None:
        assert permutations("007") == {"007", "070", "700"}

    @pytest.mark.parametrize("number", ["12", "1234", ""])
    def test_wrong_width_raises(self, number: str) -> None:
        with pytest.raises(MalformedNumberError):
            permutations(number)

    def test_malformed_number_is_a_value_error(self) -> None:
        with pytest.raises(ValueError):
            permutations("1")


class TestOtherPermutations:
    def test_excludes_the_number_itself(self) -> None:
        others = other_permutations("123")
        assert "123" not in others
        assert len(others) == 5

    def test_triple_has_no_others(self) -> None:
        assert other_permutations("555") == set()

