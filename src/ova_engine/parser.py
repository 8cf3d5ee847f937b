"""Bet notation parser: free-form operator text -> ParsedBetEntry list.

Supported notations (per line, any number per line):
  123R1000-10000   compound: 123 @ 10000, other permutations @ 1000
  123-10000R1000   compound: 123 @ 10000, other permutations @ 1000
  123R1000 / 123@1000   every permutation (123 included) @ 1000
  123-1000, 123=1000, 123 1000, 123/1000 ...   123 @ 1000

Matchers run in the order above. Each accepted match claims its character
span on the line; a later matcher never reports a match overlapping a claimed
span, so a compound notation is not picked up again by the standard rule.
Parsing is best-effort: unmatched text is skipped, nothing is raised.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass

from src.ova_engine.models import ParsedBetEntry
from src.ova_engine.permutations import other_permutations, permutations

# Exactly three digits not glued to a preceding letter or digit.
_NUMBER = r"(?<![0-9A-Za-z])(\d{3})"
# 2-7 digit amount not followed by another digit.
_AMOUNT = r"(\d{2,7})"
_AMOUNT_END = r"(?!\d)"
_COMPOUND_SEP = r"\s*[-=@*]\s*"

_REVERSE_FIRST_RE = re.compile(
    _NUMBER + r"\s*[Rr]\s*" + _AMOUNT + _COMPOUND_SEP + _AMOUNT + _AMOUNT_END
)
_DIRECT_FIRST_RE = re.compile(
    _NUMBER + _COMPOUND_SEP + _AMOUNT + r"\s*[Rr]\s*" + _AMOUNT + _AMOUNT_END
)
_STANDARD_RE = re.compile(
    _NUMBER + r"\s*(?:([Rr@])\s*[-=*.,/]?|[-=*.,/\s])\s*" + _AMOUNT + _AMOUNT_END
)


def _compound(number: str, direct: int, others: int, original: str) -> list[ParsedBetEntry]:
    entries = [ParsedBetEntry(number, direct, original, is_permutation=False)]
    entries.extend(
        ParsedBetEntry(p, others, original, is_permutation=True)
        for p in sorted(other_permutations(number))
    )
    return entries


def _expand_reverse_first(m: re.Match[str]) -> list[ParsedBetEntry]:
    number, reverse_amount, direct_amount = m.group(1), int(m.group(2)), int(m.group(3))
    return _compound(number, direct_amount, reverse_amount, m.group(0))


def _expand_direct_first(m: re.Match[str]) -> list[ParsedBetEntry]:
    number, direct_amount, reverse_amount = m.group(1), int(m.group(2)), int(m.group(3))
    return _compound(number, direct_amount, reverse_amount, m.group(0))


def _expand_standard(m: re.Match[str]) -> list[ParsedBetEntry]:
    number, marker, amount = m.group(1), m.group(2), int(m.group(3))
    original = m.group(0)
    if marker:
        return [
            ParsedBetEntry(p, amount, original, is_permutation=True)
            for p in sorted(permutations(number))
        ]
    return [ParsedBetEntry(number, amount, original, is_permutation=False)]


@dataclass
class _Matcher:
    name: str
    pattern: re.Pattern[str]
    expand: Callable[[re.Match[str]], list[ParsedBetEntry]]


# Most specific first.
_MATCHERS: tuple[_Matcher, ...] = (
    _Matcher("compound_reverse_first", _REVERSE_FIRST_RE, _expand_reverse_first),
    _Matcher("compound_direct_first", _DIRECT_FIRST_RE, _expand_direct_first),
    _Matcher("standard", _STANDARD_RE, _expand_standard),
)


class ClaimedSpans:
    """Half-open [start, end) character ranges already consumed on one line."""

    def __init__(self) -> None:
        self._spans: list[tuple[int, int]] = []

    def overlaps(self, start: int, end: int) -> bool:
        return any(s < end and start < e for s, e in self._spans)

    def claim(self, start: int, end: int) -> None:
        self._spans.append((start, end))

    def __len__(self) -> int:
        return len(self._spans)


def _scan(pattern: re.Pattern[str], line: str, claimed: ClaimedSpans) -> list[re.Match[str]]:
    """Left-to-right non-overlapping matches that avoid claimed spans.

    A match that overlaps a claimed span is dropped and the search resumes one
    character after its start, so a valid notation right after a compound one
    is still found.
    """
    found: list[re.Match[str]] = []
    pos = 0
    while pos <= len(line):
        m = pattern.search(line, pos)
        if m is None:
            break
        if claimed.overlaps(m.start(), m.end()):
            pos = m.start() + 1
            continue
        claimed.claim(m.start(), m.end())
        found.append(m)
        pos = m.end()
    return found


def parse_line(line: str) -> list[ParsedBetEntry]:
    """Parse a single line; entries come out in source order."""
    claimed = ClaimedSpans()
    located: list[tuple[int, list[ParsedBetEntry]]] = []
    for matcher in _MATCHERS:
        for m in _scan(matcher.pattern, line, claimed):
            located.append((m.start(), matcher.expand(m)))
    located.sort(key=lambda item: item[0])
    return [entry for _, entries in located for entry in entries]


def parse_bulk_input(text: str) -> list[ParsedBetEntry]:
    """Parse multi-line operator text.

    Lines are parsed independently so a separator can never span a line break.
    """
    bets: list[ParsedBetEntry] = []
    for line in text.splitlines():
        bets.extend(parse_line(line))
    return bets


def group_by_original(entries: list[ParsedBetEntry]) -> list[tuple[str, int, int]]:
    """(original, entry_count, total_stake) per notation, first-seen order."""
    groups: dict[str, list[int]] = {}
    for e in entries:
        counts = groups.setdefault(e.original, [0, 0])
        counts[0] += 1
        counts[1] += e.amount
    return [(original, c[0], c[1]) for original, c in groups.items()]
