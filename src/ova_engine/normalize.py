"""Pre-parse normalisation for scanned (OCR) and dictated (voice) text."""

import re

_OCR_SUBSTITUTIONS = (
    (re.compile(r"[Il]"), "1"),
    (re.compile(r"[oO]"), "0"),
    (re.compile(r"[sS]"), "5"),
    (re.compile(r"[bB]"), "8"),
)
_OCR_DISALLOWED = re.compile(r"[^0-9Rr\s@=*.,/\-]")
_HORIZONTAL_WS = re.compile(r"[^\S\n]+")

_SPOKEN_DIGITS = {
    "zero": "0", "one": "1", "two": "2", "three": "3", "four": "4",
    "five": "5", "six": "6", "seven": "7", "eight": "8", "nine": "9",
    "hundred": "00", "thousand": "000",
}
_SPOKEN_RE = re.compile("|".join(_SPOKEN_DIGITS))


def clean_ocr_text(text: str) -> str:
    """Fix common OCR confusions (I/l->1, O->0, S->5, B->8) and drop noise.

    Line breaks survive so each scanned line is still parsed on its own.
    """
    for pattern, replacement in _OCR_SUBSTITUTIONS:
        text = pattern.sub(replacement, text)
    text = _OCR_DISALLOWED.sub("", text)
    lines = (_HORIZONTAL_WS.sub(" ", line).strip() for line in text.splitlines())
    return "\n".join(line for line in lines if line)


def voice_to_format(text: str) -> str:
    """'one two three one thousand' -> '123R1000' (one utterance per line)."""
    out: list[str] = []
    for line in text.lower().splitlines():
        digits = _SPOKEN_RE.sub(lambda m: _SPOKEN_DIGITS[m.group(0)], line)
        digits = re.sub(r"\s+", "", digits)
        if digits:
            out.append(re.sub(r"(\d{3})(\d+)", r"\1R\2", digits, count=1))
    return "\n".join(out)
