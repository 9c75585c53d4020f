"""
Placement label parser.

Tournament sources publish finishes in several shapes:
    "Top 8", "TOP8", "2nd", "#12", "12", "Winner"

parse_finish() maps them to a numeric finish (lower is better).
"""

import re

NAMED_FINISHES: dict[str, int] = {
    "winner": 1,
    "champion": 1,
    "first": 1,
    "finalist": 2,
    "runner-up": 2,
    "runner up": 2,
    "runnerup": 2,
    "semifinalist": 4,
    "semi-finalist": 4,
    "quarterfinalist": 8,
    "quarter-finalist": 8,
}

_TOP_PATTERN = re.compile(r"^top\s*(\d+)$")
_RANK_PATTERN = re.compile(r"^#?\s*(\d+)\s*(?:st|nd|rd|th)?(?:\s+place)?$")
_WHITESPACE = re.compile(r"\s+")


def parse_finish(label: str | int | None) -> int | None:
    """
    Parse a placement label into a finish number.

    Args:
        label: Raw label from the source, or an already numeric finish

    Returns:
        Positive finish number, or None if the label is not understood
    """
    if label is None or isinstance(label, bool):
        return None

    if isinstance(label, int):
        return label if label > 0 else None

    if isinstance(label, float):
        return int(label) if label.is_integer() and label > 0 else None

    text = _WHITESPACE.sub(" ", str(label)).strip().lower()
    if not text:
        return None

    if text in NAMED_FINISHES:
        return NAMED_FINISHES[text]

    match = _TOP_PATTERN.match(text) or _RANK_PATTERN.match(text)
    if match is None:
        return None

    finish = int(match.group(1))
    return finish if finish > 0 else None


def is_top_cut(finish: int | None, cut: int = 8) -> bool:
    """True if the finish made the given cut."""
    return finish is not None and finish <= cut
