"""
Card name normalization.

normalize_name() is the join key for every lookup: catalog aliases,
decklist lines and corpus card lines all pass through it, so it must be
applied the same way everywhere a name becomes a key.

Example:
    "Tinker Bell – Giant Fairy" -> "tinker bell giant fairy"
    "Maui's Fish Hook" -> "mauis fish hook"
"""

import re
import unicodedata

_APOSTROPHES = re.compile(r"['’‘`ʼ]")
_DASHES = re.compile(r"[-‐‑‒–—―]")
_NON_KEY_CHARS = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_name(text: str | None) -> str:
    """
    Convert a card name to its lookup key.

    Never fails: None or empty input yields an empty string.
    The result only contains [a-z0-9] and single spaces.
    """
    if not text:
        return ""

    value = str(text).replace("\u00a0", " ")
    value = unicodedata.normalize("NFD", value)
    value = "".join(ch for ch in value if not unicodedata.combining(ch))
    value = value.lower()
    value = _APOSTROPHES.sub("", value)
    value = _DASHES.sub(" ", value)
    value = _NON_KEY_CHARS.sub("", value)
    return _WHITESPACE.sub(" ", value).strip()


def tokenize(key: str) -> list[str]:
    """Split a normalized key into tokens."""
    return [token for token in key.split(" ") if token]
