"""
Parser for plain-text decklists.

Format:
    <quantity> <card name>

Example:
    4 Tipo - Growing Son
    4 Hades - Infernal Schemer
    2x Be Prepared

Lines that don't match are skipped silently; the recognized/unrecognized
totals reported downstream are how gaps reach the caller.
"""

import re
from dataclasses import dataclass, field

from lorelens.models.deck import DecklistEntry
from lorelens.parsers.normalize import normalize_name

# Pattern: "4 Tipo - Growing Son" or "4x Tipo - Growing Son"
# Groups: (quantity, card_name)
DECKLIST_LINE_PATTERN = re.compile(r"^(\d+)[x×]?\s+(.+)$", re.IGNORECASE)


@dataclass
class DecklistParseReport:
    """Parsed entries plus the lines that were skipped."""

    entries: list[DecklistEntry] = field(default_factory=list)
    skipped_lines: list[tuple[int, str]] = field(default_factory=list)  # (line_number, content)


def parse_decklist_report(text: str | None) -> DecklistParseReport:
    """
    Parse decklist text, keeping track of lines that could not be used.

    Args:
        text: Raw decklist text (clipboard paste)

    Returns:
        DecklistParseReport. Empty if input is empty/whitespace.
    """
    report = DecklistParseReport()
    if not text or not text.strip():
        return report

    for line_num, line in enumerate(text.splitlines(), 1):
        line = line.replace("\u00a0", " ").strip()

        # Skip empty lines
        if not line:
            continue

        match = DECKLIST_LINE_PATTERN.match(line)
        if match is None:
            report.skipped_lines.append((line_num, line))
            continue

        quantity_str, name = match.groups()
        quantity = int(quantity_str)
        name = name.strip()

        # Quantity must be positive
        if quantity <= 0 or not name:
            report.skipped_lines.append((line_num, line))
            continue

        report.entries.append(
            DecklistEntry(
                quantity=quantity,
                raw_name=name,
                normalized_name=normalize_name(name),
                line_number=line_num,
            )
        )

    return report


def parse_decklist(text: str | None) -> list[DecklistEntry]:
    """
    Parse decklist text into entries.

    Does NOT deduplicate - repeated lines for the same card are kept and
    summed later by the vectorizer.

    Args:
        text: Raw decklist text

    Returns:
        One DecklistEntry per valid line, in input order
    """
    return parse_decklist_report(text).entries
