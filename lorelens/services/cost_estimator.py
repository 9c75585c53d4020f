"""
Best-effort ink cost estimation.

Some catalog snapshots lack costs for a handful of cards. The deck
analyzer still wants a complete curve, so it asks an estimator. Estimates
never feed name resolution or meta similarity.
"""

from typing import Protocol

from lorelens.parsers.normalize import normalize_name

DEFAULT_ESTIMATED_COST = 3

# (name fragment, cost), first match wins
KEYWORD_COSTS: tuple[tuple[str, int], ...] = (
    # Early game
    ("tipo", 1),
    ("olaf", 1),
    ("captain hook", 1),
    # Mid game
    ("hades", 4),
    ("goliath", 4),
    ("namaari", 4),
    ("mulan", 3),
    ("vincenzo", 3),
    ("jasmine", 3),
    # Ramp / draw
    ("sail", 2),
    ("vision", 2),
    ("develop", 2),
    ("beyond the horizon", 2),
    # Removal
    ("he hurled", 3),
    ("spooky", 3),
    # Late game
    ("tinker bell", 6),
    ("cinderella", 6),
    ("pluto", 5),
    ("arthur", 5),
)


class CostEstimator(Protocol):
    """Guesses an ink cost from a card name."""

    def estimate_cost(self, name: str) -> int: ...


class KeywordCostEstimator:
    """Cost lookup by name fragment, with a mid-range default."""

    def __init__(
        self,
        table: tuple[tuple[str, int], ...] = KEYWORD_COSTS,
        default: int = DEFAULT_ESTIMATED_COST,
    ):
        self.table = table
        self.default = default

    def estimate_cost(self, name: str) -> int:
        key = normalize_name(name)
        for fragment, cost in self.table:
            if fragment in key:
                return cost
        return self.default


def estimate_cost(name: str) -> int:
    """Estimate with the default keyword table."""
    return KeywordCostEstimator().estimate_cost(name)
