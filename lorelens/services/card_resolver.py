"""
Card Name Resolution Service.

Resolves a written card name to catalog cards, tolerating typos, spacing
mistakes and subtitle formatting ("Tinkerbell - Giant Fary").

INVARIANTS:
1. An exact normalized match always wins with score 1.0
2. Fuzzy candidates are REPORTED, never applied to the deck
3. A best guess is only committed above the confidence policy; ambiguous
   names come back with best=None and the candidate list intact
4. A missing or empty catalog yields no candidates, not an error
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from rapidfuzz import process
from rapidfuzz.distance import Levenshtein

from lorelens.config import (
    CONTAINS_BONUS,
    DEFAULT_CANDIDATE_LIMIT,
    DEFAULT_COMMIT_FLOOR,
    DEFAULT_COMMIT_GAP,
    DEFAULT_COMMIT_SCORE,
    DEFAULT_LEVENSHTEIN_WEIGHT,
    DEFAULT_MIN_SCORE,
    DEFAULT_TOKEN_WEIGHT,
    PREFIX_BONUS,
    SUBTITLE_BONUS,
    Settings,
)
from lorelens.models.card import CatalogCard
from lorelens.parsers.normalize import normalize_name, tokenize
from lorelens.services.card_index import CardIndex

logger = logging.getLogger(__name__)

# Tokens at least this long may match with a typo
TOKEN_MATCH_MIN_LENGTH = 4
TOKEN_MATCH_MIN_RATIO = 0.8

# Float slack for threshold comparisons
EPSILON = 1e-9

_SUBTITLE_DASHES = frozenset("-‐‑‒–—―")


@dataclass(frozen=True)
class ResolverOptions:
    """
    Tunables for fuzzy resolution.

    The thresholds and weights are empirical; they are kept configurable
    rather than derived.
    """

    limit: int = DEFAULT_CANDIDATE_LIMIT
    min_score: float = DEFAULT_MIN_SCORE
    commit_score: float = DEFAULT_COMMIT_SCORE
    commit_floor: float = DEFAULT_COMMIT_FLOOR
    commit_gap: float = DEFAULT_COMMIT_GAP
    levenshtein_weight: float = DEFAULT_LEVENSHTEIN_WEIGHT
    token_weight: float = DEFAULT_TOKEN_WEIGHT
    prefix_bonus: float = PREFIX_BONUS
    contains_bonus: float = CONTAINS_BONUS
    subtitle_bonus: float = SUBTITLE_BONUS
    fuzzy_tokens: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> "ResolverOptions":
        return cls(
            limit=settings.fuzzy_limit,
            min_score=settings.fuzzy_min_score,
            commit_score=settings.commit_score,
            commit_floor=settings.commit_floor,
            commit_gap=settings.commit_gap,
            levenshtein_weight=settings.levenshtein_weight,
            token_weight=settings.token_weight,
            fuzzy_tokens=settings.fuzzy_tokens,
        )


@dataclass(frozen=True, slots=True)
class ScoredCandidate:
    """A catalog card scored against a written name."""

    card: CatalogCard
    score: float  # 0.0-1.0
    display_name: str


@dataclass
class NameResolution:
    """Result of resolving one written name."""

    input: str
    normalized_input: str
    candidates: list[ScoredCandidate] = field(default_factory=list)
    best: ScoredCandidate | None = None
    gap: float | None = None
    exact: bool = False

    @property
    def resolved(self) -> bool:
        """True if a card was committed (exactly or with high confidence)."""
        return self.best is not None


# =============================================================================
# STRING SIMILARITY
# =============================================================================


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance (insert, delete, replace)."""
    return Levenshtein.distance(a, b)


def levenshtein_ratio(a: str, b: str, score_cutoff: float | None = None) -> float:
    """
    1 - distance / longer length; 1.0 for two empty strings.

    Below score_cutoff the ratio is reported as 0.0.
    """
    return Levenshtein.normalized_similarity(a, b, score_cutoff=score_cutoff)


def jaccard_tokens(a_tokens: Iterable[str], b_tokens: Iterable[str]) -> float:
    """
    Set Jaccard over tokens.

    Both empty -> 1.0, exactly one empty -> 0.0.
    """
    a = set(a_tokens)
    b = set(b_tokens)
    if not a and not b:
        return 1.0
    if not a or not b:
        return 0.0
    shared = len(a & b)
    return shared / (len(a) + len(b) - shared)


def _merge_compounds(tokens: Sequence[str], targets: set[str]) -> list[str]:
    """Join adjacent tokens that spell a token of the other name ("tinker bell")."""
    merged: list[str] = []
    i = 0
    while i < len(tokens):
        if i + 1 < len(tokens):
            joined = tokens[i] + tokens[i + 1]
            if joined in targets and tokens[i] not in targets and tokens[i + 1] not in targets:
                merged.append(joined)
                i += 2
                continue
        merged.append(tokens[i])
        i += 1
    return merged


def token_overlap(a_tokens: Sequence[str], b_tokens: Sequence[str]) -> float:
    """
    Typo-tolerant token Jaccard.

    Like jaccard_tokens, but split/joined words are merged first and
    leftover tokens of TOKEN_MATCH_MIN_LENGTH+ characters count as shared
    when their Levenshtein ratio reaches TOKEN_MATCH_MIN_RATIO.
    """
    a_list = _merge_compounds(a_tokens, set(b_tokens))
    b_list = _merge_compounds(b_tokens, set(a_list))
    a = set(a_list)
    b = set(b_list)
    if not a and not b:
        return 1.0
    if not a or not b:
        return 0.0

    shared = a & b
    matched = len(shared)
    remaining_b = sorted(t for t in b - shared if len(t) >= TOKEN_MATCH_MIN_LENGTH)

    for token in sorted(a - shared):
        if len(token) < TOKEN_MATCH_MIN_LENGTH or not remaining_b:
            continue
        hit = process.extractOne(
            token,
            remaining_b,
            scorer=Levenshtein.normalized_similarity,
            score_cutoff=TOKEN_MATCH_MIN_RATIO - EPSILON,
        )
        if hit is not None:
            remaining_b.pop(hit[2])
            matched += 1

    return matched / (len(a) + len(b) - matched)


def score_name(
    input_key: str,
    input_tokens: Sequence[str],
    candidate_key: str,
    candidate_tokens: Sequence[str],
    raw_input: str,
    options: ResolverOptions | None = None,
) -> float:
    """
    Score a candidate display name against the written name.

    score = levenshtein_weight * levenshtein_ratio + token_weight * token similarity
            + prefix / containment / subtitle bonuses, clamped to [0, 1]
    """
    if options is None:
        options = ResolverOptions()

    if not candidate_key:
        return 0.0
    if candidate_key == input_key:
        return 1.0

    if options.fuzzy_tokens:
        tokens = token_overlap(input_tokens, candidate_tokens)
    else:
        tokens = jaccard_tokens(input_tokens, candidate_tokens)

    score = (
        options.levenshtein_weight * levenshtein_ratio(input_key, candidate_key)
        + options.token_weight * tokens
    )

    if candidate_key.startswith(input_key) or input_key.startswith(candidate_key):
        score += options.prefix_bonus
    if input_key in candidate_key or candidate_key in input_key:
        score += options.contains_bonus

    # A subtitle in the input favors composite "Name - Version" matches
    if any(ch in _SUBTITLE_DASHES for ch in raw_input):
        score += options.subtitle_bonus

    return min(1.0, max(0.0, score))


# =============================================================================
# RESOLUTION
# =============================================================================


def should_commit(top: float, runner_up: float | None, options: ResolverOptions | None = None) -> bool:
    """
    Confidence policy for committing a best guess.

    Commit when the top score is high on its own, or when it is reasonably
    high and clearly ahead of the runner-up.
    """
    if options is None:
        options = ResolverOptions()

    gap = top - runner_up if runner_up is not None else top
    if top >= options.commit_score - EPSILON:
        return True
    return top >= options.commit_floor - EPSILON and gap >= options.commit_gap - EPSILON


def resolve_name(
    raw_name: str | None,
    index: CardIndex,
    options: ResolverOptions | None = None,
) -> NameResolution:
    """
    Resolve a written card name against the catalog.

    Args:
        raw_name: Name as written in the decklist
        index: Catalog index snapshot
        options: Limits, thresholds and weights

    Returns:
        NameResolution with ranked candidates and an optional best guess
    """
    if options is None:
        options = ResolverOptions()

    raw = raw_name or ""
    input_key = normalize_name(raw)
    resolution = NameResolution(input=raw, normalized_input=input_key)

    if not input_key or index.is_empty:
        return resolution

    # Exact path
    hit = index.get_by_key(input_key)
    if hit is not None:
        candidate = ScoredCandidate(card=hit, score=1.0, display_name=hit.full_name)
        resolution.candidates = [candidate]
        resolution.best = candidate
        resolution.gap = 1.0
        resolution.exact = True
        return resolution

    # Fuzzy path
    input_tokens = tokenize(input_key)
    scored: list[ScoredCandidate] = []
    for entry in index.search_entries:
        score = score_name(input_key, input_tokens, entry.key, entry.tokens, raw, options)
        if score >= options.min_score:
            scored.append(ScoredCandidate(card=entry.card, score=score, display_name=entry.display_name))

    scored.sort(key=lambda c: (-c.score, c.display_name.casefold()))

    if not scored:
        return resolution

    top = scored[0]
    runner_up = scored[1].score if len(scored) > 1 else None
    resolution.candidates = scored[: max(1, options.limit)]
    resolution.gap = top.score - runner_up if runner_up is not None else top.score

    if should_commit(top.score, runner_up, options):
        resolution.best = top

    logger.debug(
        "Resolved %r: %d candidates, best=%s",
        raw,
        len(scored),
        resolution.best.display_name if resolution.best else None,
    )
    return resolution


def resolve_names(
    names: Iterable[str | None],
    index: CardIndex,
    options: ResolverOptions | None = None,
) -> list[NameResolution]:
    """Resolve a batch of names, skipping blank ones."""
    results: list[NameResolution] = []
    for name in names:
        if name is None or not str(name).strip():
            continue
        results.append(resolve_name(str(name).strip(), index, options))
    return results
