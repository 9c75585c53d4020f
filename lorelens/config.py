from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

DATA_DIR = Path(__file__).parent / "data"


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "LoreLens"
    debug: bool = False

    # Snapshot sources, reloaded when the file changes on disk
    catalog_path: Path = DATA_DIR / "cards.json"
    corpus_path: Path = DATA_DIR / "tournament_meta.json"

    catalog_url: str = "https://raw.githubusercontent.com/LorcanaJSON/lorcana-json/main/cards/en/cards.json"

    # Prefer the newest set when two printings normalize to the same key
    prefer_newer_sets: bool = False

    # Fuzzy resolution
    fuzzy_limit: int = 8
    fuzzy_min_score: float = 0.45
    commit_score: float = 0.82
    commit_floor: float = 0.75
    commit_gap: float = 0.08
    levenshtein_weight: float = 0.6
    token_weight: float = 0.4
    fuzzy_tokens: bool = True

    # Meta comparison
    compare_top_k: int = 10
    max_corpus_size: int = 5000
    top_cut: int = 8


settings = Settings()


# =============================================================================
# RESOLVER DEFAULTS
# =============================================================================

DEFAULT_CANDIDATE_LIMIT = 8
DEFAULT_MIN_SCORE = 0.45

# Commit a best guess at or above this score
DEFAULT_COMMIT_SCORE = 0.82

# ... or at or above the floor when the runner-up trails by the gap
DEFAULT_COMMIT_FLOOR = 0.75
DEFAULT_COMMIT_GAP = 0.08

DEFAULT_LEVENSHTEIN_WEIGHT = 0.6
DEFAULT_TOKEN_WEIGHT = 0.4

PREFIX_BONUS = 0.05
CONTAINS_BONUS = 0.05
SUBTITLE_BONUS = 0.02


# =============================================================================
# META COMPARISON DEFAULTS
# =============================================================================

DEFAULT_TOP_K = 10

# Finishes at or better than this count as a top cut
DEFAULT_TOP_CUT = 8
