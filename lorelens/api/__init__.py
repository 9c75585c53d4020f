from lorelens.api.cards import router as cards_router
from lorelens.api.decks import router as decks_router
from lorelens.api.health import router as health_router
from lorelens.api.meta import router as meta_router

__all__ = [
    "cards_router",
    "decks_router",
    "health_router",
    "meta_router",
]
