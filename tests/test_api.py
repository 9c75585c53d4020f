"""Tests for the HTTP API."""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from lorelens.main import app
from lorelens.models.deck import MetaCorpus
from lorelens.models.snapshot import Snapshot
from lorelens.services.card_database import get_catalog_snapshot
from lorelens.services.card_index import CardIndex
from lorelens.services.meta_corpus import get_corpus_snapshot

DECKLIST = "4 Tipo - Growing Son\n4 Hades - Infernal Schemer\n4 Tinker Bell - Giant Fairy"
# Mickey Mouse appears in no deck similar to this one
OFF_META_DECKLIST = (
    "4 Tipo - Growing Son\n4 Tinker Bell - Giant Fairy\n3 Mickey Mouse - Brave Little Tailor"
)


@pytest.fixture
def catalog_snapshot(sample_index: CardIndex) -> Snapshot[CardIndex]:
    return Snapshot(value=sample_index, version="catalog-v1", source="test")


@pytest.fixture
def corpus_snapshot(sample_corpus: MetaCorpus) -> Snapshot[MetaCorpus]:
    return Snapshot(value=sample_corpus, version="corpus-v1", source="test")


async def make_client(
    catalog: Snapshot[CardIndex], corpus: Snapshot[MetaCorpus]
) -> AsyncGenerator[AsyncClient, None]:
    app.dependency_overrides[get_catalog_snapshot] = lambda: catalog
    app.dependency_overrides[get_corpus_snapshot] = lambda: corpus

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def client(
    catalog_snapshot: Snapshot[CardIndex], corpus_snapshot: Snapshot[MetaCorpus]
) -> AsyncGenerator[AsyncClient, None]:
    """Client with the sample catalog and corpus loaded."""
    async for c in make_client(catalog_snapshot, corpus_snapshot):
        yield c


@pytest.fixture
async def empty_client() -> AsyncGenerator[AsyncClient, None]:
    """Client whose reference data failed to load."""
    catalog = Snapshot(
        value=CardIndex.unavailable("missing"), version="unavailable", available=False, note="missing"
    )
    corpus = Snapshot(value=MetaCorpus(), version="unavailable", available=False, note="missing")
    async for c in make_client(catalog, corpus):
        yield c


def test_app_imports() -> None:
    """Verify the app can be imported without errors."""
    assert app.title == "LoreLens"


class TestHealth:
    async def test_health(self, client: AsyncClient) -> None:
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_ready(self, client: AsyncClient) -> None:
        response = await client.get("/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["catalog"] == "loaded"
        assert data["catalog_cards"] == 8
        assert data["corpus_decks"] == 4

    async def test_not_ready_without_catalog(self, empty_client: AsyncClient) -> None:
        response = await empty_client.get("/ready")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "not ready"
        assert data["catalog"] == "unavailable"
        assert data["corpus"] == "unavailable"


class TestResolveCards:
    async def test_exact_and_fuzzy(self, client: AsyncClient) -> None:
        response = await client.post(
            "/cards/resolve", json={"names": ["Tipo - Growing Son", "Tinkerbell - Giant Fary"]}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["catalog_available"] is True
        assert data["catalog_version"] == "catalog-v1"

        exact, fuzzy = data["results"]
        assert exact["exact"] is True
        assert exact["best"]["card_id"] == "TFC-108"
        assert exact["best"]["score"] == 1.0

        assert fuzzy["exact"] is False
        assert fuzzy["normalized"] == "tinkerbell giant fary"
        assert fuzzy["best"]["name"] == "Tinker Bell - Giant Fairy"
        assert fuzzy["best"]["score"] > 0.82

    async def test_limit(self, client: AsyncClient) -> None:
        response = await client.post(
            "/cards/resolve", json={"names": ["Tinker Bel"], "limit": 1, "min_score": 0.0}
        )

        assert response.status_code == 200
        assert len(response.json()["results"][0]["candidates"]) == 1

    async def test_no_names(self, client: AsyncClient) -> None:
        response = await client.post("/cards/resolve", json={"names": []})
        assert response.status_code == 422

    async def test_unavailable_catalog(self, empty_client: AsyncClient) -> None:
        response = await empty_client.post("/cards/resolve", json={"names": ["Tipo"]})

        assert response.status_code == 200
        data = response.json()
        assert data["catalog_available"] is False
        assert data["results"][0]["candidates"] == []
        assert data["results"][0]["best"] is None


class TestAnalyzeDeck:
    async def test_recognized_deck(self, client: AsyncClient) -> None:
        response = await client.post("/decks/analyze", json={"decklist": DECKLIST})

        assert response.status_code == 200
        data = response.json()
        assert data["totals"] == {"total_cards": 12, "recognized_qty": 12, "unrecognized_qty": 0}
        assert [c["status"] for c in data["cards"]] == ["recognized"] * 3
        assert data["unknown_cards"] == []
        assert data["curve_counts"]["6"] == 4
        assert data["inks"] == ["Amethyst", "Steel"]

    async def test_unknown_card_suggestions(self, client: AsyncClient) -> None:
        response = await client.post(
            "/decks/analyze", json={"decklist": "4 Tinkerbell - Giant Fary\nSideboard"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["totals"]["unrecognized_qty"] == 4
        unknown = data["unknown_cards"][0]
        assert unknown["name"] == "Tinkerbell - Giant Fary"
        assert unknown["resolution"]["best"]["name"] == "Tinker Bell - Giant Fairy"
        assert data["skipped_lines"] == [{"line_number": 2, "content": "Sideboard"}]

    async def test_suggestions_disabled(self, client: AsyncClient) -> None:
        response = await client.post(
            "/decks/analyze", json={"decklist": "4 Tinkerbell - Giant Fary", "suggest": False}
        )

        assert response.status_code == 200
        assert response.json()["unknown_cards"][0]["resolution"] is None

    async def test_empty_decklist(self, client: AsyncClient) -> None:
        response = await client.post("/decks/analyze", json={"decklist": ""})
        assert response.status_code == 422


class TestCompareMeta:
    async def test_compare(self, client: AsyncClient) -> None:
        response = await client.post(
            "/meta/compare", json={"decklist": DECKLIST, "same_format_only": False}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["considered"] == 4
        assert data["deck"]["recognized_qty"] == 12

        best = data["matches"][0]
        assert best["similarity"] == 100.0
        assert best["placement"] == "Winner"
        assert best["finish"] == 1
        assert best["url"] == "https://example.com/decks/1"

        similarities = [m["similarity"] for m in data["matches"]]
        assert similarities == sorted(similarities, reverse=True)

        aggregate = data["aggregate"]
        assert aggregate["count"] == 4
        assert aggregate["best_finish"] == 1
        # Finishes 1, 8, 2; "Participant" is unparsed
        assert aggregate["average_finish"] == pytest.approx(3.67)
        assert aggregate["top_cut_rate"] == 100.0

    async def test_format_filter(self, client: AsyncClient) -> None:
        response = await client.post("/meta/compare", json={"decklist": DECKLIST, "format": "core"})

        assert response.status_code == 200
        data = response.json()
        # Two Core decks plus the deck without a format
        assert data["considered"] == 3
        assert all(m["format"] in ("Core", None) for m in data["matches"])

    async def test_similarity_floor(self, client: AsyncClient) -> None:
        response = await client.post(
            "/meta/compare",
            json={"decklist": DECKLIST, "same_format_only": False, "min_similarity": 90},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["floor_applied"] is True
        assert len(data["matches"]) == 1
        # The floor narrows matches, not the aggregate
        assert data["aggregate"]["count"] == 4

    async def test_top_k(self, client: AsyncClient) -> None:
        response = await client.post(
            "/meta/compare", json={"decklist": DECKLIST, "same_format_only": False, "top_k": 2}
        )

        data = response.json()
        assert len(data["matches"]) == 2
        assert data["aggregate"]["count"] == 4

    async def test_no_card_lines(self, client: AsyncClient) -> None:
        response = await client.post(
            "/meta/compare", json={"decklist": "just some words", "same_format_only": False}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["deck"]["total_cards"] == 0
        assert data["considered"] == 4
        assert all(m["similarity"] == 0.0 for m in data["matches"])
        assert data["adds"] == []
        assert data["cuts"] == []

    async def test_cuts_unplayed_card(self, client: AsyncClient) -> None:
        response = await client.post(
            "/meta/compare", json={"decklist": OFF_META_DECKLIST, "same_format_only": False}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["adds"] == []
        assert data["cuts"] == [
            {
                "name": "Mickey Mouse - Brave Little Tailor",
                "presence": 0,
                "average_qty": 0.0,
                "your_qty": 3,
                "suggested_cut": 3,
                "priority": "High",
            }
        ]

    async def test_suggestions_disabled(self, client: AsyncClient) -> None:
        response = await client.post(
            "/meta/compare",
            json={
                "decklist": OFF_META_DECKLIST,
                "same_format_only": False,
                "suggest": False,
            },
        )

        assert response.status_code == 200
        assert response.json()["cuts"] == []

    async def test_invalid_similarity(self, client: AsyncClient) -> None:
        response = await client.post(
            "/meta/compare", json={"decklist": DECKLIST, "min_similarity": 150}
        )
        assert response.status_code == 422

    async def test_unavailable_corpus(self, empty_client: AsyncClient) -> None:
        response = await empty_client.post("/meta/compare", json={"decklist": DECKLIST})

        assert response.status_code == 200
        data = response.json()
        assert data["corpus_available"] is False
        assert data["matches"] == []
        assert data["aggregate"]["count"] == 0
        assert data["aggregate"]["best_finish"] is None


class TestMetaStats:
    async def test_stats(self, client: AsyncClient) -> None:
        response = await client.get("/meta/stats")

        assert response.status_code == 200
        data = response.json()
        assert data["available"] is True
        assert data["version"] == "corpus-v1"
        assert data["source"] == "test"
        assert data["total_decks"] == 4
        assert data["formats"] == {"Core": 2, "Infinity": 1, "Unknown": 1}

    async def test_stats_unavailable(self, empty_client: AsyncClient) -> None:
        response = await empty_client.get("/meta/stats")

        assert response.status_code == 200
        data = response.json()
        assert data["available"] is False
        assert data["total_decks"] == 0
