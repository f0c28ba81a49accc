# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-29
# Description: test_entity_search_service.py
# -----------------------------------------------------------------------------
import pytest

from search.LexicalScorer import LexicalScorer
from services.EntityIngestService import EntityIngestService
from services.EntitySearchService import EntitySearchService
from utility.errors import NotFoundError

from conftest import FakeEmbedder, make_entity, unit

HYDROGEN = make_entity(
    "nav-h2", "Hydrogen Refuelling", "Hydrogen Refuelling hubs for airports", keywords=["hydrogen", "refuelling"]
)
BATTERY = make_entity("nav-bat", "Battery Storage", "Battery Storage for ports", keywords=["battery"])
RAIL = make_entity("atlas-rail", "Rail Signalling", "Rail Signalling upgrade", domain="atlas", entity_type="challenge")
TWIN_A = make_entity("twin-a", "Twin", "Twin one")
TWIN_B = make_entity("twin-b", "Twin", "Twin two")

VECTORS = {
    HYDROGEN.embedding_text: unit(0.8, 0.6),
    BATTERY.embedding_text: unit(0.9, 0.4359),
    RAIL.embedding_text: unit(0.0, 0.0, 1.0),
    TWIN_A.embedding_text: unit(0.0, 0.0, 0.0, 1.0),
    TWIN_B.embedding_text: unit(0.0, 0.0, 0.0, 1.0),
    "hydrogen": unit(1.0),
    "twin": unit(0.0, 0.0, 0.0, 1.0),
}


@pytest.fixture
def embedder():
    return FakeEmbedder(vectors=VECTORS)


@pytest.fixture
def search(store, embedder):
    EntityIngestService(store=store, embedder=embedder, max_workers=2).embed_all(
        [HYDROGEN, BATTERY, RAIL, TWIN_A, TWIN_B]
    )
    embedder.calls.clear()
    return EntitySearchService(store=store, embedder=embedder, semantic_weight=0.6, lexical_weight=0.4)


def test_lexical_scorer_weights_name_keyword_and_text():
    scorer = LexicalScorer()
    assert scorer.score("hydrogen", "Hydrogen Refuelling", ["hydrogen"], "hydrogen hubs") == 1.0
    assert scorer.score("hydrogen", "Depot", [], "hydrogen hubs") == pytest.approx(1 / 6)
    # terms of two characters or fewer are ignored
    assert scorer.score("to ai", "AI to go", ["ai"], "ai") == 0.0


def test_hybrid_search_lifts_exact_terminology(search):
    results = search.hybrid_search("hydrogen")

    assert [r.entity_id for r in results[:2]] == ["nav-h2", "nav-bat"]
    top = results[0]
    assert top.lexical_score == 1.0
    assert top.score == pytest.approx(0.6 * top.semantic_score + 0.4)
    assert top.match_type == "hybrid"
    assert top.name == "Hydrogen Refuelling"


def test_semantic_search_ranks_by_cosine_only(search):
    results = search.semantic_search("hydrogen")
    assert results[0].entity_id == "nav-bat"
    assert results[0].semantic_score == pytest.approx(0.9, abs=1e-3)


def test_results_are_sorted_and_above_threshold(search):
    results = search.hybrid_search("hydrogen", threshold=0.6)
    assert [r.entity_id for r in results] == ["nav-h2"]

    everything = search.hybrid_search("hydrogen", threshold=-1.0, top_k=10)
    scores = [r.score for r in everything]
    assert scores == sorted(scores, reverse=True)
    assert all(r.score >= -1.0 for r in everything)


def test_top_k_limits_results(search):
    assert len(search.hybrid_search("hydrogen", top_k=1)) == 1


def test_equal_scores_are_ordered_by_entity_id(search):
    results = search.semantic_search("twin", threshold=0.9)
    assert [r.entity_id for r in results] == ["twin-a", "twin-b"]


def test_domain_and_type_filters(search):
    results = search.hybrid_search("hydrogen", threshold=-1.0, domain="atlas")
    assert [r.entity_id for r in results] == ["atlas-rail"]

    results = search.hybrid_search("hydrogen", threshold=-1.0, entity_type="challenge")
    assert [r.entity_id for r in results] == ["atlas-rail"]


def test_keyword_search_needs_no_embedding(search, embedder):
    results = search.keyword_search("hydrogen refuelling")
    assert [r.entity_id for r in results] == ["nav-h2"]
    assert results[0].match_type == "keyword"
    assert embedder.calls == []


def test_search_dispatches_on_mode(search):
    assert search.search("hydrogen", mode="semantic")[0].match_type == "semantic"
    with pytest.raises(ValueError):
        search.search("hydrogen", mode="fuzzy")


def test_find_similar_excludes_self_and_skips_embedding(search, embedder):
    results = search.find_similar("nav-h2", threshold=0.0)
    ids = [r.entity_id for r in results]
    assert "nav-h2" not in ids
    assert ids[0] == "nav-bat"
    assert embedder.calls == []


def test_find_similar_unknown_id(search):
    with pytest.raises(NotFoundError) as exc:
        search.find_similar("does-not-exist")
    assert exc.value.entity_id == "does-not-exist"


def test_empty_store_returns_nothing(store, embedder):
    svc = EntitySearchService(store=store, embedder=embedder)
    assert svc.hybrid_search("hydrogen") == []
    assert svc.semantic_search("hydrogen") == []
    assert svc.keyword_search("hydrogen") == []
    assert svc.find_similar("anything") == []
    assert embedder.calls == []


def test_blank_query_is_rejected(search):
    with pytest.raises(ValueError):
        search.hybrid_search("   ")


def test_one_character_query_is_rejected(search, embedder):
    with pytest.raises(ValueError):
        search.hybrid_search(" a ")
    with pytest.raises(ValueError):
        search.keyword_search("h")
    assert embedder.calls == []
