# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-29
# Description: test_embedding_text_builder.py
# -----------------------------------------------------------------------------
import pytest

from entity.EmbeddingTextBuilder import build_embedding_text, build_entity, extract_keywords
from entity.Entity import Entity

NAVIGATE_PROJECT = {
    "id": "nav-1",
    "name": "SkyPort Drone Corridor",
    "description": "BVLOS corridor trial",
    "entityType": "project",
    "domain": "navigate",
    "metadata": {
        "sector": "aviation",
        "trl": {"current": 6},
        "tags": ["drones", "bvlos"],
        "funding": {"amount": 1_500_000},
    },
}


def test_navigate_text_has_one_attribute_per_paragraph():
    text = build_embedding_text(NAVIGATE_PROJECT)
    assert text == (
        "SkyPort Drone Corridor\n\n"
        "BVLOS corridor trial\n\n"
        "Sector: aviation\n\n"
        "TRL: 6\n\n"
        "Tags: drones, bvlos\n\n"
        "Funding: £1.5M\n\n"
        "Type: project"
    )


def test_small_funding_is_shown_in_thousands():
    raw = {**NAVIGATE_PROJECT, "metadata": {"funding": {"amount": 250_000}}}
    assert "Funding: £250K" in build_embedding_text(raw)


def test_atlas_challenge_includes_problem_and_buyer():
    raw = {
        "id": "atlas-7",
        "name": "Rail depot energy",
        "description": "Cut depot energy use",
        "entity_type": "challenge",
        "domain": "atlas",
        "metadata": {
            "keywords": ["energy", "depot"],
            "problem_type": {"primary": "Decarbonisation", "sub_categories": ["heat"]},
            "sector": {"primary": "rail", "cross_sector_signals": ["maritime"]},
            "buyer": {"organization": "Network Rail"},
        },
    }
    text = build_embedding_text(raw)
    assert "Keywords: energy, depot" in text
    assert "Problem type: Decarbonisation" in text
    assert "Sub-categories: heat" in text
    assert "Cross-sector signals: maritime" in text
    assert "Organization: Network Rail" in text
    assert text.endswith("Type: challenge")


def test_text_is_truncated_to_max_chars():
    assert len(build_embedding_text(NAVIGATE_PROJECT, max_chars=20)) == 20


def test_keywords_are_lowercase_ordered_and_unique():
    raw = {
        **NAVIGATE_PROJECT,
        "metadata": {**NAVIGATE_PROJECT["metadata"], "keywords": ["Drone", "UTM"]},
    }
    assert extract_keywords(raw) == ["skyport", "drone", "corridor", "utm", "drones", "bvlos", "aviation"]


def test_build_entity_prefers_supplied_embedding_text():
    raw = {**NAVIGATE_PROJECT, "embeddingText": "curated text"}
    entity = build_entity(raw)
    assert isinstance(entity, Entity)
    assert entity.embedding_text == "curated text"
    assert entity.entity_type == "project"
    assert "drone" in entity.keywords


def test_entity_without_id_is_rejected():
    with pytest.raises(ValueError):
        build_entity({"name": "nameless"})
