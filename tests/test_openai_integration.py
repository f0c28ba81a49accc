# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-29
# Description: test_openai_integration.py
# -----------------------------------------------------------------------------
import os

import numpy as np
import pytest

from config.Config import Config
from embedding.OpenAIEmbedder import OpenAIEmbedder
from services.EntityIngestService import EntityIngestService
from services.EntitySearchService import EntitySearchService
from vectorstore.JsonEntityVectorStore import JsonEntityVectorStore

from conftest import make_entity

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(not os.getenv("OPENAI_API_KEY"), reason="OPENAI_API_KEY not set"),
]


def test_live_embedding_has_unit_length():
    embedder = OpenAIEmbedder(Config.from_env())
    vec = embedder.embed("hydrogen refuelling for buses")
    assert vec.ndim == 1
    assert np.linalg.norm(vec) == pytest.approx(1.0, abs=1e-3)


def test_live_ingest_then_search(tmp_path):
    cfg = Config.from_env()
    embedder = OpenAIEmbedder(cfg)
    store = JsonEntityVectorStore(tmp_path / "embeddings.json", model=embedder.model)

    entities = [
        make_entity("e-h2", "Hydrogen Bus Depot", description="Refuelling fuel cell buses overnight"),
        make_entity("e-rail", "Rail Signalling", description="Digital signalling on mainline rail"),
    ]
    report = EntityIngestService(store=store, embedder=embedder).embed_all(entities)
    assert sorted(report.embedded) == ["e-h2", "e-rail"]

    results = EntitySearchService(store=store, embedder=embedder).hybrid_search("hydrogen buses", threshold=0.0)
    assert results[0].entity_id == "e-h2"
