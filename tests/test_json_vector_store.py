# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-29
# Description: test_json_vector_store.py
# -----------------------------------------------------------------------------
import json
import logging

import numpy as np
import pytest

from embedding.EmbeddingRecord import EmbeddingRecord
from entity.Entity import EntitySummary
from entity.Fingerprint import fingerprint
from utility.errors import StoreError, WriterBusyError
from vectorstore.JsonEntityVectorStore import JsonEntityVectorStore

from conftest import DIM


def _record(entity_id: str, dim: int = DIM, seed: int = 0, text: str | None = None, **kw) -> EmbeddingRecord:
    text = text if text is not None else f"text for {entity_id}"
    vec = np.random.default_rng(seed).normal(size=dim).astype(np.float32)
    return EmbeddingRecord(
        entity_id=entity_id,
        vector=vec,
        fingerprint=fingerprint(text),
        text=text,
        summary=EntitySummary(name=entity_id.upper(), description="d", entity_type="technology", domain="navigate"),
        keywords=["alpha"],
        **kw,
    )


def test_missing_file_gives_an_empty_store(store, store_path):
    assert not store_path.exists()
    assert not store.has_embedding("anything")
    stats = store.get_stats()
    assert stats.count == 0
    assert stats.size_bytes == 0
    assert stats.storage_type == "json"


def test_flush_round_trip_is_bit_for_bit(store, store_path):
    originals = [_record(f"e{i}", seed=i) for i in range(3)]
    for r in originals:
        store.upsert(r)
    store.flush()

    reopened = JsonEntityVectorStore(store_path, model="fake-embed")
    reopened.ensure_ready()
    for r in originals:
        loaded = reopened.get_record(r.entity_id)
        assert loaded is not None
        assert loaded.vector.dtype == np.float32
        assert np.array_equal(loaded.vector, r.vector)
        assert loaded.fingerprint == r.fingerprint
        assert loaded.summary == r.summary
        assert loaded.keywords == ["alpha"]
        assert loaded.created_at == r.created_at


def test_document_carries_a_manifest(store, store_path):
    store.upsert(_record("e1"))
    store.flush()

    doc = json.loads(store_path.read_text(encoding="utf-8"))
    assert doc["manifest"]["format_version"] == 2
    assert doc["manifest"]["model"] == "fake-embed"
    assert doc["manifest"]["dimension"] == DIM
    assert doc["manifest"]["count"] == 1
    assert doc["records"][0]["entity_id"] == "e1"


def test_readers_only_see_flushed_writes(store):
    store.upsert(_record("e1"))
    assert store.has_pending_changes
    assert not store.has_embedding("e1")
    assert len(store.snapshot()) == 0

    store.flush()
    assert store.has_embedding("e1")
    assert not store.has_pending_changes


def test_dimension_mismatch_is_rejected_and_state_unchanged(store):
    store.upsert(_record("e1"))
    store.flush()
    before = store.snapshot()

    with pytest.raises(StoreError):
        store.upsert(_record("bad", dim=DIM // 2))

    assert not store.has_pending_changes
    assert store.snapshot() is before
    assert not store.has_embedding("bad")


def test_reupsert_keeps_created_at_and_moves_updated_at(store):
    store.upsert(_record("e1", created_at="2024-01-01T00:00:00+00:00", updated_at="2024-01-01T00:00:00+00:00"))
    store.flush()
    store.upsert(_record("e1", seed=9, created_at="2025-06-01T00:00:00+00:00", updated_at="2025-06-01T00:00:00+00:00"))
    store.flush()

    rec = store.get_record("e1")
    assert rec.created_at == "2024-01-01T00:00:00+00:00"
    assert rec.updated_at == "2025-06-01T00:00:00+00:00"
    assert len(store.snapshot()) == 1


def test_corrupt_file_is_moved_aside(store_path, caplog):
    store_path.parent.mkdir(parents=True)
    store_path.write_text("{not json", encoding="utf-8")

    s = JsonEntityVectorStore(store_path, model="fake-embed")
    with caplog.at_level(logging.WARNING):
        s.ensure_ready()

    assert len(s.snapshot()) == 0
    assert not store_path.exists()
    assert list(store_path.parent.glob("embeddings.json.corrupt-*"))
    assert any("unreadable" in r.getMessage() for r in caplog.records)


def test_schema_invalid_document_is_treated_as_corrupt(store_path):
    store_path.parent.mkdir(parents=True)
    store_path.write_text(json.dumps({"manifest": {"count": 3}, "records": []}), encoding="utf-8")

    s = JsonEntityVectorStore(store_path, model="fake-embed")
    s.ensure_ready()
    assert len(s.snapshot()) == 0
    assert list(store_path.parent.glob("embeddings.json.corrupt-*"))


def test_incompatible_model_is_rejected(store, store_path):
    store.upsert(_record("e1"))
    store.flush()

    other = JsonEntityVectorStore(store_path, model="text-embedding-3-large")
    with pytest.raises(StoreError):
        other.ensure_ready()
    # the file is left for an explicit migration
    assert store_path.exists()


def test_clear_migrates_an_incompatible_store(store, store_path):
    store.upsert(_record("e1"))
    store.flush()

    other = JsonEntityVectorStore(store_path, model="text-embedding-3-large")
    other.clear()
    other.upsert(_record("e2", dim=DIM * 2))
    other.flush()

    doc = json.loads(store_path.read_text(encoding="utf-8"))
    assert doc["manifest"]["model"] == "text-embedding-3-large"
    assert doc["manifest"]["dimension"] == DIM * 2
    assert [r["entity_id"] for r in doc["records"]] == ["e2"]


def test_incompatible_dimension_is_rejected(store, store_path):
    store.upsert(_record("e1"))
    store.flush()

    other = JsonEntityVectorStore(store_path, model="fake-embed", expected_dimension=DIM * 2)
    with pytest.raises(StoreError):
        other.ensure_ready()


def test_reset_allows_a_new_dimension(store):
    store.upsert(_record("e1"))
    store.flush()

    store.reset()
    store.upsert(_record("e2", dim=DIM * 2))
    store.flush()

    assert not store.has_embedding("e1")
    assert store.get_record("e2").dimension == DIM * 2
    assert store.get_stats().dimension == DIM * 2


def test_legacy_list_document_is_loaded(store_path):
    store_path.parent.mkdir(parents=True)
    legacy = [
        {
            "entityId": "nav-1",
            "embedding": [0.1, 0.2, 0.3, 0.4],
            "text": "Drone corridor",
            "keywords": ["drone"],
            "metadata": {"domain": "navigate", "entityType": "project", "name": "Drone corridor"},
            "createdAt": "2024-03-01T00:00:00Z",
            "updatedAt": "2024-03-02T00:00:00Z",
        }
    ]
    store_path.write_text(json.dumps(legacy), encoding="utf-8")

    s = JsonEntityVectorStore(store_path, model="fake-embed")
    s.ensure_ready()
    rec = s.get_record("nav-1")
    assert rec is not None
    assert rec.fingerprint == fingerprint("Drone corridor")
    assert rec.summary.entity_type == "project"
    assert rec.created_at == "2024-03-01T00:00:00Z"
    assert s.snapshot().dimension == 4


def test_failed_flush_keeps_staged_writes(store, store_path, monkeypatch):
    store.upsert(_record("e1"))

    def boom(payload):
        raise OSError("disk full")

    monkeypatch.setattr(store, "_atomic_write", boom)
    with pytest.raises(StoreError):
        store.flush()

    assert store.has_pending_changes
    assert not store.has_embedding("e1")
    assert not store_path.exists()

    monkeypatch.undo()
    store.flush()
    assert store.has_embedding("e1")


def test_upsert_during_flush_is_kept_for_next_flush(store, store_path, monkeypatch):
    store.upsert(_record("e1"))
    real_write = store._atomic_write

    def write_then_stage(payload):
        real_write(payload)
        store.upsert(_record("e2", seed=1))

    monkeypatch.setattr(store, "_atomic_write", write_then_stage)
    store.flush()
    monkeypatch.undo()

    assert store.has_embedding("e1")
    assert not store.has_embedding("e2")
    assert store.has_pending_changes

    store.flush()
    assert not store.has_pending_changes
    assert sorted(store.snapshot().ids) == ["e1", "e2"]
    doc = json.loads(store_path.read_text(encoding="utf-8"))
    assert "e2" in json.dumps(doc)


def test_delete_and_prune_are_staged(store):
    for i in range(4):
        store.upsert(_record(f"e{i}", seed=i))
    store.flush()

    assert store.delete("e0")
    assert not store.delete("missing")
    removed = store.prune(["e1", "e2"])
    assert removed == ["e3"]
    assert store.has_embedding("e0")

    store.flush()
    assert sorted(store.snapshot().ids) == ["e1", "e2"]


def test_stats_reflect_the_persisted_document(store, store_path):
    store.upsert(_record("e1", updated_at="2025-01-01T00:00:00+00:00"))
    store.upsert(_record("e2", updated_at="2025-02-01T00:00:00+00:00"))
    store.flush()

    stats = store.get_stats()
    assert stats.count == 2
    assert stats.size_bytes == store_path.stat().st_size
    assert stats.dimension == DIM
    assert stats.model == "fake-embed"
    assert stats.last_updated == "2025-02-01T00:00:00+00:00"


def test_second_writer_in_process_is_rejected(store):
    with store.writer():
        with pytest.raises(WriterBusyError):
            with store.writer():
                pass
    # released afterwards
    with store.writer():
        pass


def test_second_store_on_same_file_is_rejected(store, store_path):
    other = JsonEntityVectorStore(store_path, model="fake-embed", lock_timeout=0.0)
    with store.writer():
        with pytest.raises(WriterBusyError):
            with other.writer():
                pass
