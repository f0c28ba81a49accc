# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-29
# Description: test_entity_file_loader.py
# -----------------------------------------------------------------------------
import json

import pytest

from ingestion.EntityFileLoader import EntityFileLoader

ROWS = [
    {"id": "nav-1", "name": "Drone Corridor", "description": "BVLOS", "entityType": "project", "domain": "navigate"},
    {"id": "atlas-1", "name": "Depot Energy", "description": "Cut use", "entity_type": "challenge", "domain": "atlas"},
]


def test_loads_list_object_and_jsonl(tmp_path):
    (tmp_path / "a.json").write_text(json.dumps(ROWS[:1]), encoding="utf-8")
    (tmp_path / "b.json").write_text(json.dumps({"entities": ROWS[1:]}), encoding="utf-8")
    (tmp_path / "c.jsonl").write_text(
        json.dumps({"id": "nav-2", "name": "Hydrogen Bus", "domain": "navigate"}) + "\n\n",
        encoding="utf-8",
    )
    (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")

    entities = EntityFileLoader().load_entities(tmp_path)

    assert [e.id for e in entities] == ["nav-1", "atlas-1", "nav-2"]
    assert entities[0].entity_type == "project"
    assert entities[0].embedding_text.startswith("Drone Corridor\n\nBVLOS")
    assert "drone" in entities[0].keywords


def test_domain_filter(tmp_path):
    path = tmp_path / "all.json"
    path.write_text(json.dumps(ROWS), encoding="utf-8")
    entities = EntityFileLoader().load_entities(path, domain="atlas")
    assert [e.id for e in entities] == ["atlas-1"]


def test_explicit_embedding_text_is_kept(tmp_path):
    path = tmp_path / "one.json"
    path.write_text(json.dumps([{"id": "x", "name": "X", "embedding_text": "curated"}]), encoding="utf-8")
    assert EntityFileLoader().load_entities(path)[0].embedding_text == "curated"


def test_unknown_layout_raises(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"rows": []}), encoding="utf-8")
    with pytest.raises(ValueError):
        EntityFileLoader().load_entities(path)


def test_missing_path_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        EntityFileLoader().load_entities(tmp_path / "nope")
