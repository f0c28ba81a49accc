# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-08
# Updated: 2026-01-27
# Description: EntityFileLoader
# -----------------------------------------------------------------------------
import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from entity.EmbeddingTextBuilder import build_entity
from entity.Entity import Entity
from utility.logging_utils import get_class_logger

# Keys a dataset file may use for its entity list
_LIST_KEYS = ("entities", "items", "records")


class EntityFileLoader:
    """
    Loads entity datasets from local JSON / JSONL exports.

    Accepted shapes:
      - a JSON list of entity dicts
      - a JSON object with an "entities" (or "items" / "records") list
      - JSON Lines, one entity dict per line

    Each raw record is turned into an Entity with built embedding text and
    keywords. Records without an id are logged and skipped.
    """

    def __init__(self, *, logger: logging.Logger | None = None):
        self.logger = logger or get_class_logger(self.__class__)

    def list_documents(self, root: str | Path) -> List[Path]:
        """All .json / .jsonl files under a directory (or the file itself)."""
        p = Path(root)
        if p.is_file():
            return [p]
        if not p.is_dir():
            raise FileNotFoundError(f"Dataset path not found: {p}")
        files = sorted(f for f in p.rglob("*") if f.suffix.lower() in (".json", ".jsonl"))
        self.logger.info("Found %d dataset file(s) under '%s'", len(files), p)
        return files

    def load_raw(self, path: str | Path) -> List[Dict[str, Any]]:
        path = Path(path)
        start_time = time.time()

        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            self.logger.error("Could not read dataset file '%s': %s", path, e)
            raise

        if path.suffix.lower() == ".jsonl":
            rows = [json.loads(line) for line in text.splitlines() if line.strip()]
        else:
            payload = json.loads(text)
            rows = self._extract_rows(payload, path)

        elapsed = (time.time() - start_time) * 1000.0
        self.logger.info("Loaded %d raw record(s) from '%s' (%.1f ms)", len(rows), path, elapsed)
        return [r for r in rows if isinstance(r, dict)]

    @staticmethod
    def _extract_rows(payload: Any, path: Path) -> List[Any]:
        if isinstance(payload, list):
            return payload
        if isinstance(payload, dict):
            for key in _LIST_KEYS:
                if isinstance(payload.get(key), list):
                    return payload[key]
        raise ValueError(f"Unrecognised dataset layout in '{path}': expected a list or {_LIST_KEYS}")

    def to_entities(self, rows: Iterable[Dict[str, Any]], *, domain: Optional[str] = None) -> List[Entity]:
        entities: List[Entity] = []
        for raw in rows:
            if domain and raw.get("domain") != domain:
                continue
            try:
                entities.append(build_entity(raw))
            except ValueError as e:
                self.logger.warning("Skipping invalid entity record: %s", e)
        return entities

    def load_entities(self, root: str | Path, *, domain: Optional[str] = None) -> List[Entity]:
        entities: List[Entity] = []
        for f in self.list_documents(root):
            entities.extend(self.to_entities(self.load_raw(f), domain=domain))
        self.logger.info(
            "Loaded %d entit(ies) from '%s'%s",
            len(entities),
            root,
            f" (domain={domain})" if domain else "",
        )
        return entities
