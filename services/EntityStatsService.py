# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-21
# Updated: 2026-01-28
# Description: EntityStatsService.py
# -----------------------------------------------------------------------------

import logging
from typing import Any, Dict

from utility.logging_utils import get_class_logger
from vectorstore.EntityVectorStore import EntityVectorStore


class EntityStatsService:
    """
    Stats service for the /stats endpoint.

    Responsibilities:
      - store-level stats (count, size, dimension, model, last update)
      - per-domain and per-entity-type record counts
    """

    def __init__(
        self,
        *,
        store: EntityVectorStore,
        logger: logging.Logger | None = None,
    ) -> None:
        self.store = store
        self.logger = logger or get_class_logger(self.__class__)

    def get_stats(self) -> Dict[str, Any]:
        stats = self.store.get_stats()
        snap = self.store.snapshot()

        by_domain: Dict[str, int] = {}
        by_type: Dict[str, int] = {}
        for rec in snap.records.values():
            domain = rec.summary.domain or "unknown"
            etype = rec.summary.entity_type or "unknown"
            by_domain[domain] = by_domain.get(domain, 0) + 1
            by_type[etype] = by_type.get(etype, 0) + 1

        self.logger.info("Stats: count=%d size=%.2fMB domains=%d", stats.count, stats.size_mb, len(by_domain))

        return {
            "count": stats.count,
            "size_bytes": stats.size_bytes,
            "size_mb": round(stats.size_mb, 3),
            "dimension": stats.dimension,
            "model": stats.model,
            "last_updated": stats.last_updated,
            "storage_type": stats.storage_type,
            "path": stats.path,
            "by_domain": dict(sorted(by_domain.items())),
            "by_entity_type": dict(sorted(by_type.items())),
        }
