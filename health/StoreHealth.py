# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-28
# Description: StoreHealth
# -----------------------------------------------------------------------------
import logging
import os
from typing import Optional

from utility.errors import StoreError
from utility.logging_utils import get_logger
from vectorstore.EntityVectorStore import EntityVectorStore


class StoreHealth:
    """
    Smoke test for the embedding store:
      - the document loads (ensure_ready)
      - the published snapshot is internally consistent
      - the store directory is writable for the next flush
    """

    def __init__(self, store: EntityVectorStore, logger: Optional[logging.Logger] = None):
        self.store = store
        self.logger = logger or get_logger(__name__)

    def run(self) -> bool:
        try:
            self.store.ensure_ready()
            snap = self.store.snapshot()
            stats = self.store.get_stats()
        except StoreError as e:
            self.logger.error("Store healthcheck FAILED: %s", e)
            return False

        if len(snap.ids) != len(snap.records) or snap.matrix.shape[0] != len(snap.ids):
            self.logger.error(
                "Store snapshot inconsistent: ids=%d records=%d matrix=%s",
                len(snap.ids),
                len(snap.records),
                snap.matrix.shape,
            )
            return False

        parent = os.path.dirname(os.path.abspath(stats.path)) or "."
        existing = parent
        while not os.path.exists(existing):
            existing = os.path.dirname(existing)
        if not os.access(existing, os.W_OK):
            self.logger.error("Store directory is not writable: %s", existing)
            return False

        self.logger.info(
            "Store healthcheck PASSED (%d record(s), dimension=%s, %s)",
            stats.count,
            stats.dimension,
            stats.path,
        )
        return True
