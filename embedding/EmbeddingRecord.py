# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-14
# Updated: 2026-01-24
# Description: EmbeddingRecord
# -----------------------------------------------------------------------------
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import List

import numpy as np

from entity.Entity import EntitySummary


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class EmbeddingRecord:
    """Embedding vector + fingerprint of the embedded text + display summary for one entity."""
    entity_id: str
    vector: np.ndarray
    fingerprint: str
    text: str
    summary: EntitySummary
    keywords: List[str] = field(default_factory=list)
    created_at: str = field(default_factory=utc_now_iso)
    updated_at: str = field(default_factory=utc_now_iso)

    @property
    def dimension(self) -> int:
        return int(self.vector.shape[0])

    def with_created_at(self, created_at: str) -> "EmbeddingRecord":
        return replace(self, created_at=created_at)
