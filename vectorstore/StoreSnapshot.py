# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-25
# Description: StoreSnapshot
# -----------------------------------------------------------------------------
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

import numpy as np

from embedding.EmbeddingRecord import EmbeddingRecord


@dataclass(frozen=True)
class StoreSnapshot:
    """
    Immutable, published view of the store used by readers.

    `matrix` rows are the stored vectors scaled to unit length (zero vectors
    stay zero) in the same order as `ids`, so cosine similarity against a unit
    query vector is a single matrix-vector product.
    """
    records: Mapping[str, EmbeddingRecord]
    ids: Tuple[str, ...]
    matrix: np.ndarray
    dimension: Optional[int]

    def __len__(self) -> int:
        return len(self.ids)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self.records

    @classmethod
    def empty(cls, dimension: Optional[int] = None) -> "StoreSnapshot":
        return cls(
            records=MappingProxyType({}),
            ids=(),
            matrix=np.empty((0, dimension or 0), dtype=np.float32),
            dimension=dimension,
        )

    @classmethod
    def build(cls, records: Dict[str, EmbeddingRecord], dimension: Optional[int]) -> "StoreSnapshot":
        if not records:
            return cls.empty(dimension)

        ids = tuple(records.keys())
        matrix = np.vstack([records[i].vector for i in ids]).astype(np.float32)
        norms = np.linalg.norm(matrix, axis=1, keepdims=True)
        matrix = np.divide(matrix, norms, out=np.zeros_like(matrix), where=norms > 0)
        matrix.setflags(write=False)

        return cls(
            records=MappingProxyType(dict(records)),
            ids=ids,
            matrix=matrix,
            dimension=dimension,
        )


@dataclass(frozen=True)
class StoreStats:
    count: int
    size_bytes: int
    dimension: Optional[int]
    model: str
    last_updated: Optional[str]
    storage_type: str
    path: str

    @property
    def size_mb(self) -> float:
        return self.size_bytes / 1024 / 1024
