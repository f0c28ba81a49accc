# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-15
# Updated: 2026-01-25
# Description: EntityVectorStore
# -----------------------------------------------------------------------------

from typing import ContextManager, Iterable, List, Optional, Protocol, runtime_checkable

from embedding.EmbeddingRecord import EmbeddingRecord
from vectorstore.StoreSnapshot import StoreSnapshot, StoreStats


@runtime_checkable
class EntityVectorStore(Protocol):
    model: str

    def ensure_ready(self) -> None:
        ...

    def has_embedding(self, entity_id: str) -> bool:
        ...

    def get_record(self, entity_id: str) -> Optional[EmbeddingRecord]:
        ...

    def upsert(self, record: EmbeddingRecord) -> None:
        ...

    def delete(self, entity_id: str) -> bool:
        ...

    def prune(self, keep_ids: Iterable[str]) -> List[str]:
        ...

    def reset(self) -> None:
        ...

    def clear(self) -> None:
        ...

    def flush(self) -> None:
        ...

    def snapshot(self) -> StoreSnapshot:
        ...

    def get_stats(self) -> StoreStats:
        ...

    def writer(self) -> ContextManager["EntityVectorStore"]:
        ...
