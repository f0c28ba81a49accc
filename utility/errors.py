# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-24
# Description: errors.py
# -----------------------------------------------------------------------------


class NavigateAIError(Exception):
    """Base class for errors raised by the entity store, pipeline and search."""


class StoreError(NavigateAIError):
    """
    Store-level failure: load, flush, dimension mismatch, incompatible
    manifest, or a second concurrent writer.
    """


class EmbeddingError(NavigateAIError):
    """External embedding call failed (quota, timeout, malformed response)."""


class NotFoundError(NavigateAIError):
    """Requested entity has no stored embedding."""

    def __init__(self, entity_id: str):
        super().__init__(f"Entity '{entity_id}' not found in embeddings")
        self.entity_id = entity_id


class WriterBusyError(StoreError):
    """Another writer (thread or process) already holds the store."""
