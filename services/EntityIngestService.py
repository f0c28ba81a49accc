# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-21
# Updated: 2026-01-27
# Description: EntityIngestService.py
# -----------------------------------------------------------------------------
from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional

import numpy as np

import settings
from embedding.EmbeddingRecord import EmbeddingRecord
from embedding.TextEmbedder import TextEmbedder
from entity.Entity import Entity
from entity.Fingerprint import fingerprint
from utility.errors import EmbeddingError, StoreError
from utility.logging_utils import get_class_logger
from vectorstore.EntityVectorStore import EntityVectorStore

ProgressCallback = Callable[[int, int], None]


@dataclass
class BatchReport:
    embedded: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)
    cancelled: bool = False
    not_attempted: int = 0
    elapsed_s: float = 0.0

    @property
    def total(self) -> int:
        return len(self.embedded) + len(self.skipped) + len(self.failed) + self.not_attempted

    def summary(self) -> str:
        return (
            f"embedded={len(self.embedded)} skipped={len(self.skipped)} "
            f"failed={len(self.failed)} not_attempted={self.not_attempted} "
            f"cancelled={self.cancelled} elapsed={self.elapsed_s:.1f}s"
        )


@dataclass
class IngestPlan:
    to_embed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    invalid: Dict[str, str] = field(default_factory=dict)


class EntityIngestService:
    """
    Owns the embed/index pipeline for entities:
      - fingerprint each entity's embedding text
      - skip entities whose stored fingerprint already matches (unless force)
      - embed the rest on a bounded worker pool, retrying with backoff
      - upsert into the vector store and flush once at the end

    Per-entity failures are collected in the BatchReport and never stop the
    batch. Store failures (writer lock, flush) are raised as StoreError.
    """

    def __init__(
            self,
            *,
            store: EntityVectorStore,
            embedder: Optional[TextEmbedder] = None,
            max_workers: Optional[int] = None,
            max_attempts: Optional[int] = None,
            base_delay: Optional[float] = None,
            backoff_factor: Optional[float] = None,
            sleep: Callable[[float], None] = time.sleep,
            logger: logging.Logger | None = None,
    ) -> None:
        defaults = settings.INGEST_DEFAULTS
        self.store = store
        self.embedder = embedder
        self.max_workers = defaults["max_workers"] if max_workers is None else max_workers
        self.max_attempts = defaults["max_attempts"] if max_attempts is None else max_attempts
        self.base_delay = defaults["base_delay"] if base_delay is None else base_delay
        self.backoff_factor = defaults["backoff_factor"] if backoff_factor is None else backoff_factor
        self._sleep = sleep
        self.logger = logger or get_class_logger(self.__class__)

        if self.max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

    # ------------------------------------------------------------------
    # Planning
    # ------------------------------------------------------------------
    def _dedupe(self, entities: Iterable[Entity]) -> List[Entity]:
        by_id: Dict[str, Entity] = {}
        for e in entities:
            if e.id in by_id:
                self.logger.warning("Duplicate entity id '%s' in batch; keeping the last occurrence", e.id)
            by_id[e.id] = e
        return list(by_id.values())

    def _needs_embedding(self, entity: Entity, fp: str, force: bool) -> bool:
        if force:
            return True
        existing = self.store.get_record(entity.id)
        return existing is None or existing.fingerprint != fp

    def plan(self, entities: Iterable[Entity], *, force: bool = False) -> IngestPlan:
        """Which entities embed_all would embed, skip, or reject. No side effects."""
        self.store.ensure_ready()
        result = IngestPlan()
        for e in self._dedupe(entities):
            if not (e.embedding_text or "").strip():
                result.invalid[e.id] = "empty embedding text"
            elif self._needs_embedding(e, fingerprint(e.embedding_text), force):
                result.to_embed.append(e.id)
            else:
                result.skipped.append(e.id)
        return result

    # ------------------------------------------------------------------
    # Embedding with retry (runs on worker threads)
    # ------------------------------------------------------------------
    def _embed_with_retry(self, entity: Entity) -> np.ndarray:
        for attempt in range(1, self.max_attempts + 1):
            try:
                vec = np.asarray(self.embedder.embed(entity.embedding_text), dtype=np.float32)
                if vec.ndim != 1 or vec.shape[0] == 0:
                    raise EmbeddingError(f"Embedding for '{entity.id}' has shape {vec.shape}")
                return vec
            except EmbeddingError as e:
                if attempt >= self.max_attempts:
                    raise
                delay = self.base_delay * (self.backoff_factor ** (attempt - 1))
                self.logger.warning(
                    "Embedding '%s' failed (attempt %d/%d): %s; retrying in %.2fs",
                    entity.id,
                    attempt,
                    self.max_attempts,
                    e,
                    delay,
                )
                self._sleep(delay)
        raise EmbeddingError(f"Embedding '{entity.id}' exhausted {self.max_attempts} attempt(s)")

    # ------------------------------------------------------------------
    # Batch
    # ------------------------------------------------------------------
    def embed_all(
            self,
            entities: Iterable[Entity],
            *,
            force: bool = False,
            on_progress: Optional[ProgressCallback] = None,
            cancel_event: Optional[threading.Event] = None,
    ) -> BatchReport:
        """
        Embed every entity that is new or whose text changed, then flush once.

        on_progress(done, total) is called from this thread after each entity
        is skipped, embedded, or given up on. Setting cancel_event stops new
        submissions; finished work is still flushed and the report is marked
        cancelled.
        """
        if self.embedder is None:
            raise ValueError("embed_all needs an embedder; only plan() works without one")

        start = time.time()
        report = BatchReport()
        batch = self._dedupe(entities)
        total = len(batch)
        done = 0

        def progress() -> None:
            if on_progress is not None:
                on_progress(done, total)

        def is_cancelled() -> bool:
            return cancel_event is not None and cancel_event.is_set()

        self.logger.info("embed_all: %d entit(ies), force=%s, workers=%d", total, force, self.max_workers)

        with self.store.writer():
            queue: List[tuple[Entity, str]] = []
            for e in batch:
                if not (e.embedding_text or "").strip():
                    report.failed.append(e.id)
                    report.errors[e.id] = "empty embedding text"
                    self.logger.warning("Entity '%s' has no embedding text; not embedded", e.id)
                    done += 1
                    progress()
                    continue

                fp = fingerprint(e.embedding_text)
                if self._needs_embedding(e, fp, force):
                    queue.append((e, fp))
                else:
                    report.skipped.append(e.id)
                    done += 1
                    progress()

            in_flight_limit = self.max_workers * 2
            pending: Dict[Future, tuple[int, Entity, str]] = {}
            next_idx = 0

            with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="embed") as pool:
                while next_idx < len(queue) or pending:
                    while next_idx < len(queue) and len(pending) < in_flight_limit and not is_cancelled():
                        entity, fp = queue[next_idx]
                        pending[pool.submit(self._embed_with_retry, entity)] = (next_idx, entity, fp)
                        next_idx += 1

                    if not pending:
                        break

                    finished, _ = wait(pending, return_when=FIRST_COMPLETED)
                    # collect in submission order so results do not depend on thread timing
                    for fut in sorted(finished, key=lambda f: pending[f][0]):
                        _, entity, fp = pending.pop(fut)
                        self._collect(fut, entity, fp, report)
                        done += 1
                        progress()

            if next_idx < len(queue):
                report.cancelled = True
                report.not_attempted = len(queue) - next_idx
                self.logger.warning(
                    "embed_all cancelled: %d entit(ies) not attempted; flushing completed work",
                    report.not_attempted,
                )

            self.store.flush()

        report.elapsed_s = time.time() - start
        self.logger.info("embed_all complete: %s", report.summary())
        return report

    def _collect(self, fut: Future, entity: Entity, fp: str, report: BatchReport) -> None:
        try:
            vector = fut.result()
            self.store.upsert(
                EmbeddingRecord(
                    entity_id=entity.id,
                    vector=vector,
                    fingerprint=fp,
                    text=entity.embedding_text,
                    summary=entity.summary(),
                    keywords=list(entity.keywords),
                )
            )
            report.embedded.append(entity.id)
        except (EmbeddingError, StoreError) as e:
            report.failed.append(entity.id)
            report.errors[entity.id] = str(e)
            self.logger.warning("Entity '%s' not embedded: %s", entity.id, e)
        except Exception as e:
            report.failed.append(entity.id)
            report.errors[entity.id] = str(e)
            self.logger.error("Unexpected failure embedding '%s': %s", entity.id, e, exc_info=True)
