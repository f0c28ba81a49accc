# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-25
# Description: JsonEntityVectorStore
# -----------------------------------------------------------------------------
import contextlib
import json
import os
import threading
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional

import numpy as np
from filelock import FileLock, Timeout
from pydantic import ValidationError

import settings
from embedding.EmbeddingRecord import EmbeddingRecord, utc_now_iso
from entity.Entity import EntitySummary
from entity.Fingerprint import fingerprint
from utility.errors import StoreError, WriterBusyError
from utility.logging_utils import get_class_logger
from vectorstore.StoreDocument import (
    FORMAT_VERSION,
    LegacyRecord,
    StoreDocument,
    record_to_dict,
)
from vectorstore.StoreSnapshot import StoreSnapshot, StoreStats


class _CorruptDocument(Exception):
    pass


class JsonEntityVectorStore:
    """
    In-process embedding store persisted as a single JSON document.

    Readers (has_embedding, get_record, snapshot, get_stats) only see the
    published snapshot. Writes (upsert, delete, prune, reset) are staged and
    become visible all at once when flush() has durably replaced the file.
    A batch writer takes writer(), which excludes other writers in this
    process and, through a lock file, in other processes.
    """

    def __init__(
            self,
            path: str | Path,
            *,
            model: str = "",
            expected_dimension: Optional[int] = None,
            lock_timeout: Optional[float] = None,
            logger=None,
    ) -> None:
        self.path = Path(path)
        self.model = model
        self.expected_dimension = expected_dimension
        self.lock_timeout = settings.STORE_LOCK_TIMEOUT if lock_timeout is None else lock_timeout
        self.logger = logger or get_class_logger(self.__class__)

        self._ready = False
        self._init_lock = threading.Lock()
        self._stage_lock = threading.RLock()
        self._swap_lock = threading.Lock()
        self._writer_lock = threading.Lock()
        self._file_lock = FileLock(str(self.path) + ".lock")

        self._snapshot = StoreSnapshot.empty(expected_dimension)
        self._staged: Optional[Dict[str, EmbeddingRecord]] = None
        self._staged_dimension: Optional[int] = None
        # bumped on every staged mutation; flush only clears what it wrote
        self._stage_version = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def ensure_ready(self) -> None:
        """
        Load the persisted document once. A missing file gives an empty store;
        a corrupt one is moved aside and replaced by an empty store with a
        warning. An incompatible model/dimension raises StoreError.
        """
        if self._ready:
            return
        with self._init_lock:
            if self._ready:
                return
            records, dimension = self._load()
            with self._swap_lock:
                self._snapshot = StoreSnapshot.build(records, dimension)
            self._ready = True
            self.logger.info(
                "Embedding store ready: %d record(s), dimension=%s, model='%s' (%s)",
                len(records),
                dimension,
                self.model,
                self.path,
            )

    def _load(self) -> tuple[Dict[str, EmbeddingRecord], Optional[int]]:
        if not self.path.exists():
            self.logger.info("No existing embeddings file at %s, starting fresh", self.path)
            return {}, self.expected_dimension

        try:
            raw = self.path.read_text(encoding="utf-8")
            payload = json.loads(raw)
            if isinstance(payload, list):
                return self._from_legacy(payload)
            return self._from_document(payload)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError, _CorruptDocument) as e:
            self._quarantine(e)
            return {}, self.expected_dimension

    def _from_document(self, payload: Any) -> tuple[Dict[str, EmbeddingRecord], Optional[int]]:
        doc = StoreDocument.model_validate(payload)
        manifest = doc.manifest

        if doc.records:
            self._check_compatible(manifest.model, manifest.dimension)
        if manifest.model and not self.model:
            self.model = manifest.model

        records: Dict[str, EmbeddingRecord] = {}
        for r in doc.records:
            vec = np.asarray(r.vector, dtype=np.float32)
            vec.setflags(write=False)
            records[r.entity_id] = EmbeddingRecord(
                entity_id=r.entity_id,
                vector=vec,
                fingerprint=r.fingerprint,
                text=r.text,
                summary=EntitySummary(**r.summary.model_dump()),
                keywords=list(r.keywords),
                created_at=r.created_at,
                updated_at=r.updated_at,
            )

        # an empty store adopts the first vector it is given
        dimension = manifest.dimension if doc.records else self.expected_dimension
        return records, dimension

    def _from_legacy(self, payload: List[Any]) -> tuple[Dict[str, EmbeddingRecord], Optional[int]]:
        legacy = [LegacyRecord.model_validate(item) for item in payload]
        if not legacy:
            return {}, self.expected_dimension

        dims = {len(r.embedding) for r in legacy}
        if len(dims) != 1:
            raise _CorruptDocument(f"legacy document mixes vector dimensions {sorted(dims)}")
        dimension = dims.pop()
        self._check_compatible("", dimension)

        now = utc_now_iso()
        records: Dict[str, EmbeddingRecord] = {}
        for r in legacy:
            vec = np.asarray(r.embedding, dtype=np.float32)
            vec.setflags(write=False)
            records[r.entity_id] = EmbeddingRecord(
                entity_id=r.entity_id,
                vector=vec,
                fingerprint=fingerprint(r.text),
                text=r.text,
                summary=EntitySummary(
                    name=r.metadata.name,
                    description="",
                    entity_type=r.metadata.entity_type,
                    domain=r.metadata.domain,
                ),
                keywords=list(r.keywords),
                created_at=r.created_at or now,
                updated_at=r.updated_at or now,
            )

        self.logger.warning(
            "Loaded %d record(s) from legacy embeddings list; next flush rewrites it as format v%d",
            len(records),
            FORMAT_VERSION,
        )
        return records, dimension

    def _check_compatible(self, model: str, dimension: Optional[int]) -> None:
        if self.model and model and model != self.model:
            raise StoreError(
                f"Embeddings at {self.path} were produced by model '{model}', "
                f"store is configured for '{self.model}'. Re-ingest with a reset store to migrate."
            )
        if self.expected_dimension is not None and dimension is not None and dimension != self.expected_dimension:
            raise StoreError(
                f"Embeddings at {self.path} have dimension {dimension}, "
                f"store expects {self.expected_dimension}. Re-ingest with a reset store to migrate."
            )

    def _quarantine(self, err: Exception) -> None:
        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S")
        target = self.path.with_name(f"{self.path.name}.corrupt-{stamp}")
        try:
            os.replace(self.path, target)
            self.logger.warning(
                "Embeddings file %s is unreadable (%s); moved to %s and starting with an empty store",
                self.path,
                err,
                target,
            )
        except OSError as move_err:
            self.logger.warning(
                "Embeddings file %s is unreadable (%s) and could not be moved aside (%s); "
                "starting with an empty store",
                self.path,
                err,
                move_err,
            )

    # ------------------------------------------------------------------
    # Read path (published snapshot only)
    # ------------------------------------------------------------------
    def snapshot(self) -> StoreSnapshot:
        self.ensure_ready()
        return self._snapshot

    def has_embedding(self, entity_id: str) -> bool:
        return entity_id in self.snapshot().records

    def get_record(self, entity_id: str) -> Optional[EmbeddingRecord]:
        return self.snapshot().records.get(entity_id)

    @property
    def dimension(self) -> Optional[int]:
        with self._stage_lock:
            if self._staged is not None:
                return self._staged_dimension
        return self.snapshot().dimension

    @property
    def has_pending_changes(self) -> bool:
        with self._stage_lock:
            return self._staged is not None

    def get_stats(self) -> StoreStats:
        snap = self.snapshot()
        try:
            size_bytes = self.path.stat().st_size
        except FileNotFoundError:
            size_bytes = 0

        last_updated = max((r.updated_at for r in snap.records.values()), default=None)
        return StoreStats(
            count=len(snap),
            size_bytes=size_bytes,
            dimension=snap.dimension,
            model=self.model,
            last_updated=last_updated,
            storage_type="json",
            path=str(self.path),
        )

    # ------------------------------------------------------------------
    # Write path (staged until flush)
    # ------------------------------------------------------------------
    def _ensure_staged(self) -> Dict[str, EmbeddingRecord]:
        if self._staged is None:
            snap = self.snapshot()
            self._staged = dict(snap.records)
            self._staged_dimension = snap.dimension
        return self._staged

    def upsert(self, record: EmbeddingRecord) -> None:
        """
        Stage a record, replacing any record with the same entity_id.
        Raises StoreError on a dimension mismatch; nothing is staged then.
        """
        self.ensure_ready()

        vec = np.array(record.vector, dtype=np.float32)
        if vec.ndim != 1 or vec.shape[0] == 0:
            raise StoreError(f"Vector for '{record.entity_id}' must be 1-D and non-empty, got shape {vec.shape}")
        if not np.all(np.isfinite(vec)):
            raise StoreError(f"Vector for '{record.entity_id}' contains non-finite values")
        vec.setflags(write=False)

        with self._stage_lock:
            current_dim = self._staged_dimension if self._staged is not None else self._snapshot.dimension
            if current_dim is not None and vec.shape[0] != current_dim:
                raise StoreError(
                    f"Dimension mismatch for '{record.entity_id}': got {vec.shape[0]}, store has {current_dim}"
                )

            staged = self._ensure_staged()
            existing = staged.get(record.entity_id)
            new_record = replace(record, vector=vec)
            if existing is not None:
                new_record = new_record.with_created_at(existing.created_at)

            staged[record.entity_id] = new_record
            self._stage_version += 1
            if self._staged_dimension is None:
                self._staged_dimension = vec.shape[0]

    def delete(self, entity_id: str) -> bool:
        self.ensure_ready()
        with self._stage_lock:
            staged = self._ensure_staged()
            removed = staged.pop(entity_id, None) is not None
            self._stage_version += 1
        if removed:
            self.logger.info("Staged delete for entity '%s'", entity_id)
        return removed

    def prune(self, keep_ids: Iterable[str]) -> List[str]:
        """Stage removal of every record whose id is not in keep_ids. Returns removed ids."""
        self.ensure_ready()
        keep = set(keep_ids)
        with self._stage_lock:
            staged = self._ensure_staged()
            stale = [eid for eid in staged if eid not in keep]
            for eid in stale:
                del staged[eid]
            self._stage_version += 1
        self.logger.info("Staged prune of %d stale record(s)", len(stale))
        return stale

    def reset(self) -> None:
        """Drop every record and the established dimension (explicit migration)."""
        self.ensure_ready()
        with self._stage_lock:
            self._staged = {}
            self._staged_dimension = self.expected_dimension
            self._stage_version += 1
        self.logger.warning("Embedding store reset staged; flush() to persist")

    def clear(self) -> None:
        """
        Reset and flush in one step. Unlike reset(), this also works on a
        document written for another model or dimension, which ensure_ready()
        refuses to load.
        """
        try:
            self.ensure_ready()
        except StoreError as e:
            self.logger.warning("Discarding incompatible embeddings at %s: %s", self.path, e)
            with self._init_lock:
                with self._swap_lock:
                    self._snapshot = StoreSnapshot.empty(self.expected_dimension)
                self._ready = True

        with self.writer():
            self.reset()
            self.flush()

    def flush(self) -> None:
        """
        Durably write the staged state and publish it to readers.
        On failure the file and the published snapshot are untouched and the
        staged writes are kept, so the call can be retried.
        """
        self.ensure_ready()
        with self._stage_lock:
            if self._staged is None:
                self.logger.debug("flush: no staged changes")
                return
            records = dict(self._staged)
            dimension = self._staged_dimension
            version = self._stage_version

        payload = self._to_payload(records, dimension)
        try:
            self._atomic_write(payload)
        except (OSError, TypeError, ValueError) as e:
            self.logger.error("Failed to persist %d embedding(s) to %s: %s", len(records), self.path, e)
            raise StoreError(f"Failed to persist embeddings to {self.path}: {e}") from e

        new_snapshot = StoreSnapshot.build(records, dimension)
        with self._swap_lock:
            self._snapshot = new_snapshot
        with self._stage_lock:
            if self._stage_version == version:
                self._staged = None
                self._staged_dimension = None
            else:
                self.logger.debug("flush: writes staged during save are kept for the next flush")

        self.logger.info("Saved %d embedding(s) to %s", len(records), self.path)

    def _to_payload(self, records: Dict[str, EmbeddingRecord], dimension: Optional[int]) -> Dict[str, Any]:
        return {
            "manifest": {
                "format_version": FORMAT_VERSION,
                "model": self.model,
                "dimension": dimension,
                "count": len(records),
                "updated_at": utc_now_iso(),
            },
            "records": [
                record_to_dict(
                    entity_id=r.entity_id,
                    vector=r.vector.tolist(),
                    fingerprint=r.fingerprint,
                    text=r.text,
                    keywords=list(r.keywords),
                    summary=r.summary.to_dict(),
                    created_at=r.created_at,
                    updated_at=r.updated_at,
                )
                for r in records.values()
            ],
        }

    def _atomic_write(self, payload: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(f"{self.path.name}.tmp-{os.getpid()}-{threading.get_ident()}")
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(payload, f, allow_nan=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.path)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise

        # Make the rename durable where the platform allows it
        if hasattr(os, "O_DIRECTORY"):
            try:
                fd = os.open(str(self.path.parent), os.O_RDONLY | os.O_DIRECTORY)
            except OSError as e:
                self.logger.debug("Directory fsync skipped for %s: %s", self.path.parent, e)
                return
            try:
                os.fsync(fd)
            except OSError as e:
                self.logger.debug("Directory fsync failed for %s: %s", self.path.parent, e)
            finally:
                os.close(fd)

    # ------------------------------------------------------------------
    # Writer exclusion
    # ------------------------------------------------------------------
    @contextlib.contextmanager
    def writer(self) -> Iterator["JsonEntityVectorStore"]:
        """
        Exclusive write access for one batch. A second writer (thread or
        process) fails fast with StoreError instead of queueing.
        """
        self.ensure_ready()
        if not self._writer_lock.acquire(blocking=False):
            raise WriterBusyError(f"Another writer is already active on {self.path}")

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            try:
                self._file_lock.acquire(timeout=self.lock_timeout)
            except Timeout as e:
                raise WriterBusyError(f"Embedding store {self.path} is locked by another process") from e

            try:
                yield self
            finally:
                self._file_lock.release()
        finally:
            self._writer_lock.release()
