# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-26
# Description: EntitySearchService.py
# -----------------------------------------------------------------------------
import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

import numpy as np

import settings
from embedding.TextEmbedder import TextEmbedder
from search.LexicalScorer import LexicalScorer, query_terms
from utility.errors import NotFoundError, StoreError
from utility.logging_utils import get_class_logger
from vectorstore.EntityVectorStore import EntityVectorStore
from vectorstore.StoreSnapshot import StoreSnapshot

SEARCH_MODES = ("semantic", "keyword", "hybrid")


@dataclass(frozen=True)
class ScoredEntity:
    entity_id: str
    name: str
    description: str
    entity_type: str
    domain: str
    score: float
    semantic_score: float
    lexical_score: float
    match_type: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class EntitySearchService:
    """
    Read path over the published store snapshot.

    hybrid:   semantic_weight * cosine + lexical_weight * term overlap
    semantic: cosine only
    keyword:  term overlap only (no embedding call)

    Every mode filters by domain / entity_type, drops scores below the
    threshold, and orders by score descending with entity id as tie-break.
    """

    def __init__(
            self,
            *,
            store: EntityVectorStore,
            embedder: TextEmbedder,
            scorer: Optional[LexicalScorer] = None,
            semantic_weight: Optional[float] = None,
            lexical_weight: Optional[float] = None,
            logger: logging.Logger | None = None,
    ) -> None:
        self.store = store
        self.embedder = embedder
        self.scorer = scorer or LexicalScorer()
        self.semantic_weight = settings.SEMANTIC_WEIGHT if semantic_weight is None else semantic_weight
        self.lexical_weight = settings.LEXICAL_WEIGHT if lexical_weight is None else lexical_weight
        self.logger = logger or get_class_logger(self.__class__)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def search(
            self,
            query: str,
            *,
            mode: str = "hybrid",
            top_k: Optional[int] = None,
            threshold: Optional[float] = None,
            domain: Optional[str] = None,
            entity_type: Optional[str] = None,
    ) -> List[ScoredEntity]:
        if mode == "semantic":
            return self.semantic_search(query, top_k=top_k, threshold=threshold, domain=domain, entity_type=entity_type)
        if mode == "keyword":
            return self.keyword_search(query, top_k=top_k, threshold=threshold, domain=domain, entity_type=entity_type)
        if mode == "hybrid":
            return self.hybrid_search(query, top_k=top_k, threshold=threshold, domain=domain, entity_type=entity_type)
        raise ValueError(f"Unknown search mode '{mode}', expected one of {SEARCH_MODES}")

    def hybrid_search(
            self,
            query: str,
            *,
            top_k: Optional[int] = None,
            threshold: Optional[float] = None,
            domain: Optional[str] = None,
            entity_type: Optional[str] = None,
    ) -> List[ScoredEntity]:
        q = self._clean_query(query)
        snap = self.store.snapshot()
        if len(snap) == 0:
            self.logger.info("hybrid_search: store is empty, nothing to rank")
            return []

        cosines = self._cosines(snap, self._query_vector(q, snap))
        return self._rank(
            snap,
            cosines=cosines,
            terms=query_terms(q),
            mode="hybrid",
            top_k=self._top_k(top_k, "top_k"),
            threshold=self._threshold(threshold),
            domain=domain,
            entity_type=entity_type,
        )

    def semantic_search(
            self,
            query: str,
            *,
            top_k: Optional[int] = None,
            threshold: Optional[float] = None,
            domain: Optional[str] = None,
            entity_type: Optional[str] = None,
    ) -> List[ScoredEntity]:
        q = self._clean_query(query)
        snap = self.store.snapshot()
        if len(snap) == 0:
            return []

        cosines = self._cosines(snap, self._query_vector(q, snap))
        return self._rank(
            snap,
            cosines=cosines,
            terms=[],
            mode="semantic",
            top_k=self._top_k(top_k, "top_k"),
            threshold=self._threshold(threshold),
            domain=domain,
            entity_type=entity_type,
        )

    def keyword_search(
            self,
            query: str,
            *,
            top_k: Optional[int] = None,
            threshold: Optional[float] = None,
            domain: Optional[str] = None,
            entity_type: Optional[str] = None,
    ) -> List[ScoredEntity]:
        """
        Lexical-only ranking. Entities with no term overlap never match; the
        threshold defaults to 0 here since overlap scores are naturally low.
        """
        q = self._clean_query(query)
        snap = self.store.snapshot()
        if len(snap) == 0:
            return []

        return self._rank(
            snap,
            cosines=None,
            terms=query_terms(q),
            mode="keyword",
            top_k=self._top_k(top_k, "top_k"),
            threshold=0.0 if threshold is None else threshold,
            domain=domain,
            entity_type=entity_type,
        )

    def find_similar(
            self,
            entity_id: str,
            *,
            top_k: Optional[int] = None,
            threshold: Optional[float] = None,
            domain: Optional[str] = None,
            entity_type: Optional[str] = None,
    ) -> List[ScoredEntity]:
        """
        Rank other entities against a stored one. Uses the stored vector (no
        embedding call) and the stored text as the lexical query; the entity
        itself is never returned. An empty store gives []; otherwise an unknown
        id raises NotFoundError.
        """
        snap = self.store.snapshot()
        if len(snap) == 0:
            self.logger.info("find_similar('%s'): store is empty", entity_id)
            return []
        record = snap.records.get(entity_id)
        if record is None:
            raise NotFoundError(entity_id)

        cosines = self._cosines(snap, record.vector)
        results = self._rank(
            snap,
            cosines=cosines,
            terms=query_terms(record.text),
            mode="hybrid",
            top_k=self._top_k(top_k, "similar_top_k"),
            threshold=self._threshold(threshold),
            domain=domain,
            entity_type=entity_type,
            exclude_id=entity_id,
        )
        self.logger.info("find_similar('%s'): %d result(s)", entity_id, len(results))
        return results

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    @staticmethod
    def _clean_query(query: str) -> str:
        q = (query or "").strip()
        if not q:
            raise ValueError("query must not be empty")
        if len(q) < settings.MIN_QUERY_CHARS:
            raise ValueError(f"query must be at least {settings.MIN_QUERY_CHARS} characters")
        return q

    @staticmethod
    def _top_k(top_k: Optional[int], key: str) -> int:
        k = settings.SEARCH_DEFAULTS[key] if top_k is None else top_k
        if k < 1:
            raise ValueError(f"top_k must be >= 1, got {k}")
        return k

    @staticmethod
    def _threshold(threshold: Optional[float]) -> float:
        return settings.SEARCH_DEFAULTS["threshold"] if threshold is None else threshold

    def _query_vector(self, query: str, snap: StoreSnapshot) -> np.ndarray:
        vec = np.asarray(self.embedder.embed(query), dtype=np.float32)
        if snap.dimension is not None and vec.shape != (snap.dimension,):
            raise StoreError(
                f"Query embedding has shape {vec.shape}, store dimension is {snap.dimension} "
                f"(embedder model '{self.embedder.model}')"
            )
        return vec

    @staticmethod
    def _cosines(snap: StoreSnapshot, vector: np.ndarray) -> np.ndarray:
        v = np.asarray(vector, dtype=np.float32)
        norm = float(np.linalg.norm(v))
        if norm == 0.0:
            return np.zeros(len(snap), dtype=np.float32)
        # snapshot rows are already unit length
        return snap.matrix @ (v / norm)

    def _rank(
            self,
            snap: StoreSnapshot,
            *,
            cosines: Optional[np.ndarray],
            terms: List[str],
            mode: str,
            top_k: int,
            threshold: float,
            domain: Optional[str],
            entity_type: Optional[str],
            exclude_id: Optional[str] = None,
    ) -> List[ScoredEntity]:
        hits: List[ScoredEntity] = []

        for i, eid in enumerate(snap.ids):
            if eid == exclude_id:
                continue
            rec = snap.records[eid]
            summary = rec.summary
            if domain and summary.domain != domain:
                continue
            if entity_type and summary.entity_type != entity_type:
                continue

            semantic = float(cosines[i]) if cosines is not None else 0.0
            lexical = (
                self.scorer.score_terms(terms, summary.name, rec.keywords, rec.text)
                if mode != "semantic" else 0.0
            )

            if mode == "hybrid":
                score = self.semantic_weight * semantic + self.lexical_weight * lexical
            elif mode == "semantic":
                score = semantic
            else:
                if lexical <= 0.0:
                    continue
                score = lexical

            if score < threshold:
                continue

            hits.append(
                ScoredEntity(
                    entity_id=eid,
                    name=summary.name,
                    description=summary.description,
                    entity_type=summary.entity_type,
                    domain=summary.domain,
                    score=score,
                    semantic_score=semantic,
                    lexical_score=lexical,
                    match_type=mode,
                )
            )

        hits.sort(key=lambda h: (-h.score, h.entity_id))
        self.logger.debug(
            "%s ranking: %d candidate(s) over threshold %.3f, returning top %d",
            mode,
            len(hits),
            threshold,
            top_k,
        )
        return hits[:top_k]
