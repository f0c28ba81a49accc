# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-14
# Updated: 2026-01-25
# Description: OpenAIEmbedder
# -----------------------------------------------------------------------------
import threading
from collections import OrderedDict
from typing import List, Optional

import numpy as np
from openai import OpenAI, OpenAIError

import settings
from config.Config import Config
from utility.errors import EmbeddingError
from utility.logging_utils import get_class_logger


class OpenAIEmbedder:
    """
    OpenAI embeddings client for entity and query text.

    One request per call; retry/backoff is owned by the ingestion pipeline so
    that a live search request fails fast instead of stalling on a rate limit.
    Query vectors are kept in a small LRU cache keyed by (model, text).
    """

    def __init__(
            self,
            cfg: Config,
            *,
            normalize: bool = True,
            timeout_s: float = 30.0,
            cache_size: Optional[int] = None,
            client: Optional[OpenAI] = None,
            logger=None,
    ):
        self.cfg = cfg
        self.normalize = normalize
        self.logger = logger or get_class_logger(self.__class__)
        self.model = cfg.openai_embed_model or "text-embedding-3-small"
        self.cache_size = settings.QUERY_CACHE_SIZE if cache_size is None else cache_size

        self._cache: "OrderedDict[str, np.ndarray]" = OrderedDict()
        self._cache_lock = threading.Lock()

        if client is not None:
            self.client = client
        elif cfg.openai_base_url:
            self.client = OpenAI(api_key=cfg.openai_api_key, base_url=cfg.openai_base_url, timeout=timeout_s)
        else:
            self.client = OpenAI(api_key=cfg.openai_api_key, timeout=timeout_s)

        self.logger.info("OpenAI Embedder initialised (model=%s, normalize=%s)", self.model, self.normalize)

    def _to_array(self, rows: List[List[float]]) -> np.ndarray:
        arr = np.asarray(rows, dtype=np.float32)
        if arr.ndim != 2 or arr.shape[1] == 0:
            raise EmbeddingError(f"Malformed embedding response: shape={arr.shape}")
        if not np.all(np.isfinite(arr)):
            raise EmbeddingError("Malformed embedding response: non-finite values")

        # Normalize vectors (cosine-friendly)
        if self.normalize:
            norms = np.linalg.norm(arr, axis=1, keepdims=True) + 1e-12
            arr = (arr / norms).astype(np.float32)
        return arr

    def embed_texts(self, texts: List[str]) -> np.ndarray:
        """Embed a batch of texts in a single request -> array of shape (n, dim)."""
        if not texts:
            return np.empty((0, 0), dtype=np.float32)
        if any(not t or not t.strip() for t in texts):
            raise EmbeddingError("Cannot embed empty text")

        try:
            resp = self.client.embeddings.create(model=self.model, input=texts)
        except OpenAIError as e:
            self.logger.warning("Embedding request failed (model=%s, n=%d): %s", self.model, len(texts), e)
            raise EmbeddingError(f"Embedding request failed: {e}") from e

        data = sorted(resp.data, key=lambda d: d.index)
        if len(data) != len(texts):
            raise EmbeddingError(f"Embedding count mismatch: {len(data)} != {len(texts)}")

        return self._to_array([d.embedding for d in data])

    def embed(self, text: str) -> np.ndarray:
        key = f"{self.model}:{text}"
        with self._cache_lock:
            cached = self._cache.get(key)
            if cached is not None:
                self._cache.move_to_end(key)
                return cached

        vec = self.embed_texts([text])[0]
        vec.setflags(write=False)

        if self.cache_size > 0:
            with self._cache_lock:
                self._cache[key] = vec
                while len(self._cache) > self.cache_size:
                    self._cache.popitem(last=False)
        return vec

    def test_connection(self) -> bool:
        try:
            vec = self.embed_texts(["NAVIGATE embedding healthcheck"])
            self.logger.info("Embedding test call ok (dimension=%d)", vec.shape[1])
            return True
        except EmbeddingError as e:
            self.logger.error("Embedding test call failed: %s", e)
            return False
