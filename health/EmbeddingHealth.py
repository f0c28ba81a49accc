# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-06
# Updated: 2026-01-28
# Description: EmbeddingHealth
# -----------------------------------------------------------------------------
import time
import logging
from typing import Optional

import numpy as np

from embedding.TextEmbedder import TextEmbedder
from utility.errors import EmbeddingError
from utility.logging_utils import get_logger


class EmbeddingHealth:
    """
    Smoke test for the embedding client.

    Verifies:
      - The embedding call completes successfully
      - The response is a finite 1-D vector
      - The vector dimension matches the expected dimension (if provided)
    """

    def __init__(
        self,
        embedder: TextEmbedder,
        expected_dim: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.embedder = embedder
        self.expected_dim = expected_dim
        self.logger = logger or get_logger(__name__)

    def run(self) -> bool:
        test_text = "NAVIGATE embedding healthcheck"
        self.logger.info("Running embedding healthcheck using model: %s", self.embedder.model)

        try:
            start = time.time()
            vec = np.asarray(self.embedder.embed(test_text))
            elapsed_ms = (time.time() - start) * 1000.0
        except EmbeddingError as e:
            self.logger.error("Embedding healthcheck FAILED: %s", e)
            return False

        if vec.ndim != 1 or vec.shape[0] == 0 or not np.all(np.isfinite(vec)):
            self.logger.error("Embedding healthcheck returned an invalid vector (shape=%s)", vec.shape)
            return False

        dim = int(vec.shape[0])
        self.logger.info("Embedding call succeeded in %.1f ms. Returned dimension: %d", elapsed_ms, dim)

        if self.expected_dim is not None and dim != self.expected_dim:
            self.logger.warning("Dimension mismatch: expected %d, got %d.", self.expected_dim, dim)
            return False

        self.logger.info("Embedding healthcheck PASSED.")
        return True
