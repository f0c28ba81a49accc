# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-24
# Description: TextEmbedder
# -----------------------------------------------------------------------------
from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class TextEmbedder(Protocol):
    """
    Embedding client boundary: text -> fixed-length float vector.
    Implementations raise utility.errors.EmbeddingError on failure.
    """

    model: str

    def embed(self, text: str) -> np.ndarray:
        ...
