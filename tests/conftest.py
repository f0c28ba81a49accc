# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-12
# Updated: 2026-01-29
# Description: conftest.py
# -----------------------------------------------------------------------------

import hashlib
import os
import sys
import threading
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np
import pytest

# add project root to sys.path
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

# keep test runs out of ./logs
os.environ.setdefault("NAV_LOG_TO_FILE", "0")

from entity.Entity import Entity  # noqa: E402
from utility.errors import EmbeddingError  # noqa: E402
from utility.logging_utils import configure_logging  # noqa: E402
from vectorstore.JsonEntityVectorStore import JsonEntityVectorStore  # noqa: E402

DIM = 8


def unit(*components: float, dim: int = DIM) -> np.ndarray:
    v = np.zeros(dim, dtype=np.float32)
    v[: len(components)] = components
    return v / np.linalg.norm(v)


class FakeEmbedder:
    """
    Deterministic embedder for tests.

    Texts listed in `vectors` get that exact vector; any other text gets a
    pseudo-random vector seeded from its hash. `fail_times[text] = n` makes
    the first n calls for that text raise EmbeddingError; texts in
    `always_fail` never succeed.
    """

    def __init__(
            self,
            dim: int = DIM,
            vectors: Optional[Dict[str, np.ndarray]] = None,
            fail_times: Optional[Dict[str, int]] = None,
            always_fail: Optional[set] = None,
            model: str = "fake-embed",
    ):
        self.dim = dim
        self.model = model
        self.vectors = dict(vectors or {})
        self.fail_times = dict(fail_times or {})
        self.always_fail = set(always_fail or ())
        self.calls: List[str] = []
        self._lock = threading.Lock()

    def embed(self, text: str) -> np.ndarray:
        with self._lock:
            self.calls.append(text)
            if text in self.always_fail:
                raise EmbeddingError(f"quota exceeded for {text[:20]!r}")
            remaining = self.fail_times.get(text, 0)
            if remaining > 0:
                self.fail_times[text] = remaining - 1
                raise EmbeddingError("rate limited")

        if text in self.vectors:
            return np.asarray(self.vectors[text], dtype=np.float32)

        seed = int(hashlib.sha256(text.encode("utf-8")).hexdigest()[:8], 16)
        return np.random.default_rng(seed).normal(size=self.dim).astype(np.float32)


class FakeChoice:
    def __init__(self, content: str):
        self.message = type("Msg", (), {"content": content})()


class FakeChatResponse:
    def __init__(self, content: str, model: str = "fake-chat"):
        self.choices = [FakeChoice(content)]
        self.model = model
        self.usage = {"prompt_tokens": 10, "completion_tokens": 3, "total_tokens": 13}


class FakeChat:
    """Stands in for chat.OpenAIChat: records messages, returns canned text."""

    def __init__(self, answer: str = "Drone corridors are covered by [nav-1]."):
        self.answer = answer
        self.model = "fake-chat"
        self.cfg = type("Cfg", (), {"openai_api_key": "sk-test", "openai_base_url": ""})()
        self.requests: List[list] = []

    def chat(self, messages, temperature=0.0, max_tokens=512, **kwargs):
        self.requests.append(messages)
        return FakeChatResponse(self.answer)

    def chat_stream(self, messages, temperature=0.0, max_tokens=512, **kwargs):
        self.requests.append(messages)
        for word in self.answer.split(" "):
            yield word + " "

    def simple_chat(self, user_text, system_text=None, **kwargs):
        return {"answer": "OK", "raw": None, "usage": None, "model": self.model}


def make_entity(
        entity_id: str,
        name: str,
        text: Optional[str] = None,
        *,
        domain: str = "navigate",
        entity_type: str = "technology",
        description: str = "",
        keywords: Optional[List[str]] = None,
) -> Entity:
    return Entity(
        id=entity_id,
        name=name,
        description=description,
        entity_type=entity_type,
        domain=domain,
        embedding_text=text if text is not None else f"{name}\n\n{description}",
        keywords=list(keywords or []),
    )


@pytest.fixture(autouse=True)
def _propagate_package_logs(monkeypatch):
    # caplog listens on the root logger
    monkeypatch.setattr(configure_logging(), "propagate", True)


@pytest.fixture
def store_path(tmp_path) -> Path:
    return tmp_path / "embeddings" / "embeddings.json"


@pytest.fixture
def store(store_path) -> JsonEntityVectorStore:
    s = JsonEntityVectorStore(store_path, model="fake-embed")
    s.ensure_ready()
    return s


@pytest.fixture
def embedder() -> FakeEmbedder:
    return FakeEmbedder()
