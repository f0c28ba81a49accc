# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-29
# Description: test_openai_clients.py
# -----------------------------------------------------------------------------
from types import SimpleNamespace

import numpy as np
import pytest
from openai import OpenAIError

from api.AppContainer import AppContainer
from chat.OpenAIChat import OpenAIChat
from config.Config import Config
from embedding.OpenAIEmbedder import OpenAIEmbedder
from health.OpenAIHealth import OpenAIHealth
from utility.errors import EmbeddingError
from vectorstore.JsonEntityVectorStore import JsonEntityVectorStore

from conftest import FakeChat, make_entity


def _cfg() -> Config:
    return Config(
        openai_api_key="sk-test-key",
        openai_base_url="",
        openai_embed_model="text-embedding-3-small",
        openai_chat_model="gpt-4o",
        store_path="./unused.json",
    )


class FakeEmbeddings:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.requests = []

    def create(self, model, input):
        self.requests.append(list(input))
        if self.fail:
            raise OpenAIError("rate limit reached")
        # returned out of order on purpose; the client sorts by index
        data = [
            SimpleNamespace(index=i, embedding=[3.0, 4.0] if i == 0 else [0.0, 2.0])
            for i in range(len(input))
        ]
        return SimpleNamespace(data=list(reversed(data)))


class FakeCompletions:
    def __init__(self):
        self.params = []

    def create(self, **params):
        self.params.append(params)
        if params.get("stream"):
            return iter([
                SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content="Hel"))]),
                SimpleNamespace(choices=[]),
                SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content="lo"))]),
            ])
        message = SimpleNamespace(content="OK")
        return SimpleNamespace(choices=[SimpleNamespace(message=message)], model="gpt-4o", usage=None)


def test_embedder_sorts_by_index_and_normalizes():
    client = SimpleNamespace(embeddings=FakeEmbeddings())
    embedder = OpenAIEmbedder(_cfg(), client=client)

    arr = embedder.embed_texts(["first", "second"])

    assert arr.dtype == np.float32
    np.testing.assert_allclose(arr[0], [0.6, 0.8], rtol=1e-6)
    np.testing.assert_allclose(arr[1], [0.0, 1.0], rtol=1e-6)


def test_embedder_caches_query_vectors():
    fake = FakeEmbeddings()
    embedder = OpenAIEmbedder(_cfg(), client=SimpleNamespace(embeddings=fake), cache_size=4)

    first = embedder.embed("drone corridor")
    second = embedder.embed("drone corridor")

    assert first is second
    assert len(fake.requests) == 1


def test_embedder_without_cache_calls_every_time():
    fake = FakeEmbeddings()
    embedder = OpenAIEmbedder(_cfg(), client=SimpleNamespace(embeddings=fake), cache_size=0)
    embedder.embed("a")
    embedder.embed("a")
    assert len(fake.requests) == 2


def test_forced_reingest_is_not_served_from_the_query_cache(tmp_path):
    container = AppContainer(
        _cfg(),
        store=JsonEntityVectorStore(tmp_path / "embeddings.json", model="text-embedding-3-small"),
        chat_client=FakeChat(),
    )
    fake = FakeEmbeddings()
    container.ingest_service.embedder.client = SimpleNamespace(embeddings=fake)
    entities = [make_entity("nav-1", "Drone corridor"), make_entity("nav-2", "Shore power")]

    container.ingest_service.embed_all(entities)
    container.ingest_service.embed_all(entities, force=True)

    assert len(fake.requests) == 4
    assert container.ingest_service.embedder is not container.search_service.embedder


def test_embedder_wraps_api_errors():
    embedder = OpenAIEmbedder(_cfg(), client=SimpleNamespace(embeddings=FakeEmbeddings(fail=True)))
    with pytest.raises(EmbeddingError, match="rate limit"):
        embedder.embed("anything")
    assert embedder.test_connection() is False


def test_embedder_rejects_empty_text():
    embedder = OpenAIEmbedder(_cfg(), client=SimpleNamespace(embeddings=FakeEmbeddings()))
    with pytest.raises(EmbeddingError):
        embedder.embed("   ")


def test_chat_passes_params_and_streams_deltas():
    completions = FakeCompletions()
    chat = OpenAIChat(cfg=_cfg(), client=SimpleNamespace(chat=SimpleNamespace(completions=completions)))

    out = chat.simple_chat("ping", system_text="health check", max_tokens=5)
    assert out["answer"] == "OK"
    assert completions.params[0]["model"] == "gpt-4o"
    assert completions.params[0]["max_tokens"] == 5
    assert completions.params[0]["messages"][0] == {"role": "system", "content": "health check"}

    text = "".join(chat.chat_stream([{"role": "user", "content": "hi"}]))
    assert text == "Hello"
    assert completions.params[-1]["stream"] is True


def test_chat_rejects_empty_messages():
    chat = OpenAIChat(cfg=_cfg(), client=SimpleNamespace(chat=SimpleNamespace(completions=FakeCompletions())))
    with pytest.raises(ValueError):
        chat.chat([])


def test_openai_health_hides_the_key():
    chat = OpenAIChat(cfg=_cfg(), client=SimpleNamespace(chat=SimpleNamespace(completions=FakeCompletions())))
    health = OpenAIHealth(chat)
    info = health.get_service_info()
    assert info["api_key_prefix"] == "sk-t..."
    assert health.run() is True


def test_config_requires_api_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(ValueError, match="OPENAI_API_KEY"):
        Config.from_env()


def test_config_defaults(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-abc")
    monkeypatch.delenv("NAV_STORE_PATH", raising=False)
    monkeypatch.delenv("OPENAI_EMBED_MODEL", raising=False)
    cfg = Config.from_env()
    assert cfg.openai_embed_model == "text-embedding-3-small"
    assert cfg.store_path == "./data/embeddings/embeddings.json"
    assert cfg.summary()["openai_api_key_prefix"] == "sk-a..."
