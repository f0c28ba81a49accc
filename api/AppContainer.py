# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-20
# Updated: 2026-10-18
# Description: AppContainer.py
# -----------------------------------------------------------------------------
from typing import Any, Optional

from chat.OpenAIChat import OpenAIChat
from config.Config import Config
from embedding.OpenAIEmbedder import OpenAIEmbedder
from embedding.TextEmbedder import TextEmbedder
from health.EmbeddingHealth import EmbeddingHealth
from health.OpenAIHealth import OpenAIHealth
from health.StoreHealth import StoreHealth
from health.TestRunner import TestRunner
from services.EntityChatService import EntityChatService
from services.EntityIngestService import EntityIngestService
from services.EntitySearchService import EntitySearchService
from services.EntityStatsService import EntityStatsService
from services.HealthService import HealthService
from utility.logging_utils import get_class_logger
from vectorstore.EntityVectorStore import EntityVectorStore
from vectorstore.JsonEntityVectorStore import JsonEntityVectorStore


class AppContainer:
    """
    Owns heavy object instantiation and application wiring.

    Built once per application by api.main.create_app() and kept on
    app.state; FastAPI dependencies read services from there. Any of the
    external clients can be passed in (tests pass fakes); the rest are
    built from Config.
    """

    def __init__(
            self,
            cfg: Optional[Config] = None,
            *,
            embedder: Optional[TextEmbedder] = None,
            store: Optional[EntityVectorStore] = None,
            chat_client: Optional[Any] = None,
    ) -> None:
        self.logger = get_class_logger(self.__class__)

        # Configuration (only needed for whatever is not injected)
        if cfg is None and (embedder is None or store is None or chat_client is None):
            cfg = Config.from_env()
        self.cfg = cfg
        if cfg is not None:
            self.logger.info("Config: %s", cfg.summary())

        # Core infrastructure
        self.embedder = embedder or OpenAIEmbedder(cfg)
        # ingest never reads from the query cache, so force re-embeds really call the API
        self.ingest_embedder = embedder or OpenAIEmbedder(cfg, cache_size=0)
        self.store = store or JsonEntityVectorStore(cfg.store_path, model=self.embedder.model)
        self.openai_chat = chat_client or OpenAIChat(cfg=cfg)

        # Services
        self.search_service = EntitySearchService(store=self.store, embedder=self.embedder)
        self.ingest_service = EntityIngestService(store=self.store, embedder=self.ingest_embedder)
        self.stats_service = EntityStatsService(store=self.store)
        self.chat_service = EntityChatService(
            search_service=self.search_service,
            chat_client=self.openai_chat,
        )

        # Smoke tests / health
        self.store_health = StoreHealth(self.store)
        self.openai_health = OpenAIHealth(self.openai_chat)
        self.test_runner = TestRunner(
            checks={
                "store_health": self.store_health.run,
                "embedding_health": self._embedding_check,
                "openai_health": self.openai_health.run,
            },
            heavy_checks={
                "openai_heavy_health": lambda: self.openai_health.run_heavy_test(paragraphs=30, max_tokens=512),
            },
        )
        self.health_service = HealthService(test_runner=self.test_runner)

    def _embedding_check(self) -> bool:
        # Health-check vectors must fit the store they will be searched against
        expected = self.store.snapshot().dimension
        return EmbeddingHealth(self.embedder, expected_dim=expected).run()
