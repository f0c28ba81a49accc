# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-07
# Updated: 2026-01-28
# Description: dependencies.py
# -----------------------------------------------------------------------------
from fastapi import Depends, Request

from api.AppContainer import AppContainer
from services.EntityChatService import EntityChatService
from services.EntityIngestService import EntityIngestService
from services.EntitySearchService import EntitySearchService
from services.EntityStatsService import EntityStatsService
from services.HealthService import HealthService


def get_container(request: Request) -> AppContainer:
    # created by create_app() / the lifespan hook
    return request.app.state.container


def get_health_service(container: AppContainer = Depends(get_container)) -> HealthService:
    return container.health_service


def get_stats_service(container: AppContainer = Depends(get_container)) -> EntityStatsService:
    return container.stats_service


def get_search_service(container: AppContainer = Depends(get_container)) -> EntitySearchService:
    return container.search_service


def get_ingest_service(container: AppContainer = Depends(get_container)) -> EntityIngestService:
    return container.ingest_service


def get_chat_service(container: AppContainer = Depends(get_container)) -> EntityChatService:
    return container.chat_service
