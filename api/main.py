# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-07
# Updated: 2026-01-28
# Description: main.py
# -----------------------------------------------------------------------------
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from api.AppContainer import AppContainer
from api.routers import chat, health, ingest, search, similar, stats

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if getattr(app.state, "container", None) is None:
        app.state.container = AppContainer()
    # Load (or recover) the embedding document before the first request
    app.state.container.store.ensure_ready()
    yield


def create_app(container: Optional[AppContainer] = None) -> FastAPI:
    app = FastAPI(title="NAVIGATE Semantic Search API", lifespan=lifespan)
    app.state.container = container

    app.include_router(health.router)
    app.include_router(stats.router)
    app.include_router(search.router)
    app.include_router(similar.router)
    app.include_router(ingest.router)
    app.include_router(chat.router)
    return app


# Served by uvicorn: uvicorn api.main:app --port 8000
app = create_app()
