# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-07
# Updated: 2026-01-28
# Description: health.py
# -----------------------------------------------------------------------------
import logging
from fastapi import APIRouter, Depends, HTTPException, Query

from api.AppContainer import AppContainer
from api.dependencies import get_container, get_health_service
from api.schemas.health import HealthResponse, DeepHealthResponse
from services.HealthService import HealthService
from utility.errors import StoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
def health_check(container: AppContainer = Depends(get_container)) -> HealthResponse:
    try:
        records = len(container.store.snapshot())
    except StoreError as e:
        logger.error("GET /health -> 503: %s", e)
        raise HTTPException(status_code=503, detail=f"embedding store unavailable: {e}")
    return HealthResponse(status="ok", message="NAVIGATE search API running", records=records)


@router.get("/deep", response_model=DeepHealthResponse)
def deep_health_check(
    svc: HealthService = Depends(get_health_service),
    run_heavy: bool = Query(False, description="Run heavier OpenAI test"),
) -> DeepHealthResponse:
    logger.info("GET /health/deep called (run_heavy=%s)", run_heavy)
    result = svc.deep_health(run_heavy=run_heavy)
    logger.info("GET /health/deep completed: %s", result.status)
    return result
