# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-07
# Updated: 2026-01-28
# Description: stats.py
# -----------------------------------------------------------------------------
import logging

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_stats_service
from api.schemas.stats import StatsResponse
from services.EntityStatsService import EntityStatsService
from utility.errors import StoreError

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/stats",
    tags=["stats"]
)


@router.get("", response_model=StatsResponse)
def get_stats(svc: EntityStatsService = Depends(get_stats_service)) -> StatsResponse:
    logger.info("GET /stats (start)")
    try:
        return StatsResponse(**svc.get_stats())
    except StoreError as e:
        logger.exception("GET /stats -> 500: %s", e)
        raise HTTPException(status_code=500, detail=f"stats failed: {e}")
