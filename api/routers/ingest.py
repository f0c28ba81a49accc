# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-28
# Description: ingest.py
# -----------------------------------------------------------------------------
import logging
from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_ingest_service
from api.schemas.ingest import IngestRequest, IngestResponse
from entity.EmbeddingTextBuilder import build_entity
from entity.Entity import Entity
from services.EntityIngestService import EntityIngestService
from utility.errors import StoreError, WriterBusyError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ingest", tags=["ingest"])


@router.post("", response_model=IngestResponse)
def post_ingest(
    req: IngestRequest,
    svc: EntityIngestService = Depends(get_ingest_service),
) -> IngestResponse:
    logger.info("POST /ingest (start) entities=%d force=%s", len(req.entities), req.force)

    entities: List[Entity] = []
    rejected: Dict[str, str] = {}
    for i, raw in enumerate(req.entities):
        try:
            entities.append(build_entity(raw))
        except ValueError as e:
            rejected[str(raw.get("id") or f"#{i}")] = str(e)

    if not entities:
        raise HTTPException(status_code=400, detail={"message": "no valid entities", "rejected": rejected})

    try:
        report = svc.embed_all(entities, force=req.force)
    except WriterBusyError as e:
        logger.warning("POST /ingest -> 409: %s", e)
        raise HTTPException(status_code=409, detail=str(e))
    except StoreError as e:
        logger.exception("POST /ingest -> 500: %s", e)
        raise HTTPException(status_code=500, detail=f"ingest failed: {e}")

    logger.info("POST /ingest (done) %s", report.summary())
    return IngestResponse(
        embedded=report.embedded,
        skipped=report.skipped,
        failed=report.failed,
        errors=report.errors,
        rejected=rejected,
        cancelled=report.cancelled,
        not_attempted=report.not_attempted,
        elapsed_s=report.elapsed_s,
    )
