# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-28
# Description: similar.py
# -----------------------------------------------------------------------------
import logging

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_search_service
from api.routers.search import to_hits
from api.schemas.similar import SimilarRequest, SimilarResponse
from services.EntitySearchService import EntitySearchService
from utility.errors import NotFoundError, StoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/similar", tags=["similar"])


@router.post("", response_model=SimilarResponse)
def post_similar(
    req: SimilarRequest,
    svc: EntitySearchService = Depends(get_search_service),
) -> SimilarResponse:
    entity_id = (req.entity_id or "").strip()
    if not entity_id:
        raise HTTPException(status_code=400, detail="entity_id must not be empty")

    logger.info("POST /similar (start) entity_id='%s' top_k=%d", entity_id, req.top_k)
    try:
        results = svc.find_similar(
            entity_id,
            top_k=req.top_k,
            threshold=req.threshold,
            domain=req.domain,
            entity_type=req.entity_type,
        )
    except NotFoundError as e:
        logger.info("POST /similar -> 404 entity_id='%s'", entity_id)
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StoreError as e:
        logger.exception("POST /similar -> 500: %s", e)
        raise HTTPException(status_code=500, detail=f"find_similar failed: {e}")

    hits = to_hits(results)
    logger.info("POST /similar (done) entity_id='%s' results=%d", entity_id, len(hits))
    return SimilarResponse(entity_id=entity_id, count=len(hits), results=hits)
