# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-20
# Updated: 2026-01-28
# Description: search router
# -----------------------------------------------------------------------------
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import get_search_service
from api.schemas.search import SearchHit, SearchMode, SearchRequest, SearchResponse
from services.EntitySearchService import EntitySearchService, ScoredEntity
from utility.errors import EmbeddingError, StoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/search", tags=["search"])


def to_hits(results: List[ScoredEntity]) -> List[SearchHit]:
    return [SearchHit(**r.to_dict()) for r in results]


def run_search(svc: EntitySearchService, req: SearchRequest) -> SearchResponse:
    query_text = (req.query or "").strip()
    if not query_text:
        raise HTTPException(status_code=400, detail="query must not be empty")

    logger.info("search (start) mode=%s query='%s' top_k=%d", req.mode, query_text[:120], req.top_k)
    try:
        results = svc.search(
            query_text,
            mode=req.mode,
            top_k=req.top_k,
            threshold=req.threshold,
            domain=req.domain,
            entity_type=req.entity_type,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except EmbeddingError as e:
        logger.error("search -> 502 (embedding failed): %s", e)
        raise HTTPException(status_code=502, detail=f"Embedding failed: {e}")
    except StoreError as e:
        logger.exception("search -> 500: %s", e)
        raise HTTPException(status_code=500, detail=f"Search failed: {e}")

    hits = to_hits(results)
    logger.info("search (done) results=%d", len(hits))
    return SearchResponse(query=query_text, mode=req.mode, count=len(hits), results=hits)


@router.post("", response_model=SearchResponse)
def post_search(
    req: SearchRequest,
    svc: EntitySearchService = Depends(get_search_service),
) -> SearchResponse:
    return run_search(svc, req)


@router.get("", response_model=SearchResponse)
def get_search(
    q: str = Query(..., min_length=1),
    mode: SearchMode = Query("hybrid"),
    top_k: int = Query(10, ge=1, le=100),
    threshold: Optional[float] = Query(None, ge=-1.0, le=1.0),
    domain: Optional[str] = None,
    entity_type: Optional[str] = None,
    svc: EntitySearchService = Depends(get_search_service),
) -> SearchResponse:
    req = SearchRequest(
        query=q,
        mode=mode,
        top_k=top_k,
        threshold=threshold,
        domain=domain,
        entity_type=entity_type,
    )
    return run_search(svc, req)
