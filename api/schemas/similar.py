# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-28
# Description: similar.py
# -----------------------------------------------------------------------------
from typing import List, Optional

from pydantic import BaseModel, Field

from api.schemas.search import SearchHit


class SimilarRequest(BaseModel):
    entity_id: str = Field(..., min_length=1)
    top_k: int = Field(5, ge=1, le=100)
    threshold: Optional[float] = Field(None, ge=-1.0, le=1.0)
    domain: Optional[str] = None
    entity_type: Optional[str] = None


class SimilarResponse(BaseModel):
    entity_id: str
    count: int
    results: List[SearchHit]
