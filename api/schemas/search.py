# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-20
# Updated: 2026-01-28
# Description: search.py
# -----------------------------------------------------------------------------
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

SearchMode = Literal["semantic", "keyword", "hybrid"]


class SearchRequest(BaseModel):
    query: str = Field(..., min_length=1)
    mode: SearchMode = "hybrid"
    top_k: int = Field(10, ge=1, le=100)
    threshold: Optional[float] = Field(None, ge=-1.0, le=1.0)
    domain: Optional[str] = None
    entity_type: Optional[str] = None


class SearchHit(BaseModel):
    entity_id: str
    name: str
    description: str = ""
    entity_type: str = ""
    domain: str = ""
    score: float
    semantic_score: float = 0.0
    lexical_score: float = 0.0
    match_type: str


class SearchResponse(BaseModel):
    query: str
    mode: SearchMode
    count: int
    results: List[SearchHit]
