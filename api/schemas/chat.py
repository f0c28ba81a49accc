# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-28
# Updated: 2026-01-28
# Description: api/schemas/chat.py
# -----------------------------------------------------------------------------
from __future__ import annotations

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from api.schemas.search import SearchHit


class ChatRequest(BaseModel):
    question: str = Field(..., min_length=1)

    # Retrieval controls (mirror /search)
    n_results: int = Field(5, ge=1, le=20)
    domain: Optional[str] = None
    entity_type: Optional[str] = None
    threshold: Optional[float] = Field(None, ge=-1.0, le=1.0)

    # Prompt / model controls
    temperature: float = Field(0.0, ge=0.0, le=2.0)
    max_tokens: int = Field(512, ge=1, le=4096)

    history: Optional[List[Dict[str, str]]] = None


class ChatResponse(BaseModel):
    question: str
    answer: str
    n_results: int
    sources: List[SearchHit] = Field(default_factory=list)

    # helpful for debugging / telemetry
    model: Optional[str] = None
    usage: Optional[Dict[str, Any]] = None
