# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-28
# Description: ingest.py
# -----------------------------------------------------------------------------
from typing import Any, Dict, List

from pydantic import BaseModel, Field


class IngestRequest(BaseModel):
    # Raw entity records (id, name, description, entity_type/entityType, domain, metadata ...)
    entities: List[Dict[str, Any]] = Field(..., min_length=1)
    force: bool = False


class IngestResponse(BaseModel):
    embedded: List[str] = Field(default_factory=list)
    skipped: List[str] = Field(default_factory=list)
    failed: List[str] = Field(default_factory=list)
    errors: Dict[str, str] = Field(default_factory=dict)
    rejected: Dict[str, str] = Field(default_factory=dict)
    cancelled: bool = False
    not_attempted: int = 0
    elapsed_s: float = 0.0
