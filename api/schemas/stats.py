# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-07
# Updated: 2026-01-28
# Description: stats.py
# -----------------------------------------------------------------------------
from typing import Dict, Optional

from pydantic import BaseModel


class StatsResponse(BaseModel):
    count: int
    size_bytes: int
    size_mb: float
    dimension: Optional[int] = None
    model: str = ""
    last_updated: Optional[str] = None
    storage_type: str
    path: str
    by_domain: Dict[str, int] = {}
    by_entity_type: Dict[str, int] = {}
