# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-25
# Description: StoreDocument.py
# -----------------------------------------------------------------------------
"""
Schema of the persisted embedding store document.

Current format (format_version 2):

    {
      "manifest": {"format_version": 2, "model": "...", "dimension": 1536,
                   "count": 2, "updated_at": "..."},
      "records": [{"entity_id": "...", "vector": [...], "fingerprint": "...",
                   "text": "...", "keywords": [...], "summary": {...},
                   "created_at": "...", "updated_at": "..."}]
    }

The first JSON store wrote a bare list of records keyed `entityId` /
`embedding`; LegacyRecord reads those so an old cache can be carried over.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

FORMAT_VERSION = 2


class StoredSummary(BaseModel):
    name: str = ""
    description: str = ""
    entity_type: str = ""
    domain: str = ""


class StoredRecord(BaseModel):
    entity_id: str = Field(..., min_length=1)
    vector: List[float] = Field(..., min_length=1)
    fingerprint: str = Field(..., min_length=1)
    text: str = ""
    keywords: List[str] = Field(default_factory=list)
    summary: StoredSummary = Field(default_factory=StoredSummary)
    created_at: str
    updated_at: str


class StoreManifest(BaseModel):
    format_version: int = FORMAT_VERSION
    model: str = ""
    dimension: Optional[int] = Field(None, ge=1)
    count: int = Field(0, ge=0)
    updated_at: Optional[str] = None


class StoreDocument(BaseModel):
    manifest: StoreManifest
    records: List[StoredRecord] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_consistency(self) -> "StoreDocument":
        if self.manifest.count != len(self.records):
            raise ValueError(
                f"manifest count {self.manifest.count} != {len(self.records)} records"
            )

        seen = set()
        for rec in self.records:
            if rec.entity_id in seen:
                raise ValueError(f"duplicate entity_id '{rec.entity_id}'")
            seen.add(rec.entity_id)

        if self.records:
            dim = self.manifest.dimension
            if dim is None:
                raise ValueError("manifest dimension missing for a non-empty store")
            bad = [r.entity_id for r in self.records if len(r.vector) != dim]
            if bad:
                raise ValueError(
                    f"{len(bad)} record(s) do not match manifest dimension {dim}: {bad[:5]}"
                )
        return self


class LegacyMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = ""
    domain: str = ""
    entity_type: str = Field("", alias="entityType")


class LegacyRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    entity_id: str = Field(..., alias="entityId", min_length=1)
    embedding: List[float] = Field(..., min_length=1)
    text: str = ""
    keywords: List[str] = Field(default_factory=list)
    metadata: LegacyMetadata = Field(default_factory=LegacyMetadata)
    created_at: str = Field("", alias="createdAt")
    updated_at: str = Field("", alias="updatedAt")


def record_to_dict(
        entity_id: str,
        vector: List[float],
        fingerprint: str,
        text: str,
        keywords: List[str],
        summary: Dict[str, str],
        created_at: str,
        updated_at: str,
) -> Dict[str, Any]:
    return {
        "entity_id": entity_id,
        "vector": vector,
        "fingerprint": fingerprint,
        "text": text,
        "keywords": keywords,
        "summary": summary,
        "created_at": created_at,
        "updated_at": updated_at,
    }
