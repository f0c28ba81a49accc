# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-24
# Description: Entity
# -----------------------------------------------------------------------------
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class EntitySummary:
    """Display fields carried with an embedding so results render without the source dataset."""
    name: str
    description: str
    entity_type: str
    domain: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "name": self.name,
            "description": self.description,
            "entity_type": self.entity_type,
            "domain": self.domain,
        }


@dataclass
class Entity:
    """
    A domain record eligible for semantic search (NAVIGATE, atlas or CPC internal).

    `embedding_text` is the exact text sent to the embedding model. It is a
    curated concatenation of name, description and structured attributes and
    is usually built by EmbeddingTextBuilder.build_embedding_text().
    """

    # Core identity (id is stable across ingestion runs)
    id: str
    name: str
    description: str
    entity_type: str
    domain: str

    # Text used for the embedding + fingerprint
    embedding_text: str

    # Lexical fallback terms (lowercase)
    keywords: List[str] = field(default_factory=list)

    # Sector, tags, trl, custom ... as supplied by the dataset
    metadata: Dict[str, Any] = field(default_factory=dict)

    def summary(self) -> EntitySummary:
        return EntitySummary(
            name=self.name,
            description=self.description,
            entity_type=self.entity_type,
            domain=self.domain,
        )

    def short_preview(self, n: int = 80) -> str:
        """Return a compact preview for logging/debugging."""
        clean = " ".join(self.name.split())
        preview = (clean[:n] + "...") if len(clean) > n else clean
        return f"[{self.domain}/{self.entity_type}] {self.id}: {preview}"

    @classmethod
    def from_dict(cls, raw: Dict[str, Any], embedding_text: Optional[str] = None) -> "Entity":
        """
        Build an Entity from a dataset row. Accepts both snake_case and the
        camelCase keys used by the exported NAVIGATE / unified entity JSON.
        """
        entity_id = raw.get("id")
        if not isinstance(entity_id, str) or not entity_id.strip():
            raise ValueError(f"Entity record is missing a string 'id': {raw!r:.200}")

        entity_type = raw.get("entity_type") or raw.get("entityType") or ""
        text = embedding_text
        if text is None:
            text = raw.get("embedding_text") or raw.get("embeddingText") or ""

        return cls(
            id=entity_id.strip(),
            name=str(raw.get("name") or ""),
            description=str(raw.get("description") or ""),
            entity_type=str(entity_type),
            domain=str(raw.get("domain") or ""),
            embedding_text=text,
            keywords=list(raw.get("keywords") or []),
            metadata=dict(raw.get("metadata") or {}),
        )
