# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-25
# Description: EmbeddingTextBuilder
# -----------------------------------------------------------------------------
"""
Builds the text that is embedded for each entity, plus the keyword list used
by lexical scoring.

More context gives better semantic matches, so the text is the entity name,
its description, and whatever structured attributes the domain carries
(sector, TRL, tags, CPC focus-area fields ...), one attribute per paragraph.
"""
from typing import Any, Dict, Iterable, List, Mapping

import settings
from entity.Entity import Entity

KB_SNIPPET_CHARS = 500


def _join(values: Any) -> str:
    if isinstance(values, (list, tuple)):
        return ", ".join(str(v) for v in values if v is not None and str(v) != "")
    return "" if values is None else str(values)


def _labelled(parts: List[str], label: str, value: Any) -> None:
    text = _join(value)
    if text:
        parts.append(f"{label}: {text}")


def _sector_text(sector: Any) -> str:
    if isinstance(sector, str):
        return sector
    if isinstance(sector, (list, tuple)):
        return _join(sector)
    if isinstance(sector, Mapping):
        primary = sector.get("primary") or ""
        secondary = sector.get("secondary") or []
        if primary and secondary:
            return f"{primary} ({_join(secondary)})"
        return str(primary)
    return ""


def _trl_text(trl: Any) -> str:
    if isinstance(trl, Mapping):
        if trl.get("min") is not None:
            return f"{trl.get('min')}-{trl.get('max')}"
        if trl.get("current") is not None:
            return str(trl.get("current"))
        return ""
    return "" if trl is None else str(trl)


def _funding_text(amount: float) -> str:
    if amount >= 1_000_000:
        return f"£{amount / 1_000_000:.1f}M"
    return f"£{amount / 1000:.0f}K"


def _atlas_challenge_parts(parts: List[str], metadata: Mapping[str, Any]) -> None:
    _labelled(parts, "Keywords", metadata.get("keywords"))

    problem_type = metadata.get("problem_type")
    if isinstance(problem_type, str):
        _labelled(parts, "Problem type", problem_type)
    elif isinstance(problem_type, Mapping):
        _labelled(parts, "Problem type", problem_type.get("primary"))
        _labelled(parts, "Sub-categories", problem_type.get("sub_categories"))
        _labelled(parts, "Technology domains", problem_type.get("technology_domains"))

    sector = metadata.get("sector")
    if isinstance(sector, Mapping):
        _labelled(parts, "Cross-sector signals", sector.get("cross_sector_signals"))
    _labelled(parts, "Sector", _sector_text(sector))

    buyer = metadata.get("buyer")
    if isinstance(buyer, Mapping):
        _labelled(parts, "Organization", buyer.get("organization"))


def _navigate_parts(parts: List[str], metadata: Mapping[str, Any]) -> None:
    _labelled(parts, "Sector", _sector_text(metadata.get("sector")))
    if metadata.get("trl") is not None:
        _labelled(parts, "TRL", _trl_text(metadata.get("trl")))
    _labelled(parts, "Regional availability", metadata.get("regional_availability"))
    _labelled(parts, "Tags", metadata.get("tags"))

    custom = metadata.get("custom") or {}
    _labelled(parts, "Capabilities", custom.get("capabilities"))
    _labelled(parts, "Expertise", custom.get("expertise"))
    _labelled(parts, "Technology type", custom.get("technology_type"))
    _labelled(parts, "Transport modes", custom.get("modes"))
    _labelled(parts, "Strategic themes", custom.get("strategicThemes"))


# CPC internal: (label, custom key) per entity type
_CPC_FIELDS: Dict[str, List[tuple]] = {
    "focus_area": [
        ("Transport mode", "mode"),
        ("Strategic themes", "strategic_themes"),
        ("Stage", "stage"),
        ("Key technologies", "key_technologies"),
        ("Market barriers", "market_barriers"),
        ("Stakeholder types", "stakeholder_types"),
        ("CPC services", "cpc_services"),
    ],
    "milestone": [
        ("Transport mode", "mode"),
        ("Stage", "stage"),
        ("Year", "year"),
        ("Customer", "customer_status"),
        ("Assessment", "assessment"),
        ("Business growth score", "business_growth_score"),
        ("IS alignment", "is_alignment"),
    ],
    "stage": [
        ("Stage number", "stage_number"),
        ("Purpose", "purpose"),
        ("Typical outputs", "typical_outputs"),
        ("Decision gate", "decision_gate"),
        ("CPC strategy", "cpc_strategy_link"),
    ],
}


def _cpc_parts(parts: List[str], entity_type: str, metadata: Mapping[str, Any]) -> None:
    custom = metadata.get("custom") or {}

    for label, key in _CPC_FIELDS.get(entity_type, []):
        _labelled(parts, label, custom.get(key))

    if entity_type == "milestone" and custom.get("focus_area_ids"):
        parts.append(f"Related focus areas: {len(custom['focus_area_ids'])}")

    # Curated text from the source spreadsheet, when present
    if entity_type in _CPC_FIELDS and custom.get("embedding_text"):
        parts.append(str(custom["embedding_text"]))

    # Legacy capability/initiative records
    _labelled(parts, "Capability type", custom.get("capabilityType"))
    _labelled(parts, "Business unit", custom.get("businessUnit"))


def build_embedding_text(raw: Mapping[str, Any], max_chars: int | None = None) -> str:
    """
    Build the embedding text for a raw entity record (dict with id, name,
    description, entityType/entity_type, domain, metadata).
    """
    max_chars = settings.MAX_EMBEDDING_TEXT_CHARS if max_chars is None else max_chars

    name = str(raw.get("name") or "")
    description = str(raw.get("description") or "")
    entity_type = str(raw.get("entity_type") or raw.get("entityType") or "")
    domain = str(raw.get("domain") or "")
    metadata: Mapping[str, Any] = raw.get("metadata") or {}

    parts: List[str] = [name]
    if description:
        parts.append(description)

    kb = metadata.get("knowledge_base")
    if isinstance(kb, Mapping) and kb.get("content"):
        parts.append(str(kb["content"])[:KB_SNIPPET_CHARS])

    if domain == "atlas" and entity_type == "challenge":
        _atlas_challenge_parts(parts, metadata)
    elif domain == "navigate":
        _navigate_parts(parts, metadata)
    elif domain == "cpc-internal":
        _cpc_parts(parts, entity_type, metadata)

    funding = metadata.get("funding")
    if isinstance(funding, Mapping):
        amount = funding.get("amount")
        if isinstance(amount, (int, float)) and amount > 0:
            parts.append(f"Funding: {_funding_text(float(amount))}")

    parts.append(f"Type: {entity_type}")

    text = "\n\n".join(p for p in parts if p)
    return text[:max_chars]


def _add_terms(keywords: Dict[str, None], values: Iterable[Any]) -> None:
    for v in values:
        if v is None:
            continue
        term = str(v).strip().lower()
        if term:
            keywords[term] = None


def extract_keywords(raw: Mapping[str, Any]) -> List[str]:
    """
    Keywords for the lexical fallback: name words (> 2 chars), explicit
    keywords, tags, primary sector and cross-sector signals. Order preserved,
    duplicates removed.
    """
    keywords: Dict[str, None] = {}
    metadata: Mapping[str, Any] = raw.get("metadata") or {}

    _add_terms(keywords, (w for w in str(raw.get("name") or "").lower().split() if len(w) > 2))
    _add_terms(keywords, metadata.get("keywords") or [])
    _add_terms(keywords, metadata.get("tags") or [])

    sector = metadata.get("sector")
    if isinstance(sector, str):
        _add_terms(keywords, [sector])
    elif isinstance(sector, (list, tuple)):
        _add_terms(keywords, sector)
    elif isinstance(sector, Mapping):
        _add_terms(keywords, [sector.get("primary")])
        _add_terms(keywords, sector.get("cross_sector_signals") or [])

    return list(keywords)


def build_entity(raw: Mapping[str, Any]) -> Entity:
    """Raw dataset record -> Entity with built embedding text and keywords."""
    text = raw.get("embedding_text") or raw.get("embeddingText") or build_embedding_text(raw)
    entity = Entity.from_dict(dict(raw), embedding_text=text)
    if not entity.keywords:
        entity.keywords = extract_keywords(raw)
    return entity
