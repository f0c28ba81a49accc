# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-27
# Description: CPCDomainLoader
# -----------------------------------------------------------------------------
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping

from entity.EmbeddingTextBuilder import build_entity
from entity.Entity import Entity
from utility.logging_utils import get_class_logger

CPC_DOMAIN = "cpc-internal"

FOCUS_AREAS_FILE = "focus_areas.json"
MILESTONES_FILE = "milestones.json"
STAGES_FILE = "stage_framework.json"


def _list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, (list, tuple)) else []


def _lower(value: Any) -> str:
    return str(value).lower() if value else ""


def focus_area_record(fa: Mapping[str, Any]) -> Dict[str, Any]:
    mode = fa.get("mode") or ""
    themes = _list(fa.get("strategic_themes"))
    return {
        "id": fa.get("id"),
        "name": fa.get("name") or "",
        "description": fa.get("description") or "",
        "entity_type": "focus_area",
        "domain": CPC_DOMAIN,
        "metadata": {
            "sector": mode,
            "tags": [t for t in themes + [fa.get("stage"), _lower(mode)] if t],
            "custom": {
                "mode": mode,
                "strategic_themes": themes,
                "stage": fa.get("stage"),
                "key_technologies": _list(fa.get("key_technologies")),
                "stakeholder_types": _list(fa.get("stakeholder_types")),
                "market_barriers": _list(fa.get("market_barriers")),
                "cpc_services": _list(fa.get("cpc_services")),
                "related_projects": _list(fa.get("related_projects")),
                "embedding_text": fa.get("embedding_text"),
            },
        },
    }


def milestone_record(ms: Mapping[str, Any]) -> Dict[str, Any]:
    mode = ms.get("mode") or ""
    assessment = ms.get("assessment") or ""
    return {
        "id": ms.get("id"),
        "name": ms.get("activity") or "",
        "description": ms.get("rationale") or "",
        "entity_type": "milestone",
        "domain": CPC_DOMAIN,
        "metadata": {
            "sector": mode,
            "tags": [t for t in (_lower(mode), ms.get("stage"), ms.get("year"), assessment) if t],
            "status": assessment.lower(),
            "custom": {
                "mode": mode,
                "impact_priority": ms.get("impact_priority"),
                "customer_status": ms.get("customer_status"),
                "business_growth_score": ms.get("business_growth_score"),
                "is_alignment": ms.get("is_alignment"),
                "assessment": assessment,
                "stage": ms.get("stage"),
                "year": ms.get("year"),
                "focus_area_ids": _list(ms.get("focus_area_ids")),
                "embedding_text": ms.get("embedding_text"),
            },
        },
    }


def stage_record(stage: Mapping[str, Any]) -> Dict[str, Any]:
    number = stage.get("stage_number")
    return {
        "id": stage.get("id"),
        "name": stage.get("name") or "",
        "description": stage.get("description") or "",
        "entity_type": "stage",
        "domain": CPC_DOMAIN,
        "metadata": {
            "tags": ["framework", "maturity", f"stage-{number}"],
            "custom": {
                "stage_number": number,
                "purpose": stage.get("purpose"),
                "typical_outputs": _list(stage.get("typical_outputs")),
                "validation_questions": _list(stage.get("validation_questions")),
                "development_activities": _list(stage.get("development_activities")),
                "commercialisation_activities": _list(stage.get("commercialisation_activities")),
                "logic_model_alignment": _list(stage.get("logic_model_alignment")),
                "cpc_strategy_link": stage.get("cpc_strategy_link"),
                "decision_gate": stage.get("decision_gate"),
                "embedding_text": stage.get("embedding_text"),
            },
        },
    }


class CPCDomainLoader:
    """
    Reads the CPC internal dataset directory:
      focus_areas.json      {"entities": [...]}   -> focus_area
      milestones.json       {"milestones": [...]} -> milestone
      stage_framework.json  {"stages": [...]}     -> stage

    A missing file contributes no entities (logged); a malformed one raises.
    """

    def __init__(self, data_dir: str | Path, *, logger: logging.Logger | None = None):
        self.data_dir = Path(data_dir)
        self.logger = logger or get_class_logger(self.__class__)

    def _read(self, filename: str, key: str) -> List[Dict[str, Any]]:
        path = self.data_dir / filename
        if not path.exists():
            self.logger.warning("CPC dataset file missing: %s", path)
            return []

        payload = json.loads(path.read_text(encoding="utf-8"))
        rows = payload.get(key) if isinstance(payload, dict) else None
        if not isinstance(rows, list):
            raise ValueError(f"{path} must contain a '{key}' list")

        self.logger.info("Read %d '%s' row(s) from %s", len(rows), key, path)
        return [r for r in rows if isinstance(r, dict)]

    def load_raw(self) -> List[Dict[str, Any]]:
        return (
            [focus_area_record(r) for r in self._read(FOCUS_AREAS_FILE, "entities")]
            + [milestone_record(r) for r in self._read(MILESTONES_FILE, "milestones")]
            + [stage_record(r) for r in self._read(STAGES_FILE, "stages")]
        )

    def load_entities(self) -> List[Entity]:
        entities: List[Entity] = []
        for raw in self.load_raw():
            try:
                entities.append(build_entity(raw))
            except ValueError as e:
                self.logger.warning("Skipping CPC record: %s", e)

        counts: Dict[str, int] = {}
        for e in entities:
            counts[e.entity_type] = counts.get(e.entity_type, 0) + 1
        self.logger.info("Loaded %d CPC entit(ies): %s", len(entities), counts)
        return entities
