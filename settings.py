# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-09
# Updated: 2026-01-26
# Description: settings.py
# -----------------------------------------------------------------------------
import os
from typing import Any, Dict


def _env(name: str, default: str = "") -> str:
    """Read env var safely and strip whitespace."""
    return (os.getenv(name) or default).strip()


def _env_int(name: str, default: int) -> int:
    v = _env(name, "")
    if v == "":
        return default
    try:
        return int(v)
    except ValueError as e:
        raise RuntimeError(f"Env var {name} must be an int, got {v!r}") from e


def _env_float(name: str, default: float) -> float:
    v = _env(name, "")
    if v == "":
        return default
    try:
        return float(v)
    except ValueError as e:
        raise RuntimeError(f"Env var {name} must be a float, got {v!r}") from e


# -----------------------------------------------------------------------------
# Search defaults (env-controlled)
# -----------------------------------------------------------------------------
SEARCH_DEFAULTS: Dict[str, Any] = {
    "top_k": _env_int("NAV_SEARCH_TOP_K", 10),
    "similar_top_k": _env_int("NAV_SIMILAR_TOP_K", 5),
    "threshold": _env_float("NAV_SEARCH_THRESHOLD", 0.5),
}
MIN_QUERY_CHARS = 2

# Hybrid blend; favour the vector score
SEMANTIC_WEIGHT = _env_float("NAV_SEMANTIC_WEIGHT", 0.6)
LEXICAL_WEIGHT = _env_float("NAV_LEXICAL_WEIGHT", 0.4)

# Query embedding cache size (per embedder instance)
QUERY_CACHE_SIZE = _env_int("NAV_QUERY_CACHE_SIZE", 256)


# -----------------------------------------------------------------------------
# Ingestion defaults
# -----------------------------------------------------------------------------
INGEST_DEFAULTS: Dict[str, Any] = {
    "max_workers": _env_int("NAV_INGEST_WORKERS", 4),
    "max_attempts": _env_int("NAV_EMBED_MAX_ATTEMPTS", 3),
    "base_delay": _env_float("NAV_EMBED_RETRY_DELAY", 0.8),
    "backoff_factor": _env_float("NAV_EMBED_BACKOFF", 2.0),
}

# Upper bound on embedded text; longer text is truncated by the builder
MAX_EMBEDDING_TEXT_CHARS = _env_int("NAV_MAX_EMBEDDING_TEXT_CHARS", 8000)

# Writer lock wait (seconds) before a second ingestion run gives up
STORE_LOCK_TIMEOUT = _env_float("NAV_STORE_LOCK_TIMEOUT", 0.0)

# Chat context guardrail
MAX_CONTEXT_CHARS = _env_int("NAV_MAX_CONTEXT_CHARS", 12000)


# -----------------------------------------------------------------------------
# Sanity checks (tunable)
# -----------------------------------------------------------------------------
if SEMANTIC_WEIGHT < 0 or LEXICAL_WEIGHT < 0:
    raise RuntimeError("NAV_SEMANTIC_WEIGHT and NAV_LEXICAL_WEIGHT must be non-negative")

if SEMANTIC_WEIGHT + LEXICAL_WEIGHT == 0:
    raise RuntimeError("Hybrid weights resolved to zero; at least one must be positive")

if INGEST_DEFAULTS["max_workers"] < 1:
    raise RuntimeError("NAV_INGEST_WORKERS must be >= 1")

if INGEST_DEFAULTS["max_attempts"] < 1:
    raise RuntimeError("NAV_EMBED_MAX_ATTEMPTS must be >= 1")
