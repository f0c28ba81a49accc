# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-24
# Description: Fingerprint
# -----------------------------------------------------------------------------
import hashlib


def fingerprint(text: str) -> str:
    """
    SHA-256 hex digest of the UTF-8 encoded text.

    Change detector only: an entity whose stored fingerprint equals the
    fingerprint of its current embedding_text does not need re-embedding.
    """
    if text is None:
        raise ValueError("fingerprint() requires text, got None")
    return hashlib.sha256(text.encode("utf-8")).hexdigest()
