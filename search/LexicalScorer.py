# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-26
# Description: LexicalScorer
# -----------------------------------------------------------------------------
from dataclasses import dataclass
from typing import Iterable, List

NAME_HIT = 3
KEYWORD_HIT = 2
TEXT_HIT = 1
MIN_TERM_LEN = 3


def query_terms(query: str) -> List[str]:
    """Lowercased whitespace terms longer than two characters."""
    return [t for t in (query or "").lower().split() if len(t) >= MIN_TERM_LEN]


@dataclass(frozen=True)
class LexicalScorer:
    """
    Term-overlap score in [0, 1] used as the keyword half of hybrid search.

    Each query term scores 3 when it appears inside a word of the entity name,
    2 when it appears inside one of its keywords and 1 when it appears in the
    embedded text. The total is divided by the best possible score (6 per term)
    and capped at 1, so exact terminology in a name lifts a result well above
    a vaguely related one.
    """
    name_hit: int = NAME_HIT
    keyword_hit: int = KEYWORD_HIT
    text_hit: int = TEXT_HIT

    @property
    def max_per_term(self) -> int:
        return self.name_hit + self.keyword_hit + self.text_hit

    def score_terms(self, terms: List[str], name: str, keywords: Iterable[str], text: str) -> float:
        if not terms:
            return 0.0

        name_words = (name or "").lower().split()
        kws = [k.lower() for k in keywords or []]
        body = (text or "").lower()

        matches = 0
        for term in terms:
            if any(term in k for k in kws):
                matches += self.keyword_hit
            if any(term in w for w in name_words):
                matches += self.name_hit
            if term in body:
                matches += self.text_hit

        return min(matches / (len(terms) * self.max_per_term), 1.0)

    def score(self, query: str, name: str, keywords: Iterable[str], text: str) -> float:
        return self.score_terms(query_terms(query), name, keywords, text)
