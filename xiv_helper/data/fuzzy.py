"""Order-preserving fuzzy matching and OCR similarity scoring."""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Iterable

from rapidfuzz.distance import Levenshtein

OVERLAP_WEIGHT = 0.4
EDIT_WEIGHT = 0.4
POSITIONAL_WEIGHT = 0.2

LOW_CONFIDENCE = 50
MEDIUM_CONFIDENCE = 70


def subsequence_score(token: str, name: str) -> float:
    """Return 1.0 when every character of ``token`` appears in ``name`` in order.

    Matching is case-insensitive and strictly forward: "精金" does not match
    a name where 金 only appears before 精.
    """
    needle = token.lower()
    haystack = name.lower()
    if needle in haystack:
        return 1.0
    position = 0
    for char in needle:
        found = haystack.find(char, position)
        if found < 0:
            return 0.0
        position = found + 1
    return 1.0


def contains_all_tokens(tokens: Iterable[str], name: str) -> bool:
    lowered = name.lower()
    return all(token.lower() in lowered for token in tokens)


def matches_all_tokens(tokens: Iterable[str], name: str, fuzzy: bool = False) -> bool:
    """AND semantics across tokens: substring, or ordered subsequence if ``fuzzy``."""
    if not fuzzy:
        return contains_all_tokens(tokens, name)
    return all(subsequence_score(token, name) > 0 for token in tokens)


def ngrams(text: str, n: int = 2) -> list[str]:
    return [text[i:i + n] for i in range(len(text) - n + 1)]


def ngram_overlap(query: str, name: str, n: int = 2) -> float:
    query_grams = set(ngrams(query, n))
    name_grams = set(ngrams(name, n))
    if not query_grams and not name_grams:
        return 1.0
    if not query_grams or not name_grams:
        return 0.0
    return len(query_grams & name_grams) / max(len(query_grams), len(name_grams))


def edit_score(query: str, name: str) -> float:
    if not query and not name:
        return 1.0
    return Levenshtein.normalized_similarity(query, name)


def positional_score(query: str, name: str) -> float:
    shortest = min(len(query), len(name))
    if shortest == 0:
        return 0.0
    matches = sum(1 for a, b in zip(query, name) if a == b)
    return matches / max(len(query), len(name))


def ocr_similarity(query: str, name: str, n: int = 2) -> float:
    """Weighted blend of n-gram overlap, edit distance and positional agreement."""
    if not query or not name:
        return 0.0
    if query == name:
        return 1.0
    score = (
        OVERLAP_WEIGHT * ngram_overlap(query, name, n)
        + EDIT_WEIGHT * edit_score(query, name)
        + POSITIONAL_WEIGHT * positional_score(query, name)
    )
    return max(0.0, min(1.0, score))


def confidence_bonus(score: float, confidence: float | None) -> float:
    """Boost already-strong matches when the recognizer was unsure."""
    if confidence is None or confidence >= MEDIUM_CONFIDENCE or score <= 0.7:
        return score
    return min(1.0, score + (1 - confidence / 100) * 0.1)


@dataclass(frozen=True)
class OcrSearchParams:
    top_k: int = 50
    min_score: float = 0.4
    confidence: float | None = None

    @classmethod
    def for_confidence(
        cls,
        confidence: float | None,
        top_k: int = 50,
        min_score: float = 0.4,
    ) -> "OcrSearchParams":
        if confidence is None:
            return cls(top_k=top_k, min_score=min_score)
        if confidence < LOW_CONFIDENCE:
            return cls(
                top_k=min(100, top_k * 2),
                min_score=max(0.3, min_score - 0.1),
                confidence=confidence,
            )
        if confidence < MEDIUM_CONFIDENCE:
            return cls(
                top_k=min(75, math.floor(top_k * 1.5)),
                min_score=max(0.35, min_score - 0.05),
                confidence=confidence,
            )
        return cls(top_k=top_k, min_score=min_score, confidence=confidence)

    def apply_bonus(self, score: float) -> float:
        return confidence_bonus(score, self.confidence)
