"""Case-insensitive string similarity for anchor and filename suggestions"""

import difflib
from typing import Iterable


def similarity(a: str, b: str) -> float:
    """Return a 0..1 similarity ratio; 1.0 for identical strings, 0.0 if either is empty."""
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0
    return difflib.SequenceMatcher(None, a.lower(), b.lower()).ratio()


def rank_similar(target: str, candidates: Iterable[str], threshold: float, limit: int) -> list[str]:
    """Return up to `limit` candidates scoring >= threshold, most similar first.

    Ties keep candidate order, so results are deterministic for a given document.
    """
    scored = []
    for candidate in dict.fromkeys(candidates):
        score = similarity(target, candidate)
        if score >= threshold:
            scored.append((score, candidate))
    scored.sort(key=lambda pair: pair[0], reverse=True)
    return [candidate for _, candidate in scored[:limit]]
