"""Edit-distance based URL similarity."""

from rapidfuzz import process
from rapidfuzz.distance import Levenshtein

DEFAULT_SIMILARITY_THRESHOLD = 0.85


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance (insert, delete, substitute all cost 1)."""
    return Levenshtein.distance(a, b)


def similarity(a: str, b: str) -> float:
    """``1 - edit_distance / longest length``; 1.0 for two empty strings."""
    if not a and not b:
        return 1.0
    return Levenshtein.normalized_similarity(a, b)


def best_match(candidate: str, corpus: list[str], threshold: float = 0.0) -> tuple[float, str]:
    """Highest similarity of `candidate` against `corpus`.

    Returns ``(0.0, "")`` when no entry reaches `threshold`.
    """
    if not corpus:
        return 0.0, ""
    match = process.extractOne(
        candidate,
        corpus,
        scorer=Levenshtein.normalized_similarity,
        score_cutoff=threshold,
    )
    if match is None:
        return 0.0, ""
    known, score, _ = match
    return score, known
