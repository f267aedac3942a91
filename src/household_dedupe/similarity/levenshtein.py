from rapidfuzz.distance import Levenshtein

from .base import SimilarityMetric


class LevenshteinSimilarity(SimilarityMetric):
    """``1 - edit_distance / max(len)`` over the normalized descriptions."""

    name = "levenshtein"

    def compare(self, first: str, second: str) -> float:
        return Levenshtein.normalized_similarity(first, second)
