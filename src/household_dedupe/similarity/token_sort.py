from rapidfuzz import fuzz

from .base import SimilarityMetric


class TokenSortSimilarity(SimilarityMetric):
    """Word-order insensitive ratio, so "gas shell" matches "shell gas"."""

    name = "token_sort"

    def compare(self, first: str, second: str) -> float:
        return fuzz.token_sort_ratio(first, second) / 100.0
