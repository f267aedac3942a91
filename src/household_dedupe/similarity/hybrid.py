from rapidfuzz.distance import Levenshtein

from .base import SimilarityMetric


def bigrams(text: str) -> set[str]:
    return {text[i:i + 2] for i in range(len(text) - 1)}


def dice_coefficient(first: str, second: str) -> float:
    if first == second:
        return 1.0
    if len(first) < 2 or len(second) < 2:
        return 0.0
    first_bigrams = bigrams(first)
    second_bigrams = bigrams(second)
    shared = first_bigrams & second_bigrams
    return 2 * len(shared) / (len(first_bigrams) + len(second_bigrams))


def word_overlap(first: str, second: str) -> float:
    # Words of two characters or fewer ("of", "st", "#1") carry no signal.
    first_words = {word for word in first.split() if len(word) > 2}
    second_words = {word for word in second.split() if len(word) > 2}
    if not first_words and not second_words:
        return 1.0
    if not first_words or not second_words:
        return 0.0
    shared = first_words & second_words
    return 2 * len(shared) / (len(first_words) + len(second_words))


class HybridSimilarity(SimilarityMetric):
    """
    Weighted blend of three measures:

    - Dice coefficient over character bigrams (40%)
    - normalized Levenshtein similarity (30%)
    - Dice coefficient over words longer than two characters (30%)
    """

    name = "hybrid"

    DICE_WEIGHT = 0.4
    LEVENSHTEIN_WEIGHT = 0.3
    WORD_WEIGHT = 0.3

    def compare(self, first: str, second: str) -> float:
        return (
            dice_coefficient(first, second) * self.DICE_WEIGHT
            + Levenshtein.normalized_similarity(first, second) * self.LEVENSHTEIN_WEIGHT
            + word_overlap(first, second) * self.WORD_WEIGHT
        )
