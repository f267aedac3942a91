from abc import ABC, abstractmethod

from household_dedupe.domain.descriptions import normalize_description


class SimilarityMetric(ABC):
    name: str = "base"

    def __init__(self, strip_noise: bool = True):
        self.strip_noise = strip_noise

    def similarity(self, first: str | None, second: str | None) -> float:
        """Similarity of two raw descriptions in [0, 1]; equal normalized text scores 1.0."""
        norm_first = normalize_description(first, strip_noise=self.strip_noise)
        norm_second = normalize_description(second, strip_noise=self.strip_noise)
        if norm_first == norm_second:
            return 1.0
        return min(1.0, max(0.0, self.compare(norm_first, norm_second)))

    @abstractmethod
    def compare(self, first: str, second: str) -> float:
        """Score two already-normalized, non-identical descriptions."""
        pass
