from household_dedupe.errors import DetectorConfigError

from .base import SimilarityMetric
from .hybrid import HybridSimilarity
from .levenshtein import LevenshteinSimilarity
from .token_sort import TokenSortSimilarity

DEFAULT_METRIC = LevenshteinSimilarity.name

METRICS: dict[str, type[SimilarityMetric]] = {
    LevenshteinSimilarity.name: LevenshteinSimilarity,
    HybridSimilarity.name: HybridSimilarity,
    TokenSortSimilarity.name: TokenSortSimilarity,
}


def build_metric(name: str, strip_noise: bool = True) -> SimilarityMetric:
    metric_cls = METRICS.get(name.strip().lower())
    if metric_cls is None:
        raise DetectorConfigError(
            f"Unknown similarity metric '{name}'. Expected one of: {', '.join(METRICS)}."
        )
    return metric_cls(strip_noise=strip_noise)
