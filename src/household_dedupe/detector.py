from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import date, datetime
from decimal import Decimal
from time import perf_counter

from household_dedupe.core import settings
from household_dedupe.core.configuration import DEFAULT_WINDOW_DAYS, DetectorConfig, load_detector_config
from household_dedupe.domain.dates import days_between, format_duration, in_range, resolve_date_range
from household_dedupe.domain.risk import DEFAULT_THRESHOLDS, RiskThresholds, RiskTier, classify_score
from household_dedupe.errors import DetectorConfigError
from household_dedupe.logger import get_logger, setup_logging
from household_dedupe.models import (
    DateRange,
    DuplicatePair,
    DuplicateReport,
    DuplicateResult,
    DuplicateStats,
    TransactionRecord,
)
from household_dedupe.similarity.base import SimilarityMetric
from household_dedupe.similarity.registry import DEFAULT_METRIC, build_metric

logger = get_logger(__name__)


def get_duplicate_stats(
    pairs: Iterable[DuplicatePair],
    thresholds: RiskThresholds = DEFAULT_THRESHOLDS,
) -> DuplicateStats:
    counts = {tier: 0 for tier in RiskTier}
    for pair in pairs:
        counts[classify_score(pair.score, thresholds)] += 1
    return DuplicateStats(
        total=sum(counts.values()),
        high_risk=counts[RiskTier.HIGH],
        medium_risk=counts[RiskTier.MEDIUM],
        low_risk=counts[RiskTier.LOW],
    )


class DuplicateDetector:
    def __init__(self,
                 window_days: int = DEFAULT_WINDOW_DAYS,
                 thresholds: RiskThresholds = DEFAULT_THRESHOLDS,
                 metric: SimilarityMetric | str = DEFAULT_METRIC,
                 strip_noise: bool = True):
        if isinstance(window_days, bool) or not isinstance(window_days, int) or window_days < 1:
            raise DetectorConfigError(f"window_days must be a positive integer (got {window_days!r})")

        self.window_days = window_days
        self.thresholds = thresholds
        if isinstance(metric, str):
            self.metric = build_metric(metric, strip_noise=strip_noise)
        else:
            self.metric = metric

    @classmethod
    def from_config(cls, config: DetectorConfig) -> "DuplicateDetector":
        return cls(
            window_days=config.window_days,
            thresholds=config.thresholds,
            metric=config.similarity,
            strip_noise=config.strip_noise,
        )

    def score_pair(self, first: TransactionRecord, second: TransactionRecord) -> DuplicatePair | None:
        """
        Score one candidate pair.

        Returns None when either record has no usable date or the dates are
        more than ``window_days`` apart. Amounts are not checked here; callers
        are expected to pass records from the same amount group.
        """
        if first.transaction_date is None or second.transaction_date is None:
            return None

        days_difference = days_between(first.transaction_date, second.transaction_date)
        if days_difference > self.window_days:
            return None

        day_score = min(1.0, max(0.0, 1.0 - days_difference / self.window_days))
        description_score = self.metric.similarity(first.description, second.description)

        return DuplicatePair(
            transaction1=first,
            transaction2=second,
            score=day_score * description_score,
            day_score=day_score,
            description_score=description_score,
            days_difference=days_difference,
        )

    def _group_by_amount(
        self, transactions: Sequence[TransactionRecord]
    ) -> dict[Decimal, list[tuple[int, TransactionRecord]]]:
        groups: dict[Decimal, list[tuple[int, TransactionRecord]]] = defaultdict(list)
        for index, record in enumerate(transactions):
            if record.transaction_date is None:
                continue
            # Sign is ignored: a re-entered purchase often comes back as a refund.
            groups[abs(record.amount)].append((index, record))
        return groups

    def find_duplicates(self, transactions: Sequence[TransactionRecord]) -> DuplicateResult:
        start = perf_counter()

        undated = [record.id for record in transactions if record.transaction_date is None]
        if undated:
            logger.warning(
                "[DEDUPE] Skipping %d transaction(s) without a valid date: %s",
                len(undated),
                ", ".join(undated[:10]) + (" ..." if len(undated) > 10 else ""),
            )

        groups = self._group_by_amount(transactions)
        candidates: list[tuple[float, int, int, int, DuplicatePair]] = []
        compared = 0

        for members in groups.values():
            if len(members) < 2:
                continue
            for offset, (first_index, first) in enumerate(members):
                for second_index, second in members[offset + 1:]:
                    compared += 1
                    pair = self.score_pair(first, second)
                    if pair is None or pair.score <= 0:
                        continue
                    candidates.append((-pair.score, pair.days_difference, first_index, second_index, pair))

        candidates.sort(key=lambda item: item[:4])
        pairs = [item[4] for item in candidates]
        stats = get_duplicate_stats(pairs, self.thresholds)

        logger.info(
            "[DEDUPE] Scanned %d transactions in %d amount groups (%d comparisons): "
            "%d pairs (high=%d, medium=%d, low=%d) in %s",
            len(transactions),
            len(groups),
            compared,
            stats.total,
            stats.high_risk,
            stats.medium_risk,
            stats.low_risk,
            format_duration(perf_counter() - start),
        )
        return DuplicateResult(pairs=pairs, stats=stats)

    def analyze(
        self,
        transactions: Sequence[TransactionRecord],
        start_date: date | datetime | str | None = None,
        end_date: date | datetime | str | None = None,
    ) -> DuplicateReport:
        start, end = resolve_date_range(start_date, end_date)

        in_scope = [
            record for record in transactions
            if in_range(record.transaction_date, start, end)
        ]
        skipped = sum(1 for record in transactions if record.transaction_date is None)
        dated_in_scope = sum(1 for record in in_scope if record.transaction_date is not None)

        result = self.find_duplicates(in_scope)
        return DuplicateReport(
            pairs=result.pairs,
            stats=result.stats,
            total_transactions=dated_in_scope,
            skipped_transactions=skipped,
            date_range=DateRange(start_date=start, end_date=end),
        )


def find_duplicates(
    transactions: Sequence[TransactionRecord],
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> DuplicateResult:
    return DuplicateDetector(window_days=window_days).find_duplicates(transactions)


def analyze_duplicates(
    transactions: Sequence[TransactionRecord],
    start_date: date | datetime | str | None = None,
    end_date: date | datetime | str | None = None,
    detector: DuplicateDetector | None = None,
) -> DuplicateReport:
    detector = detector or create_detector()
    return detector.analyze(transactions, start_date=start_date, end_date=end_date)


def create_detector(configure_logging: bool = False) -> DuplicateDetector:
    if configure_logging:
        setup_logging()
        settings.log_environment()
    detector = DuplicateDetector.from_config(load_detector_config())
    logger.debug(
        "[DEDUPE] Detector ready: window=%d days, metric=%s, thresholds=%s",
        detector.window_days,
        detector.metric.name,
        detector.thresholds,
    )
    return detector
