from datetime import date, timedelta

import pytest

from household_dedupe.detector import (
    DuplicateDetector,
    analyze_duplicates,
    find_duplicates,
    get_duplicate_stats,
)
from household_dedupe.domain.risk import RiskThresholds, RiskTier, classify_score
from household_dedupe.errors import DetectorConfigError, InvalidDateRangeError
from household_dedupe.models import TransactionRecord


def make_tx(tx_id: str, amount: str, tx_date, description: str = "Shell Gas Station", **kwargs) -> TransactionRecord:
    return TransactionRecord(
        id=tx_id,
        amount=amount,
        transaction_date=tx_date,
        description=description,
        **kwargs,
    )


@pytest.fixture
def detector() -> DuplicateDetector:
    return DuplicateDetector()


def test_gas_station_scenario(detector: DuplicateDetector) -> None:
    transactions = [
        make_tx("1", "-42.50", "2024-03-01"),
        make_tx("2", "-42.50", "2024-03-02"),
        make_tx("3", "-15.00", "2024-03-01", description="Coffee"),
    ]

    result = detector.find_duplicates(transactions)

    assert len(result.pairs) == 1
    pair = result.pairs[0]
    assert (pair.transaction1.id, pair.transaction2.id) == ("1", "2")
    assert pair.days_difference == 1
    assert pair.day_score == pytest.approx(0.8)
    assert pair.description_score == 1.0
    assert pair.score == pytest.approx(0.8)
    assert classify_score(pair.score) == RiskTier.HIGH
    assert result.stats.total == 1
    assert result.stats.high_risk == 1


def test_identical_records_score_exactly_one(detector: DuplicateDetector) -> None:
    transactions = [
        make_tx("a", "19.99", date(2024, 5, 10), description="Netflix"),
        make_tx("b", "19.99", date(2024, 5, 10), description="Netflix"),
    ]

    result = detector.find_duplicates(transactions)

    assert len(result.pairs) == 1
    assert result.pairs[0].score == 1.0
    assert result.pairs[0].day_score == 1.0
    assert result.pairs[0].description_score == 1.0
    assert result.stats.high_risk == 1


def test_pairs_outside_window_are_excluded(detector: DuplicateDetector) -> None:
    transactions = [
        make_tx("a", "60.00", date(2024, 1, 1)),
        make_tx("b", "60.00", date(2024, 1, 7)),
    ]

    result = detector.find_duplicates(transactions)

    assert result.pairs == []
    assert result.stats.total == 0


def test_pair_at_window_edge_scores_zero_and_is_dropped(detector: DuplicateDetector) -> None:
    first = make_tx("a", "60.00", date(2024, 1, 1))
    second = make_tx("b", "60.00", date(2024, 1, 6))

    pair = detector.score_pair(first, second)
    assert pair is not None
    assert pair.days_difference == 5
    assert pair.day_score == 0.0
    assert pair.score == 0.0

    assert detector.find_duplicates([first, second]).pairs == []


def test_sign_is_ignored_for_grouping(detector: DuplicateDetector) -> None:
    mixed = detector.find_duplicates([
        make_tx("out", "-50.00", date(2024, 2, 2)),
        make_tx("in", "50.00", date(2024, 2, 2)),
    ])
    same_sign = detector.find_duplicates([
        make_tx("x", "50.00", date(2024, 2, 2)),
        make_tx("y", "50.00", date(2024, 2, 2)),
    ])

    assert len(mixed.pairs) == 1
    assert mixed.pairs[0].score == same_sign.pairs[0].score
    assert mixed.pairs[0].day_score == same_sign.pairs[0].day_score
    assert mixed.pairs[0].description_score == same_sign.pairs[0].description_score
    # Original signed amounts are carried through untouched.
    assert str(mixed.pairs[0].transaction1.amount) == "-50.00"
    assert str(mixed.pairs[0].transaction2.amount) == "50.00"


def test_equal_amounts_with_different_scale_share_a_group(detector: DuplicateDetector) -> None:
    result = detector.find_duplicates([
        make_tx("a", "42.5", date(2024, 2, 2)),
        make_tx("b", "42.50", date(2024, 2, 2)),
    ])

    assert len(result.pairs) == 1


def test_different_amounts_are_never_compared(detector: DuplicateDetector) -> None:
    result = detector.find_duplicates([
        make_tx("a", "42.50", date(2024, 2, 2)),
        make_tx("b", "42.51", date(2024, 2, 2)),
    ])

    assert result.pairs == []


def test_day_score_decreases_with_distance(detector: DuplicateDetector) -> None:
    base = make_tx("base", "10.00", date(2024, 4, 1))
    day_scores = []
    for offset in range(6):
        other = make_tx(f"o{offset}", "10.00", date(2024, 4, 1) + timedelta(days=offset))
        pair = detector.score_pair(base, other)
        assert pair is not None
        day_scores.append(pair.day_score)

    assert day_scores == sorted(day_scores, reverse=True)
    assert day_scores[0] == 1.0
    assert day_scores[-1] == 0.0


def test_score_pair_is_symmetric(detector: DuplicateDetector) -> None:
    first = make_tx("a", "-23.10", date(2024, 6, 3), description="Amazon Marketplace")
    second = make_tx("b", "-23.10", date(2024, 6, 5), description="AMAZON MKTPLACE")

    forward = detector.score_pair(first, second)
    backward = detector.score_pair(second, first)

    assert forward is not None and backward is not None
    assert forward.score == backward.score
    assert forward.day_score == backward.day_score
    assert forward.description_score == backward.description_score
    assert forward.days_difference == backward.days_difference == 2


def test_each_pair_is_scored_once_and_never_against_itself(detector: DuplicateDetector) -> None:
    assert detector.find_duplicates([make_tx("solo", "5.00", date(2024, 1, 1))]).pairs == []

    transactions = [make_tx(str(i), "5.00", date(2024, 1, 1)) for i in range(3)]
    result = detector.find_duplicates(transactions)

    ids = sorted((pair.transaction1.id, pair.transaction2.id) for pair in result.pairs)
    assert ids == [("0", "1"), ("0", "2"), ("1", "2")]


def test_transaction1_follows_input_order(detector: DuplicateDetector) -> None:
    later = make_tx("later", "8.00", date(2024, 3, 4))
    earlier = make_tx("earlier", "8.00", date(2024, 3, 2))

    pair = detector.find_duplicates([later, earlier]).pairs[0]

    assert pair.transaction1.id == "later"
    assert pair.transaction2.id == "earlier"
    assert pair.days_difference == 2


def test_pairs_sorted_by_score_then_days_then_input_order(detector: DuplicateDetector) -> None:
    transactions = [
        make_tx("y1", "20.00", date(2024, 1, 1), description="Gym"),
        make_tx("y2", "20.00", date(2024, 1, 1), description="Gym"),
        make_tx("x1", "10.00", date(2024, 1, 1), description="Bakery"),
        make_tx("x2", "10.00", date(2024, 1, 1), description="Bakery"),
        make_tx("z1", "30.00", date(2024, 1, 1), description="Pharmacy"),
        make_tx("z2", "30.00", date(2024, 1, 3), description="Pharmacy"),
    ]

    result = detector.find_duplicates(transactions)

    assert [pair.transaction1.id for pair in result.pairs] == ["y1", "x1", "z1"]
    scores = [pair.score for pair in result.pairs]
    assert scores == sorted(scores, reverse=True)


def test_unrelated_descriptions_on_same_day_score_low(detector: DuplicateDetector) -> None:
    result = detector.find_duplicates([
        make_tx("a", "12.00", date(2024, 7, 7), description="Cinema Tickets"),
        make_tx("b", "12.00", date(2024, 7, 7), description="Uber"),
    ])

    for pair in result.pairs:
        assert pair.score < 0.75


def test_stats_partition_all_pairs() -> None:
    detector = DuplicateDetector(metric="hybrid")
    transactions = [
        make_tx("1", "-42.50", date(2024, 3, 1), description="Shell Gas Station"),
        make_tx("2", "-42.50", date(2024, 3, 1), description="SHELL GAS STATION #12"),
        make_tx("3", "-42.50", date(2024, 3, 4), description="Shell"),
        make_tx("4", "-42.50", date(2024, 3, 2), description="Target"),
        make_tx("5", "9.99", date(2024, 3, 3), description="Spotify"),
        make_tx("6", "9.99", date(2024, 3, 5), description="Spotify AB"),
    ]

    result = detector.find_duplicates(transactions)
    stats = result.stats

    assert stats.total == len(result.pairs)
    assert stats.total == stats.high_risk + stats.medium_risk + stats.low_risk
    tiers = [classify_score(pair.score) for pair in result.pairs]
    assert tiers.count(RiskTier.HIGH) == stats.high_risk
    assert tiers.count(RiskTier.MEDIUM) == stats.medium_risk
    assert tiers.count(RiskTier.LOW) == stats.low_risk
    assert all(pair.score > 0 for pair in result.pairs)


def test_custom_thresholds_change_tiering() -> None:
    detector = DuplicateDetector(thresholds=RiskThresholds(high=0.9, medium=0.5))
    result = detector.find_duplicates([
        make_tx("1", "-42.50", "2024-03-01"),
        make_tx("2", "-42.50", "2024-03-02"),
    ])

    assert result.stats.high_risk == 0
    assert result.stats.medium_risk == 1


def test_empty_input(detector: DuplicateDetector) -> None:
    result = detector.find_duplicates([])

    assert result.pairs == []
    assert result.stats.total == 0
    assert result.stats.high_risk == 0
    assert result.stats.medium_risk == 0
    assert result.stats.low_risk == 0


def test_records_with_unparsable_dates_are_skipped(detector: DuplicateDetector) -> None:
    transactions = [
        make_tx("bad", "42.50", "not-a-date"),
        make_tx("1", "42.50", "2024-03-01"),
        make_tx("2", "42.50", "2024-03-01"),
    ]

    result = detector.find_duplicates(transactions)

    assert transactions[0].transaction_date is None
    assert len(result.pairs) == 1
    assert {result.pairs[0].transaction1.id, result.pairs[0].transaction2.id} == {"1", "2"}


def test_empty_descriptions_are_identical(detector: DuplicateDetector) -> None:
    result = detector.find_duplicates([
        make_tx("a", "3.00", date(2024, 1, 1), description=""),
        make_tx("b", "3.00", date(2024, 1, 1), description="   "),
    ])

    assert result.pairs[0].description_score == 1.0
    assert result.pairs[0].score == 1.0


def test_distinct_check_numbers_are_not_certain_duplicates(detector: DuplicateDetector) -> None:
    result = detector.find_duplicates([
        make_tx("a", "100.00", date(2024, 1, 1), description="Check 1001"),
        make_tx("b", "100.00", date(2024, 1, 1), description="1002"),
        make_tx("c", "100.00", date(2024, 1, 1), description="1003"),
    ])

    by_ids = {(pair.transaction1.id, pair.transaction2.id): pair for pair in result.pairs}
    assert by_ids[("b", "c")].description_score < 1.0
    assert by_ids[("b", "c")].score < 1.0
    assert all(pair.score < 1.0 for pair in result.pairs)


def test_input_is_not_mutated(detector: DuplicateDetector) -> None:
    transactions = [
        make_tx("2", "-42.50", "2024-03-02"),
        make_tx("1", "-42.50", "2024-03-01"),
    ]
    snapshot = [tx.model_dump() for tx in transactions]

    detector.find_duplicates(transactions)

    assert [tx.id for tx in transactions] == ["2", "1"]
    assert [tx.model_dump() for tx in transactions] == snapshot


def test_wider_window() -> None:
    detector = DuplicateDetector(window_days=10)
    result = detector.find_duplicates([
        make_tx("a", "60.00", date(2024, 1, 1)),
        make_tx("b", "60.00", date(2024, 1, 8)),
    ])

    assert len(result.pairs) == 1
    assert result.pairs[0].day_score == pytest.approx(0.3)


@pytest.mark.parametrize("window", [0, -1, 2.5, True])
def test_invalid_window_rejected(window) -> None:
    with pytest.raises(DetectorConfigError):
        DuplicateDetector(window_days=window)


def test_unknown_metric_rejected() -> None:
    with pytest.raises(DetectorConfigError):
        DuplicateDetector(metric="soundex")


def test_module_level_find_duplicates() -> None:
    result = find_duplicates(
        [
            make_tx("a", "60.00", date(2024, 1, 1)),
            make_tx("b", "60.00", date(2024, 1, 3)),
        ],
        window_days=2,
    )

    assert len(result.pairs) == 0


def test_get_duplicate_stats_on_scored_pairs(detector: DuplicateDetector) -> None:
    base = make_tx("base", "10.00", date(2024, 4, 1))
    pairs = [
        detector.score_pair(base, make_tx(str(offset), "10.00", date(2024, 4, 1) + timedelta(days=offset)))
        for offset in range(5)
    ]

    stats = get_duplicate_stats(pairs)

    # Day scores 1.0, 0.8, 0.6, 0.4, 0.2
    assert stats.total == 5
    assert stats.high_risk == 2
    assert stats.medium_risk == 2
    assert stats.low_risk == 1


def test_analyze_applies_inclusive_date_bounds(detector: DuplicateDetector) -> None:
    transactions = [
        make_tx("early", "42.50", "2024-02-27"),
        make_tx("1", "42.50", "2024-03-01"),
        make_tx("2", "42.50", "2024-03-02"),
        make_tx("undated", "42.50", None),
    ]

    report = detector.analyze(transactions, start_date="2024-03-01", end_date=date(2024, 3, 2))

    assert report.total_transactions == 2
    assert report.skipped_transactions == 1
    assert report.date_range.start_date == date(2024, 3, 1)
    assert report.date_range.end_date == date(2024, 3, 2)
    assert len(report.pairs) == 1
    assert report.stats.total == 1


def test_analyze_without_bounds_counts_dated_records(detector: DuplicateDetector) -> None:
    transactions = [
        make_tx("early", "42.50", "2024-02-27"),
        make_tx("1", "42.50", "2024-03-01"),
        make_tx("undated", "42.50", ""),
    ]

    report = detector.analyze(transactions)

    # Undated records are reported as skipped, not as part of the total.
    assert report.total_transactions == 2
    assert report.skipped_transactions == 1
    assert report.date_range.start_date is None
    assert report.date_range.end_date is None
    assert len(report.pairs) == 1


def test_analyze_rejects_bad_bounds(detector: DuplicateDetector) -> None:
    with pytest.raises(InvalidDateRangeError):
        detector.analyze([], start_date="yesterday")
    with pytest.raises(InvalidDateRangeError):
        detector.analyze([], start_date="2024-03-05", end_date="2024-03-01")


def test_analyze_duplicates_uses_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEDUPE_WINDOW_DAYS", "1")
    monkeypatch.delenv("DEDUPE_SIMILARITY", raising=False)
    transactions = [
        make_tx("1", "42.50", "2024-03-01"),
        make_tx("2", "42.50", "2024-03-02"),
    ]

    report = analyze_duplicates(transactions)

    # A one-day window gives a one-day gap a day score of zero.
    assert report.pairs == []
    assert report.total_transactions == 2
