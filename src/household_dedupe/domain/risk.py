from dataclasses import dataclass
from enum import Enum

from household_dedupe.errors import DetectorConfigError


class RiskTier(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class RiskThresholds:
    high: float = 0.75
    medium: float = 0.25

    def __post_init__(self) -> None:
        if not 0.0 <= self.medium <= self.high <= 1.0:
            raise DetectorConfigError(
                f"Risk thresholds must satisfy 0 <= medium <= high <= 1 "
                f"(got medium={self.medium}, high={self.high})"
            )


DEFAULT_THRESHOLDS = RiskThresholds()

_LABELS = {
    RiskTier.HIGH: "High Risk",
    RiskTier.MEDIUM: "Medium Risk",
    RiskTier.LOW: "Low Risk",
}

# Badge variants used by the review table.
_BADGE_VARIANTS = {
    RiskTier.HIGH: "destructive",
    RiskTier.MEDIUM: "default",
    RiskTier.LOW: "secondary",
}

_BADGE_COLORS = {
    RiskTier.HIGH: "bg-red-100 text-red-800 border-red-200",
    RiskTier.MEDIUM: "bg-orange-100 text-orange-800 border-orange-200",
    RiskTier.LOW: "bg-green-100 text-green-800 border-green-200",
}


def classify_score(score: float, thresholds: RiskThresholds = DEFAULT_THRESHOLDS) -> RiskTier:
    if score >= thresholds.high:
        return RiskTier.HIGH
    if score >= thresholds.medium:
        return RiskTier.MEDIUM
    return RiskTier.LOW


def risk_label(score: float, thresholds: RiskThresholds = DEFAULT_THRESHOLDS) -> str:
    return _LABELS[classify_score(score, thresholds)]


def badge_variant(score: float, thresholds: RiskThresholds = DEFAULT_THRESHOLDS) -> str:
    return _BADGE_VARIANTS[classify_score(score, thresholds)]


def badge_color(score: float, thresholds: RiskThresholds = DEFAULT_THRESHOLDS) -> str:
    return _BADGE_COLORS[classify_score(score, thresholds)]


def format_score(score: float) -> str:
    # Half-up rounding, not Python's banker's rounding.
    return f"{int(score * 100 + 0.5)}%"
