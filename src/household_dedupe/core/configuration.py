import math
import os
from dataclasses import dataclass
from typing import Literal

from household_dedupe.core import settings
from household_dedupe.domain.risk import DEFAULT_THRESHOLDS, RiskThresholds
from household_dedupe.logger import get_logger
from household_dedupe.similarity.registry import DEFAULT_METRIC, METRICS

ValueType = Literal["string", "int", "float", "bool"]

logger = get_logger(__name__)

DEFAULT_WINDOW_DAYS = 5


@dataclass(frozen=True)
class ConfigField:
    key: str
    description: str
    default: str
    value_type: ValueType = "string"
    options: tuple[str, ...] | None = None
    min_value: float | int | None = None
    max_value: float | int | None = None


CONFIG_FIELDS: tuple[ConfigField, ...] = (
    ConfigField(
        key="DEDUPE_WINDOW_DAYS",
        description="Maximum number of days between two transactions for them to be compared.",
        default=str(DEFAULT_WINDOW_DAYS),
        value_type="int",
        min_value=1,
    ),
    ConfigField(
        key="DEDUPE_HIGH_RISK",
        description="Scores at or above this value are reported as high risk.",
        default=str(DEFAULT_THRESHOLDS.high),
        value_type="float",
        min_value=0.0,
        max_value=1.0,
    ),
    ConfigField(
        key="DEDUPE_MEDIUM_RISK",
        description="Scores at or above this value (and below high) are reported as medium risk.",
        default=str(DEFAULT_THRESHOLDS.medium),
        value_type="float",
        min_value=0.0,
        max_value=1.0,
    ),
    ConfigField(
        key="DEDUPE_SIMILARITY",
        description="Description similarity metric.",
        default=DEFAULT_METRIC,
        options=tuple(METRICS),
    ),
    ConfigField(
        key="DEDUPE_STRIP_NOISE",
        description="Drop company suffixes and leading store numbers before comparing descriptions.",
        default="true",
        value_type="bool",
    ),
)

_FIELDS_BY_KEY = {field.key: field for field in CONFIG_FIELDS}


@dataclass(frozen=True)
class DetectorConfig:
    window_days: int = DEFAULT_WINDOW_DAYS
    thresholds: RiskThresholds = DEFAULT_THRESHOLDS
    similarity: str = DEFAULT_METRIC
    strip_noise: bool = True


def get_config_keys() -> tuple[str, ...]:
    return tuple(field.key for field in CONFIG_FIELDS)


def validate_value(field: ConfigField, raw_value: str) -> tuple[str, str | None]:
    value = raw_value.strip()
    if not value:
        return "", None

    if "\n" in value or "\r" in value:
        return value, "Value must be a single line."

    if field.options:
        normalized = value.lower()
        if normalized not in field.options:
            return value, f"Must be one of: {', '.join(field.options)}."
        return normalized, None

    if field.value_type == "bool":
        normalized = value.lower()
        if normalized in {"1", "true", "yes", "on"}:
            return "true", None
        if normalized in {"0", "false", "no", "off"}:
            return "false", None
        return value, "Must be true or false."

    if field.value_type == "int":
        try:
            parsed_int = int(value)
        except ValueError:
            return value, "Must be a whole number."
        if field.min_value is not None and parsed_int < field.min_value:
            return value, f"Must be at least {field.min_value}."
        if field.max_value is not None and parsed_int > field.max_value:
            return value, f"Must be at most {field.max_value}."
        return str(parsed_int), None

    if field.value_type == "float":
        try:
            parsed_float = float(value)
        except ValueError:
            return value, "Must be a number."
        if not math.isfinite(parsed_float):
            return value, "Must be a number."
        if field.min_value is not None and parsed_float < field.min_value:
            return value, f"Must be at least {field.min_value}."
        if field.max_value is not None and parsed_float > field.max_value:
            return value, f"Must be at most {field.max_value}."
        return str(parsed_float), None

    return value, None


def _resolve(key: str) -> str:
    field = _FIELDS_BY_KEY[key]
    raw_value = os.getenv(key)
    if raw_value is None:
        return field.default
    cleaned, error = validate_value(field, raw_value)
    if error:
        logger.warning("[CONFIG] %s='%s' rejected (%s) Using default %s.", key, raw_value, error, field.default)
        return field.default
    return cleaned or field.default


def load_detector_config() -> DetectorConfig:
    high = float(_resolve("DEDUPE_HIGH_RISK"))
    medium = float(_resolve("DEDUPE_MEDIUM_RISK"))
    if medium > high:
        logger.warning(
            "[CONFIG] DEDUPE_MEDIUM_RISK=%s exceeds DEDUPE_HIGH_RISK=%s, using default thresholds.",
            medium,
            high,
        )
        thresholds = DEFAULT_THRESHOLDS
    else:
        thresholds = RiskThresholds(high=high, medium=medium)

    config = DetectorConfig(
        window_days=int(_resolve("DEDUPE_WINDOW_DAYS")),
        thresholds=thresholds,
        similarity=_resolve("DEDUPE_SIMILARITY"),
        strip_noise=_resolve("DEDUPE_STRIP_NOISE") == "true",
    )
    logger.debug("[CONFIG] Loaded detector config from %s: %s", settings.get_config_path(), config)
    return config
