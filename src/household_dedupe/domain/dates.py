import re
from datetime import date, datetime
from typing import Any

from household_dedupe.errors import InvalidDateRangeError

_ISO_DATE = re.compile(
    r"\d{4}-\d{2}-\d{2}"
    r"(?:[T ]\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?(?:Z|[+-]\d{2}:?\d{2})?)?"
)


def coerce_date(value: Any) -> date | None:
    """
    Convert to a calendar date; ``None`` when unparsable.

    Strings must be ``YYYY-MM-DD``, optionally followed by a ``T`` or space,
    ``HH:MM[:SS[.fraction]]`` and a ``Z`` or ``+HH:MM`` offset. The date part
    is taken as written; the time and offset are only checked for shape.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not _ISO_DATE.fullmatch(text):
            return None
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


def days_between(first: date, second: date) -> int:
    return abs((second - first).days)


def parse_bound(value: date | datetime | str | None, name: str) -> date | None:
    if value is None or value == "":
        return None
    parsed = coerce_date(value)
    if parsed is None:
        raise InvalidDateRangeError(f"Invalid {name}: {value!r}")
    return parsed


def resolve_date_range(
    start_date: date | datetime | str | None,
    end_date: date | datetime | str | None,
) -> tuple[date | None, date | None]:
    start = parse_bound(start_date, "start_date")
    end = parse_bound(end_date, "end_date")
    if start and end and start > end:
        raise InvalidDateRangeError(f"start_date {start} is after end_date {end}")
    return start, end


def in_range(value: date | None, start: date | None, end: date | None) -> bool:
    if start is None and end is None:
        return True
    if value is None:
        return False
    if start is not None and value < start:
        return False
    if end is not None and value > end:
        return False
    return True


def format_duration(seconds: float) -> str:
    if seconds <= 0:
        return "0 ms"
    if seconds < 1:
        return f"{seconds * 1000:.1f} ms"
    return f"{seconds:.2f} s"
