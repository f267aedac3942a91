from datetime import date
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from household_dedupe.domain.dates import coerce_date


class _Model(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class TransactionRecord(_Model):
    id: str
    amount: Decimal
    transaction_date: Optional[date] = None  # None when the source date was unparsable
    description: str = ""
    account: str = ""
    user: str = "Unknown"
    category: str = "Uncategorized"
    type: str = "Unknown"
    memo: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        if isinstance(value, int):
            return str(value)
        return value

    @field_validator("transaction_date", mode="before")
    @classmethod
    def _parse_date(cls, value: Any) -> date | None:
        return coerce_date(value)

    @field_validator("description", mode="before")
    @classmethod
    def _default_description(cls, value: Any) -> Any:
        return "" if value is None else value


class DuplicatePair(_Model):
    transaction1: TransactionRecord
    transaction2: TransactionRecord
    score: float = Field(ge=0.0, le=1.0)
    day_score: float = Field(ge=0.0, le=1.0)
    description_score: float = Field(ge=0.0, le=1.0)
    days_difference: int = Field(ge=0)


class DuplicateStats(_Model):
    total: int = 0
    high_risk: int = 0
    medium_risk: int = 0
    low_risk: int = 0


class DuplicateResult(_Model):
    pairs: list[DuplicatePair] = Field(default_factory=list)
    stats: DuplicateStats = Field(default_factory=DuplicateStats)


class DateRange(_Model):
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class DuplicateReport(DuplicateResult):
    total_transactions: int = 0
    skipped_transactions: int = 0
    date_range: DateRange = Field(default_factory=DateRange)
