from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Optional, Tuple

from ..common.datetime_utils import end_of_day_utc, parse_optional_date, start_of_day_utc
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar-date filter evaluated at UTC day boundaries."""

    from_date: Optional[date] = None
    to_date: Optional[date] = None

    def __post_init__(self):
        if self.from_date and self.to_date and self.from_date > self.to_date:
            raise ValidationError("Start date must not be after end date")

    @classmethod
    def parse(cls, date_from: Optional[str], date_to: Optional[str]) -> "DateRange":
        try:
            return cls(parse_optional_date(date_from), parse_optional_date(date_to))
        except ValueError as e:
            raise ValidationError("Dates must use the YYYY-MM-DD format") from e

    @property
    def is_filtered(self) -> bool:
        return self.from_date is not None or self.to_date is not None

    def contains(self, acquired_at: Optional[datetime]) -> bool:
        # Undated (legacy) acquisitions only show up in the all-time view.
        if acquired_at is None:
            return not self.is_filtered
        if self.from_date and acquired_at < start_of_day_utc(self.from_date):
            return False
        if self.to_date and acquired_at > end_of_day_utc(self.to_date):
            return False
        return True


@dataclass(frozen=True)
class AcquisitionEvent:
    date: Optional[str]
    user_id: str


@dataclass(frozen=True)
class StampStat:
    stamp_id: str
    name: str
    count: int
    percentage: float
    acquisitions: Tuple[AcquisitionEvent, ...] = ()

    @property
    def percentage_label(self) -> str:
        return f"{self.percentage:.1f}"


@dataclass(frozen=True)
class StatisticsSnapshot:
    """Derived participation statistics; never persisted."""

    total_users: int
    stamp_stats: Dict[str, StampStat]
    daily_stats: Dict[str, int]
    completion_rate: float
    completed_users: int
    total_acquisitions: int
    scanned_files: int
    failed_keys: Tuple[str, ...] = ()
    date_range: DateRange = field(default_factory=DateRange)

    @property
    def completion_rate_label(self) -> str:
        return f"{self.completion_rate:.1f}"
