from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from ..common.datetime_utils import to_iso, utc_day_key
from ..core.constants import PERCENT_DECIMALS
from ..core.enums import DenominatorPolicy
from ..core.exceptions import StorageError
from ..records.repository import UserStampRecordRepository
from ..stamps.repository import StampCatalogRepository
from .model import AcquisitionEvent, DateRange, StampStat, StatisticsSnapshot

logger = logging.getLogger(__name__)


def percent(part: int, whole: int) -> float:
    if whole <= 0:
        return 0.0
    return round(part / whole * 100, PERCENT_DECIMALS)


@dataclass
class _StampCounter:
    name: str
    count: int = 0
    acquisitions: List[AcquisitionEvent] = field(default_factory=list)


class StatisticsService:
    """Aggregate every user record into per-stamp counts, a daily histogram and a completion rate.

    One unreadable or malformed record never aborts the scan: it is logged,
    listed in `failed_keys` and skipped.
    """

    def __init__(
        self,
        catalog: StampCatalogRepository,
        records: UserStampRecordRepository,
        *,
        denominator: DenominatorPolicy = DenominatorPolicy.FILES,
    ):
        self._catalog = catalog
        self._records = records
        self._denominator = DenominatorPolicy(denominator)

    def compute(self, date_range: Optional[DateRange] = None) -> StatisticsSnapshot:
        date_range = date_range or DateRange()
        catalog = self._catalog.load()

        counters: Dict[str, _StampCounter] = {stamp_id: _StampCounter(name=entry.name) for stamp_id, entry in catalog.items()}
        daily: Dict[str, int] = {}
        active_users: Set[str] = set()
        completed_users = 0
        total_acquisitions = 0
        failed: List[str] = []

        keys = self._records.list_record_keys()
        for key in keys:
            try:
                record = self._records.read_record(key)
            except (ValueError, StorageError) as e:
                logger.error(f"Error processing {key}: {e}")
                failed.append(key)
                continue

            in_range = [a for a in record.stamps if date_range.contains(a.acquired_at)]
            if not in_range:
                continue

            active_users.add(record.user_id)
            if len(in_range) == len(catalog):
                completed_users += 1

            for acquisition in in_range:
                counter = counters.get(acquisition.stamp_id)
                if counter is None:
                    continue
                counter.count += 1
                total_acquisitions += 1
                stamped = acquisition.acquired_at
                counter.acquisitions.append(
                    AcquisitionEvent(date=to_iso(stamped) if stamped else None, user_id=record.user_id)
                )
                if stamped is not None:
                    day = utc_day_key(stamped)
                    daily[day] = daily.get(day, 0) + 1

        if date_range.is_filtered or self._denominator == DenominatorPolicy.ACTIVE:
            total_users = len(active_users)
        else:
            total_users = len(keys)

        stamp_stats = {
            stamp_id: StampStat(
                stamp_id=stamp_id,
                name=c.name,
                count=c.count,
                percentage=percent(c.count, total_users),
                acquisitions=tuple(c.acquisitions),
            )
            for stamp_id, c in counters.items()
        }

        if failed:
            logger.warning(f"Statistics skipped {len(failed)} of {len(keys)} user records")

        return StatisticsSnapshot(
            total_users=total_users,
            stamp_stats=stamp_stats,
            daily_stats=dict(sorted(daily.items())),
            completion_rate=percent(completed_users, total_users),
            completed_users=completed_users,
            total_acquisitions=total_acquisitions,
            scanned_files=len(keys),
            failed_keys=tuple(failed),
            date_range=date_range,
        )
