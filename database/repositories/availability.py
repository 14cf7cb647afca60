import logging
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.availability.models import (
    Availability,
    RecurrenceRule,
    TimeSlot,
    as_end_datetime,
    as_start_datetime,
)
from database.models import AvailabilityRecord
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


def recurrence_to_json(rule: Optional[RecurrenceRule]) -> Optional[Dict[str, Any]]:
    if rule is None:
        return None
    return {
        'pattern': rule.pattern.value,
        'interval': rule.interval,
        'days_of_week': sorted(int(d) for d in rule.days_of_week),
        'day_of_month': rule.day_of_month,
        'start_date': rule.start_date.isoformat(),
        'end_date': rule.end_date.isoformat() if rule.end_date else None,
        'count': rule.count,
        'exceptions': sorted(d.isoformat() for d in rule.exceptions),
    }


def recurrence_from_json(data: Optional[Dict[str, Any]]) -> Optional[RecurrenceRule]:
    if not data:
        return None
    return RecurrenceRule(
        pattern=data['pattern'],
        interval=data.get('interval') or 1,
        days_of_week=frozenset(data.get('days_of_week') or []),
        day_of_month=data.get('day_of_month'),
        start_date=date.fromisoformat(data['start_date']),
        end_date=date.fromisoformat(data['end_date']) if data.get('end_date') else None,
        count=data.get('count'),
        exceptions=frozenset(date.fromisoformat(d) for d in data.get('exceptions') or []),
    )


def availability_from_row(row: AvailabilityRecord) -> Availability:
    return Availability(
        id=row.id,
        worker_id=row.worker_id,
        type=row.type,
        status=row.status,
        title=row.title,
        start_date=row.start_date,
        end_date=row.end_date,
        is_all_day=bool(row.is_all_day),
        time_slots=[TimeSlot(s['start_time'], s['end_time']) for s in row.time_slots or []],
        timezone=row.timezone or 'UTC',
        is_recurring=bool(row.is_recurring),
        recurrence=recurrence_from_json(row.recurrence),
        priority=row.priority or 5,
    )


def _utc_now() -> datetime:
    # stored times are naive wall-clock values
    return datetime.now(timezone.utc).replace(tzinfo=None)


class AvailabilityRepository(BaseRepository):
    def __init__(self, db: Session, clock: Optional[Callable[[], datetime]] = None):
        super().__init__(db)
        self.clock = clock or _utc_now

    def get_for_worker(self, worker_id: str, refresh_expired: bool = True) -> List[Availability]:
        """All entries of a worker, oldest first.

        Entries whose end date has passed are moved to EXPIRED on read.
        """
        stmt = (
            select(AvailabilityRecord)
            .where(AvailabilityRecord.worker_id == worker_id)
            .order_by(AvailabilityRecord.start_date)
        )
        rows = self.db.execute(stmt).scalars().all()
        if refresh_expired:
            self._expire_rows(rows)
        return [availability_from_row(row) for row in rows]

    def get_by_id(self, availability_id: str) -> Optional[Availability]:
        row = self.db.get(AvailabilityRecord, availability_id)
        return availability_from_row(row) if row else None

    def save(self, entry: Availability) -> Availability:
        """Insert or update an entry from its value object. Returns it with its id."""
        fields = {'worker_id': entry.worker_id}
        if entry.id:
            fields['id'] = entry.id
        row = self._get_or_add(AvailabilityRecord, entry.id or None, **fields)

        row.type = entry.type.value
        row.status = entry.status.value
        row.title = entry.title
        row.start_date = as_start_datetime(entry.start_date)
        row.end_date = as_end_datetime(entry.end_date) if entry.end_date is not None else None
        row.is_all_day = entry.is_all_day
        row.time_slots = [{'start_time': s.start_time, 'end_time': s.end_time} for s in entry.time_slots]
        row.timezone = entry.timezone
        row.is_recurring = entry.is_recurring
        row.recurrence = recurrence_to_json(entry.recurrence)
        row.priority = entry.priority

        self.db.flush()  # Generate ID
        return availability_from_row(row)

    def expire_passed(self, now: Optional[datetime] = None) -> int:
        """Move every ACTIVE/INACTIVE entry whose end date has passed to EXPIRED."""
        stmt = select(AvailabilityRecord).where(
            AvailabilityRecord.end_date.is_not(None),
            AvailabilityRecord.status != 'EXPIRED'
        )
        rows = self.db.execute(stmt).scalars().all()
        count = self._expire_rows(rows, now)
        if count > 0:
            logger.info(f"Expired {count} availability entries")
        return count

    def _expire_rows(self, rows: List[AvailabilityRecord], now: Optional[datetime] = None) -> int:
        now = now or self.clock()
        count = 0
        for row in rows:
            current = availability_from_row(row)
            refreshed = current.refresh_status(now)
            if refreshed.status != current.status:
                row.status = refreshed.status.value
                count += 1
        if count:
            self.db.flush()
        return count
