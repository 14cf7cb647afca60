#!/usr/bin/env python3
"""
Availability Models - value objects for worker availability.

Entries are immutable. Lifecycle operations (activate, deactivate,
exception edits, expiry) return a new instance; persisting it is the
repository's job.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime, time
from enum import Enum, IntEnum
from typing import FrozenSet, Iterable, List, Optional, Union
import re

from core.exceptions import (
    InvalidAvailabilityError,
    InvalidRecurrenceRuleError,
    InvalidTimeSlotError,
)

DateLike = Union[date, datetime]

_HHMM = re.compile(r'^([01]\d|2[0-3]):([0-5]\d)$')


class AvailabilityType(str, Enum):
    AVAILABLE = "AVAILABLE"
    UNAVAILABLE = "UNAVAILABLE"
    PREFERRED = "PREFERRED"
    TENTATIVE = "TENTATIVE"


class AvailabilityStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    EXPIRED = "EXPIRED"


class RecurrencePattern(str, Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    BIWEEKLY = "BIWEEKLY"
    MONTHLY = "MONTHLY"
    CUSTOM = "CUSTOM"


class DayOfWeek(IntEnum):
    """Days numbered like date.weekday() (Monday is 0)."""
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6


def as_date(value: DateLike) -> date:
    """Drop the time component of a datetime; dates pass through."""
    if isinstance(value, datetime):
        return value.date()
    return value


def as_start_datetime(value: DateLike) -> datetime:
    """A plain date used as a range start means the start of that day."""
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def as_end_datetime(value: DateLike) -> datetime:
    """A plain date used as a range end means the end of that day."""
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.max)


@dataclass(frozen=True)
class TimeSlot:
    """A time-of-day window in 24-hour HH:MM form."""
    start_time: str
    end_time: str

    def __post_init__(self):
        for value in (self.start_time, self.end_time):
            if not isinstance(value, str) or not _HHMM.match(value):
                raise InvalidTimeSlotError(f"Time must be in 24-hour format (HH:MM), got {value!r}")
        # zero-padded HH:MM compares correctly as text
        if self.start_time >= self.end_time:
            raise InvalidTimeSlotError(
                f"End time must be after start time ({self.start_time} >= {self.end_time})"
            )


@dataclass(frozen=True)
class RecurrenceRule:
    """A repeating-date pattern with optional end condition and exceptions."""
    pattern: RecurrencePattern
    start_date: date
    interval: int = 1
    days_of_week: FrozenSet[DayOfWeek] = frozenset()
    day_of_month: Optional[int] = None
    end_date: Optional[date] = None
    count: Optional[int] = None
    exceptions: FrozenSet[date] = frozenset()

    def __post_init__(self):
        # normalise iterables and datetimes so callers can pass lists
        object.__setattr__(self, 'pattern', RecurrencePattern(self.pattern))
        object.__setattr__(self, 'start_date', as_date(self.start_date))
        if self.end_date is not None:
            object.__setattr__(self, 'end_date', as_date(self.end_date))
        object.__setattr__(self, 'days_of_week', frozenset(DayOfWeek(d) for d in self.days_of_week))
        object.__setattr__(self, 'exceptions', frozenset(as_date(d) for d in self.exceptions))

        if not isinstance(self.interval, int) or self.interval < 1:
            raise InvalidRecurrenceRuleError(f"Interval must be >= 1, got {self.interval!r}")
        if self.end_date is not None and self.end_date < self.start_date:
            raise InvalidRecurrenceRuleError(
                f"Recurrence end date {self.end_date} is before start date {self.start_date}"
            )
        if self.count is not None and self.count < 1:
            raise InvalidRecurrenceRuleError(f"Occurrence count must be >= 1, got {self.count}")
        if self.day_of_month is not None and not 1 <= self.day_of_month <= 31:
            raise InvalidRecurrenceRuleError(f"Day of month must be 1-31, got {self.day_of_month}")

        if self.pattern in (RecurrencePattern.WEEKLY, RecurrencePattern.BIWEEKLY) and not self.days_of_week:
            raise InvalidRecurrenceRuleError("Days of week are required for weekly recurrence")
        if self.pattern == RecurrencePattern.MONTHLY and self.day_of_month is None:
            raise InvalidRecurrenceRuleError("Day of month is required for monthly recurrence")

    @property
    def is_bounded(self) -> bool:
        return self.end_date is not None or self.count is not None

    def is_exception(self, day: date) -> bool:
        return day in self.exceptions


@dataclass(frozen=True)
class Availability:
    """One availability declaration belonging to a single worker."""
    worker_id: str
    start_date: DateLike
    type: AvailabilityType = AvailabilityType.AVAILABLE
    status: AvailabilityStatus = AvailabilityStatus.ACTIVE
    end_date: Optional[DateLike] = None
    is_all_day: bool = True
    time_slots: List[TimeSlot] = field(default_factory=list)
    timezone: str = "UTC"
    is_recurring: bool = False
    recurrence: Optional[RecurrenceRule] = None
    priority: int = 5
    id: Optional[str] = None
    title: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, 'type', AvailabilityType(self.type))
        object.__setattr__(self, 'status', AvailabilityStatus(self.status))
        object.__setattr__(self, 'time_slots', list(self.time_slots))

        if self.end_date is not None and as_end_datetime(self.end_date) < as_start_datetime(self.start_date):
            raise InvalidAvailabilityError("End date must be after start date")
        if not self.is_all_day and not self.time_slots:
            raise InvalidAvailabilityError("Time slots are required when not all day")
        if not 1 <= self.priority <= 10:
            raise InvalidAvailabilityError(f"Priority must be 1-10, got {self.priority}")

        if self.is_recurring:
            if self.recurrence is None:
                raise InvalidAvailabilityError(
                    "Recurrence details are required for recurring availability"
                )
            if not self.recurrence.is_bounded:
                raise InvalidAvailabilityError(
                    "Either end date or count is required for recurring availability"
                )

    @property
    def is_active(self) -> bool:
        return self.status == AvailabilityStatus.ACTIVE

    def activate(self) -> "Availability":
        return replace(self, status=AvailabilityStatus.ACTIVE)

    def deactivate(self) -> "Availability":
        return replace(self, status=AvailabilityStatus.INACTIVE)

    def refresh_status(self, now: datetime) -> "Availability":
        """Expire the entry once its end date has passed."""
        if (
            self.end_date is not None
            and self.status != AvailabilityStatus.EXPIRED
            and _comparable_end(self.end_date, now) < now
        ):
            return replace(self, status=AvailabilityStatus.EXPIRED)
        return self

    def update_time_slots(self, time_slots: Iterable[TimeSlot]) -> "Availability":
        slots = list(time_slots)
        if not slots:
            raise InvalidAvailabilityError("At least one time slot is required")
        return replace(self, time_slots=slots, is_all_day=False)

    def add_exception(self, day: DateLike) -> "Availability":
        if not self.is_recurring or self.recurrence is None:
            raise InvalidAvailabilityError("Cannot add exception to non-recurring availability")
        exceptions = self.recurrence.exceptions | {as_date(day)}
        return replace(self, recurrence=replace(self.recurrence, exceptions=exceptions))

    def remove_exception(self, day: DateLike) -> "Availability":
        if not self.is_recurring or self.recurrence is None or not self.recurrence.exceptions:
            raise InvalidAvailabilityError("No exceptions to remove")
        exceptions = self.recurrence.exceptions - {as_date(day)}
        return replace(self, recurrence=replace(self.recurrence, exceptions=exceptions))


def _comparable_end(end: DateLike, now: datetime) -> datetime:
    end_dt = as_end_datetime(end)
    # keep aware/naive consistent with the clock we compare against
    if now.tzinfo is not None and end_dt.tzinfo is None:
        end_dt = end_dt.replace(tzinfo=now.tzinfo)
    elif now.tzinfo is None and end_dt.tzinfo is not None:
        end_dt = end_dt.replace(tzinfo=None)
    return end_dt
