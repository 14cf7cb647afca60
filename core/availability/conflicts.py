#!/usr/bin/env python3
"""
Availability Conflict Checking.

Answers two independent questions about a worker's availability entries
and a proposed commitment window:

- has_conflict: is there a known blocker? Only ACTIVE UNAVAILABLE entries
  block. A worker with no entries at all is not in conflict.
- has_declared_availability: did the worker say they are free? Needs an
  ACTIVE AVAILABLE or PREFERRED entry touching the window.

Recurring entries are tested through the recurrence evaluator; fixed
entries by interval overlap, where an entry without an end date is
open-ended.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, List, Optional, Sequence
import logging

from core.availability.models import (
    Availability,
    AvailabilityType,
    DateLike,
    as_date,
    as_end_datetime,
    as_start_datetime,
)
from core.availability import recurrence
from core.exceptions import InvalidRangeError

logger = logging.getLogger(__name__)

BLOCKING_TYPES = frozenset({AvailabilityType.UNAVAILABLE})
DECLARING_TYPES = frozenset({AvailabilityType.AVAILABLE, AvailabilityType.PREFERRED})


@dataclass(frozen=True)
class ConflictDetail:
    """An entry that blocks the proposed window, with the first blocked day."""
    availability: Availability
    first_conflict_date: Optional[date] = None


class AvailabilityConflictChecker:
    """Stateless overlap checks between availability entries and a time window."""

    def has_conflict(
        self,
        entries: Iterable[Availability],
        proposed_start: DateLike,
        proposed_end: DateLike
    ) -> bool:
        """True if any ACTIVE UNAVAILABLE entry overlaps the proposed window.

        Raises:
            InvalidRangeError: proposed_start is after proposed_end
        """
        start, end = _window(proposed_start, proposed_end)
        return any(
            entry.type in BLOCKING_TYPES and self.overlaps(entry, start, end)
            for entry in entries
            if entry.is_active
        )

    def find_conflicts(
        self,
        entries: Iterable[Availability],
        proposed_start: DateLike,
        proposed_end: DateLike
    ) -> List[ConflictDetail]:
        """Every blocking entry for the window, in input order."""
        start, end = _window(proposed_start, proposed_end)
        conflicts = []
        for entry in entries:
            if not entry.is_active or entry.type not in BLOCKING_TYPES:
                continue
            if not self.overlaps(entry, start, end):
                continue

            if entry.is_recurring:
                first = recurrence.next_occurrence(entry.recurrence, start)
            else:
                first = max(as_date(entry.start_date), start.date())
            conflicts.append(ConflictDetail(availability=entry, first_conflict_date=first))

        if conflicts:
            logger.debug(f"{len(conflicts)} conflicting entries for window {start} - {end}")
        return conflicts

    def has_declared_availability(
        self,
        entries: Iterable[Availability],
        proposed_start: DateLike,
        proposed_end: DateLike
    ) -> bool:
        """True if an ACTIVE AVAILABLE/PREFERRED entry overlaps the proposed window."""
        start, end = _window(proposed_start, proposed_end)
        return any(
            entry.type in DECLARING_TYPES and self.overlaps(entry, start, end)
            for entry in entries
            if entry.is_active
        )

    def entries_in_range(
        self,
        entries: Iterable[Availability],
        range_start: DateLike,
        range_end: DateLike,
        types: Optional[Sequence[AvailabilityType]] = None
    ) -> List[Availability]:
        """ACTIVE entries touching the range, optionally restricted to some types, sorted by start."""
        start, end = _window(range_start, range_end)
        wanted = frozenset(AvailabilityType(t) for t in types) if types else None
        found = [
            entry for entry in entries
            if entry.is_active
            and (wanted is None or entry.type in wanted)
            and self.overlaps(entry, start, end)
        ]
        return sorted(found, key=lambda e: as_start_datetime(e.start_date))

    @staticmethod
    def overlaps(entry: Availability, start: datetime, end: datetime) -> bool:
        """Type- and status-agnostic overlap between one entry and a window."""
        if entry.is_recurring:
            return recurrence.occurs_within(entry.recurrence, start, end)

        entry_start = _align(as_start_datetime(entry.start_date), start)
        if entry_start > end:
            return False
        if entry.end_date is None:
            return True
        return _align(as_end_datetime(entry.end_date), start) >= start


def _window(start: DateLike, end: DateLike):
    start_dt = as_start_datetime(start)
    end_dt = _align(as_end_datetime(end), start_dt)
    if start_dt > end_dt:
        raise InvalidRangeError(f"Window start {start_dt} is after window end {end_dt}")
    return start_dt, end_dt


def _align(value: datetime, reference: datetime) -> datetime:
    """Match value's tz-awareness to reference so the two can be compared."""
    if reference.tzinfo is not None and value.tzinfo is None:
        return value.replace(tzinfo=reference.tzinfo)
    if reference.tzinfo is None and value.tzinfo is not None:
        return value.replace(tzinfo=None)
    return value
