"""
Availability Module - recurring availability windows and conflict checks.

Public API:
- Availability, RecurrenceRule, TimeSlot and their enums
- occurs_within: recurrence rule vs date range
- AvailabilityConflictChecker: blockers and declared availability for a window
"""

from core.availability.models import (
    Availability,
    AvailabilityStatus,
    AvailabilityType,
    DayOfWeek,
    RecurrencePattern,
    RecurrenceRule,
    TimeSlot,
)
from core.availability.recurrence import occurs_within, effective_end_date, next_occurrence
from core.availability.conflicts import AvailabilityConflictChecker, ConflictDetail

__all__ = [
    'Availability',
    'AvailabilityStatus',
    'AvailabilityType',
    'DayOfWeek',
    'RecurrencePattern',
    'RecurrenceRule',
    'TimeSlot',
    'occurs_within',
    'effective_end_date',
    'next_occurrence',
    'AvailabilityConflictChecker',
    'ConflictDetail',
]
