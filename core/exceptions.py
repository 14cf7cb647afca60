#!/usr/bin/env python3
"""
Exceptions raised by the matching and availability engine.

Input-contract violations derive from both MatchingError and ValueError so
callers can catch either. Degraded data (missing coordinates, salaries,
skills) never raises; it scores zero instead.
"""


class MatchingError(Exception):
    """Base exception for engine errors."""
    pass


class InvalidRangeError(MatchingError, ValueError):
    """Raised when a date range starts after it ends."""
    pass


class InvalidRecurrenceRuleError(MatchingError, ValueError):
    """Raised when a recurrence rule is malformed."""
    pass


class UnsupportedRecurrencePatternError(MatchingError, ValueError):
    """Raised for CUSTOM recurrence rules, which must be expanded by the caller."""
    pass


class InvalidTimeSlotError(MatchingError, ValueError):
    """Raised when a time slot is not HH:MM or does not end after it starts."""
    pass


class InvalidAvailabilityError(MatchingError, ValueError):
    """Raised when an availability entry violates its invariants."""
    pass


class InvalidWeightConfigurationError(MatchingError, ValueError):
    """Raised when a weight profile is unknown or its weights do not sum to 1.0."""
    pass


class InvalidThresholdError(MatchingError, ValueError):
    """Raised when a match threshold lies outside [0, 1]."""
    pass


class MatchStateError(MatchingError, ValueError):
    """Raised on an illegal match status transition."""
    pass


class RecordNotFoundError(MatchingError, LookupError):
    """Base for repository lookups that found nothing."""
    pass


class JobNotFoundError(RecordNotFoundError):
    """Raised when a job is not found."""
    pass


class WorkerNotFoundError(RecordNotFoundError):
    """Raised when a worker is not found."""
    pass
