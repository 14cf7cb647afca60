#!/usr/bin/env python3
"""
Recurrence Evaluation - does a recurrence rule produce a date inside a range?

Rules:
- Exception dates never produce an occurrence, whatever the pattern.
- interval spaces BIWEEKLY and MONTHLY rules; DAILY and WEEKLY rules
  occur on every matching day.
- Enumeration is clipped to the part of the range the rule is alive for.
- Count-bounded rules end on the date of their count-th occurrence;
  exception dates do not consume the count.
- CUSTOM has no schema and is rejected; callers expand it into a
  concrete rule first.
"""

from datetime import date, timedelta
from typing import Iterator, Optional
import calendar
import logging

from core.availability.models import DateLike, RecurrencePattern, RecurrenceRule, as_date
from core.exceptions import InvalidRangeError, UnsupportedRecurrencePatternError

logger = logging.getLogger(__name__)

_ONE_DAY = timedelta(days=1)


def occurs_within(rule: RecurrenceRule, range_start: DateLike, range_end: DateLike) -> bool:
    """Return True if the rule has at least one occurrence in [range_start, range_end].

    Both bounds are inclusive and compared as calendar dates.

    Raises:
        InvalidRangeError: range_start is after range_end
        UnsupportedRecurrencePatternError: the rule uses the CUSTOM pattern
    """
    start = as_date(range_start)
    end = as_date(range_end)
    if start > end:
        raise InvalidRangeError(f"Range start {start} is after range end {end}")

    _reject_custom(rule)

    # cheap rejection before any enumeration
    if rule.end_date is not None and rule.end_date < start:
        return False
    if rule.start_date > end:
        return False

    rule_end = effective_end_date(rule)
    span_start = max(start, rule.start_date)
    span_end = end if rule_end is None else min(end, rule_end)
    if span_start > span_end:
        return False

    if rule.pattern == RecurrencePattern.MONTHLY:
        candidates = _monthly_candidates(rule, span_start, span_end)
    else:
        candidates = (d for d in _days(span_start, span_end) if _matches_pattern(rule, d))

    return any(not rule.is_exception(d) for d in candidates)


def effective_end_date(rule: RecurrenceRule) -> Optional[date]:
    """Last date a rule can occur on: its end date, or the date of its count-th occurrence.

    Returns None for rules with neither bound.
    """
    _reject_custom(rule)

    if rule.count is None:
        return rule.end_date

    stop = rule.start_date + _count_horizon(rule)
    if rule.end_date is not None:
        stop = min(stop, rule.end_date)

    seen = 0
    last = None
    for occurrence in _pattern_occurrences(rule, stop):
        if rule.is_exception(occurrence):
            continue
        seen += 1
        last = occurrence
        if seen >= rule.count:
            break

    if last is None:
        return rule.end_date
    if rule.end_date is not None:
        return min(last, rule.end_date)
    return last


def next_occurrence(rule: RecurrenceRule, on_or_after: DateLike) -> Optional[date]:
    """First non-exception occurrence on or after the given day, or None if the rule has ended."""
    _reject_custom(rule)

    day = max(as_date(on_or_after), rule.start_date)
    rule_end = effective_end_date(rule)
    if rule_end is None:
        rule_end = day + _cycle_length(rule)

    if day > rule_end:
        return None

    if rule.pattern == RecurrencePattern.MONTHLY:
        candidates = _monthly_candidates(rule, day, rule_end)
    else:
        candidates = (d for d in _days(day, rule_end) if _matches_pattern(rule, d))

    for candidate in candidates:
        if not rule.is_exception(candidate):
            return candidate
    return None


def _reject_custom(rule: RecurrenceRule) -> None:
    if rule.pattern == RecurrencePattern.CUSTOM:
        raise UnsupportedRecurrencePatternError(
            "CUSTOM recurrence has no evaluable schema; expand it into a concrete rule"
        )


def _days(first: date, last: date) -> Iterator[date]:
    day = first
    while day <= last:
        yield day
        day += _ONE_DAY


def _matches_pattern(rule: RecurrenceRule, day: date) -> bool:
    """Pattern test for the day-based patterns (exceptions excluded)."""
    days_since = (day - rule.start_date).days
    if days_since < 0:
        return False

    if rule.pattern == RecurrencePattern.DAILY:
        return True

    if day.weekday() not in rule.days_of_week:
        return False

    if rule.pattern == RecurrencePattern.BIWEEKLY:
        return (days_since // 7) % (rule.interval * 2) == 0
    return True


def _monthly_candidates(rule: RecurrenceRule, first: date, last: date) -> Iterator[date]:
    """Dates carrying the rule's day-of-month in each month touched by [first, last].

    Months too short for the day are skipped rather than rolled over.
    """
    year, month = first.year, first.month
    while (year, month) <= (last.year, last.month):
        months_since = (year - rule.start_date.year) * 12 + (month - rule.start_date.month)
        if months_since >= 0 and months_since % rule.interval == 0:
            if rule.day_of_month <= calendar.monthrange(year, month)[1]:
                candidate = date(year, month, rule.day_of_month)
                if first <= candidate <= last and candidate >= rule.start_date:
                    yield candidate
        month += 1
        if month > 12:
            year, month = year + 1, 1


def _cycle_length(rule: RecurrenceRule) -> timedelta:
    """A span long enough to contain at least one occurrence of any satisfiable rule."""
    if rule.pattern == RecurrencePattern.DAILY:
        return _ONE_DAY
    if rule.pattern == RecurrencePattern.WEEKLY:
        return timedelta(weeks=1)
    if rule.pattern == RecurrencePattern.BIWEEKLY:
        return timedelta(weeks=2 * rule.interval + 1)
    # the month sequence repeats every interval years; day 29-31 may skip months
    return timedelta(days=366 * rule.interval + 31)


def _count_horizon(rule: RecurrenceRule) -> timedelta:
    # skipped exception dates push the count-th occurrence further out
    return _cycle_length(rule) * (rule.count + len(rule.exceptions))


def _pattern_occurrences(rule: RecurrenceRule, stop: date) -> Iterator[date]:
    """All pattern dates from the rule start up to stop, including exception dates."""
    if rule.pattern == RecurrencePattern.MONTHLY:
        yield from _monthly_candidates(rule, rule.start_date, stop)
        return

    for day in _days(rule.start_date, stop):
        if _matches_pattern(rule, day):
            yield day
