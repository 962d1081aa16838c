"""Recurring event expansion - no I/O dependencies."""

import logging
from dataclasses import replace
from datetime import datetime, timedelta, tzinfo

from dateutil.relativedelta import relativedelta

from .models import Event, Frequency, Recurrence
from .timeutil import align, epoch_millis, week_start

logger = logging.getLogger(__name__)

# Upper bound on loop iterations per template
MAX_ITERATIONS = 5000


def overlaps(start: datetime, end: datetime, window_start: datetime, window_end: datetime) -> bool:
    """Inclusive overlap test between a span and a window."""
    return start <= window_end and end >= window_start


def _step(frequency: Frequency, units: int) -> relativedelta:
    match frequency:
        case Frequency.DAILY:
            return relativedelta(days=units)
        case Frequency.WEEKLY:
            return relativedelta(weeks=units)
        case Frequency.MONTHLY:
            return relativedelta(months=units)
        case Frequency.YEARLY:
            return relativedelta(years=units)


def _instance(template: Event, start: datetime, span: timedelta) -> Event:
    """Realize template at start, shifting its end by the original span."""
    return replace(
        template,
        id=f"{template.id}_{epoch_millis(start)}",
        master_id=template.id,
        date=start,
        end_date=start + span if template.end_date is not None else None,
    )


def _expand_weekdays(
    template: Event,
    rule: Recurrence,
    anchor: datetime,
    until: datetime | None,
    window_start: datetime,
    window_end: datetime,
) -> list[Event]:
    """
    Weekly rule with explicit weekdays.

    Walks Sunday-anchored weeks from the anchor's week, emitting one candidate
    per selected weekday at the anchor's time of day. Candidates before the
    anchor or after the recurrence end are dropped.
    """
    span = template.span
    days = sorted(set(rule.days_of_week))
    sunday = week_start(anchor)
    result = []

    iterations = 0
    while True:
        for day_index in days:
            candidate = datetime.combine(
                (sunday + timedelta(days=day_index)).date(),
                anchor.timetz(),
            )
            if candidate < anchor:
                continue
            if until is not None and candidate > until:
                continue
            if overlaps(candidate, candidate + span, window_start, window_end):
                result.append(_instance(template, candidate, span))

        sunday += timedelta(weeks=rule.interval)

        iterations += 1
        if iterations > MAX_ITERATIONS:
            logger.debug(f"Expansion of {template.id} truncated after {MAX_ITERATIONS} weeks")
            break

        if sunday > window_end and (until is None or sunday > until):
            break
        if until is not None and sunday > until:
            break

    return result


def _expand_stepped(
    template: Event,
    rule: Recurrence,
    anchor: datetime,
    until: datetime | None,
    window_start: datetime,
    window_end: datetime,
) -> list[Event]:
    """
    Daily, weekly (same weekday as the anchor), monthly and yearly rules.

    Occurrence k is anchor + k * interval units, computed from the anchor so
    month-end clamping never drifts.
    """
    span = template.span
    result = []

    occurrence = anchor
    k = 0
    while True:
        if occurrence > window_end:
            break
        if until is not None and occurrence > until:
            break

        if overlaps(occurrence, occurrence + span, window_start, window_end):
            result.append(_instance(template, occurrence, span))

        k += 1
        if k > MAX_ITERATIONS:
            logger.debug(f"Expansion of {template.id} truncated after {MAX_ITERATIONS} steps")
            break
        occurrence = anchor + _step(rule.frequency, k * rule.interval)

    return result


def expand(templates: list[Event], window_start: datetime, window_end: datetime) -> list[Event]:
    """
    Expand event templates into concrete instances overlapping a window.

    Pure function - no I/O.

    Non-recurring templates pass through when their span overlaps the window,
    keeping their id and pointing master_id at themselves. Recurring templates
    yield one instance per occurrence, with id "{templateId}_{epochMillis}" and
    master_id set to the template id. Dates of every returned event share the
    window's awareness.

    Args:
        templates: Stored events, recurring or not
        window_start: Inclusive window start
        window_end: Inclusive window end

    Returns:
        Instances in template order, ascending within each template
    """
    result = []

    for template in templates:
        start = align(template.date, window_start)
        end = align(template.effective_end, window_start)
        template = replace(
            template,
            date=start,
            end_date=end if template.end_date is not None else None,
        )

        rule = template.recurrence
        if rule is None:
            if overlaps(start, end, window_start, window_end):
                result.append(replace(template, master_id=template.master_id or template.id))
            continue

        until = align(rule.end_date, window_start) if rule.end_date else None
        if rule.has_weekdays:
            result.extend(_expand_weekdays(template, rule, start, until, window_start, window_end))
        else:
            result.extend(_expand_stepped(template, rule, start, until, window_start, window_end))

    return result


def expand_year(templates: list[Event], year: int, tz: tzinfo | None = None) -> list[Event]:
    """Expand templates over a whole calendar year, naive unless tz is given."""
    return expand(
        templates,
        datetime(year, 1, 1, tzinfo=tz),
        datetime(year, 12, 31, 23, 59, 59, 999999, tzinfo=tz),
    )


def sort_by_start(events: list[Event]) -> list[Event]:
    """Sort events by start time."""
    return sorted(events, key=lambda e: (e.date, e.id))
