"""Active and upcoming periods of one-off and recurring schedules."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from dateutil import rrule

__all__ = ["ScheduleError", "RecurrenceRule", "Period", "match_schedule"]

_TICK = timedelta(microseconds=1)

# frequency -> (rrule frequency, years, months, days)
_FREQUENCIES = {
    "Daily": (rrule.DAILY, 0, 0, 1),
    "Weekly": (rrule.WEEKLY, 0, 0, 7),
    "Monthly": (rrule.MONTHLY, 0, 1, 0),
    "Yearly": (rrule.YEARLY, 1, 0, 0),
}


class ScheduleError(ValueError):
    """Raised for a schedule that cannot be evaluated."""


def _rfc3339(moment: datetime) -> str:
    text = moment.replace(microsecond=0).isoformat()
    if moment.tzinfo is None:
        return text + "Z"
    if moment.utcoffset() == timedelta(0):
        return text[: -len("+00:00")] + "Z"
    return text


def _elapsed(start: datetime, end: datetime) -> timedelta:
    if start.tzinfo is not None and end.tzinfo is not None:
        return end.astimezone(timezone.utc) - start.astimezone(timezone.utc)
    return end - start


def _add_calendar(moment: datetime, years: int, months: int, days: int) -> datetime:
    """Shift a date, letting overflowing days roll into the next month."""
    total_months = moment.month - 1 + months
    year = moment.year + years + total_months // 12
    month = total_months % 12 + 1
    first = moment.replace(year=year, month=month, day=1)
    return first + timedelta(days=moment.day - 1 + days)


@dataclass(frozen=True)
class RecurrenceRule:
    """How often a period repeats, and until when."""

    frequency: str = ""
    until_time: datetime | None = None


@dataclass(frozen=True)
class Period:
    """A span of time from ``start_time`` up to ``end_time``."""

    start_time: datetime
    end_time: datetime

    def __str__(self) -> str:
        return f"{_rfc3339(self.start_time)}-{_rfc3339(self.end_time)}"


def match_schedule(
    now: datetime,
    start_time: datetime,
    end_time: datetime,
    recurrence_rule: RecurrenceRule,
) -> tuple[Period | None, Period | None]:
    """Return the period active at ``now`` and the next one to come.

    Either may be None.  Raises ScheduleError for an unknown frequency or a
    period longer than its frequency.
    """
    frequency = recurrence_rule.frequency

    if frequency == "":
        if now < start_time:
            return None, Period(start_time, end_time)
        if now < end_time:
            return Period(start_time, end_time), None
        return None, None

    try:
        freq_value, years, months, days = _FREQUENCIES[frequency]
    except KeyError:
        raise ScheduleError(
            f'invalid freq {frequency!r}: It must be one of "Daily", "Weekly", '
            f'"Monthly", and "Yearly"'
        ) from None

    freq_later = _add_calendar(now, years, months, days)
    freq_duration = _elapsed(now, freq_later)

    override_duration = _elapsed(start_time, end_time)
    if override_duration > freq_duration:
        raise ScheduleError(
            f"override's duration {override_duration} must be equal to or shorter "
            f"than the duration implied by freq {frequency!r} ({freq_duration})"
        )

    try:
        rule = rrule.rrule(freq_value, dtstart=start_time, until=recurrence_rule.until_time)
    except (ValueError, TypeError) as exc:
        raise ScheduleError(str(exc)) from exc

    active_starts = rule.between(now - override_duration + _TICK, now, inc=True)
    if len(active_starts) > 1:
        raise ScheduleError(f"unexpected number of active overrides found: {active_starts}")

    active = None
    if active_starts:
        active = Period(active_starts[0], active_starts[0] + override_duration)

    upcoming_starts = rule.between(now + _TICK, freq_later, inc=True)
    upcoming = None
    if upcoming_starts:
        upcoming = Period(upcoming_starts[0], upcoming_starts[0] + override_duration)

    return active, upcoming