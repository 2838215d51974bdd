"""ISO-8601 week arithmetic: labels like "2026-W05", Mondays, week ranges.

Everything here is pure except current_week(), which reads the clock.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional, Tuple

WEEK_LABEL_RE = re.compile(r"^(\d{4})-W(\d{1,2})$")

# Years whose weeks and their neighbours stay inside datetime.date
MIN_YEAR = 1
MAX_YEAR = 9998


class FormatError(ValueError):
    """Raised for a malformed ISO week label."""


@dataclass(frozen=True, order=True)
class ISOWeek:
    year: int
    week: int

    @property
    def label(self) -> str:
        return f"{self.year:04d}-W{self.week:02d}"

    def __str__(self) -> str:
        return self.label


def weeks_in_year(year: int) -> int:
    """Number of ISO weeks in a year: 53 when Dec-31 falls in week 53, else 52."""
    if date(year, 12, 31).isocalendar()[1] == 53:
        return 53
    return 52


def parse(label: str) -> ISOWeek:
    """Parse a "YYYY-Www" label."""
    if not isinstance(label, str):
        raise FormatError(f"Week label must be a string, got {type(label).__name__}")
    match = WEEK_LABEL_RE.match(label.strip())
    if not match:
        raise FormatError(f"Invalid ISO week label: {label!r}")
    year, week = int(match.group(1)), int(match.group(2))
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise FormatError(f"Year out of range in {label!r}")
    if not 1 <= week <= 53:
        raise FormatError(f"Week number out of range in {label!r}")
    return ISOWeek(year, week)


def format_week(week: ISOWeek) -> str:
    return week.label


def successor(week: ISOWeek) -> ISOWeek:
    """The following ISO week, rolling into week 1 of the next year."""
    next_week = week.week + 1
    if next_week > weeks_in_year(week.year):
        return ISOWeek(week.year + 1, 1)
    return ISOWeek(week.year, next_week)


def predecessor(week: ISOWeek) -> ISOWeek:
    """The preceding ISO week, rolling back into the last week of the previous year."""
    if week.week <= 1:
        return ISOWeek(week.year - 1, weeks_in_year(week.year - 1))
    return ISOWeek(week.year, week.week - 1)


def weeks_before(week: ISOWeek, count: int) -> ISOWeek:
    for _ in range(count):
        week = predecessor(week)
    return week


def to_monday(week: ISOWeek) -> date:
    """Monday that begins the ISO week. Week 1 is the week containing Jan-4."""
    jan4 = date(week.year, 1, 4)
    week1_monday = jan4 - timedelta(days=jan4.weekday())
    return week1_monday + timedelta(weeks=week.week - 1)


def end_exclusive(week: ISOWeek) -> date:
    return to_monday(week) + timedelta(days=7)


def window(week: ISOWeek) -> Tuple[datetime, datetime]:
    """UTC [since, until) datetimes covering the week, for upstream queries."""
    since = datetime.combine(to_monday(week), time.min, tzinfo=timezone.utc)
    return since, since + timedelta(days=7)


def is_real_week(week: ISOWeek) -> bool:
    """False for week 53 of a 52-week year, which shares its Monday with the next W01."""
    return week.week <= weeks_in_year(week.year)


def week_range(start: str, end: str) -> List[ISOWeek]:
    """All weeks from start to end inclusive. Empty when start is after end.

    A week 53 label in a 52-week year is accepted as a bound but never listed,
    so each calendar week appears once.
    """
    current = parse(start)
    last = parse(end)
    weeks = []
    while current <= last:
        if is_real_week(current):
            weeks.append(current)
        current = successor(current)
    return weeks


def week_of(day: date) -> ISOWeek:
    iso = day.isocalendar()
    return ISOWeek(iso[0], iso[1])


def current_week(now: Optional[datetime] = None) -> ISOWeek:
    """ISO week containing `now` (defaults to the current UTC time)."""
    if now is None:
        now = datetime.now(timezone.utc)
    return week_of(now.date())


def is_completed(week: ISOWeek, now: Optional[datetime] = None) -> bool:
    """True when the week lies strictly before the current week."""
    return week < current_week(now)
