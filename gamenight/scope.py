"""Scope keys, ISO week arithmetic and local-time scope filtering.

Standings are scoped either to an ISO week ('2026-W07') or to a calendar
year ('2026'). These keys are also the storage keys for tiebreak decisions,
so their formats must not change.

All filtering happens in league-local time. A ``tz`` argument of ``None``
means "use the datetimes as given": aware datetimes keep their own offset and
naive datetimes are treated as already local.
"""

from collections.abc import Iterable
from datetime import date, datetime, tzinfo
from typing import Optional

from .constants import WEEKDAYS
from .models import Game


def week_scope_key(year: int, week: int) -> str:
    """Format the scope key for an ISO week, e.g. (2026, 7) -> '2026-W07'."""
    return f'{year:04d}-W{week:02d}'


def year_scope_key(year: int) -> str:
    """Format the scope key for a year, e.g. 2026 -> '2026'."""
    return str(year)


def to_local(moment: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Convert an aware datetime into the league timezone."""
    if tz is None or moment.tzinfo is None:
        return moment
    return moment.astimezone(tz)


def local_date(moment: datetime, tz: Optional[tzinfo] = None) -> date:
    """Calendar date of a moment in league-local time."""
    return to_local(moment, tz).date()


def local_iso_week(moment: datetime, tz: Optional[tzinfo] = None) -> tuple[int, int]:
    """ISO (year, week) of a moment in league-local time."""
    iso = to_local(moment, tz).isocalendar()
    return iso[0], iso[1]


def is_weekday(moment: datetime, tz: Optional[tzinfo] = None) -> bool:
    """True if the moment falls on Monday-Friday in league-local time."""
    return to_local(moment, tz).weekday() in WEEKDAYS


def games_in_week(
    games: Iterable[Game], year: int, week: int, tz: Optional[tzinfo] = None
) -> list[Game]:
    """Select the games whose local ISO (year, week) matches."""
    return [g for g in games if local_iso_week(g.played_at, tz) == (year, week)]


def games_in_year(games: Iterable[Game], year: int, tz: Optional[tzinfo] = None) -> list[Game]:
    """Select the games played during a local calendar year."""
    return [g for g in games if to_local(g.played_at, tz).year == year]


def iso_weeks_in_year(year: int) -> int:
    """Number of ISO weeks in a year (52 or 53)."""
    # Dec 28 always falls in the last ISO week of its year
    return date(year, 12, 28).isocalendar()[1]


def is_valid_week(year: int, week: int) -> bool:
    """True if ``week`` exists in the ISO calendar of ``year``."""
    return 1 <= week <= iso_weeks_in_year(year)


def prev_iso_week(year: int, week: int) -> tuple[int, int]:
    """The ISO week before (year, week)."""
    if week > 1:
        return year, week - 1
    return year - 1, iso_weeks_in_year(year - 1)


def next_iso_week(year: int, week: int) -> tuple[int, int]:
    """The ISO week after (year, week)."""
    if week < iso_weeks_in_year(year):
        return year, week + 1
    return year + 1, 1


def current_iso_week(tz: Optional[tzinfo] = None, now: Optional[datetime] = None) -> tuple[int, int]:
    """ISO (year, week) of ``now`` (default: the current time) in league-local time."""
    if now is None:
        now = datetime.now(tz)
    return local_iso_week(now, tz)
