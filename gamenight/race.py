"""Cumulative week-by-week race for the yearly chart."""

import logging
from collections import defaultdict
from collections.abc import Iterable
from datetime import tzinfo
from enum import Enum
from typing import Optional, Union

from .constants import DEFAULT_RACE_TOP_N
from .models import Game, Player, RaceSeries, YearRace
from .scope import games_in_year, local_iso_week, week_scope_key

logger = logging.getLogger('gamenight.race')


class RaceMetric(str, Enum):
    """Metric accumulated by the race."""
    WINS = 'wins'


def _metric_increments(metric: RaceMetric, games: list[Game]) -> dict[int, int]:
    increments: dict[int, int] = defaultdict(int)
    if metric is RaceMetric.WINS:
        for game in games:
            for winner_id in game.winner_ids:
                increments[winner_id] += 1
    return increments


def compute_year_race(
    games: Iterable[Game],
    year: int,
    metric: Union[RaceMetric, str] = RaceMetric.WINS,
    top_n: int = DEFAULT_RACE_TOP_N,
    roster: Iterable[Player] = (),
    tz: Optional[tzinfo] = None,
) -> YearRace:
    """
    Build cumulative per-week series for the leading players of a year.

    Weeks are the ISO week numbers that contain at least one game, sorted
    and listed once each. Every roster player gets one value per week; weeks without activity
    carry the previous value forward.

    Args:
        games: Games to consider (any superset of the year is fine)
        year: Calendar year
        metric: Metric to accumulate (only 'wins' for now)
        top_n: Number of series to keep, by final value (<= 0 means 5)
        roster: Eligible players
        tz: League timezone used to place games in a week

    Returns:
        YearRace, empty when no games fall in the year

    Raises:
        ValueError: If metric is not a known RaceMetric
    """
    metric = RaceMetric(metric)

    by_week: dict[int, list[Game]] = defaultdict(list)
    for game in games_in_year(games, year, tz):
        _, week = local_iso_week(game.played_at, tz)
        by_week[week].append(game)

    if not by_week:
        return YearRace(year=year)

    # Keyed by week number only: days at either end of the year that belong
    # to a neighbouring ISO year share a bucket with that week number
    weeks = sorted(by_week)

    series = {p.id: RaceSeries(player_id=p.id, name=p.name) for p in roster}
    totals = {pid: 0 for pid in series}

    for week in weeks:
        for pid, amount in _metric_increments(metric, by_week[week]).items():
            if pid in totals:
                totals[pid] += amount
        for pid, s in series.items():
            s.values.append(totals[pid])

    if top_n <= 0:
        top_n = DEFAULT_RACE_TOP_N

    ranked = sorted(series.values(), key=lambda s: (-s.values[-1], s.player_id))

    logger.debug(f'{year} race: {len(weeks)} weeks, {len(ranked)} series, keeping {top_n}')

    return YearRace(
        year=year,
        weeks=weeks,
        week_keys=[week_scope_key(year, week) for week in weeks],
        series=ranked[:top_n],
    )
