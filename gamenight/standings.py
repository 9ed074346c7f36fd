"""Weekly and yearly standings.

Weekly:
    - Every winner of a game in the ISO week gets one win (co-winners each
      get credit)
    - Leaders are the players with the most wins (at least one)
    - A tie between leaders is settled by a stored tiebreaker, if valid

Yearly:
    - Attendance = distinct local days a player took part in a game
    - Qualifiers = top half of players by attendance, everyone tied at the
      cutoff attendance included
    - Champion = best win rate (wins / games played) among qualifiers,
      compared exactly; ties settled by a stored tiebreaker, if valid
"""

import logging
from collections import Counter, defaultdict
from collections.abc import Iterable
from datetime import tzinfo
from decimal import ROUND_HALF_UP, Decimal
from fractions import Fraction
from typing import Optional

from .constants import SCOPE_WEEKLY, SCOPE_YEARLY
from .models import Game, PlayerYearStats, WeekStandings, YearStandings
from .scope import games_in_week, games_in_year, local_date, week_scope_key, year_scope_key
from .tiebreak import TiebreakerLookup, resolve_tie

logger = logging.getLogger('gamenight.standings')


def count_wins(games: Iterable[Game]) -> dict[int, int]:
    """Count wins per player, ordered by player id."""
    wins: Counter[int] = Counter()
    for game in games:
        for winner_id in game.winner_ids:
            wins[winner_id] += 1
    return dict(sorted(wins.items()))


def find_leaders(wins: dict[int, int]) -> list[int]:
    """Players sharing the highest win count, ascending. Zero wins never lead."""
    max_wins = max(wins.values(), default=0)
    if max_wins <= 0:
        return []
    return sorted(pid for pid, count in wins.items() if count == max_wins)


def compute_week_standings(
    games: Iterable[Game],
    year: int,
    week: int,
    tiebreaker_lookup: Optional[TiebreakerLookup] = None,
    tz: Optional[tzinfo] = None,
) -> WeekStandings:
    """
    Compute the standings for one ISO week.

    Args:
        games: Games to consider (any superset of the week is fine)
        year: ISO year
        week: ISO week number
        tiebreaker_lookup: Callable (scope, scope_key) -> Tiebreaker or None
        tz: League timezone used to place games in a week

    Returns:
        WeekStandings for the week

    Raises:
        TiebreakerLookupError: If the tiebreaker store fails during a tie
    """
    standings = WeekStandings(year=year, week=week, scope_key=week_scope_key(year, week))

    in_scope = games_in_week(games, year, week, tz)
    standings.total_games = len(in_scope)
    if not in_scope:
        return standings

    standings.wins = count_wins(in_scope)
    standings.total_wins = sum(standings.wins.values())
    standings.top_ids = find_leaders(standings.wins)

    logger.debug(
        f'{standings.scope_key}: {standings.total_games} games, leaders {standings.top_ids}'
    )

    standings.winner_id, standings.tie_unresolved = resolve_tie(
        standings.top_ids, SCOPE_WEEKLY, standings.scope_key, tiebreaker_lookup
    )
    return standings


def win_rate_percent(wins: int, games_played: int) -> float:
    """Win rate as a percentage rounded half-up to one decimal (2 of 3 -> 66.7)."""
    if games_played <= 0:
        return 0.0
    pct = Decimal(wins * 100) / Decimal(games_played)
    return float(pct.quantize(Decimal('0.1'), rounding=ROUND_HALF_UP))


def compute_year_standings(
    games: Iterable[Game],
    year: int,
    tiebreaker_lookup: Optional[TiebreakerLookup] = None,
    tz: Optional[tzinfo] = None,
) -> YearStandings:
    """
    Compute the standings for one calendar year.

    Args:
        games: Games to consider (any superset of the year is fine)
        year: Calendar year
        tiebreaker_lookup: Callable (scope, scope_key) -> Tiebreaker or None
        tz: League timezone used to place games in a year and on a day

    Returns:
        YearStandings with stats sorted by attendance, win rate, player id

    Raises:
        TiebreakerLookupError: If the tiebreaker store fails during a tie
    """
    standings = YearStandings(year=year, scope_key=year_scope_key(year))

    attended: defaultdict[int, set] = defaultdict(set)
    played: Counter[int] = Counter()
    won: Counter[int] = Counter()

    for game in games_in_year(games, year, tz):
        day = local_date(game.played_at, tz)
        for pid in game.participant_ids:
            attended[pid].add(day)
            played[pid] += 1
        for wid in game.winner_ids:
            won[wid] += 1

    # Exact rates; a winner who never appears as a participant has rate 0
    rates = {
        pid: Fraction(won[pid], played[pid]) if played[pid] else Fraction(0)
        for pid in set(attended) | set(played) | set(won)
    }

    standings.stats = [
        PlayerYearStats(
            player_id=pid,
            attendance=len(attended.get(pid, ())),
            games_played=played[pid],
            wins=won[pid],
            win_rate=win_rate_percent(won[pid], played[pid]),
        )
        for pid in rates
    ]
    standings.stats.sort(key=lambda s: (-s.attendance, -rates[s.player_id], s.player_id))

    if not standings.stats:
        return standings

    # Top half by attendance; for odd N the larger half
    half = (len(standings.stats) + 1) // 2
    cutoff = standings.stats[half - 1].attendance
    for row in standings.stats:
        if row.attendance >= cutoff:
            row.qualified = True
            standings.qualifiers.append(row.player_id)

    contenders = [pid for pid in standings.qualifiers if played[pid] > 0]
    if not contenders:
        return standings

    best = max(rates[pid] for pid in contenders)
    standings.top_ids = sorted(pid for pid in contenders if rates[pid] == best)

    logger.debug(
        f'{standings.scope_key}: {len(standings.stats)} players, attendance cutoff {cutoff}, '
        f'qualifiers {standings.qualifiers}, leaders {standings.top_ids}'
    )

    standings.winner_id, standings.tie_unresolved = resolve_tie(
        standings.top_ids, SCOPE_YEARLY, standings.scope_key, tiebreaker_lookup
    )
    return standings
