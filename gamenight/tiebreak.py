"""Tiebreak resolution for weekly and yearly champions.

A tie between leaders is settled by a human (currently by a game of chance)
and the decision is persisted per scope key. The engine only ever reads those
decisions: a stored decision is honoured while its winner is still one of the
current leaders, and ignored as stale otherwise.
"""

import logging
import random
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from typing import Optional, Protocol, Union

from .constants import METHOD_CHANCE, SCOPE_WEEKLY, SCOPE_YEARLY
from .models import Tiebreaker, WeekStandings, YearStandings

logger = logging.getLogger('gamenight.tiebreak')

# (scope, scope_key) -> stored decision, or None when nothing is recorded
TiebreakerLookup = Callable[[str, str], Optional[Tiebreaker]]


class TiebreakerLookupError(RuntimeError):
    """The tiebreaker store failed; distinct from "no decision recorded"."""


class TiebreakerWriter(Protocol):
    def set_tiebreaker(self, tiebreaker: Tiebreaker) -> None: ...


def resolve_tie(
    top_ids: Sequence[int],
    scope: str,
    scope_key: str,
    lookup: Optional[TiebreakerLookup],
) -> tuple[Optional[int], bool]:
    """
    Collapse a set of leaders into a single winner.

    Args:
        top_ids: Current leaders, sorted ascending
        scope: 'weekly' or 'yearly'
        scope_key: Scope key the decision is stored under
        lookup: Tiebreaker lookup, or None when no store is available

    Returns:
        Tuple of (winner_id, tie_unresolved)

    Raises:
        TiebreakerLookupError: If the store fails while looking up a decision
    """
    if not top_ids:
        return None, False
    if len(top_ids) == 1:
        return top_ids[0], False
    if lookup is None:
        return None, True

    try:
        tiebreaker = lookup(scope, scope_key)
    except TiebreakerLookupError as e:
        logger.error(f'Tiebreaker lookup failed for {scope} {scope_key}: {e}')
        raise

    if tiebreaker is None:
        logger.debug(f'No tiebreaker recorded for {scope} {scope_key}; leaders {list(top_ids)}')
        return None, True

    if tiebreaker.winner_id in top_ids:
        return tiebreaker.winner_id, False

    logger.warning(
        f'Ignoring stale {scope} tiebreaker for {scope_key}: '
        f'winner {tiebreaker.winner_id} is not among current leaders {list(top_ids)}'
    )
    return None, True


def draw_by_chance(top_ids: Sequence[int], rng: Optional[random.Random] = None) -> int:
    """Pick one of the tied leaders at random."""
    if not top_ids:
        raise ValueError('No tied leaders to draw from')
    rng = rng or random.Random()
    return rng.choice(sorted(top_ids))


def record_tiebreaker(
    standings: Union[WeekStandings, YearStandings],
    winner_id: int,
    store: TiebreakerWriter,
    decided_at: Optional[datetime] = None,
    method: str = METHOD_CHANCE,
) -> Tiebreaker:
    """
    Persist a tiebreak decision for the given standings.

    The standings must be freshly computed: the stored tied set is taken from
    their current leaders.

    Args:
        standings: WeekStandings or YearStandings showing the tie
        winner_id: Chosen winner, must be one of the tied leaders
        store: Anything with set_tiebreaker() (upsert by scope and key)
        decided_at: Decision time (default: now, UTC)
        method: Resolution method tag

    Returns:
        The stored Tiebreaker

    Raises:
        ValueError: If there is nothing to break or the winner is not a leader
    """
    if isinstance(standings, WeekStandings):
        scope = SCOPE_WEEKLY
        period = 'week'
        if standings.total_games == 0:
            raise ValueError('No games were played this week; no tiebreaker needed.')
    else:
        scope = SCOPE_YEARLY
        period = 'year'

    if len(standings.top_ids) <= 1:
        raise ValueError(f'This {period} is not tied; no tiebreaker needed.')

    if winner_id not in standings.top_ids:
        raise ValueError('Please select a valid winner from the tied leaders.')

    tiebreaker = Tiebreaker(
        scope=scope,
        scope_key=standings.scope_key,
        tied_player_ids=list(standings.top_ids),
        winner_id=winner_id,
        method=method,
        decided_at=decided_at or datetime.now(timezone.utc),
    )
    store.set_tiebreaker(tiebreaker)

    logger.info(f'Recorded {scope} tiebreaker for {standings.scope_key}: winner {winner_id}')
    return tiebreaker
