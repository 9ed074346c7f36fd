"""Validation functions for recorded games and tiebreak decisions."""

from datetime import tzinfo
from typing import Optional

from .constants import VALID_METHODS, VALID_SCOPES
from .models import Game, Tiebreaker
from .scope import is_weekday


def _duplicates(ids: list[int]) -> list[int]:
    seen = set()
    duplicates = set()
    for pid in ids:
        if pid in seen:
            duplicates.add(pid)
        seen.add(pid)
    return sorted(duplicates)


def validate_game(
    game: Game, weekdays_only: bool = True, tz: Optional[tzinfo] = None
) -> list[str]:
    """
    Validate a game before it is recorded.

    Checks:
    - At least one participant and one winner
    - Winners are also participants
    - No player listed twice
    - Played on a weekday (Mon-Fri), when weekdays_only is set

    The standings engine never applies these rules itself; they only guard
    what gets written.

    Args:
        game: Game to validate
        weekdays_only: Reject games played on Saturday or Sunday
        tz: League timezone used to decide the weekday

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    if not game.participant_ids:
        errors.append('Please select at least one participant.')

    if not game.winner_ids:
        errors.append('Please select at least one winner.')

    outsiders = sorted(set(game.winner_ids) - set(game.participant_ids))
    if outsiders and game.participant_ids:
        errors.append(
            f'Winners must also be selected as participants: {", ".join(map(str, outsiders))}'
        )

    for label, ids in (('participants', game.participant_ids), ('winners', game.winner_ids)):
        duplicates = _duplicates(ids)
        if duplicates:
            errors.append(f'Duplicate {label}: {", ".join(map(str, duplicates))}')

    if weekdays_only and not is_weekday(game.played_at, tz):
        errors.append('Only weekday games are allowed (Mon-Fri).')

    return errors


def validate_tiebreaker(tiebreaker: Tiebreaker) -> list[str]:
    """
    Check that a tiebreak decision is internally consistent.

    Args:
        tiebreaker: Tiebreaker to validate

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    if tiebreaker.scope not in VALID_SCOPES:
        errors.append(f'Unknown tiebreaker scope: {tiebreaker.scope}')

    if tiebreaker.method not in VALID_METHODS:
        errors.append(f'Unknown tiebreaker method: {tiebreaker.method}')

    if len(tiebreaker.tied_player_ids) < 2:
        errors.append(f'{tiebreaker.scope_key} tiebreaker needs at least two tied players')

    if tiebreaker.winner_id not in tiebreaker.tied_player_ids:
        errors.append(
            f'{tiebreaker.scope_key} tiebreaker winner {tiebreaker.winner_id} '
            f'is not one of the tied players'
        )

    return errors
