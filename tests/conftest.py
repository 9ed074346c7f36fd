"""Shared fixtures for game night tests."""

import logging
from datetime import datetime

import pytest

from gamenight.config import CONFIG_ENV_VAR, clear_config_cache
from gamenight.models import Game, Tiebreaker


@pytest.fixture(autouse=True)
def isolated_config_and_logging(monkeypatch):
    """Use the shipped config and leave the 'gamenight' logger as we found it."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    clear_config_cache()
    yield
    clear_config_cache()
    logger = logging.getLogger('gamenight')
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def make_game():
    """Build games with sequential ids."""
    counter = {'next': 1}

    def _make(played_at: datetime, participants, winners, **kwargs) -> Game:
        game = Game(
            id=counter['next'],
            played_at=played_at,
            title_id=kwargs.pop('title_id', 1),
            participant_ids=list(participants),
            winner_ids=list(winners),
            **kwargs,
        )
        counter['next'] += 1
        return game

    return _make


@pytest.fixture
def make_lookup():
    """Build a tiebreaker lookup from stored decisions."""

    def _make(*tiebreakers: Tiebreaker):
        table = {(tb.scope, tb.scope_key): tb for tb in tiebreakers}
        return lambda scope, scope_key: table.get((scope, scope_key))

    return _make


@pytest.fixture
def decided_at():
    return datetime(2026, 2, 16, 12, 0)
