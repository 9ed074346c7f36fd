"""Game, player, title and tiebreaker storage.

Two interchangeable stores:

- MemoryStore: everything in process memory, guarded by one lock
- JsonStore: the same API persisted to a single JSON file (data/league.json),
  re-read on every call and atomically replaced on every write

Standings should be computed from one ``snapshot()`` so a computation never
sees a half-applied write (e.g. a game counted whose deletion is in flight).
"""

import copy
import logging
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import datetime, tzinfo
from pathlib import Path
from types import MappingProxyType
from typing import Optional, Union

from .constants import DEFAULT_RACE_TOP_N
from .models import Game, Player, Tiebreaker, Title, WeekStandings, YearRace, YearStandings
from .race import RaceMetric, compute_year_race
from .schemas import GameRecord, LeagueFile, PlayerRecord, TiebreakerRecord, TitleRecord
from .scope import games_in_week, games_in_year
from .standings import compute_week_standings, compute_year_standings
from .tiebreak import TiebreakerLookupError
from .utils import load_json, save_json
from .validators import validate_game, validate_tiebreaker

logger = logging.getLogger('gamenight.store')


class StoreError(RuntimeError):
    """The backing storage could not be read or written."""


def _is_aware(moment: datetime) -> bool:
    return moment.tzinfo is not None and moment.utcoffset() is not None


def _chronological_key(game: Game) -> tuple:
    # Naive and aware times are never compared with each other
    return _is_aware(game.played_at), game.played_at, game.id


def _sort_chronological(games: list[Game]) -> list[Game]:
    return sorted(games, key=_chronological_key)


@dataclass
class _State:
    players: dict[int, Player] = field(default_factory=dict)
    titles: dict[int, Title] = field(default_factory=dict)
    games: dict[int, Game] = field(default_factory=dict)
    tiebreakers: dict[tuple[str, str], Tiebreaker] = field(default_factory=dict)

    @classmethod
    def from_file(cls, league: LeagueFile) -> '_State':
        titles = {t.id: t.to_model() for t in league.titles}
        return cls(
            players={p.id: p.to_model() for p in league.players},
            titles=titles,
            games={
                g.id: g.to_model(title=titles[g.title_id].name if g.title_id in titles else '')
                for g in league.games
            },
            tiebreakers={(t.scope, t.scope_key): t.to_model() for t in league.tiebreakers},
        )

    def to_file(self) -> LeagueFile:
        return LeagueFile(
            players=[PlayerRecord.from_model(p) for p in self.players.values()],
            titles=[TitleRecord.from_model(t) for t in self.titles.values()],
            games=[GameRecord.from_model(g) for g in _sort_chronological(list(self.games.values()))],
            tiebreakers=[
                TiebreakerRecord.from_model(self.tiebreakers[key])
                for key in sorted(self.tiebreakers)
            ],
        )

    def game_with_title(self, game: Game) -> Game:
        title = self.titles.get(game.title_id)
        return replace(
            game,
            title=title.name if title else game.title,
            participant_ids=list(game.participant_ids),
            winner_ids=list(game.winner_ids),
        )

    def is_player_referenced(self, player_id: int) -> bool:
        return any(
            player_id in g.participant_ids or player_id in g.winner_ids
            for g in self.games.values()
        )


@dataclass(frozen=True)
class Snapshot:
    """Consistent, read-only view of a store at one point in time."""

    games: tuple[Game, ...]
    players: tuple[Player, ...]
    titles: tuple[Title, ...]
    tiebreakers: Mapping[tuple[str, str], Tiebreaker]
    tz: Optional[tzinfo] = None

    def active_games(self) -> list[Game]:
        return [g for g in self.games if g.is_active]

    def games_in_week(self, year: int, week: int, include_inactive: bool = False) -> list[Game]:
        games = self.games if include_inactive else self.active_games()
        return games_in_week(games, year, week, self.tz)

    def games_in_year(self, year: int, include_inactive: bool = False) -> list[Game]:
        games = self.games if include_inactive else self.active_games()
        return games_in_year(games, year, self.tz)

    def active_players(self) -> list[Player]:
        return [p for p in self.players if p.is_active]

    def get_tiebreaker(self, scope: str, scope_key: str) -> Optional[Tiebreaker]:
        return self.tiebreakers.get((scope, scope_key))

    def week_standings(self, year: int, week: int) -> WeekStandings:
        """Week standings over the active games in this snapshot."""
        return compute_week_standings(
            self.games_in_week(year, week), year, week, self.get_tiebreaker, tz=self.tz
        )

    def year_standings(self, year: int) -> YearStandings:
        """Year standings over the active games in this snapshot."""
        return compute_year_standings(
            self.games_in_year(year), year, self.get_tiebreaker, tz=self.tz
        )

    def year_race(
        self,
        year: int,
        top_n: int = DEFAULT_RACE_TOP_N,
        metric: Union[RaceMetric, str] = RaceMetric.WINS,
    ) -> YearRace:
        """Year race over the active games, for the active players."""
        return compute_year_race(
            self.games_in_year(year), year, metric, top_n, self.active_players(), tz=self.tz
        )


class MemoryStore:
    """In-memory store; all state is guarded by a single lock."""

    def __init__(self, weekdays_only: bool = True, tz: Optional[tzinfo] = None):
        """
        Initialize store.

        Args:
            weekdays_only: Reject new games played on a weekend
            tz: League timezone; naive game times are taken to be in it
        """
        self.weekdays_only = weekdays_only
        self.tz = tz
        self._lock = threading.Lock()
        self._state = _State()

    @contextmanager
    def _reading(self) -> Iterator[_State]:
        with self._lock:
            yield self._state

    @contextmanager
    def _writing(self) -> Iterator[_State]:
        with self._lock:
            yield self._state

    # Snapshot

    def snapshot(self) -> Snapshot:
        """Copy the current state for one standings computation."""
        with self._reading() as state:
            games = tuple(
                state.game_with_title(g) for g in _sort_chronological(list(state.games.values()))
            )
            players = tuple(
                copy.copy(p) for p in sorted(state.players.values(), key=lambda p: (p.name, p.id))
            )
            titles = tuple(
                copy.copy(t) for t in sorted(state.titles.values(), key=lambda t: (t.name, t.id))
            )
            tiebreakers = MappingProxyType(copy.deepcopy(state.tiebreakers))
        return Snapshot(games, players, titles, tiebreakers, tz=self.tz)

    # Games

    def add_game(self, game: Game) -> Game:
        """
        Validate and record a game. The id is assigned by the store.

        Raises:
            ValueError: If the game fails validation or references unknown ids
        """
        played_at = game.played_at
        if played_at.tzinfo is None and self.tz is not None:
            played_at = played_at.replace(tzinfo=self.tz)

        with self._writing() as state:
            errors = validate_game(game, weekdays_only=self.weekdays_only, tz=self.tz)

            title = state.titles.get(game.title_id)
            if title is None:
                errors.append('Please select a valid game title.')

            unknown = sorted(
                {*game.participant_ids, *game.winner_ids} - set(state.players)
            )
            if unknown:
                errors.append(f'Unknown players: {", ".join(map(str, unknown))}')

            if self.tz is None and any(
                _is_aware(g.played_at) != _is_aware(played_at) for g in state.games.values()
            ):
                errors.append(
                    'Game time must match the other recorded games: '
                    'all with a UTC offset or all without.'
                )

            if errors:
                logger.warning(f'Rejected game: {"; ".join(errors)}')
                raise ValueError('\n'.join(errors))

            stored = Game(
                id=max(state.games, default=0) + 1,
                played_at=played_at,
                title_id=game.title_id,
                title=title.name,
                participant_ids=list(game.participant_ids),
                winner_ids=list(game.winner_ids),
                notes=game.notes.strip(),
                is_active=True,
            )
            state.games[stored.id] = stored

        logger.info(f'Recorded game {stored.id} ({stored.title}) at {stored.played_at.isoformat()}')
        return replace(stored)

    def delete_game(self, game_id: int) -> None:
        with self._writing() as state:
            if game_id not in state.games:
                raise KeyError(f'game not found: {game_id}')
            del state.games[game_id]

    def set_game_active(self, game_id: int, active: bool) -> None:
        with self._writing() as state:
            if game_id not in state.games:
                raise KeyError(f'game not found: {game_id}')
            state.games[game_id].is_active = active

    def recent_games(self, limit: int = 0) -> list[Game]:
        """Games newest first; ``limit <= 0`` returns all of them."""
        with self._reading() as state:
            games = [state.game_with_title(g) for g in state.games.values()]
        games.sort(key=_chronological_key, reverse=True)
        if limit > 0:
            games = games[:limit]
        return games

    def games_in_week(self, year: int, week: int, include_inactive: bool = False) -> list[Game]:
        return self.snapshot().games_in_week(year, week, include_inactive)

    def games_in_year(self, year: int, include_inactive: bool = False) -> list[Game]:
        return self.snapshot().games_in_year(year, include_inactive)

    # Players

    def list_players(self, active_only: bool = False) -> list[Player]:
        """Players sorted by name."""
        players = self.snapshot().players
        return [p for p in players if p.is_active or not active_only]

    def add_player(self, name: str) -> Player:
        name = name.strip()
        if not name:
            raise ValueError('Player name is required.')
        with self._writing() as state:
            player = Player(id=max(state.players, default=0) + 1, name=name)
            state.players[player.id] = player
        return copy.copy(player)

    def update_player(self, player_id: int, name: str) -> None:
        name = name.strip()
        if not name:
            raise ValueError('Player name is required.')
        with self._writing() as state:
            if player_id not in state.players:
                raise KeyError(f'player not found: {player_id}')
            state.players[player_id].name = name

    def set_player_active(self, player_id: int, active: bool) -> None:
        with self._writing() as state:
            if player_id not in state.players:
                raise KeyError(f'player not found: {player_id}')
            state.players[player_id].is_active = active

    def delete_player(self, player_id: int) -> None:
        """
        Raises:
            KeyError: If the player doesn't exist
            ValueError: If any game references the player
        """
        with self._writing() as state:
            if player_id not in state.players:
                raise KeyError(f'player not found: {player_id}')
            if state.is_player_referenced(player_id):
                raise ValueError('player is referenced by a game')
            del state.players[player_id]

    # Titles

    def list_titles(self, active_only: bool = False) -> list[Title]:
        """Titles sorted by name."""
        titles = self.snapshot().titles
        return [t for t in titles if t.is_active or not active_only]

    def add_title(self, name: str) -> Title:
        name = name.strip()
        if not name:
            raise ValueError('Title name is required.')
        with self._writing() as state:
            title = Title(id=max(state.titles, default=0) + 1, name=name)
            state.titles[title.id] = title
        return copy.copy(title)

    def update_title(self, title_id: int, name: str) -> None:
        name = name.strip()
        if not name:
            raise ValueError('Title name is required.')
        with self._writing() as state:
            if title_id not in state.titles:
                raise KeyError(f'title not found: {title_id}')
            state.titles[title_id].name = name

    def set_title_active(self, title_id: int, active: bool) -> None:
        with self._writing() as state:
            if title_id not in state.titles:
                raise KeyError(f'title not found: {title_id}')
            state.titles[title_id].is_active = active

    def delete_title(self, title_id: int) -> None:
        with self._writing() as state:
            if title_id not in state.titles:
                raise KeyError(f'title not found: {title_id}')
            if any(g.title_id == title_id for g in state.games.values()):
                raise ValueError('title is referenced by a game')
            del state.titles[title_id]

    # Tiebreakers

    def get_tiebreaker(self, scope: str, scope_key: str) -> Optional[Tiebreaker]:
        """
        Look up the stored decision for a scope key.

        Returns:
            The Tiebreaker, or None if no decision was recorded

        Raises:
            TiebreakerLookupError: If the storage itself failed
        """
        try:
            with self._reading() as state:
                tiebreaker = state.tiebreakers.get((scope, scope_key))
        except StoreError as e:
            raise TiebreakerLookupError(str(e)) from e
        return copy.deepcopy(tiebreaker)

    def set_tiebreaker(self, tiebreaker: Tiebreaker) -> None:
        """Insert or replace the decision for (scope, scope_key); last writer wins."""
        errors = validate_tiebreaker(tiebreaker)
        if errors:
            raise ValueError('\n'.join(errors))
        with self._writing() as state:
            state.tiebreakers[(tiebreaker.scope, tiebreaker.scope_key)] = copy.deepcopy(tiebreaker)


class JsonStore(MemoryStore):
    """Store persisted to one JSON file (see schemas.LeagueFile)."""

    def __init__(
        self,
        path: Union[str, Path],
        weekdays_only: bool = True,
        tz: Optional[tzinfo] = None,
    ):
        """
        Initialize store.

        A missing file is an empty league; it is created on the first write.

        Args:
            path: League JSON file
            weekdays_only: Reject new games played on a weekend
            tz: League timezone; naive game times are taken to be in it
        """
        super().__init__(weekdays_only=weekdays_only, tz=tz)
        self.path = Path(path)

    def _load(self) -> _State:
        if not self.path.exists():
            return _State()
        try:
            league = load_json(self.path, schema=LeagueFile)
        except (OSError, ValueError) as e:
            raise StoreError(f'Cannot read league file {self.path}: {e}') from e
        return _State.from_file(league)

    def _save(self, state: _State) -> None:
        try:
            save_json(self.path, state.to_file())
        except (OSError, TypeError) as e:
            raise StoreError(f'Cannot write league file {self.path}: {e}') from e

    @contextmanager
    def _reading(self) -> Iterator[_State]:
        with self._lock:
            yield self._load()

    @contextmanager
    def _writing(self) -> Iterator[_State]:
        with self._lock:
            state = self._load()
            yield state
            self._save(state)
