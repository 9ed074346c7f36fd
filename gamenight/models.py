"""Data models for game night standings."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class Player:
    """A member of the game night group."""
    id: int
    name: str
    is_active: bool = True


@dataclass
class Title:
    """A game title that can be played on game night."""
    id: int
    name: str
    is_active: bool = True


@dataclass
class Game:
    """A single recorded game."""
    id: int
    played_at: datetime
    title_id: int = 0
    title: str = ''  # display name, resolved by the store
    participant_ids: list[int] = field(default_factory=list)
    winner_ids: list[int] = field(default_factory=list)  # should be a subset of participant_ids
    notes: str = ''
    is_active: bool = True


@dataclass
class Tiebreaker:
    """A human-entered decision resolving a tie for one scope key."""
    scope: str  # 'weekly' or 'yearly'
    scope_key: str  # '2026-W07' or '2026'
    tied_player_ids: list[int]
    winner_id: int
    method: str
    decided_at: datetime


@dataclass
class WeekStandings:
    """Win counts and champion for one ISO week."""
    year: int
    week: int
    scope_key: str
    total_games: int = 0
    wins: dict[int, int] = field(default_factory=dict)  # player_id -> wins
    total_wins: int = 0
    top_ids: list[int] = field(default_factory=list)  # tied leaders, ascending
    winner_id: Optional[int] = None
    tie_unresolved: bool = False


@dataclass
class PlayerYearStats:
    """One player's row in the yearly standings."""
    player_id: int
    attendance: int = 0  # distinct days present
    games_played: int = 0
    wins: int = 0
    win_rate: float = 0.0  # percent, one decimal
    qualified: bool = False


@dataclass
class YearStandings:
    """Attendance, win rates and champion for one calendar year."""
    year: int
    scope_key: str
    stats: list[PlayerYearStats] = field(default_factory=list)
    qualifiers: list[int] = field(default_factory=list)
    top_ids: list[int] = field(default_factory=list)
    winner_id: Optional[int] = None
    tie_unresolved: bool = False


@dataclass
class RaceSeries:
    """Cumulative metric values for one player, aligned to YearRace.weeks."""
    player_id: int
    name: str
    values: list[int] = field(default_factory=list)


@dataclass
class YearRace:
    """Week-by-week cumulative race for a year."""
    year: int
    weeks: list[int] = field(default_factory=list)  # ISO week numbers
    week_keys: list[str] = field(default_factory=list)  # 'YYYY-Www' per entry in weeks
    series: list[RaceSeries] = field(default_factory=list)
