"""Pydantic schemas for JSON data validation."""

from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator

from .constants import DEFAULT_RACE_TOP_N, DEFAULT_TIMEZONE
from .models import Game, Player, Tiebreaker, Title


class PlayerRecord(BaseModel):
    """Player in the league file."""

    id: int = Field(..., ge=1)
    name: str = Field(..., min_length=1)
    is_active: bool = True

    def to_model(self) -> Player:
        return Player(id=self.id, name=self.name, is_active=self.is_active)

    @classmethod
    def from_model(cls, player: Player) -> 'PlayerRecord':
        return cls(id=player.id, name=player.name, is_active=player.is_active)

    class Config:
        extra = 'forbid'


class TitleRecord(BaseModel):
    """Game title in the league file."""

    id: int = Field(..., ge=1)
    name: str = Field(..., min_length=1)
    is_active: bool = True

    def to_model(self) -> Title:
        return Title(id=self.id, name=self.name, is_active=self.is_active)

    @classmethod
    def from_model(cls, title: Title) -> 'TitleRecord':
        return cls(id=title.id, name=title.name, is_active=title.is_active)

    class Config:
        extra = 'forbid'


class GameRecord(BaseModel):
    """Recorded game in the league file."""

    id: int = Field(..., ge=1)
    played_at: datetime
    title_id: int = Field(..., ge=1)
    participant_ids: list[int] = Field(default_factory=list)
    winner_ids: list[int] = Field(default_factory=list)
    notes: str = ''
    is_active: bool = True

    @field_validator('participant_ids', 'winner_ids')
    @classmethod
    def validate_player_ids(cls, v):
        """Ensure player ids are positive."""
        for pid in v:
            if pid < 1:
                raise ValueError(f'Invalid player id: {pid}')
        return v

    def to_model(self, title: str = '') -> Game:
        return Game(
            id=self.id,
            played_at=self.played_at,
            title_id=self.title_id,
            title=title,
            participant_ids=list(self.participant_ids),
            winner_ids=list(self.winner_ids),
            notes=self.notes,
            is_active=self.is_active,
        )

    @classmethod
    def from_model(cls, game: Game) -> 'GameRecord':
        return cls(
            id=game.id,
            played_at=game.played_at,
            title_id=game.title_id,
            participant_ids=list(game.participant_ids),
            winner_ids=list(game.winner_ids),
            notes=game.notes,
            is_active=game.is_active,
        )

    class Config:
        extra = 'forbid'


class TiebreakerRecord(BaseModel):
    """Stored tiebreak decision.

    Winner membership in the tied set is checked when a decision is written,
    not here: a record that no longer matches the standings is treated as
    stale by the engine rather than making the whole file unreadable.
    """

    scope: str = Field(..., pattern=r'^(weekly|yearly)$')
    scope_key: str = Field(..., pattern=r'^\d{4}(-W\d{2})?$')
    tied_player_ids: list[int]
    winner_id: int
    method: str = Field(default='chance', pattern=r'^(chance)$')
    decided_at: datetime

    def to_model(self) -> Tiebreaker:
        return Tiebreaker(
            scope=self.scope,
            scope_key=self.scope_key,
            tied_player_ids=list(self.tied_player_ids),
            winner_id=self.winner_id,
            method=self.method,
            decided_at=self.decided_at,
        )

    @classmethod
    def from_model(cls, tiebreaker: Tiebreaker) -> 'TiebreakerRecord':
        return cls(
            scope=tiebreaker.scope,
            scope_key=tiebreaker.scope_key,
            tied_player_ids=list(tiebreaker.tied_player_ids),
            winner_id=tiebreaker.winner_id,
            method=tiebreaker.method,
            decided_at=tiebreaker.decided_at,
        )

    class Config:
        extra = 'forbid'


class LeagueFile(BaseModel):
    """Complete league.json file structure."""

    players: list[PlayerRecord] = Field(default_factory=list)
    titles: list[TitleRecord] = Field(default_factory=list)
    games: list[GameRecord] = Field(default_factory=list)
    tiebreakers: list[TiebreakerRecord] = Field(default_factory=list)

    class Config:
        extra = 'forbid'


class LeagueConfig(BaseModel):
    """League configuration settings."""

    timezone: str = DEFAULT_TIMEZONE
    weekdays_only: bool = True
    race_top_n: int = Field(default=DEFAULT_RACE_TOP_N, ge=1, le=50)
    league_file: str = Field(default='data/league.json', min_length=1)

    @field_validator('timezone')
    @classmethod
    def validate_timezone(cls, v):
        """Ensure the timezone is a known IANA zone."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f'Unknown timezone: {v}') from e
        return v

    class Config:
        extra = 'forbid'
