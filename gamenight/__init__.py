from .models import (
    Game,
    Player,
    Title,
    Tiebreaker,
    WeekStandings,
    PlayerYearStats,
    YearStandings,
    RaceSeries,
    YearRace,
)
from .scope import (
    week_scope_key,
    year_scope_key,
    games_in_week,
    games_in_year,
    iso_weeks_in_year,
    prev_iso_week,
    next_iso_week,
    current_iso_week,
)
from .standings import compute_week_standings, compute_year_standings
from .race import RaceMetric, compute_year_race
from .tiebreak import (
    TiebreakerLookup,
    TiebreakerLookupError,
    resolve_tie,
    record_tiebreaker,
    draw_by_chance,
)
from .validators import validate_game, validate_tiebreaker
from .store import MemoryStore, JsonStore, Snapshot, StoreError
from .excel_export import export_standings_to_excel

__all__ = [
    # Models
    'Game',
    'Player',
    'Title',
    'Tiebreaker',
    'WeekStandings',
    'PlayerYearStats',
    'YearStandings',
    'RaceSeries',
    'YearRace',
    # Scope keys and ISO weeks
    'week_scope_key',
    'year_scope_key',
    'games_in_week',
    'games_in_year',
    'iso_weeks_in_year',
    'prev_iso_week',
    'next_iso_week',
    'current_iso_week',
    # Standings engine
    'compute_week_standings',
    'compute_year_standings',
    'RaceMetric',
    'compute_year_race',
    # Tiebreaks
    'TiebreakerLookup',
    'TiebreakerLookupError',
    'resolve_tie',
    'record_tiebreaker',
    'draw_by_chance',
    # Validation
    'validate_game',
    'validate_tiebreaker',
    # Storage
    'MemoryStore',
    'JsonStore',
    'Snapshot',
    'StoreError',
    # Export
    'export_standings_to_excel',
]
