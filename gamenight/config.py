"""League configuration management."""

import os
from functools import lru_cache
from pathlib import Path
from zoneinfo import ZoneInfo

from .schemas import LeagueConfig
from .utils import load_json

PROJECT_DIR = Path(__file__).parent.parent
CONFIG_ENV_VAR = 'GAMENIGHT_CONFIG'


def get_config_path() -> Path:
    """Config file location: $GAMENIGHT_CONFIG, else data/league_config.json."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return PROJECT_DIR / 'data' / 'league_config.json'


@lru_cache(maxsize=1)
def get_config() -> LeagueConfig:
    """
    Load league configuration.

    Configuration is cached after first load.

    Returns:
        LeagueConfig object with validated settings

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If config file has invalid structure

    Example:
        from gamenight.config import get_config
        config = get_config()
        print(f"League timezone: {config.timezone}")
    """
    return load_json(get_config_path(), schema=LeagueConfig)


def get_timezone() -> ZoneInfo:
    """Get the league timezone used for week and day boundaries."""
    return ZoneInfo(get_config().timezone)


def get_weekdays_only() -> bool:
    """Whether new games must be played Monday-Friday."""
    return get_config().weekdays_only


def get_race_top_n() -> int:
    """Get the default number of players shown in the year race."""
    return get_config().race_top_n


def get_league_file() -> Path:
    """Get the league data file path (relative paths resolve against the project)."""
    path = Path(get_config().league_file)
    if not path.is_absolute():
        path = PROJECT_DIR / path
    return path


def clear_config_cache() -> None:
    """
    Clear the configuration cache.

    Use this if the config file (or $GAMENIGHT_CONFIG) changes during runtime
    and you need to reload it.
    """
    get_config.cache_clear()
