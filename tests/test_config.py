"""Tests for configuration loading."""

import json
from zoneinfo import ZoneInfo

import pytest

from gamenight.config import (
    CONFIG_ENV_VAR,
    PROJECT_DIR,
    clear_config_cache,
    get_config,
    get_league_file,
    get_race_top_n,
    get_timezone,
    get_weekdays_only,
)


class TestShippedConfig:
    """Tests against data/league_config.json."""

    def test_loads(self):
        config = get_config()
        assert config.timezone == 'America/Chicago'
        assert config.weekdays_only is True
        assert config.race_top_n == 5

    def test_helpers(self):
        assert get_timezone() == ZoneInfo('America/Chicago')
        assert get_weekdays_only() is True
        assert get_race_top_n() == 5
        assert get_league_file() == PROJECT_DIR / 'data' / 'league.json'

    def test_cached(self):
        assert get_config() is get_config()


class TestConfigOverride:
    """Tests for $GAMENIGHT_CONFIG."""

    def _write(self, tmp_path, **values):
        path = tmp_path / 'config.json'
        path.write_text(json.dumps(values))
        return path

    def test_env_override(self, tmp_path, monkeypatch):
        league = tmp_path / 'league.json'
        path = self._write(
            tmp_path, timezone='UTC', weekdays_only=False, race_top_n=3, league_file=str(league)
        )
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
        clear_config_cache()

        assert get_timezone() == ZoneInfo('UTC')
        assert get_weekdays_only() is False
        assert get_race_top_n() == 3
        assert get_league_file() == league

    def test_defaults_for_missing_fields(self, tmp_path, monkeypatch):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(self._write(tmp_path)))
        clear_config_cache()
        assert get_config().timezone == 'America/Chicago'
        assert get_race_top_n() == 5

    def test_unknown_timezone_rejected(self, tmp_path, monkeypatch):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(self._write(tmp_path, timezone='Mars/Olympus')))
        clear_config_cache()
        with pytest.raises(ValueError, match='Unknown timezone'):
            get_config()

    def test_unknown_field_rejected(self, tmp_path, monkeypatch):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(self._write(tmp_path, season='spring')))
        clear_config_cache()
        with pytest.raises(ValueError):
            get_config()

    def test_missing_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / 'missing.json'))
        clear_config_cache()
        with pytest.raises(FileNotFoundError):
            get_config()
