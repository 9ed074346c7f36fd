"""Tests for the command-line interface."""

import openpyxl
import pytest

from gamenight.cli import main


@pytest.fixture
def league(tmp_path):
    """League file with three players and one title."""
    data_file = tmp_path / 'league.json'
    for name in ('Alice', 'Bob', 'Cara'):
        assert run(data_file, 'add-player', name) == 0
    assert run(data_file, 'add-title', 'Catan') == 0
    return data_file


def run(data_file, *argv):
    return main(['--data-file', str(data_file), '--quiet', *argv])


def add_game(data_file, played_at, participants, winners):
    return run(
        data_file,
        'add-game', '--title-id', '1', '--played-at', played_at,
        '--participants', *map(str, participants),
        '--winners', *map(str, winners),
    )


class TestRoster:
    """Tests for player and title commands."""

    def test_add_and_list_players(self, league, capsys):
        capsys.readouterr()
        assert run(league, 'players') == 0
        out = capsys.readouterr().out
        assert 'Alice' in out
        assert 'Cara' in out

    def test_add_player_message(self, tmp_path, capsys):
        assert run(tmp_path / 'league.json', 'add-player', 'Dana') == 0
        assert '✓ Added player Dana (id 1)' in capsys.readouterr().out

    def test_titles(self, league, capsys):
        capsys.readouterr()
        run(league, 'titles')
        assert 'Catan' in capsys.readouterr().out


class TestGames:
    """Tests for recording and listing games."""

    def test_add_game(self, league, capsys):
        assert add_game(league, '2026-02-10T19:00', [1, 2], [1]) == 0
        assert '✓ Recorded game 1: Catan (2026-W07)' in capsys.readouterr().out

    def test_weekend_game_rejected(self, league, capsys):
        assert add_game(league, '2026-02-14T19:00', [1, 2], [1]) == 1
        assert '❌ Only weekday games are allowed (Mon-Fri).' in capsys.readouterr().out

    def test_bad_date_rejected(self, league, capsys):
        assert add_game(league, 'next tuesday', [1, 2], [1]) == 1
        assert 'valid date/time' in capsys.readouterr().out

    def test_list_games(self, league, capsys):
        add_game(league, '2026-02-10T19:00', [1, 2], [2])
        capsys.readouterr()
        assert run(league, 'games') == 0
        assert 'won by Bob' in capsys.readouterr().out


class TestStandingsCommands:
    """Tests for week, year and race output."""

    def test_week_champion(self, league, capsys):
        add_game(league, '2026-02-09T19:00', [1, 2, 3], [1])
        add_game(league, '2026-02-10T19:00', [1, 2, 3], [1])
        add_game(league, '2026-02-11T19:00', [1, 2, 3], [2])
        capsys.readouterr()

        assert run(league, 'week', '--year', '2026', '--week', '7') == 0
        out = capsys.readouterr().out
        assert 'WEEK 2026-W07: 3 games, 3 wins' in out
        assert '1. Alice: 2' in out
        assert '🏆 Champion: Alice' in out

    def test_invalid_week(self, league, capsys):
        assert run(league, 'week', '--year', '2025', '--week', '53') == 1
        assert 'Week must be 1-52 for 2025' in capsys.readouterr().out

    def test_year_standings(self, league, capsys):
        add_game(league, '2026-02-09T19:00', [1, 2, 3], [3])
        add_game(league, '2026-02-10T19:00', [1, 2], [1])
        capsys.readouterr()

        assert run(league, 'year', '--year', '2026') == 0
        out = capsys.readouterr().out
        assert 'YEAR 2026: 2 of 3 qualified' in out
        assert '🏆 Champion: Alice' in out

    def test_race(self, league, capsys):
        add_game(league, '2026-01-13T19:00', [1, 2], [2])
        add_game(league, '2026-01-20T19:00', [1, 2], [2])
        capsys.readouterr()

        assert run(league, 'race', '--year', '2026', '--top', '2') == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines[0].split() == ['Player', 'W03', 'W04']
        assert lines[1].split() == ['Bob', '1', '2']
        assert len(lines) == 3

    def test_race_without_games(self, league, capsys):
        capsys.readouterr()
        assert run(league, 'race', '--year', '2026') == 0
        assert 'No games recorded in 2026.' in capsys.readouterr().out


class TestTiebreakCommand:
    """Tests for recording tiebreaks from the CLI."""

    @pytest.fixture
    def tied_week(self, league):
        add_game(league, '2026-02-09T19:00', [1, 2], [1])
        add_game(league, '2026-02-10T19:00', [1, 2], [2])
        return league

    def test_tie_reported(self, tied_week, capsys):
        capsys.readouterr()
        run(tied_week, 'week', '--year', '2026', '--week', '7')
        assert '⚠️  Tie between Alice, Bob - needs a tiebreak' in capsys.readouterr().out

    def test_chosen_winner(self, tied_week, capsys):
        assert run(tied_week, 'tiebreak', 'weekly', '--year', '2026', '--week', '7', '--winner', '2') == 0
        assert '✓ Tiebreaker saved for 2026-W07: Bob wins by chance' in capsys.readouterr().out

        run(tied_week, 'week', '--year', '2026', '--week', '7')
        assert '🏆 Champion: Bob' in capsys.readouterr().out

    def test_draw(self, tied_week, capsys):
        args = ('tiebreak', 'weekly', '--year', '2026', '--week', '7', '--draw', '--seed', '7')
        assert run(tied_week, *args) == 0
        out = capsys.readouterr().out
        assert 'Alice wins' in out or 'Bob wins' in out

    def test_winner_must_be_tied(self, tied_week, capsys):
        assert run(tied_week, 'tiebreak', 'weekly', '--year', '2026', '--week', '7', '--winner', '3') == 1
        assert '❌ Please select a valid winner from the tied leaders.' in capsys.readouterr().out

    def test_untied_week(self, league, capsys):
        add_game(league, '2026-02-09T19:00', [1, 2], [1])
        capsys.readouterr()
        assert run(league, 'tiebreak', 'weekly', '--year', '2026', '--week', '7', '--draw') == 1
        assert '❌ This week is not tied; no tiebreaker needed.' in capsys.readouterr().out

    def test_empty_week(self, league, capsys):
        capsys.readouterr()
        assert run(league, 'tiebreak', 'weekly', '--year', '2026', '--week', '8', '--winner', '1') == 1
        assert 'No games were played this week' in capsys.readouterr().out

    def test_yearly(self, tied_week, capsys):
        assert run(tied_week, 'tiebreak', 'yearly', '--year', '2026', '--winner', '1') == 0
        capsys.readouterr()
        run(tied_week, 'year', '--year', '2026')
        assert '🏆 Champion: Alice' in capsys.readouterr().out


class TestExportCommand:
    """Tests for the export command."""

    def test_export(self, league, tmp_path, capsys):
        add_game(league, '2026-02-09T19:00', [1, 2], [1])
        output = tmp_path / 'standings.xlsx'

        assert run(league, 'export', '--year', '2026', '--output', str(output), '--with-weeks') == 0
        assert '✓ Standings exported to' in capsys.readouterr().out
        assert openpyxl.load_workbook(output).sheetnames == ['Year 2026', 'Race 2026', 'Weeks 2026']


class TestStorageFailure:
    """Tests for unreadable league files."""

    def test_corrupt_league_file(self, tmp_path, capsys):
        data_file = tmp_path / 'league.json'
        data_file.write_text('{broken')
        assert run(data_file, 'week', '--year', '2026', '--week', '7') == 1
        assert '❌ Storage failure' in capsys.readouterr().out
