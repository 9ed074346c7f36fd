"""Tests for the cumulative year race."""

from datetime import datetime

import pytest

from gamenight.models import Player, YearRace
from gamenight.race import RaceMetric, compute_year_race

ROSTER = [Player(1, 'Alice'), Player(2, 'Bob'), Player(3, 'Cara')]

W03 = datetime(2026, 1, 13, 19, 0)
W04 = datetime(2026, 1, 20, 19, 0)
W05 = datetime(2026, 1, 27, 19, 0)


class TestYearRace:
    """Tests for compute_year_race."""

    def test_values_accumulate_per_week(self, make_game):
        """Alice wins in weeks 3 and 5, Bob in week 4."""
        games = [
            make_game(W03, [1, 2], [1]),
            make_game(W04, [1, 2], [2]),
            make_game(W05, [1, 2], [1]),
        ]
        race = compute_year_race(games, 2026, roster=ROSTER)

        assert race.weeks == [3, 4, 5]
        assert race.week_keys == ['2026-W03', '2026-W04', '2026-W05']
        series = {s.player_id: s for s in race.series}
        assert series[1].values == [1, 1, 2]
        assert series[2].values == [0, 1, 1]
        assert series[3].values == [0, 0, 0]

    def test_series_never_decrease(self, make_game):
        games = [
            make_game(W03, [1, 2, 3], [3]),
            make_game(W03, [1, 2, 3], [1, 3]),
            make_game(W04, [1, 2], [2]),
            make_game(W05, [1, 3], [1]),
        ]
        race = compute_year_race(games, 2026, roster=ROSTER)
        for s in race.series:
            assert len(s.values) == len(race.weeks)
            assert all(a <= b for a, b in zip(s.values, s.values[1:]))

    def test_weeks_without_games_skipped(self, make_game):
        games = [make_game(W03, [1], [1]), make_game(W05, [1], [1])]
        race = compute_year_race(games, 2026, roster=ROSTER)
        assert race.weeks == [3, 5]

    def test_ranked_by_final_value_then_id(self, make_game):
        games = [
            make_game(W03, [1, 2, 3], [3]),
            make_game(W04, [1, 2, 3], [2]),
            make_game(W05, [1, 2, 3], [3]),
        ]
        race = compute_year_race(games, 2026, roster=ROSTER)
        assert [s.player_id for s in race.series] == [3, 2, 1]

        games.append(make_game(W05, [1, 2], [2]))
        race = compute_year_race(games, 2026, roster=ROSTER)
        assert [s.player_id for s in race.series] == [2, 3, 1]

    def test_top_n_limits_series(self, make_game):
        games = [make_game(W03, [1, 2, 3], [2])]
        race = compute_year_race(games, 2026, top_n=1, roster=ROSTER)
        assert [s.name for s in race.series] == ['Bob']

    @pytest.mark.parametrize('top_n', [0, -3])
    def test_non_positive_top_n_uses_default(self, make_game, top_n):
        roster = [Player(pid, f'P{pid}') for pid in range(1, 8)]
        games = [make_game(W03, [1, 2], [1])]
        race = compute_year_race(games, 2026, top_n=top_n, roster=roster)
        assert len(race.series) == 5

    def test_fewer_players_than_top_n(self, make_game):
        race = compute_year_race([make_game(W03, [1], [1])], 2026, top_n=10, roster=ROSTER)
        assert len(race.series) == 3

    def test_no_games_in_year(self, make_game):
        games = [make_game(datetime(2025, 6, 3, 19, 0), [1], [1])]
        assert compute_year_race(games, 2026, roster=ROSTER) == YearRace(year=2026)

    def test_winners_off_roster_ignored(self, make_game):
        games = [make_game(W03, [1, 9], [9]), make_game(W04, [1, 9], [1])]
        race = compute_year_race(games, 2026, roster=ROSTER[:1])
        assert [(s.player_id, s.values) for s in race.series] == [(1, [0, 1])]

    def test_year_end_days_share_week_one(self, make_game):
        """Dec 31 2024 falls in ISO week 1 of 2025 and joins the week 1 bucket."""
        games = [
            make_game(datetime(2024, 1, 3, 19, 0), [1], [1]),
            make_game(datetime(2024, 12, 31, 19, 0), [1], [1]),
        ]
        race = compute_year_race(games, 2024, roster=ROSTER)
        assert race.weeks == [1]
        assert race.week_keys == ['2024-W01']
        assert race.series[0].values == [2]

    def test_weeks_sorted_and_unique(self, make_game):
        """Jan 1 2027 falls in ISO week 53 of 2026."""
        games = [
            make_game(datetime(2027, 1, 5, 19, 0), [1], [1]),
            make_game(datetime(2027, 1, 1, 19, 0), [1], [1]),
            make_game(datetime(2027, 1, 7, 19, 0), [1], [2]),
        ]
        race = compute_year_race(games, 2027, roster=ROSTER)
        assert race.weeks == sorted(set(race.weeks)) == [1, 53]
        assert race.week_keys == ['2027-W01', '2027-W53']
        assert race.series[0].values == [1, 2]

    def test_metric_accepts_string(self, make_game):
        race = compute_year_race([make_game(W03, [1], [1])], 2026, metric='wins', roster=ROSTER)
        assert race.series[0].values == [1]

    def test_unknown_metric_rejected(self, make_game):
        with pytest.raises(ValueError):
            compute_year_race([make_game(W03, [1], [1])], 2026, metric='attendance', roster=ROSTER)

    def test_repeatable(self, make_game):
        games = [make_game(W03, [1, 2], [1]), make_game(W04, [1, 2], [2])]
        first = compute_year_race(games, 2026, RaceMetric.WINS, 5, ROSTER)
        assert first == compute_year_race(games, 2026, RaceMetric.WINS, 5, ROSTER)
