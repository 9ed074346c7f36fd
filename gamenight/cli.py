"""
Game night standings CLI

Records games and shows weekly/yearly champions from the league JSON file
(data/league.json unless --data-file is given).

Usage:
    gamenight add-player "Alice"
    gamenight add-title "Catan"
    gamenight add-game --title-id 1 --played-at 2026-02-10T19:00 --participants 1 2 3 --winners 1
    gamenight week --year 2026 --week 7
    gamenight year --year 2026
    gamenight race --year 2026 --top 5
    gamenight tiebreak weekly --year 2026 --week 7 --draw
    gamenight export --year 2026 --output standings_2026.xlsx --with-weeks
"""

import argparse
import logging
import random
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from .config import get_league_file, get_race_top_n, get_timezone, get_weekdays_only
from .excel_export import export_standings_to_excel
from .logging_config import get_logger, setup_logging
from .models import Game, WeekStandings, YearStandings
from .scope import current_iso_week, is_valid_week, iso_weeks_in_year, local_iso_week
from .store import JsonStore, Snapshot, StoreError
from .tiebreak import TiebreakerLookupError, draw_by_chance, record_tiebreaker

logger = get_logger('cli')


def _names(snapshot: Snapshot) -> dict[int, str]:
    return {p.id: p.name for p in snapshot.players}


def _name(names: dict[int, str], player_id: int) -> str:
    return names.get(player_id, f'#{player_id}')


def _print_champion(
    standings: WeekStandings | YearStandings, names: dict[int, str], tiebreak_hint: str
) -> None:
    if standings.winner_id is not None:
        print(f'\n🏆 Champion: {_name(names, standings.winner_id)}')
    elif standings.tie_unresolved:
        tied = ', '.join(_name(names, pid) for pid in standings.top_ids)
        print(f'\n⚠️  Tie between {tied} - needs a tiebreak')
        print(f'   Run: gamenight {tiebreak_hint} --draw')
    else:
        print('\nNo champion yet.')


def _resolve_week(args: argparse.Namespace, tz) -> tuple[int, int]:
    year, week = current_iso_week(tz)
    if args.year is not None:
        year = args.year
    if args.week is not None:
        week = args.week
    if not is_valid_week(year, week):
        raise ValueError(f'Week must be 1-{iso_weeks_in_year(year)} for {year}, got {week}')
    return year, week


def _resolve_year(args: argparse.Namespace, tz) -> int:
    return args.year if args.year is not None else datetime.now(tz).year


def cmd_players(store: JsonStore, args: argparse.Namespace) -> int:
    for player in store.list_players(active_only=args.active):
        status = '' if player.is_active else ' [INACTIVE]'
        print(f'  {player.id:>3}  {player.name}{status}')
    return 0


def cmd_add_player(store: JsonStore, args: argparse.Namespace) -> int:
    player = store.add_player(args.name)
    print(f'✓ Added player {player.name} (id {player.id})')
    return 0


def cmd_titles(store: JsonStore, args: argparse.Namespace) -> int:
    for title in store.list_titles(active_only=args.active):
        status = '' if title.is_active else ' [INACTIVE]'
        print(f'  {title.id:>3}  {title.name}{status}')
    return 0


def cmd_add_title(store: JsonStore, args: argparse.Namespace) -> int:
    title = store.add_title(args.name)
    print(f'✓ Added title {title.name} (id {title.id})')
    return 0


def cmd_add_game(store: JsonStore, args: argparse.Namespace) -> int:
    if args.played_at:
        try:
            played_at = datetime.fromisoformat(args.played_at)
        except ValueError as e:
            raise ValueError('Please provide a valid date/time (YYYY-MM-DDTHH:MM).') from e
    else:
        played_at = datetime.now(store.tz)

    game = store.add_game(
        Game(
            id=0,
            played_at=played_at,
            title_id=args.title_id,
            participant_ids=args.participants,
            winner_ids=args.winners,
            notes=args.notes,
        )
    )
    year, week = local_iso_week(game.played_at, store.tz)
    print(f'✓ Recorded game {game.id}: {game.title} ({year}-W{week:02d})')
    return 0


def cmd_games(store: JsonStore, args: argparse.Namespace) -> int:
    names = {p.id: p.name for p in store.list_players()}
    for game in store.recent_games(limit=args.limit):
        winners = ', '.join(_name(names, pid) for pid in game.winner_ids)
        status = '' if game.is_active else ' [INACTIVE]'
        print(
            f'  {game.id:>4}  {game.played_at:%Y-%m-%d %H:%M}  {game.title}  '
            f'({len(game.participant_ids)} players) won by {winners}{status}'
        )
    return 0


def cmd_week(store: JsonStore, args: argparse.Namespace) -> int:
    year, week = _resolve_week(args, store.tz)
    snapshot = store.snapshot()
    standings = snapshot.week_standings(year, week)
    names = _names(snapshot)

    print('=' * 60)
    print(f'WEEK {standings.scope_key}: {standings.total_games} games, {standings.total_wins} wins')
    print('=' * 60)

    ranked = sorted(standings.wins.items(), key=lambda item: (-item[1], item[0]))
    for rank, (pid, wins) in enumerate(ranked, 1):
        print(f'  {rank}. {_name(names, pid)}: {wins}')

    _print_champion(standings, names, f'tiebreak weekly --year {year} --week {week}')
    return 0


def cmd_year(store: JsonStore, args: argparse.Namespace) -> int:
    year = _resolve_year(args, store.tz)
    snapshot = store.snapshot()
    standings = snapshot.year_standings(year)
    names = _names(snapshot)

    print('=' * 60)
    print(f'YEAR {standings.scope_key}: {len(standings.qualifiers)} of {len(standings.stats)} qualified')
    print('=' * 60)
    print(f'  {"#":>2}  {"Player":<16} {"Days":>4} {"Games":>5} {"Wins":>4} {"Win %":>6}')

    for rank, row in enumerate(standings.stats, 1):
        mark = '✓' if row.qualified else ' '
        print(
            f'  {rank:>2}  {_name(names, row.player_id):<16} {row.attendance:>4} '
            f'{row.games_played:>5} {row.wins:>4} {row.win_rate:>6.1f} {mark}'
        )

    _print_champion(standings, names, f'tiebreak yearly --year {year}')
    return 0


def cmd_race(store: JsonStore, args: argparse.Namespace) -> int:
    year = _resolve_year(args, store.tz)
    top_n = args.top if args.top is not None else get_race_top_n()
    race = store.snapshot().year_race(year, top_n=top_n)

    if not race.weeks:
        print(f'No games recorded in {year}.')
        return 0

    print(f'{"Player":<16} ' + ' '.join(f'W{w:02d}' for w in race.weeks))
    for series in race.series:
        print(f'{series.name:<16} ' + ' '.join(f'{v:>3}' for v in series.values))
    return 0


def cmd_tiebreak(store: JsonStore, args: argparse.Namespace) -> int:
    snapshot = store.snapshot()
    if args.scope == 'weekly':
        year, week = _resolve_week(args, store.tz)
        standings = snapshot.week_standings(year, week)
    else:
        standings = snapshot.year_standings(_resolve_year(args, store.tz))

    winner_id = args.winner
    if args.draw and len(standings.top_ids) > 1:
        winner_id = draw_by_chance(standings.top_ids, random.Random(args.seed))

    tiebreaker = record_tiebreaker(standings, winner_id, store)
    names = _names(snapshot)
    print(
        f'✓ Tiebreaker saved for {tiebreaker.scope_key}: '
        f'{_name(names, tiebreaker.winner_id)} wins by {tiebreaker.method}'
    )
    return 0


def cmd_export(store: JsonStore, args: argparse.Namespace) -> int:
    year = _resolve_year(args, store.tz)
    snapshot = store.snapshot()

    week_standings = []
    if args.with_weeks:
        weeks = sorted({local_iso_week(g.played_at, store.tz) for g in snapshot.games_in_year(year)})
        week_standings = [snapshot.week_standings(y, w) for y, w in weeks]

    path = export_standings_to_excel(
        args.output,
        snapshot.year_standings(year),
        snapshot.year_race(year, top_n=get_race_top_n()),
        snapshot.players,
        week_standings,
    )
    print(f'✓ Standings exported to {path}')
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Game night weekly and yearly standings')
    parser.add_argument(
        '--data-file', '-d',
        default=None,
        help='Path to the league JSON file (defaults to league_file in data/league_config.json)',
    )
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    parser.add_argument('--quiet', '-q', action='store_true', help='Only log warnings and errors')
    parser.add_argument('--log-dir', type=Path, default=None, help='Also write logs to this directory')

    sub = parser.add_subparsers(dest='command', required=True)

    p = sub.add_parser('players', help='List players')
    p.add_argument('--active', action='store_true', help='Only active players')
    p.set_defaults(func=cmd_players)

    p = sub.add_parser('add-player', help='Add a player')
    p.add_argument('name')
    p.set_defaults(func=cmd_add_player)

    p = sub.add_parser('titles', help='List game titles')
    p.add_argument('--active', action='store_true', help='Only active titles')
    p.set_defaults(func=cmd_titles)

    p = sub.add_parser('add-title', help='Add a game title')
    p.add_argument('name')
    p.set_defaults(func=cmd_add_title)

    p = sub.add_parser('add-game', help='Record a game')
    p.add_argument('--title-id', '-t', type=int, required=True)
    p.add_argument('--played-at', default=None, help='Local time, YYYY-MM-DDTHH:MM (default: now)')
    p.add_argument('--participants', '-p', type=int, nargs='+', required=True)
    p.add_argument('--winners', '-w', type=int, nargs='+', required=True)
    p.add_argument('--notes', default='')
    p.set_defaults(func=cmd_add_game)

    p = sub.add_parser('games', help='List recent games')
    p.add_argument('--limit', '-n', type=int, default=20)
    p.set_defaults(func=cmd_games)

    p = sub.add_parser('week', help='Show weekly standings (default: current week)')
    p.add_argument('--year', '-y', type=int, default=None)
    p.add_argument('--week', '-w', type=int, default=None)
    p.set_defaults(func=cmd_week)

    p = sub.add_parser('year', help='Show yearly standings (default: current year)')
    p.add_argument('--year', '-y', type=int, default=None)
    p.set_defaults(func=cmd_year)

    p = sub.add_parser('race', help='Show the cumulative wins race')
    p.add_argument('--year', '-y', type=int, default=None)
    p.add_argument('--top', type=int, default=None, help='Number of players (default from config)')
    p.set_defaults(func=cmd_race)

    p = sub.add_parser('tiebreak', help='Record a tiebreak decision')
    p.add_argument('scope', choices=['weekly', 'yearly'])
    p.add_argument('--year', '-y', type=int, default=None)
    p.add_argument('--week', '-w', type=int, default=None)
    choice = p.add_mutually_exclusive_group(required=True)
    choice.add_argument('--winner', type=int, help='Winner chosen by the group')
    choice.add_argument('--draw', action='store_true', help='Draw the winner at random')
    p.add_argument('--seed', type=int, default=None, help='Random seed for --draw')
    p.set_defaults(func=cmd_tiebreak)

    p = sub.add_parser('export', help='Export a year to Excel')
    p.add_argument('--year', '-y', type=int, default=None)
    p.add_argument('--output', '-o', required=True)
    p.add_argument('--with-weeks', action='store_true', help='Include a weekly champions sheet')
    p.set_defaults(func=cmd_export)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.WARNING if args.quiet else logging.INFO
    setup_logging(log_dir=args.log_dir, level=level, log_to_file=args.log_dir is not None)

    data_file = Path(args.data_file) if args.data_file else get_league_file()
    store = JsonStore(data_file, weekdays_only=get_weekdays_only(), tz=get_timezone())

    try:
        return args.func(store, args)
    except (StoreError, TiebreakerLookupError) as e:
        logger.error(f'Storage failure: {e}')
        print(f'❌ Storage failure: {e}')
        return 1
    except (ValueError, KeyError) as e:
        print(f'❌ {e.args[0] if e.args else e}')
        return 1


if __name__ == '__main__':
    sys.exit(main())
