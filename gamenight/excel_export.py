"""Export standings to an Excel workbook.

Sheets written (existing sheets with the same names are replaced, any other
sheets in the workbook are left alone):

- "Year {year}": yearly standings table, qualifiers and champion
- "Race {year}": cumulative race, one row per player, one column per week
- "Weeks {year}": weekly champions (only when week standings are given)
"""

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

import openpyxl
from openpyxl.styles import Font

from .models import Player, WeekStandings, YearRace, YearStandings

logger = logging.getLogger('gamenight.excel_export')

BOLD = Font(bold=True)


def _player_name(players: dict[int, Player], player_id: int) -> str:
    player = players.get(player_id)
    return player.name if player else f'#{player_id}'


def _fresh_sheet(wb, title: str):
    if title in wb.sheetnames:
        del wb[title]
    return wb.create_sheet(title)


def _champion_label(players: dict[int, Player], standings) -> str:
    if standings.winner_id is not None:
        return _player_name(players, standings.winner_id)
    if standings.tie_unresolved:
        tied = ', '.join(_player_name(players, pid) for pid in standings.top_ids)
        return f'TIE (needs tiebreak): {tied}'
    return ''


def write_year_sheet(wb, standings: YearStandings, players: dict[int, Player]) -> None:
    ws = _fresh_sheet(wb, f'Year {standings.year}')

    headers = ['Rank', 'Player', 'Attendance', 'Games', 'Wins', 'Win %', 'Qualified', 'Champion']
    for col, header in enumerate(headers, start=1):
        ws.cell(row=1, column=col, value=header).font = BOLD

    for rank, row in enumerate(standings.stats, start=1):
        r = rank + 1
        ws.cell(row=r, column=1, value=rank)
        ws.cell(row=r, column=2, value=_player_name(players, row.player_id))
        ws.cell(row=r, column=3, value=row.attendance)
        ws.cell(row=r, column=4, value=row.games_played)
        ws.cell(row=r, column=5, value=row.wins)
        ws.cell(row=r, column=6, value=row.win_rate)
        ws.cell(row=r, column=7, value='Yes' if row.qualified else 'No')
        if row.player_id == standings.winner_id:
            ws.cell(row=r, column=8, value='Champion').font = BOLD
        elif standings.tie_unresolved and row.player_id in standings.top_ids:
            ws.cell(row=r, column=8, value='Tied')

    summary_row = len(standings.stats) + 3
    ws.cell(row=summary_row, column=1, value='Champion').font = BOLD
    ws.cell(row=summary_row, column=2, value=_champion_label(players, standings))


def write_race_sheet(wb, race: YearRace) -> None:
    ws = _fresh_sheet(wb, f'Race {race.year}')

    ws.cell(row=1, column=1, value='Player').font = BOLD
    for col, key in enumerate(race.week_keys, start=2):
        ws.cell(row=1, column=col, value=key).font = BOLD

    for r, series in enumerate(race.series, start=2):
        ws.cell(row=r, column=1, value=series.name)
        for col, value in enumerate(series.values, start=2):
            ws.cell(row=r, column=col, value=value)


def write_weeks_sheet(
    wb, year: int, week_standings: Sequence[WeekStandings], players: dict[int, Player]
) -> None:
    ws = _fresh_sheet(wb, f'Weeks {year}')

    headers = ['Week', 'Games', 'Leaders', 'Top Wins', 'Champion']
    for col, header in enumerate(headers, start=1):
        ws.cell(row=1, column=col, value=header).font = BOLD

    for r, standings in enumerate(week_standings, start=2):
        ws.cell(row=r, column=1, value=standings.scope_key)
        ws.cell(row=r, column=2, value=standings.total_games)
        ws.cell(
            row=r,
            column=3,
            value=', '.join(_player_name(players, pid) for pid in standings.top_ids),
        )
        top_wins = standings.wins.get(standings.top_ids[0], 0) if standings.top_ids else 0
        ws.cell(row=r, column=4, value=top_wins)
        ws.cell(row=r, column=5, value=_champion_label(players, standings))


def export_standings_to_excel(
    excel_path: str | Path,
    year_standings: YearStandings,
    race: YearRace,
    players: Iterable[Player],
    week_standings: Sequence[WeekStandings] = (),
) -> Path:
    """
    Write a year's standings to an Excel workbook.

    Args:
        excel_path: Workbook path (created if it doesn't exist)
        year_standings: Computed YearStandings
        race: Computed YearRace for the same year
        players: Players used to resolve display names
        week_standings: Optional weekly standings for the "Weeks" sheet

    Returns:
        Path of the saved workbook
    """
    excel_path = Path(excel_path)
    by_id = {p.id: p for p in players}

    if excel_path.exists():
        wb = openpyxl.load_workbook(str(excel_path))
    else:
        excel_path.parent.mkdir(parents=True, exist_ok=True)
        wb = openpyxl.Workbook()
        # Drop the default empty sheet of a new workbook
        wb.remove(wb.active)

    write_year_sheet(wb, year_standings, by_id)
    write_race_sheet(wb, race)
    if week_standings:
        write_weeks_sheet(wb, year_standings.year, week_standings, by_id)

    wb.save(str(excel_path))
    wb.close()

    logger.info(f'Standings for {year_standings.year} exported to {excel_path}')
    return excel_path
