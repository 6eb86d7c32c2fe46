from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from fantasy_forecast.api import analyze_defense, compare_players, get_scores, search_players

app = typer.Typer(add_completion=False, help="Start/sit recommendations from recent PPR scoring and matchups")
console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _fail_if_error(status: int, payload: Any) -> None:
    if status >= 400:
        console.print(f"Error ({status}): {payload['error']}", style="red")
        raise typer.Exit(1)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging."),
):
    _setup_logging(verbose)


@app.command()
def compare(
    players: str = typer.Argument(..., help='Comma-separated names, e.g. "Mahomes, Allen"'),
    strict: bool = typer.Option(False, "--strict", help="Fail on names matching several players."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw JSON payload."),
):
    """Recommend which of two or more players to start."""
    with console.status("Fetching players, stats and schedules..."):
        status, payload = asyncio.run(compare_players(players, strict=strict))
    if as_json:
        console.print_json(data=payload)
        if status >= 400:
            raise typer.Exit(1)
        return
    _fail_if_error(status, payload)

    table = Table(title=f"Start: {payload['recommendation']}", caption=payload["reason"])
    for col in ["Player", "Pos", "Team", "Score", "Avg", "Weeks", "Matchup", "Adj", "Data"]:
        table.add_column(col, justify="right" if col in ("Score", "Avg", "Weeks", "Adj") else "left")
    for row in payload["comparison"]:
        table.add_row(
            row["name"],
            row["position"] or "",
            row["team"],
            str(row["score"]),
            f"{row['recentAvg']:.1f}",
            str(row["gamesPlayed"]),
            row["matchup"],
            f"{row['matchupScore']:+.1f}",
            row["dataStatus"],
        )
    console.print(table)


@app.command()
def defense(
    weeks: Optional[str] = typer.Option(None, help='Weeks to analyze, e.g. "1-6" or "1,2,5". Default: all completed.'),
    position: Optional[str] = typer.Option(None, help="Only show this position, e.g. WR."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw JSON payload."),
):
    """Show points allowed per position for every defense."""
    with console.status("Analyzing defenses..."):
        status, payload = asyncio.run(analyze_defense(weeks))
    if as_json:
        console.print_json(data=payload)
        if status >= 400:
            raise typer.Exit(1)
        return
    _fail_if_error(status, payload)

    league: Dict[str, float] = payload["leagueAverage"]
    positions: List[str] = [position.upper()] if position else sorted(league)
    for pos in positions:
        rows = [
            (team, by_pos[pos]) for team, by_pos in payload["rankings"].items() if pos in by_pos
        ]
        if not rows:
            console.print(f"No data for {pos}", style="yellow")
            continue
        rows.sort(key=lambda item: item[1]["avg"])
        table = Table(title=f"Points allowed to {pos} (league avg {league.get(pos, 0):.1f})")
        table.add_column("Team")
        table.add_column("Avg", justify="right")
        table.add_column("vs League", justify="right")
        table.add_column("Matchup")
        for team, entry in rows:
            style = "red" if entry["difficulty"] == "Tough" else "green"
            table.add_row(team, f"{entry['avg']:.1f}", f"{entry['vsLeague']:+.1f}", entry["difficulty"], style=style)
        console.print(table)


@app.command()
def search(name: str = typer.Argument(..., help="Full or partial player name.")):
    """List every player whose name contains NAME."""
    status, payload = asyncio.run(search_players(name))
    _fail_if_error(status, payload)
    table = Table()
    for col in ["ID", "Name", "Team", "Pos", "Active"]:
        table.add_column(col)
    for player in payload:
        table.add_row(
            player["playerId"],
            player["fullName"],
            player["team"] or "Free Agent",
            player["position"] or "",
            "yes" if player["active"] else "no",
        )
    console.print(table)


@app.command()
def scores(as_json: bool = typer.Option(False, "--json", help="Print the raw JSON payload.")):
    """Show the live scoreboard for the current NFL week."""
    with console.status("Fetching scores..."):
        status, payload = asyncio.run(get_scores())
    if as_json:
        console.print_json(data=payload)
        if status >= 400:
            raise typer.Exit(1)
        return
    _fail_if_error(status, payload)

    title = f"Week {payload['week']}" if payload.get("week") else "Scoreboard"
    table = Table(title=title)
    table.add_column("Away")
    table.add_column("Home")
    table.add_column("Score", justify="center")
    table.add_column("Status")
    for game in payload["games"]:
        if game["homeScore"] is None or game["awayScore"] is None:
            score = "-"
        else:
            score = f"{game['awayScore']} - {game['homeScore']}"
        table.add_row(game["awayTeam"], game["homeTeam"], score, game["status"])
    console.print(table)


def main() -> None:
    app()
