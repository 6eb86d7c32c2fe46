from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

from fantasy_forecast.errors import ProviderError
from fantasy_forecast.models import GameScore, Scoreboard
from fantasy_forecast.providers.base import ScheduleProvider, ScoreboardProvider, StateProvider
from fantasy_forecast.providers.http import get_json


ESPN_SCOREBOARD = "https://site.api.espn.com/apis/site/v2/sports/football/nfl/scoreboard"
ESPN_URL_ENV = "FANTASY_FORECAST_ESPN_URL"
REGULAR_SEASON = 2

# ESPN abbreviation -> Sleeper abbreviation
TEAM_ABBREV_NORMALIZE = {
    "WSH": "WAS",
    "JAC": "JAX",
    "LA": "LAR",
}


def normalize_team(abbrev: str) -> str:
    abbrev = abbrev.strip().upper()
    return TEAM_ABBREV_NORMALIZE.get(abbrev, abbrev)


def _competitors(competition: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [c for c in competition.get("competitors") or [] if (c.get("team") or {}).get("abbreviation")]


def parse_scoreboard(data: Dict[str, Any]) -> Dict[str, str]:
    """Build a symmetric team -> opponent map from an ESPN scoreboard payload."""
    schedule: Dict[str, str] = {}
    for event in data.get("events") or []:
        for competition in event.get("competitions") or []:
            teams = [normalize_team(c["team"]["abbreviation"]) for c in _competitors(competition)]
            if len(teams) != 2:
                continue
            home, away = teams
            schedule[home] = away
            schedule[away] = home
    return schedule


def _score(competitor: Dict[str, Any], state: str) -> Optional[int]:
    if state == "pre":
        return None
    try:
        return int(competitor.get("score"))
    except (TypeError, ValueError):
        return None


def parse_game_scores(data: Dict[str, Any]) -> Scoreboard:
    """Scores and game status for every game on an ESPN scoreboard.

    Games that have not kicked off carry no score.
    """
    games = []
    for event in data.get("events") or []:
        for competition in event.get("competitions") or []:
            by_side = {c.get("homeAway"): c for c in _competitors(competition)}
            home, away = by_side.get("home"), by_side.get("away")
            if home is None or away is None:
                continue
            status = (competition.get("status") or event.get("status") or {}).get("type") or {}
            state = status.get("state", "")
            games.append(
                GameScore(
                    home_team=normalize_team(home["team"]["abbreviation"]),
                    away_team=normalize_team(away["team"]["abbreviation"]),
                    home_score=_score(home, state),
                    away_score=_score(away, state),
                    status=status.get("shortDetail") or status.get("description") or "",
                )
            )
    return Scoreboard(
        season=(data.get("season") or {}).get("year"),
        week=(data.get("week") or {}).get("number"),
        games=games,
    )


class ESPNScheduleProvider(ScheduleProvider, ScoreboardProvider):
    """Weekly matchups and the live scoreboard from ESPN's public scoreboard API.

    The season comes from ``season`` when given, otherwise from ``state`` so
    schedules line up with the season the stats provider reports.
    """

    name = "espn-scoreboard"
    homepage_url = "https://www.espn.com/nfl/scoreboard"

    def __init__(self, *, season: Optional[int] = None, state: Optional[StateProvider] = None) -> None:
        self.season = season
        self.state = state

    @property
    def url(self) -> str:
        return os.getenv(ESPN_URL_ENV, ESPN_SCOREBOARD)

    async def fetch_week_schedule(self, week: int) -> Dict[str, str]:
        params: Dict[str, Any] = {"seasontype": REGULAR_SEASON, "week": week}
        season = await self._season()
        if season:
            params["dates"] = season
        data = await get_json(self.url, params=params)
        if not isinstance(data, dict):
            raise ProviderError(f"Unexpected scoreboard payload from ESPN for week {week}")
        return parse_scoreboard(data)

    async def fetch_scoreboard(self) -> Scoreboard:
        data = await get_json(self.url)
        if not isinstance(data, dict):
            raise ProviderError("Unexpected scoreboard payload from ESPN")
        return parse_game_scores(data)

    async def _season(self) -> Optional[int]:
        if self.season is None and self.state is not None:
            self.season = await self.state.fetch_season()
        return self.season
