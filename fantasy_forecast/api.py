"""Request-layer entry points.

Each function returns ``(status_code, payload)`` so any web framework (or the
CLI) can serve it directly. Failures become ``{"error": message}`` payloads;
only ``ForecastError`` subclasses are translated.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from fantasy_forecast.analysis.compare import (
    MatchupComparator,
    last_completed_week,
    parse_player_names,
    upcoming_matchup_week,
)
from fantasy_forecast.analysis.defense import DefenseStrengthAnalyzer
from fantasy_forecast.analysis.resolver import find_players
from fantasy_forecast.errors import ForecastError, InvalidInput, PlayerNotFound, ProviderError, UpstreamUnavailable
from fantasy_forecast.providers.base import (
    RosterProvider,
    ScheduleProvider,
    ScoreboardProvider,
    StateProvider,
    StatsProvider,
)
from fantasy_forecast.providers.espn_schedule import ESPNScheduleProvider
from fantasy_forecast.providers.sleeper import SleeperProvider

Response = Tuple[int, Any]

logger = logging.getLogger(__name__)


@dataclass
class ProviderSet:
    roster: RosterProvider
    stats: StatsProvider
    schedule: ScheduleProvider
    state: StateProvider
    scoreboard: ScoreboardProvider


def default_providers(*, season: Optional[int] = None, use_cache: bool = True) -> ProviderSet:
    sleeper = SleeperProvider(season=season, use_cache=use_cache)
    espn = ESPNScheduleProvider(season=sleeper.season, state=sleeper)
    return ProviderSet(roster=sleeper, stats=sleeper, schedule=espn, state=sleeper, scoreboard=espn)


def parse_weeks(weeks: Union[str, Sequence[int]]) -> List[int]:
    """Accept "1-6", "1,3,5" or a list of ints."""
    if isinstance(weeks, str):
        parsed: List[int] = []
        try:
            for part in weeks.split(","):
                part = part.strip()
                if not part:
                    continue
                if "-" in part:
                    start, end = (int(x) for x in part.split("-", 1))
                    parsed.extend(range(start, end + 1))
                else:
                    parsed.append(int(part))
        except ValueError as exc:
            raise InvalidInput(f"Invalid week list: {weeks}") from exc
    else:
        parsed = [int(w) for w in weeks]
    if not parsed or any(w < 1 for w in parsed):
        raise InvalidInput("Weeks must be positive integers")
    return sorted(set(parsed))


async def _current_week(providers: ProviderSet) -> int:
    try:
        return await providers.state.fetch_current_week()
    except ProviderError as exc:
        raise UpstreamUnavailable("Failed to determine the current NFL week") from exc


def _error(exc: ForecastError) -> Response:
    logger.info("Request failed with %s: %s", exc.status_code, exc.message)
    return exc.status_code, {"error": exc.message}


async def compare_players(
    players: Union[str, Sequence[str], None],
    *,
    strict: bool = False,
    providers: Optional[ProviderSet] = None,
) -> Response:
    """Start/sit comparison for a comma-joined list of player names."""
    try:
        names = parse_player_names(players)
        providers = providers or default_providers()
        comparator = MatchupComparator(providers.roster, providers.stats, providers.schedule)
        current = await _current_week(providers)
        result = await comparator.compare(
            names,
            last_completed=last_completed_week(current),
            upcoming_week=upcoming_matchup_week(current),
            strict=strict,
        )
    except ForecastError as exc:
        return _error(exc)
    return 200, result.model_dump(by_alias=True)


async def analyze_defense(
    weeks: Union[str, Sequence[int], None] = None,
    *,
    providers: Optional[ProviderSet] = None,
) -> Response:
    """Defense rankings over ``weeks`` (default: every completed week)."""
    try:
        week_list = parse_weeks(weeks) if weeks else None
        providers = providers or default_providers()
        if week_list is None:
            week_list = list(range(1, last_completed_week(await _current_week(providers)) + 1))
        analyzer = DefenseStrengthAnalyzer(providers.stats, providers.schedule, providers.roster)
        analysis = await analyzer.analyze(week_list)
    except ForecastError as exc:
        return _error(exc)
    return 200, analysis.model_dump(by_alias=True)


async def search_players(name: Optional[str], *, providers: Optional[ProviderSet] = None) -> Response:
    """Every player whose name contains ``name``, free agents and inactive players included."""
    try:
        if not name or not name.strip():
            raise InvalidInput("Please provide a player name")
        providers = providers or default_providers()
        try:
            roster = await providers.roster.fetch_roster()
        except ProviderError as exc:
            raise UpstreamUnavailable("Failed to fetch player data") from exc
        matches = find_players(name, roster, eligible_only=False)
        if not matches:
            raise PlayerNotFound("Player not found")
    except ForecastError as exc:
        return _error(exc)
    return 200, [player.model_dump(by_alias=True) for player in matches]


async def get_scores(*, providers: Optional[ProviderSet] = None) -> Response:
    """Live scoreboard for the current NFL week."""
    try:
        providers = providers or default_providers()
        try:
            scoreboard = await providers.scoreboard.fetch_scoreboard()
        except ProviderError as exc:
            raise UpstreamUnavailable("Failed to fetch scores") from exc
    except ForecastError as exc:
        return _error(exc)
    return 200, scoreboard.model_dump(by_alias=True)
