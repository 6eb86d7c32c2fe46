from __future__ import annotations

import asyncio
import logging
from typing import List, Mapping, Optional, Sequence, Tuple, Union

from fantasy_forecast.analysis.defense import DefenseStrengthAnalyzer
from fantasy_forecast.analysis.resolver import resolve_player
from fantasy_forecast.errors import InvalidInput, ProviderError, UpstreamUnavailable
from fantasy_forecast.models import (
    COMPLETE_DATA,
    FREE_AGENT,
    LIMITED_DATA,
    NO_MATCHUP,
    ComparisonResult,
    DefenseAnalysis,
    PlayerRecord,
    ScoredPlayer,
)
from fantasy_forecast.providers.base import RosterProvider, ScheduleProvider, StatsProvider
from fantasy_forecast.utils.rounding import round1, round_half_up

TRAILING_WEEKS = 3
RECENT_WEIGHT = 4
MATCHUP_WEIGHT = 10
MIN_PLAYERS = 2

logger = logging.getLogger(__name__)


def parse_player_names(players: Union[str, Sequence[str], None]) -> List[str]:
    """Split a comma-joined string (or clean a list) into player queries.

    Raises ``InvalidInput`` when nothing, or fewer than two names, remain.
    """
    if not players:
        raise InvalidInput("Please provide player names")
    raw = players.split(",") if isinstance(players, str) else list(players)
    names = [name.strip() for name in raw if name and name.strip()]
    if len(names) < MIN_PLAYERS:
        raise InvalidInput(f"Please provide at least {MIN_PLAYERS} players to compare")
    return names


def last_completed_week(current_week: int) -> int:
    return max(1, current_week - 1)


def upcoming_matchup_week(current_week: int) -> int:
    """The week whose opponents matter for a start/sit call; week 1 before the season starts."""
    return max(1, current_week)


def trailing_window(last_completed: int, size: int = TRAILING_WEEKS) -> List[int]:
    return list(range(max(1, last_completed - size + 1), last_completed + 1))


def recent_points(player_id: str, weekly_stats: Sequence[Mapping[str, float]]) -> List[float]:
    """Points per week in order, leaving out weeks the player did not score."""
    points = []
    for stats in weekly_stats:
        value = stats.get(player_id) or 0.0
        if value > 0:
            points.append(value)
    return points


def composite_score(recent_avg: float, matchup_score: float, *, active: bool = True) -> int:
    if not active:
        return 0
    return int(round_half_up(recent_avg * RECENT_WEIGHT + matchup_score * MATCHUP_WEIGHT))


def describe_matchup(
    player: PlayerRecord,
    analysis: DefenseAnalysis,
    upcoming_schedule: Mapping[str, str],
) -> Tuple[str, float]:
    """Return the matchup description and its score (the opponent's ``vs_league``)."""
    opponent = upcoming_schedule.get(player.team) if player.team else None
    entry = analysis.lookup(opponent, player.position)
    if entry is None:
        return NO_MATCHUP, 0.0
    return f"vs {opponent} ({entry.difficulty}, {entry.avg} pts allowed)", entry.vs_league


def score_player(
    player: PlayerRecord,
    weekly_stats: Sequence[Mapping[str, float]],
    analysis: DefenseAnalysis,
    upcoming_schedule: Mapping[str, str],
) -> ScoredPlayer:
    points = recent_points(player.player_id, weekly_stats)
    recent_avg = sum(points) / len(points) if points else 0.0
    matchup, matchup_score = describe_matchup(player, analysis, upcoming_schedule)
    return ScoredPlayer(
        name=player.full_name,
        position=player.position,
        team=player.team or FREE_AGENT,
        score=composite_score(recent_avg, matchup_score, active=player.active),
        recent_avg=round1(recent_avg),
        games_played=len(points),
        weekly_points=points,
        matchup=matchup,
        matchup_score=round1(matchup_score),
        data_status=LIMITED_DATA if len(points) < TRAILING_WEEKS else COMPLETE_DATA,
    )


def rank_players(scored: Sequence[ScoredPlayer]) -> ComparisonResult:
    """Order by score, highest first. Equal scores keep their input order."""
    if not scored:
        raise InvalidInput("No players to rank")
    ordered = sorted(scored, key=lambda p: p.score, reverse=True)
    top = ordered[0]
    return ComparisonResult(
        recommendation=top.name,
        reason=f"Averaged {top.recent_avg} fantasy points over last {TRAILING_WEEKS} weeks",
        comparison=ordered,
    )


class MatchupComparator:
    """Start/sit comparison blending recent PPR scoring with matchup difficulty."""

    def __init__(
        self,
        roster_provider: RosterProvider,
        stats_provider: StatsProvider,
        schedule_provider: ScheduleProvider,
        *,
        analyzer: Optional[DefenseStrengthAnalyzer] = None,
    ) -> None:
        self.roster_provider = roster_provider
        self.stats_provider = stats_provider
        self.schedule_provider = schedule_provider
        self.analyzer = analyzer or DefenseStrengthAnalyzer(stats_provider, schedule_provider, roster_provider)

    async def compare(
        self,
        names: Union[str, Sequence[str]],
        *,
        last_completed: int,
        upcoming_week: Optional[int] = None,
        strict: bool = False,
    ) -> ComparisonResult:
        queries = parse_player_names(names)
        last_completed = max(1, last_completed)
        if upcoming_week is None:
            upcoming_week = last_completed + 1

        try:
            roster = await self.roster_provider.fetch_roster()
        except ProviderError as exc:
            raise UpstreamUnavailable("Failed to fetch player data") from exc
        players = [resolve_player(query, roster, strict=strict) for query in queries]

        window = trailing_window(last_completed)
        logger.debug(
            "Last completed week %s, trailing window %s, upcoming week %s",
            last_completed,
            window,
            upcoming_week,
        )
        try:
            analysis, upcoming, *weekly_stats = await asyncio.gather(
                self.analyzer.analyze(range(1, last_completed + 1), roster=roster),
                self.schedule_provider.fetch_week_schedule(upcoming_week),
                *(self.stats_provider.fetch_week_stats(week) for week in window),
            )
        except ProviderError as exc:
            raise UpstreamUnavailable("Failed to compare players") from exc

        scored = [score_player(player, weekly_stats, analysis, upcoming) for player in players]
        return rank_players(scored)
