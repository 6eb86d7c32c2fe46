from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable, Mapping, Optional, Sequence, Tuple

import pandas as pd

from fantasy_forecast.errors import ProviderError
from fantasy_forecast.models import DefenseAnalysis, PlayerRecord, PositionDifficulty
from fantasy_forecast.providers.base import RosterProvider, ScheduleProvider, StatsProvider
from fantasy_forecast.utils.rounding import round1

SKIPPED_POSITIONS = frozenset({"K", "DEF"})
MIN_POINTS = 2.0
DEFENSE_STAT_COLUMNS = ["team", "pos", "week", "points"]

WeekData = Tuple[int, Mapping[str, float], Mapping[str, str]]

logger = logging.getLogger(__name__)


def build_defense_stats(
    weeks: Iterable[WeekData],
    roster: Mapping[str, PlayerRecord],
) -> pd.DataFrame:
    """Total fantasy points each defense allowed per position per week.

    ``weeks`` yields ``(week, stats, schedule)`` triples. A stat line counts
    toward the opponent's total when the player is on the roster with a team
    and position, is active, is not a kicker or team defense, scored at least
    ``MIN_POINTS`` and the player's team had an opponent that week.

    Returns one row per (team, pos, week) where ``team`` is the defending team.
    """
    rows = []
    for week, stats, schedule in weeks:
        for pid, points in stats.items():
            player = roster.get(pid)
            if player is None or not player.team or not player.position:
                continue
            if not player.active or player.position in SKIPPED_POSITIONS:
                continue
            if points < MIN_POINTS:
                continue
            opponent = schedule.get(player.team)
            if not opponent:
                continue
            rows.append((opponent, player.position, week, float(points)))

    frame = pd.DataFrame(rows, columns=DEFENSE_STAT_COLUMNS)
    return frame.groupby(["team", "pos", "week"], as_index=False, sort=False)["points"].sum()


def rank_defenses(defense_stats: pd.DataFrame) -> DefenseAnalysis:
    """Label each team/position against the league-wide weekly average.

    The league average for a position pools every team's weekly totals; a
    team's average below it is "Tough", anything else (ties included) is
    "Favorable".
    """
    if defense_stats.empty:
        return DefenseAnalysis()

    league = defense_stats.groupby("pos")["points"].mean()
    league_average = {str(pos): round1(float(value)) for pos, value in league.items()}

    rankings: Dict[str, Dict[str, PositionDifficulty]] = {}
    team_means = defense_stats.groupby(["team", "pos"])["points"].mean()
    for (team, pos), mean in team_means.items():
        avg = round1(float(mean))
        baseline = league_average.get(pos, avg)
        rankings.setdefault(str(team), {})[str(pos)] = PositionDifficulty(
            avg=avg,
            difficulty="Tough" if avg < baseline else "Favorable",
            vs_league=round1(avg - baseline),
        )
    return DefenseAnalysis(rankings=rankings, league_average=league_average)


async def _resolved(value):
    return value


class DefenseStrengthAnalyzer:
    """Computes defense-vs-position strength over a range of weeks.

    Fetch failures never abort the analysis: a failed week contributes
    nothing and a failed roster fetch yields an empty result.
    """

    def __init__(
        self,
        stats_provider: StatsProvider,
        schedule_provider: ScheduleProvider,
        roster_provider: RosterProvider,
    ) -> None:
        self.stats_provider = stats_provider
        self.schedule_provider = schedule_provider
        self.roster_provider = roster_provider

    async def analyze(
        self,
        weeks: Sequence[int],
        *,
        roster: Optional[Mapping[str, PlayerRecord]] = None,
    ) -> DefenseAnalysis:
        weeks = list(weeks)
        logger.debug("Analyzing defenses over weeks %s", weeks)
        roster_source = self._load_roster() if roster is None else _resolved(roster)
        snapshot, *week_data = await asyncio.gather(
            roster_source,
            *(self._fetch_week(week) for week in weeks),
        )
        if snapshot is None:
            return DefenseAnalysis()
        return rank_defenses(build_defense_stats(week_data, snapshot))

    async def _load_roster(self) -> Optional[Mapping[str, PlayerRecord]]:
        try:
            return await self.roster_provider.fetch_roster()
        except ProviderError as exc:
            logger.warning("Roster unavailable, defense rankings will be empty: %s", exc)
            return None

    async def _fetch_week(self, week: int) -> WeekData:
        stats, schedule = await asyncio.gather(
            self._fetch_stats(week),
            self._fetch_schedule(week),
        )
        return week, stats, schedule

    async def _fetch_stats(self, week: int) -> Mapping[str, float]:
        try:
            return await self.stats_provider.fetch_week_stats(week)
        except ProviderError as exc:
            logger.warning("Skipping stats for week %s: %s", week, exc)
            return {}

    async def _fetch_schedule(self, week: int) -> Mapping[str, str]:
        try:
            return await self.schedule_provider.fetch_week_schedule(week)
        except ProviderError as exc:
            logger.warning("Skipping schedule for week %s: %s", week, exc)
            return {}
