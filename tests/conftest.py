from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

import pytest

from fantasy_forecast.errors import ProviderError
from fantasy_forecast.models import GameScore, PlayerRecord, Scoreboard
from fantasy_forecast.providers.base import (
    RosterProvider,
    ScheduleProvider,
    ScoreboardProvider,
    StateProvider,
    StatsProvider,
)


class FakeProviders(RosterProvider, StatsProvider, ScheduleProvider, StateProvider, ScoreboardProvider):
    """In-memory stand-in for every provider.

    ``failing`` holds call keys that should raise ``ProviderError``, e.g.
    "roster", "state", "scoreboard", "stats:2" or "schedule:4".
    """

    name = "fake"

    def __init__(
        self,
        roster: Dict[str, PlayerRecord],
        stats: Optional[Dict[int, Dict[str, float]]] = None,
        schedules: Optional[Dict[int, Dict[str, str]]] = None,
        current_week: int = 4,
        season: int = 2025,
        scoreboard: Optional[Scoreboard] = None,
        failing: Iterable[str] = (),
    ) -> None:
        self.roster = roster
        self.stats = stats or {}
        self.schedules = schedules or {}
        self.current_week = current_week
        self.season = season
        self.scoreboard = scoreboard or Scoreboard(
            season=season,
            week=current_week,
            games=[GameScore(home_team="KC", away_team="BUF", home_score=24, away_score=20, status="Final")],
        )
        self.failing = set(failing)
        self.calls: List[Tuple[str, Optional[int]]] = []

    def _record(self, kind: str, week: Optional[int] = None) -> None:
        self.calls.append((kind, week))
        key = kind if week is None else f"{kind}:{week}"
        if key in self.failing:
            raise ProviderError(f"{key} unavailable")

    async def fetch_roster(self):
        self._record("roster")
        return self.roster

    async def fetch_week_stats(self, week):
        self._record("stats", week)
        return self.stats.get(week, {})

    async def fetch_week_schedule(self, week):
        self._record("schedule", week)
        return self.schedules.get(week, {})

    async def fetch_current_week(self):
        self._record("state")
        return self.current_week

    async def fetch_season(self):
        return self.season

    async def fetch_scoreboard(self):
        self._record("scoreboard")
        return self.scoreboard


def _player(pid, name, team, pos, active=True):
    return PlayerRecord(player_id=pid, full_name=name, team=team, position=pos, active=active)


@pytest.fixture
def roster() -> Dict[str, PlayerRecord]:
    players = [
        _player("1", "Patrick Mahomes", "KC", "QB"),
        _player("2", "Josh Allen", "BUF", "QB"),
        _player("3", "Josh Allen", "JAX", "LB"),
        _player("10", "Tyreek Hill", "MIA", "WR"),
        _player("11", "Jaylen Waddle", "MIA", "WR"),
        _player("20", "Stefon Diggs", "NE", "WR"),
        _player("30", "Harrison Butker", "KC", "K"),
        _player("40", "Retired Receiver", None, "WR", active=False),
        _player("41", "Benched Receiver", "NE", "WR", active=False),
    ]
    return {p.player_id: p for p in players}


@pytest.fixture
def schedules() -> Dict[int, Dict[str, str]]:
    def symmetric(*pairs):
        out = {}
        for a, b in pairs:
            out[a] = b
            out[b] = a
        return out

    return {
        1: symmetric(("KC", "BUF"), ("MIA", "NE")),
        2: symmetric(("KC", "NE"), ("MIA", "BUF")),
        3: symmetric(("KC", "MIA"), ("BUF", "NE")),
        4: symmetric(("MIA", "NE"), ("KC", "BUF")),
    }


@pytest.fixture
def weekly_stats() -> Dict[int, Dict[str, float]]:
    return {
        1: {"1": 25.0, "2": 30.0, "10": 20.0, "11": 10.0, "20": 18.0, "30": 10.0},
        2: {"1": 15.0, "2": 1.5, "10": 12.0, "11": 8.0, "20": 22.0, "41": 9.0},
        3: {"1": 20.0, "2": 24.0, "10": 28.0, "11": 3.0, "20": 0.0},
    }


@pytest.fixture
def fake_providers(roster, weekly_stats, schedules):
    def make(**kwargs) -> FakeProviders:
        kwargs.setdefault("stats", weekly_stats)
        kwargs.setdefault("schedules", schedules)
        return FakeProviders(roster, **kwargs)

    return make
