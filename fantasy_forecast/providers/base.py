from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict

from fantasy_forecast.models import PlayerRecord, Scoreboard


class RosterProvider(ABC):
    """Supplies the full player pool.

    Implementations return a mapping of player id to ``PlayerRecord`` in the
    provider's own order; name resolution relies on that order for first-match
    semantics. Failures raise ``ProviderError``.
    """

    name: str = "base"

    @abstractmethod
    async def fetch_roster(self) -> Dict[str, PlayerRecord]:
        raise NotImplementedError


class StatsProvider(ABC):
    """Supplies PPR fantasy points per player for a single week.

    A player without stats that week is an absent key, not a zero.
    """

    name: str = "base"

    @abstractmethod
    async def fetch_week_stats(self, week: int) -> Dict[str, float]:
        raise NotImplementedError


class ScheduleProvider(ABC):
    """Supplies a symmetric team -> opponent mapping for a week."""

    name: str = "base"

    @abstractmethod
    async def fetch_week_schedule(self, week: int) -> Dict[str, str]:
        raise NotImplementedError


class StateProvider(ABC):
    name: str = "base"

    @abstractmethod
    async def fetch_current_week(self) -> int:
        """Return the current NFL week number."""
        raise NotImplementedError

    @abstractmethod
    async def fetch_season(self) -> int:
        """Return the season year every other provider should query."""
        raise NotImplementedError


class ScoreboardProvider(ABC):
    """Supplies the live scoreboard for the current NFL week."""

    name: str = "base"

    @abstractmethod
    async def fetch_scoreboard(self) -> Scoreboard:
        raise NotImplementedError
