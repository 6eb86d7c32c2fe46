from __future__ import annotations

import asyncio
import logging
import os
from typing import Any, Dict, Optional

from fantasy_forecast.errors import ProviderError
from fantasy_forecast.models import PlayerRecord
from fantasy_forecast.providers.base import RosterProvider, StateProvider, StatsProvider
from fantasy_forecast.providers.http import get_json
from fantasy_forecast.utils.caching import DiskCache


SLEEPER_BASE = "https://api.sleeper.app/v1"
SLEEPER_URL_ENV = "FANTASY_FORECAST_SLEEPER_URL"
SEASON_ENV = "FANTASY_FORECAST_SEASON"
ROSTER_TTL_ENV = "FANTASY_FORECAST_ROSTER_TTL_SECONDS"
ROSTER_TTL_SECONDS = 86400
ROSTER_CACHE_KEY = "players-nfl"

# Parsed records only; the raw player dump is several megabytes
roster_cache = DiskCache("sleeper-roster-v2", ttl_env=ROSTER_TTL_ENV, default_ttl=ROSTER_TTL_SECONDS)

logger = logging.getLogger(__name__)


def parse_roster(raw: Dict[str, Any]) -> Dict[str, PlayerRecord]:
    """Turn Sleeper's ``/players/nfl`` payload into ``PlayerRecord`` objects.

    Entries without any usable name are dropped. Team defenses have no
    ``full_name`` so their name is built from first and last name.
    """
    roster: Dict[str, PlayerRecord] = {}
    for pid, meta in raw.items():
        if not isinstance(meta, dict):
            continue
        name = meta.get("full_name") or (
            f"{(meta.get('first_name') or '').strip()} {(meta.get('last_name') or '').strip()}".strip()
        )
        if not name:
            continue
        team = (meta.get("team") or "").upper() or None
        pos = (meta.get("position") or (meta.get("fantasy_positions") or [""])[0] or "").upper() or None
        roster[str(pid)] = PlayerRecord(
            player_id=str(meta.get("player_id") or pid),
            full_name=name,
            team=team,
            position=pos,
            active=meta.get("active") is True,
        )
    return roster


def parse_week_stats(raw: Dict[str, Any]) -> Dict[str, float]:
    points: Dict[str, float] = {}
    for pid, stats in raw.items():
        if not isinstance(stats, dict):
            continue
        try:
            points[str(pid)] = float(stats.get("pts_ppr") or 0)
        except (TypeError, ValueError):
            logger.debug("Skipping unparsable pts_ppr for %s: %r", pid, stats.get("pts_ppr"))
    return points


class SleeperProvider(RosterProvider, StatsProvider, StateProvider):
    """Roster, weekly PPR stats and league state from the public Sleeper API.

    Without an explicit or pinned season, the first caller to need one reads
    it from ``/state/nfl``; concurrent callers wait for that single request.
    """

    name = "sleeper"
    homepage_url = "https://sleeper.com/"

    def __init__(self, *, season: Optional[int] = None, use_cache: bool = True) -> None:
        env_season = os.getenv(SEASON_ENV)
        self.season = season or (int(env_season) if env_season else None)
        self.use_cache = use_cache
        self._season_lock: Optional[asyncio.Lock] = None

    @property
    def base_url(self) -> str:
        return os.getenv(SLEEPER_URL_ENV, SLEEPER_BASE).rstrip("/")

    async def fetch_roster(self) -> Dict[str, PlayerRecord]:
        cached = roster_cache.get(ROSTER_CACHE_KEY) if self.use_cache else None
        if cached is not None:
            return {pid: PlayerRecord.model_validate(record) for pid, record in cached.items()}

        raw = await get_json(f"{self.base_url}/players/nfl")
        if not isinstance(raw, dict):
            raise ProviderError("Unexpected player list payload from Sleeper")
        roster = parse_roster(raw)
        if self.use_cache:
            roster_cache.put(ROSTER_CACHE_KEY, {pid: record.model_dump() for pid, record in roster.items()})
        return roster

    async def fetch_week_stats(self, week: int) -> Dict[str, float]:
        season = await self.fetch_season()
        raw = await get_json(f"{self.base_url}/stats/nfl/regular/{season}/{week}")
        if raw is None:
            return {}
        if not isinstance(raw, dict):
            raise ProviderError(f"Unexpected stats payload from Sleeper for week {week}")
        return parse_week_stats(raw)

    async def fetch_current_week(self) -> int:
        data = await get_json(f"{self.base_url}/state/nfl")
        if not isinstance(data, dict):
            raise ProviderError("Unexpected state payload from Sleeper")
        try:
            week = int(data.get("week") or 0)
            if self.season is None:
                self.season = int(data["season"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ProviderError(f"Incomplete state payload from Sleeper: {exc}") from exc
        return week

    async def fetch_season(self) -> int:
        if self.season is None:
            if self._season_lock is None:
                self._season_lock = asyncio.Lock()
            async with self._season_lock:
                if self.season is None:
                    await self.fetch_current_week()
        if self.season is None:
            raise ProviderError("Sleeper did not report a season")
        return self.season
