from __future__ import annotations

import asyncio

import httpx
import pytest

from fantasy_forecast.analysis.defense import DefenseStrengthAnalyzer
from fantasy_forecast.api import default_providers
from fantasy_forecast.errors import ProviderError
from fantasy_forecast.models import PlayerRecord
from fantasy_forecast.providers.sleeper import SleeperProvider, parse_roster, roster_cache
from fantasy_forecast.utils import caching


class DummyResp:
    def __init__(self, data, status_code=200):
        self._data = data
        self.status_code = status_code

    def raise_for_status(self):
        if not (200 <= self.status_code < 300):
            raise httpx.HTTPError("bad status")

    def json(self):
        if isinstance(self._data, Exception):
            raise self._data
        return self._data


PLAYERS = {
    "4046": {"player_id": "4046", "full_name": "Patrick Mahomes", "team": "KC", "position": "QB", "active": True},
    "KC": {"player_id": "KC", "first_name": "Kansas City", "last_name": "Chiefs", "team": "KC", "position": "DEF", "active": True},
    "9999": {"player_id": "9999", "full_name": "Old Timer", "team": None, "fantasy_positions": ["wr"], "active": False},
    "0000": {"player_id": "0000", "team": "NE"},
}


def _install(monkeypatch, routes, seen=None):
    class DummyAsyncClient:
        def __init__(self, *args, **kwargs):
            pass

        async def __aenter__(self):
            return self

        async def __aexit__(self, *exc):
            return False

        async def get(self, url, params=None):
            if seen is not None:
                seen.append((url, params) if params else url)
            # let concurrent requests interleave
            await asyncio.sleep(0)
            for suffix, resp in routes.items():
                if url.endswith(suffix):
                    return resp
            raise AssertionError(f"unexpected URL {url}")

    monkeypatch.setattr(httpx, "AsyncClient", DummyAsyncClient)  # type: ignore[attr-defined]


def test_parse_roster_builds_names_and_positions():
    roster = parse_roster(PLAYERS)
    assert list(roster) == ["4046", "KC", "9999"]
    assert roster["KC"].full_name == "Kansas City Chiefs"
    assert roster["9999"].team is None
    assert roster["9999"].position == "WR"
    assert roster["9999"].active is False


def test_fetch_roster_and_cache(monkeypatch, tmp_path):
    monkeypatch.setattr(caching, "_cache_dir", lambda: tmp_path)
    seen = []
    _install(monkeypatch, {"/players/nfl": DummyResp(PLAYERS)}, seen)

    first = asyncio.run(SleeperProvider(season=2025).fetch_roster())
    second = asyncio.run(SleeperProvider(season=2025).fetch_roster())
    assert first == second
    assert isinstance(second["4046"], PlayerRecord)
    assert second["KC"].full_name == "Kansas City Chiefs"
    assert len(seen) == 1

    # parsed records, not the raw Sleeper payload
    cached = roster_cache.get("players-nfl")
    assert list(cached) == ["4046", "KC", "9999"]
    assert cached["9999"] == {
        "player_id": "9999",
        "full_name": "Old Timer",
        "team": None,
        "position": "WR",
        "active": False,
    }


def test_fetch_roster_skips_cache_when_disabled(monkeypatch, tmp_path):
    monkeypatch.setattr(caching, "_cache_dir", lambda: tmp_path)
    seen = []
    _install(monkeypatch, {"/players/nfl": DummyResp(PLAYERS)}, seen)

    provider = SleeperProvider(season=2025, use_cache=False)
    asyncio.run(provider.fetch_roster())
    asyncio.run(provider.fetch_roster())
    assert len(seen) == 2
    assert roster_cache.get("players-nfl") is None


def test_fetch_week_stats_resolves_season_from_state(monkeypatch):
    monkeypatch.delenv("FANTASY_FORECAST_SEASON", raising=False)
    seen = []
    _install(
        monkeypatch,
        {
            "/state/nfl": DummyResp({"week": 7, "season": "2025", "season_type": "regular"}),
            "/stats/nfl/regular/2025/6": DummyResp({
                "4046": {"pts_ppr": 24.3, "pass_yd": 280},
                "KC": {"pts_std": 8.0},
            }),
        },
        seen,
    )
    provider = SleeperProvider(use_cache=False)
    stats = asyncio.run(provider.fetch_week_stats(6))
    assert stats == {"4046": 24.3, "KC": 0.0}
    assert provider.season == 2025
    assert seen[0].endswith("/state/nfl")


def test_fetch_current_week(monkeypatch):
    _install(monkeypatch, {"/state/nfl": DummyResp({"week": 9, "season": "2025"})})
    provider = SleeperProvider(season=2024, use_cache=False)
    assert asyncio.run(provider.fetch_current_week()) == 9
    assert provider.season == 2024


def test_season_from_environment(monkeypatch):
    monkeypatch.setenv("FANTASY_FORECAST_SEASON", "2023")
    assert SleeperProvider().season == 2023


@pytest.mark.parametrize(
    "resp",
    [DummyResp({}, status_code=500), DummyResp(ValueError("not json")), DummyResp(["not", "a", "dict"])],
)
def test_fetch_roster_failures_raise_provider_error(monkeypatch, resp):
    _install(monkeypatch, {"/players/nfl": resp})
    with pytest.raises(ProviderError):
        asyncio.run(SleeperProvider(season=2025, use_cache=False).fetch_roster())


def test_concurrent_stats_fetches_share_one_state_lookup(monkeypatch):
    monkeypatch.delenv("FANTASY_FORECAST_SEASON", raising=False)
    seen = []
    _install(
        monkeypatch,
        {
            "/state/nfl": DummyResp({"week": 4, "season": "2025"}),
            "/stats/nfl/regular/2025/1": DummyResp({"4046": {"pts_ppr": 20.0}}),
            "/stats/nfl/regular/2025/2": DummyResp({"4046": {"pts_ppr": 18.0}}),
            "/stats/nfl/regular/2025/3": DummyResp({"4046": {"pts_ppr": 25.0}}),
        },
        seen,
    )
    provider = SleeperProvider(use_cache=False)

    async def run():
        return await asyncio.gather(*(provider.fetch_week_stats(week) for week in (1, 2, 3)))

    assert asyncio.run(run()) == [{"4046": 20.0}, {"4046": 18.0}, {"4046": 25.0}]
    assert [url for url in seen if url.endswith("/state/nfl")] == [seen[0]]
    assert len(seen) == 4


def test_state_without_season_raises_provider_error(monkeypatch):
    monkeypatch.delenv("FANTASY_FORECAST_SEASON", raising=False)
    _install(monkeypatch, {"/state/nfl": DummyResp({"week": 3})})
    provider = SleeperProvider(use_cache=False)
    with pytest.raises(ProviderError):
        asyncio.run(provider.fetch_week_stats(2))
    with pytest.raises(ProviderError):
        asyncio.run(provider.fetch_season())


def test_schedule_and_stats_use_the_same_season(monkeypatch, tmp_path):
    monkeypatch.delenv("FANTASY_FORECAST_SEASON", raising=False)
    monkeypatch.setattr(caching, "_cache_dir", lambda: tmp_path)
    seen = []
    event = {
        "competitions": [
            {
                "competitors": [
                    {"homeAway": "home", "team": {"abbreviation": "KC"}},
                    {"homeAway": "away", "team": {"abbreviation": "BUF"}},
                ]
            }
        ]
    }
    _install(
        monkeypatch,
        {
            "/state/nfl": DummyResp({"week": 3, "season": "2025"}),
            "/players/nfl": DummyResp({
                "4046": {"player_id": "4046", "full_name": "Patrick Mahomes", "team": "KC", "position": "QB", "active": True},
            }),
            "/stats/nfl/regular/2025/1": DummyResp({"4046": {"pts_ppr": 20.0}}),
            "/stats/nfl/regular/2025/2": DummyResp({"4046": {"pts_ppr": 18.0}}),
            "/scoreboard": DummyResp({"events": [event]}),
        },
        seen,
    )
    providers = default_providers()
    analyzer = DefenseStrengthAnalyzer(providers.stats, providers.schedule, providers.roster)
    analysis = asyncio.run(analyzer.analyze([1, 2]))

    assert analysis.lookup("BUF", "QB").avg == 19.0
    state_calls = [url for url in seen if isinstance(url, str) and url.endswith("/state/nfl")]
    assert len(state_calls) == 1
    espn_params = [entry[1] for entry in seen if isinstance(entry, tuple)]
    assert sorted(params["week"] for params in espn_params) == [1, 2]
    assert {params["dates"] for params in espn_params} == {2025}
    assert providers.schedule.season == providers.stats.season == 2025
