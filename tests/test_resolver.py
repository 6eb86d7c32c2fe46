from __future__ import annotations

import pytest

from fantasy_forecast.analysis.resolver import find_players, resolve_player
from fantasy_forecast.errors import AmbiguousPlayer, PlayerNotFound


def test_resolve_is_case_insensitive_substring(roster):
    assert resolve_player("mahomes", roster).player_id == "1"
    assert resolve_player("  TYREEK ", roster).player_id == "10"


def test_resolve_first_match_in_roster_order(roster):
    assert resolve_player("Josh Allen", roster).team == "BUF"


def test_resolve_skips_ineligible(roster):
    with pytest.raises(PlayerNotFound):
        resolve_player("Retired", roster)
    with pytest.raises(PlayerNotFound):
        resolve_player("Benched", roster)


def test_resolve_empty_query(roster):
    with pytest.raises(PlayerNotFound):
        resolve_player("   ", roster)


def test_strict_mode(roster):
    with pytest.raises(AmbiguousPlayer) as excinfo:
        resolve_player("Josh", roster, strict=True)
    assert "Josh Allen (BUF)" in excinfo.value.message
    # a unique match is fine in strict mode too
    assert resolve_player("Waddle", roster, strict=True).player_id == "11"


def test_find_players_includes_ineligible_on_request(roster):
    names = [p.full_name for p in find_players("receiver", roster, eligible_only=False)]
    assert names == ["Retired Receiver", "Benched Receiver"]
    assert find_players("receiver", roster) == []
