from __future__ import annotations

from typing import List, Mapping

from fantasy_forecast.errors import AmbiguousPlayer, PlayerNotFound
from fantasy_forecast.models import PlayerRecord


def is_eligible(player: PlayerRecord) -> bool:
    """Players on a team and active; free agents and retirees never match."""
    return bool(player.team) and player.active


def find_players(
    query: str,
    roster: Mapping[str, PlayerRecord],
    *,
    eligible_only: bool = True,
) -> List[PlayerRecord]:
    """All players whose full name contains ``query``, case-insensitively, in roster order."""
    needle = query.strip().lower()
    if not needle:
        return []
    return [
        player
        for player in roster.values()
        if needle in player.full_name.lower() and (not eligible_only or is_eligible(player))
    ]


def resolve_player(
    query: str,
    roster: Mapping[str, PlayerRecord],
    *,
    strict: bool = False,
) -> PlayerRecord:
    """Resolve a query to a single eligible player.

    By default the first substring match in roster order wins. With
    ``strict=True`` several matches raise ``AmbiguousPlayer`` unless exactly
    one of them is an exact (case-insensitive) full-name match.
    """
    matches = find_players(query, roster)
    if not matches:
        raise PlayerNotFound(f"Player not found: {query.strip()}")
    if strict and len(matches) > 1:
        needle = query.strip().lower()
        exact = [p for p in matches if p.full_name.lower() == needle]
        if len(exact) == 1:
            return exact[0]
        names = ", ".join(f"{p.full_name} ({p.team})" for p in matches[:5])
        raise AmbiguousPlayer(f"'{query.strip()}' matches several players: {names}")
    return matches[0]
