from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Difficulty = Literal["Tough", "Favorable"]

FREE_AGENT = "Free Agent"
NO_MATCHUP = "No matchup data"
COMPLETE_DATA = "Complete data"
LIMITED_DATA = "Limited data - stats may be updating"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class PlayerRecord(_CamelModel):
    """A single roster entry as reported by the roster provider.

    Attributes:
        player_id: Provider identifier, e.g. "4046".
        full_name: Player full name.
        team: Team abbreviation, e.g. "KC". None means free agent.
        position: Position, e.g. "WR". None when the provider has none.
        active: Whether the provider lists the player as active.
    """

    player_id: str
    full_name: str
    team: Optional[str] = None
    position: Optional[str] = None
    active: bool = False


class PositionDifficulty(_CamelModel):
    avg: float
    difficulty: Difficulty
    vs_league: float


class DefenseAnalysis(_CamelModel):
    """Defense strength per team and position plus the league baselines."""

    rankings: Dict[str, Dict[str, PositionDifficulty]] = Field(default_factory=dict)
    league_average: Dict[str, float] = Field(default_factory=dict)

    def lookup(self, team: Optional[str], position: Optional[str]) -> Optional[PositionDifficulty]:
        if not team or not position:
            return None
        return self.rankings.get(team, {}).get(position)


class ScoredPlayer(_CamelModel):
    name: str
    position: Optional[str]
    team: str = FREE_AGENT
    score: int
    recent_avg: float
    games_played: int
    weekly_points: List[float]
    matchup: str = NO_MATCHUP
    matchup_score: float = 0.0
    data_status: str


class ComparisonResult(_CamelModel):
    recommendation: str
    reason: str
    comparison: List[ScoredPlayer]


class GameScore(_CamelModel):
    home_team: str
    away_team: str
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    status: str = ""


class Scoreboard(_CamelModel):
    season: Optional[int] = None
    week: Optional[int] = None
    games: List[GameScore] = Field(default_factory=list)
