from .base import RosterProvider, ScheduleProvider, ScoreboardProvider, StateProvider, StatsProvider
from .espn_schedule import ESPNScheduleProvider
from .sleeper import SleeperProvider

__all__ = [
    "RosterProvider",
    "ScheduleProvider",
    "ScoreboardProvider",
    "StateProvider",
    "StatsProvider",
    "ESPNScheduleProvider",
    "SleeperProvider",
]
