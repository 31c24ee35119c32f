"""Season system: festival calendar, snapshots, countdowns."""

from .calendar import (
    Festival,
    FestivalProgress,
    FestivalReward,
    SeasonSnapshot,
    SeasonState,
    default_season,
    festival_countdown,
    sanitize_season,
    season_context,
)

__all__ = [
    "Festival",
    "FestivalProgress",
    "FestivalReward",
    "SeasonSnapshot",
    "SeasonState",
    "default_season",
    "festival_countdown",
    "sanitize_season",
    "season_context",
]
