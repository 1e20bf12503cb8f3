"""Round-robin tournament scheduling."""

from round_robin.models import (
    Competitor,
    ConfigurationError,
    Game,
    InfeasibleConfiguration,
    Schedule,
    SchedulerConfig,
    SchedulingError,
    SchedulingExhausted,
    TournamentConfig,
)
from round_robin.scheduling import ScheduleBuilder, build_schedule

__all__ = [
    "Competitor",
    "ConfigurationError",
    "Game",
    "InfeasibleConfiguration",
    "Schedule",
    "ScheduleBuilder",
    "SchedulerConfig",
    "SchedulingError",
    "SchedulingExhausted",
    "TournamentConfig",
    "build_schedule",
]
