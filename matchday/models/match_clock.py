"""
MatchClock model for the Matchday live-match tracker.

This module contains the match phase enumeration and the MatchClock
dataclass, the read-only view of the clock engine's state.
"""
from dataclasses import dataclass
from enum import Enum

from ..utils import DEFAULT_MATCH_DURATION_MIN


class MatchPhase(Enum):
    """Phases of a single match."""
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    FINISHED = "finished"


@dataclass
class MatchClock:
    """
    Represents the clock of a match.

    Attributes:
        phase: Current match phase
        elapsed_seconds: Whole seconds played since kick-off
        total_duration_minutes: Configured regulation length of the match
    """
    phase: MatchPhase = MatchPhase.IDLE
    elapsed_seconds: int = 0
    total_duration_minutes: int = DEFAULT_MATCH_DURATION_MIN

    @property
    def full_time_seconds(self) -> int:
        return self.total_duration_minutes * 60

    @property
    def half_time_seconds(self) -> int:
        return self.full_time_seconds // 2

    def is_half_time(self) -> bool:
        """True while paused exactly at the half-time instant."""
        return (
            self.phase == MatchPhase.PAUSED
            and self.elapsed_seconds == self.half_time_seconds
        )

    def is_second_half(self) -> bool:
        return self.half_time_seconds <= self.elapsed_seconds < self.full_time_seconds

    def to_json(self) -> dict:
        """
        Convert MatchClock to JSON-serializable dictionary.

        Returns:
            Dictionary representation suitable for JSON serialization
        """
        return {
            "phase": self.phase.value,
            "elapsed_seconds": self.elapsed_seconds,
            "total_duration_minutes": self.total_duration_minutes,
            "half_time_seconds": self.half_time_seconds,
            "full_time_seconds": self.full_time_seconds,
        }
