"""
Models package for the Matchday live-match tracker.

This package contains the core data models used throughout the application.
"""
from .player import Player, Team
from .formation import Formation, FormationCatalog, display_position
from .match_clock import MatchClock, MatchPhase
from .actions import (
    ActionRecord, GoalAction, OpponentGoalAction, RedCardAction, YellowCardAction
)
from .match_record import MatchRecord, PlayerStat

__all__ = [
    "Player", "Team", "Formation", "FormationCatalog", "display_position",
    "MatchClock", "MatchPhase", "ActionRecord", "GoalAction",
    "OpponentGoalAction", "RedCardAction", "YellowCardAction",
    "MatchRecord", "PlayerStat"
]
