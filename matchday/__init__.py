"""
Matchday Tracker

Live-match tracking for a soccer coach on the sideline: the match clock,
per-player playing time, the lineup and substitutions, goals and cards.

This package provides the match engines and a Flask web interface.
"""
from .models import Player, Team, Formation, MatchPhase, MatchRecord
from .services import (
    MatchSession, PersistenceService, ServiceFactory,
    MatchError, InvalidTransition, CapacityExceeded
)
from .ui import create_app, run_web_app
from .utils import fmt_mmss, now_ts

__version__ = "1.0.0"

__all__ = [
    "Player", "Team", "Formation", "MatchPhase", "MatchRecord",
    "MatchSession", "PersistenceService", "ServiceFactory",
    "MatchError", "InvalidTransition", "CapacityExceeded",
    "create_app", "run_web_app", "fmt_mmss", "now_ts"
]
