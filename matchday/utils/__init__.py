"""
Utilities package for the Matchday live-match tracker.

This package contains utility functions and configuration constants.
"""
from .time_utils import fmt_mmss, now_ts
from .constants import (
    DEFAULT_MATCH_DURATION_MIN, MIN_MATCH_DURATION_MIN, MAX_MATCH_DURATION_MIN,
    FORMATION_SLOTS, DEFAULT_FORMATION, DATA_DIR_ENV, DEFAULT_DATA_DIR,
    TEAMS_FILE, HISTORY_FILE
)

__all__ = [
    "fmt_mmss", "now_ts", "DEFAULT_MATCH_DURATION_MIN", "MIN_MATCH_DURATION_MIN",
    "MAX_MATCH_DURATION_MIN", "FORMATION_SLOTS", "DEFAULT_FORMATION",
    "DATA_DIR_ENV", "DEFAULT_DATA_DIR", "TEAMS_FILE", "HISTORY_FILE"
]
