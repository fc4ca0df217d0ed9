"""
Constants for the Matchday live-match tracker.

This module contains configuration constants used throughout the application.
"""

# Match timing defaults (two halves of 40 minutes)
DEFAULT_MATCH_DURATION_MIN = 80
MIN_MATCH_DURATION_MIN = 2
MAX_MATCH_DURATION_MIN = 120

# Formation catalog: ordered slot keys per formation. A trailing digit only
# disambiguates repeated positions ("CB2" is displayed as "CB").
FORMATION_SLOTS = {
    "1-4-4-2": ["GK", "RB", "CB", "CB2", "LB", "RM", "CM", "CM2", "LM", "CF", "CF2"],
    "1-4-3-3": ["GK", "RB", "CB", "CB2", "LB", "DM", "CM", "CM2", "RW", "CF", "LW"],
}
DEFAULT_FORMATION = "1-4-4-2"

# Persistence
DATA_DIR_ENV = "MATCHDAY_DATA_DIR"
DEFAULT_DATA_DIR = "data"
TEAMS_FILE = "teams.json"
HISTORY_FILE = "history.json"
