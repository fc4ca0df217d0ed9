"""
Persistence service for the Matchday live-match tracker.

This module handles saving and loading teams and finished match records
to/from JSON files in a data directory.
"""
import json
import logging
import os
from typing import List, Optional

from ..models import MatchRecord, Team
from ..utils import DATA_DIR_ENV, DEFAULT_DATA_DIR, HISTORY_FILE, TEAMS_FILE

logger = logging.getLogger(__name__)


class PersistenceService:
    """
    Service for persisting teams and match history to JSON files.

    A missing store is simply empty. A store that cannot be parsed is
    treated as empty too, with a warning, so a damaged file never blocks
    the sideline.
    """

    def __init__(self, data_dir: Optional[str] = None):
        self.data_dir = data_dir or os.environ.get(DATA_DIR_ENV, DEFAULT_DATA_DIR)

    @property
    def teams_path(self) -> str:
        return os.path.join(self.data_dir, TEAMS_FILE)

    @property
    def history_path(self) -> str:
        return os.path.join(self.data_dir, HISTORY_FILE)

    # ------------------------------------------------------------------
    # Teams
    # ------------------------------------------------------------------
    def load_teams(self) -> List[Team]:
        teams = []
        for item in self._read_list(self.teams_path):
            try:
                teams.append(Team.from_dict(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping unreadable team in %s: %s", self.teams_path, e)
        return teams

    def get_team(self, team_id: str) -> Optional[Team]:
        for team in self.load_teams():
            if team.id == team_id:
                return team
        return None

    def save_team(self, team: Team) -> None:
        """
        Insert or replace a team (matched by id).

        Raises:
            OSError: If the file cannot be written
        """
        teams = [t for t in self.load_teams() if t.id != team.id]
        teams.append(team)
        self._write_list(self.teams_path, [t.to_dict() for t in teams])

    def delete_team(self, team_id: str) -> bool:
        teams = self.load_teams()
        remaining = [t for t in teams if t.id != team_id]
        if len(remaining) == len(teams):
            return False
        self._write_list(self.teams_path, [t.to_dict() for t in remaining])
        return True

    # ------------------------------------------------------------------
    # Match history
    # ------------------------------------------------------------------
    def load_history(self) -> List[MatchRecord]:
        """Saved match records, newest first."""
        records = []
        for item in self._read_list(self.history_path):
            try:
                records.append(MatchRecord.from_dict(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping unreadable match in %s: %s", self.history_path, e)
        return records

    def save_match_record(self, record: MatchRecord) -> None:
        records = [r for r in self.load_history() if r.id != record.id]
        records.insert(0, record)
        self._write_list(self.history_path, [r.to_dict() for r in records])
        logger.info("Saved match '%s' (%s)", record.name, record.id)

    def delete_match_record(self, record_id: str) -> bool:
        records = self.load_history()
        remaining = [r for r in records if r.id != record_id]
        if len(remaining) == len(records):
            return False
        self._write_list(self.history_path, [r.to_dict() for r in remaining])
        return True

    # ------------------------------------------------------------------
    # File helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _read_list(file_path: str) -> list:
        if not os.path.exists(file_path):
            return []
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read %s: %s", file_path, e)
            return []
        if not isinstance(data, list):
            logger.warning("Ignoring %s: expected a JSON list", file_path)
            return []
        return data

    @staticmethod
    def _write_list(file_path: str, items: list) -> None:
        directory = os.path.dirname(file_path)
        if directory and not os.path.exists(directory):
            os.makedirs(directory)

        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(items, f, indent=2)
