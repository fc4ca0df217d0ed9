"""
Service factory for the Matchday live-match tracker.

Creates the match session with its engines wired together, and the
persistence service shared by the web shell.
"""
from typing import Optional

from ..models import FormationCatalog
from .clock_engine import ClockEngine
from .match_session import MatchSession
from .persistence_service import PersistenceService
from .slot_assignment import SlotAssignmentEngine


class ServiceFactory:
    """Factory for creating service instances with their dependencies injected."""

    def __init__(self, data_dir: Optional[str] = None):
        self._data_dir = data_dir
        self._persistence_service: Optional[PersistenceService] = None
        self._catalog: Optional[FormationCatalog] = None

    def create_match_session(self) -> MatchSession:
        """
        Create a MatchSession with a fresh clock and slot engine.

        Returns:
            Configured MatchSession instance
        """
        return MatchSession(
            catalog=self._get_catalog(),
            clock=ClockEngine(),
            slots=SlotAssignmentEngine(),
        )

    def get_persistence_service(self) -> PersistenceService:
        """Get singleton persistence service."""
        if self._persistence_service is None:
            self._persistence_service = PersistenceService(self._data_dir)
        return self._persistence_service

    def _get_catalog(self) -> FormationCatalog:
        if self._catalog is None:
            self._catalog = FormationCatalog.default()
        return self._catalog
