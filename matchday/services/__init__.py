"""
Services package for the Matchday live-match tracker.

This package contains the clock, slot, substitution and ledger engines,
the match session that composes them, and persistence.
"""
from .errors import MatchError, InvalidTransition, CapacityExceeded
from .clock_engine import ClockEngine
from .slot_assignment import BENCH, PendingMove, SlotAssignmentEngine
from .substitution import SubstitutionCoordinator
from .action_ledger import ActionLedger
from .match_session import MatchSession
from .persistence_service import PersistenceService
from .service_factory import ServiceFactory

__all__ = [
    "MatchError", "InvalidTransition", "CapacityExceeded",
    "ClockEngine", "BENCH", "PendingMove", "SlotAssignmentEngine",
    "SubstitutionCoordinator", "ActionLedger", "MatchSession",
    "PersistenceService", "ServiceFactory"
]
