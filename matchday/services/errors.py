"""Exceptions raised by the live-match services."""

from typing import Optional


class MatchError(Exception):
    """Base class for live-match errors."""
    pass


class InvalidTransition(MatchError):
    """An operation was called in a state that does not allow it.

    These indicate a sequencing bug in the calling shell (starting a match
    twice, assigning to an unknown slot, ...) and are never coerced.
    """
    pass


class CapacityExceeded(MatchError):
    """A bench player cannot enter an empty slot: the team is at its limit."""

    def __init__(self, max_active: int, message: Optional[str] = None):
        self.max_active = max_active
        super().__init__(
            message
            or f"Cannot add player. Team is down to {max_active} players due to red card(s)."
        )
