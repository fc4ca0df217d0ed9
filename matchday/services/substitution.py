"""
Substitution coordinator for the Matchday live-match tracker.

The coach builds an N-for-N proposal by tapping bench players (coming on)
and field players (going off); ``commit`` applies every pairing in a
single assignment write.
"""
import logging
from typing import List, Tuple

from .errors import InvalidTransition
from .slot_assignment import SlotAssignmentEngine

logger = logging.getLogger(__name__)


class SubstitutionCoordinator:
    """Collects substitution picks and commits them atomically."""

    def __init__(self, slots: SlotAssignmentEngine):
        self.slots = slots
        self._subs_in: List[str] = []
        self._subs_out: List[str] = []

    def select_bench_player(self, player_id: str) -> bool:
        """
        Toggle a bench player in the incoming list.

        Returns:
            True if the proposal changed
        """
        if self.slots.slot_of(player_id) is not None:
            raise InvalidTransition(f"Player {player_id} is on the field, not on the bench")
        if player_id in self._subs_in:
            self._subs_in.remove(player_id)
            # Never leave more players going off than coming on
            del self._subs_out[len(self._subs_in):]
            return True
        if not self.slots.is_eligible(player_id):
            return False
        self._subs_in.append(player_id)
        return True

    def select_field_player(self, player_id: str) -> bool:
        """
        Toggle a field player in the outgoing list.

        Outgoing picks need at least one incoming pick and can never
        outnumber the incoming ones.

        Returns:
            True if the proposal changed
        """
        if self.slots.slot_of(player_id) is None:
            raise InvalidTransition(f"Player {player_id} is not on the field")
        if player_id in self._subs_out:
            self._subs_out.remove(player_id)
            return True
        if not self._subs_in or len(self._subs_out) >= len(self._subs_in):
            return False
        self._subs_out.append(player_id)
        return True

    def discard(self, player_id: str) -> None:
        """Drop a player from the proposal (e.g. after a red card)."""
        if player_id in self._subs_in:
            self._subs_in.remove(player_id)
            del self._subs_out[len(self._subs_in):]
        elif player_id in self._subs_out:
            self._subs_out.remove(player_id)

    def cancel(self) -> None:
        self._subs_in = []
        self._subs_out = []

    def commit(self) -> List[Tuple[str, str, str]]:
        """
        Apply the proposal.

        The first player selected to go off is replaced by the first player
        selected to come on, and so on. An incomplete proposal is left open
        and nothing happens.

        Returns:
            The applied (slot, player_in, player_out) triples, empty if the
            proposal was incomplete
        """
        if not self.can_commit:
            return []

        pairings = []
        for player_out, player_in in zip(self._subs_out, self._subs_in):
            slot_key = self.slots.slot_of(player_out)
            if slot_key is None:
                raise InvalidTransition(f"Player {player_out} is no longer on the field")
            pairings.append((slot_key, player_in, player_out))

        self.slots.apply_batch([(slot_key, player_in) for slot_key, player_in, _ in pairings])
        self.cancel()
        logger.info(
            "Substitution committed: %s",
            ", ".join(f"{p_in} for {p_out} at {slot}" for slot, p_in, p_out in pairings),
        )
        return pairings

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------
    @property
    def subs_in(self) -> List[str]:
        return list(self._subs_in)

    @property
    def subs_out(self) -> List[str]:
        return list(self._subs_out)

    @property
    def is_open(self) -> bool:
        return bool(self._subs_in or self._subs_out)

    @property
    def can_commit(self) -> bool:
        return len(self._subs_in) == len(self._subs_out) > 0

    def is_reserved(self, player_id: str) -> bool:
        return player_id in self._subs_in or player_id in self._subs_out
