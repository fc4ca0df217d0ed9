"""
Slot assignment engine for the Matchday live-match tracker.

Owns the mapping of formation slots to player ids. Every mutation goes
through this class so that no player can ever occupy two slots, and every
completed mutation ends with one reconciliation of the active player set.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from ..models import Formation, Player, display_position
from .errors import CapacityExceeded, InvalidTransition

logger = logging.getLogger(__name__)

# Move target meaning "back to the substitutes bench"
BENCH = "__bench__"

ActiveSetListener = Callable[[List[str]], object]


@dataclass
class PendingMove:
    """A drag gesture in progress: the player picked up and where it would land."""
    player_id: str
    source_slot: Optional[str]
    target: Optional[str] = None


class SlotAssignmentEngine:
    """
    Maintains the slot -> player mapping for the chosen formation.

    Red cards shrink the number of players allowed on the field for the
    rest of the match; the players sent off are barred from any slot.
    """

    def __init__(
        self,
        formation: Optional[Formation] = None,
        active_set_listener: Optional[ActiveSetListener] = None,
    ):
        self._formation = formation
        self._assignments: Dict[str, str] = {}
        self._sent_off: List[str] = []
        self._frozen = False
        self._move: Optional[PendingMove] = None
        self._active: FrozenSet[str] = frozenset()
        self._listener = active_set_listener

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------
    def set_formation(self, formation: Formation) -> None:
        """Switch formation; all assignments are cleared."""
        self._check_mutable()
        self._formation = formation
        self._assignments = {}
        self._move = None
        self.reconcile_active_set()

    def set_active_set_listener(self, listener: Optional[ActiveSetListener]) -> None:
        self._listener = listener

    def reset(self, keep_assignments: bool = False) -> None:
        """Forget send-offs and the frozen flag (new match), and the lineup unless kept."""
        if not keep_assignments:
            self._assignments = {}
        self._sent_off = []
        self._frozen = False
        self._move = None
        self.reconcile_active_set()

    def freeze(self) -> None:
        """Make the mapping read-only once the match is finished."""
        self._move = None
        self._frozen = True

    # ------------------------------------------------------------------
    # Mutation primitives
    # ------------------------------------------------------------------
    def assign(self, slot_key: str, player_id: str) -> Optional[str]:
        """
        Place a player into a slot.

        The player leaves any slot previously held. An occupant of the target
        slot is bumped to the bench.

        Returns:
            Id of the displaced occupant, or None

        Raises:
            InvalidTransition: Unknown slot, frozen mapping or sent-off player
            CapacityExceeded: Bench player into an empty slot at the limit
        """
        self._check_mutable()
        self._check_slot(slot_key)
        self._check_eligible(player_id)

        occupant = self._assignments.get(slot_key)
        if occupant == player_id:
            return None

        source = self.slot_of(player_id)
        if source is None and occupant is None:
            self.capacity_check()

        if source is not None:
            del self._assignments[source]
        self._assignments[slot_key] = player_id
        self._after_mutation()
        return occupant

    def unassign(self, slot_key: str) -> Optional[str]:
        """Clear a slot. Returns the player removed, if any."""
        self._check_mutable()
        self._check_slot(slot_key)
        player_id = self._assignments.pop(slot_key, None)
        if player_id is not None:
            self._after_mutation()
        return player_id

    def capacity_check(self, max_active: Optional[int] = None) -> None:
        """Raise CapacityExceeded if another player cannot join the field."""
        limit = self.max_active if max_active is None else max_active
        if self.occupied_count >= limit:
            logger.warning("Rejected bench entry: %d on field, limit %d", self.occupied_count, limit)
            raise CapacityExceeded(limit)

    def apply_batch(self, pairs: Sequence[Tuple[str, str]]) -> Dict[str, str]:
        """
        Apply several (slot, player) assignments as one state transition.

        Everything is validated against a working copy first; on any error
        the live mapping is left untouched. The active set is reconciled at
        once, even while a drag is open.

        Returns:
            The new mapping
        """
        self._check_mutable()
        slots = [slot for slot, _ in pairs]
        players = [pid for _, pid in pairs]
        if len(set(slots)) != len(slots) or len(set(players)) != len(players):
            raise InvalidTransition("A batch may use each slot and player once")

        updated = dict(self._assignments)
        for slot_key, player_id in pairs:
            self._check_slot(slot_key)
            self._check_eligible(player_id)
            for key in [k for k, v in updated.items() if v == player_id]:
                del updated[key]
            updated[slot_key] = player_id

        if len(updated) > len(self._assignments) and len(updated) > self.max_active:
            raise CapacityExceeded(self.max_active)

        self._assignments = updated
        self.reconcile_active_set()
        return dict(updated)

    def auto_assign(self, roster: Iterable[Player]) -> Dict[str, str]:
        """
        Fill the formation greedily from the roster.

        First pass matches primary positions, second pass fills remaining
        slots from secondary positions. Slot order then roster order decide
        ties. Unavailable and sent-off players are never picked.

        Returns:
            The new mapping (it replaces any existing assignment)
        """
        self._check_mutable()
        if self._formation is None:
            raise InvalidTransition("No formation selected")

        candidates = [
            p for p in roster
            if not p.is_unavailable and p.id not in self._sent_off
        ]
        assignments: Dict[str, str] = {}
        used = set()

        for slot_key in self._formation.slots:
            wanted = display_position(slot_key)
            for player in candidates:
                if player.id not in used and player.position == wanted:
                    assignments[slot_key] = player.id
                    used.add(player.id)
                    break

        for slot_key in self._formation.slots:
            if slot_key in assignments:
                continue
            wanted = display_position(slot_key)
            for player in candidates:
                if player.id not in used and wanted in player.secondary_positions:
                    assignments[slot_key] = player.id
                    used.add(player.id)
                    break

        self._assignments = assignments
        self._after_mutation()
        logger.info("Auto-assigned %d of %d slots", len(assignments), self.total_slots)
        return dict(assignments)

    # ------------------------------------------------------------------
    # Drag and drop protocol
    # ------------------------------------------------------------------
    def begin_move(self, player_id: str) -> PendingMove:
        self._check_mutable()
        if self._move is not None:
            raise InvalidTransition("Another move is already in progress")
        self._check_eligible(player_id)
        self._move = PendingMove(player_id=player_id, source_slot=self.slot_of(player_id))
        return self._move

    def propose_move(self, target: str) -> PendingMove:
        """Record where the picked-up player would land (a slot key or BENCH)."""
        if self._move is None:
            raise InvalidTransition("No move in progress")
        if target != BENCH:
            self._check_slot(target)
        self._move.target = target
        return self._move

    def commit_move(self) -> Optional[str]:
        """
        Apply the pending move.

        A field player dropped on another slot swaps places with its
        occupant; a bench player dropped on an occupied slot sends the
        occupant to the bench; dropping a field player on the bench clears
        its slot. The move is closed whether or not it applies.

        Returns:
            Id of a player sent to the bench by the move, or None
        """
        if self._move is None or self._move.target is None:
            raise InvalidTransition("No proposed move to commit")
        move, self._move = self._move, None
        self._check_mutable()
        try:
            self._check_eligible(move.player_id)
        except InvalidTransition:
            self.reconcile_active_set()
            raise

        source = self.slot_of(move.player_id)
        if move.target == BENCH:
            if source is not None:
                del self._assignments[source]
            self._after_mutation()
            return move.player_id if source is not None else None

        occupant = self._assignments.get(move.target)
        if source == move.target:
            self._after_mutation()
            return None

        if source is None:
            if occupant is None:
                try:
                    self.capacity_check()
                except CapacityExceeded:
                    self._after_mutation()
                    raise
            self._assignments[move.target] = move.player_id
            self._after_mutation()
            return occupant

        del self._assignments[source]
        self._assignments[move.target] = move.player_id
        if occupant is not None:
            self._assignments[source] = occupant
        self._after_mutation()
        return None

    def abort_move(self) -> None:
        self._move = None
        self.reconcile_active_set()

    def move_player(self, player_id: str, target: str) -> Optional[str]:
        """Single-call drag and drop: begin, propose and commit."""
        self.begin_move(player_id)
        try:
            self.propose_move(target)
        except InvalidTransition:
            self.abort_move()
            raise
        return self.commit_move()

    # ------------------------------------------------------------------
    # Red cards
    # ------------------------------------------------------------------
    def send_off(self, player_id: str) -> Optional[str]:
        """Bar a player for the rest of the match. Returns the slot vacated."""
        self._check_mutable()
        if player_id in self._sent_off:
            raise InvalidTransition(f"Player {player_id} has already been sent off")
        if self._move is not None and self._move.player_id == player_id:
            self._move = None
        slot_key = self.slot_of(player_id)
        if slot_key is not None:
            del self._assignments[slot_key]
        self._sent_off.append(player_id)
        self.reconcile_active_set()
        return slot_key

    def reinstate(self, player_id: str, slot_key: Optional[str]) -> bool:
        """
        Reverse a send-off.

        The player goes back into ``slot_key`` only if that slot is still
        empty; otherwise they return to the bench.

        Returns:
            True if the player was put back into the slot
        """
        self._check_mutable()
        if player_id not in self._sent_off:
            raise InvalidTransition(f"Player {player_id} is not sent off")
        self._sent_off.remove(player_id)

        restored = False
        if (
            slot_key is not None
            and self._is_known_slot(slot_key)
            and slot_key not in self._assignments
            and self.slot_of(player_id) is None
        ):
            self._assignments[slot_key] = player_id
            restored = True
        self.reconcile_active_set()
        return restored

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------
    def reconcile_active_set(self) -> bool:
        """
        Push the players currently in slots to the listener.

        Idempotent: nothing is written when the set is unchanged.

        Returns:
            True if the active set changed
        """
        current = frozenset(self._assignments.values())
        if current == self._active:
            return False
        self._active = current
        if self._listener is not None:
            self._listener(self.active_player_ids)
        logger.debug("Reconciled active set: %d players", len(current))
        return True

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------
    @property
    def formation(self) -> Optional[Formation]:
        return self._formation

    @property
    def assignments(self) -> Dict[str, str]:
        return dict(self._assignments)

    @property
    def active_player_ids(self) -> List[str]:
        """Players on the field, in formation slot order."""
        if self._formation is None:
            return list(self._assignments.values())
        return [self._assignments[s] for s in self._formation.slots if s in self._assignments]

    @property
    def occupied_count(self) -> int:
        return len(self._assignments)

    @property
    def total_slots(self) -> int:
        return self._formation.size if self._formation is not None else 0

    @property
    def max_active(self) -> int:
        return self.total_slots - len(self._sent_off)

    @property
    def sent_off(self) -> List[str]:
        return list(self._sent_off)

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    @property
    def pending_move(self) -> Optional[PendingMove]:
        return self._move

    def slot_of(self, player_id: str) -> Optional[str]:
        for slot_key, pid in self._assignments.items():
            if pid == player_id:
                return slot_key
        return None

    def player_in(self, slot_key: str) -> Optional[str]:
        return self._assignments.get(slot_key)

    def is_eligible(self, player_id: str) -> bool:
        return player_id not in self._sent_off

    def is_complete(self) -> bool:
        return self.total_slots > 0 and self.occupied_count == self.total_slots

    def bench(self, roster: Iterable[Player]) -> List[Player]:
        on_field = set(self._assignments.values())
        return [p for p in roster if p.id not in on_field]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _after_mutation(self) -> None:
        # Only drag-driven edits wait for the move to close
        if self._move is None:
            self.reconcile_active_set()

    def _is_known_slot(self, slot_key: str) -> bool:
        return self._formation is not None and self._formation.has_slot(slot_key)

    def _check_slot(self, slot_key: str) -> None:
        if not self._is_known_slot(slot_key):
            raise InvalidTransition(f"Unknown slot: {slot_key}")

    def _check_eligible(self, player_id: str) -> None:
        if player_id in self._sent_off:
            raise InvalidTransition(f"Player {player_id} has been sent off")

    def _check_mutable(self) -> None:
        if self._frozen:
            raise InvalidTransition("Assignments are frozen: the match is finished")
