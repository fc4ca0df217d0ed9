"""
Action ledger for goals and cards.

The ledger is an append-only list of ``ActionRecord`` variants with exactly
one step of undo at a time. Each variant has its own inverse, and every
inverse works from the popped record plus the current state alone; that is
why card records store the slot they vacated.
"""
import logging
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Type

from ..models import (
    ActionRecord, GoalAction, OpponentGoalAction, RedCardAction, YellowCardAction
)
from .errors import InvalidTransition
from .slot_assignment import SlotAssignmentEngine

logger = logging.getLogger(__name__)


class ActionLedger:
    """
    Records scoring and discipline events with undo support.

    Red cards, and second yellows which count as red cards, reach into the
    slot assignment engine to send the player off.
    """

    def __init__(
        self,
        slots: SlotAssignmentEngine,
        player_ids: Optional[Iterable[str]] = None,
    ):
        self.slots = slots
        self._known_ids = set(player_ids) if player_ids is not None else None
        self._records: List[ActionRecord] = []
        self._goals: Dict[str, int] = {}
        self._red_cards: Dict[str, int] = {}
        self._yellow_cards: Dict[str, int] = {}
        self._opponent_goals = 0
        self._inverses: Dict[Type, Callable[..., None]] = {
            GoalAction: self._undo_goal,
            OpponentGoalAction: self._undo_opponent_goal,
            RedCardAction: self._undo_red_card,
            YellowCardAction: self._undo_yellow_card,
        }

    def initialize(
        self,
        player_ids: Optional[Iterable[str]] = None,
        goals: Optional[Dict[str, int]] = None,
        red_cards: Optional[Dict[str, int]] = None,
    ) -> None:
        """Reset counters and history for a new match."""
        self._known_ids = set(player_ids) if player_ids is not None else None
        self._records = []
        self._goals = dict(goals or {})
        self._red_cards = dict(red_cards or {})
        self._yellow_cards = {}
        self._opponent_goals = 0

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------
    def goal(self, player_id: str) -> GoalAction:
        self._check_player(player_id)
        self._goals[player_id] = self._goals.get(player_id, 0) + 1
        return self._append(GoalAction(player_id))

    def opponent_goal(self) -> OpponentGoalAction:
        self._opponent_goals += 1
        return self._append(OpponentGoalAction())

    def red_card(self, player_id: str) -> RedCardAction:
        """Send a player off; the vacated slot is kept on the record."""
        self._check_player(player_id)
        vacated = self.slots.send_off(player_id)
        self._red_cards[player_id] = self._red_cards.get(player_id, 0) + 1
        return self._append(RedCardAction(player_id, vacated_slot=vacated))

    def yellow_card(self, player_id: str) -> YellowCardAction:
        """Book a player. A second yellow in the match is a red card."""
        self._check_player(player_id)
        if self._yellow_cards.get(player_id, 0) == 0:
            self._yellow_cards[player_id] = 1
            return self._append(YellowCardAction(player_id, escalated_to_red=False))

        vacated = self.slots.send_off(player_id)
        self._yellow_cards[player_id] = 2
        self._red_cards[player_id] = self._red_cards.get(player_id, 0) + 1
        return self._append(
            YellowCardAction(player_id, escalated_to_red=True, vacated_slot=vacated)
        )

    def undo_last(self) -> Optional[ActionRecord]:
        """
        Revert the most recent action.

        Returns:
            The record that was undone, or None if the ledger is empty
        """
        if not self._records:
            return None
        record = self._records[-1]
        self._inverses[type(record)](record)
        self._records.pop()
        logger.info("Undid %s", self.describe(record))
        return record

    # ------------------------------------------------------------------
    # Inverses
    # ------------------------------------------------------------------
    def _undo_goal(self, record: GoalAction) -> None:
        self._decrement(self._goals, record.player_id)

    def _undo_opponent_goal(self, record: OpponentGoalAction) -> None:
        self._opponent_goals = max(0, self._opponent_goals - 1)

    def _undo_red_card(self, record: RedCardAction) -> None:
        self._reverse_send_off(record.player_id, record.vacated_slot)

    def _undo_yellow_card(self, record: YellowCardAction) -> None:
        if record.escalated_to_red:
            self._reverse_send_off(record.player_id, record.vacated_slot)
        self._decrement(self._yellow_cards, record.player_id)

    def _reverse_send_off(self, player_id: str, vacated_slot: Optional[str]) -> None:
        restored = self.slots.reinstate(player_id, vacated_slot)
        self._decrement(self._red_cards, player_id)
        if vacated_slot is not None and not restored:
            logger.info("Slot %s is taken; %s returns to the bench", vacated_slot, player_id)

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------
    @property
    def goals(self) -> Dict[str, int]:
        return {pid: n for pid, n in self._goals.items() if n}

    @property
    def red_cards(self) -> Dict[str, int]:
        return {pid: n for pid, n in self._red_cards.items() if n}

    @property
    def yellow_cards(self) -> Dict[str, int]:
        return {pid: n for pid, n in self._yellow_cards.items() if n}

    @property
    def opponent_goals(self) -> int:
        return self._opponent_goals

    @property
    def score(self) -> Tuple[int, int]:
        return (sum(self._goals.values()), self._opponent_goals)

    @property
    def red_card_total(self) -> int:
        return sum(self._red_cards.values())

    @property
    def records(self) -> List[ActionRecord]:
        return list(self._records)

    @property
    def last_record(self) -> Optional[ActionRecord]:
        return self._records[-1] if self._records else None

    def can_undo(self) -> bool:
        return bool(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def get_action_history(self) -> List[str]:
        """Get history of action descriptions."""
        return [self.describe(record) for record in self._records]

    @staticmethod
    def describe(record: ActionRecord) -> str:
        if isinstance(record, GoalAction):
            return f"Goal by {record.player_id}"
        if isinstance(record, OpponentGoalAction):
            return "Opponent goal"
        if isinstance(record, RedCardAction):
            return f"Red card for {record.player_id}"
        if record.escalated_to_red:
            return f"Second yellow card for {record.player_id}"
        return f"Yellow card for {record.player_id}"

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _append(self, record: ActionRecord) -> ActionRecord:
        self._records.append(record)
        logger.info("Recorded %s", self.describe(record))
        return record

    def _check_player(self, player_id: str) -> None:
        if self._known_ids is not None and player_id not in self._known_ids:
            raise InvalidTransition(f"Unknown player: {player_id}")
        if not self.slots.is_eligible(player_id):
            raise InvalidTransition(f"Player {player_id} has been sent off")

    @staticmethod
    def _decrement(counter: Dict[str, int], player_id: str) -> None:
        counter[player_id] = max(0, counter.get(player_id, 0) - 1)
