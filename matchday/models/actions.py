"""
Action records for the match ledger.

Each record is an immutable variant of the ``ActionRecord`` union. Only the
card variants carry the slot that was vacated, so that undo can restore the
player without looking at anything recorded before the action.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union


@dataclass(frozen=True)
class GoalAction:
    player_id: str
    kind: str = field(default="goal", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind, "player_id": self.player_id}


@dataclass(frozen=True)
class OpponentGoalAction:
    kind: str = field(default="opponent_goal", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind}


@dataclass(frozen=True)
class RedCardAction:
    player_id: str
    vacated_slot: Optional[str] = None
    kind: str = field(default="red_card", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind,
            "player_id": self.player_id,
            "vacated_slot": self.vacated_slot,
        }


@dataclass(frozen=True)
class YellowCardAction:
    player_id: str
    escalated_to_red: bool = False
    vacated_slot: Optional[str] = None
    kind: str = field(default="yellow_card", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind,
            "player_id": self.player_id,
            "escalated_to_red": self.escalated_to_red,
            "vacated_slot": self.vacated_slot,
        }


ActionRecord = Union[GoalAction, OpponentGoalAction, RedCardAction, YellowCardAction]
