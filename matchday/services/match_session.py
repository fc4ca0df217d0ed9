"""
Match session: the single state container for one live match.

The session owns the clock engine, the slot assignment engine, the action
ledger and the substitution coordinator. Every public operation first lets
the clock catch up to the current time, then performs its mutation, then
leaves the active player set reconciled with the slot mapping, so that
seconds are always credited to whoever was on the field while they passed.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..models import (
    FormationCatalog, GoalAction, MatchPhase, MatchRecord, OpponentGoalAction,
    Player, PlayerStat, RedCardAction, Team, display_position
)
from ..utils import DEFAULT_FORMATION, now_ts
from .action_ledger import ActionLedger
from .clock_engine import ClockEngine
from .errors import InvalidTransition
from .slot_assignment import BENCH, PendingMove, SlotAssignmentEngine
from .substitution import SubstitutionCoordinator

logger = logging.getLogger(__name__)

CONFIRMABLE_ACTIONS = ("goal", "opponent_goal", "red_card", "yellow_card", "undo")


class MatchSession:
    """Coordinates the live-match services around one team and formation."""

    def __init__(
        self,
        catalog: Optional[FormationCatalog] = None,
        clock: Optional[ClockEngine] = None,
        slots: Optional[SlotAssignmentEngine] = None,
    ):
        self.catalog = catalog if catalog is not None else FormationCatalog.default()
        self.clock = clock or ClockEngine()
        self.slots = slots or SlotAssignmentEngine()
        self.slots.set_active_set_listener(self.clock.set_active_players)
        self.ledger = ActionLedger(self.slots)
        self.substitutions = SubstitutionCoordinator(self.slots)
        self.clock.add_phase_listener(self._on_phase_change)

        self.team: Optional[Team] = None
        self.match_name = ""
        self._match_id: Optional[str] = None
        self._match_date: Optional[str] = None

        default = DEFAULT_FORMATION if DEFAULT_FORMATION in self.catalog else None
        if default is None and len(self.catalog):
            default = self.catalog.names()[0]
        if default is not None:
            self.select_formation(default)

    # ------------------------------------------------------------------
    # Setup (before kick-off)
    # ------------------------------------------------------------------
    def select_team(self, team: Team) -> None:
        self._require_phase(MatchPhase.IDLE)
        self.team = team
        self.slots.reset()
        self.substitutions.cancel()
        self.ledger.initialize(team.player_ids())

    def select_formation(self, name: str) -> None:
        self._require_phase(MatchPhase.IDLE)
        formation = self.catalog.get(name)
        if formation is None:
            raise InvalidTransition(f"Unknown formation: {name}")
        self.slots.set_formation(formation)

    def auto_assign(self) -> Dict[str, str]:
        self._require_phase(MatchPhase.IDLE)
        return self.slots.auto_assign(self._roster())

    # ------------------------------------------------------------------
    # Slot mutations (setup and live drag and drop)
    # ------------------------------------------------------------------
    def assign(self, slot_key: str, player_id: str) -> Optional[str]:
        self._before_slot_change(player_id)
        occupant = self.slots.player_in(slot_key)
        if occupant is not None and self.substitutions.is_reserved(occupant):
            raise InvalidTransition(f"Player {occupant} is part of a pending substitution")
        return self.slots.assign(slot_key, player_id)

    def unassign(self, slot_key: str) -> Optional[str]:
        self.clock.tick()
        occupant = self.slots.player_in(slot_key)
        if occupant is not None and self.substitutions.is_reserved(occupant):
            raise InvalidTransition(f"Player {occupant} is part of a pending substitution")
        return self.slots.unassign(slot_key)

    def begin_move(self, player_id: str) -> PendingMove:
        self._before_slot_change(player_id)
        return self.slots.begin_move(player_id)

    def propose_move(self, target: str) -> PendingMove:
        return self.slots.propose_move(target)

    def commit_move(self) -> Optional[str]:
        self.clock.tick()
        move = self.slots.pending_move
        if move is not None and move.target not in (None, BENCH):
            occupant = self.slots.player_in(move.target)
            if occupant is not None and self.substitutions.is_reserved(occupant):
                self.slots.abort_move()
                raise InvalidTransition(f"Player {occupant} is part of a pending substitution")
        return self.slots.commit_move()

    def abort_move(self) -> None:
        self.slots.abort_move()

    def move_player(self, player_id: str, target: str) -> Optional[str]:
        self.begin_move(player_id)
        try:
            self.propose_move(target)
        except InvalidTransition:
            self.abort_move()
            raise
        return self.commit_move()

    # ------------------------------------------------------------------
    # Match lifecycle
    # ------------------------------------------------------------------
    def start_match(self, name: str) -> None:
        """Kick off with the current lineup; every roster player starts at zero."""
        self._require_phase(MatchPhase.IDLE)
        team = self._require_team()
        if not name or not name.strip():
            raise InvalidTransition("A match needs a name")
        if not self.slots.is_complete():
            raise InvalidTransition("Assign players to all positions before starting the match")

        times = {pid: 0 for pid in team.player_ids()}
        self.substitutions.cancel()
        self.ledger.initialize(team.player_ids())
        self.clock.start(self.slots.active_player_ids, times, team.match_duration_minutes)
        self.match_name = name.strip()
        self._match_id = str(int(now_ts() * 1000))
        self._match_date = datetime.now().isoformat(timespec="seconds")

    def tick(self) -> int:
        return self.clock.tick()

    def toggle_play_pause(self) -> MatchPhase:
        self.clock.tick()
        return self.clock.toggle_play_pause()

    def cancel_match(self) -> None:
        """Abandon the match; the lineup is kept for another start."""
        self.clock.cancel()
        self.slots.reset(keep_assignments=True)
        self.substitutions.cancel()
        if self.team is not None:
            self.ledger.initialize(self.team.player_ids())
        self.match_name = ""
        self._match_id = None
        self._match_date = None

    def end_match(self) -> MatchRecord:
        """Finish the match now and return the record for the history store."""
        self.clock.finish()
        return self.snapshot()

    # ------------------------------------------------------------------
    # Ledger actions (confirmation already given by the caller)
    # ------------------------------------------------------------------
    def goal(self, player_id: str) -> GoalAction:
        self._require_live()
        return self.ledger.goal(player_id)

    def opponent_goal(self) -> OpponentGoalAction:
        self._require_live()
        return self.ledger.opponent_goal()

    def red_card(self, player_id: str) -> RedCardAction:
        self._require_live()
        record = self.ledger.red_card(player_id)
        self.substitutions.discard(player_id)
        return record

    def yellow_card(self, player_id: str):
        self._require_live()
        record = self.ledger.yellow_card(player_id)
        if record.escalated_to_red:
            self.substitutions.discard(player_id)
        return record

    def undo_last(self):
        self._require_live()
        return self.ledger.undo_last()

    # ------------------------------------------------------------------
    # Substitutions
    # ------------------------------------------------------------------
    def select_bench_player(self, player_id: str) -> bool:
        self._require_live()
        self._check_roster(player_id)
        return self.substitutions.select_bench_player(player_id)

    def select_field_player(self, player_id: str) -> bool:
        self._require_live()
        return self.substitutions.select_field_player(player_id)

    def select_player(self, player_id: str) -> bool:
        """Route a tap to the bench or field selection depending on where the player is."""
        if self.slots.slot_of(player_id) is None:
            return self.select_bench_player(player_id)
        return self.select_field_player(player_id)

    def commit_substitution(self):
        self._require_live()
        return self.substitutions.commit()

    def cancel_substitution(self) -> None:
        self.substitutions.cancel()

    # ------------------------------------------------------------------
    # Confirmation boundary
    # ------------------------------------------------------------------
    def confirmation_prompt(self, action: str, player_id: Optional[str] = None) -> Optional[str]:
        """
        Text the shell shows before a destructive action.

        Returns:
            The prompt, or None when the action has nothing to confirm
            (undo with an empty ledger)
        """
        if action not in CONFIRMABLE_ACTIONS:
            raise InvalidTransition(f"Unknown action: {action}")

        if action == "opponent_goal":
            return "Goal scored by the opponent?"
        if action == "undo":
            record = self.ledger.last_record
            if record is None:
                return None
            if isinstance(record, OpponentGoalAction):
                return "Undo last opponent goal?"
            name = self.player_name(record.player_id)
            if isinstance(record, GoalAction):
                return f"Undo last goal by {name}?"
            if isinstance(record, RedCardAction):
                return f"Undo red card for {name}?"
            return f"Undo yellow card for {name}?"

        if player_id is None:
            raise InvalidTransition(f"Action {action} needs a player")
        name = self.player_name(player_id)
        if action == "goal":
            return f"Goal scored by {name}?"
        if action == "red_card":
            return f"Give Red Card to {name}? Player will be sent to bench and cannot return."
        if self.ledger.yellow_cards.get(player_id, 0) >= 1:
            return (
                f"Give second Yellow Card to {name}? This is a red card: "
                "player will be sent to bench and cannot return."
            )
        return f"Give Yellow Card to {name}?"

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------
    @property
    def phase(self) -> MatchPhase:
        return self.clock.phase

    def get_player(self, player_id: str) -> Optional[Player]:
        if self.team is None:
            return None
        return self.team.get_player(player_id)

    def player_name(self, player_id: str) -> str:
        player = self.get_player(player_id)
        return player.display_name() if player is not None else player_id

    def bench(self) -> List[Player]:
        if self.team is None:
            return []
        return self.slots.bench(self.team.players)

    def snapshot(self) -> MatchRecord:
        """Final (or current) figures of the match, for the history store."""
        team = self._require_team()
        ledger = self.ledger
        stats = [
            PlayerStat(
                id=p.id,
                name=p.display_name(),
                number=p.number,
                time=self.clock.player_time(p.id),
                goals=ledger.goals.get(p.id, 0),
                yellow_cards=ledger.yellow_cards.get(p.id, 0),
                red_cards=ledger.red_cards.get(p.id, 0),
            )
            for p in team.players
        ]
        score_for, score_against = ledger.score
        formation = self.slots.formation
        return MatchRecord(
            id=self._match_id or str(int(now_ts() * 1000)),
            date=self._match_date or datetime.now().isoformat(timespec="seconds"),
            name=self.match_name,
            team_name=team.name,
            total_time=self.clock.elapsed_seconds,
            formation=formation.name if formation is not None else "",
            score_for=score_for,
            score_against=score_against,
            player_stats=stats,
        )

    def state_view(self) -> Dict[str, Any]:
        """JSON-ready view of the whole match for the shell."""
        formation = self.slots.formation
        assignments = self.slots.assignments
        times = self.clock.player_times
        ledger = self.ledger
        phase = self.clock.phase
        live = phase in (MatchPhase.PLAYING, MatchPhase.PAUSED)

        def _player_view(player: Player) -> Dict[str, Any]:
            eligible = self.slots.is_eligible(player.id)
            return {
                "id": player.id,
                "name": player.display_name(),
                "number": player.number,
                "position": player.position,
                "time": times.get(player.id, 0),
                "goals": ledger.goals.get(player.id, 0),
                "yellow_cards": ledger.yellow_cards.get(player.id, 0),
                "red_cards": ledger.red_cards.get(player.id, 0),
                "eligible": eligible,
                "draggable": (
                    phase != MatchPhase.FINISHED
                    and eligible
                    and not self.substitutions.is_open
                ),
                "reserved": self.substitutions.is_reserved(player.id),
            }

        slots_view = []
        for slot_key in (formation.slots if formation is not None else []):
            player_id = assignments.get(slot_key)
            player = self.get_player(player_id) if player_id else None
            slots_view.append({
                "slot": slot_key,
                "display_position": display_position(slot_key),
                "player": _player_view(player) if player is not None else None,
            })

        return {
            "match_name": self.match_name,
            "team": self.team.name if self.team is not None else None,
            "clock": self.clock.snapshot().to_json(),
            "formation": formation.name if formation is not None else None,
            "formations": self.catalog.names(),
            "slots": slots_view,
            "bench": [_player_view(p) for p in self.bench()],
            "max_active": self.slots.max_active,
            "occupied": self.slots.occupied_count,
            "score": {"for": ledger.score[0], "against": ledger.score[1]},
            "actions": [r.to_dict() for r in ledger.records],
            "can_undo": live and ledger.can_undo(),
            "can_toggle": live,
            "substitution": {
                "in": self.substitutions.subs_in,
                "out": self.substitutions.subs_out,
                "can_commit": self.substitutions.can_commit,
            },
        }

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _on_phase_change(self, previous: MatchPhase, phase: MatchPhase) -> None:
        if phase != MatchPhase.FINISHED:
            return
        self.substitutions.cancel()
        self.slots.freeze()
        team = self.team
        if team is None:
            return
        for player_id in self.slots.sent_off:
            player = team.get_player(player_id)
            if player is not None:
                player.is_unavailable = True
        logger.info("Match '%s' finished at %ds", self.match_name, self.clock.elapsed_seconds)

    def _before_slot_change(self, player_id: str) -> None:
        self.clock.tick()
        self._check_roster(player_id)
        if self.substitutions.is_reserved(player_id):
            raise InvalidTransition(f"Player {player_id} is part of a pending substitution")

    def _require_live(self) -> None:
        self.clock.tick()
        if self.clock.phase not in (MatchPhase.PLAYING, MatchPhase.PAUSED):
            raise InvalidTransition(f"No match in progress ({self.clock.phase.value})")
        if self.slots.pending_move is not None:
            raise InvalidTransition("Drop or abort the player being moved first")

    def _require_phase(self, phase: MatchPhase) -> None:
        if self.clock.phase != phase:
            raise InvalidTransition(
                f"Operation needs a {phase.value} match, not {self.clock.phase.value}"
            )

    def _require_team(self) -> Team:
        if self.team is None:
            raise InvalidTransition("No team selected")
        return self.team

    def _roster(self) -> List[Player]:
        return list(self._require_team().players)

    def _check_roster(self, player_id: str) -> None:
        if self.get_player(player_id) is None:
            raise InvalidTransition(f"Unknown player: {player_id}")
