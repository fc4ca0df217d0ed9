"""Integration tests for the match session."""

import unittest
from unittest.mock import patch

from matchday.models import MatchPhase, Player, Team
from matchday.services import (
    BENCH, CapacityExceeded, InvalidTransition, MatchSession, ServiceFactory
)

NOW = "matchday.services.clock_engine.now_ts"
LINEUP_442 = ["GK", "RB", "CB", "CB2", "LB", "RM", "CM", "CM2", "LM", "CF", "CF2"]


def make_team(size=14, minutes=80):
    players = [
        Player(
            id=f"p{i}",
            first_name=f"First{i}",
            last_name=f"Last{i}",
            number=str(i),
            position=LINEUP_442[i - 1].rstrip("2") if i <= 11 else "CM",
        )
        for i in range(1, size + 1)
    ]
    return Team(id="team-1", name="Riverside U12", players=players, match_duration_minutes=minutes)


class MatchSessionTests(unittest.TestCase):
    """Test the session wiring the clock, slots, substitutions and ledger."""

    def setUp(self):
        self.session = ServiceFactory().create_match_session()
        self.team = make_team()
        self.session.select_team(self.team)
        for index, slot in enumerate(LINEUP_442, start=1):
            self.session.assign(slot, f"p{index}")

    def _start(self, at=1000.0, name="League match"):
        with patch(NOW, return_value=at):
            self.session.start_match(name)

    def _at(self, ts):
        return patch(NOW, return_value=ts)

    def test_eleven_active_players_accrue_time(self):
        self._start()
        with self._at(1010.0):
            self.session.tick()

        times = self.session.clock.player_times
        for index in range(1, 12):
            self.assertEqual(times[f"p{index}"], 10)
        self.assertEqual(times["p12"], 0)

    def test_start_requires_full_lineup_and_name(self):
        self.session.unassign("GK")
        with self.assertRaises(InvalidTransition):
            self._start()
        self.session.assign("GK", "p1")
        with self.assertRaises(InvalidTransition):
            self._start(name="   ")
        self._start()
        self.assertEqual(self.session.phase, MatchPhase.PLAYING)
        self.assertEqual(self.session.clock.clock.total_duration_minutes, 80)

    def test_duration_comes_from_team(self):
        session = MatchSession()
        session.select_team(make_team(minutes=60))
        session.auto_assign()
        with self._at(1000.0):
            session.start_match("Friendly")
        self.assertEqual(session.clock.clock.half_time_seconds, 1800)

    def test_setup_is_locked_once_started(self):
        self._start()
        with self.assertRaises(InvalidTransition):
            self.session.select_formation("1-4-3-3")
        with self.assertRaises(InvalidTransition):
            self.session.select_team(make_team())
        with self.assertRaises(InvalidTransition):
            self.session.auto_assign()

    def test_implicit_swap_moves_time_to_new_player(self):
        self._start()
        with self._at(1010.0):
            bumped = self.session.assign("GK", "p12")
        self.assertEqual(bumped, "p1")
        with self._at(1015.0):
            self.session.tick()

        times = self.session.clock.player_times
        self.assertEqual(times["p1"], 10)
        self.assertEqual(times["p12"], 5)
        self.assertEqual(self.session.slots.occupied_count, 11)

    def test_drag_to_bench_stops_accrual(self):
        self._start()
        with self._at(1020.0):
            self.assertEqual(self.session.move_player("p10", BENCH), "p10")
        with self._at(1030.0):
            self.session.tick()
        self.assertEqual(self.session.clock.player_time("p10"), 20)
        self.assertEqual(self.session.clock.player_time("p11"), 30)

    def test_substitution_scenario(self):
        self._start()
        with self._at(1005.0):
            self.session.select_player("p12")
            self.session.select_player("p1")
            pairings = self.session.commit_substitution()

        self.assertEqual(pairings, [("GK", "p12", "p1")])
        self.assertEqual(self.session.slots.player_in("GK"), "p12")
        self.assertEqual(self.session.substitutions.subs_in, [])
        self.assertEqual(self.session.substitutions.subs_out, [])

    def test_reserved_player_cannot_be_dragged(self):
        self._start()
        with self._at(1001.0):
            self.session.select_player("p12")
            self.session.select_player("p1")
            with self.assertRaises(InvalidTransition):
                self.session.move_player("p1", "CB")
            with self.assertRaises(InvalidTransition):
                self.session.move_player("p12", "RB")
            with self.assertRaises(InvalidTransition):
                self.session.unassign("GK")
            with self.assertRaises(InvalidTransition):
                self.session.move_player("p2", "GK")
        self.assertIsNone(self.session.slots.pending_move)
        self.assertEqual(self.session.slots.player_in("GK"), "p1")

    def test_red_card_reduces_capacity(self):
        self._start()
        with self._at(1010.0):
            self.session.red_card("p1")
        self.assertIsNone(self.session.slots.player_in("GK"))
        self.assertEqual(self.session.slots.max_active, 10)

        with self._at(1011.0):
            with self.assertRaises(CapacityExceeded):
                self.session.assign("GK", "p12")
        self.assertIsNone(self.session.slots.player_in("GK"))

        with self._at(1020.0):
            self.session.tick()
        self.assertEqual(self.session.clock.player_time("p1"), 10)

        with self._at(1021.0):
            self.session.undo_last()
        self.assertEqual(self.session.slots.player_in("GK"), "p1")
        self.assertEqual(self.session.slots.max_active, 11)

    def test_red_card_drops_player_from_proposal(self):
        self._start()
        with self._at(1001.0):
            self.session.select_player("p12")
            self.session.select_player("p1")
            self.session.red_card("p1")
        self.assertEqual(self.session.substitutions.subs_out, [])
        self.assertEqual(self.session.substitutions.subs_in, ["p12"])

    def test_ledger_and_substitutions_wait_for_open_move(self):
        self._start()
        with self._at(1001.0):
            self.session.begin_move("p12")
            with self.assertRaises(InvalidTransition):
                self.session.red_card("p1")
            with self.assertRaises(InvalidTransition):
                self.session.yellow_card("p1")
            with self.assertRaises(InvalidTransition):
                self.session.goal("p9")
            with self.assertRaises(InvalidTransition):
                self.session.select_player("p13")
            with self.assertRaises(InvalidTransition):
                self.session.commit_substitution()
        self.assertEqual(self.session.slots.sent_off, [])
        self.assertEqual(len(self.session.ledger), 0)

        self.session.abort_move()
        with self._at(1010.0):
            self.session.red_card("p1")
        with self._at(1020.0):
            self.session.tick()
        self.assertEqual(self.session.clock.player_time("p1"), 10)
        self.assertEqual(self.session.clock.player_time("p2"), 20)

    def test_red_carded_player_stops_accruing_during_open_drag(self):
        self._start()
        with self._at(1005.0):
            self.session.begin_move("p12")
        # Sent off straight through the ledger, bypassing the session guard
        self.session.ledger.red_card("p1")
        with self._at(1015.0):
            self.session.tick()
        self.assertEqual(self.session.clock.player_time("p1"), 5)
        self.assertNotIn("p1", self.session.clock.active_player_ids)

    def test_ledger_needs_a_live_match(self):
        with self.assertRaises(InvalidTransition):
            self.session.goal("p9")
        self._start()
        with self._at(1005.0):
            self.session.end_match()
        with self.assertRaises(InvalidTransition):
            self.session.goal("p9")
        with self.assertRaises(InvalidTransition):
            self.session.undo_last()

    def test_full_time_freezes_assignments(self):
        session = MatchSession()
        session.select_team(make_team(minutes=2))
        for index, slot in enumerate(LINEUP_442, start=1):
            session.assign(slot, f"p{index}")
        with self._at(1000.0):
            session.start_match("Short game")
        with self._at(1060.0):
            session.tick()
        self.assertEqual(session.phase, MatchPhase.PAUSED)
        with self._at(1100.0):
            session.toggle_play_pause()
        with self._at(1200.0):
            with self.assertRaises(InvalidTransition):
                session.assign("GK", "p12")

        self.assertEqual(session.phase, MatchPhase.FINISHED)
        self.assertTrue(session.slots.is_frozen)
        self.assertEqual(session.clock.player_time("p1"), 120)

    def test_end_match_produces_record(self):
        self._start()
        with self._at(1030.0):
            self.session.goal("p9")
            self.session.yellow_card("p4")
            self.session.red_card("p2")
            self.session.opponent_goal()
        with self._at(1090.0):
            record = self.session.end_match()

        self.assertEqual(self.session.phase, MatchPhase.FINISHED)
        self.assertEqual(record.name, "League match")
        self.assertEqual(record.team_name, "Riverside U12")
        self.assertEqual(record.total_time, 90)
        self.assertEqual(record.formation, "1-4-4-2")
        self.assertEqual((record.score_for, record.score_against), (1, 1))

        stats = {s.id: s for s in record.player_stats}
        self.assertEqual(len(stats), 14)
        self.assertEqual(stats["p9"].goals, 1)
        self.assertEqual(stats["p9"].time, 90)
        self.assertEqual(stats["p4"].yellow_cards, 1)
        self.assertEqual(stats["p2"].red_cards, 1)
        self.assertEqual(stats["p2"].time, 30)
        self.assertEqual(stats["p12"].time, 0)
        self.assertEqual(stats["p9"].name, "F. Last9")

        self.assertTrue(self.team.get_player("p2").is_unavailable)
        self.assertFalse(self.team.get_player("p4").is_unavailable)

    def test_cancel_keeps_lineup(self):
        self._start()
        with self._at(1010.0):
            self.session.red_card("p1")
        self.session.cancel_match()

        self.assertEqual(self.session.phase, MatchPhase.IDLE)
        self.assertEqual(len(self.session.ledger), 0)
        self.assertEqual(self.session.slots.max_active, 11)
        self.assertEqual(self.session.slots.occupied_count, 10)
        self.assertEqual(self.session.clock.player_times, {})
        self.assertFalse(self.team.get_player("p1").is_unavailable)

    def test_confirmation_prompts(self):
        self._start()
        self.assertEqual(self.session.confirmation_prompt("goal", "p9"), "Goal scored by F. Last9?")
        self.assertIn("Red Card", self.session.confirmation_prompt("red_card", "p1"))
        self.assertEqual(
            self.session.confirmation_prompt("yellow_card", "p4"), "Give Yellow Card to F. Last4?"
        )
        self.assertIsNone(self.session.confirmation_prompt("undo"))

        with self._at(1001.0):
            self.session.yellow_card("p4")
        self.assertIn("second Yellow Card", self.session.confirmation_prompt("yellow_card", "p4"))
        self.assertEqual(
            self.session.confirmation_prompt("undo"), "Undo yellow card for F. Last4?"
        )
        with self.assertRaises(InvalidTransition):
            self.session.confirmation_prompt("substitute", "p1")

    def test_state_view(self):
        self._start()
        with self._at(1002.0):
            self.session.select_player("p12")
        view = self.session.state_view()

        self.assertEqual(view["clock"]["phase"], "playing")
        self.assertEqual(view["formation"], "1-4-4-2")
        self.assertEqual([s["slot"] for s in view["slots"]], LINEUP_442)
        self.assertEqual(view["slots"][3]["display_position"], "CB")
        self.assertEqual(view["slots"][0]["player"]["id"], "p1")
        self.assertEqual([p["id"] for p in view["bench"]], ["p12", "p13", "p14"])
        self.assertTrue(view["bench"][0]["reserved"])
        self.assertFalse(view["bench"][0]["draggable"])
        self.assertEqual(view["substitution"]["in"], ["p12"])
        self.assertFalse(view["can_undo"])
        self.assertTrue(view["can_toggle"])


if __name__ == "__main__":
    unittest.main()
