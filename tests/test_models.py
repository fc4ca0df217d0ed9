"""
Unit tests for the Player, Team, Formation and MatchClock models.

Tests serialization and the small helpers the engines rely on.
"""
import unittest

from matchday.models import (
    Formation, FormationCatalog, MatchClock, MatchPhase, Player, Team,
    YellowCardAction, display_position
)
from matchday.utils import fmt_mmss


class TestPlayerModel(unittest.TestCase):
    """Test cases for Player and Team."""

    def setUp(self) -> None:
        self.player = Player(
            id="p7",
            first_name="jane",
            last_name="Smith",
            number="7",
            position="CM",
            secondary_positions=["DM", "AM"],
        )

    def test_display_name(self) -> None:
        self.assertEqual(self.player.display_name(), "J. Smith")
        self.assertEqual(Player(id="x", first_name="", last_name="Lee").display_name(), "Lee")

    def test_plays(self) -> None:
        self.assertTrue(self.player.plays("CM"))
        self.assertTrue(self.player.plays("AM"))
        self.assertFalse(self.player.plays("GK"))

    def test_round_trip(self) -> None:
        restored = Player.from_dict(self.player.to_dict())
        self.assertEqual(restored, self.player)

    def test_from_camel_case_dict(self) -> None:
        player = Player.from_dict({
            "id": 3,
            "firstName": "Sam",
            "lastName": "Okafor",
            "number": 3,
            "position": "lb",
            "secondaryPositions": "lm, rb",
            "isUnavailable": True,
        })
        self.assertEqual(player.id, "3")
        self.assertEqual(player.number, "3")
        self.assertEqual(player.position, "LB")
        self.assertEqual(player.secondary_positions, ["LM", "RB"])
        self.assertTrue(player.is_unavailable)

    def test_team_lookup_and_duration(self) -> None:
        team = Team(id="t", name="Riverside", players=[self.player])
        self.assertIs(team.get_player("p7"), self.player)
        self.assertIsNone(team.get_player("nobody"))
        self.assertEqual(team.player_ids(), ["p7"])
        self.assertEqual(team.match_duration_minutes, 80)

        legacy = Team.from_dict({"id": "t", "name": "Old", "players": [], "gameDuration": 70})
        self.assertEqual(legacy.match_duration_minutes, 70)


class TestFormationModel(unittest.TestCase):
    """Test cases for formations and the catalog."""

    def test_display_position_strips_trailing_digit(self) -> None:
        self.assertEqual(display_position("CB2"), "CB")
        self.assertEqual(display_position("GK"), "GK")

    def test_duplicate_slots_rejected(self) -> None:
        with self.assertRaises(ValueError):
            Formation("bad", ["GK", "CB", "CB"])

    def test_default_catalog(self) -> None:
        catalog = FormationCatalog.default()
        self.assertEqual(catalog.names(), ["1-4-4-2", "1-4-3-3"])
        self.assertIn("1-4-3-3", catalog)
        self.assertEqual(catalog.get("1-4-3-3").size, 11)
        self.assertTrue(catalog.get("1-4-3-3").has_slot("LW"))
        self.assertIsNone(catalog.get("3-5-2"))


class TestMatchClockModel(unittest.TestCase):
    """Test cases for the clock view and time formatting."""

    def test_half_and_full_time(self) -> None:
        clock = MatchClock(total_duration_minutes=80)
        self.assertEqual(clock.full_time_seconds, 4800)
        self.assertEqual(clock.half_time_seconds, 2400)
        self.assertFalse(clock.is_second_half())

        clock.elapsed_seconds = 2400
        clock.phase = MatchPhase.PAUSED
        self.assertTrue(clock.is_half_time())
        self.assertTrue(clock.is_second_half())
        self.assertEqual(clock.to_json()["phase"], "paused")

    def test_fmt_mmss(self) -> None:
        self.assertEqual(fmt_mmss(0), "00:00")
        self.assertEqual(fmt_mmss(90), "01:30")
        self.assertEqual(fmt_mmss(4800), "80:00")

    def test_card_record_serialization(self) -> None:
        record = YellowCardAction("p4", escalated_to_red=True, vacated_slot="CB2")
        self.assertEqual(record.to_dict(), {
            "type": "yellow_card",
            "player_id": "p4",
            "escalated_to_red": True,
            "vacated_slot": "CB2",
        })


if __name__ == "__main__":
    unittest.main()
