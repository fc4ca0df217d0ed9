"""
Player and Team models for the Matchday live-match tracker.

The roster itself is owned by the surrounding application; during a match
these objects are read-only apart from the availability flag, which is set
once the match ends for players who were sent off.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..utils import DEFAULT_MATCH_DURATION_MIN


def _positions_from(raw: Any) -> List[str]:
    """Normalize a position list given as a list or a comma-separated string."""
    if not raw:
        return []
    if isinstance(raw, str):
        raw = raw.split(",")
    return [str(p).strip().upper() for p in raw if str(p).strip()]


@dataclass
class Player:
    """
    Represents a rostered soccer player.

    Attributes:
        id: Unique identifier within the team
        first_name: Player's first name
        last_name: Player's last name
        number: Jersey number (kept as a string, as entered)
        position: Primary position code (e.g. "CB")
        secondary_positions: Other positions the player can cover
        is_unavailable: Whether the player is excluded from selection
    """
    id: str
    first_name: str
    last_name: str
    number: str = ""
    position: str = ""
    secondary_positions: List[str] = field(default_factory=list)
    is_unavailable: bool = False

    def display_name(self) -> str:
        """
        Short name shown on the pitch, e.g. "J. Smith".

        Returns:
            First initial and last name
        """
        initial = self.first_name[:1].upper()
        return f"{initial}. {self.last_name}" if initial else self.last_name

    def plays(self, position: str) -> bool:
        """Return True if the position is the primary or a secondary position."""
        return position == self.position or position in self.secondary_positions

    def to_dict(self) -> Dict[str, Any]:
        """Convert player to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "number": self.number,
            "position": self.position,
            "secondary_positions": list(self.secondary_positions),
            "is_unavailable": self.is_unavailable,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Player':
        """
        Create player from dictionary for JSON deserialization.

        Both snake_case keys and the camelCase keys used by older
        exports ("firstName", "isUnavailable", ...) are accepted.

        Args:
            data: Dictionary representation of player

        Returns:
            Player instance
        """
        secondary = data.get("secondary_positions", data.get("secondaryPositions"))
        return cls(
            id=str(data["id"]),
            first_name=data.get("first_name", data.get("firstName", "")),
            last_name=data.get("last_name", data.get("lastName", "")),
            number=str(data.get("number", "") or ""),
            position=str(data.get("position", "") or "").strip().upper(),
            secondary_positions=_positions_from(secondary),
            is_unavailable=bool(data.get("is_unavailable", data.get("isUnavailable", False))),
        )


@dataclass
class Team:
    """A named roster with its configured match duration."""
    id: str
    name: str
    players: List[Player] = field(default_factory=list)
    match_duration_minutes: int = DEFAULT_MATCH_DURATION_MIN

    def get_player(self, player_id: str) -> Optional[Player]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def player_ids(self) -> List[str]:
        return [p.id for p in self.players]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "players": [p.to_dict() for p in self.players],
            "match_duration_minutes": self.match_duration_minutes,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Team':
        duration = data.get("match_duration_minutes", data.get("gameDuration"))
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            players=[Player.from_dict(p) for p in data.get("players", [])],
            match_duration_minutes=int(duration or DEFAULT_MATCH_DURATION_MIN),
        )
