"""Dataclasses representing a finished match for the history store."""

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class PlayerStat:
    """Final figures for a single player."""

    id: str
    name: str
    number: str
    time: int
    goals: int = 0
    yellow_cards: int = 0
    red_cards: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "number": self.number,
            "time": self.time,
            "goals": self.goals,
            "yellow_cards": self.yellow_cards,
            "red_cards": self.red_cards,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PlayerStat':
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            number=str(data.get("number", "")),
            time=int(data.get("time", 0)),
            goals=int(data.get("goals", 0)),
            yellow_cards=int(data.get("yellow_cards", 0)),
            red_cards=int(data.get("red_cards", 0)),
        )


@dataclass
class MatchRecord:
    """Snapshot of a match handed to the history store."""

    id: str
    date: str
    name: str
    team_name: str
    total_time: int
    formation: str = ""
    score_for: int = 0
    score_against: int = 0
    player_stats: List[PlayerStat] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "name": self.name,
            "team_name": self.team_name,
            "total_time": self.total_time,
            "formation": self.formation,
            "score_for": self.score_for,
            "score_against": self.score_against,
            "player_stats": [s.to_dict() for s in self.player_stats],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MatchRecord':
        return cls(
            id=str(data["id"]),
            date=data.get("date", ""),
            name=data.get("name", ""),
            team_name=data.get("team_name", data.get("teamName", "")),
            total_time=int(data.get("total_time", data.get("totalTime", 0))),
            formation=data.get("formation", ""),
            score_for=int(data.get("score_for", 0)),
            score_against=int(data.get("score_against", 0)),
            player_stats=[
                PlayerStat.from_dict(s)
                for s in data.get("player_stats", data.get("playerStats", []))
            ],
        )
