"""Formation models for the Matchday live-match tracker."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..utils import FORMATION_SLOTS

_TRAILING_DIGIT = re.compile(r"\d$")


def display_position(slot_key: str) -> str:
    """Position shown for a slot: its key without a trailing disambiguating digit."""
    return _TRAILING_DIGIT.sub("", slot_key)


@dataclass
class Formation:
    """A named, ordered set of slot keys."""
    name: str
    slots: List[str] = field(default_factory=list)

    def __post_init__(self):
        if len(set(self.slots)) != len(self.slots):
            raise ValueError(f"Formation '{self.name}' has duplicate slot keys")

    @property
    def size(self) -> int:
        return len(self.slots)

    def has_slot(self, slot_key: str) -> bool:
        return slot_key in self.slots


class FormationCatalog:
    """Static catalog of the formations a coach can pick from."""

    def __init__(self, formations: Optional[List[Formation]] = None):
        self._formations: Dict[str, Formation] = {}
        for formation in formations or []:
            self._formations[formation.name] = formation

    @classmethod
    def default(cls) -> FormationCatalog:
        """Catalog with the built-in formations."""
        return cls([Formation(name, slots) for name, slots in FORMATION_SLOTS.items()])

    def names(self) -> List[str]:
        return list(self._formations)

    def get(self, name: str) -> Optional[Formation]:
        return self._formations.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._formations

    def __len__(self) -> int:
        return len(self._formations)
