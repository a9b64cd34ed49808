from typing import Dict, Iterator, List, Optional
from .model import Faction, Unit

class UnitRegistry:
    """Living units keyed by their stable id."""

    def __init__(self):
        self._units: Dict[int, Unit] = {}
        self._initial: Dict[Faction, int] = {f: 0 for f in Faction}
        self._next_id = 0

    def add(self, unit: Unit) -> Unit:
        if unit.id in self._units or unit.id < self._next_id:
            raise ValueError(f"unit id {unit.id} already used")
        self._units[unit.id] = unit
        self._initial[unit.faction] += 1
        self._next_id = unit.id + 1
        return unit

    def get(self, unit_id: int) -> Optional[Unit]:
        return self._units.get(unit_id)

    def remove(self, unit_id: int) -> Unit:
        return self._units.pop(unit_id)

    def __contains__(self, unit_id: int) -> bool:
        return unit_id in self._units

    def __iter__(self) -> Iterator[Unit]:
        return iter(self._units.values())

    def __len__(self) -> int:
        return len(self._units)

    def living(self, faction: Optional[Faction] = None) -> List[Unit]:
        if faction is None:
            return list(self._units.values())
        return [u for u in self._units.values() if u.faction is faction]

    def has_living(self, faction: Faction) -> bool:
        return any(u.faction is faction for u in self._units.values())

    def factions_alive(self) -> List[Faction]:
        return [f for f in Faction if self.has_living(f)]

    def deaths(self, faction: Faction) -> int:
        return self._initial[faction] - len(self.living(faction))

    def total_hp(self) -> int:
        return sum(u.hp for u in self._units.values())
