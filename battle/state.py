"""
Battle state container.

Holds the grid and the unit registry together and is the only place that
mutates either, so the position -> unit id index on the grid and the
id -> unit map in the registry always change in the same call.
"""

import copy
from typing import List, Optional
from .errors import InvariantViolation
from .grid import Grid
from .model import Faction, Position, Unit
from .registry import UnitRegistry


class BattleState:
    def __init__(self, grid: Grid, registry: Optional[UnitRegistry] = None):
        self.grid = grid
        self.registry = registry if registry is not None else UnitRegistry()

    def add_unit(self, unit: Unit) -> Unit:
        self.grid.place(unit.id, unit.pos)
        try:
            return self.registry.add(unit)
        except ValueError:
            self.grid.vacate(unit.pos)
            raise

    def enemy_neighbors(self, pos: Position, faction: Faction) -> List[Unit]:
        """Units next to pos that fight against `faction`, in neighbor order."""
        enemies = []
        for unit_id in self.grid.occupied_neighbors(pos):
            unit = self.registry.get(unit_id)
            if unit is None:
                raise InvariantViolation(f"tile next to {pos} holds unknown unit {unit_id}")
            if unit.faction is not faction:
                enemies.append(unit)
        return enemies

    def move_unit(self, unit: Unit, dst: Position) -> None:
        if unit.id not in self.registry:
            raise InvariantViolation(f"dead unit {unit.id} cannot move")
        self.grid.relocate(unit.pos, dst)
        unit.pos = dst

    def apply_damage(self, target: Unit, amount: int) -> bool:
        """Deal damage, removing the target at 0 hp. Returns True on a kill."""
        if target.id not in self.registry:
            raise InvariantViolation(f"dead unit {target.id} cannot be attacked")
        target.hp = max(0, target.hp - amount)
        if target.hp > 0:
            return False
        self.grid.vacate(target.pos)
        self.registry.remove(target.id)
        return True

    def boost(self, faction: Faction, amount: int) -> None:
        for unit in self.registry.living(faction):
            unit.attack_power += amount

    def reading_order(self) -> List[int]:
        """Ids of all living units sorted by position."""
        return [u.id for u in sorted(self.registry, key=lambda u: u.pos)]

    def check_invariants(self) -> None:
        occupied = self.grid.occupied()
        if len(occupied) != len(self.registry):
            raise InvariantViolation(
                f"{len(occupied)} occupied tiles but {len(self.registry)} living units")
        for unit in self.registry:
            if occupied.get(unit.pos) != unit.id:
                raise InvariantViolation(f"unit {unit.id} at {unit.pos} missing from grid")
            if unit.hp <= 0:
                raise InvariantViolation(f"unit {unit.id} is registered with {unit.hp} hp")

    def copy(self) -> "BattleState":
        """Create a deep copy of the state."""
        return copy.deepcopy(self)

    def render(self, with_hp: bool = False) -> List[str]:
        """Map rows with units drawn in; `with_hp` lists each row's units, e.g. `   G(200), E(197)`."""
        rows = [list(line) for line in self.grid.render_walls()]
        for unit in self.registry:
            r, c = unit.pos
            rows[r][c] = unit.faction.value
        lines = ["".join(row) for row in rows]
        if with_hp:
            for r in range(len(lines)):
                here = sorted((u for u in self.registry if u.pos[0] == r), key=lambda u: u.pos)
                if here:
                    lines[r] += "   " + ", ".join(f"{u.faction.value}({u.hp})" for u in here)
        return lines
