from dataclasses import dataclass, field
from typing import List, Optional, Set
from .model import Event, Position, Unit
from .pathing import next_step
from .state import BattleState

@dataclass
class TurnReport:
    """What happened during one unit's turn."""
    enemies_remaining: bool = True
    moved: bool = False
    attacked: bool = False
    events: List[Event] = field(default_factory=list)

class CombatResolver:
    """Move-then-attack logic for a single unit's turn."""

    def __init__(self, state: BattleState):
        self.state = state

    def _destinations(self, unit: Unit) -> Set[Position]:
        """Open tiles next to any living enemy."""
        grid = self.state.grid
        return {
            n
            for enemy in self.state.registry.living(unit.faction.enemy)
            for n in grid.open_neighbors(enemy.pos)
        }

    def select_target(self, unit: Unit) -> Optional[Unit]:
        """Adjacent enemy with the lowest hp, ties broken by reading order."""
        enemies = self.state.enemy_neighbors(unit.pos, unit.faction)
        if not enemies:
            return None
        return min(enemies, key=lambda e: (e.hp, e.pos))

    def _move(self, unit: Unit, round_no: int, report: TurnReport) -> None:
        step = next_step(self.state.grid, unit.pos, self._destinations(unit))
        if step is None:
            return
        src = unit.pos
        self.state.move_unit(unit, step)
        report.moved = True
        report.events.append(Event("Moved", round_no,
                                   {"unit_id": unit.id, "from": list(src), "to": list(step)}))

    def _attack(self, unit: Unit, target: Unit, round_no: int, report: TurnReport) -> None:
        killed = self.state.apply_damage(target, unit.attack_power)
        report.attacked = True
        report.events.append(Event("Damage", round_no,
                                   {"attacker": unit.id, "target": target.id,
                                    "dmg": unit.attack_power, "hp": target.hp}))
        if killed:
            report.events.append(Event("Destroyed", round_no,
                                       {"unit_id": target.id, "faction": target.faction.name,
                                        "killer": unit.id, "pos": list(target.pos)}))

    def take_turn(self, unit: Unit, round_no: int) -> TurnReport:
        """Run one turn for a living unit."""
        report = TurnReport()
        if not self.state.registry.has_living(unit.faction.enemy):
            report.enemies_remaining = False
            return report

        target = self.select_target(unit)
        if target is None:
            self._move(unit, round_no, report)
            target = self.select_target(unit)

        if target is not None:
            self._attack(unit, target, round_no, report)
        return report
