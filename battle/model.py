from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple
from enum import Enum

Position = Tuple[int, int]  # (row, col); tuple ordering is reading order

DEFAULT_HP = 200
DEFAULT_ATTACK_POWER = 3

class Faction(Enum):
    """Side a unit fights for"""
    ELF = "E"
    GOBLIN = "G"

    @property
    def enemy(self) -> "Faction":
        return Faction.GOBLIN if self is Faction.ELF else Faction.ELF

class Tile(Enum):
    """Static terrain. Occupancy lives in the grid's unit index, not here."""
    WALL = "#"
    OPEN = "."

@dataclass
class Unit:
    id: int
    faction: Faction
    pos: Position
    hp: int = DEFAULT_HP
    attack_power: int = DEFAULT_ATTACK_POWER

@dataclass
class BattleConfig:
    """Unit stats and limits applied when a map is turned into a battle"""
    hp: int = DEFAULT_HP
    attack_power: int = DEFAULT_ATTACK_POWER
    elf_boost: int = 0
    max_rounds: Optional[int] = None  # None = run until one faction is gone

    def attack_power_for(self, faction: Faction) -> int:
        if faction is Faction.ELF:
            return self.attack_power + self.elf_boost
        return self.attack_power

@dataclass
class Event:
    kind: str
    round: int
    data: Dict

@dataclass
class Outcome:
    rounds: int
    remaining_hp: int
    winner: Optional[Faction]
    deaths: Dict[Faction, int] = field(default_factory=dict)

    @property
    def score(self) -> int:
        return self.rounds * self.remaining_hp

    @property
    def elf_deaths(self) -> int:
        return self.deaths.get(Faction.ELF, 0)

    def to_dict(self) -> Dict:
        return {
            "rounds": self.rounds,
            "remaining_hp": self.remaining_hp,
            "score": self.score,
            "winner": self.winner.name if self.winner else None,
            "deaths": {f.name: n for f, n in self.deaths.items()},
        }
