"""
Map Parsing.

Turns the textual battle map into a BattleState:
  #  wall      .  open floor
  G  goblin    E  elf
Unit ids are handed out in reading order.
"""

import numpy as np
from typing import List, Optional

from .errors import MapParseError
from .grid import Grid
from .model import BattleConfig, Faction, Tile, Unit
from .state import BattleState

UNIT_SYMBOLS = {f.value: f for f in Faction}
TILE_SYMBOLS = {t.value for t in Tile}


def _split_rows(text: str) -> List[str]:
    rows = text.splitlines()
    while rows and not rows[-1].strip():
        rows.pop()
    if not rows:
        raise MapParseError("map is empty")
    return rows


def parse_map(text: str, config: Optional[BattleConfig] = None) -> BattleState:
    """Parse map text into a fresh battle state with stats taken from config."""
    config = config or BattleConfig()
    rows = _split_rows(text)
    width = len(rows[0])
    height = len(rows)

    walls = np.zeros((height, width), dtype=bool)
    units: List[Unit] = []
    for r, line in enumerate(rows):
        if len(line) != width:
            raise MapParseError(f"row has width {len(line)}, expected {width}", line=r + 1)
        for c, ch in enumerate(line):
            if ch == Tile.WALL.value:
                walls[r, c] = True
            elif ch in UNIT_SYMBOLS:
                faction = UNIT_SYMBOLS[ch]
                units.append(Unit(
                    id=len(units),
                    faction=faction,
                    pos=(r, c),
                    hp=config.hp,
                    attack_power=config.attack_power_for(faction),
                ))
            elif ch not in TILE_SYMBOLS:
                raise MapParseError(f"unknown map character {ch!r}", line=r + 1, column=c + 1)

    # Neighbor lookups never check bounds, so the border must be solid.
    border = np.ones_like(walls)
    border[1:-1, 1:-1] = False
    gaps = np.argwhere(border & ~walls)
    if len(gaps):
        r, c = (int(v) for v in gaps[0])
        raise MapParseError("map border must be walls", line=r + 1, column=c + 1)

    state = BattleState(Grid(walls))
    for unit in units:
        state.add_unit(unit)
    return state
