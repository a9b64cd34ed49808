import numpy as np
from typing import Dict, Iterator, List, Optional
from .errors import InvariantViolation
from .model import Position

# Up, left, right, down: reading order of the four neighbors
NEIGHBOR_OFFSETS = ((-1, 0), (0, -1), (0, 1), (1, 0))

class Grid:
    """Wall topology plus a position -> unit id occupancy index.

    The map is enclosed by walls, so neighbors of any open tile are always
    inside the array and no bounds checks are done.
    """

    def __init__(self, walls: np.ndarray):
        self.walls = np.asarray(walls, dtype=bool)
        self.height, self.width = self.walls.shape
        self._occupants: Dict[Position, int] = {}

    def is_wall(self, pos: Position) -> bool:
        return bool(self.walls[pos])

    def occupant(self, pos: Position) -> Optional[int]:
        return self._occupants.get(pos)

    def is_open(self, pos: Position) -> bool:
        """Open means walkable right now: not a wall and not occupied."""
        return not self.walls[pos] and pos not in self._occupants

    def occupied(self) -> Dict[Position, int]:
        return dict(self._occupants)

    def neighbors(self, pos: Position) -> Iterator[Position]:
        r, c = pos
        for dr, dc in NEIGHBOR_OFFSETS:
            yield (r + dr, c + dc)

    def open_neighbors(self, pos: Position) -> List[Position]:
        return [n for n in self.neighbors(pos) if self.is_open(n)]

    def occupied_neighbors(self, pos: Position) -> List[int]:
        """Unit ids next to pos, in neighbor order."""
        return [self._occupants[n] for n in self.neighbors(pos) if n in self._occupants]

    # Occupancy updates. Only BattleState calls these so the registry
    # changes in the same operation.

    def place(self, unit_id: int, pos: Position) -> None:
        if self.walls[pos]:
            raise InvariantViolation(f"unit {unit_id} placed on wall at {pos}")
        if pos in self._occupants:
            raise InvariantViolation(
                f"unit {unit_id} placed on {pos} already held by unit {self._occupants[pos]}")
        self._occupants[pos] = unit_id

    def vacate(self, pos: Position) -> int:
        try:
            return self._occupants.pop(pos)
        except KeyError:
            raise InvariantViolation(f"vacating empty tile {pos}") from None

    def relocate(self, src: Position, dst: Position) -> None:
        unit_id = self.vacate(src)
        try:
            self.place(unit_id, dst)
        except InvariantViolation:
            self._occupants[src] = unit_id
            raise

    def render_walls(self) -> List[str]:
        return ["".join("#" if w else "." for w in row) for row in self.walls]
