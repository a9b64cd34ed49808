"""
Shortest-step planning.

A unit moves one tile per turn toward the closest tile that is in range of
an enemy. Both "closest" and "first step" ties are broken by reading order,
and the answer is derived from the distance map alone so it does not depend
on the order the BFS happened to discover tiles in.
"""

import numpy as np
from collections import deque
from typing import Iterable, Optional, Set

from .grid import Grid
from .model import Position

UNREACHED = -1


def distance_map(grid: Grid, source: Position, targets: Set[Position] = frozenset()) -> np.ndarray:
    """BFS distances from source over open tiles (UNREACHED where unreachable).

    Stops once the first target is dequeued: by then every tile at that
    distance has already been recorded, which is all the back-walk needs.
    """
    dist = np.full((grid.height, grid.width), UNREACHED, dtype=np.int32)
    dist[source] = 0
    frontier = deque([source])
    while frontier:
        pos = frontier.popleft()
        if pos in targets:
            break
        step = dist[pos] + 1
        for n in grid.open_neighbors(pos):
            if dist[n] == UNREACHED:
                dist[n] = step
                frontier.append(n)
    return dist


def nearest_destination(dist: np.ndarray, destinations: Iterable[Position]) -> Optional[Position]:
    """Reachable destination with the smallest distance, then reading order."""
    reached = [(int(dist[d]), d) for d in destinations if dist[d] != UNREACHED]
    if not reached:
        return None
    return min(reached)[1]


def first_step(grid: Grid, dist: np.ndarray, destination: Position) -> Position:
    """Reading-order-least distance-1 tile lying on a shortest path to destination."""
    level = int(dist[destination])
    frontier = {destination}
    while level > 1:
        level -= 1
        frontier = {n for p in frontier for n in grid.open_neighbors(p) if dist[n] == level}
    return min(frontier)


def next_step(grid: Grid, source: Position, destinations: Iterable[Position]) -> Optional[Position]:
    """Tile the unit at source should step onto, or None if nothing is reachable."""
    destinations = set(destinations)
    if not destinations:
        return None
    dist = distance_map(grid, source, destinations)
    target = nearest_destination(dist, destinations)
    if target is None or target == source:
        return None
    return first_step(grid, dist, target)
