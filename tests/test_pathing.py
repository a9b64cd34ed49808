"""Tests for shortest-step planning and its reading-order tie-breaks."""
import numpy as np
from battle.parser import parse_map
from battle.pathing import UNREACHED, distance_map, first_step, nearest_destination, next_step

OPEN_ROOM = """\
#######
#.....#
#..E..#
#.....#
#.....#
#######
"""


def test_distance_map_counts_steps_over_open_tiles():
    grid = parse_map(OPEN_ROOM).grid
    dist = distance_map(grid, (2, 3))
    assert dist[2, 3] == 0
    assert dist[1, 3] == 1
    assert dist[4, 1] == 4
    assert dist[0, 0] == UNREACHED


def test_distance_map_stops_after_first_target_level():
    grid = parse_map(OPEN_ROOM).grid
    dist = distance_map(grid, (2, 3), {(1, 3)})
    assert dist[1, 3] == 1
    assert dist[4, 5] == UNREACHED


def test_equal_destinations_pick_reading_order_least():
    """(3, 1) and (3, 5) are both 3 steps away; the left one wins."""
    grid = parse_map(OPEN_ROOM).grid
    assert next_step(grid, (2, 3), {(3, 5), (3, 1)}) == (2, 2)


def test_equal_first_steps_pick_reading_order_least():
    """Going down-right, stepping right beats stepping down."""
    grid = parse_map(OPEN_ROOM).grid
    assert next_step(grid, (2, 3), {(3, 5)}) == (2, 4)
    assert next_step(grid, (2, 3), {(4, 4)}) == (2, 4)


def test_destination_tie_break_precedes_step_tie_break():
    """Destination (2, 4) is chosen first, then the best step toward it."""
    state = parse_map("#######\n#.E...#\n#.....#\n#...G.#\n#######\n")
    goblin = state.grid.occupant((3, 4))
    assert goblin is not None
    destinations = state.grid.open_neighbors((3, 4))
    assert set(destinations) == {(2, 4), (3, 3), (3, 5)}
    assert next_step(state.grid, (1, 2), destinations) == (1, 3)


def test_closest_destination_beats_reading_order():
    grid = parse_map(OPEN_ROOM).grid
    assert next_step(grid, (2, 3), {(1, 1), (4, 3)}) == (3, 3)


def test_nearest_destination_depends_only_on_distances():
    dist = np.full((5, 7), UNREACHED, dtype=np.int32)
    dist[3, 5] = 2
    dist[3, 1] = 2
    dist[1, 1] = 3
    assert nearest_destination(dist, [(3, 5), (1, 1), (3, 1)]) == (3, 1)
    assert nearest_destination(dist, [(1, 1), (3, 1), (3, 5)]) == (3, 1)
    assert nearest_destination(dist, [(4, 4)]) is None


def test_first_step_walks_back_from_destination():
    grid = parse_map(OPEN_ROOM).grid
    dist = distance_map(grid, (2, 3))
    assert first_step(grid, dist, (4, 1)) == (2, 2)
    assert first_step(grid, dist, (1, 3)) == (1, 3)


def test_units_block_paths():
    state = parse_map("#######\n#E.G..#\n###.###\n#.....#\n#######\n")
    # The goblin plugs the only way down, so the elf cannot reach row 3.
    assert next_step(state.grid, (1, 1), {(3, 3)}) is None
    assert next_step(state.grid, (1, 1), {(1, 2)}) == (1, 2)


def test_walled_off_destination_is_unreachable():
    state = parse_map("#######\n#E.#..#\n#..#..#\n#######\n")
    assert next_step(state.grid, (1, 1), {(1, 4), (2, 5)}) is None
    assert next_step(state.grid, (1, 1), set()) is None


def test_path_goes_around_walls():
    state = parse_map("#######\n#E#...#\n#.#.#.#\n#...#.#\n#######\n")
    assert next_step(state.grid, (1, 1), {(1, 5)}) == (2, 1)
