"""Tests for turning map text into a battle state."""
import pytest
from battle.errors import MapParseError
from battle.model import BattleConfig, Faction
from battle.parser import parse_map
from sample_maps import SAMPLE


def test_parse_sample_units_in_reading_order():
    """Unit ids follow reading order and carry default stats."""
    state = parse_map(SAMPLE)
    units = sorted(state.registry, key=lambda u: u.id)
    assert [(u.faction, u.pos) for u in units] == [
        (Faction.GOBLIN, (1, 2)),
        (Faction.ELF, (2, 4)),
        (Faction.GOBLIN, (2, 5)),
        (Faction.GOBLIN, (3, 5)),
        (Faction.GOBLIN, (4, 3)),
        (Faction.ELF, (4, 5)),
    ]
    assert all(u.hp == 200 and u.attack_power == 3 for u in units)
    assert (state.grid.height, state.grid.width) == (7, 7)


def test_parse_marks_units_as_occupied_not_walls():
    state = parse_map(SAMPLE)
    assert state.grid.is_wall((0, 0))
    assert not state.grid.is_wall((1, 2))
    assert state.grid.occupant((1, 2)) == 0
    assert not state.grid.is_open((1, 2))
    assert state.grid.is_open((1, 1))


def test_parse_applies_elf_boost_only_to_elves():
    state = parse_map(SAMPLE, BattleConfig(elf_boost=12))
    powers = {u.faction: u.attack_power for u in state.registry}
    assert powers == {Faction.ELF: 15, Faction.GOBLIN: 3}


def test_parse_render_round_trips_map():
    assert parse_map(SAMPLE).render() == SAMPLE.splitlines()


def test_parse_ignores_trailing_blank_lines():
    state = parse_map("#####\n#E.G#\n#####\n\n\n")
    assert state.grid.height == 3


@pytest.mark.parametrize("text, message", [
    ("", "empty"),
    ("#####\n#E.G\n#####\n", "width"),
    ("#####\n#E?G#\n#####\n", "unknown map character"),
    ("#####\n.E.G#\n#####\n", "border"),
    ("#####\n#E.G#\n##.##\n", "border"),
])
def test_parse_rejects_malformed_maps(text, message):
    with pytest.raises(MapParseError, match=message):
        parse_map(text)


def test_parse_error_reports_location():
    with pytest.raises(MapParseError) as exc_info:
        parse_map("#####\n#E.x#\n#####\n")
    assert exc_info.value.line == 2
    assert exc_info.value.column == 4
    assert isinstance(exc_info.value, ValueError)
