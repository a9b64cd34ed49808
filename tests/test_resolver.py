"""Tests for a single unit's move-then-attack turn."""
from battle.model import BattleConfig, Faction
from battle.parser import parse_map
from battle.resolver import CombatResolver


def unit_at(state, pos):
    return state.registry.get(state.grid.occupant(pos))


def test_attack_prefers_lowest_hp_then_reading_order():
    state = parse_map("#######\n#..G..#\n#..EG.#\n#..G..#\n#######\n")
    unit_at(state, (1, 3)).hp = 4
    unit_at(state, (2, 4)).hp = 2
    unit_at(state, (3, 3)).hp = 2
    elf = unit_at(state, (2, 3))

    report = CombatResolver(state).take_turn(elf, 1)

    assert not report.moved and report.attacked
    assert [e.kind for e in report.events] == ["Damage", "Destroyed"]
    assert report.events[0].data["target"] == 2  # the goblin at (2, 4)
    assert state.grid.is_open((2, 4))
    assert unit_at(state, (3, 3)).hp == 2
    assert unit_at(state, (1, 3)).hp == 4


def test_adjacent_unit_attacks_without_moving():
    state = parse_map("######\n#EG..#\n######\n")
    elf = unit_at(state, (1, 1))
    report = CombatResolver(state).take_turn(elf, 1)
    assert elf.pos == (1, 1)
    assert not report.moved
    assert unit_at(state, (1, 2)).hp == 197


def test_unit_moves_one_step_then_attacks_if_now_adjacent():
    state = parse_map("######\n#E.G.#\n######\n")
    elf = unit_at(state, (1, 1))
    report = CombatResolver(state).take_turn(elf, 1)
    assert elf.pos == (1, 2)
    assert [e.kind for e in report.events] == ["Moved", "Damage"]
    assert unit_at(state, (1, 3)).hp == 197


def test_unit_moves_only_one_tile_per_turn():
    state = parse_map("########\n#E....G#\n########\n")
    elf = unit_at(state, (1, 1))
    report = CombatResolver(state).take_turn(elf, 1)
    assert elf.pos == (1, 2)
    assert report.moved and not report.attacked


def test_unit_with_nothing_reachable_does_nothing():
    state = parse_map("#######\n#E.#..#\n#..#.G#\n#######\n")
    elf = unit_at(state, (1, 1))
    report = CombatResolver(state).take_turn(elf, 1)
    assert report.enemies_remaining
    assert not report.moved and not report.attacked
    assert report.events == []
    assert elf.pos == (1, 1) and elf.hp == 200


def test_unit_blocked_by_allies_does_nothing():
    state = parse_map("#######\n#EE.G.#\n#######\n")
    elf = unit_at(state, (1, 1))
    report = CombatResolver(state).take_turn(elf, 1)
    assert not report.moved
    assert elf.pos == (1, 1)


def test_no_enemies_left_signals_battle_end():
    state = parse_map("######\n#E.E.#\n######\n")
    report = CombatResolver(state).take_turn(unit_at(state, (1, 1)), 3)
    assert report.enemies_remaining is False
    assert report.events == []


def test_kill_is_visible_immediately():
    state = parse_map("#####\n#EG.#\n#####\n", BattleConfig(elf_boost=297))
    elf = unit_at(state, (1, 1))
    goblin = unit_at(state, (1, 2))
    report = CombatResolver(state).take_turn(elf, 1)
    assert goblin.hp == 0
    assert goblin.id not in state.registry
    assert state.grid.is_open((1, 2))
    assert report.events[-1].data == {
        "unit_id": goblin.id, "faction": "GOBLIN", "killer": elf.id, "pos": [1, 2]}
    assert not state.registry.has_living(Faction.GOBLIN)
