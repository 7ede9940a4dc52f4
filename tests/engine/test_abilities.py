"""Tests for ability effects."""

import random

import pytest

from battleships.engine.abilities import THOR_MAX_HITS, Ability, apply_ability, hulk, ironman, thor
from battleships.engine.cells import CellMark
from battleships.engine.errors import ValidationError
from battleships.engine.grid import Position
from battleships.engine.state import MatchState


def _state(fixed_supplier) -> MatchState:
    state = MatchState()
    state.set_definition(fixed_supplier(12, 12, random.Random(0)))
    return state


@pytest.mark.parametrize("name", ["thor", "THOR", " Thor "])
def test_parse_is_case_insensitive(name: str) -> None:
    assert Ability.parse(name) is Ability.THOR


def test_parse_rejects_unknown_ability() -> None:
    with pytest.raises(ValidationError):
        Ability.parse("loki")


def test_thor_hits_up_to_ten_unknown_cells(fixed_supplier) -> None:
    state = _state(fixed_supplier)
    results = thor(state, random.Random(3))

    assert len(results) == THOR_MAX_HITS
    assert len({result.position for result in results}) == THOR_MAX_HITS
    for result in results:
        mark = state.revealed.get(result.position)
        assert mark is (CellMark.SHIP if result.hit else CellMark.WATER)
        if result.hit:
            assert not state.definition.get(result.position).is_alive


def test_thor_only_touches_remaining_unknown_cells(fixed_supplier) -> None:
    state = _state(fixed_supplier)
    for pos, _ in list(state.revealed.items())[3:]:
        state.revealed.set(pos, CellMark.WATER)
    results = thor(state, random.Random(0))
    assert {result.position for result in results} == {
        Position(0, 0),
        Position(0, 1),
        Position(0, 2),
    }


def test_ironman_points_at_smallest_alive_ship(fixed_supplier, fleet_cells) -> None:
    state = _state(fixed_supplier)
    before = state.revealed.copy()
    results = ironman(state, random.Random(1))

    assert len(results) == 1
    assert not results[0].hit
    assert (results[0].position.row, results[0].position.col) in fleet_cells[2]
    assert state.revealed == before


def test_ironman_skips_sunk_ships(fixed_supplier, fleet_cells) -> None:
    state = _state(fixed_supplier)
    for row, col in fleet_cells[2]:
        pos = Position(row, col)
        state.definition.set(pos, state.definition.get(pos).destroyed())
    results = ironman(state, random.Random(1))
    assert (results[0].position.row, results[0].position.col) in fleet_cells[3]


def test_hulk_destroys_whole_ship(fixed_supplier, fleet_cells) -> None:
    state = _state(fixed_supplier)
    results = hulk(state, Position(0, 7))

    assert len(results) == 6
    assert all(result.hit for result in results)
    for row, col in fleet_cells[6]:
        assert state.revealed.get(Position(row, col)) is CellMark.SHIP
    assert not state.has_alive_weight(6)


def test_hulk_on_water_does_nothing(fixed_supplier) -> None:
    state = _state(fixed_supplier)
    assert hulk(state, Position(11, 0)) == []


def test_apply_ability_dispatches(fixed_supplier) -> None:
    state = _state(fixed_supplier)
    results = apply_ability(Ability.HULK, state, Position(11, 11), random.Random(0))
    assert {result.position for result in results} == {Position(11, 10), Position(11, 11)}
