"""Tests for the session-facing game manager."""

import logging
import threading

import pytest

from battleships.engine.errors import InvalidSessionError, ValidationError
from battleships.service import (
    FireRequest,
    GameManager,
    InMemorySessionStore,
    LoggingSink,
    MemorySink,
    ResetRequest,
    StatusRequest,
)
from battleships.settings import GameSettings


class ExplodingSink:
    def publish(self, info) -> None:
        raise RuntimeError("sink down")


def _manager(fixed_supplier, sink=None, **settings) -> GameManager:
    return GameManager(
        settings=GameSettings(**{"map_count": 2, **settings}),
        store=InMemorySessionStore(),
        sink=sink or MemorySink(),
        board_supplier=fixed_supplier,
        rng_seed=0,
    )


def test_fire_without_target_returns_board(fixed_supplier) -> None:
    manager = _manager(fixed_supplier)
    response = manager.fire(FireRequest(token="abc"))

    assert response.result is False
    assert set(response.grid) == {"*"}
    assert response.map_count == 2
    assert manager.store.get("abc-False") is not None


def test_fire_persists_between_calls(fixed_supplier) -> None:
    manager = _manager(fixed_supplier)
    first = manager.fire(FireRequest(token="abc", row=11, column=0))
    repeat = manager.fire(FireRequest(token="Bearer abc", row=11, column=0))

    assert first.result is True
    assert repeat.result is False
    assert repeat.move_count == 1


def test_simulation_sessions_are_separate(fixed_supplier) -> None:
    manager = _manager(fixed_supplier)
    manager.fire(FireRequest(token="abc", row=11, column=0))
    simulated = manager.fire(FireRequest(token="abc", is_simulation=True, row=11, column=0))
    assert simulated.result is True
    assert simulated.move_count == 1


@pytest.mark.parametrize("row, column", [(-1, 0), (0, 12), (12, 12)])
def test_out_of_range_coordinates_are_rejected(fixed_supplier, row, column) -> None:
    manager = _manager(fixed_supplier)
    with pytest.raises(ValidationError):
        manager.fire(FireRequest(token="abc", row=row, column=column))
    assert manager.store.get("abc-False") is None


def test_fire_with_ability_requires_full_request(fixed_supplier) -> None:
    manager = _manager(fixed_supplier)
    with pytest.raises(ValidationError):
        manager.fire_with_ability(FireRequest(token="abc", row=1, column=1))
    with pytest.raises(ValidationError):
        manager.fire_with_ability(FireRequest(token="abc", ability="thor"))
    with pytest.raises(ValidationError):
        manager.fire_with_ability(FireRequest(token="abc", row=1, column=1, ability="loki"))


def test_fire_with_ability_after_capital_sinks(fixed_supplier, fleet_cells) -> None:
    manager = _manager(fixed_supplier)
    for row, col in fleet_cells[9]:
        response = manager.fire(FireRequest(token="abc", row=row, column=col))
    assert response.ability_available is True

    hulk = manager.fire_with_ability(FireRequest(token="abc", row=11, column=11, ability="HULK"))
    assert hulk.result is True
    assert len(hulk.ability_result) == 2
    assert hulk.to_payload()["abilityResult"][0]["point"] == {"x": 10, "y": 11}


def test_blank_token_is_rejected(fixed_supplier) -> None:
    manager = _manager(fixed_supplier)
    with pytest.raises(ValidationError):
        manager.fire(FireRequest(token="Bearer "))


def test_reset_and_status_need_a_session(fixed_supplier) -> None:
    manager = _manager(fixed_supplier)
    with pytest.raises(InvalidSessionError):
        manager.reset(ResetRequest(token="abc"))
    with pytest.raises(InvalidSessionError):
        manager.status(StatusRequest(token="abc"))


def test_reset_and_status_after_play(fixed_supplier) -> None:
    manager = _manager(fixed_supplier, available_tries=3)
    manager.fire(FireRequest(token="abc", row=11, column=0))
    manager.fire(FireRequest(token="abc", row=0, column=1))

    status = manager.status(StatusRequest(token="abc"))
    assert (status.map_id, status.map_count, status.move_count, status.total_move_count) == (
        0,
        2,
        2,
        2,
    )

    assert manager.reset(ResetRequest(token="abc", is_simulation=False)).available_tries == 3
    assert manager.status(StatusRequest(token="abc")).move_count == 0


def test_simulated_reset_spends_a_try(fixed_supplier) -> None:
    manager = _manager(fixed_supplier, available_tries=3)
    manager.fire(FireRequest(token="abc", is_simulation=True))
    response = manager.reset(ResetRequest(token="abc", is_simulation=True))
    assert response.available_tries == 2
    assert response.to_payload() == {"availableTries": 2}


def test_notifications_carry_session_identity(fixed_supplier) -> None:
    sink = MemorySink()
    manager = _manager(fixed_supplier, sink=sink)
    manager.fire(FireRequest(token="Bearer abc", is_simulation=True, row=0, column=1))

    assert len(sink.events) == 2
    event = sink.events[-1]
    assert event.token == "abc"
    assert event.is_simulation is True
    assert event.revealed_grid[1] == "X"
    assert event.to_payload()["isSimulation"] is True


def test_sink_failures_do_not_reach_caller(fixed_supplier) -> None:
    manager = _manager(fixed_supplier, sink=ExplodingSink())
    response = manager.fire(FireRequest(token="abc", row=11, column=0))
    assert response.result is True


def test_concurrent_shots_are_serialized(fixed_supplier) -> None:
    manager = _manager(fixed_supplier)
    manager.fire(FireRequest(token="abc"))
    cells = [(row, col) for row in range(7, 9) for col in range(12)]
    results = []

    def worker(row: int, col: int) -> None:
        results.append(manager.fire(FireRequest(token="abc", row=row, column=col)).result)

    threads = [threading.Thread(target=worker, args=cell) for cell in cells]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert all(results)
    status = manager.status(StatusRequest(token="abc"))
    assert status.move_count == len(cells)


def test_logging_sink_summarizes_changes(fixed_supplier, caplog: pytest.LogCaptureFixture) -> None:
    manager = _manager(fixed_supplier, sink=LoggingSink(logging.INFO))
    with caplog.at_level(logging.INFO, logger="battleships.service.notifications"):
        manager.fire(FireRequest(token="abc", row=11, column=0))
    records = [record for record in caplog.records if record.getMessage() == "game_state_changed"]
    assert len(records) == 2
    assert records[-1].token == "abc"
    assert records[-1].move_count == 1
