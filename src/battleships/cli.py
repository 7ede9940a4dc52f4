"""Command-line driver for playing against a local game target."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import Sequence

from opentelemetry.instrumentation.logging import LoggingInstrumentor

from battleships.engine.abilities import Ability
from battleships.engine.cells import CellDefinition, CellMark
from battleships.engine.errors import BattleshipsError, ValidationError
from battleships.engine.grid import Grid, Position
from battleships.engine.render import ROW_LABELS, format_grid
from battleships.service import FireRequest, GameManager, MemorySink, ResetRequest, StatusRequest
from battleships.settings import GameSettings
from battleships.telemetry import configure_console_logging, init_telemetry

LOCAL_TOKEN = "local-player"


@dataclass(frozen=True)
class Command:
    """One parsed line of player input."""

    action: str
    position: Position | None = None
    ability: Ability | None = None


def parse_coordinate(text: str, rows: int = 12, columns: int = 12) -> Position:
    cleaned = text.strip().upper()
    if not cleaned:
        raise ValidationError("Empty coordinate.")
    if cleaned[0].isalpha():
        if cleaned[0] not in ROW_LABELS[:rows]:
            raise ValidationError(f"Row must be between A and {ROW_LABELS[rows - 1]}.")
        row = ROW_LABELS.index(cleaned[0])
        try:
            col = int(cleaned[1:]) - 1
        except ValueError as exc:
            raise ValidationError(f"Column must be a number between 1 and {columns}.") from exc
    else:
        parts = cleaned.split()
        if len(parts) != 2:
            raise ValidationError("Use formats like A5 or '3 7'.")
        try:
            row, col = map(int, parts)
        except ValueError as exc:
            raise ValidationError("Use formats like A5 or '3 7'.") from exc
    if row not in range(rows) or col not in range(columns):
        raise ValidationError(f"Coordinates must be within the {rows}x{columns} board.")
    return Position(row, col)


def parse_command(text: str, rows: int = 12, columns: int = 12) -> Command:
    cleaned = text.strip()
    lowered = cleaned.lower()
    if lowered in {"q", "quit", "exit"}:
        return Command("quit")
    if lowered in {"status", "reset"}:
        return Command(lowered)
    head, _, rest = cleaned.partition(" ")
    if head.lower() in {ability.value for ability in Ability}:
        return Command("ability", parse_coordinate(rest, rows, columns), Ability.parse(head))
    return Command("fire", parse_coordinate(cleaned, rows, columns))


def _describe(response, position: Position) -> str:
    label = f"{ROW_LABELS[position.row]}{position.col + 1}"
    if not response.result:
        return f"Shot at {label} was not accepted."
    outcome = "hit" if response.cell == CellMark.SHIP.marker else "miss"
    text = f"Fired at {label}: {outcome} (move {response.move_count})"
    if response.ability_available:
        text += " - an ability is ready (thor/ironman/hulk <cell>)"
    return text


def _board_from_event(sink: MemorySink, settings: GameSettings) -> tuple[Grid[CellMark], Grid[CellDefinition]]:
    event = sink.events[-1]
    revealed: Grid[CellMark] = Grid(settings.rows, settings.columns, default=CellMark.UNKNOWN)
    revealed.replace_all([CellMark.from_marker(marker) for marker in event.revealed_grid])
    definition: Grid[CellDefinition] = Grid(settings.rows, settings.columns, default=CellDefinition())
    definition.replace_all(
        [CellDefinition.from_weight(cell.weight) for cell in event.definition_grid]
    )
    return revealed, definition


def play_game(seed: int | None = None, maps: int = 1, reveal: bool = False) -> None:
    print("Welcome to Battleships!\n")
    settings = GameSettings.from_env(map_count=maps)
    sink = MemorySink()
    manager = GameManager(settings=settings, sink=sink, rng_seed=seed)
    manager.fire(FireRequest(token=LOCAL_TOKEN))

    while True:
        revealed, definition = _board_from_event(sink, settings)
        print(format_grid(revealed, definition if reveal else None))
        raw = input("\nTarget (A5, '3 7', 'hulk A5', status, reset, q): ")
        try:
            command = parse_command(raw, settings.rows, settings.columns)
        except ValidationError as exc:
            print(f"Invalid input: {exc}")
            continue

        try:
            if command.action == "quit":
                raise SystemExit("Goodbye!")
            if command.action == "status":
                status = manager.status(StatusRequest(token=LOCAL_TOKEN))
                print(
                    f"Map {status.map_id + 1}/{status.map_count}, moves {status.move_count}, "
                    f"total moves {status.total_move_count}"
                )
                continue
            if command.action == "reset":
                reset = manager.reset(ResetRequest(token=LOCAL_TOKEN))
                print(f"Game reset. Tries left: {reset.available_tries}")
                continue
            position = command.position
            if position is None:
                print(f"Unsupported command {command.action!r}.")
                continue
            request = FireRequest(
                token=LOCAL_TOKEN,
                row=position.row,
                column=position.col,
                ability=command.ability.value if command.ability else None,
            )
            if command.ability is None:
                response = manager.fire(request)
            else:
                response = manager.fire_with_ability(request)
                for result in response.ability_result:
                    label = f"{ROW_LABELS[result.point.y]}{result.point.x + 1}"
                    print(f"  {command.ability.value}: {label} {'hit' if result.hit else 'marked'}")
        except BattleshipsError as exc:
            print(f"Request failed: {exc}")
            continue

        print(_describe(response, position))
        if response.game_finished:
            print("\nAll maps cleared. Congratulations!")
            return


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Play Battleships against a local game target.")
    parser.add_argument(
        "--seed", type=int, default=None, help="Optional RNG seed for reproducibility."
    )
    parser.add_argument("--maps", type=int, default=1, help="Number of maps in the match.")
    parser.add_argument(
        "--reveal", action="store_true", help="Show the hidden ships on the board."
    )
    args = parser.parse_args(argv)
    configure_console_logging()
    init_telemetry()
    LoggingInstrumentor().instrument()
    play_game(seed=args.seed, maps=args.maps, reveal=args.reveal)


if __name__ == "__main__":
    main()
