"""Secondary effects of the one-time abilities unlocked by sinking the capital ship."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from itertools import groupby

from .cells import CellMark
from .errors import ValidationError
from .grid import Position
from .state import MatchState

logger = logging.getLogger(__name__)

THOR_MAX_HITS = 10


class Ability(Enum):
    """Available abilities.

    thor    - hits up to 10 random untouched cells.
    ironman - points at one cell of the smallest surviving ship, without firing.
    hulk    - destroys the whole ship under the targeted cell.
    """

    THOR = "thor"
    IRONMAN = "ironman"
    HULK = "hulk"

    @classmethod
    def parse(cls, name: str | Ability) -> Ability:
        if isinstance(name, Ability):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError as exc:
            raise ValidationError(f"Unknown ability {name!r}.") from exc


@dataclass(frozen=True)
class AbilityHit:
    """One cell touched by an ability."""

    position: Position
    hit: bool


def thor(state: MatchState, rng: random.Random) -> list[AbilityHit]:
    untouched = state.revealed.positions_where(lambda mark: mark is CellMark.UNKNOWN)
    targets = rng.sample(untouched, min(len(untouched), THOR_MAX_HITS))
    results: list[AbilityHit] = []
    for pos in targets:
        cell = state.definition.get(pos)
        if cell.is_ship:
            state.definition.set(pos, cell.destroyed())
            state.revealed.set(pos, CellMark.SHIP)
        else:
            state.revealed.set(pos, CellMark.WATER)
        results.append(AbilityHit(pos, cell.is_ship))
    return results


def ironman(state: MatchState, rng: random.Random) -> list[AbilityHit]:
    alive = sorted(
        ((cell.weight, pos) for pos, cell in state.definition.items() if cell.is_alive),
        key=lambda item: item[0],
    )
    if not alive:
        return []
    _, smallest = next(groupby(alive, key=lambda item: item[0]))
    candidates = [pos for _, pos in smallest]
    return [AbilityHit(rng.choice(candidates), False)]


def hulk(state: MatchState, target: Position) -> list[AbilityHit]:
    targeted = state.definition.get(target)
    if not targeted.is_ship:
        return []
    ship_id = targeted.ship_id
    results: list[AbilityHit] = []
    for pos, cell in state.definition.items():
        if cell.is_ship and cell.ship_id == ship_id:
            state.definition.set(pos, cell.destroyed())
            state.revealed.set(pos, CellMark.SHIP)
            results.append(AbilityHit(pos, True))
    return results


def apply_ability(
    ability: Ability, state: MatchState, target: Position, rng: random.Random
) -> list[AbilityHit]:
    """Run the effect of ``ability`` against ``state`` and report touched cells."""
    if ability is Ability.THOR:
        results = thor(state, rng)
    elif ability is Ability.IRONMAN:
        results = ironman(state, rng)
    else:
        results = hulk(state, target)
    logger.info(
        "ability_effect_applied",
        extra={
            "ability": ability.value,
            "cells": len(results),
            "hits": sum(1 for result in results if result.hit),
        },
    )
    return results
