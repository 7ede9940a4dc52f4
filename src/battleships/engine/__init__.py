"""Game-target engine exports."""

from .abilities import Ability, AbilityHit
from .cells import CellDefinition, CellMark, CellState
from .errors import (
    BattleshipsError,
    InvalidSessionError,
    InvariantViolation,
    OutOfBoundsError,
    PlacementError,
    SnapshotError,
    ValidationError,
)
from .fleet import CAPITAL_WEIGHT, FLEET, ShipType
from .grid import Grid, NeighbourPattern, Position
from .orchestrator import MatchOrchestrator, MatchPhase
from .placement import FleetGenerator, fixed_board_supplier, random_board_supplier
from .state import MatchState, MatchStateSnapshot

__all__ = [
    "Ability",
    "AbilityHit",
    "BattleshipsError",
    "CAPITAL_WEIGHT",
    "CellDefinition",
    "CellMark",
    "CellState",
    "FLEET",
    "FleetGenerator",
    "Grid",
    "InvalidSessionError",
    "InvariantViolation",
    "MatchOrchestrator",
    "MatchPhase",
    "MatchState",
    "MatchStateSnapshot",
    "NeighbourPattern",
    "OutOfBoundsError",
    "PlacementError",
    "Position",
    "ShipType",
    "SnapshotError",
    "ValidationError",
    "fixed_board_supplier",
    "random_board_supplier",
]
