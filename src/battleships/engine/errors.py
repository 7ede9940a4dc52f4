"""Exception hierarchy shared by the engine and the session service."""

from __future__ import annotations


class BattleshipsError(Exception):
    """Base class for every error raised by the package."""


class ValidationError(BattleshipsError, ValueError):
    """A request could not be accepted (bad coordinate, ability name, token...)."""


class OutOfBoundsError(ValidationError, IndexError):
    """A grid position or index lies outside the board."""


class InvalidSessionError(BattleshipsError, LookupError):
    """An operation needs an existing session but none was found."""


class InvariantViolation(BattleshipsError, RuntimeError):
    """The match state contains a value that cannot occur in a consistent game."""


class SnapshotError(BattleshipsError):
    """A persisted session snapshot could not be decoded."""


class PlacementError(BattleshipsError, RuntimeError):
    """A ship could not be placed within the configured number of attempts."""
