"""Battleships game target: hidden-fleet boards, abilities and session handling."""

__version__ = "0.1.0"
