"""Contains all global enumeration classes used throughout the project."""

from __future__ import annotations

from enum import Enum


class Direction(Enum):
    """Defines the cardinal directions used for tile adjacency and propagation.

    The value of each direction is its index into the last axis of the adjacency rules array, so the order of the
    members is significant and must not change.
    """

    EAST = 0
    """Direction towards increasing x."""
    SOUTH = 1
    """Direction towards increasing y."""
    WEST = 2
    """Direction towards decreasing x."""
    NORTH = 3
    """Direction towards decreasing y."""

    def reverse(self) -> Direction:
        """Returns the opposite direction of the current direction."""
        match self:
            case Direction.EAST:
                return Direction.WEST
            case Direction.SOUTH:
                return Direction.NORTH
            case Direction.WEST:
                return Direction.EAST
            case Direction.NORTH:
                return Direction.SOUTH

    def to_vector(self) -> tuple[int, int]:
        """Returns the (dx, dy) offset for the direction."""
        match self:
            case Direction.EAST:
                return (1, 0)
            case Direction.SOUTH:
                return (0, 1)
            case Direction.WEST:
                return (-1, 0)
            case Direction.NORTH:
                return (0, -1)


class CellStatus(Enum):
    """Defines the state of a single output cell during a generation run."""

    UNCOLLAPSED = 0
    """The cell still has more than one possible tile."""
    COLLAPSED = 1
    """The cell has exactly one possible tile left, either chosen directly or forced by propagation."""
    CONTRADICTED = 2
    """Propagation removed every possible tile from the cell."""
