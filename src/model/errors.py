"""Contains the exceptions raised by the rule learner and the WFC algorithm."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from model.grid_state import GridState


class WFCError(Exception):
    """Base class for all errors reported by the tilemap generator."""


class EmptyCatalogError(WFCError):
    """Raised when no tiles were learned, so there is nothing to place."""

    def __init__(self, message: str = "The tile catalog is empty (no tiles were learned from the sample)") -> None:
        super().__init__(message)


class EmptyDomainError(WFCError):
    """Raised when a tile has to be chosen from a cell without any possible tiles."""

    def __init__(self, message: str = "Cannot choose a tile from an empty domain") -> None:
        super().__init__(message)


class InvalidDimensionsError(WFCError):
    """Raised for non-positive output dimensions or inverted region bounds."""


class RulesNotLearnedError(WFCError):
    """Raised when a tilemap is generated before any adjacency rules were learned."""

    def __init__(self, message: str = "No adjacency rules learned yet, call learn() first") -> None:
        super().__init__(message)


class ContradictionError(WFCError):
    """Raised when propagation removed every possible tile from a cell.

    The algorithm does not backtrack, so a contradiction ends the current run. Generating again with a different seed
    or a smaller output size may succeed.

    Attributes:
        x: The x coordinate of the contradicted cell.
        y: The y coordinate of the contradicted cell.
        grid_state: The partially solved grid state at the time of the contradiction (None if not available).
    """

    x: int
    y: int
    grid_state: GridState | None

    def __init__(self, x: int, y: int, grid_state: GridState | None = None) -> None:
        super().__init__(f"Contradiction at cell ({x}, {y}): no tile satisfies the neighboring constraints")
        self.x = x
        self.y = y
        self.grid_state = grid_state

    @property
    def coords(self) -> tuple[int, int]:
        """The (x, y) coordinates of the contradicted cell."""
        return self.x, self.y
