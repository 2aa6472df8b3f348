from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Tuple

from .world import Coord, Orientation


@dataclass
class AgentState:
    index: int
    row: int
    col: int
    orientation: Orientation = Orientation.INVALID

    def position(self) -> Coord:
        return (self.row, self.col)


@dataclass(frozen=True)
class MovableObject:
    """A box anchored at (row, col) covering ``shape`` offsets from the anchor."""

    row: int
    col: int
    shape: Tuple[Coord, ...] = ((0, 0),)

    def position(self) -> Coord:
        return (self.row, self.col)

    def cells(self) -> Tuple[Coord, ...]:
        return tuple((self.row + dr, self.col + dc) for dr, dc in self.shape)

    def occupies(self, coord: Coord) -> bool:
        return coord in self.cells()

    def moved(self, delta: Coord) -> "MovableObject":
        return replace(self, row=self.row + delta[0], col=self.col + delta[1])
