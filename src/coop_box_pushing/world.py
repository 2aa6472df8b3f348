from __future__ import annotations

from enum import Enum
from typing import Dict, List, Sequence, Tuple

import numpy as np

from .errors import OutOfBoundsError

Coord = Tuple[int, int]

# Seuken & Zilberstein style field: two agents below a two-cell heavy box,
# a light box off to the side and the goal on the top row.
DEFAULT_LAYOUT: Tuple[str, ...] = (
    "...G....",
    "........",
    "........",
    ".b.BB...",
    "........",
    "........",
    "..0..1..",
    "........",
)


class CellKind(Enum):
    OPEN = "."
    WALL = "#"
    SMALL_OBJECT = "b"
    LARGE_OBJECT = "B"
    GOAL = "G"


class Orientation(Enum):
    NORTH = 0
    EAST = 1
    SOUTH = 2
    WEST = 3
    INVALID = 4

    def turn_left(self) -> "Orientation":
        turn_map = {
            Orientation.NORTH: Orientation.WEST,
            Orientation.WEST: Orientation.SOUTH,
            Orientation.SOUTH: Orientation.EAST,
            Orientation.EAST: Orientation.NORTH,
        }
        return turn_map[self._checked()]

    def turn_right(self) -> "Orientation":
        turn_map = {
            Orientation.NORTH: Orientation.EAST,
            Orientation.EAST: Orientation.SOUTH,
            Orientation.SOUTH: Orientation.WEST,
            Orientation.WEST: Orientation.NORTH,
        }
        return turn_map[self._checked()]

    @property
    def forward_delta(self) -> Coord:
        orientation = self._checked()
        if orientation == Orientation.NORTH:
            return (-1, 0)
        if orientation == Orientation.SOUTH:
            return (1, 0)
        if orientation == Orientation.EAST:
            return (0, 1)
        return (0, -1)

    def _checked(self) -> "Orientation":
        if self == Orientation.INVALID:
            raise ValueError("Orientation is not set; the chance draw has not happened yet.")
        return self


COMPASS: Tuple[Orientation, ...] = (
    Orientation.NORTH,
    Orientation.EAST,
    Orientation.SOUTH,
    Orientation.WEST,
)


def offset(coord: Coord, delta: Coord) -> Coord:
    return (coord[0] + delta[0], coord[1] + delta[1])


_AGENT_CHARS = {"0": 0, "1": 1}


class GridLayout:
    """Immutable map of the box-pushing field.

    Built from rows of characters: ``.`` open, ``#`` wall, ``b`` small box,
    ``B`` large box (one or more contiguous cells), ``G`` goal and ``0``/``1``
    for the agents' start cells. Agent start cells are stored as open floor.
    """

    def __init__(self, rows: Sequence[str]):
        if not rows:
            raise ValueError("Layout must have at least one row")
        width = len(rows[0])
        if width == 0 or any(len(row) != width for row in rows):
            raise ValueError("Layout rows must be non-empty and of equal length")

        self.height = len(rows)
        self.width = width
        cells = np.full((self.height, self.width), CellKind.OPEN, dtype=object)
        starts: Dict[int, List[Coord]] = {0: [], 1: []}
        goals: List[Coord] = []
        small: List[Coord] = []
        large: List[Coord] = []

        for r, row in enumerate(rows):
            for c, char in enumerate(row):
                if char in _AGENT_CHARS:
                    starts[_AGENT_CHARS[char]].append((r, c))
                    continue
                try:
                    kind = CellKind(char)
                except ValueError:
                    raise ValueError(f"Unknown layout character {char!r} at ({r}, {c})") from None
                cells[r, c] = kind
                if kind == CellKind.GOAL:
                    goals.append((r, c))
                elif kind == CellKind.SMALL_OBJECT:
                    small.append((r, c))
                elif kind == CellKind.LARGE_OBJECT:
                    large.append((r, c))

        if len(goals) != 1:
            raise ValueError(f"Layout must contain exactly one goal cell, found {len(goals)}")
        if len(small) != 1:
            raise ValueError(f"Layout must contain exactly one small box cell, found {len(small)}")
        if not large:
            raise ValueError("Layout must contain at least one large box cell")
        for idx, coords in starts.items():
            if len(coords) != 1:
                raise ValueError(f"Layout must contain exactly one start cell for agent {idx}")
        _check_contiguous(large)

        cells.setflags(write=False)
        self._cells = cells
        self.rows: Tuple[str, ...] = tuple(rows)
        self.goal: Coord = goals[0]
        self.agent_starts: Tuple[Coord, Coord] = (starts[0][0], starts[1][0])
        self.small_start: Coord = small[0]
        anchor = min(large)
        self.large_start: Coord = anchor
        self.large_shape: Tuple[Coord, ...] = tuple(sorted((r - anchor[0], c - anchor[1]) for r, c in large))

    def in_bounds(self, coord: Coord) -> bool:
        return 0 <= coord[0] < self.height and 0 <= coord[1] < self.width

    def cell_kind(self, coord: Coord) -> CellKind:
        if not self.in_bounds(coord):
            raise OutOfBoundsError(f"Cell {coord} is outside the {self.height}x{self.width} grid")
        return self._cells[coord[0], coord[1]]

    def is_wall(self, coord: Coord) -> bool:
        """True for walls and for anything past the edge of the grid."""
        if not self.in_bounds(coord):
            return True
        return self._cells[coord[0], coord[1]] == CellKind.WALL

    def __repr__(self) -> str:
        return f"GridLayout(height={self.height}, width={self.width}, goal={self.goal})"


def _check_contiguous(coords: List[Coord]) -> None:
    remaining = set(coords)
    frontier = [coords[0]]
    remaining.discard(coords[0])
    while frontier:
        cell = frontier.pop()
        for orientation in COMPASS:
            nxt = offset(cell, orientation.forward_delta)
            if nxt in remaining:
                remaining.discard(nxt)
                frontier.append(nxt)
    if remaining:
        raise ValueError("Large box cells must form one contiguous block")
