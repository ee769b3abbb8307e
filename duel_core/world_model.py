from __future__ import annotations

import csv
import math
from pathlib import Path
from typing import Dict, Iterable, List, Sequence, Tuple

import numpy as np

from .errors import MapFormatError
from .geometry import Point, distance

WALL_HEIGHT = 3.0
COVER_HEIGHT = 1.0

# Layout legend: obstruction height per symbol. Markers sit on open floor.
TILE_HEIGHTS: Dict[str, float] = {
    "#": WALL_HEIGHT,
    "c": COVER_HEIGHT,
    ".": 0.0,
    "H": 0.0,
    "F": 0.0,
    "Z": 0.0,
}
HIDING_SPOT_MARK = "H"
SPAWN_MARKS = ("F", "Z")


class ArenaMap:
    """Static arena geometry: a grid of cells, each with an obstruction height.

    Cells are indexed ``heights[row, col]`` with ``col = x // grid_size`` and
    ``row = y // grid_size``. Anything outside the grid is treated as solid.
    """

    def __init__(
        self,
        heights: np.ndarray,
        grid_size: float = 1.0,
        hiding_spots: Sequence[Point] = (),
        spawns: Dict[str, Point] | None = None,
    ):
        heights = np.asarray(heights, dtype=float)
        if heights.ndim != 2 or heights.size == 0:
            raise MapFormatError("arena heights must be a non-empty 2-D array")
        if grid_size <= 0:
            raise MapFormatError("grid_size must be positive")
        self.heights = heights
        self.grid_size = float(grid_size)
        self.hiding_spots: Tuple[Point, ...] = tuple(hiding_spots)
        self.spawns: Dict[str, Point] = dict(spawns or {})

    @property
    def rows(self) -> int:
        return int(self.heights.shape[0])

    @property
    def cols(self) -> int:
        return int(self.heights.shape[1])

    def to_cell(self, x: float, y: float) -> Tuple[int, int]:
        return int(math.floor(x / self.grid_size)), int(math.floor(y / self.grid_size))

    def in_bounds(self, cell: Tuple[int, int]) -> bool:
        col, row = cell
        return 0 <= col < self.cols and 0 <= row < self.rows

    def obstruction_at(self, x: float, y: float) -> float:
        cell = self.to_cell(x, y)
        if not self.in_bounds(cell):
            return math.inf
        return float(self.heights[cell[1], cell[0]])

    def is_walkable(self, x: float, y: float) -> bool:
        return self.obstruction_at(x, y) <= 0.0

    def line_of_sight(self, start: Point, end: Point, eye_height: float) -> bool:
        """True when a segment held ``eye_height`` above the floor clears every cell.

        The segment is sampled four times per cell; a cell blocks it when its
        obstruction reaches eye level.
        """
        gap = distance(start, end)
        samples = max(2, int(math.ceil(gap / (self.grid_size * 0.25))) + 1)
        xs = np.linspace(start[0], end[0], samples)
        ys = np.linspace(start[1], end[1], samples)
        cols = np.floor(xs / self.grid_size).astype(int)
        rows = np.floor(ys / self.grid_size).astype(int)

        inside = (cols >= 0) & (cols < self.cols) & (rows >= 0) & (rows < self.rows)
        if not bool(inside.all()):
            return False
        return bool(np.all(self.heights[rows, cols] < eye_height))

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def from_rows(cls, rows: Iterable[Sequence[str]], grid_size: float = 1.0) -> "ArenaMap":
        """Build an arena from layout rows (strings or per-cell symbol lists)."""
        grid: List[Sequence[str]] = [row for row in rows if len(row) > 0]
        if not grid:
            raise MapFormatError("arena layout is empty")

        width = len(grid[0])
        heights = np.zeros((len(grid), width), dtype=float)
        hiding_spots: List[Point] = []
        spawns: Dict[str, Point] = {}

        for row_idx, row in enumerate(grid):
            if len(row) != width:
                raise MapFormatError(
                    f"row {row_idx} has {len(row)} cells, expected {width}"
                )
            for col_idx, raw in enumerate(row):
                symbol = raw.strip() or "."
                if symbol not in TILE_HEIGHTS:
                    raise MapFormatError(f"unknown tile {symbol!r} at row {row_idx}, col {col_idx}")
                heights[row_idx, col_idx] = TILE_HEIGHTS[symbol]
                center = ((col_idx + 0.5) * grid_size, (row_idx + 0.5) * grid_size)
                if symbol == HIDING_SPOT_MARK:
                    hiding_spots.append(center)
                elif symbol in SPAWN_MARKS:
                    if symbol in spawns:
                        raise MapFormatError(f"spawn {symbol!r} appears more than once")
                    spawns[symbol] = center

        return cls(heights, grid_size=grid_size, hiding_spots=hiding_spots, spawns=spawns)

    @classmethod
    def from_csv(cls, path: str | Path, grid_size: float = 1.0) -> "ArenaMap":
        with open(path, newline="", encoding="utf-8") as f:
            rows = [row for row in csv.reader(f)]
        return cls.from_rows(rows, grid_size=grid_size)
