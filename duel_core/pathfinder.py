"""
A* over the arena grid.

Routes run through walkable cells only, 8-connected. A diagonal step is taken
only when both orthogonal cells beside it are walkable, so a straight segment
between consecutive cell centres never clips an obstruction.
"""

from __future__ import annotations

import math
from heapq import heappop, heappush
from typing import Dict, List, Optional, Tuple

from .world_model import ArenaMap

Cell = Tuple[int, int]


class AStarPathfinder:
    def __init__(self, arena: ArenaMap):
        self.arena = arena
        # Indexed [row, col] like ArenaMap.heights.
        self.blocked = arena.heights > 0.0

    def is_free(self, cell: Cell) -> bool:
        col, row = cell
        return self.arena.in_bounds(cell) and not bool(self.blocked[row, col])

    def find_path(self, start: Cell, goal: Cell) -> Optional[List[Cell]]:
        """Cells from ``start`` to ``goal`` inclusive, or None when unreachable.

        A blocked goal is swapped for the nearest free cell.
        """
        if not self.is_free(goal):
            goal = self._find_nearest_free_cell(goal)
            if goal is None:
                return None
        if start == goal:
            return [start]

        open_set: List[Tuple[float, int, Cell]] = []
        counter = 0
        heappush(open_set, (self._heuristic(start, goal), counter, start))
        came_from: Dict[Cell, Cell] = {}
        g_score: Dict[Cell, float] = {start: 0.0}
        closed = set()

        while open_set:
            _, _, current = heappop(open_set)
            if current == goal:
                return self._reconstruct_path(came_from, current)
            if current in closed:
                continue
            closed.add(current)

            for neighbor, step_cost in self._get_neighbors(current):
                tentative_g = g_score[current] + step_cost
                if tentative_g < g_score.get(neighbor, math.inf):
                    came_from[neighbor] = current
                    g_score[neighbor] = tentative_g
                    counter += 1
                    heappush(open_set, (tentative_g + self._heuristic(neighbor, goal), counter, neighbor))

        return None

    def _heuristic(self, a: Cell, b: Cell) -> float:
        return math.hypot(a[0] - b[0], a[1] - b[1])

    def _get_neighbors(self, cell: Cell) -> List[Tuple[Cell, float]]:
        col, row = cell
        neighbors = []
        for dc in (-1, 0, 1):
            for dr in (-1, 0, 1):
                if dc == 0 and dr == 0:
                    continue
                nxt = (col + dc, row + dr)
                if not self.is_free(nxt):
                    continue
                if dc and dr:
                    # no corner cutting
                    if not (self.is_free((col + dc, row)) and self.is_free((col, row + dr))):
                        continue
                    neighbors.append((nxt, math.sqrt(2.0)))
                else:
                    neighbors.append((nxt, 1.0))
        return neighbors

    def _reconstruct_path(self, came_from: Dict[Cell, Cell], current: Cell) -> List[Cell]:
        path = [current]
        while current in came_from:
            current = came_from[current]
            path.append(current)
        path.reverse()
        return path

    def _find_nearest_free_cell(self, blocked_cell: Cell) -> Optional[Cell]:
        reach = max(self.arena.cols, self.arena.rows)
        for radius in range(1, reach + 1):
            ring = [
                (blocked_cell[0] + dc, blocked_cell[1] + dr)
                for dc in range(-radius, radius + 1)
                for dr in range(-radius, radius + 1)
                if max(abs(dc), abs(dr)) == radius
            ]
            free = [cell for cell in ring if self.is_free(cell)]
            if free:
                return min(free, key=lambda cell: self._heuristic(cell, blocked_cell))
        return None
