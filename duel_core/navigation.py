from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from .geometry import Point, distance, step_towards
from .pathfinder import AStarPathfinder, Cell
from .world_model import ArenaMap


class Navigator(ABC):
    """Movement service: accepts a destination and reports velocity."""

    @property
    @abstractmethod
    def position(self) -> Point:
        ...

    @property
    @abstractmethod
    def velocity(self) -> Point:
        ...

    @abstractmethod
    def set_destination(self, destination: Point) -> None:
        ...

    @abstractmethod
    def advance(self, dt: float) -> None:
        ...

    @abstractmethod
    def warp(self, position: Point) -> None:
        """Teleport to ``position`` and drop any destination."""

    def stop(self) -> None:
        self.set_destination(self.position)


class GridNavigator(Navigator):
    """Follows an A* route over the arena's walkable cells at a fixed speed.

    The route is planned again whenever the destination moves into another
    cell. An unreachable destination leaves the navigator standing still.
    """

    def __init__(self, arena: ArenaMap, start: Point, speed: float):
        self.arena = arena
        self.speed = speed
        self.pathfinder = AStarPathfinder(arena)
        self._position: Point = (float(start[0]), float(start[1]))
        self._destination: Optional[Point] = None
        self._velocity: Point = (0.0, 0.0)
        self._route: List[Point] = []
        self._goal_cell: Optional[Cell] = None

    @property
    def position(self) -> Point:
        return self._position

    @property
    def velocity(self) -> Point:
        return self._velocity

    @property
    def destination(self) -> Optional[Point]:
        return self._destination

    @property
    def route(self) -> List[Point]:
        return list(self._route)

    def set_destination(self, destination: Point) -> None:
        destination = (float(destination[0]), float(destination[1]))
        goal = self.arena.to_cell(*destination)
        if goal == self.arena.to_cell(*self._position):
            self._route = [destination]
            self._goal_cell = goal
        elif goal != self._goal_cell or not self._route:
            self._route = self._plan(destination)
            self._goal_cell = goal
        elif self.pathfinder.is_free(goal):
            self._route[-1] = destination
        self._destination = destination

    def warp(self, position: Point) -> None:
        self._position = (float(position[0]), float(position[1]))
        self._destination = None
        self._velocity = (0.0, 0.0)
        self._route = []
        self._goal_cell = None

    def advance(self, dt: float) -> None:
        if dt <= 0 or not self._route:
            self._velocity = (0.0, 0.0)
            return

        start = self._position
        position = start
        budget = self.speed * dt
        while budget > 0.0 and self._route:
            waypoint = self._route[0]
            gap = distance(position, waypoint)
            if gap <= budget:
                position = waypoint
                budget -= gap
                self._route.pop(0)
            else:
                position = step_towards(position, waypoint, budget)
                budget = 0.0

        self._velocity = ((position[0] - start[0]) / dt, (position[1] - start[1]) / dt)
        self._position = position

    def _plan(self, destination: Point) -> List[Point]:
        start = self.arena.to_cell(*self._position)
        goal = self.arena.to_cell(*destination)
        cells = self.pathfinder.find_path(start, goal)
        if cells is None:
            return []
        route = [self._cell_center(cell) for cell in cells[1:]]
        if cells[-1] == goal:
            if route and route[-1] == destination:
                return route
            route.append(destination)
        return route

    def _cell_center(self, cell: Cell) -> Point:
        g = self.arena.grid_size
        return ((cell[0] + 0.5) * g, (cell[1] + 0.5) * g)
