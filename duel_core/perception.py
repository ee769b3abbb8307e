from __future__ import annotations

from typing import Callable, Iterable, Optional

from .geometry import Point, distance, heading_to
from .world_model import ArenaMap


def can_see(arena: ArenaMap, observer: Point, target: Point, eye_height: float) -> bool:
    return arena.line_of_sight(observer, target, eye_height)


def closest_hidden_spot(
    self_pos: Point,
    target_pos: Point,
    spots: Iterable[Point],
    visible: Callable[[Point, Point], bool],
) -> Optional[Point]:
    """Pick the hiding spot nearest ``self_pos`` that the target cannot see.

    Candidates are walked in order and a spot at equal or shorter distance
    replaces the current pick, so the last of several equidistant spots wins.

    Args:
        self_pos: position of the agent looking for cover.
        target_pos: position of the agent to hide from.
        spots: candidate positions.
        visible: ``visible(a, b)`` line-of-sight test.

    Returns:
        The chosen spot, or None when every candidate is in view.
    """
    best: Optional[Point] = None
    best_dist = 0.0
    for spot in spots:
        if visible(target_pos, spot):
            continue
        d = distance(self_pos, spot)
        if best is None or best_dist >= d:
            best = spot
            best_dist = d
    return best


class Perception:
    """World queries of one agent, bound to the arena and its eye height."""

    def __init__(self, arena: ArenaMap, eye_height: float):
        self.arena = arena
        self.eye_height = eye_height

    def can_see(self, observer: Point, target: Point) -> bool:
        return can_see(self.arena, observer, target, self.eye_height)

    def distance(self, a: Point, b: Point) -> float:
        return distance(a, b)

    def heading_to(self, a: Point, b: Point) -> float:
        return heading_to(a, b)

    def closest_hidden_spot(
        self, self_pos: Point, target_pos: Point, spots: Optional[Iterable[Point]] = None
    ) -> Optional[Point]:
        candidates = self.arena.hiding_spots if spots is None else spots
        return closest_hidden_spot(self_pos, target_pos, candidates, self.can_see)
