from __future__ import annotations

import math
from typing import Tuple

Point = Tuple[float, float]


def heading_to_angle_deg(from_x: float, from_y: float, to_x: float, to_y: float) -> float:
    return math.degrees(math.atan2(to_y - from_y, to_x - from_x)) % 360


def euclidean_distance(x1: float, y1: float, x2: float, y2: float) -> float:
    return math.hypot(x2 - x1, y2 - y1)


def distance(a: Point, b: Point) -> float:
    return euclidean_distance(a[0], a[1], b[0], b[1])


def heading_to(a: Point, b: Point) -> float:
    """Facing angle in degrees, counter-clockwise from +x, that points ``a`` at ``b``."""
    return heading_to_angle_deg(a[0], a[1], b[0], b[1])


def step_towards(origin: Point, goal: Point, max_step: float) -> Point:
    """Move from ``origin`` toward ``goal`` by at most ``max_step`` units."""
    gap = distance(origin, goal)
    if gap <= max_step or gap == 0.0:
        return (float(goal[0]), float(goal[1]))
    ratio = max_step / gap
    return (origin[0] + (goal[0] - origin[0]) * ratio, origin[1] + (goal[1] - origin[1]) * ratio)
