from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class AgentState(Enum):
    """Behaviour states shared by the crisp and the fuzzy controller."""

    IDLE = 0
    SHOOT_TARGET = 1
    HIDE = 2
    MOVE_TO_TARGET = 3
    DEAD = 4
    RELOAD = 5

    @classmethod
    def coerce(cls, value) -> "AgentState":
        """Resolve an enum member, its name or its integer value.

        Raises ValueError for anything outside the enumeration.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str) and value.upper() in cls.__members__:
            return cls[value.upper()]
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value)
        raise ValueError(f"{value!r} is not a valid {cls.__name__}")


@dataclass(frozen=True)
class Percept:
    """Everything a controller reads in one tick."""

    distance: float
    can_see_target: bool
    health: int
    max_health: int
    target_health: int
    target_max_health: int
    ammo: int
    ammo_per_clip: int
    finished_reloading: bool = True
    at_hiding_spot: bool = False
    time_in_state: float = 0.0

    @property
    def health_percent(self) -> float:
        return 100.0 * self.health / self.max_health

    @property
    def target_health_percent(self) -> float:
        return 100.0 * self.target_health / self.target_max_health
