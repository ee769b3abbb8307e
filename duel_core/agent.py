from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional, Sequence

from pydantic import BaseModel

from .errors import MissingDependencyError
from .geometry import Point, distance
from .navigation import Navigator
from .perception import Perception
from .resources import CombatResources
from .states import AgentState, Percept

logger = logging.getLogger(__name__)


class RoundOutcomeSink(ABC):
    """Receives the round-loss event an agent raises when it dies."""

    @abstractmethod
    def round_lost(self, loser: "CombatAgent") -> None:
        ...


class AgentStats(BaseModel):
    name: str
    state: str
    health: int
    ammo: int
    bullets_fired: int
    bullets_hit: int
    state_changes: Dict[str, int]


class CombatAgent:
    """One duellist: perception, resources, movement and a decision controller.

    The controller owns the state; the agent carries out the action of the
    current state each tick and then asks the controller for the next one.
    Both controller kinds share this action layer.
    """

    def __init__(
        self,
        name: str,
        controller,
        resources: CombatResources,
        perception: Perception,
        navigator: Navigator,
        hiding_spots: Optional[Sequence[Point]] = None,
        outcome_sink: Optional[RoundOutcomeSink] = None,
        spawn: Optional[Point] = None,
    ):
        missing = [
            label
            for label, dep in (
                ("controller", controller),
                ("resources", resources),
                ("perception", perception),
                ("navigator", navigator),
            )
            if dep is None
        ]
        if missing:
            raise MissingDependencyError(f"[{name}] missing collaborators: {', '.join(missing)}")

        self.name = name
        self.controller = controller
        self.resources = resources
        self.perception = perception
        self.navigator = navigator
        self.config = resources.config
        self.hiding_spots = tuple(hiding_spots) if hiding_spots is not None else perception.arena.hiding_spots
        self.outcome_sink = outcome_sink
        self.spawn: Point = spawn if spawn is not None else navigator.position

        self.target: Optional[CombatAgent] = None
        self.facing = 0.0
        self.hide_spot: Optional[Point] = None
        self.at_hiding_spot = False
        self.time_in_state = 0.0
        self._warned_no_cover = False

        self.controller.add_transition_listener(self._on_transition)

    # ------------------------------------------------------------------
    # Stat / reset surface
    # ------------------------------------------------------------------

    @property
    def position(self) -> Point:
        return self.navigator.position

    @property
    def state(self) -> AgentState:
        return self.controller.state

    @property
    def current_health(self) -> int:
        return self.resources.health

    @property
    def max_health(self) -> int:
        return self.config.max_health

    @property
    def bullets_fired(self) -> int:
        return self.resources.bullets_fired

    @property
    def bullets_hit(self) -> int:
        return self.resources.bullets_hit

    @property
    def state_change_counts(self) -> Dict[AgentState, int]:
        return dict(self.controller.state_change_counts)

    def stats(self) -> AgentStats:
        return AgentStats(
            name=self.name,
            state=self.state.name,
            health=self.current_health,
            ammo=self.resources.ammo,
            bullets_fired=self.bullets_fired,
            bullets_hit=self.bullets_hit,
            state_changes={s.name: n for s, n in self.controller.state_change_counts.items()},
        )

    def reset(self) -> None:
        self.resources.reset()
        self.navigator.warp(self.spawn)
        self.controller.reset()
        self.facing = 0.0
        self.hide_spot = None
        self.at_hiding_spot = False
        self.time_in_state = 0.0
        self._warned_no_cover = False

    # ------------------------------------------------------------------
    # Damage sink
    # ------------------------------------------------------------------

    def take_damage(self, amount: int) -> bool:
        lethal = self.resources.take_damage(amount)
        if lethal:
            self.controller.force_state(AgentState.DEAD)
            self.navigator.stop()
            logger.debug("[%s] down", self.name)
            if self.outcome_sink is not None:
                self.outcome_sink.round_lost(self)
        return lethal

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def sense(self) -> Percept:
        if self.target is None:
            raise MissingDependencyError(f"[{self.name}] has no target")
        me = self.position
        other = self.target.position
        return Percept(
            distance=distance(me, other),
            can_see_target=self.perception.can_see(me, other),
            health=self.resources.health,
            max_health=self.config.max_health,
            target_health=self.target.current_health,
            target_max_health=self.target.max_health,
            ammo=self.resources.ammo,
            ammo_per_clip=self.config.ammo_per_clip,
            finished_reloading=self.resources.finished_reloading,
            at_hiding_spot=self.at_hiding_spot,
            time_in_state=self.time_in_state,
        )

    def tick(self, dt: float) -> AgentState:
        if self.target is None:
            raise MissingDependencyError(f"[{self.name}] has no target")

        if self.state is AgentState.DEAD:
            self.navigator.stop()
            self.navigator.advance(dt)
            return self.state

        self.time_in_state += dt
        self.resources.advance(dt)
        self._act(self.state, self.sense(), dt)
        self.navigator.advance(dt)
        self._update_facing()
        if self.state is AgentState.HIDE:
            self._update_at_spot()

        return self.controller.update(self.sense())

    def _act(self, state: AgentState, percept: Percept, dt: float) -> None:
        if state is AgentState.IDLE:
            self.navigator.stop()

        elif state is AgentState.SHOOT_TARGET:
            self.navigator.stop()
            self.facing = self.perception.heading_to(self.position, self.target.position)
            if self.controller.may_fire(percept):
                hit = self.resources.fire(self.target)
                if hit is not None:
                    logger.debug("[%s] fired (%s), %d left", self.name, "hit" if hit else "miss", self.resources.ammo)

        elif state is AgentState.HIDE:
            self._seek_cover()

        elif state is AgentState.MOVE_TO_TARGET:
            self.navigator.set_destination(self.target.position)

        elif state is AgentState.RELOAD:
            self.navigator.stop()
            self.resources.reload(dt)

        else:
            self.navigator.stop()

    def _seek_cover(self) -> None:
        spot = self.perception.closest_hidden_spot(self.position, self.target.position, self.hiding_spots)
        self.hide_spot = spot
        if spot is None:
            if not self._warned_no_cover:
                logger.warning("[%s] no hiding spot out of the target's sight", self.name)
                self._warned_no_cover = True
            self.navigator.stop()
            return
        self.navigator.set_destination(spot)

    def _update_at_spot(self) -> None:
        if self.hide_spot is None:
            self.at_hiding_spot = True
        else:
            self.at_hiding_spot = distance(self.position, self.hide_spot) <= self.config.arrive_radius

    def _update_facing(self) -> None:
        vx, vy = self.navigator.velocity
        if self.state is not AgentState.SHOOT_TARGET and (vx or vy):
            x, y = self.position
            self.facing = self.perception.heading_to((x, y), (x + vx, y + vy))

    def _on_transition(self, old: AgentState, new: AgentState) -> None:
        self.navigator.stop()
        self.resources.cancel_reload()
        self.hide_spot = None
        self.at_hiding_spot = False
        self.time_in_state = 0.0
        self._warned_no_cover = False
