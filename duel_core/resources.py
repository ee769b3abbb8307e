from __future__ import annotations

import logging
import random
from typing import Optional

from .config import CombatConfig

logger = logging.getLogger(__name__)

# Timers are float countdowns; anything this close to zero has expired.
TIMER_EPSILON = 1e-9


class CombatResources:
    """Health, clip, reload timer and fire cooldown of one agent.

    ``fire`` deals damage through the target's ``take_damage(amount)``, which
    must return whether the hit was lethal.
    """

    def __init__(self, config: CombatConfig, rng: Optional[random.Random] = None, name: str = "agent"):
        self.config = config
        self.rng = rng if rng is not None else random.Random()
        self.name = name

        self.health = config.max_health
        self.ammo = config.ammo_per_clip
        self.reload_timer = 0.0
        self.finished_reloading = True
        self.fire_cooldown = 0.0
        self.bullets_fired = 0
        self.bullets_hit = 0
        self.dead = False

    @property
    def alive(self) -> bool:
        return not self.dead

    def reset(self) -> None:
        self.health = self.config.max_health
        self.ammo = self.config.ammo_per_clip
        self.reload_timer = 0.0
        self.finished_reloading = True
        self.fire_cooldown = 0.0
        self.bullets_fired = 0
        self.bullets_hit = 0
        self.dead = False

    # ------------------------------------------------------------------
    # Damage
    # ------------------------------------------------------------------

    def take_damage(self, amount: int) -> bool:
        """Subtract ``amount`` from health, clamping at zero.

        Returns True only for the call that kills the agent.
        """
        if amount < 0:
            raise ValueError(f"damage must be non-negative, got {amount}")
        if self.dead or amount == 0:
            return False

        self.health = max(0, self.health - amount)
        if self.health == 0:
            self.dead = True
            logger.debug("[%s] killed", self.name)
            return True
        return False

    # ------------------------------------------------------------------
    # Shooting
    # ------------------------------------------------------------------

    def can_fire(self) -> bool:
        return self.ammo > 0 and self.fire_cooldown <= TIMER_EPSILON

    def fire(self, target) -> Optional[bool]:
        """Shoot once at ``target`` if the clip and the cooldown allow it.

        Returns None when no shot was taken, otherwise whether it hit.
        """
        if not self.can_fire():
            return None

        self.ammo -= 1
        self.fire_cooldown = self.config.shot_interval
        self.bullets_fired += 1

        hit = self.rng.random() < self.config.hit_chance
        if hit:
            self.bullets_hit += 1
            target.take_damage(self.config.bullet_damage)
        return hit

    def advance(self, dt: float) -> None:
        if self.fire_cooldown > 0.0:
            self.fire_cooldown = max(0.0, self.fire_cooldown - dt)

    # ------------------------------------------------------------------
    # Reloading
    # ------------------------------------------------------------------

    def reload(self, dt: float) -> bool:
        """Run one tick of reloading, starting the countdown if none is active.

        Returns the finished-reloading flag after the tick.
        """
        if self.finished_reloading:
            self.finished_reloading = False
            self.reload_timer = self.config.reload_time

        if self.reload_timer > 0.0:
            self.reload_timer -= dt
            if self.reload_timer <= TIMER_EPSILON:
                self.reload_timer = 0.0
                self.finished_reloading = True
                self.ammo = self.config.ammo_per_clip
                logger.debug("[%s] reloaded %d rounds", self.name, self.ammo)
        return self.finished_reloading

    def cancel_reload(self) -> None:
        if not self.finished_reloading:
            logger.debug("[%s] reload interrupted with %.2fs left", self.name, self.reload_timer)
        self.reload_timer = 0.0
        self.finished_reloading = True
