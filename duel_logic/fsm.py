"""
Crisp finite state machine.

Every state owns an ordered list of ``(condition, next_state)`` pairs. All
conditions are checked each tick and the last one that holds wins, so later
entries take priority over earlier ones.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Callable, Mapping, Optional, Tuple

from duel_core.config import CombatConfig
from duel_core.states import AgentState, Percept

from .controller import StateController

Condition = Callable[[Percept, CombatConfig], bool]
Transitions = Tuple[Tuple[Condition, AgentState], ...]


# ============================================================================
# Thresholds
# ============================================================================


def in_range(p: Percept, cfg: CombatConfig) -> bool:
    return p.distance <= cfg.dist_to_start_shooting


def too_far(p: Percept, cfg: CombatConfig) -> bool:
    return not in_range(p, cfg)


def target_close(p: Percept, cfg: CombatConfig) -> bool:
    return p.distance <= cfg.dist_to_hide


def target_not_close(p: Percept, cfg: CombatConfig) -> bool:
    return p.distance >= cfg.dist_to_hide


def health_low(p: Percept, cfg: CombatConfig) -> bool:
    return p.health <= cfg.low_health


def target_health_low(p: Percept, cfg: CombatConfig) -> bool:
    return p.target_health <= cfg.low_health


def ammo_low(p: Percept, cfg: CombatConfig) -> bool:
    return p.ammo <= cfg.low_ammo


def ammo_empty(p: Percept, cfg: CombatConfig) -> bool:
    return p.ammo == 0


def lost_target(p: Percept, cfg: CombatConfig) -> bool:
    return not p.can_see_target or too_far(p, cfg)


def can_engage(p: Percept, cfg: CombatConfig) -> bool:
    return p.can_see_target and in_range(p, cfg) and p.ammo > 0


def cover_settled(p: Percept, cfg: CombatConfig) -> bool:
    """True once cover is reached or the agent has run for it for ``hide_commit_time``."""
    return p.at_hiding_spot or p.time_in_state >= cfg.hide_commit_time


# ============================================================================
# Transition tables
# ============================================================================

IDLE_TRANSITIONS: Transitions = (
    (lambda p, c: p.target_health > 0 and can_engage(p, c), AgentState.SHOOT_TARGET),
    (lambda p, c: p.target_health > 0 and lost_target(p, c), AgentState.MOVE_TO_TARGET),
    (lambda p, c: p.target_health > 0 and health_low(p, c) and target_not_close(p, c), AgentState.HIDE),
)

SHOOT_TRANSITIONS: Transitions = (
    (lost_target, AgentState.MOVE_TO_TARGET),
    (lambda p, c: lost_target(p, c) and ammo_low(p, c), AgentState.RELOAD),
    (
        lambda p, c: health_low(p, c) and target_not_close(p, c) and not target_health_low(p, c),
        AgentState.HIDE,
    ),
    (ammo_empty, AgentState.HIDE),
)

MOVE_TRANSITIONS: Transitions = (
    (can_engage, AgentState.SHOOT_TARGET),
    (
        lambda p, c: health_low(p, c) and target_not_close(p, c) and not target_health_low(p, c),
        AgentState.HIDE,
    ),
)

HIDE_TRANSITIONS: Transitions = (
    (
        lambda p, c: cover_settled(p, c) and p.ammo > 0 and p.can_see_target and in_range(p, c),
        AgentState.SHOOT_TARGET,
    ),
    (
        lambda p, c: cover_settled(p, c) and p.ammo > 0 and (not p.can_see_target or not target_health_low(p, c)),
        AgentState.MOVE_TO_TARGET,
    ),
    (lambda p, c: ammo_empty(p, c) and p.at_hiding_spot, AgentState.RELOAD),
)

RELOAD_TRANSITIONS: Transitions = (
    (lambda p, c: p.finished_reloading and lost_target(p, c), AgentState.MOVE_TO_TARGET),
    (lambda p, c: p.finished_reloading and p.can_see_target and in_range(p, c), AgentState.SHOOT_TARGET),
    (lambda p, c: p.can_see_target and (health_low(p, c) or not p.finished_reloading), AgentState.HIDE),
)

TRANSITIONS: Mapping[AgentState, Transitions] = MappingProxyType({
    AgentState.IDLE: IDLE_TRANSITIONS,
    AgentState.SHOOT_TARGET: SHOOT_TRANSITIONS,
    AgentState.HIDE: HIDE_TRANSITIONS,
    AgentState.MOVE_TO_TARGET: MOVE_TRANSITIONS,
    AgentState.RELOAD: RELOAD_TRANSITIONS,
    AgentState.DEAD: (),
})


def next_state(state: AgentState, percept: Percept, cfg: CombatConfig) -> Optional[AgentState]:
    """Apply the table of ``state`` to ``percept``; None when nothing fires."""
    chosen: Optional[AgentState] = None
    for condition, target_state in TRANSITIONS[state]:
        if condition(percept, cfg):
            chosen = target_state
    return chosen


class CrispController(StateController):
    kind = "fsm"

    def __init__(self, config: CombatConfig, name: str = "FSM"):
        super().__init__(name)
        self.config = config

    def decide(self, percept: Percept) -> Optional[AgentState]:
        return next_state(self.state, percept, self.config)

    def may_fire(self, percept: Percept) -> bool:
        return percept.can_see_target and in_range(percept, self.config)
