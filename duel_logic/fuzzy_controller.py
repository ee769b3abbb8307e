"""
Fuzzy state controller.

Each state has a fixed rule set over the sensed inputs. The set is installed
into the engine when the state is entered, the engine's crisp output picks a
band of ``action`` and the band names the next state.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

from duel_core.config import CombatConfig
from duel_core.states import AgentState, Percept

from .controller import StateController
from .fuzzy_engine import FuzzyEngine, FuzzyRule, LinguisticVariable, Trapezoid, Triangle

logger = logging.getLogger(__name__)

MAX_SENSED_DISTANCE = 20.0

# Two-valued signals are sampled in the middle of their crisp band.
SIGNAL_TRUE = 0.5
SIGNAL_FALSE = 1.5

# Rounding applied to the centroid before banding so that an exact tie
# between two neighbouring actions lands on the upper band.
BAND_PRECISION = 9

ACTION_BANDS: Tuple[Tuple[float, float, AgentState], ...] = (
    (0.0, 1.0, AgentState.SHOOT_TARGET),
    (1.0, 2.0, AgentState.HIDE),
    (2.0, 3.0, AgentState.MOVE_TO_TARGET),
    (3.0, 4.0, AgentState.RELOAD),
)


# ============================================================================
# Linguistic variables
# ============================================================================


def _signal(name: str, yes: str, no: str) -> LinguisticVariable:
    return LinguisticVariable(name, 0.0, 2.0, {
        yes: Trapezoid(0, 0, 1, 1),
        no: Trapezoid(1, 1, 2, 2),
    })


def _health(name: str) -> LinguisticVariable:
    return LinguisticVariable(name, 0.0, 100.0, {
        "low": Trapezoid(0, 0, 20, 47),
        "moderate": Trapezoid(20, 40, 60, 80),
        "high": Trapezoid(53, 80, 100, 100),
    })


def _ammo(config: CombatConfig) -> LinguisticVariable:
    clip = float(config.ammo_per_clip)
    low = float(config.low_ammo)
    mid = (low + 1 + clip) / 2
    return LinguisticVariable("ammo", 0.0, clip, {
        "empty": Trapezoid(0, 0, 0, min(1.0, clip)),
        "low": Trapezoid(0, 0, low, min(low + 1, clip)),
        "moderate": Trapezoid(low, min(low + 1, clip), mid, min(mid + 1, clip)),
        "high": Trapezoid(mid, min(mid + 1, clip), clip, clip),
    })


def build_variables(config: CombatConfig) -> Dict[str, LinguisticVariable]:
    variables = [
        LinguisticVariable("distToTarget", 0.0, MAX_SENSED_DISTANCE, {
            "close": Trapezoid(0, 0, 3, 7),
            "moderate": Trapezoid(3, 7, 10, 16),
            "far": Trapezoid(12, 16, 20, 20),
        }),
        _health("health"),
        _health("targetsHealth"),
        _ammo(config),
        _signal("canSeeTarget", "can", "cant"),
        _signal("isFinishedReloading", "finished", "notFinished"),
        _signal("atHidingSpot", "at", "away"),
        LinguisticVariable("actionToTake", 0.0, 4.0, {
            "shootTarget": Triangle(0, 0.5, 1),
            "hideFromTarget": Triangle(1, 1.5, 2),
            "moveCloserToTarget": Triangle(2, 2.5, 3),
            "reload": Triangle(3, 3.5, 4),
        }),
    ]
    return {v.name: v for v in variables}


# ============================================================================
# Rule sets
# ============================================================================


def build_rule_sets(v: Mapping[str, LinguisticVariable]) -> Mapping[AgentState, Tuple[FuzzyRule, ...]]:
    dist = v["distToTarget"]
    health = v["health"]
    target_health = v["targetsHealth"]
    ammo = v["ammo"]
    sight = v["canSeeTarget"]
    reloading = v["isFinishedReloading"]
    spot = v["atHidingSpot"]
    action = v["actionToTake"]

    shoot = action["shootTarget"]
    hide = action["hideFromTarget"]
    move = action["moveCloserToTarget"]
    reload = action["reload"]

    return MappingProxyType({
        AgentState.IDLE: (
            FuzzyRule(~dist["far"] & sight["can"], shoot),
            FuzzyRule(dist["far"] | sight["cant"], move),
            FuzzyRule(health["low"] & ~dist["close"], hide),
        ),
        AgentState.SHOOT_TARGET: (
            FuzzyRule(dist["far"] | sight["cant"], move),
            FuzzyRule(health["low"] & ~dist["close"], hide),
            FuzzyRule((ammo["low"] & sight["cant"]) | dist["far"], reload),
            FuzzyRule(ammo["empty"], hide),
        ),
        AgentState.HIDE: (
            FuzzyRule(target_health["low"] & ~dist["close"], move),
            FuzzyRule(dist["close"] & sight["can"], shoot),
            FuzzyRule((ammo["low"] & sight["cant"]) | dist["far"], reload),
            FuzzyRule(ammo["empty"] & spot["at"], reload),
        ),
        AgentState.MOVE_TO_TARGET: (
            FuzzyRule(~dist["far"] & sight["can"], shoot),
            FuzzyRule(health["low"] & ~dist["close"], hide),
        ),
        AgentState.RELOAD: (
            FuzzyRule(reloading["finished"] & (dist["far"] | sight["cant"]), move),
            FuzzyRule(reloading["finished"] & ~dist["far"] & sight["can"], shoot),
            FuzzyRule(sight["can"] & (health["low"] | reloading["notFinished"]), hide),
        ),
        AgentState.DEAD: (),
    })


def crisp_inputs(percept: Percept) -> Dict[str, float]:
    return {
        "distToTarget": percept.distance,
        "health": percept.health_percent,
        "targetsHealth": percept.target_health_percent,
        "ammo": float(percept.ammo),
        "canSeeTarget": SIGNAL_TRUE if percept.can_see_target else SIGNAL_FALSE,
        "isFinishedReloading": SIGNAL_TRUE if percept.finished_reloading else SIGNAL_FALSE,
        "atHidingSpot": SIGNAL_TRUE if percept.at_hiding_spot else SIGNAL_FALSE,
    }


def state_for_output(value: Optional[float]) -> Optional[AgentState]:
    """Map a defuzzified action value to a state; None outside every band."""
    if value is None:
        return None
    value = round(value, BAND_PRECISION)
    for low, high, state in ACTION_BANDS:
        if low <= value < high:
            return state
    return None


class FuzzyController(StateController):
    kind = "fuzzy"

    def __init__(self, config: CombatConfig, name: str = "FuSM"):
        super().__init__(name)
        self.config = config
        self.variables = build_variables(config)
        self.rule_sets = build_rule_sets(self.variables)
        inputs = [var for key, var in self.variables.items() if key != "actionToTake"]
        self.engine = FuzzyEngine(inputs, self.variables["actionToTake"])
        self.rule_installs = 0
        self.last_output: Optional[float] = None
        self._on_enter(self.state)

    def _on_enter(self, state: AgentState) -> None:
        self.engine.install(self.rule_sets[state])
        self.rule_installs += 1

    def decide(self, percept: Percept) -> Optional[AgentState]:
        if not self.engine.rules:
            return None
        self.last_output = self.engine.infer(crisp_inputs(percept))
        proposed = state_for_output(self.last_output)
        if proposed is None:
            logger.debug("[%s] output %s outside the action bands, holding %s",
                         self.name, self.last_output, self.state.name)
        return proposed

    def may_fire(self, percept: Percept) -> bool:
        # Fires on cooldown at any sighted distance not fully "far".
        far = self.variables["distToTarget"].fuzzify(percept.distance)["far"]
        return percept.can_see_target and far < 1.0
