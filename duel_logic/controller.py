from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional

from duel_core.states import AgentState, Percept

logger = logging.getLogger(__name__)

TransitionListener = Callable[[AgentState, AgentState], None]


class StateController(ABC):
    """State bookkeeping shared by the crisp and the fuzzy controller.

    Subclasses implement ``decide`` and ``may_fire``. ``update`` wraps
    ``decide`` with the overrides both controllers apply every tick: a dead
    target forces IDLE, then zero own health forces DEAD. DEAD is absorbing
    until ``reset``.
    """

    kind = "base"

    def __init__(self, name: str = "agent"):
        self.name = name
        self.state = AgentState.IDLE
        self.state_change_counts: Dict[AgentState, int] = {s: 0 for s in AgentState}
        self._listeners: List[TransitionListener] = []

    def add_transition_listener(self, listener: TransitionListener) -> None:
        self._listeners.append(listener)

    @abstractmethod
    def decide(self, percept: Percept) -> Optional[AgentState]:
        """Next state proposed for ``percept``; None keeps the current one."""

    @abstractmethod
    def may_fire(self, percept: Percept) -> bool:
        """Whether SHOOT_TARGET pulls the trigger this tick (cooldown and ammo permitting)."""

    def update(self, percept: Percept) -> AgentState:
        if self.state is AgentState.DEAD:
            return self.state

        proposed = self.decide(percept)
        if percept.target_health <= 0:
            proposed = AgentState.IDLE
        if percept.health <= 0:
            proposed = AgentState.DEAD

        if proposed is not None:
            self.set_state(proposed)
        return self.state

    def set_state(self, new_state) -> bool:
        """Switch to ``new_state``; returns whether a transition happened.

        Values outside AgentState are logged and ignored.
        """
        try:
            new_state = AgentState.coerce(new_state)
        except ValueError:
            logger.error("[%s] invalid state %r ignored, holding %s", self.name, new_state, self.state.name)
            return False

        if self.state is AgentState.DEAD or new_state is self.state:
            return False
        self._change_state(new_state)
        return True

    def force_state(self, new_state: AgentState) -> None:
        if new_state is not self.state:
            self._change_state(new_state)

    def reset(self) -> None:
        self.state = AgentState.IDLE
        self.state_change_counts = {s: 0 for s in AgentState}
        self._on_enter(AgentState.IDLE)

    def _change_state(self, new_state: AgentState) -> None:
        old = self.state
        logger.debug("[%s] %s: %s -> %s", self.name, self.kind, old.name, new_state.name)
        self.state = new_state
        self.state_change_counts[new_state] += 1
        self._on_enter(new_state)
        for listener in self._listeners:
            listener(old, new_state)

    def _on_enter(self, state: AgentState) -> None:
        pass
