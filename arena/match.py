"""
Round loop between one crisp (FSM) and one fuzzy (FuSM) agent.

The arena is the agents' round-outcome sink: a dying agent reports the loss,
the current tick is played out and the round is then scored and reset.
"""

from __future__ import annotations

import logging
import random
from typing import List, Optional

from pydantic import BaseModel, computed_field

from duel_core.agent import CombatAgent, RoundOutcomeSink
from duel_core.config import CRISP_DEFAULTS, FUZZY_DEFAULTS, CombatConfig
from duel_core.navigation import GridNavigator
from duel_core.perception import Perception
from duel_core.resources import CombatResources
from duel_core.states import AgentState
from duel_core.world_model import ArenaMap
from duel_logic.fsm import CrispController
from duel_logic.fuzzy_controller import FuzzyController

from .maps import default_arena, validate_arena

logger = logging.getLogger(__name__)

FSM = "FSM"
FUSM = "FuSM"
DRAW = "DRAW"

DEFAULT_DT = 0.1
DEFAULT_MAX_TICKS = 3000


class RoundStats(BaseModel):
    round_number: int
    winner: str
    time_taken: float
    ticks: int
    fuzzy_bullets_fired: int
    fuzzy_bullets_hit: int
    finite_bullets_fired: int
    finite_bullets_hit: int
    fuzzy_move_to_target_count: int
    fuzzy_hiding_count: int
    fuzzy_shooting_count: int
    fuzzy_reload_count: int
    finite_move_to_target_count: int
    finite_hiding_count: int
    finite_shooting_count: int
    finite_reload_count: int


class Scoreboard(BaseModel):
    fsm: int = 0
    fuzzy: int = 0
    draws: int = 0

    @computed_field
    @property
    def rounds_played(self) -> int:
        return self.fsm + self.fuzzy + self.draws


def build_agent(
    name: str,
    controller,
    config: CombatConfig,
    arena: ArenaMap,
    spawn_mark: str,
    rng: random.Random,
    sink: Optional[RoundOutcomeSink] = None,
) -> CombatAgent:
    spawn = arena.spawns[spawn_mark]
    return CombatAgent(
        name=name,
        controller=controller,
        resources=CombatResources(config, rng=rng, name=name),
        perception=Perception(arena, config.eye_height),
        navigator=GridNavigator(arena, spawn, config.move_speed),
        hiding_spots=arena.hiding_spots,
        outcome_sink=sink,
        spawn=spawn,
    )


class DuelArena(RoundOutcomeSink):
    def __init__(
        self,
        arena: Optional[ArenaMap] = None,
        fsm_config: CombatConfig = CRISP_DEFAULTS,
        fuzzy_config: CombatConfig = FUZZY_DEFAULTS,
        seed: Optional[int] = None,
        dt: float = DEFAULT_DT,
    ):
        if dt <= 0:
            raise ValueError("dt must be positive")
        self.arena = validate_arena(arena) if arena is not None else default_arena()
        self.dt = dt
        self.seed = seed

        master = random.Random(seed)
        self.fsm = build_agent(
            FSM, CrispController(fsm_config, name=FSM), fsm_config, self.arena, "F",
            random.Random(master.getrandbits(32)), sink=self,
        )
        self.fuzzy = build_agent(
            FUSM, FuzzyController(fuzzy_config, name=FUSM), fuzzy_config, self.arena, "Z",
            random.Random(master.getrandbits(32)), sink=self,
        )
        self.fsm.target = self.fuzzy
        self.fuzzy.target = self.fsm

        self.scoreboard = Scoreboard()
        self.rounds: List[RoundStats] = []
        self._loser: Optional[CombatAgent] = None

    @property
    def agents(self) -> List[CombatAgent]:
        return [self.fsm, self.fuzzy]

    def round_lost(self, loser: CombatAgent) -> None:
        if self._loser is None:
            self._loser = loser

    def run_round(self, max_ticks: int = DEFAULT_MAX_TICKS) -> RoundStats:
        self._loser = None
        ticks = 0
        while ticks < max_ticks and self._loser is None:
            for agent in self.agents:
                agent.tick(self.dt)
            ticks += 1

        if self._loser is self.fsm:
            winner = FUSM
            self.scoreboard.fuzzy += 1
        elif self._loser is self.fuzzy:
            winner = FSM
            self.scoreboard.fsm += 1
        else:
            winner = DRAW
            self.scoreboard.draws += 1

        stats = self._collect(winner, ticks)
        self.rounds.append(stats)
        if winner == DRAW:
            logger.warning("round %d hit the %d tick limit, scored as a draw", stats.round_number, max_ticks)
        else:
            logger.info(
                "round %d won by %s in %.1fs (FSM %d : %d FuSM)",
                stats.round_number, winner, stats.time_taken, self.scoreboard.fsm, self.scoreboard.fuzzy,
            )

        self.reset_agents()
        return stats

    def run(self, rounds: int, max_ticks: int = DEFAULT_MAX_TICKS) -> Scoreboard:
        for _ in range(rounds):
            self.run_round(max_ticks)
        return self.scoreboard

    def reset_agents(self) -> None:
        self._loser = None
        for agent in self.agents:
            agent.reset()

    def reset(self) -> None:
        """Forget every round played and put both agents back on their spawns."""
        self.scoreboard = Scoreboard()
        self.rounds = []
        self.reset_agents()

    def _collect(self, winner: str, ticks: int) -> RoundStats:
        fuzzy_counts = self.fuzzy.state_change_counts
        finite_counts = self.fsm.state_change_counts
        return RoundStats(
            round_number=len(self.rounds) + 1,
            winner=winner,
            time_taken=round(ticks * self.dt, 6),
            ticks=ticks,
            fuzzy_bullets_fired=self.fuzzy.bullets_fired,
            fuzzy_bullets_hit=self.fuzzy.bullets_hit,
            finite_bullets_fired=self.fsm.bullets_fired,
            finite_bullets_hit=self.fsm.bullets_hit,
            fuzzy_move_to_target_count=fuzzy_counts[AgentState.MOVE_TO_TARGET],
            fuzzy_hiding_count=fuzzy_counts[AgentState.HIDE],
            fuzzy_shooting_count=fuzzy_counts[AgentState.SHOOT_TARGET],
            fuzzy_reload_count=fuzzy_counts[AgentState.RELOAD],
            finite_move_to_target_count=finite_counts[AgentState.MOVE_TO_TARGET],
            finite_hiding_count=finite_counts[AgentState.HIDE],
            finite_shooting_count=finite_counts[AgentState.SHOOT_TARGET],
            finite_reload_count=finite_counts[AgentState.RELOAD],
        )
