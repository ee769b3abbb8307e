"""
Agent composition tests: the per-state action layer driving real
perception, resources and movement on a small arena.
"""

import random
import unittest

from duel_core.agent import CombatAgent, RoundOutcomeSink
from duel_core.config import CombatConfig
from duel_core.errors import MissingDependencyError
from duel_core.navigation import GridNavigator
from duel_core.perception import Perception
from duel_core.resources import CombatResources
from duel_core.states import AgentState
from duel_core.world_model import ArenaMap
from duel_logic.fsm import CrispController
from duel_logic.fuzzy_controller import FuzzyController

ROWS = [
    "############",
    "#H.........#",
    "#..........#",
    "#......#...#",
    "#......#.H.#",
    "#..........#",
    "############",
]


class StaticTarget:
    """Stands still and records the damage it takes."""

    def __init__(self, position, health=100):
        self.position = position
        self.current_health = health
        self.max_health = 100
        self.hits = []

    def take_damage(self, amount):
        self.hits.append(amount)
        self.current_health = max(0, self.current_health - amount)
        return self.current_health == 0


class RecordingSink(RoundOutcomeSink):
    def __init__(self):
        self.losers = []

    def round_lost(self, loser):
        self.losers.append(loser)


def build_agent(config=None, start=(2.5, 3.5), sink=None, fuzzy=False):
    config = config or CombatConfig()
    arena = ArenaMap.from_rows(ROWS)
    controller = FuzzyController(config, name="A") if fuzzy else CrispController(config, name="A")
    return CombatAgent(
        name="A",
        controller=controller,
        resources=CombatResources(config, rng=random.Random(1), name="A"),
        perception=Perception(arena, config.eye_height),
        navigator=GridNavigator(arena, start, config.move_speed),
        outcome_sink=sink,
    )


class TestComposition(unittest.TestCase):
    def test_missing_collaborator_fails_fast(self):
        config = CombatConfig()
        arena = ArenaMap.from_rows(ROWS)
        with self.assertRaises(MissingDependencyError):
            CombatAgent(
                name="broken",
                controller=CrispController(config),
                resources=None,
                perception=Perception(arena, config.eye_height),
                navigator=GridNavigator(arena, (2.5, 3.5), config.move_speed),
            )

    def test_tick_without_target_fails(self):
        agent = build_agent()
        with self.assertRaises(MissingDependencyError):
            agent.tick(0.1)

    def test_hiding_spots_default_to_arena(self):
        agent = build_agent()
        self.assertEqual(agent.hiding_spots, ((1.5, 1.5), (9.5, 4.5)))


class TestDamageSink(unittest.TestCase):
    def setUp(self):
        self.sink = RecordingSink()
        self.agent = build_agent(CombatConfig(bullet_damage=8), sink=self.sink)

    def test_survives_seven_hits(self):
        for _ in range(7):
            self.assertFalse(self.agent.take_damage(8))
        self.assertEqual(self.agent.current_health, 44)
        self.assertNotEqual(self.agent.state, AgentState.DEAD)
        self.assertEqual(self.sink.losers, [])

    def test_thirteen_hits_kill(self):
        results = [self.agent.take_damage(8) for _ in range(13)]
        self.assertEqual(results.count(True), 1)
        self.assertEqual(self.agent.current_health, 0)
        self.assertEqual(self.agent.state, AgentState.DEAD)
        self.assertEqual(self.sink.losers, [self.agent])

    def test_zero_damage_changes_nothing(self):
        self.assertFalse(self.agent.take_damage(0))
        self.assertEqual(self.agent.current_health, 100)
        self.assertEqual(self.agent.state, AgentState.IDLE)

    def test_dead_agent_stays_dead_until_reset(self):
        self.agent.target = StaticTarget((6.0, 3.5))
        self.agent.take_damage(200)
        for _ in range(3):
            self.assertEqual(self.agent.tick(0.1), AgentState.DEAD)
        self.assertEqual(self.agent.bullets_fired, 0)

        self.agent.reset()
        self.assertEqual(self.agent.state, AgentState.IDLE)
        self.assertEqual(self.agent.current_health, 100)
        self.assertEqual(self.agent.position, (2.5, 3.5))
        self.assertTrue(all(n == 0 for n in self.agent.state_change_counts.values()))


class TestShootAndReload(unittest.TestCase):
    def setUp(self):
        config = CombatConfig(shot_interval=0.0, hit_chance=0.0, reload_time=3.0)
        self.agent = build_agent(config)
        self.target = StaticTarget((6.0, 3.5))
        self.agent.target = self.target

        self.assertEqual(self.agent.tick(1.0), AgentState.SHOOT_TARGET)
        for _ in range(7):
            self.agent.tick(1.0)

    def test_seven_shots_leave_low_ammo(self):
        self.assertEqual(self.agent.bullets_fired, 7)
        self.assertEqual(self.agent.resources.ammo, 3)
        self.assertEqual(self.agent.state, AgentState.SHOOT_TARGET)

    def test_losing_target_on_low_ammo_reloads(self):
        self.target.position = (9.5, 3.5)
        self.assertEqual(self.agent.tick(1.0), AgentState.RELOAD)
        self.assertEqual(self.agent.bullets_fired, 7)

        self.assertEqual(self.agent.tick(1.0), AgentState.RELOAD)
        self.assertEqual(self.agent.tick(1.0), AgentState.RELOAD)
        self.assertEqual(self.agent.resources.ammo, 3)
        self.assertEqual(self.agent.tick(1.0), AgentState.MOVE_TO_TARGET)
        self.assertEqual(self.agent.resources.ammo, 10)

    def test_target_seen_mid_reload_interrupts(self):
        self.target.position = (9.5, 3.5)
        self.agent.tick(1.0)
        self.agent.tick(1.0)
        self.target.position = (6.0, 3.5)
        self.assertEqual(self.agent.tick(1.0), AgentState.HIDE)
        self.assertEqual(self.agent.resources.ammo, 3)
        self.assertTrue(self.agent.resources.finished_reloading)

    def test_shooting_faces_target(self):
        self.assertAlmostEqual(self.agent.facing, 0.0)


class TestHide(unittest.TestCase):
    def test_seeks_hidden_spot_before_leaving_cover(self):
        agent = build_agent(start=(10.5, 1.5))
        agent.target = StaticTarget((2.5, 3.5))
        agent.take_damage(80)

        self.assertEqual(agent.tick(0.5), AgentState.HIDE)
        self.assertEqual(agent.tick(0.5), AgentState.HIDE)
        self.assertEqual(agent.hide_spot, (9.5, 4.5))
        self.assertFalse(agent.at_hiding_spot)
        self.assertAlmostEqual(agent.time_in_state, 0.5)

        self.assertEqual(agent.tick(0.5), AgentState.MOVE_TO_TARGET)
        self.assertAlmostEqual(agent.position[0], 9.5)
        self.assertAlmostEqual(agent.position[1], 4.5)
        self.assertEqual(agent.time_in_state, 0.0)

    def test_no_hidden_spot_warns_and_counts_as_arrived(self):
        agent = build_agent(start=(3.5, 5.5))
        agent.target = StaticTarget((9.5, 2.5))
        agent.controller.set_state(AgentState.HIDE)

        with self.assertLogs("duel_core.agent", level="WARNING"):
            state = agent.tick(0.5)
        self.assertEqual(state, AgentState.MOVE_TO_TARGET)


class TestPursuit(unittest.TestCase):
    def test_walks_around_wall_to_engage(self):
        agent = build_agent()
        agent.target = StaticTarget((9.5, 3.5))
        self.assertEqual(agent.tick(0.5), AgentState.MOVE_TO_TARGET)

        for _ in range(20):
            if agent.tick(0.5) is AgentState.SHOOT_TARGET:
                break
            self.assertTrue(agent.perception.arena.is_walkable(*agent.position))
        self.assertEqual(agent.state, AgentState.SHOOT_TARGET)
        self.assertGreater(agent.position[0], 2.5)


class TestFireGate(unittest.TestCase):
    # Open hall: clear shots at distance 10 and at 17.
    HALL = [
        "####################",
        "#..................#",
        "#..................#",
        "####################",
    ]

    def shooter(self, fuzzy):
        config = CombatConfig(shot_interval=0.0)
        arena = ArenaMap.from_rows(self.HALL)
        controller = FuzzyController(config) if fuzzy else CrispController(config)
        agent = CombatAgent(
            name="shooter",
            controller=controller,
            resources=CombatResources(config, rng=random.Random(3), name="shooter"),
            perception=Perception(arena, config.eye_height),
            navigator=GridNavigator(arena, (2.5, 1.5), config.move_speed),
        )
        agent.target = StaticTarget((12.5, 1.5))
        agent.controller.set_state(AgentState.SHOOT_TARGET)
        return agent

    def test_fuzzy_agent_fires_at_moderate_distance(self):
        agent = self.shooter(fuzzy=True)
        agent.tick(0.1)
        self.assertEqual(agent.bullets_fired, 1)

    def test_crisp_agent_holds_fire_out_of_range(self):
        agent = self.shooter(fuzzy=False)
        agent.tick(0.1)
        self.assertEqual(agent.bullets_fired, 0)

    def test_fuzzy_agent_holds_fire_when_far(self):
        agent = self.shooter(fuzzy=True)
        agent.target.position = (18.5, 1.5)
        agent.navigator.warp((1.5, 1.5))
        agent.tick(0.1)
        self.assertEqual(agent.bullets_fired, 0)


class TestFuzzyAgent(unittest.TestCase):
    def test_fuzzy_agent_engages_like_crisp(self):
        agent = build_agent(fuzzy=True)
        agent.target = StaticTarget((6.0, 3.5))
        self.assertEqual(agent.tick(0.1), AgentState.SHOOT_TARGET)
        agent.tick(0.1)
        self.assertEqual(agent.bullets_fired, 1)

    def test_stats_snapshot(self):
        agent = build_agent(fuzzy=True)
        agent.target = StaticTarget((6.0, 3.5))
        agent.tick(0.1)
        stats = agent.stats()
        self.assertEqual(stats.state, "SHOOT_TARGET")
        self.assertEqual(stats.state_changes["SHOOT_TARGET"], 1)
        self.assertEqual(stats.ammo, 10)


if __name__ == "__main__":
    unittest.main()
