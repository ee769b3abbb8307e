"""
Harness tests: round loop, scoring, overrides, CSV report and the CLI.
"""

import csv
import json
import os
import tempfile
import unittest

from pydantic import ValidationError

from arena.maps import default_arena, load_arena
from arena.match import DEFAULT_MAX_TICKS, DRAW, FSM, FUSM, DuelArena
from arena.report import REPORT_COLUMNS, write_report
from arena.run_duel import main
from arena.settings import DuelOverrides, load_overrides
from duel_core.config import CombatConfig
from duel_core.errors import MapFormatError
from duel_core.states import AgentState
from duel_core.world_model import ArenaMap

# Spawns exactly seven units apart with a clear line between them.
CORRIDOR = [
    "##########",
    "#F......Z#",
    "##########",
]

SHARPSHOOTER = CombatConfig(hit_chance=1.0, bullet_damage=100)
BLANKS = CombatConfig(hit_chance=0.0)


class TestRounds(unittest.TestCase):
    def test_fsm_win_is_scored_after_the_tick(self):
        duel = DuelArena(ArenaMap.from_rows(CORRIDOR), SHARPSHOOTER, BLANKS, seed=1)
        stats = duel.run_round(max_ticks=50)
        self.assertEqual(stats.winner, FSM)
        self.assertEqual(stats.ticks, 2)
        self.assertAlmostEqual(stats.time_taken, 0.2)
        self.assertEqual(stats.finite_bullets_hit, 1)
        self.assertEqual(stats.fuzzy_shooting_count, 1)
        self.assertEqual(duel.scoreboard.fsm, 1)

    def test_fuzzy_win(self):
        duel = DuelArena(ArenaMap.from_rows(CORRIDOR), BLANKS, SHARPSHOOTER, seed=1)
        stats = duel.run_round(max_ticks=50)
        self.assertEqual(stats.winner, FUSM)
        self.assertEqual(stats.finite_bullets_fired, 1)
        self.assertEqual(stats.finite_bullets_hit, 0)
        self.assertEqual(duel.scoreboard.fuzzy, 1)

    def test_agents_reset_between_rounds(self):
        duel = DuelArena(ArenaMap.from_rows(CORRIDOR), SHARPSHOOTER, BLANKS, seed=1)
        duel.run_round(max_ticks=50)
        for agent in duel.agents:
            self.assertEqual(agent.state, AgentState.IDLE)
            self.assertEqual(agent.current_health, agent.max_health)
            self.assertEqual(agent.bullets_fired, 0)
            self.assertEqual(agent.position, agent.spawn)

    def test_tick_limit_is_a_draw(self):
        duel = DuelArena(seed=3)
        with self.assertLogs("arena.match", level="WARNING"):
            stats = duel.run_round(max_ticks=1)
        self.assertEqual(stats.winner, DRAW)
        self.assertEqual(duel.scoreboard.draws, 1)

    def test_run_numbers_rounds(self):
        duel = DuelArena(ArenaMap.from_rows(CORRIDOR), SHARPSHOOTER, BLANKS, seed=1)
        scoreboard = duel.run(3, max_ticks=50)
        self.assertEqual(scoreboard.rounds_played, 3)
        self.assertEqual([r.round_number for r in duel.rounds], [1, 2, 3])

    def test_same_seed_same_rounds(self):
        def play(seed):
            duel = DuelArena(seed=seed)
            duel.run(2, max_ticks=400)
            return [r.model_dump() for r in duel.rounds]

        self.assertEqual(play(11), play(11))

    def test_default_arena_rounds_get_decided(self):
        duel = DuelArena(seed=1)
        duel.run(3, max_ticks=DEFAULT_MAX_TICKS)
        winners = [r.winner for r in duel.rounds]
        self.assertTrue(any(w != DRAW for w in winners), winners)
        self.assertEqual(duel.scoreboard.fsm + duel.scoreboard.fuzzy + duel.scoreboard.draws, 3)

    def test_only_first_loss_counts(self):
        duel = DuelArena(ArenaMap.from_rows(CORRIDOR), seed=1)
        duel.round_lost(duel.fuzzy)
        duel.round_lost(duel.fsm)
        self.assertIs(duel._loser, duel.fuzzy)

    def test_reset_clears_scoreboard(self):
        duel = DuelArena(ArenaMap.from_rows(CORRIDOR), SHARPSHOOTER, BLANKS, seed=1)
        duel.run(2, max_ticks=50)
        duel.reset()
        self.assertEqual(duel.scoreboard.rounds_played, 0)
        self.assertEqual(duel.rounds, [])

    def test_invalid_dt_rejected(self):
        with self.assertRaises(ValueError):
            DuelArena(dt=0)


class TestMaps(unittest.TestCase):
    def test_default_arena_has_spawns_and_cover(self):
        arena = default_arena()
        self.assertEqual(set(arena.spawns), {"F", "Z"})
        self.assertGreaterEqual(len(arena.hiding_spots), 4)

    def test_missing_spawn_rejected(self):
        with self.assertRaises(MapFormatError):
            DuelArena(ArenaMap.from_rows(["#####", "#F..#", "#####"]))

    def test_load_text_and_csv_layouts(self):
        with tempfile.TemporaryDirectory() as tmp:
            text_path = os.path.join(tmp, "corridor.txt")
            with open(text_path, "w", encoding="utf-8") as f:
                f.write("\n".join(CORRIDOR) + "\n")
            csv_path = os.path.join(tmp, "corridor.csv")
            with open(csv_path, "w", newline="", encoding="utf-8") as f:
                csv.writer(f).writerows([list(row) for row in CORRIDOR])

            from_text = load_arena(text_path)
            from_csv = load_arena(csv_path)
        self.assertEqual(from_text.spawns, from_csv.spawns)
        self.assertEqual(from_text.heights.tolist(), from_csv.heights.tolist())


class TestOverrides(unittest.TestCase):
    def test_shared_and_per_side_keys(self):
        overrides = DuelOverrides.model_validate_json(
            json.dumps({"bullet_damage": 8, "fsm": {"hit_chance": 0.9}, "fuzzy": {"bullet_damage": 12}})
        )
        fsm, fuzzy = overrides.resolve()
        self.assertEqual((fsm.bullet_damage, fsm.hit_chance, fsm.reload_time), (8, 0.9, 3.0))
        self.assertEqual((fuzzy.bullet_damage, fuzzy.reload_time), (12, 2.0))

    def test_unknown_key_rejected(self):
        with self.assertRaises(ValidationError):
            DuelOverrides.model_validate({"laser_power": 3}).resolve()

    def test_no_file_means_defaults(self):
        fsm, fuzzy = load_overrides(None).resolve()
        self.assertEqual(fsm, CombatConfig())
        self.assertEqual(fuzzy.reload_time, 2.0)


class TestReportAndCli(unittest.TestCase):
    def test_report_has_header_and_rows(self):
        duel = DuelArena(ArenaMap.from_rows(CORRIDOR), SHARPSHOOTER, BLANKS, seed=1)
        duel.run(2, max_ticks=50)
        with tempfile.TemporaryDirectory() as tmp:
            path = write_report(os.path.join(tmp, "out", "report.csv"), duel.rounds)
            with open(path, newline="", encoding="utf-8") as f:
                rows = list(csv.reader(f))
        self.assertEqual(rows[0], REPORT_COLUMNS)
        self.assertEqual(len(rows), 3)
        self.assertEqual(rows[1][REPORT_COLUMNS.index("winner")], FSM)

    def test_cli_writes_report(self):
        with tempfile.TemporaryDirectory() as tmp:
            config_path = os.path.join(tmp, "overrides.json")
            with open(config_path, "w", encoding="utf-8") as f:
                json.dump({"bullet_damage": 20}, f)
            output = os.path.join(tmp, "duel.csv")
            code = main(["--rounds", "2", "--seed", "5", "--max-ticks", "20", "--config", config_path, "--output", output])
            self.assertEqual(code, 0)
            with open(output, newline="", encoding="utf-8") as f:
                self.assertEqual(len(list(csv.reader(f))), 3)

    def test_cli_rejects_bad_config(self):
        with tempfile.TemporaryDirectory() as tmp:
            config_path = os.path.join(tmp, "overrides.json")
            with open(config_path, "w", encoding="utf-8") as f:
                json.dump({"hit_chance": 2.0}, f)
            self.assertEqual(main(["--rounds", "1", "--config", config_path]), 2)


if __name__ == "__main__":
    unittest.main()
