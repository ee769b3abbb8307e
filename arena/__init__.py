"""
Arena Package
Experiment harness: round loop, scoring, CSV report and map loading.
"""

from .maps import DEFAULT_LAYOUT, default_arena, load_arena
from .match import DRAW, FSM, FUSM, DuelArena, RoundStats, Scoreboard
from .report import REPORT_COLUMNS, write_report
from .settings import DuelOverrides, load_overrides

__all__ = [
    'DEFAULT_LAYOUT',
    'DRAW',
    'DuelArena',
    'DuelOverrides',
    'FSM',
    'FUSM',
    'REPORT_COLUMNS',
    'RoundStats',
    'Scoreboard',
    'default_arena',
    'load_arena',
    'load_overrides',
    'write_report',
]
