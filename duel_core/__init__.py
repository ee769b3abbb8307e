"""
Duel Core Package
Perception, combat resources, movement and agent composition shared by both controllers.
"""

from .agent import AgentStats, CombatAgent, RoundOutcomeSink
from .config import CRISP_DEFAULTS, FUZZY_DEFAULTS, CombatConfig
from .errors import DuelError, MapFormatError, MissingDependencyError
from .navigation import GridNavigator, Navigator
from .pathfinder import AStarPathfinder
from .perception import Perception, closest_hidden_spot
from .resources import CombatResources
from .states import AgentState, Percept
from .world_model import ArenaMap

__all__ = [
    'AStarPathfinder',
    'AgentState',
    'AgentStats',
    'ArenaMap',
    'CRISP_DEFAULTS',
    'CombatAgent',
    'CombatConfig',
    'CombatResources',
    'DuelError',
    'FUZZY_DEFAULTS',
    'GridNavigator',
    'MapFormatError',
    'MissingDependencyError',
    'Navigator',
    'Percept',
    'Perception',
    'RoundOutcomeSink',
    'closest_hidden_spot',
]
