"""
Duel Logic Package
Crisp state machine and fuzzy inference controller for the duel agents.
"""

from .controller import StateController
from .fsm import CrispController, TRANSITIONS, next_state
from .fuzzy_controller import FuzzyController, state_for_output
from .fuzzy_engine import FuzzyEngine, FuzzyRule, LinguisticVariable, Trapezoid, Triangle

__all__ = [
    'CrispController',
    'FuzzyController',
    'FuzzyEngine',
    'FuzzyRule',
    'LinguisticVariable',
    'StateController',
    'TRANSITIONS',
    'Trapezoid',
    'Triangle',
    'next_state',
    'state_for_output',
]
