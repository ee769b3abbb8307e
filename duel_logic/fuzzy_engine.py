"""
Mamdani inference over scikit-fuzzy membership shapes.

Rules read like ``skfuzzy.control`` rules::

    FuzzyRule(~dist["far"] & sight["can"], action["shoot"])

but each pipeline stage (fuzzify, evaluate, aggregate, defuzzify) is exposed
on its own, and an empty aggregate defuzzifies to None instead of raising.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import skfuzzy as fuzz

logger = logging.getLogger(__name__)

OUTPUT_RESOLUTION = 401


# ============================================================================
# Membership functions
# ============================================================================


@dataclass(frozen=True)
class Triangle:
    a: float
    b: float
    c: float

    def __post_init__(self):
        if not (self.a <= self.b <= self.c):
            raise ValueError(f"triangle points must be ordered, got {self.a}, {self.b}, {self.c}")

    def curve(self, universe: np.ndarray) -> np.ndarray:
        return fuzz.trimf(universe, [self.a, self.b, self.c])

    def degree(self, x: float) -> float:
        return float(self.curve(np.array([float(x)]))[0])


@dataclass(frozen=True)
class Trapezoid:
    a: float
    b: float
    c: float
    d: float

    def __post_init__(self):
        if not (self.a <= self.b <= self.c <= self.d):
            raise ValueError(
                f"trapezoid points must be ordered, got {self.a}, {self.b}, {self.c}, {self.d}"
            )

    def curve(self, universe: np.ndarray) -> np.ndarray:
        return fuzz.trapmf(universe, [self.a, self.b, self.c, self.d])

    def degree(self, x: float) -> float:
        return float(self.curve(np.array([float(x)]))[0])


# ============================================================================
# Rule expressions
# ============================================================================


class Expression:
    def __and__(self, other: "Expression") -> "AllOf":
        return AllOf((self, other))

    def __or__(self, other: "Expression") -> "AnyOf":
        return AnyOf((self, other))

    def strength(self, degrees: Mapping[str, Mapping[str, float]]) -> float:
        raise NotImplementedError


@dataclass(frozen=True)
class Is(Expression):
    """Atom ``variable is term``, optionally negated."""

    variable: str
    term: str
    negated: bool = False

    def __invert__(self) -> "Is":
        return Is(self.variable, self.term, not self.negated)

    def strength(self, degrees: Mapping[str, Mapping[str, float]]) -> float:
        mu = degrees[self.variable][self.term]
        return 1.0 - mu if self.negated else mu

    def __str__(self) -> str:
        text = f"{self.variable}[{self.term}]"
        return f"~{text}" if self.negated else text


@dataclass(frozen=True)
class AllOf(Expression):
    parts: Tuple[Expression, ...]

    def strength(self, degrees: Mapping[str, Mapping[str, float]]) -> float:
        return min(part.strength(degrees) for part in self.parts)

    def __str__(self) -> str:
        return "(" + " & ".join(str(p) for p in self.parts) + ")"


@dataclass(frozen=True)
class AnyOf(Expression):
    parts: Tuple[Expression, ...]

    def strength(self, degrees: Mapping[str, Mapping[str, float]]) -> float:
        return max(part.strength(degrees) for part in self.parts)

    def __str__(self) -> str:
        return "(" + " | ".join(str(p) for p in self.parts) + ")"


@dataclass(frozen=True)
class FuzzyRule:
    antecedent: Expression
    consequent: Is

    def __post_init__(self):
        if self.consequent.negated:
            raise ValueError("a rule consequent cannot be negated")

    def __str__(self) -> str:
        return f"IF {self.antecedent} THEN {self.consequent}"


# ============================================================================
# Linguistic variables
# ============================================================================


class LinguisticVariable:
    """A named crisp domain ``[low, high]`` with its fuzzy terms."""

    def __init__(self, name: str, low: float, high: float, terms: Mapping[str, Triangle | Trapezoid]):
        if high <= low:
            raise ValueError(f"{name}: domain upper bound must exceed the lower bound")
        if not terms:
            raise ValueError(f"{name}: at least one term is required")
        self.name = name
        self.low = float(low)
        self.high = float(high)
        self.terms: Dict[str, Triangle | Trapezoid] = dict(terms)

    def __getitem__(self, term: str) -> Is:
        if term not in self.terms:
            raise KeyError(f"{self.name} has no term {term!r}")
        return Is(self.name, term)

    def clamp(self, value: float) -> float:
        return min(max(float(value), self.low), self.high)

    def fuzzify(self, value: float) -> Dict[str, float]:
        x = self.clamp(value)
        return {term: shape.degree(x) for term, shape in self.terms.items()}

    def universe(self, resolution: int = OUTPUT_RESOLUTION) -> np.ndarray:
        return np.linspace(self.low, self.high, resolution)


# ============================================================================
# Engine
# ============================================================================


class FuzzyEngine:
    """Runs one installed rule set against crisp inputs.

    AND is min, OR is max, NOT is ``1 - x``. Each fired rule clips its output
    term at the rule strength, clipped terms are merged by pointwise max and
    the envelope is reduced to its centroid.
    """

    def __init__(self, inputs: Iterable[LinguisticVariable], output: LinguisticVariable):
        self.inputs: Dict[str, LinguisticVariable] = {v.name: v for v in inputs}
        self.output = output
        self.universe = output.universe()
        self._output_curves = {term: shape.curve(self.universe) for term, shape in output.terms.items()}
        self.rules: Tuple[FuzzyRule, ...] = ()

    def install(self, rules: Sequence[FuzzyRule]) -> None:
        for rule in rules:
            self._check_rule(rule)
        self.rules = tuple(rules)

    def _check_rule(self, rule: FuzzyRule) -> None:
        if rule.consequent.variable != self.output.name or rule.consequent.term not in self.output.terms:
            raise ValueError(f"rule {rule} does not target an output term")
        for atom in _atoms(rule.antecedent):
            variable = self.inputs.get(atom.variable)
            if variable is None or atom.term not in variable.terms:
                raise ValueError(f"rule {rule} reads unknown input {atom}")

    def fuzzify(self, values: Mapping[str, float]) -> Dict[str, Dict[str, float]]:
        missing = [name for name in self.inputs if name not in values]
        if missing:
            raise KeyError(f"missing crisp inputs: {', '.join(missing)}")
        return {name: variable.fuzzify(values[name]) for name, variable in self.inputs.items()}

    def evaluate(self, degrees: Mapping[str, Mapping[str, float]]) -> List[Tuple[FuzzyRule, float]]:
        return [(rule, rule.antecedent.strength(degrees)) for rule in self.rules]

    def aggregate(self, strengths: Sequence[Tuple[FuzzyRule, float]]) -> np.ndarray:
        envelope = np.zeros_like(self.universe)
        for rule, strength in strengths:
            if strength <= 0.0:
                continue
            clipped = np.fmin(strength, self._output_curves[rule.consequent.term])
            envelope = np.fmax(envelope, clipped)
        return envelope

    def defuzzify(self, envelope: np.ndarray) -> Optional[float]:
        if float(envelope.sum()) <= 0.0:
            return None
        return float(fuzz.defuzz(self.universe, envelope, "centroid"))

    def infer(self, values: Mapping[str, float]) -> Optional[float]:
        strengths = self.evaluate(self.fuzzify(values))
        result = self.defuzzify(self.aggregate(strengths))
        logger.debug(
            "inference %s -> %s",
            ", ".join(f"{rule.consequent.term}={s:.2f}" for rule, s in strengths if s > 0) or "no rule fired",
            "none" if result is None else f"{result:.3f}",
        )
        return result


def _atoms(expression: Expression) -> Iterable[Is]:
    if isinstance(expression, Is):
        yield expression
    elif isinstance(expression, (AllOf, AnyOf)):
        for part in expression.parts:
            yield from _atoms(part)
