"""Gating condition evaluation against a StateVector."""

from __future__ import annotations

from typing import Iterable

from careersim.content.schemas import Condition
from careersim.models.state import StateVector
from careersim.parameters import CONDITION_EQ_TOLERANCE


def evaluate_condition(condition: Condition, state_vector: StateVector) -> bool:
    """Evaluate one condition. A variable that is not a known axis is false.

    ``in_range`` is inclusive at both ends; ``eq`` allows a 1e-9 tolerance.
    """
    value = state_vector.get_axis(condition.variable)
    if value is None:
        return False

    op = condition.operator
    threshold = condition.threshold
    if op == "in_range":
        low, high = threshold
        return low <= value <= high
    if op == "gt":
        return value > threshold
    if op == "lt":
        return value < threshold
    if op == "gte":
        return value >= threshold
    if op == "lte":
        return value <= threshold
    if op == "eq":
        return abs(value - threshold) <= CONDITION_EQ_TOLERANCE
    raise ValueError(f"Unknown condition operator: {op}")


def conditions_met(
    conditions: Iterable[Condition] | None, state_vector: StateVector
) -> bool:
    """True when every condition holds. No conditions always holds."""
    return all(evaluate_condition(c, state_vector) for c in conditions or [])


def failed_conditions(
    conditions: Iterable[Condition] | None, state_vector: StateVector
) -> list[Condition]:
    return [c for c in conditions or [] if not evaluate_condition(c, state_vector)]
