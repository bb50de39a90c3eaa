"""Branch variant selection.

A scenario may declare branches: alternative titles, text and action subsets
shown when every condition of the branch holds against the session's state
vector and narrative context. Branches are tried in authored order and the
first match wins; with no match the merged scenario is shown unchanged.

Narrative flags read by ``flag`` conditions are written by consequence rules
(``setFlags``) through set_narrative_flags.
"""

from __future__ import annotations

import logging

from careersim.content.schemas import BranchCondition, MergedScenario, ScenarioBranch
from careersim.models.npc import NarrativeContext
from careersim.models.state import StateVector

logger = logging.getLogger(__name__)


# =============================================================================
# Condition Evaluation
# =============================================================================


def evaluate_branch_condition(
    condition: BranchCondition, state_vector: StateVector, context: NarrativeContext
) -> bool:
    """Evaluate one branch condition. Unknown axes and NPCs are false."""
    kind = condition.type
    if kind == "flag":
        return context.narrative_flags.get(condition.flag) == condition.value
    if kind == "stat":
        value = state_vector.get_axis(condition.stat)
        if value is None:
            return False
        if condition.minimum is not None and value < condition.minimum:
            return False
        if condition.maximum is not None and value > condition.maximum:
            return False
        return True
    if kind == "emotional":
        return state_vector.emotional_state == condition.state
    if kind == "npcRelation":
        npc = context.npc_relationships.get(condition.npc_id)
        if npc is None:
            return False
        if condition.min_trust is not None and npc.trust_level < condition.min_trust:
            return False
        if condition.attitude is not None and npc.attitude != condition.attitude:
            return False
        return True
    if kind == "eventHistory":
        return any(
            entry.scenario_id == condition.scenario_id
            and (condition.choice_id is None or entry.choice_id == condition.choice_id)
            for entry in context.scenario_history
        )
    if kind == "and":
        return all(
            evaluate_branch_condition(c, state_vector, context) for c in condition.conditions
        )
    if kind == "or":
        return any(
            evaluate_branch_condition(c, state_vector, context) for c in condition.conditions
        )
    if kind == "not":
        return not evaluate_branch_condition(condition.condition, state_vector, context)
    raise ValueError(f"Unknown branch condition type: {kind}")


def describe_branch_condition(condition: BranchCondition) -> str:
    """Short human-readable form of a condition, for logs."""
    kind = condition.type
    if kind == "flag":
        return f"flag {condition.flag} is {condition.value}"
    if kind == "stat":
        bounds = []
        if condition.minimum is not None:
            bounds.append(f">= {condition.minimum}")
        if condition.maximum is not None:
            bounds.append(f"<= {condition.maximum}")
        return f"{condition.stat} {' and '.join(bounds) or 'known'}"
    if kind == "emotional":
        return f"feeling {condition.state.value}"
    if kind == "npcRelation":
        parts = [f"knows {condition.npc_id}"]
        if condition.min_trust is not None:
            parts.append(f"trust >= {condition.min_trust}")
        if condition.attitude is not None:
            parts.append(f"attitude {condition.attitude.value}")
        return ", ".join(parts)
    if kind == "eventHistory":
        if condition.choice_id:
            return f"chose {condition.choice_id} in {condition.scenario_id}"
        return f"played {condition.scenario_id}"
    if kind == "not":
        return f"not ({describe_branch_condition(condition.condition)})"
    joiner = " and " if kind == "and" else " or "
    return "(" + joiner.join(describe_branch_condition(c) for c in condition.conditions) + ")"


def unmet_branch_conditions(
    branch: ScenarioBranch, state_vector: StateVector, context: NarrativeContext
) -> list[BranchCondition]:
    return [
        c
        for c in branch.conditions
        if not evaluate_branch_condition(c, state_vector, context)
    ]


# =============================================================================
# Branch Selection
# =============================================================================


def select_branch(
    scenario: MergedScenario, state_vector: StateVector, context: NarrativeContext
) -> ScenarioBranch | None:
    """First branch whose conditions all hold, or None."""
    for branch in scenario.branches or []:
        unmet = unmet_branch_conditions(branch, state_vector, context)
        if not unmet:
            return branch
        logger.debug(
            f"Branch {branch.branch_id} of {scenario.scenario_id} not taken: "
            f"{'; '.join(describe_branch_condition(c) for c in unmet)}"
        )
    return None


def apply_branch(
    scenario: MergedScenario, branch: ScenarioBranch | None
) -> MergedScenario:
    """The scenario as seen through a branch variant.

    Variant title and description replace the base text when set. When the
    branch names its actions, only those are offered; consequence rules are
    kept whole so the state engine still finds every rule.
    """
    if branch is None:
        return scenario

    update: dict = {"branch_id": branch.branch_id, "npc_message": branch.npc_message}
    if branch.variant_title:
        update["title"] = branch.variant_title
    if branch.variant_description:
        update["description"] = branch.variant_description
    if branch.variant_actions is not None:
        offered = set(branch.variant_actions)
        update["actions"] = [a for a in scenario.actions if a.action_id in offered]
    return scenario.model_copy(update=update)


def effective_scenario(
    scenario: MergedScenario, state_vector: StateVector, context: NarrativeContext
) -> MergedScenario:
    """Select and apply the matching branch, if any."""
    return apply_branch(scenario, select_branch(scenario, state_vector, context))


# =============================================================================
# Narrative Flags
# =============================================================================


def set_narrative_flags(
    context: NarrativeContext, flags: dict[str, bool] | None
) -> NarrativeContext:
    """Context with flags merged in; later values win. No flags returns the input."""
    if not flags:
        return context
    return context.model_copy(update={"narrative_flags": {**context.narrative_flags, **flags}})
