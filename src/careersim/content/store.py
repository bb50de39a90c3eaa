"""In-memory content store and template/overlay merge.

The store is filled once at process start from a validated content directory
and is read-only afterwards, so any number of request handlers can share one
instance.
"""

from __future__ import annotations

import logging
from pathlib import Path

from careersim.content.schemas import (
    ConsequenceRule,
    FeedbackVariant,
    MergedScenario,
    RoleOverlay,
    ScenarioAction,
    ScenarioBranch,
    ScenarioTemplate,
)
from careersim.content.validator import ContentValidator, ValidationReport
from careersim.errors import ContentValidationError
from careersim.models.state import RoleChoice
from careersim.parameters import PLACEHOLDER_PATTERN

logger = logging.getLogger(__name__)


# =============================================================================
# Merge Helpers
# =============================================================================


def _replace_or_append(base: list, overrides: list | None, key: str) -> list:
    """Union two lists by id: same id replaces in place, new ids append."""
    if not overrides:
        return list(base)
    merged = list(base)
    positions = {getattr(item, key): i for i, item in enumerate(merged)}
    for item in overrides:
        item_id = getattr(item, key)
        if item_id in positions:
            merged[positions[item_id]] = item
        else:
            positions[item_id] = len(merged)
            merged.append(item)
    return merged


def substitute_placeholders(text: str | None, swaps: dict[str, str]) -> str | None:
    """Replace ``{{key}}`` tokens that have a swap; unknown tokens are kept."""
    if not text or not swaps:
        return text
    return PLACEHOLDER_PATTERN.sub(
        lambda m: swaps.get(m.group(1), m.group(0)), text
    )


def _swap_action(action: ScenarioAction, swaps: dict[str, str]) -> ScenarioAction:
    return action.model_copy(
        update={
            "label": substitute_placeholders(action.label, swaps),
            "description": substitute_placeholders(action.description, swaps),
        }
    )


def _swap_branch(branch: ScenarioBranch, swaps: dict[str, str]) -> ScenarioBranch:
    return branch.model_copy(
        update={
            "variant_title": substitute_placeholders(branch.variant_title, swaps),
            "variant_description": substitute_placeholders(branch.variant_description, swaps),
            "npc_message": substitute_placeholders(branch.npc_message, swaps),
        }
    )


def _swap_variant(variant: FeedbackVariant, swaps: dict[str, str]) -> FeedbackVariant:
    if variant.key in swaps:
        text = swaps[variant.key]
    else:
        text = substitute_placeholders(variant.narrative_text, swaps)
    return variant.model_copy(update={"narrative_text": text})


def merge_scenario(
    template: ScenarioTemplate, overlay: RoleOverlay | None = None
) -> MergedScenario:
    """Apply an overlay to a template.

    Actions and consequence rules are unioned by action id. Narrative swaps
    fill ``{{key}}`` placeholders in titles, labels, branch text and feedback
    text; a swap whose key equals a feedback key replaces that variant's text
    outright.
    Without an overlay the result carries the template unchanged.

    Args:
        template: Base scenario
        overlay: Role overlay for the same scenario id, or None

    Returns:
        MergedScenario
    """
    fields = dict(template)
    if overlay is None:
        return MergedScenario(**fields, role=None)

    overrides = overlay.overrides
    swaps = overrides.narrative_swaps or {}
    actions: list[ScenarioAction] = _replace_or_append(
        template.actions, overrides.actions, "action_id"
    )
    rules: list[ConsequenceRule] = _replace_or_append(
        template.consequence_rules, overrides.consequence_rules, "action_id"
    )

    fields.update(
        title=substitute_placeholders(template.title, swaps),
        description=substitute_placeholders(template.description, swaps),
        actions=[_swap_action(a, swaps) for a in actions] if swaps else actions,
        consequence_rules=rules,
        feedback_variants=[_swap_variant(v, swaps) for v in template.feedback_variants]
        if swaps
        else list(template.feedback_variants),
        branches=[_swap_branch(b, swaps) for b in template.branches]
        if swaps and template.branches
        else template.branches,
    )
    return MergedScenario(**fields, role=overlay.role)


def _coerce_role(role: RoleChoice | str | None) -> RoleChoice | None:
    """RoleChoice for a role value; None when absent or not a known role."""
    if role is None or isinstance(role, RoleChoice):
        return role
    try:
        return RoleChoice(role)
    except ValueError:
        logger.debug(f"No overlays for unknown role '{role}'")
        return None


# =============================================================================
# Content Store
# =============================================================================


class ContentStore:
    """Validated templates keyed by scenario id, overlays by (id, role).

    Usage:
        store = ContentStore()
        store.load_directory("content/scenarios")
        merged = store.get_merged_scenario("ch1_setup_background", "analyst")
    """

    def __init__(self):
        self._templates: dict[str, ScenarioTemplate] = {}
        self._overlays: dict[tuple[str, RoleChoice], RoleOverlay] = {}

    @classmethod
    def from_directory(cls, directory: str | Path, strict: bool = True) -> ContentStore:
        store = cls()
        store.load_directory(directory, strict=strict)
        return store

    def load_directory(
        self, directory: str | Path, strict: bool = True
    ) -> ValidationReport:
        """Validate a content directory and load what passed.

        Args:
            directory: Directory of YAML content
            strict: Raise if any document is invalid instead of skipping it

        Returns:
            The validation report

        Raises:
            ContentValidationError: In strict mode, if any document failed
        """
        report = ContentValidator().validate_directory(directory)
        if not report.passed:
            if strict:
                raise ContentValidationError(report)
            for doc in report.failed_documents:
                logger.warning(
                    f"Skipping invalid content {doc.file} [doc {doc.doc_index}]: "
                    f"{'; '.join(doc.errors)}"
                )

        for template in report.templates:
            self.add_template(template)
        for overlay in report.overlays:
            self.add_overlay(overlay)

        logger.info(
            f"Loaded {len(self._templates)} scenarios and "
            f"{len(self._overlays)} role overlays from {directory}"
        )
        return report

    def add_template(self, template: ScenarioTemplate) -> None:
        self._templates[template.scenario_id] = template

    def add_overlay(self, overlay: RoleOverlay) -> None:
        self._overlays[(overlay.scenario_id, overlay.role)] = overlay

    def get_template(self, scenario_id: str) -> ScenarioTemplate | None:
        return self._templates.get(scenario_id)

    def get_overlay(
        self, scenario_id: str, role: RoleChoice | str | None
    ) -> RoleOverlay | None:
        role = _coerce_role(role)
        if role is None:
            return None
        return self._overlays.get((scenario_id, role))

    def list_scenarios(self) -> list[dict]:
        """Summaries of loaded scenarios, ordered by chapter then id."""
        templates = sorted(
            self._templates.values(), key=lambda t: (t.chapter, t.scenario_id)
        )
        return [
            {
                "scenarioId": t.scenario_id,
                "title": t.title,
                "chapter": t.chapter,
                "roles": sorted(
                    role.value for sid, role in self._overlays if sid == t.scenario_id
                ),
            }
            for t in templates
        ]

    def get_merged_scenario(
        self, scenario_id: str, role: RoleChoice | str | None = None
    ) -> MergedScenario | None:
        """Template merged with the role's overlay, or None if the id is unknown.

        A role with no overlay for this scenario, including a role string that
        is not a RoleChoice value, gets the bare template.
        """
        template = self._templates.get(scenario_id)
        if template is None:
            return None
        return merge_scenario(template, self.get_overlay(scenario_id, role))

    def __contains__(self, scenario_id: object) -> bool:
        return scenario_id in self._templates

    def __len__(self) -> int:
        return len(self._templates)
