"""Content Validator for CareerSim.

This module is the CI gate for authored scenario content. It parses YAML
documents, validates each against its pydantic schema, then runs deterministic
cross-reference checks. Problems are collected into a ValidationReport; the
validator itself never raises for bad content.

What IS validated:
1. Schema: every field typed, every enumeration closed, version is MAJOR.MINOR.PATCH
2. Template integrity: rules <-> actions are 1:1 by id, feedback keys,
   lock-out targets and branch variant actions resolve, ids are unique
3. Overlay integrity: ids unique within the overlay
4. Cross-document: overlays target a known template, overlay rules target a
   base or overlay action, new overlay actions carry a rule, overlay feedback
   keys exist in the base, no duplicate template ids or (scenarioId, role) pairs

Integrity checks only run on documents that passed schema validation, and
every error is reported (no short-circuit on the first failure).
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

import yaml
from pydantic import ValidationError

from careersim.content.schemas import (
    ContentDocument,
    RoleOverlay,
    ScenarioTemplate,
    document_kind,
    parse_document,
)

logger = logging.getLogger(__name__)

CONTENT_SUFFIXES = (".yaml", ".yml")


# =============================================================================
# Validation Result Data Classes
# =============================================================================


@dataclass
class DocumentResult:
    """Validation outcome for one logical document.

    Attributes:
        file: Path of the file the document came from
        doc_index: Position of the document within its file
        kind: "template", "overlay" or "unknown" (unparseable / not a mapping)
        scenario_id: Declared scenario id, when one could be read
        passed: False once any error has been recorded
        errors: "<field.path>: <message>" strings
        document: The validated model, set only when schema validation succeeded
    """

    file: str
    doc_index: int
    kind: str
    scenario_id: str | None = None
    passed: bool = True
    errors: list[str] = field(default_factory=list)
    document: ContentDocument | None = None

    def add_error(self, message: str) -> None:
        """Record an error and mark the document invalid."""
        self.errors.append(message)
        self.passed = False

    def extend_errors(self, messages: Iterable[str]) -> None:
        for message in messages:
            self.add_error(message)

    def to_dict(self) -> dict:
        return {
            "file": self.file,
            "doc_index": self.doc_index,
            "kind": self.kind,
            "scenario_id": self.scenario_id,
            "passed": self.passed,
            "errors": list(self.errors),
        }


@dataclass
class ValidationReport:
    """Aggregated result of a validation run."""

    documents: list[DocumentResult] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(d.passed for d in self.documents)

    @property
    def failed_documents(self) -> list[DocumentResult]:
        return [d for d in self.documents if not d.passed]

    @property
    def total(self) -> int:
        return len(self.documents)

    @property
    def passed_count(self) -> int:
        return self.total - len(self.failed_documents)

    @property
    def templates(self) -> list[ScenarioTemplate]:
        """Templates that passed every check, in document order."""
        return [
            d.document
            for d in self.documents
            if d.passed and isinstance(d.document, ScenarioTemplate)
        ]

    @property
    def overlays(self) -> list[RoleOverlay]:
        """Overlays that passed every check, in document order."""
        return [
            d.document
            for d in self.documents
            if d.passed and isinstance(d.document, RoleOverlay)
        ]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "passed": self.passed,
            "total": self.total,
            "passed_count": self.passed_count,
            "documents": [d.to_dict() for d in self.documents],
        }


# =============================================================================
# Error Formatting
# =============================================================================


def format_validation_errors(exc: ValidationError) -> list[str]:
    """Flatten a pydantic ValidationError into "path: message" strings."""
    messages = []
    for error in exc.errors():
        path = ".".join(str(part) for part in error["loc"]) or "document"
        messages.append(f"{path}: {error['msg']}")
    return messages


def _duplicates(ids: Iterable[str]) -> list[str]:
    return sorted(k for k, n in Counter(ids).items() if n > 1)


# =============================================================================
# Integrity Checks (Pure Python)
# =============================================================================


def check_template_integrity(template: ScenarioTemplate) -> list[str]:
    """Cross-reference checks within one structurally valid template.

    Args:
        template: Template that already passed schema validation

    Returns:
        Error messages; empty when the template is consistent
    """
    errors = []
    action_ids = template.action_ids()
    declared = set(action_ids)
    rule_ids = [r.action_id for r in template.consequence_rules]
    feedback_keys = template.feedback_keys()

    for dup in _duplicates(action_ids):
        errors.append(f"actions: duplicate actionId '{dup}'")
    for dup in _duplicates(rule_ids):
        errors.append(f"consequenceRules: more than one rule for actionId '{dup}'")

    for i, rule in enumerate(template.consequence_rules):
        if rule.action_id not in declared:
            errors.append(
                f"consequenceRules.{i}.actionId: '{rule.action_id}' "
                "does not match any declared action"
            )
        if rule.immediate_feedback not in feedback_keys:
            errors.append(
                f"consequenceRules.{i}.immediateFeedback: "
                f"no feedback variant with key '{rule.immediate_feedback}'"
            )

    ruled = set(rule_ids)
    for i, action in enumerate(template.actions):
        if action.action_id not in ruled:
            errors.append(
                f"actions.{i}.actionId: '{action.action_id}' has no consequence rule"
            )
        for target in action.locks_out or []:
            if target not in declared:
                errors.append(
                    f"actions.{i}.locksOut: '{target}' does not match any declared action"
                )

    branches = template.branches or []
    for dup in _duplicates(b.branch_id for b in branches):
        errors.append(f"branches: duplicate branchId '{dup}'")
    for i, branch in enumerate(branches):
        for target in branch.variant_actions or []:
            if target not in declared:
                errors.append(
                    f"branches.{i}.variantActions: '{target}' does not match any declared action"
                )

    return errors


def check_overlay_integrity(overlay: RoleOverlay) -> list[str]:
    """Checks an overlay can pass on its own, without its base template."""
    errors = []
    overrides = overlay.overrides
    for dup in _duplicates(a.action_id for a in overrides.actions or []):
        errors.append(f"overrides.actions: duplicate actionId '{dup}'")
    for dup in _duplicates(r.action_id for r in overrides.consequence_rules or []):
        errors.append(f"overrides.consequenceRules: more than one rule for actionId '{dup}'")
    return errors


def check_overlay_against_template(
    overlay: RoleOverlay, template: ScenarioTemplate
) -> list[str]:
    """Checks that merging the overlay keeps the action/rule 1:1 invariant.

    Args:
        overlay: Overlay that passed schema and standalone checks
        template: The base template the overlay targets

    Returns:
        Error messages; empty when the merge would be consistent
    """
    errors = []
    overrides = overlay.overrides
    base_actions = set(template.action_ids())
    overlay_actions = [a.action_id for a in overrides.actions or []]
    overlay_rules = {r.action_id for r in overrides.consequence_rules or []}
    effective_actions = base_actions | set(overlay_actions)
    feedback_keys = template.feedback_keys()

    for i, rule in enumerate(overrides.consequence_rules or []):
        if rule.action_id not in effective_actions:
            errors.append(
                f"overrides.consequenceRules.{i}.actionId: '{rule.action_id}' does not "
                f"match an action in scenario '{template.scenario_id}' or the overlay"
            )
        if rule.immediate_feedback not in feedback_keys:
            errors.append(
                f"overrides.consequenceRules.{i}.immediateFeedback: no feedback variant "
                f"with key '{rule.immediate_feedback}' in scenario '{template.scenario_id}'"
            )

    for i, action in enumerate(overrides.actions or []):
        if action.action_id not in base_actions and action.action_id not in overlay_rules:
            errors.append(
                f"overrides.actions.{i}.actionId: new action '{action.action_id}' "
                "has no consequence rule in the overlay"
            )
        for target in action.locks_out or []:
            if target not in effective_actions:
                errors.append(
                    f"overrides.actions.{i}.locksOut: '{target}' does not match any action"
                )

    return errors


# =============================================================================
# YAML Loading
# =============================================================================


def iter_content_files(directory: str | Path) -> list[Path]:
    """Content files in a directory, in sorted filename order."""
    directory = Path(directory)
    return sorted(
        p for p in directory.iterdir() if p.is_file() and p.suffix in CONTENT_SUFFIXES
    )


def load_yaml_documents(text: str) -> list[Any]:
    """Parse a multi-document YAML string into logical documents.

    Empty documents are dropped and a top-level list is expanded into one
    logical document per item.

    Raises:
        yaml.YAMLError: If the text is not valid YAML
    """
    documents = []
    for doc in yaml.safe_load_all(text):
        if doc is None:
            continue
        if isinstance(doc, list):
            documents.extend(doc)
        else:
            documents.append(doc)
    return documents


# =============================================================================
# Content Validator
# =============================================================================


class ContentValidator:
    """Deterministic validator for scenario templates and role overlays.

    Usage:
        validator = ContentValidator()
        report = validator.validate_directory("content/scenarios")

        if not report.passed:
            for doc in report.failed_documents:
                print(doc.file, doc.errors)
    """

    def validate_document(
        self, doc: Any, file: str = "<memory>", doc_index: int = 0
    ) -> DocumentResult:
        """Validate one parsed document: schema first, then its own integrity.

        Args:
            doc: A parsed YAML/JSON document
            file: Source file name used in the report
            doc_index: Position of the document within its file

        Returns:
            DocumentResult; ``document`` is set when the schema check passed
        """
        if not isinstance(doc, dict):
            result = DocumentResult(file=file, doc_index=doc_index, kind="unknown")
            result.add_error(
                f"document: expected a mapping, got {type(doc).__name__}"
            )
            return result

        scenario_id = doc.get("scenarioId", doc.get("scenario_id"))
        result = DocumentResult(
            file=file,
            doc_index=doc_index,
            kind=document_kind(doc),
            scenario_id=scenario_id if isinstance(scenario_id, str) else None,
        )

        try:
            parsed = parse_document(doc)
        except ValidationError as e:
            result.extend_errors(format_validation_errors(e))
            return result

        result.document = parsed
        if isinstance(parsed, ScenarioTemplate):
            result.extend_errors(check_template_integrity(parsed))
        else:
            result.extend_errors(check_overlay_integrity(parsed))
        return result

    def validate_documents(
        self, entries: Iterable[tuple[str, int, Any]]
    ) -> ValidationReport:
        """Validate a batch of documents, including cross-document checks.

        Args:
            entries: (file, doc_index, document) triples

        Returns:
            ValidationReport covering every entry
        """
        report = ValidationReport()
        for file, doc_index, doc in entries:
            report.documents.append(self.validate_document(doc, file, doc_index))
        self._check_cross_references(report)
        return report

    def validate_directory(self, directory: str | Path) -> ValidationReport:
        """Validate every YAML content file in a directory.

        A file that is not valid YAML is reported as one failed document and
        the run continues with the next file.

        Args:
            directory: Directory holding *.yaml / *.yml content files

        Returns:
            ValidationReport covering every document found
        """
        entries: list[tuple[str, int, Any]] = []
        syntax_failures: list[DocumentResult] = []

        for path in iter_content_files(directory):
            try:
                documents = load_yaml_documents(path.read_text(encoding="utf-8"))
            except yaml.YAMLError as e:
                failure = DocumentResult(file=str(path), doc_index=0, kind="unknown")
                failure.add_error(f"yaml: {e}")
                syntax_failures.append(failure)
                continue
            entries.extend((str(path), i, doc) for i, doc in enumerate(documents))

        report = self.validate_documents(entries)
        report.documents.extend(syntax_failures)
        report.documents.sort(key=lambda d: (d.file, d.doc_index))

        logger.info(
            f"Validated {report.total} content documents in {directory}: "
            f"{report.passed_count} passed"
        )
        return report

    def _check_cross_references(self, report: ValidationReport) -> None:
        """Run checks that need more than one document."""
        templates: dict[str, ScenarioTemplate] = {}
        template_ids_seen: set[str] = set()
        overlay_keys: set[tuple[str, str]] = set()

        for result in report.documents:
            if not isinstance(result.document, ScenarioTemplate):
                continue
            scenario_id = result.document.scenario_id
            if scenario_id in template_ids_seen:
                result.add_error(f"scenarioId: duplicate template id '{scenario_id}'")
                continue
            template_ids_seen.add(scenario_id)
            if result.passed:
                templates[scenario_id] = result.document

        for result in report.documents:
            overlay = result.document
            if not isinstance(overlay, RoleOverlay):
                continue
            key = (overlay.scenario_id, overlay.role.value)
            if key in overlay_keys:
                result.add_error(
                    f"role: duplicate overlay for scenario '{overlay.scenario_id}' "
                    f"and role '{overlay.role.value}'"
                )
            overlay_keys.add(key)

            template = templates.get(overlay.scenario_id)
            if template is None:
                result.add_error(
                    f"scenarioId: overlay targets unknown or invalid scenario "
                    f"'{overlay.scenario_id}'"
                )
                continue
            result.extend_errors(check_overlay_against_template(overlay, template))


def validate_content(directory: str | Path) -> ValidationReport:
    """Validate a content directory (convenience function)."""
    return ContentValidator().validate_directory(directory)
