"""Error taxonomy for the CareerSim engine.

Content errors are aggregated into a report and only raised at the load
boundary. Resolution errors fail a single request before anything is
persisted, so a failed submission never changes stored session state.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from careersim.content.validator import ValidationReport


class CareerSimError(Exception):
    """Base class for all engine errors."""


class ContentValidationError(CareerSimError):
    """Authored content failed schema or referential-integrity checks."""

    def __init__(self, report: ValidationReport):
        self.report = report
        failed = report.failed_documents
        lines = [f"{len(failed)} of {report.total} content documents failed validation"]
        for doc in failed:
            lines.append(f"{doc.file} [doc {doc.doc_index}] ({doc.kind})")
            lines.extend(f"  {e}" for e in doc.errors)
        super().__init__("\n".join(lines))


class ScenarioNotFound(CareerSimError):
    """No template with the requested scenario id is loaded."""

    def __init__(self, scenario_id: str):
        self.scenario_id = scenario_id
        super().__init__(f"Scenario not found: {scenario_id}")


class ActionNotFound(CareerSimError):
    """The action id is not declared by the (merged) scenario."""

    def __init__(self, scenario_id: str, action_id: str, reason: str | None = None):
        self.scenario_id = scenario_id
        self.action_id = action_id
        message = f"Action not found: {action_id} in scenario: {scenario_id}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class ActionNotAvailable(ActionNotFound):
    """The action exists but is hidden or locked out for this session."""

    def __init__(self, scenario_id: str, action_id: str, reason: str):
        super().__init__(scenario_id, action_id, reason)


class FeedbackVariantMissing(CareerSimError):
    """A consequence rule points at a feedback key with no variant."""

    def __init__(self, scenario_id: str, feedback_key: str):
        self.scenario_id = scenario_id
        self.feedback_key = feedback_key
        super().__init__(
            f"Feedback variant '{feedback_key}' missing in scenario: {scenario_id}"
        )


class SessionNotFound(CareerSimError):
    """No persisted session with the requested id."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")
