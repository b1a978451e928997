"""Exception types raised by the org graph engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .document.validation import ValidationIssue


class OrgraphError(Exception):
    """Base class for engine errors."""


class ValidationError(OrgraphError, ValueError):
    """A document failed structural validation.

    All violations found are carried in ``issues``; the import is rejected
    as a whole.
    """

    def __init__(self, issues: list["ValidationIssue"]):
        self.issues = list(issues)
        lines = [str(issue) for issue in self.issues]
        super().__init__(
            f"Document failed validation with {len(lines)} issue(s):\n" + "\n".join(lines)
        )


class ReferenceIntegrityError(ValidationError):
    """Every violation is an edge pointing at a node id that does not exist."""


class CycleRiskError(OrgraphError, ValueError):
    """Creating a manager edge would close a reporting loop."""

    def __init__(self, source_id: str, target_id: str):
        self.source_id = source_id
        self.target_id = target_id
        super().__init__(
            f"Manager edge {source_id} -> {target_id} would create a reporting loop "
            f"({source_id} already reports up to {target_id})"
        )


class ScenarioNotFoundError(OrgraphError, KeyError):
    """Unknown scenario id."""

    def __init__(self, scenario_id: str):
        self.scenario_id = scenario_id
        super().__init__(scenario_id)

    def __str__(self) -> str:
        return f"Scenario not found: {self.scenario_id}"
