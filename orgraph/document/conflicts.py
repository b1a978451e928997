"""Advisory matrix-assignment checks.

These never block a mutation or an import; they surface assignments a human
should look at (a primary outside its list, people spread over too many
dimensions, people missing a dimension entirely).
"""

from dataclasses import dataclass
from typing import Literal

from ..models import DIMENSIONS, GraphDocument, PersonNode

_DIMENSION_LABEL = {"brands": "brand", "channels": "channel", "departments": "department"}


@dataclass
class MatrixConflict:
    """A single advisory finding."""

    level: Literal["high", "medium", "low"]
    rule: Literal["primary-mismatch", "overlap", "missing"]
    node_id: str
    message: str

    def __str__(self) -> str:
        return f"{self.level.upper()}: [{self.rule}] {self.node_id} - {self.message}"


class MatrixRules:
    """Collection of matrix assignment checks over one document."""

    def __init__(self, document: GraphDocument, *, overlap_high: int = 8, overlap_medium: int = 6):
        self.people = document.person_nodes()
        self.overlap_high = overlap_high
        self.overlap_medium = overlap_medium

    def run_all(self) -> list[MatrixConflict]:
        results = []
        results.extend(self.check_primary_membership())
        results.extend(self.check_overlap())
        results.extend(self.check_missing_assignments())
        return results

    def check_primary_membership(self) -> list[MatrixConflict]:
        """A primary selection must be one of that dimension's assignments."""
        results = []
        for person in self.people:
            for dim in DIMENSIONS:
                primary = person.attributes.primary(dim)
                if primary and primary not in person.attributes.dimension(dim):
                    label = _DIMENSION_LABEL[dim]
                    results.append(
                        MatrixConflict(
                            level="high",
                            rule="primary-mismatch",
                            node_id=person.id,
                            message=f'Primary {label} "{primary}" not in assigned {dim}',
                        )
                    )
        return results

    def check_overlap(self) -> list[MatrixConflict]:
        results = []
        for person in self.people:
            total = _total_assignments(person)
            if total > self.overlap_high:
                results.append(
                    MatrixConflict(
                        level="high",
                        rule="overlap",
                        node_id=person.id,
                        message=f"Appears in {total} total dimensions - consider splitting responsibilities",
                    )
                )
            elif total > self.overlap_medium:
                results.append(
                    MatrixConflict(
                        level="medium",
                        rule="overlap",
                        node_id=person.id,
                        message=f"Appears in {total} dimensions - monitor workload",
                    )
                )
        return results

    def check_missing_assignments(self) -> list[MatrixConflict]:
        results = []
        for person in self.people:
            missing = [_DIMENSION_LABEL[d] for d in DIMENSIONS if not person.attributes.dimension(d)]
            if not missing:
                continue
            plural = "s" if len(missing) > 1 else ""
            results.append(
                MatrixConflict(
                    level="high" if len(missing) >= 2 else "medium",
                    rule="missing",
                    node_id=person.id,
                    message=f"Missing {' and '.join(missing)} assignment{plural}",
                )
            )
        return results


def _total_assignments(person: PersonNode) -> int:
    return sum(len(person.attributes.dimension(d)) for d in DIMENSIONS)


def find_matrix_conflicts(document: GraphDocument) -> list[MatrixConflict]:
    """Run every matrix check over ``document``."""
    return MatrixRules(document).run_all()
