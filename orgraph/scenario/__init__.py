"""What-if scenarios: diffing independently owned document copies."""

from .diff import (
    CategorizedChange,
    ChangeCategory,
    DiffSummary,
    EdgeDiff,
    FieldChange,
    NodeDiff,
    ScenarioDiff,
    categorize_changes,
    compute_scenario_diff,
    describe_node_change,
    get_affected_edges,
    get_affected_nodes,
)

__all__ = [
    "CategorizedChange",
    "ChangeCategory",
    "DiffSummary",
    "EdgeDiff",
    "FieldChange",
    "NodeDiff",
    "ScenarioDiff",
    "categorize_changes",
    "compute_scenario_diff",
    "describe_node_change",
    "get_affected_edges",
    "get_affected_nodes",
]
