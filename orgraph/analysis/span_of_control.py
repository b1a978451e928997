"""Span-of-control metrics for managers (manager edges only)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Sequence

from ..config import SpanConfig
from ..models import GraphEdge, GraphNode, PersonNode

SpanStatus = Literal["none", "healthy", "high", "critical"]

DISTRIBUTION_BUCKETS = ("0", "1-3", "4-6", "7-9", "10-12", "13+")


@dataclass(frozen=True)
class SpanThresholds:
    """Direct-report counts: ``<= healthy`` is healthy, ``<= high`` is high, above is critical."""

    healthy: int = 8
    high: int = 10

    @classmethod
    def from_config(cls, config: SpanConfig) -> "SpanThresholds":
        return cls(healthy=config.healthy, high=config.high)


DEFAULT_THRESHOLDS = SpanThresholds()


@dataclass
class SpanMetrics:
    node_id: str
    direct_reports: int
    total_team_size: int
    depth: int
    status: SpanStatus


def get_direct_reports(manager_id: str, edges: Sequence[GraphEdge]) -> list[str]:
    return [e.target for e in edges if e.is_manager and e.source == manager_id]


def _reports_map(edges: Sequence[GraphEdge]) -> dict[str, list[str]]:
    reports: dict[str, list[str]] = {}
    for e in edges:
        if e.is_manager:
            reports.setdefault(e.source, []).append(e.target)
    return reports


def get_total_team_size(manager_id: str, edges: Sequence[GraphEdge], visited: set[str] | None = None) -> int:
    """Everyone below ``manager_id``; a node already counted contributes nothing more."""
    if visited is None:
        visited = set()
    reports = _reports_map(edges)
    total = 0
    # Explicit stack; reporting chains can be long
    stack = [manager_id]
    while stack:
        node_id = stack.pop()
        if node_id in visited:
            continue
        visited.add(node_id)
        children = reports.get(node_id, [])
        total += len(children)
        stack.extend(children)
    return total


def get_organizational_depth(manager_id: str, edges: Sequence[GraphEdge]) -> int:
    """Longest manager chain from ``manager_id`` down to a leaf; a reporting loop ends the chain.

    Depths are memoized per node (``depth[n] = 1 + max(depth[child])``), so
    shared managers do not multiply the work.
    """
    reports = _reports_map(edges)
    depth: dict[str, int] = {}
    on_path = {manager_id}
    stack = [(manager_id, iter(reports.get(manager_id, [])))]
    while stack:
        node_id, pending = stack[-1]
        for child in pending:
            if child in on_path or child in depth:
                continue
            on_path.add(child)
            stack.append((child, iter(reports.get(child, []))))
            break
        else:
            stack.pop()
            on_path.discard(node_id)
            depth[node_id] = max((depth[c] + 1 for c in reports.get(node_id, []) if c in depth), default=0)
    return depth[manager_id]


def get_span_status(direct_reports: int, thresholds: SpanThresholds = DEFAULT_THRESHOLDS) -> SpanStatus:
    if direct_reports == 0:
        return "none"
    if direct_reports <= thresholds.healthy:
        return "healthy"
    if direct_reports <= thresholds.high:
        return "high"
    return "critical"


def span_metrics_for(
    node_id: str,
    edges: Sequence[GraphEdge],
    thresholds: SpanThresholds = DEFAULT_THRESHOLDS,
) -> SpanMetrics:
    direct = len(get_direct_reports(node_id, edges))
    return SpanMetrics(
        node_id=node_id,
        direct_reports=direct,
        total_team_size=get_total_team_size(node_id, edges),
        depth=get_organizational_depth(node_id, edges),
        status=get_span_status(direct, thresholds),
    )


def calculate_span_metrics(
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    thresholds: SpanThresholds = DEFAULT_THRESHOLDS,
    node_ids: Sequence[str] | None = None,
) -> list[SpanMetrics]:
    """Metrics for every person node, or only for ``node_ids`` when given."""
    if node_ids is None:
        node_ids = [n.id for n in nodes if isinstance(n, PersonNode)]
    return [span_metrics_for(node_id, edges, thresholds) for node_id in node_ids]


def leaders_over_threshold(
    metrics: Sequence[SpanMetrics],
    threshold: Literal["high", "critical"] = "high",
) -> list[SpanMetrics]:
    """Leaders at or above ``threshold``, widest span first."""
    wanted = {"critical"} if threshold == "critical" else {"high", "critical"}
    flagged = [m for m in metrics if m.status in wanted]
    return sorted(flagged, key=lambda m: m.direct_reports, reverse=True)


def average_span(metrics: Sequence[SpanMetrics]) -> float:
    """Mean direct reports over nodes that have at least one."""
    managers = [m.direct_reports for m in metrics if m.direct_reports > 0]
    if not managers:
        return 0.0
    return sum(managers) / len(managers)


def span_distribution(metrics: Sequence[SpanMetrics]) -> dict[str, int]:
    distribution = {bucket: 0 for bucket in DISTRIBUTION_BUCKETS}
    for m in metrics:
        span = m.direct_reports
        if span == 0:
            distribution["0"] += 1
        elif span <= 3:
            distribution["1-3"] += 1
        elif span <= 6:
            distribution["4-6"] += 1
        elif span <= 9:
            distribution["7-9"] += 1
        elif span <= 12:
            distribution["10-12"] += 1
        else:
            distribution["13+"] += 1
    return distribution
