"""Organizational health analysis."""

from .span_of_control import (
    DEFAULT_THRESHOLDS,
    SpanMetrics,
    SpanThresholds,
    average_span,
    calculate_span_metrics,
    get_direct_reports,
    get_organizational_depth,
    get_span_status,
    get_total_team_size,
    leaders_over_threshold,
    span_distribution,
    span_metrics_for,
)

__all__ = [
    "DEFAULT_THRESHOLDS",
    "SpanMetrics",
    "SpanThresholds",
    "average_span",
    "calculate_span_metrics",
    "get_direct_reports",
    "get_organizational_depth",
    "get_span_status",
    "get_total_team_size",
    "leaders_over_threshold",
    "span_distribution",
    "span_metrics_for",
]
