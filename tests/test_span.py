import pytest

from builders import edge, manager_chain, person
from orgraph.analysis import (
    SpanThresholds,
    average_span,
    calculate_span_metrics,
    get_organizational_depth,
    get_span_status,
    get_total_team_size,
    leaders_over_threshold,
    span_distribution,
    span_metrics_for,
)
from orgraph.config import SpanConfig


def test_top_of_chain_metrics(chain_document) -> None:
    metrics = span_metrics_for("a", chain_document.edges)
    assert metrics.direct_reports == 1
    assert metrics.total_team_size == 2
    assert metrics.depth == 2
    assert metrics.status == "healthy"


def test_leaf_metrics(chain_document) -> None:
    metrics = span_metrics_for("c", chain_document.edges)
    assert (metrics.direct_reports, metrics.total_team_size, metrics.depth, metrics.status) == (0, 0, 0, "none")


def test_only_manager_edges_count() -> None:
    edges = [edge("ab", "a", "b", "dotted"), edge("ac", "a", "c", "sponsor")]
    assert span_metrics_for("a", edges).direct_reports == 0


def test_span_status_thresholds() -> None:
    assert get_span_status(0) == "none"
    assert get_span_status(8) == "healthy"
    assert get_span_status(9) == "high"
    assert get_span_status(10) == "high"
    assert get_span_status(11) == "critical"

    tight = SpanThresholds.from_config(SpanConfig(healthy=3, high=5))
    assert get_span_status(4, tight) == "high"
    assert get_span_status(6, tight) == "critical"


def test_reporting_loop_terminates() -> None:
    edges = [*manager_chain("a", "b", "c"), edge("ca", "c", "a")]
    assert get_total_team_size("a", edges) == 3
    assert get_organizational_depth("a", edges) == 2


def test_co_managed_ladder_depth_and_team_size() -> None:
    # Each level has two people who both manage both people on the next level
    levels = [["root"]] + [[f"a{i}", f"b{i}"] for i in range(1, 23)]
    edges = [
        edge(f"{m}-{r}", m, r)
        for upper, lower in zip(levels, levels[1:])
        for m in upper
        for r in lower
    ]

    assert get_organizational_depth("root", edges) == 22
    assert get_total_team_size("root", edges) == 2 + 21 * 2 * 2


def test_very_long_chain() -> None:
    ids = [f"p{i}" for i in range(1500)]
    nodes = [person(i) for i in ids]
    edges = [edge(f"e{i}", a, b) for i, (a, b) in enumerate(zip(ids, ids[1:]))]

    [top] = calculate_span_metrics(nodes, edges, node_ids=["p0"])

    assert top.total_team_size == 1499
    assert top.depth == 1499


def test_metrics_for_every_person(chain_document) -> None:
    metrics = calculate_span_metrics(chain_document.nodes, chain_document.edges)
    assert [m.node_id for m in metrics] == ["a", "b", "c"]
    assert average_span(metrics) == pytest.approx(1.0)


def test_wide_span_is_flagged_and_bucketed() -> None:
    reports = [person(f"r{i}") for i in range(12)]
    nodes = [person("boss"), *reports]
    edges = [edge(f"e{i}", "boss", r.id) for i, r in enumerate(reports)]

    metrics = calculate_span_metrics(nodes, edges)
    flagged = leaders_over_threshold(metrics)
    assert [m.node_id for m in flagged] == ["boss"]
    assert flagged[0].status == "critical"
    assert leaders_over_threshold(metrics, "critical") == flagged

    distribution = span_distribution(metrics)
    assert distribution["0"] == 12
    assert distribution["10-12"] == 1
    assert sum(distribution.values()) == 13


def test_average_span_with_no_managers() -> None:
    assert average_span(calculate_span_metrics([person("a")], [])) == 0.0
