import pytest

from builders import edge, group, manager_chain, person
from orgraph.config import DEFAULT_CONFIG
from orgraph.graph import (
    assign_ranks,
    build_child_map,
    calculate_cleanup_layout,
    calculate_layout,
    calculate_matrix_layout,
    is_descendant,
    would_create_cycle,
)

LAYOUT = DEFAULT_CONFIG.layout


def _overlaps(a, b) -> bool:
    return abs(a.x - b.x) < LAYOUT.node_width and abs(a.y - b.y) < LAYOUT.node_height


def test_child_map_uses_manager_edges_only() -> None:
    edges = [*manager_chain("a", "b"), edge("s", "a", "c", "sponsor")]
    assert build_child_map(edges) == {"a": ["b"]}


def test_descendant_search(chain_document) -> None:
    child_map = build_child_map(chain_document.edges)
    assert is_descendant(child_map, "a", "c") is True
    assert is_descendant(child_map, "c", "a") is False


def test_would_create_cycle(chain_document) -> None:
    assert would_create_cycle(chain_document.edges, "c", "a") is True
    assert would_create_cycle(chain_document.edges, "a", "c") is False
    assert would_create_cycle(chain_document.edges, "b", "b") is True


def test_ranks_follow_longest_manager_chain() -> None:
    nodes = [person(i) for i in "abcd"]
    edges = [*manager_chain("a", "b", "c"), edge("ac", "a", "c"), edge("ad", "a", "d")]
    assert assign_ranks(nodes, edges) == {"a": 0, "b": 1, "c": 2, "d": 1}


def test_ranks_survive_a_reporting_loop() -> None:
    nodes = [person(i) for i in "abc"]
    edges = [*manager_chain("a", "b", "c"), edge("ca", "c", "a")]
    ranks = assign_ranks(nodes, edges)
    assert set(ranks) == {"a", "b", "c"}
    assert len(set(ranks.values())) == 3


def test_layout_places_reports_below_managers(chain_document) -> None:
    positions = calculate_layout(chain_document.nodes, chain_document.edges)
    spacing = LAYOUT.default

    assert positions["a"].y == spacing.margin_y
    assert positions["b"].y - positions["a"].y == LAYOUT.node_height + spacing.rank_separation
    assert positions["a"].x == positions["b"].x == positions["c"].x


def test_siblings_do_not_overlap_and_parent_is_centered() -> None:
    nodes = [person(i) for i in "mxyz"]
    edges = [edge("mx", "m", "x"), edge("my", "m", "y"), edge("mz", "m", "z")]
    positions = calculate_layout(nodes, edges)

    xs = sorted(positions[i].x for i in "xyz")
    assert xs[1] - xs[0] >= LAYOUT.node_width
    assert positions["m"].x == pytest.approx(positions["y"].x)


def test_groups_and_non_manager_edges_do_not_shape_layout() -> None:
    nodes = [person("a"), person("b"), group("g", "G", ["a", "b"])]
    positions = calculate_layout(nodes, [edge("s", "a", "b", "sponsor")])
    assert set(positions) == {"a", "b"}
    assert positions["a"].y == positions["b"].y


def test_spacious_cleanup_has_no_overlaps_and_is_centered() -> None:
    nodes = [person(i) for i in "abcdefg"]
    edges = [edge(f"a{c}", "a", c) for c in "bcd"] + [edge(f"b{c}", "b", c) for c in "efg"]
    positions = calculate_cleanup_layout(nodes, edges, "spacious")

    ids = list(positions)
    for i, first in enumerate(ids):
        for second in ids[i + 1:]:
            assert not _overlaps(positions[first], positions[second])

    xs = [p.x for p in positions.values()]
    ys = [p.y for p in positions.values()]
    assert (min(xs) + max(xs)) / 2 == pytest.approx(0)
    assert (min(ys) + max(ys)) / 2 == pytest.approx(0)


def test_compact_cleanup_is_tighter_than_spacious(chain_document) -> None:
    nodes = [*chain_document.nodes, person("d")]
    edges = [*chain_document.edges, edge("ad", "a", "d")]
    compact = calculate_cleanup_layout(nodes, edges, "compact")
    spacious = calculate_cleanup_layout(nodes, edges, "spacious")

    def height(positions):
        ys = [p.y for p in positions.values()]
        return max(ys) - min(ys)

    assert height(compact) < height(spacious)


def test_cleanup_rejects_unknown_mode(chain_document) -> None:
    with pytest.raises(ValueError):
        calculate_cleanup_layout(chain_document.nodes, chain_document.edges, "cozy")


def test_cleanup_of_empty_chart() -> None:
    assert calculate_cleanup_layout([], [], "compact") == {}


def test_matrix_layout_groups_by_primary_assignment() -> None:
    nodes = [
        person("a", brands=["Aurora", "Zenith"], primary_brand="Zenith"),
        person("b", brands=["Aurora"]),
        person("c"),
    ]
    positions = calculate_matrix_layout(nodes, [], "brands")

    columns = sorted({round(p.x - LAYOUT.default.margin_x) for p in positions.values()})
    assert len(columns) == 3
    assert positions["b"].x - positions["a"].x == LAYOUT.matrix_column_width
