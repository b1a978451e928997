import pytest

from builders import edge, manager_chain, person
from orgraph.graph import (
    calculate_centrality,
    collaboration_score,
    find_bridge_nodes,
    find_manager_cycles,
    get_direct_connections,
    get_sphere_of_influence,
    suggest_connections,
)


def test_direct_connections_point_at_the_other_end(chain_document) -> None:
    connections = get_direct_connections("b", chain_document.edges)
    assert sorted((c.node_id, c.relationship_type, c.edge_id) for c in connections) == [
        ("a", "manager", "ab"),
        ("c", "manager", "bc"),
    ]


def test_sphere_of_influence_excludes_origin() -> None:
    edges = manager_chain("a", "b", "c", "d")
    assert get_sphere_of_influence("a", edges, depth=1) == {"b"}
    assert get_sphere_of_influence("a", edges, depth=2) == {"b", "c"}
    assert get_sphere_of_influence("b", edges) == {"a", "c", "d"}
    assert get_sphere_of_influence("zz", edges) == set()


def test_degree_centrality(chain_document) -> None:
    assert calculate_centrality("b", chain_document.nodes, chain_document.edges) == pytest.approx(1.0)
    assert calculate_centrality("a", chain_document.nodes, chain_document.edges) == pytest.approx(0.5)
    assert calculate_centrality("a", [person("a")], []) == 0.0


def test_bridge_nodes(chain_document) -> None:
    assert find_bridge_nodes(chain_document.nodes, chain_document.edges) == ["b"]


def test_no_bridges_in_a_triangle() -> None:
    nodes = [person(i) for i in "abc"]
    edges = [*manager_chain("a", "b", "c"), edge("ac", "a", "c", "dotted")]
    assert find_bridge_nodes(nodes, edges) == []


def test_suggests_peers_under_same_manager() -> None:
    nodes = [person("m"), person("x"), person("y")]
    edges = [edge("mx", "m", "x"), edge("my", "m", "y")]

    suggestions = suggest_connections("x", nodes, edges)
    assert [(s.target_id, s.score) for s in suggestions] == [("y", 0.8)]
    assert suggestions[0].reason == "Team member under same manager"


def test_suggests_shared_matrix_assignments() -> None:
    nodes = [
        person("a", brands=["Aurora"], channels=["Retail"], departments=["Sales"]),
        person("b", brands=["Aurora"], channels=["Retail"]),
        person("c", brands=["Aurora"], departments=["Sales"]),
        person("d", brands=["Zenith"], departments=["Sales"]),
    ]
    suggestions = suggest_connections("a", nodes, [])

    assert [(s.target_id, s.score) for s in suggestions] == [("b", 0.9), ("c", 0.7)]
    assert suggestions[0].reason == "Shared brand (Aurora) and channel (Retail)"


def test_suggestions_skip_existing_connections_and_respect_limit() -> None:
    nodes = [person(i, brands=["Aurora"], channels=["Retail"]) for i in "abcd"]
    suggestions = suggest_connections("a", nodes, [edge("ab", "a", "b", "dotted")], limit=1)
    assert len(suggestions) == 1
    assert suggestions[0].target_id != "b"


def test_collaboration_score_is_capped() -> None:
    a = person("a", brands=["X", "Y"], channels=["R", "P"], departments=["S"], tier="vp", location="Oslo")
    assert collaboration_score(a, a) == 1.0
    assert collaboration_score(person("p"), person("q")) == pytest.approx(0.1)


def test_manager_cycles() -> None:
    edges = [*manager_chain("a", "b", "c"), edge("ca", "c", "a"), edge("dd", "d", "d"), edge("s", "e", "f", "dotted")]
    cycles = find_manager_cycles(edges)
    assert sorted(sorted(c) for c in cycles) == [["a", "b", "c"], ["d"]]


def test_acyclic_chart_has_no_cycles(chain_document) -> None:
    assert find_manager_cycles(chain_document.edges) == []


def test_long_chain_cycles() -> None:
    ids = [f"p{i}" for i in range(1500)]
    edges = [edge(f"e{i}", a, b) for i, (a, b) in enumerate(zip(ids, ids[1:]))]
    assert find_manager_cycles(edges) == []

    [cycle] = find_manager_cycles([*edges, edge("back", "p1499", "p0")])
    assert sorted(cycle) == sorted(ids)
