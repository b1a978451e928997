from builders import edge, manager_chain, person
from orgraph.graph import get_team_structure, group_by_proximity, identify_subgraphs


def test_subgraphs_cover_isolated_nodes() -> None:
    nodes = [person(i) for i in "abcd"]
    edges = [edge("ab", "a", "b"), edge("cd", "c", "d", "dotted")]
    nodes.append(person("e"))

    subgraphs = identify_subgraphs(nodes, edges)
    assert [sorted(s.node_ids) for s in subgraphs] == [["a", "b"], ["c", "d"], ["e"]]
    assert [s.id for s in subgraphs] == ["subgraph-0", "subgraph-1", "subgraph-2"]
    assert subgraphs[1].edge_ids == ["cd"]
    assert subgraphs[2].size == 1


def test_group_by_proximity(chain_document) -> None:
    groups = group_by_proximity("a", chain_document.nodes, chain_document.edges, max_distance=1)
    assert groups == {0: ["a"], 1: ["b"]}

    groups = group_by_proximity("b", chain_document.nodes, chain_document.edges)
    assert groups[0] == ["b"]
    assert sorted(groups[1]) == ["a", "c"]


def test_team_structure_follows_manager_edges_down() -> None:
    edges = [*manager_chain("a", "b", "c"), edge("ad", "a", "d"), edge("sx", "x", "a", "sponsor")]
    team = get_team_structure("a", edges)

    assert team.node_ids == ["a", "b", "d", "c"]
    assert sorted(team.edge_ids) == ["ab", "ad", "bc"]
    assert team.depth == 3


def test_team_structure_depth_limit() -> None:
    team = get_team_structure("a", manager_chain("a", "b", "c", "d"), max_depth=1)
    assert team.node_ids == ["a", "b"]
