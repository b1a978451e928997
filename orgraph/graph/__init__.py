"""Pure graph algorithms over document nodes and edges: layout, paths, network analysis."""

from .clustering import Subgraph, TeamStructure, get_team_structure, group_by_proximity, identify_subgraphs
from .layout import (
    assign_ranks,
    build_child_map,
    calculate_cleanup_layout,
    calculate_layout,
    calculate_matrix_layout,
    is_descendant,
    would_create_cycle,
)
from .network import (
    ConnectionSuggestion,
    NetworkConnection,
    calculate_centrality,
    collaboration_score,
    find_bridge_nodes,
    find_manager_cycles,
    get_direct_connections,
    get_sphere_of_influence,
    suggest_connections,
)
from .pathfinding import (
    Path,
    PathStep,
    calculate_distance,
    describe_path,
    find_all_paths,
    find_shortest_path,
    shared_dimensions,
)

__all__ = [
    "Subgraph",
    "TeamStructure",
    "get_team_structure",
    "group_by_proximity",
    "identify_subgraphs",
    "assign_ranks",
    "build_child_map",
    "calculate_cleanup_layout",
    "calculate_layout",
    "calculate_matrix_layout",
    "is_descendant",
    "would_create_cycle",
    "ConnectionSuggestion",
    "NetworkConnection",
    "calculate_centrality",
    "collaboration_score",
    "find_bridge_nodes",
    "find_manager_cycles",
    "get_direct_connections",
    "get_sphere_of_influence",
    "suggest_connections",
    "Path",
    "PathStep",
    "calculate_distance",
    "describe_path",
    "find_all_paths",
    "find_shortest_path",
    "shared_dimensions",
]
