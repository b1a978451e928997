"""State ownership: the graph store, its undo history and persistence."""

from .history import HISTORY_LIMIT, GraphSnapshot, HistoryStack
from .persistence import load_state, save_state, state_from_dict, state_to_dict
from .store import AddPersonPayload, GraphStore, MergeResult, ScenarioComparison

__all__ = [
    "HISTORY_LIMIT",
    "GraphSnapshot",
    "HistoryStack",
    "load_state",
    "save_state",
    "state_from_dict",
    "state_to_dict",
    "AddPersonPayload",
    "GraphStore",
    "MergeResult",
    "ScenarioComparison",
]
