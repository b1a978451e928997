"""Bounded undo/redo history of full-document snapshots."""

from __future__ import annotations

import copy
from collections import deque
from dataclasses import dataclass

from ..models import GraphDocument, SelectionState

HISTORY_LIMIT = 100


@dataclass
class GraphSnapshot:
    """Deep copy of the document and selection at one point in time."""

    document: GraphDocument
    selection: SelectionState

    @classmethod
    def capture(cls, document: GraphDocument, selection: SelectionState) -> "GraphSnapshot":
        return cls(document=copy.deepcopy(document), selection=copy.deepcopy(selection))


class HistoryStack:
    """
    Two bounded stacks (``past`` and ``future``).

    When a stack is over capacity the oldest entry is evicted: the bottom
    of ``past`` and the far end of ``future``.
    """

    def __init__(self, limit: int = HISTORY_LIMIT):
        if limit <= 0:
            raise ValueError("history limit must be positive")
        self.limit = limit
        self.past: deque[GraphSnapshot] = deque(maxlen=limit)
        self.future: deque[GraphSnapshot] = deque(maxlen=limit)

    def record(self, snapshot: GraphSnapshot) -> None:
        """Push a pre-mutation snapshot and invalidate the redo stack."""
        self.past.append(snapshot)
        self.future.clear()

    def can_undo(self) -> bool:
        return bool(self.past)

    def can_redo(self) -> bool:
        return bool(self.future)

    def undo(self, current: GraphSnapshot) -> GraphSnapshot | None:
        """Pop the latest past snapshot, parking ``current`` on the redo stack."""
        if not self.past:
            return None
        snapshot = self.past.pop()
        self.future.appendleft(current)
        return snapshot

    def redo(self, current: GraphSnapshot) -> GraphSnapshot | None:
        if not self.future:
            return None
        snapshot = self.future.popleft()
        self.past.append(current)
        return snapshot

    def clear(self) -> None:
        self.past.clear()
        self.future.clear()

    def __len__(self) -> int:
        return len(self.past)
