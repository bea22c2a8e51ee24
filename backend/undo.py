from flow_graph import FlowGraph


class UndoStack:
    """
    Bounded history of flow snapshots.

    Every snapshot is a deep copy, so later in-place mutations of the live
    graph never leak into history. The most recent snapshot is the current
    state; undo steps back one snapshot, redo steps forward again. Recording a
    new snapshot after an undo discards the redo tail.
    """

    def __init__(self, limit: int = 50, initial: FlowGraph | None = None):
        self.limit = max(1, int(limit))
        self._past: list[FlowGraph] = []
        self._future: list[FlowGraph] = []
        if initial is not None:
            self.record_snapshot(initial)

    def record_snapshot(self, graph: FlowGraph) -> None:
        self._past.append(graph.copy())
        self._future.clear()
        while len(self._past) > self.limit:
            self._past.pop(0)

    @property
    def can_undo(self) -> bool:
        return len(self._past) > 1

    @property
    def can_redo(self) -> bool:
        return bool(self._future)

    def current(self) -> FlowGraph | None:
        return self._past[-1].copy() if self._past else None

    def undo(self) -> FlowGraph | None:
        """Step back; returns a copy of the restored graph, or None at the start."""
        if not self.can_undo:
            return None
        self._future.append(self._past.pop())
        return self._past[-1].copy()

    def redo(self) -> FlowGraph | None:
        if not self._future:
            return None
        self._past.append(self._future.pop())
        return self._past[-1].copy()

    def clear(self) -> None:
        self._past.clear()
        self._future.clear()
