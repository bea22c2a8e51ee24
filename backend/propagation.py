from collections import deque

from edges import refresh_edge
from eligibility import classify
from flow_graph import FlowGraph, Node


def _refresh_incident_edges(graph: FlowGraph, course_id: str) -> None:
    for edge in graph.incident_edges(course_id):
        refresh_edge(graph, edge.source, edge.target)


def propagate(changed_node: Node, graph: FlowGraph) -> FlowGraph:
    """
    Re-derive eligibility for every course reachable from `changed_node`.

    Breadth-first over prerequisite -> dependent edges, siblings in edge
    insertion order. Each dependent is re-classified once (TAKEN courses are
    left alone), the state hints on its incident edges are rebuilt, and it is
    queued for its own dependents.

    A course's classification only depends on which of its prerequisites are
    TAKEN, and nothing here changes TAKEN, so one visit per course reaches the
    fixed point. Visited courses are tracked by id.
    """
    if changed_node.id not in graph.nodes:
        return graph

    _refresh_incident_edges(graph, changed_node.id)
    queue = deque([changed_node.id])
    visited: set[str] = set()

    while queue:
        current_id = queue.popleft()
        for child in graph.successors(current_id):
            if child.id in visited:
                continue
            if not child.taken:
                child.state = classify(child, graph)
            _refresh_incident_edges(graph, child.id)
            visited.add(child.id)
            queue.append(child.id)

    return graph
