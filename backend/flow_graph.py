"""
Graph model for a course flow.

A flow is a directed graph of course nodes. Edges always point from a
prerequisite to the course that lists it (prerequisite -> dependent). Nodes and
edges live in insertion-ordered dicts keyed by id, so uniqueness of node ids and
of edge ids falls out of the mapping itself.

Saved flows use a flat "elements" list (nodes and edges mixed), which is what
the persistence store holds:

  node: {"id": "CS 201", "type": "courseCanTake", "position": {"x": 0, "y": 0},
         "data": {"label": "CS 201", "prerequisites": ["CS 101"], ...metadata}}
  edge: {"id": "CS 101-CS 201", "source": "CS 101", "target": "CS 201",
         "sourceType": "courseTaken", "targetType": "courseCanTake", "animated": True}
"""

import copy
from dataclasses import dataclass, field
from enum import Enum


class EligibilityState(Enum):
    """
    Eligibility of a course node inside a flow.

    TAKEN: marked completed by the user; never derived.
    CAN_TAKE: every prerequisite visible in the flow is TAKEN.
    CANNOT_TAKE: some prerequisite visible in the flow is not TAKEN.
    """
    TAKEN = "courseTaken"
    CAN_TAKE = "courseCanTake"
    CANNOT_TAKE = "courseCannotTake"


def edge_id(source_id: str, target_id: str) -> str:
    return f"{source_id}-{target_id}"


@dataclass
class Node:
    id: str
    state: EligibilityState
    label: str = ""
    prerequisite_ids: list[str] = field(default_factory=list)
    position: dict = field(default_factory=lambda: {"x": 0, "y": 0})
    metadata: dict = field(default_factory=dict)

    def __post_init__(self):
        if not self.label:
            self.label = self.id

    @property
    def taken(self) -> bool:
        return self.state is EligibilityState.TAKEN


@dataclass
class Edge:
    """Prerequisite -> dependent edge with a snapshot of both endpoint states."""
    source: str
    target: str
    source_state: EligibilityState
    target_state: EligibilityState

    @property
    def id(self) -> str:
        return edge_id(self.source, self.target)

    @property
    def satisfied(self) -> bool:
        return self.source_state is EligibilityState.TAKEN


class FlowGraph:
    """Mutable container of course nodes and prerequisite edges."""

    def __init__(self, nodes=None, edges=None):
        self.nodes: dict[str, Node] = {}
        self.edges: dict[str, Edge] = {}
        for node in nodes or []:
            self.add_node(node)
        for edge in edges or []:
            self.add_edge(edge)

    def __contains__(self, course_id) -> bool:
        return course_id in self.nodes

    def __len__(self) -> int:
        return len(self.nodes)

    def __eq__(self, other) -> bool:
        if not isinstance(other, FlowGraph):
            return NotImplemented
        return (
            list(self.nodes.items()) == list(other.nodes.items())
            and list(self.edges.items()) == list(other.edges.items())
        )

    def __repr__(self) -> str:
        return f"FlowGraph(nodes={len(self.nodes)}, edges={len(self.edges)})"

    # ── Nodes ────────────────────────────────────────────────────────────────

    def get_node(self, course_id: str) -> Node | None:
        return self.nodes.get(course_id)

    def add_node(self, node: Node) -> Node:
        if node.id in self.nodes:
            raise ValueError(f"Node {node.id!r} already present in the flow")
        self.nodes[node.id] = node
        return node

    def remove_node(self, course_id: str) -> Node:
        """Remove a node together with every edge touching it."""
        node = self.nodes.pop(course_id)
        for eid in [eid for eid, e in self.edges.items() if course_id in (e.source, e.target)]:
            del self.edges[eid]
        return node

    # ── Edges ────────────────────────────────────────────────────────────────

    def get_edge(self, source_id: str, target_id: str) -> Edge | None:
        return self.edges.get(edge_id(source_id, target_id))

    def add_edge(self, edge: Edge) -> Edge:
        """
        Store an edge under its derived id. An existing edge for the same pair
        is replaced in place, so its position in the insertion order is kept.
        """
        if edge.source not in self.nodes or edge.target not in self.nodes:
            raise ValueError(
                f"Edge {edge.id!r} references a course that is not in the flow"
            )
        self.edges[edge.id] = edge
        return edge

    def remove_edge(self, source_id: str, target_id: str) -> Edge | None:
        return self.edges.pop(edge_id(source_id, target_id), None)

    def successors(self, course_id: str) -> list[Node]:
        """Direct dependents of a course, in edge insertion order."""
        return [
            self.nodes[e.target]
            for e in self.edges.values()
            if e.source == course_id and e.target in self.nodes
        ]

    def predecessors(self, course_id: str) -> list[Node]:
        return [
            self.nodes[e.source]
            for e in self.edges.values()
            if e.target == course_id and e.source in self.nodes
        ]

    def incident_edges(self, course_id: str) -> list[Edge]:
        return [e for e in self.edges.values() if course_id in (e.source, e.target)]

    def copy(self) -> "FlowGraph":
        return copy.deepcopy(self)

    # ── Saved-flow element format ────────────────────────────────────────────

    def to_elements(self) -> list[dict]:
        elements: list[dict] = []
        for node in self.nodes.values():
            data = dict(node.metadata)
            data["label"] = node.label
            data["prerequisites"] = list(node.prerequisite_ids)
            elements.append({
                "id": node.id,
                "type": node.state.value,
                "position": dict(node.position),
                "data": data,
            })
        for edge in self.edges.values():
            elements.append({
                "id": edge.id,
                "source": edge.source,
                "target": edge.target,
                "sourceType": edge.source_state.value,
                "targetType": edge.target_state.value,
                "animated": edge.satisfied,
            })
        return elements

    @classmethod
    def from_elements(cls, elements) -> "FlowGraph":
        """
        Rebuild a graph from a saved element list.

        Edges whose endpoints are missing are dropped rather than raising, so a
        hand-edited or partially saved flow still loads.
        """
        graph = cls()
        raw_edges = []
        for el in elements or []:
            if "source" in el and "target" in el:
                raw_edges.append(el)
                continue
            data = dict(el.get("data") or {})
            label = data.pop("label", "") or el["id"]
            prereqs = list(data.pop("prerequisites", None) or [])
            graph.add_node(Node(
                id=el["id"],
                state=EligibilityState(el.get("type", EligibilityState.CANNOT_TAKE.value)),
                label=label,
                prerequisite_ids=prereqs,
                position=dict(el.get("position") or {"x": 0, "y": 0}),
                metadata=data,
            ))
        for el in raw_edges:
            source, target = el["source"], el["target"]
            if source not in graph.nodes or target not in graph.nodes:
                continue
            graph.add_edge(Edge(
                source=source,
                target=target,
                source_state=graph.nodes[source].state,
                target_state=graph.nodes[target].state,
            ))
        return graph
