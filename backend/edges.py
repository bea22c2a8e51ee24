from flow_graph import Edge, FlowGraph, Node


def build_edge(source: Node, target: Node) -> Edge:
    return Edge(
        source=source.id,
        target=target.id,
        source_state=source.state,
        target_state=target.state,
    )


def refresh_edge(graph: FlowGraph, source_id: str, target_id: str) -> Edge | None:
    """
    Rebuild the stored edge for a pair from the endpoints' current states.
    Returns None (and creates nothing) when the pair has no edge.
    """
    if graph.get_edge(source_id, target_id) is None:
        return None
    return graph.add_edge(build_edge(graph.nodes[source_id], graph.nodes[target_id]))


def synthesize_prereq_edges(new_node: Node, graph: FlowGraph) -> list[Edge]:
    """
    Wire `new_node` to every other course in the flow it shares a prerequisite
    relation with.

    Prerequisite lists only live on the dependent course, so both sides are
    scanned:
      - new_node lists n      → edge n -> new_node
      - n lists new_node      → edge new_node -> n

    Both may fire for the same pair. Edges are stored under their derived id,
    so running this again only refreshes the state snapshot on each edge.
    Returns the edges that were created or refreshed.
    """
    if new_node.id not in graph.nodes:
        raise ValueError(f"{new_node.id!r} must be in the flow before it can be wired")

    touched: list[Edge] = []
    for other in list(graph.nodes.values()):
        if other.id == new_node.id:
            continue
        if other.id in new_node.prerequisite_ids:
            touched.append(graph.add_edge(build_edge(other, new_node)))
        if new_node.id in other.prerequisite_ids:
            touched.append(graph.add_edge(build_edge(new_node, other)))
    return touched
