from flow_graph import EligibilityState, FlowGraph, Node


def blocking_prereqs(node: Node, graph: FlowGraph) -> list[str]:
    """
    Prerequisites of `node` that are present in the flow but not yet TAKEN,
    in the order the course lists them.
    """
    blocking: list[str] = []
    for prereq_id in node.prerequisite_ids:
        prereq = graph.nodes.get(prereq_id)
        if prereq is not None and not prereq.taken and prereq_id not in blocking:
            blocking.append(prereq_id)
    return blocking


def classify(node: Node, graph: FlowGraph) -> EligibilityState:
    """
    Derive CAN_TAKE / CANNOT_TAKE for a node from the prerequisites visible in
    the flow.

    Only courses that are actually in the flow are considered. A prerequisite
    the user never added does not block the course: the flow reasons about what
    is on the board, not about the full prerequisite closure. Every listed
    prerequisite is treated as required (no optional/OR groups).

    Never returns TAKEN; callers must not run this over a TAKEN node.
    """
    for prereq_id in node.prerequisite_ids:
        prereq = graph.nodes.get(prereq_id)
        if prereq is not None and not prereq.taken:
            return EligibilityState.CANNOT_TAKE
    return EligibilityState.CAN_TAKE
