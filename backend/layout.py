from flow_graph import FlowGraph

NODE_WIDTH = 105
NODE_HEIGHT = 45


class LayeredLayout:
    """
    Top-to-bottom layered placement of course nodes.

    A course's rank is the length of the longest prerequisite chain above it in
    the flow, so prerequisites always sit above their dependents. Courses in a
    rank are spread left to right in flow insertion order and the row is
    centered on x = 0. Positions are the node's top-left corner.

    Cosmetic only: states and edges are never touched.
    """

    def __init__(
        self,
        node_width: int = NODE_WIDTH,
        node_height: int = NODE_HEIGHT,
        node_sep: int = 50,
        rank_sep: int = 50,
    ):
        self.node_width = node_width
        self.node_height = node_height
        self.node_sep = node_sep
        self.rank_sep = rank_sep

    def ranks(self, graph: FlowGraph) -> dict[str, int]:
        parents: dict[str, list[str]] = {cid: [] for cid in graph.nodes}
        for edge in graph.edges.values():
            parents[edge.target].append(edge.source)

        memo: dict[str, int] = {}
        in_stack: set[str] = set()

        def _rank(course_id: str) -> int:
            if course_id in memo:
                return memo[course_id]
            if course_id in in_stack:
                return 0  # cycle guard
            in_stack.add(course_id)
            above = [_rank(p) for p in parents[course_id]]
            in_stack.discard(course_id)
            memo[course_id] = (1 + max(above)) if above else 0
            return memo[course_id]

        for course_id in graph.nodes:
            _rank(course_id)
        return memo

    def layout(self, graph: FlowGraph) -> FlowGraph:
        rows: dict[int, list[str]] = {}
        for course_id, rank in self.ranks(graph).items():
            rows.setdefault(rank, []).append(course_id)

        step_x = self.node_width + self.node_sep
        step_y = self.node_height + self.rank_sep
        for rank, course_ids in rows.items():
            row_width = len(course_ids) * step_x - self.node_sep
            left = -row_width / 2
            for i, course_id in enumerate(course_ids):
                graph.nodes[course_id].position = {
                    "x": left + i * step_x,
                    "y": rank * step_y,
                }
        return graph
