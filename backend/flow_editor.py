"""
Mutation entry points for a course flow.

FlowEditor sequences the graph operations for each user action:

  insert_course
    fetch course → build node → classify against the current flow → insert
    → synthesize prerequisite edges → propagate from the new node
    → layout → undo snapshot → autosave

Collaborators are passed in explicitly:

  catalog     fetch_course(course_id) -> CourseRecord, raises CourseNotFound
                or CourseFetchError
  layout      layout(graph) -> graph            (optional, cosmetic only)
  undo_stack  record_snapshot(graph) -> None    (optional)
  autosave    callable(graph) -> None           (optional)

Graphs are mutated in place and returned. Each call must run to completion
before the next mutation on the same graph starts.
"""

import sys

from course_catalog import CourseFetchError, CourseNotFound
from edges import synthesize_prereq_edges
from eligibility import classify
from flow_graph import EligibilityState, FlowGraph, Node
from propagation import propagate


class InsertError(Exception):
    """A course could not be inserted. The flow is left unchanged."""
    error_code = "INSERT_FAILED"

    def __init__(self, course_id: str, message: str):
        self.course_id = course_id
        super().__init__(message)


class DuplicateCourseError(InsertError):
    error_code = "DUPLICATE_COURSE"

    def __init__(self, course_id: str):
        super().__init__(course_id, f"{course_id} is already present in the flow, it cannot be added")


class UnknownCourseError(InsertError):
    error_code = "UNKNOWN_COURSE"

    def __init__(self, course_id: str):
        super().__init__(course_id, f"{course_id} is not a known course number")


class CourseFetchFailedError(InsertError):
    error_code = "FETCH_FAILED"

    def __init__(self, course_id: str, reason: str):
        self.reason = reason
        super().__init__(course_id, f"{course_id} could not be fetched: {reason}")


class FlowEditor:
    def __init__(self, catalog, layout=None, undo_stack=None, autosave=None):
        self.catalog = catalog
        self.layout = layout
        self.undo_stack = undo_stack
        self.autosave = autosave

    def _commit(self, graph: FlowGraph) -> FlowGraph:
        """Hand a finished mutation to layout, history and persistence."""
        if self.layout is not None:
            graph = self.layout.layout(graph)
        if self.undo_stack is not None:
            self.undo_stack.record_snapshot(graph)
        if self.autosave is not None:
            self.autosave(graph)
        return graph

    # ── Insertion ────────────────────────────────────────────────────────────

    def insert_course(self, course_id: str, graph: FlowGraph, marked_taken: bool = False) -> FlowGraph:
        """
        Add a course to the flow and bring every affected state up to date.

        Raises DuplicateCourseError, UnknownCourseError or CourseFetchFailedError
        before touching the graph, so a failed call leaves it exactly as it was.
        """
        if course_id in graph.nodes:
            raise DuplicateCourseError(course_id)
        try:
            record = self.catalog.fetch_course(course_id)
        except CourseNotFound as exc:
            raise UnknownCourseError(course_id) from exc
        except CourseFetchError as exc:
            raise CourseFetchFailedError(course_id, exc.reason) from exc
        # The catalog may canonicalize the id ("cs101" -> "CS 101").
        if record.course_id in graph.nodes:
            raise DuplicateCourseError(record.course_id)

        node = Node(
            id=record.course_id,
            state=EligibilityState.TAKEN if marked_taken else EligibilityState.CANNOT_TAKE,
            label=record.label,
            prerequisite_ids=list(record.prerequisite_ids),
            metadata=dict(record.metadata),
        )
        if not marked_taken:
            node.state = classify(node, graph)

        graph.add_node(node)
        synthesize_prereq_edges(node, graph)
        propagate(node, graph)
        return self._commit(graph)

    def insert_prerequisite_subtree(
        self,
        course_id: str,
        graph: FlowGraph,
        max_depth: int = 1,
    ) -> tuple[FlowGraph, list[dict]]:
        """
        Best-effort import of a course's prerequisites as untaken courses.

        Prerequisites already in the flow are skipped. A prerequisite that
        fails to insert is logged and reported, and the rest still go in.
        With max_depth > 1 the newly added prerequisites get the same
        treatment, level by level (no topological ordering).

        Returns:
          (graph, failures)

        failures item shape:
          {"course_id": str, "error_code": str, "message": str}
        """
        node = graph.nodes.get(course_id)
        if node is not None:
            prereq_ids = list(node.prerequisite_ids)
        else:
            try:
                prereq_ids = list(self.catalog.fetch_course(course_id).prerequisite_ids)
            except CourseNotFound as exc:
                raise UnknownCourseError(course_id) from exc
            except CourseFetchError as exc:
                raise CourseFetchFailedError(course_id, exc.reason) from exc

        failures: list[dict] = []
        depth = 1
        while prereq_ids and depth <= max_depth:
            added: list[str] = []
            for prereq_id in prereq_ids:
                if prereq_id in graph.nodes:
                    continue
                try:
                    self.insert_course(prereq_id, graph, marked_taken=False)
                except InsertError as exc:
                    print(f"[WARN] Skipping prerequisite {prereq_id} of {course_id}: {exc}", file=sys.stderr)
                    failures.append({
                        "course_id": prereq_id,
                        "error_code": exc.error_code,
                        "message": str(exc),
                    })
                    continue
                added.append(prereq_id)

            next_ids: list[str] = []
            for added_id in added:
                added_node = graph.nodes.get(added_id)
                if added_node is None:
                    continue
                for pid in added_node.prerequisite_ids:
                    if pid not in graph.nodes and pid not in next_ids:
                        next_ids.append(pid)
            prereq_ids = next_ids
            depth += 1

        return graph, failures

    # ── Other mutations ──────────────────────────────────────────────────────

    def set_taken(self, course_id: str, graph: FlowGraph, taken: bool = True) -> FlowGraph:
        """Mark a course completed (or not) and re-derive its dependents."""
        node = graph.nodes[course_id]
        if taken:
            node.state = EligibilityState.TAKEN
        else:
            node.state = classify(node, graph)
        propagate(node, graph)
        return self._commit(graph)

    def remove_course(self, course_id: str, graph: FlowGraph) -> FlowGraph:
        """Delete a course and its edges; its former dependents are re-derived."""
        dependents = [n.id for n in graph.successors(course_id)]
        graph.remove_node(course_id)
        for dep_id in dependents:
            dep = graph.nodes.get(dep_id)
            if dep is None:
                continue
            if not dep.taken:
                dep.state = classify(dep, graph)
            propagate(dep, graph)
        return self._commit(graph)

    def undo(self, graph: FlowGraph) -> FlowGraph:
        """Previous snapshot, or `graph` unchanged when there is nothing to undo."""
        if self.undo_stack is None:
            return graph
        restored = self.undo_stack.undo()
        if restored is None:
            return graph
        if self.autosave is not None:
            self.autosave(restored)
        return restored

    def redo(self, graph: FlowGraph) -> FlowGraph:
        if self.undo_stack is None:
            return graph
        restored = self.undo_stack.redo()
        if restored is None:
            return graph
        if self.autosave is not None:
            self.autosave(restored)
        return restored
