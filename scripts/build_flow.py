#!/usr/bin/env python
"""
Build a course flow from the command line.

Adds taken courses first, then planned courses (optionally pulling in their
prerequisites), and prints each course's eligibility.

Usage:
  python scripts/build_flow.py --taken "CS 101, MATH 120" --add "CS 201, CS 301"
  python scripts/build_flow.py --catalog data/courses.csv --add "CS 301" --with-prereqs
  python scripts/build_flow.py --add "CS 201" --out flow.json
  python scripts/build_flow.py --flow-id <id> --add "CS 201"
  python scripts/build_flow.py --list

Exit codes:
  0 = every requested course was added
  1 = at least one course was rejected or a prerequisite import failed
"""

import argparse
import json
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "backend"))

from config import FLOW_STORE_DIR, UNDO_LIMIT, course_source
from course_catalog import CourseFetchError, load_catalog
from eligibility import blocking_prereqs
from flow_editor import FlowEditor, InsertError
from flow_graph import FlowGraph
from flow_store import FlowNotFound, FlowStore
from layout import LayeredLayout
from normalizer import sort_course_request
from undo import UndoStack

_STATE_LABELS = {
    "courseTaken": "taken",
    "courseCanTake": "can take",
    "courseCannotTake": "cannot take",
}


def _split_codes(raw: str | None, graph: FlowGraph, catalog, rejected: list[str]) -> list[str]:
    """
    Sort a comma-separated course list against the flow. Malformed and
    uncatalogued codes go into `rejected`; courses already in the flow are
    skipped.
    """
    parsed = sort_course_request(raw, graph, getattr(catalog, "catalog_codes", None))
    for token in parsed["malformed"]:
        print(f"[WARN] Not a course number: {token!r}", file=sys.stderr)
    for code in parsed["unknown"]:
        print(f"[WARN] Not in the catalog: {code}", file=sys.stderr)
    for code in parsed["in_flow"]:
        print(f"[INFO] {code} is already in the flow, skipping")
    rejected.extend(parsed["malformed"] + parsed["unknown"])
    return parsed["to_add"]


def format_listing(courses: list[dict]) -> str:
    lines = [f"  {c['course_id']:<12} {c['description']}".rstrip() for c in courses]
    return "\n".join(lines) if lines else "  (empty catalog)"


def format_summary(graph: FlowGraph) -> str:
    lines = []
    for node in graph.nodes.values():
        line = f"  {node.id:<12} {_STATE_LABELS[node.state.value]}"
        if not node.taken:
            blocking = blocking_prereqs(node, graph)
            if blocking:
                line += f"  (needs {', '.join(blocking)})"
        lines.append(line)
    return "\n".join(lines) if lines else "  (empty flow)"


def build_flow(
    editor: FlowEditor,
    graph: FlowGraph,
    taken: list[str],
    planned: list[str],
    with_prereqs: bool = False,
    prereq_depth: int = 1,
) -> tuple[FlowGraph, list[dict]]:
    """Apply the requested insertions. Returns (graph, problems)."""
    problems: list[dict] = []

    def _insert(code: str, marked_taken: bool) -> bool:
        try:
            editor.insert_course(code, graph, marked_taken=marked_taken)
        except InsertError as exc:
            print(f"[ERROR] {exc}", file=sys.stderr)
            problems.append({"course_id": code, "error_code": exc.error_code, "message": str(exc)})
            return False
        return True

    for code in taken:
        _insert(code, True)
    for code in planned:
        if not _insert(code, False) or not with_prereqs:
            continue
        # Look the course up by the id the catalog gave it.
        course_id = next(reversed(graph.nodes))
        _, failures = editor.insert_prerequisite_subtree(course_id, graph, max_depth=prereq_depth)
        problems.extend(failures)
    return graph, problems


def main(args=None) -> int:
    parser = argparse.ArgumentParser(description="Build a course flow and report eligibility.")
    parser.add_argument("--catalog", type=str, default=None,
                        help="Course CSV path or course API base URL (default: COURSE_API_URL / COURSE_DATA_PATH).")
    parser.add_argument("--taken", type=str, default="", help="Comma-separated courses already completed.")
    parser.add_argument("--add", type=str, default="", help="Comma-separated courses to plan.")
    parser.add_argument("--with-prereqs", action="store_true", help="Also add the prerequisites of planned courses.")
    parser.add_argument("--prereq-depth", type=int, default=1, help="Prerequisite levels to import (default 1).")
    parser.add_argument("--store", type=str, default=FLOW_STORE_DIR,
                        help="Flow store directory (default: FLOW_STORE_DIR).")
    parser.add_argument("--flow-id", type=str, default=None, help="Saved flow to load and autosave into.")
    parser.add_argument("--out", type=str, default=None, help="Write the flow elements as JSON to this path.")
    parser.add_argument("--list", action="store_true", help="Print the course catalog and exit.")
    opts = parser.parse_args(args)

    catalog = load_catalog(opts.catalog or course_source())

    if opts.list:
        try:
            courses = catalog.list_courses()
        except CourseFetchError as exc:
            print(f"[FATAL] {exc}", file=sys.stderr)
            return 1
        print(f"Catalog ({len(courses)} courses):")
        print(format_listing(courses))
        return 0

    graph = FlowGraph()
    autosave = None
    if opts.flow_id:
        store = FlowStore(opts.store)
        try:
            graph = store.load_graph(opts.flow_id)
            autosave = store.autosave_callback(opts.flow_id)
        except FlowNotFound:
            print(f"[FATAL] Flow not found: {opts.flow_id}", file=sys.stderr)
            return 1
        print(f"[OK] Loaded flow {opts.flow_id} ({len(graph)} courses)")

    editor = FlowEditor(
        catalog,
        layout=LayeredLayout(),
        undo_stack=UndoStack(limit=UNDO_LIMIT, initial=graph),
        autosave=autosave,
    )
    rejected: list[str] = []
    taken = _split_codes(opts.taken, graph, catalog, rejected)
    planned = _split_codes(opts.add, graph, catalog, rejected)
    graph, problems = build_flow(
        editor,
        graph,
        taken,
        planned,
        with_prereqs=opts.with_prereqs,
        prereq_depth=max(1, opts.prereq_depth),
    )

    print("Flow:")
    print(format_summary(graph))

    if opts.out:
        with open(opts.out, "w", encoding="utf-8") as f:
            json.dump(graph.to_elements(), f, indent=2)
        print(f"[OK] Wrote {len(graph)} courses to {opts.out}")

    if problems or rejected:
        print(f"[WARN] {len(problems) + len(rejected)} course(s) could not be added.", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
