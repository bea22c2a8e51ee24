import json

import pandas as pd
import pytest
from build_flow import build_flow, format_summary, main
from course_catalog import CourseFetchError, HttpCourseCatalog
from flow_editor import FlowEditor
from flow_graph import FlowGraph
from flow_store import FlowStore
from flow_utils import DictCatalog


@pytest.fixture
def courses_csv(tmp_path):
    path = tmp_path / "courses.csv"
    pd.DataFrame([
        {"course_code": "CS 101", "prerequisites": "none"},
        {"course_code": "MATH 120", "prerequisites": "none"},
        {"course_code": "CS 201", "prerequisites": "CS 101"},
        {"course_code": "CS 301", "prerequisites": "CS 201; MATH 120"},
    ]).to_csv(path, index=False)
    return str(path)


class TestBuildFlow:
    def test_taken_then_planned(self):
        editor = FlowEditor(DictCatalog({"CS101": [], "CS201": ["CS101"]}))
        graph, problems = build_flow(editor, FlowGraph(), ["CS101"], ["CS201"])
        assert problems == []
        assert graph.nodes["CS201"].state.value == "courseCanTake"

    def test_rejections_are_reported(self, capsys):
        editor = FlowEditor(DictCatalog({"CS101": []}))
        graph, problems = build_flow(editor, FlowGraph(), ["CS101"], ["CS101", "NOPE1"])
        assert [p["error_code"] for p in problems] == ["DUPLICATE_COURSE", "UNKNOWN_COURSE"]
        assert "[ERROR]" in capsys.readouterr().err

    def test_summary_lists_blockers(self):
        editor = FlowEditor(DictCatalog({"CS101": [], "CS201": ["CS101"]}))
        graph, _ = build_flow(editor, FlowGraph(), [], ["CS101", "CS201"])
        summary = format_summary(graph)
        assert "CS201" in summary
        assert "needs CS101" in summary


class TestMain:
    def test_writes_elements(self, courses_csv, tmp_path, capsys):
        out = tmp_path / "flow.json"
        code = main([
            "--catalog", courses_csv,
            "--taken", "cs101",
            "--add", "CS 301",
            "--with-prereqs",
            "--out", str(out),
        ])
        assert code == 0
        elements = json.loads(out.read_text())
        ids = [el["id"] for el in elements if "source" not in el]
        assert ids == ["CS 101", "CS 301", "CS 201", "MATH 120"]
        assert "cannot take" in capsys.readouterr().out

    def test_unknown_course_exit_code(self, courses_csv, capsys):
        assert main(["--catalog", courses_csv, "--add", "CS 999"]) == 1
        assert "Not in the catalog: CS 999" in capsys.readouterr().err

    def test_autosaves_into_store(self, courses_csv, tmp_path):
        store = FlowStore(str(tmp_path / "flows"))
        flow = store.create_flow("user-1", "Plan A")
        code = main([
            "--catalog", courses_csv,
            "--store", str(tmp_path / "flows"),
            "--flow-id", flow["id"],
            "--taken", "CS 101",
        ])
        assert code == 0
        assert list(store.load_graph(flow["id"]).nodes) == ["CS 101"]

    def test_missing_flow(self, courses_csv, tmp_path):
        code = main([
            "--catalog", courses_csv,
            "--store", str(tmp_path / "flows"),
            "--flow-id", "missing",
        ])
        assert code == 1

    def test_flow_id_uses_configured_store(self, courses_csv, tmp_path, monkeypatch):
        flows_dir = str(tmp_path / "configured")
        monkeypatch.setattr("build_flow.FLOW_STORE_DIR", flows_dir)
        store = FlowStore(flows_dir)
        flow = store.create_flow("user-1", "Plan B")
        assert main(["--catalog", courses_csv, "--flow-id", flow["id"], "--add", "CS 201"]) == 0
        assert list(store.load_graph(flow["id"]).nodes) == ["CS 201"]

    def test_courses_already_in_flow_are_skipped(self, courses_csv, tmp_path, capsys):
        store = FlowStore(str(tmp_path / "flows"))
        flow = store.create_flow("user-1", "Plan A")
        args = ["--catalog", courses_csv, "--store", str(tmp_path / "flows"), "--flow-id", flow["id"]]
        assert main(args + ["--taken", "CS 101"]) == 0
        capsys.readouterr()
        assert main(args + ["--add", "cs-101, CS 201"]) == 0
        assert "[INFO] CS 101 is already in the flow" in capsys.readouterr().out
        assert list(store.load_graph(flow["id"]).nodes) == ["CS 101", "CS 201"]

    def test_malformed_code_is_rejected(self, courses_csv, capsys):
        assert main(["--catalog", courses_csv, "--add", "not a course, CS 101"]) == 1
        captured = capsys.readouterr()
        assert "Not a course number" in captured.err
        assert "CS 101" in captured.out

    def test_list_prints_catalog(self, courses_csv, capsys):
        assert main(["--catalog", courses_csv, "--list"]) == 0
        out = capsys.readouterr().out
        assert "Catalog (4 courses):" in out
        assert out.index("CS 101") < out.index("MATH 120")

    def test_list_failure_is_fatal(self, monkeypatch, capsys):
        def unreachable(self):
            raise CourseFetchError("course listing", "connection refused")

        monkeypatch.setattr(HttpCourseCatalog, "list_courses", unreachable)
        assert main(["--catalog", "http://courses.test", "--list"]) == 1
        assert "[FATAL]" in capsys.readouterr().err
