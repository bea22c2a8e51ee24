import pandas as pd
import pytest
import requests
from course_catalog import (
    CourseFetchError,
    CourseNotFound,
    CsvCourseCatalog,
    HttpCourseCatalog,
    load_catalog,
    load_courses,
)
from flow_utils import FakeResponse, FakeSession


@pytest.fixture
def courses_csv(tmp_path):
    path = tmp_path / "courses.csv"
    pd.DataFrame([
        {"course_code": "CS 101", "course_name": "Intro Programming", "credits": "4", "prerequisites": "none"},
        {"course_code": "cs-201", "course_name": "Data Structures", "credits": "4", "prerequisites": "CS 101"},
        {"course_code": "CS 301", "course_name": "Algorithms", "credits": "4", "prerequisites": "CS 201; MATH 245"},
        {"course_code": "CS 101", "course_name": "Duplicate row", "credits": "4", "prerequisites": "none"},
    ]).to_csv(path, index=False)
    return str(path)


class TestLoadCourses:
    def test_codes_normalized_and_deduplicated(self, courses_csv, capsys):
        df = load_courses(courses_csv)
        assert df["course_code"].tolist() == ["CS 101", "CS 201", "CS 301"]
        err = capsys.readouterr().err
        assert "duplicate course_code" in err
        assert "MATH 245" in err

    def test_missing_course_code_column(self, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text("name,prerequisites\nIntro,none\n")
        with pytest.raises(ValueError):
            load_courses(str(path))


class TestCsvCourseCatalog:
    def test_fetch_course(self, courses_csv):
        catalog = CsvCourseCatalog.from_csv(courses_csv)
        record = catalog.fetch_course("CS 301")
        assert record.course_id == "CS 301"
        assert record.prerequisite_ids == ["CS 201", "MATH 245"]
        assert record.metadata == {"course_name": "Algorithms", "credits": "4"}

    def test_fetch_normalizes_query(self, courses_csv):
        catalog = CsvCourseCatalog.from_csv(courses_csv)
        assert catalog.fetch_course("cs201").course_id == "CS 201"

    def test_unknown_course(self, courses_csv):
        catalog = CsvCourseCatalog.from_csv(courses_csv)
        with pytest.raises(CourseNotFound):
            catalog.fetch_course("CS 999")

    def test_records_are_copies(self, courses_csv):
        catalog = CsvCourseCatalog.from_csv(courses_csv)
        catalog.fetch_course("CS 301").prerequisite_ids.append("CS 999")
        assert catalog.fetch_course("CS 301").prerequisite_ids == ["CS 201", "MATH 245"]

    def test_catalog_codes(self, courses_csv):
        assert CsvCourseCatalog.from_csv(courses_csv).catalog_codes == {"CS 101", "CS 201", "CS 301"}


BASE = "http://localhost:8080"


def _catalog(routes, **kwargs):
    session = FakeSession(routes)
    return HttpCourseCatalog(BASE + "/", session=session, **kwargs), session


class TestHttpCourseCatalog:
    def test_fetch_course(self):
        catalog, session = _catalog({
            f"{BASE}/course/CSC%20202": FakeResponse(payload={
                "courseNumber": "CSC 202",
                "prerequisites": ["CSC 101", "CSC 101", "MATH 141"],
                "info": {"description": "Data structures"},
            }),
        }, timeout=3)
        record = catalog.fetch_course("CSC 202")
        assert session.calls == [(f"{BASE}/course/CSC%20202", 3)]
        assert record.course_id == "CSC 202"
        assert record.prerequisite_ids == ["CSC 101", "MATH 141"]
        assert record.metadata == {"description": "Data structures"}

    def test_404_is_not_found(self):
        catalog, _ = _catalog({})
        with pytest.raises(CourseNotFound):
            catalog.fetch_course("CSC 999")

    def test_empty_body_is_not_found(self):
        catalog, _ = _catalog({f"{BASE}/course/CSC%20999": FakeResponse(payload=None)})
        with pytest.raises(CourseNotFound):
            catalog.fetch_course("CSC 999")

    def test_server_error_is_fetch_error(self):
        catalog, _ = _catalog({f"{BASE}/course/CSC%20101": FakeResponse(status_code=503, payload={})})
        with pytest.raises(CourseFetchError) as excinfo:
            catalog.fetch_course("CSC 101")
        assert excinfo.value.course_id == "CSC 101"
        assert "503" in excinfo.value.reason

    def test_connection_error_is_fetch_error(self):
        catalog, _ = _catalog({f"{BASE}/course/CSC%20101": requests.ConnectionError("connection refused")})
        with pytest.raises(CourseFetchError) as excinfo:
            catalog.fetch_course("CSC 101")
        assert "connection refused" in str(excinfo.value)

    def test_timeout_is_fetch_error(self):
        catalog, _ = _catalog({f"{BASE}/course/CSC%20101": requests.Timeout("read timed out")})
        with pytest.raises(CourseFetchError):
            catalog.fetch_course("CSC 101")

    def test_invalid_json_is_fetch_error(self):
        catalog, _ = _catalog({f"{BASE}/course/CSC%20101": FakeResponse(body=b"<html>oops</html>")})
        with pytest.raises(CourseFetchError):
            catalog.fetch_course("CSC 101")

    def test_non_object_body_is_fetch_error(self):
        catalog, _ = _catalog({f"{BASE}/course/CSC%20101": FakeResponse(payload=["CSC 101"])})
        with pytest.raises(CourseFetchError):
            catalog.fetch_course("CSC 101")


class TestListCourses:
    def test_csv_listing_sorted_with_description(self, tmp_path):
        path = tmp_path / "courses.csv"
        pd.DataFrame([
            {"course_code": "MATH 120", "course_name": "Discrete Mathematics", "prerequisites": "none",
             "description": "Logic and proofs."},
            {"course_code": "CS 101", "course_name": "Intro Programming", "prerequisites": "none",
             "description": ""},
        ]).to_csv(path, index=False)
        listing = CsvCourseCatalog.from_csv(str(path)).list_courses()
        assert listing == [
            {"course_id": "CS 101", "label": "CS 101", "description": "Intro Programming"},
            {"course_id": "MATH 120", "label": "MATH 120", "description": "Logic and proofs."},
        ]

    def test_http_listing(self):
        catalog, session = _catalog({
            f"{BASE}/course": FakeResponse(payload=[
                {"courseNumber": "CSC 101", "info": {"description": "Intro"}},
                {"courseNumber": "", "info": {}},
                {"courseNumber": "CSC 202"},
            ]),
        })
        assert catalog.list_courses() == [
            {"course_id": "CSC 101", "label": "CSC 101", "description": "Intro"},
            {"course_id": "CSC 202", "label": "CSC 202", "description": ""},
        ]
        assert session.calls[0][0] == f"{BASE}/course"

    def test_http_listing_failure(self):
        catalog, _ = _catalog({f"{BASE}/course": FakeResponse(status_code=500, payload={})})
        with pytest.raises(CourseFetchError):
            catalog.list_courses()


class TestLoadCatalog:
    def test_url_gives_http_catalog(self):
        assert isinstance(load_catalog("http://localhost:8080"), HttpCourseCatalog)

    def test_path_gives_csv_catalog(self, courses_csv):
        assert isinstance(load_catalog(courses_csv), CsvCourseCatalog)
