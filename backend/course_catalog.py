"""
Course data providers.

The flow editor only needs `fetch_course(course_id) -> CourseRecord`, raising
CourseNotFound when the id does not resolve. Two sources are supported:

  - CsvCourseCatalog: a course sheet loaded with pandas
  - HttpCourseCatalog: the course API (GET /course/<courseNumber>)
"""

import sys
from dataclasses import dataclass, field

import pandas as pd
import requests

from config import HTTP_TIMEOUT_SECONDS
from normalizer import normalize_code
from prereq_parser import parse_prereq_list


class CourseNotFound(LookupError):
    """Raised when a course id does not resolve in the catalog."""

    def __init__(self, course_id: str, reason: str = ""):
        self.course_id = course_id
        self.reason = reason
        message = f"Course {course_id!r} not found"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class CourseFetchError(RuntimeError):
    """Raised when the catalog could not be reached or answered with garbage."""

    def __init__(self, course_id: str, reason: str):
        self.course_id = course_id
        self.reason = reason
        super().__init__(f"Could not fetch course {course_id!r}: {reason}")


@dataclass
class CourseRecord:
    course_id: str
    label: str
    prerequisite_ids: list[str] = field(default_factory=list)
    metadata: dict = field(default_factory=dict)


# Columns copied into node metadata when present.
_METADATA_COLUMNS = ("course_name", "credits", "description")


def _clean_value(val):
    if val is None or (isinstance(val, float) and pd.isna(val)):
        return None
    if isinstance(val, str):
        return val.strip() or None
    return val


class CsvCourseCatalog:
    """In-memory catalog built from a course DataFrame or CSV file."""

    def __init__(self, courses_df: pd.DataFrame):
        self.courses_df = courses_df
        self._records: dict[str, CourseRecord] = {}
        for _, row in courses_df.iterrows():
            code = row["course_code"]
            metadata = {}
            for col in _METADATA_COLUMNS:
                val = _clean_value(row.get(col))
                if val is not None:
                    metadata[col] = val
            self._records[code] = CourseRecord(
                course_id=code,
                label=code,
                prerequisite_ids=parse_prereq_list(row.get("prerequisites")),
                metadata=metadata,
            )

    @classmethod
    def from_csv(cls, path: str) -> "CsvCourseCatalog":
        return cls(load_courses(path))

    @property
    def catalog_codes(self) -> set[str]:
        return set(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def fetch_course(self, course_id: str) -> CourseRecord:
        code = normalize_code(course_id) or str(course_id or "").strip()
        record = self._records.get(code)
        if record is None:
            raise CourseNotFound(course_id)
        return CourseRecord(
            course_id=record.course_id,
            label=record.label,
            prerequisite_ids=list(record.prerequisite_ids),
            metadata=dict(record.metadata),
        )

    def list_courses(self) -> list[dict]:
        """Search listing: one {course_id, label, description} row per course, sorted by id."""
        return [
            {
                "course_id": code,
                "label": record.label,
                "description": record.metadata.get("description") or record.metadata.get("course_name", ""),
            }
            for code, record in sorted(self._records.items())
        ]


class HttpCourseCatalog:
    """
    Client for the course API.

    GET {base_url}/course/<courseNumber> returns
      {"courseNumber": "CSC 101", "prerequisites": [...], "info": {...}}
    A 404 or an empty body means the course does not exist. Transport errors,
    other HTTP errors and unparseable bodies raise CourseFetchError.

    GET {base_url}/course lists every course for search.
    """

    def __init__(self, base_url: str, timeout: float = HTTP_TIMEOUT_SECONDS, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch_course(self, course_id: str) -> CourseRecord:
        url = f"{self.base_url}/course/{requests.utils.quote(str(course_id), safe='')}"
        try:
            resp = self.session.get(url, timeout=self.timeout)
            if resp.status_code == 404:
                raise CourseNotFound(course_id)
            resp.raise_for_status()
            data = resp.json() if resp.content else None
        except (requests.RequestException, ValueError) as exc:
            raise CourseFetchError(course_id, str(exc)) from exc

        if not data:
            raise CourseNotFound(course_id, "empty response")
        if not isinstance(data, dict):
            raise CourseFetchError(course_id, f"unexpected response body: {type(data).__name__}")

        code = str(data.get("courseNumber") or course_id).strip()
        prereqs: list[str] = []
        for raw in data.get("prerequisites") or []:
            prereq = str(raw).strip()
            if prereq and prereq not in prereqs:
                prereqs.append(prereq)
        return CourseRecord(
            course_id=code,
            label=code,
            prerequisite_ids=prereqs,
            metadata=dict(data.get("info") or {}),
        )

    def list_courses(self) -> list[dict]:
        """
        Search listing from GET {base_url}/course.

        Each course object is reduced to {course_id, label, description};
        entries without a courseNumber are skipped.
        """
        try:
            resp = self.session.get(f"{self.base_url}/course", timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json() if resp.content else []
        except (requests.RequestException, ValueError) as exc:
            raise CourseFetchError("course listing", str(exc)) from exc

        listing = []
        for course in data or []:
            code = str(course.get("courseNumber") or "").strip() if isinstance(course, dict) else ""
            if not code:
                continue
            info = course.get("info") or {}
            listing.append({
                "course_id": code,
                "label": code,
                "description": info.get("description", ""),
            })
        return listing


def load_courses(data_path: str) -> pd.DataFrame:
    """Load and normalize the course sheet. Raises on file/schema errors."""
    courses_df = pd.read_csv(data_path, dtype=str)

    if "course_code" not in courses_df.columns:
        raise ValueError(f"{data_path}: missing required column 'course_code'")
    if "prerequisites" not in courses_df.columns:
        courses_df["prerequisites"] = "none"

    courses_df["course_code"] = courses_df["course_code"].fillna("").astype(str).str.strip()
    courses_df["prerequisites"] = courses_df["prerequisites"].fillna("none")

    normalized = courses_df["course_code"].apply(lambda c: normalize_code(c) or c)
    bad = courses_df.loc[normalized == "", "course_code"]
    if len(bad):
        print(f"[WARN] Dropping {len(bad)} row(s) with an empty course_code", file=sys.stderr)
    courses_df["course_code"] = normalized
    courses_df = courses_df[courses_df["course_code"] != ""]

    dupes = courses_df.loc[courses_df["course_code"].duplicated(), "course_code"].tolist()
    if dupes:
        print(f"[WARN] {len(dupes)} duplicate course_code row(s), keeping the first: {sorted(set(dupes))}", file=sys.stderr)
        courses_df = courses_df.drop_duplicates(subset="course_code", keep="first")

    # ── Startup data integrity checks ──────────────────────────────────────
    catalog_codes = set(courses_df["course_code"].tolist())
    referenced: set[str] = set()
    for raw in courses_df["prerequisites"]:
        referenced.update(parse_prereq_list(raw))
    unknown = referenced - catalog_codes
    if unknown:
        print(f"[WARN] {len(unknown)} prerequisite(s) reference courses not in the catalog: {sorted(unknown)}", file=sys.stderr)

    return courses_df.reset_index(drop=True)


def load_catalog(source: str, timeout: float = HTTP_TIMEOUT_SECONDS):
    """Build a course provider from a CSV path or an http(s) base URL."""
    if source.startswith(("http://", "https://")):
        print(f"[INFO] Using course API at {source}")
        return HttpCourseCatalog(source, timeout=timeout)
    catalog = CsvCourseCatalog.from_csv(source)
    print(f"[OK] Loaded {len(catalog)} courses from {source}")
    return catalog
