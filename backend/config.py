import os

from dotenv import load_dotenv

load_dotenv()

# ── Paths ─────────────────────────────────────────────────────────────────────
BACKEND_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.dirname(BACKEND_DIR)
_DEFAULT_DATA_PATH = os.path.join(PROJECT_ROOT, "data", "courses.csv")
_DEFAULT_FLOW_STORE_DIR = os.path.join(PROJECT_ROOT, "data", "flows")


def _project_path(raw: str, default: str) -> str:
    if not raw:
        return default
    if not os.path.isabs(raw):
        return os.path.join(PROJECT_ROOT, raw)
    return raw


def env_float(name: str, default: float, minimum: float = 0.0) -> float:
    raw = os.environ.get(name, "")
    try:
        return max(minimum, float(raw))
    except (TypeError, ValueError):
        return default


def env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = os.environ.get(name, "")
    try:
        return max(minimum, int(raw))
    except (TypeError, ValueError):
        return default


# Course source: an HTTP course API wins over the CSV catalog when both are set.
COURSE_API_URL = os.environ.get("COURSE_API_URL", "").strip().rstrip("/")
COURSE_DATA_PATH = _project_path(os.environ.get("COURSE_DATA_PATH", ""), _DEFAULT_DATA_PATH)
FLOW_STORE_DIR = _project_path(os.environ.get("FLOW_STORE_DIR", ""), _DEFAULT_FLOW_STORE_DIR)

UNDO_LIMIT = env_int("UNDO_LIMIT", 50, minimum=1)
HTTP_TIMEOUT_SECONDS = env_float("HTTP_TIMEOUT_SECONDS", 10.0, minimum=0.1)


def course_source() -> str:
    """The configured course source: API base URL if set, else the CSV path."""
    return COURSE_API_URL or COURSE_DATA_PATH
