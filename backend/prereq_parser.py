import re
import pandas as pd
from normalizer import normalize_code

# Case-insensitive separators. OR alternatives are flattened: the flow treats
# every listed prerequisite as required.
OR_SPLIT = re.compile(r'\s+or\s+', re.IGNORECASE)
AND_SPLIT = re.compile(r'\s*[;,]\s*|\s+and\s+', re.IGNORECASE)

# Regex to strip parenthetical annotation clauses, e.g. "(may be concurrent)"
ANNOTATION_RE = re.compile(r'\s*\([^)]*\)')

NONE_VALUES = {"none", "none listed", "n/a", "nan", ""}


def _strip_annotations(s: str) -> str:
    """Remove parenthetical annotation clauses, e.g. '(may be concurrent)'."""
    return ANNOTATION_RE.sub('', s).strip()


def parse_prereq_list(prereq_str) -> list[str]:
    """
    Parses a free-text prerequisite field into an ordered list of course codes.

    Supported grammar:
      none / none listed / n/a  → []
      CODE                      → ["DEPT NNN"]
      CODE; CODE, CODE          → ["DEPT NNN", ...]
      CODE and CODE             → ["DEPT NNN", ...]
      CODE or CODE              → ["DEPT NNN", ...]   (flattened)

    Parenthetical annotations are stripped first. Tokens that do not look like
    course codes are dropped. Duplicates keep their first position.
    """
    if prereq_str is None or (isinstance(prereq_str, float) and pd.isna(prereq_str)):
        return []

    s = _strip_annotations(str(prereq_str).strip())
    if s.lower() in NONE_VALUES:
        return []
    tokens = []
    for clause in AND_SPLIT.split(s):
        tokens.extend(OR_SPLIT.split(clause))

    codes: list[str] = []
    for tok in tokens:
        code = normalize_code(tok.strip())
        if code and code not in codes:
            codes.append(code)
    return codes
