import re

# Matches: DEPT NNN, DEPT-NNNN, DEPTNNN, cs101, MATH 120A, etc.
CANONICAL = re.compile(r'^([A-Za-z]{2,6})\s*[-]?\s*(\d{3,4}[A-Za-z]?)$')

REQUEST_SPLIT = re.compile(r'[,\n;]+')


def normalize_code(raw: str) -> str | None:
    """
    Normalizes a course number to canonical 'DEPT NNN' format.
    Handles: 'cs101', 'CS-101', 'CS 101', 'math 120a', 'CSC 2010'
    Returns None if the string cannot be parsed as a course number.
    """
    if not raw or not str(raw).strip():
        return None
    m = CANONICAL.match(str(raw).strip())
    if m:
        return f"{m.group(1).upper()} {m.group(2).upper()}"
    return None


def sort_course_request(raw_str: str | None, flow_ids=(), catalog_codes: set | None = None) -> dict:
    """
    Sorts a typed list of courses into what a flow edit can do with each one.

    `flow_ids` are the course ids already in the flow (a FlowGraph works, it
    supports `in`). `catalog_codes` is the set of known courses when the
    catalog can enumerate them; a remote catalog passes None and every
    well-formed code is tried.

    Returns:
      {
        "to_add":    ["CS 201"],     # new to the flow, in request order
        "in_flow":   ["CS 101"],     # already a node, inserting would be a duplicate
        "unknown":   ["CS 999"],     # well-formed but not in catalog_codes
        "malformed": ["intro"],      # not a course number, kept as typed
      }
    Repeats of a course collapse onto its first mention.
    """
    result = {"to_add": [], "in_flow": [], "unknown": [], "malformed": []}
    if not raw_str:
        return result

    seen: set[str] = set()
    for token in REQUEST_SPLIT.split(raw_str):
        token = token.strip()
        if not token:
            continue
        code = normalize_code(token)
        key = code or token
        if key in seen:
            continue
        seen.add(key)

        if code is None:
            result["malformed"].append(token)
        elif code in flow_ids:
            result["in_flow"].append(code)
        elif catalog_codes is not None and code not in catalog_codes:
            result["unknown"].append(code)
        else:
            result["to_add"].append(code)
    return result
