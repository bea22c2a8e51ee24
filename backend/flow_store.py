"""
File-backed store for saved flows.

One JSON document per flow under `directory`:

  {"id": "...", "owner_id": "...", "name": "...", "major": "...",
   "elements": [...], "updated_at": "2026-01-01T00:00:00+00:00"}

Writes go through a temp file and os.replace, nothing more; there are no
locking or durability guarantees.
"""

import json
import os
import uuid
from datetime import datetime, timezone

from flow_graph import FlowGraph

# Metadata fields that update_flow may change.
_EDITABLE_FIELDS = ("name", "major")


class FlowNotFound(KeyError):
    """Raised when a flow id has no saved document."""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class FlowStore:
    def __init__(self, directory: str):
        self.directory = directory
        os.makedirs(directory, exist_ok=True)

    def _path(self, flow_id: str) -> str:
        if not flow_id or os.sep in flow_id or flow_id.startswith("."):
            raise FlowNotFound(flow_id)
        return os.path.join(self.directory, f"{flow_id}.json")

    def _read(self, flow_id: str) -> dict:
        path = self._path(flow_id)
        if not os.path.isfile(path):
            raise FlowNotFound(flow_id)
        with open(path, encoding="utf-8") as f:
            return json.load(f)

    def _write(self, flow: dict) -> dict:
        flow["updated_at"] = _now()
        path = self._path(flow["id"])
        tmp = f"{path}.tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(flow, f, indent=2, ensure_ascii=False)
        os.replace(tmp, path)
        return flow

    # ── CRUD ─────────────────────────────────────────────────────────────────

    def create_flow(self, owner_id: str, name: str, major: str = "", elements=None) -> dict:
        flow = {
            "id": uuid.uuid4().hex,
            "owner_id": owner_id,
            "name": name,
            "major": major,
            "elements": list(elements or []),
        }
        return self._write(flow)

    def get_flow(self, flow_id: str) -> dict:
        return self._read(flow_id)

    def list_flows(self, owner_id: str) -> list[dict]:
        """Flow summaries (no elements) for one owner, most recently updated first."""
        summaries = []
        for fname in os.listdir(self.directory):
            if not fname.endswith(".json"):
                continue
            flow = self._read(fname[:-len(".json")])
            if flow.get("owner_id") != owner_id:
                continue
            summaries.append({k: v for k, v in flow.items() if k != "elements"})
        return sorted(summaries, key=lambda f: f.get("updated_at", ""), reverse=True)

    def update_elements(self, flow_id: str, elements: list[dict]) -> dict:
        flow = self._read(flow_id)
        flow["elements"] = list(elements)
        return self._write(flow)

    def update_flow(self, flow_id: str, changes: dict) -> dict:
        """Apply metadata changes. Only name and major are editable."""
        unknown = sorted(set(changes) - set(_EDITABLE_FIELDS))
        if unknown:
            raise ValueError(f"Cannot update flow field(s): {unknown}")
        flow = self._read(flow_id)
        flow.update(changes)
        return self._write(flow)

    def delete_flow(self, flow_id: str) -> None:
        path = self._path(flow_id)
        if not os.path.isfile(path):
            raise FlowNotFound(flow_id)
        os.remove(path)

    # ── Graph helpers ────────────────────────────────────────────────────────

    def load_graph(self, flow_id: str) -> FlowGraph:
        return FlowGraph.from_elements(self._read(flow_id).get("elements", []))

    def autosave_callback(self, flow_id: str):
        """Save callable for FlowEditor: persists the graph's elements."""
        self._read(flow_id)

        def _save(graph: FlowGraph) -> None:
            self.update_elements(flow_id, graph.to_elements())

        return _save
