from __future__ import annotations

import json
import logging
import time
from pathlib import Path

from flowscaffold.graph.flow_schema import Flow
from flowscaffold.orchestrator.batch import BatchOrchestrator


def load_flow_from_file(path: Path) -> Flow:
    """
    Read a flow document from a JSON file ({"nodes": [...], "edges": [...]}).

    Documents written by older editors, with label and description nested
    under "data", are accepted too.
    """
    with path.open("r", encoding="utf-8") as fh:
        payload = json.load(fh)

    if not isinstance(payload, dict) or not isinstance(payload.get("nodes"), list) \
            or not isinstance(payload.get("edges"), list):
        raise ValueError(f"{path} is not a flow document")

    return Flow.from_dict(payload)


def seed_flow_if_empty(
    *,
    orchestrator: BatchOrchestrator,
    seed_path: Path,
    flow_id: str | None = None,
) -> bool:
    """
    Store the seed flow when the target flow has no nodes yet.

    Returns True when the seed was written. History is not touched here.
    """
    if not seed_path.exists():
        return False

    if orchestrator.read_flow(flow_id).nodes:
        return False

    t0 = time.perf_counter()
    flow = load_flow_from_file(seed_path)
    orchestrator.save_flow(flow, skip_snapshot=True, flow_id=flow_id)
    logging.getLogger("flowscaffold.load_flow").info(
        "seeded nodes=%s edges=%s from %s in %.3fs",
        len(flow.nodes),
        len(flow.edges),
        seed_path,
        time.perf_counter() - t0,
    )
    return True
