import json
import logging
import sys
import time
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
for path in (ROOT, ROOT / "src"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from flowscaffold.orchestrator.batch import (  # noqa: E402
    BatchOrchestrator,
    ORIGIN_AGENT,
    ORIGIN_UI,
)
from flowscaffold.storage.flow_repository import InMemoryFlowRepository  # noqa: E402
from flowscaffold.visibility.group_visibility import visible_flow  # noqa: E402

from backend.app.config import AppConfig  # noqa: E402


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logger = logging.getLogger("flowscaffold.run")
    start = time.perf_counter()
    config = AppConfig()

    orchestrator = BatchOrchestrator(
        repository=InMemoryFlowRepository(),
        config=config.scaffold,
    )
    orchestrator.initialize_history()

    def run_batch(label: str, calls) -> None:
        batch = orchestrator.run_batch(calls, origin=ORIGIN_AGENT)
        logger.info(
            "[%s] ok=%s committed=%s snapshot=%s in %.3fs",
            label,
            batch.all_succeeded,
            batch.committed,
            batch.snapshot_pushed,
            time.perf_counter() - start,
        )
        for failure in batch.failures:
            logger.warning("[%s] %s failed: %s", label, failure.tool, failure.error)

    # An agent builds a small login flow, referencing parents by label.
    run_batch(
        "build",
        [
            {"name": "addNode", "params": {"label": "Home"}},
            {"name": "addNode", "params": {"label": "Login / Auth!", "parentNodeId": "Home"}},
            {"name": "addNode", "params": {"label": "Dashboard", "parentNodeId": "login_auth"}},
            {"name": "addNode", "params": {"label": "Settings", "parentNodeId": "Dashboard"}},
        ],
    )

    # A retry that partly fails still commits the part that worked.
    run_batch(
        "retry",
        [
            {"name": "addEdge", "params": {"sourceNodeId": "home", "targetNodeId": "nowhere"}},
            {"name": "createGroup", "params": {"memberIds": ["dashboard", "settings"], "label": "App"}},
            {"name": "autoLayout", "params": {}},
        ],
    )

    logger.info("status=%s", orchestrator.status().to_dict())
    logger.info(json.dumps(visible_flow(orchestrator.read_flow()).to_dict(), indent=2))

    undo = orchestrator.undo()
    logger.info("[undo] success=%s status=%s", undo.success, orchestrator.status().to_dict())

    redo = orchestrator.redo()
    logger.info("[redo] success=%s status=%s", redo.success, orchestrator.status().to_dict())

    nothing = orchestrator.run_tool("redo", origin=ORIGIN_UI)
    logger.info("[redo again] success=%s error=%s", nothing.success, nothing.error)


if __name__ == "__main__":
    main()
