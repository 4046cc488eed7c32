from __future__ import annotations

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict
from urllib.parse import quote

from flowscaffold.graph.flow_schema import Flow


class FlowRepository(ABC):
    """
    Whole-document persistence for flows.

    read() returns the complete stored flow (the empty flow if nothing was
    ever written) and write() replaces it. There are no partial updates.
    """

    @abstractmethod
    def read(self, flow_id: str) -> Flow:
        raise NotImplementedError

    @abstractmethod
    def write(self, flow_id: str, flow: Flow) -> None:
        raise NotImplementedError


class InMemoryFlowRepository(FlowRepository):
    def __init__(self) -> None:
        self._flows: Dict[str, Flow] = {}
        self.write_count = 0

    def read(self, flow_id: str) -> Flow:
        return self._flows.get(flow_id, Flow.empty())

    def write(self, flow_id: str, flow: Flow) -> None:
        self._flows[flow_id] = flow
        self.write_count += 1


class JsonFileFlowRepository(FlowRepository):
    """
    One JSON file per flow under data_dir.

    Writes go to a temporary file that is then renamed over the target, so
    a reader never observes a half-written document.
    """

    def __init__(self, data_dir: Path | str) -> None:
        self.data_dir = Path(data_dir)

    def path_for(self, flow_id: str) -> Path:
        # Percent-encoding keeps distinct flow ids in distinct files.
        return self.data_dir / f"{quote(flow_id, safe='')}.json"

    def read(self, flow_id: str) -> Flow:
        path = self.path_for(flow_id)
        if not path.exists():
            return Flow.empty()
        with path.open("r", encoding="utf-8") as fh:
            return Flow.from_dict(json.load(fh))

    def write(self, flow_id: str, flow: Flow) -> None:
        path = self.path_for(flow_id)
        path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(flow.to_dict(), fh, indent=2)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

        logging.getLogger("flowscaffold.storage").debug(
            "wrote flow %s nodes=%d edges=%d to %s",
            flow_id,
            len(flow.nodes),
            len(flow.edges),
            path,
        )
