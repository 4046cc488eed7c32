from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

# ---------------------------------------------------------------------
# Undo / redo history
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class HistoryConfig:
    """
    Controls the snapshot log kept per flow.
    """

    max_snapshots: int = 50


# ---------------------------------------------------------------------
# Auto layout
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class LayoutConfig:
    """
    Controls the layered layout used by autoLayout.

    position_tolerance is the per-axis distance under which a moved node
    is treated as unchanged.
    """

    direction: Literal["LR", "TB"] = "LR"
    node_width: float = 172.0
    node_height: float = 70.0
    rank_spacing: float = 50.0
    node_spacing: float = 40.0
    position_tolerance: float = 0.01


# ---------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class StorageConfig:
    backend: Literal["memory", "json"] = "memory"
    data_dir: str = "data/flows"


# ---------------------------------------------------------------------
# Root configuration object
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class FlowScaffoldConfig:
    """
    Root configuration object for flowscaffold.

    This object is intended to be:
    - constructed explicitly
    - passed through all major subsystems
    - treated as immutable system policy
    """

    history: HistoryConfig = field(default_factory=HistoryConfig)
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    default_flow_id: str = "default:main"
