"""
Configuration layer for flowscaffold.

Configuration in flowscaffold is:
- Explicit (passed, not global)
- Typed (validated at construction time)
- Stable (defaults match the editor's historical behaviour)
"""

from flowscaffold.config.settings import (
    HistoryConfig,
    LayoutConfig,
    StorageConfig,
    FlowScaffoldConfig,
)

__all__ = [
    "HistoryConfig",
    "LayoutConfig",
    "StorageConfig",
    "FlowScaffoldConfig",
]
