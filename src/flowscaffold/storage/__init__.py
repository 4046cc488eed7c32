"""
Persistence collaborators for flowscaffold.
"""

from flowscaffold.storage.flow_repository import (
    FlowRepository,
    InMemoryFlowRepository,
    JsonFileFlowRepository,
)

__all__ = [
    "FlowRepository",
    "InMemoryFlowRepository",
    "JsonFileFlowRepository",
]
