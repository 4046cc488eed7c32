"""
Mutation subsystem for flowscaffold.

The only code allowed to create, change or remove nodes, edges and groups.
"""

from flowscaffold.mutation.tool_result import FlowValidationError, ToolResult
from flowscaffold.mutation.executor import MutationExecutor, resolve_node_reference

__all__ = [
    "FlowValidationError",
    "ToolResult",
    "MutationExecutor",
    "resolve_node_reference",
]
