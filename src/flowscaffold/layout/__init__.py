"""
Default layout collaborator: a pure positioning function.
"""

from flowscaffold.layout.layered_layout import (
    NodeDimensions,
    LayoutSpacing,
    apply_layered_layout,
)

__all__ = [
    "NodeDimensions",
    "LayoutSpacing",
    "apply_layered_layout",
]
