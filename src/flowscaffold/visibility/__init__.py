"""
Visibility subsystem for flowscaffold.

Everything here is derived state: hidden flags, group boundary edges and
membership checks are computed from the stored document and never
written back as ground truth.
"""

from flowscaffold.visibility.descendants import (
    get_edge_descendants,
    get_group_descendants,
)
from flowscaffold.visibility.subtree import collapse_subtree_by_handles
from flowscaffold.visibility.group_visibility import (
    GROUP_EDGE_PREFIX,
    apply_group_visibility,
    compute_synthetic_edges,
    synthetic_edge_id,
    visible_flow,
)
from flowscaffold.visibility.validation import (
    MembershipCheck,
    detect_circular_reference,
    validate_group_membership,
)

__all__ = [
    "get_edge_descendants",
    "get_group_descendants",
    "collapse_subtree_by_handles",
    "GROUP_EDGE_PREFIX",
    "apply_group_visibility",
    "compute_synthetic_edges",
    "synthetic_edge_id",
    "visible_flow",
    "MembershipCheck",
    "detect_circular_reference",
    "validate_group_membership",
]
