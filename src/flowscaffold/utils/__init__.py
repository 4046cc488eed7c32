"""
Utility functions for flowscaffold.

This module contains low-level helpers used across the system.
No domain logic should live here.
"""

from flowscaffold.utils.text import sanitize_id, canonical_json, fingerprint
from flowscaffold.utils.time import utc_now, generate_id
from flowscaffold.utils.helpers import group_anchor, points_close

__all__ = [
    "sanitize_id",
    "canonical_json",
    "fingerprint",
    "utc_now",
    "generate_id",
    "group_anchor",
    "points_close",
]
