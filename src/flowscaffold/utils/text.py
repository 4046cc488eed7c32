from __future__ import annotations

import hashlib
import json
import re
from typing import Any


_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def sanitize_id(text: str | None) -> str:
    """
    Turns a human label into an identifier.

    Lowercases, collapses every run of non-alphanumeric characters into a
    single underscore and trims underscores from both ends, so
    "Login / Auth!" becomes "login_auth".
    """
    if not text:
        return ""
    text = _NON_ALNUM.sub("_", str(text).lower())
    return text.strip("_")


def canonical_json(value: Any) -> str:
    """
    Key-order independent JSON encoding.
    """
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)


def fingerprint(value: Any) -> str:
    """
    Stable structural hash of a JSON-compatible value.
    """
    return hashlib.sha256(canonical_json(value).encode("utf-8")).hexdigest()
