from __future__ import annotations

import random
import string
import time
from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def generate_id(prefix: str = "") -> str:
    """
    Time-based identifier with a random suffix, e.g. "1718000000000_k3j9x0a2b".
    """
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"{prefix}{int(time.time() * 1000)}_{suffix}"
