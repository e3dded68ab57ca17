"""
clock.py — Identifier and wall-clock helpers.
"""

import time
import uuid


def now_ms() -> int:
    """Current Unix time in milliseconds."""
    return int(time.time() * 1000)


def new_id() -> str:
    return str(uuid.uuid4())
