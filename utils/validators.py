"""
utils/validators.py — Input validation helpers for the JSON routes.

Validates:
- Session lengths (one of 10, 25, 45, 60)
- Slot indexes and slot counts (non-negative / positive integers)
- Nicknames (trimmed, length-limited, empty means none)

Each helper returns (value, None) or (None, error_message).
"""

from models import ALL_SESSION_MINUTES, SessionMinutes

MAX_NICKNAME_LENGTH = 40
MAX_SLOTS_LIMIT = 12


def _parse_int(raw):
    if isinstance(raw, bool):
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def validate_minutes(raw):
    value = _parse_int(raw)
    if value is None or value not in [int(m) for m in ALL_SESSION_MINUTES]:
        allowed = ', '.join(str(int(m)) for m in ALL_SESSION_MINUTES)
        return None, f"Session length must be one of: {allowed}."
    return SessionMinutes(value), None


def validate_slot_index(raw):
    value = _parse_int(raw)
    if value is None or value < 0:
        return None, "Slot must be a non-negative integer."
    return value, None


def validate_slot_count(raw):
    value = _parse_int(raw)
    if value is None or value < 1 or value > MAX_SLOTS_LIMIT:
        return None, f"Slot count must be between 1 and {MAX_SLOTS_LIMIT}."
    return value, None


def validate_nickname(raw):
    if raw is None:
        return None, None
    if not isinstance(raw, str):
        return None, "Nickname must be text."
    nickname = ' '.join(raw.split())
    if len(nickname) > MAX_NICKNAME_LENGTH:
        return None, f"Nickname is limited to {MAX_NICKNAME_LENGTH} characters."
    return nickname or None, None
