"""
Identifiers for nodes, edges, scenarios and pin views.

Ids are ``<prefix>-<stamp><random>``: a 10-character millisecond timestamp
followed by 16 random characters, both lowercase Crockford base32. Ids made
later sort after earlier ones, so id order roughly follows creation order.
"""

from __future__ import annotations

import secrets
import time

_ALPHABET = "0123456789abcdefghjkmnpqrstvwxyz"
_STAMP_CHARS = 10
_RANDOM_CHARS = 16


def _base32(value: int, width: int) -> str:
    out = []
    while len(out) < width:
        value, digit = divmod(value, 32)
        out.append(_ALPHABET[digit])
    return "".join(reversed(out))


def new_id(prefix: str, *, now_ms: int | None = None) -> str:
    """Prefixed sortable id, e.g. ``person-01hf3...``."""
    stamp = int(time.time() * 1000) if now_ms is None else now_ms
    if stamp < 0 or stamp >= 32**_STAMP_CHARS:
        raise ValueError(f"timestamp out of range: {stamp}")
    noise = secrets.randbits(5 * _RANDOM_CHARS)
    return f"{prefix}-{_base32(stamp, _STAMP_CHARS)}{_base32(noise, _RANDOM_CHARS)}"
