"""Monotonic ULID generator for node identifiers.

The generated ULID is a 26-character, Crockford base32 encoded string:
- 48 bits timestamp (milliseconds since Unix epoch)
- 80 bits randomness

Within a single millisecond the random part of the previous id is
incremented instead of redrawn, so ids created in rapid succession are
distinct and sort in creation order.

Author:
    Michael Economou

Date:
    2026-02-02
"""

from __future__ import annotations

import os
import threading
import time

_CROCKFORD_BASE32_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
_RANDOM_BITS = 80
_RANDOM_MAX = (1 << _RANDOM_BITS) - 1

NODE_ID_PREFIX = "n_"

_lock = threading.Lock()
_last_timestamp_ms = -1
_last_randomness = 0


def _encode_crockford_base32(value: int, length: int) -> str:
    if value < 0:
        raise ValueError("value must be non-negative")

    chars: list[str] = []
    for _ in range(length):
        chars.append(_CROCKFORD_BASE32_ALPHABET[value & 31])
        value >>= 5

    if value != 0:
        raise ValueError("value too large to encode with requested length")

    return "".join(reversed(chars))


def new_ulid() -> str:
    """Generate a new ULID string, monotonic within the process."""
    global _last_timestamp_ms, _last_randomness

    with _lock:
        timestamp_ms = int(time.time() * 1000)
        if timestamp_ms <= _last_timestamp_ms:
            # Same (or skewed back) millisecond: bump the random part.
            timestamp_ms = _last_timestamp_ms
            randomness = _last_randomness + 1
            if randomness > _RANDOM_MAX:
                timestamp_ms += 1
                randomness = int.from_bytes(os.urandom(10), "big")
        else:
            randomness = int.from_bytes(os.urandom(10), "big")

        _last_timestamp_ms = timestamp_ms
        _last_randomness = randomness

    return f"{_encode_crockford_base32(timestamp_ms, 10)}{_encode_crockford_base32(randomness, 16)}"


def new_node_id() -> str:
    """Generate a fresh session-unique node identifier."""
    return f"{NODE_ID_PREFIX}{new_ulid()}"


def is_ulid(value: str) -> bool:
    """Return True if the given string looks like a ULID."""
    if not isinstance(value, str) or len(value) != 26:
        return False
    return all(ch in _CROCKFORD_BASE32_ALPHABET for ch in value)
