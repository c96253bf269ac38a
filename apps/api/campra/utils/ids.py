"""Campra entity IDs.

IDs are "aid" strings: 8 base36 chars of milliseconds since 2000-01-01 UTC
followed by 2 base36 chars of a rolling counter. They sort by creation time.
"""

from __future__ import annotations

import itertools
import re
import secrets
import time
from typing import Annotated

from pydantic import StringConstraints

TIME2000_MS = 946_684_800_000
ID_MAX_LENGTH = 32
ID_PATTERN = re.compile(r"^[a-zA-Z0-9]+$")

_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
_counter = itertools.count(secrets.randbelow(36**2))

# Request field type for the "campra:id" format.
CampraId = Annotated[
    str,
    StringConstraints(pattern=ID_PATTERN.pattern, min_length=1, max_length=ID_MAX_LENGTH),
]


def _base36(value: int, width: int) -> str:
    chars = []
    while value:
        value, rem = divmod(value, 36)
        chars.append(_ALPHABET[rem])
    return "".join(reversed(chars)).rjust(width, "0")[-width:]


def gen_id(now_ms: int | None = None) -> str:
    """Generate a new time-ordered entity ID."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    elapsed = max(0, now_ms - TIME2000_MS)
    noise = next(_counter) % (36**2)
    return _base36(elapsed, 8) + _base36(noise, 2)


def is_valid_id(value: str | None) -> bool:
    return bool(value) and len(value) <= ID_MAX_LENGTH and ID_PATTERN.match(value) is not None


def generate_token(length: int = 16) -> str:
    """Generate an API access token (alphanumeric, fits user.token)."""
    alphabet = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"
    return "".join(secrets.choice(alphabet) for _ in range(length))
