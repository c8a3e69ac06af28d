"""Order number generation.

Format: ``ORD-<unix millis>-<6 random base36 uppercase chars>``, e.g.
``ORD-1718000000000-K3Z9QA``.  Persisted order numbers use this format and
external systems parse it, so it must not change.
"""

from __future__ import annotations

import re
import secrets
import string
from datetime import datetime, timezone

ALPHABET = string.digits + string.ascii_uppercase
SUFFIX_LENGTH = 6
ORDER_NUMBER_PATTERN = re.compile(r"^ORD-\d{13,}-[0-9A-Z]{6}$")

_random = secrets.SystemRandom()


def generate_order_number(now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    millis = int(now.timestamp() * 1000)
    suffix = "".join(_random.choice(ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f"ORD-{millis}-{suffix}"


def is_order_number(value: str) -> bool:
    return bool(ORDER_NUMBER_PATTERN.match(value))
