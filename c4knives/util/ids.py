from __future__ import annotations

import re
import uuid

_ID_RE = re.compile(r"^[0-9a-f]{32}$")


def new_id() -> str:
    """Fresh public record id (uuid4, 32 lowercase hex chars)."""
    return uuid.uuid4().hex


def is_valid_id(value: object) -> bool:
    """True when `value` has the shape of an id issued by `new_id`."""
    return isinstance(value, str) and _ID_RE.match(value) is not None
