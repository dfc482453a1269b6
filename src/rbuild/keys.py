"""Deterministic build identity hashing."""

from __future__ import annotations

import base64
import hashlib
import json
from typing import Any


def canonical_json(payload: Any) -> str:
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)


def identity_hash(payload: Any) -> int:
    """Return a 64-bit hash of *payload*, stable across processes."""
    digest = hashlib.sha256(canonical_json(payload).encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big")


def hash_token(value: int) -> str:
    """Render a 64-bit hash as a filesystem-safe base64 token."""
    return base64.b64encode(value.to_bytes(8, "big")).decode("ascii").replace("/", "_")
