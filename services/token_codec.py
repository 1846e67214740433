"""
Helpers for opaque token material:
- SHA-256 digest so refresh tokens are only ever stored hashed
- random identifiers for the refresh token `tokenId` claim
"""
from __future__ import annotations

import hashlib
import uuid


def hash_token(raw: str) -> str:
    """Deterministic one-way digest of a raw token (hex SHA-256)."""
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def random_id() -> str:
    """Unpredictable identifier (UUID4, drawn from os.urandom)."""
    return str(uuid.uuid4())
