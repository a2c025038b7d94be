"""Access-control helpers (single owner)."""

from __future__ import annotations

from typing import Final

OWNER_KEY: Final[bytes] = b"access:owner"
EVT_OWNERSHIP_TRANSFERRED: Final[bytes] = b"OwnershipTransferred"
