"""
numbers_contracts.tools — shared helpers for the deploy/call tooling.

- canonical JSON (sorted keys, compact separators, no NaN)
- atomic text writes (tmp file → fsync → rename)
- conversion of contract values (bytes, tuples) to JSON-friendly forms
- parsing of CLI argument strings into contract argument values
"""

from __future__ import annotations

import errno
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Final, Mapping, Optional, Union

_JSON_SEPARATORS: Final[tuple] = (",", ":")


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------


def canonical_json_str(obj: Any) -> str:
    """
    Serialize an object to a canonical JSON string:
    - UTF-8 safe, no whitespace, sorted keys
    - Ensures stable output across platforms
    """
    return json.dumps(
        obj,
        ensure_ascii=False,
        sort_keys=True,
        separators=_JSON_SEPARATORS,
        allow_nan=False,
    )


def to_jsonable(value: Any) -> Any:
    """bytes → 0x-hex, tuples → lists, recursively."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "0x" + bytes(value).hex()
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    if isinstance(value, Mapping):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    return value


# ---------------------------------------------------------------------------
# Filesystem
# ---------------------------------------------------------------------------


def ensure_dir(p: Union[str, "os.PathLike[str]"]) -> Path:
    """mkdir -p for a directory path; returns Path."""
    path = Path(p)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        if e.errno != errno.EEXIST:
            raise
    return path


def atomic_write_text(path: Union[str, "os.PathLike[str]"], text: str) -> Path:
    """Write text atomically so readers only ever see complete files."""
    target = Path(path)
    ensure_dir(target.parent)
    with tempfile.NamedTemporaryFile(dir=str(target.parent), delete=False) as tf:
        tf.write(text.encode("utf-8"))
        tf.flush()
        os.fsync(tf.fileno())
        tmp_name = tf.name
    os.replace(tmp_name, target)
    return target


# ---------------------------------------------------------------------------
# CLI argument parsing
# ---------------------------------------------------------------------------


def parse_arg(raw: str, labels: Optional[Mapping[str, bytes]] = None) -> Any:
    """
    Interpret one CLI argument:
      - dev account label ("alice")     → its 20-byte address
      - "0x…" hex                       → bytes
      - decimal integer ("10", "-1")    → int
      - "true" / "false"                → bool
      - anything else                   → str
    """
    s = raw.strip()
    if labels and s in labels:
        return labels[s]
    if s[:2].lower() == "0x":
        try:
            return bytes.fromhex(s[2:])
        except ValueError:
            return s
    low = s.lower()
    if low in ("true", "false"):
        return low == "true"
    try:
        return int(s, 10)
    except ValueError:
        return s


__all__ = [
    "canonical_json_str",
    "to_jsonable",
    "ensure_dir",
    "atomic_write_text",
    "parse_arg",
]
