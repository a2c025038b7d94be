from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Mapping

from .errors import ExecError

if TYPE_CHECKING:
    from .journal import Journal

# Basic bounds (kept generous; we only need to *validate*).
MAX_EVENT_NAME_BYTES = 64
MAX_KEY_LEN = 64
MAX_BYTES_LEN = 4096
MAX_INT_BITS = 256

# Keys must be identifier-like: letters/underscore, then letters/digits/underscore.
_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class Event:
    """An emitted event, tagged with the emitting contract address."""

    address: bytes
    name: bytes
    args: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly view: bytes become 0x-hex."""
        enc: Dict[str, Any] = {}
        for k, v in self.args.items():
            enc[k] = "0x" + bytes(v).hex() if isinstance(v, (bytes, bytearray)) else v
        return {
            "address": "0x" + self.address.hex(),
            "name": self.name.decode("ascii", "replace"),
            "args": enc,
        }


def _invalid(message: str, **context: Any) -> ExecError:
    return ExecError(message, code="EVENT_INVALID", data=context or None)


def _check_name(name: Any) -> bytes:
    if not isinstance(name, (bytes, bytearray)):
        raise _invalid("event name must be bytes", where="name_type")
    b = bytes(name)
    if len(b) == 0:
        raise _invalid("event name must be non-empty", where="name_empty")
    if len(b) > MAX_EVENT_NAME_BYTES:
        raise _invalid("event name too long", where="name_length", len=len(b))
    return b


def _check_key(key: Any) -> str:
    if not isinstance(key, str):
        raise _invalid("event key must be str", where="key_type")
    if len(key) == 0 or len(key) > MAX_KEY_LEN:
        raise _invalid("event key length out of range", where="key_length", len=len(key))
    if not _KEY_RE.match(key):
        raise _invalid("event key has invalid characters", where="key_grammar", key=key)
    return key


def _check_value(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        b = bytes(value)
        if len(b) > MAX_BYTES_LEN:
            raise _invalid("event bytes arg too long", where="value_bytes_length", len=len(b))
        return b

    if isinstance(value, bool):
        # bool is a subclass of int, so check it before int.
        return value

    if isinstance(value, int):
        if value.bit_length() > MAX_INT_BITS:
            raise _invalid("event int arg out of range", where="value_int_bits", bits=value.bit_length())
        return int(value)

    raise _invalid("unsupported event arg type", where="value_type", py_type=type(value).__name__)


class EventSink:
    """Validates events and stages them in the journal's current checkpoint."""

    def __init__(self, journal: "Journal") -> None:
        self._journal = journal

    def emit(self, address: bytes, name: bytes, args: Mapping[Any, Any]) -> Event:
        bname = _check_name(name)
        if not isinstance(args, Mapping):
            raise _invalid("event args must be a mapping", where="args_type")
        checked: Dict[str, Any] = {}
        for raw_k, raw_v in args.items():
            checked[_check_key(raw_k)] = _check_value(raw_v)
        ev = Event(address=bytes(address), name=bname, args=checked)
        self._journal.record_event(ev)
        return ev


def filter_events(events: List[Event], name: bytes) -> List[Event]:
    return [e for e in events if e.name == name]


__all__ = [
    "Event",
    "EventSink",
    "filter_events",
    "MAX_EVENT_NAME_BYTES",
    "MAX_KEY_LEN",
    "MAX_BYTES_LEN",
    "MAX_INT_BITS",
]
