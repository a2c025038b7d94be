"""
numbers_vm.storage — per-contract storage (key/value)

A minimal, deterministic key/value storage view keyed by contract address
(`bytes`) and storage key (`bytes`) with `bytes` values.

Two layers live here:

- `StorageView`: the persisted base mapping {address: {key: value}}.
- `BoundStorage`: the contract-facing handle placed in `Context.storage`.
  It is bound to one address and reads/writes through the chain's
  `Journal`, so every write is staged in the current checkpoint and
  disappears if the transaction reverts.

Conventions
-----------
- Bytes-in / bytes-out; typed helpers encode unsigned ints big-endian.
- "Zero means absent": storing an empty value deletes the key.
- Keys are capped at MAX_STORAGE_KEY_BYTES.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Iterator, MutableMapping, Optional, Tuple

if TYPE_CHECKING:
    from .journal import Journal

MAX_STORAGE_KEY_BYTES = 128
U256_MAX = (1 << 256) - 1


# ------------------------------- helpers -------------------------------------


def _as_bytes(x: bytes | bytearray | memoryview, *, name: str) -> bytes:
    if not isinstance(x, (bytes, bytearray, memoryview)):
        raise TypeError(f"{name} must be bytes-like")
    return bytes(x)


def _check_key(key: bytes) -> None:
    if len(key) == 0:
        raise ValueError("storage key must be non-empty")
    if len(key) > MAX_STORAGE_KEY_BYTES:
        raise ValueError(f"storage key too long (>{MAX_STORAGE_KEY_BYTES} bytes)")


def encode_uint(value: int) -> bytes:
    """Minimal big-endian encoding; zero encodes as empty (i.e. absent)."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError("uint value must be int")
    if value < 0 or value > U256_MAX:
        raise ValueError("uint out of range (must fit in 256 bits)")
    if value == 0:
        return b""
    return value.to_bytes((value.bit_length() + 7) // 8, "big")


def decode_uint(raw: bytes) -> int:
    return int.from_bytes(raw, "big") if raw else 0


# ------------------------------- StorageView ---------------------------------


@dataclass
class StorageView:
    """
    A per-contract key/value store.

    Parameters
    ----------
    backend :
        Optional external mapping to store state. If not provided, an internal
        dict is used. The shape is {address: {key: value}} with all entries as
        `bytes`.
    """
    backend: Optional[MutableMapping[bytes, Dict[bytes, bytes]]] = None

    _store: MutableMapping[bytes, Dict[bytes, bytes]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._store = self.backend if self.backend is not None else {}

    # ------------------------------ core ops --------------------------------

    def get(self, address: bytes, key: bytes, default: bytes = b"") -> bytes:
        addr_b = _as_bytes(address, name="address")
        key_b = _as_bytes(key, name="key")
        return self._store.get(addr_b, {}).get(key_b, default)

    def set(self, address: bytes, key: bytes, value: bytes) -> None:
        """
        Set value for (address, key). An empty value deletes the key (canonical).
        """
        addr_b = _as_bytes(address, name="address")
        key_b = _as_bytes(key, name="key")
        val_b = _as_bytes(value, name="value")
        _check_key(key_b)

        if len(val_b) == 0:
            self.delete(addr_b, key_b)
            return

        acc = self._store.get(addr_b)
        if acc is None:
            acc = {}
            self._store[addr_b] = acc
        acc[key_b] = val_b

    def delete(self, address: bytes, key: bytes) -> bool:
        """
        Delete (address, key). Returns True if a key existed and was removed.
        """
        addr_b = _as_bytes(address, name="address")
        key_b = _as_bytes(key, name="key")
        acc = self._store.get(addr_b)
        if acc is None:
            return False
        removed = acc.pop(key_b, None) is not None
        if not acc:
            # Drop empty account bucket to keep memory tidy
            self._store.pop(addr_b, None)
        return removed

    # ------------------------------ account ops -----------------------------

    def items(self, address: bytes) -> Iterator[Tuple[bytes, bytes]]:
        """
        Iterate (key, value) pairs for an address. Stable order: lexicographic by key.
        """
        addr_b = _as_bytes(address, name="address")
        acc = self._store.get(addr_b, {})
        for k in sorted(acc.keys()):
            yield k, acc[k]

    def addresses(self) -> Iterator[bytes]:
        yield from sorted(self._store.keys())

    # ------------------------------ export/import ---------------------------

    def export_account_hex(self, address: bytes) -> Dict[str, str]:
        """
        Export an account's storage as a {key_hex: value_hex} dict (sorted by key).
        """
        return {k.hex(): v.hex() for k, v in self.items(address)}

    def import_account_hex(self, address: bytes, data: Dict[str, str]) -> None:
        for k_hex, v_hex in data.items():
            self.set(address, bytes.fromhex(k_hex), bytes.fromhex(v_hex))


# ------------------------------- BoundStorage --------------------------------


class BoundStorage:
    """Contract-facing storage handle bound to one address and the journal."""

    __slots__ = ("_journal", "_address")

    def __init__(self, journal: "Journal", address: bytes) -> None:
        self._journal = journal
        self._address = bytes(address)

    @property
    def address(self) -> bytes:
        return self._address

    def get(self, key: bytes) -> bytes:
        """Return the value for `key`, or b"" if not set."""
        return self._journal.storage_get(self._address, key)

    def set(self, key: bytes, value: bytes) -> None:
        """Set `key` to `value`; empty value deletes."""
        _check_key(_as_bytes(key, name="key"))
        self._journal.storage_set(self._address, key, value)

    def delete(self, key: bytes) -> None:
        self._journal.storage_set(self._address, key, b"")

    def exists(self, key: bytes) -> bool:
        return len(self.get(key)) > 0

    # ---- typed helpers ----

    def get_int(self, key: bytes) -> int:
        return decode_uint(self.get(key))

    def set_int(self, key: bytes, value: int) -> None:
        self.set(key, encode_uint(value))

    def get_bool(self, key: bytes) -> bool:
        return self.get(key) == b"\x01"

    def set_bool(self, key: bytes, value: bool) -> None:
        self.set(key, b"\x01" if value else b"")


__all__ = [
    "MAX_STORAGE_KEY_BYTES",
    "U256_MAX",
    "StorageView",
    "BoundStorage",
    "encode_uint",
    "decode_uint",
]
