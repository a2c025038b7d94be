"""
numbers_vm.journal — journaling writes, checkpoints, revert/commit.

This module provides a deterministic, in-memory write journal layered over
an accounts mapping and a StorageView. It supports nested checkpoints via a
stack of overlays. Writes go to the top overlay; reads consult overlays from
top → base. `commit()` merges the top overlay into the next layer, or into
the base state when it is the last layer. `revert()` discards the top overlay.

Events ride along with the overlays: an event recorded inside a checkpoint
that is later reverted never reaches a receipt.

Intended usage
--------------
    j = Journal(base_accounts, base_storage)
    j.begin()                       # start a transaction
    j.storage_set(addr, key, b"value")
    j.begin()                       # nested contract call
    ...
    j.revert()                      # callee failed, discard its writes
    events = j.commit()             # apply to base, returns committed events

Writes outside any checkpoint are rejected; the chain always opens one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, MutableMapping, Optional

from .accounts import Account
from .events import Event
from .storage import StorageView


def _b(x: bytes | bytearray | memoryview, *, name: str) -> bytes:
    if not isinstance(x, (bytes, bytearray, memoryview)):
        raise TypeError(f"{name} must be bytes-like")
    return bytes(x)


@dataclass
class _Overlay:
    """
    A single journal layer.

    - `accounts`: copies of Account objects modified/created in this layer.
    - `storage`: staged storage changes. `None` means deletion for that key.
    - `events`: events recorded in this layer, in emission order.
    """

    accounts: Dict[bytes, Account] = field(default_factory=dict)
    storage: Dict[bytes, Dict[bytes, Optional[bytes]]] = field(default_factory=dict)
    events: List[Event] = field(default_factory=list)

    def storage_set_local(self, addr: bytes, key: bytes, value: Optional[bytes]) -> None:
        m = self.storage.get(addr)
        if m is None:
            m = {}
            self.storage[addr] = m
        m[key] = value


class Journal:
    """
    A copy-on-write write journal with nested checkpoints.

    Parameters
    ----------
    accounts : MutableMapping[bytes, Account]
        The base (persisted) account mapping.
    storage : StorageView
        The base storage view.
    """

    def __init__(self, accounts: MutableMapping[bytes, Account], storage: StorageView) -> None:
        self._base_accounts = accounts
        self._base_storage = storage
        self._layers: List[_Overlay] = []

    # --------------------------------------------------------------------- #
    # Checkpointing
    # --------------------------------------------------------------------- #

    def depth(self) -> int:
        """Number of open checkpoints."""
        return len(self._layers)

    def begin(self) -> int:
        """Start a new checkpoint. Returns the new depth marker."""
        self._layers.append(_Overlay())
        return len(self._layers)

    def commit(self) -> List[Event]:
        """
        Commit the top overlay into its parent, or into the base state if it is
        the outermost one. Returns the events that reached the base (empty for
        nested commits).
        """
        if not self._layers:
            raise RuntimeError("commit without an open checkpoint")
        top = self._layers.pop()
        if self._layers:
            self._merge_layers(self._layers[-1], top)
            return []
        self._apply_to_base(top)
        return list(top.events)

    def revert(self) -> None:
        """Discard the top overlay."""
        if not self._layers:
            raise RuntimeError("revert without an open checkpoint")
        self._layers.pop()

    def revert_to(self, marker: int) -> None:
        """Revert repeatedly until the depth is below `marker`."""
        while len(self._layers) >= marker and self._layers:
            self.revert()

    def _top(self) -> _Overlay:
        if not self._layers:
            raise RuntimeError("write outside of a checkpoint")
        return self._layers[-1]

    # --------------------------------------------------------------------- #
    # Account API
    # --------------------------------------------------------------------- #

    def get_account(self, address: bytes) -> Optional[Account]:
        """Readonly lookup. Do not mutate the returned object."""
        addr = _b(address, name="address")
        for layer in reversed(self._layers):
            acc = layer.accounts.get(addr)
            if acc is not None:
                return acc
        return self._base_accounts.get(addr)

    def account_for_write(self, address: bytes) -> Account:
        """
        Fetch an Account suitable for mutation in the top layer, promoting a
        copy from lower layers/base or creating a fresh zeroed one.
        """
        addr = _b(address, name="address")
        top = self._top()
        acc = top.accounts.get(addr)
        if acc is not None:
            return acc
        src = self.get_account(addr)
        acc = src.copy() if src is not None else Account()
        top.accounts[addr] = acc
        return acc

    # --------------------------------------------------------------------- #
    # Storage API
    # --------------------------------------------------------------------- #

    def storage_get(self, address: bytes, key: bytes, default: bytes = b"") -> bytes:
        """Read storage with overlay precedence. Returns `default` if absent."""
        addr = _b(address, name="address")
        key_b = _b(key, name="key")
        for layer in reversed(self._layers):
            m = layer.storage.get(addr)
            if m is not None and key_b in m:
                local = m[key_b]
                return default if local is None else local
        return self._base_storage.get(addr, key_b, default=default)

    def storage_set(self, address: bytes, key: bytes, value: bytes) -> None:
        """Stage a storage write in the top overlay. Empty value is a deletion."""
        addr = _b(address, name="address")
        key_b = _b(key, name="key")
        val_b = _b(value, name="value")
        self._top().storage_set_local(addr, key_b, val_b if val_b else None)

    # --------------------------------------------------------------------- #
    # Events
    # --------------------------------------------------------------------- #

    def record_event(self, event: Event) -> None:
        self._top().events.append(event)

    # --------------------------------------------------------------------- #
    # Internal merge/apply
    # --------------------------------------------------------------------- #

    @staticmethod
    def _merge_layers(dst: _Overlay, src: _Overlay) -> None:
        for addr, acc in src.accounts.items():
            dst.accounts[addr] = acc
        for addr, writes in src.storage.items():
            dm = dst.storage.setdefault(addr, {})
            dm.update(writes)
        dst.events.extend(src.events)

    def _apply_to_base(self, layer: _Overlay) -> None:
        for addr, acc in layer.accounts.items():
            self._base_accounts[addr] = acc.copy()
        for addr, writes in layer.storage.items():
            for k, v in writes.items():
                if v is None:
                    self._base_storage.delete(addr, k)
                else:
                    self._base_storage.set(addr, k, v)

    # --------------------------------------------------------------------- #
    # Debug/Introspection
    # --------------------------------------------------------------------- #

    def pending_storage_keys(self) -> int:
        """Total number of staged storage (addr, key) entries across layers."""
        return sum(sum(len(w) for w in layer.storage.values()) for layer in self._layers)


__all__ = ["Journal"]
