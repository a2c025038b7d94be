"""
numbers_vm.context — addresses and the per-call Context handed to contracts.

Every exported contract method receives a `Context` as its first argument.
It is the *only* way a contract reaches state:

- `ctx.sender`   : immediate caller (account or calling contract)
- `ctx.address`  : address of the executing contract
- `ctx.storage`  : key/value store bound to `ctx.address` (journaled)
- `ctx.emit()`   : append an event to the current transaction
- `ctx.call()`   : synchronous call into another contract; the callee sees
                   `ctx.address` as its sender

Addresses are raw 20-byte values. Hex strings (with or without "0x") are
accepted by helpers and normalized to bytes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping, Optional, Union

if TYPE_CHECKING:
    from .chain import LocalChain
    from .storage import BoundStorage

ADDRESS_LEN = 20
ZERO_ADDRESS: bytes = b"\x00" * ADDRESS_LEN


class ContextError(Exception):
    """Validation or coercion failure for addresses and context values."""


def _strip_0x(s: str) -> str:
    return s[2:] if s.startswith(("0x", "0X")) else s


def to_bytes(value: Union[bytes, bytearray, memoryview, str]) -> bytes:
    """
    Coerce `value` to bytes.
    - If str, interpret as hex (with or without '0x'); odd-length hex is rejected.
    - If a bytes-like object, copy to immutable bytes.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        h = _strip_0x(value.strip())
        if len(h) % 2 != 0:
            raise ContextError(f"hex string must have even length, got {len(h)}")
        try:
            return bytes.fromhex(h)
        except ValueError as e:
            raise ContextError(f"invalid hex string: {value!r}") from e
    raise ContextError(f"cannot convert type {type(value).__name__} to bytes")


def to_hex(b: Union[bytes, bytearray, memoryview]) -> str:
    """Encode bytes as 0x-prefixed lowercase hex."""
    return "0x" + bytes(b).hex()


def to_address(value: Union[bytes, bytearray, memoryview, str]) -> bytes:
    """Coerce to a 20-byte address or raise ContextError."""
    b = to_bytes(value)
    if len(b) != ADDRESS_LEN:
        raise ContextError(f"address must be {ADDRESS_LEN} bytes, got {len(b)}")
    return b


def is_address(value: Any) -> bool:
    return isinstance(value, (bytes, bytearray)) and len(value) == ADDRESS_LEN


@dataclass(frozen=True)
class Context:
    """Call frame for one contract method invocation."""

    sender: bytes
    address: bytes
    origin: bytes
    depth: int
    storage: "BoundStorage"
    chain: "LocalChain"

    def emit(self, name: bytes, args: Optional[Mapping[str, Any]] = None) -> None:
        self.chain.events.emit(self.address, name, args or {})

    def call(self, to: bytes, method: str, *args: Any) -> Any:
        """
        Call `method` on the contract at `to` as this contract. Failures in
        the callee propagate; the caller may let them revert the transaction.
        """
        return self.chain._dispatch(
            sender=self.address,
            to=to,
            method=method,
            args=args,
            origin=self.origin,
            depth=self.depth + 1,
        )

    def is_contract(self, addr: bytes) -> bool:
        return self.chain.is_contract(addr)

    def exports(self, addr: bytes, method: str) -> bool:
        """True if the contract at `addr` exposes `method` as public or view."""
        return self.chain.method_kind(addr, method) is not None


__all__ = [
    "ADDRESS_LEN",
    "ZERO_ADDRESS",
    "ContextError",
    "Context",
    "to_bytes",
    "to_hex",
    "to_address",
    "is_address",
]
