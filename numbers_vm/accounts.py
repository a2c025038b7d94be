"""
numbers_vm.accounts — account records, dev keys and address derivation.

An Account holds:

- nonce:    transaction counter (monotonically increasing); also feeds
            contract address derivation
- balance:  native currency amount (dev funding only; contracts never see it)
- contract: registered contract type name for contract accounts, else ""

Addresses are 20 bytes:
- dev accounts:       sha3_256(b"numbers-dev|" || label)[-20:]
- contract accounts:  sha3_256(b"numbers-create|" || sender || u64(nonce))[-20:]
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Dict, List, Tuple

from .context import ADDRESS_LEN

U256_MAX = (1 << 256) - 1

# Stable labels for the funded local accounts; index 0 is the deployer.
DEV_ACCOUNT_LABELS: Tuple[str, ...] = (
    "deployer",
    "alice",
    "bob",
    "carol",
    "dave",
    "erin",
    "frank",
    "grace",
)


def _ensure_u256(name: str, value: int) -> int:
    if not isinstance(value, int):
        raise TypeError(f"{name} must be int")
    if value < 0:
        raise ValueError(f"{name} must be non-negative")
    if value > U256_MAX:
        raise OverflowError(f"{name} exceeds u256")
    return value


def dev_address(label: str) -> bytes:
    """Produce a stable 20-byte address from a human label."""
    h = hashlib.sha3_256(b"numbers-dev|" + label.encode("utf-8")).digest()
    return h[-ADDRESS_LEN:]


def contract_address(sender: bytes, nonce: int) -> bytes:
    """Address of the contract created by `sender` at `nonce`."""
    h = hashlib.sha3_256(b"numbers-create|" + bytes(sender) + int(nonce).to_bytes(8, "big")).digest()
    return h[-ADDRESS_LEN:]


def dev_labels(n: int) -> List[str]:
    labels = list(DEV_ACCOUNT_LABELS[:n])
    for i in range(len(labels), n):
        labels.append(f"account{i}")
    return labels


@dataclass
class Account:
    nonce: int = 0
    balance: int = 0
    contract: str = ""

    def __post_init__(self) -> None:
        self.nonce = _ensure_u256("nonce", int(self.nonce))
        self.balance = _ensure_u256("balance", int(self.balance))

    @property
    def is_contract(self) -> bool:
        return bool(self.contract)

    def increment_nonce(self) -> None:
        self.nonce = _ensure_u256("nonce", self.nonce + 1)

    def credit(self, amount: int) -> None:
        self.balance = _ensure_u256("balance", self.balance + _ensure_u256("amount", amount))

    def copy(self) -> "Account":
        return Account(nonce=self.nonce, balance=self.balance, contract=self.contract)

    # ----------------------- (de)serialization ----------------------------- #

    def to_dict(self) -> dict:
        return {"nonce": self.nonce, "balance": self.balance, "contract": self.contract}

    @classmethod
    def from_dict(cls, data: dict) -> "Account":
        try:
            return cls(
                nonce=int(data["nonce"]),
                balance=int(data["balance"]),
                contract=str(data.get("contract", "")),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"bad account dict: {e}") from e


def genesis_accounts(n: int) -> Dict[str, bytes]:
    """Return {label: address} for `n` funded dev accounts."""
    return {label: dev_address(label) for label in dev_labels(n)}


__all__ = [
    "Account",
    "DEV_ACCOUNT_LABELS",
    "dev_address",
    "dev_labels",
    "contract_address",
    "genesis_accounts",
]
