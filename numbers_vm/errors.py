"""
numbers_vm.errors — execution and contract-level exceptions.

Failures are communicated via *typed exceptions*. The chain rolls back the
current transaction when one escapes a contract method, records a failed
receipt and re-raises it to the submitter unchanged.

Hierarchy
---------
ExecError (base)
 ├─ Revert                      : contract-triggered failure (state rolled back)
 │   ├─ AuthorizationError        : caller is not the owner
 │   ├─ InsufficientAllowanceError: spender budget too small
 │   ├─ InsufficientBalanceError  : holder balance too small
 │   ├─ CapExceededError          : ledger mint would pass the fixed cap
 │   ├─ MintLimitError            : registry is at its current supply cap
 │   ├─ InvalidAddressError       : zero/malformed address argument
 │   ├─ InvalidAmountError        : negative or out-of-range integer
 │   ├─ NonexistentTokenError     : unknown item id
 │   ├─ NotApprovedError          : caller may not move this item
 │   └─ InvalidReceiverError      : contract recipient rejects items
 ├─ InvalidAccess               : non-exported method / unknown contract
 └─ StateConflict               : address collision at deploy time

Messages of the contract-level errors follow the wording used by the
reference token libraries ("Ownable: caller is not the owner", ...), so the
reason string is stable and comparable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(eq=False)
class ExecError(Exception):
    """
    Base execution error.

    Attributes:
        message: Human-readable explanation.
        code:    Stable machine code string (e.g., 'REVERT', 'NOT_OWNER').
        data:    Optional structured details (kept JSON-serializable).
    """
    message: str = "execution error"
    code: str = "EXEC_ERROR"
    data: Optional[Dict[str, Any]] = field(default=None)

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.data:
            return f"{self.code}: {self.message} ({self.data})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-safe dict for receipts/logs/CLI output."""
        out: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            out["data"] = self.data
        return out


class Revert(ExecError):
    """
    Contract-triggered revert.

    Subclasses pin `code` and a default `message`; call sites may override the
    message and attach `data`:

        raise InsufficientAllowanceError(data={"allowance": cur, "needed": amt})
    """

    default_message = "reverted"
    default_code = "REVERT"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        reason: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        d: Dict[str, Any] = {}
        if data:
            d.update(data)
        if reason is not None:
            d.setdefault("reason", reason)
        super().__init__(
            message=message or self.default_message,
            code=self.default_code,
            data=d or None,
        )


class AuthorizationError(Revert):
    default_message = "Ownable: caller is not the owner"
    default_code = "NOT_OWNER"


class InsufficientAllowanceError(Revert):
    default_message = "ERC20: insufficient allowance"
    default_code = "INSUFFICIENT_ALLOWANCE"


class InsufficientBalanceError(Revert):
    default_message = "ERC20: transfer amount exceeds balance"
    default_code = "INSUFFICIENT_BALANCE"


class CapExceededError(Revert):
    default_message = "ERC20Capped: cap exceeded"
    default_code = "CAP_EXCEEDED"


class MintLimitError(Revert):
    default_message = "MintLimit"
    default_code = "MINT_LIMIT"


class InvalidAddressError(Revert):
    default_message = "invalid address"
    default_code = "BAD_ADDRESS"


class InvalidAmountError(Revert):
    default_message = "amount out of range"
    default_code = "BAD_AMOUNT"


class NonexistentTokenError(Revert):
    default_message = "ERC721: invalid token ID"
    default_code = "INVALID_TOKEN_ID"


class NotApprovedError(Revert):
    default_message = "ERC721: caller is not token owner or approved"
    default_code = "NOT_APPROVED"


class InvalidReceiverError(Revert):
    default_message = "ERC721: transfer to non ERC721Receiver implementer"
    default_code = "INVALID_RECEIVER"


class InvalidAccess(ExecError):
    """
    Illegal access: calling a method that is not exported, addressing an
    account that holds no contract, or nesting calls past the depth limit.
    """
    def __init__(
        self,
        message: str = "invalid access",
        *,
        op: Optional[str] = None,
        address: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        d: Dict[str, Any] = {}
        if data:
            d.update(data)
        if op is not None:
            d.setdefault("op", op)
        if address is not None:
            d.setdefault("address", address)
        super().__init__(message=message, code="INVALID_ACCESS", data=d or None)


class StateConflict(ExecError):
    """Deploy target already holds a contract."""
    def __init__(self, message: str = "state conflict", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="STATE_CONFLICT", data=data)


# -------- helper utilities ---------------------------------------------------


def error_to_receipt_fields(err: ExecError) -> Dict[str, Any]:
    """
    Map an ExecError to canonical receipt-like fields:

        {"status": "REVERT" | "ERROR", "error": {code, message, data?}}
    """
    status = "REVERT" if isinstance(err, Revert) else "ERROR"
    return {"status": status, "error": err.to_dict()}


__all__ = [
    "ExecError",
    "Revert",
    "AuthorizationError",
    "InsufficientAllowanceError",
    "InsufficientBalanceError",
    "CapExceededError",
    "MintLimitError",
    "InvalidAddressError",
    "InvalidAmountError",
    "NonexistentTokenError",
    "NotApprovedError",
    "InvalidReceiverError",
    "InvalidAccess",
    "StateConflict",
    "error_to_receipt_fields",
]
