# -*- coding: utf-8 -*-
"""
numbers_contracts.stdlib.math.safe_uint
=======================================

Checked unsigned-integer helpers. Every operation validates that inputs and
results fit in [0, U256_MAX] and raises InvalidAmountError otherwise; nothing
wraps silently and no floats are involved.
"""

from __future__ import annotations

from typing import Final

from numbers_vm.errors import InvalidAmountError

U256_MAX: Final[int] = (1 << 256) - 1

# Fee/royalty denominator (basis points).
BPS_DENOMINATOR: Final[int] = 10_000


def require_u256(*xs: int) -> None:
    for x in xs:
        if not isinstance(x, int) or isinstance(x, bool):
            raise InvalidAmountError("amount must be an integer", data={"type": type(x).__name__})
        if x < 0 or x > U256_MAX:
            raise InvalidAmountError(data={"value": str(x)})


def u256_add(x: int, y: int) -> int:
    require_u256(x, y)
    z = x + y
    if z > U256_MAX:
        raise InvalidAmountError("u256 addition overflow")
    return z


def u256_sub(x: int, y: int) -> int:
    require_u256(x, y)
    if y > x:
        raise InvalidAmountError("u256 subtraction underflow")
    return x - y


def u256_mul(x: int, y: int) -> int:
    require_u256(x, y)
    z = x * y
    if z > U256_MAX:
        raise InvalidAmountError("u256 multiplication overflow")
    return z


def u256_mul_div_down(x: int, y: int, d: int) -> int:
    """floor(x * y / d); the intermediate product may exceed 256 bits."""
    require_u256(x, y, d)
    if d == 0:
        raise InvalidAmountError("division by zero")
    return (x * y) // d


def apply_bps(amount: int, bps: int) -> int:
    """amount * bps / 10_000, rounded down."""
    return u256_mul_div_down(amount, bps, BPS_DENOMINATOR)


__all__ = [
    "U256_MAX",
    "BPS_DENOMINATOR",
    "require_u256",
    "u256_add",
    "u256_sub",
    "u256_mul",
    "u256_mul_div_down",
    "apply_bps",
]
