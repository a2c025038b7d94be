"""
numbers_vm — a small deterministic execution environment for Python contracts.

Public surface:

- LocalChain / Receipt / ContractHandle   (numbers_vm.chain)
- Contract, public, view                  (numbers_vm.abi)
- Context, to_address, to_hex             (numbers_vm.context)
- typed errors                            (numbers_vm.errors)
- ChainConfig / load_config               (numbers_vm.config)
"""

from __future__ import annotations

from .abi import Contract, public, view
from .chain import BoundContract, ContractHandle, LocalChain, Receipt
from .config import ChainConfig, load_config
from .context import ZERO_ADDRESS, Context, to_address, to_hex
from .errors import ExecError, InvalidAccess, Revert

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "BoundContract",
    "ChainConfig",
    "Context",
    "Contract",
    "ContractHandle",
    "ExecError",
    "InvalidAccess",
    "LocalChain",
    "Receipt",
    "Revert",
    "ZERO_ADDRESS",
    "load_config",
    "public",
    "to_address",
    "to_hex",
    "view",
]
