"""
numbers_vm.chain — an in-process, deterministic local chain.

LocalChain owns the base state (accounts + storage), a Journal layered on
top of it and the contract instances attached to contract addresses. Every
submission is serialized through a re-entrant lock and executed inside a
journal checkpoint:

- success  → the checkpoint is committed; storage and events become durable
- failure  → the checkpoint is discarded; a failed Receipt is recorded and
             the exception is re-raised to the submitter unchanged

Cross-contract calls (`ctx.call`) open a nested checkpoint so a callee's
writes are merged into the caller's checkpoint only when the callee returns.
Views run in a checkpoint that is always discarded, so they cannot leak
writes even if the method misbehaves.

Typical use
-----------
    chain = LocalChain()
    deployer, alice = chain.accounts[:2]
    num = chain.deploy(Num, sender=deployer)
    rcpt = chain.transact(deployer, num.address, "transfer", alice, 5)
    chain.call(num.address, "balanceOf", alice)
    num.connect(alice).approve(spender, 10)
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Type, Union

from .abi import VIEW, Contract, contract_type
from .accounts import Account, contract_address, genesis_accounts
from .config import ChainConfig, load_config
from .context import ZERO_ADDRESS, Context, ContextError, to_address, to_hex
from .errors import ExecError, InvalidAccess, StateConflict, error_to_receipt_fields
from .events import Event, EventSink
from .journal import Journal
from .storage import BoundStorage, StorageView

log = logging.getLogger(__name__)

AddressLike = Union[bytes, str]

STATE_FORMAT_VERSION = 1


@dataclass
class Receipt:
    """Outcome of one submitted transaction."""

    index: int
    sender: bytes
    to: Optional[bytes]
    method: str
    status: str = "SUCCESS"
    return_value: Any = None
    events: List[Event] = field(default_factory=list)
    contract_address: Optional[bytes] = None
    error: Optional[Dict[str, Any]] = None

    @property
    def ok(self) -> bool:
        return self.status == "SUCCESS"

    def events_named(self, name: bytes) -> List[Event]:
        return [e for e in self.events if e.name == name]

    def to_dict(self) -> Dict[str, Any]:
        rv = self.return_value
        if isinstance(rv, (bytes, bytearray)):
            rv = to_hex(rv)
        return {
            "index": self.index,
            "from": to_hex(self.sender),
            "to": to_hex(self.to) if self.to is not None else None,
            "method": self.method,
            "status": self.status,
            "returnValue": rv,
            "contractAddress": to_hex(self.contract_address) if self.contract_address else None,
            "events": [e.to_dict() for e in self.events],
            "error": self.error,
        }


class LocalChain:
    """
    Deterministic local execution environment.

    Parameters
    ----------
    config : ChainConfig, optional
        Defaults to `load_config()` (environment + safe defaults).
    fund : bool
        Create and fund the dev accounts from config (default True).
    """

    def __init__(self, config: Optional[ChainConfig] = None, *, fund: bool = True) -> None:
        self.config = config or load_config()
        self.chain_id = self.config.chain_id
        self._accounts: Dict[bytes, Account] = {}
        self._storage = StorageView()
        self._journal = Journal(self._accounts, self._storage)
        self.events = EventSink(self._journal)
        self._contracts: Dict[bytes, Contract] = {}
        self._lock = threading.RLock()
        self.receipts: List[Receipt] = []
        self.labels: Dict[str, bytes] = {}
        if fund:
            for label, addr in genesis_accounts(self.config.dev_accounts).items():
                acc = Account()
                acc.credit(self.config.dev_balance)
                self._accounts[addr] = acc
                self.labels[label] = addr

    # ------------------------------------------------------------------ #
    # Accounts
    # ------------------------------------------------------------------ #

    @property
    def accounts(self) -> List[bytes]:
        """Dev account addresses in label order (index 0 is the deployer)."""
        return list(self.labels.values())

    def account(self, label_or_address: AddressLike) -> bytes:
        """Resolve a dev label ("alice") or hex/bytes address to an address."""
        if isinstance(label_or_address, str) and label_or_address in self.labels:
            return self.labels[label_or_address]
        return to_address(label_or_address)

    def balance_of(self, address: AddressLike) -> int:
        acc = self._journal.get_account(to_address(address))
        return acc.balance if acc is not None else 0

    def nonce_of(self, address: AddressLike) -> int:
        acc = self._journal.get_account(to_address(address))
        return acc.nonce if acc is not None else 0

    def is_contract(self, address: AddressLike) -> bool:
        try:
            addr = to_address(address)
        except ContextError:
            return False
        return addr in self._contracts

    def method_kind(self, address: AddressLike, method: str) -> Optional[str]:
        """PUBLIC/VIEW for an exported method of the contract at `address`, else None."""
        instance = self._contracts.get(to_address(address))
        return type(instance).method_kind(method) if instance is not None else None

    def contract_name(self, address: AddressLike) -> str:
        acc = self._journal.get_account(to_address(address))
        return acc.contract if acc is not None else ""

    def at(self, address: AddressLike) -> "ContractHandle":
        addr = to_address(address)
        if addr not in self._contracts:
            raise InvalidAccess("no contract at address", op="at", address=to_hex(addr))
        return ContractHandle(self, addr)

    # ------------------------------------------------------------------ #
    # Submissions
    # ------------------------------------------------------------------ #

    def deploy(self, contract_cls: Type[Contract], *args: Any, sender: AddressLike) -> "ContractHandle":
        """Create a contract account and run its constructor atomically."""
        if not (isinstance(contract_cls, type) and issubclass(contract_cls, Contract)):
            raise TypeError("contract_cls must be a Contract subclass")
        snd = self.account(sender)
        with self._lock:
            nonce = self._bump_nonce(snd)
            addr = contract_address(snd, nonce)
            rcpt = Receipt(index=len(self.receipts), sender=snd, to=None, method="constructor")
            marker = self._journal.begin()
            attached = False
            try:
                existing = self._journal.get_account(addr)
                if addr in self._contracts or (existing is not None and existing.is_contract):
                    raise StateConflict("contract address already in use", data={"address": to_hex(addr)})
                self._journal.account_for_write(addr).contract = contract_cls.NAME
                instance = contract_cls()
                self._contracts[addr] = instance
                attached = True
                ctx = self._context(sender=snd, address=addr, origin=snd, depth=0)
                instance.constructor(ctx, *args)
            except Exception as e:
                if attached:
                    self._contracts.pop(addr, None)
                self._journal.revert_to(marker)
                self._record_failure(rcpt, e)
                raise
            rcpt.events = self._journal.commit()
            rcpt.contract_address = addr
            self.receipts.append(rcpt)
            log.info("deployed %s at %s (from %s)", contract_cls.NAME, to_hex(addr), to_hex(snd))
            return ContractHandle(self, addr)

    def transact(self, sender: AddressLike, to: AddressLike, method: str, *args: Any) -> Receipt:
        """Execute an exported method as a state-changing transaction."""
        snd = self.account(sender)
        dst = to_address(to)
        with self._lock:
            self._bump_nonce(snd)
            rcpt = Receipt(index=len(self.receipts), sender=snd, to=dst, method=method)
            marker = self._journal.begin()
            try:
                rcpt.return_value = self._dispatch(
                    sender=snd, to=dst, method=method, args=args, origin=snd, depth=0
                )
            except Exception as e:
                self._journal.revert_to(marker)
                self._record_failure(rcpt, e)
                raise
            rcpt.events = self._journal.commit()
            self.receipts.append(rcpt)
            log.debug("tx #%d %s.%s ok (%d events)", rcpt.index, to_hex(dst), method, len(rcpt.events))
            return rcpt

    def call(self, to: AddressLike, method: str, *args: Any, sender: Optional[AddressLike] = None) -> Any:
        """Run an exported method without persisting anything."""
        dst = to_address(to)
        snd = self.account(sender) if sender is not None else ZERO_ADDRESS
        with self._lock:
            marker = self._journal.begin()
            try:
                return self._dispatch(sender=snd, to=dst, method=method, args=args, origin=snd, depth=0)
            finally:
                self._journal.revert_to(marker)

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _context(self, *, sender: bytes, address: bytes, origin: bytes, depth: int) -> Context:
        return Context(
            sender=sender,
            address=address,
            origin=origin,
            depth=depth,
            storage=BoundStorage(self._journal, address),
            chain=self,
        )

    def _bump_nonce(self, sender: bytes) -> int:
        """Consume and return the sender's current nonce, durably."""
        self._journal.begin()
        acc = self._journal.account_for_write(sender)
        nonce = acc.nonce
        acc.increment_nonce()
        self._journal.commit()
        return nonce

    def _record_failure(self, rcpt: Receipt, err: BaseException) -> None:
        if isinstance(err, ExecError):
            fields = error_to_receipt_fields(err)
            rcpt.status = fields["status"]
            rcpt.error = fields["error"]
            log.info("tx #%d %s reverted: %s", rcpt.index, rcpt.method, err)
        else:
            rcpt.status = "ERROR"
            rcpt.error = {"code": type(err).__name__, "message": str(err)}
            log.warning("tx #%d %s failed: %r", rcpt.index, rcpt.method, err)
        self.receipts.append(rcpt)

    def _dispatch(
        self,
        *,
        sender: bytes,
        to: bytes,
        method: str,
        args: Sequence[Any],
        origin: bytes,
        depth: int,
    ) -> Any:
        if depth > self.config.max_call_depth:
            raise InvalidAccess("call depth exceeded", op=method, data={"depth": depth})
        dst = to_address(to)
        instance = self._contracts.get(dst)
        if instance is None:
            raise InvalidAccess("no contract at address", op=method, address=to_hex(dst))
        kind = type(instance).method_kind(method)
        if kind is None:
            raise InvalidAccess(
                f"method {method!r} is not exported by {type(instance).NAME}",
                op=method,
                address=to_hex(dst),
            )
        fn = getattr(instance, method)
        ctx = self._context(sender=sender, address=dst, origin=origin, depth=depth)
        self._journal.begin()
        try:
            result = fn(ctx, *args)
        except RecursionError as e:
            # surfaced at the outermost frame; the submitter's revert_to drops open checkpoints
            if depth:
                raise
            raise InvalidAccess(
                "call depth exceeded", op=method, data={"maxDepth": self.config.max_call_depth}
            ) from e
        except Exception:
            self._journal.revert()
            raise
        if kind == VIEW:
            # views may write scratch state; none of it survives
            self._journal.revert()
        else:
            self._journal.commit()
        return result

    # ------------------------------------------------------------------ #
    # State export / import
    # ------------------------------------------------------------------ #

    def export_state(self) -> Dict[str, Any]:
        """JSON-friendly dump of accounts, storage and labels."""
        with self._lock:
            if self._journal.depth():
                raise RuntimeError("cannot export state inside an open transaction")
            accounts = {to_hex(a): acc.to_dict() for a, acc in sorted(self._accounts.items())}
            storage = {to_hex(a): self._storage.export_account_hex(a) for a in self._storage.addresses()}
            return {
                "version": STATE_FORMAT_VERSION,
                "chainId": self.chain_id,
                "labels": [[k, to_hex(v)] for k, v in self.labels.items()],
                "accounts": accounts,
                "storage": storage,
            }

    @classmethod
    def from_state(cls, data: Dict[str, Any], config: Optional[ChainConfig] = None) -> "LocalChain":
        """Rebuild a chain from `export_state()` output."""
        if int(data.get("version", 0)) != STATE_FORMAT_VERSION:
            raise ValueError(f"unsupported state version: {data.get('version')!r}")
        chain = cls(config, fund=False)
        chain.chain_id = int(data.get("chainId", chain.chain_id))
        for label, addr_hex in data.get("labels", []):
            chain.labels[label] = to_address(addr_hex)
        for addr_hex, acc_d in data.get("accounts", {}).items():
            addr = to_address(addr_hex)
            acc = Account.from_dict(acc_d)
            chain._accounts[addr] = acc
            if acc.is_contract:
                chain._contracts[addr] = contract_type(acc.contract)()
        for addr_hex, kv in data.get("storage", {}).items():
            chain._storage.import_account_hex(to_address(addr_hex), kv)
        log.debug("loaded state: %d accounts, %d contracts", len(chain._accounts), len(chain._contracts))
        return chain

    def save(self, path: Union[str, Path]) -> Path:
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        tmp = p.with_suffix(p.suffix + ".tmp")
        tmp.write_text(json.dumps(self.export_state(), indent=2, sort_keys=True) + "\n", encoding="utf-8")
        tmp.replace(p)
        return p

    @classmethod
    def load(cls, path: Union[str, Path], config: Optional[ChainConfig] = None) -> "LocalChain":
        return cls.from_state(json.loads(Path(path).read_text(encoding="utf-8")), config)


class ContractHandle:
    """Address-bound helper: `handle.call(...)`, `handle.connect(sender)`."""

    def __init__(self, chain: LocalChain, address: bytes) -> None:
        self.chain = chain
        self.address = address

    @property
    def name(self) -> str:
        return self.chain.contract_name(self.address)

    @property
    def hex(self) -> str:
        return to_hex(self.address)

    def call(self, method: str, *args: Any) -> Any:
        return self.chain.call(self.address, method, *args)

    def transact(self, sender: AddressLike, method: str, *args: Any) -> Receipt:
        return self.chain.transact(sender, self.address, method, *args)

    def connect(self, sender: AddressLike) -> "BoundContract":
        return BoundContract(self.chain, self.address, self.chain.account(sender))

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ContractHandle) and other.address == self.address

    def __hash__(self) -> int:
        return hash(self.address)

    def __repr__(self) -> str:
        return f"ContractHandle({self.name}@{self.hex})"


class BoundContract:
    """
    Attribute-style proxy. Views return values; public methods submit a
    transaction from the bound sender and return its Receipt.
    """

    def __init__(self, chain: LocalChain, address: bytes, sender: bytes) -> None:
        self._chain = chain
        self._address = address
        self._sender = sender
        self._cls = type(chain._contracts[address])

    @property
    def address(self) -> bytes:
        return self._address

    def __getattr__(self, name: str) -> Any:
        kind = self._cls.method_kind(name)
        if kind is None:
            raise AttributeError(f"{self._cls.NAME} has no exported method {name!r}")
        if kind == VIEW:
            return lambda *args: self._chain.call(self._address, name, *args, sender=self._sender)
        return lambda *args: self._chain.transact(self._sender, self._address, name, *args)


__all__ = ["LocalChain", "Receipt", "ContractHandle", "BoundContract", "STATE_FORMAT_VERSION"]
