"""
numbers_vm.abi — exported-method markers and the Contract base class.

A contract is a plain Python class deriving from `Contract`. It holds no
Python-level state: everything persistent goes through `ctx.storage`. Only
methods marked with `@public` (state-changing) or `@view` (read-only) are
reachable from outside; the chain raises InvalidAccess for anything else.

    class Counter(Contract):
        def constructor(self, ctx, start):
            ctx.storage.set_int(b"n", start)

        @public
        def inc(self, ctx):
            ctx.storage.set_int(b"n", ctx.storage.get_int(b"n") + 1)

        @view
        def get(self, ctx):
            return ctx.storage.get_int(b"n")

Every concrete subclass registers itself by class name so that a persisted
state file can be re-attached to code (see LocalChain.from_state).
"""

from __future__ import annotations

from typing import Any, Callable, ClassVar, Dict, Optional, Type, TypeVar

PUBLIC = "public"
VIEW = "view"

_ABI_ATTR = "__abi_kind__"

F = TypeVar("F", bound=Callable[..., Any])

# name -> contract class
CONTRACT_TYPES: Dict[str, Type["Contract"]] = {}


def public(fn: F) -> F:
    """Export a state-changing method."""
    setattr(fn, _ABI_ATTR, PUBLIC)
    return fn


def view(fn: F) -> F:
    """Export a read-only method."""
    setattr(fn, _ABI_ATTR, VIEW)
    return fn


class Contract:
    """Base class for contract types."""

    # Registry name; defaults to the class name.
    NAME: ClassVar[str] = ""

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if not cls.__dict__.get("NAME"):
            cls.NAME = cls.__name__
        CONTRACT_TYPES[cls.NAME] = cls

    def constructor(self, ctx: Any, *args: Any) -> None:
        """Runs once at deploy time inside the deploy transaction."""
        if args:
            raise TypeError(f"{type(self).__name__} takes no constructor arguments")

    @classmethod
    def method_kind(cls, name: str) -> Optional[str]:
        """Return PUBLIC/VIEW for an exported method, else None."""
        if not isinstance(name, str) or name.startswith("_"):
            return None
        fn = getattr(cls, name, None)
        if fn is None or not callable(fn):
            return None
        return getattr(fn, _ABI_ATTR, None)

    @classmethod
    def abi(cls) -> Dict[str, str]:
        """{method_name: kind} for every exported method, sorted by name."""
        out: Dict[str, str] = {}
        for name in sorted(dir(cls)):
            kind = cls.method_kind(name)
            if kind is not None:
                out[name] = kind
        return out


def contract_type(name: str) -> Type[Contract]:
    try:
        return CONTRACT_TYPES[name]
    except KeyError:
        raise KeyError(f"unknown contract type: {name!r}") from None


__all__ = ["PUBLIC", "VIEW", "public", "view", "Contract", "CONTRACT_TYPES", "contract_type"]
