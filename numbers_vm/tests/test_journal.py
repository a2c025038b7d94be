# -*- coding: utf-8 -*-
"""
Journal laws:
   - checkpoint → writes → revert  ⇒ state equals baseline
   - checkpoint → writes → commit  ⇒ baseline ∪ writes (last-wins)
   - nested checkpoints behave as a stack (inner revert keeps outer writes)
   - events travel with their checkpoint
"""
from __future__ import annotations

from typing import Dict

import pytest
from hypothesis import given, settings, strategies as st

from numbers_vm.accounts import Account
from numbers_vm.events import Event
from numbers_vm.journal import Journal
from numbers_vm.storage import StorageView

ADDR = b"\x11" * 20
HKEY = st.binary(min_size=1, max_size=32)
HVAL = st.binary(min_size=1, max_size=64)
MAP_SMALL = st.dictionaries(keys=HKEY, values=HVAL, min_size=0, max_size=16)


def _snapshot(sv: StorageView) -> Dict[bytes, bytes]:
    return dict(sv.items(ADDR))


def _journal(base: Dict[bytes, bytes]):
    sv = StorageView()
    for k, v in base.items():
        sv.set(ADDR, k, v)
    return Journal({}, sv), sv


@settings(max_examples=60, deadline=None)
@given(base=MAP_SMALL, writes=MAP_SMALL)
def test_revert_restores_baseline(base, writes):
    j, sv = _journal(base)
    j.begin()
    for k, v in writes.items():
        j.storage_set(ADDR, k, v)
    j.revert()
    assert _snapshot(sv) == base
    for k in writes:
        assert j.storage_get(ADDR, k) == base.get(k, b"")


@settings(max_examples=60, deadline=None)
@given(base=MAP_SMALL, writes=MAP_SMALL)
def test_commit_applies_last_wins(base, writes):
    j, sv = _journal(base)
    j.begin()
    for k, v in writes.items():
        j.storage_set(ADDR, k, v)
    j.commit()
    expected = dict(base)
    expected.update(writes)
    assert _snapshot(sv) == expected


@settings(max_examples=40, deadline=None)
@given(outer=MAP_SMALL, inner=MAP_SMALL)
def test_inner_revert_keeps_outer_writes(outer, inner):
    j, sv = _journal({})
    j.begin()
    for k, v in outer.items():
        j.storage_set(ADDR, k, v)
    j.begin()
    for k, v in inner.items():
        j.storage_set(ADDR, k, v + b"!")
    j.revert()
    j.commit()
    assert _snapshot(sv) == outer


def test_empty_value_deletes_and_reads_back_default():
    j, sv = _journal({b"k": b"v"})
    j.begin()
    j.storage_set(ADDR, b"k", b"")
    assert j.storage_get(ADDR, b"k") == b""
    assert sv.get(ADDR, b"k") == b"v"
    j.commit()
    assert sv.get(ADDR, b"k") == b""
    assert list(sv.addresses()) == []


def test_write_outside_checkpoint_rejected():
    j, _ = _journal({})
    with pytest.raises(RuntimeError):
        j.storage_set(ADDR, b"k", b"v")
    with pytest.raises(RuntimeError):
        j.commit()


def test_account_copy_on_write():
    base = {ADDR: Account(nonce=1, balance=5)}
    j = Journal(base, StorageView())
    j.begin()
    acc = j.account_for_write(ADDR)
    acc.increment_nonce()
    assert base[ADDR].nonce == 1
    assert j.get_account(ADDR).nonce == 2
    j.revert()
    assert j.get_account(ADDR).nonce == 1


def test_events_follow_their_checkpoint():
    j, _ = _journal({})
    keep = Event(address=ADDR, name=b"Keep", args={})
    drop = Event(address=ADDR, name=b"Drop", args={})
    j.begin()
    j.record_event(keep)
    j.begin()
    j.record_event(drop)
    j.revert()
    assert j.commit() == [keep]


def test_nested_commit_returns_no_events_until_outermost():
    j, _ = _journal({})
    ev = Event(address=ADDR, name=b"E", args={"x": 1})
    j.begin()
    j.begin()
    j.record_event(ev)
    assert j.commit() == []
    assert j.commit() == [ev]


def test_revert_to_marker_unwinds_stack():
    j, _ = _journal({})
    marker = j.begin()
    j.begin()
    j.begin()
    assert j.depth() == 3
    j.revert_to(marker)
    assert j.depth() == 0
