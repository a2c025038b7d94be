from __future__ import annotations

from pathlib import Path

import pytest

from numbers_vm.config import MAX_CALL_DEPTH_LIMIT, load_config
from numbers_vm.errors import (
    AuthorizationError,
    ExecError,
    InvalidAccess,
    MintLimitError,
    StateConflict,
    error_to_receipt_fields,
)


@pytest.fixture()
def fresh_config():
    load_config.cache_clear()
    yield load_config
    load_config.cache_clear()


def test_defaults(monkeypatch, fresh_config):
    for name in ("NUMBERS_CHAIN_ID", "NUMBERS_DEV_ACCOUNTS", "NUMBERS_NFT_CAP", "NUMBERS_LOG_LEVEL", "NUMBERS_BUILD_DIR"):
        monkeypatch.delenv(name, raising=False)
    cfg = fresh_config()
    assert cfg.chain_id == 1337
    assert cfg.dev_accounts == 5
    assert cfg.dev_balance == 10_000 * 10**18
    assert cfg.nft_cap == 20
    assert cfg.market_fee == 5
    assert cfg.log_level == "INFO"
    assert cfg.build_dir == Path("build")
    assert cfg.as_dict()["build_dir"] == "build"


def test_env_overrides_and_clamping(monkeypatch, fresh_config):
    monkeypatch.setenv("NUMBERS_CHAIN_ID", "0x10")
    monkeypatch.setenv("NUMBERS_DEV_ACCOUNTS", "1000")
    monkeypatch.setenv("NUMBERS_MAX_CALL_DEPTH", "garbage")
    monkeypatch.setenv("NUMBERS_LOG_LEVEL", "debug")
    monkeypatch.setenv("NUMBERS_BUILD_DIR", "/tmp/numbers-build")
    cfg = fresh_config()
    assert cfg.chain_id == 16
    assert cfg.dev_accounts == 64
    assert cfg.max_call_depth == 64
    assert cfg.log_level == "DEBUG"
    assert cfg.build_dir == Path("/tmp/numbers-build")


def test_call_depth_clamped_below_interpreter_limit(monkeypatch, fresh_config):
    monkeypatch.setenv("NUMBERS_MAX_CALL_DEPTH", "1024")
    assert fresh_config().max_call_depth == MAX_CALL_DEPTH_LIMIT == 128


def test_error_codes_and_messages():
    e = AuthorizationError(data={"caller": "0x01"})
    assert e.code == "NOT_OWNER"
    assert e.message == "Ownable: caller is not the owner"
    assert e.to_dict() == {"code": "NOT_OWNER", "message": e.message, "data": {"caller": "0x01"}}
    assert MintLimitError().message == "MintLimit"
    assert MintLimitError(reason="full").data == {"reason": "full"}


def test_receipt_fields_distinguish_revert_from_error():
    assert error_to_receipt_fields(MintLimitError())["status"] == "REVERT"
    assert error_to_receipt_fields(InvalidAccess(op="x"))["status"] == "ERROR"
    f = error_to_receipt_fields(StateConflict())
    assert f["error"]["code"] == "STATE_CONFLICT"
    assert isinstance(StateConflict(), ExecError)
