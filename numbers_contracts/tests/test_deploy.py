from __future__ import annotations

import json

from numbers_vm.chain import LocalChain

from numbers_contracts.tools import canonical_json_str, parse_arg, to_jsonable
from numbers_contracts.tools.deploy import deploy_all, read_registry, registry_path, write_registry


def test_deploy_all_wires_contracts(chain, funded_accounts):
    deployer = funded_accounts["deployer"]
    dep = deploy_all(chain, "deployer")
    assert dep.nft.call("numToken") == dep.num.address
    assert dep.nft.call("totalSupplyCap") == chain.config.nft_cap
    assert dep.market.call("numToken") == dep.num.address
    assert dep.market.call("fee") == chain.config.market_fee
    assert dep.market.call("feeRecipient") == deployer
    assert dep.market.call("owner") == deployer
    assert [h.name for h in dep.contracts().values()] == ["Num", "NumbersNFT", "Market"]


def test_deploy_all_custom_parameters(chain, funded_accounts):
    alice, bob = funded_accounts["alice"], funded_accounts["bob"]
    dep = deploy_all(chain, "deployer", nft_cap=20, market_fee=7, beneficiary="alice", recipient=bob)
    assert dep.nft.call("totalSupplyCap") == 20
    assert dep.nft.call("royaltyInfo", 0, 10_000)[0] == alice
    assert dep.market.call("fee") == 7
    assert dep.market.call("feeRecipient") == bob


def test_registry_file_is_canonical(chain, tmp_path):
    dep = deploy_all(chain, "deployer", nft_cap=20, market_fee=5)
    path = write_registry(dep, tmp_path)
    assert path == registry_path(chain.chain_id, tmp_path)
    assert path.name == f"{chain.chain_id}.json"
    text = path.read_text(encoding="utf-8")
    assert text == canonical_json_str(json.loads(text)) + "\n"
    reg = read_registry(chain.chain_id, tmp_path)
    assert reg["contracts"]["NumbersNFT"]["address"] == dep.nft.hex
    assert reg["contracts"]["NumbersNFT"]["args"] == [20, dep.num.hex, "0x" + dep.deployer.hex()]
    assert read_registry(999, tmp_path) == {}


def test_state_round_trip_keeps_contracts_usable(chain, funded_accounts, tmp_path):
    alice = funded_accounts["alice"]
    dep = deploy_all(chain, "deployer", nft_cap=5)
    dep.num.connect("deployer").transfer(alice, 50 * 10**18)
    dep.num.connect("alice").approve(dep.nft.address, 50 * 10**18)
    dep.nft.connect("alice").payToMint(alice)
    path = chain.save(tmp_path / "state.json")

    restored = LocalChain.load(path)
    nft = restored.at(dep.nft.address)
    assert nft.name == "NumbersNFT"
    assert nft.call("ownerOf", 0) == alice
    assert restored.at(dep.num.address).call("balanceOf", alice) == 40 * 10**18
    nft.connect("alice").payToMint(alice)
    assert nft.call("count") == 2


def test_parse_arg_and_jsonable():
    labels = {"alice": b"\x01" * 20}
    assert parse_arg("alice", labels) == b"\x01" * 20
    assert parse_arg("0x" + "ab" * 20) == b"\xab" * 20
    assert parse_arg("20") == 20
    assert parse_arg("true") is True
    assert parse_arg("hello") == "hello"
    assert to_jsonable((b"\x01", 5, [b"\x02"])) == ["0x01", 5, ["0x02"]]
