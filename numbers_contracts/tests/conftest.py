# -*- coding: utf-8 -*-
"""
numbers_contracts.tests.conftest
================================

Fixtures for the Numbers contracts:

- `chain`            fresh LocalChain with funded dev accounts
- `funded_accounts`  {label: address} for deployer, alice, bob, ...
- `deployed`         Deployment of Num + NumbersNFT + Market (NFT cap 5)

Usage (inside a test file):
    def test_flow(deployed, funded_accounts):
        alice = funded_accounts["alice"]
        deployed.num.connect("deployer").transfer(alice, 5 * 10**18)
"""
from __future__ import annotations

import os
from typing import Dict

import pytest

from numbers_vm.chain import LocalChain
from numbers_vm.config import load_config

from numbers_contracts.tools.deploy import Deployment, deploy_all

# Pin the chain parameters the tests depend on.
os.environ.setdefault("NUMBERS_CHAIN_ID", "1337")
os.environ.setdefault("NUMBERS_DEV_ACCOUNTS", "5")

# Registry supply cap used by the scenario tests.
TEST_NFT_CAP = 5


@pytest.fixture()
def chain() -> LocalChain:
    load_config.cache_clear()
    return LocalChain()


@pytest.fixture()
def funded_accounts(chain: LocalChain) -> Dict[str, bytes]:
    return dict(chain.labels)


@pytest.fixture()
def deployed(chain: LocalChain) -> Deployment:
    return deploy_all(chain, "deployer", nft_cap=TEST_NFT_CAP, market_fee=5)
