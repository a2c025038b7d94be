from __future__ import annotations

import pytest

from numbers_vm.abi import Contract, public
from numbers_vm.context import ZERO_ADDRESS
from numbers_vm.errors import (
    AuthorizationError,
    InsufficientAllowanceError,
    InvalidAccess,
    InvalidAddressError,
    InvalidReceiverError,
    MintLimitError,
    NonexistentTokenError,
    NotApprovedError,
    Revert,
)

from numbers_contracts.numbers_nft.contract import NumbersNFT
from numbers_contracts.stdlib.token.nonfungible import ERC721_RECEIVED

E18 = 10**18


class ItemReceiver(Contract):
    @public
    def onERC721Received(self, ctx, operator, src, item_id, data):
        ctx.storage.set_int(b"last", item_id + 1)
        return ERC721_RECEIVED


class ItemRefuser(Contract):
    @public
    def onERC721Received(self, ctx, operator, src, item_id, data):
        raise Revert("no items please")


class WrongSelector(Contract):
    @public
    def onERC721Received(self, ctx, operator, src, item_id, data):
        return b"\x00\x00\x00\x00"


class NotAReceiver(Contract):
    pass


class BrokenReceiver(Contract):
    @public
    def onERC721Received(self, ctx, operator, src, item_id, data):
        return ctx.call(ZERO_ADDRESS, "ping")


@pytest.fixture()
def nft(deployed):
    return deployed.nft


@pytest.fixture()
def num(deployed):
    return deployed.num


def _fund_and_approve(num, nft, who: str, label_addr: bytes, amount: int = 100 * E18) -> None:
    num.connect("deployer").transfer(label_addr, amount)
    num.connect(who).approve(nft.address, amount)


# ---------------------------------------------------------------------------
# Deployment
# ---------------------------------------------------------------------------


def test_deployment_state(nft, num, funded_accounts):
    assert nft.call("name") == "NumbersNFT"
    assert nft.call("symbol") == "nNUM"
    assert nft.call("count") == 0
    assert nft.call("totalSupplyCap") == 5
    assert nft.call("price") == 10
    assert nft.call("numToken") == num.address
    assert nft.call("owner") == funded_accounts["deployer"]


# ---------------------------------------------------------------------------
# Minting
# ---------------------------------------------------------------------------


def test_owner_safe_mint(nft, funded_accounts):
    deployer = funded_accounts["deployer"]
    assert nft.call("balanceOf", deployer) == 0
    rcpt = nft.connect("deployer").safeMint(deployer)
    assert rcpt.return_value == 0
    assert nft.call("balanceOf", deployer) == 1
    assert nft.call("count") == 1
    assert nft.call("isContentOwned", 0) is True
    assert nft.call("ownerOf", 0) == deployer
    (ev,) = rcpt.events_named(b"Transfer")
    assert ev.args == {"from": ZERO_ADDRESS, "to": deployer, "tokenId": 0}


def test_safe_mint_is_owner_only(nft, funded_accounts):
    with pytest.raises(AuthorizationError, match="Ownable: caller is not the owner"):
        nft.connect("alice").safeMint(funded_accounts["alice"])
    assert nft.call("count") == 0


def test_pay_to_mint_requires_allowance(nft, num, funded_accounts):
    alice = funded_accounts["alice"]
    num.connect("deployer").transfer(alice, 100 * E18)
    with pytest.raises(InsufficientAllowanceError, match="ERC20: insufficient allowance"):
        nft.connect("alice").payToMint(alice)
    # nothing changed anywhere
    assert nft.call("count") == 0
    assert num.call("balanceOf", alice) == 100 * E18
    assert nft.call("isContentOwned", 0) is False


def test_pay_to_mint_charges_price_in_whole_num(nft, num, funded_accounts):
    alice = funded_accounts["alice"]
    _fund_and_approve(num, nft, "alice", alice)

    rcpt = nft.connect("alice").payToMint(alice)
    assert rcpt.return_value == 0
    assert nft.call("ownerOf", 0) == alice
    assert nft.call("isContentOwned", 0) is True
    assert num.call("balanceOf", alice) == 90 * E18
    assert num.call("balanceOf", nft.address) == 10 * E18
    assert num.call("allowance", alice, nft.address) == 90 * E18
    names = [e.name for e in rcpt.events]
    assert names == [b"Transfer", b"Transfer"]
    assert rcpt.events[0].address == num.address
    assert rcpt.events[1].address == nft.address

    nft.connect("deployer").updatePrice(20)
    nft.connect("alice").payToMint(alice)
    assert num.call("balanceOf", alice) == 70 * E18


def test_payer_is_caller_not_recipient(nft, num, funded_accounts):
    alice, bob = funded_accounts["alice"], funded_accounts["bob"]
    _fund_and_approve(num, nft, "alice", alice)
    nft.connect("alice").payToMint(bob)
    assert nft.call("ownerOf", 0) == bob
    assert num.call("balanceOf", alice) == 90 * E18
    assert num.call("balanceOf", bob) == 0


def test_update_price_owner_only_and_event(nft):
    with pytest.raises(AuthorizationError):
        nft.connect("alice").updatePrice(1)
    rcpt = nft.connect("deployer").updatePrice(20)
    (ev,) = rcpt.events
    assert ev.name == b"PriceUpdated" and ev.args == {"price": 20}
    assert nft.call("price") == 20


def test_mint_limit_and_supply_increase(nft, num, funded_accounts):
    deployer, alice = funded_accounts["deployer"], funded_accounts["alice"]
    _fund_and_approve(num, nft, "alice", alice)

    nft.connect("deployer").safeMint(deployer)
    for _ in range(4):
        nft.connect("alice").payToMint(alice)
    assert nft.call("count") == 5

    with pytest.raises(MintLimitError, match="MintLimit"):
        nft.connect("alice").payToMint(alice)
    with pytest.raises(MintLimitError):
        nft.connect("deployer").safeMint(deployer)
    # the rejected paid mint pulled nothing
    assert num.call("balanceOf", alice) == 60 * E18

    with pytest.raises(AuthorizationError):
        nft.connect("alice").increaseAvailableTotalSupply(5)
    rcpt = nft.connect("deployer").increaseAvailableTotalSupply(5)
    assert rcpt.events[0].args == {"totalSupplyCap": 10}
    assert nft.call("totalSupplyCap") == 10

    nft.connect("alice").payToMint(alice)
    assert nft.call("count") == 6


def test_mint_limit_checked_before_payment(chain, num, funded_accounts):
    deployer = funded_accounts["deployer"]
    zero_cap = chain.deploy(NumbersNFT, 0, num.address, deployer, sender=deployer)
    # no allowance at all, yet the limit is reported first
    with pytest.raises(MintLimitError):
        zero_cap.connect("alice").payToMint(funded_accounts["alice"])


def test_is_content_owned_unminted_is_false(nft):
    assert nft.call("isContentOwned", 3) is False


# ---------------------------------------------------------------------------
# Item transfer
# ---------------------------------------------------------------------------


def test_transfer_with_approval(nft, num, funded_accounts):
    deployer, alice, bob = (funded_accounts[k] for k in ("deployer", "alice", "bob"))
    _fund_and_approve(num, nft, "alice", alice)
    nft.connect("deployer").safeMint(deployer)
    nft.connect("alice").payToMint(alice)
    assert nft.call("ownerOf", 1) == alice

    rcpt = nft.connect("alice").approve(deployer, 1)
    assert rcpt.events[0].args == {"owner": alice, "approved": deployer, "tokenId": 1}
    assert nft.call("getApproved", 1) == deployer

    nft.connect("alice").safeTransferFrom(alice, deployer, 1)
    assert nft.call("ownerOf", 1) == deployer
    assert nft.call("getApproved", 1) == ZERO_ADDRESS
    assert nft.call("balanceOf", alice) == 0
    assert nft.call("balanceOf", deployer) == 2
    # content flag survives transfers
    assert nft.call("isContentOwned", 1) is True

    with pytest.raises(NotApprovedError):
        nft.connect("bob").transferFrom(deployer, bob, 1)


def test_approved_account_can_move_item(nft, funded_accounts):
    deployer, bob, carol = (funded_accounts[k] for k in ("deployer", "bob", "carol"))
    nft.connect("deployer").safeMint(deployer)
    nft.connect("deployer").approve(bob, 0)
    nft.connect("bob").transferFrom(deployer, carol, 0)
    assert nft.call("ownerOf", 0) == carol
    # approval was cleared by the transfer
    with pytest.raises(NotApprovedError):
        nft.connect("bob").transferFrom(carol, bob, 0)


def test_operator_approval(nft, funded_accounts):
    deployer, bob, carol = (funded_accounts[k] for k in ("deployer", "bob", "carol"))
    nft.connect("deployer").safeMint(deployer)
    rcpt = nft.connect("deployer").setApprovalForAll(bob, True)
    assert rcpt.events[0].args == {"owner": deployer, "operator": bob, "approved": True}
    assert nft.call("isApprovedForAll", deployer, bob) is True
    nft.connect("bob").safeTransferFrom(deployer, carol, 0)
    assert nft.call("ownerOf", 0) == carol

    nft.connect("deployer").setApprovalForAll(bob, False)
    assert nft.call("isApprovedForAll", deployer, bob) is False
    with pytest.raises(InvalidAddressError, match="approve to caller"):
        nft.connect("deployer").setApprovalForAll(deployer, True)


def test_transfer_edge_cases(nft, funded_accounts):
    deployer, alice = funded_accounts["deployer"], funded_accounts["alice"]
    nft.connect("deployer").safeMint(deployer)
    with pytest.raises(InvalidAddressError, match="incorrect owner"):
        nft.connect("deployer").transferFrom(alice, deployer, 0)
    with pytest.raises(InvalidAddressError, match="zero address"):
        nft.connect("deployer").transferFrom(deployer, ZERO_ADDRESS, 0)
    with pytest.raises(InvalidAddressError, match="approval to current owner"):
        nft.connect("deployer").approve(deployer, 0)
    with pytest.raises(NotApprovedError):
        nft.connect("alice").approve(alice, 0)
    with pytest.raises(NonexistentTokenError):
        nft.call("ownerOf", 9)
    with pytest.raises(NonexistentTokenError):
        nft.connect("deployer").transferFrom(deployer, alice, 9)


# ---------------------------------------------------------------------------
# Contract recipients
# ---------------------------------------------------------------------------


def test_safe_transfer_to_receiver_contract(chain, nft, funded_accounts):
    deployer = funded_accounts["deployer"]
    receiver = chain.deploy(ItemReceiver, sender=deployer)
    nft.connect("deployer").safeMint(deployer)
    nft.connect("deployer").safeTransferFrom(deployer, receiver.address, 0)
    assert nft.call("ownerOf", 0) == receiver.address

    nft.connect("deployer").safeMint(receiver.address)
    assert nft.call("ownerOf", 1) == receiver.address


@pytest.mark.parametrize("bad_cls", [ItemRefuser, WrongSelector, NotAReceiver])
def test_safe_transfer_to_rejecting_contract_reverts(chain, nft, funded_accounts, bad_cls):
    deployer = funded_accounts["deployer"]
    bad = chain.deploy(bad_cls, sender=deployer)
    nft.connect("deployer").safeMint(deployer)
    with pytest.raises(Revert):
        nft.connect("deployer").safeTransferFrom(deployer, bad.address, 0)
    assert nft.call("ownerOf", 0) == deployer
    with pytest.raises(Revert):
        nft.connect("deployer").safeMint(bad.address)
    assert nft.call("count") == 1


def test_plain_transfer_skips_receiver_check(chain, nft, funded_accounts):
    deployer = funded_accounts["deployer"]
    bad = chain.deploy(NotAReceiver, sender=deployer)
    nft.connect("deployer").safeMint(deployer)
    nft.connect("deployer").transferFrom(deployer, bad.address, 0)
    assert nft.call("ownerOf", 0) == bad.address


def test_missing_hook_reports_invalid_receiver(chain, nft, funded_accounts):
    deployer = funded_accounts["deployer"]
    bad = chain.deploy(NotAReceiver, sender=deployer)
    with pytest.raises(InvalidReceiverError):
        nft.connect("deployer").safeMint(bad.address)


def test_hook_failures_propagate_unchanged(chain, nft, funded_accounts):
    deployer = funded_accounts["deployer"]
    broken = chain.deploy(BrokenReceiver, sender=deployer)
    with pytest.raises(InvalidAccess, match="no contract at address"):
        nft.connect("deployer").safeMint(broken.address)
    assert nft.call("count") == 0
    assert nft.call("balanceOf", broken.address) == 0


# ---------------------------------------------------------------------------
# Withdrawal & royalties
# ---------------------------------------------------------------------------


def test_withdraw_accumulated_num(nft, num, funded_accounts):
    deployer, alice = funded_accounts["deployer"], funded_accounts["alice"]
    num.connect("deployer").transfer(alice, 100 * E18)
    num.connect("alice").approve(nft.address, 100 * E18)
    assert num.call("balanceOf", deployer) == 0

    nft.connect("alice").payToMint(alice)
    nft.connect("deployer").updatePrice(20)
    for _ in range(4):
        nft.connect("alice").payToMint(alice)

    with pytest.raises(AuthorizationError):
        nft.connect("alice").withdrawNUM()

    rcpt = nft.connect("deployer").withdrawNUM()
    assert rcpt.return_value == 90 * E18
    assert num.call("balanceOf", deployer) == 90 * E18
    assert num.call("balanceOf", nft.address) == 0
    (ev,) = rcpt.events_named(b"Withdrawal")
    assert ev.args == {"to": deployer, "value": 90 * E18}


def test_withdraw_with_empty_balance(nft, funded_accounts):
    rcpt = nft.connect("deployer").withdrawNUM()
    assert rcpt.return_value == 0
    assert rcpt.events_named(b"Transfer") == []


def test_royalty_info(nft, funded_accounts):
    receiver, amount = nft.call("royaltyInfo", 2, 10 * E18)
    assert receiver == funded_accounts["deployer"]
    assert amount == 5 * 10**17
    assert nft.call("royaltyInfo", 0, 100) == (funded_accounts["deployer"], 5)


def test_supports_interface(nft):
    for iid in ("01ffc9a7", "80ac58cd", "5b5e139f", "2a55205a"):
        assert nft.call("supportsInterface", bytes.fromhex(iid)) is True
    assert nft.call("supportsInterface", 0x80AC58CD) is True
    assert nft.call("supportsInterface", bytes.fromhex("ffffffff")) is False
