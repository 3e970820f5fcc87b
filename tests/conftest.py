"""Shared fixtures: an in-memory stand-in for the parts of web3 the deploy flow touches.

Transactions are queued when broadcast and only take effect when their
receipt is awaited, so tests can observe exactly when each one was mined.
"""

from types import SimpleNamespace

import pytest
from eth_account import Account
from hexbytes import HexBytes

from pytether.contracts import ContractArtifact

PRIVATE_KEY = "0x7eafbf9699b30c9ed8e3d6bbae57dd4f047544fde34d4c982dd591c2bee39ad0"
TOKEN_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"

TETHER_TOKEN_ABI = [
    {
        "type": "constructor",
        "inputs": [
            {"name": "_usdtEthPriceFeed", "type": "address"},
            {"name": "_usdtUsdPriceFeed", "type": "address"},
            {"name": "_usdtToken", "type": "address"},
            {"name": "_uniswapRouter", "type": "address"},
        ],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "getLatestUsdtEthPrice",
        "inputs": [],
        "outputs": [{"name": "", "type": "int256"}],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "getLatestUsdtUsdPrice",
        "inputs": [],
        "outputs": [{"name": "", "type": "int256"}],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "mint",
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "transfer",
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "balanceOf",
        "inputs": [{"name": "account", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
    },
]


class FakeCall:
    """A pending contract call: ``.call()`` reads, ``.build_transaction()`` queues a write."""

    def __init__(self, chain, name, args, apply=None, value=None):
        self.chain = chain
        self.name = name
        self.args = args
        self.apply = apply
        self.value = value

    def call(self):
        self.chain.events.append(("call", self.name, self.args))
        return self.value() if callable(self.value) else self.value

    def build_transaction(self, tx_params):
        self.chain.events.append(("build", self.name, self.args))
        tx_id = len(self.chain.pending) + len(self.chain.mined)
        self.chain.actions[tx_id] = (self.name, self.args, self.apply)
        return {**tx_params, "data": tx_id}


class FakeToken:
    """Deployed TetherToken with an in-memory ledger."""

    def __init__(self, chain, address, constructor_args):
        self.chain = chain
        self.address = address
        self.constructor_args = constructor_args
        self.balances = {}
        self.functions = SimpleNamespace(
            getLatestUsdtEthPrice=lambda: FakeCall(
                chain, "getLatestUsdtEthPrice", (), value=chain.usdt_eth_price
            ),
            getLatestUsdtUsdPrice=lambda: FakeCall(
                chain, "getLatestUsdtUsdPrice", (), value=chain.usdt_usd_price
            ),
            mint=lambda to, amount: FakeCall(
                chain, "mint", (to, amount), apply=lambda: self._credit(to, amount)
            ),
            transfer=lambda to, amount: FakeCall(
                chain, "transfer", (to, amount), apply=lambda: self._transfer(to, amount)
            ),
            balanceOf=lambda who: FakeCall(
                chain, "balanceOf", (who,), value=lambda: self.balances.get(who, 0)
            ),
        )

    def _credit(self, to, amount):
        self.balances[to] = self.balances.get(to, 0) + amount

    def _transfer(self, to, amount):
        sender = self.chain.current_sender
        if self.balances.get(sender, 0) < amount:
            return False
        self.balances[sender] -= amount
        self._credit(to, amount)
        return True


class FakeEth:
    def __init__(self, chain):
        self.chain = chain
        self.chain_id = 1
        self.account = SimpleNamespace(sign_transaction=self._sign_transaction)

    def contract(self, address=None, abi=None, bytecode=None):
        if bytecode is not None:
            return SimpleNamespace(
                constructor=lambda *args: FakeCall(
                    self.chain, "constructor", args, apply=lambda: self.chain._deploy(args)
                )
            )
        assert address == TOKEN_ADDRESS
        return self.chain.token

    def get_transaction_count(self, address, block_identifier="latest"):
        return self.chain.nonce

    def _sign_transaction(self, tx, key):
        return SimpleNamespace(raw_transaction=tx)

    def send_raw_transaction(self, raw):
        name = self.chain.actions[raw["data"]][0]
        self.chain.events.append(("send", name))
        if name in self.chain.fail_on_send:
            raise ValueError(f"execution reverted: {name}")
        self.chain.pending.append(raw)
        self.chain.nonce += 1
        return HexBytes(raw["data"].to_bytes(32, "big"))

    def wait_for_transaction_receipt(self, tx_hash):
        raw = self.chain.pending.pop(0)
        tx_id = int.from_bytes(bytes(tx_hash), "big")
        assert raw["data"] == tx_id, "receipts must be awaited in send order"
        name, args, apply = self.chain.actions[tx_id]
        self.chain.current_sender = raw["from"]
        ok = apply() if apply else True
        status = 0 if (ok is False or name in self.chain.revert) else 1
        self.chain.mined.append(raw)
        self.chain.events.append(("mined", name))
        return {
            "status": status,
            "transactionHash": tx_hash,
            "blockNumber": len(self.chain.mined),
            "gasUsed": 21_000,
            "contractAddress": TOKEN_ADDRESS if name == "constructor" else None,
        }


class FakeWeb3:
    """Enough of ``Web3`` for the deployment workflow."""

    def __init__(self, usdt_eth_price=370_000_000_000_000, usdt_usd_price=100_010_000):
        self.usdt_eth_price = usdt_eth_price
        self.usdt_usd_price = usdt_usd_price
        self.events = []
        self.actions = {}
        self.pending = []
        self.mined = []
        self.nonce = 0
        self.fail_on_send = set()
        self.revert = set()
        self.current_sender = None
        self.token = None
        self.deploy_args = []
        self.eth = FakeEth(self)

    def _deploy(self, args):
        self.deploy_args.append(args)
        self.token = FakeToken(self, TOKEN_ADDRESS, args)


@pytest.fixture
def account():
    return Account.from_key(PRIVATE_KEY)


@pytest.fixture
def fake_w3():
    return FakeWeb3()


@pytest.fixture
def artifact():
    return ContractArtifact(
        contract_name="TetherToken",
        source_name="contracts/TetherToken.sol",
        abi=TETHER_TOKEN_ABI,
        bytecode="0x6080604052",
        solc_long_version="0.8.20+commit.a1b79de6",
        standard_json_input={
            "language": "Solidity",
            "sources": {"contracts/TetherToken.sol": {"content": "// SPDX"}},
            "settings": {"optimizer": {"enabled": True, "runs": 200}},
        },
    )
