"""Deploy, exercise and verify the TetherToken contract.

Every step waits for the previous one: the contract is deployed and mined,
its price feeds are read, tokens are minted and then transferred (each
transaction mined before the next is sent), balances are read back and the
source is verified on Etherscan. Nothing is rolled back and nothing is
skipped on a re-run: each run deploys a fresh contract.

Usage:
    PRIVATE_KEY=0x... ALCHEMY_API_KEY=... ETHERSCAN_API_KEY=... deploy-tether
"""

import logging
import math
import sys
from dataclasses import dataclass
from typing import Optional

from eth_account import Account
from web3 import Web3

from .config import Settings
from .contracts import (
    ADDRESSES,
    DEFAULT_RECIPIENT,
    MINT_AMOUNT,
    TOKEN_DECIMALS,
    TRANSFER_AMOUNT,
    USDT_ETH_FEED_DECIMALS,
    USDT_USD_FEED_DECIMALS,
    ContractArtifact,
    PegAddresses,
    encode_constructor_args,
    load_artifact,
)
from .exceptions import ConfigurationError, TransactionFailed
from .types import as_address, format_units
from .verify import EtherscanVerifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeploymentResult:
    """What a completed run observed on chain."""

    address: str
    usdt_eth_price: int
    usdt_usd_price: int
    usdt_in_eth: float
    deployer_balance: int
    recipient_balance: int
    verified: bool


def get_signer(private_key: str):
    """Resolve the deploying account from its private key.

    Raises:
        ConfigurationError: If no key is configured
    """
    if not private_key:
        raise ConfigurationError("PRIVATE_KEY environment variable not set")
    return Account.from_key(private_key)


def send_transaction(w3, account, call) -> dict:
    """Build, sign and broadcast ``call``, then block until it is mined.

    Args:
        w3: Web3 instance
        account: Signing account (``LocalAccount``)
        call: A contract function call or constructor with ``build_transaction``

    Returns:
        The transaction receipt

    Raises:
        TransactionFailed: If the transaction was mined but reverted
    """
    tx = call.build_transaction(
        {
            "from": account.address,
            "nonce": w3.eth.get_transaction_count(account.address, "pending"),
            "chainId": w3.eth.chain_id,
        }
    )
    signed = w3.eth.account.sign_transaction(tx, account.key)
    tx_hash = w3.eth.send_raw_transaction(signed.raw_transaction)
    logger.debug("sent transaction %s", Web3.to_hex(tx_hash))

    receipt = w3.eth.wait_for_transaction_receipt(tx_hash)
    if receipt["status"] != 1:
        raise TransactionFailed(Web3.to_hex(tx_hash), receipt)
    logger.debug("mined in block %s (gas used: %s)", receipt["blockNumber"], receipt["gasUsed"])
    return receipt


def price_ratio(numerator: int, denominator: int) -> float:
    """Divide two feed answers as floats, unguarded: ``x / 0`` is ``±inf`` and ``0 / 0`` is ``nan``."""
    if denominator == 0:
        if numerator == 0:
            return math.nan
        return math.copysign(math.inf, numerator)
    return numerator / denominator


def deploy_contract(w3, account, artifact: ContractArtifact, constructor_args: tuple):
    """Deploy ``artifact`` and return a contract bound to the new address."""
    factory = w3.eth.contract(abi=artifact.abi, bytecode=artifact.bytecode)
    receipt = send_transaction(w3, account, factory.constructor(*constructor_args))
    return w3.eth.contract(address=receipt["contractAddress"], abi=artifact.abi)


def run_deployment(
    w3,
    account,
    artifact: ContractArtifact,
    addresses: PegAddresses,
    verifier: Optional[EtherscanVerifier] = None,
    recipient: str = DEFAULT_RECIPIENT,
    mint_amount: int = MINT_AMOUNT,
    transfer_amount: int = TRANSFER_AMOUNT,
) -> DeploymentResult:
    """Run the deployment workflow once. Any failure propagates."""
    recipient = as_address(recipient)
    constructor_args = addresses.as_constructor_args()

    logger.info("Deploying contracts with the account: %s", account.address)
    logger.info("Deploying %s contract...", artifact.contract_name)
    token = deploy_contract(w3, account, artifact, constructor_args)
    logger.info("%s deployed to: %s", artifact.contract_name, token.address)

    usdt_eth_price = token.functions.getLatestUsdtEthPrice().call()
    logger.info(
        "Latest USDT/ETH price (%d decimals): %s",
        USDT_ETH_FEED_DECIMALS,
        format_units(usdt_eth_price, USDT_ETH_FEED_DECIMALS),
    )
    usdt_usd_price = token.functions.getLatestUsdtUsdPrice().call()
    logger.info(
        "Latest USDT/USD price (%d decimals): %s",
        USDT_USD_FEED_DECIMALS,
        format_units(usdt_usd_price, USDT_USD_FEED_DECIMALS),
    )

    usdt_in_eth = price_ratio(usdt_eth_price, usdt_usd_price)
    logger.info("1 USDT in ETH: %.10f", usdt_in_eth)

    send_transaction(w3, account, token.functions.mint(account.address, mint_amount))
    logger.info(
        "Minted %s %s tokens to the deployer's address.",
        format_units(mint_amount, TOKEN_DECIMALS),
        artifact.contract_name,
    )

    send_transaction(w3, account, token.functions.transfer(recipient, transfer_amount))
    logger.info(
        "Transferred %s %s tokens to %s.",
        format_units(transfer_amount, TOKEN_DECIMALS),
        artifact.contract_name,
        recipient,
    )

    deployer_balance = token.functions.balanceOf(account.address).call()
    recipient_balance = token.functions.balanceOf(recipient).call()
    logger.info(
        "Deployer balance after mint and transfer: %s",
        format_units(deployer_balance, TOKEN_DECIMALS),
    )
    logger.info(
        "Recipient balance after transfer: %s",
        format_units(recipient_balance, TOKEN_DECIMALS),
    )

    verified = False
    if verifier is not None:
        logger.info("Verifying contract on Etherscan...")
        verified = verifier.verify(
            token.address, artifact, encode_constructor_args(artifact, constructor_args)
        )
        logger.info("Contract verified successfully on Etherscan.")

    return DeploymentResult(
        address=token.address,
        usdt_eth_price=usdt_eth_price,
        usdt_usd_price=usdt_usd_price,
        usdt_in_eth=usdt_in_eth,
        deployer_balance=deployer_balance,
        recipient_balance=recipient_balance,
        verified=verified,
    )


def deploy_from_settings(settings: Settings) -> DeploymentResult:
    """Wire up web3, the signer, the artifact and the verifier from ``settings``."""
    account = get_signer(settings.private_key)
    w3 = Web3(Web3.HTTPProvider(settings.rpc_url))
    artifact = load_artifact(settings.artifacts_dir)
    verifier = EtherscanVerifier(settings.etherscan_api_key, settings.chain_id)
    return run_deployment(w3, account, artifact, ADDRESSES[settings.network], verifier)


def main():
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    try:
        deploy_from_settings(Settings.from_env())
    except Exception:
        logger.exception("Script failed with error")
        sys.exit(1)
    sys.exit(0)


if __name__ == "__main__":
    main()
