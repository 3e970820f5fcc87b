"""
PyTether - deploy and exercise the TetherToken contract with web3.py

Deploys the externally compiled TetherToken contract, drives its price-feed,
mint and transfer functions, verifies its source on Etherscan, and provides a
small ETH/USD spot price lookup.
"""

from .contracts import (
    ADDRESSES,
    ContractArtifact,
    PegAddresses,
    encode_constructor_args,
    load_artifact,
)
from .deploy import DeploymentResult, run_deployment, send_transaction
from .exceptions import (
    ArtifactError,
    ConfigurationError,
    PyTetherError,
    TransactionFailed,
    VerificationError,
)
from .price import fetch_eth_usd_price
from .types import Address, as_address, format_units, parse_units
from .verify import EtherscanVerifier

__version__ = "0.1.0"

__all__ = [
    "ADDRESSES",
    "Address",
    "ArtifactError",
    "ConfigurationError",
    "ContractArtifact",
    "DeploymentResult",
    "EtherscanVerifier",
    "PegAddresses",
    "PyTetherError",
    "TransactionFailed",
    "VerificationError",
    "as_address",
    "encode_constructor_args",
    "fetch_eth_usd_price",
    "format_units",
    "load_artifact",
    "parse_units",
    "run_deployment",
    "send_transaction",
]
