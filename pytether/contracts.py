"""TetherToken deployment constants and compiled-artifact loading.

The contract itself is compiled by an external Solidity toolchain into
Hardhat-format artifacts::

    artifacts/
        contracts/TetherToken.sol/TetherToken.json       abi + bytecode
        contracts/TetherToken.sol/TetherToken.dbg.json   -> build-info path
        build-info/<id>.json                             solc version + standard-JSON input

Only the first file is needed to deploy. Explorer verification also needs
the build info.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from eth_abi import encode

from .exceptions import ArtifactError
from .types import Address, BytesLike, as_address, parse_units

CONTRACT_NAME = "TetherToken"

# Token and price-feed decimals
TOKEN_DECIMALS = 6
USDT_ETH_FEED_DECIMALS = 18
USDT_USD_FEED_DECIMALS = 8

MINT_AMOUNT = parse_units("100000", TOKEN_DECIMALS)
TRANSFER_AMOUNT = parse_units("50000", TOKEN_DECIMALS)

DEFAULT_RECIPIENT = "0x16C4891146BaCf9017D1F115F3a986D29Cb13d32"


@dataclass(frozen=True)
class PegAddresses:
    """The four TetherToken constructor arguments, in constructor order."""

    usdt_eth_price_feed: Address
    usdt_usd_price_feed: Address
    usdt_token: Address
    uniswap_router: Address

    def as_constructor_args(self) -> tuple[Address, Address, Address, Address]:
        return (
            self.usdt_eth_price_feed,
            self.usdt_usd_price_feed,
            self.usdt_token,
            self.uniswap_router,
        )

    @classmethod
    def create(
        cls,
        usdt_eth_price_feed: BytesLike,
        usdt_usd_price_feed: BytesLike,
        usdt_token: BytesLike,
        uniswap_router: BytesLike,
    ) -> "PegAddresses":
        """Create PegAddresses with automatic checksumming."""
        return cls(
            usdt_eth_price_feed=as_address(usdt_eth_price_feed),
            usdt_usd_price_feed=as_address(usdt_usd_price_feed),
            usdt_token=as_address(usdt_token),
            uniswap_router=as_address(uniswap_router),
        )


MAINNET_ADDRESSES = PegAddresses.create(
    usdt_eth_price_feed="0xEe9F2375b4bdF6387aa8265dD4FB8F16512A1d46",
    usdt_usd_price_feed="0x3E7d1eAB13ad0104d2750B8863b489D65364e32D",
    usdt_token="0xdAC17F958D2ee523a2206206994597C13D831ec7",
    uniswap_router="0x7a250d5630B4cF539739dF2C5dAcb4c659F2488D",
)

SEPOLIA_ADDRESSES = PegAddresses.create(
    usdt_eth_price_feed="0x694AA1769357215DE4FAC081bf1f309aDC325306",
    usdt_usd_price_feed="0xA2F78ab2355fe2f984D808B5CeE7FD0A93D5270E",
    usdt_token="0xdE184350eb0108E166525F912740D4E47c34c074",
    uniswap_router="0x5C69bEe701ef814a2B6a3EDD4B1652CB9cc5aA6f",
)

ADDRESSES = {
    "mainnet": MAINNET_ADDRESSES,
    "sepolia": SEPOLIA_ADDRESSES,
}


@dataclass(frozen=True)
class ContractArtifact:
    """A compiled contract as emitted by the Solidity toolchain."""

    contract_name: str
    source_name: str
    abi: list
    bytecode: str
    solc_long_version: Optional[str] = None
    standard_json_input: Optional[dict] = None

    @property
    def fully_qualified_name(self) -> str:
        return f"{self.source_name}:{self.contract_name}"

    @property
    def compiler_version(self) -> Optional[str]:
        """Compiler version in the ``v0.8.20+commit.a1b79de6`` form explorers expect."""
        if not self.solc_long_version:
            return None
        return f"v{self.solc_long_version}"

    def constructor_input_types(self) -> list[str]:
        for item in self.abi:
            if item.get("type") == "constructor":
                return [i["type"] for i in item.get("inputs", [])]
        return []


def _read_json(path: Path) -> dict:
    try:
        with path.open("r", encoding="utf-8") as fh:
            return json.load(fh)
    except (OSError, ValueError) as e:
        raise ArtifactError(f"cannot read {path}: {e}") from e


def _find_artifact(root: Path, contract_name: str) -> Path:
    matches = [
        p
        for p in root.rglob(f"{contract_name}.json")
        if "build-info" not in p.parts
    ]
    if not matches:
        raise ArtifactError(
            f"no artifact for {contract_name} under {root} (compile the contracts first)"
        )
    if len(matches) > 1:
        found = ", ".join(str(p.relative_to(root)) for p in sorted(matches))
        raise ArtifactError(
            f"multiple artifacts for {contract_name}: {found}; pass source_name"
        )
    return matches[0]


def load_artifact(
    artifacts_dir: Union[str, Path],
    contract_name: str = CONTRACT_NAME,
    source_name: Optional[str] = None,
) -> ContractArtifact:
    """Load a contract artifact and, when present, its build info.

    Args:
        artifacts_dir: Root of the toolchain's artifacts directory
        contract_name: Contract to load
        source_name: Source path (e.g. ``contracts/TetherToken.sol``) when the
            name alone is ambiguous

    Raises:
        ArtifactError: If the artifact is missing, ambiguous or unreadable
    """
    root = Path(artifacts_dir)
    if source_name:
        path = root / source_name / f"{contract_name}.json"
        if not path.is_file():
            raise ArtifactError(f"no artifact at {path}")
    else:
        path = _find_artifact(root, contract_name)

    data = _read_json(path)
    bytecode = data.get("bytecode")
    if not bytecode or bytecode == "0x":
        raise ArtifactError(f"{path} has no bytecode (abstract contract or interface?)")

    solc_long_version = None
    standard_json_input = None
    dbg_path = path.with_name(f"{contract_name}.dbg.json")
    if dbg_path.is_file():
        build_info_ref = _read_json(dbg_path).get("buildInfo")
        if build_info_ref:
            build_info = _read_json((dbg_path.parent / build_info_ref).resolve())
            solc_long_version = build_info.get("solcLongVersion")
            standard_json_input = build_info.get("input")

    return ContractArtifact(
        contract_name=data.get("contractName", contract_name),
        source_name=data.get("sourceName", source_name or ""),
        abi=data.get("abi", []),
        bytecode=bytecode,
        solc_long_version=solc_long_version,
        standard_json_input=standard_json_input,
    )


def encode_constructor_args(artifact: ContractArtifact, args: tuple) -> str:
    """ABI-encode constructor arguments as bare hex (no 0x prefix).

    Raises:
        ValueError: If the argument count does not match the constructor
    """
    types = artifact.constructor_input_types()
    if len(types) != len(args):
        raise ValueError(
            f"{artifact.contract_name} constructor takes {len(types)} arguments, got {len(args)}"
        )
    if not types:
        return ""
    return encode(types, list(args)).hex()
