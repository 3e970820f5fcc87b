"""Environment-driven settings.

Values are read from the process environment after ``load_dotenv()`` has
merged in a local ``.env`` file, so the deploy key and API keys never live in
source.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from .exceptions import ConfigurationError

ALCHEMY_URL_TEMPLATE = "https://eth-{network}.g.alchemy.com/v2/{api_key}"

CHAIN_IDS = {
    "mainnet": 1,
    "sepolia": 11155111,
}

DEFAULT_NETWORK = "mainnet"
DEFAULT_ARTIFACTS_DIR = "artifacts"


@dataclass(frozen=True)
class Settings:
    """Deployment settings for a single run."""

    network: str = DEFAULT_NETWORK
    alchemy_api_key: str = ""
    private_key: str = ""
    etherscan_api_key: str = ""
    rpc_url_override: Optional[str] = None
    artifacts_dir: str = DEFAULT_ARTIFACTS_DIR

    def __post_init__(self):
        if self.network not in CHAIN_IDS:
            known = ", ".join(sorted(CHAIN_IDS))
            raise ConfigurationError(
                f"unknown network {self.network!r} (expected one of: {known})"
            )

    @property
    def chain_id(self) -> int:
        return CHAIN_IDS[self.network]

    @property
    def rpc_url(self) -> str:
        """RPC endpoint: the explicit override, else the Alchemy URL for the network."""
        if self.rpc_url_override:
            return self.rpc_url_override
        if not self.alchemy_api_key:
            raise ConfigurationError(
                "ALCHEMY_API_KEY environment variable not set (or set RPC_URL)"
            )
        return ALCHEMY_URL_TEMPLATE.format(
            network=self.network, api_key=self.alchemy_api_key
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from ``environ`` (defaults to ``os.environ`` after loading .env)."""
        if environ is None:
            load_dotenv()
            environ = os.environ

        return cls(
            network=environ.get("NETWORK", DEFAULT_NETWORK).strip().lower(),
            # ALCHEMY_API_URL is the older name; it always held just the key.
            alchemy_api_key=environ.get(
                "ALCHEMY_API_KEY", environ.get("ALCHEMY_API_URL", "")
            ),
            private_key=environ.get("PRIVATE_KEY", ""),
            etherscan_api_key=environ.get("ETHERSCAN_API_KEY", ""),
            rpc_url_override=environ.get("RPC_URL") or None,
            artifacts_dir=environ.get("ARTIFACTS_DIR", DEFAULT_ARTIFACTS_DIR),
        )
