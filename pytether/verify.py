"""Contract source verification through the Etherscan API.

Verification publishes the standard-JSON compiler input for a deployed
contract so the explorer can recompile it and match the on-chain bytecode.
A submission is asynchronous: Etherscan returns a GUID and the job is then
polled with ``checkverifystatus`` until it passes or fails.
"""

import json
import logging
import time
from typing import Optional

import requests

from .contracts import ContractArtifact
from .exceptions import ConfigurationError, VerificationError

logger = logging.getLogger(__name__)

ETHERSCAN_API_URL = "https://api.etherscan.io/v2/api"

STATUS_OK = "1"

RESULT_PENDING = "Pending in queue"
RESULT_PASS = "Pass - Verified"
RESULT_ALREADY_VERIFIED = "already verified"


class EtherscanVerifier:
    """Client for Etherscan's contract verification endpoints."""

    def __init__(
        self,
        api_key: str,
        chain_id: int,
        api_url: str = ETHERSCAN_API_URL,
        session: Optional[requests.Session] = None,
        poll_interval: float = 5.0,
        max_polls: int = 60,
    ):
        if not api_key:
            raise ConfigurationError("ETHERSCAN_API_KEY environment variable not set")
        self.api_key = api_key
        self.chain_id = chain_id
        self.api_url = api_url
        self.session = session or requests.Session()
        self.poll_interval = poll_interval
        self.max_polls = max_polls

    def _request(self, method: str, params: dict) -> dict:
        query = {"chainid": self.chain_id}
        payload = {"apikey": self.api_key, "module": "contract", **params}
        if method == "GET":
            response = self.session.get(self.api_url, params={**query, **payload})
        else:
            response = self.session.post(self.api_url, params=query, data=payload)
        response.raise_for_status()
        try:
            return response.json()
        except ValueError as e:
            raise VerificationError(f"explorer returned a non-JSON response: {e}") from e

    def is_verified(self, address: str) -> bool:
        """Return True if the explorer already has source code for ``address``."""
        body = self._request("GET", {"action": "getsourcecode", "address": address})
        if body.get("status") != STATUS_OK:
            return False
        result = body.get("result") or [{}]
        return bool(result[0].get("SourceCode"))

    def submit(
        self,
        address: str,
        artifact: ContractArtifact,
        constructor_args: str,
    ) -> Optional[str]:
        """Submit a verification job.

        Args:
            address: Deployed contract address
            artifact: Artifact with build info (standard-JSON input and compiler version)
            constructor_args: ABI-encoded constructor arguments, bare hex

        Returns:
            The job GUID, or None if the explorer reports the contract as already verified

        Raises:
            VerificationError: If the artifact lacks build info or the explorer rejects the job
        """
        if artifact.standard_json_input is None or artifact.compiler_version is None:
            raise VerificationError(
                f"{artifact.contract_name} artifact has no build info; cannot verify"
            )

        body = self._request(
            "POST",
            {
                "action": "verifysourcecode",
                "contractaddress": address,
                "sourceCode": json.dumps(artifact.standard_json_input),
                "codeformat": "solidity-standard-json-input",
                "contractname": artifact.fully_qualified_name,
                "compilerversion": artifact.compiler_version,
                # sic: the parameter name is misspelled in the Etherscan API
                "constructorArguements": constructor_args,
            },
        )
        result = str(body.get("result", ""))
        if body.get("status") != STATUS_OK:
            if RESULT_ALREADY_VERIFIED in result.lower():
                return None
            raise VerificationError(f"verification request rejected: {result}")
        return result

    def check_status(self, guid: str) -> str:
        """Return the raw status string for a verification job."""
        body = self._request("GET", {"action": "checkverifystatus", "guid": guid})
        return str(body.get("result", ""))

    def wait_for_verification(self, guid: str) -> None:
        """Poll a job until it leaves the queue.

        Raises:
            VerificationError: If the job fails or is still pending after ``max_polls``
        """
        for _ in range(self.max_polls):
            result = self.check_status(guid)
            logger.debug("verification %s: %s", guid, result)
            if result == RESULT_PASS or RESULT_ALREADY_VERIFIED in result.lower():
                return
            if result != RESULT_PENDING:
                raise VerificationError(f"verification failed: {result}")
            time.sleep(self.poll_interval)
        raise VerificationError(
            f"verification {guid} still pending after {self.max_polls} checks"
        )

    def verify(
        self,
        address: str,
        artifact: ContractArtifact,
        constructor_args: str,
    ) -> bool:
        """Verify a deployed contract, skipping the submission if already verified.

        Returns:
            True once the explorer shows verified source
        """
        if self.is_verified(address):
            logger.info("Contract %s is already verified.", address)
            return True

        guid = self.submit(address, artifact, constructor_args)
        if guid is None:
            logger.info("Contract %s is already verified.", address)
            return True

        logger.debug("verification submitted, guid %s", guid)
        self.wait_for_verification(guid)
        return True
