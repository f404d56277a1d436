"""Block-explorer source verification for cyberspawns-deployments library."""

import json
import logging
import time
from typing import Any, Dict, List, Optional, Sequence

import requests
from eth_abi import encode
from eth_abi.exceptions import EncodingError
from eth_utils import collapse_if_tuple

from .artifacts import load_build_info
from .constants import (
    DEFAULT_REQUEST_TIMEOUT,
    VERIFICATION_POLL_INTERVAL,
    VERIFICATION_STATUS_CHECKS,
)
from .exceptions import DefectiveArtifactError, VerificationError
from .types import ContractArtifact

logger = logging.getLogger(__name__)


def _is_already_verified(message: str) -> bool:
    return "already verified" in message.lower()


def encode_constructor_arguments(abi: List[Dict[str, Any]], args: Sequence[Any]) -> str:
    """
    ABI-encode constructor arguments the way the explorer expects them.

    Returns:
        Hex string without 0x prefix (empty when the constructor takes none)

    Raises:
        ValueError: If the argument count doesn't match the constructor
        EncodingError: If an argument doesn't fit its ABI type
    """
    constructor = next((item for item in abi if item.get("type") == "constructor"), None)
    inputs = constructor.get("inputs", []) if constructor else []

    if len(inputs) != len(args):
        raise ValueError(f"Constructor expects {len(inputs)} argument(s), got {len(args)}")
    if not inputs:
        return ""
    return encode([collapse_if_tuple(param) for param in inputs], list(args)).hex()


class ExplorerVerifier:
    """Submits contract sources to an Etherscan V2-compatible API."""

    def __init__(
        self,
        api_url: str,
        api_key: Optional[str],
        chain_id: Optional[int] = None,
        status_checks: int = VERIFICATION_STATUS_CHECKS,
        poll_interval: float = VERIFICATION_POLL_INTERVAL,
        session: Optional[requests.Session] = None,
    ):
        self.api_url = api_url
        self.api_key = api_key
        self.chain_id = chain_id
        self.status_checks = status_checks
        self.poll_interval = poll_interval
        self._session = session or requests.Session()

    def _request(self, method: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        payload = {"apikey": self.api_key or "", "module": "contract", **payload}
        # V2 endpoints take the chain in the query string, also for POST
        query = {"chainid": self.chain_id} if self.chain_id is not None else {}
        try:
            if method == "POST":
                response = self._session.post(
                    self.api_url, params=query, data=payload, timeout=DEFAULT_REQUEST_TIMEOUT
                )
            else:
                response = self._session.get(
                    self.api_url, params={**query, **payload}, timeout=DEFAULT_REQUEST_TIMEOUT
                )
        except requests.RequestException as e:
            raise VerificationError(f"Network error during verification request: {e}") from e

        if response.status_code != 200:
            raise VerificationError(
                f"Explorer request failed with status {response.status_code}"
            )

        try:
            return response.json()
        except ValueError as e:
            raise VerificationError("Explorer response is not JSON") from e

    def build_request(
        self, address: str, constructor_args: Sequence[Any], artifact: ContractArtifact
    ) -> Dict[str, Any]:
        """
        Build the verifysourcecode form fields.

        Raises:
            VerificationError: If the build-info is unusable or the arguments
                               don't fit the constructor
        """
        try:
            encoded_args = encode_constructor_arguments(artifact.abi, constructor_args)
            build_info = load_build_info(artifact)
        except (DefectiveArtifactError, EncodingError, TypeError, ValueError) as e:
            raise VerificationError(f"Cannot prepare verification request: {e}") from e

        return {
            "action": "verifysourcecode",
            "contractaddress": address,
            "sourceCode": json.dumps(build_info["input"]),
            "codeformat": "solidity-standard-json-input",
            "contractname": artifact.fully_qualified_name,
            "compilerversion": f"v{build_info['solcLongVersion']}",
            # Misspelling is part of the explorer API
            "constructorArguements": encoded_args,
        }

    def verify(
        self, address: str, constructor_args: Sequence[Any], artifact: ContractArtifact
    ) -> None:
        """
        Verify a deployed contract's source.

        Args:
            address: Deployed contract address
            constructor_args: Arguments the contract was deployed with
            artifact: Compiled artifact of the deployed contract

        Raises:
            VerificationError: If the explorer rejects or fails verification
        """
        result = self._request("POST", self.build_request(address, constructor_args, artifact))

        if result.get("status") != "1":
            message = str(result.get("result") or result.get("message"))
            if _is_already_verified(message):
                logger.info("Contract %s is already verified", address)
                return
            raise VerificationError(f"Verification of {address} rejected: {message}")

        guid = result["result"]
        logger.info("Verification of %s submitted (guid %s)", address, guid)
        self._wait_for_status(address, guid)

    def _wait_for_status(self, address: str, guid: str) -> None:
        for _ in range(self.status_checks):
            time.sleep(self.poll_interval)
            status = self._request("GET", {"action": "checkverifystatus", "guid": guid})
            message = str(status.get("result", ""))

            if status.get("status") == "1" or _is_already_verified(message):
                logger.info("Verification of %s: %s", address, message)
                return
            if "pending" not in message.lower():
                raise VerificationError(f"Verification of {address} failed: {message}")

        raise VerificationError(
            f"Verification of {address} still pending after {self.status_checks} status checks"
        )
