"""Contract factories and deployment transactions for cyberspawns-deployments library."""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from eth_abi.exceptions import EncodingError
from eth_account import Account
from eth_keys.exceptions import ValidationError as KeyValidationError
from eth_utils import to_checksum_address
from web3 import Web3
from web3.contract.contract import ContractConstructor
from web3.exceptions import TimeExhausted, Web3Exception

from .artifacts import find_artifact
from .constants import CONFIRMATION_POLL_INTERVAL, CONFIRMATION_TIMEOUT
from .exceptions import DefectiveArtifactError, SubmissionError
from .rpc import NODE_ERRORS
from .types import ContractArtifact, NetworkProfile

logger = logging.getLogger(__name__)

# Raised by web3/eth-abi when constructor arguments don't fit the ABI
ENCODING_ERRORS = (Web3Exception, EncodingError, TypeError, ValueError)


class PendingDeployment:
    """A submitted deployment transaction awaiting inclusion."""

    def __init__(self, w3: Web3, contract_name: str, transaction_hash: str):
        self.w3 = w3
        self.contract_name = contract_name
        self.transaction_hash = transaction_hash
        self.receipt: Optional[Dict[str, Any]] = None

    @property
    def block_number(self) -> Optional[int]:
        if self.receipt is None:
            return None
        return self.receipt.get("blockNumber")

    def wait_for_confirmation(
        self,
        poll_interval: float = CONFIRMATION_POLL_INTERVAL,
        timeout: float = CONFIRMATION_TIMEOUT,
    ) -> str:
        """
        Wait for the deployment transaction to be mined.

        Args:
            poll_interval: Seconds between receipt polls
            timeout: Seconds to wait before giving up

        Returns:
            Checksummed address of the deployed contract

        Raises:
            SubmissionError: If the transaction reverted, was not mined in
                             time, or the node cannot be reached
        """
        try:
            receipt = self.w3.eth.wait_for_transaction_receipt(
                self.transaction_hash, timeout=timeout, poll_latency=poll_interval
            )
        except TimeExhausted as e:
            raise SubmissionError(
                f"Deployment of {self.contract_name} not mined after {timeout} seconds "
                f"(transaction {self.transaction_hash})"
            ) from e
        except NODE_ERRORS as e:
            raise SubmissionError(
                f"Cannot get receipt for {self.transaction_hash}: {e}"
            ) from e
        self.receipt = receipt

        if receipt.get("status") == 0:
            raise SubmissionError(
                f"Deployment of {self.contract_name} reverted "
                f"(transaction {self.transaction_hash})"
            )

        address = receipt.get("contractAddress")
        if not address:
            raise SubmissionError(
                f"Receipt for {self.transaction_hash} has no contract address"
            )

        try:
            return to_checksum_address(address)
        except ValueError as e:
            raise SubmissionError(
                f"Receipt for {self.transaction_hash} has a malformed contract address"
            ) from e


class ContractFactory:
    """Deploys one compiled contract through one network."""

    def __init__(self, artifact: ContractArtifact, profile: NetworkProfile, w3: Web3):
        self.artifact = artifact
        self.profile = profile
        self.w3 = w3
        self.contract = w3.eth.contract(abi=artifact.abi, bytecode=artifact.bytecode)

    @property
    def contract_name(self) -> str:
        return self.artifact.contract_name

    def deploy(self, *args: Any) -> PendingDeployment:
        """
        Submit the deployment transaction.

        Signs locally with the network's first account when accounts are
        configured; otherwise the node signs with its first unlocked account.

        Returns:
            PendingDeployment

        Raises:
            SubmissionError: If encoding, signing or submission fails
        """
        try:
            constructor = self.contract.constructor(*args)
        except ENCODING_ERRORS as e:
            raise SubmissionError(
                f"Cannot encode {self.contract_name} constructor arguments: {e}"
            ) from e

        if self.profile.accounts:
            tx_hash = self._send_signed(constructor)
        else:
            tx_hash = self._send_unlocked(constructor)

        logger.info(
            "Submitted %s deployment on %s: %s", self.contract_name, self.profile.name, tx_hash
        )
        return PendingDeployment(self.w3, self.contract_name, tx_hash)

    def _gas_price(self) -> int:
        if self.profile.gas_price is not None:
            return self.profile.gas_price
        return self.w3.eth.gas_price

    def _send_signed(self, constructor: ContractConstructor) -> str:
        try:
            account = Account.from_key(self.profile.accounts[0])
        except (ValueError, TypeError, KeyValidationError) as e:
            # Never include the key itself in the message
            raise SubmissionError(
                f"Invalid signing key for network '{self.profile.name}'"
            ) from e

        try:
            transaction = constructor.build_transaction(
                {
                    "from": account.address,
                    "nonce": self.w3.eth.get_transaction_count(account.address, "pending"),
                    "chainId": self.profile.chain_id or self.w3.eth.chain_id,
                    "gasPrice": self._gas_price(),
                }
            )
            signed = account.sign_transaction(transaction)
            tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        except NODE_ERRORS + (EncodingError, TypeError) as e:
            raise SubmissionError(
                f"Deployment of {self.contract_name} on {self.profile.name} failed: {e}"
            ) from e
        return Web3.to_hex(tx_hash)

    def _send_unlocked(self, constructor: ContractConstructor) -> str:
        try:
            accounts = self.w3.eth.accounts
        except NODE_ERRORS as e:
            raise SubmissionError(
                f"Cannot list accounts on network '{self.profile.name}': {e}"
            ) from e

        if not accounts:
            raise SubmissionError(
                f"Network '{self.profile.name}' has no configured accounts "
                "and the node reports no unlocked accounts"
            )

        try:
            transaction = constructor.build_transaction(
                {"from": accounts[0], "gasPrice": self._gas_price()}
            )
            tx_hash = self.w3.eth.send_transaction(transaction)
        except NODE_ERRORS + (EncodingError, TypeError) as e:
            raise SubmissionError(
                f"Deployment of {self.contract_name} on {self.profile.name} failed: {e}"
            ) from e
        return Web3.to_hex(tx_hash)


def get_contract_factory(
    contract_name: str,
    profile: NetworkProfile,
    w3: Web3,
    artifacts_dir: Path,
    build_info_dir: Optional[Path] = None,
) -> ContractFactory:
    """
    Get a factory for a compiled contract.

    Raises:
        ContractNotFoundError: If no compiled artifact matches the name
        DefectiveArtifactError: If the artifact cannot be deployed
    """
    artifact = find_artifact(artifacts_dir, contract_name, build_info_dir)
    try:
        return ContractFactory(artifact, profile, w3)
    except (Web3Exception, ValueError, TypeError) as e:
        raise DefectiveArtifactError(
            f"Artifact for {artifact.fully_qualified_name} has an unusable ABI: {e}"
        ) from e
