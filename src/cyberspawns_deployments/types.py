"""Data types and dataclasses for cyberspawns-deployments library."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .exceptions import DeploymentError, NetworkNotFoundError


@dataclass(frozen=True)
class NetworkProfile:
    """Connection and signing settings for one named network."""

    # Required fields
    name: str  # e.g., "testnet"
    url: str  # RPC endpoint

    # Optional fields
    chain_id: Optional[int] = None
    gas_price: Optional[int] = None  # wei
    accounts: Tuple[str, ...] = field(default=(), repr=False)  # Private keys, signing order
    account_env_vars: Tuple[str, ...] = ()  # Variables the accounts are read from
    unset_account_env_vars: Tuple[str, ...] = ()  # Subset of account_env_vars not set
    timeout: Optional[int] = None  # ms
    block_explorer_url: Optional[str] = None  # Human-facing site, e.g., https://bscscan.com
    explorer_api_url: Optional[str] = None

    @property
    def request_timeout(self) -> Optional[float]:
        """Per-request timeout in seconds, or None when not configured."""
        if self.timeout is None:
            return None
        return self.timeout / 1000

    def address_url(self, address: str) -> Optional[str]:
        """Block explorer page for an address, if the network has an explorer."""
        if self.block_explorer_url:
            return f"{self.block_explorer_url.rstrip('/')}/address/{address}"
        return None


@dataclass(frozen=True)
class CompilerProfile:
    """Solidity compiler settings applied to every source."""

    versions: Tuple[str, ...]
    optimizer_enabled: bool = False
    optimizer_runs: int = 200


@dataclass(frozen=True)
class ExplorerProfile:
    """Block-explorer (BscScan/Etherscan) API credentials."""

    api_key: Optional[str] = field(default=None, repr=False)


@dataclass(frozen=True)
class TenderlyProfile:
    """Tenderly project identifiers."""

    project: Optional[str] = None
    username: Optional[str] = None


@dataclass(frozen=True)
class DeploymentConfig:
    """Resolved, read-only deployment configuration."""

    networks: Mapping[str, NetworkProfile]
    compiler: CompilerProfile
    explorer: ExplorerProfile
    tenderly: TenderlyProfile
    default_network: str
    test_timeout: int  # ms

    def network(self, name: str) -> NetworkProfile:
        """
        Get the profile for a named network.

        Raises:
            NetworkNotFoundError: If network is not configured
        """
        if name not in self.networks:
            raise NetworkNotFoundError(
                f"Network '{name}' not configured "
                f"(known networks: {', '.join(sorted(self.networks))})"
            )
        return self.networks[name]


@dataclass(frozen=True)
class DeploymentSpec:
    """One contract to deploy."""

    contract_name: str  # Artifact name, e.g., "CyberSpawns721"
    label: str  # Name used in the report line, e.g., "Cyber Spawns 721"
    constructor_args: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class ContractArtifact:
    """Compiled contract as produced by `hardhat compile`."""

    contract_name: str
    source_name: str  # e.g., "contracts/CyberSpawns721.sol"
    abi: List[Dict[str, Any]] = field(repr=False)
    bytecode: str = field(repr=False)
    build_info_path: Optional[Path] = None

    @property
    def fully_qualified_name(self) -> str:
        return f"{self.source_name}:{self.contract_name}"


@dataclass(frozen=True)
class DeploymentResult:
    """A confirmed deployment."""

    contract_name: str
    address: str  # Checksummed address
    network: str
    transaction_hash: Optional[str] = None
    block_number: Optional[int] = None


class RunState(Enum):
    """
    Progress of a deployment run.

    Terminal states are VERIFIED, VERIFICATION_SKIPPED, VERIFICATION_FAILED and
    the *_FAILED / CONFIGURATION_INCOMPLETE abort states.
    """

    IDLE = "idle"
    FACTORY_RESOLVED = "factory-resolved"
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"
    VERIFIED = "verified"
    VERIFICATION_SKIPPED = "verification-skipped"
    VERIFICATION_FAILED = "verification-failed"
    CONFIGURATION_INCOMPLETE = "configuration-incomplete"
    FACTORY_RESOLUTION_FAILED = "factory-resolution-failed"
    SUBMISSION_FAILED = "submission-failed"


FAILED_STATES = frozenset(
    {
        RunState.VERIFICATION_FAILED,
        RunState.CONFIGURATION_INCOMPLETE,
        RunState.FACTORY_RESOLUTION_FAILED,
        RunState.SUBMISSION_FAILED,
    }
)


@dataclass(frozen=True)
class RunOutcome:
    """Result of DeploymentRunner.run()."""

    network: str
    state: RunState
    results: Tuple[DeploymentResult, ...] = ()
    error: Optional[DeploymentError] = None
    # Last state reached before the run ended; differs from state on abort
    reached: RunState = RunState.IDLE

    @property
    def ok(self) -> bool:
        return self.error is None and self.state not in FAILED_STATES
