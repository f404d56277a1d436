"""Main API for cyberspawns-deployments library."""

import logging
from pathlib import Path
from typing import Callable, Iterable, List, Mapping, Optional, Sequence, Union

from web3 import Web3

from .config import load_config, select_network_name, validate_network
from .constants import CONFIRMATION_POLL_INTERVAL, VERIFIABLE_NETWORKS
from .contracts import get_contract_factory
from .exceptions import (
    ConfigurationIncompleteError,
    ContractNotFoundError,
    DefectiveArtifactError,
    NetworkNotFoundError,
    SubmissionError,
    VerificationError,
)
from .paths import ArtifactPaths, get_artifact_paths
from .rpc import connect_network
from .types import (
    DeploymentConfig,
    DeploymentResult,
    DeploymentSpec,
    NetworkProfile,
    RunOutcome,
    RunState,
)
from .verification import ExplorerVerifier

logger = logging.getLogger(__name__)

# Contracts this project knows how to deploy, keyed by artifact name
KNOWN_DEPLOYMENTS = {
    "CyberSpawns721": DeploymentSpec("CyberSpawns721", "Cyber Spawns 721"),
    "Splinters": DeploymentSpec("Splinters", "Cyber Spawns Splinters"),
    "NanoDose": DeploymentSpec("NanoDose", "Cyber Spawns Nano Dose"),
}

DEFAULT_DEPLOYMENTS = (KNOWN_DEPLOYMENTS["CyberSpawns721"],)


def resolve_specs(contract_names: Iterable[str]) -> List[DeploymentSpec]:
    """
    Map contract names to deployment specs.

    Unknown names get a spec labelled with the contract name itself; whether
    an artifact exists is checked when the run reaches them.
    """
    return [
        KNOWN_DEPLOYMENTS.get(name, DeploymentSpec(name, name))
        for name in contract_names
    ]


class DeploymentRunner:
    """Deploys a sequence of contracts to one network and verifies them."""

    def __init__(
        self,
        config: DeploymentConfig,
        network: str,
        artifacts_dir: Optional[Union[Path, str]] = None,
        w3: Optional[Web3] = None,
        verifier: Optional[ExplorerVerifier] = None,
        echo: Callable[[str], None] = print,
        poll_interval: float = CONFIRMATION_POLL_INTERVAL,
    ):
        """
        Initialize the runner.

        Args:
            config: Resolved configuration
            network: Active network name
            artifacts_dir: Hardhat artifacts directory (defaults to the
                           artifacts/ of the project containing cwd)
            w3: Web3 client (defaults to one for the network's url)
            verifier: Explorer verifier (defaults to one for the network's
                      explorer API, only built on verifiable networks)
            echo: Receives the human-readable report lines
            poll_interval: Seconds between confirmation polls
        """
        self.config = config
        self.network = network
        if artifacts_dir is None:
            self.paths = get_artifact_paths()
        else:
            self.paths = ArtifactPaths.under(artifacts_dir)
        self._w3 = w3
        self._verifier = verifier
        self.echo = echo
        self.poll_interval = poll_interval

    @property
    def verifies(self) -> bool:
        return self.network in VERIFIABLE_NETWORKS

    def _web3_for(self, profile: NetworkProfile) -> Web3:
        if self._w3 is None:
            self._w3 = connect_network(profile)
        return self._w3

    def _verifier_for(self, profile: NetworkProfile) -> ExplorerVerifier:
        if self._verifier is None:
            if not profile.explorer_api_url:
                raise VerificationError(
                    f"Network '{profile.name}' has no block explorer API configured"
                )
            self._verifier = ExplorerVerifier(
                profile.explorer_api_url, self.config.explorer.api_key, chain_id=profile.chain_id
            )
        return self._verifier

    def _abort(
        self,
        state: RunState,
        reached: RunState,
        results: List[DeploymentResult],
        error: Exception,
    ) -> RunOutcome:
        logger.debug(
            "Run on %s ended in %s after reaching %s: %s",
            self.network,
            state.value,
            reached.value,
            error,
        )
        return RunOutcome(
            network=self.network,
            state=state,
            results=tuple(results),
            error=error,
            reached=reached,
        )

    def run(self, specs: Sequence[DeploymentSpec] = DEFAULT_DEPLOYMENTS) -> RunOutcome:
        """
        Deploy each spec in order, stopping at the first failure.

        Nothing is retried. A verification failure after a confirmed
        deployment still fails the run; the confirmed results are kept in the
        outcome.

        Args:
            specs: Contracts to deploy

        Returns:
            RunOutcome
        """
        results: List[DeploymentResult] = []
        state = RunState.IDLE

        try:
            profile = validate_network(self.config, self.network)
        except (NetworkNotFoundError, ConfigurationIncompleteError) as e:
            return self._abort(RunState.CONFIGURATION_INCOMPLETE, state, results, e)

        w3 = self._web3_for(profile)

        for spec in specs:
            try:
                factory = get_contract_factory(
                    spec.contract_name, profile, w3, self.paths.artifacts, self.paths.build_info
                )
            except (ContractNotFoundError, DefectiveArtifactError) as e:
                return self._abort(RunState.FACTORY_RESOLUTION_FAILED, state, results, e)
            state = RunState.FACTORY_RESOLVED

            try:
                pending = factory.deploy(*spec.constructor_args)
                state = RunState.SUBMITTED
                address = pending.wait_for_confirmation(self.poll_interval)
            except SubmissionError as e:
                return self._abort(RunState.SUBMISSION_FAILED, state, results, e)

            result = DeploymentResult(
                contract_name=spec.contract_name,
                address=address,
                network=self.network,
                transaction_hash=pending.transaction_hash,
                block_number=pending.block_number,
            )
            results.append(result)
            state = RunState.CONFIRMED
            logger.info("%s deployed on %s at %s", spec.contract_name, self.network, address)
            self.echo(f"{spec.label} contract Deployed: {address}")

            if self.verifies:
                try:
                    self._verifier_for(profile).verify(
                        address, list(spec.constructor_args), factory.artifact
                    )
                except VerificationError as e:
                    return self._abort(RunState.VERIFICATION_FAILED, state, results, e)
                state = RunState.VERIFIED
                logger.info("%s verified: %s", spec.contract_name, profile.address_url(address))
            else:
                self.echo(
                    f"Contracts deployed to {self.network} network. "
                    "Please verify them manually."
                )
                state = RunState.VERIFICATION_SKIPPED

        return RunOutcome(
            network=self.network, state=state, results=tuple(results), reached=state
        )


def deploy(
    contract_names: Optional[Iterable[str]] = None,
    network: Optional[str] = None,
    project_root: Optional[Union[Path, str]] = None,
    environ: Optional[Mapping[str, str]] = None,
    echo: Callable[[str], None] = print,
) -> RunOutcome:
    """
    Resolve configuration and deploy contracts in one call.

    Args:
        contract_names: Contracts to deploy (defaults to CyberSpawns721)
        network: Network name (defaults to $HARDHAT_NETWORK, then "localhost")
        project_root: Hardhat project directory (defaults to the project
                      containing cwd)
        environ: Environment to read secrets from (defaults to .env + os.environ)
        echo: Receives the human-readable report lines

    Returns:
        RunOutcome

    Raises:
        InvalidConfigurationError: If the static configuration is malformed
    """
    config = load_config(environ)
    network_name = select_network_name(config, network, environ)

    if contract_names is None:
        specs: Sequence[DeploymentSpec] = DEFAULT_DEPLOYMENTS
    else:
        specs = resolve_specs(contract_names)

    runner = DeploymentRunner(
        config,
        network_name,
        artifacts_dir=get_artifact_paths(project_root).artifacts,
        echo=echo,
    )
    return runner.run(specs)
