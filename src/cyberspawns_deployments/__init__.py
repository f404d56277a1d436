"""
cyberspawns-deployments: deploy Cyber Spawns contracts to BNB Smart Chain networks
"""

from importlib.metadata import PackageNotFoundError, version

from .config import load_config, select_network_name, validate_network
from .deployer import DEFAULT_DEPLOYMENTS, KNOWN_DEPLOYMENTS, DeploymentRunner, deploy
from .exceptions import (
    ConfigurationIncompleteError,
    ContractNotFoundError,
    DefectiveArtifactError,
    DeploymentError,
    InvalidConfigurationError,
    NetworkNotFoundError,
    SubmissionError,
    VerificationError,
)
from .types import (
    CompilerProfile,
    DeploymentConfig,
    DeploymentResult,
    DeploymentSpec,
    NetworkProfile,
    RunOutcome,
    RunState,
)

try:
    __version__ = version("cyberspawns-deployments")
except PackageNotFoundError:
    __version__ = None

__all__ = [
    "DeploymentRunner",
    "deploy",
    "load_config",
    "select_network_name",
    "validate_network",
    "DEFAULT_DEPLOYMENTS",
    "KNOWN_DEPLOYMENTS",
    "CompilerProfile",
    "DeploymentConfig",
    "DeploymentResult",
    "DeploymentSpec",
    "NetworkProfile",
    "RunOutcome",
    "RunState",
    "DeploymentError",
    "InvalidConfigurationError",
    "ConfigurationIncompleteError",
    "NetworkNotFoundError",
    "ContractNotFoundError",
    "DefectiveArtifactError",
    "SubmissionError",
    "VerificationError",
]
