"""Custom exception classes for cyberspawns-deployments library."""

from typing import Iterable


class DeploymentError(Exception):
    """Base exception for deployment-related errors."""

    pass


class InvalidConfigurationError(DeploymentError, ValueError):
    """Raised when a configuration literal or override cannot be parsed."""

    pass


class ConfigurationIncompleteError(DeploymentError, ValueError):
    """Raised when secrets required by the active network are not set."""

    def __init__(self, message: str, missing: Iterable[str] = ()):
        super().__init__(message)
        self.missing = tuple(missing)


class NetworkNotFoundError(DeploymentError, ValueError):
    """Raised when requested network is not configured."""

    pass


class ContractNotFoundError(DeploymentError, ValueError):
    """Raised when no compiled artifact matches the requested contract name."""

    pass


class DefectiveArtifactError(DeploymentError, ValueError):
    """Raised when a compiled artifact is missing its ABI or bytecode."""

    pass


class SubmissionError(DeploymentError, RuntimeError):
    """Raised when the RPC node rejects or fails the deployment transaction."""

    pass


class VerificationError(DeploymentError, RuntimeError):
    """Raised when the block explorer rejects source verification."""

    pass
