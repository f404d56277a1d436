"""Configuration resolution for cyberspawns-deployments library."""

import logging
import os
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Union

from dotenv import find_dotenv, load_dotenv

from .constants import (
    COMPILER_CONFIG,
    DEFAULT_NETWORK,
    EXPLORER_API_KEY_ENV,
    NETWORK_CONFIG,
    NETWORK_SELECTION_ENV,
    TENDERLY_PROJECT_ENV,
    TENDERLY_USERNAME_ENV,
    TEST_TIMEOUT,
    VERIFIABLE_NETWORKS,
)
from .exceptions import ConfigurationIncompleteError, InvalidConfigurationError
from .types import (
    CompilerProfile,
    DeploymentConfig,
    ExplorerProfile,
    NetworkProfile,
    TenderlyProfile,
)

logger = logging.getLogger(__name__)


def _parse_int(value: Any, what: str) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidConfigurationError(f"{what} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip(), 0)
    except ValueError as e:
        raise InvalidConfigurationError(f"{what} must be an integer, got {value!r}") from e


def _env_override(environ: Mapping[str, str], network: str, suffix: str) -> Optional[str]:
    value = environ.get(f"{network.upper()}_{suffix}")
    return value or None


def _build_network_profile(
    name: str, network_config: Dict[str, Any], environ: Mapping[str, str]
) -> NetworkProfile:
    """
    Build one NetworkProfile from its static config and the environment.

    Missing account secrets are dropped silently; they are reported by
    validate_network() when the network is actually used.
    """
    url = _env_override(environ, name, "RPC_URL") or network_config.get("url")
    if not isinstance(url, str) or not url:
        raise InvalidConfigurationError(f"Network '{name}' has no RPC url")

    gas_price = _parse_int(
        _env_override(environ, name, "GAS_PRICE") or network_config.get("gas_price"),
        f"gas price for network '{name}'",
    )

    account_env = tuple(network_config.get("account_env", []))
    accounts = tuple(environ[var] for var in account_env if environ.get(var))
    unset = tuple(var for var in account_env if not environ.get(var))

    return NetworkProfile(
        name=name,
        url=url,
        chain_id=_parse_int(network_config.get("chain_id"), f"chain id for network '{name}'"),
        gas_price=gas_price,
        accounts=accounts,
        account_env_vars=account_env,
        unset_account_env_vars=unset,
        timeout=_parse_int(network_config.get("timeout"), f"timeout for network '{name}'"),
        block_explorer_url=network_config.get("block_explorer_url"),
        explorer_api_url=network_config.get("explorer_api_url"),
    )


def _build_compiler_profile(compiler_config: Dict[str, Any]) -> CompilerProfile:
    versions = compiler_config.get("versions", [])
    if not versions or not all(isinstance(v, str) for v in versions):
        raise InvalidConfigurationError("Compiler config must list at least one version string")

    optimizer = compiler_config.get("optimizer", {})
    runs = _parse_int(optimizer.get("runs", 200), "optimizer runs")

    return CompilerProfile(
        versions=tuple(versions),
        optimizer_enabled=bool(optimizer.get("enabled", False)),
        optimizer_runs=runs,
    )


def load_config(
    environ: Optional[Mapping[str, str]] = None,
    dotenv_path: Optional[Union[Path, str]] = None,
) -> DeploymentConfig:
    """
    Resolve the deployment configuration.

    Args:
        environ: Environment to read secrets from. If None, a .env file is
                 loaded into os.environ (existing variables win) and
                 os.environ is used.
        dotenv_path: Explicit .env file (defaults to searching from cwd)

    Returns:
        Immutable DeploymentConfig

    Raises:
        InvalidConfigurationError: If a static literal or override is malformed

    Note:
        Missing secrets never fail here. Call validate_network() before using
        a network to get a ConfigurationIncompleteError up front.
    """
    if environ is None:
        if dotenv_path is None:
            dotenv_path = find_dotenv(usecwd=True)
        load_dotenv(dotenv_path=dotenv_path, override=False)
        environ = os.environ

    networks = {
        name: _build_network_profile(name, network_config, environ)
        for name, network_config in NETWORK_CONFIG.items()
    }

    config = DeploymentConfig(
        networks=MappingProxyType(networks),
        compiler=_build_compiler_profile(COMPILER_CONFIG),
        explorer=ExplorerProfile(api_key=environ.get(EXPLORER_API_KEY_ENV) or None),
        tenderly=TenderlyProfile(
            project=environ.get(TENDERLY_PROJECT_ENV) or None,
            username=environ.get(TENDERLY_USERNAME_ENV) or None,
        ),
        default_network=DEFAULT_NETWORK,
        test_timeout=TEST_TIMEOUT,
    )
    logger.debug("Loaded configuration for networks: %s", ", ".join(networks))
    return config


def missing_secrets(config: DeploymentConfig, network: str) -> List[str]:
    """
    List the environment variables the network needs but that are unset.

    Args:
        config: Resolved configuration
        network: Network name

    Returns:
        Variable names, in configuration order (empty if nothing is missing)
    """
    profile = config.network(network)

    missing: List[str] = list(profile.unset_account_env_vars)
    if network in VERIFIABLE_NETWORKS and not config.explorer.api_key:
        missing.append(EXPLORER_API_KEY_ENV)

    return missing


def validate_network(config: DeploymentConfig, network: str) -> NetworkProfile:
    """
    Select a network and check that its secrets are present.

    Args:
        config: Resolved configuration
        network: Network name

    Returns:
        The NetworkProfile for the network

    Raises:
        NetworkNotFoundError: If network is not configured
        ConfigurationIncompleteError: If a required secret is not set
    """
    profile = config.network(network)
    missing = missing_secrets(config, network)
    if missing:
        raise ConfigurationIncompleteError(
            f"Network '{network}' requires environment variables that are not set: "
            f"{', '.join(missing)}",
            missing=missing,
        )
    return profile


def select_network_name(
    config: DeploymentConfig,
    explicit: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> str:
    """
    Pick the active network name.

    Precedence: explicit value, then $HARDHAT_NETWORK, then the config default.
    """
    if explicit:
        return explicit
    if environ is None:
        environ = os.environ
    return environ.get(NETWORK_SELECTION_ENV) or config.default_network
