"""Web3 connections for cyberspawns-deployments library."""

import logging
from typing import Optional

from requests.exceptions import RequestException
from web3 import Web3
from web3.exceptions import Web3Exception

from .constants import DEFAULT_REQUEST_TIMEOUT
from .types import NetworkProfile

logger = logging.getLogger(__name__)

# What a node call can raise: web3 errors (JSON-RPC errors, timeouts,
# validation), transport errors, and ValueError from malformed responses
NODE_ERRORS = (Web3Exception, RequestException, ValueError)


def connect(url: str, timeout: Optional[float] = None) -> Web3:
    """
    Create a Web3 client for an HTTP JSON-RPC endpoint.

    Nothing is sent to the node until the client is used.

    Args:
        url: RPC endpoint URL
        timeout: Per-request timeout in seconds (defaults to 30)

    Returns:
        Web3 instance
    """
    if timeout is None:
        timeout = DEFAULT_REQUEST_TIMEOUT
    logger.debug("Using RPC endpoint %s (timeout %ss)", url, timeout)
    return Web3(Web3.HTTPProvider(url, request_kwargs={"timeout": timeout}))


def connect_network(profile: NetworkProfile) -> Web3:
    """Create a Web3 client for a configured network."""
    return connect(profile.url, profile.request_timeout)
