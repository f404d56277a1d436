"""Shared pytest fixtures for cyberspawns-deployments tests."""

import json
import shutil
from pathlib import Path
from typing import Any, Dict, List

import pytest
import responses

from cyberspawns_deployments.config import load_config
from cyberspawns_deployments.types import DeploymentConfig

# Hardhat's well-known first test account
TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TEST_ACCOUNT = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
SECOND_PRIVATE_KEY = "0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d"

# First contract deployed by TEST_ACCOUNT (nonce 0)
DEPLOYED_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
DEPLOY_TX_HASH = "0x" + "ab" * 32

LOCALHOST_URL = "http://localhost:8545"
TESTNET_RPC_URL = "http://testnet-rpc.example.com"
EXPLORER_API = "https://api.etherscan.io/v2/api"


class FakeNode:
    """JSON-RPC node backed by responses; records every call."""

    def __init__(self, rsps: responses.RequestsMock, url: str, chain_id: int = 97):
        self.url = url
        self.calls: List[Dict[str, Any]] = []
        self.results: Dict[str, Any] = {
            "eth_chainId": hex(chain_id),
            "eth_gasPrice": "0x3b9aca00",
            "eth_accounts": [TEST_ACCOUNT.lower()],
            "eth_getTransactionCount": "0x0",
            "eth_estimateGas": "0x2dc6c0",
            "eth_getBlockByNumber": {
                "number": "0x1",
                "hash": "0x" + "11" * 32,
                "baseFeePerGas": "0x7",
                "gasLimit": "0x1c9c380",
                "timestamp": "0x1",
                "transactions": [],
            },
            "eth_sendTransaction": DEPLOY_TX_HASH,
            "eth_sendRawTransaction": DEPLOY_TX_HASH,
            "eth_getTransactionReceipt": {
                "transactionHash": DEPLOY_TX_HASH,
                "blockNumber": "0x1",
                "contractAddress": DEPLOYED_ADDRESS.lower(),
                "status": "0x1",
            },
        }
        self.errors: Dict[str, Dict[str, Any]] = {}
        rsps.add_callback(
            responses.POST,
            url,
            callback=self._callback,
            content_type="application/json",
        )

    def _callback(self, request):
        body = json.loads(request.body)
        self.calls.append(body)
        method = body["method"]

        if method in self.errors:
            payload = {"jsonrpc": "2.0", "id": body["id"], "error": self.errors[method]}
        else:
            result = self.results[method]
            if isinstance(result, list) and method == "eth_getTransactionReceipt":
                # Sequence of receipts, one per poll
                result = result.pop(0) if len(result) > 1 else result[0]
            payload = {"jsonrpc": "2.0", "id": body["id"], "result": result}

        return (200, {}, json.dumps(payload))

    def methods(self) -> List[str]:
        return [call["method"] for call in self.calls]

    def params(self, method: str) -> List[Any]:
        return [call["params"] for call in self.calls if call["method"] == method]


class FakeVerifier:
    """Explorer verifier that records calls instead of making them."""

    def __init__(self, error: Exception = None):
        self.calls: List[tuple] = []
        self.error = error

    def verify(self, address, constructor_args, artifact):
        self.calls.append((address, constructor_args, artifact.contract_name))
        if self.error is not None:
            raise self.error


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def project_dir(fixtures_dir: Path, tmp_path: Path) -> Path:
    """Copy of the sample Hardhat project (artifacts only)."""
    project = tmp_path / "project"
    shutil.copytree(fixtures_dir / "project", project)
    return project


@pytest.fixture
def artifacts_dir(project_dir: Path) -> Path:
    return project_dir / "artifacts"


@pytest.fixture
def full_environ() -> Dict[str, str]:
    """Environment with every secret set."""
    return {
        "PRIVATE_KEY_1": TEST_PRIVATE_KEY,
        "PRIVATE_KEY_2": SECOND_PRIVATE_KEY,
        "BSCSCAN_API_KEY": "TESTAPIKEY",
        "TENDERLY_PROJECT": "cyber-spawns",
        "TENDERLY_USERNAME": "spawner",
        "TESTNET_RPC_URL": TESTNET_RPC_URL,
    }


@pytest.fixture
def config(full_environ: Dict[str, str]) -> DeploymentConfig:
    return load_config(full_environ)


@pytest.fixture
def empty_config() -> DeploymentConfig:
    """Configuration resolved from an empty environment."""
    return load_config({})


@pytest.fixture
def rsps():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as mock:
        yield mock


@pytest.fixture
def localhost_node(rsps) -> FakeNode:
    return FakeNode(rsps, LOCALHOST_URL)


@pytest.fixture
def testnet_node(rsps) -> FakeNode:
    return FakeNode(rsps, TESTNET_RPC_URL)


@pytest.fixture
def clean_env(monkeypatch, tmp_path: Path):
    """Remove deployment variables from os.environ and run from an empty dir."""
    for var in [
        "PRIVATE_KEY_1",
        "PRIVATE_KEY_2",
        "BSCSCAN_API_KEY",
        "TENDERLY_PROJECT",
        "TENDERLY_USERNAME",
        "HARDHAT_NETWORK",
        "LOCALHOST_RPC_URL",
        "TESTNET_RPC_URL",
        "MAINNET_RPC_URL",
        "TESTNET_GAS_PRICE",
    ]:
        monkeypatch.delenv(var, raising=False)
    workdir = tmp_path / "cwd"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    return monkeypatch
