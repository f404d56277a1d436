"""Configuration constants for cyberspawns-deployments library."""

DEFAULT_NETWORK = "localhost"

# Networks on which deployed contracts are submitted to the block explorer
VERIFIABLE_NETWORKS = frozenset({"mainnet", "testnet"})

# Environment variable names
PRIVATE_KEY_1_ENV = "PRIVATE_KEY_1"
PRIVATE_KEY_2_ENV = "PRIVATE_KEY_2"
EXPLORER_API_KEY_ENV = "BSCSCAN_API_KEY"
TENDERLY_PROJECT_ENV = "TENDERLY_PROJECT"
TENDERLY_USERNAME_ENV = "TENDERLY_USERNAME"
NETWORK_SELECTION_ENV = "HARDHAT_NETWORK"

# Unified explorer API; the chain is selected with the chainid parameter
ETHERSCAN_V2_API = "https://api.etherscan.io/v2/api"

# Network configuration, mirrors the networks section of hardhat.config.js.
# Accounts are listed by environment variable name, in signing order.
# "hardhat" has no in-process counterpart here: it is an alias for a node
# started with `npx hardhat node`, reached over HTTP like "localhost".
NETWORK_CONFIG = {
    "hardhat": {
        "url": "http://127.0.0.1:8545",
        "chain_id": 31337,
    },
    "localhost": {
        "url": "http://localhost:8545",
        "timeout": 150000,  # ms
    },
    "testnet": {
        "url": "https://data-seed-prebsc-1-s1.binance.org:8545",
        "chain_id": 97,
        "gas_price": 20000000000,  # 20 gwei
        "account_env": [PRIVATE_KEY_1_ENV, PRIVATE_KEY_2_ENV],
        "block_explorer_url": "https://testnet.bscscan.com",
        "explorer_api_url": ETHERSCAN_V2_API,
    },
    "mainnet": {
        "url": "https://bsc-dataseed.binance.org/",
        "chain_id": 56,
        "account_env": [PRIVATE_KEY_1_ENV],
        "block_explorer_url": "https://bscscan.com",
        "explorer_api_url": ETHERSCAN_V2_API,
    },
}

COMPILER_CONFIG = {
    "versions": ["0.8.0"],
    "optimizer": {
        "enabled": False,
        "runs": 200,
    },
}

# Test-runner timeout (ms)
TEST_TIMEOUT = 50000

# Request timeout (s) for networks that do not configure one
DEFAULT_REQUEST_TIMEOUT = 30

# Seconds between eth_getTransactionReceipt polls
CONFIRMATION_POLL_INTERVAL = 2.0

# Seconds to wait for a deployment transaction to be mined
CONFIRMATION_TIMEOUT = 600

# Explorer status checks after a verification request is accepted
VERIFICATION_STATUS_CHECKS = 10
VERIFICATION_POLL_INTERVAL = 3.0
