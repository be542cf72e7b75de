"""Configuration constants for rentpay-deployments."""

DEFAULT_CONTRACT_NAME = "RentPaymentSystem"

# Confirmation depth is counted in blocks mined on top of the inclusion block
MIN_CONFIRMATIONS = 2
DEFAULT_CONFIRMATIONS = 2
DEFAULT_CONFIRMATION_TIMEOUT = 300.0
DEFAULT_POLL_INTERVAL = 2.0
# Seconds a broadcast transaction may stay unknown to the node before it counts as dropped
DEFAULT_DROP_GRACE = 60.0
DEFAULT_RPC_TIMEOUT = 30

DEFAULT_LOCAL_RPC_URL = "http://127.0.0.1:8545"

# Development networks: no explorer verification, node-managed accounts allowed
LOCAL_NETWORKS = frozenset({"hardhat", "localhost"})

# Read-only getters exposed by RentPaymentSystem, in display order
CONTRACT_CONSTANTS = ("LATE_PENALTY_RATE", "GRACE_PERIOD", "SECONDS_IN_MONTH")

SECONDS_PER_DAY = 86400

# Network configuration based on ethereum-lists/chains
NETWORK_CONFIG = {
    "hardhat": {
        "chain_id": 31337,
        "chain_name": "Hardhat Network",
        "block_explorer_url": None,
        "default_rpc_env": "HARDHAT_RPC_URL",
    },
    "localhost": {
        "chain_id": 31337,
        "chain_name": "Localhost",
        "block_explorer_url": None,
        "default_rpc_env": "LOCALHOST_RPC_URL",
    },
    "mainnet": {
        "chain_id": 1,
        "chain_name": "Ethereum Mainnet",
        "block_explorer_url": "https://etherscan.io",
        "default_rpc_env": "MAINNET_RPC_URL",
    },
    "sepolia": {
        "chain_id": 11155111,
        "chain_name": "Sepolia",
        "block_explorer_url": "https://sepolia.etherscan.io",
        "default_rpc_env": "SEPOLIA_RPC_URL",
    },
    "holesky": {
        "chain_id": 17000,
        "chain_name": "Holesky",
        "block_explorer_url": "https://holesky.etherscan.io",
        "default_rpc_env": "HOLESKY_RPC_URL",
    },
    "polygon": {
        "chain_id": 137,
        "chain_name": "Polygon Mainnet",
        "block_explorer_url": "https://polygonscan.com",
        "default_rpc_env": "POLYGON_RPC_URL",
    },
    "amoy": {
        "chain_id": 80002,
        "chain_name": "Polygon Amoy",
        "block_explorer_url": "https://amoy.polygonscan.com",
        "default_rpc_env": "AMOY_RPC_URL",
    },
    "gnosis": {
        "chain_id": 100,
        "chain_name": "Gnosis Chain",
        "block_explorer_url": "https://gnosisscan.io",
        "default_rpc_env": "GNO_RPC_URL",
    },
}
