"""Shared pytest fixtures for rentpay-deployments tests."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
import responses
from eth_utils import function_signature_to_4byte_selector, keccak

from rentpay_deployments.config import DeploymentConfig

RPC_URL = "http://test-rpc.example.com"

# Hardhat's well-known first dev account
DEV_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
DEV_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
CONTRACT_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"

RENT_CONSTANTS = {
    "LATE_PENALTY_RATE": 5,
    "GRACE_PERIOD": 432000,
    "SECONDS_IN_MONTH": 2592000,
}

RENT_ABI: List[Dict[str, Any]] = [
    {"inputs": [], "stateMutability": "nonpayable", "type": "constructor"},
    *[
        {
            "inputs": [],
            "name": name,
            "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
            "stateMutability": "view",
            "type": "function",
        }
        for name in RENT_CONSTANTS
    ],
]


class FakeNode:
    """
    Stateful JSON-RPC node served through ``responses``.

    Every eth_blockNumber call mines one block when ``auto_advance`` is set,
    and evm_mine always mines one, so confirmation loops make progress.
    """

    def __init__(self, chain_id: int = 31337):
        self.chain_id = chain_id
        self.head = 100
        self.balance = 10_000 * 10**18
        self.gas = 3_000_000
        self.gas_price = 10**9
        self.accounts = [DEV_ADDRESS.lower()]
        self.constants: Optional[Dict[str, int]] = dict(RENT_CONSTANTS)
        self.auto_advance = True
        self.reject_send: Optional[str] = None
        self.revert = False
        self.drop = False
        # Receipt lookups fail with this RPC error message when set
        self.receipt_error: Optional[str] = None
        # Lookups that miss a fresh transaction, like a lagging replica
        self.hidden_lookups = 0
        self.contract_address = CONTRACT_ADDRESS
        self.transactions: Dict[str, Dict[str, Any]] = {}
        self.calls: List[str] = []

    # Helpers

    def _include(self, tx_hash: str, payload: Any) -> str:
        if not self.drop:
            self.head += 1
            self.transactions[tx_hash] = {"block": self.head, "payload": payload}
        return tx_hash

    def _receipt(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        tx = self.transactions.get(tx_hash)
        if tx is None:
            return None
        return {
            "transactionHash": tx_hash,
            "blockNumber": hex(tx["block"]),
            "contractAddress": None if self.revert else self.contract_address,
            "status": "0x0" if self.revert else "0x1",
        }

    def _call(self, tx: Dict[str, Any]) -> str:
        if self.constants is None:
            raise ValueError("execution reverted")
        for name, value in self.constants.items():
            selector = "0x" + function_signature_to_4byte_selector(f"{name}()").hex()
            if tx["data"] == selector:
                return "0x" + value.to_bytes(32, "big").hex()
        raise ValueError("execution reverted")

    def dispatch(self, method: str, params: List[Any]) -> Any:
        self.calls.append(method)
        if method == "eth_chainId":
            return hex(self.chain_id)
        if method == "eth_accounts":
            return self.accounts
        if method == "eth_getBalance":
            return hex(self.balance)
        if method == "eth_gasPrice":
            return hex(self.gas_price)
        if method == "eth_estimateGas":
            return hex(self.gas)
        if method == "eth_getTransactionCount":
            return hex(len(self.transactions))
        if method == "eth_blockNumber":
            if self.auto_advance:
                self.head += 1
            return hex(self.head)
        if method == "evm_mine":
            self.head += 1
            return "0x0"
        if method in ("eth_sendRawTransaction", "eth_sendTransaction"):
            if self.reject_send:
                raise ValueError(self.reject_send)
            if method == "eth_sendRawTransaction":
                tx_hash = "0x" + keccak(hexstr=params[0]).hex()
            else:
                tx_hash = "0x" + f"{len(self.transactions) + 1:064x}"
            return self._include(tx_hash, params[0])
        if method == "eth_getTransactionReceipt":
            if self.receipt_error:
                raise ValueError(self.receipt_error)
            if self.hidden_lookups:
                return None
            return self._receipt(params[0])
        if method == "eth_getTransactionByHash":
            if self.hidden_lookups:
                self.hidden_lookups -= 1
                return None
            return {"hash": params[0]} if params[0] in self.transactions else None
        if method == "eth_call":
            return self._call(params[0])
        raise ValueError(f"method {method} not supported")

    def handle(self, request):
        body = json.loads(request.body)
        try:
            payload = {"result": self.dispatch(body["method"], body.get("params", []))}
        except ValueError as e:
            payload = {"error": {"code": -32000, "message": str(e)}}
        payload.update({"jsonrpc": "2.0", "id": body["id"]})
        return (200, {}, json.dumps(payload))


@pytest.fixture
def fake_node():
    """A FakeNode answering every POST to RPC_URL."""
    node = FakeNode()
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        rsps.add_callback(
            responses.POST,
            RPC_URL,
            callback=node.handle,
            content_type="application/json",
        )
        yield node


@pytest.fixture
def artifact_path(tmp_path: Path) -> Path:
    """Write a Hardhat-style RentPaymentSystem artifact."""
    path = tmp_path / "artifacts" / "contracts" / "RentPaymentSystem.sol" / "RentPaymentSystem.json"
    path.parent.mkdir(parents=True)
    with open(path, "w") as f:
        json.dump(
            {
                "_format": "hh-sol-artifact-1",
                "contractName": "RentPaymentSystem",
                "sourceName": "contracts/RentPaymentSystem.sol",
                "abi": RENT_ABI,
                "bytecode": "0x6080604052348015600f57600080fd5b50",
                "deployedBytecode": "0x6080604052",
            },
            f,
            indent=2,
        )
    return path


@pytest.fixture
def deployments_dir(tmp_path: Path) -> Path:
    return tmp_path / "deployments"


@pytest.fixture
def make_config(artifact_path: Path, deployments_dir: Path):
    """Factory for DeploymentConfig pointing at the fake node."""

    def _make(**overrides: Any) -> DeploymentConfig:
        values: Dict[str, Any] = {
            "network": "localhost",
            "chain_id": 31337,
            "rpc_url": RPC_URL,
            "artifact_path": artifact_path,
            "deployments_dir": deployments_dir,
            "poll_interval": 0,
            "confirmation_timeout": 30,
        }
        values.update(overrides)
        return DeploymentConfig(**values)

    return _make
