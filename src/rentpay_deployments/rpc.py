"""Ethereum JSON-RPC client for rentpay-deployments."""

import itertools
import logging
from typing import Any, Dict, List, Optional

import requests

from .constants import DEFAULT_RPC_TIMEOUT
from .exceptions import RpcError

logger = logging.getLogger(__name__)


def _to_int(value: str) -> int:
    return int(value, 16)


class JsonRpcClient:
    """Minimal JSON-RPC 2.0 client covering the calls a deployment needs."""

    def __init__(
        self,
        rpc_url: str,
        timeout: float = DEFAULT_RPC_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.rpc_url = rpc_url
        self.timeout = timeout
        self._session = session or requests.Session()
        self._ids = itertools.count(1)

    def call(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """
        Perform a single JSON-RPC request.

        Args:
            method: RPC method name, e.g. "eth_blockNumber"
            params: Positional parameters

        Returns:
            The "result" member of the response (may be None)

        Raises:
            RpcError: On transport failure, non-200 status or an RPC error object
        """
        request_id = next(self._ids)
        logger.debug("rpc %s #%d %s", method, request_id, params)

        try:
            response = self._session.post(
                self.rpc_url,
                json={
                    "jsonrpc": "2.0",
                    "method": method,
                    "params": params or [],
                    "id": request_id,
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise RpcError(f"Network error during {method}: {e}") from e

        if response.status_code != 200:
            raise RpcError(f"{method} failed with HTTP status {response.status_code}")

        try:
            result = response.json()
        except ValueError as e:
            raise RpcError(f"{method} returned a non-JSON body") from e

        if "error" in result:
            error = result["error"] or {}
            raise RpcError(
                f"{method} rejected: {error.get('message', error)}",
                code=error.get("code"),
            )

        return result.get("result")

    # eth_* helpers, hex quantities decoded to int

    def chain_id(self) -> int:
        return _to_int(self.call("eth_chainId"))

    def block_number(self) -> int:
        return _to_int(self.call("eth_blockNumber"))

    def accounts(self) -> List[str]:
        return self.call("eth_accounts") or []

    def get_balance(self, address: str, block: str = "latest") -> int:
        return _to_int(self.call("eth_getBalance", [address, block]))

    def get_transaction_count(self, address: str, block: str = "pending") -> int:
        return _to_int(self.call("eth_getTransactionCount", [address, block]))

    def gas_price(self) -> int:
        return _to_int(self.call("eth_gasPrice"))

    def estimate_gas(self, transaction: Dict[str, Any]) -> int:
        return _to_int(self.call("eth_estimateGas", [transaction]))

    def send_transaction(self, transaction: Dict[str, Any]) -> str:
        return self.call("eth_sendTransaction", [transaction])

    def send_raw_transaction(self, raw_transaction: str) -> str:
        return self.call("eth_sendRawTransaction", [raw_transaction])

    def get_transaction(self, transaction_hash: str) -> Optional[Dict[str, Any]]:
        return self.call("eth_getTransactionByHash", [transaction_hash])

    def get_transaction_receipt(self, transaction_hash: str) -> Optional[Dict[str, Any]]:
        return self.call("eth_getTransactionReceipt", [transaction_hash])

    def eth_call(self, transaction: Dict[str, Any], block: str = "latest") -> str:
        return self.call("eth_call", [transaction, block])

    def mine(self) -> None:
        """Ask a development node (Hardhat, Anvil, Ganache) to mine one block."""
        self.call("evm_mine")
