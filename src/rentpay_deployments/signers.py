"""Transaction signers for rentpay-deployments."""

import logging
from typing import Any, Dict, Optional

from eth_account import Account
from eth_utils import to_checksum_address, to_hex

from .exceptions import ConfigError, RpcError, SubmissionError
from .rpc import JsonRpcClient

logger = logging.getLogger(__name__)


class Signer:
    """
    Deploying account.

    Subclasses decide how a creation transaction gets signed: locally with a
    private key, or by the node for one of its unlocked accounts.
    """

    address: str

    def __init__(self, client: JsonRpcClient):
        self.client = client

    def balance(self) -> int:
        """Current balance in wei."""
        return self.client.get_balance(self.address)

    def _estimate(self, data: str) -> Dict[str, Any]:
        tx = {"from": self.address, "data": data}
        try:
            gas = self.client.estimate_gas(tx)
            gas_price = self.client.gas_price()
        except RpcError as e:
            raise SubmissionError(f"Gas estimation failed: {e}") from e

        cost = gas * gas_price
        balance = self.balance()
        if balance < cost:
            raise SubmissionError(
                f"Insufficient funds: {self.address} holds {balance} wei, "
                f"deployment needs about {cost} wei ({gas} gas at {gas_price} wei)"
            )
        return {"gas": gas, "gasPrice": gas_price}

    def send_deployment(self, data: str, chain_id: int) -> str:
        """
        Broadcast a contract-creation transaction.

        Args:
            data: Creation bytecode plus encoded constructor arguments
            chain_id: Chain id to sign for (EIP-155)

        Returns:
            Transaction hash

        Raises:
            SubmissionError: On estimation, signing or broadcast failure
        """
        raise NotImplementedError


class LocalAccountSigner(Signer):
    """Signs locally with a private key and broadcasts the raw transaction."""

    def __init__(self, client: JsonRpcClient, private_key: str):
        super().__init__(client)
        try:
            self._account = Account.from_key(private_key)
        except (ValueError, TypeError) as e:
            # Never echo the key itself
            raise ConfigError("DEPLOYER_PRIVATE_KEY is not a valid private key") from e
        self.address = self._account.address

    def send_deployment(self, data: str, chain_id: int) -> str:
        fees = self._estimate(data)
        try:
            nonce = self.client.get_transaction_count(self.address)
        except RpcError as e:
            raise SubmissionError(f"Could not fetch nonce: {e}") from e

        tx = {
            "nonce": nonce,
            "gas": fees["gas"],
            "gasPrice": fees["gasPrice"],
            "value": 0,
            "data": data,
            "chainId": chain_id,
        }

        try:
            signed = self._account.sign_transaction(tx)
        except (ValueError, TypeError) as e:
            raise SubmissionError(f"Signing failed: {e}") from e

        logger.info("Broadcasting signed creation transaction (nonce %d)", nonce)
        try:
            return self.client.send_raw_transaction(to_hex(signed.raw_transaction))
        except RpcError as e:
            raise SubmissionError(f"Broadcast rejected: {e}") from e


class NodeAccountSigner(Signer):
    """Uses an account unlocked on the node (development networks only)."""

    def __init__(self, client: JsonRpcClient, address: str):
        super().__init__(client)
        self.address = to_checksum_address(address)

    def send_deployment(self, data: str, chain_id: int) -> str:
        fees = self._estimate(data)
        tx = {
            "from": self.address,
            "data": data,
            "gas": hex(fees["gas"]),
            "gasPrice": hex(fees["gasPrice"]),
        }
        logger.info("Sending creation transaction from node account %s", self.address)
        try:
            return self.client.send_transaction(tx)
        except RpcError as e:
            raise SubmissionError(f"Broadcast rejected: {e}") from e


def resolve_signer(
    client: JsonRpcClient, private_key: Optional[str] = None, allow_node_account: bool = False
) -> Signer:
    """
    Pick the deploying account.

    Args:
        client: RPC client for the target network
        private_key: Hex private key; takes precedence when given
        allow_node_account: Fall back to the node's first account (local networks)

    Returns:
        A Signer

    Raises:
        ConfigError: If no usable account is available
    """
    if private_key:
        return LocalAccountSigner(client, private_key)

    if not allow_node_account:
        raise ConfigError(
            "No deployer account: set DEPLOYER_PRIVATE_KEY for non-local networks"
        )

    try:
        accounts = client.accounts()
    except RpcError as e:
        raise ConfigError(f"Could not list node accounts: {e}") from e
    if not accounts:
        raise ConfigError("Node exposes no accounts and DEPLOYER_PRIVATE_KEY is not set")

    return NodeAccountSigner(client, accounts[0])
