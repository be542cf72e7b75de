"""Unit tests for transaction signers."""

import pytest
from eth_account import Account

from conftest import DEV_ADDRESS, DEV_PRIVATE_KEY, RPC_URL
from rentpay_deployments.exceptions import ConfigError, SubmissionError
from rentpay_deployments.rpc import JsonRpcClient
from rentpay_deployments.signers import (
    LocalAccountSigner,
    NodeAccountSigner,
    resolve_signer,
)

DATA = "0x6080604052"


@pytest.fixture
def client(fake_node) -> JsonRpcClient:
    return JsonRpcClient(RPC_URL)


class TestResolveSigner:
    """Test the resolve_signer function."""

    def test_private_key_gives_local_signer(self, client):
        signer = resolve_signer(client, DEV_PRIVATE_KEY)

        assert isinstance(signer, LocalAccountSigner)
        assert signer.address == DEV_ADDRESS

    def test_private_key_wins_over_node_account(self, client):
        signer = resolve_signer(client, DEV_PRIVATE_KEY, allow_node_account=True)
        assert isinstance(signer, LocalAccountSigner)

    def test_node_account_on_local_networks(self, client):
        signer = resolve_signer(client, None, allow_node_account=True)

        assert isinstance(signer, NodeAccountSigner)
        assert signer.address == DEV_ADDRESS  # checksummed

    def test_no_key_on_remote_network(self, client):
        with pytest.raises(ConfigError, match="DEPLOYER_PRIVATE_KEY"):
            resolve_signer(client, None)

    def test_node_without_accounts(self, client, fake_node):
        fake_node.accounts = []
        with pytest.raises(ConfigError, match="no accounts"):
            resolve_signer(client, None, allow_node_account=True)

    def test_invalid_private_key(self, client):
        with pytest.raises(ConfigError) as info:
            resolve_signer(client, "0x1234")
        assert "0x1234" not in str(info.value)


class TestLocalAccountSigner:
    """Test local signing and raw broadcast."""

    def test_broadcasts_signed_transaction(self, client, fake_node):
        signer = LocalAccountSigner(client, DEV_PRIVATE_KEY)
        tx_hash = signer.send_deployment(DATA, 31337)

        assert tx_hash in fake_node.transactions
        assert "eth_sendRawTransaction" in fake_node.calls

        raw = fake_node.transactions[tx_hash]["payload"]
        assert Account.recover_transaction(raw) == DEV_ADDRESS

    def test_balance(self, client, fake_node):
        assert LocalAccountSigner(client, DEV_PRIVATE_KEY).balance() == fake_node.balance

    def test_insufficient_funds(self, client, fake_node):
        fake_node.balance = 1

        with pytest.raises(SubmissionError, match="Insufficient funds"):
            LocalAccountSigner(client, DEV_PRIVATE_KEY).send_deployment(DATA, 31337)
        assert fake_node.transactions == {}

    def test_broadcast_rejected(self, client, fake_node):
        fake_node.reject_send = "nonce too low"

        with pytest.raises(SubmissionError, match="nonce too low"):
            LocalAccountSigner(client, DEV_PRIVATE_KEY).send_deployment(DATA, 31337)


class TestNodeAccountSigner:
    def test_sends_through_node(self, client, fake_node):
        signer = NodeAccountSigner(client, DEV_ADDRESS.lower())
        tx_hash = signer.send_deployment(DATA, 31337)

        payload = fake_node.transactions[tx_hash]["payload"]
        assert payload["from"] == DEV_ADDRESS
        assert payload["data"] == DATA
        assert "eth_sendTransaction" in fake_node.calls

    def test_broadcast_rejected(self, client, fake_node):
        fake_node.reject_send = "insufficient funds for gas * price + value"

        with pytest.raises(SubmissionError):
            NodeAccountSigner(client, DEV_ADDRESS).send_deployment(DATA, 31337)
