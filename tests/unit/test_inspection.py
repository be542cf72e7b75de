"""Unit tests for contract constant read-back."""

import pytest

from conftest import CONTRACT_ADDRESS, RENT_ABI, RENT_CONSTANTS, RPC_URL
from rentpay_deployments.exceptions import ConstantReadError
from rentpay_deployments.inspection import (
    format_constants,
    read_contract_constants,
    read_uint_constant,
)
from rentpay_deployments.rpc import JsonRpcClient


@pytest.fixture
def client(fake_node) -> JsonRpcClient:
    return JsonRpcClient(RPC_URL)


class TestReadContractConstants:
    """Test reading RentPaymentSystem constants."""

    def test_reads_all_constants(self, client):
        constants = read_contract_constants(client, CONTRACT_ADDRESS, RENT_ABI)
        assert constants == RENT_CONSTANTS

    def test_preserves_display_order(self, client):
        constants = read_contract_constants(client, CONTRACT_ADDRESS, RENT_ABI)
        assert list(constants) == ["LATE_PENALTY_RATE", "GRACE_PERIOD", "SECONDS_IN_MONTH"]

    def test_single_constant(self, client):
        assert read_uint_constant(client, CONTRACT_ADDRESS, RENT_ABI, "GRACE_PERIOD") == 432000

    def test_missing_from_abi(self, client, fake_node):
        with pytest.raises(ConstantReadError, match="no function"):
            read_contract_constants(client, CONTRACT_ADDRESS, [])
        assert "eth_call" not in fake_node.calls

    def test_call_reverts(self, client, fake_node):
        fake_node.constants = None

        with pytest.raises(ConstantReadError, match="failed"):
            read_contract_constants(client, CONTRACT_ADDRESS, RENT_ABI)

    def test_undecodable_return_data(self, client, fake_node, monkeypatch):
        monkeypatch.setattr(client, "eth_call", lambda tx, block="latest": "0x")

        with pytest.raises(ConstantReadError, match="undecodable"):
            read_uint_constant(client, CONTRACT_ADDRESS, RENT_ABI, "GRACE_PERIOD")


class TestFormatConstants:
    def test_rent_constants(self):
        lines = format_constants(RENT_CONSTANTS)

        assert lines == [
            "Late Penalty Rate: 5%",
            "Grace Period: 432000 seconds (5 days)",
            "Seconds in Month: 2592000 seconds (30 days)",
        ]

    def test_unknown_constant(self):
        assert format_constants({"MAX_TENANTS": 3}) == ["MAX_TENANTS: 3"]

    def test_fractional_days(self):
        assert format_constants({"GRACE_PERIOD": 43200}) == [
            "Grace Period: 43200 seconds (0.5 days)"
        ]
