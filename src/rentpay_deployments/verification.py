"""Block-explorer verification guidance for rentpay-deployments."""

import json
from typing import Any, Optional, Sequence

from .constants import LOCAL_NETWORKS, NETWORK_CONFIG


def is_local_network(network: str) -> bool:
    """True for ephemeral development networks that have no explorer."""
    return network in LOCAL_NETWORKS


def _format_arg(value: Any) -> str:
    if isinstance(value, str):
        return json.dumps(value) if (" " in value or not value) else value
    return json.dumps(value)


def verification_command(
    network: str, contract_address: str, constructor_args: Sequence[Any] = ()
) -> Optional[str]:
    """
    Build the hardhat-verify command for a deployed contract.

    Args:
        network: Network name
        contract_address: Deployed address
        constructor_args: Constructor arguments used for the deployment

    Returns:
        Command line, or None on local networks
    """
    if is_local_network(network):
        return None

    parts = ["npx", "hardhat", "verify", "--network", network, contract_address]
    parts.extend(_format_arg(arg) for arg in constructor_args)
    return " ".join(parts)


def explorer_url(network: str, contract_address: str) -> Optional[str]:
    """Explorer page for the contract, when the network has a known explorer."""
    base = NETWORK_CONFIG.get(network, {}).get("block_explorer_url")
    if not base:
        return None
    return f"{base}/address/{contract_address}"
