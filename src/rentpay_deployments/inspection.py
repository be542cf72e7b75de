"""Read-only contract calls used to sanity-check a fresh deployment."""

import logging
from typing import Any, Dict, List, Sequence

from eth_abi import decode
from eth_abi.exceptions import DecodingError
from eth_utils import function_signature_to_4byte_selector, to_bytes

from .artifacts import find_abi_entry
from .constants import CONTRACT_CONSTANTS, SECONDS_PER_DAY
from .exceptions import ConstantReadError, RpcError
from .rpc import JsonRpcClient

logger = logging.getLogger(__name__)


def read_uint_constant(
    client: JsonRpcClient, address: str, abi: List[Dict[str, Any]], name: str
) -> int:
    """
    Call a zero-argument uint256 getter.

    Raises:
        ConstantReadError: If the ABI lacks the getter, the call fails, or the
            return data does not decode as uint256
    """
    if find_abi_entry(abi, "function", name) is None:
        raise ConstantReadError(f"Contract ABI has no function '{name}'")

    selector = function_signature_to_4byte_selector(f"{name}()")
    try:
        raw = client.eth_call({"to": address, "data": "0x" + selector.hex()})
    except RpcError as e:
        raise ConstantReadError(f"Call to {name}() failed: {e}") from e

    try:
        (value,) = decode(["uint256"], to_bytes(hexstr=raw or "0x"))
    except (DecodingError, ValueError) as e:
        raise ConstantReadError(f"{name}() returned undecodable data: {raw!r}") from e
    return value


def read_contract_constants(
    client: JsonRpcClient,
    address: str,
    abi: List[Dict[str, Any]],
    names: Sequence[str] = CONTRACT_CONSTANTS,
) -> Dict[str, int]:
    """Read every named constant; the first failure aborts the whole read."""
    return {name: read_uint_constant(client, address, abi, name) for name in names}


def format_constants(constants: Dict[str, int]) -> List[str]:
    """Human-readable lines for the RentPaymentSystem constants."""
    lines = []
    for name, value in constants.items():
        if name == "LATE_PENALTY_RATE":
            lines.append(f"Late Penalty Rate: {value}%")
        elif name == "GRACE_PERIOD":
            lines.append(f"Grace Period: {value} seconds ({value / SECONDS_PER_DAY:g} days)")
        elif name == "SECONDS_IN_MONTH":
            lines.append(
                f"Seconds in Month: {value} seconds ({value / SECONDS_PER_DAY:g} days)"
            )
        else:
            lines.append(f"{name}: {value}")
    return lines
