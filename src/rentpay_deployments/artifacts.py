"""Compiled contract artifact loading for rentpay-deployments."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from eth_abi import encode
from eth_abi.exceptions import EncodingError
from eth_utils import add_0x_prefix, remove_0x_prefix

from .exceptions import ArtifactNotFoundError, ConfigError
from .types import ContractArtifact


def load_contract_artifact(file_path: Union[Path, str]) -> ContractArtifact:
    """
    Parse a Hardhat artifact JSON file.

    Args:
        file_path: Path to artifacts/contracts/<Name>.sol/<Name>.json

    Returns:
        ContractArtifact with name, ABI and creation bytecode

    Raises:
        ArtifactNotFoundError: If the file does not exist
        ConfigError: If the file is not valid JSON or has no deployable bytecode
    """
    path = Path(file_path)
    if not path.exists():
        raise ArtifactNotFoundError(
            f"Contract artifact not found at {path}. Compile the contracts first "
            "(npx hardhat compile)."
        )

    try:
        with open(path) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Contract artifact {path} is not valid JSON: {e}") from e

    for required in ("abi", "bytecode"):
        if required not in data:
            raise ConfigError(f"Contract artifact {path} is missing '{required}'")

    bytecode = data["bytecode"]
    if isinstance(bytecode, dict):
        # solc standard-json output nests the hex under "object"
        bytecode = bytecode.get("object", "")

    # Interfaces and abstract contracts compile to empty bytecode
    if not remove_0x_prefix(bytecode):
        raise ConfigError(f"Contract artifact {path} has no deployable bytecode")

    return ContractArtifact(
        contract_name=data.get("contractName", path.stem),
        abi=data["abi"],
        bytecode=add_0x_prefix(bytecode),
    )


def _canonical_type(param: Dict[str, Any]) -> str:
    abi_type = param["type"]
    if abi_type.startswith("tuple"):
        inner = ",".join(_canonical_type(c) for c in param.get("components", []))
        return f"({inner}){abi_type[len('tuple'):]}"
    return abi_type


def find_abi_entry(
    abi: List[Dict[str, Any]], entry_type: str, name: Optional[str] = None
) -> Optional[Dict[str, Any]]:
    """Return the first ABI entry of the given type (and name, if given)."""
    for item in abi:
        if item.get("type") != entry_type:
            continue
        if name is None or item.get("name") == name:
            return item
    return None


def encode_deployment_data(
    artifact: ContractArtifact, constructor_args: Sequence[Any] = ()
) -> str:
    """
    Build the data field of a contract-creation transaction.

    Args:
        artifact: Compiled contract
        constructor_args: Values for the constructor inputs, in ABI order

    Returns:
        0x-prefixed bytecode followed by the ABI-encoded constructor arguments

    Raises:
        ConfigError: If the arguments do not match the constructor signature
    """
    constructor = find_abi_entry(artifact.abi, "constructor")
    inputs = constructor.get("inputs", []) if constructor else []

    if len(inputs) != len(constructor_args):
        raise ConfigError(
            f"{artifact.contract_name} constructor takes {len(inputs)} argument(s), "
            f"got {len(constructor_args)}"
        )

    if not inputs:
        return artifact.bytecode

    types = [_canonical_type(i) for i in inputs]
    try:
        encoded = encode(types, list(constructor_args))
    except (EncodingError, TypeError, ValueError) as e:
        raise ConfigError(
            f"Cannot encode constructor arguments for {artifact.contract_name}: {e}"
        ) from e

    return artifact.bytecode + encoded.hex()
