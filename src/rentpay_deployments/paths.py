"""Path management utilities for rentpay-deployments."""

from pathlib import Path
from typing import Optional, Union


def get_default_deployments_dir() -> Path:
    """
    Get default directory for deployment records.

    Returns:
        Path to ./deployments
    """
    return Path.cwd() / "deployments"


def _resolve_dir(deployments_dir: Optional[Union[Path, str]]) -> Path:
    if deployments_dir is None:
        return get_default_deployments_dir()
    return Path(deployments_dir).absolute()


def get_record_path(
    network: str, deployments_dir: Optional[Union[Path, str]] = None
) -> Path:
    """
    Get the deployment record path for a network.

    Args:
        network: Network name
        deployments_dir: Custom records directory (defaults to ./deployments)

    Returns:
        Path to <deployments_dir>/<network>_deployment.json
    """
    return _resolve_dir(deployments_dir) / f"{network}_deployment.json"


def get_pending_path(
    network: str, deployments_dir: Optional[Union[Path, str]] = None
) -> Path:
    """Path of the pending-submission marker that sits next to the record."""
    return _resolve_dir(deployments_dir) / f"{network}_deployment.pending.json"


def get_default_artifact_path(
    contract_name: str, project_root: Optional[Union[Path, str]] = None
) -> Path:
    """
    Get the Hardhat artifact path for a contract.

    Hardhat writes artifacts to artifacts/contracts/<Name>.sol/<Name>.json.

    Args:
        contract_name: Contract name, e.g. "RentPaymentSystem"
        project_root: Hardhat project root (defaults to cwd)

    Returns:
        Absolute artifact path
    """
    root = Path.cwd() if project_root is None else Path(project_root).absolute()
    return root / "artifacts" / "contracts" / f"{contract_name}.sol" / f"{contract_name}.json"
