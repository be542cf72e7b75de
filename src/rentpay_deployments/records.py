"""Deployment record persistence for rentpay-deployments."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .exceptions import PersistenceError
from .paths import get_pending_path, get_record_path
from .types import DeploymentRecord, PendingSubmission

logger = logging.getLogger(__name__)


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def _atomic_write_json(data: Dict[str, Any], path: Path) -> None:
    """
    Write JSON through a temp file in the same directory, then rename.

    Readers see either the old file or the complete new one.
    The file gets the usual umask-derived mode rather than mkstemp's 0600.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
    )
    try:
        with os.fdopen(fd, "w") as f:
            json.dump(data, f, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_name, 0o666 & ~_current_umask())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def save_deployment_record(
    record: DeploymentRecord, deployments_dir: Optional[Union[Path, str]] = None
) -> Path:
    """
    Persist a confirmed deployment, replacing any earlier record for the network.

    Args:
        record: Confirmed deployment
        deployments_dir: Records directory (defaults to ./deployments)

    Returns:
        Path of the written record

    Raises:
        PersistenceError: If the directory or file cannot be written
    """
    path = get_record_path(record.network, deployments_dir)
    try:
        _atomic_write_json(record.to_json_dict(), path)
    except OSError as e:
        raise PersistenceError(
            f"Could not write deployment record {path}: {e}", record.transaction_hash
        ) from e

    logger.info("Saved deployment record %s", path)
    return path


def load_deployment_record(
    network: str, deployments_dir: Optional[Union[Path, str]] = None
) -> Optional[DeploymentRecord]:
    """
    Load the record for a network.

    Returns:
        DeploymentRecord, or None if no record exists
    """
    path = get_record_path(network, deployments_dir)
    try:
        with open(path) as f:
            return DeploymentRecord.from_json_dict(json.load(f))
    except (FileNotFoundError, NotADirectoryError):
        return None


def save_pending_submission(
    pending: PendingSubmission, deployments_dir: Optional[Union[Path, str]] = None
) -> Path:
    """Mark a broadcast transaction as awaiting its record."""
    path = get_pending_path(pending.network, deployments_dir)
    try:
        _atomic_write_json(pending.to_json_dict(), path)
    except OSError as e:
        raise PersistenceError(
            f"Could not write pending marker {path}: {e}", pending.transaction_hash
        ) from e
    return path


def load_pending_submission(
    network: str, deployments_dir: Optional[Union[Path, str]] = None
) -> Optional[PendingSubmission]:
    """
    Load the pending marker for a network.

    A corrupted marker is reported as a PersistenceError rather than ignored,
    since it may be the only pointer to a broadcast transaction.
    """
    path = get_pending_path(network, deployments_dir)
    try:
        with open(path) as f:
            return PendingSubmission.from_json_dict(json.load(f))
    except (FileNotFoundError, NotADirectoryError):
        return None
    except (json.JSONDecodeError, KeyError) as e:
        raise PersistenceError(f"Pending marker {path} is unreadable: {e}") from e


def clear_pending_submission(
    network: str, deployments_dir: Optional[Union[Path, str]] = None
) -> None:
    get_pending_path(network, deployments_dir).unlink(missing_ok=True)
