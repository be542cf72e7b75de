"""Deployment configuration for rentpay-deployments."""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, List, Mapping, Optional, TypeVar

from .constants import (
    DEFAULT_CONFIRMATION_TIMEOUT,
    DEFAULT_CONFIRMATIONS,
    DEFAULT_CONTRACT_NAME,
    DEFAULT_DROP_GRACE,
    DEFAULT_LOCAL_RPC_URL,
    DEFAULT_POLL_INTERVAL,
    MIN_CONFIRMATIONS,
    NETWORK_CONFIG,
)
from .exceptions import ConfigError
from .paths import get_default_artifact_path, get_default_deployments_dir
from .verification import is_local_network

T = TypeVar("T")


@dataclass(frozen=True)
class DeploymentConfig:
    """Settings for one deployment run, built once and passed in explicitly."""

    network: str
    chain_id: int
    rpc_url: str
    artifact_path: Path
    deployments_dir: Path
    contract_name: str = DEFAULT_CONTRACT_NAME
    private_key: Optional[str] = field(default=None, repr=False)
    confirmations: int = DEFAULT_CONFIRMATIONS
    confirmation_timeout: float = DEFAULT_CONFIRMATION_TIMEOUT
    poll_interval: float = DEFAULT_POLL_INTERVAL
    drop_grace: float = DEFAULT_DROP_GRACE
    constructor_args: List[Any] = field(default_factory=list)
    resume: bool = False
    force: bool = False

    def __post_init__(self):
        if not self.network:
            raise ConfigError("Network name must not be empty")
        if self.network in (".", "..") or any(sep in self.network for sep in ("/", "\\")):
            raise ConfigError(
                f"Network name '{self.network}' must be a plain name "
                "without path separators"
            )
        if self.confirmations < MIN_CONFIRMATIONS:
            raise ConfigError(
                f"At least {MIN_CONFIRMATIONS} confirmations are required, "
                f"got {self.confirmations}"
            )
        if self.confirmation_timeout <= 0:
            raise ConfigError("Confirmation timeout must be positive")
        if self.poll_interval < 0:
            raise ConfigError("Poll interval must not be negative")
        if self.drop_grace < 0:
            raise ConfigError("Drop grace must not be negative")
        if self.resume and self.force:
            raise ConfigError("resume and force are mutually exclusive")

    @property
    def is_local(self) -> bool:
        return is_local_network(self.network)


def _parse(
    env: Mapping[str, str], name: str, convert: Callable[[str], T], default: T
) -> T:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return convert(raw)
    except ValueError as e:
        raise ConfigError(f"Invalid value for {name}: {raw!r}") from e


def _parse_args(raw: str) -> List[Any]:
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigError(f"DEPLOY_CONSTRUCTOR_ARGS is not valid JSON: {e}") from e
    if not isinstance(value, list):
        raise ConfigError("DEPLOY_CONSTRUCTOR_ARGS must be a JSON list")
    return value


def load_config(
    network: Optional[str] = None,
    *,
    rpc_url: Optional[str] = None,
    chain_id: Optional[int] = None,
    contract_name: Optional[str] = None,
    artifact_path: Optional[str] = None,
    deployments_dir: Optional[str] = None,
    confirmations: Optional[int] = None,
    confirmation_timeout: Optional[float] = None,
    resume: bool = False,
    force: bool = False,
    env: Optional[Mapping[str, str]] = None,
) -> DeploymentConfig:
    """
    Build a DeploymentConfig from explicit values and the environment.

    Explicit arguments win over environment variables, which win over
    defaults.

    Args:
        network: Network name (defaults to $DEPLOY_NETWORK)
        rpc_url: RPC endpoint (defaults to $DEPLOY_RPC_URL, then the network's
            own variable, e.g. $SEPOLIA_RPC_URL)
        chain_id: Expected chain id (defaults to $DEPLOY_CHAIN_ID, then the
            network table)
        env: Environment mapping (defaults to os.environ)

    Returns:
        Validated DeploymentConfig

    Raises:
        ConfigError: If the network context is absent or a value is invalid
    """
    if env is None:
        env = os.environ

    network = network or env.get("DEPLOY_NETWORK")
    if not network:
        raise ConfigError(
            "No network selected: set DEPLOY_NETWORK or pass --network"
        )

    network_config = NETWORK_CONFIG.get(network, {})
    local = is_local_network(network)

    if chain_id is None:
        chain_id = _parse(env, "DEPLOY_CHAIN_ID", int, network_config.get("chain_id"))
    if chain_id is None:
        raise ConfigError(
            f"Unknown network '{network}': set DEPLOY_CHAIN_ID to its chain id"
        )

    if rpc_url is None:
        rpc_url = env.get("DEPLOY_RPC_URL")
    if not rpc_url and network_config.get("default_rpc_env"):
        rpc_url = env.get(network_config["default_rpc_env"])
    if not rpc_url and local:
        rpc_url = DEFAULT_LOCAL_RPC_URL
    if not rpc_url:
        hint = network_config.get("default_rpc_env", "DEPLOY_RPC_URL")
        raise ConfigError(f"RPC URL required for '{network}': set ${hint}")

    private_key = env.get("DEPLOYER_PRIVATE_KEY") or None
    if private_key is None and not local:
        raise ConfigError(
            f"DEPLOYER_PRIVATE_KEY is required to deploy to '{network}'"
        )

    contract_name = contract_name or env.get("DEPLOY_CONTRACT") or DEFAULT_CONTRACT_NAME
    artifact_path = artifact_path or env.get("DEPLOY_ARTIFACT")
    deployments_dir = deployments_dir or env.get("DEPLOY_DEPLOYMENTS_DIR")

    if confirmations is None:
        confirmations = _parse(env, "DEPLOY_CONFIRMATIONS", int, DEFAULT_CONFIRMATIONS)
    if confirmation_timeout is None:
        confirmation_timeout = _parse(
            env, "DEPLOY_CONFIRMATION_TIMEOUT", float, DEFAULT_CONFIRMATION_TIMEOUT
        )
    poll_interval = _parse(env, "DEPLOY_POLL_INTERVAL", float, DEFAULT_POLL_INTERVAL)
    drop_grace = _parse(env, "DEPLOY_DROP_GRACE", float, DEFAULT_DROP_GRACE)

    raw_args = env.get("DEPLOY_CONSTRUCTOR_ARGS")
    constructor_args = _parse_args(raw_args) if raw_args else []

    return DeploymentConfig(
        network=network,
        chain_id=chain_id,
        rpc_url=rpc_url,
        artifact_path=(
            Path(artifact_path).absolute()
            if artifact_path
            else get_default_artifact_path(contract_name)
        ),
        deployments_dir=(
            Path(deployments_dir).absolute()
            if deployments_dir
            else get_default_deployments_dir()
        ),
        contract_name=contract_name,
        private_key=private_key,
        confirmations=confirmations,
        confirmation_timeout=confirmation_timeout,
        poll_interval=poll_interval,
        drop_grace=drop_grace,
        constructor_args=constructor_args,
        resume=resume,
        force=force,
    )
