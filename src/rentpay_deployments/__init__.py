"""
rentpay-deployments: deploy the RentPaymentSystem contract and keep per-network records
"""

from importlib.metadata import PackageNotFoundError, version

from .config import DeploymentConfig, load_config
from .exceptions import (
    ArtifactNotFoundError,
    ConfigError,
    ConfirmationError,
    ConfirmationTimeoutError,
    ConstantReadError,
    DeploymentError,
    DeploymentRevertedError,
    PendingSubmissionError,
    PersistenceError,
    RpcError,
    SubmissionError,
)
from .orchestrator import DeploymentOrchestrator, deploy
from .records import load_deployment_record
from .types import (
    DeploymentReceipt,
    DeploymentRecord,
    DeploymentRequest,
    DeploymentResult,
    DeploymentStage,
)

try:
    __version__ = version("rentpay-deployments")
except PackageNotFoundError:
    __version__ = None

__all__ = [
    "DeploymentOrchestrator",
    "deploy",
    "DeploymentConfig",
    "load_config",
    "load_deployment_record",
    "DeploymentReceipt",
    "DeploymentRecord",
    "DeploymentRequest",
    "DeploymentResult",
    "DeploymentStage",
    "DeploymentError",
    "ConfigError",
    "ArtifactNotFoundError",
    "PendingSubmissionError",
    "RpcError",
    "SubmissionError",
    "ConfirmationError",
    "ConfirmationTimeoutError",
    "DeploymentRevertedError",
    "ConstantReadError",
    "PersistenceError",
]
