"""Custom exception classes for rentpay-deployments."""

from typing import Optional


class DeploymentError(Exception):
    """Base exception for deployment-related errors."""

    pass


class ConfigError(DeploymentError, ValueError):
    """Raised when the network context or deployment settings are missing or invalid."""

    pass


class ArtifactNotFoundError(ConfigError, FileNotFoundError):
    """Raised when the compiled contract artifact is not found."""

    pass


class PendingSubmissionError(ConfigError):
    """Raised when an unconfirmed earlier submission exists for the network."""

    def __init__(self, message: str, transaction_hash: Optional[str] = None):
        super().__init__(message)
        self.transaction_hash = transaction_hash


class RpcError(DeploymentError, RuntimeError):
    """Raised when a JSON-RPC request fails or returns an error object."""

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.code = code


class SubmissionError(DeploymentError, RuntimeError):
    """Raised when signing or broadcasting the creation transaction fails."""

    pass


class ConfirmationError(DeploymentError, RuntimeError):
    """
    Raised when a broadcast transaction cannot be confirmed.

    The transaction may still be mined later, so the hash is kept for the
    operator to track manually.
    """

    def __init__(self, message: str, transaction_hash: Optional[str] = None):
        super().__init__(message)
        self.transaction_hash = transaction_hash


class ConfirmationTimeoutError(ConfirmationError, TimeoutError):
    """Raised when the confirmation deadline passes."""

    pass


class DeploymentRevertedError(ConfirmationError):
    """Raised when the creation transaction was mined but reverted; no contract exists."""

    pass


class ConstantReadError(DeploymentError, RuntimeError):
    """Raised when a read-only contract getter cannot be called or decoded."""

    pass


class PersistenceError(DeploymentError, OSError):
    """Raised when the deployment record cannot be written."""

    def __init__(self, message: str, transaction_hash: Optional[str] = None):
        super().__init__(message)
        self.transaction_hash = transaction_hash
