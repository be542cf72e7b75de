"""Data types and dataclasses for rentpay-deployments."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .exceptions import DeploymentRevertedError


class DeploymentStage(Enum):
    """
    Pipeline stages, in order.

    A failed result reports the last stage that completed.
    """

    UNSTARTED = "unstarted"
    SIGNER_RESOLVED = "signer-resolved"
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"
    PERSISTED = "persisted"
    DONE = "done"


@dataclass(frozen=True)
class ContractArtifact:
    """Compiled contract: bytecode plus ABI."""

    contract_name: str
    abi: List[Dict[str, Any]]
    bytecode: str  # 0x-prefixed creation bytecode


@dataclass(frozen=True)
class DeploymentRequest:
    """Everything needed to submit one contract-creation transaction."""

    network: str
    chain_id: int
    artifact: ContractArtifact
    signer: Any  # signers.Signer
    constructor_args: List[Any] = field(default_factory=list)


@dataclass
class DeploymentReceipt:
    """On-chain outcome of the creation transaction."""

    transaction_hash: str
    contract_address: Optional[str] = None  # Known once mined
    block_number: Optional[int] = None  # Inclusion block, None while pending
    confirmations: int = 0

    @property
    def is_pending(self) -> bool:
        return self.block_number is None


@dataclass(frozen=True)
class DeploymentRecord:
    """Durable description of a confirmed deployment."""

    network: str
    chain_id: int
    contract_address: str
    deployer_address: str
    transaction_hash: str
    timestamp: str  # ISO-8601, UTC
    block_number: int

    def to_json_dict(self) -> Dict[str, Any]:
        """Serialize with the on-disk camelCase keys, in file order."""
        return {
            "network": self.network,
            "chainId": self.chain_id,
            "contractAddress": self.contract_address,
            "deployerAddress": self.deployer_address,
            "transactionHash": self.transaction_hash,
            "timestamp": self.timestamp,
            "blockNumber": self.block_number,
        }

    @classmethod
    def from_json_dict(cls, data: Dict[str, Any]) -> "DeploymentRecord":
        return cls(
            network=data["network"],
            chain_id=data["chainId"],
            contract_address=data["contractAddress"],
            deployer_address=data["deployerAddress"],
            transaction_hash=data["transactionHash"],
            timestamp=data["timestamp"],
            block_number=data["blockNumber"],
        )


@dataclass(frozen=True)
class PendingSubmission:
    """Marker for a broadcast transaction that has not been recorded yet."""

    network: str
    chain_id: int
    deployer_address: str
    transaction_hash: str
    submitted_at: str

    def to_json_dict(self) -> Dict[str, Any]:
        return {
            "network": self.network,
            "chainId": self.chain_id,
            "deployerAddress": self.deployer_address,
            "transactionHash": self.transaction_hash,
            "submittedAt": self.submitted_at,
        }

    @classmethod
    def from_json_dict(cls, data: Dict[str, Any]) -> "PendingSubmission":
        return cls(
            network=data["network"],
            chain_id=data["chainId"],
            deployer_address=data["deployerAddress"],
            transaction_hash=data["transactionHash"],
            submitted_at=data["submittedAt"],
        )


@dataclass
class DeploymentResult:
    """
    Outcome of one orchestrator run.

    Either ``stage`` is DONE and ``record`` is set, or ``error`` holds the
    typed cause and ``stage`` is the last stage reached before it.
    """

    stage: DeploymentStage
    record: Optional[DeploymentRecord] = None
    error: Optional[Exception] = None
    transaction_hash: Optional[str] = None
    constants: Dict[str, int] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.stage is DeploymentStage.DONE and self.error is None

    @property
    def unrecorded(self) -> bool:
        """
        True when a transaction was broadcast but no record was written.

        A confirmed revert created no contract, so it is a plain failure.
        """
        return (
            not self.ok
            and self.transaction_hash is not None
            and not isinstance(self.error, DeploymentRevertedError)
            and self.stage in (DeploymentStage.SUBMITTED, DeploymentStage.CONFIRMED)
        )
