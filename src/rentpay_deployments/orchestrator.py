"""Deployment pipeline for rentpay-deployments."""

import logging
import threading
import time
from datetime import datetime, timezone
from typing import Callable, Dict, Optional, Tuple

from eth_utils import from_wei

from .artifacts import encode_deployment_data, load_contract_artifact
from .config import DeploymentConfig
from .confirmations import ConfirmationWaiter
from .exceptions import (
    ConfigError,
    ConstantReadError,
    DeploymentError,
    DeploymentRevertedError,
    PendingSubmissionError,
    PersistenceError,
)
from .inspection import format_constants, read_contract_constants
from .records import (
    clear_pending_submission,
    load_pending_submission,
    save_deployment_record,
    save_pending_submission,
)
from .rpc import JsonRpcClient
from .signers import resolve_signer
from .types import (
    DeploymentReceipt,
    DeploymentRecord,
    DeploymentRequest,
    DeploymentResult,
    DeploymentStage,
    PendingSubmission,
)
from .verification import explorer_url, verification_command

logger = logging.getLogger(__name__)

RULE = "=" * 42


def iso_timestamp(moment: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a Z suffix."""
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class DeploymentOrchestrator:
    """
    Drives one contract deployment from signer resolution to a saved record.

    Stages run strictly in order. Any error ends the run and is returned
    inside the DeploymentResult; nothing already broadcast is rolled back.
    """

    def __init__(
        self,
        config: DeploymentConfig,
        client: Optional[JsonRpcClient] = None,
        emit: Callable[[str], None] = print,
        cancel_event: Optional[threading.Event] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.config = config
        self.client = client or JsonRpcClient(config.rpc_url)
        self.emit = emit
        self.cancel_event = cancel_event
        self._clock = clock
        self._sleep = sleep
        self._now = now

    def run(self) -> DeploymentResult:
        """
        Execute the pipeline.

        Returns:
            DeploymentResult; ``ok`` is True only when every stage finished
        """
        result = DeploymentResult(stage=DeploymentStage.UNSTARTED)
        try:
            self._run(result)
        except DeploymentError as e:
            result.error = e
            if result.transaction_hash is None:
                result.transaction_hash = getattr(e, "transaction_hash", None)
            logger.error("Deployment failed after stage '%s': %s", result.stage.value, e)
        except Exception as e:
            # Keep the stage and hash so a broadcast transaction is still reported
            result.error = e
            logger.exception(
                "Unexpected error after stage '%s' (transaction %s)",
                result.stage.value,
                result.transaction_hash,
            )
        return result

    def _run(self, result: DeploymentResult) -> None:
        config = self.config
        self.emit(f"Starting deployment of {config.contract_name}...")

        # Resolve environment
        self._check_chain_id()
        self.emit(f"Network: {config.network}")
        self.emit(f"Chain ID: {config.chain_id}")
        pending = self._check_pending()

        # Resolve signer
        request = self._build_request()
        balance = request.signer.balance()
        self.emit(f"Deploying with account: {request.signer.address}")
        self.emit(f"Account balance: {from_wei(balance, 'ether')} ETH")
        result.stage = DeploymentStage.SIGNER_RESOLVED

        # Submit
        if pending is not None:
            tx_hash, deployer = pending.transaction_hash, pending.deployer_address
            self.emit(f"Resuming pending deployment transaction: {tx_hash}")
        else:
            tx_hash, deployer = self._submit(request)
        result.transaction_hash = tx_hash
        result.stage = DeploymentStage.SUBMITTED

        # Confirm
        self.emit(f"Waiting for {config.confirmations} confirmations...")
        try:
            receipt = self._waiter().wait(tx_hash)
        except DeploymentRevertedError:
            # A mined revert is final; there is nothing left to resume
            self._clear_pending()
            raise
        result.stage = DeploymentStage.CONFIRMED
        self.emit(f"{config.contract_name} deployed to: {receipt.contract_address}")
        self.emit(
            f"Contract confirmed in block {receipt.block_number} "
            f"({receipt.confirmations} confirmations)"
        )
        self._show_summary(receipt, deployer)

        # Read back constants
        result.constants = self._read_constants(request, receipt)

        # Persist
        record = DeploymentRecord(
            network=config.network,
            chain_id=config.chain_id,
            contract_address=receipt.contract_address,
            deployer_address=deployer,
            transaction_hash=tx_hash,
            timestamp=iso_timestamp(self._now()),
            block_number=receipt.block_number,
        )
        path = save_deployment_record(record, config.deployments_dir)
        result.record = record
        result.stage = DeploymentStage.PERSISTED
        self._clear_pending()
        self.emit(f"Deployment info saved to: {path}")

        # Guidance
        self._show_verification(receipt.contract_address)
        result.stage = DeploymentStage.DONE
        self.emit("Deployment completed successfully!")

    def _check_chain_id(self) -> None:
        actual = self.client.chain_id()
        if actual != self.config.chain_id:
            raise ConfigError(
                f"RPC endpoint {self.config.rpc_url} serves chain {actual}, "
                f"but network '{self.config.network}' expects {self.config.chain_id}"
            )

    def _check_pending(self) -> Optional[PendingSubmission]:
        """Apply the duplicate-submission guard; return the submission to resume."""
        config = self.config
        pending = load_pending_submission(config.network, config.deployments_dir)

        if config.resume:
            if pending is None:
                raise ConfigError(f"No pending deployment to resume on '{config.network}'")
            if pending.chain_id != config.chain_id:
                raise ConfigError(
                    f"Pending deployment was sent to chain {pending.chain_id}, "
                    f"not {config.chain_id}"
                )
            return pending

        if pending is None:
            return None

        if config.force:
            logger.warning(
                "Discarding pending deployment %s on '%s' (--force)",
                pending.transaction_hash,
                config.network,
            )
            clear_pending_submission(config.network, config.deployments_dir)
            return None

        raise PendingSubmissionError(
            f"An unconfirmed deployment ({pending.transaction_hash}) is pending on "
            f"'{config.network}'. Use --resume to finish it or --force to deploy again.",
            pending.transaction_hash,
        )

    def _build_request(self) -> DeploymentRequest:
        config = self.config
        artifact = load_contract_artifact(config.artifact_path)
        signer = resolve_signer(
            self.client, config.private_key, allow_node_account=config.is_local
        )
        return DeploymentRequest(
            network=config.network,
            chain_id=config.chain_id,
            artifact=artifact,
            signer=signer,
            constructor_args=list(config.constructor_args),
        )

    def _submit(self, request: DeploymentRequest) -> Tuple[str, str]:
        self.emit(f"Deploying {request.artifact.contract_name} contract...")
        data = encode_deployment_data(request.artifact, request.constructor_args)
        tx_hash = request.signer.send_deployment(data, request.chain_id)
        self.emit(f"Deployment transaction hash: {tx_hash}")

        pending = PendingSubmission(
            network=request.network,
            chain_id=request.chain_id,
            deployer_address=request.signer.address,
            transaction_hash=tx_hash,
            submitted_at=iso_timestamp(self._now()),
        )
        try:
            save_pending_submission(pending, self.config.deployments_dir)
        except PersistenceError as e:
            logger.warning("Could not write pending marker for %s: %s", tx_hash, e)
        return tx_hash, request.signer.address

    def _clear_pending(self) -> None:
        try:
            clear_pending_submission(self.config.network, self.config.deployments_dir)
        except OSError as e:
            logger.warning(
                "Could not remove pending marker for '%s': %s", self.config.network, e
            )

    def _waiter(self) -> ConfirmationWaiter:
        config = self.config
        return ConfirmationWaiter(
            self.client,
            confirmations=config.confirmations,
            timeout=config.confirmation_timeout,
            poll_interval=config.poll_interval,
            mine_blocks=config.is_local,
            drop_grace=config.drop_grace,
            cancel_event=self.cancel_event,
            clock=self._clock,
            sleep=self._sleep,
        )

    def _show_summary(self, receipt: DeploymentReceipt, deployer: str) -> None:
        config = self.config
        self.emit("")
        self.emit("Contract Information:")
        self.emit(RULE)
        self.emit(f"Contract Name: {config.contract_name}")
        self.emit(f"Contract Address: {receipt.contract_address}")
        self.emit(f"Network: {config.network}")
        self.emit(f"Chain ID: {config.chain_id}")
        self.emit(f"Deployer: {deployer}")
        self.emit(f"Transaction Hash: {receipt.transaction_hash}")

    def _read_constants(
        self, request: DeploymentRequest, receipt: DeploymentReceipt
    ) -> Dict[str, int]:
        try:
            constants = read_contract_constants(
                self.client, receipt.contract_address, request.artifact.abi
            )
        except ConstantReadError as e:
            logger.warning("Could not fetch contract constants: %s", e)
            self.emit(f"Could not fetch contract constants: {e}")
            return {}

        self.emit("")
        self.emit("Contract Constants:")
        for line in format_constants(constants):
            self.emit(line)
        return constants

    def _show_verification(self, contract_address: str) -> None:
        config = self.config
        command = verification_command(
            config.network, contract_address, config.constructor_args
        )
        if command is None:
            return
        self.emit("")
        self.emit("To verify the contract, run:")
        self.emit(command)
        url = explorer_url(config.network, contract_address)
        if url:
            self.emit(f"Explorer: {url}")


def deploy(config: DeploymentConfig, **kwargs) -> DeploymentResult:
    """Run a single deployment with a fresh orchestrator."""
    return DeploymentOrchestrator(config, **kwargs).run()
