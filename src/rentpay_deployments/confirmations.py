"""Receipt and confirmation polling for rentpay-deployments."""

import logging
import threading
import time
from typing import Callable, Optional

from .constants import DEFAULT_DROP_GRACE
from .exceptions import (
    ConfirmationError,
    ConfirmationTimeoutError,
    DeploymentRevertedError,
    RpcError,
)
from .rpc import JsonRpcClient
from .types import DeploymentReceipt

logger = logging.getLogger(__name__)


def count_confirmations(head_block: int, inclusion_block: int) -> int:
    """Blocks mined on top of the inclusion block."""
    return max(0, head_block - inclusion_block)


class ConfirmationWaiter:
    """
    Polls the node until a transaction is buried under enough blocks.

    The loop is bounded by ``timeout`` seconds and stops early when
    ``cancel_event`` is set. A transaction the node does not know yet is
    only treated as dropped after ``drop_grace`` seconds. ``clock`` and
    ``sleep`` are injectable for tests.
    """

    def __init__(
        self,
        client: JsonRpcClient,
        confirmations: int,
        timeout: float,
        poll_interval: float,
        mine_blocks: bool = False,
        drop_grace: float = DEFAULT_DROP_GRACE,
        cancel_event: Optional[threading.Event] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.confirmations = confirmations
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.mine_blocks = mine_blocks
        self.drop_grace = drop_grace
        self.cancel_event = cancel_event
        self._clock = clock
        self._sleep = sleep

    def _pause(self, deadline: float, transaction_hash: str) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise ConfirmationError(
                f"Cancelled while waiting for {transaction_hash}", transaction_hash
            )
        if self._clock() >= deadline:
            raise ConfirmationTimeoutError(
                f"Transaction {transaction_hash} not confirmed within {self.timeout:g}s",
                transaction_hash,
            )
        if self.cancel_event is not None:
            # Returns early when cancelled
            self.cancel_event.wait(self.poll_interval)
        else:
            self._sleep(self.poll_interval)

    def _advance_chain(self) -> None:
        try:
            self.client.mine()
        except RpcError as e:
            # Not every dev node supports evm_mine; fall back to plain polling
            logger.debug("evm_mine unavailable: %s", e)
            self.mine_blocks = False

    def wait(self, transaction_hash: str) -> DeploymentReceipt:
        """
        Wait for inclusion and confirmation depth.

        The receipt is re-read on every poll, so a transaction moved to
        another block by a reorg is counted from its current block.

        Args:
            transaction_hash: Hash of the creation transaction

        Returns:
            Confirmed DeploymentReceipt

        Raises:
            ConfirmationTimeoutError: If the deadline passes first
            DeploymentRevertedError: If the transaction reverted at full depth
            ConfirmationError: If cancelled, dropped, or the node keeps failing
        """
        deadline = self._clock() + self.timeout
        receipt = DeploymentReceipt(transaction_hash=transaction_hash)
        unknown_since: Optional[float] = None

        while True:
            try:
                raw = self.client.get_transaction_receipt(transaction_hash)
                known = raw is not None or self.client.get_transaction(transaction_hash) is not None
                head = self.client.block_number()
            except RpcError as e:
                raise ConfirmationError(
                    f"Lost contact with node while waiting for {transaction_hash}: {e}",
                    transaction_hash,
                ) from e

            # Load-balanced RPCs can lag behind a fresh broadcast
            if known:
                unknown_since = None
            elif unknown_since is None:
                unknown_since = self._clock()
            elif self._clock() - unknown_since >= self.drop_grace:
                raise ConfirmationError(
                    f"Transaction {transaction_hash} unknown to the node for "
                    f"{self.drop_grace:g}s (dropped?)",
                    transaction_hash,
                )

            if raw is None:
                if not receipt.is_pending:
                    logger.warning(
                        "Receipt for %s disappeared (reorg); waiting for re-inclusion",
                        transaction_hash,
                    )
                receipt.block_number = None
                receipt.contract_address = None
                receipt.confirmations = 0
            else:
                block_number = int(raw["blockNumber"], 16)
                if block_number != receipt.block_number:
                    logger.info(
                        "Transaction %s included in block %d", transaction_hash, block_number
                    )
                receipt.block_number = block_number
                receipt.contract_address = raw.get("contractAddress")
                receipt.confirmations = count_confirmations(head, block_number)

                if receipt.confirmations >= self.confirmations:
                    self._check_receipt(raw, transaction_hash)
                    return receipt
                logger.debug(
                    "%d/%d confirmations for %s",
                    receipt.confirmations,
                    self.confirmations,
                    transaction_hash,
                )

            if self.mine_blocks:
                self._advance_chain()
            self._pause(deadline, transaction_hash)

    @staticmethod
    def _check_receipt(raw: dict, transaction_hash: str) -> None:
        if raw.get("status") == "0x0":
            raise DeploymentRevertedError(
                f"Creation transaction {transaction_hash} reverted", transaction_hash
            )
        if not raw.get("contractAddress"):
            raise ConfirmationError(
                f"Receipt for {transaction_hash} has no contract address", transaction_hash
            )
