import asyncio
import inspect
import logging
import threading
import time
from typing import Awaitable, Callable, Protocol

import httpx
from solana.exceptions import SolanaRpcException
from solana.rpc.commitment import Commitment
from solana.rpc.core import RPCException
from solders.signature import Signature

from django_solana_mint.solana.dtos import (
    SignatureStatusDTO,
    SubmissionConfig,
    SubmissionResult,
    TransactionRequest,
)
from django_solana_mint.solana.utils import commitment_reached

logger = logging.getLogger(__name__)

TRANSPORT_ERRORS = (SolanaRpcException, RPCException, httpx.HTTPError)

SentHook = Callable[[SubmissionResult], Awaitable[None] | None]


class SubmissionClient(Protocol):
    async def send_raw_transaction(
        self, payload: bytes, commitment: Commitment = None
    ) -> Signature: ...

    async def get_signature_status(
        self, signature: Signature
    ) -> SignatureStatusDTO | None: ...


class SubmissionOrchestrator:
    """
    Sends a signed transaction and polls its status until one terminal outcome.

    Every error is converted into a SubmissionResult. Only task cancellation
    propagates to the caller.

    The set of signatures being polled is shared by all instances, so a flow
    and a refresh running in different threads never poll the same signature.
    """

    _polled_signatures: set[str] = set()
    _polled_signatures_lock = threading.Lock()

    def __init__(
        self,
        submission_client: SubmissionClient,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.submission_client = submission_client
        self._sleep = sleep
        self._clock = clock
        self.last_signature: Signature | None = None

    async def submit(
        self,
        request: TransactionRequest,
        config: SubmissionConfig,
        on_sent: SentHook | None = None,
    ) -> SubmissionResult:
        started_at = self._clock()

        try:
            signature = await self.submission_client.send_raw_transaction(
                request.payload, commitment=request.commitment
            )
        except TRANSPORT_ERRORS as e:
            logger.warning(
                f"Transaction from {request.fee_payer} was rejected on send: {e}"
            )
            return SubmissionResult.failed(reason=str(e))
        except Exception as e:
            logger.error(f"An unexpected error occurred while sending transaction: {e}")
            return SubmissionResult.failed(reason=str(e))

        if not signature:
            return SubmissionResult.failed(reason="No signature returned on send")

        self.last_signature = signature
        logger.info(f"Transaction was sent, signature: {signature}")

        if on_sent is not None:
            await self._notify_sent(on_sent, SubmissionResult.sent(signature))

        return await self._poll_once_per_signature(
            signature, request.commitment, config, started_at
        )

    async def confirm(
        self,
        signature: Signature,
        commitment: Commitment,
        config: SubmissionConfig,
    ) -> SubmissionResult:
        """
        Polls an already sent transaction. Used to refresh a timed out submission.
        """
        return await self._poll_once_per_signature(
            signature, commitment, config, self._clock()
        )

    async def _notify_sent(self, on_sent: SentHook, result: SubmissionResult) -> None:
        try:
            hook_result = on_sent(result)
            if inspect.isawaitable(hook_result):
                await hook_result
        except Exception as e:
            logger.warning(f"on_sent hook failed for {result.signature}: {e}")

    async def _poll_once_per_signature(
        self,
        signature: Signature,
        commitment: Commitment,
        config: SubmissionConfig,
        started_at: float,
    ) -> SubmissionResult:
        key = str(signature)
        with self._polled_signatures_lock:
            if key in self._polled_signatures:
                logger.info(f"Signature {key} is already being polled")
                return SubmissionResult.pending(signature)
            self._polled_signatures.add(key)

        try:
            return await self._poll(signature, commitment, config, started_at)
        finally:
            with self._polled_signatures_lock:
                self._polled_signatures.discard(key)

    @classmethod
    def is_polling(cls, signature: Signature | str) -> bool:
        with cls._polled_signatures_lock:
            return str(signature) in cls._polled_signatures

    async def _poll(
        self,
        signature: Signature,
        commitment: Commitment,
        config: SubmissionConfig,
        started_at: float,
    ) -> SubmissionResult:
        for attempt in range(1, config.max_retries + 1):
            if attempt > 1:
                remaining = config.timeout_seconds - (self._clock() - started_at)
                if remaining <= 0:
                    break
                await self._sleep(min(config.poll_interval_seconds, remaining))
                if self._clock() - started_at > config.timeout_seconds:
                    break

            status = await self._query_status(signature, attempt)
            if status is None:
                continue

            if status.failure_reason is not None:
                logger.error(
                    f"Transaction {signature} failed: {status.failure_reason}"
                )
                return SubmissionResult.failed(
                    reason=status.failure_reason, signature=signature
                )

            if commitment_reached(commitment, status.confirmation_status):
                logger.info(f"Transaction {signature} reached {commitment}")
                return SubmissionResult.confirmed(signature)

        logger.warning(f"Transaction {signature} confirmation timed out")
        return SubmissionResult.timed_out(signature)

    async def _query_status(
        self, signature: Signature, attempt: int
    ) -> SignatureStatusDTO | None:
        try:
            return await self.submission_client.get_signature_status(signature)
        except TRANSPORT_ERRORS as e:
            logger.warning(
                f"Error while checking confirmation of {signature} (attempt {attempt}): {e}"
            )
        except Exception as e:
            logger.error(
                f"Unexpected error while checking confirmation of {signature} "
                f"(attempt {attempt}): {e}"
            )
        return None
