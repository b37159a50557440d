import logging
from datetime import timedelta
from typing import Awaitable, Callable

import httpx
from asgiref.sync import async_to_sync, sync_to_async
from django.db import IntegrityError, transaction
from django.utils import timezone
from solana.exceptions import SolanaRpcException
from solana.rpc.core import RPCException

from django_solana_mint.choices import SubmissionStatusTypes
from django_solana_mint.exceptions import SolanaMintError, SubmissionInProgressError
from django_solana_mint.models import SolanaSubmission
from django_solana_mint.services.wallet_signer_service import build_wallet_signer
from django_solana_mint.settings import solana_mint_settings
from django_solana_mint.signals import submission_finished
from django_solana_mint.solana.base_solana_client import BaseSolanaClient
from django_solana_mint.solana.dtos import (
    BuiltMessageDTO,
    SubmissionConfig,
    SubmissionResult,
    TransactionRequest,
)
from django_solana_mint.solana.enums import SubmissionOutcomeEnum
from django_solana_mint.solana.signers import TwoTierSigner
from django_solana_mint.solana.submission_orchestrator import SubmissionOrchestrator

logger = logging.getLogger(__name__)

# Expected errors while preparing a transaction; they fail the submission before send
PRE_SEND_ERRORS = (SolanaMintError, SolanaRpcException, RPCException, httpx.HTTPError)

IN_FLIGHT_STATUSES = (SubmissionStatusTypes.PENDING, SubmissionStatusTypes.SENT)

OUTCOME_TO_STATUS = {
    SubmissionOutcomeEnum.PENDING: SubmissionStatusTypes.PENDING,
    SubmissionOutcomeEnum.SENT: SubmissionStatusTypes.SENT,
    SubmissionOutcomeEnum.CONFIRMED: SubmissionStatusTypes.CONFIRMED,
    SubmissionOutcomeEnum.FAILED: SubmissionStatusTypes.FAILED,
    SubmissionOutcomeEnum.TIMED_OUT: SubmissionStatusTypes.TIMED_OUT,
}

BuildMessage = Callable[[BaseSolanaClient], Awaitable[BuiltMessageDTO]]


class SubmissionService:
    def __init__(
        self,
        signer: TwoTierSigner | None = None,
        client_factory: Callable[[], BaseSolanaClient] = BaseSolanaClient,
    ):
        self._signer = signer
        self.client_factory = client_factory

    @property
    def signer(self) -> TwoTierSigner:
        if self._signer is None:
            self._signer = build_wallet_signer()
        return self._signer

    def ensure_no_submission_in_flight(self, kind: str, payer_address: str) -> None:
        """
        Refuses a new submission while another one of the same kind from the same payer
        has not reached a terminal status.
        """
        ttl = timedelta(seconds=solana_mint_settings.SUBMISSION_IN_FLIGHT_TTL_SECONDS)
        self.expire_stale_submissions(kind, payer_address, timezone.now() - ttl)

        is_in_flight = SolanaSubmission.objects.filter(
            kind=kind,
            payer_address=payer_address,
            status__in=IN_FLIGHT_STATUSES,
        ).exists()

        if is_in_flight:
            raise SubmissionInProgressError(kind, payer_address)

    @staticmethod
    def expire_stale_submissions(kind: str, payer_address: str, older_than) -> int:
        """
        Moves in-flight records not updated since `older_than` to a terminal status.
        A sent record keeps its signature as timed_out, so it can still be refreshed.
        """
        stale_submissions = SolanaSubmission.objects.filter(
            kind=kind,
            payer_address=payer_address,
            status__in=IN_FLIGHT_STATUSES,
            updated__lt=older_than,
        )

        expired = 0
        for submission in stale_submissions:
            if submission.signature and SubmissionOrchestrator.is_polling(
                submission.signature
            ):
                continue

            if submission.status == SubmissionStatusTypes.SENT:
                submission.status = SubmissionStatusTypes.TIMED_OUT
                submission.reason = SubmissionResult.timed_out().reason
            else:
                submission.status = SubmissionStatusTypes.FAILED
                submission.reason = "Submission was abandoned before it was sent"
            submission.save(update_fields=["status", "reason", "updated"])
            expired += 1
            logger.warning(
                f"Expired stale submission {submission.id} as {submission.status}"
            )

        return expired

    def start_submission(
        self, kind: str, payer_address: str, **fields
    ) -> SolanaSubmission:
        """
        Creates the pending record of a new submission. The database allows one
        in-flight record per kind and payer, so concurrent callers can not both pass.
        """
        self.ensure_no_submission_in_flight(kind, payer_address)
        try:
            with transaction.atomic():
                return SolanaSubmission.objects.create(
                    kind=kind, payer_address=payer_address, **fields
                )
        except IntegrityError:
            raise SubmissionInProgressError(kind, payer_address)

    def run_submission(
        self,
        submission: SolanaSubmission,
        build_message: BuildMessage,
        config: SubmissionConfig,
    ) -> SolanaSubmission:
        logger.info(
            f"Starting {submission.kind} submission {submission.id} from {submission.payer_address}"
        )
        result, built_message, signer_tier = async_to_sync(self._execute)(
            submission.id, build_message, config
        )

        if built_message is not None and built_message.mint_address is not None:
            submission.mint_address = str(built_message.mint_address)
        if signer_tier is not None:
            submission.signer_tier = signer_tier

        return self.finish_submission(submission, result)

    async def _execute(
        self,
        submission_id: int,
        build_message: BuildMessage,
        config: SubmissionConfig,
    ) -> tuple[SubmissionResult, BuiltMessageDTO | None, str | None]:
        async with self.client_factory() as client:
            try:
                built_message = await build_message(client)
                recent_blockhash = await client.get_latest_blockhash_with_retry()
                signed = self.signer.sign(
                    built_message.message,
                    recent_blockhash,
                    built_message.extra_signers,
                )
                request = TransactionRequest.from_transaction(
                    signed.transaction, solana_mint_settings.SUBMISSION_COMMITMENT
                )
            except PRE_SEND_ERRORS as e:
                logger.warning(
                    f"Submission {submission_id} failed before sending: {e}"
                )
                return SubmissionResult.failed(reason=str(e)), None, None
            except Exception as e:
                logger.error(
                    f"An unexpected error occurred while preparing submission "
                    f"{submission_id}: {e}"
                )
                return SubmissionResult.failed(reason=str(e)), None, None

            async def on_sent(sent_result: SubmissionResult) -> None:
                await sync_to_async(self._mark_sent)(submission_id, sent_result)

            orchestrator = SubmissionOrchestrator(submission_client=client)
            result = await orchestrator.submit(request, config, on_sent=on_sent)

        return result, built_message, signed.signer_tier

    @staticmethod
    def _mark_sent(submission_id: int, sent_result: SubmissionResult) -> None:
        SolanaSubmission.objects.filter(id=submission_id).update(
            status=SubmissionStatusTypes.SENT,
            signature=str(sent_result.signature),
            updated=timezone.now(),
        )

    def finish_submission(
        self, submission: SolanaSubmission, result: SubmissionResult
    ) -> SolanaSubmission:
        previous_status = submission.status
        submission.status = OUTCOME_TO_STATUS[result.status]
        if result.signature is not None:
            submission.signature = str(result.signature)
        submission.reason = (
            result.reason if result.status != SubmissionOutcomeEnum.CONFIRMED else None
        )
        submission.save()

        logger.info(
            f"Submission {submission.id} ({submission.kind}) finished with status "
            f"{submission.status}, signature: {submission.signature}"
        )

        if result.is_terminal and previous_status != submission.status:
            submission_finished.send(
                sender=self.__class__, submission=submission, result=result
            )

        return submission
