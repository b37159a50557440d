import logging
import time
from datetime import timedelta

from asgiref.sync import async_to_sync
from django.utils import timezone
from solders.signature import Signature

from django_solana_mint.choices import SubmissionKindTypes, SubmissionStatusTypes
from django_solana_mint.exceptions import SubmissionNotRefreshableError
from django_solana_mint.models import SolanaSubmission
from django_solana_mint.services.submission_service import SubmissionService
from django_solana_mint.settings import solana_mint_settings
from django_solana_mint.solana.dtos import SubmissionConfig, SubmissionResult
from django_solana_mint.solana.enums import SubmissionOutcomeEnum
from django_solana_mint.solana.submission_orchestrator import SubmissionOrchestrator

logger = logging.getLogger(__name__)

REFRESHABLE_STATUSES = (SubmissionStatusTypes.TIMED_OUT, SubmissionStatusTypes.SENT)


class SubmissionRefreshService(SubmissionService):
    """
    Re-queries the stored signature of submissions that were sent but not confirmed
    within their polling window.
    """

    def refresh_submission(self, submission: SolanaSubmission) -> SolanaSubmission:
        if submission.status not in REFRESHABLE_STATUSES or not submission.signature:
            raise SubmissionNotRefreshableError(submission.id, submission.status)

        if submission.status == SubmissionStatusTypes.SENT and self._is_in_flight(
            submission
        ):
            raise SubmissionNotRefreshableError(
                submission.id,
                submission.status,
                reason="its submit flow is still polling the signature",
            )

        logger.info(
            f"Refreshing submission {submission.id} with signature {submission.signature}"
        )
        result = async_to_sync(self._confirm)(
            Signature.from_string(submission.signature),
            self._config_for(submission),
        )

        if result.status == SubmissionOutcomeEnum.PENDING:
            # The signature is being polled by another flow right now
            return submission

        return self.finish_submission(submission, result)

    @staticmethod
    def _is_in_flight(submission: SolanaSubmission) -> bool:
        if SubmissionOrchestrator.is_polling(submission.signature):
            return True
        ttl = timedelta(seconds=solana_mint_settings.SUBMISSION_IN_FLIGHT_TTL_SECONDS)
        return submission.updated >= timezone.now() - ttl

    async def _confirm(
        self, signature: Signature, config: SubmissionConfig
    ) -> SubmissionResult:
        async with self.client_factory() as client:
            orchestrator = SubmissionOrchestrator(submission_client=client)
            return await orchestrator.confirm(
                signature, solana_mint_settings.SUBMISSION_COMMITMENT, config
            )

    @staticmethod
    def _config_for(submission: SolanaSubmission) -> SubmissionConfig:
        if submission.kind == SubmissionKindTypes.MINT:
            return SubmissionConfig.from_settings(solana_mint_settings.MINT_SUBMISSION)
        return SubmissionConfig.from_settings(solana_mint_settings.TRANSFER_SUBMISSION)

    def refresh_timed_out_submissions(
        self, limit: int = 100, sleep_interval_seconds: float | int | None = None
    ) -> dict[str, int]:
        summary = {
            "scanned": 0,
            "confirmed": 0,
            "failed": 0,
            "timed_out": 0,
            "errors": 0,
        }

        submissions = list(
            SolanaSubmission.objects.filter(
                status=SubmissionStatusTypes.TIMED_OUT, signature__isnull=False
            ).order_by("-created")[:limit]
        )

        for submission in submissions:
            summary["scanned"] += 1
            try:
                submission = self.refresh_submission(submission)
            except SubmissionNotRefreshableError as e:
                logger.warning(str(e))
                summary["errors"] += 1
                continue

            if submission.status in summary:
                summary[submission.status] += 1

            if sleep_interval_seconds:
                time.sleep(sleep_interval_seconds)  # prevent blockchain rate limiting

        logger.info(f"Refresh completed: {summary}")
        return summary
