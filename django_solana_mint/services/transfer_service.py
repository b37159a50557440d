import logging
from decimal import Decimal, InvalidOperation

from django.utils import timezone
from solders.pubkey import Pubkey

from django_solana_mint.choices import SubmissionKindTypes, SubmissionStatusTypes
from django_solana_mint.exceptions import (
    InsufficientBalanceError,
    InvalidRecipientError,
    InvalidTransferAmountError,
    RewardCooldownError,
)
from django_solana_mint.models import SolanaSubmission
from django_solana_mint.services.submission_service import SubmissionService
from django_solana_mint.settings import solana_mint_settings
from django_solana_mint.solana.base_solana_client import BaseSolanaClient
from django_solana_mint.solana.dtos import BuiltMessageDTO, SubmissionConfig
from django_solana_mint.solana.solana_transaction_builder import (
    SolanaTransactionBuilder,
)
from django_solana_mint.solana.utils import sol_to_lamports

logger = logging.getLogger(__name__)


def parse_recipient(address: str) -> Pubkey:
    try:
        return Pubkey.from_string(str(address).strip())
    except Exception:
        raise InvalidRecipientError(address)


class TransferService(SubmissionService):
    def send_sol(
        self,
        recipient_address: str,
        amount: Decimal,
        kind: str = SubmissionKindTypes.TRANSFER,
        meta_data: dict | None = None,
    ) -> SolanaSubmission:
        """
        Transfers native SOL from the configured wallet and waits for confirmation.
        """
        recipient = parse_recipient(recipient_address)
        lamports = self._amount_to_lamports(amount)

        sender = self.signer.wallet_address
        submission = self.start_submission(
            kind,
            str(sender),
            recipient_address=str(recipient),
            amount_lamports=lamports,
            meta_data=meta_data or {},
        )
        logger.info(f"Sending {lamports} lamports from {sender} to {recipient} ({kind})")

        async def build_message(client: BaseSolanaClient) -> BuiltMessageDTO:
            await self._ensure_sufficient_balance(client, sender, lamports)
            return SolanaTransactionBuilder(
                base_solana_client=client
            ).create_native_transfer_message(
                sender=sender, recipient=recipient, lamports=lamports
            )

        return self.run_submission(
            submission,
            build_message,
            SubmissionConfig.from_settings(solana_mint_settings.TRANSFER_SUBMISSION),
        )

    def send_reward(self, recipient_address: str) -> SolanaSubmission:
        """
        Sends the configured reward amount to a player, at most once per cooldown window.
        """
        recipient = str(parse_recipient(recipient_address))
        self.ensure_reward_cooldown_passed(recipient)

        return self.send_sol(
            recipient,
            solana_mint_settings.REWARD_AMOUNT_SOL,
            kind=SubmissionKindTypes.REWARD,
        )

    def ensure_reward_cooldown_passed(self, recipient_address: str) -> None:
        cooldown_seconds = solana_mint_settings.REWARD_COOLDOWN_SECONDS
        if not cooldown_seconds:
            return

        last_reward = (
            SolanaSubmission.objects.filter(
                kind=SubmissionKindTypes.REWARD,
                recipient_address=recipient_address,
            )
            .exclude(status=SubmissionStatusTypes.FAILED)
            .order_by("-created")
            .first()
        )
        if not last_reward:
            return

        elapsed = (timezone.now() - last_reward.created).total_seconds()
        if elapsed < cooldown_seconds:
            raise RewardCooldownError(recipient_address, cooldown_seconds - elapsed)

    @staticmethod
    def _amount_to_lamports(amount) -> int:
        try:
            amount = Decimal(str(amount))
        except InvalidOperation:
            raise InvalidTransferAmountError(f"Invalid transfer amount: {amount}")

        if not amount.is_finite() or amount <= 0:
            raise InvalidTransferAmountError("Amount must be greater than 0")

        lamports = sol_to_lamports(amount)
        if lamports == 0:
            raise InvalidTransferAmountError("Transfer amount too small")
        return lamports

    @staticmethod
    async def _ensure_sufficient_balance(
        client: BaseSolanaClient, sender: Pubkey, lamports: int
    ) -> None:
        balance = await client.get_balance_with_retry(sender)
        required = lamports + solana_mint_settings.FEE_RESERVE_LAMPORTS
        if balance < required:
            raise InsufficientBalanceError(required=required, available=balance)
