import logging
from datetime import timedelta
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
from django.utils import timezone
from solana.rpc.core import RPCException
from solders.signature import Signature
from solders.transaction import Transaction
from solders.transaction_status import TransactionConfirmationStatus

from django_solana_mint.choices import (
    SignerTierTypes,
    SubmissionKindTypes,
    SubmissionStatusTypes,
)
from django_solana_mint.conftest import RECIPIENT_ADDRESS, TEST_SIGNATURE
from django_solana_mint.exceptions import (
    InvalidRecipientError,
    InvalidTransferAmountError,
    RewardCooldownError,
    SubmissionInProgressError,
)
from django_solana_mint.models import SolanaSubmission
from django_solana_mint.services.submission_service import SubmissionService
from django_solana_mint.services.transfer_service import TransferService
from django_solana_mint.signals import submission_finished
from django_solana_mint.solana.dtos import SignatureStatusDTO, SubmissionResult
from django_solana_mint.solana.enums import SubmissionOutcomeEnum

pytestmark = pytest.mark.django_db


@pytest.fixture
def transfer_service(client_factory):
    return TransferService(client_factory=client_factory)


@pytest.fixture
def finished_receiver():
    receiver = MagicMock()
    submission_finished.connect(
        receiver, weak=False, dispatch_uid="test-finished-receiver"
    )
    yield receiver
    submission_finished.disconnect(dispatch_uid="test-finished-receiver")


def test_send_sol_confirms_transfer(
    transfer_service, fake_solana_client, signer_keypair, finished_receiver
):
    submission = transfer_service.send_sol(RECIPIENT_ADDRESS, Decimal("0.5"))

    submission.refresh_from_db()
    assert submission.kind == SubmissionKindTypes.TRANSFER
    assert submission.status == SubmissionStatusTypes.CONFIRMED
    assert submission.signature == str(TEST_SIGNATURE)
    assert submission.signer_tier == SignerTierTypes.PRIMARY
    assert submission.payer_address == str(signer_keypair.pubkey())
    assert submission.recipient_address == RECIPIENT_ADDRESS
    assert submission.amount_lamports == 500_000_000
    assert submission.reason is None

    fake_solana_client.get_balance_with_retry.assert_awaited_once_with(
        signer_keypair.pubkey()
    )
    payload = fake_solana_client.send_raw_transaction.await_args.args[0]
    transaction = Transaction.from_bytes(payload)
    assert transaction.message.account_keys[0] == signer_keypair.pubkey()
    transaction.verify()

    finished_receiver.assert_called_once()
    assert finished_receiver.call_args.kwargs["submission"] == submission
    assert finished_receiver.call_args.kwargs["result"].status == (
        SubmissionOutcomeEnum.CONFIRMED
    )


def test_send_sol_send_failure_marks_submission_failed(
    transfer_service, fake_solana_client
):
    fake_solana_client.send_raw_transaction.side_effect = RPCException(
        "Transaction simulation failed"
    )

    submission = transfer_service.send_sol(RECIPIENT_ADDRESS, Decimal("0.1"))

    assert submission.status == SubmissionStatusTypes.FAILED
    assert submission.signature is None
    assert "Transaction simulation failed" in submission.reason
    fake_solana_client.get_signature_status.assert_not_awaited()


def test_send_sol_on_chain_failure_keeps_signature(
    transfer_service, fake_solana_client
):
    fake_solana_client.get_signature_status.return_value = SignatureStatusDTO(
        failure_reason="InstructionError(0, Custom(1))"
    )

    submission = transfer_service.send_sol(RECIPIENT_ADDRESS, Decimal("0.1"))

    assert submission.status == SubmissionStatusTypes.FAILED
    assert submission.signature == str(TEST_SIGNATURE)
    assert submission.reason == "InstructionError(0, Custom(1))"


def test_send_sol_times_out_when_never_confirmed(
    transfer_service, fake_solana_client
):
    fake_solana_client.get_signature_status.return_value = SignatureStatusDTO(
        confirmation_status=TransactionConfirmationStatus.Processed
    )

    submission = transfer_service.send_sol(RECIPIENT_ADDRESS, Decimal("0.1"))

    assert submission.status == SubmissionStatusTypes.TIMED_OUT
    assert submission.signature == str(TEST_SIGNATURE)
    assert fake_solana_client.get_signature_status.await_count == 3


def test_send_sol_insufficient_balance_fails_before_send(
    transfer_service, fake_solana_client
):
    fake_solana_client.get_balance_with_retry.return_value = 1_000

    submission = transfer_service.send_sol(RECIPIENT_ADDRESS, Decimal("0.1"))

    assert submission.status == SubmissionStatusTypes.FAILED
    assert "Insufficient balance" in submission.reason
    fake_solana_client.send_raw_transaction.assert_not_awaited()


def test_send_sol_balance_must_cover_fee_reserve(
    transfer_service, fake_solana_client, test_settings
):
    test_settings["FEE_RESERVE_LAMPORTS"] = 5000
    fake_solana_client.get_balance_with_retry.return_value = 100_000_000 + 4_999

    submission = transfer_service.send_sol(RECIPIENT_ADDRESS, Decimal("0.1"))

    assert submission.status == SubmissionStatusTypes.FAILED
    assert "Required: 100005000" in submission.reason


def test_send_sol_uses_fallback_signer_for_fallback_wallet(
    client_factory, fake_solana_client, test_settings, fallback_signer_keypair
):
    test_settings["FALLBACK_SIGNER_KEYPAIR"] = fallback_signer_keypair.to_json()
    test_settings["WALLET_ADDRESS"] = str(fallback_signer_keypair.pubkey())

    submission = TransferService(client_factory=client_factory).send_sol(
        RECIPIENT_ADDRESS, Decimal("0.1")
    )

    assert submission.status == SubmissionStatusTypes.CONFIRMED
    assert submission.signer_tier == SignerTierTypes.FALLBACK
    assert submission.payer_address == str(fallback_signer_keypair.pubkey())


def test_send_sol_fails_when_no_signer_covers_wallet(
    client_factory, fake_solana_client, test_settings
):
    test_settings["WALLET_ADDRESS"] = RECIPIENT_ADDRESS

    submission = TransferService(client_factory=client_factory).send_sol(
        "11111111111111111111111111111112", Decimal("0.1")
    )

    assert submission.status == SubmissionStatusTypes.FAILED
    assert "No configured signer" in submission.reason
    fake_solana_client.send_raw_transaction.assert_not_awaited()


@pytest.mark.parametrize("address", ["", "not-an-address", "123"])
def test_send_sol_invalid_recipient(transfer_service, address):
    with pytest.raises(InvalidRecipientError):
        transfer_service.send_sol(address, Decimal("0.1"))

    assert not SolanaSubmission.objects.exists()


@pytest.mark.parametrize(
    "amount", [Decimal("0"), Decimal("-1"), Decimal("0.0000000001"), "NaN", "abc"]
)
def test_send_sol_invalid_amount(transfer_service, amount):
    with pytest.raises(InvalidTransferAmountError):
        transfer_service.send_sol(RECIPIENT_ADDRESS, amount)

    assert not SolanaSubmission.objects.exists()


def test_send_sol_rejects_while_another_transfer_is_in_flight(
    transfer_service, fake_solana_client, signer_keypair
):
    SolanaSubmission.objects.create(
        kind=SubmissionKindTypes.TRANSFER,
        status=SubmissionStatusTypes.SENT,
        payer_address=str(signer_keypair.pubkey()),
    )

    with pytest.raises(SubmissionInProgressError):
        transfer_service.send_sol(RECIPIENT_ADDRESS, Decimal("0.1"))

    fake_solana_client.send_raw_transaction.assert_not_awaited()


def test_stale_in_flight_submission_does_not_block(
    transfer_service, signer_keypair
):
    stale = SolanaSubmission.objects.create(
        kind=SubmissionKindTypes.TRANSFER,
        status=SubmissionStatusTypes.PENDING,
        payer_address=str(signer_keypair.pubkey()),
    )
    SolanaSubmission.objects.filter(id=stale.id).update(
        updated=timezone.now() - timedelta(hours=1)
    )

    submission = transfer_service.send_sol(RECIPIENT_ADDRESS, Decimal("0.1"))

    assert submission.status == SubmissionStatusTypes.CONFIRMED
    stale.refresh_from_db()
    assert stale.status == SubmissionStatusTypes.FAILED
    assert stale.reason == "Submission was abandoned before it was sent"


def test_stale_sent_submission_is_expired_as_timed_out(
    transfer_service, signer_keypair
):
    stale = SolanaSubmission.objects.create(
        kind=SubmissionKindTypes.TRANSFER,
        status=SubmissionStatusTypes.SENT,
        payer_address=str(signer_keypair.pubkey()),
        signature=str(Signature.from_bytes(bytes([5] * 64))),
    )
    SolanaSubmission.objects.filter(id=stale.id).update(
        updated=timezone.now() - timedelta(hours=1)
    )

    expired = transfer_service.expire_stale_submissions(
        SubmissionKindTypes.TRANSFER,
        str(signer_keypair.pubkey()),
        timezone.now() - timedelta(minutes=2),
    )

    assert expired == 1
    stale.refresh_from_db()
    assert stale.status == SubmissionStatusTypes.TIMED_OUT
    assert stale.signature == str(Signature.from_bytes(bytes([5] * 64)))


def test_concurrent_transfer_is_rejected_by_database_constraint(
    transfer_service, fake_solana_client, signer_keypair
):
    SolanaSubmission.objects.create(
        kind=SubmissionKindTypes.TRANSFER,
        status=SubmissionStatusTypes.PENDING,
        payer_address=str(signer_keypair.pubkey()),
    )

    # Both callers passed the in-flight check before either record existed
    with patch.object(TransferService, "ensure_no_submission_in_flight"):
        with pytest.raises(SubmissionInProgressError):
            transfer_service.send_sol(RECIPIENT_ADDRESS, Decimal("0.1"))

    assert SolanaSubmission.objects.count() == 1
    fake_solana_client.send_raw_transaction.assert_not_awaited()


def test_send_sol_invalid_submission_commitment_fails_before_send(
    transfer_service, fake_solana_client, test_settings
):
    test_settings["SUBMISSION_COMMITMENT"] = "processed"

    submission = transfer_service.send_sol(RECIPIENT_ADDRESS, Decimal("0.1"))

    submission.refresh_from_db()
    assert submission.status == SubmissionStatusTypes.FAILED
    assert "SUBMISSION_COMMITMENT" in submission.reason
    fake_solana_client.send_raw_transaction.assert_not_awaited()


def test_send_sol_unexpected_error_before_send_marks_failed(
    transfer_service, fake_solana_client, caplog
):
    fake_solana_client.get_latest_blockhash_with_retry.side_effect = RuntimeError(
        "unexpected response shape"
    )

    with caplog.at_level(logging.ERROR):
        submission = transfer_service.send_sol(RECIPIENT_ADDRESS, Decimal("0.1"))

    submission.refresh_from_db()
    assert submission.status == SubmissionStatusTypes.FAILED
    assert submission.reason == "unexpected response shape"
    assert "unexpected error occurred while preparing" in caplog.text
    fake_solana_client.send_raw_transaction.assert_not_awaited()


def test_in_flight_mint_does_not_block_transfer(transfer_service, signer_keypair):
    SolanaSubmission.objects.create(
        kind=SubmissionKindTypes.MINT,
        status=SubmissionStatusTypes.SENT,
        payer_address=str(signer_keypair.pubkey()),
    )

    submission = transfer_service.send_sol(RECIPIENT_ADDRESS, Decimal("0.1"))

    assert submission.status == SubmissionStatusTypes.CONFIRMED


def test_send_reward_uses_reward_amount(transfer_service, test_settings):
    test_settings["REWARD_AMOUNT_SOL"] = "0.002"

    submission = transfer_service.send_reward(RECIPIENT_ADDRESS)

    assert submission.kind == SubmissionKindTypes.REWARD
    assert submission.amount_lamports == 2_000_000
    assert submission.status == SubmissionStatusTypes.CONFIRMED


def test_send_reward_respects_cooldown(transfer_service, fake_solana_client):
    transfer_service.send_reward(RECIPIENT_ADDRESS)

    with pytest.raises(RewardCooldownError) as exc_info:
        transfer_service.send_reward(RECIPIENT_ADDRESS)

    assert 0 < exc_info.value.retry_after_seconds <= 3
    assert fake_solana_client.send_raw_transaction.await_count == 1


def test_failed_reward_does_not_start_cooldown(transfer_service):
    SolanaSubmission.objects.create(
        kind=SubmissionKindTypes.REWARD,
        status=SubmissionStatusTypes.FAILED,
        payer_address="11111111111111111111111111111111",
        recipient_address=RECIPIENT_ADDRESS,
    )

    submission = transfer_service.send_reward(RECIPIENT_ADDRESS)

    assert submission.status == SubmissionStatusTypes.CONFIRMED


def test_reward_cooldown_disabled(transfer_service, test_settings):
    test_settings["REWARD_COOLDOWN_SECONDS"] = 0

    transfer_service.send_reward(RECIPIENT_ADDRESS)
    transfer_service.send_reward(RECIPIENT_ADDRESS)

    assert SolanaSubmission.objects.filter(
        kind=SubmissionKindTypes.REWARD
    ).count() == 2


def test_mark_sent_stores_signature():
    submission = SolanaSubmission.objects.create(
        kind=SubmissionKindTypes.TRANSFER,
        payer_address="11111111111111111111111111111111",
    )

    SubmissionService._mark_sent(submission.id, SubmissionResult.sent(TEST_SIGNATURE))

    submission.refresh_from_db()
    assert submission.status == SubmissionStatusTypes.SENT
    assert submission.signature == str(TEST_SIGNATURE)


def test_finish_submission_does_not_signal_unchanged_status(finished_receiver):
    signature = Signature.from_bytes(bytes([3] * 64))
    submission = SolanaSubmission.objects.create(
        kind=SubmissionKindTypes.TRANSFER,
        status=SubmissionStatusTypes.TIMED_OUT,
        payer_address="11111111111111111111111111111111",
        signature=str(signature),
    )

    SubmissionService(signer=MagicMock()).finish_submission(
        submission, SubmissionResult.timed_out(signature)
    )

    finished_receiver.assert_not_called()
