from dataclasses import dataclass, field
from decimal import Decimal

from solana.rpc.commitment import Commitment, Confirmed, Finalized
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction
from solders.transaction_status import TransactionConfirmationStatus

from django_solana_mint.solana.enums import SubmissionOutcomeEnum
from django_solana_mint.solana.utils import lamports_to_sol, shorten_address

SUPPORTED_SUBMISSION_COMMITMENTS = (Confirmed, Finalized)


@dataclass(frozen=True, slots=True)
class TransactionRequest:
    payload: bytes
    fee_payer: Pubkey
    commitment: Commitment = Confirmed

    def __post_init__(self):
        if not self.payload:
            raise ValueError("Transaction payload must not be empty")
        if self.commitment not in SUPPORTED_SUBMISSION_COMMITMENTS:
            raise ValueError(
                f"Unsupported commitment: {self.commitment}. "
                f"Expected one of {SUPPORTED_SUBMISSION_COMMITMENTS}"
            )

    @classmethod
    def from_transaction(
        cls, transaction: Transaction, commitment: Commitment = Confirmed
    ) -> "TransactionRequest":
        # The fee payer is always the first account of the message
        return cls(
            payload=bytes(transaction),
            fee_payer=transaction.message.account_keys[0],
            commitment=commitment,
        )


@dataclass(frozen=True, slots=True)
class SubmissionConfig:
    max_retries: int
    poll_interval_ms: int
    timeout_ms: int

    def __post_init__(self):
        if self.max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        if self.poll_interval_ms <= 0:
            raise ValueError("poll_interval_ms must be positive")
        if self.timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive")

    @property
    def poll_interval_seconds(self) -> float:
        return self.poll_interval_ms / 1000

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    @classmethod
    def from_settings(cls, submission_settings: dict) -> "SubmissionConfig":
        return cls(
            max_retries=int(submission_settings["MAX_RETRIES"]),
            poll_interval_ms=int(submission_settings["POLL_INTERVAL_MS"]),
            timeout_ms=int(submission_settings["TIMEOUT_MS"]),
        )


@dataclass(frozen=True, slots=True)
class SubmissionResult:
    status: SubmissionOutcomeEnum
    signature: Signature | None = None
    reason: str | None = None

    @classmethod
    def pending(cls, signature: Signature | None = None) -> "SubmissionResult":
        return cls(status=SubmissionOutcomeEnum.PENDING, signature=signature)

    @classmethod
    def sent(cls, signature: Signature) -> "SubmissionResult":
        return cls(status=SubmissionOutcomeEnum.SENT, signature=signature)

    @classmethod
    def confirmed(cls, signature: Signature) -> "SubmissionResult":
        return cls(status=SubmissionOutcomeEnum.CONFIRMED, signature=signature)

    @classmethod
    def failed(
        cls, reason: str, signature: Signature | None = None
    ) -> "SubmissionResult":
        return cls(
            status=SubmissionOutcomeEnum.FAILED, signature=signature, reason=reason
        )

    @classmethod
    def timed_out(cls, signature: Signature | None = None) -> "SubmissionResult":
        return cls(
            status=SubmissionOutcomeEnum.TIMED_OUT,
            signature=signature,
            reason="Transaction was not confirmed within the polling window",
        )

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


@dataclass(frozen=True, slots=True)
class SignatureStatusDTO:
    confirmation_status: TransactionConfirmationStatus | None = None
    failure_reason: str | None = None
    slot: int | None = None


@dataclass(frozen=True, slots=True)
class BuiltMessageDTO:
    message: Message
    extra_signers: tuple[Keypair, ...] = field(default_factory=tuple)
    mint_address: Pubkey | None = None


@dataclass(frozen=True, slots=True)
class SignedTransactionDTO:
    transaction: Transaction
    signer_tier: str


@dataclass(frozen=True, slots=True)
class WalletBalanceDTO:
    wallet_address: Pubkey
    balance_lamports: int

    @property
    def balance_sol(self) -> Decimal:
        return lamports_to_sol(self.balance_lamports)

    @property
    def short_address(self) -> str:
        return shorten_address(str(self.wallet_address))
