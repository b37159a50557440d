from typing import Union

from rest_framework.exceptions import APIException


class BaseAPIException(APIException):
    """
    Base API exception.
    """

    def __init__(self, error_message: Union[str, dict], status_code: int):
        self.error_message = error_message
        self.status_code = status_code
        super().__init__(self.error_message)


class ViewException(BaseAPIException):
    """Base view exception."""


class SolanaMintError(Exception):
    """Base exception for the library."""

    code: str = "solana_mint_error"
    message: str = "Solana mint error"


class SigningError(SolanaMintError):
    code = "signing_error"


class SubmissionError(SolanaMintError):
    pass


class SubmissionInProgressError(SubmissionError):
    code = "submission_in_progress"

    def __init__(self, kind: str, payer_address: str):
        super().__init__(
            f"A {kind} submission from {payer_address} is already in progress"
        )
        self.kind = kind
        self.payer_address = payer_address


class SubmissionNotRefreshableError(SubmissionError):
    code = "submission_not_refreshable"

    def __init__(self, submission_id: int, status: str, reason: str | None = None):
        message = f"Submission {submission_id} with status '{status}' can not be refreshed"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.submission_id = submission_id
        self.status = status
        self.reason = reason


class WalletBalanceUnavailableError(SolanaMintError):
    code = "wallet_balance_unavailable"


class RewardCooldownError(SubmissionError):
    code = "reward_cooldown"

    def __init__(self, recipient_address: str, retry_after_seconds: float):
        super().__init__(
            f"Reward cooldown is active for {recipient_address}, "
            f"retry in {retry_after_seconds:.1f} seconds"
        )
        self.recipient_address = recipient_address
        self.retry_after_seconds = retry_after_seconds


class InvalidRecipientError(SubmissionError):
    code = "invalid_recipient"

    def __init__(self, address: str):
        super().__init__(f"Invalid recipient wallet address: {address}")
        self.address = address


class InvalidTransferAmountError(SubmissionError):
    code = "invalid_transfer_amount"


class InsufficientBalanceError(SubmissionError):
    code = "insufficient_balance"

    def __init__(self, required: int, available: int):
        super().__init__(
            f"Insufficient balance. Required: {required}, Available: {available}"
        )
        self.required = required
        self.available = available


class StoreItemNotMintableError(SubmissionError):
    code = "store_item_not_mintable"
