from rest_framework import status

from django_solana_mint.exceptions import (
    InsufficientBalanceError,
    InvalidRecipientError,
    InvalidTransferAmountError,
    RewardCooldownError,
    StoreItemNotMintableError,
    SubmissionError,
    SubmissionInProgressError,
    SubmissionNotRefreshableError,
    ViewException,
)

SUBMISSION_ERROR_STATUS_CODES = {
    InvalidRecipientError: status.HTTP_400_BAD_REQUEST,
    InvalidTransferAmountError: status.HTTP_400_BAD_REQUEST,
    InsufficientBalanceError: status.HTTP_409_CONFLICT,
    StoreItemNotMintableError: status.HTTP_409_CONFLICT,
    SubmissionInProgressError: status.HTTP_409_CONFLICT,
    SubmissionNotRefreshableError: status.HTTP_409_CONFLICT,
    RewardCooldownError: status.HTTP_429_TOO_MANY_REQUESTS,
}


def submission_error_to_view_exception(exc: SubmissionError) -> ViewException:
    status_code = SUBMISSION_ERROR_STATUS_CODES.get(
        type(exc), status.HTTP_400_BAD_REQUEST
    )
    return ViewException(
        error_message={"code": exc.code, "detail": str(exc)},
        status_code=status_code,
    )
