from enum import Enum


class SubmissionOutcomeEnum(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    CONFIRMED = "confirmed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"

    @property
    def is_terminal(self) -> bool:
        return self in (
            SubmissionOutcomeEnum.CONFIRMED,
            SubmissionOutcomeEnum.FAILED,
            SubmissionOutcomeEnum.TIMED_OUT,
        )
