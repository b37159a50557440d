from django.db import models


class SubmissionStatusTypes(models.TextChoices):
    PENDING = "pending"  # record created, transaction not sent yet
    SENT = "sent"
    CONFIRMED = "confirmed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


class SubmissionKindTypes(models.TextChoices):
    TRANSFER = "transfer", "SOL transfer"
    REWARD = "reward", "SOL reward"
    MINT = "mint", "NFT mint"


class SignerTierTypes(models.TextChoices):
    PRIMARY = "primary"
    FALLBACK = "fallback"
