from django.db import models

from django_solana_mint.choices import (
    SignerTierTypes,
    SubmissionKindTypes,
    SubmissionStatusTypes,
)
from django_solana_mint.settings import solana_mint_settings
from django_solana_mint.solana.utils import build_explorer_url, lamports_to_sol


class StoreItem(models.Model):
    name = models.CharField(max_length=32)
    symbol = models.CharField(max_length=10, blank=True)
    description = models.TextField(blank=True)
    price_in_sol = models.DecimalField(max_digits=30, decimal_places=9, default=0)
    metadata_uri = models.CharField(max_length=255)
    is_active = models.BooleanField(default=True, db_index=True)

    created = models.DateTimeField(auto_now_add=True)
    updated = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    @property
    def nft_symbol(self) -> str:
        return self.symbol or solana_mint_settings.NFT_SYMBOL

    @property
    def full_metadata_uri(self) -> str:
        if self.metadata_uri.startswith(("http://", "https://", "ipfs://")):
            return self.metadata_uri
        return f"{solana_mint_settings.METADATA_GATEWAY}{self.metadata_uri}"


class SolanaSubmission(models.Model):
    kind = models.CharField(
        max_length=10, choices=SubmissionKindTypes.choices, db_index=True
    )
    status = models.CharField(
        max_length=10,
        choices=SubmissionStatusTypes.choices,
        default=SubmissionStatusTypes.PENDING,
        db_index=True,
    )
    payer_address = models.CharField(max_length=60, db_index=True)
    recipient_address = models.CharField(
        max_length=60, null=True, blank=True, db_index=True
    )
    amount_lamports = models.PositiveBigIntegerField(null=True, blank=True)

    store_item = models.ForeignKey(
        StoreItem,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="submissions",
    )
    mint_address = models.CharField(max_length=60, null=True, blank=True)

    signature = models.CharField(max_length=128, null=True, blank=True)
    signer_tier = models.CharField(
        max_length=10, choices=SignerTierTypes.choices, null=True, blank=True
    )
    reason = models.TextField(null=True, blank=True)
    meta_data = models.JSONField(default=dict, blank=True, null=True)

    created = models.DateTimeField(auto_now_add=True)
    updated = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created"]
        constraints = [
            models.UniqueConstraint(
                fields=["kind", "payer_address"],
                condition=models.Q(
                    status__in=[
                        SubmissionStatusTypes.PENDING,
                        SubmissionStatusTypes.SENT,
                    ]
                ),
                name="unique_in_flight_submission_per_payer",
            )
        ]

    def __str__(self):
        return f"{self.kind} {self.status} {self.signature or ''}".strip()

    @property
    def amount_sol(self):
        if self.amount_lamports is None:
            return None
        return lamports_to_sol(self.amount_lamports)

    @property
    def explorer_url(self) -> str | None:
        cluster = solana_mint_settings.SOLANA_CLUSTER
        if (
            self.kind == SubmissionKindTypes.MINT
            and self.status == SubmissionStatusTypes.CONFIRMED
            and self.mint_address
        ):
            return build_explorer_url("address", self.mint_address, cluster)
        if self.signature:
            return build_explorer_url("tx", self.signature, cluster)
        return None
