from django.contrib import admin, messages

from django_solana_mint.exceptions import SubmissionNotRefreshableError
from django_solana_mint.models import SolanaSubmission, StoreItem
from django_solana_mint.services.submission_refresh_service import (
    SubmissionRefreshService,
)


@admin.register(StoreItem)
class StoreItemAdmin(admin.ModelAdmin):
    list_display = ("name", "symbol", "price_in_sol", "metadata_uri", "is_active")
    search_fields = ("name", "symbol", "metadata_uri")
    list_filter = ("is_active",)


@admin.register(SolanaSubmission)
class SolanaSubmissionAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "kind",
        "status",
        "payer_address",
        "recipient_address",
        "signature",
        "created",
        "updated",
    )
    readonly_fields = (
        "kind",
        "payer_address",
        "recipient_address",
        "amount_lamports",
        "store_item",
        "mint_address",
        "signature",
        "signer_tier",
        "reason",
        "explorer_url",
        "created",
        "updated",
    )
    list_filter = ("kind", "status", "signer_tier")
    search_fields = ("signature", "payer_address", "recipient_address", "mint_address")
    actions = ["refresh_selected_submissions"]

    @admin.action(description="Refresh status of selected timed out submissions")
    def refresh_selected_submissions(self, request, queryset):
        refresh_service = SubmissionRefreshService()
        refreshed = 0
        for submission in queryset:
            try:
                refresh_service.refresh_submission(submission)
                refreshed += 1
            except SubmissionNotRefreshableError as e:
                self.message_user(request, str(e), level=messages.WARNING)
        self.message_user(request, f"Refreshed {refreshed} submission(s).")
