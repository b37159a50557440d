# apps.py
from django.apps import AppConfig


class SolanaMintConfig(AppConfig):
    name = "django_solana_mint"
    verbose_name = "Solana NFT Mint & Transfers"
    default_auto_field = "django.db.models.BigAutoField"

    def ready(self):
        from .settings import solana_mint_settings

        # Trigger the property check to ensure RPC_URL exists
        _ = solana_mint_settings.SOLANA_RPC_URL
        _ = solana_mint_settings.SUBMISSION_COMMITMENT
