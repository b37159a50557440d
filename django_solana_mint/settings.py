from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from solana.rpc.commitment import Commitment, Confirmed, Finalized

SUBMISSION_COMMITMENTS = (Confirmed, Finalized)

DEFAULT_SUBMISSION_SETTINGS = {
    "MAX_RETRIES": 10,
    "POLL_INTERVAL_MS": 1000,
    "TIMEOUT_MS": 30_000,
}


class SolanaMintSettings:
    """
    Settings accessor for django-solana-mint.
    Reads from django.conf.settings.SOLANA_MINT dynamically.
    """

    def _get_setting(self, key, default=None, required=False):
        solana_config = getattr(settings, "SOLANA_MINT", {})
        value = solana_config.get(key, default)
        if required and value is None:
            raise ImproperlyConfigured(
                f"SOLANA_MINT['{key}'] is required in settings.py"
            )
        return value

    @property
    def SOLANA_RPC_URL(self) -> str:
        return self._get_setting("SOLANA_RPC_URL", required=True)

    @property
    def SOLANA_CLUSTER(self) -> str:
        # Only used to build explorer links
        return self._get_setting("SOLANA_CLUSTER", default="devnet")

    @property
    def RPC_COMMITMENT(self) -> Commitment:
        return self._get_setting("RPC_COMMITMENT", default=Confirmed)

    @property
    def SUBMISSION_COMMITMENT(self) -> Commitment:
        commitment = self._get_setting("SUBMISSION_COMMITMENT", default=Confirmed)
        if commitment not in SUBMISSION_COMMITMENTS:
            raise ImproperlyConfigured(
                f"SOLANA_MINT['SUBMISSION_COMMITMENT'] must be one of "
                f"{', '.join(SUBMISSION_COMMITMENTS)}, got {commitment!r}"
            )
        return commitment

    @property
    def SIGNER_KEYPAIR(self) -> str | list | bytes | None:
        return self._get_setting("SIGNER_KEYPAIR")

    @property
    def FALLBACK_SIGNER_KEYPAIR(self) -> str | list | bytes | None:
        return self._get_setting("FALLBACK_SIGNER_KEYPAIR")

    @property
    def KEYPAIR_ENCRYPTION_KEY(self) -> str | None:
        return self._get_setting("KEYPAIR_ENCRYPTION_KEY")

    @property
    def WALLET_ADDRESS(self) -> str | None:
        """
        Optional fee payer address. When empty, the address of the first configured
        signer keypair is used.
        """
        return self._get_setting("WALLET_ADDRESS")

    @property
    def METADATA_GATEWAY(self) -> str:
        return self._get_setting(
            "METADATA_GATEWAY", default="https://gateway.pinata.cloud/ipfs/"
        )

    @property
    def NFT_SYMBOL(self) -> str:
        return self._get_setting("NFT_SYMBOL", default="STKR")

    @property
    def TRANSFER_SUBMISSION(self) -> dict:
        return {
            **DEFAULT_SUBMISSION_SETTINGS,
            **self._get_setting("TRANSFER_SUBMISSION", default={}),
        }

    @property
    def MINT_SUBMISSION(self) -> dict:
        return {
            **DEFAULT_SUBMISSION_SETTINGS,
            **self._get_setting("MINT_SUBMISSION", default={}),
        }

    @property
    def FEE_RESERVE_LAMPORTS(self) -> int:
        return self._get_setting("FEE_RESERVE_LAMPORTS", default=5000)

    @property
    def REWARD_AMOUNT_SOL(self) -> Decimal:
        return Decimal(str(self._get_setting("REWARD_AMOUNT_SOL", default="0.001")))

    @property
    def REWARD_COOLDOWN_SECONDS(self) -> int:
        return self._get_setting("REWARD_COOLDOWN_SECONDS", default=3)

    @property
    def SUBMISSION_IN_FLIGHT_TTL_SECONDS(self) -> int:
        # Older pending/sent records no longer block a new submission
        return self._get_setting("SUBMISSION_IN_FLIGHT_TTL_SECONDS", default=120)


# Global instance - settings are read dynamically from django.conf.settings on each access
solana_mint_settings = SolanaMintSettings()
