import logging

from django.core.exceptions import ImproperlyConfigured
from solders.pubkey import Pubkey

from django_solana_mint.services.keypair_encryption_service import (
    KeypairEncryptionService,
)
from django_solana_mint.settings import solana_mint_settings
from django_solana_mint.solana.signers import KeypairSigner, TwoTierSigner
from django_solana_mint.solana.utils import parse_keypair

logger = logging.getLogger(__name__)


def _load_signer(setting_name: str, keypair_data) -> KeypairSigner | None:
    if not keypair_data:
        return None

    encryption_key = solana_mint_settings.KEYPAIR_ENCRYPTION_KEY
    if encryption_key and isinstance(keypair_data, str):
        try:
            keypair_data = KeypairEncryptionService(encryption_key).decrypt(
                keypair_data
            )
        except ValueError as e:
            logger.error(f"Could not decrypt {setting_name}: {e}")
            raise ImproperlyConfigured(
                f"Invalid {setting_name} in settings. It could not be decrypted "
                f"with KEYPAIR_ENCRYPTION_KEY. Error: {e}"
            )

    try:
        return KeypairSigner(parse_keypair(keypair_data))
    except ValueError as e:
        logger.error(f"Invalid {setting_name}: {e}")
        raise ImproperlyConfigured(
            f"Invalid {setting_name} in settings. "
            "Supported formats: JSON string '[1,2,3,...]', Base58 string, or byte array. "
            f"Error: {e}"
        )


def build_wallet_signer() -> TwoTierSigner:
    """
    Builds the two-tier signer from SIGNER_KEYPAIR (primary) and
    FALLBACK_SIGNER_KEYPAIR (fallback).
    """
    primary = _load_signer("SIGNER_KEYPAIR", solana_mint_settings.SIGNER_KEYPAIR)
    fallback = _load_signer(
        "FALLBACK_SIGNER_KEYPAIR", solana_mint_settings.FALLBACK_SIGNER_KEYPAIR
    )

    if primary is None and fallback is None:
        raise ImproperlyConfigured(
            "SOLANA_MINT['SIGNER_KEYPAIR'] or SOLANA_MINT['FALLBACK_SIGNER_KEYPAIR'] "
            "is required in settings.py"
        )

    wallet_address = solana_mint_settings.WALLET_ADDRESS
    return TwoTierSigner(
        primary=primary,
        fallback=fallback,
        wallet_address=Pubkey.from_string(wallet_address) if wallet_address else None,
    )
