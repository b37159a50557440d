from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
import stamina
from solders.hash import Hash
from solders.keypair import Keypair
from solders.signature import Signature
from solders.transaction_status import TransactionConfirmationStatus

from django_solana_mint.models import StoreItem
from django_solana_mint.solana.dtos import SignatureStatusDTO

SIGNER_KEYPAIR = Keypair.from_seed(bytes([7] * 32))
FALLBACK_SIGNER_KEYPAIR = Keypair.from_seed(bytes([11] * 32))
TEST_SIGNATURE = Signature.from_bytes(bytes([1] * 64))
TEST_BLOCKHASH = Hash(bytes([8] * 32))
RECIPIENT_ADDRESS = "GjwcWFQYzemBtpUoN5fMAP2FZviTtMRWCmrppGuTthJS"


@pytest.fixture(autouse=True)
def stamina_testing():
    """
    Retries run without waiting in tests.
    """
    stamina.set_testing(True, attempts=3)
    yield
    stamina.set_testing(False)


@pytest.fixture
def test_settings():
    """
    Default test settings for SOLANA_MINT.
    Tests can override specific values as needed.
    """
    return {
        "SOLANA_RPC_URL": "https://api.devnet.solana.com",
        "SOLANA_CLUSTER": "devnet",
        "SIGNER_KEYPAIR": SIGNER_KEYPAIR.to_json(),
        "TRANSFER_SUBMISSION": {
            "MAX_RETRIES": 3,
            "POLL_INTERVAL_MS": 1,
            "TIMEOUT_MS": 1000,
        },
        "MINT_SUBMISSION": {"MAX_RETRIES": 3, "POLL_INTERVAL_MS": 1, "TIMEOUT_MS": 1000},
        "REWARD_AMOUNT_SOL": "0.001",
        "REWARD_COOLDOWN_SECONDS": 3,
    }


@pytest.fixture(autouse=True)
def configure_solana_mint(settings, test_settings):
    settings.SOLANA_MINT = test_settings
    return test_settings


@pytest.fixture
def signer_keypair():
    return SIGNER_KEYPAIR


@pytest.fixture
def fallback_signer_keypair():
    return FALLBACK_SIGNER_KEYPAIR


@pytest.fixture
def store_item(db):
    return StoreItem.objects.create(
        name="Shiny Sticker",
        symbol="SHNY",
        description="A sticker from the store",
        price_in_sol=Decimal("0.05"),
        metadata_uri="QmYwAPJzv5CZsnAzt8auVZRn1pfejgXkFGxVXnBY5Vkfu8",
    )


@pytest.fixture
def fake_solana_client():
    """
    Stand-in for BaseSolanaClient. Sends succeed and the first status query
    reports a confirmed transaction unless a test says otherwise.
    """
    client = MagicMock()
    client.__aenter__.return_value = client
    client.__aexit__.return_value = None
    client.get_latest_blockhash_with_retry = AsyncMock(return_value=TEST_BLOCKHASH)
    client.get_balance_with_retry = AsyncMock(return_value=10_000_000_000)
    client.get_minimum_balance_for_rent_exemption_with_retry = AsyncMock(
        return_value=1_461_600
    )
    client.send_raw_transaction = AsyncMock(return_value=TEST_SIGNATURE)
    client.get_signature_status = AsyncMock(
        return_value=SignatureStatusDTO(
            confirmation_status=TransactionConfirmationStatus.Confirmed, slot=1
        )
    )
    return client


@pytest.fixture
def client_factory(fake_solana_client):
    return lambda: fake_solana_client
