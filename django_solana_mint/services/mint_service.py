import logging

from solders.keypair import Keypair

from django_solana_mint.choices import SubmissionKindTypes
from django_solana_mint.exceptions import StoreItemNotMintableError
from django_solana_mint.models import SolanaSubmission, StoreItem
from django_solana_mint.services.submission_service import SubmissionService
from django_solana_mint.services.transfer_service import parse_recipient
from django_solana_mint.settings import solana_mint_settings
from django_solana_mint.solana.base_solana_client import BaseSolanaClient
from django_solana_mint.solana.dtos import BuiltMessageDTO, SubmissionConfig
from django_solana_mint.solana.solana_transaction_builder import (
    SolanaTransactionBuilder,
)

logger = logging.getLogger(__name__)


class MintService(SubmissionService):
    def mint_store_item(
        self, store_item: StoreItem, owner_address: str | None = None
    ) -> SolanaSubmission:
        """
        Mints a one-of-one token for a store item. The wallet pays and keeps the
        mint authority; the token lands in the owner's associated token account.
        """
        if not store_item.is_active:
            raise StoreItemNotMintableError(
                f"Store item {store_item.id} is not active"
            )

        payer = self.signer.wallet_address
        owner = parse_recipient(owner_address) if owner_address else payer
        mint_keypair = Keypair()

        submission = self.start_submission(
            SubmissionKindTypes.MINT,
            str(payer),
            recipient_address=str(owner),
            store_item=store_item,
            mint_address=str(mint_keypair.pubkey()),
            meta_data={
                "name": store_item.name,
                "symbol": store_item.nft_symbol,
                "uri": store_item.full_metadata_uri,
            },
        )
        logger.info(
            f"Minting store item '{store_item.name}' to {owner}, mint: {mint_keypair.pubkey()}"
        )

        async def build_message(client: BaseSolanaClient) -> BuiltMessageDTO:
            return await SolanaTransactionBuilder(
                base_solana_client=client
            ).create_nft_mint_message(
                payer=payer, owner=owner, mint_keypair=mint_keypair
            )

        return self.run_submission(
            submission,
            build_message,
            SubmissionConfig.from_settings(solana_mint_settings.MINT_SUBMISSION),
        )
