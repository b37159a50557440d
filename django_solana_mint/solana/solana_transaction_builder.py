from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.system_program import (
    CreateAccountParams,
    TransferParams,
    create_account,
    transfer,
)
from spl.token.constants import MINT_LEN, TOKEN_PROGRAM_ID
from spl.token.instructions import (
    create_associated_token_account,
    get_associated_token_address,
    initialize_mint,
    mint_to,
)
from spl.token.models import InitializeMintParams, MintToParams

from django_solana_mint.solana.base_solana_client import BaseSolanaClient
from django_solana_mint.solana.dtos import BuiltMessageDTO

NFT_DECIMALS = 0
NFT_SUPPLY = 1


class SolanaTransactionBuilder:
    def __init__(self, base_solana_client: BaseSolanaClient):
        self.base_solana_client = base_solana_client

    def create_native_transfer_message(
        self, sender: Pubkey, recipient: Pubkey, lamports: int
    ) -> BuiltMessageDTO:
        transfer_ix = transfer(
            TransferParams(
                from_pubkey=sender,
                to_pubkey=recipient,
                lamports=lamports,
            )
        )
        msg = Message(
            payer=sender,
            instructions=[transfer_ix],
        )
        return BuiltMessageDTO(message=msg)

    async def create_nft_mint_message(
        self,
        payer: Pubkey,
        owner: Pubkey,
        mint_keypair: Keypair,
        token_program_id: Pubkey = TOKEN_PROGRAM_ID,
    ) -> BuiltMessageDTO:
        """
        Builds the token instructions of a one-of-one mint: mint account creation,
        mint initialization with 0 decimals, owner's associated token account and a
        single token minted into it. The payer is mint and freeze authority.
        """
        mint = mint_keypair.pubkey()
        rent_lamports = await self.base_solana_client.get_minimum_balance_for_rent_exemption_with_retry(
            MINT_LEN
        )
        owner_associated_token_address = get_associated_token_address(
            owner, mint, token_program_id
        )

        instructions = [
            create_account(
                CreateAccountParams(
                    from_pubkey=payer,
                    to_pubkey=mint,
                    lamports=rent_lamports,
                    space=MINT_LEN,
                    owner=token_program_id,
                )
            ),
            initialize_mint(
                InitializeMintParams(
                    decimals=NFT_DECIMALS,
                    program_id=token_program_id,
                    mint=mint,
                    mint_authority=payer,
                    freeze_authority=payer,
                )
            ),
            create_associated_token_account(
                payer=payer,
                owner=owner,
                mint=mint,
                token_program_id=token_program_id,
            ),
            mint_to(
                MintToParams(
                    program_id=token_program_id,
                    mint=mint,
                    dest=owner_associated_token_address,
                    mint_authority=payer,
                    amount=NFT_SUPPLY,
                )
            ),
        ]

        msg = Message(payer=payer, instructions=instructions)
        return BuiltMessageDTO(
            message=msg,
            extra_signers=(mint_keypair,),
            mint_address=mint,
        )
