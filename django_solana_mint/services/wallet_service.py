import logging
from typing import Callable

import httpx
from asgiref.sync import async_to_sync
from solana.exceptions import SolanaRpcException
from solana.rpc.core import RPCException

from django_solana_mint.exceptions import WalletBalanceUnavailableError
from django_solana_mint.services.wallet_signer_service import build_wallet_signer
from django_solana_mint.solana.base_solana_client import BaseSolanaClient
from django_solana_mint.solana.dtos import WalletBalanceDTO
from django_solana_mint.solana.signers import TwoTierSigner

logger = logging.getLogger(__name__)


class WalletService:
    """
    Reports the address and SOL balance of the wallet that pays for submissions.
    """

    def __init__(
        self,
        signer: TwoTierSigner | None = None,
        client_factory: Callable[[], BaseSolanaClient] = BaseSolanaClient,
    ):
        self._signer = signer
        self.client_factory = client_factory

    @property
    def signer(self) -> TwoTierSigner:
        if self._signer is None:
            self._signer = build_wallet_signer()
        return self._signer

    def get_balance(self) -> WalletBalanceDTO:
        wallet_address = self.signer.wallet_address
        try:
            balance = async_to_sync(self._fetch_balance)(wallet_address)
        except (SolanaRpcException, RPCException, httpx.HTTPError) as e:
            logger.warning(f"Failed to fetch balance of {wallet_address}: {e}")
            raise WalletBalanceUnavailableError(
                f"Balance of {wallet_address} is unavailable: {e}"
            )

        logger.info(f"Wallet {wallet_address} balance: {balance} lamports")
        return WalletBalanceDTO(wallet_address=wallet_address, balance_lamports=balance)

    async def _fetch_balance(self, wallet_address) -> int:
        async with self.client_factory() as client:
            return await client.get_balance_with_retry(wallet_address)
