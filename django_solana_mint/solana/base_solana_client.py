import logging

import httpx
import stamina
from solana.exceptions import SolanaRpcException
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment
from solana.rpc.models import TxOpts
from solders.hash import Hash
from solders.pubkey import Pubkey
from solders.signature import Signature

from django_solana_mint.settings import solana_mint_settings
from django_solana_mint.solana.dtos import SignatureStatusDTO
from django_solana_mint.solana.utils import LAMPORTS_PER_SOL

solana_client_logger = logging.getLogger(__name__)

RETRYABLE_RPC_ERRORS = (SolanaRpcException, httpx.HTTPStatusError, httpx.RequestError)


class BaseSolanaClient:
    """
    Async RPC wrapper used by the submission flows.

    Read-only calls are retried with stamina. Sending is never retried here: a failed
    send is reported to the caller as is.
    """

    def __init__(self, rpc_url: str = None, commitment: Commitment = None):
        self._rpc_url = self._build_rpc_url(rpc_url)
        self._http_client = AsyncClient(
            endpoint=self._rpc_url,
            commitment=commitment or solana_mint_settings.RPC_COMMITMENT,
        )
        self.LAMPORTS_PER_SOL = LAMPORTS_PER_SOL

    @staticmethod
    def _build_rpc_url(rpc_url: str | None) -> str:
        """Builds Solana RPC endpoint URL with provided rpc_url parameter if needed."""
        final_url = rpc_url or solana_mint_settings.SOLANA_RPC_URL

        return final_url

    @property
    def http_client(self) -> AsyncClient:
        return self._http_client

    async def __aenter__(self) -> "BaseSolanaClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self._http_client.close()

    @stamina.retry(on=RETRYABLE_RPC_ERRORS, attempts=5, wait_initial=1.0, wait_max=5.0)
    async def get_latest_blockhash_with_retry(
        self, commitment: Commitment = None
    ) -> Hash:
        response = await self.http_client.get_latest_blockhash(commitment=commitment)
        return response.value.blockhash

    @stamina.retry(on=RETRYABLE_RPC_ERRORS, attempts=5, wait_initial=1.0, wait_max=5.0)
    async def get_minimum_balance_for_rent_exemption_with_retry(
        self, size: int, commitment: Commitment = None
    ) -> int:
        response = await self.http_client.get_minimum_balance_for_rent_exemption(
            size, commitment=commitment
        )
        return response.value

    @stamina.retry(on=RETRYABLE_RPC_ERRORS, attempts=5, wait_initial=1.0, wait_max=5.0)
    async def get_balance_with_retry(
        self, address: Pubkey, commitment: Commitment = None
    ) -> int:
        response = await self.http_client.get_balance(address, commitment=commitment)
        return response.value

    async def send_raw_transaction(
        self, payload: bytes, commitment: Commitment = None
    ) -> Signature:
        commitment = commitment or solana_mint_settings.RPC_COMMITMENT
        opts = TxOpts(
            skip_confirmation=True,
            skip_preflight=False,
            preflight_commitment=commitment,
        )
        try:
            response = await self.http_client.send_raw_transaction(payload, opts=opts)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 429:
                solana_client_logger.warning(
                    "Rate limit reached while sending transaction"
                )
            else:
                solana_client_logger.warning(f"send_transaction error: {str(e)}")
            raise
        return response.value

    async def get_signature_status(
        self, signature: Signature
    ) -> SignatureStatusDTO | None:
        response = await self.http_client.get_signature_statuses(
            [signature], search_transaction_history=True
        )
        transaction_status = response.value[0] if response.value else None

        if transaction_status is None:
            return None

        failure_reason = None
        if transaction_status.err is not None:
            failure_reason = str(transaction_status.err)

        return SignatureStatusDTO(
            confirmation_status=transaction_status.confirmation_status,
            failure_reason=failure_reason,
            slot=transaction_status.slot,
        )
