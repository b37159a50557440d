import json
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from solana.rpc.commitment import Commitment, Confirmed, Finalized, Processed
from solders.keypair import Keypair
from solders.transaction_status import TransactionConfirmationStatus
from spl.token.constants import NATIVE_DECIMALS

LAMPORTS_PER_SOL = 10**NATIVE_DECIMALS

# Confirmation statuses that satisfy each commitment level
_REACHED_STATUSES = {
    Finalized: (TransactionConfirmationStatus.Finalized,),
    Confirmed: (
        TransactionConfirmationStatus.Confirmed,
        TransactionConfirmationStatus.Finalized,
    ),
    Processed: (
        TransactionConfirmationStatus.Processed,
        TransactionConfirmationStatus.Confirmed,
        TransactionConfirmationStatus.Finalized,
    ),
}


def parse_keypair(keypair_data: Any) -> Keypair:
    """
    Parse a keypair provided in multiple supported formats and return a `solders.keypair.Keypair`.

    Supported input formats:
    - JSON array string: "[1,2,3,...,64]" (string starting with '[')
    - Base58 string: e.g. "5J3mBb..."
    - Python list or bytes: [1,2,3,...] or b"..."

    Raises ValueError on unsupported/invalid input.
    """
    if isinstance(keypair_data, Keypair):
        return keypair_data

    if isinstance(keypair_data, str):
        s = keypair_data.strip()
        if s.startswith("["):
            try:
                arr = json.loads(s)
                return Keypair.from_bytes(bytes(arr))
            except Exception as e:
                raise ValueError(f"Failed to parse keypair from JSON array: {e}")
        try:
            return Keypair.from_base58_string(s)
        except Exception as e:
            raise ValueError(f"Failed to parse keypair from base58 string: {e}")

    if isinstance(keypair_data, (list, bytes)):
        try:
            return Keypair.from_bytes(bytes(keypair_data))
        except Exception as e:
            raise ValueError(f"Failed to parse keypair from bytes/list: {e}")

    raise ValueError(f"Unsupported keypair format: {type(keypair_data)}")


def commitment_reached(
    commitment: Commitment,
    confirmation_status: TransactionConfirmationStatus | None,
) -> bool:
    """
    Checks if a confirmation status reported by the network satisfies the requested commitment.
    """
    if confirmation_status is None:
        return False
    return confirmation_status in _REACHED_STATUSES.get(commitment, ())


def sol_to_lamports(amount: Decimal) -> int:
    return int(
        (Decimal(amount) * LAMPORTS_PER_SOL).quantize(
            Decimal("1"), rounding=ROUND_HALF_UP
        )
    )


def lamports_to_sol(lamports: int) -> Decimal:
    return Decimal(lamports) / Decimal(LAMPORTS_PER_SOL)


def shorten_address(value: str, chars: int = 4) -> str:
    value = str(value)
    if len(value) <= chars * 2:
        return value
    return f"{value[:chars]}...{value[-chars:]}"


def build_explorer_url(path: str, value: str, cluster: str) -> str:
    url = f"https://explorer.solana.com/{path}/{value}"
    if cluster and cluster != "mainnet-beta":
        url = f"{url}?cluster={cluster}"
    return url
