import logging
from typing import Iterable, Sequence

from solders.hash import Hash
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from django_solana_mint.choices import SignerTierTypes
from django_solana_mint.exceptions import SigningError
from django_solana_mint.solana.dtos import SignedTransactionDTO

logger = logging.getLogger(__name__)


def required_signers(message: Message) -> list[Pubkey]:
    return list(message.account_keys[: message.header.num_required_signatures])


class KeypairSigner:
    def __init__(self, keypair: Keypair):
        self.keypair = keypair

    @property
    def pubkey(self) -> Pubkey:
        return self.keypair.pubkey()

    def can_sign(self, message: Message, extra_signers: Iterable[Keypair] = ()) -> bool:
        available = {self.pubkey} | {kp.pubkey() for kp in extra_signers}
        return all(signer in available for signer in required_signers(message))

    def sign(
        self,
        message: Message,
        recent_blockhash: Hash,
        extra_signers: Sequence[Keypair] = (),
    ) -> Transaction:
        # solders panics instead of raising when a required signer is missing
        if not self.can_sign(message, extra_signers):
            missing = set(required_signers(message)) - {self.pubkey} - {
                kp.pubkey() for kp in extra_signers
            }
            raise SigningError(
                f"Failed to sign transaction with {self.pubkey}: "
                f"missing signers {', '.join(sorted(map(str, missing)))}"
            )

        required = set(required_signers(message))
        # solders rejects keypairs that are not required signers of the message
        keypairs = [
            kp for kp in [self.keypair, *extra_signers] if kp.pubkey() in required
        ]
        try:
            return Transaction(
                from_keypairs=keypairs,
                message=message,
                recent_blockhash=recent_blockhash,
            )
        except Exception as e:
            raise SigningError(f"Failed to sign transaction with {self.pubkey}: {e}")


class TwoTierSigner:
    """
    Signs with the primary keypair when it covers the message signers,
    otherwise with the fallback. Errors of the chosen tier surface as SigningError.
    """

    def __init__(
        self,
        primary: KeypairSigner | None = None,
        fallback: KeypairSigner | None = None,
        wallet_address: Pubkey | None = None,
    ):
        if primary is None and fallback is None:
            raise ValueError("At least one signer tier must be configured")
        self.primary = primary
        self.fallback = fallback
        self._wallet_address = wallet_address

    @property
    def wallet_address(self) -> Pubkey:
        if self._wallet_address is not None:
            return self._wallet_address
        return (self.primary or self.fallback).pubkey

    def select(
        self, message: Message, extra_signers: Sequence[Keypair] = ()
    ) -> tuple[str, KeypairSigner]:
        if self.primary is not None and self.primary.can_sign(message, extra_signers):
            return SignerTierTypes.PRIMARY, self.primary

        if self.fallback is not None and self.fallback.can_sign(
            message, extra_signers
        ):
            if self.primary is not None:
                logger.warning(
                    f"Primary signer {self.primary.pubkey} can not sign for "
                    f"{self.wallet_address}, using fallback signer"
                )
            return SignerTierTypes.FALLBACK, self.fallback

        raise SigningError(
            f"No configured signer can sign for {', '.join(map(str, required_signers(message)))}"
        )

    def sign(
        self,
        message: Message,
        recent_blockhash: Hash,
        extra_signers: Sequence[Keypair] = (),
    ) -> SignedTransactionDTO:
        tier, signer = self.select(message, extra_signers)
        transaction = signer.sign(message, recent_blockhash, extra_signers)
        return SignedTransactionDTO(transaction=transaction, signer_tier=tier)
