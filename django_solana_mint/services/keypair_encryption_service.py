import logging

from cryptography.fernet import Fernet, InvalidToken
from django.core.exceptions import ImproperlyConfigured

solana_logger = logging.getLogger(__name__)


class KeypairEncryptionService:
    def __init__(self, encryption_key: str):
        try:
            self._fernet = Fernet(encryption_key.encode("utf-8"))
        except Exception as exc:
            raise ImproperlyConfigured("Invalid KEYPAIR_ENCRYPTION_KEY") from exc

    def encrypt(self, plaintext: str) -> str:
        try:
            return self._fernet.encrypt(plaintext.encode("utf-8")).decode("utf-8")
        except Exception as e:
            solana_logger.error(f"Failed to encrypt keypair: {e}")
            raise ValueError(f"Encryption error: {e}")

    def decrypt(self, ciphertext: str) -> str:
        try:
            return self._fernet.decrypt(ciphertext.encode("utf-8")).decode("utf-8")
        except InvalidToken:
            solana_logger.error("Failed to decrypt keypair: invalid token or key")
            raise ValueError("Decryption error: invalid token or key")
