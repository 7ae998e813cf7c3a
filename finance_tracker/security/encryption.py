"""AES-256-CBC encryption of sensitive strings at rest

Token framing:
- default: hex(iv || ciphertext), with a fresh random 16-byte IV per call
- legacy (fixed_iv=True): hex(ciphertext) under an all-zero IV

The legacy framing reproduces the scheme older records were written with.
Reusing one IV under one key makes encryption deterministic, so equal
plaintexts produce equal tokens and leak equality. Use it only to read or
migrate legacy data.
"""

import logging
import os
import secrets
from dataclasses import dataclass

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from finance_tracker.config import Settings
from finance_tracker.domain.exceptions import CryptoError
from finance_tracker.infrastructure.observability.logging import log_crypto_failure
from finance_tracker.infrastructure.observability.metrics import record_crypto_operation

KEY_SIZE_BYTES = 32  # AES-256
BLOCK_SIZE_BYTES = 16
ZERO_IV = bytes(BLOCK_SIZE_BYTES)

logger = logging.getLogger(__name__)


def generate_key_material() -> str:
    """Random key material suitable for ENCRYPTION_KEY (64 hex characters)"""
    return secrets.token_hex(KEY_SIZE_BYTES)


@dataclass(frozen=True)
class EncryptionConfig:
    """Key and framing mode, built once at startup and injected"""

    key: bytes
    fixed_iv: bool = False

    def __post_init__(self):
        if not isinstance(self.key, bytes) or len(self.key) != KEY_SIZE_BYTES:
            raise CryptoError(f"Encryption key must be exactly {KEY_SIZE_BYTES} bytes")

    def __repr__(self) -> str:
        return f"EncryptionConfig(key=<redacted>, fixed_iv={self.fixed_iv})"

    @classmethod
    def from_key_material(cls, key_material: str | None, fixed_iv: bool = False) -> "EncryptionConfig":
        """
        Build a config from hex key material.

        Raises:
            CryptoError: If key material is missing, not hex, or not 256 bits
        """
        if not key_material:
            raise CryptoError("Encryption key is not configured (set ENCRYPTION_KEY)")
        if not isinstance(key_material, str):
            raise CryptoError(f"Encryption key must be a hex string, got {type(key_material).__name__}")
        try:
            key = bytes.fromhex(key_material.strip())
        except ValueError as e:
            raise CryptoError("Encryption key must be a hex string") from e
        if len(key) != KEY_SIZE_BYTES:
            raise CryptoError(
                f"Encryption key must be {KEY_SIZE_BYTES * 2} hex characters, got {len(key_material.strip())}"
            )
        return cls(key=key, fixed_iv=fixed_iv)

    @classmethod
    def from_settings(cls, settings: Settings) -> "EncryptionConfig":
        return cls.from_key_material(settings.encryption_key, fixed_iv=settings.encryption_legacy_fixed_iv)


class EncryptionService:
    """Reversible protection of string payloads for storage"""

    def __init__(self, config: EncryptionConfig):
        self.config = config
        if config.fixed_iv:
            logger.warning(
                "Encryption running with a fixed zero IV; identical plaintexts produce identical ciphertexts",
                extra={"step": "crypto", "operation": "configure"},
            )

    def encrypt(self, plaintext: str) -> str:
        """
        Encrypt a UTF-8 string.

        Returns:
            Lowercase hex token (see module docstring for framing)

        Raises:
            CryptoError: If plaintext is not a string
        """
        try:
            if not isinstance(plaintext, str):
                raise CryptoError(f"Can only encrypt str, got {type(plaintext).__name__}")

            iv = ZERO_IV if self.config.fixed_iv else os.urandom(BLOCK_SIZE_BYTES)
            padder = padding.PKCS7(BLOCK_SIZE_BYTES * 8).padder()
            padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()

            encryptor = Cipher(algorithms.AES(self.config.key), modes.CBC(iv)).encryptor()
            ciphertext = encryptor.update(padded) + encryptor.finalize()

        except CryptoError as e:
            record_crypto_operation("encrypt", success=False)
            log_crypto_failure("encrypt", e)
            raise

        record_crypto_operation("encrypt", success=True)
        if self.config.fixed_iv:
            return ciphertext.hex()
        return (iv + ciphertext).hex()

    def decrypt(self, token: str) -> str:
        """
        Decrypt a token produced by encrypt() under the same config.

        Raises:
            CryptoError: On malformed hex, wrong length, bad padding, or
                plaintext that is not valid UTF-8
        """
        try:
            plaintext = self._decrypt(token)
        except CryptoError as e:
            record_crypto_operation("decrypt", success=False)
            log_crypto_failure("decrypt", e)
            raise

        record_crypto_operation("decrypt", success=True)
        return plaintext

    def _decrypt(self, token: str) -> str:
        if not isinstance(token, str):
            raise CryptoError(f"Can only decrypt str, got {type(token).__name__}")
        try:
            raw = bytes.fromhex(token)
        except ValueError as e:
            raise CryptoError("Ciphertext is not valid hex") from e

        if self.config.fixed_iv:
            iv, ciphertext = ZERO_IV, raw
        else:
            iv, ciphertext = raw[:BLOCK_SIZE_BYTES], raw[BLOCK_SIZE_BYTES:]

        if not ciphertext or len(ciphertext) % BLOCK_SIZE_BYTES != 0:
            raise CryptoError("Ciphertext has invalid length")

        decryptor = Cipher(algorithms.AES(self.config.key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()

        unpadder = padding.PKCS7(BLOCK_SIZE_BYTES * 8).unpadder()
        try:
            data = unpadder.update(padded) + unpadder.finalize()
        except ValueError as e:
            raise CryptoError("Ciphertext padding is corrupt") from e

        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise CryptoError("Decrypted payload is not valid UTF-8") from e
