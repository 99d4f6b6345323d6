"""
DecentraID Encryption Service
AES-256-CBC envelopes for personal data held off-chain.

Envelope wire format: hex(iv) + ":" + hex(ciphertext)
"""

import os
import json
import hashlib
from dataclasses import dataclass
from typing import Any, Union
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives import padding

from decentraid.errors import ConfigurationError, DecryptionError


KEY_SIZE = 32
IV_SIZE = 16
BLOCK_SIZE = 16


@dataclass(frozen=True)
class EncryptedEnvelope:
    """IV and ciphertext of one encryption."""
    iv: bytes
    ciphertext: bytes

    def serialize(self) -> str:
        return f"{self.iv.hex()}:{self.ciphertext.hex()}"

    @classmethod
    def parse(cls, serialized: str) -> "EncryptedEnvelope":
        """
        Parse the serialized form.

        Raises:
            DecryptionError: if the form is not two non-empty hex segments
                or the IV is not 16 bytes
        """
        if not isinstance(serialized, str):
            raise DecryptionError("Envelope must be a string")

        parts = serialized.split(":")
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise DecryptionError("Envelope must be '<hex iv>:<hex ciphertext>'")

        try:
            iv = bytes.fromhex(parts[0])
            ciphertext = bytes.fromhex(parts[1])
        except ValueError as e:
            raise DecryptionError("Envelope segments must be hex encoded") from e

        if len(iv) != IV_SIZE:
            raise DecryptionError(f"IV must be {IV_SIZE} bytes, got {len(iv)}")

        return cls(iv=iv, ciphertext=ciphertext)


class EncryptionService:
    """AES-256-CBC encryption service for identity payloads."""

    def __init__(self, key: bytes):
        """
        Initialize encryption service.

        Args:
            key: 32-byte (256-bit) symmetric key
        """
        if not isinstance(key, bytes) or len(key) != KEY_SIZE:
            raise ConfigurationError("Encryption key must be 32 bytes (256 bits)")
        self._key = key

    @classmethod
    def from_hex(cls, key_hex: str) -> "EncryptionService":
        """Build from a hex-encoded key."""
        try:
            key = bytes.fromhex(key_hex or "")
        except ValueError as e:
            raise ConfigurationError("Encryption key must be hex encoded") from e
        return cls(key)

    def _cipher(self, iv: bytes) -> Cipher:
        return Cipher(algorithms.AES(self._key), modes.CBC(iv))

    def encrypt(self, data: bytes) -> EncryptedEnvelope:
        """
        Encrypt data using AES-256-CBC.

        Args:
            data: Raw bytes to encrypt

        Returns:
            Envelope holding a fresh random IV and the ciphertext
        """
        # Fresh IV per call, never reused under the same key
        iv = os.urandom(IV_SIZE)

        padder = padding.PKCS7(128).padder()
        padded_data = padder.update(data) + padder.finalize()

        encryptor = self._cipher(iv).encryptor()
        ciphertext = encryptor.update(padded_data) + encryptor.finalize()

        return EncryptedEnvelope(iv=iv, ciphertext=ciphertext)

    def decrypt(self, envelope: Union[EncryptedEnvelope, str]) -> bytes:
        """
        Decrypt an envelope or its serialized form.

        Returns:
            Decrypted raw bytes

        Raises:
            DecryptionError: on a malformed envelope, bad block alignment,
                or invalid padding (usually a wrong key)
        """
        if not isinstance(envelope, EncryptedEnvelope):
            envelope = EncryptedEnvelope.parse(envelope)

        ciphertext = envelope.ciphertext
        if not ciphertext or len(ciphertext) % BLOCK_SIZE != 0:
            raise DecryptionError("Ciphertext length is not a multiple of the block size")

        decryptor = self._cipher(envelope.iv).decryptor()
        padded_data = decryptor.update(ciphertext) + decryptor.finalize()

        unpadder = padding.PKCS7(128).unpadder()
        try:
            return unpadder.update(padded_data) + unpadder.finalize()
        except ValueError as e:
            raise DecryptionError("Invalid padding") from e

    def encrypt_json(self, obj: Any) -> str:
        """Encrypt a JSON-serializable object and return the serialized envelope."""
        plaintext = json.dumps(obj, separators=(",", ":")).encode("utf-8")
        return self.encrypt(plaintext).serialize()

    def decrypt_json(self, serialized: str) -> Any:
        """Decrypt a serialized envelope holding JSON."""
        plaintext = self.decrypt(serialized)
        try:
            return json.loads(plaintext.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise DecryptionError("Decrypted payload is not valid JSON") from e


def compute_sha256(data: Union[bytes, str]) -> str:
    """Compute SHA256 hash of data."""
    if isinstance(data, str):
        data = data.encode('utf-8')
    return hashlib.sha256(data).hexdigest()
