from __future__ import annotations

import base64
import binascii
import os
from typing import Any, Optional

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from common import features
from common.config import get_config

from .errors import ConfigurationError, DecryptionError


PREFIX = "--ENCR--"
PREFIX_FEATURE = "db_encryption_prefix"
IV_SIZE = 16
KEY_SIZE = 32


def _present(data: Any) -> bool:
    return data is not None and str(data).strip() != ""


class EncryptedColumn:
    """
    Codec between plaintext and the stored text form of an encrypted field.

    Stored form: `[--ENCR--]base64(AES-256-CBC(plaintext) + iv)`.

    - `dump()` encrypts with a fresh random IV on every call. Blank input and
      a disabled column pass the value through unchanged.
    - `load()` decrypts when prefix mode is off, or when the prefix marker is
      present; any other text is returned as-is (legacy plaintext).
    - Prefix mode comes from the `use_prefix` option when given, otherwise it
      is on while the `db_encryption_prefix` feature is inactive.
    """

    def __init__(
        self,
        *,
        key: Optional[str | bytes] = None,
        use_prefix: Optional[bool] = None,
        disable: bool = False,
    ) -> None:
        self._key = key
        self._use_prefix = use_prefix
        self.disabled = bool(disable)

    @property
    def enabled(self) -> bool:
        return not self.disabled

    @property
    def key(self) -> bytes:
        # Read lazily and cached per instance
        if self._key is None:
            self._key = get_config().encryption.key
            if self._key is None:
                raise ConfigurationError("encryption key is not configured")
        key = self._key.encode("utf-8") if isinstance(self._key, str) else bytes(self._key)
        if len(key) < KEY_SIZE:
            raise ConfigurationError(f"encryption key must be at least {KEY_SIZE} bytes")
        return key[:KEY_SIZE]

    def use_prefix(self) -> bool:
        if self._use_prefix is not None:
            return self._use_prefix
        return features.feature_inactive(PREFIX_FEATURE)

    def prefix_used(self, data: str) -> bool:
        return data.startswith(PREFIX)

    # -------- Codec --------
    def load(self, data: Any) -> Optional[str]:
        if data is None:
            return None
        data = str(data)
        return self.decrypt(data) if self._should_decrypt(data) else data

    def dump(self, data: Any) -> Any:
        if _present(data) and self.enabled:
            return self.encrypt(str(data))
        return data

    def _should_decrypt(self, data: str) -> bool:
        return _present(data) and (not self.use_prefix() or self.prefix_used(data))

    def encrypt(self, data: str) -> str:
        iv = os.urandom(IV_SIZE)
        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(data.encode("utf-8")) + padder.finalize()
        encryptor = self._cipher(iv).encryptor()
        encrypted = encryptor.update(padded) + encryptor.finalize()

        encoded = base64.b64encode(encrypted + iv).decode("ascii")
        return f"{PREFIX}{encoded}" if self.use_prefix() else encoded

    def decrypt(self, data: str) -> str:
        if self.prefix_used(data):
            data = data[len(PREFIX):]

        try:
            raw = base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as ex:
            raise DecryptionError("Failed to decode encrypted value: invalid base64") from ex
        if len(raw) <= IV_SIZE:
            raise DecryptionError("Failed to decrypt value: ciphertext too short")

        iv, body = raw[-IV_SIZE:], raw[:-IV_SIZE]
        try:
            decryptor = self._cipher(iv).decryptor()
            padded = decryptor.update(body) + decryptor.finalize()
            unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
            plain = unpadder.update(padded) + unpadder.finalize()
            return plain.decode("utf-8")
        except ValueError as ex:
            # Covers bad block length, bad padding and invalid UTF-8
            raise DecryptionError("Failed to decrypt value: invalid ciphertext") from ex

    def _cipher(self, iv: bytes) -> Cipher:
        return Cipher(algorithms.AES(self.key), modes.CBC(iv))
