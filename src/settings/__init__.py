"""
Typed settings records with encrypted fields.

Records declare their fields with `Attribute`; nested records, ordered
collections of records and encrypted values share one load / merge /
serialize protocol. Encrypted fields are stored as `--ENCR--`-prefixed
AES-256-CBC ciphertext and decrypted only on read.
"""

from .attribute import Attribute, Kind
from .base import DefaultSettings, Settings
from .collection import Collection
from .encrypted_column import EncryptedColumn
from .encrypted_value import EncryptedValue
from .errors import (
    ConfigurationError,
    DecryptionError,
    MutationOnImmutable,
    NotSupportedError,
    SettingsError,
)
from .model import Model

__all__ = [
    "Attribute",
    "Collection",
    "ConfigurationError",
    "DecryptionError",
    "DefaultSettings",
    "EncryptedColumn",
    "EncryptedValue",
    "Kind",
    "Model",
    "MutationOnImmutable",
    "NotSupportedError",
    "Settings",
    "SettingsError",
]
