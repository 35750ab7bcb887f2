from __future__ import annotations


class SettingsError(Exception):
    """Base error for the settings engine."""


class MutationOnImmutable(SettingsError):
    """Raised when writing to a frozen record or a read-only attribute."""


class NotSupportedError(MutationOnImmutable):
    """Raised by default settings, which never accept merge or set."""


class DecryptionError(SettingsError, ValueError):
    """Stored ciphertext could not be decoded or decrypted."""


class ConfigurationError(SettingsError, RuntimeError):
    """Encryption key missing or unusable."""
