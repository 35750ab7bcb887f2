from __future__ import annotations

import os
from typing import List, Optional

from pydantic import BaseModel, Field


# Environment variable names read by `Config.from_env`
ENV_ENCRYPTION_KEY = "SETTINGS_ENCRYPTION_KEY"
ENV_ACTIVE_FEATURES = "SETTINGS_ACTIVE_FEATURES"


def _getenv(name: str, default: Optional[str] = None) -> Optional[str]:
    val = os.environ.get(name)
    return val if val not in (None, "") else default


def _parse_features(s: Optional[str]) -> List[str]:
    if not s:
        return []
    raw = s.replace("\n", ",").replace(" ", ",")
    names = [t.strip().lower() for t in raw.split(",") if t.strip()]
    # Dedup while preserving order
    seen: set[str] = set()
    out: List[str] = []
    for n in names:
        if n not in seen:
            seen.add(n)
            out.append(n)
    return out


class EncryptionConfig(BaseModel):
    """Key material for encrypted columns. Only the first 32 bytes are used."""

    key: Optional[str] = Field(default=None, min_length=32)


class Config(BaseModel):
    """
    Process-wide configuration consumed by the settings engine.

    Fields
    - encryption.key: AES key source for `EncryptedColumn` (None if unset).
    - active_features: names of feature flags switched on for this process.
    """

    encryption: EncryptionConfig = Field(default_factory=EncryptionConfig)
    active_features: List[str] = Field(default_factory=list)

    @classmethod
    def from_env(cls) -> "Config":
        return cls(
            encryption=EncryptionConfig(key=_getenv(ENV_ENCRYPTION_KEY)),
            active_features=_parse_features(_getenv(ENV_ACTIVE_FEATURES)),
        )


_config: Optional[Config] = None


def get_config() -> Config:
    """Return the cached process config, reading the environment on first use."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def set_config(config: Config) -> None:
    global _config
    _config = config


def reset_config() -> None:
    global _config
    _config = None
