from __future__ import annotations

import pytest
from pydantic import ValidationError

from common import config, features


def test_from_env(monkeypatch):
    monkeypatch.setenv(config.ENV_ENCRYPTION_KEY, "k" * 32)
    monkeypatch.setenv(config.ENV_ACTIVE_FEATURES, "db_encryption_prefix, Other\nother")
    cfg = config.Config.from_env()
    assert cfg.encryption.key == "k" * 32
    assert cfg.active_features == ["db_encryption_prefix", "other"]


def test_from_env_defaults(monkeypatch):
    monkeypatch.delenv(config.ENV_ENCRYPTION_KEY, raising=False)
    monkeypatch.setenv(config.ENV_ACTIVE_FEATURES, "")
    cfg = config.Config.from_env()
    assert cfg.encryption.key is None
    assert cfg.active_features == []


def test_short_key_is_rejected():
    with pytest.raises(ValidationError):
        config.EncryptionConfig(key="short")


def test_get_config_reads_env_once(monkeypatch):
    config.reset_config()
    monkeypatch.setenv(config.ENV_ENCRYPTION_KEY, "a" * 32)
    first = config.get_config()
    monkeypatch.setenv(config.ENV_ENCRYPTION_KEY, "b" * 32)
    assert config.get_config() is first
    assert first.encryption.key == "a" * 32

    config.reset_config()
    assert config.get_config().encryption.key == "b" * 32


def test_feature_flags_from_config():
    config.set_config(config.Config(active_features=["db_encryption_prefix"]))
    assert features.feature_active("db_encryption_prefix")
    assert features.feature_inactive("something_else")


def test_feature_overrides_win():
    config.set_config(config.Config(active_features=["db_encryption_prefix"]))
    features.deactivate("db_encryption_prefix")
    assert features.feature_inactive("db_encryption_prefix")

    features.activate("new_thing")
    assert features.feature_active("NEW_THING")

    features.reset()
    assert features.feature_active("db_encryption_prefix")
    assert features.feature_inactive("new_thing")
