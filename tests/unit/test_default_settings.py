from __future__ import annotations

import pytest

from settings import (
    Attribute,
    DefaultSettings,
    EncryptedValue,
    MutationOnImmutable,
    NotSupportedError,
)


class Defaults(DefaultSettings):
    foo = Attribute(str, default="bar")
    timeout = Attribute(int, default=10)
    secret = Attribute.encrypted()


def test_fetches_defaults():
    settings = Defaults()
    assert settings.foo == "bar"
    assert settings.get("timeout") == 10
    assert settings.frozen


def test_accepts_values_at_construction():
    assert Defaults(timeout="30").timeout == 30


def test_does_not_allow_to_merge_anything():
    with pytest.raises(NotSupportedError, match="merge is not supported"):
        Defaults().merge({})


def test_does_not_allow_to_set_any_values():
    settings = Defaults()
    with pytest.raises(NotSupportedError, match="setting values is not supported"):
        settings.foo = "bar"
    with pytest.raises(NotSupportedError, match="setting values is not supported"):
        settings.set("foo", "bar")
    with pytest.raises(NotSupportedError):
        settings.set("unknown", "bar")


def test_not_supported_is_a_mutation_error():
    with pytest.raises(MutationOnImmutable):
        Defaults().update({"foo": "baz"})


def test_nested_operations_are_rejected():
    settings = Defaults()
    with pytest.raises(NotSupportedError):
        settings.load({"foo": "baz"})
    with pytest.raises(NotSupportedError):
        settings.delete("foo")
    assert settings.foo == "bar"


def test_encrypted_reads_do_not_mutate():
    settings = Defaults()
    assert isinstance(settings.secret, EncryptedValue)
    assert settings.secret.decrypt() is None
    assert settings.to_dict() == {"foo": "bar", "timeout": 10, "secret": None}
