from __future__ import annotations

import pytest

from settings.encrypted_column import PREFIX, EncryptedColumn
from settings.encrypted_value import EncryptedValue
from settings.errors import DecryptionError


def test_empty_value():
    value = EncryptedValue()
    assert value.decrypt() is None
    assert value.dump() is None
    assert str(value) == ""
    assert value == None  # noqa: E711


def test_plaintext_is_encrypted_on_dump():
    value = EncryptedValue("foo")
    dumped = value.dump()
    assert dumped != "foo"
    assert EncryptedColumn(use_prefix=False).load(dumped) == "foo"


def test_loaded_value_is_decrypted_lazily():
    stored = EncryptedColumn(use_prefix=False).dump("foo")
    value = EncryptedValue()
    value.load(stored)
    assert value.value == stored
    assert value.decrypt() == "foo"


def test_reads_prefixed_and_unprefixed_ciphertext():
    for use_prefix in (True, False):
        value = EncryptedValue()
        value.load(EncryptedColumn(use_prefix=use_prefix).dump("foo"))
        assert value.decrypt() == "foo"


def test_load_does_not_double_encrypt():
    stored = EncryptedColumn(use_prefix=True).dump("foo")
    value = EncryptedValue()
    value.load(stored)
    assert EncryptedColumn(use_prefix=False).load(value.dump()) == "foo"


def test_prefix_column_treats_unmarked_text_as_plaintext():
    value = EncryptedValue(column=EncryptedColumn(use_prefix=True))
    value.load("legacy")
    assert value.decrypt() == "legacy"
    assert value.dump().startswith(PREFIX)


def test_load_from_another_value():
    value = EncryptedValue()
    value.load(EncryptedValue("baz"))
    assert value.decrypt() == "baz"


def test_malformed_stored_value_raises_on_decrypt():
    value = EncryptedValue()
    value.load("%%% not ciphertext")
    with pytest.raises(DecryptionError):
        value.decrypt()


def test_equality_by_plaintext():
    stored = EncryptedColumn(use_prefix=True).dump("foo")
    loaded = EncryptedValue()
    loaded.load(stored)
    assert loaded == EncryptedValue("foo")
    assert loaded == "foo"
    assert loaded != EncryptedValue("bar")


def test_repr_hides_plaintext():
    assert "foo" not in repr(EncryptedValue("foo"))
