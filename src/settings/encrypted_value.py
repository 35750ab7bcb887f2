from __future__ import annotations

from typing import Any, Mapping, Optional

from .encrypted_column import EncryptedColumn


class EncryptedValue:
    """
    Field value that keeps a secret obfuscated outside the process.

    - `EncryptedValue("foo")` holds plaintext as given.
    - `load(raw)` stores the raw storage form verbatim; it is only decoded
      when `decrypt()` is called.
    - `dump()` returns the column-encrypted form of the current plaintext, so
      serialized output never carries plaintext while encryption is enabled.

    The default column runs with prefix mode off: stored text is always
    decrypted, with or without the `--ENCR--` marker.

    Equality compares decrypted plaintext.
    """

    def __init__(self, value: Any = None, *, column: Optional[EncryptedColumn] = None) -> None:
        self._column = column
        self._raw: Any = None
        self._plaintext: Optional[str] = None
        self._stored = False
        if isinstance(value, EncryptedValue):
            self._copy_from(value)
            if column is None:
                self._column = value._column
        elif value is not None:
            self._plaintext = str(value)

    @property
    def column(self) -> EncryptedColumn:
        if self._column is None:
            self._column = EncryptedColumn(use_prefix=False)
        return self._column

    @property
    def value(self) -> Any:
        """The held value as stored: raw storage text after `load`, else plaintext."""
        return self._raw if self._stored else self._plaintext

    def load(self, raw: Any, additional_attributes: Optional[Mapping[str, Any]] = None) -> None:
        if isinstance(raw, EncryptedValue):
            self._copy_from(raw)
            return
        self._raw = raw
        self._plaintext = None
        self._stored = True

    def decrypt(self) -> Optional[str]:
        if self._stored:
            return self.column.load(self._raw)
        return self._plaintext

    def dump(self) -> Any:
        return self.column.dump(self.decrypt())

    def _copy_from(self, other: "EncryptedValue") -> None:
        self._raw = other._raw
        self._plaintext = other._plaintext
        self._stored = other._stored

    def __str__(self) -> str:
        dumped = self.dump()
        return "" if dumped is None else str(dumped)

    def __repr__(self) -> str:
        return "EncryptedValue([FILTERED])" if self.value is not None else "EncryptedValue(None)"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, EncryptedValue):
            return self.decrypt() == other.decrypt()
        if other is None or isinstance(other, str):
            return self.decrypt() == other
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]
