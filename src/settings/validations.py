"""
Declarative field rules.

A rule is a callable taking the current field value and returning a symbolic
error code (e.g. "blank") or None when the value passes. Codes are never
translated; callers render their own messages.

    name = Attribute(str, validators=[presence(), length(maximum=64)])
"""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

from .encrypted_value import EncryptedValue


Rule = Callable[[Any], Optional[str]]


def _plain(value: Any) -> Any:
    return value.decrypt() if isinstance(value, EncryptedValue) else value


def _blank(value: Any) -> bool:
    value = _plain(value)
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return len(value) == 0
    except TypeError:
        return False


def presence() -> Rule:
    def rule(value: Any) -> Optional[str]:
        return "blank" if _blank(value) else None

    return rule


def length(*, minimum: Optional[int] = None, maximum: Optional[int] = None) -> Rule:
    """Bound the length of a present value; absent values are left to `presence`."""

    def rule(value: Any) -> Optional[str]:
        value = _plain(value)
        if value is None:
            return None
        size = len(value)
        if minimum is not None and size < minimum:
            return "too_short"
        if maximum is not None and size > maximum:
            return "too_long"
        return None

    return rule


def inclusion(values: Iterable[Any]) -> Rule:
    allowed = list(values)

    def rule(value: Any) -> Optional[str]:
        value = _plain(value)
        if value is None or value in allowed:
            return None
        return "inclusion"

    return rule


def format(pattern: str | re.Pattern[str]) -> Rule:  # noqa: A001
    regex = re.compile(pattern) if isinstance(pattern, str) else pattern

    def rule(value: Any) -> Optional[str]:
        value = _plain(value)
        if value is None:
            return None
        return None if regex.search(str(value)) else "invalid"

    return rule


class Errors:
    """Attribute name -> list of symbolic error codes."""

    def __init__(self) -> None:
        self._codes: Dict[str, List[str]] = {}

    def add(self, name: str, code: Optional[str] = None) -> None:
        self._codes.setdefault(str(name), []).append(code or "invalid")

    def clear(self) -> None:
        self._codes.clear()

    def __getitem__(self, name: str) -> List[str]:
        return list(self._codes.get(str(name), []))

    def __contains__(self, name: object) -> bool:
        return str(name) in self._codes

    def __iter__(self) -> Iterator[str]:
        return iter(self._codes)

    def __len__(self) -> int:
        return sum(len(v) for v in self._codes.values())

    def __bool__(self) -> bool:
        return bool(self._codes)

    def to_dict(self) -> Dict[str, List[str]]:
        return {k: list(v) for k, v in self._codes.items()}

    def __repr__(self) -> str:
        return f"Errors({self._codes!r})"
