from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping, Optional

from .attribute import Attribute
from .errors import NotSupportedError
from .model import Model


logger = logging.getLogger(__name__)


class Settings(Model):
    """
    Root settings record.

    Adds a save gate on top of `Model`: `save()` runs validation and, when
    the record is valid, calls the callback registered with `on_save`.
    An invalid record is not an error; `save()` just returns None and the
    field codes are available in `errors`. `merge()` never saves.
    """

    def __init__(self, data: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> None:
        self._on_save: Optional[Callable[[], Any]] = None
        super().__init__(data, **kwargs)

    def on_save(self, callback: Callable[[], Any]) -> "Settings":
        self._on_save = callback
        return self

    def save(self) -> Optional[bool]:
        if not self.is_valid():
            logger.debug(
                "Not saving %s: invalid fields %s", type(self).__name__, sorted(self.errors)
            )
            return None
        if self._on_save is not None:
            logger.debug("Running on_save callback for %s", type(self).__name__)
            self._on_save()
        return True

    def obfuscated(self) -> Dict[str, Any]:
        """Serialized form safe to show or store: secrets stay encrypted."""
        return self.to_dict()


class DefaultSettings(Settings):
    """Settings holding the declared defaults; frozen once constructed."""

    def __init__(self, data: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> None:
        super().__init__(data, **kwargs)
        self.freeze()

    def _guard_mutation(self, attr: Optional[Attribute] = None) -> None:
        if self.frozen:
            raise NotSupportedError("setting values is not supported on default settings")
        super()._guard_mutation(attr)

    def merge(self, data: Optional[Mapping[str, Any]] = None) -> None:
        raise NotSupportedError("merge is not supported on default settings")

    def set(self, name: Any, value: Any) -> Any:
        raise NotSupportedError("setting values is not supported on default settings")
