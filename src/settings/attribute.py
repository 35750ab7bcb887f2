from __future__ import annotations

import copy
import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Iterable, List, Mapping, Optional

from pydantic import TypeAdapter, ValidationError

from .encrypted_value import EncryptedValue

if TYPE_CHECKING:
    from .model import Model


logger = logging.getLogger(__name__)


class Kind(str, Enum):
    SCALAR = "scalar"
    MODEL = "model"
    COLLECTION = "collection"
    ENCRYPTED = "encrypted"


class Attribute:
    """
    Declared field slot on a `Model`.

    Declared at class level and used as a descriptor, so `record.name` and
    `record.name = value` go through the same read/write rules as
    `record.get("name")` and `record.set("name", value)`:

    - writes check the owner's frozen state and the attribute's `mutable` flag
    - writes coerce the value according to `kind`
    - reading an encrypted attribute that was never written yields an empty
      `EncryptedValue`, stored on the owner unless the owner is frozen

    Use the constructors matching the kind:

        height = Attribute(int)
        awesome = Attribute(bool, default=True)
        item = Attribute.model(Item)
        items = Attribute.collection(Items)
        secret = Attribute.encrypted()
    """

    def __init__(
        self,
        type: Any = None,
        *,
        kind: Kind = Kind.SCALAR,
        default: Any = None,
        mutable: bool = True,
        validators: Optional[Iterable[Callable[[Any], Optional[str]]]] = None,
    ) -> None:
        self.type = type
        self.kind = Kind(kind)
        self.default = default
        self.mutable = mutable
        self.validators: List[Callable[[Any], Optional[str]]] = list(validators or [])
        self.name = ""
        self._adapter: Optional[TypeAdapter] = None

    @classmethod
    def model(cls, model_cls: type, **kwargs: Any) -> "Attribute":
        return cls(model_cls, kind=Kind.MODEL, **kwargs)

    @classmethod
    def collection(cls, collection_cls: type, **kwargs: Any) -> "Attribute":
        return cls(collection_cls, kind=Kind.COLLECTION, **kwargs)

    @classmethod
    def encrypted(cls, **kwargs: Any) -> "Attribute":
        return cls(EncryptedValue, kind=Kind.ENCRYPTED, **kwargs)

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        type_name = getattr(self.type, "__name__", self.type)
        return f"Attribute({self.name!r}, kind={self.kind.value}, type={type_name})"

    # -------- Descriptor --------
    def __get__(self, instance: Optional["Model"], owner: type) -> Any:
        if instance is None:
            return self
        value = instance._values.get(self.name)
        if value is None and self.kind is Kind.ENCRYPTED:
            value = EncryptedValue(None)
            if not instance.frozen:
                instance._values[self.name] = value
        return value

    def __set__(self, instance: "Model", value: Any) -> None:
        instance._guard_mutation(self)
        instance._values[self.name] = self.coerce(value, instance)

    # -------- Values --------
    def initial(self) -> Any:
        """Value a fresh record starts with."""
        if self.kind is Kind.COLLECTION and self.default is None:
            return self.type()
        return copy.deepcopy(self.default)

    def build(self, attributes: Any = None, additional_attributes: Optional[Mapping[str, Any]] = None) -> Any:
        """Construct a new child for a model or collection attribute."""
        extra = dict(additional_attributes or {})
        if self.kind is Kind.MODEL:
            child = self.type(attributes)
            child.additional_attributes = extra
            return child
        if self.kind is Kind.COLLECTION:
            child = self.type()
            child.load(attributes or [], extra)
            return child
        if self.kind is Kind.ENCRYPTED:
            return EncryptedValue(attributes)
        raise TypeError(f"attribute {self.name!r} is not a model or collection")

    def coerce(self, value: Any, owner: Optional["Model"] = None) -> Any:
        if value is None:
            return None
        if self.kind is Kind.ENCRYPTED:
            return EncryptedValue(value)
        if self.kind is Kind.MODEL:
            if isinstance(value, Mapping):
                extra = owner.additional_attributes if owner is not None else None
                return self.build(value, extra)
            return value
        if self.kind is Kind.COLLECTION:
            if isinstance(value, (list, tuple)):
                extra = owner.additional_attributes if owner is not None else None
                return self.build(list(value), extra)
            return value
        return self._coerce_scalar(value)

    def _coerce_scalar(self, value: Any) -> Any:
        if self.type is None or self.type is Any:
            return value
        if self._adapter is None:
            self._adapter = TypeAdapter(self.type)
        try:
            return self._adapter.validate_python(value)
        except ValidationError:
            logger.debug("Could not coerce %s to %s; keeping value as given", self.name, self.type)
            return value
