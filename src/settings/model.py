from __future__ import annotations

import json
import logging
from typing import Any, ClassVar, Dict, Iterator, Mapping, Optional

from .attribute import Attribute, Kind
from .errors import MutationOnImmutable
from .validations import Errors


logger = logging.getLogger(__name__)


def merge_additional(data: Any, additional: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Fill the gaps in `data` from `additional`.

    Explicit non-None keys in `data` win; missing or None keys take the
    additional value.
    """
    merged: Dict[str, Any] = {str(k): v for k, v in dict(data or {}).items()}
    for key, value in (additional or {}).items():
        if merged.get(str(key)) is None:
            merged[str(key)] = value
    return merged


class Model:
    """
    Typed record built from `Attribute` declarations.

    The schema is closed: it is collected once per class from the declared
    attributes (inherited ones first). Unknown keys are ignored by every
    entry point (constructor, `get`, `set`, `load`, `merge`).

        class Repo(Model):
            name = Attribute(str)
            height = Attribute(int)
            secret = Attribute.encrypted()

    `additional_attributes` are carried down into every nested model and
    collection, and fill missing fields when children are loaded or created.
    """

    __attributes__: ClassVar[Dict[str, Attribute]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        attributes: Dict[str, Attribute] = {}
        for base in reversed(cls.__mro__[1:]):
            attributes.update(getattr(base, "__attributes__", {}))
        for name, value in vars(cls).items():
            if isinstance(value, Attribute):
                attributes[name] = value
        cls.__attributes__ = attributes

    def __init__(self, data: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> None:
        self._values: Dict[str, Any] = {}
        self._frozen = False
        self._initialized = False
        self._additional_attributes: Dict[str, Any] = {}
        self._errors = Errors()

        for name, attr in self.__attributes__.items():
            self._values[name] = attr.initial()
        for key, value in {**dict(data or {}), **kwargs}.items():
            if self.has_attribute(key):
                setattr(self, str(key), value)
        self._initialized = True

    @classmethod
    def from_data(
        cls,
        data: Any = None,
        additional_attributes: Optional[Mapping[str, Any]] = None,
    ) -> "Model":
        """Build a record from raw stored data (a mapping or a JSON string)."""
        if isinstance(data, (str, bytes)):
            data = json.loads(data)
        instance = cls()
        instance._load_fresh(data, additional_attributes)
        return instance

    # -------- Introspection --------
    @classmethod
    def attribute(cls, name: Any) -> Optional[Attribute]:
        return cls.__attributes__.get(str(name))

    @classmethod
    def has_attribute(cls, name: Any) -> bool:
        return str(name) in cls.__attributes__

    @classmethod
    def _kind_of(cls, name: Any, kind: Kind) -> Optional[bool]:
        attr = cls.attribute(name)
        if attr is None:
            return None
        return attr.kind is kind

    @classmethod
    def is_collection(cls, name: Any) -> Optional[bool]:
        return cls._kind_of(name, Kind.COLLECTION)

    @classmethod
    def is_model(cls, name: Any) -> Optional[bool]:
        return cls._kind_of(name, Kind.MODEL)

    @classmethod
    def is_encrypted(cls, name: Any) -> Optional[bool]:
        return cls._kind_of(name, Kind.ENCRYPTED)

    @classmethod
    def is_simple(cls, name: Any) -> Optional[bool]:
        return cls._kind_of(name, Kind.SCALAR)

    @classmethod
    def primitive(cls, name: Any) -> Any:
        attr = cls.attribute(name)
        return attr.type if attr is not None else None

    # -------- Mutability --------
    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> "Model":
        self._frozen = True
        return self

    def _guard_mutation(self, attr: Optional[Attribute] = None) -> None:
        if self._frozen:
            raise MutationOnImmutable(f"{type(self).__name__} is frozen")
        if attr is not None and not attr.mutable and self._initialized:
            raise MutationOnImmutable(f"attribute {attr.name!r} is read-only")

    # -------- Field access --------
    def get(self, name: Any) -> Any:
        if not self.has_attribute(name):
            return None
        return getattr(self, str(name))

    def set(self, name: Any, value: Any) -> Any:
        if not self.has_attribute(name):
            return None
        setattr(self, str(name), value)
        return self.get(name)

    def simple_attributes(self) -> Dict[str, Any]:
        return {
            name: self.get(name)
            for name, attr in self.__attributes__.items()
            if attr.kind is Kind.SCALAR
        }

    @property
    def additional_attributes(self) -> Dict[str, Any]:
        return self._additional_attributes

    @additional_attributes.setter
    def additional_attributes(self, value: Optional[Mapping[str, Any]]) -> None:
        value = dict(value or {})
        for child in self._children():
            child.additional_attributes = value
        self._additional_attributes = value

    def _children(self) -> Iterator[Any]:
        for name, attr in self.__attributes__.items():
            if attr.kind in (Kind.MODEL, Kind.COLLECTION):
                child = self._values.get(name)
                if child is not None:
                    yield child

    # -------- Bulk operations --------
    def load(
        self,
        data: Optional[Mapping[str, Any]] = None,
        additional_attributes: Optional[Mapping[str, Any]] = None,
    ) -> "Model":
        """Load raw stored data, recursing into nested models, collections
        and encrypted values. Encrypted values keep the stored form as-is."""
        self._guard_mutation()
        self.additional_attributes = additional_attributes
        extra = self.additional_attributes

        for key, value in merge_additional(data, extra).items():
            attr = self.attribute(key)
            if attr is None:
                continue
            if attr.kind is Kind.SCALAR:
                self.set(key, value)
                continue

            child = self.get(key)
            if child is None and value is not None:
                child = self.set(key, attr.build(None, extra))
                if attr.kind is Kind.MODEL:
                    child._load_fresh(value, extra)
                    continue
            if child is not None:
                child.load(value, extra)
        return self

    def _load_fresh(
        self,
        data: Optional[Mapping[str, Any]] = None,
        additional_attributes: Optional[Mapping[str, Any]] = None,
    ) -> "Model":
        """Load into a record that was just built; read-only fields still accept
        their first value."""
        self._initialized = False
        try:
            return self.load(data, additional_attributes)
        finally:
            self._initialized = True

    def merge(self, data: Optional[Mapping[str, Any]] = None) -> None:
        """Shallow update; nested models and collections are left untouched."""
        for key, value in (data or {}).items():
            attr = self.attribute(key)
            if attr is None:
                continue
            if attr.kind in (Kind.MODEL, Kind.COLLECTION):
                logger.debug("Ignoring %s on merge: nested %s", key, attr.kind.value)
                continue
            self.set(key, value)

    def create(self, name: Any, attributes: Any = None) -> Any:
        attr = self.attribute(name)
        if attr is None:
            return None
        extra = self.additional_attributes
        if attr.kind is Kind.MODEL:
            child = attr.build(merge_additional(attributes, extra), extra)
        elif attr.kind is Kind.COLLECTION:
            if isinstance(attributes, Mapping):
                child = attr.build(None, extra)
                child.create(attributes)
            else:
                child = attr.build(attributes, extra)
        else:
            child = attr.build(attributes, extra)
        return self.set(name, child)

    def update(self, name: Any, attributes: Any = None) -> Any:
        """Update a nested child, creating it when absent.

        Called with a mapping instead of a name, assigns the given fields on
        this record and returns it.
        """
        if isinstance(name, Mapping):
            self._guard_mutation()
            for key, value in name.items():
                self.set(key, value)
            return self

        attr = self.attribute(name)
        if attr is None:
            return None
        if attr.kind in (Kind.SCALAR, Kind.ENCRYPTED):
            return self.set(name, attributes)

        extra = self.additional_attributes
        child = self.get(name)
        if child is None:
            return self.create(name, attributes)
        if attr.kind is Kind.MODEL:
            child.update(merge_additional(attributes, extra))
        else:
            items = [attributes] if isinstance(attributes, Mapping) else attributes
            child.load(items, extra)
        return child

    def delete(self, name: Any) -> Any:
        child = self.get(name)
        self.set(name, None)
        return child

    # -------- Validation --------
    @property
    def errors(self) -> Errors:
        return self._errors

    def validate(self) -> None:
        """Hook for record-level rules; add codes with `self.errors.add`."""

    def is_valid(self) -> bool:
        self._errors.clear()
        for name, attr in self.__attributes__.items():
            if not attr.validators:
                continue
            value = self.get(name)
            for rule in attr.validators:
                code = rule(value)
                if code:
                    self._errors.add(name, code)
        self.validate()
        return not self._errors

    # -------- Serialization --------
    def to_dict(self) -> Dict[str, Any]:
        """Snapshot of all fields; encrypted fields are rendered as ciphertext."""
        out: Dict[str, Any] = {}
        for name, attr in self.__attributes__.items():
            value = self.get(name)
            if value is None:
                out[name] = None
            elif attr.kind is Kind.MODEL:
                out[name] = value.to_dict()
            elif attr.kind is Kind.COLLECTION:
                out[name] = value.to_list()
            elif attr.kind is Kind.ENCRYPTED:
                out[name] = value.dump()
            else:
                out[name] = value
        return out

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"), default=str)

    def __repr__(self) -> str:
        fields = ", ".join(f"{name}={self._values.get(name)!r}" for name in self.__attributes__)
        return f"{type(self).__name__}({fields})"
