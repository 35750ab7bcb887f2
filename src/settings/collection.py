from __future__ import annotations

from typing import Any, ClassVar, Dict, Iterable, Iterator, List, Mapping, Optional, Type
from uuid import uuid4

from .model import Model, merge_additional


class Collection:
    """
    Ordered group of records of one declared model type, keyed by `id`.

        class Items(Collection):
            model = Item

    Insertion order is kept through load, create and serialization. Only
    `create` assigns ids; items loaded from storage keep whatever id they
    carry, and a loaded item whose id is already present updates that item.
    """

    model: ClassVar[Optional[Type[Model]]] = None

    def __init__(
        self,
        items: Optional[Iterable[Any]] = None,
        *,
        additional_attributes: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._items: List[Model] = []
        self._additional_attributes: Dict[str, Any] = dict(additional_attributes or {})
        if items:
            self.load(items, self._additional_attributes)

    @classmethod
    def _model_cls(cls) -> Type[Model]:
        if cls.model is None:
            raise TypeError(f"{cls.__name__} does not declare a model")
        return cls.model

    @property
    def additional_attributes(self) -> Dict[str, Any]:
        return self._additional_attributes

    @additional_attributes.setter
    def additional_attributes(self, value: Optional[Mapping[str, Any]]) -> None:
        value = dict(value or {})
        for item in self._items:
            item.additional_attributes = value
        self._additional_attributes = value

    def load(
        self,
        items: Optional[Iterable[Any]] = None,
        additional_attributes: Optional[Mapping[str, Any]] = None,
    ) -> "Collection":
        self.additional_attributes = additional_attributes
        extra = self.additional_attributes

        for element in items or []:
            if isinstance(element, Model):
                element.additional_attributes = extra
                self._put(element)
                continue
            data = {str(k): v for k, v in dict(element or {}).items()}
            existing = self.find(data["id"]) if data.get("id") is not None else None
            if existing is not None:
                existing.load({k: v for k, v in data.items() if k != "id"}, extra)
                continue
            item = self._model_cls()()
            item._load_fresh(data, extra)
            self._items.append(item)
        return self

    def _put(self, item: Model) -> None:
        """Append `item`, or replace the record already holding its id."""
        item_id = item.get("id")
        existing = self.find(item_id) if item_id is not None else None
        if existing is None:
            self._items.append(item)
        elif existing is not item:
            self._items[self._items.index(existing)] = item

    def update(self, items: Optional[Iterable[Any]] = None) -> "Collection":
        return self.load(items, self.additional_attributes)

    def create(self, attributes: Optional[Mapping[str, Any]] = None) -> Model:
        extra = self.additional_attributes
        model_cls = self._model_cls()
        data = merge_additional(attributes, extra)
        if model_cls.has_attribute("id"):
            if not data.get("id"):
                data["id"] = str(uuid4())
            elif self.find(data["id"]) is not None:
                raise ValueError(f"duplicate id in {type(self).__name__}: {data['id']}")
        item = model_cls(data)
        item.additional_attributes = extra
        self._items.append(item)
        return item

    def find(self, item_id: Any) -> Optional[Model]:
        for item in self._items:
            if item.get("id") == item_id:
                return item
        return None

    def destroy(self, item_id: Any) -> Optional[Model]:
        item = self.find(item_id)
        if item is not None:
            self._items.remove(item)
        return item

    @property
    def first(self) -> Optional[Model]:
        return self._items[0] if self._items else None

    def to_list(self) -> List[Dict[str, Any]]:
        return [item.to_dict() for item in self._items]

    def __iter__(self) -> Iterator[Model]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> Model:
        return self._items[index]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._items!r})"
