"""
Attribute selection decoding.

A selection maps product variant attribute IDs to the IDs of the selected
values. It is stored as JSON, e.g. ``{"12": [31], "14": [40, 41]}``, on order
items, cart items and attribute combinations. Decoding is pure; database
lookups live in ``catalog.services.attributes``.
"""
import json
from typing import Dict, Iterator, List, Mapping, Optional, Tuple, Union

from .exceptions import InvalidAttributeSelection

RawSelection = Union[None, str, Mapping]


def parse_int(value, what: str) -> int:
    if isinstance(value, bool):
        raise InvalidAttributeSelection(f"Invalid {what}: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidAttributeSelection(f"Invalid {what}: {value!r}")


class AttributeSelection:
    """
    Immutable mapping of variant attribute ID to a tuple of selected value IDs.
    """

    __slots__ = ('_items',)

    def __init__(self, items: Optional[Mapping[int, Tuple[int, ...]]] = None):
        self._items: Dict[int, Tuple[int, ...]] = {
            attribute_id: tuple(value_ids)
            for attribute_id, value_ids in (items or {}).items()
            if value_ids
        }

    @classmethod
    def from_raw(cls, raw: RawSelection) -> 'AttributeSelection':
        """
        Decode a stored selection.

        Accepts ``None``, a JSON string or a mapping. A single value may be
        given instead of a list. Duplicate value IDs are collapsed.

        Raises:
            InvalidAttributeSelection: If the payload is not a mapping of
                integer IDs.
        """
        if isinstance(raw, AttributeSelection):
            return raw
        if raw is None or raw == '':
            return cls()
        if isinstance(raw, str):
            try:
                raw = json.loads(raw)
            except ValueError as e:
                raise InvalidAttributeSelection(f"Attribute selection is not valid JSON: {e}")
            if raw is None:
                return cls()
        if not isinstance(raw, Mapping):
            raise InvalidAttributeSelection(
                f"Attribute selection must be an object, got {type(raw).__name__}"
            )

        items = {}
        for key, values in raw.items():
            attribute_id = parse_int(key, 'attribute id')
            if not isinstance(values, (list, tuple)):
                values = [values]
            value_ids = []
            for value in values:
                value_id = parse_int(value, f'value id for attribute {attribute_id}')
                if value_id not in value_ids:
                    value_ids.append(value_id)
            items[attribute_id] = tuple(sorted(value_ids))
        return cls(items)

    def __iter__(self) -> Iterator[int]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __eq__(self, other) -> bool:
        if not isinstance(other, AttributeSelection):
            return NotImplemented
        return self._items == other._items

    def __hash__(self) -> int:
        return hash(self.as_key())

    def __repr__(self) -> str:
        return f"AttributeSelection({self._items!r})"

    def items(self):
        return self._items.items()

    def get_value_ids(self, attribute_id: int) -> Tuple[int, ...]:
        return self._items.get(attribute_id, ())

    @property
    def attribute_ids(self) -> List[int]:
        return sorted(self._items)

    @property
    def value_ids(self) -> List[int]:
        ids = set()
        for value_ids in self._items.values():
            ids.update(value_ids)
        return sorted(ids)

    def as_key(self) -> str:
        """
        Canonical string form, identical for equal selections regardless of
        the order they were stored in. Used to look up attribute combinations.
        """
        return ';'.join(
            f"{attribute_id}:{','.join(str(v) for v in self._items[attribute_id])}"
            for attribute_id in sorted(self._items)
        )

    def to_raw(self) -> Dict[str, List[int]]:
        return {str(attribute_id): list(value_ids) for attribute_id, value_ids in self._items.items()}
