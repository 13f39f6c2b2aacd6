# Copyright (c) 2025 The jn-collection authors. MIT LICENSE.
#
# Collection support layer
# ========================
#
# A keyed, ordered collection in the manner of a PHP associative array.
# Lists are stored with integer keys 0..n-1, mappings keep their own keys,
# and every transformation returns a new instance.
#
# - Arr: static helpers for keyed access, collapsing and flattening.
# - SupportCollection: the base container (map, filter, reject,
#   partition, flatten, sort, first, contains, keys, values, all).


from typing import *
from collections.abc import Iterable, Mapping
import functools
import inspect
import json
import math


class _Marker:
    "Named sentinel, distinct from None."

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return self.name

    def __bool__(self) -> bool:
        return False


# Argument not supplied (None is a legal value).
UNSET = _Marker('UNSET')

# Key or field not found.
MISSING = _Marker('MISSING')


def _arity(callback: Callable) -> int:
    "Number of positional arguments a callback will take (2 means value and key)."
    try:
        sig = inspect.signature(callback)
    except (TypeError, ValueError):
        return 1

    count = 0
    for param in sig.parameters.values():
        if param.kind == param.VAR_POSITIONAL:
            return 2
        if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
            count += 1
    return count


def _caller(callback: Callable) -> Callable[[Any, Any], Any]:
    "Adapt a callback so it is always called as fn(value, key)."
    if 2 <= _arity(callback):
        return callback
    return lambda value, _key: callback(value)


class Arr:
    """
    Static helpers over lists, tuples, mappings and collections.
    """

    @staticmethod
    def accessible(value: Any) -> bool:
        "Value supports keyed access."
        return isinstance(value, (Mapping, list, tuple, SupportCollection))

    @staticmethod
    def fetch(target: Any, key: Any) -> Any:
        """
        Get the value stored under key, or MISSING. Decimal digit strings
        address list indexes and integer mapping keys.
        """
        if isinstance(target, SupportCollection):
            target = target._items

        if isinstance(target, Mapping):
            if key in target:
                return target[key]
            if isinstance(key, str) and key.isdecimal() and int(key) in target:
                return target[int(key)]
            if isinstance(key, int) and not isinstance(key, bool) and str(key) in target:
                return target[str(key)]
            return MISSING

        if isinstance(target, (list, tuple)):
            if isinstance(key, bool):
                return MISSING
            if isinstance(key, str):
                if not key.isdecimal():
                    return MISSING
                key = int(key)
            if isinstance(key, int) and 0 <= key < len(target):
                return target[key]
            return MISSING

        return MISSING

    @staticmethod
    def exists(target: Any, key: Any) -> bool:
        return Arr.fetch(target, key) is not MISSING

    @staticmethod
    def keyed(items: Any = None) -> Dict[Any, Any]:
        "Convert anything collectable into a fresh key -> value dict."
        if items is None:
            return {}
        if isinstance(items, SupportCollection):
            return dict(items._items)
        if isinstance(items, Mapping):
            return dict(items)
        if isinstance(items, (str, bytes)) or not isinstance(items, Iterable):
            return {0: items}
        return dict(enumerate(items))

    @staticmethod
    def collapse(values: Iterable) -> List[Any]:
        "Collapse a list of lists into one list. Non-list items are dropped."
        out = []
        for item in values:
            if isinstance(item, SupportCollection):
                out.extend(item.to_list())
            elif isinstance(item, (list, tuple)):
                out.extend(item)
        return out

    @staticmethod
    def flatten(values: Iterable, depth: float = math.inf) -> List[Any]:
        "Flatten nested lists, tuples and collections down to the given depth."
        out = []
        for item in values:
            if isinstance(item, SupportCollection):
                item = item.to_list()

            if not isinstance(item, (list, tuple)):
                out.append(item)
            elif depth <= 1:
                out.extend(item)
            else:
                out.extend(Arr.flatten(item, depth - 1))
        return out


class SupportCollection:
    """
    Ordered keyed container. Instances are never mutated after
    construction; each operation builds a new instance of the same class.

    Callbacks may take (value) or (value, key).
    """

    def __init__(self, items: Any = None) -> None:
        self._items = Arr.keyed(items)

    def all(self) -> Union[List[Any], Dict[Any, Any]]:
        "The items as a list when keyed 0..n-1, otherwise as a dict."
        if self.is_list():
            return list(self._items.values())
        return dict(self._items)

    def is_list(self) -> bool:
        return all(key == index and type(key) is int
                   for index, key in enumerate(self._items))

    def keys(self) -> List[Any]:
        return list(self._items.keys())

    def to_list(self) -> List[Any]:
        return list(self._items.values())

    def values(self):
        "New collection of the values, re-keyed 0..n-1."
        return self.__class__(self.to_list())

    def items(self) -> List[Tuple[Any, Any]]:
        return list(self._items.items())

    def get(self, key: Any, default: Any = None) -> Any:
        value = Arr.fetch(self._items, key)
        return default if value is MISSING else value

    def count(self) -> int:
        return len(self._items)

    def is_empty(self) -> bool:
        return 0 == len(self._items)

    def map(self, callback: Callable):
        fn = _caller(callback)
        return self.__class__({k: fn(v, k) for k, v in self._items.items()})

    def filter(self, callback: Optional[Callable] = None):
        "Keep items passing the callback (or truthy items). Keys are preserved."
        if callback is None:
            return self.__class__({k: v for k, v in self._items.items() if v})
        fn = _caller(callback)
        return self.__class__({k: v for k, v in self._items.items() if fn(v, k)})

    def reject(self, callback: Callable):
        fn = _caller(callback)
        return self.__class__({k: v for k, v in self._items.items() if not fn(v, k)})

    def partition(self, callback: Callable):
        "Split into (passed, failed) collections, both keeping original keys."
        fn = _caller(callback)
        passed, failed = {}, {}
        for k, v in self._items.items():
            (passed if fn(v, k) else failed)[k] = v
        return self.__class__(passed), self.__class__(failed)

    def flatten(self, depth: float = math.inf):
        return self.__class__(Arr.flatten(self._items.values(), depth))

    def sort(self, comparator: Optional[Callable[[Any, Any], int]] = None):
        """
        Stable sort of the values, keeping their keys. Without a comparator
        the values must be mutually orderable.
        """
        if comparator is None:
            ordered = sorted(self._items.items(), key=lambda kv: kv[1])
        else:
            ordered = sorted(self._items.items(),
                             key=functools.cmp_to_key(lambda a, b: comparator(a[1], b[1])))
        return self.__class__(dict(ordered))

    def first(self, callback: Optional[Callable] = None, default: Any = None) -> Any:
        if callback is None:
            for v in self._items.values():
                return v
            return default
        fn = _caller(callback)
        for k, v in self._items.items():
            if fn(v, k):
                return v
        return default

    def contains(self, value: Any) -> bool:
        "A callable tests items, anything else is compared with ==."
        if callable(value):
            fn = _caller(value)
            return any(fn(v, k) for k, v in self._items.items())
        return any(v == value for v in self._items.values())

    def to_json(self, **options: Any) -> str:
        return json.dumps(self.all(), **options)

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._items.values()))

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, value: Any) -> bool:
        "Membership matches iteration: values, compared with ==."
        return any(v == value for v in self._items.values())

    def __getitem__(self, key: Any) -> Any:
        value = Arr.fetch(self._items, key)
        if value is MISSING:
            raise KeyError(key)
        return value

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, SupportCollection):
            return list(self._items.items()) == list(other._items.items())
        if isinstance(other, (list, dict)):
            return self.all() == other
        return NotImplemented

    __hash__ = None

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self.all()!r})'


__all__ = [
    'Arr',
    'MISSING',
    'SupportCollection',
    'UNSET',
]
