# Copyright (c) 2025 The jn-collection authors. MIT LICENSE.
#
# Jn Collection
# =============
#
# Collection extensions and "dot" path lookups over nested data: mappings,
# lists, collections and plain objects (including their private fields).
#
# Main utilities
# - data_get: get the value at a dot path deep inside a structure.
# - collect: build a Collection from a list, mapping or None.
# - Collection: sorted views, null stripping, extraction, key filtering,
#   pluck and operator based where filters.
#
# Minor utilities
# - isnode, ismap, islist, isscalar, isobject: identify value kinds.
# - isempty: None, empty string, zero, False, or empty containers.
# - hastext: value is a string, or an object with its own text form.
# - identical, looseeq, compare: strict equality, loose equality, ordering.
# - access_field: read a named field of an arbitrary object.
# - explode_pluck_parameters: split the value and key paths of a pluck.
# - operator_for_where: build the item test used by Collection.where.


from typing import *
from collections.abc import Iterable, Mapping, Sized
from enum import Enum
import functools
import inspect
import logging
import numbers

from .support import Arr, MISSING, SupportCollection, UNSET


log = logging.getLogger(__name__)

# Path syntax.
S_DT = '.'
S_WILD = '*'

# Field read by Collection.extract_collection when none is given.
S_COLLECTION = 'collection'

# Getter method prefixes tried before plain attributes.
GETTER_PREFIXES = ('get_', 'is_', 'has_')


class NoSuchFieldError(AttributeError):
    "Object has no readable field with the requested name."


def ismap(val: Any = None) -> bool:
    "Value is a mapping (dict-like)."
    return isinstance(val, Mapping)


def islist(val: Any = None) -> bool:
    "Value is a list or tuple."
    return isinstance(val, (list, tuple))


def isnode(val: Any = None) -> bool:
    "Value is a mapping, list, tuple or collection."
    return ismap(val) or islist(val) or isinstance(val, SupportCollection)


def isscalar(val: Any = None) -> bool:
    "Value is None, a string, bytes, a bool or a number."
    return val is None or isinstance(val, (str, bytes, bool, numbers.Number))


def isobject(val: Any = None) -> bool:
    "Value is a structured object: not a scalar, mapping, list or tuple."
    return not (isscalar(val) or ismap(val) or islist(val))


def isempty(val: Any = None) -> bool:
    "Check for an 'empty' value - None, empty string, zero, False, empty container."
    if val is None:
        return True

    if isscalar(val):
        return not val

    if isinstance(val, Sized):
        return 0 == len(val)

    return False


def hastext(val: Any = None) -> bool:
    "Value is a string, or an object that defines its own __str__."
    if isinstance(val, str):
        return True
    return isobject(val) and type(val).__str__ is not object.__str__


def identical(first: Any, second: Any) -> bool:
    "Strict equality: same type and equal value. Objects must be the same instance."
    if isobject(first) or isobject(second):
        return first is second
    return type(first) is type(second) and first == second


def _number(val: Any) -> Any:
    "Numeric value of a number or numeric string, otherwise MISSING."
    if isinstance(val, bool):
        return MISSING
    if isinstance(val, numbers.Number):
        return val
    if isinstance(val, str):
        try:
            return float(val.strip()) if val.strip() else MISSING
        except ValueError:
            return MISSING
    return MISSING


def looseeq(first: Any, second: Any) -> bool:
    """
    Loose equality. None equals any empty value, booleans compare by
    emptiness, numeric strings compare to numbers by value.
    """
    if first is None or second is None:
        return isempty(first) and isempty(second)

    if isinstance(first, bool) or isinstance(second, bool):
        return isempty(first) == isempty(second)

    if isinstance(first, str) != isinstance(second, str):
        fnum, snum = _number(first), _number(second)
        if fnum is not MISSING and snum is not MISSING:
            return fnum == snum
        if isinstance(first, numbers.Number) or isinstance(second, numbers.Number):
            return str(first) == str(second)

    return first == second


def compare(first: Any, second: Any) -> int:
    """
    Three-way comparison usable for any pair of values. None sorts first.
    A number and a numeric string compare by value, as in looseeq. Values
    that cannot be ordered against each other are ordered by type name and
    then by their text.
    """
    if first is None or second is None:
        return (first is not None) - (second is not None)

    if isinstance(first, str) != isinstance(second, str):
        fnum, snum = _number(first), _number(second)
        if fnum is not MISSING and snum is not MISSING:
            return (fnum > snum) - (fnum < snum)

    try:
        if first < second:
            return -1
        if second < first:
            return 1
        return 0
    except TypeError:
        log.debug('compare: unorderable %s and %s', type(first).__name__, type(second).__name__)

    fkey = (type(first).__name__, str(first))
    skey = (type(second).__name__, str(second))
    return (fkey > skey) - (fkey < skey)


def _noargs(fn: Callable) -> bool:
    "Callable can be invoked without arguments."
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        return False
    return all(p.default is not p.empty or p.kind in (p.VAR_POSITIONAL, p.VAR_KEYWORD)
               for p in sig.parameters.values())


def _static(obj: Any, name: str) -> Any:
    "Attribute found without running descriptors or __getattr__, or MISSING."
    try:
        return inspect.getattr_static(obj, name)
    except AttributeError:
        return MISSING


def _ismethodlike(val: Any) -> bool:
    "Value is a function, method or method wrapper found on a class."
    return inspect.isroutine(val) or isinstance(val, (staticmethod, classmethod))


class FieldAccessor:
    """
    Reads one named field from an arbitrary object. Returns MISSING
    instead of raising when the field does not exist.
    """

    def read(self, obj: Any, name: str) -> Any:
        raise NotImplementedError


class AttributeFieldAccessor(FieldAccessor):
    """
    Public access: a getter method (get_name, is_name, has_name) taking no
    arguments, then a public attribute or property. Only attributes defined
    on the instance or its class are considered, and methods are not fields.
    """

    def read(self, obj: Any, name: str) -> Any:
        if name.startswith('_'):
            return MISSING

        for prefix in GETTER_PREFIXES:
            getter = _static(obj, prefix + name)
            if getter is not MISSING:
                getter = getattr(obj, prefix + name, None)
                if callable(getter) and _noargs(getter):
                    return getter()

        static = _static(obj, name)
        if static is MISSING or _ismethodlike(static):
            return MISSING

        try:
            return getattr(obj, name)
        except AttributeError:
            # Declared but unset slot.
            return MISSING


class ReflectiveFieldAccessor(FieldAccessor):
    """
    Non-public access: instance storage under name, _name or the mangled
    _Class__name of any class in the MRO, then dynamic __getattr__ lookup.
    """

    def read(self, obj: Any, name: str) -> Any:
        for candidate in self.candidates(obj, name):
            value = self._stored(obj, candidate)
            if value is not MISSING:
                return value

        # Methods are not fields.
        if _ismethodlike(_static(obj, name)):
            return MISSING

        try:
            value = getattr(obj, name)
        except AttributeError:
            return MISSING

        return MISSING if inspect.ismethod(value) else value

    @staticmethod
    def candidates(obj: Any, name: str) -> List[str]:
        bare = name.lstrip('_')
        names = [name, '_' + bare]
        for cls in type(obj).__mro__:
            names.append('_%s__%s' % (cls.__name__.lstrip('_'), bare))
        return names

    @staticmethod
    def _stored(obj: Any, name: str) -> Any:
        store = getattr(obj, '__dict__', None)
        if isinstance(store, Mapping) and name in store:
            return store[name]

        try:
            slot = inspect.getattr_static(obj, name)
        except AttributeError:
            return MISSING

        if inspect.ismemberdescriptor(slot):
            try:
                return slot.__get__(obj, type(obj))
            except AttributeError:
                return MISSING

        return MISSING


# Accessors tried in order by access_field.
FIELD_ACCESSORS = (AttributeFieldAccessor(), ReflectiveFieldAccessor())


def access_field(obj: Any, name: Any, accessors: Sequence[FieldAccessor] = FIELD_ACCESSORS) -> Any:
    "Read a named field of an object, or return MISSING."
    name = str(name)
    for accessor in accessors:
        value = accessor.read(obj, name)
        if value is not MISSING:
            return value
    return MISSING


class Resolution(NamedTuple):
    "Outcome of a path walk: a single value, a wildcard sequence, or a miss."
    kind: str
    value: Any = None

    VALUE = 'value'
    SEQUENCE = 'sequence'
    MISS = 'miss'


_MISS = Resolution(Resolution.MISS)


def pathsegments(path: Any) -> Tuple[Any, ...]:
    "Split a dot path into a tuple of segments."
    if isinstance(path, str):
        return tuple(path.split(S_DT))
    if islist(path):
        return tuple(path)
    return (path,)


def _descend(target: Any, segment: Any) -> Any:
    """
    Value of one literal segment of target, or MISSING. A keyed miss on a
    container other than a plain dict, list or tuple falls through to its
    object fields.
    """
    if Arr.accessible(target):
        value = Arr.fetch(target, segment)
        if value is not MISSING or type(target) in (dict, list, tuple):
            return value
        return access_field(target, segment)

    if isscalar(target):
        return MISSING

    return access_field(target, segment)


def _expand(target: Any, rest: Tuple[Any, ...]) -> Resolution:
    "Resolve the remaining segments against every element of target."
    if isinstance(target, SupportCollection):
        elements = target.to_list()
    elif ismap(target):
        elements = list(target.values())
    elif islist(target):
        elements = list(target)
    else:
        return _MISS

    out = [_unwrap(_resolve(element, rest), None) for element in elements]

    if S_WILD in rest:
        out = Arr.collapse(out)

    return Resolution(Resolution.SEQUENCE, out)


def _resolve(target: Any, segments: Tuple[Any, ...]) -> Resolution:
    if not segments:
        return Resolution(Resolution.VALUE, target)

    segment, rest = segments[0], segments[1:]

    if S_WILD == segment:
        return _expand(target, rest)

    value = _descend(target, segment)
    if value is MISSING:
        return _MISS

    return _resolve(value, rest)


def _unwrap(res: Resolution, default: Any) -> Any:
    if Resolution.MISS == res.kind:
        return default() if callable(default) else default
    return res.value


def data_get(target: Any, path: Any = None, default: Any = None) -> Any:
    """
    Get an item from a mapping, list, collection or object using "dot"
    notation. A `*` segment fans out over every element. A callable default
    is only called when the path cannot be resolved.
    """
    if path is None:
        return target

    res = _resolve(target, pathsegments(path))

    if Resolution.MISS == res.kind:
        log.debug('data_get: no value at %r', path)

    return _unwrap(res, default)


def explode_pluck_parameters(value: Any, key: Any = None) -> Tuple[List[Any], Optional[List[Any]]]:
    "Split the value and key arguments of a pluck into path segments."
    value = list(pathsegments(value))
    key = None if key is None else list(pathsegments(key))
    return value, key


def _members(values: Any, argname: str) -> List[Any]:
    "List the candidate values of a keys/values argument."
    if isinstance(values, SupportCollection):
        return values.to_list()
    if ismap(values):
        return list(values.values())
    if isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
        raise TypeError(f'{argname} must be an iterable of values, not {type(values).__name__}')
    return list(values)


def _bounds(values: Any) -> Tuple[Any, Any]:
    values = _members(values, 'values')
    if 0 == len(values):
        raise ValueError('values must hold a lower and an upper bound')
    return values[0], values[-1]


class Operator(Enum):
    EQ = '='
    NOT_EQ = '!='
    LT = '<'
    GT = '>'
    LE = '<='
    GE = '>='
    STRICT_EQ = '==='
    STRICT_NOT_EQ = '!=='


OPERATORS = {
    '=': Operator.EQ,
    '==': Operator.EQ,
    '!=': Operator.NOT_EQ,
    '<>': Operator.NOT_EQ,
    '<': Operator.LT,
    '>': Operator.GT,
    '<=': Operator.LE,
    '>=': Operator.GE,
    '===': Operator.STRICT_EQ,
    '!==': Operator.STRICT_NOT_EQ,
}

COMPARATORS = {
    Operator.EQ: looseeq,
    Operator.NOT_EQ: lambda a, b: not looseeq(a, b),
    Operator.LT: lambda a, b: compare(a, b) < 0,
    Operator.GT: lambda a, b: compare(a, b) > 0,
    Operator.LE: lambda a, b: compare(a, b) <= 0,
    Operator.GE: lambda a, b: compare(a, b) >= 0,
    Operator.STRICT_EQ: identical,
    Operator.STRICT_NOT_EQ: lambda a, b: not identical(a, b),
}

# Operators that hold when the two sides cannot be compared at all.
NEGATIONS = frozenset((Operator.NOT_EQ, Operator.STRICT_NOT_EQ))


def tooperator(token: Any) -> Operator:
    if isinstance(token, Operator):
        return token
    try:
        return OPERATORS[token]
    except (KeyError, TypeError):
        raise ValueError(f'Unknown where operator: {token!r}') from None


def operator_for_where(key: Any, operator: Any = UNSET, value: Any = UNSET) -> Callable[[Any], bool]:
    """
    Build the item test for where(). With one argument the test is
    `key = True`; with two, the second is the value and the operator is `=`.

    When exactly one side is an object and the sides are not both text,
    only the negating operators (!=, <>, !==) match.
    """
    if operator is UNSET:
        operator, value = Operator.EQ, True
    elif value is UNSET:
        operator, value = Operator.EQ, operator

    op = tooperator(operator)
    check = COMPARATORS[op]

    def test(item: Any) -> bool:
        retrieved = data_get(item, key)
        pair = (retrieved, value)

        if sum(map(hastext, pair)) < 2 and 1 == sum(map(isobject, pair)):
            return op in NEGATIONS

        return check(retrieved, value)

    return test


class SortedIterator:
    """
    Restartable iteration over elements in ascending order of their value
    at a field path. Sorting happens on first use and is stable.
    """

    def __init__(self, elements: Iterable, field: Any) -> None:
        self.field = field
        self._elements = list(elements)
        self._sorted = None

    def _load(self) -> List[Any]:
        if self._sorted is None:
            keyed = [(data_get(element, self.field), element) for element in self._elements]
            keyed.sort(key=functools.cmp_to_key(lambda a, b: compare(a[0], b[0])))
            self._sorted = [element for _, element in keyed]
        return self._sorted

    def to_list(self) -> List[Any]:
        return list(self._load())

    def __iter__(self) -> Iterator[Any]:
        return iter(self._load())

    def __len__(self) -> int:
        return len(self._elements)

    def __getitem__(self, index: int) -> Any:
        return self._load()[index]


class Collection(SupportCollection):
    """
    Collection with field-aware operations. Fields are dot paths resolved
    with data_get, so elements may be mappings, lists, collections or
    objects.
    """

    def sorted_iterator_on(self, field: Any) -> SortedIterator:
        "Iterate the elements ascending by their value at field."
        return SortedIterator(self.to_list(), field)

    def sorted_collection(self, field: Any = None) -> 'Collection':
        "New list collection sorted by field, or by the values themselves."
        if field is not None:
            return self.__class__(self.sorted_iterator_on(field).to_list())
        return self.sort(compare).values()

    def without_null(self, field: Any = None) -> 'Collection':
        "Drop elements that are empty (or whose value at field is empty)."
        return self.filter(lambda element: not isempty(data_get(element, field)))

    def extract(self, field: Any) -> 'Collection':
        "Sorted list of the non-empty values at field, flattened one level."
        return (self
                .without_null(field)
                .map(lambda element: data_get(element, field))
                .flatten(1)
                .sorted_collection())

    def filter_by_key(self, keys: Any) -> 'Collection':
        "Keep the elements whose key is one of keys, keeping their keys."
        keys = _members(keys, 'keys')
        matched, _rest = self.partition(
            lambda _value, key: any(looseeq(key, candidate) for candidate in keys))
        return matched

    def pluck(self, value: Any, key: Any = None) -> 'Collection':
        """
        Values at the value path, keyed by the values at the key path when
        given. Later duplicate keys replace earlier ones.
        """
        value, key = explode_pluck_parameters(value, key)

        if key is None:
            return self.__class__([data_get(item, value) for item in self])

        results = {}
        for item in self:
            itemkey = data_get(item, key)
            if isobject(itemkey) and hastext(itemkey):
                itemkey = str(itemkey)
            results[itemkey] = data_get(item, value)

        return self.__class__(results)

    def contains_strict(self, key: Any, value: Any = UNSET) -> bool:
        """
        With two arguments: some element has exactly value at key.
        With one: a callable tests elements, any other value must be
        present as an identical element.
        """
        if value is not UNSET:
            return self.contains(lambda item: identical(data_get(item, key), value))

        if callable(key):
            return self.contains(key)

        return any(identical(item, key) for item in self)

    def where(self, key: Any, operator: Any = UNSET, value: Any = UNSET) -> 'Collection':
        return self.filter(operator_for_where(key, operator, value))

    def where_strict(self, key: Any, value: Any) -> 'Collection':
        return self.where(key, Operator.STRICT_EQ, value)

    def where_null(self, key: Any = None) -> 'Collection':
        return self.where_strict(key, None)

    def where_not_null(self, key: Any = None) -> 'Collection':
        return self.where(key, Operator.STRICT_NOT_EQ, None)

    def where_in(self, key: Any, values: Any, strict: bool = False) -> 'Collection':
        "Keep elements whose value at key is one of values."
        values = _members(values, 'values')
        same = identical if strict else looseeq
        return self.filter(lambda item: any(same(data_get(item, key), v) for v in values))

    def where_in_strict(self, key: Any, values: Any) -> 'Collection':
        return self.where_in(key, values, True)

    def where_not_in(self, key: Any, values: Any, strict: bool = False) -> 'Collection':
        "Drop elements whose value at key is one of values."
        values = _members(values, 'values')
        same = identical if strict else looseeq
        return self.reject(lambda item: any(same(data_get(item, key), v) for v in values))

    def where_not_in_strict(self, key: Any, values: Any) -> 'Collection':
        return self.where_not_in(key, values, True)

    def where_between(self, key: Any, values: Any) -> 'Collection':
        "Keep elements with first bound <= value <= last bound."
        low, high = _bounds(values)
        return self.filter(lambda item: (compare(data_get(item, key), low) >= 0
                                         and compare(data_get(item, key), high) <= 0))

    def where_not_between(self, key: Any, values: Any) -> 'Collection':
        "Keep elements with value < first bound or value > last bound."
        low, high = _bounds(values)
        return self.filter(lambda item: (compare(data_get(item, key), low) < 0
                                         or compare(data_get(item, key), high) > 0))

    @classmethod
    def extract_collection(cls, source: Any, field: str = S_COLLECTION) -> 'Collection':
        """
        Build a collection from the field of source (get_collection(),
        .collection, ._collection, ...). Raises NoSuchFieldError if the
        field cannot be read.
        """
        data = _descend(source, field)
        if data is MISSING:
            raise NoSuchFieldError(f'{type(source).__name__} has no readable field {field!r}')
        return cls(data)


def collect(value: Any = None) -> Collection:
    "Create a Collection from a list, mapping, collection or None."
    return Collection(value)


__all__ = [
    'AttributeFieldAccessor',
    'COMPARATORS',
    'Collection',
    'FIELD_ACCESSORS',
    'FieldAccessor',
    'NoSuchFieldError',
    'OPERATORS',
    'Operator',
    'ReflectiveFieldAccessor',
    'Resolution',
    'SortedIterator',
    'access_field',
    'collect',
    'compare',
    'data_get',
    'explode_pluck_parameters',
    'hastext',
    'identical',
    'isempty',
    'islist',
    'ismap',
    'isnode',
    'isobject',
    'isscalar',
    'looseeq',
    'operator_for_where',
    'pathsegments',
    'tooperator',
]
