# jn_collection init

import logging

from .jn_collection import (
    AttributeFieldAccessor,
    Collection,
    FieldAccessor,
    NoSuchFieldError,
    Operator,
    ReflectiveFieldAccessor,
    SortedIterator,
    access_field,
    collect,
    compare,
    data_get,
    explode_pluck_parameters,
    hastext,
    identical,
    isempty,
    islist,
    ismap,
    isnode,
    isobject,
    isscalar,
    looseeq,
    operator_for_where,
)
from .support import (
    Arr,
    MISSING,
    SupportCollection,
    UNSET,
)


logging.getLogger(__name__).addHandler(logging.NullHandler())


__all__ = [
    'Arr',
    'AttributeFieldAccessor',
    'Collection',
    'FieldAccessor',
    'MISSING',
    'NoSuchFieldError',
    'Operator',
    'ReflectiveFieldAccessor',
    'SortedIterator',
    'SupportCollection',
    'UNSET',
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
]
