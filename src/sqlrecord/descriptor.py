"""
Record descriptors: the column name to field position map of a record type.

A record type is a dataclass. Each field resolves to one column name, either
given explicitly through the ``db`` metadata key or taken from the field name
folded to lower case:

>>> from dataclasses import dataclass
>>> @dataclass
... class Person:
...     ID: int = column('id')
...     Name: str = ''
>>> dict(get_descriptor(Person).names)
{'id': 0, 'name': 1}
"""
import dataclasses
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from sqlrecord.cache import memoized
from sqlrecord.exceptions import DuplicateColumnError, NotAStructError

__all__ = [
    'TAG',
    'RecordDescriptor',
    'base_record_type',
    'build_descriptor',
    'column',
    'get_descriptor',
]

logger = logging.getLogger(__name__)

TAG = 'db'


def column(name: str, **kwargs: Any) -> Any:
    """Declare a dataclass field mapped to an explicit column name.

    Accepts the same keyword arguments as ``dataclasses.field``.
    """
    metadata = dict(kwargs.pop('metadata', None) or {})
    metadata[TAG] = name
    return dataclasses.field(metadata=metadata, **kwargs)


@dataclass(frozen=True)
class RecordDescriptor:
    """Immutable mapping of resolved column names to field positions.
    """
    record_type: type
    names: MappingProxyType
    fields: tuple

    @property
    def field_names(self) -> tuple[str, ...]:
        """Attribute names in declaration order."""
        return tuple(f.name for f in self.fields)

    def position(self, name: str) -> int | None:
        return self.names.get(name)

    def blank(self) -> Any:
        """Allocate an instance without running ``__init__``.

        Fields get their declared default, a fresh ``default_factory()``
        value, or None.
        """
        obj = self.record_type.__new__(self.record_type)
        for f in self.fields:
            if f.default is not dataclasses.MISSING:
                value = f.default
            elif f.default_factory is not dataclasses.MISSING:
                value = f.default_factory()
            else:
                value = None
            object.__setattr__(obj, f.name, value)
        return obj


def base_record_type(obj: Any) -> type:
    """Return the record class for a record class or instance.

    Raises NotAStructError when the result is not a dataclass.
    """
    record_type = obj if isinstance(obj, type) else type(obj)
    if not dataclasses.is_dataclass(record_type):
        raise NotAStructError(f'Destination must be a dataclass type, got {record_type.__name__}')
    return record_type


def build_descriptor(record_type: Any) -> RecordDescriptor:
    """Build the descriptor of a record type without consulting the cache.
    """
    record_type = base_record_type(record_type)
    names: dict[str, int] = {}
    fields = dataclasses.fields(record_type)
    for i, f in enumerate(fields):
        name = f.metadata.get(TAG) or f.name.lower()
        if name in names:
            raise DuplicateColumnError(record_type, name, fields[names[name]].name, f.name)
        names[name] = i
    logger.debug(f'Built descriptor for {record_type.__name__}: {names}')
    return RecordDescriptor(record_type, MappingProxyType(names), fields)


@memoized('descriptors')
def _cached_descriptor(record_type: type) -> RecordDescriptor:
    return build_descriptor(record_type)


def get_descriptor(obj: Any) -> RecordDescriptor:
    """Return the cached descriptor for a record class or instance, building it
    on first use.
    """
    return _cached_descriptor(base_record_type(obj))
