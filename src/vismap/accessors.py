"""
Attribute accessors - uniform way to pull values out of opaque records.

A record can be anything: a dict, a dataclass, a namedtuple, a bin. An accessor
is either a field name or a plain function, resolved once into an object with
a ``get(record)`` method.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union


@dataclass(frozen=True)
class FieldAccessor:
    """Look up a named field on a record (mapping key or attribute)."""
    name: str

    def get(self, record: Any) -> Any:
        if isinstance(record, Mapping):
            return record.get(self.name)
        return getattr(record, self.name, None)

    def __str__(self):
        return self.name


@dataclass(frozen=True)
class FunctionAccessor:
    """Derive a value from a record with a pure function."""
    fn: Callable[[Any], Any]

    def get(self, record: Any) -> Any:
        return self.fn(record)

    def __str__(self):
        return getattr(self.fn, '__name__', repr(self.fn))


Accessor = Union[FieldAccessor, FunctionAccessor]
AccessorLike = Union[str, Callable[[Any], Any], FieldAccessor, FunctionAccessor]


def resolve_accessor(accessor: AccessorLike) -> Accessor:
    """
    Resolve a field name or function into an accessor object.

    Args:
        accessor: Field name (str), callable, or an existing accessor

    Returns:
        FieldAccessor or FunctionAccessor

    Raises:
        TypeError: If the value cannot be used as an accessor
    """
    if isinstance(accessor, (FieldAccessor, FunctionAccessor)):
        return accessor
    if isinstance(accessor, str):
        return FieldAccessor(accessor)
    if callable(accessor):
        return FunctionAccessor(accessor)
    raise TypeError(f"Accessor must be a field name or a callable, got {type(accessor).__name__}")


def attribute_value(record: Any, accessor: AccessorLike) -> Any:
    """Return the raw value an accessor yields for a record (None when missing)."""
    return resolve_accessor(accessor).get(record)


def to_number(value: Any) -> Optional[float]:
    """Convert a value to a finite float, or None if it is not a finite number."""
    # NumPy scalars
    if hasattr(value, 'item') and callable(getattr(value, 'item')):
        try:
            value = value.item()
        except (TypeError, ValueError):
            return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    value = float(value)
    return value if math.isfinite(value) else None


def attribute_number(record: Any, accessor: AccessorLike) -> Optional[float]:
    """Return the accessor's value for a record as a finite float, or None."""
    return to_number(attribute_value(record, accessor))
