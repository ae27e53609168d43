"""
dynsim - Named State Vectors

A named vector is a fixed-schema numeric record: an ordered set of unique
field tags, each with a physical dimension. Vector classes are created once
per schema with make_vector(); field tags become native attributes of the
class, so the set of keys is fixed before any instance exists.

Derivative order is a schema transform. V.derivative(n) is the vector class
with the same tags and every dimension multiplied by time^-n:

    State                = {x [m],     v [m/s]}
    State.derivative(1)  = {x [m/s],   v [m/s^2]}
    State.derivative(-1) = {x [m*s],   v [m]}

Multiplying a vector by a duration moves it one order down, which is the
Euler increment every stepper is built from.
"""

import numbers
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Dict, Iterator, Sequence, Tuple

import numpy as np

from .errors import DimensionMismatchError, KeyNotFoundError, ShapeError
from .units import TIME, Dimension, Quantity, as_seconds, dimension_of


@dataclass(frozen=True)
class Schema:
    """Ordered (tag, dimension) pairs describing a vector."""
    fields: Tuple[Tuple[str, Dimension], ...]

    def __post_init__(self):
        if not self.fields:
            raise ShapeError("A vector requires at least one field")
        tags = [tag for tag, _ in self.fields]
        duplicates = sorted({tag for tag in tags if tags.count(tag) > 1})
        if duplicates:
            raise ShapeError(f"Duplicate field tags: {duplicates}")
        for tag, dimension in self.fields:
            if not isinstance(tag, str) or not tag.isidentifier():
                raise ShapeError(f"Field tag must be an identifier, got {tag!r}")
            if not isinstance(dimension, Dimension):
                raise ShapeError(f"Field {tag!r} has no dimension")

    @property
    def tags(self) -> Tuple[str, ...]:
        return tuple(tag for tag, _ in self.fields)

    @property
    def dimensions(self) -> Tuple[Dimension, ...]:
        return tuple(dim for _, dim in self.fields)

    @property
    def size(self) -> int:
        return len(self.fields)

    def index(self, tag: str) -> int:
        """Slot index of `tag`; raises KeyNotFoundError if absent."""
        for i, (name, _) in enumerate(self.fields):
            if name == tag:
                return i
        raise KeyNotFoundError(tag, self.tags)

    def derivative(self, n: int = 1) -> 'Schema':
        """Same tags, every dimension multiplied by time^-n."""
        return Schema(tuple((tag, dim.with_time_shift(-n)) for tag, dim in self.fields))


def derivative_schema(schema: Schema, n: int = 1) -> Schema:
    """Functional form of Schema.derivative."""
    return schema.derivative(n)


def _to_si(value, tag: str, dimension: Dimension) -> float:
    """Check a field value against its dimension and return the SI magnitude."""
    if isinstance(value, timedelta):
        value = as_seconds(value)
    if isinstance(value, Quantity):
        if value.dimension != dimension:
            raise DimensionMismatchError(
                f"Field {tag!r} expects [{dimension.symbol or 'dimensionless'}], "
                f"got [{value.dimension.symbol or 'dimensionless'}]"
            )
        return value.value
    if isinstance(value, numbers.Real):
        # Plain numbers are taken as SI magnitudes
        return float(value)
    raise TypeError(f"Field {tag!r} cannot hold a {type(value).__name__}")


class FieldAccessor:
    """A field tag bound and validated against a schema ahead of use."""

    __slots__ = ('schema', 'tag', 'index', 'dimension')

    def __init__(self, schema: Schema, tag: str):
        self.schema = schema
        self.index = schema.index(tag)
        self.tag = tag
        self.dimension = schema.fields[self.index][1]

    def _check(self, vector: 'NamedVector') -> None:
        if vector.schema != self.schema:
            raise ShapeError(
                f"Accessor for {self.tag!r} is bound to another schema than {type(vector).__name__}"
            )

    def get(self, vector: 'NamedVector') -> Quantity:
        self._check(vector)
        return Quantity(vector._data[self.index], self.dimension)

    def set(self, vector: 'NamedVector', value) -> None:
        self._check(vector)
        vector._data[self.index] = _to_si(value, self.tag, self.dimension)

    __call__ = get


class NamedVector:
    """
    Base class of all named vectors.

    Do not instantiate directly; specialise with make_vector(). Values live
    in a single float64 array in declaration order, in SI base units.
    Instances have value semantics: arithmetic returns new vectors and
    copy() never aliases storage.
    """

    schema: Schema = None
    order: int = 0
    _family: Dict[int, type] = None

    __slots__ = ('_data',)

    __array_ufunc__ = None

    def __init__(self, *values):
        schema = self.schema
        if schema is None:
            raise TypeError("NamedVector must be specialised with make_vector()")
        if not values:
            self._data = np.zeros(schema.size, dtype=np.float64)
            return
        if len(values) != schema.size:
            raise ShapeError(
                f"{type(self).__name__} expects {schema.size} values "
                f"{list(schema.tags)}, got {len(values)}"
            )
        self._data = np.array(
            [_to_si(v, tag, dim) for v, (tag, dim) in zip(values, schema.fields)],
            dtype=np.float64,
        )

    # ------------------------------------------------------------------
    # schema level
    # ------------------------------------------------------------------

    @classmethod
    def derivative(cls, n: int = 1) -> type:
        """Vector class of derivative order `order + n` in this family."""
        order = cls.order + n
        family = cls._family
        if order not in family:
            base = family[0]
            _build_class(_order_name(base.__name__, order), base.schema.derivative(order),
                         order, family)
        return family[order]

    @classmethod
    def accessor(cls, tag: str) -> FieldAccessor:
        return FieldAccessor(cls.schema, tag)

    @classmethod
    def from_vector(cls, vec) -> 'NamedVector':
        """Build a vector from a flat array of SI values in declaration order."""
        data = np.array(vec, dtype=np.float64)
        if data.shape != (cls.schema.size,):
            raise ShapeError(
                f"{cls.__name__} expects an array of shape ({cls.schema.size},), got {data.shape}"
            )
        return cls._wrap(data)

    @classmethod
    def _wrap(cls, data: np.ndarray) -> 'NamedVector':
        obj = cls.__new__(cls)
        obj._data = data
        return obj

    # ------------------------------------------------------------------
    # field access
    # ------------------------------------------------------------------

    def get(self, tag: str) -> Quantity:
        i = self.schema.index(tag)
        return Quantity(self._data[i], self.schema.fields[i][1])

    def set(self, tag: str, value) -> None:
        i = self.schema.index(tag)
        self._data[i] = _to_si(value, tag, self.schema.fields[i][1])

    def assign(self, other: 'NamedVector') -> None:
        """Overwrite every slot with the values of a same-schema vector."""
        self._check_compatible(other)
        self._data[:] = other._data

    def for_each(self, visitor: Callable[[Quantity], object]) -> None:
        """Call `visitor` with each field's Quantity in declaration order."""
        for value, dim in zip(self._data, self.schema.dimensions):
            visitor(Quantity(value, dim))

    def items(self) -> Iterator[Tuple[str, Quantity]]:
        for value, (tag, dim) in zip(self._data, self.schema.fields):
            yield tag, Quantity(value, dim)

    def __iter__(self) -> Iterator[Quantity]:
        for _, q in self.items():
            yield q

    def __len__(self) -> int:
        return self.schema.size

    def to_vector(self) -> np.ndarray:
        """Flat float64 array of SI values [field_0, ..., field_n-1]."""
        return self._data.copy()

    def copy(self) -> 'NamedVector':
        return type(self)._wrap(self._data.copy())

    __copy__ = copy

    def __deepcopy__(self, memo):
        return self.copy()

    # ------------------------------------------------------------------
    # algebra
    # ------------------------------------------------------------------

    def _check_compatible(self, other: 'NamedVector') -> None:
        if other.schema == self.schema:
            return
        if other.schema.tags == self.schema.tags:
            raise DimensionMismatchError(
                f"Cannot combine {type(self).__name__} with {type(other).__name__}: "
                f"derivative orders differ"
            )
        raise ShapeError(
            f"Cannot combine {type(self).__name__} {list(self.schema.tags)} with "
            f"{type(other).__name__} {list(other.schema.tags)}"
        )

    def __iadd__(self, other):
        if not isinstance(other, NamedVector):
            return NotImplemented
        self._check_compatible(other)
        self._data += other._data
        return self

    def __add__(self, other):
        if not isinstance(other, NamedVector):
            return NotImplemented
        result = self.copy()
        result += other
        return result

    def __isub__(self, other):
        if not isinstance(other, NamedVector):
            return NotImplemented
        self._check_compatible(other)
        self._data -= other._data
        return self

    def __sub__(self, other):
        if not isinstance(other, NamedVector):
            return NotImplemented
        result = self.copy()
        result -= other
        return result

    def __neg__(self):
        return type(self)._wrap(-self._data)

    def __imul__(self, scalar):
        k = _dimensionless(scalar)
        if k is None:
            return NotImplemented
        self._data *= k
        return self

    def __mul__(self, other):
        if isinstance(other, timedelta) or (
                isinstance(other, Quantity) and other.dimension == TIME):
            return self._integrate(as_seconds(other).value)
        k = _dimensionless(other)
        if k is None:
            return NotImplemented
        return type(self)._wrap(self._data * k)

    __rmul__ = __mul__

    def _integrate(self, seconds: float) -> 'NamedVector':
        """Multiply by a duration, giving a vector one derivative order lower."""
        return type(self).derivative(-1)._wrap(self._data * seconds)

    def __eq__(self, other):
        if not isinstance(other, NamedVector):
            return NotImplemented
        return other.schema == self.schema and np.array_equal(self._data, other._data)

    __hash__ = None

    def __str__(self) -> str:
        return "{ " + ", ".join(str(q) for q in self) + " }"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({', '.join(str(q) for q in self)})"


def _dimensionless(scalar):
    """Real value of a dimensionless scalar, None for non-scalars."""
    if isinstance(scalar, Quantity):
        if not scalar.dimension.is_dimensionless:
            raise DimensionMismatchError(
                f"Vectors can only be scaled by dimensionless values or durations, "
                f"got [{scalar.dimension.symbol}]"
            )
        return scalar.value
    if isinstance(scalar, timedelta):
        raise DimensionMismatchError("In-place scaling by a duration would change the vector's dimensions")
    if isinstance(scalar, numbers.Real):
        return float(scalar)
    return None


def _order_name(base_name: str, order: int) -> str:
    if order == 0:
        return base_name
    if order > 0:
        return f"{base_name}Derivative{order}"
    return f"{base_name}Integral{-order}"


def _field_property(tag: str, index: int, dimension: Dimension) -> property:
    def fget(self):
        return Quantity(self._data[index], dimension)

    def fset(self, value):
        self._data[index] = _to_si(value, tag, dimension)

    return property(fget, fset, doc=f"Field {tag!r} [{dimension.symbol or 'dimensionless'}]")


def _build_class(name: str, schema: Schema, order: int, family: Dict[int, type]) -> type:
    namespace = {
        '__slots__': (),
        '__module__': __name__,
        'schema': schema,
        'order': order,
        '_family': family,
    }
    for i, (tag, dim) in enumerate(schema.fields):
        namespace[tag] = _field_property(tag, i, dim)
    cls = type(name, (NamedVector,), namespace)
    family[order] = cls
    return cls


def _normalise_fields(fields) -> Tuple[Tuple[str, Dimension], ...]:
    """Accept (tag, unit) pairs or a flat alternating tag/unit sequence."""
    fields = list(fields.items()) if isinstance(fields, dict) else list(fields)
    if fields and isinstance(fields[0], str):
        if len(fields) % 2:
            raise ShapeError("A flat field list needs an even number of entries (tag, unit, ...)")
        fields = list(zip(fields[0::2], fields[1::2]))
    pairs = []
    for entry in fields:
        if not isinstance(entry, (tuple, list)) or len(entry) != 2:
            raise ShapeError(f"Expected a (tag, unit) pair, got {entry!r}")
        tag, unit = entry
        pairs.append((tag, dimension_of(unit)))
    return tuple(pairs)


_RESERVED = frozenset(dir(NamedVector))


def make_vector(name: str, fields: Sequence) -> type:
    """
    Create a named vector class.

    Args:
        name: Class name, e.g. 'State'
        fields: Ordered (tag, unit) pairs, where unit is a Quantity such as
                units.METER or a Dimension. A flat [tag, unit, tag, unit, ...]
                sequence or a dict is accepted too.

    Returns:
        A NamedVector subclass of derivative order 0

    Raises:
        ShapeError: If the field list is empty, malformed, has duplicate tags,
                    or a tag collides with a NamedVector attribute
    """
    schema = Schema(_normalise_fields(fields))
    clashes = [tag for tag in schema.tags if tag in _RESERVED or tag.startswith('_')]
    if clashes:
        raise ShapeError(f"Field tags clash with vector attributes: {clashes}")
    return _build_class(name, schema, 0, {})
