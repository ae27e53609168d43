"""
dynsim - Dimensional Scalars

A Quantity is a float in SI base units tagged with a Dimension, the integer
exponents of length, mass, time and angle. Angle is kept as its own base
dimension so that trig functions can insist on angle arguments:

    sin, cos, tan : angle         -> dimensionless
    atan          : dimensionless -> angle

Durations are handled in two forms:
- exact Fraction seconds for bookkeeping (see as_duration)
- a time Quantity (seconds) for arithmetic inside the steppers
"""

import math
import numbers
from dataclasses import dataclass
from datetime import timedelta
from fractions import Fraction

import numpy as np

from .errors import DimensionMismatchError


@dataclass(frozen=True)
class Dimension:
    """Exponents of the base dimensions."""
    length: int = 0
    mass: int = 0
    time: int = 0
    angle: int = 0

    def __mul__(self, other: 'Dimension') -> 'Dimension':
        return Dimension(
            self.length + other.length,
            self.mass + other.mass,
            self.time + other.time,
            self.angle + other.angle,
        )

    def __truediv__(self, other: 'Dimension') -> 'Dimension':
        return self * other ** -1

    def __pow__(self, n: int) -> 'Dimension':
        return Dimension(self.length * n, self.mass * n, self.time * n, self.angle * n)

    def with_time_shift(self, n: int) -> 'Dimension':
        """Dimension multiplied by time^n."""
        return Dimension(self.length, self.mass, self.time + n, self.angle)

    @property
    def is_dimensionless(self) -> bool:
        return self == DIMENSIONLESS_DIM

    @property
    def symbol(self) -> str:
        """Compact unit symbol in SI base units, e.g. 'm/s^2' or 'rad/s'."""
        numerator = []
        denominator = []
        for sym, exp in (('m', self.length), ('kg', self.mass),
                         ('rad', self.angle), ('s', self.time)):
            if exp == 0:
                continue
            target = numerator if exp > 0 else denominator
            target.append(sym if abs(exp) == 1 else f"{sym}^{abs(exp)}")
        if not numerator and not denominator:
            return ""
        text = "*".join(numerator) if numerator else "1"
        if denominator:
            text += "/" + "/".join(denominator)
        return text


DIMENSIONLESS_DIM = Dimension()
LENGTH = Dimension(length=1)
MASS = Dimension(mass=1)
TIME = Dimension(time=1)
ANGLE = Dimension(angle=1)


def _coerce(other):
    """Turn numbers and timedeltas into Quantities, or return None."""
    if isinstance(other, Quantity):
        return other
    if isinstance(other, timedelta):
        return Quantity(other.total_seconds(), TIME)
    if isinstance(other, numbers.Real):
        return Quantity(other)
    return None


class Quantity:
    """
    Scalar value with a physical dimension.

    Addition, subtraction and ordering require equal dimensions; products and
    quotients combine them. Values are always held in SI base units.
    """

    __slots__ = ('value', 'dimension')

    # Keep numpy scalars from broadcasting over us; defer to our reflected ops.
    __array_ufunc__ = None

    def __init__(self, value, dimension: Dimension = DIMENSIONLESS_DIM):
        self.value = float(value)
        self.dimension = dimension

    def _same_dimension(self, other: 'Quantity', op: str) -> None:
        if self.dimension != other.dimension:
            raise DimensionMismatchError(
                f"Cannot {op} [{self.dimension.symbol or '1'}] and "
                f"[{other.dimension.symbol or '1'}]"
            )

    def __add__(self, other):
        other = _coerce(other)
        if other is None:
            return NotImplemented
        self._same_dimension(other, 'add')
        return Quantity(self.value + other.value, self.dimension)

    __radd__ = __add__

    def __sub__(self, other):
        other = _coerce(other)
        if other is None:
            return NotImplemented
        self._same_dimension(other, 'subtract')
        return Quantity(self.value - other.value, self.dimension)

    def __rsub__(self, other):
        other = _coerce(other)
        if other is None:
            return NotImplemented
        return other - self

    def __mul__(self, other):
        other = _coerce(other)
        if other is None:
            return NotImplemented
        return Quantity(self.value * other.value, self.dimension * other.dimension)

    __rmul__ = __mul__

    def __truediv__(self, other):
        other = _coerce(other)
        if other is None:
            return NotImplemented
        return Quantity(self.value / other.value, self.dimension / other.dimension)

    def __rtruediv__(self, other):
        other = _coerce(other)
        if other is None:
            return NotImplemented
        return other / self

    def __neg__(self):
        return Quantity(-self.value, self.dimension)

    def __pos__(self):
        return Quantity(self.value, self.dimension)

    def __abs__(self):
        return Quantity(abs(self.value), self.dimension)

    def __eq__(self, other):
        other = _coerce(other)
        if other is None:
            return NotImplemented
        return self.dimension == other.dimension and self.value == other.value

    def __hash__(self):
        # Dimensionless quantities compare equal to plain numbers
        if self.dimension.is_dimensionless:
            return hash(self.value)
        return hash((self.value, self.dimension))

    def __lt__(self, other):
        other = _coerce(other)
        if other is None:
            return NotImplemented
        self._same_dimension(other, 'compare')
        return self.value < other.value

    def __le__(self, other):
        other = _coerce(other)
        if other is None:
            return NotImplemented
        self._same_dimension(other, 'compare')
        return self.value <= other.value

    def __gt__(self, other):
        other = _coerce(other)
        if other is None:
            return NotImplemented
        self._same_dimension(other, 'compare')
        return self.value > other.value

    def __ge__(self, other):
        other = _coerce(other)
        if other is None:
            return NotImplemented
        self._same_dimension(other, 'compare')
        return self.value >= other.value

    def __float__(self) -> float:
        if not self.dimension.is_dimensionless:
            raise DimensionMismatchError(
                f"Only dimensionless quantities convert to float, got [{self.dimension.symbol}]"
            )
        return self.value

    def to(self, unit: 'Quantity') -> float:
        """Magnitude of this quantity expressed in `unit`."""
        self._same_dimension(unit, 'convert')
        return self.value / unit.value

    def __repr__(self) -> str:
        return f"Quantity({self.value!r}, {self.dimension!r})"

    def __str__(self) -> str:
        symbol = self.dimension.symbol
        return f"{self.value:g} {symbol}" if symbol else f"{self.value:g}"


# =============================================================================
# UNITS (SI base units scale 1.0)
# =============================================================================

DIMENSIONLESS = Quantity(1.0)
METER = Quantity(1.0, LENGTH)
KILOGRAM = Quantity(1.0, MASS)
SECOND = Quantity(1.0, TIME)
MILLISECOND = Quantity(1e-3, TIME)
RADIAN = Quantity(1.0, ANGLE)
DEGREE = Quantity(np.pi / 180.0, ANGLE)
METER_PER_SECOND = METER / SECOND
METER_PER_SECOND_SQUARED = METER / (SECOND * SECOND)
RADIAN_PER_SECOND = RADIAN / SECOND


def dimension_of(unit) -> Dimension:
    """Dimension of a unit given as a Quantity or a Dimension."""
    if isinstance(unit, Dimension):
        return unit
    if isinstance(unit, Quantity):
        return unit.dimension
    raise TypeError(f"Expected a Quantity or Dimension as unit, got {type(unit).__name__}")


# =============================================================================
# MATH
# =============================================================================

def _require(q, dimension: Dimension, name: str) -> float:
    q = _coerce(q)
    if q is None or q.dimension != dimension:
        expected = dimension.symbol or 'dimensionless'
        got = 'unsupported type' if q is None else (q.dimension.symbol or 'dimensionless')
        raise DimensionMismatchError(f"{name}() expects [{expected}], got [{got}]")
    return q.value


def sin(angle) -> Quantity:
    return Quantity(np.sin(_require(angle, ANGLE, 'sin')))


def cos(angle) -> Quantity:
    return Quantity(np.cos(_require(angle, ANGLE, 'cos')))


def tan(angle) -> Quantity:
    return Quantity(np.tan(_require(angle, ANGLE, 'tan')))


def atan(x) -> Quantity:
    return Quantity(np.arctan(_require(x, DIMENSIONLESS_DIM, 'atan')), ANGLE)


def sqrt(q) -> Quantity:
    """Square root; every dimension exponent must be even."""
    q = _coerce(q)
    if q is None:
        raise TypeError("sqrt() expects a Quantity or a real number")
    dim = q.dimension
    if any(exp % 2 for exp in (dim.length, dim.mass, dim.time, dim.angle)):
        raise DimensionMismatchError(f"sqrt() of [{dim.symbol}] has no integral dimension")
    root = Dimension(dim.length // 2, dim.mass // 2, dim.time // 2, dim.angle // 2)
    return Quantity(np.sqrt(q.value), root)


# =============================================================================
# DURATIONS
# =============================================================================

def as_duration(duration) -> Fraction:
    """
    Convert a duration to an exact number of seconds.

    Accepts a timedelta, a time Quantity, or a real number of seconds. A float
    is read as the shortest decimal that round-trips to it (0.1 -> 1/10), so
    sums of decimal steps land exactly on decimal spans: 30 steps of 0.1 s
    make exactly 3 s. Timedeltas and integers convert without loss.

    Raises:
        DimensionMismatchError: For a Quantity that is not a time
        ValueError: For a non-finite duration
        TypeError: For anything else
    """
    if isinstance(duration, timedelta):
        return Fraction(duration // timedelta(microseconds=1), 1_000_000)
    if isinstance(duration, Quantity):
        duration = _require(duration, TIME, 'as_duration')
    elif not isinstance(duration, numbers.Real):
        raise TypeError(f"Cannot interpret {type(duration).__name__} as a duration")
    if isinstance(duration, numbers.Rational):
        return Fraction(duration.numerator, duration.denominator)
    seconds = float(duration)
    if not math.isfinite(seconds):
        raise ValueError(f"Duration must be finite, got {seconds}")
    return Fraction(repr(seconds))


def as_seconds(duration) -> Quantity:
    """Convert a duration (timedelta, time Quantity or real seconds) to a time Quantity."""
    if isinstance(duration, Quantity):
        _require(duration, TIME, 'as_seconds')
        return duration
    if isinstance(duration, timedelta):
        return Quantity(duration.total_seconds(), TIME)
    if isinstance(duration, numbers.Real):
        return Quantity(duration, TIME)
    raise TypeError(f"Cannot interpret {type(duration).__name__} as a duration")
