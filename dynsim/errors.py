"""
dynsim - Error Types

All of these signal programming errors (a malformed vector, an unknown
field, a transition function of the wrong shape, mixed dimensions). They are
raised at the point of construction or binding and are never retried.
"""


class DynamicsError(Exception):
    """Base class for dynsim errors."""
    pass


class ShapeError(DynamicsError, ValueError):
    """Raised when a vector gets the wrong number of fields or an invalid schema."""
    pass


class KeyNotFoundError(DynamicsError, KeyError):
    """Raised when a field tag is not part of a vector's schema."""

    def __init__(self, tag, tags):
        self.tag = tag
        self.tags = tuple(tags)
        super().__init__(tag)

    def __str__(self) -> str:
        return f"Unknown field {self.tag!r}, expected one of {list(self.tags)}"


class TransitionFunctionShapeError(DynamicsError, TypeError):
    """Raised when a transition function matches neither or both calling forms."""
    pass


class DimensionMismatchError(DynamicsError, ValueError):
    """Raised on arithmetic or assignment between incompatible dimensions."""
    pass
