"""
dynsim - Dynamical Systems

A System pairs a state vector class and an input vector class with a
transition function and gives every transition function the same surface:

    evaluate(x, u, t) -> dx/dt           (used by value-returning steppers)
    adapt(u)          -> g(x, dxdt, t)   (used by mutate-in-place steppers)

Transition functions come in three shapes, classified once at construction:

- CONTRACT: an object implementing TransitionFunction.evaluate(x, u, t)
- EXTERNAL: a callable tf(u) returning g(x, dxdt, t) that writes dxdt in place
- DIRECT:   a callable tf(x, u, t) returning dx/dt

Plain callables are classified by binding their signature against the
EXTERNAL (one argument) and DIRECT (three arguments) forms; exactly one of
them must bind.
"""

import copy
import inspect
import logging
from abc import ABC, abstractmethod
from enum import Enum, auto

from .errors import DimensionMismatchError, ShapeError, TransitionFunctionShapeError
from .stepper import StepperKind, resolve_stepper, stepper_kind
from .trajectory import TrajectoryIterator
from .units import as_seconds
from .vector import NamedVector

logger = logging.getLogger(__name__)


class Form(Enum):
    CONTRACT = auto()
    EXTERNAL = auto()
    DIRECT = auto()


class TransitionFunction(ABC):
    """
    Explicit transition-function contract.

    Any object with a callable `evaluate` attribute is treated as an
    implementation, subclass or not.
    """

    @abstractmethod
    def evaluate(self, state, input, time):
        """Return the state derivative for (state, input, time)."""

    @classmethod
    def __subclasshook__(cls, C):
        if cls is TransitionFunction:
            if callable(getattr(C, 'evaluate', None)):
                return True
        return NotImplemented


def _binds(signature: inspect.Signature, n_args: int) -> bool:
    try:
        signature.bind(*([None] * n_args))
    except TypeError:
        return False
    return True


def classify_transition_function(tf) -> Form:
    """
    Decide which calling form a transition function uses.

    Raises:
        TransitionFunctionShapeError: If tf matches neither or both forms
    """
    if isinstance(tf, TransitionFunction):
        return Form.CONTRACT
    if not callable(tf):
        raise TransitionFunctionShapeError(
            f"Transition function must be callable, got {type(tf).__name__}"
        )
    try:
        signature = inspect.signature(tf)
    except (TypeError, ValueError) as e:
        raise TransitionFunctionShapeError(
            f"Cannot inspect the signature of {tf!r}: {e}"
        ) from e

    external = _binds(signature, 1)
    direct = _binds(signature, 3)
    if external and direct:
        raise TransitionFunctionShapeError(
            f"Transition function {signature} is ambiguous: it accepts both f(input) "
            f"and f(state, input, time)"
        )
    if not (external or direct):
        raise TransitionFunctionShapeError(
            f"Transition function {signature} must be callable as f(input) -> "
            f"g(state, dxdt, time), or as f(state, input, time) -> deriv"
        )
    return Form.EXTERNAL if external else Form.DIRECT


class System:
    """
    State-space system: state/input vector classes plus a transition function.

    Immutable after construction. The transition function is deep-copied, so
    later changes to the caller's model object do not reach the system or
    any trajectory built from it. Plain functions are copied by reference.
    """

    def __init__(self, state_type: type, input_type: type, transition_function):
        for label, vtype in (('state', state_type), ('input', input_type)):
            if not (isinstance(vtype, type) and issubclass(vtype, NamedVector)
                    and vtype.schema is not None):
                raise TypeError(f"The {label} type must be a vector class created by make_vector()")

        self._state_type = state_type
        self._input_type = input_type
        self._deriv_type = state_type.derivative(1)
        self._tf = copy.deepcopy(transition_function)
        self._form = classify_transition_function(self._tf)

        logger.debug(f"System({state_type.__name__}, {input_type.__name__}): "
                     f"transition function classified as {self._form.name}")

    @property
    def state_type(self) -> type:
        return self._state_type

    @property
    def input_type(self) -> type:
        return self._input_type

    @property
    def derivative_type(self) -> type:
        return self._deriv_type

    @property
    def form(self) -> Form:
        return self._form

    @property
    def transition_function(self):
        return self._tf

    # ------------------------------------------------------------------
    # coercion
    # ------------------------------------------------------------------

    @staticmethod
    def _coerce(vtype: type, value, label: str) -> NamedVector:
        if isinstance(value, NamedVector):
            if value.schema != vtype.schema:
                raise ShapeError(
                    f"Expected {label} {vtype.__name__} {list(vtype.schema.tags)}, "
                    f"got {type(value).__name__} {list(value.schema.tags)}"
                )
            return vtype.from_vector(value.to_vector())
        return vtype(*value)

    def coerce_state(self, state) -> NamedVector:
        """Independent copy of `state` as this system's state class."""
        return self._coerce(self._state_type, state, 'state')

    def coerce_input(self, input) -> NamedVector:
        return self._coerce(self._input_type, input, 'input')

    def _coerce_derivative(self, result) -> NamedVector:
        deriv_type = self._deriv_type
        if isinstance(result, NamedVector):
            if result.schema == deriv_type.schema:
                return result
            raise DimensionMismatchError(
                f"Transition function returned {type(result).__name__}, "
                f"expected {deriv_type.__name__}"
            )
        return deriv_type(*result)

    # ------------------------------------------------------------------
    # evaluation
    # ------------------------------------------------------------------

    def evaluate(self, state, input, time) -> NamedVector:
        """State derivative at (state, input, time), whatever the function's form."""
        t = as_seconds(time)
        if self._form is Form.CONTRACT:
            return self._coerce_derivative(self._tf.evaluate(state, input, t))
        if self._form is Form.DIRECT:
            return self._coerce_derivative(self._tf(state, input, t))
        dxdt = self._deriv_type()
        self._tf(input)(state, dxdt, t)
        return dxdt

    def adapt(self, input):
        """Mutate-in-place closure g(state, dxdt, time) for a fixed input."""
        if self._form is Form.EXTERNAL:
            return self._tf(input)

        def transition(state, dxdt, time):
            dxdt.assign(self.evaluate(state, input, time))

        return transition

    def bind(self, input):
        """Value-returning closure f(time, state) for a fixed input."""
        if self._form is Form.EXTERNAL:
            g = self._tf(input)
            deriv_type = self._deriv_type

            def f(time, state):
                dxdt = deriv_type()
                g(state, dxdt, time)
                return dxdt

            return f

        return lambda time, state: self.evaluate(state, input, time)

    # ------------------------------------------------------------------
    # integration
    # ------------------------------------------------------------------

    def integrate(self, stepper, state, input, dt, time=0.0) -> NamedVector:
        """
        Advance `state` by one step; the argument is left untouched.

        Args:
            stepper: Stepper instance, class or registry name ('rk4', ...)
            state: Current state
            input: Input held constant over the step
            dt: Time step (timedelta, time Quantity or seconds)
            time: Time at the start of the step

        Returns:
            New state after integration
        """
        stepper = resolve_stepper(stepper)
        x = self.coerce_state(state)
        u = self.coerce_input(input)
        t = as_seconds(time)
        dt = as_seconds(dt)
        if stepper_kind(stepper) is StepperKind.VALUE:
            return stepper.step(self.bind(u), x, t, dt)
        stepper.do_step(self.adapt(u), x, t, dt)
        return x

    def integrate_range(self, stepper, initial_state, input, span, step,
                        clip_final_step: bool = True):
        """Lazy trajectory of (elapsed, state) samples; see TrajectoryIterator."""
        return TrajectoryIterator(self, stepper, initial_state, input, span, step,
                                  clip_final_step=clip_final_step)

    def trajectory(self, stepper, initial_state, input, span, step,
                   clip_final_step: bool = True) -> list:
        """Eagerly computed list of Samples."""
        return list(self.integrate_range(stepper, initial_state, input, span, step,
                                         clip_final_step=clip_final_step))

    def __repr__(self) -> str:
        return (f"System({self._state_type.__name__}, {self._input_type.__name__}, "
                f"form={self._form.name})")


def make_system(state_type: type, input_type: type, transition_function) -> System:
    """Create a System; see System for the accepted transition-function forms."""
    return System(state_type, input_type, transition_function)
