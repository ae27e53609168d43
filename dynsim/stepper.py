"""
dynsim - Fixed-Step Integrators

Two kinds of stepper exist:

- value-returning: step(f, x, t, dt) -> x_next, with f(t, x) -> dx/dt.
  Marked with the class attribute `is_value_stepper = True`.
- mutate-in-place: do_step(g, x, t, dt) -> None, with g(x, dxdt, t)
  writing the derivative into dxdt. This is the shape of odeint-style
  stepper plugins.

The kind is decided once per stepper class (stepper_kind) and never re-checked
per call. Times and steps are time Quantities; timedeltas and plain seconds are
accepted too.

The RK4 method computes:
k1 = f(t, x)
k2 = f(t + dt/2, x + dt/2 * k1)
k3 = f(t + dt/2, x + dt/2 * k2)
k4 = f(t + dt, x + dt * k3)
x_new = x + dt/6 * (k1 + 2*(k2 + k3) + k4)
"""

from enum import Enum, auto
from functools import lru_cache

from .units import Quantity, as_seconds
from .vector import NamedVector


class StepperKind(Enum):
    VALUE = auto()       # step(f, x, t, dt) -> x_next
    IN_PLACE = auto()    # do_step(g, x, t, dt) mutates x


@lru_cache(maxsize=None)
def _classify(stepper_type: type) -> StepperKind:
    if getattr(stepper_type, 'is_value_stepper', False) and callable(
            getattr(stepper_type, 'step', None)):
        return StepperKind.VALUE
    if callable(getattr(stepper_type, 'do_step', None)):
        return StepperKind.IN_PLACE
    raise TypeError(
        f"{stepper_type.__name__} is not a stepper: expected step() with "
        f"is_value_stepper = True, or do_step()"
    )


def stepper_kind(stepper) -> StepperKind:
    """Classify a stepper instance or class."""
    stepper_type = stepper if isinstance(stepper, type) else type(stepper)
    return _classify(stepper_type)


def _times(t, dt):
    t = as_seconds(t)
    dt = as_seconds(dt)
    if dt.value <= 0:
        raise ValueError(f"Time step dt must be positive, got {dt}")
    return t, dt


class RungeKutta4:
    """Classic explicit fourth-order Runge-Kutta, value-returning."""

    is_value_stepper = True

    @staticmethod
    def step(f, x: NamedVector, t, dt) -> NamedVector:
        """
        Perform a single RK4 step.

        Args:
            f: Derivative function f(t, x) -> dx/dt
            x: Current state
            t: Current time
            dt: Time step

        Returns:
            New state after integration

        Raises:
            ValueError: If dt <= 0
        """
        t, dt = _times(t, dt)
        half_dt = dt / 2

        k1 = f(t, x)
        k2 = f(t + half_dt, x + half_dt * k1)
        k3 = f(t + half_dt, x + half_dt * k2)
        k4 = f(t + dt, x + dt * k3)

        return x + dt / 6 * (k1 + 2 * (k2 + k3) + k4)


class Euler:
    """
    Explicit Euler, value-returning.

    This is a first-order method, primarily for testing/comparison.
    """

    is_value_stepper = True

    @staticmethod
    def step(f, x: NamedVector, t, dt) -> NamedVector:
        t, dt = _times(t, dt)
        # x_new = x + dt * f(t, x)
        return x + dt * f(t, x)


def _derivative_at(g, x: NamedVector, t: Quantity) -> NamedVector:
    dxdt = type(x).derivative(1)()
    g(x, dxdt, t)
    return dxdt


class InPlaceRungeKutta4:
    """RK4 with the mutate-in-place calling convention."""

    def do_step(self, g, x: NamedVector, t, dt) -> None:
        t, dt = _times(t, dt)
        half_dt = dt / 2

        k1 = _derivative_at(g, x, t)
        k2 = _derivative_at(g, x + half_dt * k1, t + half_dt)
        k3 = _derivative_at(g, x + half_dt * k2, t + half_dt)
        k4 = _derivative_at(g, x + dt * k3, t + dt)

        x += dt / 6 * (k1 + 2 * (k2 + k3) + k4)


class InPlaceEuler:
    """Explicit Euler with the mutate-in-place calling convention."""

    def do_step(self, g, x: NamedVector, t, dt) -> None:
        t, dt = _times(t, dt)
        x += dt * _derivative_at(g, x, t)


STEPPERS = {
    'rk4': RungeKutta4,
    'euler': Euler,
    'rk4_inplace': InPlaceRungeKutta4,
    'euler_inplace': InPlaceEuler,
}


def get_stepper(method: str):
    """
    Create a stepper by name.

    Args:
        method: One of 'rk4', 'euler', 'rk4_inplace', 'euler_inplace'

    Raises:
        ValueError: If the method is unknown
    """
    try:
        return STEPPERS[method]()
    except KeyError:
        raise ValueError(f"Unknown integration method: {method}") from None


def resolve_stepper(stepper):
    """Accept a stepper instance, a stepper class or a registry name."""
    if isinstance(stepper, str):
        stepper = get_stepper(stepper)
    elif isinstance(stepper, type):
        stepper = stepper()
    stepper_kind(stepper)
    return stepper
