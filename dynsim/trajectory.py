"""
dynsim - Lazy Trajectories

TrajectoryIterator repeatedly applies a stepper to a system and yields
(elapsed, state) samples until the elapsed time reaches the span:

    for elapsed, x in system.integrate_range('rk4', x0, u, span, step):
        ...

The first sample is one step after the start; a zero span yields nothing.
Span, step and elapsed are kept as exact Fraction seconds (see
units.as_duration), so span/step counts come out exact: 3 s at 100 ms is 30
samples, the last at exactly 3 s. Samples report elapsed as a time Quantity.

Final step policy: when span is not a multiple of step, the last step is
shortened to land exactly on span (clip_final_step=True, the default).
With clip_final_step=False every step has the nominal length and the last
sample may overshoot span.

A remainder within STEP_TOLERANCE of a step (relative) counts as a whole
step, so a span of 1 s at a step of 1/3 s gives three samples rather than
a fourth, degenerate one.
"""

import logging
import math
from fractions import Fraction

from .stepper import StepperKind, resolve_stepper, stepper_kind
from .types import Sample
from .units import TIME, Quantity, as_duration

logger = logging.getLogger(__name__)

# Relative slack when matching the remaining span against a step
STEP_TOLERANCE = Fraction(1, 10**9)


def _seconds(value: Fraction) -> Quantity:
    return Quantity(value, TIME)


class TrajectoryIterator:
    """
    Single-pass, forward-only sequence of trajectory samples.

    Owns its state, input and counters. The System holds its own copy of the
    transition function and is not modified, so it is shared. Two positions
    compare equal when one is the end sentinel and the other is at end, or
    when span, step and elapsed all match. State and input are not part of
    the comparison, which is only meant for end-of-range checks.
    """

    def __init__(self, system, stepper, initial_state, input, span, step,
                 clip_final_step: bool = True):
        self._system = system
        self._stepper = resolve_stepper(stepper)
        self._kind = stepper_kind(self._stepper)
        self._state = system.coerce_state(initial_state)
        self._input = system.coerce_input(input)
        self._span = as_duration(span)
        self._step = as_duration(step)
        self._elapsed = Fraction(0)
        self._clip = clip_final_step
        self._sentinel = False

        if self._span < 0:
            raise ValueError(f"Span must be non-negative, got {float(self._span)} s")
        if self._step <= 0:
            raise ValueError(f"Time step must be positive, got {float(self._step)} s")

        if self._kind is StepperKind.VALUE:
            self._f = system.bind(self._input)
        else:
            self._g = system.adapt(self._input)

        logger.debug(f"Trajectory: span={float(self._span)}s, step={float(self._step)}s, "
                     f"stepper={type(self._stepper).__name__} ({self._kind.name})")

    @classmethod
    def end(cls) -> 'TrajectoryIterator':
        """The end-of-range sentinel."""
        sentinel = cls.__new__(cls)
        sentinel._span = sentinel._step = sentinel._elapsed = Fraction(0)
        sentinel._sentinel = True
        return sentinel

    # ------------------------------------------------------------------
    # observation
    # ------------------------------------------------------------------

    @property
    def span(self) -> Quantity:
        return _seconds(self._span)

    @property
    def step(self) -> Quantity:
        return _seconds(self._step)

    @property
    def elapsed(self) -> Quantity:
        return _seconds(self._elapsed)

    @property
    def state(self):
        """Live state (mutated by later steps)."""
        return self._state

    @property
    def is_at_end(self) -> bool:
        return self._span - self._elapsed <= self._step * STEP_TOLERANCE

    @property
    def current(self) -> Sample:
        """(elapsed, state) referring to the live state, not a snapshot."""
        return Sample(self.elapsed, self._state)

    @property
    def remaining_steps(self) -> int:
        if self.is_at_end:
            return 0
        return math.ceil((self._span - self._elapsed) / self._step - STEP_TOLERANCE)

    def __length_hint__(self) -> int:
        return self.remaining_steps

    # ------------------------------------------------------------------
    # stepping
    # ------------------------------------------------------------------

    def advance(self) -> None:
        """
        Apply exactly one stepper operation and move elapsed forward.

        Raises:
            RuntimeError: If the trajectory is already at its end
        """
        if self._sentinel or self.is_at_end:
            raise RuntimeError("Trajectory has already reached its span")

        dt = self._step
        remaining = self._span - self._elapsed
        if self._clip and remaining <= dt * (1 + STEP_TOLERANCE):
            dt = remaining

        t = _seconds(self._elapsed)
        if self._kind is StepperKind.VALUE:
            self._state = self._stepper.step(self._f, self._state, t, _seconds(dt))
        else:
            self._stepper.do_step(self._g, self._state, t, _seconds(dt))
        self._elapsed += dt

        if self.is_at_end:
            logger.debug(f"Trajectory reached its span at elapsed={float(self._elapsed)}s")

    def __iter__(self) -> 'TrajectoryIterator':
        return self

    def __next__(self) -> Sample:
        if self._sentinel or self.is_at_end:
            raise StopIteration
        self.advance()
        return Sample(self.elapsed, self._state.copy())

    # ------------------------------------------------------------------
    # comparison
    # ------------------------------------------------------------------

    def __eq__(self, other):
        if not isinstance(other, TrajectoryIterator):
            return NotImplemented
        if other._sentinel:
            return self.is_at_end
        if self._sentinel:
            return other.is_at_end
        return (self._span == other._span and self._step == other._step
                and self._elapsed == other._elapsed)

    __hash__ = None

    def __repr__(self) -> str:
        if self._sentinel:
            return "TrajectoryIterator(<end>)"
        return (f"TrajectoryIterator(elapsed={self.elapsed}, span={self.span}, "
                f"step={self.step})")
