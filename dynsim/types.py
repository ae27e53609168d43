"""
dynsim - Type Definitions

This module provides NamedTuple/TypedDict definitions for structured return
types, improving type safety and IDE support.
"""

from typing import Any, NamedTuple, TypedDict

from .units import as_seconds


class Sample(NamedTuple):
    """One trajectory sample."""
    elapsed: Any  # Time since the start of the trajectory (time Quantity)
    state: Any  # NamedVector state at `elapsed`

    @property
    def seconds(self) -> float:
        """Elapsed time in seconds."""
        return as_seconds(self.elapsed).value


class TrajectorySummary(TypedDict):
    """Return type for TrajectoryLog.summary()."""
    samples: int  # Number of samples produced
    span_s: float  # Requested span (s)
    step_s: float  # Nominal step (s)
    final_elapsed_s: float  # Elapsed time of the last sample (s)
    method: str  # Stepper registry name
    final_state: dict  # Field tag -> SI value of the last sample
