"""
dynsim - Trajectory Driver

This module runs a system over a configured span with:
- Stepper selection from the config (or an explicit override)
- Data logging of every sample
- Logging framework for diagnostics
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .config import IntegrationConfig, create_default_config
from .system import System
from .types import Sample, TrajectorySummary

# Configure module logger
logger = logging.getLogger(__name__)


@dataclass
class TrajectoryLog:
    """Container for logged trajectory data (SI values per field)."""
    time: List[float] = field(default_factory=list)
    fields: Dict[str, List[float]] = field(default_factory=dict)
    states: List[Any] = field(default_factory=list)
    span_s: float = 0.0
    step_s: float = 0.0
    method: str = ""

    def append(self, sample: Sample):
        """Log data from one sample."""
        self.time.append(sample.seconds)
        self.states.append(sample.state)
        for tag, q in sample.state.items():
            self.fields.setdefault(tag, []).append(q.value)

    def __len__(self) -> int:
        return len(self.time)

    def summary(self) -> TrajectorySummary:
        return TrajectorySummary(
            samples=len(self.time),
            span_s=self.span_s,
            step_s=self.step_s,
            final_elapsed_s=self.time[-1] if self.time else 0.0,
            method=self.method,
            final_state={tag: values[-1] for tag, values in self.fields.items()},
        )


def run_trajectory(system: System, initial_state, input,
                   config: Optional[IntegrationConfig] = None,
                   span=None, step=None, method: Optional[str] = None,
                   verbose: Optional[bool] = None):
    """
    Integrate `system` from `initial_state` under a constant `input`.

    Args:
        system: System to integrate
        initial_state: Initial state vector (or its positional values)
        input: Input vector held for the whole run
        config: IntegrationConfig (defaults from constants)
        span, step, method, verbose: Overrides of the config values

    Returns:
        (final_state, log)
    """
    if config is None:
        config = create_default_config()
    span = config.span if span is None else span
    step = config.step if step is None else step
    method = config.method if method is None else method
    verbose = config.verbose if verbose is None else verbose

    trajectory = system.integrate_range(method, initial_state, input, span, step,
                                        clip_final_step=config.clip_final_step)
    log = TrajectoryLog(span_s=trajectory.span.value,
                        step_s=trajectory.step.value, method=method)

    logger.info(f"Starting trajectory: step={log.step_s}s, span={log.span_s}s, method={method}")
    logger.debug(f"Initial state: {trajectory.state}")

    if verbose:
        print(f"{'Time (s)':>10} | State")
        print("-" * 60)

    start_time = time.time()
    final_state = trajectory.state.copy()
    for sample in trajectory:
        log.append(sample)
        final_state = sample.state
        if verbose:
            print(f"{sample.seconds:10.3f} | {sample.state}")

    elapsed = time.time() - start_time
    logger.info(f"Trajectory complete: {len(log)} steps in {elapsed:.3f}s")
    logger.info(f"Final state: {final_state}")
    return final_state, log
