"""
dynsim - Configuration

This module provides an IntegrationConfig dataclass for dependency injection,
allowing different integration parameters to be passed without modifying
global constants.
"""

from dataclasses import dataclass

from . import constants as C
from .stepper import STEPPERS
from .units import Quantity, as_seconds


@dataclass(frozen=True)
class IntegrationConfig:
    """
    Immutable configuration for trajectory integration.

    Using frozen=True ensures configs cannot be accidentally modified.
    Create new configs via dataclass replace() if needed.

    `step` and `span` accept a timedelta, a time Quantity or seconds and are
    stored as time Quantities, so steps below a microsecond are kept.
    """

    # ── 1. Timing ────────────────────────────────────────────────────────
    step: Quantity = C.DT
    span: Quantity = C.MAX_TIME

    # ── 2. Stepper ───────────────────────────────────────────────────────
    method: str = C.DEFAULT_METHOD
    clip_final_step: bool = C.CLIP_FINAL_STEP

    # ── 3. Misc ──────────────────────────────────────────────────────────
    verbose: bool = True

    def __post_init__(self):
        object.__setattr__(self, 'step', as_seconds(self.step))
        object.__setattr__(self, 'span', as_seconds(self.span))
        if self.step.value <= 0:
            raise ValueError(f"step must be positive, got {self.step}")
        if self.span.value < 0:
            raise ValueError(f"span must be non-negative, got {self.span}")
        if self.method not in STEPPERS:
            raise ValueError(f"Unknown integration method: {self.method}")


def create_default_config() -> IntegrationConfig:
    """Create an IntegrationConfig with default values from constants."""
    return IntegrationConfig()


def create_test_config(step=0.1, span=1.0, **overrides) -> IntegrationConfig:
    """Create a fast config suitable for testing.

    Any keyword arg accepted by IntegrationConfig can be passed as an override.
    """
    defaults = dict(step=step, span=span, verbose=False)
    defaults.update(overrides)
    return IntegrationConfig(**defaults)
