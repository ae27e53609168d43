"""
dynsim - Default Integration Settings and Model Parameters

This module defines the default integration step/span and the parameters of
the kinematic bicycle example model used throughout the drivers and tests.

VALUES FROM: Kong et al. 2015, "Kinematic and Dynamic Vehicle Models for
Autonomous Driving Control Design"
"""

from datetime import timedelta

# =============================================================================
# INTEGRATION
# =============================================================================

# Fixed integration step
DT = timedelta(milliseconds=100)

# Trajectory span
MAX_TIME = timedelta(seconds=3)

# Stepper registry name ('rk4', 'euler', 'rk4_inplace', 'euler_inplace')
DEFAULT_METHOD = 'rk4'

# Land the last sample exactly on the span (see dynsim.trajectory)
CLIP_FINAL_STEP = True

# =============================================================================
# KINEMATIC BICYCLE MODEL
# =============================================================================

BICYCLE_LF = 1.105  # Center of mass to front axle (m)
BICYCLE_LR = 1.738  # Center of mass to rear axle (m)

# Initial conditions
INITIAL_X = 0.0  # m
INITIAL_Y = 0.0  # m
INITIAL_YAW = 0.0  # rad
INITIAL_SPEED = 10.0  # m/s

# Inputs
INITIAL_ACCELERATION = 0.0  # m/s^2
INITIAL_STEERING = 0.2  # rad (front wheel)

# =============================================================================


def print_config():
    """Print configuration summary."""
    print("=" * 60)
    print("dynsim configuration")
    print("=" * 60)
    print(f"Step: {DT.total_seconds() * 1000:.0f} ms")
    print(f"Span: {MAX_TIME.total_seconds():.1f} s")
    print(f"Method: {DEFAULT_METHOD}")
    print(f"Bicycle lf/lr: {BICYCLE_LF:.3f} m / {BICYCLE_LR:.3f} m")
    print("=" * 60)
