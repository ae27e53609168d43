"""
dynsim - Dimensioned State-Space Integration

Describe a continuous-time system as named, physically-dimensioned state and
input vectors plus a transition function, then integrate it with a fixed-step
stepper into a lazy trajectory of (elapsed, state) samples.

Modules:
    - errors: Error taxonomy
    - units: Dimensional scalars, trig functions, duration conversion
    - vector: Named vectors and the derivative-order schema transform
    - stepper: RK4 / Euler steppers and stepper classification
    - system: Transition-function normalization
    - trajectory: Lazy trajectory iterator
    - config: IntegrationConfig
    - models: Kinematic bicycle example model
    - main: Trajectory driver
"""

from .errors import (
    DynamicsError, ShapeError, KeyNotFoundError,
    TransitionFunctionShapeError, DimensionMismatchError,
)
from .units import Dimension, Quantity
from .vector import NamedVector, Schema, make_vector, derivative_schema
from .stepper import RungeKutta4, Euler, InPlaceRungeKutta4, InPlaceEuler, get_stepper
from .system import System, TransitionFunction, make_system
from .trajectory import TrajectoryIterator
from .types import Sample
from .config import IntegrationConfig, create_default_config, create_test_config
from .main import run_trajectory, TrajectoryLog

__version__ = "0.1.0"
__author__ = "dynsim developers"

__all__ = [
    'DynamicsError',
    'ShapeError',
    'KeyNotFoundError',
    'TransitionFunctionShapeError',
    'DimensionMismatchError',
    'Dimension',
    'Quantity',
    'NamedVector',
    'Schema',
    'make_vector',
    'derivative_schema',
    'RungeKutta4',
    'Euler',
    'InPlaceRungeKutta4',
    'InPlaceEuler',
    'get_stepper',
    'System',
    'TransitionFunction',
    'make_system',
    'TrajectoryIterator',
    'Sample',
    'IntegrationConfig',
    'create_default_config',
    'create_test_config',
    'run_trajectory',
    'TrajectoryLog',
]
