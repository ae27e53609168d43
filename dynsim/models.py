"""
dynsim - Kinematic Bicycle Model

Kinematic bicycle (Kong 2015). With beta the course angle relative to yaw:

    beta    = atan(lr / (lf + lr) * tan(deltaf))
    x_dot   = v * cos(yaw + beta)
    y_dot   = v * sin(yaw + beta)
    yaw_dot = v / lr * sin(beta)
    v_dot   = a

The model exposes its transition function in all three forms a System
accepts, so it doubles as a reference for writing new models.
"""

from . import constants as C
from .system import System, TransitionFunction, make_system
from .units import (
    METER, METER_PER_SECOND, METER_PER_SECOND_SQUARED, RADIAN, LENGTH,
    Quantity, atan, cos, sin, tan,
)
from .vector import make_vector

BicycleState = make_vector('BicycleState', [
    ('x', METER),               # X of center of mass, inertial frame
    ('y', METER),               # Y of center of mass, inertial frame
    ('yaw', RADIAN),            # inertial heading
    ('v', METER_PER_SECOND),    # speed of center of mass
])

BicycleInput = make_vector('BicycleInput', [
    ('a', METER_PER_SECOND_SQUARED),   # acceleration along velocity
    ('deltaf', RADIAN),                # front steering angle
])


def _length(value, name: str) -> Quantity:
    q = value if isinstance(value, Quantity) else value * METER
    if q.dimension != LENGTH:
        raise ValueError(f"{name} must be a length, got {q}")
    if q.value <= 0:
        raise ValueError(f"{name} must be positive, got {q}")
    return q


class KinematicBicycle(TransitionFunction):
    """
    Kinematic bicycle model.

    Args:
        lf: Distance from center of mass to front axle (m or length Quantity)
        lr: Distance from center of mass to rear axle (m or length Quantity)
    """

    state_type = BicycleState
    input_type = BicycleInput
    derivative_type = BicycleState.derivative()

    def __init__(self, lf=C.BICYCLE_LF, lr=C.BICYCLE_LR):
        self.lf = _length(lf, 'lf')
        self.lr = _length(lr, 'lr')

    def course(self, deltaf) -> Quantity:
        """Vehicle course relative to yaw (rad)."""
        return atan(self.lr / (self.lf + self.lr) * tan(deltaf))

    def transition(self, x, u, t):
        """Direct form: f(state, input, time) -> derivative."""
        beta = self.course(u.deltaf)
        return self.derivative_type(
            x.v * cos(x.yaw + beta),
            x.v * sin(x.yaw + beta),
            x.v / self.lr * sin(beta) * RADIAN,
            u.a,
        )

    evaluate = transition

    def state_transition(self, u):
        """External form: f(input) -> g(state, dxdt, time) writing dxdt in place."""
        beta = self.course(u.deltaf)

        def transition(x, dxdt, t):
            dxdt.x = x.v * cos(x.yaw + beta)
            dxdt.y = x.v * sin(x.yaw + beta)
            dxdt.yaw = x.v / self.lr * sin(beta) * RADIAN
            dxdt.v = u.a

        return transition

    def make_system(self, form: str = 'contract') -> System:
        """
        Build a System around this model.

        Args:
            form: 'contract' (the model object), 'direct' or 'external'
        """
        if form == 'contract':
            tf = self
        elif form == 'direct':
            tf = self.transition
        elif form == 'external':
            tf = self.state_transition
        else:
            raise ValueError(f"Unknown transition form: {form}")
        return make_system(self.state_type, self.input_type, tf)

    def __repr__(self) -> str:
        return f"KinematicBicycle(lf={self.lf}, lr={self.lr})"


def create_initial_state() -> BicycleState:
    """
    Create the default initial state.

    Returns:
        BicycleState with the launch conditions from constants
    """
    return BicycleState(
        C.INITIAL_X * METER,
        C.INITIAL_Y * METER,
        C.INITIAL_YAW * RADIAN,
        C.INITIAL_SPEED * METER_PER_SECOND,
    )


def create_default_input(acceleration: float = C.INITIAL_ACCELERATION,
                         steering: float = C.INITIAL_STEERING) -> BicycleInput:
    return BicycleInput(acceleration * METER_PER_SECOND_SQUARED, steering * RADIAN)
