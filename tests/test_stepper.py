import pytest
import numpy as np

from dynsim import stepper
from dynsim import units as U
from dynsim.vector import make_vector

State = make_vector('State', [('x', U.METER), ('v', U.METER_PER_SECOND)])
Deriv = State.derivative()
Decay = make_vector('Decay', [('q', U.DIMENSIONLESS)])


def constant(k):
    return lambda t, x: k


def decay(t, x):
    return Decay.derivative()(-x.q / U.SECOND)


def decay_inplace(x, dxdt, t):
    dxdt.q = -x.q / U.SECOND


def test_classification():
    assert stepper.stepper_kind(stepper.RungeKutta4) is stepper.StepperKind.VALUE
    assert stepper.stepper_kind(stepper.Euler()) is stepper.StepperKind.VALUE
    assert stepper.stepper_kind(stepper.InPlaceRungeKutta4()) is stepper.StepperKind.IN_PLACE
    assert stepper.stepper_kind(stepper.InPlaceEuler) is stepper.StepperKind.IN_PLACE


def test_classification_requires_marker():
    class Unmarked:
        def step(self, f, x, t, dt):
            return x

    class Both:
        is_value_stepper = True

        def step(self, f, x, t, dt):
            return x

        def do_step(self, g, x, t, dt):
            pass

    with pytest.raises(TypeError):
        stepper.stepper_kind(Unmarked)
    with pytest.raises(TypeError):
        stepper.stepper_kind(object())
    assert stepper.stepper_kind(Both) is stepper.StepperKind.VALUE


def test_rk4_constant_derivative_exact():
    x0 = State(1.0, 3.0)
    k = Deriv(2.0, -4.0)
    x1 = stepper.RungeKutta4.step(constant(k), x0, 0.0, 0.75 * U.SECOND)
    assert x1 == x0 + k * (0.75 * U.SECOND)
    assert x1 == State(2.5, 0.0)


def test_rk4_constant_derivative_general_step():
    x0 = State(1.0, 3.0)
    k = Deriv(2.0, -4.0)
    x1 = stepper.RungeKutta4.step(constant(k), x0, 0.0, 0.1)
    expected = (x0 + k * (0.1 * U.SECOND)).to_vector()
    np.testing.assert_allclose(x1.to_vector(), expected, rtol=0, atol=1e-15)


def test_rk4_exact_for_cubic_in_time():
    # x' = 3 t^2  ->  x(1) = 1
    def f(t, x):
        return Deriv(3 * t * t * U.METER / (U.SECOND * U.SECOND * U.SECOND), 0.0)

    x1 = stepper.RungeKutta4.step(f, State(), 0.0, 1.0)
    assert x1.x.value == pytest.approx(1.0, abs=1e-14)


def test_rk4_exponential_decay_accuracy():
    x = Decay(1.0)
    for i in range(10):
        x = stepper.RungeKutta4.step(decay, x, 0.1 * i, 0.1)
    assert x.q.value == pytest.approx(np.exp(-1.0), abs=1e-6)


def test_euler_is_first_order():
    x = Decay(1.0)
    for i in range(10):
        x = stepper.Euler.step(decay, x, 0.1 * i, 0.1)
    assert x.q.value == pytest.approx(0.9 ** 10)
    assert abs(x.q.value - np.exp(-1.0)) > 1e-3


def test_inplace_matches_value_stepper():
    x_value = Decay(1.0)
    x_inplace = Decay(1.0)
    rk4 = stepper.InPlaceRungeKutta4()
    for i in range(5):
        x_value = stepper.RungeKutta4.step(decay, x_value, 0.1 * i, 0.1)
        rk4.do_step(decay_inplace, x_inplace, 0.1 * i, 0.1)
    np.testing.assert_allclose(x_inplace.to_vector(), x_value.to_vector(), rtol=1e-15)


def test_inplace_euler_mutates():
    x = Decay(1.0)
    result = stepper.InPlaceEuler().do_step(decay_inplace, x, 0.0, 0.5)
    assert result is None
    assert x.q.value == pytest.approx(0.5)


@pytest.mark.parametrize("dt", [0.0, -0.1])
def test_non_positive_step(dt):
    with pytest.raises(ValueError):
        stepper.RungeKutta4.step(constant(Deriv()), State(), 0.0, dt)
    with pytest.raises(ValueError):
        stepper.InPlaceEuler().do_step(lambda x, d, t: None, State(), 0.0, dt)


def test_get_stepper():
    assert isinstance(stepper.get_stepper('rk4'), stepper.RungeKutta4)
    assert isinstance(stepper.get_stepper('euler'), stepper.Euler)
    assert isinstance(stepper.get_stepper('rk4_inplace'), stepper.InPlaceRungeKutta4)
    assert isinstance(stepper.get_stepper('euler_inplace'), stepper.InPlaceEuler)
    with pytest.raises(ValueError):
        stepper.get_stepper('unknown')


def test_resolve_stepper():
    assert isinstance(stepper.resolve_stepper('rk4'), stepper.RungeKutta4)
    assert isinstance(stepper.resolve_stepper(stepper.InPlaceEuler), stepper.InPlaceEuler)
    rk4 = stepper.RungeKutta4()
    assert stepper.resolve_stepper(rk4) is rk4
    with pytest.raises(TypeError):
        stepper.resolve_stepper(object())
