from datetime import timedelta

import pytest
import numpy as np

from dynsim import units as U
from dynsim.system import make_system
from dynsim.trajectory import TrajectoryIterator
from dynsim.types import Sample
from dynsim.vector import make_vector

State = make_vector('State', [('x', U.METER), ('v', U.METER_PER_SECOND)])
Input = make_vector('Input', [('a', U.METER_PER_SECOND_SQUARED)])
Deriv = State.derivative()

ms = lambda n: timedelta(milliseconds=n)


@pytest.fixture
def system():
    return make_system(State, Input, lambda x, u, t: Deriv(x.v, u.a))


@pytest.fixture
def x0():
    return State(0.0, 1.0)


@pytest.fixture
def u():
    return Input(0.0)


def test_zero_span_yields_nothing(system, x0, u):
    it = system.integrate_range('rk4', x0, u, 0.0, 0.1)
    assert it.is_at_end
    assert it.remaining_steps == 0
    assert list(it) == []
    assert it == TrajectoryIterator.end()


def test_sample_count_and_spacing(system, x0, u):
    samples = system.trajectory('rk4', x0, u, timedelta(seconds=3), ms(100))
    assert len(samples) == 30
    assert [s.elapsed for s in samples] == [ms(100 * i) for i in range(1, 31)]
    assert all(isinstance(s, Sample) for s in samples)
    assert samples[-1].seconds == pytest.approx(3.0)


def test_time_inputs_are_equivalent(system, x0, u):
    a = system.trajectory('rk4', x0, u, 3.0, 0.1)
    b = system.trajectory('rk4', x0, u, 3 * U.SECOND, 100 * U.MILLISECOND)
    assert [s.elapsed for s in a] == [s.elapsed for s in b]


def test_remaining_steps_and_length_hint(system, x0, u):
    it = system.integrate_range('rk4', x0, u, 1.0, 0.3)
    assert it.remaining_steps == 4
    next(it)
    assert it.remaining_steps == 3
    assert it.__length_hint__() == 3


def test_final_step_is_clipped_by_default(system, x0, u):
    samples = system.trajectory('rk4', x0, u, ms(250), ms(100))
    assert [s.elapsed for s in samples] == [ms(100), ms(200), ms(250)]
    # constant speed 1 m/s: x equals elapsed seconds
    assert samples[-1].state.x.value == pytest.approx(0.25)


def test_overshoot_without_clipping(system, x0, u):
    samples = system.trajectory('rk4', x0, u, ms(250), ms(100), clip_final_step=False)
    assert [s.elapsed for s in samples] == [ms(100), ms(200), ms(300)]
    assert samples[-1].state.x.value == pytest.approx(0.3)


def test_advance_and_current(system, x0, u):
    it = system.integrate_range('euler', x0, u, 0.2, 0.1)
    assert it.elapsed == timedelta(0)
    it.advance()
    elapsed, state = it.current
    assert elapsed == ms(100)
    assert state is it.state
    it.advance()
    assert it.is_at_end
    with pytest.raises(RuntimeError):
        it.advance()
    with pytest.raises(StopIteration):
        next(it)


def test_terminal_state_is_sticky(system, x0, u):
    it = system.integrate_range('rk4', x0, u, 0.1, 0.1)
    assert len(list(it)) == 1
    assert list(it) == []
    assert it.is_at_end


def test_samples_are_snapshots_for_inplace_steppers(system, x0, u):
    samples = system.trajectory('rk4_inplace', x0, u, 0.3, 0.1)
    xs = [s.state.x.value for s in samples]
    np.testing.assert_allclose(xs, [0.1, 0.2, 0.3])


def test_initial_state_is_copied(system, x0, u):
    it = system.integrate_range('rk4_inplace', x0, u, 0.3, 0.1)
    list(it)
    assert x0 == State(0.0, 1.0)


def test_equality_compares_counters_only(system, u):
    a = system.integrate_range('rk4', State(0.0, 1.0), u, 1.0, 0.1)
    b = system.integrate_range('rk4', State(5.0, -3.0), Input(2.0), 1.0, 0.1)
    assert a == b
    next(a)
    assert a != b
    next(b)
    assert a == b
    c = system.integrate_range('rk4', State(), u, 2.0, 0.1)
    next(c)
    assert a != c


def test_equality_with_end_sentinel(system, x0, u):
    end = TrajectoryIterator.end()
    it = system.integrate_range('rk4', x0, u, 0.2, 0.1)
    assert it != end
    assert end != it
    list(it)
    assert it == end
    assert end == it
    assert end == TrajectoryIterator.end()
    with pytest.raises(StopIteration):
        next(end)
    assert "end" in repr(end)


def test_iterators_are_unhashable(system, x0, u):
    with pytest.raises(TypeError):
        hash(system.integrate_range('rk4', x0, u, 1.0, 0.1))


@pytest.mark.parametrize("span, step", [(-1.0, 0.1), (1.0, 0.0), (1.0, -0.1)])
def test_invalid_span_or_step(system, x0, u, span, step):
    with pytest.raises(ValueError):
        system.integrate_range('rk4', x0, u, span, step)


def test_unknown_method(system, x0, u):
    with pytest.raises(ValueError):
        system.integrate_range('unknown', x0, u, 1.0, 0.1)


def test_independent_iterators(system, x0, u):
    a = system.integrate_range('rk4', x0, u, 1.0, 0.1)
    b = system.integrate_range('rk4', x0, Input(1.0), 1.0, 0.1)
    last_a = list(a)[-1].state
    last_b = list(b)[-1].state
    assert last_a.v.value == pytest.approx(1.0)
    assert last_b.v.value == pytest.approx(2.0)


def test_step_that_divides_span_in_thirds(system, x0, u):
    samples = system.trajectory('rk4', x0, u, 1.0, 1 / 3)
    assert len(samples) == 3
    assert samples[-1].elapsed == 1.0 * U.SECOND
    assert samples[0].seconds == pytest.approx(1 / 3, rel=1e-15)
    # constant speed 1 m/s: x equals elapsed seconds
    assert samples[-1].state.x.value == pytest.approx(1.0, rel=1e-15)


def test_step_that_divides_span_in_thirds_without_clipping(system, x0, u):
    samples = system.trajectory('rk4', x0, u, 1.0, 1 / 3, clip_final_step=False)
    assert len(samples) == 3


def test_sub_microsecond_step(system, x0, u):
    it = system.integrate_range('euler', x0, u, 1e-6 * U.SECOND, 1e-7 * U.SECOND)
    assert it.remaining_steps == 10
    samples = list(it)
    assert len(samples) == 10
    assert samples[0].elapsed == 1e-7 * U.SECOND
    assert samples[-1].elapsed == 1e-6 * U.SECOND
    assert samples[-1].state.x.value == pytest.approx(1e-6)


def test_elapsed_is_a_time_quantity(system, x0, u):
    it = system.integrate_range('rk4', x0, u, 0.2, 0.1)
    next(it)
    assert it.elapsed.dimension == U.TIME
    assert it.span == 0.2 * U.SECOND
    assert it.step == ms(100)


def test_finished_iterators_only_match_through_the_sentinel(system, x0, u):
    a = system.integrate_range('rk4', x0, u, 0.1, 0.1)
    b = system.integrate_range('rk4', x0, u, 0.2, 0.1)
    list(a)
    list(b)
    assert a.is_at_end and b.is_at_end
    assert a != b
    assert a == TrajectoryIterator.end() and b == TrajectoryIterator.end()
