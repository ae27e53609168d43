from datetime import timedelta

import pytest
from dynsim import types
from dynsim.vector import make_vector
from dynsim import units as U

State = make_vector('State', [('x', U.METER)])


def test_sample_namedtuple():
    s = types.Sample(timedelta(milliseconds=250), State(1.0))
    elapsed, state = s
    assert elapsed == timedelta(milliseconds=250)
    assert state.x == 1.0 * U.METER
    assert s.seconds == pytest.approx(0.25)
    assert types.Sample(0.25 * U.SECOND, State(1.0)).seconds == 0.25


def test_trajectory_summary_typeddict():
    out = types.TrajectorySummary(
        samples=30,
        span_s=3.0,
        step_s=0.1,
        final_elapsed_s=3.0,
        method="rk4",
        final_state={"x": 1.0},
    )
    assert out["samples"] == 30
    assert out["method"] == "rk4"
    assert isinstance(out["final_state"], dict)
