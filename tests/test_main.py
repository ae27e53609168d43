import pytest
from dynsim import main
from dynsim.config import create_test_config
from dynsim.models import KinematicBicycle, create_default_input, create_initial_state


@pytest.fixture
def system():
    return KinematicBicycle().make_system('direct')


def test_run_trajectory_completes(system):
    state, log = main.run_trajectory(system, create_initial_state(), create_default_input(),
                                     config=create_test_config())
    assert len(log) == 10
    assert log.time[0] == pytest.approx(0.1)
    assert log.time[-1] == pytest.approx(1.0)
    assert state == log.states[-1]
    assert set(log.fields) == {'x', 'y', 'yaw', 'v'}
    assert all(len(values) == 10 for values in log.fields.values())
    assert log.fields['v'] == [10.0] * 10


def test_run_trajectory_overrides(system):
    cfg = create_test_config()
    state, log = main.run_trajectory(system, create_initial_state(), create_default_input(),
                                     config=cfg, span=0.5, step=0.25, method='euler')
    assert log.time == [0.25, 0.5]
    assert log.method == 'euler'
    assert log.step_s == 0.25


def test_run_trajectory_zero_span_returns_initial_state(system):
    x0 = create_initial_state()
    state, log = main.run_trajectory(system, x0, create_default_input(),
                                     config=create_test_config(span=0.0))
    assert len(log) == 0
    assert state == x0
    assert state is not x0
    assert log.summary()['final_elapsed_s'] == 0.0


def test_summary(system):
    _, log = main.run_trajectory(system, create_initial_state(), create_default_input(),
                                 config=create_test_config(span=0.3))
    summary = log.summary()
    assert summary['samples'] == 3
    assert summary['span_s'] == pytest.approx(0.3)
    assert summary['step_s'] == pytest.approx(0.1)
    assert summary['final_elapsed_s'] == pytest.approx(0.3)
    assert summary['method'] == 'rk4'
    assert summary['final_state']['v'] == 10.0


def test_verbose_prints_table(system, capsys):
    main.run_trajectory(system, create_initial_state(), create_default_input(),
                        config=create_test_config(span=0.2), verbose=True)
    lines = capsys.readouterr().out.strip().splitlines()
    assert "Time (s)" in lines[0]
    assert len(lines) == 4
    assert "10 m/s" in lines[-1]


def test_trajectory_log_append():
    from datetime import timedelta
    from dynsim.types import Sample

    log = main.TrajectoryLog()
    log.append(Sample(timedelta(seconds=1), create_initial_state()))
    assert log.time == [1.0]
    assert log.fields['v'] == [10.0]
