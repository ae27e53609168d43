"""Demo script: integrate the kinematic bicycle with each transition form and stepper."""
from dynsim.models import KinematicBicycle, create_default_input, create_initial_state
from dynsim.config import create_test_config
from dynsim.main import run_trajectory
import numpy as np

model = KinematicBicycle()
x0 = create_initial_state()
u = create_default_input()
config = create_test_config(step=0.1, span=3.0)

print("\n===== KINEMATIC BICYCLE: FORM / STEPPER COMPARISON =====")
print(f"Model: {model}")
print(f"Initial state: {x0}")
print(f"Input: {u}")
print()

reference = None
for form in ("contract", "direct", "external"):
    for method in ("rk4", "rk4_inplace", "euler", "euler_inplace"):
        final_state, log = run_trajectory(model.make_system(form), x0, u,
                                          config=config, method=method)
        if reference is None:
            reference = final_state.to_vector()
        err = np.max(np.abs(final_state.to_vector() - reference))
        print(f"  {form:>8} | {method:<13} | samples={len(log):3d} | "
              f"t={log.time[-1]:.1f}s | {final_state} | max|dx| vs rk4={err:.2e}")
