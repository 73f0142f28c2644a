import math

import pytest

from chrono_accuracy.config import ScenarioConfig
from chrono_accuracy.metrics import diagonal, rigid_body_energy
from chrono_accuracy.sampler import BodyState
from chrono_accuracy.simulator import ConfigurationError, StepError


class AnalyticSimulator:
    """Closed-form free rigid body with a constant applied force.

    Position and velocity are evaluated exactly at ``t = n * dt``, so the only
    conservation error is floating-point rounding. Options let tests inject
    configuration failures, lost steps and engine diagnostics. ``broken`` is a
    ``(mass, method name, exception)`` triple: that method raises the exception
    for the run with that mass.
    """

    def __init__(
        self,
        engine="exact",
        scenario=None,
        *,
        lost_steps=0,
        fail_at_step=None,
        diagnostics=None,
        max_mass=math.inf,
        broken=None,
    ):
        self.engine = engine
        self.scenario = scenario or ScenarioConfig()
        self.body_id = self.scenario.stack.measured_body
        self.lost_steps = lost_steps
        self.fail_at_step = fail_at_step
        self.diagnostics = dict(diagnostics or {})
        self.max_mass = max_mass
        self.broken = broken
        self.mass = None
        self.steps_taken = 0
        self.step_calls = 0
        self.forces = []
        self._force = (0.0, 0.0, 0.0)
        self._accel = (0.0, 0.0, 0.0)

    def configure(self, mass, inertia, gravity, step_size, engine_params):
        if mass <= 0.0 or mass > self.max_mass:
            raise ConfigurationError(f"mass {mass} rejected")
        self.mass = mass
        self.inertia = diagonal(inertia)
        self.gravity = gravity
        self.dt = step_size
        self.engine_params = engine_params
        stack = self.scenario.stack
        self.p0 = stack.sphere_position(stack.sphere_count - 1)
        self.v0 = stack.initial_linear_velocity
        self.w0 = stack.initial_angular_velocity

    def apply_force(self, body_id, force):
        assert body_id == self.body_id
        self._force = tuple(force)
        self.forces.append(self._force)

    def _maybe_fail(self, call):
        if self.broken is not None and self.mass == self.broken[0] and call == self.broken[1]:
            raise self.broken[2]

    def step(self, n=1):
        self._maybe_fail("step")
        for _ in range(n):
            self.step_calls += 1
            if self.fail_at_step is not None and self.step_calls >= self.fail_at_step:
                raise StepError(f"solver diverged at step {self.step_calls}")
            if self.step_calls <= self.lost_steps:
                continue
            self.steps_taken += 1

    def _time(self):
        return self.steps_taken * self.dt

    def read_state(self, body_id):
        self._maybe_fail("read_state")
        t = self._time()
        a = tuple(g + f / self.mass for g, f in zip(self.gravity, self._force))
        p = tuple(p0 + v0 * t + 0.5 * ai * t * t for p0, v0, ai in zip(self.p0, self.v0, a))
        v = tuple(v0 + ai * t for v0, ai in zip(self.v0, a))
        energy = rigid_body_energy(self.mass, self.inertia, p, v, self.w0, self.gravity)
        return BodyState(position=p, linear_velocity=v, angular_velocity=self.w0, inertia=self.inertia, energy=energy)

    def read_simulated_time(self):
        self._maybe_fail("read_simulated_time")
        return self._time()

    def supported_diagnostics(self):
        self._maybe_fail("supported_diagnostics")
        return tuple(self.diagnostics)

    def read_engine_diagnostic(self, name):
        return self.diagnostics.get(name)


@pytest.fixture
def analytic_factory():
    """Return a factory builder: ``analytic_factory(**options)`` -> engine factory."""
    created = []

    def make(scenario=None, **options):
        def factory(engine):
            sim = AnalyticSimulator(engine, scenario, **options)
            created.append(sim)
            return sim

        factory.created = created
        return factory

    return make


@pytest.fixture
def baseline_state():
    return BodyState(
        position=(0.0, 4.5, 0.0),
        linear_velocity=(0.0, 0.0, 0.0),
        angular_velocity=(0.0, 0.0, 2.0),
        inertia=diagonal((0.1, 0.1, 0.1)),
        energy=4.7,
    )
