"""PyChrono implementation of the :class:`~chrono_accuracy.simulator.Simulator` protocol."""

from __future__ import annotations

import math
from typing import Callable, Optional

from . import compat
from .config import EngineParams, ScenarioConfig, Vector3
from .metrics import quaternion_to_matrix, rigid_body_energy, world_inertia
from .sampler import BodyState
from .scenes.sphere_stack import SceneHandles, build_sphere_stack_scene
from .simulator import ConfigurationError, SimulatorError, StepError

ENGINES = ("NSC", "SMC")


class ChronoSimulator:
    """Drive the sphere stack scenario on a Chrono NSC or SMC system."""

    def __init__(self, engine: str, scenario: ScenarioConfig | None = None) -> None:
        self.engine = engine
        self.scenario = scenario or ScenarioConfig()
        self.body_id = self.scenario.stack.measured_body
        self.scene: SceneHandles | None = None
        self._step_size = 0.0
        self._mass = 0.0
        self._inertia: Vector3 = (0.0, 0.0, 0.0)
        self._gravity: Vector3 = (0.0, 0.0, 0.0)

    def configure(
        self,
        mass: float,
        inertia: Vector3,
        gravity: Vector3,
        step_size: float,
        engine_params: EngineParams,
    ) -> None:
        if self.engine not in ENGINES:
            raise ConfigurationError(f"Unsupported engine: {self.engine!r}")
        if step_size <= 0.0 or not math.isfinite(step_size):
            raise ConfigurationError(f"step size must be > 0, got {step_size!r}")
        if engine_params.iterations <= 0:
            raise ConfigurationError(f"iterations must be > 0, got {engine_params.iterations!r}")
        try:
            self.scene = build_sphere_stack_scene(
                self.engine, self.scenario, mass, inertia, gravity, engine_params
            )
        except (ValueError, AttributeError, RuntimeError, TypeError) as exc:
            # AttributeError: a PyChrono build without the setters compat looks up.
            raise ConfigurationError(f"{self.engine} rejected configuration: {exc}") from exc
        self._step_size = float(step_size)
        self._mass = float(mass)
        self._inertia = tuple(float(i) for i in inertia)  # type: ignore[assignment]
        self._gravity = tuple(float(g) for g in gravity)  # type: ignore[assignment]

    def _require_scene(self) -> SceneHandles:
        if self.scene is None:
            raise ConfigurationError("simulator used before configure()")
        return self.scene

    def _body(self, body_id: str):
        scene = self._require_scene()
        try:
            return scene.spheres[body_id]
        except KeyError:
            raise KeyError(f"Unknown body: {body_id!r}") from None

    def apply_force(self, body_id: str, force: Vector3) -> None:
        body = self._body(body_id)
        try:
            compat.apply_force(body, compat.vector(*force))
        except AttributeError as exc:
            raise StepError(f"cannot apply force to {body_id!r}: {exc}") from exc

    def step(self, n: int = 1) -> None:
        scene = self._require_scene()
        body = scene.measured_body
        for _ in range(n):
            try:
                scene.system.DoStepDynamics(self._step_size)
            except (RuntimeError, AttributeError, TypeError) as exc:
                raise StepError(f"DoStepDynamics failed at t={scene.system.GetChTime():.6f}s: {exc}") from exc
            p = body.GetPos()
            if any(map(math.isnan, (p.x, p.y, p.z))):
                raise StepError(f"NaN in position at t={scene.system.GetChTime():.6f}s; unstable step")

    def read_state(self, body_id: str) -> BodyState:
        body = self._body(body_id)
        try:
            position = compat.as_tuple(body.GetPos())
            lin_vel = compat.linear_velocity(body)
            ang_vel = compat.angular_velocity(body)
            rot = compat.rotation(body)
        except AttributeError as exc:
            raise SimulatorError(f"cannot read state of {body_id!r}: {exc}") from exc
        if body_id == self.body_id:
            mass, principal = self._mass, self._inertia
        else:
            mass, principal = 1.0, self.scenario.stack.sphere_inertia(1.0)
        inertia = world_inertia(quaternion_to_matrix(rot), principal)
        energy = rigid_body_energy(mass, inertia, position, lin_vel, ang_vel, self._gravity)
        return BodyState(
            position=position,
            linear_velocity=lin_vel,
            angular_velocity=ang_vel,
            inertia=inertia,
            energy=energy,
        )

    def read_simulated_time(self) -> float:
        return float(self._require_scene().system.GetChTime())

    def supported_diagnostics(self) -> tuple[str, ...]:
        system = self._require_scene().system
        solver = system.GetSolver() if hasattr(system, "GetSolver") else None
        if solver is not None and hasattr(solver, "GetError"):
            return ("constraint_residual",)
        return ()

    def read_engine_diagnostic(self, name: str) -> Optional[float]:
        if name != "constraint_residual":
            return None
        return compat.solver_residual(self._require_scene().system)


def chrono_simulator_factory(scenario: ScenarioConfig | None = None) -> Callable[[str], ChronoSimulator]:
    """Return a factory creating one fresh `ChronoSimulator` per configuration point."""

    def factory(engine: str) -> ChronoSimulator:
        return ChronoSimulator(engine, scenario)

    return factory
