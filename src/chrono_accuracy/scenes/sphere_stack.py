"""Scene composition for the sphere stack accuracy scenario.

This module owns assembly of the scenario:
- create and configure a Chrono system for the requested engine,
- add a vertical stack of spheres with no ground plane,
- give the top sphere the configured mass, inertia and initial spin,
- return handles consumed by the Chrono simulator backend.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import pychrono as chrono

from ..compat import (
    configure_solver,
    prefer_bullet,
    set_angular_velocity,
    set_gravity,
    set_linear_velocity,
    set_single_thread,
    tune_collision_defaults,
    vector,
)
from ..config import EngineParams, ScenarioConfig, Vector3
from ..geometry import add_sphere_body


@dataclass(slots=True)
class SceneHandles:
    """References to the core objects needed to simulate and record a scene."""

    system: chrono.ChSystem
    spheres: dict[str, object] = field(default_factory=dict)
    measured: str = ""

    @property
    def measured_body(self):
        return self.spheres[self.measured]


def make_system(engine: str):
    """Create a Chrono system for a contact formulation name."""
    if engine == "NSC":
        return chrono.ChSystemNSC()
    if engine == "SMC":
        return chrono.ChSystemSMC()
    raise ValueError(f"Unsupported engine: {engine}")


def build_sphere_stack_scene(
    engine: str,
    scenario: ScenarioConfig,
    mass: float,
    inertia: Vector3,
    gravity: Vector3,
    engine_params: EngineParams,
) -> SceneHandles:
    """Build the sphere stack with the measured sphere on top.

    All spheres other than the measured one keep unit mass.
    """
    stack = scenario.stack
    if stack.sphere_count <= 0:
        raise ValueError("stack.sphere_count must be > 0")
    if stack.radius <= 0.0:
        raise ValueError("stack.radius must be > 0")

    system = make_system(engine)
    prefer_bullet(system)
    tune_collision_defaults(
        envelope=scenario.solver.collision_envelope,
        margin=scenario.solver.collision_margin,
    )
    if scenario.solver.single_thread:
        set_single_thread(system)
    set_gravity(system, vector(*gravity))
    configure_solver(system, engine_params.iterations, engine_params.tolerance)

    handles = SceneHandles(system=system, measured=stack.measured_body)
    for i in range(stack.sphere_count):
        name = f"sphere_{i + 1}"
        top = name == stack.measured_body
        body = add_sphere_body(
            system,
            mass=mass if top else 1.0,
            inertia=inertia if top else stack.sphere_inertia(1.0),
            position=stack.sphere_position(i),
        )
        if hasattr(body, "SetName"):
            body.SetName(name)
        handles.spheres[name] = body

    top_body = handles.measured_body
    set_linear_velocity(top_body, vector(*stack.initial_linear_velocity))
    set_angular_velocity(top_body, vector(*stack.initial_angular_velocity))
    return handles
