"""Rigid-body construction helpers for accuracy scenes.

The functions in this module create Chrono bodies, set their mass properties
and add them to a system. No visual or collision shapes are attached: the
sweeps run headless and contact resolution is outside their scope.
"""

from __future__ import annotations

import pychrono as chrono

from .compat import set_body_fixed, set_collide, vector
from .config import Vector3


def set_mass_properties(body, mass: float, inertia: Vector3) -> None:
    """Set mass and principal moments of inertia on an existing body."""
    if mass <= 0.0:
        raise ValueError("mass must be > 0")
    if any(i <= 0.0 for i in inertia):
        raise ValueError("principal moments of inertia must be > 0")
    body.SetMass(float(mass))
    body.SetInertiaXX(vector(*inertia))


def add_sphere_body(system, mass: float, inertia: Vector3, position: Vector3):
    """Create and add one free, non-colliding rigid body at `position`.

    Args:
        system: The Chrono system receiving the body.
        mass: Body mass in kg.
        inertia: Principal moments of inertia `(ixx, iyy, izz)`.
        position: World position of the sphere center.

    Returns:
        The created Chrono rigid body.
    """
    body = chrono.ChBody()
    set_mass_properties(body, mass, inertia)
    body.SetPos(vector(*position))
    set_body_fixed(body, False)
    set_collide(body, False)
    system.Add(body)
    return body
