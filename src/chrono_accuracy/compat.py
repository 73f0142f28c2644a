"""Cross-version helpers for PyChrono systems and bodies.

PyChrono renamed many setters/getters between releases (for example
``Set_G_acc`` -> ``SetGravitationalAcceleration``). Helpers here try the
available names so the backend works across builds.
"""

from __future__ import annotations

import pychrono as chrono

from .config import Vector3


def vector(x: float, y: float, z: float):
    """Create a Chrono 3D vector with whichever class name this build exposes."""
    cls = getattr(chrono, "ChVectorD", None) or getattr(chrono, "ChVector3d")
    return cls(float(x), float(y), float(z))


def as_tuple(v) -> Vector3:
    return (float(v.x), float(v.y), float(v.z))


def _call_first(obj, names: tuple[str, ...], *args):
    for name in names:
        if hasattr(obj, name):
            return getattr(obj, name)(*args)
    raise AttributeError(f"None of {names} available on {type(obj).__name__} in this PyChrono build")


def set_gravity(system, gvec) -> None:
    """Cross-version gravity setter for ChSystemNSC/SMC across PyChrono builds."""
    _call_first(
        system,
        ("Set_G_acc", "SetGravitationalAcceleration", "SetGravity", "Set_G_acceleration", "Set_g_acc"),
        gvec,
    )


def prefer_bullet(system) -> None:
    """Prefer Bullet collision if available; ignore if not present."""
    if hasattr(system, "SetCollisionSystemType") and hasattr(chrono, "ChCollisionSystem"):
        system.SetCollisionSystemType(chrono.ChCollisionSystem.Type_BULLET)


def tune_collision_defaults(envelope: float = 0.003, margin: float = 0.002) -> None:
    model = getattr(chrono, "ChCollisionModel", None)
    if model is None:
        return
    if hasattr(model, "SetDefaultSuggestedEnvelope"):
        model.SetDefaultSuggestedEnvelope(envelope)
    if hasattr(model, "SetDefaultSuggestedMargin"):
        model.SetDefaultSuggestedMargin(margin)


def set_single_thread(system) -> None:
    """Force single-threaded stepping for reproducible results."""
    if hasattr(system, "SetNumThreads"):
        system.SetNumThreads(1)


def configure_solver(system, iterations: int, tolerance: float) -> None:
    """Apply iteration count and residual tolerance to the system's solver."""
    if hasattr(system, "SetSolverMaxIterations"):
        system.SetSolverMaxIterations(int(iterations))
    else:
        _call_first(system.GetSolver(), ("SetMaxIterations",), int(iterations))

    if hasattr(system, "SetSolverTolerance"):
        system.SetSolverTolerance(float(tolerance))
    else:
        solver = system.GetSolver()
        if hasattr(solver, "SetTolerance"):
            solver.SetTolerance(float(tolerance))


def solver_residual(system) -> float | None:
    """Return the final residual of the last iterative solve, if exposed."""
    solver = system.GetSolver() if hasattr(system, "GetSolver") else None
    if solver is None or not hasattr(solver, "GetError"):
        return None
    return float(solver.GetError())


def set_body_fixed(body, fixed: bool) -> None:
    _call_first(body, ("SetBodyFixed", "SetFixed"), bool(fixed))


def set_collide(body, collide: bool) -> None:
    _call_first(body, ("SetCollide", "EnableCollision"), bool(collide))


def set_linear_velocity(body, v) -> None:
    _call_first(body, ("SetPos_dt", "SetPosDt", "SetLinVel"), v)


def set_angular_velocity(body, w) -> None:
    """Set angular velocity expressed in the world (parent) frame."""
    _call_first(body, ("SetWvel_par", "SetAngVelParent"), w)


def linear_velocity(body) -> Vector3:
    return as_tuple(_call_first(body, ("GetPos_dt", "GetPosDt", "GetLinVel")))


def angular_velocity(body) -> Vector3:
    """Return angular velocity expressed in the world (parent) frame."""
    return as_tuple(_call_first(body, ("GetWvel_par", "GetAngVelParent")))


def rotation(body) -> tuple[float, float, float, float]:
    q = body.GetRot()
    return (float(q.e0), float(q.e1), float(q.e2), float(q.e3))


def apply_force(body, force) -> None:
    """Replace the body's accumulated force with ``force`` at its center of mass."""
    _call_first(body, ("Empty_forces_accumulators", "EmptyAccumulators"))
    name = "Accumulate_force" if hasattr(body, "Accumulate_force") else "AccumulateForce"
    getattr(body, name)(force, body.GetPos(), False)
