"""Vector helpers and pass/fail policy for recorded accuracy metrics."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Mapping

from .config import Vector3

Matrix3 = tuple[Vector3, Vector3, Vector3]


def vec_sub(a: Vector3, b: Vector3) -> Vector3:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def vec_scale(a: Vector3, s: float) -> Vector3:
    return (a[0] * s, a[1] * s, a[2] * s)


def vec_dot(a: Vector3, b: Vector3) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def vec_norm(a: Vector3) -> float:
    return math.sqrt(vec_dot(a, a))


def mat_vec(m: Matrix3, v: Vector3) -> Vector3:
    """Return the product of a 3x3 row-major matrix and a vector."""
    return (vec_dot(m[0], v), vec_dot(m[1], v), vec_dot(m[2], v))


def diagonal(values: Vector3) -> Matrix3:
    x, y, z = values
    return ((x, 0.0, 0.0), (0.0, y, 0.0), (0.0, 0.0, z))


def quaternion_to_matrix(q: tuple[float, float, float, float]) -> Matrix3:
    """Rotation matrix of a unit quaternion given as ``(w, x, y, z)``."""
    w, x, y, z = q
    return (
        (1.0 - 2.0 * (y * y + z * z), 2.0 * (x * y - w * z), 2.0 * (x * z + w * y)),
        (2.0 * (x * y + w * z), 1.0 - 2.0 * (x * x + z * z), 2.0 * (y * z - w * x)),
        (2.0 * (x * z - w * y), 2.0 * (y * z + w * x), 1.0 - 2.0 * (x * x + y * y)),
    )


def world_inertia(rotation: Matrix3, principal: Vector3) -> Matrix3:
    """Return ``R diag(I) R^T`` for principal moments expressed in the body frame."""
    rows = []
    for i in range(3):
        row = []
        for j in range(3):
            row.append(sum(rotation[i][k] * principal[k] * rotation[j][k] for k in range(3)))
        rows.append(tuple(row))
    return tuple(rows)  # type: ignore[return-value]


def rigid_body_energy(
    mass: float,
    inertia: Matrix3,
    position: Vector3,
    linear_velocity: Vector3,
    angular_velocity: Vector3,
    gravity: Vector3,
) -> float:
    """Kinetic plus gravitational potential energy of one rigid body.

    Potential energy is ``-m g . p`` so that it is zero at the world origin.
    """
    kinetic_lin = 0.5 * mass * vec_dot(linear_velocity, linear_velocity)
    kinetic_rot = 0.5 * vec_dot(angular_velocity, mat_vec(inertia, angular_velocity))
    potential = -mass * vec_dot(gravity, position)
    return kinetic_lin + kinetic_rot + potential


@dataclass(slots=True)
class AccuracyThresholds:
    """Maximum allowed statistic values per recorded bundle.

    Example::

        AccuracyThresholds({"energy_error": {"MaxAbs": 1e-3}})
    """

    limits: dict[str, dict[str, float]] = field(default_factory=dict)


def evaluate_thresholds(
    bundles: Mapping[str, Mapping[str, float]],
    thresholds: AccuracyThresholds,
) -> list[str]:
    """Return one message per statistic that exceeds its limit.

    Bundles absent from ``bundles`` are skipped: an engine that does not expose
    a diagnostic simply has nothing to check. A kind requested by a threshold
    but missing from a present bundle is reported, since it indicates a schema
    mismatch between the thresholds and the recorded kinds.
    """
    violations: list[str] = []
    for bundle_name, kind_limits in thresholds.limits.items():
        bundle = bundles.get(bundle_name)
        if bundle is None:
            continue
        for kind, limit in kind_limits.items():
            if kind not in bundle:
                violations.append(f"{bundle_name}.{kind}: not recorded")
                continue
            value = bundle[kind]
            if not math.isfinite(value) or abs(value) > limit:
                violations.append(f"{bundle_name}.{kind}={value:.6g} exceeds {limit:.6g}")
    return violations
