"""Configuration dataclasses for accuracy sweeps.

This module defines the inputs used by the sweep runner and scene builders. The
dataclasses are plain Python so sweep grids can be declared in scripts and
tests without importing PyChrono types.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Literal


Vector3 = tuple[float, float, float]
EngineName = Literal["NSC", "SMC"]


@dataclass(frozen=True, slots=True)
class EngineParams:
    """Engine-specific solver parameters for one run."""

    iterations: int = 50
    tolerance: float = 0.0


@dataclass(frozen=True, slots=True)
class SweepPoint:
    """One configuration point of a sweep.

    Field order matches the sweep axes: engine, iterations, step size, mass,
    gravity, force, tolerance. Points are hashable and serve as result keys.
    """

    engine: str
    iterations: int
    step_size: float
    mass: float
    gravity: float
    force: float
    tolerance: float

    @property
    def engine_params(self) -> EngineParams:
        return EngineParams(iterations=self.iterations, tolerance=self.tolerance)

    @property
    def gravity_vector(self) -> Vector3:
        """World gravity along the vertical (+Y up) axis."""
        return (0.0, float(self.gravity), 0.0)

    @property
    def force_vector(self) -> Vector3:
        return (0.0, float(self.force), 0.0)

    def as_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


SWEEP_FIELDS: tuple[str, ...] = tuple(f.name for f in fields(SweepPoint))


@dataclass(frozen=True, slots=True)
class SweepGrid:
    """Per-field value sets whose Cartesian product defines a sweep."""

    engines: tuple[str, ...] = ("NSC",)
    iterations: tuple[int, ...] = (50,)
    step_sizes: tuple[float, ...] = (1e-3,)
    masses: tuple[float, ...] = (1.0,)
    gravities: tuple[float, ...] = (-1.0,)
    forces: tuple[float, ...] = (0.0,)
    tolerances: tuple[float, ...] = (0.0,)

    def __post_init__(self) -> None:
        for f in fields(self):
            raw = getattr(self, f.name)
            if isinstance(raw, (str, bytes)):
                raise ValueError(f"SweepGrid.{f.name} must be a sequence of values, got {raw!r}")
            values = tuple(raw)
            if not values:
                raise ValueError(f"SweepGrid.{f.name} must contain at least one value")
            object.__setattr__(self, f.name, values)
        if any(dt <= 0.0 for dt in self.step_sizes):
            raise ValueError("SweepGrid.step_sizes must be > 0")
        if any(n <= 0 for n in self.iterations):
            raise ValueError("SweepGrid.iterations must be > 0")

    def axes(self) -> tuple[tuple, ...]:
        """Return the value sets in :class:`SweepPoint` field order."""
        return tuple(getattr(self, f.name) for f in fields(self))

    @property
    def size(self) -> int:
        n = 1
        for values in self.axes():
            n *= len(values)
        return n


@dataclass(slots=True)
class SolverTuning:
    """Low-level solver and collision tuning parameters.

    These values are applied when initializing a Chrono system. They are kept in
    a dedicated dataclass so defaults can evolve independently from the sweep
    axes.
    """

    collision_envelope: float = 0.003
    collision_margin: float = 0.002
    single_thread: bool = True
    diagnostic_total_index: int = 2


@dataclass(slots=True)
class SphereStackConfig:
    """Geometry of the sphere stack scenario.

    Spheres are stacked along +Y with no ground plane. Only the top sphere is
    measured; its mass and inertia are overridden per configuration point.
    """

    sphere_count: int = 5
    radius: float = 0.5
    base_height: float = 0.5
    gap: float = 0.0
    initial_angular_velocity: Vector3 = (0.1, 0.0, 0.5)
    initial_linear_velocity: Vector3 = (0.0, 0.0, 0.0)

    @property
    def measured_body(self) -> str:
        return f"sphere_{self.sphere_count}"

    def sphere_position(self, index: int) -> Vector3:
        """Return the center of the ``index``-th sphere (0-based, bottom first)."""
        return (0.0, self.base_height + index * (2.0 * self.radius + self.gap), 0.0)

    def sphere_inertia(self, mass: float) -> Vector3:
        """Principal moments of a solid sphere, ``2/5 m r^2`` on each axis."""
        ixx = 2.0 * mass * self.radius * self.radius / 5.0
        return (ixx, ixx, ixx)


@dataclass(slots=True)
class ScenarioConfig:
    """Top-level settings shared by every run of a sweep.

    Attributes:
        duration: Requested simulated duration in seconds.
        time_tolerance_factor: Allowed simulated-time deviation in multiples of
            the step size.
        kinds: Statistic kinds recorded for every bundle.
        stack: Sphere stack geometry.
        solver: Optional solver/collision tuning parameters.
    """

    duration: float = 10.0
    time_tolerance_factor: float = 1.1
    kinds: str = "MaxAbs,Variance,Mean"
    stack: SphereStackConfig = field(default_factory=SphereStackConfig)
    solver: SolverTuning = field(default_factory=SolverTuning)

    def __post_init__(self) -> None:
        if self.duration <= 0.0:
            raise ValueError("ScenarioConfig.duration must be > 0")
        if self.time_tolerance_factor <= 0.0:
            raise ValueError("ScenarioConfig.time_tolerance_factor must be > 0")


CALIBRATION_GRID = SweepGrid(
    engines=("NSC", "SMC"),
    iterations=(50,),
    step_sizes=(0.001,),
    masses=(0.1, 1.0, 10.0, 100.0, 1000.0, 10000.0),
    gravities=(-1.0,),
    forces=(0.0,),
    tolerances=(0.0,),
)
