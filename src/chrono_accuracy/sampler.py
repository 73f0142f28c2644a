"""Conservation-error sampling for a single simulated body.

A :class:`ConservationSampler` captures the body's baseline state once, before
the first force is applied, and converts every later state into error samples:

- linear position drift ``p - p0``,
- linear velocity drift ``v - v0``,
- angular momentum drift ``(H - H0) / |H0|``,
- energy drift ``(E - E0) / E0``,

plus optional engine diagnostics. Each sampler owns its statistics; a fresh one
is created for every configuration point.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Sequence, Union

from .config import Vector3
from .metrics import Matrix3, mat_vec, vec_norm, vec_scale, vec_sub
from .stats import DEFAULT_KINDS, KindSpec, SignalStats, VectorStats, parse_kinds

DiagnosticReader = Callable[[str], Optional[Union[float, Sequence[float]]]]

DIAGNOSTIC_BUNDLES = {
    "rms_error": "rms_error_total",
    "constraint_residual": "constraint_residual_total",
}


class DegenerateBaselineError(ValueError):
    """Baseline energy or angular momentum makes normalization undefined."""


@dataclass(frozen=True, slots=True)
class BodyState:
    """World-frame state of one rigid body at one time instant."""

    position: Vector3
    linear_velocity: Vector3
    angular_velocity: Vector3
    inertia: Matrix3
    energy: float

    @property
    def angular_momentum(self) -> Vector3:
        return mat_vec(self.inertia, self.angular_velocity)


class ConservationSampler:
    """Accumulate conservation-error statistics against a fixed baseline.

    Args:
        baseline: Body state captured at simulation start.
        kinds: Statistic kinds recorded for every stream.
        diagnostics: Engine diagnostic names the active run supports. Each one
            gets its own scalar stream.
        total_index: Component used when a diagnostic is reported as an array.

    Raises:
        DegenerateBaselineError: If the baseline energy or angular momentum
            magnitude is zero or not finite.
    """

    def __init__(
        self,
        baseline: BodyState,
        kinds: KindSpec = DEFAULT_KINDS,
        diagnostics: Iterable[str] = (),
        *,
        total_index: int = 2,
    ) -> None:
        h0 = baseline.angular_momentum
        h0_mag = vec_norm(h0)
        e0 = float(baseline.energy)
        if not math.isfinite(e0) or e0 == 0.0:
            raise DegenerateBaselineError(f"baseline energy must be finite and nonzero, got {e0!r}")
        if not math.isfinite(h0_mag) or h0_mag == 0.0:
            raise DegenerateBaselineError(
                f"baseline angular momentum magnitude must be finite and nonzero, got {h0_mag!r}"
            )

        self.kinds = parse_kinds(kinds)
        self.p0 = baseline.position
        self.v0 = baseline.linear_velocity
        self.h0 = h0
        self.h0_mag = h0_mag
        self.e0 = e0
        self.total_index = total_index
        self.steps = 0

        self.linear_position_error = VectorStats(self.kinds)
        self.linear_velocity_error = VectorStats(self.kinds)
        self.angular_momentum_error = VectorStats(self.kinds)
        self.energy_error = SignalStats(self.kinds)
        self.diagnostics: dict[str, SignalStats] = {}
        for name in diagnostics:
            if name not in DIAGNOSTIC_BUNDLES:
                raise ValueError(f"Unknown engine diagnostic: {name!r}")
            self.diagnostics[name] = SignalStats(self.kinds)

    def sample_step(self, state: BodyState, read_diagnostic: DiagnosticReader | None = None) -> None:
        """Record one sample per stream for the step that just committed.

        Must be called exactly once per simulation step, in step order.
        """
        self.linear_position_error.insert_data(vec_sub(state.position, self.p0))
        self.linear_velocity_error.insert_data(vec_sub(state.linear_velocity, self.v0))
        dh = vec_sub(state.angular_momentum, self.h0)
        self.angular_momentum_error.insert_data(vec_scale(dh, 1.0 / self.h0_mag))
        self.energy_error.insert_data((state.energy - self.e0) / self.e0)

        if read_diagnostic is not None:
            for name, stream in self.diagnostics.items():
                value = read_diagnostic(name)
                if value is None:
                    continue
                stream.insert_data(self._scalar(value))
        self.steps += 1

    def _scalar(self, value: Union[float, Sequence[float]]) -> float:
        if isinstance(value, (int, float)):
            return float(value)
        values = list(value)
        if not values:
            raise ValueError("empty diagnostic array")
        index = self.total_index if self.total_index < len(values) else len(values) - 1
        return float(values[index])

    def bundles(self) -> dict[str, dict[str, float]]:
        """Return kind maps for every reported bundle.

        Vector streams report their magnitude bundle. Diagnostic bundles appear
        only when at least one sample was taken.
        """
        out = {
            "energy_error": self.energy_error.map(),
            "angular_momentum_error": self.angular_momentum_error.mag.map(),
            "linear_position_error": self.linear_position_error.mag.map(),
            "linear_velocity_error": self.linear_velocity_error.mag.map(),
        }
        for name, stream in self.diagnostics.items():
            if stream.count > 0:
                out[DIAGNOSTIC_BUNDLES[name]] = stream.map()
        return out

    def axis_bundles(self) -> dict[str, dict[str, dict[str, float]]]:
        return {
            "angular_momentum_error": self.angular_momentum_error.map(),
            "linear_position_error": self.linear_position_error.map(),
            "linear_velocity_error": self.linear_velocity_error.map(),
        }
