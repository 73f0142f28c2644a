"""Result containers for accuracy sweeps.

These dataclasses are plain Python structures intended for logging, testing and
post-processing. They intentionally avoid direct dependence on PyChrono objects.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator

from .config import SWEEP_FIELDS, SweepPoint


class RunStatus(str, Enum):
    """Terminal state of one configuration point."""

    OK = "ok"
    CONFIGURATION_FAILED = "configuration_failed"
    BASELINE_FAILED = "baseline_failed"
    DEGENERATE_BASELINE = "degenerate_baseline"
    STEP_FAILED = "step_failed"
    TEMPORAL_DRIFT = "temporal_drift"


@dataclass(slots=True)
class RunResult:
    """Aggregated metrics for one configuration point.

    Attributes:
        point: The configuration point that produced this result.
        status: Terminal state of the run.
        error: Human-readable failure description, if any.
        metrics: Named scalar metrics (wall time, simulated time, baselines).
        bundles: Statistic bundles, each a full kind -> value map.
        axis_bundles: Per-axis breakdown of the vector bundles.
        violations: Threshold violations found after aggregation.
    """

    point: SweepPoint
    status: RunStatus = RunStatus.OK
    error: str | None = None
    metrics: dict[str, float] = field(default_factory=dict)
    bundles: dict[str, dict[str, float]] = field(default_factory=dict)
    axis_bundles: dict[str, dict[str, dict[str, float]]] = field(default_factory=dict)
    violations: list[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.status is RunStatus.OK and not self.violations

    def to_record(self) -> dict:
        """Flatten into a JSON-friendly dictionary."""
        return {
            **self.point.as_dict(),
            "status": self.status.value,
            "passed": self.passed,
            "error": self.error,
            "metrics": dict(self.metrics),
            "bundles": {name: dict(values) for name, values in self.bundles.items()},
            "violations": list(self.violations),
        }


@dataclass(slots=True)
class SweepResult:
    """All run results of a sweep, keyed by their full configuration point."""

    runs: dict[SweepPoint, RunResult] = field(default_factory=dict)

    def add(self, result: RunResult) -> None:
        """Store one result; each configuration point may appear only once."""
        if result.point in self.runs:
            raise ValueError(f"Duplicate configuration point: {result.point}")
        self.runs[result.point] = result

    def __len__(self) -> int:
        return len(self.runs)

    def __iter__(self) -> Iterator[RunResult]:
        return iter(self.runs.values())

    def __getitem__(self, point: SweepPoint) -> RunResult:
        return self.runs[point]

    def __contains__(self, point: object) -> bool:
        return point in self.runs

    def passed(self) -> list[RunResult]:
        return [r for r in self.runs.values() if r.passed]

    def failed(self) -> list[RunResult]:
        return [r for r in self.runs.values() if not r.passed]

    def group_by(self, *names: str) -> dict[tuple, list[RunResult]]:
        """Group results by a subset of sweep fields.

        For example ``group_by("engine", "step_size")`` gives, per group, the
        runs that vary only along the remaining axes (such as mass).
        """
        for name in names:
            if name not in SWEEP_FIELDS:
                raise ValueError(f"Unknown sweep field: {name!r}")
        groups: dict[tuple, list[RunResult]] = defaultdict(list)
        for result in self.runs.values():
            key = tuple(getattr(result.point, name) for name in names)
            groups[key].append(result)
        return dict(groups)

    def to_records(self) -> list[dict]:
        return [r.to_record() for r in self.runs.values()]
