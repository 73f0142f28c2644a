"""Parameter sweep driver.

`SweepRunner` is the entrypoint for running the accuracy scenario over a grid of
configuration points. Each point goes through the same stages:

1. Configure: create a simulator and apply mass, inertia, gravity, step size
   and solver parameters.
2. Baseline: read the initial state and create a fresh `ConservationSampler`.
3. Run: for a fixed number of steps, apply the force, step once, sample.
4. Aggregate: collect statistic bundles and wall/simulated time.
5. Report: return a `RunResult`.

Failures of one point, including unexpected backend exceptions, are recorded
on its result and never abort the sweep.
"""

from __future__ import annotations

import itertools
import math
import time
from dataclasses import dataclass, field
from typing import Callable, Collection, Iterable, Iterator, Union

from .config import ScenarioConfig, SweepGrid, SweepPoint
from .logging_utils import get_logger
from .metrics import AccuracyThresholds, evaluate_thresholds
from .results import RunResult, RunStatus, SweepResult
from .sampler import DIAGNOSTIC_BUNDLES, ConservationSampler, DegenerateBaselineError
from .simulator import Simulator, SimulatorError

logger = get_logger(__name__)

SimulatorFactory = Callable[[str], Simulator]


def expand_grid(grid: SweepGrid) -> Iterator[SweepPoint]:
    """Yield every configuration point of ``grid`` lazily.

    The iteration order is the Cartesian product in field order (engine varies
    slowest, tolerance fastest). Calling it again restarts from the first point.
    """
    for values in itertools.product(*grid.axes()):
        yield SweepPoint(*values)


def steps_for_duration(duration: float, step_size: float) -> int:
    """Return ``ceil(duration / step_size)`` robust to quotient rounding noise."""
    if step_size <= 0.0:
        raise ValueError("step_size must be > 0")
    if duration <= 0.0:
        raise ValueError("duration must be > 0")
    q = duration / step_size
    return max(1, math.ceil(q - 1e-9 * q))


@dataclass(slots=True)
class SweepRunner:
    """Execute configuration points and collect aggregated accuracy metrics.

    Attributes:
        simulator_factory: Returns a new simulator for an engine name. Each
            configuration point gets its own instance.
        scenario: Shared scenario settings (duration, stack geometry, kinds).
        thresholds: Optional pass/fail limits applied after aggregation.
        clock: Wall-clock source in seconds.
    """

    simulator_factory: SimulatorFactory
    scenario: ScenarioConfig = field(default_factory=ScenarioConfig)
    thresholds: AccuracyThresholds | None = None
    clock: Callable[[], float] = time.perf_counter

    def run(self, points: Union[SweepGrid, Iterable[SweepPoint]]) -> SweepResult:
        """Run every point sequentially and return results keyed by point."""
        sweep = SweepResult()
        for result in self.iter_run(points):
            sweep.add(result)
        failed = sweep.failed()
        logger.info("sweep finished: %d runs, %d failed", len(sweep), len(failed))
        return sweep

    def iter_run(
        self,
        points: Union[SweepGrid, Iterable[SweepPoint]],
        skip: Collection[SweepPoint] = (),
    ) -> Iterator[RunResult]:
        """Yield one result per point, skipping points already completed."""
        if isinstance(points, SweepGrid):
            points = expand_grid(points)
        for point in points:
            if point in skip:
                logger.debug("skipping completed point %s", point)
                continue
            yield self.run_point(point)

    def run_point(self, point: SweepPoint) -> RunResult:
        """Run a single configuration point through all stages."""
        logger.debug(
            "%s, dt: %g, iters: %d, mass: %g, gravity: %g, force: %g, tolerance: %g",
            point.engine,
            point.step_size,
            point.iterations,
            point.mass,
            point.gravity,
            point.force,
            point.tolerance,
        )
        result = RunResult(point=point)
        result.metrics["mass"] = float(point.mass)
        stack = self.scenario.stack

        try:
            sim = self.simulator_factory(point.engine)
            sim.configure(
                point.mass,
                stack.sphere_inertia(point.mass),
                point.gravity_vector,
                point.step_size,
                point.engine_params,
            )
        except Exception as exc:
            return self._fail(result, RunStatus.CONFIGURATION_FAILED, exc)

        try:
            body = sim.body_id
            t0 = sim.read_simulated_time()
            diagnostics = [name for name in sim.supported_diagnostics() if name in DIAGNOSTIC_BUNDLES]
            baseline = sim.read_state(body)
        except Exception as exc:
            return self._fail(result, RunStatus.BASELINE_FAILED, exc)
        try:
            sampler = ConservationSampler(
                baseline,
                self.scenario.kinds,
                diagnostics,
                total_index=self.scenario.solver.diagnostic_total_index,
            )
        except DegenerateBaselineError as exc:
            return self._fail(result, RunStatus.DEGENERATE_BASELINE, exc)
        result.metrics["energy0"] = sampler.e0
        result.metrics["angular_momentum0"] = sampler.h0_mag

        steps = steps_for_duration(self.scenario.duration, point.step_size)
        force = point.force_vector
        start = self.clock()
        try:
            for _ in range(steps):
                sim.apply_force(body, force)
                sim.step(1)
                sampler.sample_step(sim.read_state(body), sim.read_engine_diagnostic)
        except Exception as exc:
            self._fail(result, RunStatus.STEP_FAILED, exc)
        wall_time = self.clock() - start

        try:
            sim_time = sim.read_simulated_time() - t0
        except Exception as exc:
            sim_time = math.nan
            if result.status is RunStatus.OK:
                self._fail(result, RunStatus.STEP_FAILED, exc)
        result.metrics["wall_time"] = wall_time
        result.metrics["sim_time"] = sim_time
        if math.isnan(sim_time):
            result.metrics["time_ratio"] = math.nan
        else:
            result.metrics["time_ratio"] = wall_time / sim_time if sim_time > 0.0 else math.inf
        result.metrics["steps"] = float(sampler.steps)
        result.bundles = sampler.bundles()
        result.axis_bundles = sampler.axis_bundles()

        allowed = self.scenario.time_tolerance_factor * point.step_size
        drift = abs(sim_time - self.scenario.duration)
        if result.status is RunStatus.OK and drift > allowed:
            self._fail(
                result,
                RunStatus.TEMPORAL_DRIFT,
                f"simulated {sim_time:.9g}s for a requested {self.scenario.duration:.9g}s "
                f"(deviation {drift:.3g}s > {allowed:.3g}s)",
            )

        if self.thresholds is not None:
            result.violations = evaluate_thresholds(result.bundles, self.thresholds)
            for violation in result.violations:
                logger.warning("%s: %s", point, violation)
        return result

    @staticmethod
    def _fail(result: RunResult, status: RunStatus, reason: object) -> RunResult:
        result.status = status
        if isinstance(reason, Exception) and not isinstance(reason, (SimulatorError, ValueError)):
            # Backend exceptions outside the simulator error types keep their class name.
            result.error = f"{type(reason).__name__}: {reason}"
            logger.warning("%s failed (%s)", result.point, status.value, exc_info=reason)
            return result
        result.error = str(reason)
        logger.warning("%s failed (%s): %s", result.point, status.value, reason)
        return result
