"""Numerical accuracy checks for rigid-body physics engines.

The core (statistics, conservation sampling and the sweep runner) is pure
Python. The PyChrono backend lives in :mod:`chrono_accuracy.chrono_backend` and
is imported explicitly so the core works without PyChrono installed.
"""

from .config import (
    CALIBRATION_GRID,
    EngineParams,
    ScenarioConfig,
    SolverTuning,
    SphereStackConfig,
    SweepGrid,
    SweepPoint,
)
from .metrics import AccuracyThresholds, evaluate_thresholds
from .results import RunResult, RunStatus, SweepResult
from .sampler import BodyState, ConservationSampler, DegenerateBaselineError
from .sim_runner import SweepRunner, expand_grid, steps_for_duration
from .simulator import ConfigurationError, Simulator, SimulatorError, StepError
from .stats import SignalStats, Statistic, StatisticKind, VectorStats, parse_kinds

__all__ = [
    "CALIBRATION_GRID",
    "EngineParams",
    "ScenarioConfig",
    "SolverTuning",
    "SphereStackConfig",
    "SweepGrid",
    "SweepPoint",
    "AccuracyThresholds",
    "evaluate_thresholds",
    "RunResult",
    "RunStatus",
    "SweepResult",
    "BodyState",
    "ConservationSampler",
    "DegenerateBaselineError",
    "SweepRunner",
    "expand_grid",
    "steps_for_duration",
    "ConfigurationError",
    "Simulator",
    "SimulatorError",
    "StepError",
    "SignalStats",
    "Statistic",
    "StatisticKind",
    "VectorStats",
    "parse_kinds",
]
