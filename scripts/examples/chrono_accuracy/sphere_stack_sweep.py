"""Sphere stack accuracy sweep on PyChrono.

Runs the calibration grid (NSC and SMC, 50 iterations, 1 ms steps, top-sphere
mass from 0.1 to 10000 kg, gravity -1 m/s^2, no applied force) and prints one
line per configuration point. Results are also written as JSON next to this
script.

The example uses reusable helpers from `src/chrono_accuracy`.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[3]
SRC_DIR = REPO_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from chrono_accuracy import CALIBRATION_GRID, AccuracyThresholds, ScenarioConfig, SweepRunner  # noqa: E402
from chrono_accuracy.chrono_backend import chrono_simulator_factory  # noqa: E402
from chrono_accuracy.logging_utils import configure_logging  # noqa: E402


SIM_DURATION_SECONDS = 10.0
OUTPUT_PATH = Path(__file__).with_suffix(".json")
THRESHOLDS = AccuracyThresholds(
    {
        "energy_error": {"MaxAbs": 1e-2},
        "angular_momentum_error": {"MaxAbs": 1e-2},
    }
)


def print_run(result) -> None:
    p = result.point
    energy = result.bundles.get("energy_error", {}).get("MaxAbs", float("nan"))
    ang = result.bundles.get("angular_momentum_error", {}).get("MaxAbs", float("nan"))
    flag = "PASS" if result.passed else f"FAIL ({result.status.value})"
    print(
        f"{p.engine} dt={p.step_size:g} iters={p.iterations} mass={p.mass:g}: "
        f"energy_err={energy:.3e} ang_mom_err={ang:.3e} "
        f"time_ratio={result.metrics.get('time_ratio', float('nan')):.3f} {flag}"
    )
    for violation in result.violations:
        print(f"    {violation}")


def main() -> int:
    configure_logging()
    scenario = ScenarioConfig(duration=SIM_DURATION_SECONDS)
    runner = SweepRunner(chrono_simulator_factory(scenario), scenario, thresholds=THRESHOLDS)

    print(f"=== sphere stack sweep: {CALIBRATION_GRID.size} configuration points ===")
    sweep = runner.run(CALIBRATION_GRID)
    for result in sweep:
        print_run(result)

    OUTPUT_PATH.write_text(json.dumps(sweep.to_records(), indent=2))
    print(f"wrote {OUTPUT_PATH}")
    return 0 if not sweep.failed() else 1


if __name__ == "__main__":
    raise SystemExit(main())
