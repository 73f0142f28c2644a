import math

import pytest

from chrono_accuracy.metrics import diagonal
from chrono_accuracy.sampler import BodyState, ConservationSampler, DegenerateBaselineError


def _moved(state, **changes):
    values = {
        "position": state.position,
        "linear_velocity": state.linear_velocity,
        "angular_velocity": state.angular_velocity,
        "inertia": state.inertia,
        "energy": state.energy,
    }
    values.update(changes)
    return BodyState(**values)


def test_angular_momentum_is_inertia_times_omega():
    state = BodyState(
        position=(0.0, 0.0, 0.0),
        linear_velocity=(0.0, 0.0, 0.0),
        angular_velocity=(1.0, 2.0, 3.0),
        inertia=diagonal((2.0, 3.0, 4.0)),
        energy=1.0,
    )
    assert state.angular_momentum == (2.0, 6.0, 12.0)


def test_zero_energy_baseline_fails_construction(baseline_state):
    with pytest.raises(DegenerateBaselineError):
        ConservationSampler(_moved(baseline_state, energy=0.0))


def test_zero_angular_momentum_baseline_fails_construction(baseline_state):
    with pytest.raises(DegenerateBaselineError):
        ConservationSampler(_moved(baseline_state, angular_velocity=(0.0, 0.0, 0.0)))


def test_non_finite_baseline_fails_construction(baseline_state):
    with pytest.raises(DegenerateBaselineError):
        ConservationSampler(_moved(baseline_state, energy=math.nan))


def test_degenerate_baseline_is_a_value_error(baseline_state):
    with pytest.raises(ValueError):
        ConservationSampler(_moved(baseline_state, energy=0.0))


def test_unchanged_state_yields_zero_errors(baseline_state):
    sampler = ConservationSampler(baseline_state)
    for _ in range(10):
        sampler.sample_step(baseline_state)

    assert sampler.steps == 10
    for name, bundle in sampler.bundles().items():
        assert bundle == {"MaxAbs": 0.0, "Variance": 0.0, "Mean": 0.0}, name


def test_errors_are_normalized_by_baseline(baseline_state):
    sampler = ConservationSampler(baseline_state, "MaxAbs")
    # H0 = 0.1 * (0, 0, 2) = (0, 0, 0.2); spin up by 10% about z.
    later = _moved(
        baseline_state,
        position=(0.0, 4.0, 0.0),
        linear_velocity=(0.0, -1.0, 0.0),
        angular_velocity=(0.0, 0.0, 2.2),
        energy=4.7 * 1.02,
    )
    sampler.sample_step(later)

    bundles = sampler.bundles()
    assert bundles["linear_position_error"]["MaxAbs"] == pytest.approx(0.5)
    assert bundles["linear_velocity_error"]["MaxAbs"] == pytest.approx(1.0)
    assert bundles["angular_momentum_error"]["MaxAbs"] == pytest.approx(0.1)
    assert bundles["energy_error"]["MaxAbs"] == pytest.approx(0.02)

    axes = sampler.axis_bundles()
    assert axes["linear_position_error"]["y"]["MaxAbs"] == pytest.approx(0.5)
    assert axes["linear_position_error"]["x"]["MaxAbs"] == 0.0
    assert axes["angular_momentum_error"]["z"]["MaxAbs"] == pytest.approx(0.1)


def test_diagnostics_are_sampled_by_name(baseline_state):
    sampler = ConservationSampler(baseline_state, "Mean", diagnostics=("rms_error", "constraint_residual"))
    values = {"rms_error": [0.1, 0.2, 0.3], "constraint_residual": 0.5}
    for _ in range(3):
        sampler.sample_step(baseline_state, values.get)

    bundles = sampler.bundles()
    assert bundles["rms_error_total"] == {"Mean": pytest.approx(0.3)}
    assert bundles["constraint_residual_total"] == {"Mean": pytest.approx(0.5)}


def test_missing_diagnostic_is_not_an_error(baseline_state):
    sampler = ConservationSampler(baseline_state, diagnostics=("rms_error",))
    sampler.sample_step(baseline_state, lambda name: None)
    sampler.sample_step(baseline_state)

    assert "rms_error_total" not in sampler.bundles()
    assert sampler.steps == 2


def test_short_diagnostic_array_uses_last_component(baseline_state):
    sampler = ConservationSampler(baseline_state, "MaxAbs", diagnostics=("rms_error",))
    sampler.sample_step(baseline_state, lambda name: (0.25, 0.75))
    assert sampler.bundles()["rms_error_total"] == {"MaxAbs": 0.75}


def test_unknown_diagnostic_name_rejected(baseline_state):
    with pytest.raises(ValueError):
        ConservationSampler(baseline_state, diagnostics=("iteration_count",))


def test_samplers_do_not_share_statistics(baseline_state):
    a = ConservationSampler(baseline_state)
    b = ConservationSampler(baseline_state)
    a.sample_step(_moved(baseline_state, energy=9.4))

    assert a.bundles()["energy_error"]["MaxAbs"] == pytest.approx(1.0)
    assert b.bundles()["energy_error"]["MaxAbs"] == 0.0
    assert b.energy_error.count == 0
