import math
import statistics

import pytest

from chrono_accuracy.metrics import AccuracyThresholds, evaluate_thresholds
from chrono_accuracy.stats import SignalStats, Statistic, StatisticKind, VectorStats, parse_kinds

ALL_KINDS = "MaxAbs,Variance,Mean"


@pytest.mark.parametrize("kind", list(StatisticKind))
def test_empty_stream_is_zero(kind):
    stat = Statistic(kind)
    assert stat.count == 0
    assert stat.compute() == 0.0


@pytest.mark.parametrize("kind", list(StatisticKind))
def test_all_zero_stream_is_zero(kind):
    stat = Statistic(kind)
    for _ in range(100):
        stat.insert(0.0)
    assert stat.compute() == 0.0


@pytest.mark.parametrize("k", [3.25, -7.0, 1e-9])
def test_constant_stream(k):
    signal = SignalStats(ALL_KINDS)
    for _ in range(50):
        signal.insert_data(k)
    values = signal.map()
    assert values["Mean"] == pytest.approx(k)
    assert values["Variance"] == 0.0
    assert values["MaxAbs"] == abs(k)


def test_variance_is_unbiased_sample_variance():
    data = [1.0, -2.5, 4.0, 0.5, 3.0, -1.0]
    stat = Statistic("Variance")
    for x in data:
        stat.insert(x)
    assert stat.compute() == pytest.approx(statistics.variance(data))


def test_single_sample_variance_is_zero():
    stat = Statistic(StatisticKind.VARIANCE)
    stat.insert(42.0)
    assert stat.compute() == 0.0


def test_mean_and_max_abs():
    data = [0.5, -3.0, 2.0]
    signal = SignalStats(["Mean", "MaxAbs"])
    for x in data:
        signal.insert_data(x)
    assert signal.map() == {"Mean": pytest.approx(sum(data) / 3), "MaxAbs": 3.0}


def test_reset_clears_state():
    signal = SignalStats(ALL_KINDS)
    for x in (1.0, 2.0, -9.0):
        signal.insert_data(x)
    signal.reset()
    assert signal.count == 0
    assert signal.map() == {"MaxAbs": 0.0, "Variance": 0.0, "Mean": 0.0}


def test_parse_kinds_forms():
    assert parse_kinds("MaxAbs, Variance,Mean") == (
        StatisticKind.MAX_ABS,
        StatisticKind.VARIANCE,
        StatisticKind.MEAN,
    )
    assert parse_kinds([StatisticKind.MEAN, "MaxAbs"]) == (StatisticKind.MEAN, StatisticKind.MAX_ABS)


@pytest.mark.parametrize("bad", ["", "MaxAbs,Median", "Mean,Mean", []])
def test_parse_kinds_rejects_invalid(bad):
    with pytest.raises(ValueError):
        parse_kinds(bad)


def test_map_preserves_construction_order():
    signal = SignalStats("Mean,MaxAbs,Variance")
    assert list(signal.map()) == ["Mean", "MaxAbs", "Variance"]


def test_compatible_requires_identical_kind_sets():
    a = SignalStats("MaxAbs,Variance,Mean")
    b = SignalStats("Mean,MaxAbs,Variance")
    c = SignalStats("MaxAbs,Mean")
    assert a.compatible(b)
    assert not a.compatible(c)


def test_independent_instances_are_deterministic():
    data = [math.sin(0.1 * i) * (i % 7) for i in range(500)]
    a = SignalStats(ALL_KINDS)
    b = SignalStats(ALL_KINDS)
    for x in data:
        a.insert_data(x)
    for x in data:
        b.insert_data(x)
    assert a.map() == b.map()


def test_vector_stats_magnitude_matches_components():
    samples = [(3.0, 4.0, 0.0), (1.0, 2.0, 2.0), (-6.0, 0.0, 8.0)]
    vec = VectorStats(ALL_KINDS)
    expected = SignalStats(ALL_KINDS)
    for x, y, z in samples:
        vec.insert_data((x, y, z))
        expected.insert_data(math.sqrt(x * x + y * y + z * z))

    assert vec.mag.map() == expected.map()
    assert vec.mag.map()["MaxAbs"] == 10.0
    assert vec.mag.map()["Mean"] == pytest.approx((5.0 + 3.0 + 10.0) / 3)


def test_vector_stats_axes_are_separate():
    vec = VectorStats("MaxAbs")
    vec.insert_data((1.0, -2.0, 0.0))
    vec.insert_data((0.0, 0.0, -3.0))
    assert vec.map() == {
        "x": {"MaxAbs": 1.0},
        "y": {"MaxAbs": 2.0},
        "z": {"MaxAbs": 3.0},
        "mag": {"MaxAbs": 3.0},
    }
    assert vec.count == 2
    assert all(s.compatible(vec.mag) for s in (vec.x, vec.y, vec.z))


def test_nan_sample_is_not_hidden_by_max_abs():
    signal = SignalStats(ALL_KINDS)
    for x in (0.5, math.nan, 2.0, -3.0):
        signal.insert_data(x)
    values = signal.map()
    assert math.isnan(values["MaxAbs"])
    assert math.isnan(values["Mean"])
    assert math.isnan(values["Variance"])


def test_nan_max_abs_fails_its_threshold():
    signal = SignalStats(["MaxAbs"])
    for x in (1e-12, math.nan, 1e-12):
        signal.insert_data(x)

    violations = evaluate_thresholds(
        {"energy_error": signal.map()}, AccuracyThresholds({"energy_error": {"MaxAbs": 1e-6}})
    )

    assert len(violations) == 1
    assert violations[0].startswith("energy_error.MaxAbs=nan")
