"""Online statistics over scalar and vector streams.

Accumulators in this module never store sample history. Each insertion updates
a constant amount of state, so a run of any length costs the same memory. Empty
streams report ``0.0`` for every kind so downstream aggregation can treat all
bundles uniformly.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Union


class StatisticKind(str, Enum):
    """Named online aggregation functions."""

    MAX_ABS = "MaxAbs"
    VARIANCE = "Variance"
    MEAN = "Mean"


KindSpec = Union[str, Iterable[Union[str, StatisticKind]]]

DEFAULT_KINDS = "MaxAbs,Variance,Mean"


def parse_kinds(kinds: KindSpec) -> tuple[StatisticKind, ...]:
    """Normalize a kind specification into an ordered tuple of kinds.

    Accepts either a comma-separated string such as ``"MaxAbs,Variance,Mean"``
    or an iterable of tokens / :class:`StatisticKind` members.

    Raises:
        ValueError: On an unknown token, a repeated kind, or an empty set.
    """
    if isinstance(kinds, str):
        tokens = [t.strip() for t in kinds.split(",") if t.strip()]
    else:
        tokens = list(kinds)

    parsed: list[StatisticKind] = []
    for token in tokens:
        try:
            kind = StatisticKind(token)
        except ValueError:
            raise ValueError(f"Unknown statistic kind: {token!r}") from None
        if kind in parsed:
            raise ValueError(f"Duplicate statistic kind: {kind.value!r}")
        parsed.append(kind)

    if not parsed:
        raise ValueError("At least one statistic kind is required")
    return tuple(parsed)


@dataclass(slots=True)
class Statistic:
    """A single running statistic over a scalar stream.

    State is updated with Welford's recurrence (count, mean, sum of squared
    deviations) plus the running maximum of ``|value|``.
    """

    kind: StatisticKind
    _count: int = field(default=0, init=False, repr=False)
    _mean: float = field(default=0.0, init=False, repr=False)
    _m2: float = field(default=0.0, init=False, repr=False)
    _max_abs: float = field(default=0.0, init=False, repr=False)

    def __post_init__(self) -> None:
        self.kind = StatisticKind(self.kind)

    @property
    def count(self) -> int:
        return self._count

    def insert(self, value: float) -> None:
        """Add one sample in O(1) time and memory."""
        x = float(value)
        self._count += 1
        delta = x - self._mean
        self._mean += delta / self._count
        self._m2 += delta * (x - self._mean)
        # NaN sticks so a diverged run cannot pass a MaxAbs limit.
        if math.isnan(x) or abs(x) > self._max_abs:
            self._max_abs = abs(x)

    def compute(self) -> float:
        """Return the current value for this statistic's kind."""
        if self.kind is StatisticKind.MAX_ABS:
            return self._max_abs
        if self.kind is StatisticKind.MEAN:
            return self._mean if self._count > 0 else 0.0
        if self._count < 2:
            return 0.0
        return max(0.0, self._m2 / (self._count - 1))

    def reset(self) -> None:
        self._count = 0
        self._mean = 0.0
        self._m2 = 0.0
        self._max_abs = 0.0


@dataclass(slots=True, init=False)
class SignalStats:
    """A bundle of statistics evaluated in parallel over one scalar stream."""

    kinds: tuple[StatisticKind, ...]
    statistics: list[Statistic]

    def __init__(self, kinds: KindSpec = DEFAULT_KINDS) -> None:
        self.kinds = parse_kinds(kinds)
        self.statistics = [Statistic(kind) for kind in self.kinds]

    @property
    def count(self) -> int:
        return self.statistics[0].count

    def insert_data(self, value: float) -> None:
        """Feed the same value to every member statistic."""
        for stat in self.statistics:
            stat.insert(value)

    def map(self) -> dict[str, float]:
        """Return current values keyed by kind token, in construction order."""
        return {stat.kind.value: stat.compute() for stat in self.statistics}

    def compatible(self, other: SignalStats) -> bool:
        """Return True when both bundles report the same kind schema."""
        return set(self.kinds) == set(other.kinds)

    def reset(self) -> None:
        for stat in self.statistics:
            stat.reset()


@dataclass(slots=True, init=False)
class VectorStats:
    """Per-axis and magnitude statistics over a 3-component vector stream.

    Axis bundles localize anisotropic errors (a solver biased along one axis);
    the magnitude bundle gives a single scalar for pass/fail comparison.
    """

    x: SignalStats
    y: SignalStats
    z: SignalStats
    mag: SignalStats

    def __init__(self, kinds: KindSpec = DEFAULT_KINDS) -> None:
        parsed = parse_kinds(kinds)
        self.x = SignalStats(parsed)
        self.y = SignalStats(parsed)
        self.z = SignalStats(parsed)
        self.mag = SignalStats(parsed)

    @property
    def kinds(self) -> tuple[StatisticKind, ...]:
        return self.mag.kinds

    @property
    def count(self) -> int:
        return self.mag.count

    def insert_data(self, v: tuple[float, float, float]) -> None:
        """Insert one vector sample and its Euclidean magnitude."""
        x, y, z = (float(c) for c in v)
        self.x.insert_data(x)
        self.y.insert_data(y)
        self.z.insert_data(z)
        self.mag.insert_data(math.sqrt(x * x + y * y + z * z))

    def map(self) -> dict[str, dict[str, float]]:
        return {
            "x": self.x.map(),
            "y": self.y.map(),
            "z": self.z.map(),
            "mag": self.mag.map(),
        }

    def reset(self) -> None:
        for signal in (self.x, self.y, self.z, self.mag):
            signal.reset()
