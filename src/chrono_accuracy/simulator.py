"""Interface to the physics engine under test.

The accuracy checks treat the engine as an opaque stepper. Any backend that
implements :class:`Simulator` can be swept, including the PyChrono backend in
``chrono_backend`` and lightweight analytic stand-ins used by the test suite.
"""

from __future__ import annotations

from typing import Optional, Protocol, Sequence, Union

from .config import EngineParams, Vector3
from .sampler import BodyState

DiagnosticValue = Union[float, Sequence[float]]


class SimulatorError(RuntimeError):
    """Base class for failures raised by a simulator backend."""


class ConfigurationError(SimulatorError):
    """The engine rejected the requested parameters for a configuration point."""


class StepError(SimulatorError):
    """The engine failed while advancing the simulation."""


class Simulator(Protocol):
    """Operations consumed from a physics engine backend."""

    body_id: str
    """Identifier of the measured body."""

    def configure(
        self,
        mass: float,
        inertia: Vector3,
        gravity: Vector3,
        step_size: float,
        engine_params: EngineParams,
    ) -> None:
        """Apply body properties, world gravity, step size and solver parameters.

        Raises:
            ConfigurationError: If the engine rejects any value.
        """
        ...

    def apply_force(self, body_id: str, force: Vector3) -> None:
        """Accumulate a world-frame force on a body for the next step."""
        ...

    def step(self, n: int = 1) -> None:
        """Advance by ``n`` integration steps."""
        ...

    def read_state(self, body_id: str) -> BodyState:
        ...

    def read_simulated_time(self) -> float:
        ...

    def supported_diagnostics(self) -> tuple[str, ...]:
        """Names of engine diagnostics this backend can report."""
        ...

    def read_engine_diagnostic(self, name: str) -> Optional[DiagnosticValue]:
        """Return the latest value for ``name`` or ``None`` when unavailable."""
        ...
