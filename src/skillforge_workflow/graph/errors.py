"""Error taxonomy for graph compilation and execution."""

from __future__ import annotations

from typing import Any


class WorkflowError(Exception):
    """Base class for every error raised by the workflow engine."""


class ConfigurationError(WorkflowError):
    """The graph definition is invalid. Raised by ``compile`` only."""


class RunError(WorkflowError):
    """A run aborted.

    Carries the failing step (if one can be named), the superstep index and the
    State Document as of the last fully committed superstep.
    """

    def __init__(
        self,
        message: str,
        *,
        step: str | None = None,
        superstep: int = 0,
        state: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.step = step
        self.superstep = superstep
        self.state: dict[str, Any] = state if state is not None else {}


class RoutingError(RunError):
    """A router or fan-out instruction named an unknown target."""


class HandlerError(RunError):
    """A step handler failed, timed out, or returned an invalid output."""


class CancelledError(RunError):
    """The run was cancelled through its cancellation token.

    Not to be confused with :class:`asyncio.CancelledError`, which never
    escapes a cancelled run.
    """


class RecursionLimitError(RunError):
    """The run exceeded its superstep budget without terminating."""
