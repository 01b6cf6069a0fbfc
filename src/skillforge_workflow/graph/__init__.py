"""Stateful workflow graph engine.

Steps read an immutable snapshot of a shared State Document and return
patches or fan-out instructions; the scheduler merges patches per channel
policy between synchronous supersteps.
"""

from skillforge_workflow.graph.builder import CompiledGraph, GraphBuilder
from skillforge_workflow.graph.channels import (
    Channel,
    MergePolicy,
    StateSchema,
    keyed_union,
    overwrite,
)
from skillforge_workflow.graph.errors import (
    CancelledError,
    ConfigurationError,
    HandlerError,
    RecursionLimitError,
    RoutingError,
    RunError,
    WorkflowError,
)
from skillforge_workflow.graph.scheduler import (
    CancellationToken,
    RunOptions,
    SuperstepEvent,
    astream,
    run,
)
from skillforge_workflow.graph.types import TERMINAL, FanOut, Invocation, StepOutput

__all__ = [
    "TERMINAL",
    "CancellationToken",
    "CancelledError",
    "Channel",
    "CompiledGraph",
    "ConfigurationError",
    "FanOut",
    "GraphBuilder",
    "HandlerError",
    "Invocation",
    "MergePolicy",
    "RecursionLimitError",
    "RoutingError",
    "RunError",
    "RunOptions",
    "StateSchema",
    "StepOutput",
    "SuperstepEvent",
    "WorkflowError",
    "astream",
    "keyed_union",
    "overwrite",
    "run",
]
