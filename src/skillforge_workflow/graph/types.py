"""Plain data values exchanged between handlers, routers and the scheduler."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Final, TypeAlias


class _Terminal:
    """Sentinel type for TERMINAL. A single instance exists."""

    _instance: _Terminal | None = None

    def __new__(cls) -> _Terminal:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "TERMINAL"

    def __reduce__(self) -> str:
        return "TERMINAL"


TERMINAL: Final = _Terminal()


@dataclass(frozen=True, slots=True)
class FanOut:
    """Schedule ``target`` in the next superstep with ``payload`` as its input."""

    target: str
    payload: Any = None


@dataclass(frozen=True, slots=True)
class StepOutput:
    """A handler result carrying a patch, fan-out instructions, or both."""

    patch: Mapping[str, Any] = field(default_factory=dict)
    fanout: Sequence[FanOut] = ()


@dataclass(frozen=True, slots=True)
class Invocation:
    """One scheduled execution of a step.

    ``payload`` is None for whole-state invocations (static edges, routers,
    the start step) and holds the per-invocation input for fan-out.
    """

    step: str
    payload: Any = None
    fanout: bool = False


Patch: TypeAlias = Mapping[str, Any]
HandlerResult: TypeAlias = Patch | Sequence[FanOut] | StepOutput | None
Handler: TypeAlias = Callable[
    [Mapping[str, Any], Any], HandlerResult | Awaitable[HandlerResult]
]
RouteResult: TypeAlias = str | _Terminal | Sequence[str | FanOut]
Router: TypeAlias = Callable[[Mapping[str, Any]], RouteResult]
