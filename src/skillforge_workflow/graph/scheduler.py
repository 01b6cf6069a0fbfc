"""Superstep scheduler.

One superstep runs every invocation of the current frontier concurrently
against the same committed State Document, waits at a barrier for all of
them, merges their patches through the channel merge policies, then resolves
the next frontier from static edges, routers and fan-out instructions.

A superstep is atomic: its patches are published together with the next
frontier, or not at all. Any failure leaves the document exactly as the
previous superstep committed it.
"""

from __future__ import annotations

import asyncio
import copy
import inspect
import logging
import uuid
from collections.abc import AsyncIterator, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .builder import CompiledGraph, Step
from .channels import PatchError
from .errors import (
    CancelledError,
    HandlerError,
    RecursionLimitError,
    RoutingError,
    RunError,
)
from .types import TERMINAL, FanOut, Invocation, StepOutput, _Terminal

logger = logging.getLogger(__name__)


class CancellationToken:
    """A one-shot cancellation signal shared by a run and its caller.

    ``cancel`` must be called from the event loop thread; from another thread
    use ``loop.call_soon_threadsafe(token.cancel)``.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()


@dataclass(frozen=True, slots=True)
class RunOptions:
    max_concurrency: int = 8
    invocation_timeout: float | None = None
    max_supersteps: int = 25
    cancellation: CancellationToken | None = None
    run_id: str | None = None

    def __post_init__(self) -> None:
        if self.max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        if self.invocation_timeout is not None and self.invocation_timeout <= 0:
            raise ValueError("invocation_timeout must be positive")
        if self.max_supersteps < 1:
            raise ValueError("max_supersteps must be at least 1")


@dataclass(frozen=True, slots=True)
class SuperstepEvent:
    """Emitted by :func:`astream` after each committed superstep."""

    index: int
    steps: tuple[str, ...]
    updated_channels: frozenset[str]
    state: dict[str, Any] = field(repr=False)


@dataclass(slots=True)
class _Outcome:
    invocation: Invocation
    patch: Mapping[str, Any]
    # None means "route normally"; a list (possibly empty) replaces routing.
    fanout: list[FanOut] | None


async def run(
    graph: CompiledGraph,
    initial_state: Mapping[str, Any] | None = None,
    options: RunOptions | None = None,
) -> dict[str, Any]:
    """Run ``graph`` to completion and return the final State Document.

    Raises:
        ValueError: If ``initial_state`` names an unknown channel.
        HandlerError: A handler failed, timed out or returned an invalid output.
        RoutingError: A router or fan-out named an unknown target.
        CancelledError: The cancellation token fired.
        RecursionLimitError: ``options.max_supersteps`` was exhausted.
    """
    final: dict[str, Any] | None = None
    async for event in astream(graph, initial_state, options):
        final = event.state
    if final is None:
        raise RuntimeError(f"Graph {graph.name!r} finished without committing a superstep")
    return final


async def astream(
    graph: CompiledGraph,
    initial_state: Mapping[str, Any] | None = None,
    options: RunOptions | None = None,
) -> AsyncIterator[SuperstepEvent]:
    """Run ``graph`` and yield a :class:`SuperstepEvent` after every superstep."""

    options = options or RunOptions()
    run_id = options.run_id or uuid.uuid4().hex[:12]
    token = options.cancellation or CancellationToken()
    semaphore = asyncio.Semaphore(options.max_concurrency)

    state = graph.schema.create(initial_state)
    frontier: list[Invocation] = [Invocation(graph.start)]
    index = 0

    logger.info(
        "Workflow run started",
        extra={"run_id": run_id, "graph": graph.name, "start": graph.start},
    )

    try:
        while frontier:
            if token.cancelled:
                raise CancelledError("Run cancelled", superstep=index)
            if index >= options.max_supersteps:
                raise RecursionLimitError(
                    f"Run did not terminate within {options.max_supersteps} supersteps",
                    step=frontier[0].step,
                    superstep=index,
                )

            logger.debug(
                "Superstep started",
                extra={
                    "run_id": run_id,
                    "superstep": index,
                    "frontier": [inv.step for inv in frontier],
                },
            )

            outcomes = await _execute(graph, frontier, state, semaphore, token, options)
            candidate, updated = graph.schema.commit(
                state, [(o.invocation.step, o.patch) for o in outcomes]
            )
            next_frontier = await _next_frontier(graph, outcomes, candidate)

            state = candidate
            event = SuperstepEvent(
                index=index,
                steps=tuple(inv.step for inv in frontier),
                updated_channels=frozenset(updated),
                state=copy.deepcopy(state),
            )
            logger.debug(
                "Superstep committed",
                extra={
                    "run_id": run_id,
                    "superstep": index,
                    "updated": sorted(updated),
                    "next": [inv.step for inv in next_frontier],
                },
            )
            frontier = next_frontier
            index += 1
            yield event
    except RunError as e:
        e.superstep = index
        e.state = copy.deepcopy(state)
        level = logging.INFO if isinstance(e, CancelledError) else logging.ERROR
        logger.log(
            level,
            f"Workflow run aborted: {e}",
            extra={
                "run_id": run_id,
                "step": e.step,
                "superstep": index,
                "error": type(e).__name__,
            },
        )
        raise

    logger.info(
        "Workflow run completed",
        extra={"run_id": run_id, "graph": graph.name, "supersteps": index},
    )


async def _execute(
    graph: CompiledGraph,
    frontier: Sequence[Invocation],
    state: Mapping[str, Any],
    semaphore: asyncio.Semaphore,
    token: CancellationToken,
    options: RunOptions,
) -> list[_Outcome]:
    """Run one frontier to the barrier. Fails fast on the first error."""

    tasks = [
        asyncio.create_task(
            _invoke(graph.steps[inv.step], inv, state, semaphore, options, graph),
            name=f"{graph.name}:{inv.step}:{i}",
        )
        for i, inv in enumerate(frontier)
    ]
    cancel_waiter = asyncio.create_task(token.wait())
    waiting: set[asyncio.Task[Any]] = set(tasks)

    try:
        while waiting:
            done, _ = await asyncio.wait(
                waiting | {cancel_waiter}, return_when=asyncio.FIRST_COMPLETED
            )
            if cancel_waiter in done:
                raise CancelledError("Run cancelled", step=None)

            # Frontier order decides which failure is reported.
            for task in tasks:
                if task in done:
                    waiting.discard(task)
                    exc = task.exception()
                    if exc is not None:
                        raise exc
    finally:
        cancel_waiter.cancel()
        unfinished = [t for t in tasks if not t.done()]
        for task in unfinished:
            task.cancel()
        if unfinished:
            await asyncio.gather(*unfinished, return_exceptions=True)

    return [task.result() for task in tasks]


async def _invoke(
    step: Step,
    invocation: Invocation,
    state: Mapping[str, Any],
    semaphore: asyncio.Semaphore,
    options: RunOptions,
    graph: CompiledGraph,
) -> _Outcome:
    # Each invocation gets its own read-only copy of the committed document.
    snapshot = MappingProxyType(copy.deepcopy(dict(state)))

    async with semaphore:
        try:
            if options.invocation_timeout is None:
                result = await _call(step, snapshot, invocation.payload)
            else:
                result = await asyncio.wait_for(
                    _call(step, snapshot, invocation.payload),
                    timeout=options.invocation_timeout,
                )
        except asyncio.TimeoutError as e:
            raise HandlerError(
                f"Step {step.name!r} timed out after {options.invocation_timeout}s",
                step=step.name,
            ) from e
        except HandlerError:
            raise
        except Exception as e:
            raise HandlerError(f"Step {step.name!r} failed: {e}", step=step.name) from e

    return _normalize(graph, invocation, result)


async def _call(step: Step, snapshot: Mapping[str, Any], payload: Any) -> Any:
    result = step.handler(snapshot, payload)
    if inspect.isawaitable(result):
        result = await result
    return result


def _normalize(graph: CompiledGraph, invocation: Invocation, result: Any) -> _Outcome:
    step = invocation.step
    patch: Mapping[str, Any]
    fanout: list[FanOut] | None

    if result is None:
        patch, fanout = {}, None
    elif isinstance(result, StepOutput):
        patch = result.patch
        fanout = list(result.fanout) or None
    elif isinstance(result, Mapping):
        patch, fanout = result, None
    elif isinstance(result, Sequence) and not isinstance(result, (str, bytes)):
        patch, fanout = {}, list(result)
    else:
        raise HandlerError(
            f"Step {step!r} returned unsupported type {type(result).__name__}", step=step
        )

    if fanout is not None:
        bad = [f for f in fanout if not isinstance(f, FanOut)]
        if bad:
            raise HandlerError(
                f"Step {step!r} returned a list containing non-FanOut values", step=step
            )
    try:
        graph.schema.validate_patch(patch)
    except PatchError as e:
        raise HandlerError(f"Step {step!r} returned an invalid patch: {e}", step=step) from e

    return _Outcome(invocation=invocation, patch=patch, fanout=fanout)


async def _next_frontier(
    graph: CompiledGraph, outcomes: Sequence[_Outcome], state: Mapping[str, Any]
) -> list[Invocation]:
    frontier: list[Invocation] = []
    joined: set[str] = set()

    for outcome in outcomes:
        source = outcome.invocation.step

        if outcome.fanout is not None:
            for instruction in outcome.fanout:
                _require_target(graph, source, instruction.target)
                frontier.append(Invocation(instruction.target, instruction.payload, fanout=True))
            continue

        for target in await _route(graph, source, state):
            if isinstance(target, FanOut):
                frontier.append(Invocation(target.target, target.payload, fanout=True))
            elif target not in joined:
                # Whole-state invocations of the same step collapse into one.
                joined.add(target)
                frontier.append(Invocation(target))

    return frontier


async def _route(
    graph: CompiledGraph, source: str, state: Mapping[str, Any]
) -> list[str | FanOut]:
    if source in graph.edges:
        target = graph.edges[source]
        return [] if target is TERMINAL else [target]  # type: ignore[list-item]

    edge = graph.routers.get(source)
    if edge is None:
        return []

    try:
        result = edge.router(MappingProxyType(copy.deepcopy(dict(state))))
        if inspect.isawaitable(result):
            result = await result
    except Exception as e:
        raise RoutingError(f"Router on {source!r} failed: {e}", step=source) from e

    if isinstance(result, (str, _Terminal, FanOut)):
        items: list[Any] = [result]
    elif isinstance(result, Sequence):
        items = list(result)
    else:
        raise RoutingError(
            f"Router on {source!r} returned unsupported value {result!r}", step=source
        )

    targets: list[str | FanOut] = []
    for item in items:
        try:
            resolved = edge.resolve(item)
        except KeyError:
            raise RoutingError(
                f"Router on {source!r} returned undeclared destination {item!r}", step=source
            ) from None
        if resolved is TERMINAL:
            continue
        if isinstance(resolved, FanOut):
            _require_target(graph, source, resolved.target)
        elif not graph.has_step(resolved):
            raise RoutingError(
                f"Router on {source!r} returned unknown step {resolved!r}", step=source
            )
        targets.append(resolved)  # type: ignore[arg-type]
    return targets


def _require_target(graph: CompiledGraph, source: str, target: Any) -> None:
    if not graph.has_step(target):
        raise RoutingError(f"Fan-out from {source!r} targets unknown step {target!r}", step=source)
