"""Graph definition: a registry of named steps, static edges and routers.

A :class:`GraphBuilder` collects the definition and :meth:`GraphBuilder.compile`
validates it into an immutable :class:`CompiledGraph` that can be shared by
any number of concurrent runs.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from .channels import StateSchema
from .errors import ConfigurationError
from .types import TERMINAL, FanOut, Handler, Router, _Terminal

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Step:
    name: str
    handler: Handler
    fanout_targets: frozenset[str] = frozenset()


@dataclass(frozen=True, slots=True)
class ConditionalEdge:
    """A router attached to a step.

    ``path_map`` translates router return labels to step names (or TERMINAL).
    When it is None the router returns step names directly and any known step
    is accepted at run time.
    """

    router: Router
    path_map: Mapping[str, str | _Terminal] | None = None

    def resolve(self, label: str | FanOut | _Terminal) -> str | FanOut | _Terminal:
        """Translate one router result. Raises KeyError outside the declared set."""

        if self.path_map is None:
            return label
        if isinstance(label, FanOut):
            if label.target not in self.path_map.values():
                raise KeyError(label.target)
            return label
        if label is TERMINAL:
            if TERMINAL not in self.path_map.values():
                raise KeyError(label)
            return TERMINAL
        if label not in self.path_map:
            raise KeyError(label)
        return self.path_map[label]


class CompiledGraph:
    """Immutable, validated graph. Produced only by :meth:`GraphBuilder.compile`."""

    def __init__(
        self,
        *,
        name: str,
        schema: StateSchema,
        steps: Mapping[str, Step],
        edges: Mapping[str, str | _Terminal],
        routers: Mapping[str, ConditionalEdge],
        start: str,
    ) -> None:
        self.name = name
        self.schema = schema
        self.steps: Mapping[str, Step] = MappingProxyType(dict(steps))
        self.edges: Mapping[str, str | _Terminal] = MappingProxyType(dict(edges))
        self.routers: Mapping[str, ConditionalEdge] = MappingProxyType(dict(routers))
        self.start = start

    def __repr__(self) -> str:
        return f"CompiledGraph(name={self.name!r}, steps={list(self.steps)}, start={self.start!r})"

    def has_step(self, name: object) -> bool:
        return isinstance(name, str) and name in self.steps


class GraphBuilder:
    """Collects steps and edges. Not thread-safe; compile once at startup."""

    def __init__(self, schema: StateSchema, *, name: str = "workflow") -> None:
        self.schema = schema
        self.name = name
        self._steps: dict[str, Step] = {}
        self._edges: dict[str, str | _Terminal] = {}
        self._routers: dict[str, ConditionalEdge] = {}
        self._start: str | None = None

    def add_step(
        self, name: str, handler: Handler, *, fanout_targets: Iterable[str] = ()
    ) -> GraphBuilder:
        if not name or name == repr(TERMINAL):
            raise ConfigurationError(f"Invalid step name: {name!r}")
        if name in self._steps:
            raise ConfigurationError(f"Step {name!r} is already defined")
        if not callable(handler):
            raise ConfigurationError(f"Handler for step {name!r} is not callable")
        self._steps[name] = Step(name, handler, frozenset(fanout_targets))
        return self

    def add_edge(self, source: str, target: str | _Terminal) -> GraphBuilder:
        if source in self._edges or source in self._routers:
            raise ConfigurationError(f"Step {source!r} already has an outgoing edge")
        self._edges[source] = target
        return self

    def add_conditional_edges(
        self,
        source: str,
        router: Router,
        destinations: Sequence[str | _Terminal] | Mapping[str, str | _Terminal] | None = None,
    ) -> GraphBuilder:
        """Attach a router to ``source``.

        Args:
            source: Step whose completion triggers the router.
            router: ``state -> step name | list of names/FanOut | TERMINAL``.
            destinations: Optional declaration of what the router may return:
                either the allowed step names (TERMINAL included), or a mapping
                from router labels to step names.
        """
        if source in self._edges or source in self._routers:
            raise ConfigurationError(f"Step {source!r} already has an outgoing edge")
        if not callable(router):
            raise ConfigurationError(f"Router for step {source!r} is not callable")

        path_map: dict[str, str | _Terminal] | None
        if destinations is None:
            path_map = None
        elif isinstance(destinations, Mapping):
            path_map = dict(destinations)
        else:
            path_map = {}
            for dest in destinations:
                path_map[repr(dest) if dest is TERMINAL else str(dest)] = dest
        self._routers[source] = ConditionalEdge(router, path_map)
        return self

    def set_start(self, name: str) -> GraphBuilder:
        self._start = name
        return self

    def compile(self) -> CompiledGraph:
        """Validate the definition and freeze it.

        Raises:
            ConfigurationError: On an unknown start step, an edge that names an
                unknown step, or a router whose declared destinations contain
                no known step and no TERMINAL.
        """
        if self._start is None:
            raise ConfigurationError("No start step set")
        if self._start not in self._steps:
            raise ConfigurationError(f"Unknown start step: {self._start!r}")

        for source, target in self._edges.items():
            self._require_step(source, context="edge source")
            if target is not TERMINAL:
                self._require_step(target, context=f"edge {source!r} ->")

        for source, edge in self._routers.items():
            self._require_step(source, context="router source")
            if edge.path_map is None:
                continue
            if not edge.path_map:
                raise ConfigurationError(f"Router on {source!r} declares no destinations")
            for label, dest in edge.path_map.items():
                if dest is not TERMINAL:
                    self._require_step(dest, context=f"router {source!r} label {label!r} ->")

        for step in self._steps.values():
            for target in step.fanout_targets:
                self._require_step(target, context=f"fan-out from {step.name!r} ->")

        unreachable = sorted(set(self._steps) - self._reachable())
        if unreachable and all(e.path_map is not None for e in self._routers.values()):
            logger.warning(
                "Graph has steps that are never scheduled",
                extra={"graph": self.name, "unreachable": unreachable},
            )

        compiled = CompiledGraph(
            name=self.name,
            schema=self.schema,
            steps=self._steps,
            edges=self._edges,
            routers=self._routers,
            start=self._start,
        )
        logger.debug(
            "Compiled graph",
            extra={"graph": self.name, "steps": list(self._steps), "start": self._start},
        )
        return compiled

    def _require_step(self, name: Any, *, context: str) -> None:
        if not isinstance(name, str) or name not in self._steps:
            raise ConfigurationError(f"Unknown step in {context} {name!r}")

    def _reachable(self) -> set[str]:
        seen: set[str] = set()
        pending = [self._start] if self._start else []
        while pending:
            current = pending.pop()
            if current in seen:
                continue
            seen.add(current)
            nxt: list[Any] = list(self._steps[current].fanout_targets)
            if current in self._edges:
                nxt.append(self._edges[current])
            edge = self._routers.get(current)
            if edge is not None and edge.path_map is not None:
                nxt.extend(edge.path_map.values())
            pending.extend(n for n in nxt if isinstance(n, str) and n in self._steps)
        return seen
