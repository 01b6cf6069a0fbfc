"""State schema: named channels and their merge policies.

The State Document is a plain ``dict`` mapping channel name to value. Only the
scheduler mutates it, and only through :meth:`StateSchema.commit`, which
applies every patch of a superstep at once.
"""

from __future__ import annotations

import copy
import json
import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic_core import to_jsonable_python

logger = logging.getLogger(__name__)


class MergePolicy(str, Enum):
    OVERWRITE = "overwrite"
    KEYED_UNION = "keyed_union"


class PatchError(ValueError):
    """A patch does not fit the schema (unknown channel or wrong shape)."""


@dataclass(frozen=True, slots=True)
class Channel:
    """A named slot in the State Document.

    A channel is absent from the document until the caller supplies it or a
    step writes it, unless it declares a ``default`` factory. Keyed-union
    merges start from an empty dict.
    """

    name: str
    policy: MergePolicy = MergePolicy.OVERWRITE
    default: Callable[[], Any] | None = None

    def initial(self) -> Any:
        if self.default is not None:
            return self.default()
        if self.policy is MergePolicy.KEYED_UNION:
            return {}
        return None


class StateSchema:
    """Declares the channels of a State Document and how each one merges."""

    def __init__(self, *channels: Channel) -> None:
        names = [c.name for c in channels]
        dupes = sorted({n for n in names if names.count(n) > 1})
        if dupes:
            raise ValueError(f"Duplicate channel names: {', '.join(dupes)}")
        self.channels: tuple[Channel, ...] = tuple(channels)
        self._index: dict[str, Channel] = {c.name: c for c in channels}

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __getitem__(self, name: str) -> Channel:
        return self._index[name]

    @property
    def names(self) -> list[str]:
        return [c.name for c in self.channels]

    def create(self, initial: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Build a fresh State Document from caller-supplied initial values."""

        initial = initial or {}
        unknown = sorted(k for k in initial if k not in self._index)
        if unknown:
            raise ValueError(f"Unknown channels in initial state: {', '.join(unknown)}")

        document: dict[str, Any] = {}
        for channel in self.channels:
            if channel.name in initial:
                value = initial[channel.name]
                if channel.policy is MergePolicy.KEYED_UNION and not isinstance(value, Mapping):
                    raise ValueError(
                        f"Initial value for keyed-union channel {channel.name!r} must be a "
                        f"mapping, got {type(value).__name__}"
                    )
                document[channel.name] = copy.deepcopy(value)
            elif channel.default is not None:
                document[channel.name] = channel.default()
        return document

    def validate_patch(self, patch: Mapping[str, Any]) -> None:
        for name, value in patch.items():
            channel = self._index.get(name)
            if channel is None:
                raise PatchError(f"Patch writes unknown channel {name!r}")
            if channel.policy is MergePolicy.KEYED_UNION and not isinstance(value, Mapping):
                raise PatchError(
                    f"Channel {name!r} uses keyed-union merge and needs a mapping, "
                    f"got {type(value).__name__}"
                )

    def commit(
        self, document: Mapping[str, Any], patches: Sequence[tuple[str, Mapping[str, Any]]]
    ) -> tuple[dict[str, Any], set[str]]:
        """Merge one superstep's patches into a copy of ``document``.

        ``patches`` pairs each patch with the name of the step that produced it.
        Patches must already be validated. The input document is left untouched,
        so a failure while merging discards the whole superstep.

        Returns the new document and the set of channels that were written.
        """

        merged = dict(document)
        writers: dict[str, list[str]] = {}

        for step, patch in patches:
            for name, value in patch.items():
                writers.setdefault(name, []).append(step)
                channel = self._index[name]
                if channel.policy is MergePolicy.KEYED_UNION:
                    union = dict(merged.get(name) or channel.initial())
                    union.update(copy.deepcopy(dict(value)))
                    merged[name] = union
                else:
                    merged[name] = copy.deepcopy(value)

        for name, steps in writers.items():
            if len(steps) > 1 and self._index[name].policy is MergePolicy.OVERWRITE:
                logger.warning(
                    "Overwrite channel written by several invocations in one superstep",
                    extra={"channel": name, "steps": steps},
                )

        return merged, set(writers)

    def dump_json(self, state: Mapping[str, Any], *, indent: int | None = 2) -> str:
        """Serialize a State Document for logging or caller-side persistence."""

        return json.dumps(
            {
                name: to_jsonable_python(state[name], serialize_unknown=True)
                for name in self.names
                if name in state
            },
            indent=indent,
            ensure_ascii=False,
        )

    def load_json(self, text: str) -> dict[str, Any]:
        raw = json.loads(text)
        if not isinstance(raw, dict):
            raise ValueError("State snapshot must be a JSON object")
        return self.create(raw)


def keyed_union(name: str) -> Channel:
    return Channel(name, MergePolicy.KEYED_UNION)


def overwrite(name: str, default: Callable[[], Any] | None = None) -> Channel:
    return Channel(name, MergePolicy.OVERWRITE, default)

