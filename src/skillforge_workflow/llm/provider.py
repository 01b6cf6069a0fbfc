"""Abstract base class for content generators."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from pydantic import BaseModel, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


class GeneratorError(RuntimeError):
    """The generator call failed or its output did not match the requested schema."""


@dataclass(frozen=True, slots=True)
class GenerationRequest(Generic[ModelT]):
    """A structured generation request.

    ``messages`` are chat messages (dicts with ``role`` and ``content``);
    the result is parsed into ``response_model``.
    """

    messages: list[dict[str, str]]
    response_model: type[ModelT]
    name: str = field(default="generation")


class Generator(ABC):
    """Abstract base class for generators.

    This interface allows pluggable backends (OpenAI, LLaMA, test doubles).
    Implementations are constructed once and injected into step handlers.
    """

    @abstractmethod
    async def generate(self, request: GenerationRequest[ModelT]) -> ModelT:
        """Produce a structured result for ``request``.

        Args:
            request: Messages plus the pydantic model describing the result.

        Returns:
            An instance of ``request.response_model``.

        Raises:
            GeneratorError: If the backend fails or returns non-conforming output.
        """
        pass


def schema_instruction(response_model: type[BaseModel]) -> dict[str, str]:
    """System message asking for JSON that matches ``response_model``."""

    schema = json.dumps(response_model.model_json_schema(), ensure_ascii=False)
    return {
        "role": "system",
        "content": (
            "Respond with a single JSON object and nothing else. "
            f"It must validate against this JSON schema:\n{schema}"
        ),
    }


def parse_structured(content: str, response_model: type[ModelT], *, name: str) -> ModelT:
    try:
        return response_model.model_validate_json(content)
    except ValidationError as e:
        raise GeneratorError(
            f"{name}: response does not match {response_model.__name__}: {e}"
        ) from e
