"""Generator package initialization."""

from skillforge_workflow.llm.factory import GeneratorFactory
from skillforge_workflow.llm.provider import GenerationRequest, Generator, GeneratorError

__all__ = [
    "GenerationRequest",
    "Generator",
    "GeneratorError",
    "GeneratorFactory",
]
