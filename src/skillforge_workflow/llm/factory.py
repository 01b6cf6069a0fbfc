"""Factory for creating generators."""

import logging

from skillforge_workflow.core.config import GeneratorConfig
from skillforge_workflow.llm.llama_provider import LLaMAGenerator
from skillforge_workflow.llm.openai_provider import OpenAIGenerator
from skillforge_workflow.llm.provider import Generator

logger = logging.getLogger(__name__)


class GeneratorFactory:
    """Builds the generator named by ``GeneratorConfig.provider``.

    One generator is created per process and injected into every step handler
    of a compiled graph, so construction errors surface before any run starts.
    """

    providers: dict[str, type[Generator]] = {
        "openai": OpenAIGenerator,
        "llama": LLaMAGenerator,
    }

    @classmethod
    def create(cls, config: GeneratorConfig) -> Generator:
        """Create a generator based on configuration.

        Raises:
            ValueError: If the provider is unknown or its settings are incomplete.
            ImportError: If the provider's optional dependency is missing.
        """
        generator_cls = cls.providers.get(config.provider)
        if generator_cls is None:
            supported = ", ".join(sorted(cls.providers))
            raise ValueError(
                f"Unsupported generator provider: {config.provider} (expected one of {supported})"
            )

        logger.info("Creating generator", extra={"provider": config.provider})
        return generator_cls(config)  # type: ignore[call-arg]
