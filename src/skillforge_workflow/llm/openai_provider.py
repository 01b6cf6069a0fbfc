"""OpenAI generator implementation."""

import logging

from openai import AsyncOpenAI, OpenAIError

from skillforge_workflow.core.config import GeneratorConfig
from skillforge_workflow.llm.provider import (
    GenerationRequest,
    Generator,
    GeneratorError,
    ModelT,
    parse_structured,
    schema_instruction,
)

logger = logging.getLogger(__name__)


class OpenAIGenerator(Generator):
    """OpenAI API generator using JSON-mode chat completions."""

    def __init__(self, config: GeneratorConfig) -> None:
        """Initialize the OpenAI generator.

        Args:
            config: Generator configuration.

        Raises:
            ValueError: If API key is not provided.
        """
        if not config.openai_api_key:
            raise ValueError("OpenAI API key is required")

        self.config = config
        self.client = AsyncOpenAI(api_key=config.openai_api_key, base_url=config.openai_base_url)
        self.model = config.openai_model
        self.temperature = config.openai_temperature

        logger.info(f"OpenAI generator initialized with model: {self.model}")

    async def generate(self, request: GenerationRequest[ModelT]) -> ModelT:
        """Generate a structured result using the OpenAI API.

        Args:
            request: Messages plus the expected response model.

        Returns:
            Parsed response model instance.
        """
        messages = [schema_instruction(request.response_model), *request.messages]

        logger.debug(f"Requesting {request.name} with {len(messages)} messages")

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,  # type: ignore
                temperature=self.temperature,
                response_format={"type": "json_object"},
            )
        except OpenAIError as e:
            raise GeneratorError(f"{request.name}: OpenAI request failed: {e}") from e

        content = response.choices[0].message.content or ""
        logger.debug(f"{request.name}: received {len(content)} characters")

        return parse_structured(content, request.response_model, name=request.name)
