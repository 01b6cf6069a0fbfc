"""Local LLaMA generator implementation."""

import asyncio
import logging

from skillforge_workflow.core.config import GeneratorConfig
from skillforge_workflow.llm.provider import (
    GenerationRequest,
    Generator,
    ModelT,
    parse_structured,
    schema_instruction,
)

logger = logging.getLogger(__name__)


class LLaMAGenerator(Generator):
    """Local LLaMA model generator.

    Requires llama-cpp-python to be installed:
        pip install "skillforge-workflow[llama]"

    llama.cpp inference is blocking, so calls run in a worker thread and are
    serialized through a lock (one model context cannot serve parallel calls).
    """

    def __init__(self, config: GeneratorConfig) -> None:
        """Initialize the LLaMA generator.

        Args:
            config: Generator configuration.

        Raises:
            ValueError: If model path is not provided.
            ImportError: If llama-cpp-python is not installed.
        """
        if not config.llama_model_path:
            raise ValueError("LLaMA model path is required")

        try:
            from llama_cpp import Llama
        except ImportError as e:
            raise ImportError(
                "llama-cpp-python is required for LLaMA generator. "
                "Install it with: pip install llama-cpp-python"
            ) from e

        self.config = config
        self._lock = asyncio.Lock()

        logger.info(f"Loading LLaMA model from: {config.llama_model_path}")

        self.llm = Llama(
            model_path=str(config.llama_model_path),
            n_ctx=config.llama_n_ctx,
            n_threads=config.llama_n_threads,
            verbose=False,
        )

        logger.info("LLaMA model loaded successfully")

    async def generate(self, request: GenerationRequest[ModelT]) -> ModelT:
        """Generate a structured result using the local model.

        Args:
            request: Messages plus the expected response model.

        Returns:
            Parsed response model instance.
        """
        messages = [schema_instruction(request.response_model), *request.messages]

        logger.debug(f"Requesting {request.name} with {len(messages)} messages")

        async with self._lock:
            result = await asyncio.to_thread(
                self.llm.create_chat_completion,
                messages=messages,
                response_format={
                    "type": "json_object",
                    "schema": request.response_model.model_json_schema(),
                },
            )

        content = result["choices"][0]["message"]["content"] or ""
        logger.debug(f"{request.name}: received {len(content)} characters")

        return parse_structured(content, request.response_model, name=request.name)
