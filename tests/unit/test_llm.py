"""Unit tests for generators."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest

from skillforge_workflow.core.config import GeneratorConfig
from skillforge_workflow.llm import GenerationRequest, GeneratorError, GeneratorFactory
from skillforge_workflow.llm.openai_provider import OpenAIGenerator
from skillforge_workflow.llm.provider import parse_structured, schema_instruction
from skillforge_workflow.roadmap.schemas import ProjectIdea, TopicList


def _completion(content: str) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def test_factory_creates_openai_generator(generator_config: GeneratorConfig) -> None:
    generator = GeneratorFactory.create(generator_config)

    assert isinstance(generator, OpenAIGenerator)
    assert generator.model == "gpt-4o-mini"


def test_openai_generator_requires_api_key() -> None:
    with pytest.raises(ValueError, match="API key"):
        OpenAIGenerator(GeneratorConfig(provider="openai", openai_api_key=None))


def test_factory_rejects_unknown_provider() -> None:
    config = GeneratorConfig.model_construct(provider="gemini")

    with pytest.raises(ValueError, match="expected one of llama, openai"):
        GeneratorFactory.create(config)


def test_llama_generator_requires_model_path() -> None:
    with pytest.raises(ValueError, match="model path"):
        GeneratorFactory.create(GeneratorConfig(provider="llama"))


def test_openai_generator_parses_structured_output(generator_config: GeneratorConfig) -> None:
    generator = OpenAIGenerator(generator_config)
    create = AsyncMock(
        return_value=_completion('{"topics": [{"title": "Images", "description": "Build"}]}')
    )
    generator.client = Mock()
    generator.client.chat.completions.create = create

    request = GenerationRequest(
        messages=[{"role": "user", "content": "learn Docker"}],
        response_model=TopicList,
        name="topic_generator",
    )
    result = asyncio.run(generator.generate(request))

    assert result.topics[0].title == "Images"
    kwargs = create.call_args.kwargs
    assert kwargs["response_format"] == {"type": "json_object"}
    assert kwargs["messages"][0]["role"] == "system"
    assert kwargs["messages"][-1]["content"] == "learn Docker"


def test_openai_generator_rejects_non_conforming_output(
    generator_config: GeneratorConfig,
) -> None:
    generator = OpenAIGenerator(generator_config)
    generator.client = Mock()
    generator.client.chat.completions.create = AsyncMock(return_value=_completion('{"x": 1}'))

    request = GenerationRequest(messages=[], response_model=ProjectIdea, name="project_generator")
    with pytest.raises(GeneratorError, match="project_generator"):
        asyncio.run(generator.generate(request))


def test_parse_structured_rejects_invalid_json() -> None:
    with pytest.raises(GeneratorError, match="TopicList"):
        parse_structured("not json", TopicList, name="t")


def test_schema_instruction_embeds_json_schema() -> None:
    message = schema_instruction(TopicList)

    assert message["role"] == "system"
    assert '"topics"' in message["content"]
