"""Test configuration and fixtures."""

from __future__ import annotations

import asyncio
from collections.abc import Callable

import pytest

from skillforge_workflow.core.config import EngineConfig, GeneratorConfig, WorkflowConfig
from skillforge_workflow.llm.provider import (
    GenerationRequest,
    Generator,
    GeneratorError,
    ModelT,
)
from skillforge_workflow.roadmap.schemas import (
    GoalAnalysis,
    Project,
    ProjectIdea,
    Resource,
    ResourceList,
    SubtopicList,
    TitleDescription,
    TopicList,
)


class ScriptedGenerator(Generator):
    """Deterministic in-process generator for workflow tests.

    ``fail_on`` selects requests that should fail; ``delay_for`` returns a
    per-request sleep so tests can shuffle completion order.
    """

    def __init__(
        self,
        *,
        goal_type: str = "small",
        topic_count: int = 3,
        subtopic_count: int = 2,
        fail_on: Callable[[GenerationRequest], bool] | None = None,
        delay_for: Callable[[GenerationRequest], float] | None = None,
    ) -> None:
        self.goal_type = goal_type
        self.topic_count = topic_count
        self.subtopic_count = subtopic_count
        self.fail_on = fail_on
        self.delay_for = delay_for
        self.calls: list[str] = []

    async def generate(self, request: GenerationRequest[ModelT]) -> ModelT:
        self.calls.append(request.name)
        if self.delay_for is not None:
            await asyncio.sleep(self.delay_for(request))
        if self.fail_on is not None and self.fail_on(request):
            raise GeneratorError(f"{request.name}: scripted failure")

        subject = subject_title(request)
        model = request.response_model
        if model is GoalAnalysis:
            result: object = GoalAnalysis(
                goal_title="Learn Docker",
                goal_summary="Get productive with containers",
                goal_type=self.goal_type,  # type: ignore[arg-type]
                reasoning="Single tool with limited scope",
                follow_up_questions=(
                    ["What do you want to improve?", "How much time do you have?"]
                    if self.goal_type == "unclear"
                    else []
                ),
            )
        elif model is TopicList:
            result = TopicList(
                topics=[
                    TitleDescription(title=f"Topic {i}", description=f"About topic {i}")
                    for i in range(1, self.topic_count + 1)
                ]
            )
        elif model is SubtopicList:
            result = SubtopicList(
                subtopics=[
                    TitleDescription(title=f"{subject} / part {i}", description="Detail")
                    for i in range(1, self.subtopic_count + 1)
                ]
            )
        elif model is ResourceList:
            result = ResourceList(
                resources=[
                    Resource(title=f"{subject} docs", link="https://example.com", type="article")
                ]
            )
        elif model is ProjectIdea:
            result = ProjectIdea(
                project=Project(name=f"{subject} project", description="Build it", difficulty="easy")
            )
        else:
            raise AssertionError(f"Unexpected response model {model!r}")
        return result  # type: ignore[return-value]


def subject_title(request: GenerationRequest) -> str:
    """Extract the ``Title:`` line from the last prompt message."""

    for line in request.messages[-1]["content"].splitlines():
        if line.startswith("Title: "):
            return line.removeprefix("Title: ")
    return ""


@pytest.fixture
def scripted_generator() -> ScriptedGenerator:
    return ScriptedGenerator()


@pytest.fixture
def generator_config() -> GeneratorConfig:
    """Provide a test generator configuration."""
    return GeneratorConfig(
        provider="openai",
        openai_api_key="test-key",
        openai_model="gpt-4o-mini",
    )


@pytest.fixture
def engine_config() -> EngineConfig:
    return EngineConfig(max_concurrency=4, invocation_timeout_seconds=5.0, max_supersteps=10)


@pytest.fixture
def workflow_config(
    generator_config: GeneratorConfig, engine_config: EngineConfig
) -> WorkflowConfig:
    """Provide a test workflow configuration."""
    return WorkflowConfig(
        log_level="DEBUG",
        debug=True,
        llm=generator_config,
        engine=engine_config,
    )


@pytest.fixture
def make_generator() -> type[ScriptedGenerator]:
    """Provide the scripted generator class so tests can configure it."""
    return ScriptedGenerator
