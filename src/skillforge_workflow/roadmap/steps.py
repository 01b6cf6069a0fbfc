"""Step handlers and routers for the goal analyzer workflow.

Handlers never touch shared state: they read the snapshot they are given and
return a patch or fan-out instructions. Fan-out targets write keyed patches
(``{subject_id: value}``) into keyed-union channels so parallel siblings merge
without collisions.
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Mapping
from typing import Any

from skillforge_workflow.graph import TERMINAL, FanOut
from skillforge_workflow.llm.provider import GenerationRequest, Generator
from skillforge_workflow.roadmap import prompts
from skillforge_workflow.roadmap.schemas import (
    GoalAnalysis,
    ProjectIdea,
    ResourceList,
    SubtopicList,
    TopicList,
)

logger = logging.getLogger(__name__)

GOAL_ANALYZER = "goal_analyzer"
TOPIC_GENERATOR = "topic_generator"
SUBTOPIC_GENERATOR = "subtopic_generator"
STUDY_PLANNER = "study_planner"
RESOURCE_GENERATOR = "resource_generator"
PROJECT_GENERATOR = "project_generator"


def goal_id_for(user_request: str) -> str:
    """Stable id for a goal, derived from the request text."""

    digest = hashlib.sha1(user_request.strip().encode("utf-8")).hexdigest()[:10]
    return f"goal_{digest}"


class GoalAnalyzerSteps:
    """Generator-backed handlers. The generator is injected once and shared."""

    def __init__(self, generator: Generator) -> None:
        self.generator = generator

    async def goal_analyzer(self, state: Mapping[str, Any], _payload: Any) -> dict[str, Any]:
        user_request = (state.get("user_request") or "").strip()
        if not user_request:
            raise ValueError("user_request is empty")

        analysis = await self.generator.generate(
            GenerationRequest(
                messages=prompts.goal_analyzer_messages(user_request),
                response_model=GoalAnalysis,
                name=GOAL_ANALYZER,
            )
        )
        logger.info(f"Goal classified as {analysis.goal_type!r}")
        return {
            "goal_type": analysis.goal_type,
            "goal": {
                "id": goal_id_for(user_request),
                "title": analysis.goal_title,
                "description": analysis.goal_summary,
            },
            "reasoning": analysis.reasoning,
            "follow_up_questions": list(analysis.follow_up_questions),
        }

    async def topic_generator(self, state: Mapping[str, Any], _payload: Any) -> dict[str, Any]:
        goal = state["goal"]
        result = await self.generator.generate(
            GenerationRequest(
                messages=prompts.topic_generator_messages(goal),
                response_model=TopicList,
                name=TOPIC_GENERATOR,
            )
        )
        topics = [
            {"id": f"{goal['id']}.topic_{i}", "title": t.title, "description": t.description}
            for i, t in enumerate(result.topics, start=1)
        ]
        return {"topics": topics}

    async def subtopic_generator(
        self, _state: Mapping[str, Any], topic: Mapping[str, Any]
    ) -> dict[str, Any]:
        result = await self.generator.generate(
            GenerationRequest(
                messages=prompts.subtopic_generator_messages(topic),
                response_model=SubtopicList,
                name=SUBTOPIC_GENERATOR,
            )
        )
        subtopics = [
            {"id": f"{topic['id']}.sub_{i}", "title": s.title, "description": s.description}
            for i, s in enumerate(result.subtopics, start=1)
        ]
        return {"subtopics": {topic["id"]: subtopics}}

    async def resource_generator(
        self, state: Mapping[str, Any], subject: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        subject = subject if subject is not None else state["goal"]
        result = await self.generator.generate(
            GenerationRequest(
                messages=prompts.resource_generator_messages(subject),
                response_model=ResourceList,
                name=RESOURCE_GENERATOR,
            )
        )
        return {"resources": {subject["id"]: [r.model_dump() for r in result.resources]}}

    async def project_generator(
        self, state: Mapping[str, Any], subject: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        subject = subject if subject is not None else state["goal"]
        result = await self.generator.generate(
            GenerationRequest(
                messages=prompts.project_generator_messages(subject),
                response_model=ProjectIdea,
                name=PROJECT_GENERATOR,
            )
        )
        return {"projects": {subject["id"]: result.project.model_dump()}}


def study_planner(state: Mapping[str, Any], _payload: Any) -> list[FanOut]:
    """Fan out resources per subtopic and one project per topic (broad goals)."""

    subtopics = state.get("subtopics") or {}
    fanout: list[FanOut] = []
    for topic in state.get("topics") or []:
        for subtopic in subtopics.get(topic["id"], []):
            fanout.append(FanOut(RESOURCE_GENERATOR, subtopic))
        fanout.append(FanOut(PROJECT_GENERATOR, topic))
    return fanout


def route_after_analysis(state: Mapping[str, Any]) -> Any:
    goal_type = state.get("goal_type")
    if goal_type in ("broad", "small"):
        return TOPIC_GENERATOR
    if goal_type == "specific":
        return [RESOURCE_GENERATOR, PROJECT_GENERATOR]
    return TERMINAL


def route_after_topics(state: Mapping[str, Any]) -> list[FanOut]:
    topics = state.get("topics") or []
    if state.get("goal_type") == "broad":
        return [FanOut(SUBTOPIC_GENERATOR, topic) for topic in topics]
    return [FanOut(RESOURCE_GENERATOR, topic) for topic in topics] + [
        FanOut(PROJECT_GENERATOR, topic) for topic in topics
    ]
