"""Assembly of the goal analyzer workflow graph."""

from __future__ import annotations

from typing import Any

from skillforge_workflow.graph import (
    TERMINAL,
    CompiledGraph,
    GraphBuilder,
    RunOptions,
    StateSchema,
    keyed_union,
    overwrite,
    run,
)
from skillforge_workflow.llm.provider import Generator
from skillforge_workflow.roadmap.steps import (
    GOAL_ANALYZER,
    PROJECT_GENERATOR,
    RESOURCE_GENERATOR,
    STUDY_PLANNER,
    SUBTOPIC_GENERATOR,
    TOPIC_GENERATOR,
    GoalAnalyzerSteps,
    route_after_analysis,
    route_after_topics,
    study_planner,
)

# Every channel written by fan-out siblings must be keyed-union.
GOAL_ANALYZER_SCHEMA = StateSchema(
    overwrite("user_request"),
    overwrite("goal_type"),
    overwrite("goal"),
    overwrite("reasoning"),
    overwrite("follow_up_questions"),
    overwrite("topics"),
    keyed_union("subtopics"),
    keyed_union("resources"),
    keyed_union("projects"),
)


def build_goal_analyzer_graph(generator: Generator) -> CompiledGraph:
    """Compile the goal analyzer graph with ``generator`` injected into its steps."""

    steps = GoalAnalyzerSteps(generator)
    builder = GraphBuilder(GOAL_ANALYZER_SCHEMA, name="goal_analyzer")

    builder.add_step(GOAL_ANALYZER, steps.goal_analyzer)
    builder.add_step(TOPIC_GENERATOR, steps.topic_generator)
    builder.add_step(SUBTOPIC_GENERATOR, steps.subtopic_generator)
    builder.add_step(
        STUDY_PLANNER, study_planner, fanout_targets=[RESOURCE_GENERATOR, PROJECT_GENERATOR]
    )
    builder.add_step(RESOURCE_GENERATOR, steps.resource_generator)
    builder.add_step(PROJECT_GENERATOR, steps.project_generator)

    builder.set_start(GOAL_ANALYZER)
    builder.add_conditional_edges(
        GOAL_ANALYZER,
        route_after_analysis,
        [TOPIC_GENERATOR, RESOURCE_GENERATOR, PROJECT_GENERATOR, TERMINAL],
    )
    builder.add_conditional_edges(
        TOPIC_GENERATOR,
        route_after_topics,
        [SUBTOPIC_GENERATOR, RESOURCE_GENERATOR, PROJECT_GENERATOR],
    )
    builder.add_edge(SUBTOPIC_GENERATOR, STUDY_PLANNER)

    return builder.compile()


async def analyze_goal(
    graph: CompiledGraph, user_request: str, options: RunOptions | None = None
) -> dict[str, Any]:
    """Run the workflow for a single goal description."""

    return await run(graph, {"user_request": user_request}, options)
