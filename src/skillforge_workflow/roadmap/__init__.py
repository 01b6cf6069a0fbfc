"""Goal analyzer workflow: classify a learning goal and build a roadmap for it."""

from skillforge_workflow.roadmap.graph import (
    GOAL_ANALYZER_SCHEMA,
    analyze_goal,
    build_goal_analyzer_graph,
)
from skillforge_workflow.roadmap.steps import GoalAnalyzerSteps, goal_id_for

__all__ = [
    "GOAL_ANALYZER_SCHEMA",
    "GoalAnalyzerSteps",
    "analyze_goal",
    "build_goal_analyzer_graph",
    "goal_id_for",
]
