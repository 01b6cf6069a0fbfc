"""CLI entrypoint for running the goal analyzer workflow locally."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence

from pydantic import ValidationError

from skillforge_workflow import __version__
from skillforge_workflow.core.config import WorkflowConfig
from skillforge_workflow.graph import RunError
from skillforge_workflow.llm.factory import GeneratorFactory
from skillforge_workflow.roadmap import (
    GOAL_ANALYZER_SCHEMA,
    analyze_goal,
    build_goal_analyzer_graph,
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="skillforge-workflow",
        description="Run the SkillForge goal analyzer workflow",
    )
    parser.add_argument(
        "--version", action="version", version=f"skillforge-workflow {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser("analyze", help="Analyze a learning goal and print the result")
    analyze.add_argument("goal", help="The goal description, e.g. 'I want to learn Docker'")
    analyze.add_argument(
        "--max-concurrency",
        type=int,
        default=None,
        help="Maximum parallel invocations per superstep (overrides settings)",
    )
    analyze.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-invocation timeout in seconds (overrides settings)",
    )
    analyze.add_argument(
        "--log-level",
        default=None,
        help="Logging level (overrides settings)",
    )

    return parser


def _cmd_analyze(args: argparse.Namespace, config: WorkflowConfig) -> int:
    engine = config.engine
    if args.max_concurrency is not None:
        engine = engine.model_copy(update={"max_concurrency": args.max_concurrency})
    if args.timeout is not None:
        engine = engine.model_copy(update={"invocation_timeout_seconds": args.timeout})

    try:
        generator = GeneratorFactory.create(config.llm)
        options = engine.run_options()
    except (ValueError, ImportError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    graph = build_goal_analyzer_graph(generator)

    try:
        state = asyncio.run(analyze_goal(graph, args.goal, options))
    except RunError as e:
        print(f"{type(e).__name__} in step {e.step!r}: {e}", file=sys.stderr)
        print(GOAL_ANALYZER_SCHEMA.dump_json(e.state))
        return 1

    print(GOAL_ANALYZER_SCHEMA.dump_json(state))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = WorkflowConfig()
    except ValidationError as e:
        print(f"Invalid settings: {e}", file=sys.stderr)
        return 2

    if args.log_level:
        config = config.model_copy(update={"log_level": args.log_level})
    # stdout carries the result document.
    config.setup_logging(stream=sys.stderr)

    if args.command == "analyze":
        return _cmd_analyze(args, config)

    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
