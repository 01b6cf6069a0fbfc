#!/usr/bin/env python3
"""Programmatic goal analysis example.

This demonstrates using the workflow components directly:

* load settings from `.env`
* build the goal analyzer graph around the configured generator
* stream committed supersteps and print the final roadmap

The goal text is passed as an argument.
"""

from __future__ import annotations

import argparse
import asyncio
from typing import Sequence

from skillforge_workflow.core.config import WorkflowConfig
from skillforge_workflow.graph import RunError, astream
from skillforge_workflow.llm.factory import GeneratorFactory
from skillforge_workflow.roadmap import GOAL_ANALYZER_SCHEMA, build_goal_analyzer_graph


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Analyze a learning goal (programmatic example).")
    parser.add_argument("goal", help='Goal description, e.g. "I want to learn Docker"')
    parser.add_argument("--run-id", default=None, help="Run id to attach to log records")
    return parser.parse_args(argv)


async def _stream(goal: str, config: WorkflowConfig, run_id: str | None) -> dict:
    graph = build_goal_analyzer_graph(GeneratorFactory.create(config.llm))
    options = config.engine.run_options(run_id=run_id)

    state: dict = {}
    async for event in astream(graph, {"user_request": goal}, options):
        print(f"superstep {event.index}: ran {', '.join(event.steps)}")
        print(f"  updated: {', '.join(sorted(event.updated_channels)) or '-'}")
        state = event.state
    return state


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    config = WorkflowConfig()
    config.setup_logging()

    try:
        state = asyncio.run(_stream(args.goal, config, args.run_id))
    except RunError as exc:
        print(f"Run failed in step {exc.step!r} at superstep {exc.superstep}: {exc}")
        return 1

    print(GOAL_ANALYZER_SCHEMA.dump_json(state))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
