"""Unit tests for the message boundary dispositions."""

from __future__ import annotations

import asyncio
from typing import Any

from skillforge_workflow.graph import RunOptions
from skillforge_workflow.roadmap import build_goal_analyzer_graph
from skillforge_workflow.service import Disposition, handle_request


def test_successful_run_is_acknowledged(make_generator: Any) -> None:
    graph = build_goal_analyzer_graph(make_generator(goal_type="small"))

    outcome = asyncio.run(handle_request(graph, {"user_request": "learn Docker"}))

    assert outcome.disposition is Disposition.ACK
    assert outcome.response.success is True
    assert len(outcome.response.data["resources"]) == 3


def test_run_error_is_requeued_with_failed_step(make_generator: Any) -> None:
    generator = make_generator(
        goal_type="small", fail_on=lambda r: r.name == "project_generator"
    )
    graph = build_goal_analyzer_graph(generator)

    outcome = asyncio.run(
        handle_request(
            graph,
            {"user_request": "learn Docker", "request_id": "req-1"},
            RunOptions(max_concurrency=2),
        )
    )

    assert outcome.disposition is Disposition.REQUEUE
    assert outcome.response.success is False
    assert outcome.response.error_kind == "HandlerError"
    assert outcome.response.failed_step == "project_generator"
    assert "projects" not in outcome.response.data


def test_invalid_payload_is_rejected(make_generator: Any) -> None:
    generator = make_generator()
    graph = build_goal_analyzer_graph(generator)

    outcome = asyncio.run(handle_request(graph, {"user_request": ""}))

    assert outcome.disposition is Disposition.REJECT
    assert outcome.response.error_kind == "ValidationError"
    assert generator.calls == []


def test_blank_request_is_rejected_not_requeued(make_generator: Any) -> None:
    generator = make_generator()
    graph = build_goal_analyzer_graph(generator)

    outcome = asyncio.run(handle_request(graph, {"user_request": "   \n\t "}))

    assert outcome.disposition is Disposition.REJECT
    assert outcome.response.error_kind == "ValidationError"
    assert generator.calls == []


def test_request_text_is_stripped_before_running(make_generator: Any) -> None:
    graph = build_goal_analyzer_graph(make_generator(goal_type="unclear"))

    outcome = asyncio.run(handle_request(graph, {"user_request": "  improve myself  "}))

    assert outcome.disposition is Disposition.ACK
    assert outcome.response.data["user_request"] == "improve myself"
