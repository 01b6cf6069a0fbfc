"""Unit tests for structured logging."""

from __future__ import annotations

import json
import logging

from skillforge_workflow.core.logging import JsonFormatter, configure_logging


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="skillforge_workflow.graph.scheduler",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Superstep committed",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_extra_fields() -> None:
    payload = json.loads(
        JsonFormatter().format(_record(run_id="abc", superstep=2, updated={"resources"}))
    )

    assert payload["level"] == "INFO"
    assert payload["message"] == "Superstep committed"
    assert payload["extra"]["run_id"] == "abc"
    assert payload["extra"]["superstep"] == 2
    assert payload["extra"]["updated"] == ["resources"]


def test_json_formatter_omits_extra_when_absent() -> None:
    payload = json.loads(JsonFormatter().format(_record()))

    assert "extra" not in payload


def test_configure_logging_replaces_root_handlers() -> None:
    root = logging.getLogger()
    previous = list(root.handlers), root.level
    try:
        configure_logging("debug")
        configure_logging("info", json_output=False)

        assert len(root.handlers) == 1
        assert root.level == logging.INFO
        assert not isinstance(root.handlers[0].formatter, JsonFormatter)
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
        for handler in previous[0]:
            root.addHandler(handler)
        root.setLevel(previous[1])
