"""Unit tests for the command line entry point."""

from __future__ import annotations

import json
import logging
from typing import Any

import pytest

from skillforge_workflow import cli


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Any:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def test_analyze_prints_final_state(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], make_generator: Any
) -> None:
    monkeypatch.setattr(
        cli.GeneratorFactory, "create", staticmethod(lambda config: make_generator())
    )

    code = cli.main(["analyze", "learn Docker", "--log-level", "WARNING"])

    assert code == 0
    state = json.loads(capsys.readouterr().out)
    assert state["goal_type"] == "small"
    assert len(state["resources"]) == 3


def test_analyze_reports_workflow_error(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], make_generator: Any
) -> None:
    generator = make_generator(fail_on=lambda r: r.name == "topic_generator")
    monkeypatch.setattr(cli.GeneratorFactory, "create", staticmethod(lambda config: generator))

    code = cli.main(["analyze", "learn Docker", "--log-level", "WARNING"])

    assert code == 1
    captured = capsys.readouterr()
    assert "HandlerError" in captured.err
    assert "topic_generator" in captured.err
    assert json.loads(captured.out)["goal_type"] == "small"


def test_analyze_reports_configuration_error(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.delenv("SKILLFORGE_LLM_OPENAI_API_KEY", raising=False)
    monkeypatch.setenv("SKILLFORGE_LLM_PROVIDER", "openai")

    code = cli.main(["analyze", "learn Docker", "--log-level", "WARNING"])

    assert code == 2
    assert "API key" in capsys.readouterr().err


def test_version_flag(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as info:
        cli.main(["--version"])

    assert info.value.code == 0
    assert "skillforge-workflow" in capsys.readouterr().out
