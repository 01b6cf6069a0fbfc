"""Core package initialization."""

from skillforge_workflow.core.config import EngineConfig, GeneratorConfig, WorkflowConfig
from skillforge_workflow.core.logging import configure_logging

__all__ = [
    "EngineConfig",
    "GeneratorConfig",
    "WorkflowConfig",
    "configure_logging",
]
