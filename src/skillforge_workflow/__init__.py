"""SkillForge workflow engine.

Provides:
- a superstep graph engine with conditional routing and dynamic fan-out
- a pluggable structured-output generator (OpenAI, local LLaMA)
- the goal analyzer workflow built on both
"""

__version__ = "0.1.0"

from skillforge_workflow.core.config import WorkflowConfig

__all__ = ["__version__", "WorkflowConfig"]
