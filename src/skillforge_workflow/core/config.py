"""Core configuration for the workflow engine and its generator."""

import logging
from pathlib import Path
from typing import Literal, TextIO

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from skillforge_workflow.core.logging import configure_logging
from skillforge_workflow.graph.scheduler import CancellationToken, RunOptions


class GeneratorConfig(BaseSettings):
    """Configuration for the content generator (LLM provider)."""

    provider: Literal["openai", "llama"] = Field(
        default="openai",
        description="Generator backend to use",
    )

    # OpenAI settings
    openai_api_key: str | None = Field(
        default=None,
        description="OpenAI API key",
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        description="OpenAI model to use",
    )
    openai_temperature: float = Field(
        default=0.2,
        ge=0.0,
        le=2.0,
        description="Temperature for OpenAI model",
    )
    openai_base_url: str | None = Field(
        default=None,
        description="Override for OpenAI-compatible endpoints",
    )

    # LLaMA settings
    llama_model_path: Path | None = Field(
        default=None,
        description="Path to LLaMA model file",
    )
    llama_n_ctx: int = Field(
        default=4096,
        gt=0,
        description="Context window size for LLaMA",
    )
    llama_n_threads: int | None = Field(
        default=None,
        description="Number of threads for LLaMA (None = auto)",
    )

    model_config = SettingsConfigDict(
        env_prefix="SKILLFORGE_LLM_",
        env_file=".env",
        extra="ignore",
    )


class EngineConfig(BaseSettings):
    """Configuration for the superstep scheduler."""

    max_concurrency: int = Field(
        default=8,
        gt=0,
        description="Maximum invocations in flight within one superstep",
    )
    invocation_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Per-invocation timeout (None = no timeout)",
    )
    max_supersteps: int = Field(
        default=25,
        gt=0,
        description="Abort a run that has not terminated after this many supersteps",
    )

    model_config = SettingsConfigDict(
        env_prefix="SKILLFORGE_ENGINE_",
        env_file=".env",
        extra="ignore",
    )

    def run_options(
        self, *, cancellation: CancellationToken | None = None, run_id: str | None = None
    ) -> RunOptions:
        """Build scheduler options from these settings."""
        return RunOptions(
            max_concurrency=self.max_concurrency,
            invocation_timeout=self.invocation_timeout_seconds,
            max_supersteps=self.max_supersteps,
            cancellation=cancellation,
            run_id=run_id,
        )


class WorkflowConfig(BaseSettings):
    """Main configuration for the workflow service."""

    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    json_logs: bool = Field(
        default=True,
        description="Emit structured JSON logs (plain text otherwise)",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    llm: GeneratorConfig = Field(
        default_factory=GeneratorConfig,
        description="Generator configuration",
    )
    engine: EngineConfig = Field(
        default_factory=EngineConfig,
        description="Scheduler configuration",
    )

    model_config = SettingsConfigDict(
        env_prefix="SKILLFORGE_",
        env_file=".env",
        extra="ignore",
    )

    def setup_logging(self, stream: TextIO | None = None) -> None:
        """Configure logging based on settings."""
        configure_logging(self.log_level, json_output=self.json_logs, stream=stream)

        if self.debug:
            logging.getLogger("skillforge_workflow").setLevel(logging.DEBUG)
