"""Pydantic models for the message boundary."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Disposition(str, Enum):
    """What the transport should do with the inbound message."""

    ACK = "ack"
    REQUEUE = "requeue"
    REJECT = "reject"


class GoalRequest(BaseModel):
    # Whitespace-only requests fail min_length.
    model_config = ConfigDict(str_strip_whitespace=True)

    user_request: str = Field(min_length=1, description="The learner's goal in free text")
    request_id: str | None = Field(default=None, description="Caller correlation id")


class ServiceResponse(BaseModel):
    success: bool
    message: str
    data: dict[str, Any] = Field(default_factory=dict)

    error_kind: str | None = None
    failed_step: str | None = None


class ServiceOutcome(BaseModel):
    disposition: Disposition
    response: ServiceResponse
