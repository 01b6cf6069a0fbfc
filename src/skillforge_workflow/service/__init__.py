"""Message boundary: maps workflow runs to acknowledge / requeue decisions."""

from skillforge_workflow.service.handler import handle_request
from skillforge_workflow.service.models import (
    Disposition,
    GoalRequest,
    ServiceOutcome,
    ServiceResponse,
)

__all__ = [
    "Disposition",
    "GoalRequest",
    "ServiceOutcome",
    "ServiceResponse",
    "handle_request",
]
