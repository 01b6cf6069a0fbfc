"""Transport-agnostic request handling.

The process embedding the engine receives requests from a message queue with
manual acknowledgement. Successful runs map to ``ACK``; engine run errors map
to ``REQUEUE`` so another replica can retry the whole run; payloads that can
never succeed map to ``REJECT``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from pydantic import ValidationError

from skillforge_workflow.graph import CompiledGraph, RunError, RunOptions, run
from skillforge_workflow.service.models import (
    Disposition,
    GoalRequest,
    ServiceOutcome,
    ServiceResponse,
)

logger = logging.getLogger(__name__)


async def handle_request(
    graph: CompiledGraph,
    payload: Mapping[str, Any],
    options: RunOptions | None = None,
) -> ServiceOutcome:
    """Run ``graph`` for one inbound message and decide its disposition."""

    try:
        request = GoalRequest.model_validate(payload)
    except ValidationError as e:
        logger.warning(f"Rejecting invalid request: {e.error_count()} validation error(s)")
        return ServiceOutcome(
            disposition=Disposition.REJECT,
            response=ServiceResponse(
                success=False, message="Invalid request payload", error_kind="ValidationError"
            ),
        )

    if request.request_id and (options is None or options.run_id is None):
        options = replace(options or RunOptions(), run_id=request.request_id)

    try:
        state = await run(graph, {"user_request": request.user_request}, options)
    except RunError as e:
        logger.warning(
            f"Requeueing request after {type(e).__name__}",
            extra={"request_id": request.request_id, "step": e.step},
        )
        return ServiceOutcome(
            disposition=Disposition.REQUEUE,
            response=ServiceResponse(
                success=False,
                message=str(e),
                data=e.state,
                error_kind=type(e).__name__,
                failed_step=e.step,
            ),
        )

    return ServiceOutcome(
        disposition=Disposition.ACK,
        response=ServiceResponse(success=True, message="Goal analyzed successfully", data=state),
    )
