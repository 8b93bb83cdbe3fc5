"""
Task Parsing API Routes

Endpoints turning natural-language text into task proposals. Parsing
never fails for a valid request: when the AI pathway is unavailable the
basic parser answers instead, flagged by ``parser: "basic"``.
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, Request

from api.config import get_settings
from api.middleware.rate_limiter import RateLimiter
from api.models.tasks import (
    ChatParseRequest,
    ChatParseResponse,
    ParsedTaskModel,
    TaskAssignRequest,
    TaskAssignResponse,
)
from api.services.task_service import TaskParsingService, get_task_service

logger = logging.getLogger(__name__)

_settings = get_settings()
parse_limiter = RateLimiter(
    window_seconds=_settings.RATE_LIMIT_WINDOW_SECONDS,
    max_requests=_settings.PARSE_RATE_LIMIT,
    name="parse",
)

router = APIRouter(tags=["Task Parsing"])

DISCONNECT_POLL_SECONDS = 0.25


async def watch_disconnect(request: Request, cancel_event: asyncio.Event) -> None:
    """Set ``cancel_event`` once the client drops the connection."""
    while not cancel_event.is_set():
        if await request.is_disconnected():
            logger.info(f"Client disconnected from {request.url.path}, cancelling generation")
            cancel_event.set()
            return
        await asyncio.sleep(DISCONNECT_POLL_SECONDS)


async def run_cancellable(request: Request, operation):
    """Run ``operation(cancel_event)`` and cancel it if the client disconnects."""
    cancel_event = asyncio.Event()
    watcher = asyncio.create_task(watch_disconnect(request, cancel_event))
    try:
        return await operation(cancel_event)
    finally:
        watcher.cancel()


@router.post(
    "/chat/parse",
    response_model=ChatParseResponse,
    summary="Parse a chat message into tasks",
    dependencies=[Depends(parse_limiter)]
)
async def parse_chat_message(
    body: ChatParseRequest,
    request: Request,
    service: TaskParsingService = Depends(get_task_service)
):
    """
    Parse a chat message into one or more structured tasks.

    Multiple actions in one message become multiple tasks, with shared
    metadata applied to each.
    """
    batch = await run_cancellable(
        request,
        lambda cancel_event: service.parse_message(
            body.message,
            body.users,
            body.projects,
            requesting_user_id=body.requesting_user_id,
            cancel_event=cancel_event,
        )
    )
    return ChatParseResponse(
        parsed=[ParsedTaskModel.from_domain(task) for task in batch.tasks],
        confidence=batch.confidence,
        parser=batch.parser,
    )


@router.post(
    "/v1/tasks/assign",
    response_model=TaskAssignResponse,
    summary="Parse text into a single assigned task",
    dependencies=[Depends(parse_limiter)]
)
async def assign_task(
    body: TaskAssignRequest,
    request: Request,
    service: TaskParsingService = Depends(get_task_service)
):
    """Parse text into a single task for external integrations."""
    batch = await run_cancellable(
        request,
        lambda cancel_event: service.assign_task(
            body.text,
            body.users,
            body.projects,
            requesting_user_id=body.requesting_user_id,
            cancel_event=cancel_event,
        )
    )
    return TaskAssignResponse(
        task=ParsedTaskModel.from_domain(batch.tasks[0]),
        parser=batch.parser,
    )
