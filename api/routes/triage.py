"""
Email Triage API Routes
"""

import logging

from fastapi import APIRouter, Depends, Request

from api.config import get_settings
from api.middleware.rate_limiter import RateLimiter
from api.models.triage import EmailTriageRequest, EmailTriageResponse
from api.routes.tasks import run_cancellable
from api.services.task_service import TaskParsingService, get_task_service

logger = logging.getLogger(__name__)

_settings = get_settings()
triage_limiter = RateLimiter(
    window_seconds=_settings.RATE_LIMIT_WINDOW_SECONDS,
    max_requests=_settings.TRIAGE_RATE_LIMIT,
    name="triage",
)

router = APIRouter(prefix="/email", tags=["Email Triage"])


@router.post(
    "/triage",
    response_model=EmailTriageResponse,
    summary="Classify and route an inbound email",
    dependencies=[Depends(triage_limiter)]
)
async def triage_email(
    body: EmailTriageRequest,
    request: Request,
    service: TaskParsingService = Depends(get_task_service)
):
    """
    Classify an inbound email, route it to a team member and draft a reply.

    When AI triage is unavailable the response carries ``triage: null``
    and the generic acknowledgement reply.
    """
    return await run_cancellable(
        request,
        lambda cancel_event: service.triage_email(body, cancel_event=cancel_event)
    )
