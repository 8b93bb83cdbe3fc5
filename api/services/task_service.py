"""
Task Parsing Service Implementation

Connects the API routes to the task extractor and email triager:
converts request payloads to domain objects, applies the configured
roster filter and unassigned policy, and degrades triage failures to
the generic acknowledgement reply.

Design Considerations:
- Route handlers stay thin; all policy lives here
- One generation client shared by the extractor and triager
- Stateless per request
"""

import asyncio
import logging
from functools import lru_cache
from typing import List, Optional, Sequence

from api.config import APISettings, get_settings
from api.models.tasks import ProjectModel, TeamMemberModel
from api.models.triage import (
    AssigneeModel,
    EmailTriageRequest,
    EmailTriageResponse,
    TriageResultModel,
)
from src.integrations.groq.client_wrapper import EnhancedGroqClient
from src.integrations.groq.model_manager import ModelManager
from src.task_parsing.assignment import apply_unassigned_policy
from src.task_parsing.errors import GenerationUnavailable, TriageError
from src.task_parsing.extractor import TaskExtractor
from src.task_parsing.models import (
    EmailMessage,
    ParsedTask,
    ParsedTaskBatch,
    ProjectRef,
    TeamMember,
)
from src.task_parsing.roster import exclude_roles, filter_roster, resolve_member_for_role
from src.task_parsing.triage import EmailTriager, build_generic_reply, reply_subject

logger = logging.getLogger(__name__)


class TaskParsingService:
    """
    Service layer over the task extractor and email triager.
    """

    def __init__(
        self,
        settings: APISettings,
        extractor: Optional[TaskExtractor] = None,
        triager: Optional[EmailTriager] = None
    ):
        self.settings = settings
        self.roster_predicate = exclude_roles(*settings.excluded_roles)

        client = None
        if settings.AI_PARSING_ENABLED and settings.GROQ_API_KEY and (extractor is None or triager is None):
            try:
                client = EnhancedGroqClient(api_key=settings.GROQ_API_KEY.get_secret_value())
            except GenerationUnavailable as e:
                logger.warning(f"Generation client could not be created: {e}")

        use_ai = settings.AI_PARSING_ENABLED and client is not None
        model_manager = ModelManager(use_fallback_models=settings.USE_FALLBACK_MODELS)
        self.extractor = extractor or TaskExtractor(
            client=client,
            model_manager=model_manager,
            timeout=settings.GENERATION_TIMEOUT_SECONDS,
            timezone=settings.TASKBOARD_TIMEZONE,
            use_ai=use_ai,
        )
        self.triager = triager or EmailTriager(
            client=client,
            model_manager=model_manager,
            team_name=settings.TASKBOARD_TEAM_NAME,
            timeout=settings.GENERATION_TIMEOUT_SECONDS,
            timezone=settings.TASKBOARD_TIMEZONE,
            use_ai=use_ai,
        )

    def build_roster(self, users: Sequence[TeamMemberModel]) -> List[TeamMember]:
        """Convert roster payloads and drop members excluded by configuration."""
        return filter_roster((user.to_domain() for user in users), self.roster_predicate)

    @staticmethod
    def build_projects(projects: Sequence[ProjectModel]) -> List[ProjectRef]:
        return [project.to_domain() for project in projects]

    async def parse_message(
        self,
        message: str,
        users: Sequence[TeamMemberModel],
        projects: Sequence[ProjectModel],
        requesting_user_id: Optional[str] = None,
        cancel_event: Optional[asyncio.Event] = None
    ) -> ParsedTaskBatch:
        """
        Extract a task batch from a chat message.

        Returns:
            Batch with the unassigned policy applied
        """
        batch = await self.extractor.extract_tasks(
            message,
            self.build_roster(users),
            self.build_projects(projects),
            cancel_event=cancel_event,
        )
        return apply_unassigned_policy(
            batch,
            self.settings.UNASSIGNED_POLICY,
            requesting_user_id=requesting_user_id,
            placeholder_id=self.settings.UNASSIGNED_PLACEHOLDER_ID,
        )

    async def assign_task(
        self,
        text: str,
        users: Sequence[TeamMemberModel],
        projects: Sequence[ProjectModel],
        requesting_user_id: Optional[str] = None,
        cancel_event: Optional[asyncio.Event] = None
    ) -> ParsedTaskBatch:
        """Extract a batch and keep only its first task."""
        batch = await self.parse_message(text, users, projects, requesting_user_id, cancel_event)
        first: ParsedTask = batch.tasks[0]
        return ParsedTaskBatch(tasks=[first], confidence=batch.confidence, parser=batch.parser)

    async def triage_email(
        self,
        request: EmailTriageRequest,
        cancel_event: Optional[asyncio.Event] = None
    ) -> EmailTriageResponse:
        """
        Triage an inbound email, falling back to the template reply on failure.

        The triage roster is not filtered: the "agent" role is a valid
        routing target for email.
        """
        sender_name = request.from_name or request.from_email
        email = EmailMessage(
            from_email=request.from_email,
            from_name=sender_name,
            subject=request.subject,
            body=request.body,
            project_id=request.project_id,
            project_name=request.project_name,
            attachment_names=list(request.attachment_names),
        )
        roster = [user.to_domain() for user in request.users]

        try:
            result = await self.triager.triage_email(
                email,
                roster,
                project_context=request.project_context,
                cancel_event=cancel_event,
            )
        except TriageError as e:
            logger.error(f"Triage failed, falling back to generic draft: {e}")
            return EmailTriageResponse(
                triage=None,
                assignee=None,
                draft_reply=build_generic_reply(sender_name, self.settings.TASKBOARD_TEAM_NAME),
                reply_subject=reply_subject(request.subject),
                parser="template",
            )

        member = resolve_member_for_role(result.assignee_role, roster)
        return EmailTriageResponse(
            triage=TriageResultModel.from_domain(result),
            assignee=AssigneeModel(id=member.id, name=member.name) if member else None,
            draft_reply=result.draft_reply,
            reply_subject=reply_subject(request.subject),
            parser="ai",
        )


@lru_cache
def _build_service() -> TaskParsingService:
    return TaskParsingService(get_settings())


def get_task_service() -> TaskParsingService:
    """FastAPI dependency returning the shared service instance."""
    return _build_service()
