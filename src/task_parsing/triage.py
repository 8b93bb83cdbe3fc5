"""
EmailTriager: AI Classification and Routing of Inbound Email

Classifies a single inbound email into a category, routes it to a role,
drafts a task with sections and writes a context-aware reply. Unlike the
task extractor there is no regex equivalent: every failure surfaces as
TriageError, and the ingestion caller substitutes the generic
acknowledgement reply from ``build_generic_reply``.
"""

import asyncio
import logging
import os
from datetime import datetime
from typing import Optional, Sequence

from src.config.parser_config import PARSER_CONFIG
from src.integrations.groq.client_wrapper import EnhancedGroqClient
from src.integrations.groq.model_manager import ModelManager
from src.task_parsing.cancellation import await_with_cancellation
from src.task_parsing.errors import GenerationUnavailable, TaskParsingError, TriageError
from src.task_parsing.models import EmailMessage, TeamMember, TriageResult
from src.task_parsing.prompts import build_triage_prompt, build_triage_user_message
from src.task_parsing.response_parser import parse_triage_response
from src.utils.date_utils import local_now

logger = logging.getLogger(__name__)


class EmailTriager:
    """Runs the triage prompt contract against the generation service."""

    def __init__(
        self,
        client: Optional[EnhancedGroqClient] = None,
        model_manager: Optional[ModelManager] = None,
        team_name: Optional[str] = None,
        timeout: Optional[float] = None,
        timezone: Optional[str] = None,
        use_ai: bool = True
    ):
        self.config = PARSER_CONFIG["email_triage"]
        self.team_name = team_name or self.config["default_team_name"]
        self.timeout = timeout if timeout is not None else self.config["timeout"]
        self.timezone = timezone
        self.model_manager = model_manager or ModelManager()
        self.use_ai = use_ai

        self.client = client
        if self.client is None and use_ai:
            try:
                self.client = EnhancedGroqClient(
                    retry_count=self.config["retry_count"],
                    retry_delay=self.config["retry_delay"],
                )
            except GenerationUnavailable as e:
                logger.warning(f"Generation client unavailable, triage disabled: {e}")

    @property
    def enabled(self) -> bool:
        return self.use_ai and self.client is not None

    async def triage_email(
        self,
        email: EmailMessage,
        roster: Sequence[TeamMember],
        project_context: str = "",
        cancel_event: Optional[asyncio.Event] = None
    ) -> TriageResult:
        """
        Classify, route and draft a reply for one inbound email.

        Args:
            email: The inbound message
            roster: Team members (roles are shown to the model)
            project_context: Free-text project history for informed replies
            cancel_event: Set by the caller to abandon the call

        Returns:
            Validated TriageResult

        Raises:
            TriageError: On generation, parse or validation failure
        """
        request_id = f"triage-{datetime.now().strftime('%Y%m%d%H%M%S')}-{os.urandom(3).hex()}"

        if not self.enabled:
            raise TriageError("AI triage unavailable: no generation client configured")

        logger.info(f"[{request_id}] Triaging email with subject '{email.subject[:80]}'")
        model_config = self.model_manager.get_model_config(self.config["model"]["task_type"])
        prompt = build_triage_prompt(
            email,
            list(roster),
            local_now(self.timezone).date(),
            self.team_name,
            project_context,
        )

        try:
            completion = self.client.complete(
                prompt,
                build_triage_user_message(email),
                model=model_config["name"],
                temperature=model_config["temperature"],
                max_tokens=self.config["model"]["max_tokens"],
                timeout=self.timeout,
            )
            raw = await await_with_cancellation(completion, self.timeout, cancel_event)
            result = parse_triage_response(raw, email)
        except asyncio.TimeoutError as e:
            logger.error(f"[{request_id}] Triage timed out after {self.timeout}s")
            raise TriageError(f"Triage timed out after {self.timeout}s") from e
        except TaskParsingError as e:
            logger.error(f"[{request_id}] Triage failed: {type(e).__name__}: {e}")
            raise TriageError(f"Triage failed: {e}") from e
        except Exception as e:
            logger.error(f"[{request_id}] Unexpected triage failure: {e}", exc_info=True)
            raise TriageError(f"Triage failed unexpectedly: {e}") from e

        logger.info(
            f"[{request_id}] Classified as {result.category.value}, routed to "
            f"{result.assignee_role.value} (confidence: {result.confidence})"
        )
        return result


def build_generic_reply(sender_name: str, team_name: str) -> str:
    """Acknowledgement reply used when triage is unavailable."""
    first_name = (sender_name or "").strip().split(" ")[0] or "there"
    return "\n".join([
        f"Hi {first_name},",
        "",
        "Thank you for your email. I'll review this and get back to you shortly.",
        "",
        "Best regards,",
        team_name,
    ])


def reply_subject(subject: str) -> str:
    return subject if subject.startswith("Re:") else f"Re: {subject}"
