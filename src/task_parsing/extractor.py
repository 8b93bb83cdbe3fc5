"""
TaskExtractor: Natural-Language Task Extraction Orchestrator

Public entry point for turning chat messages and API text into task
proposals. Tries the generation pathway first and transparently falls
back to the regex parser on any generation, parse or validation failure,
so callers always receive at least one task.

State flow per call:
    IDLE → GENERATION_ATTEMPTED → SUCCEEDED
                                → FALLBACK_ATTEMPTED
    IDLE → FALLBACK_ATTEMPTED  (AI disabled or no client configured)
"""

import asyncio
import logging
import os
from datetime import datetime
from enum import Enum
from typing import Optional, Sequence

from src.config.parser_config import PARSER_CONFIG
from src.integrations.groq.client_wrapper import EnhancedGroqClient
from src.integrations.groq.model_manager import ModelManager
from src.task_parsing.cancellation import await_with_cancellation
from src.task_parsing.errors import GenerationCancelled, GenerationUnavailable, TaskParsingError
from src.task_parsing.fallback import BasicTaskParser
from src.task_parsing.models import ParsedTask, ParsedTaskBatch, ProjectRef, TeamMember
from src.task_parsing.prompts import build_task_prompt
from src.task_parsing.response_parser import parse_task_response
from src.utils.date_utils import local_now

logger = logging.getLogger(__name__)


class ExtractionState(str, Enum):
    IDLE = "idle"
    GENERATION_ATTEMPTED = "generation_attempted"
    SUCCEEDED = "succeeded"
    FALLBACK_ATTEMPTED = "fallback_attempted"


class TaskExtractor:
    """
    Orchestrates prompt building, generation, validation and fallback.

    The generation client is injectable so tests and callers can supply
    stubs; when none is given and no API key is configured the extractor
    runs in fallback-only mode.
    """

    def __init__(
        self,
        client: Optional[EnhancedGroqClient] = None,
        model_manager: Optional[ModelManager] = None,
        fallback_parser: Optional[BasicTaskParser] = None,
        timeout: Optional[float] = None,
        timezone: Optional[str] = None,
        use_ai: bool = True
    ):
        """
        Initialize the extractor.

        Args:
            client: Generation client; created from the environment when omitted
            model_manager: Model selection; defaults to primary models
            fallback_parser: Regex parser used when generation fails
            timeout: Total generation deadline in seconds, retries included
            timezone: IANA zone used for "today" in prompts and due dates
            use_ai: Set False to always use the fallback parser
        """
        self.config = PARSER_CONFIG["task_extractor"]
        self.timezone = timezone
        self.timeout = timeout if timeout is not None else self.config["timeout"]
        self.model_manager = model_manager or ModelManager()
        self.fallback_parser = fallback_parser or BasicTaskParser(timezone=timezone)
        self.use_ai = use_ai

        self.client = client
        if self.client is None and use_ai:
            try:
                self.client = EnhancedGroqClient(
                    retry_count=self.config["retry_count"],
                    retry_delay=self.config["retry_delay"],
                )
            except GenerationUnavailable as e:
                logger.warning(f"Generation client unavailable, running fallback-only: {e}")

        logger.debug(
            f"TaskExtractor initialized: ai={'on' if self.ai_enabled else 'off'}, "
            f"timeout={self.timeout}s, timezone={timezone or 'local'}"
        )

    @property
    def ai_enabled(self) -> bool:
        return self.use_ai and self.client is not None

    async def extract_tasks(
        self,
        text: str,
        roster: Sequence[TeamMember],
        projects: Sequence[ProjectRef],
        cancel_event: Optional[asyncio.Event] = None
    ) -> ParsedTaskBatch:
        """
        Parse natural language text into one or more structured tasks.

        Multiple distinct actions become multiple tasks (at most 10) with any
        shared assignee, due date or project applied to all of them.

        Args:
            text: Raw chat message or API text
            roster: Team members tasks may be assigned to
            projects: Projects tasks may be filed under
            cancel_event: Set by the caller to abandon generation and fall back

        Returns:
            ParsedTaskBatch with 1-10 tasks; ``parser`` is "ai" or "basic"

        Raises:
            ValueError: If ``text`` is empty
        """
        if not isinstance(text, str) or not text:
            raise ValueError("text must be a non-empty string")

        request_id = f"parse-{datetime.now().strftime('%Y%m%d%H%M%S')}-{os.urandom(3).hex()}"
        roster = list(roster)
        projects = list(projects)
        state = ExtractionState.IDLE
        logger.info(f"[{request_id}] Extracting tasks from {len(text)} characters")

        if self.ai_enabled:
            state = ExtractionState.GENERATION_ATTEMPTED
            try:
                batch = await self._extract_with_generation(text, roster, projects, cancel_event, request_id)
                state = ExtractionState.SUCCEEDED
                logger.info(
                    f"[{request_id}] {state.value}: {len(batch.tasks)} task(s), "
                    f"confidence={batch.confidence}"
                )
                return batch
            except GenerationCancelled:
                logger.info(f"[{request_id}] Generation cancelled, using basic parser")
            except asyncio.TimeoutError:
                logger.warning(f"[{request_id}] Generation timed out after {self.timeout}s, using basic parser")
            except TaskParsingError as e:
                logger.warning(f"[{request_id}] LLM parse failed, using basic parser: {type(e).__name__}: {e}")
            except Exception as e:
                logger.error(
                    f"[{request_id}] Unexpected generation failure, using basic parser: {e}",
                    exc_info=True
                )
        else:
            logger.info(f"[{request_id}] AI parsing disabled, using basic parser")

        state = ExtractionState.FALLBACK_ATTEMPTED
        batch = self.fallback_parser.parse(text, roster, projects)
        logger.info(f"[{request_id}] {state.value}: confidence={batch.confidence}")
        return batch

    async def extract_single_task(
        self,
        text: str,
        roster: Sequence[TeamMember],
        projects: Sequence[ProjectRef],
        cancel_event: Optional[asyncio.Event] = None
    ) -> ParsedTask:
        """First task of ``extract_tasks``; used by the single-task API."""
        batch = await self.extract_tasks(text, roster, projects, cancel_event=cancel_event)
        return batch.tasks[0]

    async def _extract_with_generation(
        self,
        text: str,
        roster: list,
        projects: list,
        cancel_event: Optional[asyncio.Event],
        request_id: str
    ) -> ParsedTaskBatch:
        model_config = self.model_manager.get_model_config(self.config["model"]["task_type"])
        prompt = build_task_prompt(roster, projects, local_now(self.timezone).date())

        logger.debug(f"[{request_id}] Sending prompt to {model_config['name']} (length {len(prompt)})")
        completion = self.client.complete(
            prompt,
            text,
            model=model_config["name"],
            temperature=model_config["temperature"],
            max_tokens=self.config["model"]["max_tokens"],
            timeout=self.timeout,
        )
        raw = await await_with_cancellation(completion, self.timeout, cancel_event)
        logger.debug(f"[{request_id}] Raw completion: {raw[:500]}")

        return parse_task_response(raw, roster, projects)
