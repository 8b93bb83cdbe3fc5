"""
BasicTaskParser: Regex Fallback for Task Extraction

Deterministic single-task extractor used when the generation service is
unavailable or returns something unusable. Produces the same batch shape
as the AI pathway with a fixed, low confidence.

Capabilities:
- Assignee: "assign to <name>", "assigned to <name>" or "@<name>"
- Project: "project: <name>" or "project <name>"
- Due dates: "due today", "due tomorrow", "due in N days"
- Priority: "urgent", "asap", "critical" → 1, otherwise 3

Assignees resolve only on an exact full-name match; partial names,
nicknames and weekday due dates are left to the AI pathway.
"""

import logging
import re
from datetime import datetime
from typing import Optional, Sequence

from src.config.parser_config import PARSER_CONFIG
from src.task_parsing.models import ParsedTask, ParsedTaskBatch, ProjectRef, TaskStatus, TeamMember
from src.task_parsing.roster import find_member_by_name
from src.utils.date_utils import due_at_hour, format_iso_date, local_now

logger = logging.getLogger(__name__)

ASSIGNEE_PATTERN = re.compile(r"(?:assign(?:ed)?\s+to\s+|@)(\w+)", re.IGNORECASE)
PROJECT_PATTERN = re.compile(r"project[:\s]+(\w+)", re.IGNORECASE)
DUE_PATTERN = re.compile(r"due\s+(today|tomorrow|in\s+(\d+)\s+days?)", re.IGNORECASE)
URGENT_PATTERN = re.compile(r"\b(urgent|asap|critical)\b", re.IGNORECASE)


class BasicTaskParser:
    """Regex-only task parser with the extractor's output contract."""

    def __init__(self, timezone: Optional[str] = None):
        self.config = PARSER_CONFIG["fallback_parser"]
        self.confidence = self.config["confidence"]
        self.timezone = timezone

    def parse(
        self,
        text: str,
        roster: Sequence[TeamMember],
        projects: Sequence[ProjectRef],
        now: Optional[datetime] = None
    ) -> ParsedTaskBatch:
        """
        Parse free text into a one-task batch.

        Args:
            text: Raw user input
            roster: Members an explicit name may resolve to
            projects: Projects a "project X" phrase may resolve to
            now: Reference time for relative due dates (defaults to local now)

        Returns:
            ParsedTaskBatch holding exactly one task, confidence fixed

        Raises:
            ValueError: If ``text`` is empty
        """
        if not isinstance(text, str) or not text:
            raise ValueError("text must be a non-empty string")

        source = text.strip()
        title = source
        assignee_id = None
        project_id = None
        due_at = None
        priority = self.config["default_priority"]

        assign_match = ASSIGNEE_PATTERN.search(source)
        if assign_match:
            member = find_member_by_name(assign_match.group(1), roster)
            if member:
                assignee_id = member.id
                title = title.replace(assign_match.group(0), "", 1)
            else:
                logger.debug(f"Assignee '{assign_match.group(1)}' not on roster, leaving in title")

        project_match = PROJECT_PATTERN.search(source)
        if project_match:
            fragment = project_match.group(1).lower()
            project = next((p for p in projects if fragment in p.name.lower()), None)
            if project:
                project_id = project.id
                title = title.replace(project_match.group(0), "", 1)

        due_match = DUE_PATTERN.search(source)
        if due_match:
            due_at = self._resolve_due_date(due_match, now)
            title = title.replace(due_match.group(0), "", 1)

        if URGENT_PATTERN.search(source):
            priority = self.config["urgent_priority"]

        title = clean_title(title) or source or text

        task = ParsedTask(
            title=title,
            assignee_id=assignee_id,
            project_id=project_id,
            due_at=due_at,
            priority=priority,
            status=TaskStatus.DOING,
            confidence=self.confidence,
        )
        logger.info(
            f"Basic parser produced task: assignee={assignee_id} project={project_id} "
            f"due={due_at} priority={priority}"
        )
        return ParsedTaskBatch(tasks=[task], confidence=self.confidence, parser="basic")

    def _resolve_due_date(self, match: "re.Match", now: Optional[datetime]) -> str:
        now = now or local_now(self.timezone)
        phrase = match.group(1).lower()
        if phrase == "today":
            days = 0
        elif phrase == "tomorrow":
            days = 1
        else:
            days = int(match.group(2))
        return format_iso_date(due_at_hour(now, days, self.config["due_hour"]))


def clean_title(title: str) -> str:
    """Tidy separators and whitespace left behind by stripped phrases."""
    title = re.sub(r",\s*$", "", title.strip())
    title = re.sub(r",\s*,", ",", title)
    title = re.sub(r"\s+", " ", title)
    title = re.sub(r"^[\s:;,\-]+", "", title)
    title = re.sub(r"[\s,]+$", "", title)
    return title.strip()


def parse_tasks_basic(
    text: str,
    roster: Sequence[TeamMember],
    projects: Sequence[ProjectRef],
    now: Optional[datetime] = None,
    timezone: Optional[str] = None
) -> ParsedTaskBatch:
    """Convenience wrapper around BasicTaskParser.parse."""
    return BasicTaskParser(timezone=timezone).parse(text, roster, projects, now=now)
