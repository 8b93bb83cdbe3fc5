"""
Response Validator/Normalizer for model output.

Locates the JSON payload inside raw model text (which may be wrapped in
prose or code fences), validates it against pydantic schemas and
normalizes it into the batch and triage value objects.

Reference integrity is enforced here: ids the model invents are mapped
back onto the roster by exact name, or dropped.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic import ValidationError as SchemaValidationError

from src.config.parser_config import PARSER_CONFIG
from src.task_parsing.errors import MalformedResponse, ValidationError
from src.task_parsing.models import (
    EmailMessage,
    ParsedTask,
    ParsedTaskBatch,
    ProjectRef,
    Role,
    TaskSection,
    TaskStatus,
    TeamMember,
    TRIAGE_ROLES,
    TriageCategory,
    TriageResult,
)
from src.task_parsing.roster import find_member_by_name
from src.utils.date_utils import is_valid_iso_date

logger = logging.getLogger(__name__)

EXTRACTOR_CONFIG = PARSER_CONFIG["task_extractor"]
TRIAGE_CONFIG = PARSER_CONFIG["email_triage"]


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _coerce_priority(value: Any) -> int:
    try:
        return int(_clamp(int(float(value)), 1, 4))
    except (TypeError, ValueError):
        return EXTRACTOR_CONFIG["default_priority"]


def _coerce_confidence(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(_clamp(float(value), 0.0, 1.0))
    except (TypeError, ValueError):
        return None


def _require_text(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{field_name} must be a non-empty string")
    return value.strip()


class TaskPayload(BaseModel):
    """One task as emitted by the model; lenient on everything but the title."""
    model_config = ConfigDict(extra="ignore")

    title: str
    assignee_id: Optional[str] = None
    project_id: Optional[str] = None
    due_at: Optional[str] = None
    priority: int = EXTRACTOR_CONFIG["default_priority"]
    status: TaskStatus = TaskStatus.DOING
    confidence: Optional[float] = None

    @field_validator("title", mode="before")
    @classmethod
    def validate_title(cls, value: Any) -> str:
        return _require_text(value, "title")

    @field_validator("assignee_id", "project_id", mode="before")
    @classmethod
    def normalize_reference(cls, value: Any) -> Optional[str]:
        if value is None or isinstance(value, bool):
            return None
        text = str(value).strip()
        if not text or text.lower() in ("null", "none"):
            return None
        return text

    @field_validator("due_at", mode="before")
    @classmethod
    def normalize_due_at(cls, value: Any) -> Optional[str]:
        if isinstance(value, str) and is_valid_iso_date(value):
            return value.strip()
        if value:
            logger.debug(f"Discarding non-ISO due_at value: {value!r}")
        return None

    @field_validator("priority", mode="before")
    @classmethod
    def normalize_priority(cls, value: Any) -> int:
        return _coerce_priority(value)

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, value: Any) -> TaskStatus:
        try:
            return TaskStatus(str(value).strip().lower())
        except ValueError:
            return TaskStatus.DOING

    @field_validator("confidence", mode="before")
    @classmethod
    def normalize_confidence(cls, value: Any) -> Optional[float]:
        return _coerce_confidence(value)


class SectionPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    heading: str
    content: str = ""

    @field_validator("heading", mode="before")
    @classmethod
    def validate_heading(cls, value: Any) -> str:
        return _require_text(value, "heading")

    @field_validator("content", mode="before")
    @classmethod
    def normalize_content(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()


class TriagePayload(BaseModel):
    """Triage object as emitted by the model."""
    model_config = ConfigDict(extra="ignore")

    category: str
    assignee_role: Optional[str] = None
    task_title: str
    task_priority: int = 3
    task_sections: List[SectionPayload] = []
    draft_reply: str
    reasoning: str = ""
    confidence: Optional[float] = None

    @field_validator("category", mode="before")
    @classmethod
    def validate_category(cls, value: Any) -> str:
        return _require_text(value, "category").lower()

    @field_validator("task_title", mode="before")
    @classmethod
    def validate_task_title(cls, value: Any) -> str:
        return _require_text(value, "task_title")

    @field_validator("draft_reply", mode="before")
    @classmethod
    def validate_draft_reply(cls, value: Any) -> str:
        return _require_text(value, "draft_reply")

    @field_validator("task_priority", mode="before")
    @classmethod
    def normalize_priority(cls, value: Any) -> int:
        return _coerce_priority(value)

    @field_validator("task_sections", mode="before")
    @classmethod
    def normalize_sections(cls, value: Any) -> list:
        if not isinstance(value, list):
            return []
        return [
            section for section in value
            if isinstance(section, dict)
            and isinstance(section.get("heading"), str)
            and section["heading"].strip()
        ]

    @field_validator("reasoning", mode="before")
    @classmethod
    def normalize_reasoning(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()

    @field_validator("confidence", mode="before")
    @classmethod
    def normalize_confidence(cls, value: Any) -> Optional[float]:
        return _coerce_confidence(value)


def _balanced_object_end(text: str, start: int) -> Optional[int]:
    """Index just past the ``}`` closing the object opened at ``start``."""
    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index + 1
    return None


def extract_json_object(text: str) -> Dict[str, Any]:
    """
    Locate the first balanced JSON object in raw model output.

    Args:
        text: Raw completion text, possibly with prose or markdown fences

    Returns:
        Parsed JSON object

    Raises:
        MalformedResponse: If no balanced object parses as a JSON object
    """
    if not text or "{" not in text:
        raise MalformedResponse("No JSON object found in model response")

    last_error: Optional[Exception] = None
    start = text.find("{")
    while start != -1:
        end = _balanced_object_end(text, start)
        if end is None:
            break
        try:
            parsed = json.loads(text[start:end])
            if isinstance(parsed, dict):
                return parsed
        except json.JSONDecodeError as e:
            last_error = e
        start = text.find("{", start + 1)

    preview = text[:200].replace("\n", " ")
    raise MalformedResponse(f"Failed to parse model response: {last_error or 'unbalanced JSON'} ({preview!r})")


def _resolve_assignee(value: Optional[str], roster: Sequence[TeamMember]) -> Optional[str]:
    if value is None:
        return None
    if any(member.id == value for member in roster):
        return value
    member = find_member_by_name(value, roster)
    if member:
        logger.info(f"Model returned a name for assignee_id; resolved '{value}' to {member.id}")
        return member.id
    logger.warning(f"Model returned unknown assignee_id '{value}', leaving task unassigned")
    return None


def _resolve_project(value: Optional[str], projects: Sequence[ProjectRef]) -> Optional[str]:
    if value is None:
        return None
    if any(project.id == value for project in projects):
        return value
    wanted = value.strip().lower()
    if wanted:
        for project in projects:
            if project.name.lower() == wanted:
                return project.id
        for project in projects:
            if wanted in project.name.lower():
                logger.info(f"Model returned a partial project name; resolved '{value}' to {project.id}")
                return project.id
    logger.warning(f"Model returned unknown project_id '{value}', dropping it")
    return None


def _validate_task(raw: Any, index: int) -> TaskPayload:
    if not isinstance(raw, dict):
        raise ValidationError(f"Task {index} is not an object")
    try:
        return TaskPayload.model_validate(raw)
    except SchemaValidationError as e:
        raise ValidationError(f"Task {index} failed validation: {e.errors()[0]['msg']}") from e


def normalize_task_batch(
    payload: Dict[str, Any],
    roster: Sequence[TeamMember],
    projects: Sequence[ProjectRef]
) -> ParsedTaskBatch:
    """
    Normalize a parsed model payload into a ParsedTaskBatch.

    Accepts the batch shape (``{"tasks": [...], "confidence": x}``) and the
    legacy single-task shape. Batches are truncated to the configured limit.

    Raises:
        ValidationError: If the batch is empty or any task lacks a title
    """
    max_tasks = EXTRACTOR_CONFIG["max_tasks"]
    default_confidence = EXTRACTOR_CONFIG["default_confidence"]

    if isinstance(payload.get("tasks"), list):
        raw_tasks = payload["tasks"]
        if not raw_tasks:
            raise ValidationError("Model returned an empty task list")
        if len(raw_tasks) > max_tasks:
            logger.warning(f"Model returned {len(raw_tasks)} tasks, truncating to {max_tasks}")
        validated = [_validate_task(raw, index) for index, raw in enumerate(raw_tasks[:max_tasks])]

        batch_confidence = _coerce_confidence(payload.get("confidence"))
        if batch_confidence is None:
            batch_confidence = validated[0].confidence
        if batch_confidence is None:
            batch_confidence = default_confidence
    else:
        validated = [_validate_task(payload, 0)]
        batch_confidence = validated[0].confidence
        if batch_confidence is None:
            batch_confidence = default_confidence

    tasks = [
        ParsedTask(
            title=item.title,
            assignee_id=_resolve_assignee(item.assignee_id, roster),
            project_id=_resolve_project(item.project_id, projects),
            due_at=item.due_at,
            priority=item.priority,
            status=item.status,
            confidence=item.confidence if item.confidence is not None else batch_confidence,
        )
        for item in validated
    ]
    return ParsedTaskBatch(tasks=tasks, confidence=batch_confidence, parser="ai")


def parse_task_response(
    text: str,
    roster: Sequence[TeamMember],
    projects: Sequence[ProjectRef]
) -> ParsedTaskBatch:
    """Extract, validate and normalize a task extraction completion."""
    return normalize_task_batch(extract_json_object(text), roster, projects)


def _normalize_sections(payload: TriagePayload, email: EmailMessage) -> List[TaskSection]:
    sections = [TaskSection(heading=s.heading, content=s.content) for s in payload.task_sections]
    if not any(section.heading.lower() == "goal" for section in sections):
        sections.insert(0, TaskSection(heading="Goal", content=payload.task_title))
    sections = sections[:TRIAGE_CONFIG["max_sections"]]
    if len(sections) < TRIAGE_CONFIG["min_sections"]:
        context = payload.reasoning or f'Email from {email.from_name} re: "{email.subject}"'
        sections.append(TaskSection(heading="Context", content=context))
    return sections


def parse_triage_response(text: str, email: EmailMessage) -> TriageResult:
    """
    Extract and validate an email triage completion.

    Raises:
        MalformedResponse: If no JSON object can be parsed
        ValidationError: If category, task_title or draft_reply is missing
    """
    payload_dict = extract_json_object(text)
    try:
        payload = TriagePayload.model_validate(payload_dict)
    except SchemaValidationError as e:
        missing = ", ".join(str(err["loc"][0]) for err in e.errors() if err["loc"])
        raise ValidationError(f"Triage result missing required fields: {missing}") from e

    try:
        category = TriageCategory(payload.category)
    except ValueError:
        logger.warning(f"Unknown triage category '{payload.category}', using 'general'")
        category = TriageCategory.GENERAL

    role = Role.parse(payload.assignee_role)
    if role not in TRIAGE_ROLES:
        logger.warning(f"Triage routed to unsupported role '{payload.assignee_role}', routing to pm")
        role = Role.PM

    confidence = payload.confidence if payload.confidence is not None else EXTRACTOR_CONFIG["default_confidence"]

    return TriageResult(
        category=category,
        assignee_role=role,
        task_title=payload.task_title,
        task_priority=payload.task_priority,
        task_sections=_normalize_sections(payload, email),
        draft_reply=payload.draft_reply,
        reasoning=payload.reasoning,
        confidence=confidence,
    )
