"""
Shared data models for task parsing and email triage.

All models are request-scoped value objects: they are created per call,
returned to the caller and never persisted by this package.
"""

import logging
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """Coarse routing category of a team member."""
    DESIGN = "design"
    STRATEGY = "strategy"
    DEVELOPMENT = "development"
    PM = "pm"
    CONTENT_WRITER = "content_writer"
    AGENT = "agent"
    MEMBER = "member"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Optional[str], strict: bool = False) -> "Role":
        """
        Convert a raw role string into a Role.

        Missing roles map to MEMBER. Unrecognised strings map to UNKNOWN,
        or raise ValueError when ``strict`` is set.
        """
        if isinstance(value, Role):
            return value
        if value is None or not str(value).strip():
            return cls.MEMBER
        normalized = str(value).strip().lower()
        for role in cls:
            if role.value == normalized:
                return role
        if strict:
            raise ValueError(f"Unknown team member role: {value!r}")
        logger.warning(f"Unrecognised role {value!r}, treating as '{cls.UNKNOWN.value}'")
        return cls.UNKNOWN


# Roles the email triage pipeline may route to
TRIAGE_ROLES = (Role.DESIGN, Role.STRATEGY, Role.DEVELOPMENT, Role.PM, Role.AGENT)


class TaskStatus(str, Enum):
    """Board column a task lands in."""
    BACKLOG = "backlog"
    DOING = "doing"
    WAITING = "waiting"
    DONE = "done"


class TriageCategory(str, Enum):
    """Classification of an inbound email."""
    DESIGN = "design"
    STRATEGY = "strategy"
    DEVELOPMENT = "development"
    PM = "pm"
    GENERAL = "general"


@dataclass
class TeamMember:
    """A roster entry the parser may assign tasks to."""
    id: str
    name: str
    role: Role = Role.MEMBER
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], strict_role: bool = False) -> "TeamMember":
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            role=Role.parse(data.get("role"), strict=strict_role),
            description=data.get("description") or None,
        )


@dataclass
class ProjectRef:
    """A project tasks can be filed under."""
    id: str
    name: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProjectRef":
        return cls(id=str(data["id"]), name=str(data["name"]))


@dataclass
class ParsedTask:
    """
    A single structured task proposal.

    Attributes:
        title: Actionable description with metadata phrases stripped
        assignee_id: Roster id of the assignee, or None when nobody fits
        project_id: Project id, or None
        due_at: ISO 8601 due timestamp, or None
        priority: 1 (urgent) to 4 (low)
        status: Board column
        confidence: How well the request was understood (0.0 to 1.0)
    """
    title: str
    assignee_id: Optional[str] = None
    project_id: Optional[str] = None
    due_at: Optional[str] = None
    priority: int = 3
    status: TaskStatus = TaskStatus.DOING
    confidence: float = 0.5

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data


@dataclass
class ParsedTaskBatch:
    """One or more tasks extracted from a single input text."""
    tasks: List[ParsedTask]
    confidence: float
    parser: str = "ai"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tasks": [task.to_dict() for task in self.tasks],
            "confidence": self.confidence,
            "parser": self.parser,
        }


@dataclass
class EmailMessage:
    """Inbound email handed to the triage pipeline."""
    from_email: str
    from_name: str
    subject: str
    body: str = ""
    project_id: Optional[str] = None
    project_name: Optional[str] = None
    attachment_names: List[str] = field(default_factory=list)


@dataclass
class TaskSection:
    heading: str
    content: str


@dataclass
class TriageResult:
    """Classification, routing and draft reply for one inbound email."""
    category: TriageCategory
    assignee_role: Role
    task_title: str
    task_priority: int
    task_sections: List[TaskSection]
    draft_reply: str
    reasoning: str = ""
    confidence: float = 0.5

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["category"] = self.category.value
        data["assignee_role"] = self.assignee_role.value
        return data
