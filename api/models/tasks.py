"""
Task Parsing Data Models

Request and response models for the chat parse and task assign
endpoints. Roles and statuses are closed enums, so a misspelled role in
a roster payload is rejected with a 422 instead of silently matching
nothing.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from src.task_parsing.models import (
    ParsedTask,
    ProjectRef,
    Role,
    TaskStatus,
    TeamMember,
)


class TeamMemberModel(BaseModel):
    """Roster entry as sent by the client."""
    id: str = Field(..., min_length=1, description="User id")
    name: str = Field(..., min_length=1, description="Display name")
    role: Role = Field(default=Role.MEMBER, description="Routing role")
    description: Optional[str] = Field(
        default=None,
        description="Free-text expertise description used for assignment"
    )

    def to_domain(self) -> TeamMember:
        return TeamMember(id=self.id, name=self.name, role=self.role, description=self.description)


class ProjectModel(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)

    def to_domain(self) -> ProjectRef:
        return ProjectRef(id=self.id, name=self.name)


class ParsedTaskModel(BaseModel):
    """Single task proposal returned to the client."""
    title: str
    assignee_id: Optional[str] = None
    project_id: Optional[str] = None
    due_at: Optional[str] = Field(default=None, description="ISO 8601 due timestamp")
    priority: int = Field(default=3, ge=1, le=4, description="1=urgent, 2=high, 3=normal, 4=low")
    status: TaskStatus = TaskStatus.DOING
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)

    @classmethod
    def from_domain(cls, task: ParsedTask) -> "ParsedTaskModel":
        return cls(**task.to_dict())


class ChatParseRequest(BaseModel):
    """Body of POST /chat/parse."""
    message: str = Field(..., min_length=1, description="Natural-language message to parse")
    users: List[TeamMemberModel] = Field(default_factory=list)
    projects: List[ProjectModel] = Field(default_factory=list)
    requesting_user_id: Optional[str] = Field(
        default=None,
        description="User sending the message; used by the requesting_user unassigned policy"
    )

    @field_validator("message")
    @classmethod
    def reject_blank_message(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("message must not be blank")
        return value


class ChatParseResponse(BaseModel):
    success: bool = True
    parsed: List[ParsedTaskModel]
    confidence: float = Field(..., ge=0.0, le=1.0)
    parser: str = Field(..., description="'ai' or 'basic'")


class TaskAssignRequest(BaseModel):
    """Body of POST /v1/tasks/assign."""
    text: str = Field(..., min_length=1)
    users: List[TeamMemberModel] = Field(default_factory=list)
    projects: List[ProjectModel] = Field(default_factory=list)
    requesting_user_id: Optional[str] = None

    @field_validator("text")
    @classmethod
    def reject_blank_text(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("text must not be blank")
        return value


class TaskAssignResponse(BaseModel):
    success: bool = True
    task: ParsedTaskModel
    parser: str
