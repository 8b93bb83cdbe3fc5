"""
Email Triage Data Models
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from api.models.tasks import TeamMemberModel
from src.task_parsing.models import Role, TriageCategory, TriageResult


class EmailTriageRequest(BaseModel):
    """Body of POST /email/triage."""
    from_email: str = Field(..., min_length=3, description="Sender address")
    from_name: Optional[str] = Field(default=None, description="Sender display name")
    subject: str = Field(..., min_length=1)
    body: str = Field(default="")
    project_id: Optional[str] = None
    project_name: Optional[str] = None
    project_context: str = Field(
        default="",
        description="Project history and brand notes for context-aware replies"
    )
    attachment_names: List[str] = Field(default_factory=list)
    users: List[TeamMemberModel] = Field(default_factory=list)


class TaskSectionModel(BaseModel):
    heading: str
    content: str


class TriageResultModel(BaseModel):
    category: TriageCategory
    assignee_role: Role
    task_title: str
    task_priority: int = Field(..., ge=1, le=4)
    task_sections: List[TaskSectionModel]
    draft_reply: str
    reasoning: str = ""
    confidence: float = Field(..., ge=0.0, le=1.0)

    @classmethod
    def from_domain(cls, result: TriageResult) -> "TriageResultModel":
        return cls(**result.to_dict())


class AssigneeModel(BaseModel):
    id: str
    name: str


class EmailTriageResponse(BaseModel):
    """
    Triage outcome. When AI triage fails, ``triage`` is null and
    ``draft_reply`` holds the generic acknowledgement template.
    """
    success: bool = True
    triage: Optional[TriageResultModel] = None
    assignee: Optional[AssigneeModel] = None
    draft_reply: str
    reply_subject: str
    parser: str = Field(..., description="'ai' or 'template'")
