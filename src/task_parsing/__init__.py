"""
Task parsing package initialization.

Entry points live in their modules: ``extractor.TaskExtractor`` for chat
and API text, ``triage.EmailTriager`` for inbound email, and
``fallback.parse_tasks_basic`` for the regex-only parser.
"""

from .models import (
    EmailMessage,
    ParsedTask,
    ParsedTaskBatch,
    ProjectRef,
    Role,
    TaskSection,
    TaskStatus,
    TeamMember,
    TriageCategory,
    TriageResult,
)
from .errors import (
    GenerationCancelled,
    GenerationUnavailable,
    MalformedResponse,
    ParseError,
    TaskParsingError,
    TriageError,
    ValidationError,
)

__all__ = [
    'EmailMessage',
    'ParsedTask',
    'ParsedTaskBatch',
    'ProjectRef',
    'Role',
    'TaskSection',
    'TaskStatus',
    'TeamMember',
    'TriageCategory',
    'TriageResult',
    'GenerationCancelled',
    'GenerationUnavailable',
    'MalformedResponse',
    'ParseError',
    'TaskParsingError',
    'TriageError',
    'ValidationError',
]
