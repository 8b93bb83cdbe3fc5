"""
API Configuration Management

Provides centralized configuration for the task parsing API with
environment-aware settings and secure secret handling.

Design Considerations:
- Environment variables and .env loading through pydantic-settings
- Optional generation API key: the service runs fallback-only without it
- Configurable roster filtering and unassigned-task policy
"""

from enum import Enum
from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings
from pydantic import Field, SecretStr, field_validator

from src.task_parsing.assignment import UnassignedPolicy
from src.task_parsing.models import Role


class EnvironmentType(str, Enum):
    """Valid environment types for configuration context."""
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


class APISettings(BaseSettings):
    """
    API configuration settings with environment-specific defaults and validation.
    """
    # Environment Configuration
    ENVIRONMENT: EnvironmentType = Field(
        default=EnvironmentType.DEVELOPMENT,
        description="Runtime environment context"
    )
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level"
    )

    # API Settings
    API_TITLE: str = Field(
        default="TaskBoard Task Parsing API",
        description="API title for documentation"
    )
    API_DESCRIPTION: str = Field(
        default="Natural-language task extraction, smart assignment and email triage",
        description="API description for documentation"
    )
    API_VERSION: str = Field(
        default="1.0.0",
        description="API version"
    )

    # Generation Settings
    GROQ_API_KEY: Optional[SecretStr] = Field(
        default=None,
        description="API key for the text-generation service; fallback-only when unset"
    )
    AI_PARSING_ENABLED: bool = Field(
        default=True,
        description="Use the generation pathway before the basic parser"
    )
    GENERATION_TIMEOUT_SECONDS: float = Field(
        default=25.0,
        gt=0,
        le=120,
        description="Total deadline for one generation call, retries included"
    )
    USE_FALLBACK_MODELS: bool = Field(
        default=False,
        description="Use the smaller fallback model tier for every generation call"
    )

    # Team Settings
    TASKBOARD_TEAM_NAME: str = Field(
        default="Our Team",
        description="Team name used in triage prompts and reply sign-offs"
    )
    TASKBOARD_TIMEZONE: Optional[str] = Field(
        default=None,
        description="IANA timezone for relative due dates; system local when unset"
    )
    ROSTER_EXCLUDED_ROLES: str = Field(
        default="agent",
        description="Comma-separated roles removed from the roster before parsing"
    )
    UNASSIGNED_POLICY: UnassignedPolicy = Field(
        default=UnassignedPolicy.LEAVE_UNASSIGNED,
        description="How tasks with no matching team member are returned"
    )
    UNASSIGNED_PLACEHOLDER_ID: str = Field(
        default="unassigned",
        description="Assignee id used by the placeholder policy"
    )

    # CORS Settings
    CORS_ORIGINS: str = Field(
        default="*",
        description="Comma-separated list of allowed origins for CORS"
    )
    CORS_METHODS: str = Field(
        default="GET,POST,OPTIONS",
        description="Comma-separated list of allowed methods for CORS"
    )

    # Rate Limiting
    RATE_LIMIT_WINDOW_SECONDS: int = Field(
        default=60,
        description="Rate limit window in seconds"
    )
    PARSE_RATE_LIMIT: int = Field(
        default=10,
        description="Maximum task parse requests per client per window"
    )
    TRIAGE_RATE_LIMIT: int = Field(
        default=5,
        description="Maximum triage requests per client per window"
    )

    @field_validator("CORS_ORIGINS")
    @classmethod
    def parse_cors_origins(cls, value: str) -> list:
        """Parse comma-separated CORS origins into list."""
        if value == "*":
            return ["*"]
        return [origin.strip() for origin in value.split(",") if origin.strip()]

    @field_validator("CORS_METHODS")
    @classmethod
    def parse_cors_methods(cls, value: str) -> list:
        """Parse comma-separated CORS methods into list."""
        return [method.strip() for method in value.split(",") if method.strip()]

    @field_validator("ROSTER_EXCLUDED_ROLES")
    @classmethod
    def validate_excluded_roles(cls, value: str) -> str:
        """Reject role names that would never match a roster entry."""
        for role in value.split(","):
            if role.strip():
                Role.parse(role, strict=True)
        return value

    @property
    def excluded_roles(self) -> List[Role]:
        return [Role.parse(role, strict=True) for role in self.ROSTER_EXCLUDED_ROLES.split(",") if role.strip()]

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore"
    }


@lru_cache
def get_settings() -> APISettings:
    """
    Retrieve validated API settings.

    Returns:
        Validated API settings object

    Raises:
        ValidationError: If configuration fails validation
    """
    return APISettings()
