"""
Shared fixtures for the task parsing test suite.

Provides a representative team roster, project list and a stub
generation client so no test ever reaches the network.
"""

import time
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.task_parsing.models import EmailMessage, ProjectRef, Role, TeamMember

MOCK_USERS = [
    {"id": "u1", "name": "Jordan", "role": "pm"},
    {"id": "u2", "name": "An", "role": "development", "description": "front-end developer"},
    {"id": "u3", "name": "Katie", "role": "design"},
    {"id": "u4", "name": "Mike", "role": "strategy"},
    {"id": "u5", "name": "Sara", "role": "content_writer"},
]

MOCK_PROJECTS = [
    {"id": "p1", "name": "TaskBoard"},
    {"id": "p2", "name": "Company Website"},
]


@pytest.fixture
def roster():
    """
    Team roster covering every routable role except agent.

    Returns:
        list[TeamMember]: Five members, one per role
    """
    return [TeamMember.from_dict(user) for user in MOCK_USERS]


@pytest.fixture
def roster_with_agent(roster):
    """Roster plus an automation agent member."""
    return roster + [TeamMember(id="a1", name="Botty", role=Role.AGENT)]


@pytest.fixture
def projects():
    """
    Project list used for project matching.

    Returns:
        list[ProjectRef]: TaskBoard and Company Website
    """
    return [ProjectRef.from_dict(project) for project in MOCK_PROJECTS]


@pytest.fixture
def fixed_now():
    """Wednesday morning reference time in UTC."""
    return datetime(2026, 3, 4, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def new_york_system_zone(monkeypatch):
    """Point the process local timezone at America/New_York for one test."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    monkeypatch.setenv("TZ", "America/New_York")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


@pytest.fixture
def sample_email():
    """
    Client email asking for a logo revision.

    Returns:
        EmailMessage: Inbound message with one attachment
    """
    return EmailMessage(
        from_email="dana@client.example",
        from_name="Dana Lee",
        subject="Logo revisions",
        body="Hi team, could you make the logo mark bolder and try a darker blue? Thanks!",
        project_name="Company Website",
        attachment_names=["logo-v2.png"],
    )


@pytest.fixture
def stub_client():
    """
    Generation client double with an awaitable ``complete``.

    Tests set ``stub_client.complete.return_value`` or ``side_effect``.
    """
    client = MagicMock()
    client.complete = AsyncMock()
    return client
