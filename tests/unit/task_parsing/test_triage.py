"""
Test suite for the EmailTriager.

Unlike task extraction, triage has no regex fallback: every failure must
surface as TriageError so the caller can send the generic reply.
"""

import asyncio
import json

import pytest

from src.task_parsing.errors import GenerationUnavailable, TriageError
from src.task_parsing.models import Role, TriageCategory
from src.task_parsing.triage import EmailTriager, build_generic_reply, reply_subject


@pytest.fixture
def triager(stub_client):
    return EmailTriager(client=stub_client, team_name="Acme Studio", timeout=1.0, timezone="UTC")


@pytest.fixture
def triage_completion():
    """
    Well-formed triage completion wrapped in prose.

    Returns:
        str: Model output routing a logo request to design
    """
    payload = {
        "category": "design",
        "assignee_role": "design",
        "task_title": "Revise logo mark",
        "task_priority": 2,
        "task_sections": [
            {"heading": "Goal", "content": "Bolder logo mark in darker blue"},
            {"heading": "Deliverables", "content": "Two revised logo files"},
        ],
        "draft_reply": "Hi Dana,\n\nWe'll make the mark bolder and try a darker blue.\n\nBest regards,\nAcme Studio",
        "reasoning": "Visual brand request",
        "confidence": 0.9,
    }
    return "Here you go:\n" + json.dumps(payload)


class TestEmailTriager:
    """Tests for EmailTriager.triage_email."""

    async def test_successful_triage(self, triager, stub_client, sample_email, roster, triage_completion):
        stub_client.complete.return_value = triage_completion

        result = await triager.triage_email(sample_email, roster, project_context="Client prefers blue.")

        assert result.category == TriageCategory.DESIGN
        assert result.assignee_role == Role.DESIGN
        assert result.task_title == "Revise logo mark"
        assert 2 <= len(result.task_sections) <= 4
        assert result.draft_reply.startswith("Hi Dana")

    async def test_prompt_and_model_settings(self, triager, stub_client, sample_email, roster, triage_completion):
        stub_client.complete.return_value = triage_completion

        await triager.triage_email(sample_email, roster, project_context="Client prefers blue.")

        args, kwargs = stub_client.complete.call_args
        system_prompt, user_message = args
        assert "Client prefers blue." in system_prompt
        assert "Acme Studio" in system_prompt
        assert user_message == 'Triage this email from Dana Lee about: "Logo revisions"'
        assert kwargs["temperature"] == 0.4
        assert kwargs["max_tokens"] == 1000

    async def test_malformed_raises(self, triager, stub_client, sample_email, roster):
        stub_client.complete.return_value = "I am not sure."
        with pytest.raises(TriageError):
            await triager.triage_email(sample_email, roster)

    async def test_missing_field_raises(self, triager, stub_client, sample_email, roster):
        stub_client.complete.return_value = json.dumps({"category": "design", "task_title": "Logo"})
        with pytest.raises(TriageError) as excinfo:
            await triager.triage_email(sample_email, roster)
        assert "draft_reply" in str(excinfo.value)

    async def test_generation_unavailable_raises(self, triager, stub_client, sample_email, roster):
        stub_client.complete.side_effect = GenerationUnavailable("rate limited")
        with pytest.raises(TriageError):
            await triager.triage_email(sample_email, roster)

    async def test_unexpected_exception_raises_triage_error(self, triager, stub_client, sample_email, roster):
        stub_client.complete.side_effect = RuntimeError("boom")
        with pytest.raises(TriageError) as excinfo:
            await triager.triage_email(sample_email, roster)
        assert isinstance(excinfo.value.__cause__, RuntimeError)

    async def test_timeout_raises(self, stub_client, sample_email, roster):
        async def slow(*args, **kwargs):
            await asyncio.sleep(5)

        stub_client.complete.side_effect = slow
        triager = EmailTriager(client=stub_client, timeout=0.05)

        with pytest.raises(TriageError):
            await triager.triage_email(sample_email, roster)

    async def test_disabled_raises(self, stub_client, sample_email, roster):
        triager = EmailTriager(client=stub_client, use_ai=False)
        assert not triager.enabled
        with pytest.raises(TriageError):
            await triager.triage_email(sample_email, roster)
        stub_client.complete.assert_not_called()


class TestReplyHelpers:
    """Tests for the generic reply template."""

    def test_generic_reply_uses_first_name(self):
        reply = build_generic_reply("Dana Lee", "Acme Studio")
        assert reply == (
            "Hi Dana,\n\n"
            "Thank you for your email. I'll review this and get back to you shortly.\n\n"
            "Best regards,\n"
            "Acme Studio"
        )

    def test_generic_reply_without_name(self):
        assert build_generic_reply("", "Acme Studio").startswith("Hi there,")

    def test_reply_subject(self):
        assert reply_subject("Logo revisions") == "Re: Logo revisions"
        assert reply_subject("Re: Logo revisions") == "Re: Logo revisions"
