"""
Unit tests for roster formatting, filtering and role resolution.
"""

import pytest

from src.task_parsing.models import Role, TeamMember
from src.task_parsing.roster import (
    ROLE_ROUTING_RULES,
    exclude_roles,
    filter_roster,
    find_member_by_name,
    format_member,
    format_routing_rules,
    format_triage_roster,
    resolve_member_for_role,
)


class TestFormatting:
    """Test suite for prompt-facing roster formatters."""

    def test_member_with_description(self):
        member = TeamMember(id="u2", name="An", role=Role.DEVELOPMENT, description="front-end developer")
        assert format_member(member) == "- An (id: u2, role: development) — front-end developer"

    def test_member_without_role_shows_member(self):
        member = TeamMember.from_dict({"id": "u9", "name": "Pat"})
        assert format_member(member) == "- Pat (id: u9, role: member)"

    def test_triage_roster(self, roster):
        lines = format_triage_roster(roster).splitlines()
        assert lines[0] == "- Jordan (pm)"
        assert len(lines) == len(roster)

    def test_routing_rules(self):
        text = format_routing_rules(ROLE_ROUTING_RULES)
        assert '- "design" → visual/brand/UI/UX/graphics/illustration/layout work' in text
        assert '"agent"' not in text


class TestFiltering:
    """Test suite for roster predicates."""

    def test_exclude_agent(self, roster_with_agent):
        kept = filter_roster(roster_with_agent, exclude_roles(Role.AGENT))
        assert all(member.role != Role.AGENT for member in kept)
        assert len(kept) == len(roster_with_agent) - 1

    def test_no_predicate_keeps_everyone(self, roster_with_agent):
        assert filter_roster(roster_with_agent) == roster_with_agent

    def test_multiple_roles(self, roster):
        kept = filter_roster(roster, exclude_roles(Role.PM, Role.DESIGN))
        assert {member.name for member in kept} == {"An", "Mike", "Sara"}


class TestLookup:
    """Test suite for name lookup and role resolution."""

    def test_find_by_name_case_insensitive(self, roster):
        assert find_member_by_name("  SARA ", roster).id == "u5"

    def test_find_by_partial_name_fails(self, roster):
        assert find_member_by_name("Jor", roster) is None

    def test_resolve_role_holder(self, roster):
        assert resolve_member_for_role(Role.DESIGN, roster).name == "Katie"

    def test_resolve_falls_back_to_pm(self, roster):
        assert resolve_member_for_role(Role.AGENT, roster).name == "Jordan"

    def test_resolve_none_without_pm(self):
        roster = [TeamMember(id="u3", name="Katie", role=Role.DESIGN)]
        assert resolve_member_for_role(Role.DEVELOPMENT, roster) is None


class TestRoleParse:
    """Test suite for Role.parse."""

    def test_missing_role_is_member(self):
        assert Role.parse(None) == Role.MEMBER
        assert Role.parse("  ") == Role.MEMBER

    def test_case_insensitive(self):
        assert Role.parse(" Development ") == Role.DEVELOPMENT

    def test_unknown_role(self):
        assert Role.parse("wizard") == Role.UNKNOWN

    def test_unknown_role_strict(self):
        with pytest.raises(ValueError):
            Role.parse("wizard", strict=True)
