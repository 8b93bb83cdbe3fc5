"""
Team roster helpers shared by the task parser and email triage.

Formats the roster for prompts, holds the role routing table, filters
the roster with caller-supplied predicates, and resolves a routed role
to a concrete team member.
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from src.task_parsing.models import ProjectRef, Role, TeamMember

logger = logging.getLogger(__name__)

RosterPredicate = Callable[[TeamMember], bool]

# Role routing table embedded in every prompt
ROLE_ROUTING_RULES: Dict[Role, str] = {
    Role.DESIGN: "visual/brand/UI/UX/graphics/illustration/layout work",
    Role.STRATEGY: "planning/positioning/messaging/research/competitive analysis/content strategy",
    Role.DEVELOPMENT: "code/engineering/bugs/features/deployment/API/database",
    Role.PM: "scheduling/budgets/timelines/coordination/general inquiries",
    Role.CONTENT_WRITER: "copywriting, blog posts, social media content, editing",
    Role.MEMBER: "general team member (no specific specialty)",
}

TRIAGE_ROUTING_RULES: Dict[Role, str] = {
    Role.DESIGN: ROLE_ROUTING_RULES[Role.DESIGN],
    Role.STRATEGY: ROLE_ROUTING_RULES[Role.STRATEGY],
    Role.DEVELOPMENT: ROLE_ROUTING_RULES[Role.DEVELOPMENT],
    Role.PM: ROLE_ROUTING_RULES[Role.PM],
    Role.AGENT: "automated/repetitive tasks, data processing, report generation",
}


def format_member(member: TeamMember) -> str:
    """Render one member as ``- name (id: x, role: y) — description``."""
    role = member.role.value if member.role else Role.MEMBER.value
    entry = f"- {member.name} (id: {member.id}, role: {role})"
    if member.description:
        entry += f" — {member.description}"
    return entry


def format_team_roster(roster: Sequence[TeamMember]) -> str:
    return "\n".join(format_member(member) for member in roster)


def format_triage_roster(roster: Sequence[TeamMember]) -> str:
    return "\n".join(f"- {member.name} ({member.role.value})" for member in roster)


def format_routing_rules(rules: Dict[Role, str]) -> str:
    return "\n".join(f'- "{role.value}" → {description}' for role, description in rules.items())


def format_projects(projects: Sequence[ProjectRef]) -> List[Dict[str, str]]:
    return [{"id": project.id, "name": project.name} for project in projects]


def exclude_roles(*roles: Role) -> RosterPredicate:
    """Build a predicate keeping members whose role is not in ``roles``."""
    excluded = frozenset(roles)

    def predicate(member: TeamMember) -> bool:
        return member.role not in excluded

    return predicate


def filter_roster(
    roster: Iterable[TeamMember],
    predicate: Optional[RosterPredicate] = None
) -> List[TeamMember]:
    members = list(roster)
    if predicate is None:
        return members
    kept = [member for member in members if predicate(member)]
    if len(kept) != len(members):
        logger.debug(f"Roster filter removed {len(members) - len(kept)} of {len(members)} members")
    return kept


def find_member_by_name(name: str, roster: Sequence[TeamMember]) -> Optional[TeamMember]:
    """Exact, case-insensitive full-name lookup."""
    wanted = name.strip().lower()
    for member in roster:
        if member.name.lower() == wanted:
            return member
    return None


def resolve_member_for_role(role: Role, roster: Sequence[TeamMember]) -> Optional[TeamMember]:
    """
    Pick the member who should own a task routed to ``role``.

    Returns the first member holding the role, otherwise the first PM,
    otherwise None when the roster has neither.
    """
    for member in roster:
        if member.role == role:
            return member
    for member in roster:
        if member.role == Role.PM:
            logger.info(f"No member with role '{role.value}', falling back to PM {member.name}")
            return member
    logger.warning(f"No member with role '{role.value}' and no PM on the roster")
    return None
