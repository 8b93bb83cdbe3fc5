"""
Command-line entry point for task parsing and email triage.

Reads a team file with ``users`` and ``projects`` lists, runs the same
pipeline the API uses and prints the result as JSON.

Usage:
    python main.py --team team.json parse "Sara write blog post by Friday"
    python main.py --team team.json triage --from-email a@b.com --subject "Logo" --body "..."
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Tuple

from dotenv import load_dotenv

from src.task_parsing.errors import TriageError
from src.task_parsing.extractor import TaskExtractor
from src.task_parsing.models import EmailMessage, ProjectRef, Role, TeamMember
from src.task_parsing.roster import exclude_roles, filter_roster, resolve_member_for_role
from src.task_parsing.triage import EmailTriager, build_generic_reply, reply_subject
from src.utils.logging_setup import setup_logging

PROJECT_ROOT = Path(__file__).parent
LOGS_DIR = PROJECT_ROOT / 'logs'

logger = logging.getLogger(__name__)


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(description="Extract tasks and triage email from the command line")
    parser.add_argument("--team", type=Path, help="JSON file with 'users' and 'projects' lists")
    parser.add_argument("--timezone", help="IANA timezone for relative due dates")
    parser.add_argument("--no-ai", action="store_true", help="Use the basic parser only")
    parser.add_argument("--log-level", default="WARNING", help="Console log level (default: WARNING)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    parse_cmd = subparsers.add_parser("parse", help="Parse a message into tasks")
    parse_cmd.add_argument("text", help="Natural-language message")

    triage_cmd = subparsers.add_parser("triage", help="Triage an inbound email")
    triage_cmd.add_argument("--from-email", required=True)
    triage_cmd.add_argument("--from-name", default="")
    triage_cmd.add_argument("--subject", required=True)
    triage_cmd.add_argument("--body", default="")
    triage_cmd.add_argument("--team-name", default=None)

    return parser.parse_args(argv)


def load_team(path) -> Tuple[List[TeamMember], List[ProjectRef]]:
    """Load roster and projects from a JSON team file."""
    if path is None:
        return [], []
    with open(path, 'r', encoding='utf-8') as file:
        data: Dict[str, Any] = json.load(file)
    roster = [TeamMember.from_dict(user) for user in data.get("users", [])]
    projects = [ProjectRef.from_dict(project) for project in data.get("projects", [])]
    logger.info(f"Loaded {len(roster)} team members and {len(projects)} projects from {path}")
    return roster, projects


async def run_parse(args, roster, projects) -> Dict[str, Any]:
    extractor = TaskExtractor(timezone=args.timezone, use_ai=not args.no_ai)
    parse_roster = filter_roster(roster, exclude_roles(Role.AGENT))
    batch = await extractor.extract_tasks(args.text, parse_roster, projects)
    return batch.to_dict()


async def run_triage(args, roster) -> Dict[str, Any]:
    triager = EmailTriager(team_name=args.team_name, timezone=args.timezone, use_ai=not args.no_ai)
    sender_name = args.from_name or args.from_email
    email = EmailMessage(
        from_email=args.from_email,
        from_name=sender_name,
        subject=args.subject,
        body=args.body,
    )
    try:
        result = await triager.triage_email(email, roster)
    except TriageError as e:
        logger.error(f"Triage failed, using generic reply: {e}")
        return {
            "triage": None,
            "draft_reply": build_generic_reply(sender_name, triager.team_name),
            "reply_subject": reply_subject(args.subject),
            "parser": "template",
        }

    member = resolve_member_for_role(result.assignee_role, roster)
    return {
        "triage": result.to_dict(),
        "assignee": {"id": member.id, "name": member.name} if member else None,
        "draft_reply": result.draft_reply,
        "reply_subject": reply_subject(args.subject),
        "parser": "ai",
    }


def main(argv=None) -> int:
    load_dotenv()
    args = parse_arguments(argv)
    setup_logging(args.log_level, log_file=LOGS_DIR / 'main.log')

    try:
        roster, projects = load_team(args.team)
    except (OSError, json.JSONDecodeError, KeyError) as e:
        logger.error(f"Could not load team file {args.team}: {e}")
        return 2

    try:
        if args.command == "parse":
            output = asyncio.run(run_parse(args, roster, projects))
        else:
            output = asyncio.run(run_triage(args, roster))
    except ValueError as e:
        logger.error(str(e))
        return 2

    print(json.dumps(output, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
