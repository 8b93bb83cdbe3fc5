"""
Prompt construction for the task parser and the email triage agent.

Both builders are pure functions of their inputs. The date is embedded
literally so the model can resolve relative due dates.
"""

import json
import logging
from datetime import date, datetime
from typing import Sequence

from src.config.parser_config import PARSER_CONFIG
from src.task_parsing.models import EmailMessage, ProjectRef, TeamMember
from src.task_parsing.roster import (
    ROLE_ROUTING_RULES,
    TRIAGE_ROUTING_RULES,
    format_projects,
    format_routing_rules,
    format_team_roster,
    format_triage_roster,
)

logger = logging.getLogger(__name__)


def build_task_prompt(
    roster: Sequence[TeamMember],
    projects: Sequence[ProjectRef],
    today: date
) -> str:
    """
    Build the system prompt for batch task extraction.

    Args:
        roster: Team members with roles and descriptions
        projects: Projects the model may file tasks under
        today: Temporal anchor for relative due dates

    Returns:
        System prompt text
    """
    if isinstance(today, datetime):
        today = today.date()
    max_tasks = PARSER_CONFIG["task_extractor"]["max_tasks"]

    prompt = f"""You are a task parser for a project management app called TaskBoard.
Given a natural language message, extract one or more structured tasks.

Today is {today.strftime("%A")}, {today.isoformat()}.

## Team Members
{format_team_roster(roster)}

## Role Definitions
{format_routing_rules(ROLE_ROUTING_RULES)}

Available projects:
{json.dumps(format_projects(projects))}

Return ONLY valid JSON (no markdown, no backticks) with this structure:
{{
  "tasks": [
    {{
      "title": "cleaned task title — the core action, without metadata phrases like 'assign to' or 'due tomorrow'",
      "assignee_id": "user id from the list above, or null if not specified",
      "project_id": "project id from the list above, or null if not specified",
      "due_at": "ISO 8601 date string (e.g. {today.isoformat()}T17:00:00.000Z) or null",
      "priority": 1-4 where 1=urgent 2=high 3=normal 4=low,
      "status": "backlog" | "doing" | "waiting" | "done",
      "confidence": 0.0-1.0
    }}
  ],
  "confidence": 0.0-1.0
}}

Rules:
- If the input describes multiple distinct actions or tasks, return one task per action. Examples:
  - "Review deck, draft proposal, and schedule meeting" → 3 tasks
  - "Send invoice and follow up with client about contract" → 2 tasks
  - "Finish the landing page" → 1 task
- If a shared assignee, due date, or project is mentioned once, apply it to ALL tasks
- If different assignees are specified per task (e.g. "assign X to Katie, Y to An"), respect individual assignments
- Maximum {max_tasks} tasks per input
- Match user names case-insensitively, accept first names, partial names, and nicknames
- Match project names case-insensitively, accept partial matches
- CRITICAL — SMART ASSIGNMENT: You MUST attempt to assign every task to the best-fit team member based on their ROLE and DESCRIPTION. Do NOT leave assignee_id as null if ANY team member's role matches the task type.
  - Bug fixes, coding, front-end, back-end, API work, deployment, engineering, website issues → assign to "development" role members
  - Design mockups, UI/UX, branding, graphics, illustration, layout → assign to "design" role members
  - Strategy, research, planning, positioning, competitive analysis → assign to "strategy" role members
  - Scheduling, coordination, budgets, timelines, general inquiries → assign to "pm" role members
  - Writing, blog posts, content creation, copywriting, editing → assign to "content_writer" role members
  - If the user explicitly names an assignee, always respect that — even if the role doesn't match
  - If no assignee is specified, ALWAYS check team member roles and descriptions for the best match
  - When multiple members share the same role, prefer the one whose DESCRIPTION best matches the task
  - Also check each member's DESCRIPTION for keywords (e.g., a member described as "front-end developer" should get front-end tasks)
  - Only leave assignee_id as null if the task is truly ambiguous AND no team member's role or description matches at all
- For due dates: "today" = today at 5 PM, "tomorrow" = tomorrow at 5 PM, "next week" = 7 days, "Friday" = next Friday at 5 PM, etc.
- Default priority is 3 (normal) unless urgency words like "urgent", "ASAP", "critical" appear (then 1)
- Default status is "doing" unless context suggests otherwise ("backlog" for vague ideas, "waiting" if blocked)
- confidence reflects how well you understood the request (1.0 = very clear, 0.5 = guessing)
- The top-level confidence is the overall confidence for the entire batch
- Strip metadata phrases from titles — keep only the actionable task description"""

    logger.debug(
        f"Built task prompt of length {len(prompt)} "
        f"({len(roster)} members, {len(projects)} projects)"
    )
    return prompt


def build_triage_prompt(
    email: EmailMessage,
    roster: Sequence[TeamMember],
    today: date,
    team_name: str,
    project_context: str = ""
) -> str:
    """
    Build the system prompt for classifying and routing one inbound email.

    The email body is truncated so very long threads stay within the
    model's input budget.
    """
    if isinstance(today, datetime):
        today = today.date()
    max_body = PARSER_CONFIG["email_triage"]["max_body_chars"]

    attachment_info = (
        f"\nAttachments: {', '.join(email.attachment_names)}"
        if email.attachment_names else ""
    )
    context_block = f"## Project Context\n{project_context}\n" if project_context else ""
    project_line = f"\nProject: {email.project_name}" if email.project_name else ""

    prompt = f"""You are an intelligent email triage agent for {team_name}, a creative agency.
Your job is to classify incoming client emails, route them to the right team member,
create a structured task, and draft a context-aware reply.

Today is {today.isoformat()}.

## Team Roster
{format_triage_roster(roster)}

## Role Routing Rules
{format_routing_rules(TRIAGE_ROUTING_RULES)}

{context_block}
## Email Being Triaged
From: {email.from_name} <{email.from_email}>
Subject: {email.subject}{project_line}
{attachment_info}

Body:
{email.body[:max_body]}

## Instructions
Classify this email and return ONLY valid JSON (no markdown, no backticks):
{{
  "category": "design" | "strategy" | "development" | "pm" | "general",
  "assignee_role": "design" | "strategy" | "development" | "pm" | "agent",
  "task_title": "concise actionable task title",
  "task_priority": 1-4 (1=urgent, 2=high, 3=normal, 4=low),
  "task_sections": [
    {{ "heading": "Goal", "content": "what needs to be accomplished" }},
    {{ "heading": "Deliverables", "content": "expected outputs" }},
    {{ "heading": "Context", "content": "relevant background from client history" }}
  ],
  "draft_reply": "professional reply to the client acknowledging their request, mentioning specific details from their email and from your knowledge of the project. Sign off as {team_name}.",
  "reasoning": "brief explanation of why you classified and routed this way",
  "confidence": 0.0-1.0
}}

Rules:
- Use project context to write informed, specific replies — not generic templates
- Reference past decisions, preferences, or brand guidelines when relevant
- The draft reply should feel personal and knowledgeable, not boilerplate
- task_sections should have 2-4 sections, always including "Goal"
- Priority 1 only for true emergencies; most client requests are 2-3
- If the email is unclear, set confidence < 0.7 and route to "pm" for manual review"""

    logger.debug(f"Built triage prompt of length {len(prompt)}")
    return prompt


def build_triage_user_message(email: EmailMessage) -> str:
    return f'Triage this email from {email.from_name} about: "{email.subject}"'
