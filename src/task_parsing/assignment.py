"""
Policy for tasks the extractor could not assign.

The extractor leaves ``assignee_id`` as None when no roster member fits.
Callers decide what that means for their surface; the policy is applied
after extraction, so extractor output only ever references roster ids.
"""

import logging
from dataclasses import replace
from enum import Enum
from typing import Optional

from src.task_parsing.models import ParsedTaskBatch

logger = logging.getLogger(__name__)


class UnassignedPolicy(str, Enum):
    LEAVE_UNASSIGNED = "leave_unassigned"
    PLACEHOLDER = "placeholder"
    REQUESTING_USER = "requesting_user"


def apply_unassigned_policy(
    batch: ParsedTaskBatch,
    policy: UnassignedPolicy,
    requesting_user_id: Optional[str] = None,
    placeholder_id: Optional[str] = None
) -> ParsedTaskBatch:
    """
    Fill in unassigned tasks according to ``policy``.

    Args:
        batch: Extractor output
        policy: How to treat ``assignee_id is None``
        requesting_user_id: Used by REQUESTING_USER
        placeholder_id: Used by PLACEHOLDER; must not be a real user id

    Returns:
        A new batch; the input is not modified
    """
    if policy == UnassignedPolicy.LEAVE_UNASSIGNED:
        return batch

    if policy == UnassignedPolicy.REQUESTING_USER:
        fill = requesting_user_id
    else:
        fill = placeholder_id

    if not fill:
        logger.warning(f"Unassigned policy '{policy.value}' has no id to apply, leaving tasks unassigned")
        return batch

    unassigned = sum(1 for task in batch.tasks if task.assignee_id is None)
    if unassigned:
        logger.info(f"Applying '{policy.value}' policy to {unassigned} unassigned task(s)")

    tasks = [
        replace(task, assignee_id=fill) if task.assignee_id is None else task
        for task in batch.tasks
    ]
    return replace(batch, tasks=tasks)
