"""
Unit tests for the unassigned-task policy.
"""

from src.task_parsing.assignment import UnassignedPolicy, apply_unassigned_policy
from src.task_parsing.models import ParsedTask, ParsedTaskBatch


def _batch():
    return ParsedTaskBatch(
        tasks=[ParsedTask(title="Assigned", assignee_id="u1"), ParsedTask(title="Open")],
        confidence=0.8,
    )


class TestApplyUnassignedPolicy:

    def test_leave_unassigned(self):
        batch = _batch()
        assert apply_unassigned_policy(batch, UnassignedPolicy.LEAVE_UNASSIGNED) is batch

    def test_placeholder(self):
        result = apply_unassigned_policy(_batch(), UnassignedPolicy.PLACEHOLDER, placeholder_id="unassigned")
        assert [task.assignee_id for task in result.tasks] == ["u1", "unassigned"]

    def test_requesting_user(self):
        result = apply_unassigned_policy(_batch(), UnassignedPolicy.REQUESTING_USER, requesting_user_id="u3")
        assert [task.assignee_id for task in result.tasks] == ["u1", "u3"]

    def test_requesting_user_missing_leaves_unassigned(self):
        result = apply_unassigned_policy(_batch(), UnassignedPolicy.REQUESTING_USER)
        assert result.tasks[1].assignee_id is None

    def test_input_not_modified(self):
        batch = _batch()
        result = apply_unassigned_policy(batch, UnassignedPolicy.PLACEHOLDER, placeholder_id="x")
        assert batch.tasks[1].assignee_id is None
        assert result.confidence == batch.confidence
        assert result.parser == batch.parser
