"""Tests for task, withdrawal and account state machines."""

import pytest

from taskpay.domain import AccountStatus, IllegalTransitionError, TaskStatus, WithdrawalStatus
from taskpay.services.state_machine import (
    AccountStateMachine,
    TaskStateMachine,
    WithdrawalStateMachine,
)


class TestTaskStateMachine:
    """Test task transitions."""

    def test_valid_transitions(self):
        # claim, submit, confirm, decline
        assert TaskStateMachine.can_transition(TaskStatus.OPEN, TaskStatus.IN_PROGRESS) is True
        assert TaskStateMachine.can_transition(TaskStatus.IN_PROGRESS, TaskStatus.DONE) is True
        assert TaskStateMachine.can_transition(TaskStatus.DONE, TaskStatus.PAID) is True
        assert TaskStateMachine.can_transition(TaskStatus.DONE, TaskStatus.IN_PROGRESS) is True

    def test_invalid_transitions(self):
        # Can't skip review
        assert TaskStateMachine.can_transition(TaskStatus.OPEN, TaskStatus.PAID) is False
        assert TaskStateMachine.can_transition(TaskStatus.IN_PROGRESS, TaskStatus.PAID) is False

        # No way back to OPEN
        assert TaskStateMachine.can_transition(TaskStatus.IN_PROGRESS, TaskStatus.OPEN) is False

        # PAID is terminal
        assert TaskStateMachine.can_transition(TaskStatus.PAID, TaskStatus.DONE) is False
        assert TaskStateMachine.is_terminal(TaskStatus.PAID) is True

    def test_plain_strings_match_enum_members(self):
        assert TaskStateMachine.can_transition("DONE", "PAID") is True

    def test_validate_transition_raises(self):
        with pytest.raises(IllegalTransitionError) as exc_info:
            TaskStateMachine.validate_transition(TaskStatus.OPEN, TaskStatus.PAID, "task is not done")

        assert exc_info.value.from_status == "OPEN"
        assert exc_info.value.to_status == "PAID"
        assert exc_info.value.reason == "task is not done"
        assert exc_info.value.code == "ILLEGAL_TRANSITION"

    def test_is_decline(self):
        assert TaskStateMachine.is_decline(TaskStatus.DONE, TaskStatus.IN_PROGRESS) is True
        assert TaskStateMachine.is_decline(TaskStatus.OPEN, TaskStatus.IN_PROGRESS) is False

    def test_can_edit(self):
        assert TaskStateMachine.can_edit(TaskStatus.OPEN) is True
        assert TaskStateMachine.can_edit(TaskStatus.DONE) is True
        assert TaskStateMachine.can_edit(TaskStatus.PAID) is False

    def test_get_next_statuses(self):
        assert TaskStateMachine.get_next_statuses(TaskStatus.DONE) == [
            TaskStatus.PAID,
            TaskStatus.IN_PROGRESS,
        ]
        assert TaskStateMachine.get_next_statuses(TaskStatus.PAID) == []


class TestWithdrawalStateMachine:
    def test_pending_resolves_to_paid_or_rejected(self):
        assert WithdrawalStateMachine.can_transition(
            WithdrawalStatus.PENDING, WithdrawalStatus.PAID
        )
        assert WithdrawalStateMachine.can_transition(
            WithdrawalStatus.PENDING, WithdrawalStatus.REJECTED
        )

    def test_approved_is_unreachable(self):
        for status in WithdrawalStatus:
            assert not WithdrawalStateMachine.can_transition(status, WithdrawalStatus.APPROVED)
        assert WithdrawalStateMachine.is_terminal(WithdrawalStatus.APPROVED)

    @pytest.mark.parametrize(
        "status", [WithdrawalStatus.PAID, WithdrawalStatus.REJECTED]
    )
    def test_processed_requests_are_terminal(self, status):
        assert WithdrawalStateMachine.is_terminal(status)
        with pytest.raises(IllegalTransitionError):
            WithdrawalStateMachine.validate_transition(status, WithdrawalStatus.PAID)


class TestAccountStateMachine:
    def test_pending_can_be_reviewed(self):
        assert AccountStateMachine.get_next_statuses(AccountStatus.PENDING) == [
            AccountStatus.APPROVED,
            AccountStatus.REJECTED,
        ]

    def test_no_reinstatement(self):
        assert not AccountStateMachine.can_transition(
            AccountStatus.REJECTED, AccountStatus.APPROVED
        )
        assert not AccountStateMachine.can_transition(
            AccountStatus.APPROVED, AccountStatus.PENDING
        )
