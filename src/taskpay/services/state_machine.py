"""Status state machines with transition validation."""

from __future__ import annotations

from enum import Enum
from typing import ClassVar

from taskpay.domain.errors import IllegalTransitionError
from taskpay.domain.types import AccountStatus, TaskStatus, WithdrawalStatus


class StateMachine:
    """Table-driven transition checks.

    Subclasses define VALID_TRANSITIONS as {from_status: [allowed_to_statuses]}.
    A status with an empty list is terminal.
    """

    VALID_TRANSITIONS: ClassVar[dict[Enum, list[Enum]]] = {}

    @classmethod
    def can_transition(cls, from_status: Enum | str, to_status: Enum | str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(from_status, [])
        return to_status in allowed

    @classmethod
    def validate_transition(
        cls,
        from_status: Enum | str,
        to_status: Enum | str,
        reason: str | None = None,
    ) -> None:
        """Validate a transition, raising IllegalTransitionError if invalid."""
        if not cls.can_transition(from_status, to_status):
            raise IllegalTransitionError(from_status, to_status, reason)

    @classmethod
    def get_next_statuses(cls, current_status: Enum | str) -> list[Enum]:
        """Get list of valid next statuses from current status."""
        return list(cls.VALID_TRANSITIONS.get(current_status, []))

    @classmethod
    def is_terminal(cls, status: Enum | str) -> bool:
        return not cls.VALID_TRANSITIONS.get(status)


class TaskStateMachine(StateMachine):
    """Task transitions.

    Allowed transitions:
    - OPEN → IN_PROGRESS (claim)
    - IN_PROGRESS → DONE (submit proof)
    - DONE → PAID (confirm)
    - DONE → IN_PROGRESS (decline)
    """

    VALID_TRANSITIONS = {
        TaskStatus.OPEN: [TaskStatus.IN_PROGRESS],
        TaskStatus.IN_PROGRESS: [TaskStatus.DONE],
        TaskStatus.DONE: [TaskStatus.PAID, TaskStatus.IN_PROGRESS],
        TaskStatus.PAID: [],  # Terminal state
    }

    # Statuses in which an admin may still edit the task's fields
    EDITABLE = {
        TaskStatus.OPEN,
        TaskStatus.IN_PROGRESS,
        TaskStatus.DONE,
    }

    @classmethod
    def is_decline(cls, from_status: TaskStatus, to_status: TaskStatus) -> bool:
        """Check if this transition sends a submission back for rework."""
        return from_status == TaskStatus.DONE and to_status == TaskStatus.IN_PROGRESS

    @classmethod
    def can_edit(cls, status: TaskStatus) -> bool:
        return status in cls.EDITABLE


class WithdrawalStateMachine(StateMachine):
    """Withdrawal transitions.

    Allowed transitions:
    - PENDING → PAID
    - PENDING → REJECTED

    APPROVED exists as a stored status with no inbound or outbound transitions.
    """

    VALID_TRANSITIONS = {
        WithdrawalStatus.PENDING: [WithdrawalStatus.PAID, WithdrawalStatus.REJECTED],
        WithdrawalStatus.APPROVED: [],
        WithdrawalStatus.REJECTED: [],
        WithdrawalStatus.PAID: [],
    }


class AccountStateMachine(StateMachine):
    """Employee account application transitions.

    Allowed transitions:
    - PENDING → APPROVED
    - PENDING → REJECTED

    There is no reinstatement path; both outcomes are terminal.
    """

    VALID_TRANSITIONS = {
        AccountStatus.PENDING: [AccountStatus.APPROVED, AccountStatus.REJECTED],
        AccountStatus.APPROVED: [],
        AccountStatus.REJECTED: [],
    }
