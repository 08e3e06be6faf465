"""Tracker services: lifecycle engines, balance accounting and dispatch."""

from taskpay.services.account_engine import AccountEngine, AccountOutcome, authorize_session
from taskpay.services.accounting import (
    BalanceSummary,
    FleetSummary,
    available_balance,
    display_balance,
    employee_balance,
    fleet_summary,
    pending_withdrawals,
    total_distributed,
    total_earned,
    total_pending_payouts,
    total_withdrawn,
)
from taskpay.services.state_machine import (
    AccountStateMachine,
    StateMachine,
    TaskStateMachine,
    WithdrawalStateMachine,
)
from taskpay.services.task_engine import TaskEngine, TaskOutcome
from taskpay.services.tracker import TrackerService
from taskpay.services.withdrawal_engine import WithdrawalEngine

__all__ = [
    "AccountEngine",
    "AccountOutcome",
    "AccountStateMachine",
    "BalanceSummary",
    "FleetSummary",
    "StateMachine",
    "TaskEngine",
    "TaskOutcome",
    "TaskStateMachine",
    "TrackerService",
    "WithdrawalEngine",
    "WithdrawalStateMachine",
    "authorize_session",
    "available_balance",
    "display_balance",
    "employee_balance",
    "fleet_summary",
    "pending_withdrawals",
    "total_distributed",
    "total_earned",
    "total_pending_payouts",
    "total_withdrawn",
]
