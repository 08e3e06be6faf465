"""Balance accounting derived from payment and withdrawal history.

Every figure is recomputed from the full collections on each call. Passing
``employee_id=None`` gives the fleet-wide figure.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from taskpay.domain.types import (
    AccountStatus,
    PaymentRequest,
    PaymentStatus,
    Snapshot,
    TaskStatus,
    UserRole,
    WithdrawalRequest,
    WithdrawalStatus,
)

ZERO = Decimal("0")


def _sum_withdrawals(
    withdrawals: Iterable[WithdrawalRequest],
    status: WithdrawalStatus,
    employee_id: str | None,
) -> Decimal:
    return sum(
        (
            w.amount
            for w in withdrawals
            if w.status == status and (employee_id is None or w.employee_id == employee_id)
        ),
        ZERO,
    )


def total_earned(payments: Iterable[PaymentRequest], employee_id: str | None = None) -> Decimal:
    """Sum of PAID payment requests."""
    return sum(
        (
            p.amount
            for p in payments
            if p.status == PaymentStatus.PAID
            and (employee_id is None or p.employee_id == employee_id)
        ),
        ZERO,
    )


def total_withdrawn(
    withdrawals: Iterable[WithdrawalRequest], employee_id: str | None = None
) -> Decimal:
    """Sum of PAID withdrawals."""
    return _sum_withdrawals(withdrawals, WithdrawalStatus.PAID, employee_id)


def pending_withdrawals(
    withdrawals: Iterable[WithdrawalRequest], employee_id: str | None = None
) -> Decimal:
    """Sum of withdrawals still awaiting an admin decision."""
    return _sum_withdrawals(withdrawals, WithdrawalStatus.PENDING, employee_id)


def available_balance(
    payments: Iterable[PaymentRequest],
    withdrawals: Iterable[WithdrawalRequest],
    employee_id: str | None = None,
) -> Decimal:
    """Earned minus paid-out minus pending withdrawals.

    Exact; negative only if upstream invariants were violated. Use
    ``display_balance`` to clamp for presentation.
    """
    withdrawals = list(withdrawals)
    return (
        total_earned(payments, employee_id)
        - total_withdrawn(withdrawals, employee_id)
        - pending_withdrawals(withdrawals, employee_id)
    )


def display_balance(value: Decimal) -> Decimal:
    return value if value > ZERO else ZERO


def total_distributed(payments: Iterable[PaymentRequest]) -> Decimal:
    """Sum of PAID payment requests across all employees."""
    return total_earned(payments)


def total_pending_payouts(withdrawals: Iterable[WithdrawalRequest]) -> Decimal:
    """Sum of PENDING withdrawals across all employees."""
    return pending_withdrawals(withdrawals)


@dataclass(frozen=True)
class BalanceSummary:
    """Per-employee balance figures."""

    employee_id: str
    total_earned: Decimal
    total_withdrawn: Decimal
    pending_withdrawals: Decimal

    @property
    def available(self) -> Decimal:
        return self.total_earned - self.total_withdrawn - self.pending_withdrawals

    @property
    def display_available(self) -> Decimal:
        return display_balance(self.available)


@dataclass(frozen=True)
class FleetSummary:
    """Admin dashboard aggregates."""

    total_distributed: Decimal
    total_paid_withdrawals: Decimal
    total_pending_payouts: Decimal
    tasks_awaiting_confirmation: int
    pending_withdrawal_count: int
    pending_account_count: int


def employee_balance(snapshot: Snapshot, employee_id: str) -> BalanceSummary:
    return BalanceSummary(
        employee_id=employee_id,
        total_earned=total_earned(snapshot.payment_requests, employee_id),
        total_withdrawn=total_withdrawn(snapshot.withdrawals, employee_id),
        pending_withdrawals=pending_withdrawals(snapshot.withdrawals, employee_id),
    )


def fleet_summary(snapshot: Snapshot) -> FleetSummary:
    return FleetSummary(
        total_distributed=total_distributed(snapshot.payment_requests),
        total_paid_withdrawals=total_withdrawn(snapshot.withdrawals),
        total_pending_payouts=total_pending_payouts(snapshot.withdrawals),
        tasks_awaiting_confirmation=sum(
            1 for t in snapshot.tasks if t.status == TaskStatus.DONE
        ),
        pending_withdrawal_count=sum(
            1 for w in snapshot.withdrawals if w.status == WithdrawalStatus.PENDING
        ),
        pending_account_count=sum(
            1
            for u in snapshot.users
            if u.role == UserRole.EMPLOYEE and u.account_status == AccountStatus.PENDING
        ),
    )
