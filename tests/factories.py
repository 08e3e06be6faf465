"""Entity builders shared by the test modules."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal

from taskpay.domain import (
    PaymentMethod,
    PaymentRequest,
    PaymentStatus,
    Snapshot,
    Task,
    TaskStatus,
    WithdrawalRequest,
    WithdrawalStatus,
)
from taskpay.persistence.fixtures import ADMIN_ID, EMPLOYEE_ID

NOW = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


def make_task(**overrides) -> Task:
    """Single task owned by the demo admin; fields overridable."""
    fields = dict(
        id="t-x",
        title="Inventory",
        description="",
        amount=Decimal("150"),
        scheduled_date=NOW,
        location="Site A",
        status=TaskStatus.OPEN,
        created_by=ADMIN_ID,
        created_at=NOW,
        payment_method=PaymentMethod.CASH,
    )
    fields.update(overrides)
    return Task(**fields)


def make_payment(amount: str, employee_id: str = EMPLOYEE_ID, **overrides) -> PaymentRequest:
    fields = dict(
        id=f"r-{amount}-{employee_id}",
        task_id="t-x",
        employee_id=employee_id,
        amount=Decimal(amount),
        method=PaymentMethod.CASH,
        payment_details_snapshot="Cash on Hand",
        status=PaymentStatus.PAID,
        created_at=NOW,
        paid_at=NOW,
    )
    fields.update(overrides)
    return PaymentRequest(**fields)


def make_withdrawal(
    amount: str,
    status: WithdrawalStatus = WithdrawalStatus.PENDING,
    employee_id: str = EMPLOYEE_ID,
    **overrides,
) -> WithdrawalRequest:
    fields = dict(
        id=f"w-{amount}-{status.value}",
        employee_id=employee_id,
        amount=Decimal(amount),
        status=status,
        created_at=NOW,
        method_snapshot="Cash",
    )
    fields.update(overrides)
    return WithdrawalRequest(**fields)


def with_collections(snapshot: Snapshot, **collections) -> Snapshot:
    """Copy of ``snapshot`` with the named collections replaced."""
    return replace(snapshot, **{k: tuple(v) for k, v in collections.items()})
