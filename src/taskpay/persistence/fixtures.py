"""Demo data for the offline prototype and the seed script."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from taskpay.domain.context import utcnow
from taskpay.domain.types import (
    AccountStatus,
    PaymentMethod,
    PaymentProfile,
    Snapshot,
    Task,
    TaskStatus,
    User,
    UserRole,
)

ADMIN_ID = "1"
EMPLOYEE_ID = "2"


def demo_snapshot(now: datetime | None = None) -> Snapshot:
    """One admin, one approved employee with a GCash wallet, one open task."""
    now = now or utcnow()
    return Snapshot(
        users=(
            User(
                id=ADMIN_ID,
                name="Alex Admin",
                email="admin@fnds.com",
                role=UserRole.ADMIN,
                contact="+123456789",
                account_status=AccountStatus.APPROVED,
            ),
            User(
                id=EMPLOYEE_ID,
                name="John Doe",
                email="john@fnds.com",
                role=UserRole.EMPLOYEE,
                contact="+987654321",
                account_status=AccountStatus.APPROVED,
            ),
        ),
        tasks=(
            Task(
                id="t1",
                title="Warehouse Inventory",
                description="Count and log all incoming stock in Section A.",
                amount=Decimal("150.00"),
                scheduled_date=now,
                location="Site A",
                status=TaskStatus.OPEN,
                created_by=ADMIN_ID,
                created_at=now,
                payment_method=PaymentMethod.CASH,
            ),
        ),
        profiles=(
            PaymentProfile(
                user_id=EMPLOYEE_ID,
                default_method=PaymentMethod.EWALLET,
                wallet_provider="GCash",
                wallet_identifier="09171234567",
                wallet_holder_name="John Doe",
            ),
        ),
    )
