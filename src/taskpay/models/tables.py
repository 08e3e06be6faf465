"""Tables backing the tracker collections."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, Boolean, CheckConstraint, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from taskpay.models.base import Base, TimestampMixin


class UserRow(Base, TimestampMixin):
    """Identity record with its account application status."""

    __tablename__ = "app_user"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    role: Mapped[str] = mapped_column(String(16), nullable=False)
    contact: Mapped[str] = mapped_column(String, nullable=False, default="")
    account_status: Mapped[str] = mapped_column(String(16), nullable=False)
    avatar: Mapped[str | None] = mapped_column(Text, nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("role IN ('ADMIN', 'EMPLOYEE')", name="app_user_role_check"),
        CheckConstraint(
            "account_status IN ('PENDING', 'APPROVED', 'REJECTED')",
            name="app_user_account_status_check",
        ),
    )


class PaymentProfileRow(Base, TimestampMixin):
    """Payout destination; one row per user."""

    __tablename__ = "payment_profile"

    user_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("app_user.id", ondelete="CASCADE"),
        primary_key=True,
    )
    default_method: Mapped[str] = mapped_column(String(16), nullable=False)
    wallet_provider: Mapped[str | None] = mapped_column(String, nullable=True)
    wallet_identifier: Mapped[str | None] = mapped_column(String, nullable=True)
    wallet_holder_name: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "default_method IN ('CASH', 'EWALLET')",
            name="payment_profile_method_check",
        ),
    )


class TaskRow(Base, TimestampMixin):
    """Unit of paid work; batch items live in the sub_tasks JSON column."""

    __tablename__ = "task"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    scheduled_date: Mapped[datetime] = mapped_column(nullable=False)
    end_date: Mapped[datetime | None] = mapped_column(nullable=True)
    location: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    payment_method: Mapped[str] = mapped_column(String(16), nullable=False)
    created_by: Mapped[str] = mapped_column(
        String(64), ForeignKey("app_user.id"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(nullable=False)
    assigned_to: Mapped[str | None] = mapped_column(
        String(64), ForeignKey("app_user.id"), nullable=True
    )
    is_batch: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    sub_tasks: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    completion_photo: Mapped[str | None] = mapped_column(Text, nullable=True)
    completion_location_verified: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('OPEN', 'IN_PROGRESS', 'DONE', 'PAID')",
            name="task_status_check",
        ),
        CheckConstraint("amount >= 0", name="task_amount_check"),
    )


class PaymentRequestRow(Base, TimestampMixin):
    """Released payment for a confirmed task.

    task_id carries no foreign key: payouts stay on record after their
    task is deleted.
    """

    __tablename__ = "payment_request"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    task_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    employee_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("app_user.id"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    method: Mapped[str] = mapped_column(String(16), nullable=False)
    payment_details_snapshot: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    created_at: Mapped[datetime] = mapped_column(nullable=False)
    paid_at: Mapped[datetime | None] = mapped_column(nullable=True)


class WithdrawalRow(Base, TimestampMixin):
    """Employee cash-out request."""

    __tablename__ = "withdrawal_request"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    employee_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("app_user.id"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    created_at: Mapped[datetime] = mapped_column(nullable=False)
    method_snapshot: Mapped[str] = mapped_column(Text, nullable=False)
    processed_at: Mapped[datetime | None] = mapped_column(nullable=True)
    receipt_image: Mapped[str | None] = mapped_column(Text, nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('PENDING', 'APPROVED', 'REJECTED', 'PAID')",
            name="withdrawal_request_status_check",
        ),
        CheckConstraint("amount > 0", name="withdrawal_request_amount_check"),
    )
