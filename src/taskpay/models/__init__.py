"""SQLAlchemy ORM models for the task tracker."""

from taskpay.models.base import Base, TimestampMixin
from taskpay.models.tables import (
    PaymentProfileRow,
    PaymentRequestRow,
    TaskRow,
    UserRow,
    WithdrawalRow,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "UserRow",
    "PaymentProfileRow",
    "TaskRow",
    "PaymentRequestRow",
    "WithdrawalRow",
]
