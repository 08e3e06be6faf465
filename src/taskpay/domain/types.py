"""Domain entities and status enumerations."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Iterable


class UserRole(str, Enum):
    """User roles."""

    ADMIN = "ADMIN"
    EMPLOYEE = "EMPLOYEE"


class AccountStatus(str, Enum):
    """Employee account application status."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class TaskStatus(str, Enum):
    """Task lifecycle status values."""

    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"
    PAID = "PAID"


class PaymentStatus(str, Enum):
    """Payment request status values."""

    PENDING = "PENDING"
    PAID = "PAID"


class WithdrawalStatus(str, Enum):
    """Withdrawal request status values.

    APPROVED is part of the stored vocabulary but no transition produces it.
    """

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    PAID = "PAID"


class PaymentMethod(str, Enum):
    """Payout methods."""

    CASH = "CASH"
    EWALLET = "EWALLET"


@dataclass(frozen=True)
class User:
    """Identity record."""

    id: str
    name: str
    email: str
    role: UserRole
    contact: str
    account_status: AccountStatus
    avatar: str | None = None
    rejection_reason: str | None = None

    @property
    def is_approved(self) -> bool:
        """Admins are implicitly approved; employees need an APPROVED application."""
        return self.role == UserRole.ADMIN or self.account_status == AccountStatus.APPROVED

    def has_email(self, email: str) -> bool:
        return self.email.strip().lower() == (email or "").strip().lower()


@dataclass(frozen=True)
class PaymentProfile:
    """Payout destination for a user (one per user)."""

    user_id: str
    default_method: PaymentMethod
    wallet_provider: str | None = None
    wallet_identifier: str | None = None  # account number
    wallet_holder_name: str | None = None

    def wallet_descriptor(self) -> str:
        """Human-readable e-wallet destination, e.g. 'GCash: 0917...'."""
        provider = self.wallet_provider or "E-Wallet"
        identifier = self.wallet_identifier or "..."
        return f"{provider}: {identifier}"


@dataclass(frozen=True)
class SubTask:
    """Item of a batch task. Has no lifecycle of its own."""

    id: str
    title: str
    description: str
    amount: Decimal


@dataclass(frozen=True)
class Task:
    """Unit of paid work."""

    id: str
    title: str
    description: str
    amount: Decimal
    scheduled_date: datetime
    location: str
    status: TaskStatus
    created_by: str
    created_at: datetime
    payment_method: PaymentMethod = PaymentMethod.CASH
    assigned_to: str | None = None
    is_batch: bool = False
    sub_tasks: tuple[SubTask, ...] = ()
    completion_photo: str | None = None
    completion_location_verified: bool = False
    rejection_reason: str | None = None
    end_date: datetime | None = None

    def with_sub_tasks(self, sub_tasks: Iterable[SubTask]) -> Task:
        """Return a batch copy whose amount is recomputed from the given items."""
        items = tuple(sub_tasks)
        return replace(
            self,
            is_batch=True,
            sub_tasks=items,
            amount=sum((s.amount for s in items), Decimal("0")),
        )


@dataclass(frozen=True)
class PaymentRequest:
    """Released payment for one confirmed task. Never mutated after creation."""

    id: str
    task_id: str
    employee_id: str
    amount: Decimal
    method: PaymentMethod
    payment_details_snapshot: str
    status: PaymentStatus
    created_at: datetime
    paid_at: datetime | None = None


@dataclass(frozen=True)
class WithdrawalRequest:
    """Employee-initiated cash-out against accumulated earnings."""

    id: str
    employee_id: str
    amount: Decimal
    status: WithdrawalStatus
    created_at: datetime
    method_snapshot: str
    processed_at: datetime | None = None
    receipt_image: str | None = None
    rejection_reason: str | None = None


@dataclass(frozen=True)
class Snapshot:
    """Point-in-time view of every collection an engine call reads."""

    users: tuple[User, ...] = ()
    tasks: tuple[Task, ...] = ()
    payment_requests: tuple[PaymentRequest, ...] = ()
    withdrawals: tuple[WithdrawalRequest, ...] = ()
    profiles: tuple[PaymentProfile, ...] = field(default_factory=tuple)

    def find_task(self, task_id: str) -> Task | None:
        return next((t for t in self.tasks if t.id == task_id), None)

    def find_user(self, user_id: str) -> User | None:
        return next((u for u in self.users if u.id == user_id), None)

    def find_user_by_email(self, email: str) -> User | None:
        return next((u for u in self.users if u.has_email(email)), None)

    def find_withdrawal(self, withdrawal_id: str) -> WithdrawalRequest | None:
        return next((w for w in self.withdrawals if w.id == withdrawal_id), None)

    def profile_for(self, user_id: str) -> PaymentProfile | None:
        # Last write wins if a store ever holds duplicates.
        found = None
        for profile in self.profiles:
            if profile.user_id == user_id:
                found = profile
        return found
