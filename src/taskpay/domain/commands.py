"""Command variants, one per user intent.

Each engine exposes a single ``handle(ctx, command, snapshot)`` entry point
that dispatches on the command's type.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from taskpay.domain.types import PaymentMethod, WithdrawalStatus


@dataclass(frozen=True)
class SubTaskDraft:
    """Sub-task fields as entered by an admin (id assigned on save)."""

    title: str
    amount: Decimal
    description: str = ""
    id: str | None = None


# Tasks


@dataclass(frozen=True)
class CreateTask:
    title: str
    location: str
    scheduled_date: datetime
    amount: Decimal | None = None
    description: str = ""
    payment_method: PaymentMethod = PaymentMethod.CASH
    is_batch: bool = False
    sub_tasks: tuple[SubTaskDraft, ...] = ()
    end_date: datetime | None = None


@dataclass(frozen=True)
class EditTask:
    task_id: str
    title: str
    location: str
    scheduled_date: datetime
    amount: Decimal | None = None
    description: str = ""
    payment_method: PaymentMethod = PaymentMethod.CASH
    sub_tasks: tuple[SubTaskDraft, ...] = ()
    end_date: datetime | None = None


@dataclass(frozen=True)
class DeleteTask:
    task_id: str


@dataclass(frozen=True)
class ClaimTask:
    task_id: str


@dataclass(frozen=True)
class SubmitProof:
    """Photo may be raw bytes or a data URI; the tracker moves it to the image store."""

    task_id: str
    photo: str | bytes | None
    location_verified: bool


@dataclass(frozen=True)
class ConfirmTask:
    task_id: str


@dataclass(frozen=True)
class DeclineTask:
    task_id: str
    reason: str


# Withdrawals


@dataclass(frozen=True)
class CreateWithdrawal:
    amount: Decimal
    method: PaymentMethod | None = None


@dataclass(frozen=True)
class ProcessWithdrawal:
    withdrawal_id: str
    outcome: WithdrawalStatus
    receipt_image: str | bytes | None = None
    rejection_reason: str | None = None


# Accounts


@dataclass(frozen=True)
class ApproveAccount:
    user_id: str


@dataclass(frozen=True)
class RejectAccount:
    user_id: str
    reason: str | None = None


@dataclass(frozen=True)
class RegisterEmployee:
    name: str
    email: str
    contact: str
    wallet_identifier: str
    wallet_holder_name: str


@dataclass(frozen=True)
class UpdateProfile:
    name: str
    contact: str
    avatar: str | bytes | None = None


@dataclass(frozen=True)
class SavePaymentProfile:
    default_method: PaymentMethod
    wallet_provider: str | None = None
    wallet_identifier: str | None = None
    wallet_holder_name: str | None = None


TaskCommand = CreateTask | EditTask | DeleteTask | ClaimTask | SubmitProof | ConfirmTask | DeclineTask
WithdrawalCommand = CreateWithdrawal | ProcessWithdrawal
AccountCommand = ApproveAccount | RejectAccount | RegisterEmployee | UpdateProfile | SavePaymentProfile
