"""Pydantic schemas for API request/response models."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from taskpay.domain.types import (
    AccountStatus,
    PaymentMethod,
    PaymentStatus,
    TaskStatus,
    UserRole,
    WithdrawalStatus,
)


class ErrorResponse(BaseModel):
    """Schema for error response."""

    detail: str
    code: str | None = None
    fields: list[str] | None = None


# ============================================================================
# Task schemas
# ============================================================================


class SubTaskIn(BaseModel):
    """Batch item as submitted by an administrator."""

    title: str
    amount: Decimal | None = None
    description: str = ""
    id: str | None = None


class SubTaskResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    amount: Decimal


class TaskWrite(BaseModel):
    """Schema for creating or editing a task."""

    title: str = ""
    location: str = ""
    scheduled_date: datetime | None = None
    end_date: datetime | None = None
    amount: Decimal | None = None
    description: str = ""
    payment_method: PaymentMethod = PaymentMethod.CASH
    is_batch: bool = False
    sub_tasks: list[SubTaskIn] = Field(default_factory=list)


class TaskResponse(BaseModel):
    """Schema for task response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    amount: Decimal
    scheduled_date: datetime
    end_date: datetime | None = None
    location: str
    status: TaskStatus
    payment_method: PaymentMethod
    created_by: str
    created_at: datetime
    assigned_to: str | None = None
    is_batch: bool
    sub_tasks: list[SubTaskResponse]
    completion_photo: str | None = None
    completion_location_verified: bool
    rejection_reason: str | None = None


class TaskListResponse(BaseModel):
    items: list[TaskResponse]
    total: int


class ProofSubmit(BaseModel):
    """Completion proof: a data URI or base64 photo plus the location check."""

    photo: str | None = None
    location_verified: bool = False


class DeclineRequest(BaseModel):
    reason: str = ""


class PaymentRequestResponse(BaseModel):
    """Schema for a released payment."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    task_id: str
    employee_id: str
    amount: Decimal
    method: PaymentMethod
    payment_details_snapshot: str
    status: PaymentStatus
    created_at: datetime
    paid_at: datetime | None = None


class PaymentRequestListResponse(BaseModel):
    items: list[PaymentRequestResponse]
    total: int


class ConfirmResponse(BaseModel):
    task: TaskResponse
    payment_request: PaymentRequestResponse


# ============================================================================
# Withdrawal schemas
# ============================================================================


class WithdrawalCreate(BaseModel):
    amount: Decimal
    method: PaymentMethod | None = None


class WithdrawalProcess(BaseModel):
    """Admin decision on a pending withdrawal."""

    outcome: str
    receipt_image: str | None = None
    rejection_reason: str | None = None


class WithdrawalResponse(BaseModel):
    """Schema for withdrawal response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    employee_id: str
    amount: Decimal
    status: WithdrawalStatus
    created_at: datetime
    method_snapshot: str
    processed_at: datetime | None = None
    receipt_image: str | None = None
    rejection_reason: str | None = None


class WithdrawalListResponse(BaseModel):
    items: list[WithdrawalResponse]
    total: int


# ============================================================================
# Account schemas
# ============================================================================


class LoginRequest(BaseModel):
    email: str


class RegisterRequest(BaseModel):
    """Self-registration of a new employee."""

    name: str = ""
    email: str = ""
    contact: str = ""
    wallet_identifier: str = ""
    wallet_holder_name: str = ""


class RejectRequest(BaseModel):
    reason: str | None = None


class ProfileUpdate(BaseModel):
    name: str
    contact: str = ""
    avatar: str | None = None


class PaymentProfileWrite(BaseModel):
    default_method: str
    wallet_provider: str | None = None
    wallet_identifier: str | None = None
    wallet_holder_name: str | None = None


class PaymentProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    default_method: PaymentMethod
    wallet_provider: str | None = None
    wallet_identifier: str | None = None
    wallet_holder_name: str | None = None


class UserResponse(BaseModel):
    """Schema for user response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    role: UserRole
    contact: str
    account_status: AccountStatus
    avatar: str | None = None
    rejection_reason: str | None = None


class UserListResponse(BaseModel):
    items: list[UserResponse]
    total: int


class AccountResponse(BaseModel):
    """User plus payout profile."""

    user: UserResponse
    profile: PaymentProfileResponse | None = None


# ============================================================================
# Balance schemas
# ============================================================================


class BalanceResponse(BaseModel):
    """Per-employee balance; ``available`` may be negative."""

    model_config = ConfigDict(from_attributes=True)

    employee_id: str
    total_earned: Decimal
    total_withdrawn: Decimal
    pending_withdrawals: Decimal
    available: Decimal
    display_available: Decimal


class FleetSummaryResponse(BaseModel):
    """Admin dashboard figures."""

    model_config = ConfigDict(from_attributes=True)

    total_distributed: Decimal
    total_paid_withdrawals: Decimal
    total_pending_payouts: Decimal
    tasks_awaiting_confirmation: int
    pending_withdrawal_count: int
    pending_account_count: int
