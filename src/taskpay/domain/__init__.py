"""Domain model: entities, commands, context, errors and results."""

from taskpay.domain.commands import (
    ApproveAccount,
    ClaimTask,
    ConfirmTask,
    CreateTask,
    CreateWithdrawal,
    DeclineTask,
    DeleteTask,
    EditTask,
    ProcessWithdrawal,
    RegisterEmployee,
    RejectAccount,
    SavePaymentProfile,
    SubmitProof,
    SubTaskDraft,
    UpdateProfile,
)
from taskpay.domain.context import ActorContext, new_id, utcnow
from taskpay.domain.errors import (
    AuthorizationError,
    IllegalTransitionError,
    NotFoundError,
    StorageUnavailable,
    TaskPayError,
    ValidationError,
)
from taskpay.domain.result import Failure, Result, Success
from taskpay.domain.types import (
    AccountStatus,
    PaymentMethod,
    PaymentProfile,
    PaymentRequest,
    PaymentStatus,
    Snapshot,
    SubTask,
    Task,
    TaskStatus,
    User,
    UserRole,
    WithdrawalRequest,
    WithdrawalStatus,
)

__all__ = [
    # Types
    "AccountStatus",
    "PaymentMethod",
    "PaymentProfile",
    "PaymentRequest",
    "PaymentStatus",
    "Snapshot",
    "SubTask",
    "Task",
    "TaskStatus",
    "User",
    "UserRole",
    "WithdrawalRequest",
    "WithdrawalStatus",
    # Commands
    "ApproveAccount",
    "ClaimTask",
    "ConfirmTask",
    "CreateTask",
    "CreateWithdrawal",
    "DeclineTask",
    "DeleteTask",
    "EditTask",
    "ProcessWithdrawal",
    "RegisterEmployee",
    "RejectAccount",
    "SavePaymentProfile",
    "SubmitProof",
    "SubTaskDraft",
    "UpdateProfile",
    # Context
    "ActorContext",
    "new_id",
    "utcnow",
    # Errors
    "AuthorizationError",
    "IllegalTransitionError",
    "NotFoundError",
    "StorageUnavailable",
    "TaskPayError",
    "ValidationError",
    # Results
    "Failure",
    "Result",
    "Success",
]
