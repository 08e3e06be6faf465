"""Domain events emitted after committed tracker operations."""

from taskpay.events.emitter import EventEmitter, EventHandler, Unsubscribe, log_event
from taskpay.events.types import (
    AccountApproved,
    AccountRejected,
    DomainEvent,
    EmployeeRegistered,
    EventCategory,
    EventMetadata,
    PaymentReleased,
    ProfileUpdated,
    ProofSubmitted,
    TaskClaimed,
    TaskCreated,
    TaskDeclined,
    TaskDeleted,
    TaskEdited,
    WithdrawalPaid,
    WithdrawalRejected,
    WithdrawalRequested,
)

__all__ = [
    # Emitter
    "EventEmitter",
    "EventHandler",
    "Unsubscribe",
    "log_event",
    # Base
    "DomainEvent",
    "EventCategory",
    "EventMetadata",
    # Task
    "TaskCreated",
    "TaskEdited",
    "TaskDeleted",
    "TaskClaimed",
    "ProofSubmitted",
    "TaskDeclined",
    # Payment
    "PaymentReleased",
    # Withdrawal
    "WithdrawalRequested",
    "WithdrawalPaid",
    "WithdrawalRejected",
    # Account
    "EmployeeRegistered",
    "AccountApproved",
    "AccountRejected",
    "ProfileUpdated",
]
