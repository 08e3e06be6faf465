"""Domain event types for committed tracker operations.

All events are:
- Immutable (frozen dataclasses)
- Typed with explicit payloads
- Traceable via metadata
- Serializable for logging and notification fan-out
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID, uuid4


class EventCategory(str, Enum):
    """Event categories for routing and filtering."""

    TASK = "task"
    PAYMENT = "payment"
    WITHDRAWAL = "withdrawal"
    ACCOUNT = "account"


@dataclass(frozen=True)
class EventMetadata:
    """Metadata attached to every domain event."""

    event_id: UUID
    timestamp: datetime
    actor_id: str | None  # User that triggered; None for self-registration
    source_service: str = "tracker"
    version: int = 1

    @classmethod
    def create(
        cls,
        actor_id: str | None = None,
        timestamp: datetime | None = None,
        source_service: str = "tracker",
    ) -> EventMetadata:
        """Create metadata with auto-generated fields."""
        return cls(
            event_id=uuid4(),
            timestamp=timestamp or datetime.now(timezone.utc),
            actor_id=actor_id,
            source_service=source_service,
        )


@dataclass(frozen=True)
class DomainEvent:
    """Base class for all domain events."""

    metadata: EventMetadata

    @property
    def event_type(self) -> str:
        """Event type name for routing."""
        return self.__class__.__name__

    @property
    def category(self) -> EventCategory:
        """Event category for filtering."""
        raise NotImplementedError("Subclasses must define category")

    def to_dict(self) -> dict[str, Any]:
        """Serialize event to dictionary."""
        data = _serialize_dict(asdict(self))
        data["event_type"] = self.event_type
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


def _serialize_dict(obj: Any) -> Any:
    """Recursively serialize objects for JSON compatibility."""
    if isinstance(obj, dict):
        return {k: _serialize_dict(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [_serialize_dict(v) for v in obj]
    elif isinstance(obj, UUID):
        return str(obj)
    elif isinstance(obj, (datetime, date)):
        return obj.isoformat()
    elif isinstance(obj, Decimal):
        return str(obj)
    elif isinstance(obj, Enum):
        return obj.value
    return obj


# =============================================================================
# Task Events
# =============================================================================


@dataclass(frozen=True)
class TaskCreated(DomainEvent):
    task_id: str
    amount: Decimal
    is_batch: bool

    @property
    def category(self) -> EventCategory:
        return EventCategory.TASK


@dataclass(frozen=True)
class TaskEdited(DomainEvent):
    task_id: str
    amount: Decimal

    @property
    def category(self) -> EventCategory:
        return EventCategory.TASK


@dataclass(frozen=True)
class TaskDeleted(DomainEvent):
    task_id: str
    status: str

    @property
    def category(self) -> EventCategory:
        return EventCategory.TASK


@dataclass(frozen=True)
class TaskClaimed(DomainEvent):
    task_id: str
    employee_id: str

    @property
    def category(self) -> EventCategory:
        return EventCategory.TASK


@dataclass(frozen=True)
class ProofSubmitted(DomainEvent):
    task_id: str
    employee_id: str

    @property
    def category(self) -> EventCategory:
        return EventCategory.TASK


@dataclass(frozen=True)
class TaskDeclined(DomainEvent):
    task_id: str
    employee_id: str | None
    reason: str

    @property
    def category(self) -> EventCategory:
        return EventCategory.TASK


# =============================================================================
# Payment Events
# =============================================================================


@dataclass(frozen=True)
class PaymentReleased(DomainEvent):
    """A DONE task was confirmed and its payment request recorded."""

    task_id: str
    payment_request_id: str
    employee_id: str
    amount: Decimal
    method: str

    @property
    def category(self) -> EventCategory:
        return EventCategory.PAYMENT


# =============================================================================
# Withdrawal Events
# =============================================================================


@dataclass(frozen=True)
class WithdrawalRequested(DomainEvent):
    withdrawal_id: str
    employee_id: str
    amount: Decimal

    @property
    def category(self) -> EventCategory:
        return EventCategory.WITHDRAWAL


@dataclass(frozen=True)
class WithdrawalPaid(DomainEvent):
    withdrawal_id: str
    employee_id: str
    amount: Decimal

    @property
    def category(self) -> EventCategory:
        return EventCategory.WITHDRAWAL


@dataclass(frozen=True)
class WithdrawalRejected(DomainEvent):
    withdrawal_id: str
    employee_id: str
    amount: Decimal
    reason: str

    @property
    def category(self) -> EventCategory:
        return EventCategory.WITHDRAWAL


# =============================================================================
# Account Events
# =============================================================================


@dataclass(frozen=True)
class EmployeeRegistered(DomainEvent):
    user_id: str
    email: str

    @property
    def category(self) -> EventCategory:
        return EventCategory.ACCOUNT


@dataclass(frozen=True)
class AccountApproved(DomainEvent):
    user_id: str

    @property
    def category(self) -> EventCategory:
        return EventCategory.ACCOUNT


@dataclass(frozen=True)
class AccountRejected(DomainEvent):
    user_id: str
    reason: str | None

    @property
    def category(self) -> EventCategory:
        return EventCategory.ACCOUNT


@dataclass(frozen=True)
class ProfileUpdated(DomainEvent):
    user_id: str

    @property
    def category(self) -> EventCategory:
        return EventCategory.ACCOUNT
