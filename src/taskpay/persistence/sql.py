"""SQLAlchemy-backed repository.

Rows are mapped to and from the frozen domain entities here; nothing
outside this module sees an ORM object.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Callable

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskpay.domain.errors import NotFoundError, StorageUnavailable
from taskpay.domain.types import (
    AccountStatus,
    PaymentMethod,
    PaymentProfile,
    PaymentRequest,
    PaymentStatus,
    SubTask,
    Task,
    TaskStatus,
    User,
    UserRole,
    WithdrawalRequest,
    WithdrawalStatus,
)
from taskpay.models import (
    Base,
    PaymentProfileRow,
    PaymentRequestRow,
    TaskRow,
    UserRow,
    WithdrawalRow,
)
from taskpay.persistence.repository import ChangeFeed, EntityKind, Unsubscribe, kind_of

logger = logging.getLogger(__name__)

ROW_TYPES: dict[EntityKind, type[Base]] = {
    EntityKind.USER: UserRow,
    EntityKind.TASK: TaskRow,
    EntityKind.PAYMENT_REQUEST: PaymentRequestRow,
    EntityKind.WITHDRAWAL: WithdrawalRow,
    EntityKind.PAYMENT_PROFILE: PaymentProfileRow,
}


def _aware(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes; everything is stored as UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _column_value(name: str, value: Any) -> Any:
    if name == "sub_tasks":
        return [
            {
                "id": s.id,
                "title": s.title,
                "description": s.description,
                "amount": str(s.amount),
            }
            for s in value
        ]
    if isinstance(value, Enum):
        return value.value
    return value


def to_columns(fields: dict[str, Any]) -> dict[str, Any]:
    """Map domain field values to column values."""
    return {name: _column_value(name, value) for name, value in fields.items()}


def _sub_tasks(items: list[dict[str, Any]] | None) -> tuple[SubTask, ...]:
    return tuple(
        SubTask(
            id=item["id"],
            title=item["title"],
            description=item.get("description") or "",
            amount=Decimal(str(item["amount"])),
        )
        for item in items or []
    )


def from_row(row: Base) -> Any:
    """Build the domain entity for an ORM row."""
    if isinstance(row, UserRow):
        return User(
            id=row.id,
            name=row.name,
            email=row.email,
            role=UserRole(row.role),
            contact=row.contact,
            account_status=AccountStatus(row.account_status),
            avatar=row.avatar,
            rejection_reason=row.rejection_reason,
        )
    if isinstance(row, PaymentProfileRow):
        return PaymentProfile(
            user_id=row.user_id,
            default_method=PaymentMethod(row.default_method),
            wallet_provider=row.wallet_provider,
            wallet_identifier=row.wallet_identifier,
            wallet_holder_name=row.wallet_holder_name,
        )
    if isinstance(row, TaskRow):
        return Task(
            id=row.id,
            title=row.title,
            description=row.description,
            amount=Decimal(row.amount),
            scheduled_date=_aware(row.scheduled_date),
            location=row.location,
            status=TaskStatus(row.status),
            created_by=row.created_by,
            created_at=_aware(row.created_at),
            payment_method=PaymentMethod(row.payment_method),
            assigned_to=row.assigned_to,
            is_batch=row.is_batch,
            sub_tasks=_sub_tasks(row.sub_tasks),
            completion_photo=row.completion_photo,
            completion_location_verified=row.completion_location_verified,
            rejection_reason=row.rejection_reason,
            end_date=_aware(row.end_date),
        )
    if isinstance(row, PaymentRequestRow):
        return PaymentRequest(
            id=row.id,
            task_id=row.task_id,
            employee_id=row.employee_id,
            amount=Decimal(row.amount),
            method=PaymentMethod(row.method),
            payment_details_snapshot=row.payment_details_snapshot,
            status=PaymentStatus(row.status),
            created_at=_aware(row.created_at),
            paid_at=_aware(row.paid_at),
        )
    if isinstance(row, WithdrawalRow):
        return WithdrawalRequest(
            id=row.id,
            employee_id=row.employee_id,
            amount=Decimal(row.amount),
            status=WithdrawalStatus(row.status),
            created_at=_aware(row.created_at),
            method_snapshot=row.method_snapshot,
            processed_at=_aware(row.processed_at),
            receipt_image=row.receipt_image,
            rejection_reason=row.rejection_reason,
        )
    raise TypeError(f"Unmapped row type: {type(row).__name__}")


def to_row(entity: Any) -> Base:
    """Build an ORM row holding every field of a domain entity."""
    row_type = ROW_TYPES[kind_of(entity)]
    values = to_columns(
        {name: getattr(entity, name) for name in entity.__dataclass_fields__}
    )
    return row_type(**values)


def _ordering(row_type: type[Base]) -> Any:
    # Newest first for the time-stamped collections.
    if hasattr(row_type, "created_at"):
        return row_type.created_at.desc()
    if row_type is PaymentProfileRow:
        return PaymentProfileRow.user_id
    return row_type.id


class SqlAlchemyRepository:
    """Repository over an async SQLAlchemy session factory.

    Each call runs in its own transaction. Driver and connection failures
    surface as StorageUnavailable.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory
        self._feed = ChangeFeed()

    async def load_all(self, kind: EntityKind) -> list[Any]:
        row_type = ROW_TYPES[kind]
        try:
            async with self._session_factory() as session:
                result = await session.execute(select(row_type).order_by(_ordering(row_type)))
                return [from_row(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("Loading %s failed: %s", kind.value, e)
            raise StorageUnavailable(f"Could not load {kind.value}") from e

    async def save(self, entity: Any) -> None:
        kind = kind_of(entity)
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await session.merge(to_row(entity))
        except SQLAlchemyError as e:
            logger.error("Saving %s failed: %s", kind.value, e)
            raise StorageUnavailable(f"Could not save {kind.value}") from e
        self._feed.notify()

    async def update(self, kind: EntityKind, entity_id: str, fields: dict[str, Any]) -> Any:
        row_type = ROW_TYPES[kind]
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    row = await session.get(row_type, entity_id)
                    if row is None:
                        raise NotFoundError(kind.value, entity_id)
                    for name, value in to_columns(fields).items():
                        setattr(row, name, value)
                    updated = from_row(row)
        except SQLAlchemyError as e:
            logger.error("Updating %s %s failed: %s", kind.value, entity_id, e)
            raise StorageUnavailable(f"Could not update {kind.value}") from e
        self._feed.notify()
        return updated

    async def delete(self, kind: EntityKind, entity_id: str) -> None:
        row_type = ROW_TYPES[kind]
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    row = await session.get(row_type, entity_id)
                    if row is None:
                        raise NotFoundError(kind.value, entity_id)
                    await session.delete(row)
        except SQLAlchemyError as e:
            logger.error("Deleting %s %s failed: %s", kind.value, entity_id, e)
            raise StorageUnavailable(f"Could not delete {kind.value}") from e
        self._feed.notify()

    def subscribe(self, on_change: Callable[[], None]) -> Unsubscribe:
        return self._feed.subscribe(on_change)
