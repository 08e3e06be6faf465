"""Repository contract consumed by the tracker.

The tracker only ever talks to storage through this protocol, so the
full-refetch sync strategy can be swapped for incremental sync without
touching engine logic.
"""

from __future__ import annotations

import logging
from dataclasses import fields as dataclass_fields
from enum import Enum
from typing import Any, Callable, Protocol

from taskpay.domain.types import (
    PaymentProfile,
    PaymentRequest,
    Snapshot,
    Task,
    User,
    WithdrawalRequest,
)

logger = logging.getLogger(__name__)

Unsubscribe = Callable[[], None]


class EntityKind(str, Enum):
    """Stored collections."""

    USER = "users"
    TASK = "tasks"
    PAYMENT_REQUEST = "payment_requests"
    WITHDRAWAL = "withdrawals"
    PAYMENT_PROFILE = "profiles"


ENTITY_TYPES: dict[EntityKind, type] = {
    EntityKind.USER: User,
    EntityKind.TASK: Task,
    EntityKind.PAYMENT_REQUEST: PaymentRequest,
    EntityKind.WITHDRAWAL: WithdrawalRequest,
    EntityKind.PAYMENT_PROFILE: PaymentProfile,
}

_KINDS_BY_TYPE = {entity_type: kind for kind, entity_type in ENTITY_TYPES.items()}


def kind_of(entity: Any) -> EntityKind:
    try:
        return _KINDS_BY_TYPE[type(entity)]
    except KeyError:
        raise TypeError(f"Not a stored entity: {type(entity).__name__}") from None


def entity_key(entity: Any) -> str:
    """Primary key of an entity; payment profiles are keyed by user."""
    if isinstance(entity, PaymentProfile):
        return entity.user_id
    return entity.id


def changed_fields(before: Any, after: Any) -> dict[str, Any]:
    """Fields whose values differ between two versions of the same entity."""
    return {
        f.name: getattr(after, f.name)
        for f in dataclass_fields(after)
        if getattr(before, f.name) != getattr(after, f.name)
    }


class Repository(Protocol):
    """Durable storage with change notification.

    Every method may raise StorageUnavailable; update and delete raise
    NotFoundError for unknown ids.
    """

    async def load_all(self, kind: EntityKind) -> list[Any]:
        """Load every entity of a collection."""
        ...

    async def save(self, entity: Any) -> None:
        """Insert or replace an entity (last write wins)."""
        ...

    async def update(self, kind: EntityKind, entity_id: str, fields: dict[str, Any]) -> Any:
        """Apply a partial update and return the stored entity."""
        ...

    async def delete(self, kind: EntityKind, entity_id: str) -> None:
        """Remove an entity."""
        ...

    def subscribe(self, on_change: Callable[[], None]) -> Unsubscribe:
        """Invoke ``on_change`` after any mutation; returns an unsubscribe callable."""
        ...


class ChangeFeed:
    """Fan-out of change notifications to subscribers.

    Delivery is at-least-once from the subscriber's point of view: a
    subscriber is also notified of its own writes.
    """

    def __init__(self) -> None:
        self._subscribers: list[Callable[[], None]] = []

    def subscribe(self, on_change: Callable[[], None]) -> Unsubscribe:
        self._subscribers.append(on_change)

        def unsubscribe() -> None:
            self._subscribers = [s for s in self._subscribers if s is not on_change]

        return unsubscribe

    def notify(self) -> None:
        for subscriber in list(self._subscribers):
            try:
                subscriber()
            except Exception:
                logger.exception("Change subscriber %s failed", subscriber)

    def __len__(self) -> int:
        return len(self._subscribers)


async def load_snapshot(repository: Repository) -> Snapshot:
    """Full refetch of every collection."""
    return Snapshot(
        users=tuple(await repository.load_all(EntityKind.USER)),
        tasks=tuple(await repository.load_all(EntityKind.TASK)),
        payment_requests=tuple(await repository.load_all(EntityKind.PAYMENT_REQUEST)),
        withdrawals=tuple(await repository.load_all(EntityKind.WITHDRAWAL)),
        profiles=tuple(await repository.load_all(EntityKind.PAYMENT_PROFILE)),
    )
