"""In-memory repository for offline use and tests."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Callable

from taskpay.domain.errors import NotFoundError, StorageUnavailable
from taskpay.domain.types import Snapshot
from taskpay.persistence.repository import (
    ChangeFeed,
    EntityKind,
    Unsubscribe,
    entity_key,
    kind_of,
)


class InMemoryRepository:
    """Dict-backed store.

    ``available`` and ``failing_kinds`` simulate outages: while
    ``available`` is False every call fails, and writes to a kind listed in
    ``failing_kinds`` fail.
    """

    def __init__(self, initial: Snapshot | None = None):
        self._data: dict[EntityKind, dict[str, Any]] = {kind: {} for kind in EntityKind}
        self._feed = ChangeFeed()
        self.available = True
        self.failing_kinds: set[EntityKind] = set()

        if initial is not None:
            for collection in (
                initial.users,
                initial.tasks,
                initial.payment_requests,
                initial.withdrawals,
                initial.profiles,
            ):
                for entity in collection:
                    self._data[kind_of(entity)][entity_key(entity)] = entity

    def _check(self, kind: EntityKind | None = None) -> None:
        if not self.available:
            raise StorageUnavailable("Store is unreachable")
        if kind is not None and kind in self.failing_kinds:
            raise StorageUnavailable(f"Write to {kind.value} failed")

    async def load_all(self, kind: EntityKind) -> list[Any]:
        self._check()
        return list(self._data[kind].values())

    async def save(self, entity: Any) -> None:
        kind = kind_of(entity)
        self._check(kind)
        self._data[kind][entity_key(entity)] = entity
        self._feed.notify()

    async def update(self, kind: EntityKind, entity_id: str, fields: dict[str, Any]) -> Any:
        self._check(kind)
        existing = self._data[kind].get(entity_id)
        if existing is None:
            raise NotFoundError(kind.value, entity_id)
        updated = replace(existing, **fields)
        self._data[kind][entity_id] = updated
        self._feed.notify()
        return updated

    async def delete(self, kind: EntityKind, entity_id: str) -> None:
        self._check(kind)
        if entity_id not in self._data[kind]:
            raise NotFoundError(kind.value, entity_id)
        del self._data[kind][entity_id]
        self._feed.notify()

    def subscribe(self, on_change: Callable[[], None]) -> Unsubscribe:
        return self._feed.subscribe(on_change)
