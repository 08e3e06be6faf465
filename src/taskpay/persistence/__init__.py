"""Storage adapters behind the repository contract."""

from taskpay.persistence.fixtures import demo_snapshot
from taskpay.persistence.memory import InMemoryRepository
from taskpay.persistence.repository import (
    ChangeFeed,
    EntityKind,
    Repository,
    changed_fields,
    entity_key,
    kind_of,
    load_snapshot,
)
from taskpay.persistence.sql import SqlAlchemyRepository

__all__ = [
    "ChangeFeed",
    "EntityKind",
    "InMemoryRepository",
    "Repository",
    "SqlAlchemyRepository",
    "changed_fields",
    "demo_snapshot",
    "entity_key",
    "kind_of",
    "load_snapshot",
]
