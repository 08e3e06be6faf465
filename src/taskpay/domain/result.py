"""Discriminated success/failure result returned by every exposed operation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Generic, TypeVar, Union

from taskpay.domain.errors import TaskPayError

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Operation committed; `value` is the updated entity (or entity set)."""

    value: T
    ok: ClassVar[bool] = True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failure:
    """Operation rejected or failed; nothing was committed."""

    error: TaskPayError
    ok: ClassVar[bool] = False

    @property
    def code(self) -> str:
        return self.error.code

    @property
    def message(self) -> str:
        return self.error.message

    def unwrap(self):
        raise self.error


Result = Union[Success[T], Failure]
