"""Explicit caller context passed into every engine call."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import uuid4

from taskpay.domain.errors import AuthorizationError
from taskpay.domain.types import AccountStatus, User, UserRole


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id(prefix: str) -> str:
    """Generate an entity id such as 't-3f9c0a1b2d4e'."""
    return f"{prefix}-{uuid4().hex[:12]}"


@dataclass(frozen=True)
class ActorContext:
    """Who is calling, as supplied by the identity provider, and when."""

    user_id: str
    role: UserRole
    account_status: AccountStatus = AccountStatus.APPROVED
    now: datetime = field(default_factory=utcnow)

    @classmethod
    def for_user(cls, user: User, now: datetime | None = None) -> ActorContext:
        return cls(
            user_id=user.id,
            role=user.role,
            account_status=user.account_status,
            now=now or utcnow(),
        )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def require_admin(self) -> None:
        if not self.is_admin:
            raise AuthorizationError("Only administrators may perform this action")

    def require_employee(self) -> None:
        """Require an EMPLOYEE whose application has been approved."""
        if self.role != UserRole.EMPLOYEE:
            raise AuthorizationError("Only employees may perform this action")
        if self.account_status != AccountStatus.APPROVED:
            raise AuthorizationError(
                f"Account is {self.account_status.value.lower()}; access denied"
            )
