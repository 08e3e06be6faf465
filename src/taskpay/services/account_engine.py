"""Account approval engine, registration and profile self-service."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Callable

from taskpay.domain.commands import (
    ApproveAccount,
    RegisterEmployee,
    RejectAccount,
    SavePaymentProfile,
    UpdateProfile,
)
from taskpay.domain.context import ActorContext, new_id
from taskpay.domain.errors import (
    AuthorizationError,
    NotFoundError,
    TaskPayError,
    ValidationError,
)
from taskpay.domain.result import Failure, Result, Success
from taskpay.domain.types import (
    AccountStatus,
    PaymentMethod,
    PaymentProfile,
    Snapshot,
    User,
    UserRole,
)
from taskpay.services.state_machine import AccountStateMachine
from taskpay.storage.images import to_inline_reference

DEFAULT_WALLET_PROVIDER = "GCash"

PENDING_MESSAGE = "Your account is still pending approval by Admin."
REJECTED_MESSAGE = "Your account application was rejected. Please contact support."


@dataclass(frozen=True)
class AccountOutcome:
    """Entities produced by an account command."""

    user: User
    profile: PaymentProfile | None = None
    created: bool = False


def authorize_session(user: User) -> User:
    """Gate access to the main application.

    Employees whose application is not APPROVED are blocked with a message
    describing their current status. Admins always pass.
    """
    if user.is_approved:
        return user
    if user.account_status == AccountStatus.PENDING:
        raise AuthorizationError(PENDING_MESSAGE)
    raise AuthorizationError(REJECTED_MESSAGE)


class AccountEngine:
    """State machine driver for employee accounts."""

    def __init__(self, id_factory: Callable[[str], str] = new_id):
        self._new_id = id_factory
        self._handlers: dict[type, Callable[[Any, Any, Snapshot], AccountOutcome]] = {
            ApproveAccount: self.approve,
            RejectAccount: self.reject,
            RegisterEmployee: self.register,
            UpdateProfile: self.update_profile,
            SavePaymentProfile: self.save_payment_profile,
        }

    def handle(
        self, ctx: ActorContext | None, command: Any, snapshot: Snapshot
    ) -> Result[AccountOutcome]:
        """Run an account command; ``ctx`` may be None only for registration."""
        handler = self._handlers.get(type(command))
        if handler is None:
            return Failure(
                ValidationError(f"Unsupported account command {type(command).__name__}")
            )
        try:
            if ctx is None and not isinstance(command, RegisterEmployee):
                raise AuthorizationError("Sign in to perform this action")
            return Success(handler(ctx, command, snapshot))
        except TaskPayError as exc:
            return Failure(exc)

    def approve(
        self, ctx: ActorContext, command: ApproveAccount, snapshot: Snapshot
    ) -> AccountOutcome:
        ctx.require_admin()
        user = self._reviewable(snapshot, command.user_id, AccountStatus.APPROVED)
        return AccountOutcome(
            user=replace(user, account_status=AccountStatus.APPROVED, rejection_reason=None)
        )

    def reject(
        self, ctx: ActorContext, command: RejectAccount, snapshot: Snapshot
    ) -> AccountOutcome:
        ctx.require_admin()
        user = self._reviewable(snapshot, command.user_id, AccountStatus.REJECTED)
        return AccountOutcome(
            user=replace(
                user,
                account_status=AccountStatus.REJECTED,
                rejection_reason=(command.reason or "").strip() or None,
            )
        )

    def register(
        self, ctx: ActorContext | None, command: RegisterEmployee, snapshot: Snapshot
    ) -> AccountOutcome:
        """Create a PENDING employee with a default e-wallet payout profile."""
        missing = [
            name
            for name in (
                "name",
                "email",
                "contact",
                "wallet_identifier",
                "wallet_holder_name",
            )
            if not (getattr(command, name) or "").strip()
        ]
        if "email" not in missing and "@" not in command.email:
            missing.append("email")
        if missing:
            raise ValidationError.missing(missing)

        email = command.email.strip()
        if snapshot.find_user_by_email(email) is not None:
            raise ValidationError(f"An account already exists for {email}", ("email",))

        user = User(
            id=self._new_id("u"),
            name=command.name.strip(),
            email=email,
            role=UserRole.EMPLOYEE,
            contact=command.contact.strip(),
            account_status=AccountStatus.PENDING,
        )
        profile = PaymentProfile(
            user_id=user.id,
            default_method=PaymentMethod.EWALLET,
            wallet_provider=DEFAULT_WALLET_PROVIDER,
            wallet_identifier=command.wallet_identifier.strip(),
            wallet_holder_name=command.wallet_holder_name.strip(),
        )
        return AccountOutcome(user=user, profile=profile, created=True)

    def update_profile(
        self, ctx: ActorContext, command: UpdateProfile, snapshot: Snapshot
    ) -> AccountOutcome:
        user = self._get_user(snapshot, ctx.user_id)
        if not (command.name or "").strip():
            raise ValidationError.missing(["name"])
        avatar = to_inline_reference(command.avatar) if command.avatar else user.avatar
        return AccountOutcome(
            user=replace(
                user,
                name=command.name.strip(),
                contact=(command.contact or "").strip(),
                avatar=avatar,
            )
        )

    def save_payment_profile(
        self, ctx: ActorContext, command: SavePaymentProfile, snapshot: Snapshot
    ) -> AccountOutcome:
        user = self._get_user(snapshot, ctx.user_id)
        try:
            method = PaymentMethod(command.default_method)
        except ValueError:
            raise ValidationError.missing(["default_method"])
        provider = (command.wallet_provider or "").strip() or None
        identifier = (command.wallet_identifier or "").strip() or None
        if method == PaymentMethod.EWALLET:
            if identifier is None:
                raise ValidationError.missing(["wallet_identifier"])
            provider = provider or DEFAULT_WALLET_PROVIDER
        profile = PaymentProfile(
            user_id=user.id,
            default_method=method,
            wallet_provider=provider,
            wallet_identifier=identifier,
            wallet_holder_name=(command.wallet_holder_name or "").strip() or None,
        )
        return AccountOutcome(user=user, profile=profile)

    @staticmethod
    def _get_user(snapshot: Snapshot, user_id: str) -> User:
        user = snapshot.find_user(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    def _reviewable(self, snapshot: Snapshot, user_id: str, to_status: AccountStatus) -> User:
        user = self._get_user(snapshot, user_id)
        if user.role != UserRole.EMPLOYEE:
            raise ValidationError("Administrator accounts are not subject to approval")
        AccountStateMachine.validate_transition(
            user.account_status, to_status, "application has already been reviewed"
        )
        return user
