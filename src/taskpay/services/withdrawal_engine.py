"""Withdrawal lifecycle engine."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Callable

from taskpay.domain.commands import CreateWithdrawal, ProcessWithdrawal
from taskpay.domain.context import ActorContext, new_id
from taskpay.domain.errors import NotFoundError, TaskPayError, ValidationError
from taskpay.domain.result import Failure, Result, Success
from taskpay.domain.types import (
    PaymentMethod,
    PaymentProfile,
    Snapshot,
    WithdrawalRequest,
    WithdrawalStatus,
)
from taskpay.services.accounting import available_balance, display_balance
from taskpay.services.state_machine import WithdrawalStateMachine
from taskpay.services.task_engine import to_money
from taskpay.storage.images import to_inline_reference

CASH = "Cash"


class WithdrawalEngine:
    """State machine driver for withdrawal requests.

    Constraints:
    - Requested amount never exceeds the requester's available balance
    - The payout destination is captured at request time and never changes
    - PENDING is the only status that can be processed
    """

    def __init__(self, id_factory: Callable[[str], str] = new_id):
        self._new_id = id_factory
        self._handlers: dict[type, Callable[[ActorContext, Any, Snapshot], WithdrawalRequest]] = {
            CreateWithdrawal: self.create,
            ProcessWithdrawal: self.process,
        }

    def handle(
        self, ctx: ActorContext, command: Any, snapshot: Snapshot
    ) -> Result[WithdrawalRequest]:
        """Run a withdrawal command, returning Success(request) or Failure(error)."""
        handler = self._handlers.get(type(command))
        if handler is None:
            return Failure(
                ValidationError(f"Unsupported withdrawal command {type(command).__name__}")
            )
        try:
            return Success(handler(ctx, command, snapshot))
        except TaskPayError as exc:
            return Failure(exc)

    def create(
        self, ctx: ActorContext, command: CreateWithdrawal, snapshot: Snapshot
    ) -> WithdrawalRequest:
        ctx.require_employee()
        amount = to_money(command.amount)
        if amount is None or amount <= 0:
            raise ValidationError("Withdrawal amount must be a positive number", ("amount",))

        balance = available_balance(
            snapshot.payment_requests, snapshot.withdrawals, ctx.user_id
        )
        if amount > balance:
            raise ValidationError(
                f"Requested {amount} exceeds available balance {display_balance(balance)}",
                ("amount",),
            )

        return WithdrawalRequest(
            id=self._new_id("w"),
            employee_id=ctx.user_id,
            amount=amount,
            status=WithdrawalStatus.PENDING,
            created_at=ctx.now,
            method_snapshot=self._method_snapshot(ctx.user_id, command.method, snapshot),
        )

    def process(
        self, ctx: ActorContext, command: ProcessWithdrawal, snapshot: Snapshot
    ) -> WithdrawalRequest:
        ctx.require_admin()
        withdrawal = snapshot.find_withdrawal(command.withdrawal_id)
        if withdrawal is None:
            raise NotFoundError("Withdrawal", command.withdrawal_id)

        try:
            outcome = WithdrawalStatus(command.outcome)
        except ValueError:
            raise ValidationError(f"Unknown withdrawal outcome '{command.outcome}'", ("outcome",))

        reason = "request has already been processed"
        if withdrawal.status == WithdrawalStatus.PENDING:
            reason = "outcome must be PAID or REJECTED"
        WithdrawalStateMachine.validate_transition(withdrawal.status, outcome, reason)

        rejection_reason = (command.rejection_reason or "").strip()
        if outcome == WithdrawalStatus.PAID and not command.receipt_image:
            raise ValidationError("A receipt image is required to mark as paid", ("receipt_image",))
        if outcome == WithdrawalStatus.REJECTED and not rejection_reason:
            raise ValidationError("Please provide a reason for rejection.", ("rejection_reason",))

        return replace(
            withdrawal,
            status=outcome,
            processed_at=ctx.now,
            receipt_image=(
                to_inline_reference(command.receipt_image) if command.receipt_image else None
            ),
            rejection_reason=rejection_reason if outcome == WithdrawalStatus.REJECTED else None,
        )

    @staticmethod
    def _method_snapshot(
        employee_id: str, method: PaymentMethod | None, snapshot: Snapshot
    ) -> str:
        profile = snapshot.profile_for(employee_id)
        if method is None:
            method = profile.default_method if profile else PaymentMethod.CASH
        if method != PaymentMethod.EWALLET:
            return CASH
        return (profile or PaymentProfile(employee_id, PaymentMethod.EWALLET)).wallet_descriptor()
