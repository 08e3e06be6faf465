"""Tracker service: the single entry point for every intent.

Each dispatch re-reads the store, lets the matching engine validate the
command against that snapshot, persists the outcome and only then emits a
domain event. Nothing expected escapes as an exception; callers get a
Success or a Failure.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Callable, get_args

from taskpay.domain.commands import (
    AccountCommand,
    ApproveAccount,
    ClaimTask,
    ConfirmTask,
    CreateTask,
    CreateWithdrawal,
    DeclineTask,
    DeleteTask,
    EditTask,
    ProcessWithdrawal,
    RegisterEmployee,
    RejectAccount,
    SavePaymentProfile,
    SubmitProof,
    TaskCommand,
    UpdateProfile,
    WithdrawalCommand,
)
from taskpay.domain.context import ActorContext, new_id
from taskpay.domain.errors import (
    AuthorizationError,
    NotFoundError,
    StorageUnavailable,
    TaskPayError,
    ValidationError,
)
from taskpay.domain.result import Failure, Result, Success
from taskpay.domain.types import Snapshot, User, WithdrawalRequest, WithdrawalStatus
from taskpay.events import (
    AccountApproved,
    AccountRejected,
    DomainEvent,
    EmployeeRegistered,
    EventEmitter,
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
from taskpay.persistence.repository import (
    EntityKind,
    Repository,
    changed_fields,
    load_snapshot,
)
from taskpay.services.account_engine import AccountEngine, AccountOutcome, authorize_session
from taskpay.services.accounting import (
    BalanceSummary,
    FleetSummary,
    employee_balance,
    fleet_summary,
)
from taskpay.services.task_engine import TaskEngine, TaskOutcome
from taskpay.services.withdrawal_engine import WithdrawalEngine
from taskpay.storage.images import (
    AVATAR_BUCKET,
    PROOF_BUCKET,
    RECEIPT_BUCKET,
    ImageStore,
    is_inline_reference,
    store_image,
)

logger = logging.getLogger(__name__)


class TrackerService:
    """Dispatches commands to the lifecycle engines and persists the results.

    A transition counts as committed only once its repository writes have
    been awaited. Confirming a task is two writes (task, then payment
    request) without atomicity; registration is likewise two writes (user,
    then payment profile).
    """

    def __init__(
        self,
        repository: Repository,
        image_store: ImageStore | None = None,
        emitter: EventEmitter | None = None,
        id_factory: Callable[[str], str] = new_id,
    ):
        self.repository = repository
        self.image_store = image_store
        self.emitter = emitter or EventEmitter()
        self.task_engine = TaskEngine(id_factory)
        self.withdrawal_engine = WithdrawalEngine(id_factory)
        self.account_engine = AccountEngine(id_factory)

        self._engines: dict[type, Any] = {}
        for command_type in get_args(TaskCommand):
            self._engines[command_type] = self.task_engine
        for command_type in get_args(WithdrawalCommand):
            self._engines[command_type] = self.withdrawal_engine
        for command_type in get_args(AccountCommand):
            self._engines[command_type] = self.account_engine

        self._snapshot: Snapshot | None = None
        self._unsubscribe = repository.subscribe(self._invalidate)

    def close(self) -> None:
        """Stop listening to repository change notifications."""
        self._unsubscribe()

    def _invalidate(self) -> None:
        self._snapshot = None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def refresh(self) -> Snapshot:
        """Reload every collection from the store (last fetch wins)."""
        self._snapshot = await load_snapshot(self.repository)
        return self._snapshot

    async def snapshot(self) -> Result[Snapshot]:
        """Current view of all collections, reloaded after any change."""
        try:
            if self._snapshot is None:
                await self.refresh()
            return Success(self._snapshot)
        except StorageUnavailable as exc:
            return Failure(exc)

    async def balance(self, employee_id: str) -> Result[BalanceSummary]:
        result = await self.snapshot()
        if not result.ok:
            return result
        return Success(employee_balance(result.value, employee_id))

    async def fleet_summary(self) -> Result[FleetSummary]:
        result = await self.snapshot()
        if not result.ok:
            return result
        return Success(fleet_summary(result.value))

    async def login(self, email: str) -> Result[User]:
        """Resolve a user by email and gate access on their account status."""
        try:
            snapshot = await self.refresh()
            user = snapshot.find_user_by_email(email)
            if user is None:
                raise NotFoundError("User", email)
            return Success(authorize_session(user))
        except TaskPayError as exc:
            return Failure(exc)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def dispatch(self, ctx: ActorContext | None, command: Any) -> Result[Any]:
        """Validate, persist and announce one command."""
        engine = self._engines.get(type(command))
        if engine is None:
            return Failure(ValidationError(f"Unsupported command {type(command).__name__}"))
        if ctx is None and not isinstance(command, RegisterEmployee):
            return Failure(AuthorizationError("Sign in to perform this action"))
        name = type(command).__name__
        actor_id = ctx.user_id if ctx else None

        try:
            snapshot = await self.refresh()
            result = engine.handle(ctx, command, snapshot)
            if not result.ok:
                logger.info("%s by %s rejected: %s", name, actor_id, result.error.message)
                return result
            value = await self._stage_images(ctx, command, result.value)
            await self._persist(command, value, snapshot)
        except TaskPayError as exc:
            logger.warning("%s by %s failed: %s", name, actor_id, exc.message)
            return Failure(exc)

        self._invalidate()
        logger.info("%s committed by %s", name, actor_id)
        for event in self._events_for(ctx, command, value):
            self.emitter.emit(event)
        return Success(value)

    async def _stage_images(self, ctx: ActorContext | None, command: Any, value: Any) -> Any:
        """Move freshly supplied images from inline data into the image store."""
        if isinstance(command, SubmitProof):
            task = value.task
            stamp = int(ctx.now.timestamp())
            url = await self._upload(PROOF_BUCKET, f"{task.id}/{stamp}.jpg", task.completion_photo)
            return replace(value, task=replace(task, completion_photo=url))
        if isinstance(command, ProcessWithdrawal) and value.receipt_image:
            url = await self._upload(RECEIPT_BUCKET, f"{value.id}.jpg", value.receipt_image)
            return replace(value, receipt_image=url)
        if isinstance(command, UpdateProfile) and command.avatar:
            user = value.user
            url = await self._upload(AVATAR_BUCKET, f"{user.id}.jpg", user.avatar)
            return replace(value, user=replace(user, avatar=url))
        return value

    async def _upload(self, bucket: str, path: str, reference: str | None) -> str | None:
        if reference is None or not is_inline_reference(reference):
            return reference
        return await store_image(self.image_store, bucket, path, reference)

    async def _persist(self, command: Any, value: Any, snapshot: Snapshot) -> None:
        repo = self.repository

        if isinstance(value, TaskOutcome):
            task = value.task
            if value.deleted:
                await repo.delete(EntityKind.TASK, task.id)
            elif isinstance(command, CreateTask):
                await repo.save(task)
            else:
                await self._update(EntityKind.TASK, snapshot.find_task(task.id), task)
            if value.payment_request is not None:
                try:
                    await repo.save(value.payment_request)
                except StorageUnavailable:
                    logger.error(
                        "Task %s is PAID but payment request %s was not recorded",
                        task.id,
                        value.payment_request.id,
                    )
                    raise

        elif isinstance(value, WithdrawalRequest):
            if isinstance(command, CreateWithdrawal):
                await repo.save(value)
            else:
                await self._update(
                    EntityKind.WITHDRAWAL, snapshot.find_withdrawal(value.id), value
                )

        elif isinstance(value, AccountOutcome):
            if value.created:
                await repo.save(value.user)
            elif not isinstance(command, SavePaymentProfile):
                await self._update(EntityKind.USER, snapshot.find_user(value.user.id), value.user)
            if value.profile is not None:
                try:
                    await repo.save(value.profile)
                except StorageUnavailable:
                    if value.created:
                        logger.error(
                            "User %s was registered without a payment profile", value.user.id
                        )
                    raise

    async def _update(self, kind: EntityKind, before: Any, after: Any) -> None:
        fields = changed_fields(before, after)
        if fields:
            await self.repository.update(kind, after.id, fields)

    @staticmethod
    def _events_for(ctx: ActorContext | None, command: Any, value: Any) -> list[DomainEvent]:
        meta = EventMetadata.create(
            actor_id=ctx.user_id if ctx else None,
            timestamp=ctx.now if ctx else None,
        )

        if isinstance(command, CreateTask):
            task = value.task
            return [TaskCreated(meta, task.id, task.amount, task.is_batch)]
        if isinstance(command, EditTask):
            return [TaskEdited(meta, value.task.id, value.task.amount)]
        if isinstance(command, DeleteTask):
            return [TaskDeleted(meta, value.task.id, value.task.status.value)]
        if isinstance(command, ClaimTask):
            return [TaskClaimed(meta, value.task.id, value.task.assigned_to)]
        if isinstance(command, SubmitProof):
            return [ProofSubmitted(meta, value.task.id, value.task.assigned_to)]
        if isinstance(command, DeclineTask):
            task = value.task
            return [TaskDeclined(meta, task.id, task.assigned_to, task.rejection_reason)]
        if isinstance(command, ConfirmTask):
            payment = value.payment_request
            return [
                PaymentReleased(
                    meta,
                    task_id=payment.task_id,
                    payment_request_id=payment.id,
                    employee_id=payment.employee_id,
                    amount=payment.amount,
                    method=payment.method.value,
                )
            ]
        if isinstance(command, CreateWithdrawal):
            return [WithdrawalRequested(meta, value.id, value.employee_id, value.amount)]
        if isinstance(command, ProcessWithdrawal):
            if value.status == WithdrawalStatus.PAID:
                return [WithdrawalPaid(meta, value.id, value.employee_id, value.amount)]
            return [
                WithdrawalRejected(
                    meta, value.id, value.employee_id, value.amount, value.rejection_reason
                )
            ]
        if isinstance(command, RegisterEmployee):
            return [EmployeeRegistered(meta, value.user.id, value.user.email)]
        if isinstance(command, ApproveAccount):
            return [AccountApproved(meta, value.user.id)]
        if isinstance(command, RejectAccount):
            return [AccountRejected(meta, value.user.id, value.user.rejection_reason)]
        if isinstance(command, (UpdateProfile, SavePaymentProfile)):
            return [ProfileUpdated(meta, value.user.id)]
        return []
