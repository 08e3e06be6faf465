"""Task lifecycle engine.

Validates task commands against a snapshot and computes the resulting
entities. Nothing here performs I/O; the tracker persists the outcome.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Callable, Iterable

from taskpay.domain.commands import (
    ClaimTask,
    ConfirmTask,
    CreateTask,
    DeclineTask,
    DeleteTask,
    EditTask,
    SubmitProof,
    SubTaskDraft,
)
from taskpay.domain.context import ActorContext, new_id
from taskpay.domain.errors import (
    AuthorizationError,
    IllegalTransitionError,
    NotFoundError,
    TaskPayError,
    ValidationError,
)
from taskpay.domain.result import Failure, Result, Success
from taskpay.domain.types import (
    PaymentMethod,
    PaymentRequest,
    PaymentStatus,
    Snapshot,
    SubTask,
    Task,
    TaskStatus,
)
from taskpay.services.state_machine import TaskStateMachine
from taskpay.storage.images import to_inline_reference

CASH_ON_HAND = "Cash on Hand"

CENTS = Decimal("0.01")  # storage precision for every amount


@dataclass(frozen=True)
class TaskOutcome:
    """Entities produced by a task command."""

    task: Task
    payment_request: PaymentRequest | None = None
    deleted: bool = False


def to_money(value: Any) -> Decimal | None:
    """Coerce user input to a finite Decimal rounded to cents, or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
        if not amount.is_finite():
            return None
        return amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        return None


def _blank(value: str | None) -> bool:
    return not (value or "").strip()


class TaskEngine:
    """State machine driver for tasks.

    Operations:
    - create / edit / delete (admin)
    - claim / submit_proof (employee)
    - confirm / decline (admin)
    """

    def __init__(self, id_factory: Callable[[str], str] = new_id):
        self._new_id = id_factory
        self._handlers: dict[type, Callable[[ActorContext, Any, Snapshot], TaskOutcome]] = {
            CreateTask: self.create,
            EditTask: self.edit,
            DeleteTask: self.delete,
            ClaimTask: self.claim,
            SubmitProof: self.submit_proof,
            ConfirmTask: self.confirm,
            DeclineTask: self.decline,
        }

    def handle(self, ctx: ActorContext, command: Any, snapshot: Snapshot) -> Result[TaskOutcome]:
        """Run a task command, returning Success(outcome) or Failure(error)."""
        handler = self._handlers.get(type(command))
        if handler is None:
            return Failure(ValidationError(f"Unsupported task command {type(command).__name__}"))
        try:
            return Success(handler(ctx, command, snapshot))
        except TaskPayError as exc:
            return Failure(exc)

    # ------------------------------------------------------------------
    # Admin authoring
    # ------------------------------------------------------------------

    def create(self, ctx: ActorContext, command: CreateTask, snapshot: Snapshot) -> TaskOutcome:
        ctx.require_admin()
        amount = to_money(command.amount)
        self._validate_fields(
            command.title, command.location, amount, command.is_batch, command.sub_tasks
        )

        task = Task(
            id=self._new_id("b" if command.is_batch else "t"),
            title=command.title.strip(),
            description=command.description,
            amount=amount if amount is not None else Decimal("0"),
            scheduled_date=command.scheduled_date or ctx.now,
            end_date=command.end_date,
            location=command.location.strip(),
            status=TaskStatus.OPEN,
            created_by=ctx.user_id,
            created_at=ctx.now,
            payment_method=command.payment_method,
        )
        if command.is_batch:
            task = task.with_sub_tasks(self._build_sub_tasks(command.sub_tasks))
            if not task.description:
                task = replace(task, description=f"Batch task with {len(task.sub_tasks)} items.")
        return TaskOutcome(task=task)

    def edit(self, ctx: ActorContext, command: EditTask, snapshot: Snapshot) -> TaskOutcome:
        ctx.require_admin()
        task = self._get_task(snapshot, command.task_id)
        if not TaskStateMachine.can_edit(task.status):
            raise IllegalTransitionError(task.status, task.status, "paid tasks cannot be edited")

        amount = to_money(command.amount)
        self._validate_fields(
            command.title, command.location, amount, task.is_batch, command.sub_tasks
        )

        updated = replace(
            task,
            title=command.title.strip(),
            description=command.description,
            scheduled_date=command.scheduled_date or task.scheduled_date,
            end_date=command.end_date,
            location=command.location.strip(),
            payment_method=command.payment_method,
        )
        if task.is_batch:
            # amount and items change together in one entity
            updated = updated.with_sub_tasks(self._build_sub_tasks(command.sub_tasks))
        else:
            updated = replace(updated, amount=amount, sub_tasks=())
        return TaskOutcome(task=updated)

    def delete(self, ctx: ActorContext, command: DeleteTask, snapshot: Snapshot) -> TaskOutcome:
        ctx.require_admin()
        task = self._get_task(snapshot, command.task_id)
        if task.created_by != ctx.user_id:
            raise AuthorizationError("Only the task's creator may delete it")
        return TaskOutcome(task=task, deleted=True)

    # ------------------------------------------------------------------
    # Employee actions
    # ------------------------------------------------------------------

    def claim(self, ctx: ActorContext, command: ClaimTask, snapshot: Snapshot) -> TaskOutcome:
        ctx.require_employee()
        task = self._get_task(snapshot, command.task_id)
        # DONE -> IN_PROGRESS is also a legal edge, but only as a decline
        if task.status != TaskStatus.OPEN:
            raise IllegalTransitionError(
                task.status, TaskStatus.IN_PROGRESS, "task is no longer open"
            )
        if task.assigned_to:
            raise IllegalTransitionError(
                task.status, TaskStatus.IN_PROGRESS, "task is already assigned"
            )
        return TaskOutcome(
            task=replace(task, status=TaskStatus.IN_PROGRESS, assigned_to=ctx.user_id)
        )

    def submit_proof(
        self, ctx: ActorContext, command: SubmitProof, snapshot: Snapshot
    ) -> TaskOutcome:
        ctx.require_employee()
        task = self._get_task(snapshot, command.task_id)
        TaskStateMachine.validate_transition(
            task.status, TaskStatus.DONE, "task is not in progress"
        )
        if task.assigned_to != ctx.user_id:
            raise AuthorizationError("Only the assigned employee may submit proof")

        missing = []
        if not command.photo:
            missing.append("photo")
        if not command.location_verified:
            missing.append("location_verified")
        if missing:
            raise ValidationError.missing(missing)

        return TaskOutcome(
            task=replace(
                task,
                status=TaskStatus.DONE,
                completion_photo=to_inline_reference(command.photo),
                completion_location_verified=True,
                rejection_reason=None,
            )
        )

    # ------------------------------------------------------------------
    # Admin review
    # ------------------------------------------------------------------

    def confirm(self, ctx: ActorContext, command: ConfirmTask, snapshot: Snapshot) -> TaskOutcome:
        ctx.require_admin()
        task = self._get_task(snapshot, command.task_id)
        TaskStateMachine.validate_transition(task.status, TaskStatus.PAID, "task is not done")
        if not task.assigned_to:
            raise IllegalTransitionError(task.status, TaskStatus.PAID, "task has no assignee")

        payment = PaymentRequest(
            id=self._new_id("r"),
            task_id=task.id,
            employee_id=task.assigned_to,
            amount=task.amount,
            method=task.payment_method,
            payment_details_snapshot=self._payout_destination(task, snapshot),
            status=PaymentStatus.PAID,
            created_at=ctx.now,
            paid_at=ctx.now,
        )
        return TaskOutcome(
            task=replace(task, status=TaskStatus.PAID, rejection_reason=None),
            payment_request=payment,
        )

    def decline(self, ctx: ActorContext, command: DeclineTask, snapshot: Snapshot) -> TaskOutcome:
        ctx.require_admin()
        task = self._get_task(snapshot, command.task_id)
        if not TaskStateMachine.is_decline(task.status, TaskStatus.IN_PROGRESS):
            raise IllegalTransitionError(task.status, TaskStatus.IN_PROGRESS, "task is not done")
        if _blank(command.reason):
            raise ValidationError("Please provide a reason for declining.", ("reason",))

        return TaskOutcome(
            task=replace(
                task,
                status=TaskStatus.IN_PROGRESS,
                rejection_reason=command.reason.strip(),
                completion_photo=None,
                completion_location_verified=False,
            )
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _get_task(snapshot: Snapshot, task_id: str) -> Task:
        task = snapshot.find_task(task_id)
        if task is None:
            raise NotFoundError("Task", task_id)
        return task

    @staticmethod
    def _payout_destination(task: Task, snapshot: Snapshot) -> str:
        if task.payment_method != PaymentMethod.EWALLET:
            return CASH_ON_HAND
        profile = snapshot.profile_for(task.assigned_to or "")
        return profile.wallet_descriptor() if profile else "E-Wallet"

    @staticmethod
    def _validate_fields(
        title: str,
        location: str,
        amount: Decimal | None,
        is_batch: bool,
        sub_tasks: Iterable[SubTaskDraft],
    ) -> None:
        missing: list[str] = []
        if _blank(title):
            missing.append("title")
        if _blank(location):
            missing.append("location")

        if is_batch:
            drafts = list(sub_tasks)
            if not drafts:
                missing.append("sub_tasks")
            for index, draft in enumerate(drafts):
                if _blank(draft.title):
                    missing.append(f"sub_tasks[{index}].title")
                draft_amount = to_money(draft.amount)
                if draft_amount is None or draft_amount < 0:
                    missing.append(f"sub_tasks[{index}].amount")
        elif amount is None or amount <= 0:
            missing.append("amount")

        if missing:
            raise ValidationError.missing(missing)

    def _build_sub_tasks(self, drafts: Iterable[SubTaskDraft]) -> list[SubTask]:
        return [
            SubTask(
                id=draft.id or self._new_id("sub"),
                title=draft.title.strip(),
                description=draft.description,
                amount=to_money(draft.amount),
            )
            for draft in drafts
        ]


# ----------------------------------------------------------------------
# Read queries
# ----------------------------------------------------------------------


def available_tasks(tasks: Iterable[Task]) -> list[Task]:
    """Tasks employees can claim."""
    return [t for t in tasks if t.status == TaskStatus.OPEN]


def assigned_tasks(tasks: Iterable[Task], employee_id: str) -> list[Task]:
    """An employee's active work: assigned and not yet paid."""
    return [
        t for t in tasks if t.assigned_to == employee_id and t.status != TaskStatus.PAID
    ]


def tasks_awaiting_confirmation(tasks: Iterable[Task]) -> list[Task]:
    return [t for t in tasks if t.status == TaskStatus.DONE]


def paid_tasks(tasks: Iterable[Task]) -> list[Task]:
    return [t for t in tasks if t.status == TaskStatus.PAID]
