"""Task API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Path, Query, Response, status

from taskpay.api.dependencies import Actor, CurrentSnapshot, Tracker
from taskpay.api.schemas import (
    ConfirmResponse,
    DeclineRequest,
    ErrorResponse,
    PaymentRequestResponse,
    ProofSubmit,
    TaskListResponse,
    TaskResponse,
    TaskWrite,
)
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
from taskpay.domain.errors import NotFoundError, ValidationError
from taskpay.services.task_engine import (
    assigned_tasks,
    available_tasks,
    paid_tasks,
    tasks_awaiting_confirmation,
)

router = APIRouter(prefix="/tasks", tags=["tasks"])

TaskId = Annotated[str, Path()]


def _drafts(payload: TaskWrite) -> tuple[SubTaskDraft, ...]:
    return tuple(
        SubTaskDraft(title=s.title, amount=s.amount, description=s.description, id=s.id)
        for s in payload.sub_tasks
    )


# ============================================================================
# Queries
# ============================================================================


@router.get("", response_model=TaskListResponse)
async def list_tasks(
    actor: Actor,
    snapshot: CurrentSnapshot,
    view: Annotated[str | None, Query()] = None,
) -> TaskListResponse:
    """List tasks, optionally narrowed to one screen's view.

    Views: available, assigned (the caller's active work), awaiting, paid.
    """
    views = {
        None: list,
        "available": available_tasks,
        "assigned": lambda tasks: assigned_tasks(tasks, actor.user_id),
        "awaiting": tasks_awaiting_confirmation,
        "paid": paid_tasks,
    }
    if view not in views:
        raise ValidationError(f"Unknown task view '{view}'", ("view",))
    tasks = views[view](snapshot.tasks)
    return TaskListResponse(
        items=[TaskResponse.model_validate(t) for t in tasks],
        total=len(tasks),
    )


@router.get(
    "/{task_id}",
    response_model=TaskResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_task(actor: Actor, snapshot: CurrentSnapshot, task_id: TaskId) -> TaskResponse:
    task = snapshot.find_task(task_id)
    if task is None:
        raise NotFoundError("Task", task_id)
    return TaskResponse.model_validate(task)


# ============================================================================
# Authoring
# ============================================================================


@router.post(
    "",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
async def create_task(tracker: Tracker, actor: Actor, payload: TaskWrite) -> TaskResponse:
    """Post a single or batch task."""
    command = CreateTask(
        title=payload.title,
        location=payload.location,
        scheduled_date=payload.scheduled_date,
        end_date=payload.end_date,
        amount=payload.amount,
        description=payload.description,
        payment_method=payload.payment_method,
        is_batch=payload.is_batch,
        sub_tasks=_drafts(payload),
    )
    outcome = (await tracker.dispatch(actor, command)).unwrap()
    return TaskResponse.model_validate(outcome.task)


@router.put(
    "/{task_id}",
    response_model=TaskResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def edit_task(
    tracker: Tracker, actor: Actor, task_id: TaskId, payload: TaskWrite
) -> TaskResponse:
    command = EditTask(
        task_id=task_id,
        title=payload.title,
        location=payload.location,
        scheduled_date=payload.scheduled_date,
        end_date=payload.end_date,
        amount=payload.amount,
        description=payload.description,
        payment_method=payload.payment_method,
        sub_tasks=_drafts(payload),
    )
    outcome = (await tracker.dispatch(actor, command)).unwrap()
    return TaskResponse.model_validate(outcome.task)


@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
async def delete_task(tracker: Tracker, actor: Actor, task_id: TaskId) -> Response:
    (await tracker.dispatch(actor, DeleteTask(task_id))).unwrap()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================================================================
# Lifecycle
# ============================================================================


@router.post(
    "/{task_id}/claim",
    response_model=TaskResponse,
    responses={409: {"model": ErrorResponse}},
)
async def claim_task(tracker: Tracker, actor: Actor, task_id: TaskId) -> TaskResponse:
    outcome = (await tracker.dispatch(actor, ClaimTask(task_id))).unwrap()
    return TaskResponse.model_validate(outcome.task)


@router.post(
    "/{task_id}/proof",
    response_model=TaskResponse,
    responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def submit_proof(
    tracker: Tracker, actor: Actor, task_id: TaskId, payload: ProofSubmit
) -> TaskResponse:
    command = SubmitProof(task_id, payload.photo, payload.location_verified)
    outcome = (await tracker.dispatch(actor, command)).unwrap()
    return TaskResponse.model_validate(outcome.task)


@router.post(
    "/{task_id}/confirm",
    response_model=ConfirmResponse,
    responses={409: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def confirm_task(tracker: Tracker, actor: Actor, task_id: TaskId) -> ConfirmResponse:
    """Confirm a DONE task and release its payment."""
    outcome = (await tracker.dispatch(actor, ConfirmTask(task_id))).unwrap()
    return ConfirmResponse(
        task=TaskResponse.model_validate(outcome.task),
        payment_request=PaymentRequestResponse.model_validate(outcome.payment_request),
    )


@router.post(
    "/{task_id}/decline",
    response_model=TaskResponse,
    responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def decline_task(
    tracker: Tracker, actor: Actor, task_id: TaskId, payload: DeclineRequest
) -> TaskResponse:
    outcome = (await tracker.dispatch(actor, DeclineTask(task_id, payload.reason))).unwrap()
    return TaskResponse.model_validate(outcome.task)
