"""Withdrawal API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Path, status

from taskpay.api.dependencies import Actor, CurrentSnapshot, Tracker
from taskpay.api.schemas import (
    ErrorResponse,
    WithdrawalCreate,
    WithdrawalListResponse,
    WithdrawalProcess,
    WithdrawalResponse,
)
from taskpay.domain.commands import CreateWithdrawal, ProcessWithdrawal

router = APIRouter(prefix="/withdrawals", tags=["withdrawals"])


@router.get("", response_model=WithdrawalListResponse)
async def list_withdrawals(actor: Actor, snapshot: CurrentSnapshot) -> WithdrawalListResponse:
    """Administrators see every request; employees see their own."""
    items = [
        w for w in snapshot.withdrawals if actor.is_admin or w.employee_id == actor.user_id
    ]
    return WithdrawalListResponse(
        items=[WithdrawalResponse.model_validate(w) for w in items],
        total=len(items),
    )


@router.post(
    "",
    response_model=WithdrawalResponse,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
async def create_withdrawal(
    tracker: Tracker, actor: Actor, payload: WithdrawalCreate
) -> WithdrawalResponse:
    """Request a cash-out against the caller's available balance."""
    command = CreateWithdrawal(amount=payload.amount, method=payload.method)
    withdrawal = (await tracker.dispatch(actor, command)).unwrap()
    return WithdrawalResponse.model_validate(withdrawal)


@router.post(
    "/{withdrawal_id}/process",
    response_model=WithdrawalResponse,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def process_withdrawal(
    tracker: Tracker,
    actor: Actor,
    withdrawal_id: Annotated[str, Path()],
    payload: WithdrawalProcess,
) -> WithdrawalResponse:
    """Mark a pending request PAID (with receipt) or REJECTED (with reason)."""
    command = ProcessWithdrawal(
        withdrawal_id=withdrawal_id,
        outcome=payload.outcome,
        receipt_image=payload.receipt_image,
        rejection_reason=payload.rejection_reason,
    )
    withdrawal = (await tracker.dispatch(actor, command)).unwrap()
    return WithdrawalResponse.model_validate(withdrawal)
