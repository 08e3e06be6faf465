"""Balance and dashboard endpoints."""

from typing import Annotated

from fastapi import APIRouter, Path

from taskpay.api.dependencies import Actor, Tracker
from taskpay.api.schemas import BalanceResponse, ErrorResponse, FleetSummaryResponse
from taskpay.domain.errors import AuthorizationError

router = APIRouter(tags=["balances"])


@router.get("/balances/me", response_model=BalanceResponse)
async def my_balance(tracker: Tracker, actor: Actor) -> BalanceResponse:
    summary = (await tracker.balance(actor.user_id)).unwrap()
    return BalanceResponse.model_validate(summary)


@router.get(
    "/balances/{employee_id}",
    response_model=BalanceResponse,
    responses={403: {"model": ErrorResponse}},
)
async def employee_balance(
    tracker: Tracker, actor: Actor, employee_id: Annotated[str, Path()]
) -> BalanceResponse:
    if not actor.is_admin and employee_id != actor.user_id:
        raise AuthorizationError("Employees may only view their own balance")
    summary = (await tracker.balance(employee_id)).unwrap()
    return BalanceResponse.model_validate(summary)


@router.get("/dashboard", response_model=FleetSummaryResponse)
async def dashboard(tracker: Tracker, actor: Actor) -> FleetSummaryResponse:
    """Admin dashboard totals."""
    actor.require_admin()
    summary = (await tracker.fleet_summary()).unwrap()
    return FleetSummaryResponse.model_validate(summary)
