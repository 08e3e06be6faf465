"""Payment history endpoints."""

from fastapi import APIRouter

from taskpay.api.dependencies import Actor, CurrentSnapshot
from taskpay.api.schemas import PaymentRequestListResponse, PaymentRequestResponse

router = APIRouter(prefix="/payments", tags=["payments"])


@router.get("", response_model=PaymentRequestListResponse)
async def list_payments(actor: Actor, snapshot: CurrentSnapshot) -> PaymentRequestListResponse:
    """Released payments; employees see their own earnings history."""
    items = [
        p
        for p in snapshot.payment_requests
        if actor.is_admin or p.employee_id == actor.user_id
    ]
    return PaymentRequestListResponse(
        items=[PaymentRequestResponse.model_validate(p) for p in items],
        total=len(items),
    )
