"""Account, session and profile endpoints."""

from typing import Annotated

from fastapi import APIRouter, Path, status

from taskpay.api.dependencies import Actor, CurrentSnapshot, Tracker
from taskpay.api.schemas import (
    AccountResponse,
    ErrorResponse,
    LoginRequest,
    PaymentProfileResponse,
    PaymentProfileWrite,
    ProfileUpdate,
    RegisterRequest,
    RejectRequest,
    UserListResponse,
    UserResponse,
)
from taskpay.domain.commands import (
    ApproveAccount,
    RegisterEmployee,
    RejectAccount,
    SavePaymentProfile,
    UpdateProfile,
)
from taskpay.domain.types import AccountStatus, UserRole
from taskpay.services.account_engine import AccountOutcome

router = APIRouter(tags=["accounts"])

UserId = Annotated[str, Path()]


def _account(outcome: AccountOutcome) -> AccountResponse:
    return AccountResponse(
        user=UserResponse.model_validate(outcome.user),
        profile=(
            PaymentProfileResponse.model_validate(outcome.profile) if outcome.profile else None
        ),
    )


# ============================================================================
# Session and registration
# ============================================================================


@router.post(
    "/session",
    response_model=UserResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def login(tracker: Tracker, payload: LoginRequest) -> UserResponse:
    """Resolve the user for an email; pending and rejected employees get 403."""
    user = (await tracker.login(payload.email)).unwrap()
    return UserResponse.model_validate(user)


@router.post(
    "/accounts",
    response_model=AccountResponse,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"model": ErrorResponse}},
)
async def register(tracker: Tracker, payload: RegisterRequest) -> AccountResponse:
    """Self-register an employee; the account starts PENDING."""
    command = RegisterEmployee(
        name=payload.name,
        email=payload.email,
        contact=payload.contact,
        wallet_identifier=payload.wallet_identifier,
        wallet_holder_name=payload.wallet_holder_name,
    )
    return _account((await tracker.dispatch(None, command)).unwrap())


# ============================================================================
# Approvals
# ============================================================================


@router.get("/accounts/pending", response_model=UserListResponse)
async def list_pending(actor: Actor, snapshot: CurrentSnapshot) -> UserListResponse:
    actor.require_admin()
    pending = [
        u
        for u in snapshot.users
        if u.role == UserRole.EMPLOYEE and u.account_status == AccountStatus.PENDING
    ]
    return UserListResponse(
        items=[UserResponse.model_validate(u) for u in pending],
        total=len(pending),
    )


@router.post(
    "/accounts/{user_id}/approve",
    response_model=UserResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def approve_account(tracker: Tracker, actor: Actor, user_id: UserId) -> UserResponse:
    outcome = (await tracker.dispatch(actor, ApproveAccount(user_id))).unwrap()
    return UserResponse.model_validate(outcome.user)


@router.post(
    "/accounts/{user_id}/reject",
    response_model=UserResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def reject_account(
    tracker: Tracker, actor: Actor, user_id: UserId, payload: RejectRequest
) -> UserResponse:
    outcome = (await tracker.dispatch(actor, RejectAccount(user_id, payload.reason))).unwrap()
    return UserResponse.model_validate(outcome.user)


# ============================================================================
# Self service
# ============================================================================


@router.get("/me", response_model=AccountResponse)
async def get_me(actor: Actor, snapshot: CurrentSnapshot) -> AccountResponse:
    user = snapshot.find_user(actor.user_id)
    return _account(AccountOutcome(user=user, profile=snapshot.profile_for(actor.user_id)))


@router.put(
    "/me/profile",
    response_model=UserResponse,
    responses={422: {"model": ErrorResponse}},
)
async def update_profile(tracker: Tracker, actor: Actor, payload: ProfileUpdate) -> UserResponse:
    command = UpdateProfile(name=payload.name, contact=payload.contact, avatar=payload.avatar)
    outcome = (await tracker.dispatch(actor, command)).unwrap()
    return UserResponse.model_validate(outcome.user)


@router.put(
    "/me/payment-profile",
    response_model=PaymentProfileResponse,
    responses={422: {"model": ErrorResponse}},
)
async def save_payment_profile(
    tracker: Tracker, actor: Actor, payload: PaymentProfileWrite
) -> PaymentProfileResponse:
    command = SavePaymentProfile(
        default_method=payload.default_method,
        wallet_provider=payload.wallet_provider,
        wallet_identifier=payload.wallet_identifier,
        wallet_holder_name=payload.wallet_holder_name,
    )
    outcome = (await tracker.dispatch(actor, command)).unwrap()
    return PaymentProfileResponse.model_validate(outcome.profile)
