"""FastAPI dependencies for dependency injection."""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status

from taskpay.domain.context import ActorContext
from taskpay.domain.types import Snapshot
from taskpay.services.account_engine import authorize_session
from taskpay.services.tracker import TrackerService


def get_tracker(request: Request) -> TrackerService:
    """Tracker service installed on the application."""
    return request.app.state.tracker


async def get_snapshot(
    tracker: Annotated[TrackerService, Depends(get_tracker)],
) -> Snapshot:
    """Current collections; storage failures surface through the error handler."""
    return (await tracker.snapshot()).unwrap()


async def get_actor(
    snapshot: Annotated[Snapshot, Depends(get_snapshot)],
    x_user_id: Annotated[str | None, Header()] = None,
) -> ActorContext:
    """Build the caller context from the X-User-ID header.

    Employees whose application is not approved are turned away here.
    """
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-User-ID header is required",
        )
    user = snapshot.find_user(x_user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unknown user",
        )
    return ActorContext.for_user(authorize_session(user))


# Type aliases for cleaner dependency injection
Tracker = Annotated[TrackerService, Depends(get_tracker)]
CurrentSnapshot = Annotated[Snapshot, Depends(get_snapshot)]
Actor = Annotated[ActorContext, Depends(get_actor)]
