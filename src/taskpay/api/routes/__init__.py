"""API routes."""

from taskpay.api.routes.accounts import router as accounts_router
from taskpay.api.routes.balances import router as balances_router
from taskpay.api.routes.health import router as health_router
from taskpay.api.routes.payments import router as payments_router
from taskpay.api.routes.tasks import router as tasks_router
from taskpay.api.routes.withdrawals import router as withdrawals_router

__all__ = [
    "accounts_router",
    "balances_router",
    "health_router",
    "payments_router",
    "tasks_router",
    "withdrawals_router",
]
