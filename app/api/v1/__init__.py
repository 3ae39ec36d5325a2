from fastapi import APIRouter

from .endpoints import invoices, chart_of_accounts, notifications, health

api_router = APIRouter()

api_router.include_router(invoices.router, prefix="/invoices", tags=["invoices"])
api_router.include_router(chart_of_accounts.router, prefix="/chart-of-accounts", tags=["chart-of-accounts"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
api_router.include_router(health.router, prefix="/health", tags=["health"])
