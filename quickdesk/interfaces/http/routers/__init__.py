"""API routers."""

from fastapi import APIRouter

from . import auth, categories, dashboard, notifications, tickets, uploads, users


def create_api_router() -> APIRouter:
    router = APIRouter()
    router.include_router(auth.router, prefix="/auth", tags=["auth"])
    router.include_router(users.router, prefix="/users", tags=["users"])
    router.include_router(categories.router, prefix="/categories", tags=["categories"])
    router.include_router(tickets.router, prefix="/tickets", tags=["tickets"])
    router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
    router.include_router(uploads.router, prefix="/upload", tags=["uploads"])
    router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
    return router


__all__ = ["create_api_router"]
