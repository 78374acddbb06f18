"""Reusable FastAPI dependencies."""

from .database import get_db_session
from .account import get_account_repository, get_account_service
from .services import (
    get_category_service,
    get_dashboard_service,
    get_notification_service,
    get_ticket_service,
    get_upload_service,
)

__all__ = [
    "get_db_session",
    "get_account_repository",
    "get_account_service",
    "get_category_service",
    "get_dashboard_service",
    "get_notification_service",
    "get_ticket_service",
    "get_upload_service",
]
