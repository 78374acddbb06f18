"""Dependency providers for the ticketing and upload services."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from quickdesk.core.config import Settings, get_settings
from quickdesk.modules.categories.service import CategoryService
from quickdesk.modules.dashboard.service import DashboardService
from quickdesk.modules.notifications.service import NotificationService
from quickdesk.modules.tickets.service import TicketService
from quickdesk.modules.uploads.service import UploadService

from .database import get_db_session


def get_upload_service(settings: Settings = Depends(get_settings)) -> UploadService:
    return UploadService.from_settings(settings)


def get_category_service(db: AsyncSession = Depends(get_db_session)) -> CategoryService:
    return CategoryService.with_session(db)


def get_dashboard_service(db: AsyncSession = Depends(get_db_session)) -> DashboardService:
    return DashboardService.with_session(db)


def get_notification_service(db: AsyncSession = Depends(get_db_session)) -> NotificationService:
    return NotificationService.with_session(db)


def get_ticket_service(
    db: AsyncSession = Depends(get_db_session),
    uploads: UploadService = Depends(get_upload_service),
    settings: Settings = Depends(get_settings),
) -> TicketService:
    return TicketService.with_session(
        db,
        uploads=uploads,
        max_attachments=settings.storage.max_ticket_attachments,
    )
