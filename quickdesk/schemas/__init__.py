"""Pydantic schemas for the HTTP API.

Every response is wrapped in ``ApiResponse``; field names go over the wire in
camelCase.
"""
from datetime import datetime
from pathlib import Path
from typing import Any, Generic, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
HEX_COLOR_PATTERN = r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$"

Role = Literal["user", "agent", "admin"]
Priority = Literal["low", "medium", "high", "urgent"]
Status = Literal["open", "in-progress", "resolved", "closed"]
NotificationType = Literal[
    "ticket_created",
    "ticket_updated",
    "ticket_resolved",
    "ticket_assigned",
    "system",
    "announcement",
]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=(total + limit - 1) // limit)


class TokenData(BaseModel):
    account_id: str
    role: str


# --- auth / users -----------------------------------------------------------


class UserOut(CamelModel):
    id: str
    name: str
    email: str
    role: str
    department: Optional[str] = None
    phone: Optional[str] = None
    is_active: bool
    last_login_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class RegisterRequest(CamelModel):
    name: str = Field(..., min_length=2, max_length=50)
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=100)
    password: str = Field(..., min_length=6)
    department: Optional[str] = Field(default=None, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=20)


class LoginRequest(CamelModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AuthPayload(CamelModel):
    user: UserOut
    token: str


class UserPayload(CamelModel):
    user: UserOut


class ProfileUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    department: Optional[str] = Field(default=None, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=20)


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6)


class ForgotPasswordRequest(CamelModel):
    email: str = Field(..., min_length=1)


class ResetPasswordRequest(CamelModel):
    new_password: str = Field(..., min_length=6)


class ResetTokenPayload(CamelModel):
    reset_token: str


class UserCreate(RegisterRequest):
    role: Role = "user"
    is_active: bool = True


class UserUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN, max_length=100)
    role: Optional[Role] = None
    department: Optional[str] = Field(default=None, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=20)
    is_active: Optional[bool] = None
    password: Optional[str] = Field(default=None, min_length=6)


class UserListPayload(CamelModel):
    users: list[UserOut]
    pagination: Pagination


class AgentsPayload(CamelModel):
    agents: list[UserOut]


class UserStatsOut(CamelModel):
    total_users: int
    active_users: int
    inactive_users: int
    role_stats: dict[str, int]


# --- categories -------------------------------------------------------------


class PersonOut(CamelModel):
    id: str
    name: str
    email: str


class CategoryOut(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    color: str
    is_active: bool
    created_by: Optional[PersonOut] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    ticket_count: Optional[int] = None


class CategoryCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = Field(default=None, max_length=200)
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR_PATTERN)


class CategoryUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    description: Optional[str] = Field(default=None, max_length=200)
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR_PATTERN)
    is_active: Optional[bool] = None


class CategoryBulkData(CamelModel):
    description: Optional[str] = Field(default=None, max_length=200)
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR_PATTERN)
    is_active: Optional[bool] = None


class CategoryBulkRequest(CamelModel):
    category_ids: list[str] = Field(default_factory=list)
    action: str
    data: Optional[CategoryBulkData] = None


class CategoryPayload(CamelModel):
    category: CategoryOut


class CategoryListPayload(CamelModel):
    categories: list[CategoryOut]
    pagination: Pagination


class CategoryUsageOut(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    color: str
    is_active: bool
    created_at: Optional[datetime] = None
    ticket_count: int
    open_tickets: int
    resolved_tickets: int


class CategoryStatsOut(CamelModel):
    total_categories: int
    active_categories: int
    category_stats: list[CategoryUsageOut]


class ModifiedCount(CamelModel):
    modified_count: int


class DeletedCount(CamelModel):
    deleted_count: int


# --- tickets ----------------------------------------------------------------


class UserRefOut(CamelModel):
    id: str
    name: str
    email: str
    role: str
    department: Optional[str] = None


class CategoryRefOut(CamelModel):
    id: str
    name: str
    color: str


class AttachmentOut(CamelModel):
    id: str
    filename: str
    original_name: str
    size: int
    mime_type: str
    url: str
    uploaded_at: Optional[datetime] = None


class CommentOut(CamelModel):
    id: str
    content: str
    author: UserRefOut
    is_internal: bool
    created_at: Optional[datetime] = None


class RatingOut(CamelModel):
    rating: int
    feedback: str = ""
    rated_at: Optional[datetime] = None


class TicketOut(CamelModel):
    id: str
    ticket_id: str
    title: str
    description: str
    priority: str
    status: str
    category: CategoryRefOut
    created_by: UserRefOut
    assigned_to: Optional[UserRefOut] = None
    attachments: list[AttachmentOut] = Field(default_factory=list)
    comments: list[CommentOut] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    due_date: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    resolution: Optional[str] = None
    satisfaction_rating: Optional[RatingOut] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TicketUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, min_length=1, max_length=2000)
    priority: Optional[Priority] = None
    status: Optional[Status] = None
    assigned_to: Optional[str] = None
    tags: Optional[Union[str, list[str]]] = None
    due_date: Optional[datetime] = None
    resolution: Optional[str] = Field(default=None, max_length=1000)


class CommentCreate(CamelModel):
    content: str = Field(..., min_length=1, max_length=1000)
    is_internal: bool = False


class RatingCreate(CamelModel):
    rating: int = Field(..., ge=1, le=5)
    feedback: Optional[str] = Field(default=None, max_length=500)


class TicketPayload(CamelModel):
    ticket: TicketOut


class TicketListPayload(CamelModel):
    tickets: list[TicketOut]
    pagination: Pagination


class CommentPayload(CamelModel):
    comment: CommentOut


class RatingPayload(CamelModel):
    rating: RatingOut


class MonthlyCountOut(CamelModel):
    year: int
    month: int
    count: int


class ResponseTimeOut(CamelModel):
    avg_response_time: float = 0.0
    min_response_time: float = 0.0
    max_response_time: float = 0.0


class TicketStatsOut(CamelModel):
    total_tickets: int
    open_tickets: int
    resolved_tickets: int
    status_stats: dict[str, int]
    priority_stats: dict[str, int]
    monthly_stats: list[MonthlyCountOut]
    response_time: ResponseTimeOut


# --- dashboard --------------------------------------------------------------


class DailyCountOut(CamelModel):
    date: str
    count: int


class StaffOverviewOut(CamelModel):
    total_tickets: int
    open_tickets: int
    in_progress_tickets: int
    resolved_tickets: int
    total_users: int
    total_categories: int
    urgent_tickets: int


class MyTicketsOverviewOut(CamelModel):
    my_tickets: int
    my_open_tickets: int
    my_in_progress_tickets: int
    my_resolved_tickets: int


class DistributionOut(CamelModel):
    by_status: dict[str, int]
    by_priority: Optional[dict[str, int]] = None


class RecentTicketOut(CamelModel):
    id: str
    ticket_id: str
    title: str
    status: str
    priority: str
    category: CategoryRefOut
    created_by: UserRefOut
    assigned_to: Optional[UserRefOut] = None
    created_at: Optional[datetime] = None


class DashboardStatsOut(CamelModel):
    overview: Union[StaffOverviewOut, MyTicketsOverviewOut]
    distribution: DistributionOut
    recent_activity: list[RecentTicketOut]
    trends: Optional[list[DailyCountOut]] = None


class ResolutionTimeOut(CamelModel):
    avg_resolution_time: float
    count: int


class CategoryCountOut(CamelModel):
    category_id: Optional[str] = None
    category_name: Optional[str] = None
    count: int


class TicketAnalyticsOut(CamelModel):
    period: str
    tickets_created: list[DailyCountOut]
    tickets_resolved: list[DailyCountOut]
    avg_resolution_time: ResolutionTimeOut
    tickets_by_category: list[CategoryCountOut]


class PeriodChangeOut(CamelModel):
    current: int
    previous: int
    change: float


class RateComparisonOut(CamelModel):
    current: float
    previous: float


class PerformanceMetricsOut(CamelModel):
    total_tickets: PeriodChangeOut
    resolved_tickets: PeriodChangeOut
    urgent_tickets: PeriodChangeOut
    resolution_rate: RateComparisonOut


class PerformancePayload(CamelModel):
    metrics: PerformanceMetricsOut


# --- notifications ----------------------------------------------------------


class TicketRefOut(CamelModel):
    id: str
    ticket_id: str
    title: str
    status: str
    priority: str


class NotificationOut(CamelModel):
    id: str
    recipient_id: str
    title: str
    message: str
    type: str
    priority: str
    is_read: bool
    related_ticket: Optional[TicketRefOut] = None
    action_url: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class NotificationCreate(CamelModel):
    recipient: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1)
    type: NotificationType = "system"
    priority: Priority = "medium"
    related_ticket: Optional[str] = None
    action_url: Optional[str] = Field(default=None, max_length=255)
    metadata: dict[str, Any] = Field(default_factory=dict)


class NotificationPagination(CamelModel):
    current_page: int
    total_pages: int
    total_notifications: int
    has_next_page: bool
    has_prev_page: bool


class NotificationListPayload(CamelModel):
    notifications: list[NotificationOut]
    pagination: NotificationPagination
    unread_count: int


class NotificationPayload(CamelModel):
    notification: NotificationOut


class TypeCountOut(CamelModel):
    total: int = 0
    unread: int = 0


class NotificationStatsOut(CamelModel):
    total: int
    unread: int
    read: int
    type_stats: dict[str, TypeCountOut]


# --- uploads ----------------------------------------------------------------


class StoredFileOut(CamelModel):
    filename: str
    original_name: str
    size: int
    mimetype: str
    path: Path
    url: str


class FileInfoOut(CamelModel):
    filename: str
    size: int
    created_time: datetime
    modified_time: datetime
    url: str


class StoredFilePayload(CamelModel):
    file: StoredFileOut


class FileInfoPayload(CamelModel):
    file: FileInfoOut


class FilesPayload(CamelModel):
    files: list[StoredFileOut]


class UploadStatsOut(CamelModel):
    total_files: int
    total_size: int
    total_size_mb: str = Field(..., alias="totalSizeMB")
    file_types: dict[str, int]


class CleanupOut(CamelModel):
    deleted_count: int
    cutoff_date: datetime
