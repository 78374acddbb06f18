"""Ticket endpoints."""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from quickdesk.core.security import get_current_account, get_current_admin
from quickdesk.interfaces.http.deps import get_db_session, get_ticket_service
from quickdesk.interfaces.http.routers.uploads import upload_http_error
from quickdesk.modules.accounts.models import Account
from quickdesk.modules.tickets.exceptions import (
    InvalidAssigneeError,
    InvalidCategoryError,
    TicketAccessDeniedError,
    TicketError,
    TicketNotFoundError,
    TicketNotRatableError,
)
from quickdesk.modules.tickets.models import TicketCreateInput, TicketQuery, TicketUpdateInput, parse_tags
from quickdesk.modules.tickets.service import TicketService
from quickdesk.modules.uploads.exceptions import UploadError
from quickdesk.schemas import (
    ApiResponse,
    CommentCreate,
    CommentOut,
    CommentPayload,
    Pagination,
    Priority,
    RatingCreate,
    RatingOut,
    RatingPayload,
    Status,
    TicketListPayload,
    TicketOut,
    TicketPayload,
    TicketStatsOut,
    TicketUpdate,
)

router = APIRouter()


def _ticket_http_error(exc: TicketError) -> HTTPException:
    if isinstance(exc, TicketNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Ticket not found")
    if isinstance(exc, TicketAccessDeniedError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
    if isinstance(exc, InvalidCategoryError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid category")
    if isinstance(exc, InvalidAssigneeError):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid assignee. User must be an active agent or admin.",
        )
    if isinstance(exc, TicketNotRatableError):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only resolved or closed tickets can be rated",
        )
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.get("/stats", response_model=ApiResponse[TicketStatsOut], summary="Ticket statistics")
async def ticket_stats(
    only_assigned: bool = Query(default=False, alias="onlyAssigned"),
    current: Account = Depends(get_current_account),
    service: TicketService = Depends(get_ticket_service),
):
    stats = await service.stats(current, only_assigned=only_assigned)
    return ApiResponse(data=TicketStatsOut.model_validate(stats))


@router.get("", response_model=ApiResponse[TicketListPayload], summary="List tickets")
async def list_tickets(
    status_filter: Optional[Status] = Query(default=None, alias="status"),
    priority: Optional[Priority] = None,
    category: Optional[str] = None,
    assigned_to: Optional[str] = Query(default=None, alias="assignedTo"),
    my_tickets: bool = Query(default=False, alias="myTickets"),
    search: Optional[str] = None,
    start_date: Optional[datetime] = Query(default=None, alias="startDate"),
    end_date: Optional[datetime] = Query(default=None, alias="endDate"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    current: Account = Depends(get_current_account),
    service: TicketService = Depends(get_ticket_service),
):
    query = TicketQuery(
        status=status_filter,
        priority=priority,
        category_id=category,
        assigned_to_id=assigned_to,
        search=search,
        start_date=start_date,
        end_date=end_date,
        skip=(page - 1) * limit,
        limit=limit,
    )
    result = await service.list_tickets(query, current, my_tickets=my_tickets)
    return ApiResponse(
        data=TicketListPayload(
            tickets=[TicketOut.model_validate(item) for item in result.tickets],
            pagination=Pagination.build(page, limit, result.total),
        )
    )


@router.post(
    "",
    response_model=ApiResponse[TicketPayload],
    status_code=status.HTTP_201_CREATED,
    summary="Create a ticket with optional attachments",
)
async def create_ticket(
    title: str = Form(..., min_length=1, max_length=100),
    description: str = Form(..., min_length=1, max_length=2000),
    category: str = Form(..., min_length=1),
    priority: Priority = Form(default="medium"),
    tags: Optional[str] = Form(default=None),
    due_date: Optional[datetime] = Form(default=None, alias="dueDate"),
    attachments: Optional[list[UploadFile]] = File(default=None),
    current: Account = Depends(get_current_account),
    service: TicketService = Depends(get_ticket_service),
):
    payload = TicketCreateInput(
        title=title,
        description=description,
        category_id=category,
        priority=priority,
        tags=parse_tags(tags),
        due_date=due_date,
    )
    files = [item for item in attachments or [] if item.filename]
    try:
        ticket = await service.create_ticket(payload, current, files)
    except TicketError as exc:
        raise _ticket_http_error(exc) from exc
    except UploadError as exc:
        raise upload_http_error(exc) from exc
    return ApiResponse(message="Ticket created successfully", data=TicketPayload(ticket=TicketOut.model_validate(ticket)))


@router.get("/{ticket_id}", response_model=ApiResponse[TicketPayload], summary="Get a ticket")
async def get_ticket(
    ticket_id: str,
    current: Account = Depends(get_current_account),
    service: TicketService = Depends(get_ticket_service),
):
    try:
        ticket = await service.get_ticket(ticket_id, current)
    except TicketError as exc:
        raise _ticket_http_error(exc) from exc
    return ApiResponse(data=TicketPayload(ticket=TicketOut.model_validate(ticket)))


@router.put("/{ticket_id}", response_model=ApiResponse[TicketPayload], summary="Update a ticket")
async def update_ticket(
    ticket_id: str,
    payload: TicketUpdate,
    current: Account = Depends(get_current_account),
    service: TicketService = Depends(get_ticket_service),
):
    update_input = TicketUpdateInput(
        title=payload.title,
        description=payload.description,
        priority=payload.priority,
        status=payload.status,
        assigned_to_id=payload.assigned_to,
        tags=parse_tags(payload.tags) if payload.tags is not None else None,
        due_date=payload.due_date,
        resolution=payload.resolution,
    )
    try:
        ticket = await service.update_ticket(ticket_id, update_input, current)
    except TicketError as exc:
        raise _ticket_http_error(exc) from exc
    return ApiResponse(message="Ticket updated successfully", data=TicketPayload(ticket=TicketOut.model_validate(ticket)))


@router.delete("/{ticket_id}", response_model=ApiResponse, summary="Delete a ticket")
async def delete_ticket(
    ticket_id: str,
    admin: Account = Depends(get_current_admin),
    service: TicketService = Depends(get_ticket_service),
    db: AsyncSession = Depends(get_db_session),
):
    try:
        filenames = await service.delete_ticket(ticket_id)
    except TicketError as exc:
        raise _ticket_http_error(exc) from exc
    # Files go only once the row is gone for good.
    await db.commit()
    await service.discard_files(filenames)
    return ApiResponse(message="Ticket deleted successfully")


@router.post(
    "/{ticket_id}/comments",
    response_model=ApiResponse[CommentPayload],
    status_code=status.HTTP_201_CREATED,
    summary="Comment on a ticket",
)
async def add_comment(
    ticket_id: str,
    payload: CommentCreate,
    current: Account = Depends(get_current_account),
    service: TicketService = Depends(get_ticket_service),
):
    try:
        comment = await service.add_comment(ticket_id, current, payload.content, is_internal=payload.is_internal)
    except TicketError as exc:
        raise _ticket_http_error(exc) from exc
    return ApiResponse(message="Comment added successfully", data=CommentPayload(comment=CommentOut.model_validate(comment)))


@router.post("/{ticket_id}/rate", response_model=ApiResponse[RatingPayload], summary="Rate a resolved ticket")
async def rate_ticket(
    ticket_id: str,
    payload: RatingCreate,
    current: Account = Depends(get_current_account),
    service: TicketService = Depends(get_ticket_service),
):
    try:
        rating = await service.rate_ticket(ticket_id, current, payload.rating, payload.feedback)
    except TicketError as exc:
        raise _ticket_http_error(exc) from exc
    return ApiResponse(message="Ticket rated successfully", data=RatingPayload(rating=RatingOut.model_validate(rating)))
