"""Ticket category endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from quickdesk.core.security import get_current_account, get_current_admin, get_current_staff
from quickdesk.interfaces.http.deps import get_category_service
from quickdesk.modules.accounts.models import Account
from quickdesk.modules.categories.exceptions import (
    CategoryAlreadyExistsError,
    CategoryInUseError,
    CategoryNotFoundError,
    InvalidBulkActionError,
)
from quickdesk.modules.categories.models import CategoryCreateInput, CategoryQuery, CategoryUpdateInput
from quickdesk.modules.categories.service import CategoryService
from quickdesk.schemas import (
    ApiResponse,
    CategoryBulkRequest,
    CategoryCreate,
    CategoryListPayload,
    CategoryOut,
    CategoryPayload,
    CategoryStatsOut,
    CategoryUpdate,
    ModifiedCount,
    Pagination,
)

router = APIRouter()

DUPLICATE_NAME = "Category with this name already exists"


@router.get("", response_model=ApiResponse[CategoryListPayload], summary="List categories")
async def list_categories(
    is_active: Optional[bool] = Query(default=True, alias="isActive"),
    search: Optional[str] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    current: Account = Depends(get_current_account),
    service: CategoryService = Depends(get_category_service),
):
    result = await service.list_categories(
        CategoryQuery(is_active=is_active, search=search, skip=(page - 1) * limit, limit=limit)
    )
    return ApiResponse(
        data=CategoryListPayload(
            categories=[CategoryOut.model_validate(item) for item in result.categories],
            pagination=Pagination.build(page, limit, result.total),
        )
    )


@router.get("/stats", response_model=ApiResponse[CategoryStatsOut], summary="Category usage statistics")
async def category_stats(
    current: Account = Depends(get_current_account),
    service: CategoryService = Depends(get_category_service),
):
    return ApiResponse(data=CategoryStatsOut.model_validate(await service.stats()))


@router.put("/bulk", response_model=ApiResponse[ModifiedCount], summary="Bulk update categories")
async def bulk_update(
    payload: CategoryBulkRequest,
    admin: Account = Depends(get_current_admin),
    service: CategoryService = Depends(get_category_service),
):
    data = payload.data.model_dump(exclude_none=True) if payload.data else None
    try:
        modified = await service.bulk_update(payload.category_ids, payload.action, data)
    except InvalidBulkActionError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return ApiResponse(
        message=f"Successfully updated {modified} category(ies)",
        data=ModifiedCount(modified_count=modified),
    )


@router.get("/{category_id}", response_model=ApiResponse[CategoryPayload], summary="Get a category")
async def get_category(
    category_id: str,
    current: Account = Depends(get_current_account),
    service: CategoryService = Depends(get_category_service),
):
    try:
        category = await service.get_category(category_id)
    except CategoryNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found") from exc
    return ApiResponse(data=CategoryPayload(category=CategoryOut.model_validate(category)))


@router.post(
    "",
    response_model=ApiResponse[CategoryPayload],
    status_code=status.HTTP_201_CREATED,
    summary="Create a category",
)
async def create_category(
    payload: CategoryCreate,
    staff: Account = Depends(get_current_staff),
    service: CategoryService = Depends(get_category_service),
):
    try:
        category = await service.create_category(
            CategoryCreateInput(name=payload.name, description=payload.description, color=payload.color),
            created_by_id=staff.id,
        )
    except CategoryAlreadyExistsError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=DUPLICATE_NAME) from exc
    return ApiResponse(
        message="Category created successfully",
        data=CategoryPayload(category=CategoryOut.model_validate(category)),
    )


@router.put("/{category_id}", response_model=ApiResponse[CategoryPayload], summary="Update a category")
async def update_category(
    category_id: str,
    payload: CategoryUpdate,
    staff: Account = Depends(get_current_staff),
    service: CategoryService = Depends(get_category_service),
):
    try:
        category = await service.update_category(
            category_id,
            CategoryUpdateInput(
                name=payload.name,
                description=payload.description,
                color=payload.color,
                is_active=payload.is_active,
            ),
        )
    except CategoryNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found") from exc
    except CategoryAlreadyExistsError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=DUPLICATE_NAME) from exc
    return ApiResponse(
        message="Category updated successfully",
        data=CategoryPayload(category=CategoryOut.model_validate(category)),
    )


@router.delete("/{category_id}", response_model=ApiResponse, summary="Delete a category")
async def delete_category(
    category_id: str,
    admin: Account = Depends(get_current_admin),
    service: CategoryService = Depends(get_category_service),
):
    try:
        await service.delete_category(category_id)
    except CategoryNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found") from exc
    except CategoryInUseError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                f"Cannot delete category. It has {exc.ticket_count} associated ticket(s). "
                "Please reassign or delete the tickets first."
            ),
        ) from exc
    return ApiResponse(message="Category deleted successfully")
