"""User administration endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from quickdesk.core.security import get_current_account, get_current_admin
from quickdesk.interfaces.http.deps import get_account_service
from quickdesk.modules.accounts.exceptions import (
    AccountAlreadyExistsError,
    AccountInUseError,
    AccountNotFoundError,
    SelfDeletionError,
)
from quickdesk.modules.accounts.models import (
    Account,
    AccountCreateInput,
    AccountQuery,
    AccountUpdateInput,
)
from quickdesk.modules.accounts.service import AccountService
from quickdesk.schemas import (
    AgentsPayload,
    ApiResponse,
    Pagination,
    Role,
    UserCreate,
    UserListPayload,
    UserOut,
    UserPayload,
    UserStatsOut,
    UserUpdate,
)

router = APIRouter()


@router.get("/agents", response_model=ApiResponse[AgentsPayload], summary="Active agents and admins")
async def list_agents(
    current: Account = Depends(get_current_account),
    account_service: AccountService = Depends(get_account_service),
):
    agents = await account_service.list_agents()
    return ApiResponse(data=AgentsPayload(agents=[UserOut.model_validate(item) for item in agents]))


@router.get("/stats", response_model=ApiResponse[UserStatsOut], summary="User statistics")
async def user_stats(
    admin: Account = Depends(get_current_admin),
    account_service: AccountService = Depends(get_account_service),
):
    stats = await account_service.stats()
    return ApiResponse(data=UserStatsOut.model_validate(stats))


@router.get("", response_model=ApiResponse[UserListPayload], summary="List users")
async def list_users(
    role: Optional[Role] = None,
    is_active: Optional[bool] = Query(default=None, alias="isActive"),
    search: Optional[str] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    admin: Account = Depends(get_current_admin),
    account_service: AccountService = Depends(get_account_service),
):
    result = await account_service.list_accounts(
        AccountQuery(role=role, is_active=is_active, search=search, skip=(page - 1) * limit, limit=limit)
    )
    return ApiResponse(
        data=UserListPayload(
            users=[UserOut.model_validate(item) for item in result.accounts],
            pagination=Pagination.build(page, limit, result.total),
        )
    )


@router.post(
    "",
    response_model=ApiResponse[UserPayload],
    status_code=status.HTTP_201_CREATED,
    summary="Create a user",
)
async def create_user(
    payload: UserCreate,
    admin: Account = Depends(get_current_admin),
    account_service: AccountService = Depends(get_account_service),
):
    try:
        account = await account_service.create_account(
            AccountCreateInput(
                name=payload.name,
                email=payload.email,
                password=payload.password,
                role=payload.role,
                department=payload.department,
                phone=payload.phone,
                is_active=payload.is_active,
            )
        )
    except AccountAlreadyExistsError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User already exists with this email",
        ) from exc
    return ApiResponse(message="User created successfully", data=UserPayload(user=UserOut.model_validate(account)))


@router.get("/{user_id}", response_model=ApiResponse[UserPayload], summary="Get a user")
async def get_user(
    user_id: str,
    admin: Account = Depends(get_current_admin),
    account_service: AccountService = Depends(get_account_service),
):
    account = await account_service.get_by_id(user_id)
    if account is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return ApiResponse(data=UserPayload(user=UserOut.model_validate(account)))


@router.put("/{user_id}", response_model=ApiResponse[UserPayload], summary="Update a user")
async def update_user(
    user_id: str,
    payload: UserUpdate,
    admin: Account = Depends(get_current_admin),
    account_service: AccountService = Depends(get_account_service),
):
    update_input = AccountUpdateInput(**payload.model_dump(exclude_unset=True))
    try:
        account = await account_service.update_account(user_id, update_input)
    except AccountNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found") from exc
    except AccountAlreadyExistsError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already exists") from exc
    return ApiResponse(message="User updated successfully", data=UserPayload(user=UserOut.model_validate(account)))


@router.delete("/{user_id}", response_model=ApiResponse, summary="Delete a user")
async def delete_user(
    user_id: str,
    admin: Account = Depends(get_current_admin),
    account_service: AccountService = Depends(get_account_service),
):
    try:
        await account_service.delete_account(user_id, actor_id=admin.id)
    except SelfDeletionError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot delete your own account",
        ) from exc
    except AccountNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found") from exc
    except AccountInUseError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot delete user. They have created {exc.args[0]} ticket(s).",
        ) from exc
    return ApiResponse(message="User deleted successfully")
