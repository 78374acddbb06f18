"""JWT helpers and authentication dependencies."""
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from quickdesk.core.config import get_settings
from quickdesk.interfaces.http.deps.account import get_account_service
from quickdesk.modules.accounts.models import ROLE_ADMIN, STAFF_ROLES, Account
from quickdesk.modules.accounts.service import AccountService
from quickdesk.schemas import TokenData

security = HTTPBearer(auto_error=False)


def create_access_token(account_id: str, role: str, expires_delta: Optional[timedelta] = None) -> str:
    settings = get_settings()
    expire_delta = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    payload = {
        "sub": account_id,
        "role": role,
        "exp": datetime.now(timezone.utc) + expire_delta,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> TokenData:
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authorized, token failed") from exc

    account_id = payload.get("sub")
    role = payload.get("role")
    if not account_id or not role:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authorized, token failed")
    return TokenData(account_id=account_id, role=role)


async def get_current_account(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    account_service: AccountService = Depends(get_account_service),
) -> Account:
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authorized, no token")
    token_data = decode_access_token(credentials.credentials)
    account = await account_service.get_by_id(token_data.account_id)
    if account is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authorized, user not found")
    if not account.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Account is deactivated")
    return account


def require_roles(*roles: str) -> Callable:
    """Build a dependency that admits only the given roles."""
    allowed = frozenset(roles)

    async def dependency(account: Account = Depends(get_current_account)) -> Account:
        if account.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"User role {account.role} is not authorized to access this route",
            )
        return account

    return dependency


get_current_admin = require_roles(ROLE_ADMIN)
get_current_staff = require_roles(*STAFF_ROLES)
