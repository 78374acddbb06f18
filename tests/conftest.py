"""Shared fixtures for QuickDesk tests."""

import io
from dataclasses import dataclass

import httpx
import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from quickdesk.core.config import get_settings
from quickdesk.core.security import create_access_token
from quickdesk.infrastructure.database import dispose_engine, init_db
from quickdesk.infrastructure.database.session import get_session_factory
from quickdesk.modules.accounts.models import Account, AccountCreateInput
from quickdesk.modules.accounts.service import AccountService
from quickdesk.modules.categories.models import CategoryCreateInput
from quickdesk.modules.categories.service import CategoryService
from quickdesk.modules.uploads.service import UploadService

PASSWORD = "secret123"


@dataclass
class Member:
    """A stored account together with a bearer token for it."""

    account: Account
    token: str

    @property
    def id(self) -> str:
        return self.account.id

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


def make_upload(name: str, data: bytes, content_type: str = "text/plain") -> UploadFile:
    """Build an in-memory upload the way FastAPI hands one to a route."""
    return UploadFile(
        file=io.BytesIO(data),
        filename=name,
        headers=Headers({"content-type": content_type}),
    )


@pytest.fixture
def uploads_dir(tmp_path):
    """Directory used as the uploads root (not created up front)."""
    return tmp_path / "uploads"


@pytest.fixture
def upload_service(uploads_dir):
    """Upload service over a temporary root with small limits."""
    return UploadService(
        uploads_dir,
        max_file_size=1024,
        max_files=3,
        allowed_extensions=[".txt", ".png", ".pdf", ".log"],
    )


@pytest.fixture
def settings_env(monkeypatch, tmp_path, uploads_dir):
    """Point settings at a throwaway database and uploads directory."""
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("DATABASE__URL", f"sqlite+aiosqlite:///{tmp_path / 'quickdesk.db'}")
    monkeypatch.setenv("STORAGE__UPLOADS_DIR", str(uploads_dir))
    monkeypatch.setenv("STORAGE__MAX_FILE_SIZE", "2048")
    monkeypatch.setenv("SECURITY__SECRET_KEY", "test-secret-key")
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture
async def app(settings_env):
    """Application bound to a fresh database.

    The ASGI transport does not run the lifespan, so the schema is created here.
    """
    from quickdesk.main import create_app

    await dispose_engine()
    application = create_app(settings_env)
    await init_db()
    yield application
    await dispose_engine()


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:
        yield http


async def create_member(name: str, email: str, role: str, *, is_active: bool = True) -> Member:
    factory = get_session_factory()
    async with factory() as session:
        account = await AccountService.with_session(session).create_account(
            AccountCreateInput(name=name, email=email, password=PASSWORD, role=role, is_active=is_active)
        )
        await session.commit()
    return Member(account=account, token=create_access_token(account.id, account.role))


@pytest.fixture
async def user(app):
    """Plain end user."""
    return await create_member("Test User", "user@example.com", "user")


@pytest.fixture
async def other_user(app):
    """Second end user for isolation tests."""
    return await create_member("Other User", "other@example.com", "user")


@pytest.fixture
async def agent(app):
    """Support agent."""
    return await create_member("Support Agent", "agent@example.com", "agent")


@pytest.fixture
async def admin(app):
    """Administrator."""
    return await create_member("Admin", "admin@example.com", "admin")


@pytest.fixture
async def category(app, admin):
    """Active category created by the admin."""
    factory = get_session_factory()
    async with factory() as session:
        created = await CategoryService.with_session(session).create_category(
            CategoryCreateInput(name="Technical Support", description="Hardware and software"),
            created_by_id=admin.id,
        )
        await session.commit()
    return created
