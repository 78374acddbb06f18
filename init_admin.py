"""
Seed the default administrator and ticket categories for a fresh install.
"""
import asyncio

from sqlalchemy import func, select

from quickdesk.db.models import Category, User
from quickdesk.infrastructure.database import get_session, init_db
from quickdesk.modules.accounts.models import ROLE_ADMIN, AccountCreateInput
from quickdesk.modules.accounts.service import AccountService
from quickdesk.modules.categories.models import CategoryCreateInput
from quickdesk.modules.categories.service import CategoryService

DEFAULT_CATEGORIES = [
    ("Technical Support", "Issues related to software, hardware, and technical problems", "#3B82F6"),
    ("Account & Billing", "Account management, billing questions, and subscription issues", "#10B981"),
    ("Bug Report", "Report software bugs and unexpected behavior", "#EF4444"),
    ("Feature Request", "Suggest new features or improvements", "#8B5CF6"),
    ("General Inquiry", "General questions and information requests", "#6B7280"),
    ("Security", "Security-related issues, vulnerabilities, and access problems", "#F59E0B"),
    ("Training & Documentation", "Help with tutorials, guides, and learning resources", "#06B6D4"),
    ("Integration Support", "API integrations, third-party connections, and system compatibility", "#84CC16"),
]


async def seed():
    """Create the admin account and default categories when missing."""
    await init_db()

    async for db in get_session():
        admin = (await db.execute(select(User).where(User.role == ROLE_ADMIN).limit(1))).scalar_one_or_none()
        if admin is None:
            account = await AccountService.with_session(db).create_account(
                AccountCreateInput(
                    name="System Admin",
                    email="admin@quickdesk.com",
                    password="admin123",
                    role=ROLE_ADMIN,
                )
            )
            admin_id = account.id
            print("=" * 50)
            print("Default admin account created")
            print("Email: admin@quickdesk.com")
            print("Password: admin123")
            print("Change this password after the first login!")
            print("=" * 50)
        else:
            admin_id = admin.id
            print(f"Admin account already exists: {admin.email}")

        existing = await db.scalar(select(func.count(Category.id)))
        if existing:
            print(f"{existing} categories already exist, skipping category seed")
            return

        categories = CategoryService.with_session(db)
        for name, description, color in DEFAULT_CATEGORIES:
            await categories.create_category(
                CategoryCreateInput(name=name, description=description, color=color),
                created_by_id=admin_id,
            )
            print(f"- {name}")
        print(f"Created {len(DEFAULT_CATEGORIES)} categories")


if __name__ == "__main__":
    asyncio.run(seed())
