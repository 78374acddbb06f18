"""password reset token columns

Revision ID: 20261019_02
Revises: 20261019_01
Create Date: 2026-10-19 14:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_02"
down_revision = "20261019_01"
branch_labels = None
depends_on = None


def upgrade() -> None:
    with op.batch_alter_table("users") as batch_op:
        batch_op.add_column(sa.Column("reset_password_token", sa.String(length=64), nullable=True))
        batch_op.add_column(sa.Column("reset_password_expires", sa.DateTime(timezone=True), nullable=True))
        batch_op.create_index("ix_users_reset_password_token", ["reset_password_token"])


def downgrade() -> None:
    with op.batch_alter_table("users") as batch_op:
        batch_op.drop_index("ix_users_reset_password_token")
        batch_op.drop_column("reset_password_expires")
        batch_op.drop_column("reset_password_token")
