"""Create snippets, users and sessions tables

Revision ID: 001
Revises: None
Create Date: 2024-01-15 00:00:00.000000+00:00

What:  The complete initial schema.
       - snippets: public text snippets, filtered by `expires` on every read
       - users:    accounts, one per email (users_uc_email)
       - sessions: server-side session payloads keyed by cookie token

Rollback: downgrade() drops all three tables (destructive — all data lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "snippets",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_snippets"),
    )
    # Every read filters on expires > now
    op.create_index("idx_snippets_expires", "snippets", ["expires"])

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        # bcrypt hashes are always 60 characters
        sa.Column("hashed_password", sa.String(60), nullable=False),
        sa.Column("created", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        # The name is what SqlUserStore looks for to report a duplicate email
        sa.UniqueConstraint("email", name="users_uc_email"),
    )

    op.create_table(
        "sessions",
        sa.Column("token", sa.String(64), nullable=False),
        sa.Column("data", sa.Text(), nullable=False),
        sa.Column("expiry", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("token", name="pk_sessions"),
    )
    op.create_index("sessions_expiry_idx", "sessions", ["expiry"])


def downgrade() -> None:
    op.drop_index("sessions_expiry_idx", table_name="sessions")
    op.drop_table("sessions")
    op.drop_table("users")
    op.drop_index("idx_snippets_expires", table_name="snippets")
    op.drop_table("snippets")
