"""Jobs table

Revision ID: 001
Revises:
Create Date: 2024-01-01 00:00:00.000000

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Check if tables already exist and skip if so
    conn = op.get_bind()
    inspector = sa.inspect(conn)
    existing_tables = inspector.get_table_names()

    if "jobs" in existing_tables:
        return

    op.create_table(
        "jobs",
        sa.Column("job_id", sa.Uuid, primary_key=True),
        sa.Column("owner_id", sa.Integer, nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("suggested_file_name", sa.Text),
        sa.Column("arguments", sa.Text),
        sa.Column("creation_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("complete_time", sa.DateTime(timezone=True)),
        sa.Column("job_type", sa.Text),
        sa.Column("parent_job_id", sa.Uuid, sa.ForeignKey("jobs.job_id", ondelete="RESTRICT")),
        sa.Column("composite", sa.Boolean, nullable=False, server_default=sa.false()),
    )
    op.create_index("idx_jobs_status", "jobs", ["status"])
    op.create_index("idx_jobs_owner_id", "jobs", ["owner_id"])
    op.create_index("idx_jobs_parent_job_id", "jobs", ["parent_job_id"])
    op.create_index("idx_jobs_creation_time", "jobs", ["creation_time"])


def downgrade() -> None:
    op.drop_table("jobs")
