"""initial schema
Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _base_columns():
    return [
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade():
    op.create_table(
        "projects",
        *_base_columns(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("location", sa.String(length=300), nullable=True),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("expected_end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("actual_end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="planning"),
        sa.Column("progress_percentage", sa.Float(), nullable=False, server_default="0"),
        sa.Column("sustainability_score", sa.Float(), nullable=False, server_default="0"),
        sa.Column("team_size", sa.Integer(), nullable=True),
        sa.Column("project_type", sa.String(length=30), nullable=True),
        sa.Column("owner", sa.String(length=128), nullable=False),
        sa.Column("created_by", sa.String(length=128), nullable=True),
    )
    op.create_index("ix_projects_name", "projects", ["name"])
    op.create_index("ix_projects_status", "projects", ["status"])
    op.create_index("ix_projects_owner", "projects", ["owner"])
    op.create_index("ix_projects_created_at", "projects", ["created_at"])

    op.create_table(
        "materials",
        *_base_columns(),
        sa.Column("project_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("category", sa.String(length=30), nullable=False),
        sa.Column("quantity", sa.Float(), nullable=False, server_default="0"),
        sa.Column("unit", sa.String(length=20), nullable=False),
        sa.Column("unit_cost", sa.Numeric(14, 2), nullable=True),
        sa.Column("supplier", sa.String(length=200), nullable=True),
        sa.Column("eco_friendly", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("reorder_level", sa.Float(), nullable=False, server_default="0"),
    )
    op.create_index("ix_materials_project_id", "materials", ["project_id"])
    op.create_index("ix_materials_category", "materials", ["category"])
    op.create_index("ix_materials_created_at", "materials", ["created_at"])

    op.create_table(
        "tasks",
        *_base_columns(),
        sa.Column("project_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="not_started"),
        sa.Column("priority", sa.String(length=10), nullable=False, server_default="medium"),
        sa.Column("deadline", sa.DateTime(timezone=True), nullable=True),
        sa.Column("assigned_to", sa.String(length=128), nullable=True),
        sa.Column("assigned_by", sa.String(length=128), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_tasks_project_id", "tasks", ["project_id"])
    op.create_index("ix_tasks_status", "tasks", ["status"])
    op.create_index("ix_tasks_assigned_to", "tasks", ["assigned_to"])
    op.create_index("ix_tasks_created_at", "tasks", ["created_at"])

    op.create_table(
        "documents",
        *_base_columns(),
        sa.Column("project_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("filename", sa.String(length=255), nullable=False),
        sa.Column("original_name", sa.String(length=255), nullable=False),
        sa.Column("file_type", sa.String(length=100), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("file_path", sa.String(length=500), nullable=True),
        sa.Column("category", sa.String(length=20), nullable=False, server_default="other"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("tags", sa.String(length=500), nullable=True),
        sa.Column("uploaded_by", sa.String(length=128), nullable=False),
        sa.Column("is_processed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("processing_status", sa.String(length=20), nullable=False, server_default="pending"),
    )
    op.create_index("ix_documents_project_id", "documents", ["project_id"])
    op.create_index("ix_documents_category", "documents", ["category"])
    op.create_index("ix_documents_created_at", "documents", ["created_at"])

    op.create_table(
        "budgets",
        *_base_columns(),
        sa.Column("project_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("total_budget", sa.Numeric(14, 2), nullable=False),
        sa.Column("allocations", sa.JSON(), nullable=False),
        sa.Column("contingency_percentage", sa.Float(), nullable=False, server_default="10"),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="USD"),
        sa.Column("expenses", sa.JSON(), nullable=False),
    )
    op.create_index("ix_budgets_project_id", "budgets", ["project_id"], unique=True)
    op.create_index("ix_budgets_created_at", "budgets", ["created_at"])


def downgrade():
    op.drop_table("budgets")
    op.drop_table("documents")
    op.drop_table("tasks")
    op.drop_table("materials")
    op.drop_table("projects")
