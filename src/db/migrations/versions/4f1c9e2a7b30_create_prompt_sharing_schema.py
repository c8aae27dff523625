"""
Create prompt sharing schema.

Revision ID: 4f1c9e2a7b30
Revises:
Create Date: 2026-10-19 10:02:41.118305
"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

from models.base import enum_column_type
from models.enums import AiTool, Category, Difficulty, ResultType, UserRole

# revision identifiers, used by Alembic.
revision: str = "4f1c9e2a7b30"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "external_id",
            sa.String(length=255),
            nullable=False,
            comment="Identity provider 'sub' claim - unique identifier from the auth provider",
        ),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("image", sa.Text(), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("role", enum_column_type(UserRole, "user_role"), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_external_id"), "users", ["external_id"], unique=True)
    op.create_index(op.f("ix_users_created_at"), "users", ["created_at"])

    op.create_table(
        "prompts",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("author_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", enum_column_type(Category, "prompt_category"), nullable=False),
        sa.Column(
            "difficulty", enum_column_type(Difficulty, "prompt_difficulty"), nullable=False,
        ),
        sa.Column("views", sa.Integer(), server_default="0", nullable=False),
        sa.Column("copy_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("published", sa.Boolean(), server_default=sa.true(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["author_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_prompts_author_id"), "prompts", ["author_id"])
    op.create_index(op.f("ix_prompts_published"), "prompts", ["published"])
    op.create_index(op.f("ix_prompts_created_at"), "prompts", ["created_at"])
    op.create_index(
        "ix_prompts_published_category", "prompts", ["published", "category"],
    )

    op.create_table(
        "prompt_tags",
        sa.Column("prompt_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["prompt_id"], ["prompts.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("prompt_id", "name"),
    )
    op.create_index("ix_prompt_tags_name", "prompt_tags", ["name"])

    op.create_table(
        "prompt_ai_tools",
        sa.Column("prompt_id", sa.Uuid(), nullable=False),
        sa.Column("ai_tool", enum_column_type(AiTool, "prompt_ai_tool"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["prompt_id"], ["prompts.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("prompt_id", "ai_tool"),
    )
    op.create_index("ix_prompt_ai_tools_ai_tool", "prompt_ai_tools", ["ai_tool"])

    op.create_table(
        "prompt_results",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("prompt_id", sa.Uuid(), nullable=False),
        sa.Column("type", enum_column_type(ResultType, "prompt_result_type"), nullable=False),
        sa.Column("url", sa.Text(), nullable=True),
        sa.Column("content", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["prompt_id"], ["prompts.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_prompt_results_prompt_id"), "prompt_results", ["prompt_id"])
    op.create_index(op.f("ix_prompt_results_created_at"), "prompt_results", ["created_at"])

    for table in ("upvotes", "bookmarks"):
        op.create_table(
            table,
            sa.Column("id", sa.Uuid(), nullable=False),
            sa.Column("user_id", sa.Uuid(), nullable=False),
            sa.Column("prompt_id", sa.Uuid(), nullable=False),
            *_timestamps(),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["prompt_id"], ["prompts.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("user_id", "prompt_id", name=f"uq_{table}_user_prompt"),
        )
        op.create_index(op.f(f"ix_{table}_prompt_id"), table, ["prompt_id"])
        op.create_index(op.f(f"ix_{table}_created_at"), table, ["created_at"])

    op.create_table(
        "comments",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("prompt_id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["prompt_id"], ["prompts.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_comments_user_id"), "comments", ["user_id"])
    op.create_index(op.f("ix_comments_prompt_id"), "comments", ["prompt_id"])
    op.create_index(op.f("ix_comments_created_at"), "comments", ["created_at"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("comments")
    op.drop_table("bookmarks")
    op.drop_table("upvotes")
    op.drop_table("prompt_results")
    op.drop_table("prompt_ai_tools")
    op.drop_table("prompt_tags")
    op.drop_table("prompts")
    op.drop_table("users")
