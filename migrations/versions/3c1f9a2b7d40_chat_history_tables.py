"""chat history and client directory tables

Revision ID: 3c1f9a2b7d40
Revises:
Create Date: 2026-10-19 09:12:44.518203

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3c1f9a2b7d40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the chat-turn log and the client directory."""
    op.create_table(
        "n8n_chat_histories",
        sa.Column(
            "id",
            sa.BigInteger().with_variant(sa.Integer(), "sqlite"),
            autoincrement=True,
            nullable=False,
        ),
        sa.Column("session_id", sa.Text(), nullable=False),
        sa.Column("message", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_n8n_chat_histories_session_id", "n8n_chat_histories", ["session_id"]
    )
    op.create_index(
        "ix_n8n_chat_histories_created_at", "n8n_chat_histories", ["created_at"]
    )

    op.create_table(
        "IA_CLIENTE",
        sa.Column(
            "id",
            sa.BigInteger().with_variant(sa.Integer(), "sqlite"),
            autoincrement=True,
            nullable=False,
        ),
        sa.Column("telefone", sa.Text(), nullable=False),
        sa.Column("nome", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_IA_CLIENTE_telefone", "IA_CLIENTE", ["telefone"])


def downgrade() -> None:
    """Drop both tables."""
    op.drop_index("ix_IA_CLIENTE_telefone", table_name="IA_CLIENTE")
    op.drop_table("IA_CLIENTE")
    op.drop_index("ix_n8n_chat_histories_created_at", table_name="n8n_chat_histories")
    op.drop_index("ix_n8n_chat_histories_session_id", table_name="n8n_chat_histories")
    op.drop_table("n8n_chat_histories")
