"""Create profiles, notes and note_shares tables

Revision ID: 001
Revises: None
Create Date: 2026-10-18

What:  Initial schema for the note sync service.
Tables:
    - profiles:    one row per user; unique share token
    - notes:       client-identified notes with owner and colour tag
    - note_shares: grants (note_id, shared_with) with edit flag
Function:
    - find_profile_by_token(p_token): token → profile rows, for clients
      calling the database's RPC surface
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "profiles",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column(
            "token",
            sa.String(128),
            nullable=False,
            comment="Share token other users enter to share notes with this user",
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("token", name="profiles_token_key"),
    )

    op.create_table(
        "notes",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column(
            "owner_id",
            sa.String(64),
            nullable=False,
            comment="User id of the note's owner",
        ),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("color_value", sa.BigInteger(), nullable=False, server_default=sa.text("0")),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
            comment="Last update (UTC); client-supplied on push, server time on edit",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_notes_owner_updated",
        "notes",
        ["owner_id", sa.text("updated_at DESC")],
    )

    op.create_table(
        "note_shares",
        sa.Column("note_id", sa.String(64), nullable=False),
        sa.Column("shared_with", sa.String(64), nullable=False),
        sa.Column("can_edit", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.ForeignKeyConstraint(
            ["note_id"], ["notes.id"],
            name="note_shares_note_id_fkey",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("note_id", "shared_with", name="note_shares_pkey"),
    )
    op.create_index("idx_note_shares_shared_with", "note_shares", ["shared_with"])

    # SECURITY DEFINER: callers restricted by row level security on profiles
    # still resolve tokens, and only see id and name.
    op.execute(
        """
        CREATE OR REPLACE FUNCTION find_profile_by_token(p_token text)
        RETURNS TABLE (id varchar, name text)
        LANGUAGE sql
        STABLE
        SECURITY DEFINER
        AS $$
            SELECT p.id, p.name FROM profiles p WHERE p.token = p_token;
        $$;
        """
    )


def downgrade() -> None:
    """Drop the function and all three tables. All data is lost."""
    op.execute("DROP FUNCTION IF EXISTS find_profile_by_token(text)")
    op.drop_index("idx_note_shares_shared_with", table_name="note_shares")
    op.drop_table("note_shares")
    op.drop_index("idx_notes_owner_updated", table_name="notes")
    op.drop_table("notes")
    op.drop_table("profiles")
