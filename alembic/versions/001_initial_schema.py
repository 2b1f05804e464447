"""Initial schema — photo_challenges, challenge_entries, challenge_votes.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "photo_challenges",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(200), nullable=False),
        sa.Column("theme", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("rules", sa.Text, nullable=True),
        sa.Column("prize_info", sa.Text, nullable=True),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("voting_end", sa.DateTime(timezone=True), nullable=False),
        sa.Column("phase", sa.String(20), nullable=False, server_default="UPCOMING"),
        sa.Column("featured", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("slug", name="uq_photo_challenges_slug"),
        sa.CheckConstraint(
            "start_date < end_date AND end_date < voting_end",
            name="ck_photo_challenges_window_order",
        ),
    )
    op.create_index(
        "ix_photo_challenges_phase_start", "photo_challenges", ["phase", "start_date"],
    )

    op.create_table(
        "challenge_entries",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "challenge_id", UUID(as_uuid=True),
            sa.ForeignKey("photo_challenges.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("participant_id", sa.String(100), nullable=False),
        sa.Column("image_ref", sa.String(2000), nullable=False),
        sa.Column("title", sa.String(200), nullable=True),
        sa.Column("caption", sa.Text, nullable=True),
        sa.Column("location", sa.String(200), nullable=True),
        sa.Column("camera_info", sa.String(200), nullable=True),
        sa.Column("is_approved", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("is_winner", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("winner_place", sa.Integer, nullable=True),
        sa.Column("is_featured", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint(
            "challenge_id", "participant_id",
            name="uq_challenge_entries_challenge_participant",
        ),
        sa.CheckConstraint(
            "winner_place IS NULL OR winner_place BETWEEN 1 AND 3",
            name="ck_challenge_entries_winner_place",
        ),
    )
    op.create_index(
        "ix_challenge_entries_challenge_id", "challenge_entries", ["challenge_id"],
    )

    op.create_table(
        "challenge_votes",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "entry_id", UUID(as_uuid=True),
            sa.ForeignKey("challenge_entries.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("voter_id", sa.String(100), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("entry_id", "voter_id", name="uq_challenge_votes_entry_voter"),
    )
    op.create_index("ix_challenge_votes_entry_id", "challenge_votes", ["entry_id"])


def downgrade() -> None:
    op.drop_index("ix_challenge_votes_entry_id", table_name="challenge_votes")
    op.drop_table("challenge_votes")
    op.drop_index("ix_challenge_entries_challenge_id", table_name="challenge_entries")
    op.drop_table("challenge_entries")
    op.drop_index("ix_photo_challenges_phase_start", table_name="photo_challenges")
    op.drop_table("photo_challenges")
