"""create player_stats

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "player_stats",
        sa.Column("partition_key", sa.String(length=16), nullable=False),
        sa.Column("row_key", sa.String(length=50), nullable=False),
        sa.Column("player_name", sa.String(length=50), nullable=False),
        sa.Column("wins", sa.Integer(), nullable=False),
        sa.Column("losses", sa.Integer(), nullable=False),
        sa.Column("draws", sa.Integer(), nullable=False),
        sa.Column("games_played", sa.Integer(), nullable=False),
        sa.Column("average_game_time_seconds", sa.Float(), nullable=False),
        sa.Column("current_win_streak", sa.Integer(), nullable=False),
        sa.Column("best_win_streak", sa.Integer(), nullable=False),
        sa.Column("last_played", sa.DateTime(timezone=True), nullable=False),
        sa.Column("etag", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("partition_key", "row_key"),
    )
    # Leaderboard reads: one partition, most wins first
    op.create_index(
        "ix_player_stats_partition_wins",
        "player_stats",
        ["partition_key", "wins"],
    )


def downgrade() -> None:
    op.drop_index("ix_player_stats_partition_wins", table_name="player_stats")
    op.drop_table("player_stats")
