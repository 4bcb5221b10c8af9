from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "player",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("disabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index(
        "uq_player_name_lower",
        "player",
        [sa.text("lower(name)")],
        unique=True,
    )
    op.create_table(
        "team",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column(
            "player_ids",
            sa.JSON().with_variant(postgresql.JSONB(), "postgresql"),
            nullable=False,
        ),
        sa.Column("player_key", sa.String(), nullable=False, unique=True),
    )
    op.create_table(
        "season",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("score_type", sa.String(), nullable=False),
        sa.Column("initial_score", sa.Float(), nullable=False),
        sa.Column("k_factor", sa.Integer(), nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rounds", sa.Integer(), nullable=True),
        sa.Column("closed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_table(
        "season_player",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("season_id", sa.String(), sa.ForeignKey("season.id"), nullable=False),
        sa.Column("player_id", sa.String(), sa.ForeignKey("player.id"), nullable=False),
        sa.Column("score", sa.Float(), nullable=False),
        sa.Column("disabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.UniqueConstraint(
            "season_id", "player_id", name="uq_season_player_season_id_player_id"
        ),
    )
    op.create_table(
        "season_team",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("season_id", sa.String(), sa.ForeignKey("season.id"), nullable=False),
        sa.Column("team_id", sa.String(), sa.ForeignKey("team.id"), nullable=False),
        sa.Column("score", sa.Float(), nullable=False),
        sa.UniqueConstraint("season_id", "team_id", name="uq_season_team_season_id_team_id"),
    )
    op.create_table(
        "match",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("season_id", sa.String(), sa.ForeignKey("season.id"), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("home_score", sa.Integer(), nullable=False),
        sa.Column("away_score", sa.Integer(), nullable=False),
        sa.Column("home_expected_elo", sa.Float(), nullable=True),
        sa.Column("away_expected_elo", sa.Float(), nullable=True),
        sa.Column("created_by", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("season_id", "sequence", name="uq_match_season_id_sequence"),
    )
    op.create_index(
        "ix_match_season_id_created_at", "match", ["season_id", "created_at"]
    )
    op.create_table(
        "match_player",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("match_id", sa.String(), sa.ForeignKey("match.id"), nullable=False),
        sa.Column(
            "season_player_id",
            sa.String(),
            sa.ForeignKey("season_player.id"),
            nullable=False,
        ),
        sa.Column("home_team", sa.Boolean(), nullable=False),
        sa.Column("score_before", sa.Float(), nullable=False),
        sa.Column("score_after", sa.Float(), nullable=False),
        sa.Column("result", sa.String(1), nullable=False),
    )
    op.create_index(
        "ix_match_player_season_player_id", "match_player", ["season_player_id"]
    )
    op.create_index("ix_match_player_match_id", "match_player", ["match_id"])
    op.create_table(
        "match_team",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("match_id", sa.String(), sa.ForeignKey("match.id"), nullable=False),
        sa.Column(
            "season_team_id", sa.String(), sa.ForeignKey("season_team.id"), nullable=False
        ),
        sa.Column("home_team", sa.Boolean(), nullable=False),
        sa.Column("score_before", sa.Float(), nullable=False),
        sa.Column("score_after", sa.Float(), nullable=False),
        sa.Column("result", sa.String(1), nullable=False),
    )
    op.create_index("ix_match_team_season_team_id", "match_team", ["season_team_id"])
    op.create_index("ix_match_team_match_id", "match_team", ["match_id"])
    op.create_table(
        "fixture",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("season_id", sa.String(), sa.ForeignKey("season.id"), nullable=False),
        sa.Column("round", sa.Integer(), nullable=False),
        sa.Column(
            "home_player_id", sa.String(), sa.ForeignKey("season_player.id"), nullable=False
        ),
        sa.Column(
            "away_player_id", sa.String(), sa.ForeignKey("season_player.id"), nullable=False
        ),
        sa.Column("match_id", sa.String(), sa.ForeignKey("match.id"), nullable=True),
    )
    op.create_table(
        "player_achievement",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("player_id", sa.String(), sa.ForeignKey("player.id"), nullable=False),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("season_id", sa.String(), sa.ForeignKey("season.id"), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.UniqueConstraint(
            "player_id", "type", name="uq_player_achievement_player_id_type"
        ),
    )


def downgrade():
    op.drop_table("player_achievement")
    op.drop_table("fixture")
    op.drop_index("ix_match_team_match_id", table_name="match_team")
    op.drop_index("ix_match_team_season_team_id", table_name="match_team")
    op.drop_table("match_team")
    op.drop_index("ix_match_player_match_id", table_name="match_player")
    op.drop_index("ix_match_player_season_player_id", table_name="match_player")
    op.drop_table("match_player")
    op.drop_index("ix_match_season_id_created_at", table_name="match")
    op.drop_table("match")
    op.drop_table("season_team")
    op.drop_table("season_player")
    op.drop_table("season")
    op.drop_table("team")
    op.drop_index("uq_player_name_lower", table_name="player")
    op.drop_table("player")
