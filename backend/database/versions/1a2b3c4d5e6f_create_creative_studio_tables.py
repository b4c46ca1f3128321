"""create creative studio tables

Revision ID: 1a2b3c4d5e6f
Revises:
Create Date: 2026-03-02 10:00:00.000000

"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = "1a2b3c4d5e6f"
down_revision = None
branch_labels = None
depends_on = None


def _jsonb():
    return postgresql.JSONB(astext_type=sa.Text())


def _timestamps():
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "organizations",
        sa.Column("org_id", sa.UUID(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.PrimaryKeyConstraint("org_id"),
    )

    op.create_table(
        "brand_kits",
        sa.Column("brand_kit_id", sa.UUID(), nullable=False),
        sa.Column("org_id", sa.UUID(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("business_name", sa.String(), nullable=True),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("logo_url", sa.String(), nullable=True),
        sa.Column("colors", _jsonb(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("fonts", _jsonb(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("strategy", _jsonb(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        *_timestamps(),
        sa.ForeignKeyConstraint(["org_id"], ["organizations.org_id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("brand_kit_id"),
    )
    op.create_index("ix_brand_kits_org_id", "brand_kits", ["org_id"])

    op.create_table(
        "brand_memories",
        sa.Column("brand_memory_id", sa.UUID(), nullable=False),
        sa.Column("org_id", sa.UUID(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("brand_name", sa.String(), nullable=True),
        sa.Column("tagline", sa.String(), nullable=True),
        sa.Column("logo_url", sa.String(), nullable=True),
        sa.Column("primary_colors", _jsonb(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("secondary_colors", _jsonb(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("fonts", _jsonb(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("style_tokens", _jsonb(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("layout_style", sa.String(), nullable=False, server_default="modern"),
        sa.Column("logo_placement", sa.String(), nullable=False, server_default="bottom-right"),
        sa.Column("text_safe_zones", _jsonb(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("voice_rules", _jsonb(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("do_list", _jsonb(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("dont_list", _jsonb(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("compliance_rules", _jsonb(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("performance_data", _jsonb(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("fatigued_styles", _jsonb(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("created_by", sa.String(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["org_id"], ["organizations.org_id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("brand_memory_id"),
    )
    op.create_index(
        "ix_brand_memories_org_version",
        "brand_memories",
        ["org_id", "version"],
        unique=True,
    )
    op.create_index(
        "ix_brand_memories_org_active",
        "brand_memories",
        ["org_id"],
        unique=True,
        postgresql_where=sa.text("is_active"),
    )

    op.create_table(
        "creative_briefs",
        sa.Column("brief_id", sa.UUID(), nullable=False),
        sa.Column("org_id", sa.UUID(), nullable=False),
        sa.Column("brand_memory_id", sa.UUID(), nullable=True),
        sa.Column("campaign_id", sa.UUID(), nullable=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("objective", sa.String(), nullable=True),
        sa.Column("target_audience", sa.String(), nullable=True),
        sa.Column("product_service", sa.String(), nullable=True),
        sa.Column("key_message", sa.String(), nullable=True),
        sa.Column("chat_history", _jsonb(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("headline", sa.String(), nullable=True),
        sa.Column("primary_text", sa.String(), nullable=True),
        sa.Column("cta_text", sa.String(), nullable=True),
        sa.Column("copy_confirmed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("copy_confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("style_direction", sa.String(), nullable=True),
        sa.Column("reference_images", _jsonb(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("status", sa.String(), nullable=False, server_default="intake"),
        sa.Column("created_by", sa.String(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["org_id"], ["organizations.org_id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["brand_memory_id"], ["brand_memories.brand_memory_id"], ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("brief_id"),
    )
    op.create_index("ix_creative_briefs_org_id", "creative_briefs", ["org_id"])
    op.create_index("ix_creative_briefs_created_at", "creative_briefs", ["created_at"])

    op.create_table(
        "creative_packs",
        sa.Column("pack_id", sa.UUID(), nullable=False),
        sa.Column("org_id", sa.UUID(), nullable=False),
        sa.Column("brief_id", sa.UUID(), nullable=False),
        sa.Column("brand_memory_version", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="pending"),
        sa.Column("model_used", sa.String(), nullable=False, server_default="openai"),
        sa.Column("generation_config", _jsonb(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("avg_brand_alignment", sa.Float(), nullable=True),
        sa.Column("avg_readability", sa.Float(), nullable=True),
        sa.Column("avg_platform_fit", sa.Float(), nullable=True),
        sa.Column("compliance_status", sa.String(), nullable=False, server_default="pending"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["org_id"], ["organizations.org_id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["brief_id"], ["creative_briefs.brief_id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("pack_id"),
    )
    op.create_index("ix_creative_packs_brief_id", "creative_packs", ["brief_id"])
    op.create_index("ix_creative_packs_org_id", "creative_packs", ["org_id"])

    op.create_table(
        "creative_assets",
        sa.Column("asset_id", sa.UUID(), nullable=False),
        sa.Column("org_id", sa.UUID(), nullable=False),
        sa.Column("pack_id", sa.UUID(), nullable=False),
        sa.Column("brief_id", sa.UUID(), nullable=False),
        sa.Column("direction", sa.String(length=1), nullable=False),
        sa.Column("direction_name", sa.String(), nullable=True),
        sa.Column("aspect_ratio", sa.String(), nullable=False),
        sa.Column("prompt_used", sa.String(), nullable=True),
        sa.Column("negative_prompt", sa.String(), nullable=True),
        sa.Column("model_used", sa.String(), nullable=False, server_default="openai"),
        sa.Column("headline_text", sa.String(), nullable=True),
        sa.Column("cta_text", sa.String(), nullable=True),
        sa.Column("result_url", sa.String(), nullable=True),
        sa.Column("brand_alignment_score", sa.Float(), nullable=True),
        sa.Column("readability_score", sa.Float(), nullable=True),
        sa.Column("platform_fit_score", sa.Float(), nullable=True),
        sa.Column("compliance_risk", sa.String(), nullable=False, server_default="low"),
        sa.Column("quality_issues", _jsonb(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("status", sa.String(), nullable=False, server_default="pending"),
        sa.Column("error_message", sa.String(), nullable=True),
        sa.Column("generation_attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("metadata", _jsonb(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        *_timestamps(),
        sa.ForeignKeyConstraint(["org_id"], ["organizations.org_id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["pack_id"], ["creative_packs.pack_id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["brief_id"], ["creative_briefs.brief_id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("asset_id"),
    )
    op.create_index("ix_creative_assets_pack_id", "creative_assets", ["pack_id"])
    op.create_index(
        "ix_creative_assets_pack_direction", "creative_assets", ["pack_id", "direction"]
    )
    op.create_index("ix_creative_assets_status", "creative_assets", ["status"])

    op.create_table(
        "usage_events",
        sa.Column("usage_event_id", sa.UUID(), nullable=False),
        sa.Column("org_id", sa.UUID(), nullable=False),
        sa.Column("provider", sa.String(), nullable=False),
        sa.Column("model", sa.String(), nullable=False),
        sa.Column("kind", sa.String(), nullable=False),
        sa.Column("input_tokens", sa.Integer(), nullable=True),
        sa.Column("output_tokens", sa.Integer(), nullable=True),
        sa.Column("total_tokens", sa.Integer(), nullable=True),
        sa.Column("unit_count", sa.Integer(), nullable=True),
        sa.Column("cost_usd", sa.Float(), nullable=False, server_default="0"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.ForeignKeyConstraint(["org_id"], ["organizations.org_id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("usage_event_id"),
    )
    op.create_index("ix_usage_events_org_id", "usage_events", ["org_id"])
    op.create_index("ix_usage_events_created_at", "usage_events", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_usage_events_created_at", table_name="usage_events")
    op.drop_index("ix_usage_events_org_id", table_name="usage_events")
    op.drop_table("usage_events")

    op.drop_index("ix_creative_assets_status", table_name="creative_assets")
    op.drop_index("ix_creative_assets_pack_direction", table_name="creative_assets")
    op.drop_index("ix_creative_assets_pack_id", table_name="creative_assets")
    op.drop_table("creative_assets")

    op.drop_index("ix_creative_packs_org_id", table_name="creative_packs")
    op.drop_index("ix_creative_packs_brief_id", table_name="creative_packs")
    op.drop_table("creative_packs")

    op.drop_index("ix_creative_briefs_created_at", table_name="creative_briefs")
    op.drop_index("ix_creative_briefs_org_id", table_name="creative_briefs")
    op.drop_table("creative_briefs")

    op.drop_index("ix_brand_memories_org_active", table_name="brand_memories")
    op.drop_index("ix_brand_memories_org_version", table_name="brand_memories")
    op.drop_table("brand_memories")

    op.drop_index("ix_brand_kits_org_id", table_name="brand_kits")
    op.drop_table("brand_kits")

    op.drop_table("organizations")
