from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Uuid,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from database.base import Base

# JSONB on PostgreSQL, plain JSON elsewhere (tests run against SQLite).
JSONType = JSON().with_variant(JSONB(), "postgresql")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Organization(Base):
    __tablename__ = "organizations"

    org_id = Column(Uuid, primary_key=True, default=uuid4)
    name = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())

    def __repr__(self):
        return f"<Organization org_id={self.org_id} name={self.name}>"


class BrandKit(Base):
    """
    Brand kit captured by the brand wizard.

    Brand memory is initialized (and re-synced) from one of these records.
    """

    __tablename__ = "brand_kits"

    brand_kit_id = Column(Uuid, primary_key=True, default=uuid4)
    org_id = Column(
        Uuid, ForeignKey("organizations.org_id", ondelete="CASCADE"), nullable=False
    )
    name = Column(String, nullable=False)
    business_name = Column(String, nullable=True)
    description = Column(String, nullable=True)
    logo_url = Column(String, nullable=True)
    colors = Column(JSONType, nullable=False, default=list)  # [{name, hex, type}]
    fonts = Column(JSONType, nullable=False, default=dict)
    strategy = Column(JSONType, nullable=False, default=dict)  # brand_voice, target_audience, ...
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())

    __table_args__ = (Index("ix_brand_kits_org_id", org_id),)

    def __repr__(self):
        return f"<BrandKit brand_kit_id={self.brand_kit_id} org_id={self.org_id} name={self.name}>"


class BrandMemory(Base):
    """
    Versioned brand identity snapshot.

    Rows are append-only: an update inserts version N+1 and deactivates every
    earlier row for the org. Packs pin the version they were generated with.
    """

    __tablename__ = "brand_memories"

    brand_memory_id = Column(Uuid, primary_key=True, default=uuid4)
    org_id = Column(
        Uuid, ForeignKey("organizations.org_id", ondelete="CASCADE"), nullable=False
    )
    version = Column(Integer, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    # Core identity
    brand_name = Column(String, nullable=True)
    tagline = Column(String, nullable=True)
    logo_url = Column(String, nullable=True)

    # Visual identity
    primary_colors = Column(JSONType, nullable=False, default=list)  # [{name, hex, usage}]
    secondary_colors = Column(JSONType, nullable=False, default=list)
    fonts = Column(JSONType, nullable=False, default=dict)  # {heading, body, accent}
    style_tokens = Column(JSONType, nullable=False, default=dict)  # {vibe, mood, aesthetic}

    # Layout
    layout_style = Column(String, nullable=False, default="modern")
    logo_placement = Column(String, nullable=False, default="bottom-right")
    text_safe_zones = Column(JSONType, nullable=False, default=dict)

    # Messaging rules
    voice_rules = Column(JSONType, nullable=False, default=dict)  # {tone, personality, style}
    do_list = Column(JSONType, nullable=False, default=list)
    dont_list = Column(JSONType, nullable=False, default=list)
    compliance_rules = Column(JSONType, nullable=False, default=list)

    # Performance
    performance_data = Column(JSONType, nullable=False, default=dict)
    fatigued_styles = Column(JSONType, nullable=False, default=list)

    created_by = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())

    __table_args__ = (
        # One row per version number per org
        Index("ix_brand_memories_org_version", org_id, version, unique=True),
        # At most one active row per org
        Index(
            "ix_brand_memories_org_active",
            org_id,
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )

    def __repr__(self):
        return (
            f"<BrandMemory brand_memory_id={self.brand_memory_id} org_id={self.org_id} "
            f"version={self.version} is_active={self.is_active}>"
        )


class CreativeBrief(Base):
    """
    One ad-copy intake/approval session.

    Copy (headline, primary_text, cta_text) is frozen once copy_confirmed is set;
    no pack can be generated before that.
    """

    __tablename__ = "creative_briefs"

    brief_id = Column(Uuid, primary_key=True, default=uuid4)
    org_id = Column(
        Uuid, ForeignKey("organizations.org_id", ondelete="CASCADE"), nullable=False
    )
    brand_memory_id = Column(
        Uuid, ForeignKey("brand_memories.brand_memory_id", ondelete="SET NULL"), nullable=True
    )
    campaign_id = Column(Uuid, nullable=True)

    # Brief info
    name = Column(String, nullable=False)
    objective = Column(String, nullable=True)  # awareness, conversion, engagement
    target_audience = Column(String, nullable=True)
    product_service = Column(String, nullable=True)
    key_message = Column(String, nullable=True)

    chat_history = Column(JSONType, nullable=False, default=list)

    # Confirmed copy
    headline = Column(String, nullable=True)
    primary_text = Column(String, nullable=True)
    cta_text = Column(String, nullable=True)
    copy_confirmed = Column(Boolean, nullable=False, default=False)
    copy_confirmed_at = Column(DateTime(timezone=True), nullable=True)

    style_direction = Column(String, nullable=True)
    reference_images = Column(JSONType, nullable=False, default=list)

    # intake, copy_pending, copy_confirmed, generating, completed, failed
    status = Column(String, nullable=False, default="intake")

    created_by = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())

    __table_args__ = (
        Index("ix_creative_briefs_org_id", org_id),
        Index("ix_creative_briefs_created_at", created_at),
    )

    def __repr__(self):
        return (
            f"<CreativeBrief brief_id={self.brief_id} org_id={self.org_id} "
            f"status={self.status} copy_confirmed={self.copy_confirmed}>"
        )


class CreativePack(Base):
    __tablename__ = "creative_packs"

    pack_id = Column(Uuid, primary_key=True, default=uuid4)
    org_id = Column(
        Uuid, ForeignKey("organizations.org_id", ondelete="CASCADE"), nullable=False
    )
    brief_id = Column(
        Uuid, ForeignKey("creative_briefs.brief_id", ondelete="CASCADE"), nullable=False
    )
    brand_memory_version = Column(Integer, nullable=False)  # pinned at creation

    name = Column(String, nullable=True)
    status = Column(String, nullable=False, default="pending")  # pending, generating, completed, failed

    model_used = Column(String, nullable=False, default="openai")  # openai, gemini
    generation_config = Column(JSONType, nullable=False, default=dict)

    # Aggregate scores
    avg_brand_alignment = Column(Float, nullable=True)
    avg_readability = Column(Float, nullable=True)
    avg_platform_fit = Column(Float, nullable=True)
    compliance_status = Column(String, nullable=False, default="pending")  # pending, passed, flagged

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())

    __table_args__ = (
        Index("ix_creative_packs_brief_id", brief_id),
        Index("ix_creative_packs_org_id", org_id),
    )

    def __repr__(self):
        return (
            f"<CreativePack pack_id={self.pack_id} brief_id={self.brief_id} "
            f"status={self.status} brand_memory_version={self.brand_memory_version}>"
        )


class CreativeAsset(Base):
    __tablename__ = "creative_assets"

    asset_id = Column(Uuid, primary_key=True, default=uuid4)
    org_id = Column(
        Uuid, ForeignKey("organizations.org_id", ondelete="CASCADE"), nullable=False
    )
    pack_id = Column(
        Uuid, ForeignKey("creative_packs.pack_id", ondelete="CASCADE"), nullable=False
    )
    brief_id = Column(
        Uuid, ForeignKey("creative_briefs.brief_id", ondelete="CASCADE"), nullable=False
    )

    direction = Column(String(1), nullable=False)  # A, B, C
    direction_name = Column(String, nullable=True)
    aspect_ratio = Column(String, nullable=False)  # 1:1, 4:5, 9:16

    prompt_used = Column(String, nullable=True)
    negative_prompt = Column(String, nullable=True)
    model_used = Column(String, nullable=False, default="openai")

    headline_text = Column(String, nullable=True)
    cta_text = Column(String, nullable=True)

    result_url = Column(String, nullable=True)

    # Quality scores (0-10)
    brand_alignment_score = Column(Float, nullable=True)
    readability_score = Column(Float, nullable=True)
    platform_fit_score = Column(Float, nullable=True)
    compliance_risk = Column(String, nullable=False, default="low")  # low, medium, high
    quality_issues = Column(JSONType, nullable=False, default=list)

    # pending, generating, completed, flagged, failed
    status = Column(String, nullable=False, default="pending")
    error_message = Column(String, nullable=True)
    generation_attempts = Column(Integer, nullable=False, default=0)

    asset_metadata = Column("metadata", JSONType, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())

    __table_args__ = (
        Index("ix_creative_assets_pack_id", pack_id),
        Index("ix_creative_assets_pack_direction", pack_id, direction),
        Index("ix_creative_assets_status", status),
    )

    def __repr__(self):
        return (
            f"<CreativeAsset asset_id={self.asset_id} pack_id={self.pack_id} "
            f"direction={self.direction} aspect_ratio={self.aspect_ratio} status={self.status}>"
        )


class UsageEvent(Base):
    __tablename__ = "usage_events"

    usage_event_id = Column(Uuid, primary_key=True, default=uuid4)
    org_id = Column(
        Uuid, ForeignKey("organizations.org_id", ondelete="CASCADE"), nullable=False
    )
    provider = Column(String, nullable=False)
    model = Column(String, nullable=False)
    kind = Column(String, nullable=False)  # chat, image, quality_check
    input_tokens = Column(Integer, nullable=True)
    output_tokens = Column(Integer, nullable=True)
    total_tokens = Column(Integer, nullable=True)
    unit_count = Column(Integer, nullable=True)
    cost_usd = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())

    __table_args__ = (
        Index("ix_usage_events_org_id", org_id),
        Index("ix_usage_events_created_at", created_at),
    )

    def __repr__(self):
        return (
            f"<UsageEvent usage_event_id={self.usage_event_id} org_id={self.org_id} "
            f"kind={self.kind} model={self.model}>"
        )
