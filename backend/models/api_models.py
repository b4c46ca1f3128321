from typing import Any, Literal

from pydantic import BaseModel, Field

from models.creative_models import (
    ConfirmedCopy,
    CopyUpdate,
    ImageModel,
    LayoutStyle,
    LogoPlacement,
    VariationType,
)


class HealthResponse(BaseModel):
    ok: bool
    status: str


# =============================================================================
# BRAND MEMORY
# =============================================================================


class ColorEntry(BaseModel):
    name: str | None = None
    hex: str
    usage: str | None = None


class BrandMemoryFields(BaseModel):
    """Brand memory fields accepted on create and update.

    On update, omitted (``None``) fields keep the active version's value.
    """

    brand_name: str | None = None
    tagline: str | None = None
    logo_url: str | None = None
    primary_colors: list[ColorEntry] | None = None
    secondary_colors: list[ColorEntry] | None = None
    fonts: dict[str, Any] | None = None
    style_tokens: dict[str, Any] | None = None
    layout_style: LayoutStyle | None = None
    logo_placement: LogoPlacement | None = None
    text_safe_zones: dict[str, Any] | None = None
    voice_rules: dict[str, Any] | None = None
    do_list: list[str] | None = None
    dont_list: list[str] | None = None
    compliance_rules: list[Any] | None = None
    performance_data: dict[str, Any] | None = None
    fatigued_styles: list[str] | None = None


class BrandMemoryResponse(BaseModel):
    ok: bool
    brand_memory: dict[str, Any] | None = None


class BrandMemoryListResponse(BaseModel):
    ok: bool
    versions: list[dict[str, Any]]


class BrandMemorySyncRequest(BaseModel):
    brand_kit_id: str


class BrandKitCreateRequest(BaseModel):
    name: str
    business_name: str | None = None
    description: str | None = None
    logo_url: str | None = None
    colors: list[dict[str, Any]] = Field(default_factory=list)
    fonts: dict[str, Any] = Field(default_factory=dict)
    strategy: dict[str, Any] = Field(default_factory=dict)


class BrandKitResponse(BaseModel):
    ok: bool
    brand_kit: dict[str, Any]


class BrandKitListResponse(BaseModel):
    ok: bool
    brand_kits: list[dict[str, Any]]


# =============================================================================
# BRIEFS
# =============================================================================


class BriefCreateRequest(BaseModel):
    name: str
    objective: Literal["awareness", "conversion", "engagement"] | None = None
    target_audience: str | None = None
    product_service: str | None = None
    key_message: str | None = None
    campaign_id: str | None = None
    created_by: str | None = None


class BriefUpdateRequest(BaseModel):
    action: Literal["update_copy", "confirm_copy", "update_style"]
    copy_update: CopyUpdate | None = Field(default=None, alias="copy")
    style_direction: str | None = None

    model_config = {"populate_by_name": True}


class BriefResponse(BaseModel):
    ok: bool
    brief: dict[str, Any]


class BriefListResponse(BaseModel):
    ok: bool
    briefs: list[dict[str, Any]]


class BriefChatRequest(BaseModel):
    message: str | None = None
    is_initial: bool = False


class BriefChatResponse(BaseModel):
    ok: bool
    message: str
    proposed_copy: ConfirmedCopy | None = None
    should_confirm: bool = False
    brief: dict[str, Any]


class CopyVariationsRequest(BaseModel):
    variation_type: VariationType


class CopyVariationsResponse(BaseModel):
    ok: bool
    variations: list[ConfirmedCopy]


# =============================================================================
# GENERATION
# =============================================================================


class GeneratePackRequest(BaseModel):
    model: ImageModel = ImageModel.OPENAI
    background: bool = False


class GeneratePackResponse(BaseModel):
    ok: bool
    pack: dict[str, Any] | None = None
    assets: list[dict[str, Any]] = Field(default_factory=list)
    job_id: str | None = None


class PackResponse(BaseModel):
    ok: bool
    pack: dict[str, Any]


class PackListResponse(BaseModel):
    ok: bool
    packs: list[dict[str, Any]]


class RegenerationResponse(BaseModel):
    ok: bool
    pack: dict[str, Any] | None = None
    assets: list[dict[str, Any]] = Field(default_factory=list)
    error: str | None = None


class UsageListResponse(BaseModel):
    ok: bool
    events: list[dict[str, Any]]
