"""
Domain models for the creative studio pipeline.

This module defines the value types shared by the prompt builder, the
quality checker and the pack/brief operators:
- Status and option enums (brief, pack, asset, direction, aspect ratio)
- Direction presets used to fan a pack out into three looks
- Confirmed copy, quality scores and generation results
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


# =============================================================================
# ENUMS
# =============================================================================


class BriefStatus(str, Enum):
    """Lifecycle of a creative brief."""

    INTAKE = "intake"  # Collecting information through chat
    COPY_PENDING = "copy_pending"  # Copy proposed, awaiting confirmation
    COPY_CONFIRMED = "copy_confirmed"  # Copy locked, generation allowed
    GENERATING = "generating"  # Pack generation in progress
    COMPLETED = "completed"
    FAILED = "failed"


class PackStatus(str, Enum):
    PENDING = "pending"
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"


class AssetStatus(str, Enum):
    PENDING = "pending"
    GENERATING = "generating"
    COMPLETED = "completed"  # Passed the quality gate
    FLAGGED = "flagged"  # Generated but failed the quality gate
    FAILED = "failed"  # Generation or upload error


class ComplianceRisk(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ComplianceStatus(str, Enum):
    PENDING = "pending"
    PASSED = "passed"
    FLAGGED = "flagged"


class Direction(str, Enum):
    A = "A"
    B = "B"
    C = "C"


class AspectRatio(str, Enum):
    SQUARE = "1:1"  # Instagram / Facebook feed
    PORTRAIT = "4:5"  # Feed portrait
    STORY = "9:16"  # Stories / Reels


class ImageModel(str, Enum):
    OPENAI = "openai"
    GEMINI = "gemini"


class LayoutStyle(str, Enum):
    MODERN = "modern"
    MINIMAL = "minimal"
    BOLD = "bold"
    UGC = "ugc"
    PREMIUM = "premium"


class LogoPlacement(str, Enum):
    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"
    CENTER = "center"


class VariationType(str, Enum):
    MORE_PREMIUM = "more_premium"
    MORE_PLAYFUL = "more_playful"
    MORE_URGENT = "more_urgent"
    MORE_CASUAL = "more_casual"


DIRECTIONS: list[Direction] = [Direction.A, Direction.B, Direction.C]
ASPECT_RATIOS: list[AspectRatio] = [
    AspectRatio.SQUARE,
    AspectRatio.PORTRAIT,
    AspectRatio.STORY,
]


# =============================================================================
# DIRECTIONS
# =============================================================================


class DirectionConfig(BaseModel):
    name: str
    description: str
    style_modifiers: list[str] = Field(default_factory=list)


DIRECTION_CONFIGS: dict[Direction, DirectionConfig] = {
    Direction.A: DirectionConfig(
        name="Bold & Modern",
        description="High contrast, dynamic composition, strong visual impact",
        style_modifiers=["bold", "high-contrast", "dynamic", "modern"],
    ),
    Direction.B: DirectionConfig(
        name="Soft & Elegant",
        description="Subtle gradients, refined typography, premium feel",
        style_modifiers=["soft", "elegant", "premium", "refined"],
    ),
    Direction.C: DirectionConfig(
        name="Fresh & Authentic",
        description="Natural lighting, relatable imagery, UGC-inspired",
        style_modifiers=["fresh", "authentic", "natural", "relatable"],
    ),
}


# =============================================================================
# COPY AND PROMPTS
# =============================================================================


class ConfirmedCopy(BaseModel):
    headline: str
    primary_text: str
    cta_text: str


class CopyUpdate(BaseModel):
    headline: str | None = None
    primary_text: str | None = None
    cta_text: str | None = None


class PromptSpec(BaseModel):
    """One (direction, aspect ratio) cell of a pack."""

    direction: Direction
    aspect_ratio: AspectRatio
    prompt: str
    negative_prompt: str


# =============================================================================
# QUALITY
# =============================================================================


class QualityScores(BaseModel):
    brand_alignment: float = Field(ge=0, le=10)
    readability: float = Field(ge=0, le=10)
    platform_fit: float = Field(ge=0, le=10)
    compliance_risk: ComplianceRisk = ComplianceRisk.LOW


class QualityCheckResult(BaseModel):
    scores: QualityScores
    issues: list[str] = Field(default_factory=list)
    passes_quality: bool
    needs_regeneration: bool = False
    suggestions: list[str] = Field(default_factory=list)


class PackScores(BaseModel):
    avg_brand_alignment: float
    avg_readability: float
    avg_platform_fit: float
    compliance_status: ComplianceStatus


# =============================================================================
# GENERATION
# =============================================================================


class GenerationGate(BaseModel):
    can_generate: bool
    reason: str | None = None


class GenerationResult(BaseModel):
    """Outcome of a pack or direction generation run.

    ``pack`` and ``assets`` hold plain dict snapshots so the result can be
    returned from a background job as well as from a request handler.
    """

    success: bool
    pack: dict[str, Any] | None = None
    assets: list[dict[str, Any]] = Field(default_factory=list)
    error: str | None = None
