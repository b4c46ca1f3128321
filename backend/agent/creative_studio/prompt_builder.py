"""
Brand-aware prompt construction for image generation.

Everything here is pure: the same brand memory, copy, direction and aspect
ratio always produce the same prompt text.
"""

from __future__ import annotations

from typing import Any

from models.creative_models import (
    ASPECT_RATIOS,
    DIRECTION_CONFIGS,
    DIRECTIONS,
    AspectRatio,
    ConfirmedCopy,
    Direction,
    PromptSpec,
)

from .prompts import (
    ASPECT_RATIO_GUIDANCE,
    DEFAULT_ASPECT_RATIO_GUIDANCE,
    MAX_AVOID_ITEMS,
    MAX_ON_IMAGE_CTA_LENGTH,
    NEGATIVE_PROMPT_DEFECTS,
    QUALITY_REQUIREMENTS,
)


def _field(brand_memory: Any, name: str, default: Any = None) -> Any:
    """Read a field from an ORM row or a plain dict."""
    if isinstance(brand_memory, dict):
        value = brand_memory.get(name)
    else:
        value = getattr(brand_memory, name, None)
    return default if value is None else value


def _ratio_value(aspect_ratio: AspectRatio | str) -> str:
    return aspect_ratio.value if isinstance(aspect_ratio, AspectRatio) else str(aspect_ratio)


def get_aspect_ratio_guidance(aspect_ratio: AspectRatio | str) -> str:
    return ASPECT_RATIO_GUIDANCE.get(_ratio_value(aspect_ratio), DEFAULT_ASPECT_RATIO_GUIDANCE)


def build_image_prompt(
    brand_memory: Any,
    copy: ConfirmedCopy,
    direction: Direction,
    aspect_ratio: AspectRatio | str,
    style_direction: str | None = None,
) -> str:
    direction_config = DIRECTION_CONFIGS[Direction(direction)]
    parts: list[str] = []

    brand_name = _field(brand_memory, "brand_name") or "the brand"
    parts.append(f'Create a professional advertising image for "{brand_name}".')
    parts.append(
        f"Style direction: {direction_config.name} - {direction_config.description}."
    )
    parts.append(
        "The image MUST include this headline text clearly visible and readable: "
        f'"{copy.headline}".'
    )

    if copy.cta_text and len(copy.cta_text) < MAX_ON_IMAGE_CTA_LENGTH:
        parts.append(f'Include a subtle call-to-action button or text: "{copy.cta_text}".')

    parts.append(get_aspect_ratio_guidance(aspect_ratio))

    primary_colors = _field(brand_memory, "primary_colors", [])
    hexes = [c.get("hex") for c in primary_colors if isinstance(c, dict) and c.get("hex")]
    if hexes:
        parts.append(f"Use these brand colors prominently: {', '.join(hexes)}.")

    style_tokens = _field(brand_memory, "style_tokens", {})
    if style_tokens.get("vibe"):
        parts.append(f"Visual vibe: {style_tokens['vibe']}.")
    if style_tokens.get("mood"):
        parts.append(f"Mood: {style_tokens['mood']}.")

    parts.append(f"Layout style: {_field(brand_memory, 'layout_style') or 'modern'}.")

    if _field(brand_memory, "logo_url"):
        placement = _field(brand_memory, "logo_placement") or "bottom-right"
        parts.append(f"Leave space for logo placement at {placement}.")

    if style_direction:
        parts.append(f"Additional style emphasis: {style_direction}.")

    parts.append(QUALITY_REQUIREMENTS)

    dont_list = _field(brand_memory, "dont_list", [])
    if dont_list:
        parts.append(f"AVOID: {', '.join(dont_list[:MAX_AVOID_ITEMS])}.")

    return " ".join(parts)


def build_negative_prompt(brand_memory: Any) -> str:
    negatives = list(NEGATIVE_PROMPT_DEFECTS)
    negatives.extend(_field(brand_memory, "dont_list", []))
    negatives.extend(_field(brand_memory, "fatigued_styles", []))
    return ", ".join(negatives)


def build_direction_prompts(
    brand_memory: Any,
    copy: ConfirmedCopy,
    direction: Direction,
    style_direction: str | None = None,
) -> list[PromptSpec]:
    negative_prompt = build_negative_prompt(brand_memory)
    return [
        PromptSpec(
            direction=direction,
            aspect_ratio=ratio,
            prompt=build_image_prompt(brand_memory, copy, direction, ratio, style_direction),
            negative_prompt=negative_prompt,
        )
        for ratio in ASPECT_RATIOS
    ]


def build_pack_prompts(
    brand_memory: Any,
    copy: ConfirmedCopy,
    style_direction: str | None = None,
) -> list[PromptSpec]:
    """All 9 prompts of a pack: directions A, B, C, each in 1:1, 4:5, 9:16."""
    prompts: list[PromptSpec] = []
    for direction in DIRECTIONS:
        prompts.extend(build_direction_prompts(brand_memory, copy, direction, style_direction))
    return prompts
