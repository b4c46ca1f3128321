"""
Creative studio agents: prompt construction, brief intake chat and image QA.

Usage:
    from agent.creative_studio import build_pack_prompts, check_image_quality

    prompts = build_pack_prompts(brand_memory, copy)
"""

from .brief_chat import (
    BriefChatReply,
    generate_brief_chat_response,
    generate_copy_variations,
    generate_greeting,
    parse_copy_proposal,
)
from .prompt_builder import (
    build_direction_prompts,
    build_image_prompt,
    build_negative_prompt,
    build_pack_prompts,
)
from .quality_checker import (
    calculate_pack_scores,
    check_image_quality,
    passes_quality,
    quick_validation,
)

__all__ = [
    "BriefChatReply",
    "generate_brief_chat_response",
    "generate_copy_variations",
    "generate_greeting",
    "parse_copy_proposal",
    "build_direction_prompts",
    "build_image_prompt",
    "build_negative_prompt",
    "build_pack_prompts",
    "calculate_pack_scores",
    "check_image_quality",
    "passes_quality",
    "quick_validation",
]
