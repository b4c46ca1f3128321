from agent.creative_studio import prompt_builder
from agent.creative_studio.prompts import (
    ASPECT_RATIO_GUIDANCE,
    DEFAULT_ASPECT_RATIO_GUIDANCE,
    NEGATIVE_PROMPT_DEFECTS,
    QUALITY_REQUIREMENTS,
)
from models.creative_models import (
    DIRECTION_CONFIGS,
    AspectRatio,
    ConfirmedCopy,
    Direction,
)

from conftest import BRAND_FIELDS, SUMMER_COPY


class TestBuildImagePrompt:
    def test_identical_inputs_give_identical_prompts(self):
        first = prompt_builder.build_image_prompt(
            BRAND_FIELDS, SUMMER_COPY, Direction.A, AspectRatio.SQUARE, "golden hour"
        )
        second = prompt_builder.build_image_prompt(
            dict(BRAND_FIELDS), SUMMER_COPY, Direction.A, AspectRatio.SQUARE, "golden hour"
        )

        assert first == second

    def test_direction_only_changes_direction_clause(self):
        prompt_a = prompt_builder.build_image_prompt(
            BRAND_FIELDS, SUMMER_COPY, Direction.A, AspectRatio.PORTRAIT
        )
        prompt_b = prompt_builder.build_image_prompt(
            BRAND_FIELDS, SUMMER_COPY, Direction.B, AspectRatio.PORTRAIT
        )

        clause_a = (
            f"Style direction: {DIRECTION_CONFIGS[Direction.A].name} - "
            f"{DIRECTION_CONFIGS[Direction.A].description}."
        )
        clause_b = (
            f"Style direction: {DIRECTION_CONFIGS[Direction.B].name} - "
            f"{DIRECTION_CONFIGS[Direction.B].description}."
        )
        assert clause_a in prompt_a
        assert clause_b in prompt_b
        assert prompt_a.replace(clause_a, "") == prompt_b.replace(clause_b, "")

    def test_clauses_appear_in_fixed_order(self):
        prompt = prompt_builder.build_image_prompt(
            BRAND_FIELDS, SUMMER_COPY, Direction.C, AspectRatio.STORY, "golden hour"
        )

        markers = [
            'Create a professional advertising image for "Acme Outdoors".',
            "Style direction: Fresh & Authentic",
            'readable: "Summer Sale".',
            'call-to-action button or text: "Shop Now".',
            ASPECT_RATIO_GUIDANCE["9:16"],
            "Use these brand colors prominently: #1B4D3E.",
            "Visual vibe: rugged.",
            "Mood: adventurous.",
            "Layout style: bold.",
            "Leave space for logo placement at top-left.",
            "Additional style emphasis: golden hour.",
            QUALITY_REQUIREMENTS,
            "AVOID: neon colors, stock photo smiles.",
        ]
        positions = [prompt.index(marker) for marker in markers]
        assert positions == sorted(positions)
        assert prompt.endswith("AVOID: neon colors, stock photo smiles.")

    def test_cta_clause_only_for_short_cta(self):
        long_cta = ConfirmedCopy(
            headline="Summer Sale",
            primary_text="Everything 30% off.",
            cta_text="Visit our flagship store",
        )
        boundary_cta = ConfirmedCopy(
            headline="Summer Sale",
            primary_text="Everything 30% off.",
            cta_text="x" * 20,
        )

        short = prompt_builder.build_image_prompt(
            BRAND_FIELDS, SUMMER_COPY, Direction.A, AspectRatio.SQUARE
        )
        too_long = prompt_builder.build_image_prompt(
            BRAND_FIELDS, long_cta, Direction.A, AspectRatio.SQUARE
        )
        at_limit = prompt_builder.build_image_prompt(
            BRAND_FIELDS, boundary_cta, Direction.A, AspectRatio.SQUARE
        )

        assert "call-to-action" in short
        assert "call-to-action" not in too_long
        assert "call-to-action" not in at_limit

    def test_avoid_clause_capped_at_five_items(self):
        brand = {**BRAND_FIELDS, "dont_list": [f"item {i}" for i in range(1, 9)]}

        prompt = prompt_builder.build_image_prompt(
            brand, SUMMER_COPY, Direction.A, AspectRatio.SQUARE
        )

        assert "AVOID: item 1, item 2, item 3, item 4, item 5." in prompt
        assert "item 6" not in prompt

    def test_optional_clauses_skipped_for_empty_brand(self):
        prompt = prompt_builder.build_image_prompt(
            {}, SUMMER_COPY, Direction.A, AspectRatio.SQUARE
        )

        assert 'image for "the brand".' in prompt
        assert "Layout style: modern." in prompt
        assert "brand colors" not in prompt
        assert "logo placement" not in prompt
        assert "AVOID" not in prompt

    def test_unknown_aspect_ratio_uses_default_guidance(self):
        assert prompt_builder.get_aspect_ratio_guidance("3:2") == DEFAULT_ASPECT_RATIO_GUIDANCE
        assert prompt_builder.get_aspect_ratio_guidance(AspectRatio.PORTRAIT) == (
            ASPECT_RATIO_GUIDANCE["4:5"]
        )


class TestBuildNegativePrompt:
    def test_defects_then_dont_list_then_fatigued_styles(self):
        negative = prompt_builder.build_negative_prompt(BRAND_FIELDS)

        expected = NEGATIVE_PROMPT_DEFECTS + [
            "neon colors",
            "stock photo smiles",
            "flat illustration",
        ]
        assert negative == ", ".join(expected)

    def test_no_deduplication(self):
        brand = {"dont_list": ["blurry"], "fatigued_styles": ["blurry"]}

        negative = prompt_builder.build_negative_prompt(brand)

        assert negative.split(", ").count("blurry") == 3


class TestPackPrompts:
    def test_nine_prompts_directions_outer_ratios_inner(self):
        prompts = prompt_builder.build_pack_prompts(BRAND_FIELDS, SUMMER_COPY)

        assert [(p.direction.value, p.aspect_ratio.value) for p in prompts] == [
            ("A", "1:1"),
            ("A", "4:5"),
            ("A", "9:16"),
            ("B", "1:1"),
            ("B", "4:5"),
            ("B", "9:16"),
            ("C", "1:1"),
            ("C", "4:5"),
            ("C", "9:16"),
        ]

    def test_direction_prompts_match_pack_entries(self):
        pack = prompt_builder.build_pack_prompts(BRAND_FIELDS, SUMMER_COPY, "golden hour")
        direction_b = prompt_builder.build_direction_prompts(
            BRAND_FIELDS, SUMMER_COPY, Direction.B, "golden hour"
        )

        assert direction_b == pack[3:6]
        assert all(p.negative_prompt == pack[0].negative_prompt for p in pack)
