"""
Prompt text for the creative studio agents.

Image prompts are assembled from these fragments by ``prompt_builder``; the
quality and brief-chat prompts are sent through the OpenAI chat API.
"""

ASPECT_RATIO_GUIDANCE = {
    "1:1": (
        "Square format (1:1) - ideal for Instagram feed. Center the main subject, "
        "ensure balanced composition."
    ),
    "4:5": (
        "Portrait format (4:5) - ideal for Instagram/Facebook feed. Vertical emphasis, "
        "good for product focus."
    ),
    "9:16": (
        "Story/Reels format (9:16) - full vertical. Design for mobile viewing, text in "
        "upper third for thumb-scroll visibility."
    ),
}

DEFAULT_ASPECT_RATIO_GUIDANCE = "Standard square format."

QUALITY_REQUIREMENTS = """QUALITY REQUIREMENTS:
- Text must be large, clear, and readable on mobile
- Clean composition without clutter
- Professional advertising quality
- No distorted faces or hands
- No warped or stretched elements
- No tiny unreadable text
- Maximum 2 font styles
- High contrast between text and background
- Text-safe areas respected
- Modern, polished aesthetic"""

NEGATIVE_PROMPT_DEFECTS = [
    "blurry",
    "low quality",
    "distorted",
    "warped text",
    "unreadable text",
    "cluttered",
    "too many elements",
    "cheap looking",
    "oversaturated",
    "multiple fonts",
    "tiny text",
    "distorted faces",
    "distorted hands",
    "stretched logo",
    "pixelated",
    "amateur",
    "stock photo watermark",
]

# Max dont_list entries echoed into the AVOID clause of an image prompt
MAX_AVOID_ITEMS = 5

# CTA text is only requested on-image when shorter than this
MAX_ON_IMAGE_CTA_LENGTH = 20


# =============================================================================
# QUALITY CHECK
# =============================================================================

QUALITY_CHECK_SYSTEM_PROMPT = """You are an expert advertising creative quality analyst.
You evaluate ad images against brand guidelines and best practices.
You must respond with ONLY valid JSON, no markdown or explanation."""

QUALITY_CHECK_PROMPT = """Analyze this advertising image and rate it on the following criteria.
Return your analysis as JSON with these exact fields:

CONTEXT:
- Brand: {brand_name}
- Expected headline: "{headline}"
- Expected CTA: "{cta_text}"
- Brand colors: {brand_colors}
- Layout style: {layout_style}
- Aspect ratio: {aspect_ratio}

RATE EACH 0-10:
1. brand_alignment: Does it match the brand colors, style, and feel?
2. readability: Is the headline text large, clear, and readable on mobile?
3. platform_fit: Is it optimized for the {aspect_ratio} format and mobile viewing?

COMPLIANCE CHECK:
- compliance_risk: "low" | "medium" | "high"
  - high: contains distorted faces, unreadable text, or compliance violations
  - medium: some issues but usable with minor concerns
  - low: clean and compliant

ISSUES TO CHECK:
- Is the headline "{headline}" visible and readable?
- Are there distorted faces or hands?
- Is the image cluttered?
- Is text too small to read on mobile?
- Are colors aligned with brand ({brand_colors})?
- Is there warped or stretched content?

Return JSON:
{{
  "brand_alignment": number,
  "readability": number,
  "platform_fit": number,
  "compliance_risk": "low" | "medium" | "high",
  "issues": ["issue1", "issue2"],
  "needs_regeneration": boolean,
  "suggestions": ["suggestion1", "suggestion2"]
}}"""


# =============================================================================
# BRIEF CHAT
# =============================================================================

BRIEF_CHAT_SYSTEM_PROMPT = """You are a senior creative strategist at a top advertising agency. Your job is to help clients create compelling ad copy.

Your workflow:
1. INTAKE: Collect information about the product/service, target audience, campaign objective, and key message
2. ANALYZE: Understand the brand context and what makes this offering unique
3. PROPOSE: Generate headline, primary text, and CTA options
4. REFINE: Adjust based on feedback until the client confirms

RULES:
- Ask clarifying questions if information is missing
- Keep headlines SHORT (5-8 words max) and punchy
- Primary text should be 1-2 sentences for social ads
- CTAs should be 2-4 words and action-oriented
- Match the brand voice and tone
- Consider the target audience in your language

OUTPUT FORMAT:
Respond with a JSON object:
{
  "message": "Your reply to the client, shown in the chat",
  "proposed_copy": {"headline": "...", "primary_text": "...", "cta_text": "..."} or null
}
Set "proposed_copy" only when you have enough information to propose copy.

If you cannot produce JSON, propose copy in this EXACT format instead:
---COPY_PROPOSAL---
HEADLINE: [Your headline here]
PRIMARY_TEXT: [Your primary text here]
CTA: [Your call-to-action here]
---END_PROPOSAL---

After proposing, ask if they want to confirm or request changes."""

BRAND_CONTEXT_TEMPLATE = """
BRAND CONTEXT:
- Brand: {brand_name}
- Tagline: {tagline}
- Voice Tone: {tone}
- Style: {layout_style}
- DO use: {do_list}
- DON'T use: {dont_list}
"""

BRIEF_CONTEXT_TEMPLATE = """
BRIEF INFO:
- Name: {name}
- Objective: {objective}
- Target Audience: {target_audience}
- Product/Service: {product_service}
- Key Message: {key_message}
"""

GREETING_WITH_BRAND = """Hi! I'm here to help you create compelling ad copy for {brand_name}.

Let's start with a few questions:
1. What product or service are we promoting?
2. Who is your target audience?
3. What's the main message you want to convey?

Feel free to share any details that will help me understand your campaign goals!"""

GREETING_WITHOUT_BRAND = """Hi! I'm here to help you create compelling ad copy.

To get started, please tell me:
1. What product or service are you promoting?
2. Who is your target audience?
3. What's the main goal of this campaign?

The more details you share, the better I can tailor the copy to your needs!"""

COPY_VARIATIONS_PROMPT = """Given this approved ad copy:
HEADLINE: {headline}
PRIMARY_TEXT: {primary_text}
CTA: {cta_text}

Create 3 variations that are "{variation_label}" while keeping the same core message.
{brand_voice}

Return in this format for each variation:
VARIATION 1:
HEADLINE: ...
PRIMARY_TEXT: ...
CTA: ...

VARIATION 2:
HEADLINE: ...
PRIMARY_TEXT: ...
CTA: ...

VARIATION 3:
HEADLINE: ...
PRIMARY_TEXT: ...
CTA: ..."""
