"""
Brief intake chat.

The assistant collects campaign details and proposes headline, primary text
and CTA. Replies are requested as JSON and validated with pydantic; when the
model ignores that and answers in free text, the ``---COPY_PROPOSAL---``
block is parsed out of the text instead.
"""

from __future__ import annotations

import json
import logging
import os
import re
from typing import Any

from openai import OpenAI
from pydantic import BaseModel, ValidationError, field_validator

from models.creative_models import ConfirmedCopy, VariationType

from .prompts import (
    BRAND_CONTEXT_TEMPLATE,
    BRIEF_CHAT_SYSTEM_PROMPT,
    BRIEF_CONTEXT_TEMPLATE,
    COPY_VARIATIONS_PROMPT,
    GREETING_WITH_BRAND,
    GREETING_WITHOUT_BRAND,
)


logger = logging.getLogger(__name__)

BRIEF_CHAT_MODEL = os.getenv("BRIEF_CHAT_MODEL", "gpt-4o")
OPENAI_TIMEOUT_SECONDS = float(os.getenv("OPENAI_TIMEOUT_SECONDS", "120"))

_PROPOSAL_PATTERN = re.compile(r"---COPY_PROPOSAL---([\s\S]*?)---END_PROPOSAL---")
_HEADLINE_PATTERN = re.compile(r"HEADLINE:\s*(.+)", re.IGNORECASE)
_PRIMARY_TEXT_PATTERN = re.compile(r"PRIMARY_TEXT:\s*(.+)", re.IGNORECASE)
_CTA_PATTERN = re.compile(r"CTA:\s*(.+)", re.IGNORECASE)
_VARIATION_PATTERN = re.compile(
    r"VARIATION \d+:\s*\nHEADLINE:\s*(.+)\s*\nPRIMARY_TEXT:\s*(.+)\s*\nCTA:\s*(.+)",
    re.IGNORECASE,
)

MAX_VARIATIONS = 3


class BriefChatPayload(BaseModel):
    """Structured reply requested from the chat model."""

    message: str
    proposed_copy: ConfirmedCopy | None = None

    @field_validator("proposed_copy", mode="before")
    @classmethod
    def _drop_incomplete_copy(cls, value: Any) -> Any:
        if isinstance(value, ConfirmedCopy):
            return value
        if not isinstance(value, dict):
            return None
        if not all(str(value.get(k) or "").strip() for k in ("headline", "primary_text", "cta_text")):
            return None
        return {k: str(value[k]).strip() for k in ("headline", "primary_text", "cta_text")}


class BriefChatReply(BaseModel):
    message: str
    proposed_copy: ConfirmedCopy | None = None
    should_confirm: bool = False
    model: str
    input_tokens: int = 0
    output_tokens: int = 0


def _get_client(api_key: str | None = None) -> OpenAI:
    return OpenAI(
        api_key=api_key or os.getenv("OPENAI_API_KEY", ""),
        timeout=OPENAI_TIMEOUT_SECONDS,
    )


def _field(record: Any, name: str) -> Any:
    if record is None:
        return None
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


def build_system_prompt(brand_memory: Any, brief: Any) -> str:
    prompt = BRIEF_CHAT_SYSTEM_PROMPT
    if brand_memory is not None:
        voice_rules = _field(brand_memory, "voice_rules") or {}
        prompt += BRAND_CONTEXT_TEMPLATE.format(
            brand_name=_field(brand_memory, "brand_name") or "Unknown",
            tagline=_field(brand_memory, "tagline") or "Not set",
            tone=voice_rules.get("tone") or "Professional",
            layout_style=_field(brand_memory, "layout_style") or "Modern",
            do_list=", ".join(_field(brand_memory, "do_list") or []) or "No specific requirements",
            dont_list=", ".join(_field(brand_memory, "dont_list") or []) or "No restrictions",
        )
    prompt += BRIEF_CONTEXT_TEMPLATE.format(
        name=_field(brief, "name") or "Not set",
        objective=_field(brief, "objective") or "Not set",
        target_audience=_field(brief, "target_audience") or "Not set",
        product_service=_field(brief, "product_service") or "Not set",
        key_message=_field(brief, "key_message") or "Not set",
    )
    return prompt


def generate_brief_chat_response(
    chat_history: list[dict[str, Any]],
    user_message: str,
    brand_memory: Any,
    brief: Any,
    api_key: str | None = None,
    model: str | None = None,
) -> BriefChatReply:
    """Get the assistant's next chat turn. Provider errors propagate."""
    messages: list[dict[str, Any]] = [
        {"role": "system", "content": build_system_prompt(brand_memory, brief)}
    ]
    for entry in chat_history:
        role = entry.get("role")
        if role not in ("user", "assistant"):
            continue
        messages.append({"role": role, "content": str(entry.get("content") or "")})
    messages.append({"role": "user", "content": user_message})

    model_name = model or BRIEF_CHAT_MODEL
    client = _get_client(api_key)
    completion = client.chat.completions.create(
        model=model_name,
        messages=messages,
        temperature=0.7,
        max_tokens=1000,
        response_format={"type": "json_object"},
    )

    content = completion.choices[0].message.content or ""
    payload = parse_chat_reply(content)

    usage = getattr(completion, "usage", None)
    return BriefChatReply(
        message=payload.message,
        proposed_copy=payload.proposed_copy,
        should_confirm=_should_confirm(payload, content),
        model=model_name,
        input_tokens=getattr(usage, "prompt_tokens", 0) or 0,
        output_tokens=getattr(usage, "completion_tokens", 0) or 0,
    )


def parse_chat_reply(content: str) -> BriefChatPayload:
    try:
        data = json.loads(content)
        if isinstance(data, dict):
            return BriefChatPayload.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as exc:
        logger.info("Chat reply was not structured JSON (%s); parsing text", type(exc).__name__)

    return BriefChatPayload(message=content, proposed_copy=parse_copy_proposal(content))


def parse_copy_proposal(content: str) -> ConfirmedCopy | None:
    proposal = _PROPOSAL_PATTERN.search(content)
    if not proposal:
        return None

    block = proposal.group(1)
    headline = _HEADLINE_PATTERN.search(block)
    primary_text = _PRIMARY_TEXT_PATTERN.search(block)
    cta = _CTA_PATTERN.search(block)
    if not headline or not primary_text or not cta:
        return None

    return ConfirmedCopy(
        headline=headline.group(1).strip(),
        primary_text=primary_text.group(1).strip(),
        cta_text=cta.group(1).strip(),
    )


def _should_confirm(payload: BriefChatPayload, raw_content: str) -> bool:
    if payload.proposed_copy is not None:
        return True
    lowered = raw_content.lower()
    return "confirm" in lowered or "approve" in lowered


def generate_greeting(brand_memory: Any) -> str:
    if brand_memory is not None:
        return GREETING_WITH_BRAND.format(
            brand_name=_field(brand_memory, "brand_name") or "your brand"
        )
    return GREETING_WITHOUT_BRAND


def generate_copy_variations(
    copy: ConfirmedCopy,
    brand_memory: Any,
    variation_type: VariationType | str,
    api_key: str | None = None,
    model: str | None = None,
) -> list[ConfirmedCopy]:
    variation = VariationType(variation_type)
    brand_voice = ""
    if brand_memory is not None:
        voice_rules = _field(brand_memory, "voice_rules") or {}
        brand_voice = f"Brand voice: {voice_rules.get('tone') or 'Professional'}"

    prompt = COPY_VARIATIONS_PROMPT.format(
        headline=copy.headline,
        primary_text=copy.primary_text,
        cta_text=copy.cta_text,
        variation_label=variation.value.replace("more_", "more "),
        brand_voice=brand_voice,
    )

    client = _get_client(api_key)
    completion = client.chat.completions.create(
        model=model or BRIEF_CHAT_MODEL,
        messages=[{"role": "user", "content": prompt}],
        temperature=0.8,
    )
    return parse_copy_variations(completion.choices[0].message.content or "")


def parse_copy_variations(content: str) -> list[ConfirmedCopy]:
    variations = [
        ConfirmedCopy(
            headline=match.group(1).strip(),
            primary_text=match.group(2).strip(),
            cta_text=match.group(3).strip(),
        )
        for match in _VARIATION_PATTERN.finditer(content)
    ]
    return variations[:MAX_VARIATIONS]
