"""
Automated quality scoring for generated ad images.

A vision model rates each image for brand alignment, readability and
platform fit (0-10) plus a compliance risk level. The check fails open: if
the model cannot be reached or returns garbage, the image gets neutral
scores and passes, so QA outages never block generation.
"""

from __future__ import annotations

import json
import logging
import os
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable

from openai import OpenAI

from models.creative_models import (
    AspectRatio,
    ComplianceRisk,
    ComplianceStatus,
    ConfirmedCopy,
    PackScores,
    QualityCheckResult,
    QualityScores,
)

from .prompts import QUALITY_CHECK_PROMPT, QUALITY_CHECK_SYSTEM_PROMPT


logger = logging.getLogger(__name__)

QUALITY_CHECK_MODEL = os.getenv("QUALITY_CHECK_MODEL", "gpt-4o")
OPENAI_TIMEOUT_SECONDS = float(os.getenv("OPENAI_TIMEOUT_SECONDS", "120"))
QUALITY_CHECK_MAX_TOKENS = 1000

PASSING_SCORE = 6
NEUTRAL_SCORE = 5
FAILED_CHECK_ISSUE = "Quality check could not be completed"

_FENCE_PATTERN = re.compile(r"```(?:json)?\s*\n?|\n?```")


def _get_client(api_key: str | None = None) -> OpenAI:
    return OpenAI(
        api_key=api_key or os.getenv("OPENAI_API_KEY", ""),
        timeout=OPENAI_TIMEOUT_SECONDS,
    )


def quick_validation(image_url: str | None) -> tuple[bool, list[str]]:
    """Cheap pre-filter run before the vision call."""
    issues: list[str] = []
    if not image_url or not image_url.startswith(("http://", "https://")):
        issues.append("Invalid image URL")
    return not issues, issues


def build_quality_check_prompt(
    brand_memory: Any,
    copy: ConfirmedCopy,
    aspect_ratio: AspectRatio | str,
) -> str:
    primary_colors = _field(brand_memory, "primary_colors") or []
    hexes = [c.get("hex") for c in primary_colors if isinstance(c, dict) and c.get("hex")]
    ratio = aspect_ratio.value if isinstance(aspect_ratio, AspectRatio) else str(aspect_ratio)
    return QUALITY_CHECK_PROMPT.format(
        brand_name=_field(brand_memory, "brand_name") or "Unknown",
        headline=copy.headline,
        cta_text=copy.cta_text,
        brand_colors=", ".join(hexes) or "not specified",
        layout_style=_field(brand_memory, "layout_style") or "modern",
        aspect_ratio=ratio,
    )


def check_image_quality(
    image_url: str,
    brand_memory: Any,
    copy: ConfirmedCopy,
    aspect_ratio: AspectRatio | str,
    api_key: str | None = None,
    model: str | None = None,
) -> QualityCheckResult:
    """Score one generated image. Never raises."""
    try:
        valid, issues = quick_validation(image_url)
        if not valid:
            raise ValueError(", ".join(issues))

        client = _get_client(api_key)
        response = client.chat.completions.create(
            model=model or QUALITY_CHECK_MODEL,
            messages=[
                {"role": "system", "content": QUALITY_CHECK_SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "text",
                            "text": build_quality_check_prompt(brand_memory, copy, aspect_ratio),
                        },
                        {"type": "image_url", "image_url": {"url": image_url}},
                    ],
                },
            ],
            response_format={"type": "json_object"},
            max_tokens=QUALITY_CHECK_MAX_TOKENS,
        )
        content = response.choices[0].message.content or "{}"
        verdict = parse_quality_response(content)
    except Exception as exc:
        logger.warning(
            "Quality check failed (%s). Using neutral scores.",
            f"{type(exc).__name__}: {exc}",
        )
        return _fallback_result()

    return result_from_verdict(verdict)


def parse_quality_response(content: str) -> dict[str, Any]:
    cleaned = _FENCE_PATTERN.sub("", content).strip()
    parsed = json.loads(cleaned)
    if not isinstance(parsed, dict):
        raise ValueError("Quality check response is not a JSON object")
    return parsed


def result_from_verdict(verdict: dict[str, Any]) -> QualityCheckResult:
    scores = QualityScores(
        brand_alignment=_score_or_neutral(verdict.get("brand_alignment")),
        readability=_score_or_neutral(verdict.get("readability")),
        platform_fit=_score_or_neutral(verdict.get("platform_fit")),
        compliance_risk=map_compliance_risk(verdict.get("compliance_risk")),
    )
    return QualityCheckResult(
        scores=scores,
        issues=_string_list(verdict.get("issues")),
        passes_quality=passes_quality(verdict),
        needs_regeneration=bool(verdict.get("needs_regeneration") or False),
        suggestions=_string_list(verdict.get("suggestions")),
    )


def map_compliance_risk(risk: Any) -> ComplianceRisk:
    if risk == "high":
        return ComplianceRisk.HIGH
    if risk == "medium":
        return ComplianceRisk.MEDIUM
    return ComplianceRisk.LOW


def passes_quality(scores: QualityScores | dict[str, Any]) -> bool:
    """All three scores >= 6 and compliance risk not high. Missing scores count as 0."""
    if isinstance(scores, QualityScores):
        scores = scores.model_dump(mode="json")

    for key in ("brand_alignment", "readability", "platform_fit"):
        if _raw_number(scores.get(key)) < PASSING_SCORE:
            return False

    risk = scores.get("compliance_risk") or "low"
    if isinstance(risk, ComplianceRisk):
        risk = risk.value
    return risk != "high"


def calculate_pack_scores(scores: Iterable[QualityScores]) -> PackScores:
    scores = list(scores)
    if not scores:
        return PackScores(
            avg_brand_alignment=0,
            avg_readability=0,
            avg_platform_fit=0,
            compliance_status=ComplianceStatus.PENDING,
        )

    flagged = any(
        s.compliance_risk in (ComplianceRisk.MEDIUM, ComplianceRisk.HIGH) for s in scores
    )
    return PackScores(
        avg_brand_alignment=_mean(s.brand_alignment for s in scores),
        avg_readability=_mean(s.readability for s in scores),
        avg_platform_fit=_mean(s.platform_fit for s in scores),
        compliance_status=ComplianceStatus.FLAGGED if flagged else ComplianceStatus.PASSED,
    )


def _mean(values: Iterable[float]) -> float:
    values = list(values)
    mean = Decimal(str(sum(values) / len(values)))
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def _raw_number(value: Any) -> float:
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return float(value)
    return 0


def _score_or_neutral(value: Any) -> float:
    number = _raw_number(value)
    if not number:
        return NEUTRAL_SCORE
    return min(max(number, 0.0), 10.0)


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None]


def _field(brand_memory: Any, name: str) -> Any:
    if isinstance(brand_memory, dict):
        return brand_memory.get(name)
    return getattr(brand_memory, name, None)


def _fallback_result() -> QualityCheckResult:
    return QualityCheckResult(
        scores=QualityScores(
            brand_alignment=NEUTRAL_SCORE,
            readability=NEUTRAL_SCORE,
            platform_fit=NEUTRAL_SCORE,
            compliance_risk=ComplianceRisk.LOW,
        ),
        issues=[FAILED_CHECK_ISSUE],
        passes_quality=True,
        needs_regeneration=False,
        suggestions=[],
    )
