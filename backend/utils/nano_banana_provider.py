from __future__ import annotations

import base64
import logging
import os
import urllib.request
from dataclasses import dataclass
from typing import Any

from openai import OpenAI


logger = logging.getLogger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = os.getenv("NANO_BANANA_MODEL", "google/gemini-3-pro-image-preview")
OPENAI_TIMEOUT_SECONDS = float(os.getenv("OPENAI_TIMEOUT_SECONDS", "120"))

SUPPORTED_ASPECT_RATIOS = {"1:1", "4:5", "9:16", "16:9", "3:4", "4:3"}


@dataclass
class NanoBananaImageResult:
    image_bytes: bytes
    content_type: str
    model: str
    prompt: str
    response_text: str | None = None


def _get_client() -> OpenAI:
    api_key = os.getenv("OPENROUTER_API_KEY", "")
    if not api_key:
        raise RuntimeError("OPENROUTER_API_KEY is not set")
    return OpenAI(
        base_url=OPENROUTER_BASE_URL,
        api_key=api_key,
        timeout=OPENAI_TIMEOUT_SECONDS,
    )


def generate_image(
    prompt: str,
    aspect_ratio: str = "1:1",
    negative_prompt: str | None = None,
    model: str | None = None,
) -> NanoBananaImageResult:
    if not prompt.strip():
        raise ValueError("Prompt is required")

    text = prompt.strip()
    if negative_prompt:
        text = f"{text}\n\nDo not include: {negative_prompt}"

    request_payload: dict[str, Any] = {
        "model": model or DEFAULT_MODEL,
        "messages": [{"role": "user", "content": [{"type": "text", "text": text}]}],
        "modalities": ["image", "text"],
        "stream": False,
        "extra_body": {"image_config": {"aspect_ratio": normalize_aspect_ratio(aspect_ratio)}},
    }

    client = _get_client()
    response = client.chat.completions.create(**request_payload)

    image_url = _extract_generated_image_url(response)
    if not image_url:
        raise RuntimeError("Nano Banana response did not include an image")

    image_bytes, content_type = _decode_image_payload(image_url)
    return NanoBananaImageResult(
        image_bytes=image_bytes,
        content_type=content_type,
        model=request_payload["model"],
        prompt=prompt.strip(),
        response_text=_extract_response_text(response),
    )


def normalize_aspect_ratio(aspect_ratio: str) -> str:
    if aspect_ratio in SUPPORTED_ASPECT_RATIOS:
        return aspect_ratio
    logger.warning("Unsupported aspect ratio %s for Nano Banana; using 1:1", aspect_ratio)
    return "1:1"


def _extract_generated_image_url(response: Any) -> str | None:
    choices = getattr(response, "choices", None)
    if choices:
        message = getattr(choices[0], "message", None)
        images = getattr(message, "images", None)
        if images:
            url = _extract_url_from_images(images)
            if url:
                return url

    if hasattr(response, "model_dump"):
        data = response.model_dump()
    elif isinstance(response, dict):
        data = response
    else:
        data = {}

    raw_choices = data.get("choices") or []
    if not raw_choices:
        return None
    message = raw_choices[0].get("message") or {}
    return _extract_url_from_images(message.get("images") or [])


def _extract_url_from_images(images: list[Any]) -> str | None:
    for image in images:
        if isinstance(image, dict):
            image_url = image.get("image_url") or image.get("imageUrl") or {}
            if image_url.get("url"):
                return str(image_url["url"])
            if image.get("url"):
                return str(image["url"])
            continue

        image_url_obj = getattr(image, "image_url", None) or getattr(image, "imageUrl", None)
        maybe_url = getattr(image_url_obj, "url", None) or getattr(image, "url", None)
        if maybe_url:
            return str(maybe_url)

    return None


def _extract_response_text(response: Any) -> str | None:
    choices = getattr(response, "choices", None)
    if not choices:
        return None
    content = getattr(choices[0].message, "content", None)
    if isinstance(content, str):
        return content or None
    return None


def _decode_image_payload(image_url: str) -> tuple[bytes, str]:
    if image_url.startswith("data:"):
        header, _, data = image_url.partition(",")
        if not data:
            raise RuntimeError("Invalid data URL from Nano Banana")
        content_type = "image/png"
        if ";" in header:
            content_type = header[5:].split(";", 1)[0] or content_type
        return base64.b64decode(data), content_type

    if image_url.startswith(("http://", "https://")):
        with urllib.request.urlopen(image_url, timeout=90) as response:
            return response.read(), response.headers.get("Content-Type", "image/png")

    raise RuntimeError("Unsupported Nano Banana image payload format")
