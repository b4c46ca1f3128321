from __future__ import annotations

import base64
import logging
import os
import urllib.request
from dataclasses import dataclass

from openai import OpenAI


logger = logging.getLogger(__name__)

DEFAULT_MODEL = os.getenv("OPENAI_IMAGE_MODEL", "dall-e-3")
OPENAI_TIMEOUT_SECONDS = float(os.getenv("OPENAI_TIMEOUT_SECONDS", "120"))

# DALL-E 3 only renders square, landscape and portrait canvases
SIZE_BY_ASPECT_RATIO = {
    "1:1": "1024x1024",
    "4:5": "1024x1792",
    "9:16": "1024x1792",
    "16:9": "1792x1024",
}


@dataclass
class OpenAIImageResult:
    image_bytes: bytes
    content_type: str
    model: str
    size: str
    revised_prompt: str | None = None


def _get_client() -> OpenAI:
    api_key = os.getenv("OPENAI_API_KEY", "")
    if not api_key:
        raise RuntimeError("OPENAI_API_KEY is not set")
    return OpenAI(api_key=api_key, timeout=OPENAI_TIMEOUT_SECONDS)


def size_for_aspect_ratio(aspect_ratio: str) -> str:
    return SIZE_BY_ASPECT_RATIO.get(aspect_ratio, "1024x1024")


def generate_image(
    prompt: str,
    aspect_ratio: str = "1:1",
    model: str | None = None,
) -> OpenAIImageResult:
    if not prompt.strip():
        raise ValueError("Prompt is required")

    size = size_for_aspect_ratio(aspect_ratio)
    model_name = model or DEFAULT_MODEL
    client = _get_client()
    response = client.images.generate(
        model=model_name,
        prompt=prompt.strip(),
        n=1,
        size=size,
        quality="hd",
        style="vivid",
        response_format="b64_json",
    )

    if not response.data:
        raise RuntimeError("OpenAI image response did not include an image")
    image = response.data[0]

    if image.b64_json:
        image_bytes = base64.b64decode(image.b64_json)
        content_type = "image/png"
    elif image.url:
        with urllib.request.urlopen(image.url, timeout=90) as download:
            image_bytes = download.read()
            content_type = download.headers.get("Content-Type", "image/png")
    else:
        raise RuntimeError("OpenAI image response did not include an image")

    return OpenAIImageResult(
        image_bytes=image_bytes,
        content_type=content_type,
        model=model_name,
        size=size,
        revised_prompt=getattr(image, "revised_prompt", None),
    )
