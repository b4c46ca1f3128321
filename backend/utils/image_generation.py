from __future__ import annotations

import logging
from dataclasses import dataclass

from models.creative_models import AspectRatio, ImageModel
from operators.errors import ProviderError
from utils import nano_banana_provider, openai_image_provider


logger = logging.getLogger(__name__)


@dataclass
class GeneratedImage:
    image_bytes: bytes
    content_type: str
    provider: str
    model: str


def generate_ad_image(
    prompt: str,
    aspect_ratio: AspectRatio | str,
    negative_prompt: str | None = None,
    model: ImageModel | str = ImageModel.OPENAI,
) -> GeneratedImage:
    """Generate one ad image with the selected provider.

    DALL-E has no negative prompt parameter, so it is only forwarded to Nano
    Banana. Provider failures are raised as ``ProviderError``.
    """
    image_model = ImageModel(model)
    ratio = aspect_ratio.value if isinstance(aspect_ratio, AspectRatio) else str(aspect_ratio)

    try:
        if image_model == ImageModel.GEMINI:
            result = nano_banana_provider.generate_image(
                prompt=prompt,
                aspect_ratio=ratio,
                negative_prompt=negative_prompt,
            )
            return GeneratedImage(
                image_bytes=result.image_bytes,
                content_type=result.content_type,
                provider="openrouter",
                model=result.model,
            )

        result = openai_image_provider.generate_image(prompt=prompt, aspect_ratio=ratio)
        return GeneratedImage(
            image_bytes=result.image_bytes,
            content_type=result.content_type,
            provider="openai",
            model=result.model,
        )
    except ProviderError:
        raise
    except Exception as exc:
        logger.warning(
            "Image generation failed with %s (%s)",
            image_model.value,
            f"{type(exc).__name__}: {exc}",
        )
        raise ProviderError(f"Image generation failed: {exc}") from exc
