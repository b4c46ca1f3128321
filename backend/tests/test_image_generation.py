import base64
from types import SimpleNamespace

import pytest

from models.creative_models import AspectRatio, ImageModel
from operators.errors import ProviderError
from utils import image_generation, nano_banana_provider, openai_image_provider


class _FakeImages:
    def __init__(self, data):
        self.data = data
        self.requests = []

    def generate(self, **kwargs):
        self.requests.append(kwargs)
        return SimpleNamespace(data=self.data)


class _FakeChatCompletions:
    def __init__(self, response):
        self.response = response
        self.requests = []

    def create(self, **kwargs):
        self.requests.append(kwargs)
        return self.response


def test_openai_sizes_follow_aspect_ratio(monkeypatch):
    images = _FakeImages(
        [SimpleNamespace(b64_json=base64.b64encode(b"png").decode(), url=None, revised_prompt=None)]
    )
    monkeypatch.setattr(
        openai_image_provider, "_get_client", lambda: SimpleNamespace(images=images)
    )

    image = image_generation.generate_ad_image(
        "Summer Sale ad", AspectRatio.STORY, negative_prompt="blurry", model=ImageModel.OPENAI
    )

    assert image.image_bytes == b"png"
    assert image.provider == "openai"
    assert images.requests[0]["size"] == "1024x1792"
    assert images.requests[0]["response_format"] == "b64_json"
    assert "blurry" not in images.requests[0]["prompt"]


def test_gemini_forwards_negative_prompt_and_ratio(monkeypatch):
    data_url = "data:image/webp;base64," + base64.b64encode(b"webp").decode()
    response = SimpleNamespace(
        choices=[
            SimpleNamespace(
                message=SimpleNamespace(
                    images=[{"image_url": {"url": data_url}}],
                    content="Here is your ad",
                )
            )
        ]
    )
    completions = _FakeChatCompletions(response)
    monkeypatch.setattr(
        nano_banana_provider,
        "_get_client",
        lambda: SimpleNamespace(chat=SimpleNamespace(completions=completions)),
    )

    image = image_generation.generate_ad_image(
        "Summer Sale ad", "4:5", negative_prompt="blurry, low quality", model="gemini"
    )

    assert image.image_bytes == b"webp"
    assert image.content_type == "image/webp"
    assert image.provider == "openrouter"
    request = completions.requests[0]
    assert request["extra_body"] == {"image_config": {"aspect_ratio": "4:5"}}
    assert request["messages"][0]["content"][0]["text"].endswith(
        "Do not include: blurry, low quality"
    )


def test_provider_errors_are_wrapped(monkeypatch):
    def _fail(**kwargs):
        raise RuntimeError("content policy violation")

    monkeypatch.setattr(openai_image_provider, "generate_image", _fail)

    with pytest.raises(ProviderError, match="content policy violation"):
        image_generation.generate_ad_image("Summer Sale ad", "1:1")


def test_unsupported_ratio_falls_back_to_square():
    assert nano_banana_provider.normalize_aspect_ratio("2:1") == "1:1"
    assert openai_image_provider.size_for_aspect_ratio("2:1") == "1024x1024"
