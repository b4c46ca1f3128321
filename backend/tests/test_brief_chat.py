import json
from types import SimpleNamespace

import pytest

from agent.creative_studio import brief_chat
from models.creative_models import ConfirmedCopy, VariationType

from conftest import BRAND_FIELDS, SUMMER_COPY


class _FakeCompletions:
    def __init__(self, content, usage=None, error=None):
        self.content = content
        self.usage = usage
        self.error = error
        self.requests = []

    def create(self, **kwargs):
        self.requests.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(
            choices=[SimpleNamespace(message=message)],
            usage=self.usage,
        )


def _patch_client(monkeypatch, completions):
    client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    monkeypatch.setattr(brief_chat, "_get_client", lambda api_key=None: client)
    return completions


BRIEF = {
    "name": "Summer campaign",
    "objective": "conversion",
    "target_audience": "weekend hikers",
    "product_service": None,
    "key_message": None,
}


class TestParseChatReply:
    def test_structured_json_with_copy(self):
        content = json.dumps(
            {
                "message": "Here's a first draft.",
                "proposed_copy": {
                    "headline": "Summer Sale",
                    "primary_text": " Everything 30% off this weekend only. ",
                    "cta_text": "Shop Now",
                },
            }
        )

        payload = brief_chat.parse_chat_reply(content)

        assert payload.message == "Here's a first draft."
        assert payload.proposed_copy == SUMMER_COPY

    def test_incomplete_copy_is_dropped(self):
        content = json.dumps(
            {
                "message": "Almost there.",
                "proposed_copy": {"headline": "Summer Sale", "primary_text": "", "cta_text": "Go"},
            }
        )

        payload = brief_chat.parse_chat_reply(content)

        assert payload.message == "Almost there."
        assert payload.proposed_copy is None

    def test_free_text_with_proposal_block(self):
        content = (
            "Great, here is my proposal:\n"
            "---COPY_PROPOSAL---\n"
            "HEADLINE: Summer Sale\n"
            "PRIMARY_TEXT: Everything 30% off this weekend only.\n"
            "CTA: Shop Now\n"
            "---END_PROPOSAL---\n"
            "Would you like to confirm?"
        )

        payload = brief_chat.parse_chat_reply(content)

        assert payload.message == content
        assert payload.proposed_copy == SUMMER_COPY

    def test_free_text_without_proposal(self):
        payload = brief_chat.parse_chat_reply("Who is your target audience?")

        assert payload.proposed_copy is None

    def test_proposal_missing_cta(self):
        content = (
            "---COPY_PROPOSAL---\n"
            "HEADLINE: Summer Sale\n"
            "PRIMARY_TEXT: Everything 30% off.\n"
            "---END_PROPOSAL---"
        )

        assert brief_chat.parse_copy_proposal(content) is None


class TestGenerateBriefChatResponse:
    def test_reply_with_copy_should_confirm(self, monkeypatch):
        content = json.dumps(
            {
                "message": "How does this look?",
                "proposed_copy": SUMMER_COPY.model_dump(),
            }
        )
        completions = _patch_client(
            monkeypatch,
            _FakeCompletions(
                content, usage=SimpleNamespace(prompt_tokens=120, completion_tokens=45)
            ),
        )
        history = [
            {"role": "assistant", "content": "Hi!"},
            {"role": "system", "content": "dropped"},
            {"role": "user", "content": "Hiking boots"},
        ]

        reply = brief_chat.generate_brief_chat_response(
            history, "Write the copy", BRAND_FIELDS, BRIEF
        )

        assert reply.proposed_copy == SUMMER_COPY
        assert reply.should_confirm is True
        assert (reply.input_tokens, reply.output_tokens) == (120, 45)

        request = completions.requests[0]
        assert [m["role"] for m in request["messages"]] == [
            "system",
            "assistant",
            "user",
            "user",
        ]
        assert request["messages"][-1]["content"] == "Write the copy"
        assert "Acme Outdoors" in request["messages"][0]["content"]
        assert "weekend hikers" in request["messages"][0]["content"]
        assert request["response_format"] == {"type": "json_object"}

    def test_free_text_reply_keeps_delimited_proposal(self, monkeypatch):
        content = (
            "Here is a first draft.\n"
            "---COPY_PROPOSAL---\n"
            "HEADLINE: Summer Sale\n"
            "PRIMARY_TEXT: Everything 30% off this weekend only.\n"
            "CTA: Shop Now\n"
            "---END_PROPOSAL---"
        )
        _patch_client(monkeypatch, _FakeCompletions(content))

        reply = brief_chat.generate_brief_chat_response([], "Write the copy", BRAND_FIELDS, BRIEF)

        assert reply.message == content
        assert reply.proposed_copy == SUMMER_COPY
        assert reply.should_confirm is True

    def test_question_without_copy(self, monkeypatch):
        _patch_client(
            monkeypatch,
            _FakeCompletions(json.dumps({"message": "What is the main offer?"})),
        )

        reply = brief_chat.generate_brief_chat_response([], "Hello", None, BRIEF)

        assert reply.proposed_copy is None
        assert reply.should_confirm is False
        assert reply.input_tokens == 0

    def test_provider_errors_propagate(self, monkeypatch):
        _patch_client(monkeypatch, _FakeCompletions("", error=RuntimeError("rate limited")))

        with pytest.raises(RuntimeError):
            brief_chat.generate_brief_chat_response([], "Hello", None, BRIEF)


class TestSystemPrompt:
    def test_brand_context_only_with_brand(self):
        with_brand = brief_chat.build_system_prompt(BRAND_FIELDS, BRIEF)
        without_brand = brief_chat.build_system_prompt(None, BRIEF)

        assert "Acme Outdoors" in with_brand
        assert "confident" in with_brand
        assert "neon colors" in with_brand
        assert "Acme Outdoors" not in without_brand
        assert "Summer campaign" in without_brand


class TestGreeting:
    def test_greeting_names_brand(self):
        assert "Acme Outdoors" in brief_chat.generate_greeting(BRAND_FIELDS)

    def test_greeting_without_brand(self):
        greeting = brief_chat.generate_greeting(None)

        assert greeting.startswith("Hi! I'm here to help you create compelling ad copy.")


class TestCopyVariations:
    VARIATIONS = (
        "VARIATION 1:\n"
        "HEADLINE: Summer, Elevated\n"
        "PRIMARY_TEXT: Premium gear, 30% off.\n"
        "CTA: Discover More\n"
        "\n"
        "VARIATION 2:\n"
        "HEADLINE: The Summer Edit\n"
        "PRIMARY_TEXT: Curated essentials for the trail.\n"
        "CTA: Explore\n"
        "\n"
        "VARIATION 3:\n"
        "HEADLINE: Crafted for Summer\n"
        "PRIMARY_TEXT: Quality that lasts every season.\n"
        "CTA: Shop the Edit\n"
        "\n"
        "VARIATION 4:\n"
        "HEADLINE: One too many\n"
        "PRIMARY_TEXT: Should be dropped.\n"
        "CTA: Ignore\n"
    )

    def test_parse_caps_at_three(self):
        variations = brief_chat.parse_copy_variations(self.VARIATIONS)

        assert len(variations) == 3
        assert variations[0] == ConfirmedCopy(
            headline="Summer, Elevated",
            primary_text="Premium gear, 30% off.",
            cta_text="Discover More",
        )
        assert variations[2].cta_text == "Shop the Edit"

    def test_generate_variations(self, monkeypatch):
        completions = _patch_client(monkeypatch, _FakeCompletions(self.VARIATIONS))

        variations = brief_chat.generate_copy_variations(
            SUMMER_COPY, BRAND_FIELDS, VariationType.MORE_PREMIUM
        )

        assert len(variations) == 3
        prompt = completions.requests[0]["messages"][0]["content"]
        assert "more premium" in prompt
        assert "Summer Sale" in prompt
        assert completions.requests[0]["temperature"] == 0.8
