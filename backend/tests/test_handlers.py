from uuid import uuid4

import pytest

from operators import pack_jobs
from operators import pack_operator

from conftest import BRAND_FIELDS, FakeRenderer


@pytest.fixture
def headers():
    return {"X-Org-Id": str(uuid4())}


def _create_brief(client, headers, name="Summer campaign"):
    response = client.post(
        "/creative-studio/briefs",
        json={"name": name, "objective": "conversion"},
        headers=headers,
    )
    assert response.status_code == 200
    return response.json()["brief"]


def _confirm(client, headers, brief_id):
    response = client.put(
        f"/creative-studio/briefs/{brief_id}",
        json={
            "action": "update_copy",
            "copy": {
                "headline": "Summer Sale",
                "primary_text": "Everything 30% off this weekend only.",
                "cta_text": "Shop Now",
            },
        },
        headers=headers,
    )
    assert response.status_code == 200
    response = client.put(
        f"/creative-studio/briefs/{brief_id}",
        json={"action": "confirm_copy"},
        headers=headers,
    )
    assert response.status_code == 200
    return response.json()["brief"]


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"ok": True, "status": "healthy"}


def test_org_header_is_required(client):
    response = client.get("/creative-studio/briefs")

    assert response.status_code == 422


class TestBrandMemoryEndpoints:
    def test_create_update_and_read_versions(self, client, headers):
        response = client.get("/brand-memory", headers=headers)
        assert response.json() == {"ok": True, "brand_memory": None}

        response = client.post("/brand-memory", json=BRAND_FIELDS, headers=headers)
        assert response.status_code == 200
        assert response.json()["brand_memory"]["version"] == 1

        response = client.put(
            "/brand-memory", json={"layout_style": "minimal"}, headers=headers
        )
        assert response.status_code == 200
        memory = response.json()["brand_memory"]
        assert memory["version"] == 2
        assert memory["layout_style"] == "minimal"
        assert memory["brand_name"] == "Acme Outdoors"

        versions = client.get("/brand-memory/versions", headers=headers).json()["versions"]
        assert [v["version"] for v in versions] == [2, 1]

        first = client.get("/brand-memory/versions/1", headers=headers).json()["brand_memory"]
        assert first["layout_style"] == "bold"
        assert first["is_active"] is False

    def test_second_create_is_a_validation_error(self, client, headers):
        client.post("/brand-memory", json={"brand_name": "Acme"}, headers=headers)

        response = client.post("/brand-memory", json={"brand_name": "Acme"}, headers=headers)

        assert response.status_code == 400
        assert response.json()["detail"]["kind"] == "validation"

    def test_missing_version(self, client, headers):
        response = client.get("/brand-memory/versions/7", headers=headers)

        assert response.status_code == 404
        assert response.json()["detail"]["kind"] == "not_found"

    def test_sync_from_brand_kit(self, client, headers):
        kit = client.post(
            "/brand-kits",
            json={
                "name": "Acme kit",
                "business_name": "Acme Outdoors",
                "colors": [{"name": "Forest", "hex": "#1B4D3E", "type": "primary"}],
            },
            headers=headers,
        ).json()["brand_kit"]

        response = client.post(
            "/brand-memory/sync",
            json={"brand_kit_id": kit["brand_kit_id"]},
            headers=headers,
        )

        assert response.status_code == 200
        memory = response.json()["brand_memory"]
        assert memory["brand_name"] == "Acme Outdoors"
        assert memory["primary_colors"][0]["hex"] == "#1B4D3E"
        kits = client.get("/brand-kits", headers=headers).json()["brand_kits"]
        assert [k["brand_kit_id"] for k in kits] == [kit["brand_kit_id"]]

    def test_sync_with_unknown_kit(self, client, headers):
        response = client.post(
            "/brand-memory/sync",
            json={"brand_kit_id": str(uuid4())},
            headers=headers,
        )

        assert response.status_code == 404
        assert response.json()["detail"] == {"error": "Brand kit not found", "kind": "not_found"}


class TestBriefEndpoints:
    def test_create_confirm_flow(self, client, headers):
        brief = _create_brief(client, headers)
        assert brief["status"] == "intake"

        confirmed = _confirm(client, headers, brief["brief_id"])

        assert confirmed["copy_confirmed"] is True
        assert confirmed["copy_confirmed_at"] is not None
        assert confirmed["status"] == "copy_confirmed"

        listed = client.get("/creative-studio/briefs", headers=headers).json()["briefs"]
        assert [b["brief_id"] for b in listed] == [brief["brief_id"]]

    def test_confirm_with_missing_copy(self, client, headers):
        brief = _create_brief(client, headers)
        client.put(
            f"/creative-studio/briefs/{brief['brief_id']}",
            json={
                "action": "update_copy",
                "copy": {"headline": "Summer Sale", "primary_text": "", "cta_text": "Shop Now"},
            },
            headers=headers,
        )

        response = client.put(
            f"/creative-studio/briefs/{brief['brief_id']}",
            json={"action": "confirm_copy"},
            headers=headers,
        )

        assert response.status_code == 400
        assert response.json()["detail"] == {
            "error": "Cannot confirm: primary text is required",
            "kind": "validation",
        }

    def test_update_copy_after_confirm(self, client, headers):
        brief = _create_brief(client, headers)
        _confirm(client, headers, brief["brief_id"])

        response = client.put(
            f"/creative-studio/briefs/{brief['brief_id']}",
            json={"action": "update_copy", "copy": {"cta_text": "Buy"}},
            headers=headers,
        )

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "Cannot update copy after confirmation"

    def test_brief_from_other_org_is_not_found(self, client, headers):
        brief = _create_brief(client, headers)

        response = client.get(
            f"/creative-studio/briefs/{brief['brief_id']}",
            headers={"X-Org-Id": str(uuid4())},
        )

        assert response.status_code == 404
        assert response.json()["detail"] == {"error": "Brief not found", "kind": "not_found"}

    def test_initial_chat_adds_greeting(self, client, headers):
        brief = _create_brief(client, headers)

        response = client.post(
            f"/creative-studio/briefs/{brief['brief_id']}/chat",
            json={"is_initial": True},
            headers=headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"].startswith("Hi!")
        assert [m["role"] for m in body["brief"]["chat_history"]] == ["assistant"]

    def test_chat_turn_proposes_copy(self, client, headers, monkeypatch):
        from agent.creative_studio.brief_chat import BriefChatReply
        from handlers import brief_handler
        from models.creative_models import ConfirmedCopy

        proposal = ConfirmedCopy(
            headline="Summer Sale",
            primary_text="Everything 30% off this weekend only.",
            cta_text="Shop Now",
        )
        monkeypatch.setattr(
            brief_handler,
            "generate_brief_chat_response",
            lambda history, message, brand, brief: BriefChatReply(
                message="How about this?",
                proposed_copy=proposal,
                should_confirm=True,
                model="gpt-4o",
                input_tokens=100,
                output_tokens=20,
            ),
        )
        brief = _create_brief(client, headers)

        response = client.post(
            f"/creative-studio/briefs/{brief['brief_id']}/chat",
            json={"message": "We sell hiking boots"},
            headers=headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["should_confirm"] is True
        assert body["brief"]["status"] == "copy_pending"
        assert body["brief"]["headline"] == "Summer Sale"
        history = body["brief"]["chat_history"]
        assert [m["role"] for m in history] == ["user", "assistant"]
        assert history[1]["metadata"]["proposed_copy"]["cta_text"] == "Shop Now"

        usage = client.get("/usage", headers=headers).json()["events"]
        assert usage[0]["kind"] == "chat"
        assert usage[0]["total_tokens"] == 120

    def test_chat_provider_failure(self, client, headers, monkeypatch):
        from handlers import brief_handler

        def _boom(*args, **kwargs):
            raise RuntimeError("rate limited")

        monkeypatch.setattr(brief_handler, "generate_brief_chat_response", _boom)
        brief = _create_brief(client, headers)

        response = client.post(
            f"/creative-studio/briefs/{brief['brief_id']}/chat",
            json={"message": "Hello"},
            headers=headers,
        )

        assert response.status_code == 502
        assert response.json()["detail"]["kind"] == "provider_failure"

    def test_empty_chat_message(self, client, headers):
        brief = _create_brief(client, headers)

        response = client.post(
            f"/creative-studio/briefs/{brief['brief_id']}/chat",
            json={"message": "  "},
            headers=headers,
        )

        assert response.status_code == 400


class TestPackEndpoints:
    def test_generate_requires_confirmed_copy(self, client, headers):
        client.post("/brand-memory", json=BRAND_FIELDS, headers=headers)
        brief = _create_brief(client, headers)

        response = client.post(
            f"/creative-studio/briefs/{brief['brief_id']}/generate",
            json={},
            headers=headers,
        )

        assert response.status_code == 400
        assert response.json()["detail"] == {
            "error": "Copy must be confirmed before generating creatives",
            "kind": "validation",
        }

    def test_generate_requires_brand_memory(self, client, headers):
        brief = _create_brief(client, headers)
        _confirm(client, headers, brief["brief_id"])

        response = client.post(
            f"/creative-studio/briefs/{brief['brief_id']}/generate",
            json={},
            headers=headers,
        )

        assert response.status_code == 400
        assert response.json()["detail"]["kind"] == "dependency_missing"

    def test_generate_and_regenerate(self, client, headers, monkeypatch):
        monkeypatch.setattr(pack_operator, "render_asset", FakeRenderer())
        client.post("/brand-memory", json=BRAND_FIELDS, headers=headers)
        brief = _create_brief(client, headers)
        _confirm(client, headers, brief["brief_id"])

        response = client.post(
            f"/creative-studio/briefs/{brief['brief_id']}/generate",
            json={"model": "openai"},
            headers=headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert len(body["assets"]) == 9
        pack_id = body["pack"]["pack_id"]

        pack = client.get(f"/creative-studio/packs/{pack_id}", headers=headers).json()["pack"]
        assert pack["status"] == "completed"
        assert len(pack["assets"]) == 9

        packs = client.get(
            f"/creative-studio/briefs/{brief['brief_id']}/packs", headers=headers
        ).json()["packs"]
        assert [p["pack_id"] for p in packs] == [pack_id]

        response = client.post(
            f"/creative-studio/packs/{pack_id}/directions/B/regenerate", headers=headers
        )
        assert response.status_code == 200
        assert [a["direction"] for a in response.json()["assets"]] == ["B", "B", "B"]

        asset_id = response.json()["assets"][0]["asset_id"]
        response = client.post(f"/creative-studio/assets/{asset_id}/regenerate", headers=headers)
        assert response.status_code == 200
        assert response.json()["assets"][0]["generation_attempts"] == 2

    def test_background_generation_enqueues_job(self, client, headers, monkeypatch):
        from handlers import pack_handler

        queued = []

        def _enqueue(brief_id, org_id, model):
            queued.append((str(brief_id), str(org_id), model))
            return "job-123"

        monkeypatch.setattr(pack_handler, "enqueue_pack_generation", _enqueue)
        client.post("/brand-memory", json=BRAND_FIELDS, headers=headers)
        brief = _create_brief(client, headers)
        _confirm(client, headers, brief["brief_id"])

        response = client.post(
            f"/creative-studio/briefs/{brief['brief_id']}/generate",
            json={"background": True, "model": "gemini"},
            headers=headers,
        )

        assert response.status_code == 202
        assert response.json()["job_id"] == "job-123"
        assert queued == [(brief["brief_id"], headers["X-Org-Id"], "gemini")]

    def test_unknown_pack_and_asset(self, client, headers):
        response = client.get(f"/creative-studio/packs/{uuid4()}", headers=headers)
        assert response.status_code == 404

        response = client.post(
            f"/creative-studio/packs/{uuid4()}/directions/A/regenerate", headers=headers
        )
        assert response.status_code == 404
        assert response.json()["detail"] == {"error": "Pack not found", "kind": "not_found"}

        response = client.post(f"/creative-studio/assets/{uuid4()}/regenerate", headers=headers)
        assert response.status_code == 404

    def test_invalid_direction(self, client, headers):
        response = client.post(
            f"/creative-studio/packs/{uuid4()}/directions/D/regenerate", headers=headers
        )

        assert response.status_code == 422


def test_pack_job_runs_generation(monkeypatch):
    captured = {}

    class _Result:
        success = True
        error = None

        def model_dump(self, mode=None):
            return {"success": True, "pack": None, "assets": [], "error": None}

    class _Session:
        closed = False

        def close(self):
            self.closed = True

    session = _Session()

    def _get_db():
        yield session

    def _generate(db, brief_id, org_id, model="openai"):
        captured.update(db=db, brief_id=brief_id, org_id=org_id, model=model)
        return _Result()

    monkeypatch.setattr(pack_jobs, "get_db", _get_db)
    monkeypatch.setattr(pack_jobs, "generate_creative_pack", _generate)
    brief_id, org_id = uuid4(), uuid4()

    result = pack_jobs.run_pack_generation(str(brief_id), str(org_id), "gemini")

    assert result["success"] is True
    assert captured["brief_id"] == brief_id
    assert captured["model"] == "gemini"
    assert session.closed is True
