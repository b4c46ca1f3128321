import base64
import re
from uuid import uuid4

import pytest

from operators import storage_operator
from operators.errors import ProviderError
from utils import gcs_utils


@pytest.fixture
def uploads(monkeypatch):
    calls = []

    def _upload_file(bucket_name, contents, destination_blob_name, content_type=None):
        calls.append(
            {
                "bucket": bucket_name,
                "contents": contents,
                "path": destination_blob_name,
                "content_type": content_type,
            }
        )
        return {"url": gcs_utils.public_url(bucket_name, destination_blob_name)}

    monkeypatch.setattr(storage_operator, "upload_file", _upload_file)
    return calls


def test_build_asset_path():
    org_id, pack_id = uuid4(), uuid4()

    path = storage_operator.build_asset_path(org_id, pack_id, "B", "9:16", "image/jpeg")

    assert re.fullmatch(rf"{org_id}/{pack_id}/B-9x16-\d+\.jpg", path)


def test_upload_bytes_returns_public_url(uploads):
    url = storage_operator.upload_bytes(b"\x89PNG", "org/pack/A-1x1-1.png")

    assert url == (
        f"{gcs_utils.PUBLIC_ASSET_BASE_URL}/"
        f"{storage_operator.GENERATED_IMAGES_BUCKET}/org/pack/A-1x1-1.png"
    )
    assert uploads[0]["content_type"] == "image/png"


def test_upload_bytes_rejects_empty_image(uploads):
    with pytest.raises(ProviderError):
        storage_operator.upload_bytes(b"", "org/pack/A-1x1-1.png")

    assert uploads == []


def test_failed_upload_raises(monkeypatch):
    monkeypatch.setattr(storage_operator, "upload_file", lambda *args, **kwargs: {})

    with pytest.raises(ProviderError, match="Failed to upload"):
        storage_operator.upload_bytes(b"\x89PNG", "org/pack/A-1x1-1.png")


def test_upload_base64_data_url(uploads):
    data = "data:image/webp;base64," + base64.b64encode(b"webp-bytes").decode()

    storage_operator.upload_base64(data, "org/pack/C-4x5-1.webp")

    assert uploads[0]["contents"] == b"webp-bytes"
    assert uploads[0]["content_type"] == "image/webp"


def test_upload_base64_invalid(uploads):
    with pytest.raises(ProviderError):
        storage_operator.upload_base64("not base64!", "org/pack/C-4x5-1.png")


def test_upload_from_url_download_failure(monkeypatch, uploads):
    def _urlopen(url, timeout=None):
        raise OSError("connection refused")

    monkeypatch.setattr(storage_operator.urllib.request, "urlopen", _urlopen)

    with pytest.raises(ProviderError, match="connection refused"):
        storage_operator.upload_from_url("https://images.example.com/a.png", "org/pack/a.png")

    assert uploads == []


def test_delete_ignores_foreign_urls(monkeypatch):
    deleted = []
    monkeypatch.setattr(
        storage_operator, "delete_file", lambda bucket, blob: deleted.append((bucket, blob)) or True
    )
    bucket = storage_operator.GENERATED_IMAGES_BUCKET

    assert storage_operator.delete_generated_image("https://cdn.example.com/a.png") is False
    assert storage_operator.delete_generated_image(None) is False
    assert storage_operator.delete_generated_image(
        gcs_utils.public_url(bucket, "org/pack/A-1x1-1.png")
    ) is True
    assert deleted == [(bucket, "org/pack/A-1x1-1.png")]
