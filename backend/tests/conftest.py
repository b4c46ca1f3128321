import os

# No log file and no real provider keys while testing
os.environ["CREATIVE_STUDIO_LOG_FILE"] = ""
os.environ.setdefault("OPENAI_API_KEY", "test-key")

from uuid import uuid4

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database.base import Base
import database.models  # noqa: F401
from models.creative_models import (
    ComplianceRisk,
    ConfirmedCopy,
    QualityCheckResult,
    QualityScores,
)
from operators import pack_operator
from operators.brand_memory_operator import create_brand_memory, ensure_organization
from operators.brief_operator import confirm_copy, create_brief, propose_copy


SUMMER_COPY = ConfirmedCopy(
    headline="Summer Sale",
    primary_text="Everything 30% off this weekend only.",
    cta_text="Shop Now",
)

BRAND_FIELDS = {
    "brand_name": "Acme Outdoors",
    "tagline": "Built for the trail",
    "primary_colors": [{"name": "Forest", "hex": "#1B4D3E"}],
    "secondary_colors": [{"name": "Sand", "hex": "#E8D8B0"}],
    "style_tokens": {"vibe": "rugged", "mood": "adventurous"},
    "layout_style": "bold",
    "logo_url": "https://cdn.example.com/acme/logo.png",
    "logo_placement": "top-left",
    "dont_list": ["neon colors", "stock photo smiles"],
    "fatigued_styles": ["flat illustration"],
    "voice_rules": {"tone": "confident"},
}


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def org_id(db_session):
    org_id = uuid4()
    ensure_organization(db_session, org_id, name="Acme")
    return org_id


@pytest.fixture
def brand_memory(db_session, org_id):
    return create_brand_memory(db_session, org_id, dict(BRAND_FIELDS))


@pytest.fixture
def confirmed_brief(db_session, org_id, brand_memory):
    brief = create_brief(
        db_session,
        org_id,
        name="Summer campaign",
        objective="conversion",
        brand_memory_id=brand_memory.brand_memory_id,
    )
    propose_copy(db_session, brief.brief_id, SUMMER_COPY)
    return confirm_copy(db_session, brief.brief_id)


def make_quality(
    brand_alignment: float = 8,
    readability: float = 7,
    platform_fit: float = 9,
    risk: ComplianceRisk = ComplianceRisk.LOW,
    passes: bool = True,
) -> QualityCheckResult:
    return QualityCheckResult(
        scores=QualityScores(
            brand_alignment=brand_alignment,
            readability=readability,
            platform_fit=platform_fit,
            compliance_risk=risk,
        ),
        issues=[] if passes else ["Headline is hard to read"],
        passes_quality=passes,
    )


class FakeRenderer:
    """Stands in for pack_operator.render_asset and records every call."""

    def __init__(
        self,
        fail_on: set[tuple[str, str]] | None = None,
        quality: QualityCheckResult | None = None,
    ):
        self.fail_on = fail_on or set()
        self.quality = quality or make_quality()
        self.calls: list[tuple[str, str]] = []
        self.snapshots: list[dict] = []

    def __call__(self, spec, org_id, pack_id, image_model, brand_snapshot, copy):
        cell = (spec.direction.value, spec.aspect_ratio.value)
        self.calls.append(cell)
        self.snapshots.append(brand_snapshot)
        if cell in self.fail_on:
            raise RuntimeError(f"Image provider timed out for {cell[0]}/{cell[1]}")
        return pack_operator.RenderedAsset(
            image_url=(
                f"https://cdn.example.com/{pack_id}/"
                f"{spec.direction.value}-{spec.aspect_ratio.value.replace(':', 'x')}.png"
            ),
            quality=self.quality,
            provider="openai",
            model="dall-e-3",
        )


@pytest.fixture
def fake_renderer(monkeypatch):
    renderer = FakeRenderer()
    monkeypatch.setattr(pack_operator, "render_asset", renderer)
    return renderer


@pytest.fixture
def client(engine):
    from fastapi.testclient import TestClient

    from database.base import get_db
    from main import app

    TestingSession = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    def _override_get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
