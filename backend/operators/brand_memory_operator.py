"""
Brand Memory Operator - versioned, append-only brand identity per organization.

Every update inserts a new version and deactivates all earlier ones inside a
single transaction:
1. Lock the org's existing rows (SELECT ... FOR UPDATE)
2. Compute next version = max(version) + 1
3. Deactivate every row for the org
4. Insert the merged snapshot as the active row

Unique indexes on (org_id, version) and on active rows per org turn a racing
update into an IntegrityError, which is retried with a fresh version number.
"""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from sqlalchemy import func as sa_func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session as DBSession

from database.models import BrandKit, BrandMemory, Organization
from operators.errors import (
    BrandKitNotFoundError,
    BrandMemoryConflictError,
    BrandMemoryError,
)
from utils.request_cache import RequestCache, cached


logger = logging.getLogger(__name__)

BRAND_MEMORY_UPDATE_RETRIES = 3

# Field -> factory for the value used when neither the update nor a previous
# version provides one.
BRAND_MEMORY_FIELD_DEFAULTS: dict[str, Any] = {
    "brand_name": lambda: None,
    "tagline": lambda: None,
    "logo_url": lambda: None,
    "primary_colors": list,
    "secondary_colors": list,
    "fonts": dict,
    "style_tokens": dict,
    "layout_style": lambda: "modern",
    "logo_placement": lambda: "bottom-right",
    "text_safe_zones": dict,
    "voice_rules": dict,
    "do_list": list,
    "dont_list": list,
    "compliance_rules": list,
    "performance_data": dict,
    "fatigued_styles": list,
}

BRAND_MEMORY_FIELDS = tuple(BRAND_MEMORY_FIELD_DEFAULTS)


def ensure_organization(db: DBSession, org_id: UUID, name: str | None = None) -> Organization:
    org = db.query(Organization).filter(Organization.org_id == org_id).first()
    if org:
        return org
    org = Organization(org_id=org_id, name=name or f"Organization {org_id}")
    db.add(org)
    db.commit()
    db.refresh(org)
    return org


# =============================================================================
# READ OPERATIONS
# =============================================================================


def get_active_brand_memory(
    db: DBSession,
    org_id: UUID,
    cache: RequestCache | None = None,
) -> BrandMemory | None:
    return cached(
        cache,
        ("brand_memory_active", org_id),
        lambda: (
            db.query(BrandMemory)
            .filter(BrandMemory.org_id == org_id, BrandMemory.is_active.is_(True))
            .order_by(BrandMemory.version.desc())
            .first()
        ),
    )


def get_brand_memory_version(
    db: DBSession,
    org_id: UUID,
    version: int,
    cache: RequestCache | None = None,
) -> BrandMemory | None:
    return cached(
        cache,
        ("brand_memory_version", org_id, version),
        lambda: (
            db.query(BrandMemory)
            .filter(BrandMemory.org_id == org_id, BrandMemory.version == version)
            .first()
        ),
    )


def list_brand_memory_versions(db: DBSession, org_id: UUID) -> list[BrandMemory]:
    return (
        db.query(BrandMemory)
        .filter(BrandMemory.org_id == org_id)
        .order_by(BrandMemory.version.desc())
        .all()
    )


# =============================================================================
# WRITE OPERATIONS
# =============================================================================


def create_brand_memory(
    db: DBSession,
    org_id: UUID,
    fields: dict[str, Any],
    created_by: str | None = None,
    cache: RequestCache | None = None,
) -> BrandMemory:
    """Create version 1 for an org that has no brand memory yet."""
    existing = (
        db.query(BrandMemory.brand_memory_id)
        .filter(BrandMemory.org_id == org_id)
        .first()
    )
    if existing:
        raise BrandMemoryError(
            "Brand memory already exists for this organization; update it instead"
        )

    ensure_organization(db, org_id)
    values = _merge_fields(fields, None)
    now = datetime.now(timezone.utc)
    memory = BrandMemory(
        org_id=org_id,
        version=1,
        is_active=True,
        created_by=created_by,
        created_at=now,
        updated_at=now,
        **values,
    )
    db.add(memory)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise BrandMemoryError(
            "Brand memory already exists for this organization; update it instead"
        )
    db.refresh(memory)
    _invalidate(cache, org_id)
    logger.info("Created brand memory v1 for org %s", org_id)
    return memory


def update_brand_memory(
    db: DBSession,
    org_id: UUID,
    updates: dict[str, Any],
    created_by: str | None = None,
    cache: RequestCache | None = None,
) -> BrandMemory:
    """
    Create a new brand memory version from the active one plus ``updates``.

    Existing versions are never modified apart from their ``is_active`` flag,
    so packs generated against an older version stay reproducible.

    Raises:
        BrandMemoryConflictError: If concurrent updates keep taking the next
            version number.
    """
    unknown = set(updates) - set(BRAND_MEMORY_FIELDS)
    if unknown:
        raise BrandMemoryError(f"Unknown brand memory fields: {', '.join(sorted(unknown))}")

    ensure_organization(db, org_id)

    for attempt in range(1, BRAND_MEMORY_UPDATE_RETRIES + 1):
        try:
            memory = _insert_next_version(db, org_id, updates, created_by)
        except IntegrityError:
            db.rollback()
            logger.warning(
                "Brand memory version collision for org %s (attempt %s/%s)",
                org_id,
                attempt,
                BRAND_MEMORY_UPDATE_RETRIES,
            )
            continue
        _invalidate(cache, org_id)
        logger.info("Created brand memory v%s for org %s", memory.version, org_id)
        return memory

    raise BrandMemoryConflictError(org_id=org_id, attempts=BRAND_MEMORY_UPDATE_RETRIES)


def _insert_next_version(
    db: DBSession,
    org_id: UUID,
    updates: dict[str, Any],
    created_by: str | None,
) -> BrandMemory:
    # Lock the org's rows for the rest of the transaction
    rows = (
        db.query(BrandMemory)
        .filter(BrandMemory.org_id == org_id)
        .with_for_update()
        .all()
    )
    current = next((row for row in rows if row.is_active), None)
    max_version = (
        db.query(sa_func.max(BrandMemory.version))
        .filter(BrandMemory.org_id == org_id)
        .scalar()
    )
    new_version = (max_version or 0) + 1

    db.execute(
        update(BrandMemory)
        .where(BrandMemory.org_id == org_id)
        .values(is_active=False)
        .execution_options(synchronize_session="fetch")
    )

    now = datetime.now(timezone.utc)
    memory = BrandMemory(
        org_id=org_id,
        version=new_version,
        is_active=True,
        created_by=created_by,
        created_at=now,
        updated_at=now,
        **_merge_fields(updates, current),
    )
    db.add(memory)
    db.commit()
    db.refresh(memory)
    return memory


def _merge_fields(updates: dict[str, Any], current: BrandMemory | None) -> dict[str, Any]:
    merged: dict[str, Any] = {}
    for field, default_factory in BRAND_MEMORY_FIELD_DEFAULTS.items():
        value = updates.get(field)
        if value is None and current is not None:
            value = getattr(current, field)
        if value is None:
            value = default_factory()
        if isinstance(value, (list, dict)):
            # Fresh containers so versions never share mutable JSON state
            value = _copy_json(value)
        merged[field] = value
    return merged


def _copy_json(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _copy_json(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_copy_json(v) for v in value]
    return value


def _invalidate(cache: RequestCache | None, org_id: UUID) -> None:
    if cache is None:
        return
    cache.invalidate(("brand_memory_active", org_id))


# =============================================================================
# BRAND KITS
# =============================================================================


def create_brand_kit(
    db: DBSession,
    org_id: UUID,
    name: str,
    business_name: str | None = None,
    description: str | None = None,
    logo_url: str | None = None,
    colors: list[dict[str, Any]] | None = None,
    fonts: dict[str, Any] | None = None,
    strategy: dict[str, Any] | None = None,
) -> BrandKit:
    ensure_organization(db, org_id)
    now = datetime.now(timezone.utc)
    kit = BrandKit(
        org_id=org_id,
        name=name,
        business_name=business_name,
        description=description,
        logo_url=logo_url,
        colors=colors or [],
        fonts=fonts or {},
        strategy=strategy or {},
        created_at=now,
        updated_at=now,
    )
    db.add(kit)
    db.commit()
    db.refresh(kit)
    return kit


def get_brand_kit(db: DBSession, org_id: UUID, brand_kit_id: UUID) -> BrandKit | None:
    return (
        db.query(BrandKit)
        .filter(BrandKit.org_id == org_id, BrandKit.brand_kit_id == brand_kit_id)
        .first()
    )


def list_brand_kits(db: DBSession, org_id: UUID) -> list[BrandKit]:
    return (
        db.query(BrandKit)
        .filter(BrandKit.org_id == org_id)
        .order_by(BrandKit.created_at.desc())
        .all()
    )


def init_brand_memory_from_kit(
    db: DBSession,
    org_id: UUID,
    brand_kit_id: UUID,
    created_by: str | None = None,
    cache: RequestCache | None = None,
) -> BrandMemory:
    """Create or re-version the org's brand memory from a brand kit."""
    kit = get_brand_kit(db, org_id, brand_kit_id)
    if not kit:
        raise BrandKitNotFoundError(brand_kit_id=brand_kit_id)

    colors = [c for c in (kit.colors or []) if isinstance(c, dict)]
    strategy = kit.strategy or {}
    fields: dict[str, Any] = {
        "brand_name": kit.business_name or kit.name,
        "logo_url": kit.logo_url,
        "primary_colors": [c for c in colors if c.get("type") == "primary"],
        "secondary_colors": [c for c in colors if c.get("type") != "primary"],
        "fonts": kit.fonts or {},
        "style_tokens": {
            "vibe": strategy.get("brand_voice"),
            "mood": strategy.get("target_audience"),
        },
        "voice_rules": {"tone": strategy.get("brand_voice")},
    }

    if get_active_brand_memory(db, org_id) is not None:
        return update_brand_memory(db, org_id, fields, created_by=created_by, cache=cache)

    fields.update(
        {
            "tagline": kit.description,
            "layout_style": "modern",
            "logo_placement": "bottom-right",
            "text_safe_zones": {},
            "do_list": [],
            "dont_list": [],
            "compliance_rules": [],
            "performance_data": {},
            "fatigued_styles": [],
        }
    )
    return create_brand_memory(db, org_id, fields, created_by=created_by, cache=cache)


def brand_memory_to_dict(memory: BrandMemory) -> dict[str, Any]:
    data: dict[str, Any] = {
        "brand_memory_id": str(memory.brand_memory_id),
        "org_id": str(memory.org_id),
        "version": memory.version,
        "is_active": memory.is_active,
        "created_by": memory.created_by,
        "created_at": memory.created_at.isoformat() if memory.created_at else None,
        "updated_at": memory.updated_at.isoformat() if memory.updated_at else None,
    }
    for field in BRAND_MEMORY_FIELDS:
        data[field] = getattr(memory, field)
    return data


def brand_kit_to_dict(kit: BrandKit) -> dict[str, Any]:
    return {
        "brand_kit_id": str(kit.brand_kit_id),
        "org_id": str(kit.org_id),
        "name": kit.name,
        "business_name": kit.business_name,
        "description": kit.description,
        "logo_url": kit.logo_url,
        "colors": kit.colors or [],
        "fonts": kit.fonts or {},
        "strategy": kit.strategy or {},
        "created_at": kit.created_at.isoformat() if kit.created_at else None,
        "updated_at": kit.updated_at.isoformat() if kit.updated_at else None,
    }
