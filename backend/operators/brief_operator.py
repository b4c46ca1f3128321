"""
Brief Operator - state machine over a single creative brief.

    intake -> copy_pending -> copy_confirmed -> generating -> completed | failed

Confirming copy is the hard gate for generation: it requires headline,
primary text and CTA, and after it the copy can no longer change.
Mutations that touch the copy read the brief row FOR UPDATE so a confirm and
an update racing on the same brief serialize.
"""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy.orm import Session as DBSession

from database.models import CreativeBrief
from models.creative_models import (
    BriefStatus,
    ConfirmedCopy,
    CopyUpdate,
    GenerationGate,
)
from operators.brand_memory_operator import ensure_organization
from operators.errors import BriefNotFoundError, BriefValidationError, CopyLockedError
from utils.request_cache import RequestCache, cached


logger = logging.getLogger(__name__)

COPY_FIELD_LABELS = {
    "headline": "headline",
    "primary_text": "primary text",
    "cta_text": "CTA",
}


def create_brief(
    db: DBSession,
    org_id: UUID,
    name: str,
    objective: str | None = None,
    target_audience: str | None = None,
    product_service: str | None = None,
    key_message: str | None = None,
    brand_memory_id: UUID | None = None,
    campaign_id: UUID | None = None,
    created_by: str | None = None,
) -> CreativeBrief:
    if not name or not name.strip():
        raise BriefValidationError("Brief name is required")

    ensure_organization(db, org_id)
    now = datetime.now(timezone.utc)
    brief = CreativeBrief(
        org_id=org_id,
        name=name.strip(),
        objective=objective,
        target_audience=target_audience,
        product_service=product_service,
        key_message=key_message,
        brand_memory_id=brand_memory_id,
        campaign_id=campaign_id,
        created_by=created_by,
        status=BriefStatus.INTAKE.value,
        chat_history=[],
        copy_confirmed=False,
        reference_images=[],
        created_at=now,
        updated_at=now,
    )
    db.add(brief)
    db.commit()
    db.refresh(brief)
    logger.info("Created brief %s for org %s", brief.brief_id, org_id)
    return brief


def get_brief(
    db: DBSession,
    brief_id: UUID,
    org_id: UUID | None = None,
    cache: RequestCache | None = None,
) -> CreativeBrief | None:
    def _load() -> CreativeBrief | None:
        query = db.query(CreativeBrief).filter(CreativeBrief.brief_id == brief_id)
        if org_id is not None:
            query = query.filter(CreativeBrief.org_id == org_id)
        return query.first()

    return cached(cache, ("brief", brief_id, org_id), _load)


def list_briefs(db: DBSession, org_id: UUID) -> list[CreativeBrief]:
    return (
        db.query(CreativeBrief)
        .filter(CreativeBrief.org_id == org_id)
        .order_by(CreativeBrief.created_at.desc())
        .all()
    )


def _get_brief_for_update(db: DBSession, brief_id: UUID) -> CreativeBrief:
    brief = (
        db.query(CreativeBrief)
        .filter(CreativeBrief.brief_id == brief_id)
        .with_for_update()
        .first()
    )
    if not brief:
        raise BriefNotFoundError(brief_id=brief_id)
    return brief


def add_chat_message(
    db: DBSession,
    brief_id: UUID,
    role: str,
    content: str,
    metadata: dict[str, Any] | None = None,
) -> CreativeBrief:
    """Append a message to the chat history.

    While copy is unconfirmed the brief goes back to intake; a confirmed
    brief keeps its status.
    """
    if role not in ("user", "assistant"):
        raise BriefValidationError(f"Invalid chat role: {role}")

    brief = _get_brief_for_update(db, brief_id)
    now = datetime.now(timezone.utc)
    message: dict[str, Any] = {
        "id": str(uuid4()),
        "role": role,
        "content": content,
        "timestamp": now.isoformat(),
    }
    if metadata:
        message["metadata"] = metadata

    # Reassign so the JSON column is flagged dirty
    brief.chat_history = [*(brief.chat_history or []), message]
    if not brief.copy_confirmed:
        brief.status = BriefStatus.INTAKE.value
    brief.updated_at = now
    db.commit()
    db.refresh(brief)
    return brief


def propose_copy(db: DBSession, brief_id: UUID, copy: ConfirmedCopy) -> CreativeBrief:
    brief = _get_brief_for_update(db, brief_id)
    if brief.copy_confirmed:
        db.rollback()
        raise CopyLockedError()

    brief.headline = copy.headline
    brief.primary_text = copy.primary_text
    brief.cta_text = copy.cta_text
    brief.status = BriefStatus.COPY_PENDING.value
    brief.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(brief)
    return brief


def missing_copy_fields(brief: CreativeBrief) -> list[str]:
    return [
        label
        for field, label in COPY_FIELD_LABELS.items()
        if not (getattr(brief, field) or "").strip()
    ]


def confirm_copy(db: DBSession, brief_id: UUID) -> CreativeBrief:
    """Lock the copy. Idempotent for an already-confirmed brief."""
    brief = _get_brief_for_update(db, brief_id)
    if brief.copy_confirmed:
        db.rollback()
        return brief

    missing = missing_copy_fields(brief)
    if missing:
        db.rollback()
        raise BriefValidationError(
            f"Cannot confirm: {', '.join(missing)} {'is' if len(missing) == 1 else 'are'} required"
        )

    now = datetime.now(timezone.utc)
    brief.copy_confirmed = True
    brief.copy_confirmed_at = now
    brief.status = BriefStatus.COPY_CONFIRMED.value
    brief.updated_at = now
    db.commit()
    db.refresh(brief)
    logger.info("Copy confirmed for brief %s", brief_id)
    return brief


def update_copy(db: DBSession, brief_id: UUID, updates: CopyUpdate) -> CreativeBrief:
    brief = _get_brief_for_update(db, brief_id)
    if brief.copy_confirmed:
        db.rollback()
        raise CopyLockedError()

    for field, value in updates.model_dump(exclude_none=True).items():
        setattr(brief, field, value)
    brief.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(brief)
    return brief


def update_style_direction(
    db: DBSession, brief_id: UUID, style_direction: str | None
) -> CreativeBrief:
    brief = _get_brief_for_update(db, brief_id)
    brief.style_direction = style_direction
    brief.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(brief)
    return brief


def update_brief_status(db: DBSession, brief_id: UUID, status: BriefStatus) -> CreativeBrief:
    brief = _get_brief_for_update(db, brief_id)
    brief.status = BriefStatus(status).value
    brief.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(brief)
    return brief


def can_generate_creatives(brief: CreativeBrief) -> GenerationGate:
    if not brief.copy_confirmed:
        return GenerationGate(
            can_generate=False,
            reason="Copy must be confirmed before generating creatives",
        )
    if not brief.headline:
        return GenerationGate(can_generate=False, reason="Headline is required")
    if not brief.primary_text:
        return GenerationGate(can_generate=False, reason="Primary text is required")
    if not brief.cta_text:
        return GenerationGate(can_generate=False, reason="CTA text is required")
    if brief.status == BriefStatus.GENERATING.value:
        return GenerationGate(can_generate=False, reason="Generation already in progress")
    return GenerationGate(can_generate=True)


def get_confirmed_copy(brief: CreativeBrief) -> ConfirmedCopy | None:
    if not brief.copy_confirmed:
        return None
    if not (brief.headline and brief.primary_text and brief.cta_text):
        return None
    return ConfirmedCopy(
        headline=brief.headline,
        primary_text=brief.primary_text,
        cta_text=brief.cta_text,
    )


def brief_to_dict(brief: CreativeBrief) -> dict[str, Any]:
    return {
        "brief_id": str(brief.brief_id),
        "org_id": str(brief.org_id),
        "brand_memory_id": str(brief.brand_memory_id) if brief.brand_memory_id else None,
        "campaign_id": str(brief.campaign_id) if brief.campaign_id else None,
        "name": brief.name,
        "objective": brief.objective,
        "target_audience": brief.target_audience,
        "product_service": brief.product_service,
        "key_message": brief.key_message,
        "status": brief.status,
        "chat_history": brief.chat_history or [],
        "headline": brief.headline,
        "primary_text": brief.primary_text,
        "cta_text": brief.cta_text,
        "copy_confirmed": brief.copy_confirmed,
        "copy_confirmed_at": (
            brief.copy_confirmed_at.isoformat() if brief.copy_confirmed_at else None
        ),
        "style_direction": brief.style_direction,
        "reference_images": brief.reference_images or [],
        "created_by": brief.created_by,
        "created_at": brief.created_at.isoformat() if brief.created_at else None,
        "updated_at": brief.updated_at.isoformat() if brief.updated_at else None,
    }
