"""
Pack Operator - generates creative packs (3 directions x 3 aspect ratios).

Generation flow for one pack:
1. Gate the brief (confirmed copy, not already generating)
2. Pin the org's active brand memory version on a new pack row
3. Build the 9 prompts and create one asset row per prompt
4. Render each asset (image provider -> storage -> quality check)
5. Write per-asset results, aggregate scores, mark pack and brief completed

Rendering runs in a thread pool sized by PACK_GENERATION_CONCURRENCY. Worker
threads only talk to providers and storage; every database write happens on
the calling thread, in prompt order.
"""

import logging
import os
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session as DBSession

from agent.creative_studio.prompt_builder import (
    build_direction_prompts,
    build_image_prompt,
    build_negative_prompt,
    build_pack_prompts,
)
from agent.creative_studio.quality_checker import (
    QUALITY_CHECK_MODEL,
    calculate_pack_scores,
    check_image_quality,
)
from database.models import BrandMemory, CreativeAsset, CreativePack
from models.creative_models import (
    DIRECTION_CONFIGS,
    AssetStatus,
    BriefStatus,
    ComplianceRisk,
    ConfirmedCopy,
    Direction,
    GenerationResult,
    ImageModel,
    PackStatus,
    PromptSpec,
    QualityCheckResult,
    QualityScores,
)
from operators.brand_memory_operator import (
    brand_memory_to_dict,
    get_active_brand_memory,
    get_brand_memory_version,
)
from operators.brief_operator import (
    can_generate_creatives,
    get_brief,
    get_confirmed_copy,
    update_brief_status,
)
from operators.errors import (
    AssetNotFoundError,
    BrandMemoryNotFoundError,
    BriefNotFoundError,
    BriefValidationError,
    PackNotFoundError,
)
from operators.storage_operator import build_asset_path, delete_generated_image, upload_bytes
from operators.usage_operator import record_usage
from utils.image_generation import generate_ad_image
from utils.request_cache import RequestCache


logger = logging.getLogger(__name__)

PACK_GENERATION_CONCURRENCY = max(1, int(os.getenv("PACK_GENERATION_CONCURRENCY", "1")))
MAX_REGENERATION_ATTEMPTS = 3

# Model names recorded for image usage billing
USAGE_IMAGE_MODELS = {
    ImageModel.OPENAI: "dall-e-3",
    ImageModel.GEMINI: "imagen-3",
}


@dataclass
class RenderedAsset:
    image_url: str
    quality: QualityCheckResult
    provider: str
    model: str
    metadata: dict[str, Any] = field(default_factory=dict)


# =============================================================================
# READ OPERATIONS
# =============================================================================


def get_pack(db: DBSession, pack_id: UUID, org_id: UUID | None = None) -> CreativePack | None:
    query = db.query(CreativePack).filter(CreativePack.pack_id == pack_id)
    if org_id is not None:
        query = query.filter(CreativePack.org_id == org_id)
    return query.first()


def list_pack_assets(db: DBSession, pack_id: UUID) -> list[CreativeAsset]:
    return (
        db.query(CreativeAsset)
        .filter(CreativeAsset.pack_id == pack_id)
        .order_by(CreativeAsset.direction, CreativeAsset.aspect_ratio)
        .all()
    )


def get_pack_with_assets(
    db: DBSession, pack_id: UUID, org_id: UUID | None = None
) -> dict[str, Any] | None:
    pack = get_pack(db, pack_id, org_id)
    if not pack:
        return None
    data = pack_to_dict(pack)
    data["assets"] = [asset_to_dict(a) for a in list_pack_assets(db, pack_id)]
    return data


def list_packs_for_brief(db: DBSession, brief_id: UUID) -> list[CreativePack]:
    return (
        db.query(CreativePack)
        .filter(CreativePack.brief_id == brief_id)
        .order_by(CreativePack.created_at.desc())
        .all()
    )


# =============================================================================
# PACK GENERATION
# =============================================================================


def generate_creative_pack(
    db: DBSession,
    brief_id: UUID,
    org_id: UUID,
    model: ImageModel | str = ImageModel.OPENAI,
    max_concurrency: int | None = None,
    cache: RequestCache | None = None,
) -> GenerationResult:
    """
    Generate a complete creative pack (9 images) for a confirmed brief.

    Never raises. Gate and setup failures return ``success=False`` without
    writing anything; a failure after generation started marks the brief
    (and the pack, if created) failed. Individual asset failures are recorded
    on the asset row and do not stop the remaining assets.
    """
    brief = get_brief(db, brief_id, org_id=org_id, cache=cache)
    if not brief:
        return GenerationResult(success=False, error=str(BriefNotFoundError(brief_id)))

    gate = can_generate_creatives(brief)
    if not gate.can_generate:
        logger.info("Pack generation blocked for brief %s: %s", brief_id, gate.reason)
        return GenerationResult(success=False, error=gate.reason)

    copy = get_confirmed_copy(brief)
    if not copy:
        return GenerationResult(success=False, error="Confirmed copy not found")

    brand_memory = get_active_brand_memory(db, org_id, cache=cache)
    if not brand_memory:
        return GenerationResult(success=False, error=str(BrandMemoryNotFoundError(org_id)))

    try:
        image_model = ImageModel(model)
    except ValueError:
        return GenerationResult(success=False, error=f"Unsupported image model: {model}")

    style_direction = brief.style_direction
    brand_snapshot = brand_memory_to_dict(brand_memory)
    pack_id: UUID | None = None

    try:
        update_brief_status(db, brief_id, BriefStatus.GENERATING)

        now = datetime.now(timezone.utc)
        pack = CreativePack(
            org_id=org_id,
            brief_id=brief_id,
            brand_memory_version=brand_snapshot["version"],
            name=f'Pack for "{brief.name}"',
            status=PackStatus.GENERATING.value,
            model_used=image_model.value,
            generation_config={"style_direction": style_direction},
            created_at=now,
            updated_at=now,
        )
        db.add(pack)
        db.commit()
        db.refresh(pack)
        pack_id = pack.pack_id
        logger.info(
            "Generating pack %s for brief %s (brand memory v%s, model=%s)",
            pack_id,
            brief_id,
            pack.brand_memory_version,
            image_model.value,
        )

        prompts = build_pack_prompts(brand_snapshot, copy, style_direction)
        assets = _generate_assets(
            db,
            pack=pack,
            prompts=prompts,
            image_model=image_model,
            brand_snapshot=brand_snapshot,
            copy=copy,
            max_concurrency=max_concurrency,
        )

        _apply_pack_scores(db, pack)
        pack.status = PackStatus.COMPLETED.value
        pack.updated_at = datetime.now(timezone.utc)
        db.commit()
        db.refresh(pack)

        update_brief_status(db, brief_id, BriefStatus.COMPLETED)
        _record_generation_usage(db, org_id, image_model, assets)

        failed = sum(1 for a in assets if a.status == AssetStatus.FAILED.value)
        logger.info(
            "Pack %s completed: %s assets, %s failed", pack_id, len(assets), failed
        )
        return GenerationResult(
            success=True,
            pack=pack_to_dict(pack),
            assets=[asset_to_dict(a) for a in assets],
        )
    except Exception as exc:
        db.rollback()
        logger.exception("Pack generation failed for brief %s", brief_id)
        _mark_generation_failed(db, brief_id, pack_id)
        return GenerationResult(success=False, error=str(exc) or type(exc).__name__)


def _mark_generation_failed(db: DBSession, brief_id: UUID, pack_id: UUID | None) -> None:
    try:
        if pack_id is not None:
            pack = db.query(CreativePack).filter(CreativePack.pack_id == pack_id).first()
            if pack:
                pack.status = PackStatus.FAILED.value
                pack.updated_at = datetime.now(timezone.utc)
                db.commit()
        update_brief_status(db, brief_id, BriefStatus.FAILED)
    except Exception:
        db.rollback()
        logger.exception("Failed to mark brief %s as failed", brief_id)


def _record_generation_usage(
    db: DBSession,
    org_id: UUID,
    image_model: ImageModel,
    assets: list[CreativeAsset],
) -> None:
    record_usage(
        db,
        org_id=org_id,
        provider=image_model.value,
        model=USAGE_IMAGE_MODELS[image_model],
        kind="image",
        unit_count=len(assets),
    )
    checked = sum(1 for a in assets if a.status != AssetStatus.FAILED.value)
    if checked:
        record_usage(
            db,
            org_id=org_id,
            provider="openai",
            model=QUALITY_CHECK_MODEL,
            kind="quality_check",
            unit_count=checked,
        )


# =============================================================================
# REGENERATION
# =============================================================================


def regenerate_direction(
    db: DBSession,
    pack_id: UUID,
    direction: Direction | str,
    org_id: UUID | None = None,
    max_concurrency: int | None = None,
) -> GenerationResult:
    """
    Replace the 3 assets of one direction and refresh the pack's scores.

    Uses the brand memory version pinned on the pack so the new assets match
    their siblings.
    """
    direction = Direction(direction)
    pack = get_pack(db, pack_id, org_id)
    if not pack:
        raise PackNotFoundError(pack_id=pack_id)

    brief, copy, brand_snapshot = _load_regeneration_context(db, pack)
    image_model = ImageModel(pack.model_used)

    old_assets = (
        db.query(CreativeAsset)
        .filter(CreativeAsset.pack_id == pack_id, CreativeAsset.direction == direction.value)
        .all()
    )
    old_urls = [a.result_url for a in old_assets if a.result_url]
    for asset in old_assets:
        db.delete(asset)
    db.commit()
    for url in old_urls:
        delete_generated_image(url)

    prompts = build_direction_prompts(brand_snapshot, copy, direction, brief.style_direction)
    assets = _generate_assets(
        db,
        pack=pack,
        prompts=prompts,
        image_model=image_model,
        brand_snapshot=brand_snapshot,
        copy=copy,
        max_concurrency=max_concurrency,
    )

    _apply_pack_scores(db, pack)
    pack.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(pack)

    _record_generation_usage(db, pack.org_id, image_model, assets)
    logger.info("Regenerated direction %s for pack %s", direction.value, pack_id)
    return GenerationResult(
        success=True,
        pack=pack_to_dict(pack),
        assets=[asset_to_dict(a) for a in assets],
    )


def regenerate_asset(
    db: DBSession,
    asset_id: UUID,
    org_id: UUID | None = None,
) -> GenerationResult:
    """Re-run generation for one asset row, up to MAX_REGENERATION_ATTEMPTS total attempts."""
    query = db.query(CreativeAsset).filter(CreativeAsset.asset_id == asset_id)
    if org_id is not None:
        query = query.filter(CreativeAsset.org_id == org_id)
    asset = query.first()
    if not asset:
        raise AssetNotFoundError(asset_id=asset_id)

    if (asset.generation_attempts or 0) >= MAX_REGENERATION_ATTEMPTS:
        raise BriefValidationError(
            f"Asset has reached the maximum of {MAX_REGENERATION_ATTEMPTS} generation attempts"
        )

    pack = get_pack(db, asset.pack_id)
    if not pack:
        raise PackNotFoundError(pack_id=asset.pack_id)

    brief, copy, brand_snapshot = _load_regeneration_context(db, pack)
    image_model = ImageModel(pack.model_used)
    direction = Direction(asset.direction)
    spec = PromptSpec(
        direction=direction,
        aspect_ratio=asset.aspect_ratio,
        prompt=build_image_prompt(
            brand_snapshot, copy, direction, asset.aspect_ratio, brief.style_direction
        ),
        negative_prompt=build_negative_prompt(brand_snapshot),
    )

    previous_url = asset.result_url
    asset.prompt_used = spec.prompt
    asset.negative_prompt = spec.negative_prompt
    asset.model_used = image_model.value
    asset.status = AssetStatus.GENERATING.value
    asset.error_message = None
    asset.generation_attempts = (asset.generation_attempts or 0) + 1
    asset.updated_at = datetime.now(timezone.utc)
    db.commit()

    try:
        rendered = render_asset(spec, pack.org_id, pack.pack_id, image_model, brand_snapshot, copy)
    except Exception as exc:
        _apply_render_failure(db, asset, exc)
    else:
        _apply_render_result(db, asset, rendered)
        if previous_url and previous_url != rendered.image_url:
            delete_generated_image(previous_url)

    _apply_pack_scores(db, pack)
    pack.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(pack)
    db.refresh(asset)

    _record_generation_usage(db, pack.org_id, image_model, [asset])
    succeeded = asset.status != AssetStatus.FAILED.value
    return GenerationResult(
        success=succeeded,
        pack=pack_to_dict(pack),
        assets=[asset_to_dict(asset)],
        error=None if succeeded else asset.error_message,
    )


def _load_regeneration_context(
    db: DBSession, pack: CreativePack
) -> tuple[Any, ConfirmedCopy, dict[str, Any]]:
    brief = get_brief(db, pack.brief_id)
    if not brief:
        raise BriefNotFoundError(brief_id=pack.brief_id)

    copy = get_confirmed_copy(brief)
    if not copy:
        raise BriefValidationError("Confirmed copy not found")

    brand_memory: BrandMemory | None = get_brand_memory_version(
        db, pack.org_id, pack.brand_memory_version
    )
    if not brand_memory:
        logger.warning(
            "Pinned brand memory v%s missing for pack %s; using active version",
            pack.brand_memory_version,
            pack.pack_id,
        )
        brand_memory = get_active_brand_memory(db, pack.org_id)
    if not brand_memory:
        raise BrandMemoryNotFoundError(org_id=pack.org_id)

    return brief, copy, brand_memory_to_dict(brand_memory)


# =============================================================================
# ASSET RENDERING
# =============================================================================


def _generate_assets(
    db: DBSession,
    pack: CreativePack,
    prompts: list[PromptSpec],
    image_model: ImageModel,
    brand_snapshot: dict[str, Any],
    copy: ConfirmedCopy,
    max_concurrency: int | None = None,
) -> list[CreativeAsset]:
    pack_id = pack.pack_id
    org_id = pack.org_id
    brief_id = pack.brief_id

    now = datetime.now(timezone.utc)
    assets: list[CreativeAsset] = []
    for spec in prompts:
        asset = CreativeAsset(
            org_id=org_id,
            pack_id=pack_id,
            brief_id=brief_id,
            direction=spec.direction.value,
            direction_name=DIRECTION_CONFIGS[spec.direction].name,
            aspect_ratio=spec.aspect_ratio.value,
            prompt_used=spec.prompt,
            negative_prompt=spec.negative_prompt,
            model_used=image_model.value,
            headline_text=copy.headline,
            cta_text=copy.cta_text,
            status=AssetStatus.GENERATING.value,
            generation_attempts=1,
            quality_issues=[],
            asset_metadata={},
            created_at=now,
            updated_at=now,
        )
        db.add(asset)
        assets.append(asset)
    db.commit()

    workers = max(1, max_concurrency or PACK_GENERATION_CONCURRENCY)
    with ThreadPoolExecutor(max_workers=min(workers, len(prompts) or 1)) as executor:
        futures: list[Future] = [
            executor.submit(
                render_asset, spec, org_id, pack_id, image_model, brand_snapshot, copy
            )
            for spec in prompts
        ]
        for spec, asset, future in zip(prompts, assets, futures):
            try:
                rendered = future.result()
            except Exception as exc:
                logger.warning(
                    "Asset %s/%s failed for pack %s: %s",
                    spec.direction.value,
                    spec.aspect_ratio.value,
                    pack_id,
                    f"{type(exc).__name__}: {exc}",
                )
                _apply_render_failure(db, asset, exc)
            else:
                _apply_render_result(db, asset, rendered)

    return assets


def render_asset(
    spec: PromptSpec,
    org_id: UUID,
    pack_id: UUID,
    image_model: ImageModel,
    brand_snapshot: dict[str, Any],
    copy: ConfirmedCopy,
) -> RenderedAsset:
    """Generate, upload and score one image. Runs in a worker thread; no DB access."""
    image = generate_ad_image(
        prompt=spec.prompt,
        aspect_ratio=spec.aspect_ratio,
        negative_prompt=spec.negative_prompt,
        model=image_model,
    )
    path = build_asset_path(
        org_id, pack_id, spec.direction.value, spec.aspect_ratio.value, image.content_type
    )
    image_url = upload_bytes(image.image_bytes, path, content_type=image.content_type)
    quality = check_image_quality(image_url, brand_snapshot, copy, spec.aspect_ratio)
    return RenderedAsset(
        image_url=image_url,
        quality=quality,
        provider=image.provider,
        model=image.model,
        metadata={"storage_path": path, "content_type": image.content_type},
    )


def _apply_render_result(db: DBSession, asset: CreativeAsset, rendered: RenderedAsset) -> None:
    quality = rendered.quality
    asset.result_url = rendered.image_url
    asset.status = (
        AssetStatus.COMPLETED.value if quality.passes_quality else AssetStatus.FLAGGED.value
    )
    asset.brand_alignment_score = quality.scores.brand_alignment
    asset.readability_score = quality.scores.readability
    asset.platform_fit_score = quality.scores.platform_fit
    asset.compliance_risk = quality.scores.compliance_risk.value
    asset.quality_issues = list(quality.issues)
    asset.error_message = None
    asset.asset_metadata = {
        **rendered.metadata,
        "provider": rendered.provider,
        "provider_model": rendered.model,
        "needs_regeneration": quality.needs_regeneration,
        "suggestions": list(quality.suggestions),
    }
    asset.updated_at = datetime.now(timezone.utc)
    db.commit()


def _apply_render_failure(db: DBSession, asset: CreativeAsset, exc: Exception) -> None:
    message = str(exc) or "Generation failed"
    asset.status = AssetStatus.FAILED.value
    asset.error_message = message
    asset.quality_issues = [message]
    asset.updated_at = datetime.now(timezone.utc)
    db.commit()


def _apply_pack_scores(db: DBSession, pack: CreativePack) -> None:
    scored = (
        db.query(CreativeAsset)
        .filter(
            CreativeAsset.pack_id == pack.pack_id,
            CreativeAsset.brand_alignment_score.isnot(None),
            CreativeAsset.status != AssetStatus.FAILED.value,
        )
        .all()
    )
    aggregate = calculate_pack_scores(
        QualityScores(
            brand_alignment=a.brand_alignment_score,
            readability=a.readability_score,
            platform_fit=a.platform_fit_score,
            compliance_risk=ComplianceRisk(a.compliance_risk or "low"),
        )
        for a in scored
    )
    pack.avg_brand_alignment = aggregate.avg_brand_alignment
    pack.avg_readability = aggregate.avg_readability
    pack.avg_platform_fit = aggregate.avg_platform_fit
    pack.compliance_status = aggregate.compliance_status.value


# =============================================================================
# SERIALIZATION
# =============================================================================


def pack_to_dict(pack: CreativePack) -> dict[str, Any]:
    return {
        "pack_id": str(pack.pack_id),
        "org_id": str(pack.org_id),
        "brief_id": str(pack.brief_id),
        "brand_memory_version": pack.brand_memory_version,
        "name": pack.name,
        "status": pack.status,
        "model_used": pack.model_used,
        "generation_config": pack.generation_config or {},
        "avg_brand_alignment": pack.avg_brand_alignment,
        "avg_readability": pack.avg_readability,
        "avg_platform_fit": pack.avg_platform_fit,
        "compliance_status": pack.compliance_status,
        "created_at": pack.created_at.isoformat() if pack.created_at else None,
        "updated_at": pack.updated_at.isoformat() if pack.updated_at else None,
    }


def asset_to_dict(asset: CreativeAsset) -> dict[str, Any]:
    return {
        "asset_id": str(asset.asset_id),
        "pack_id": str(asset.pack_id),
        "brief_id": str(asset.brief_id),
        "direction": asset.direction,
        "direction_name": asset.direction_name,
        "aspect_ratio": asset.aspect_ratio,
        "prompt_used": asset.prompt_used,
        "negative_prompt": asset.negative_prompt,
        "model_used": asset.model_used,
        "headline_text": asset.headline_text,
        "cta_text": asset.cta_text,
        "status": asset.status,
        "result_url": asset.result_url,
        "brand_alignment_score": asset.brand_alignment_score,
        "readability_score": asset.readability_score,
        "platform_fit_score": asset.platform_fit_score,
        "compliance_risk": asset.compliance_risk,
        "quality_issues": asset.quality_issues or [],
        "error_message": asset.error_message,
        "generation_attempts": asset.generation_attempts,
        "metadata": asset.asset_metadata or {},
        "created_at": asset.created_at.isoformat() if asset.created_at else None,
        "updated_at": asset.updated_at.isoformat() if asset.updated_at else None,
    }
