"""
Pack Handler - REST endpoints for creative pack generation and regeneration.

Generation is gated on confirmed copy and an active brand memory. With
``background: true`` the pack is generated by an RQ worker and the endpoint
returns 202 with the job id.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Path, Response
from sqlalchemy.orm import Session

from database.base import get_db
from database.models import CreativeBrief
from dependencies.errors import error_detail, handle_creative_studio_error
from dependencies.org import require_brief, require_org
from models.api_models import (
    GeneratePackRequest,
    GeneratePackResponse,
    PackListResponse,
    PackResponse,
    RegenerationResponse,
)
from models.creative_models import Direction
from operators.brand_memory_operator import get_active_brand_memory
from operators.brief_operator import can_generate_creatives
from operators.errors import BrandMemoryNotFoundError, ErrorKind
from operators.pack_jobs import enqueue_pack_generation
from operators.pack_operator import (
    generate_creative_pack,
    get_pack_with_assets,
    list_packs_for_brief,
    pack_to_dict,
    regenerate_asset,
    regenerate_direction,
)
from utils.request_cache import RequestCache, get_request_cache


router = APIRouter(prefix="/creative-studio", tags=["creative-studio"])
logger = logging.getLogger(__name__)


@router.post("/briefs/{brief_id}/generate", response_model=GeneratePackResponse)
def brief_generate(
    request: GeneratePackRequest,
    response: Response,
    brief: CreativeBrief = Depends(require_brief),
    org_id: UUID = Depends(require_org),
    db: Session = Depends(get_db),
    cache: RequestCache = Depends(get_request_cache),
):
    gate = can_generate_creatives(brief)
    if not gate.can_generate:
        raise HTTPException(
            status_code=400,
            detail=error_detail(gate.reason or "Cannot generate creatives", ErrorKind.VALIDATION),
        )
    if not get_active_brand_memory(db, org_id, cache=cache):
        raise HTTPException(
            status_code=400,
            detail=error_detail(
                str(BrandMemoryNotFoundError(org_id)), ErrorKind.DEPENDENCY_MISSING
            ),
        )

    if request.background:
        try:
            job_id = enqueue_pack_generation(brief.brief_id, org_id, request.model.value)
        except Exception as e:
            handle_creative_studio_error(db, e, f"enqueue pack generation for brief {brief.brief_id}")
        logger.info("Queued pack generation job %s for brief %s", job_id, brief.brief_id)
        response.status_code = 202
        return GeneratePackResponse(ok=True, job_id=job_id)

    result = generate_creative_pack(
        db, brief.brief_id, org_id, model=request.model, cache=cache
    )
    if not result.success:
        raise HTTPException(
            status_code=500,
            detail=error_detail(result.error or "Pack generation failed", ErrorKind.INTERNAL),
        )
    return GeneratePackResponse(ok=True, pack=result.pack, assets=result.assets)


@router.get("/briefs/{brief_id}/packs", response_model=PackListResponse)
async def brief_packs(
    brief: CreativeBrief = Depends(require_brief),
    db: Session = Depends(get_db),
):
    packs = list_packs_for_brief(db, brief.brief_id)
    return PackListResponse(ok=True, packs=[pack_to_dict(p) for p in packs])


@router.get("/packs/{pack_id}", response_model=PackResponse)
async def pack_get(
    pack_id: UUID = Path(...),
    org_id: UUID = Depends(require_org),
    db: Session = Depends(get_db),
):
    pack = get_pack_with_assets(db, pack_id, org_id)
    if not pack:
        raise HTTPException(
            status_code=404,
            detail=error_detail("Pack not found", ErrorKind.NOT_FOUND),
        )
    return PackResponse(ok=True, pack=pack)


@router.post(
    "/packs/{pack_id}/directions/{direction}/regenerate",
    response_model=RegenerationResponse,
)
def pack_regenerate_direction(
    pack_id: UUID = Path(...),
    direction: Direction = Path(...),
    org_id: UUID = Depends(require_org),
    db: Session = Depends(get_db),
):
    try:
        result = regenerate_direction(db, pack_id, direction, org_id=org_id)
    except Exception as e:
        handle_creative_studio_error(db, e, f"regenerate direction {direction.value} of pack {pack_id}")
    return RegenerationResponse(ok=True, pack=result.pack, assets=result.assets)


@router.post("/assets/{asset_id}/regenerate", response_model=RegenerationResponse)
def asset_regenerate(
    asset_id: UUID = Path(...),
    org_id: UUID = Depends(require_org),
    db: Session = Depends(get_db),
):
    try:
        result = regenerate_asset(db, asset_id, org_id=org_id)
    except Exception as e:
        handle_creative_studio_error(db, e, f"regenerate asset {asset_id}")
    return RegenerationResponse(
        ok=result.success,
        pack=result.pack,
        assets=result.assets,
        error=result.error,
    )
