"""
Brand Memory Handler - REST endpoints for versioned brand identity.

Every write creates a new version; older versions stay readable under
/brand-memory/versions/{version}.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.orm import Session

from database.base import get_db
from dependencies.errors import error_detail, handle_creative_studio_error
from dependencies.org import require_org
from models.api_models import (
    BrandKitCreateRequest,
    BrandKitListResponse,
    BrandKitResponse,
    BrandMemoryFields,
    BrandMemoryListResponse,
    BrandMemoryResponse,
    BrandMemorySyncRequest,
)
from operators.brand_memory_operator import (
    brand_kit_to_dict,
    brand_memory_to_dict,
    create_brand_kit,
    create_brand_memory,
    get_active_brand_memory,
    get_brand_memory_version,
    init_brand_memory_from_kit,
    list_brand_kits,
    list_brand_memory_versions,
    update_brand_memory,
)
from operators.errors import ErrorKind
from utils.request_cache import RequestCache, get_request_cache


router = APIRouter(tags=["brand-memory"])
logger = logging.getLogger(__name__)


@router.get("/brand-memory", response_model=BrandMemoryResponse)
async def brand_memory_get(
    org_id: UUID = Depends(require_org),
    db: Session = Depends(get_db),
    cache: RequestCache = Depends(get_request_cache),
):
    memory = get_active_brand_memory(db, org_id, cache=cache)
    return BrandMemoryResponse(
        ok=True,
        brand_memory=brand_memory_to_dict(memory) if memory else None,
    )


@router.get("/brand-memory/versions", response_model=BrandMemoryListResponse)
async def brand_memory_versions(
    org_id: UUID = Depends(require_org),
    db: Session = Depends(get_db),
):
    versions = list_brand_memory_versions(db, org_id)
    return BrandMemoryListResponse(
        ok=True,
        versions=[brand_memory_to_dict(v) for v in versions],
    )


@router.get("/brand-memory/versions/{version}", response_model=BrandMemoryResponse)
async def brand_memory_version_get(
    version: int = Path(..., ge=1),
    org_id: UUID = Depends(require_org),
    db: Session = Depends(get_db),
):
    memory = get_brand_memory_version(db, org_id, version)
    if not memory:
        raise HTTPException(
            status_code=404,
            detail=error_detail(f"Brand memory version {version} not found", ErrorKind.NOT_FOUND),
        )
    return BrandMemoryResponse(ok=True, brand_memory=brand_memory_to_dict(memory))


@router.post("/brand-memory", response_model=BrandMemoryResponse)
async def brand_memory_create(
    request: BrandMemoryFields,
    org_id: UUID = Depends(require_org),
    db: Session = Depends(get_db),
    cache: RequestCache = Depends(get_request_cache),
):
    try:
        memory = create_brand_memory(
            db, org_id, request.model_dump(mode="json", exclude_none=True), cache=cache
        )
    except Exception as e:
        handle_creative_studio_error(db, e, f"create brand memory for org {org_id}")
    return BrandMemoryResponse(ok=True, brand_memory=brand_memory_to_dict(memory))


@router.put("/brand-memory", response_model=BrandMemoryResponse)
async def brand_memory_update(
    request: BrandMemoryFields,
    org_id: UUID = Depends(require_org),
    db: Session = Depends(get_db),
    cache: RequestCache = Depends(get_request_cache),
):
    try:
        memory = update_brand_memory(
            db, org_id, request.model_dump(mode="json", exclude_none=True), cache=cache
        )
    except Exception as e:
        handle_creative_studio_error(db, e, f"update brand memory for org {org_id}")
    return BrandMemoryResponse(ok=True, brand_memory=brand_memory_to_dict(memory))


@router.post("/brand-memory/sync", response_model=BrandMemoryResponse)
async def brand_memory_sync(
    request: BrandMemorySyncRequest,
    org_id: UUID = Depends(require_org),
    db: Session = Depends(get_db),
    cache: RequestCache = Depends(get_request_cache),
):
    try:
        memory = init_brand_memory_from_kit(
            db, org_id, UUID(request.brand_kit_id), cache=cache
        )
    except Exception as e:
        handle_creative_studio_error(db, e, f"sync brand memory for org {org_id}")
    return BrandMemoryResponse(ok=True, brand_memory=brand_memory_to_dict(memory))


@router.post("/brand-kits", response_model=BrandKitResponse)
async def brand_kit_create(
    request: BrandKitCreateRequest,
    org_id: UUID = Depends(require_org),
    db: Session = Depends(get_db),
):
    try:
        kit = create_brand_kit(db, org_id, **request.model_dump())
    except Exception as e:
        handle_creative_studio_error(db, e, f"create brand kit for org {org_id}")
    return BrandKitResponse(ok=True, brand_kit=brand_kit_to_dict(kit))


@router.get("/brand-kits", response_model=BrandKitListResponse)
async def brand_kit_list(
    org_id: UUID = Depends(require_org),
    db: Session = Depends(get_db),
):
    kits = list_brand_kits(db, org_id)
    return BrandKitListResponse(ok=True, brand_kits=[brand_kit_to_dict(k) for k in kits])
