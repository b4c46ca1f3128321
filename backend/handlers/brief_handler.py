"""
Brief Handler - REST endpoints for the creative brief workflow.

PUT /creative-studio/briefs/{brief_id} takes an ``action``:
    update_copy   - change headline / primary text / CTA (before confirmation only)
    confirm_copy  - lock the copy; required before any generation
    update_style  - set the style direction used in image prompts

Generation endpoints live in pack_handler.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from agent.creative_studio.brief_chat import (
    generate_brief_chat_response,
    generate_copy_variations,
    generate_greeting,
)
from database.base import get_db
from database.models import CreativeBrief
from dependencies.errors import error_detail, handle_creative_studio_error
from dependencies.org import require_brief, require_org
from models.api_models import (
    BriefChatRequest,
    BriefChatResponse,
    BriefCreateRequest,
    BriefListResponse,
    BriefResponse,
    BriefUpdateRequest,
    CopyVariationsRequest,
    CopyVariationsResponse,
)
from operators.brand_memory_operator import brand_memory_to_dict, get_active_brand_memory
from operators.brief_operator import (
    add_chat_message,
    brief_to_dict,
    confirm_copy,
    create_brief,
    get_confirmed_copy,
    list_briefs,
    propose_copy,
    update_copy,
    update_style_direction,
)
from operators.errors import ErrorKind, ProviderError
from operators.usage_operator import record_usage
from utils.request_cache import RequestCache, get_request_cache


router = APIRouter(prefix="/creative-studio/briefs", tags=["creative-studio"])
logger = logging.getLogger(__name__)


@router.get("", response_model=BriefListResponse)
async def brief_list(
    org_id: UUID = Depends(require_org),
    db: Session = Depends(get_db),
):
    briefs = list_briefs(db, org_id)
    return BriefListResponse(ok=True, briefs=[brief_to_dict(b) for b in briefs])


@router.post("", response_model=BriefResponse)
async def brief_create(
    request: BriefCreateRequest,
    org_id: UUID = Depends(require_org),
    db: Session = Depends(get_db),
    cache: RequestCache = Depends(get_request_cache),
):
    try:
        brand_memory = get_active_brand_memory(db, org_id, cache=cache)
        brief = create_brief(
            db,
            org_id,
            name=request.name,
            objective=request.objective,
            target_audience=request.target_audience,
            product_service=request.product_service,
            key_message=request.key_message,
            brand_memory_id=brand_memory.brand_memory_id if brand_memory else None,
            campaign_id=UUID(request.campaign_id) if request.campaign_id else None,
            created_by=request.created_by,
        )
    except Exception as e:
        handle_creative_studio_error(db, e, f"create brief for org {org_id}")
    return BriefResponse(ok=True, brief=brief_to_dict(brief))


@router.get("/{brief_id}", response_model=BriefResponse)
async def brief_get(brief: CreativeBrief = Depends(require_brief)):
    return BriefResponse(ok=True, brief=brief_to_dict(brief))


@router.put("/{brief_id}", response_model=BriefResponse)
async def brief_update(
    request: BriefUpdateRequest,
    brief: CreativeBrief = Depends(require_brief),
    db: Session = Depends(get_db),
):
    try:
        if request.action == "update_copy":
            if request.copy_update is None:
                raise HTTPException(
                    status_code=400,
                    detail=error_detail("copy is required for update_copy", ErrorKind.VALIDATION),
                )
            updated = update_copy(db, brief.brief_id, request.copy_update)
        elif request.action == "confirm_copy":
            updated = confirm_copy(db, brief.brief_id)
        else:
            updated = update_style_direction(db, brief.brief_id, request.style_direction)
    except Exception as e:
        handle_creative_studio_error(db, e, f"{request.action} on brief {brief.brief_id}")
    return BriefResponse(ok=True, brief=brief_to_dict(updated))


@router.post("/{brief_id}/chat", response_model=BriefChatResponse)
def brief_chat(
    request: BriefChatRequest,
    brief: CreativeBrief = Depends(require_brief),
    org_id: UUID = Depends(require_org),
    db: Session = Depends(get_db),
    cache: RequestCache = Depends(get_request_cache),
):
    brand_memory = get_active_brand_memory(db, org_id, cache=cache)
    brand_snapshot = brand_memory_to_dict(brand_memory) if brand_memory else None

    if request.is_initial:
        greeting = generate_greeting(brand_snapshot)
        try:
            updated = add_chat_message(db, brief.brief_id, "assistant", greeting)
        except Exception as e:
            handle_creative_studio_error(db, e, f"greet brief {brief.brief_id}")
        return BriefChatResponse(ok=True, message=greeting, brief=brief_to_dict(updated))

    if not request.message or not request.message.strip():
        raise HTTPException(
            status_code=400,
            detail=error_detail("message is required", ErrorKind.VALIDATION),
        )

    history = list(brief.chat_history or [])
    brief_context = brief_to_dict(brief)
    try:
        add_chat_message(db, brief.brief_id, "user", request.message)
        try:
            reply = generate_brief_chat_response(
                history, request.message, brand_snapshot, brief_context
            )
        except Exception as exc:
            raise ProviderError(f"Chat provider failed: {exc}") from exc

        metadata = {"proposed_copy": reply.proposed_copy.model_dump()} if reply.proposed_copy else None
        updated = add_chat_message(db, brief.brief_id, "assistant", reply.message, metadata)
        if reply.proposed_copy and not updated.copy_confirmed:
            updated = propose_copy(db, brief.brief_id, reply.proposed_copy)
    except Exception as e:
        handle_creative_studio_error(db, e, f"chat on brief {brief.brief_id}")

    record_usage(
        db,
        org_id=org_id,
        provider="openai",
        model=reply.model,
        kind="chat",
        input_tokens=reply.input_tokens,
        output_tokens=reply.output_tokens,
    )
    return BriefChatResponse(
        ok=True,
        message=reply.message,
        proposed_copy=reply.proposed_copy,
        should_confirm=reply.should_confirm,
        brief=brief_to_dict(updated),
    )


@router.post("/{brief_id}/variations", response_model=CopyVariationsResponse)
def brief_copy_variations(
    request: CopyVariationsRequest,
    brief: CreativeBrief = Depends(require_brief),
    org_id: UUID = Depends(require_org),
    db: Session = Depends(get_db),
    cache: RequestCache = Depends(get_request_cache),
):
    copy = get_confirmed_copy(brief)
    if not copy:
        raise HTTPException(
            status_code=400,
            detail=error_detail(
                "Copy must be confirmed before generating variations", ErrorKind.VALIDATION
            ),
        )

    brand_memory = get_active_brand_memory(db, org_id, cache=cache)
    try:
        variations = generate_copy_variations(
            copy,
            brand_memory_to_dict(brand_memory) if brand_memory else None,
            request.variation_type,
        )
    except Exception as exc:
        handle_creative_studio_error(
            db, ProviderError(f"Chat provider failed: {exc}"), f"vary copy for brief {brief.brief_id}"
        )
    return CopyVariationsResponse(ok=True, variations=variations)
