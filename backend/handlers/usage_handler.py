from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database.base import get_db
from dependencies.org import require_org
from models.api_models import UsageListResponse
from operators.usage_operator import list_usage


router = APIRouter(prefix="/usage", tags=["usage"])


@router.get("", response_model=UsageListResponse)
async def usage_list(
    limit: int = Query(default=100, ge=1, le=1000),
    org_id: UUID = Depends(require_org),
    db: Session = Depends(get_db),
):
    events = list_usage(db, org_id, limit=limit)
    return UsageListResponse(
        ok=True,
        events=[
            {
                "usage_event_id": str(e.usage_event_id),
                "provider": e.provider,
                "model": e.model,
                "kind": e.kind,
                "input_tokens": e.input_tokens,
                "output_tokens": e.output_tokens,
                "total_tokens": e.total_tokens,
                "unit_count": e.unit_count,
                "cost_usd": e.cost_usd,
                "created_at": e.created_at.isoformat() if e.created_at else None,
            }
            for e in events
        ],
    )
