from uuid import UUID

from fastapi import Depends, Header, HTTPException, Path
from sqlalchemy.orm import Session

from database.base import get_db
from database.models import CreativeBrief
from operators.brand_memory_operator import ensure_organization
from operators.brief_operator import get_brief
from utils.request_cache import RequestCache, get_request_cache


def require_org(
    x_org_id: UUID = Header(..., alias="X-Org-Id"),
    db: Session = Depends(get_db),
) -> UUID:
    ensure_organization(db, x_org_id)
    return x_org_id


def require_brief(
    brief_id: UUID = Path(...),
    org_id: UUID = Depends(require_org),
    db: Session = Depends(get_db),
    cache: RequestCache = Depends(get_request_cache),
) -> CreativeBrief:
    brief = get_brief(db, brief_id, org_id=org_id, cache=cache)
    if not brief:
        raise HTTPException(
            status_code=404,
            detail={"error": "Brief not found", "kind": "not_found"},
        )
    return brief
