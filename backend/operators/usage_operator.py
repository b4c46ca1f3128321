import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.orm import Session as DBSession

from database.models import UsageEvent


logger = logging.getLogger(__name__)

# USD per token
TOKEN_COSTS: dict[str, dict[str, float]] = {
    "gpt-4o": {"input": 5.00 / 1_000_000, "output": 15.00 / 1_000_000},
    "gpt-4-turbo": {"input": 10.00 / 1_000_000, "output": 30.00 / 1_000_000},
    "gpt-3.5-turbo": {"input": 0.50 / 1_000_000, "output": 1.50 / 1_000_000},
    "gemini-1.5-pro": {"input": 3.50 / 1_000_000, "output": 10.50 / 1_000_000},
    "gemini-1.5-flash": {"input": 0.35 / 1_000_000, "output": 1.05 / 1_000_000},
}

# USD per generated image
IMAGE_UNIT_COSTS: dict[str, float] = {
    "dall-e-3": 0.08,
    "imagen-3": 0.04,
}


def estimate_cost(
    model: str,
    input_tokens: int = 0,
    output_tokens: int = 0,
    unit_count: int = 0,
) -> float:
    token_cost = TOKEN_COSTS.get(model, {"input": 0.0, "output": 0.0})
    cost = input_tokens * token_cost["input"] + output_tokens * token_cost["output"]
    cost += unit_count * IMAGE_UNIT_COSTS.get(model, 0.0)
    return round(cost, 6)


def record_usage(
    db: DBSession,
    org_id: UUID,
    provider: str,
    model: str,
    kind: str,
    input_tokens: int | None = None,
    output_tokens: int | None = None,
    total_tokens: int | None = None,
    unit_count: int | None = None,
) -> UsageEvent | None:
    """Persist one usage event. Errors are logged, never raised."""
    input_tokens = input_tokens or 0
    output_tokens = output_tokens or 0
    unit_count = 1 if unit_count is None else unit_count
    cost = estimate_cost(
        model,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        unit_count=unit_count if kind == "image" else 0,
    )

    event = UsageEvent(
        org_id=org_id,
        provider=provider,
        model=model,
        kind=kind,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        total_tokens=total_tokens if total_tokens is not None else input_tokens + output_tokens,
        unit_count=unit_count,
        cost_usd=cost,
        created_at=datetime.now(timezone.utc),
    )
    try:
        db.add(event)
        db.commit()
        db.refresh(event)
    except Exception:
        db.rollback()
        logger.exception("Failed to record %s usage for org %s", kind, org_id)
        return None
    return event


def list_usage(db: DBSession, org_id: UUID, limit: int = 100) -> list[UsageEvent]:
    return (
        db.query(UsageEvent)
        .filter(UsageEvent.org_id == org_id)
        .order_by(UsageEvent.created_at.desc())
        .limit(limit)
        .all()
    )
