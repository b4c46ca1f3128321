import logging
from typing import NoReturn

from fastapi import HTTPException
from sqlalchemy.orm import Session

from operators.errors import CreativeStudioError, ErrorKind


logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.DEPENDENCY_MISSING: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.PROVIDER_FAILURE: 502,
    ErrorKind.INTERNAL: 500,
}


def error_detail(message: str, kind: ErrorKind) -> dict[str, str]:
    return {"error": message, "kind": kind.value}


def handle_creative_studio_error(db: Session, e: Exception, action: str) -> NoReturn:
    """Roll back and convert an operator exception to an HTTP error."""
    db.rollback()
    if isinstance(e, HTTPException):
        raise e
    if isinstance(e, CreativeStudioError):
        if e.kind in (ErrorKind.PROVIDER_FAILURE, ErrorKind.INTERNAL):
            logger.exception("Failed to %s", action)
        else:
            logger.info("Rejected %s: %s", action, e)
        raise HTTPException(
            status_code=STATUS_BY_KIND[e.kind],
            detail=error_detail(str(e), e.kind),
        )
    if isinstance(e, ValueError):
        raise HTTPException(
            status_code=400,
            detail=error_detail(str(e), ErrorKind.VALIDATION),
        )

    logger.exception("Failed to %s", action)
    raise HTTPException(
        status_code=500,
        detail=error_detail(f"Failed to {action}", ErrorKind.INTERNAL),
    )
