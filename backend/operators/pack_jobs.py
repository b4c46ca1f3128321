import logging
import os
from uuid import UUID

from database.base import get_db
from operators.pack_operator import generate_creative_pack
from redis_client import rq_queue

logger = logging.getLogger(__name__)

PACK_JOB_TIMEOUT_SECONDS = int(os.getenv("PACK_JOB_TIMEOUT_SECONDS", "1800"))


def run_pack_generation(brief_id: str, org_id: str, model: str = "openai") -> dict:
    """RQ entry point: generate a pack with a session owned by the job."""
    db = next(get_db())
    try:
        logger.info("Pack job started for brief %s (model=%s)", brief_id, model)
        result = generate_creative_pack(db, UUID(brief_id), UUID(org_id), model=model)
        if result.success:
            logger.info("Pack job finished for brief %s", brief_id)
        else:
            logger.warning("Pack job for brief %s did not succeed: %s", brief_id, result.error)
        return result.model_dump(mode="json")
    finally:
        db.close()


def enqueue_pack_generation(brief_id: UUID, org_id: UUID, model: str = "openai") -> str:
    job = rq_queue.enqueue(
        run_pack_generation,
        str(brief_id),
        str(org_id),
        model,
        job_timeout=PACK_JOB_TIMEOUT_SECONDS,
    )
    return job.id
