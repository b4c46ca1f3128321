import os
from redis import Redis
from rq import Queue

REDIS_RQ_URL = os.getenv("REDIS_RQ_URL", "redis://localhost:6379/1")
PACK_QUEUE_NAME = os.getenv("PACK_QUEUE_NAME", "creative-packs")

redis_rq = Redis.from_url(REDIS_RQ_URL)

rq_queue = Queue(PACK_QUEUE_NAME, connection=redis_rq)


def init_redis() -> None:
    redis_rq.ping()
