import os
import logging
import sys

from rq import Queue, Worker
from rq.job import Job
from rq.worker import SimpleWorker

from redis_client import PACK_QUEUE_NAME, init_redis, redis_rq
from utils.log_config import configure_logging


logger = logging.getLogger(__name__)


class LoggingWorker(Worker):
    def handle_exception(self, job: Job, *exc_info) -> None:
        self.log.error("Job failed: %s", job.id, exc_info=exc_info)
        super().handle_exception(job, *exc_info)


class LoggingSimpleWorker(SimpleWorker):
    def handle_exception(self, job: Job, *exc_info) -> None:
        self.log.error("Job failed: %s", job.id, exc_info=exc_info)
        super().handle_exception(job, *exc_info)


def _build_worker() -> Worker:
    queues = [Queue(PACK_QUEUE_NAME, connection=redis_rq)]
    override = os.getenv("RQ_WORKER_CLASS", "").strip().lower()
    if override == "simple" or not hasattr(os, "fork"):
        return LoggingSimpleWorker(queues, connection=redis_rq)
    return LoggingWorker(queues, connection=redis_rq)


def main():
    configure_logging(extra_loggers=("redis_client.worker", "rq.worker"))
    logger.info("rq_worker_start queue=%s python_executable=%s", PACK_QUEUE_NAME, sys.executable)
    init_redis()
    worker = _build_worker()
    worker.work()


if __name__ == "__main__":
    main()
